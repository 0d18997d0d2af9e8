import logging
import sys
from pathlib import Path

import cv2
import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from slideshow_builder.errors import SinkWriteError  # noqa: E402
from slideshow_builder.sinks import DirectoryFrameSink, FrameSink  # noqa: E402


def make_sink(directory: Path) -> DirectoryFrameSink:
    return DirectoryFrameSink(directory, logger=logging.getLogger("sink-tests"))


def test_frames_are_named_with_six_digit_indices(tmp_path):
    sink = make_sink(tmp_path / "frames")
    sink.open()
    canvas = np.full((4, 6, 3), 128, dtype=np.uint8)

    sink.write_canvas(0, canvas)
    sink.write_canvas(12, canvas)

    assert sink.frame_path(12).name == "frame_000012.jpg"
    assert sorted(path.name for path in sink.directory.iterdir()) == [
        "frame_000000.jpg",
        "frame_000012.jpg",
    ]
    assert sink.ffmpeg_pattern == "frame_%06d.jpg"
    decoded = cv2.imread(str(sink.frame_path(0)))
    assert decoded.shape == (4, 6, 3)


def test_out_of_order_writes_are_accepted(tmp_path):
    sink = make_sink(tmp_path / "frames")
    sink.open()
    canvas = np.zeros((2, 2, 3), dtype=np.uint8)

    for index in (3, 0, 2, 1):
        sink.write_canvas(index, canvas)

    assert sink.indices() == [0, 1, 2, 3]
    assert sink.verify_contiguous() == 4


def test_rewriting_an_index_overwrites_the_frame(tmp_path):
    sink = make_sink(tmp_path / "frames")
    sink.open()

    sink.write_bytes(0, b"first")
    sink.write_bytes(0, b"second")

    assert sink.frame_path(0).read_bytes() == b"second"
    assert sink.frame_count == 1
    assert not list(sink.directory.glob("*.tmp"))


def test_gaps_are_reported(tmp_path):
    sink = make_sink(tmp_path / "frames")
    sink.open()
    sink.write_bytes(0, b"a")
    sink.write_bytes(2, b"c")

    with pytest.raises(SinkWriteError, match="missing 1 indices starting at 1"):
        sink.verify_contiguous()


def test_negative_index_is_rejected(tmp_path):
    sink = make_sink(tmp_path / "frames")
    sink.open()

    with pytest.raises(SinkWriteError):
        sink.write_bytes(-1, b"x")


def test_open_removes_stale_frames_from_previous_runs(tmp_path):
    frames_dir = tmp_path / "frames"
    frames_dir.mkdir()
    (frames_dir / "frame_000099.jpg").write_bytes(b"old")
    (frames_dir / ".frame_000001.abc.tmp").write_bytes(b"partial")
    (frames_dir / "keep.txt").write_text("mine")

    sink = make_sink(frames_dir)
    sink.open()

    assert sorted(path.name for path in frames_dir.iterdir()) == ["keep.txt"]


def test_cleanup_removes_created_directory(tmp_path):
    frames_dir = tmp_path / "scratch" / "frames"
    sink = make_sink(frames_dir)
    sink.open()
    sink.write_bytes(0, b"a")

    sink.cleanup()

    assert not frames_dir.exists()
    assert sink.frame_count == 0


def test_cleanup_keeps_existing_directory_and_foreign_files(tmp_path):
    frames_dir = tmp_path / "frames"
    frames_dir.mkdir()
    (frames_dir / "notes.txt").write_text("keep me")
    sink = make_sink(frames_dir)
    sink.open()
    sink.write_bytes(0, b"a")
    sink.write_bytes(1, b"b")

    sink.cleanup()

    assert frames_dir.exists()
    assert [path.name for path in frames_dir.iterdir()] == ["notes.txt"]


def test_write_failure_raises_sink_error(tmp_path):
    frames_dir = tmp_path / "frames"
    sink = make_sink(frames_dir)
    sink.open()
    frames_dir.rmdir()

    with pytest.raises(SinkWriteError) as excinfo:
        sink.write_bytes(0, b"a")

    assert excinfo.value.stage == "sink"
    assert sink.frame_count == 0


def test_incomplete_sink_cannot_be_constructed():
    class EncodeOnlySink(FrameSink):
        def encode(self, canvas):
            return canvas.tobytes()

    with pytest.raises(TypeError):
        EncodeOnlySink()
