"""Frame sinks: where numbered frames are persisted for the encoder."""

from __future__ import annotations

import logging
import shutil
import threading
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Set

import cv2
import numpy as np

from slideshow_builder.errors import SinkWriteError


class FrameSink(ABC):
    """Accept ``(index, frame)`` pairs in any order and keep them addressable by index."""

    def __init__(self) -> None:
        self._indices: Set[int] = set()
        self._lock = threading.Lock()

    def open(self) -> None:
        """Prepare the sink for a new run."""

    @abstractmethod
    def encode(self, canvas: np.ndarray) -> bytes:
        """Serialize one canvas into the bytes persisted for a frame."""

    @abstractmethod
    def _store(self, index: int, data: bytes) -> None:
        """Persist ``data`` as frame ``index``, replacing any earlier write."""

    def write_bytes(self, index: int, data: bytes) -> None:
        if index < 0:
            raise SinkWriteError(f"Frame index must be non-negative, got {index}")
        self._store(index, data)
        with self._lock:
            self._indices.add(index)

    def write_canvas(self, index: int, canvas: np.ndarray) -> None:
        self.write_bytes(index, self.encode(canvas))

    @property
    def frame_count(self) -> int:
        with self._lock:
            return len(self._indices)

    def indices(self) -> List[int]:
        with self._lock:
            return sorted(self._indices)

    def verify_contiguous(self) -> int:
        """Ensure the stored indices are exactly ``[0, n)`` and return ``n``."""
        indices = self.indices()
        total = len(indices)
        if indices and indices[-1] != total - 1:
            missing = sorted(set(range(indices[-1] + 1)) - set(indices))
            raise SinkWriteError(
                f"Frame sequence has gaps; missing {len(missing)} indices starting at {missing[0]}"
            )
        return total

    def cleanup(self) -> None:
        with self._lock:
            self._indices.clear()


class DirectoryFrameSink(FrameSink):
    """Write frames as ``frame_000000.jpg`` files into a scratch directory."""

    FILENAME_PREFIX = "frame_"
    INDEX_WIDTH = 6

    def __init__(
        self,
        directory: Path | str,
        *,
        jpeg_quality: int = 95,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__()
        self.directory = Path(directory)
        self.jpeg_quality = jpeg_quality
        self.extension = ".jpg"
        self.logger = logger or logging.getLogger(__name__)
        self._created_directory = False

    @property
    def ffmpeg_pattern(self) -> str:
        return f"{self.FILENAME_PREFIX}%0{self.INDEX_WIDTH}d{self.extension}"

    def frame_path(self, index: int) -> Path:
        return self.directory / f"{self.FILENAME_PREFIX}{index:0{self.INDEX_WIDTH}d}{self.extension}"

    def _stale_files(self) -> List[Path]:
        if not self.directory.exists():
            return []
        return [
            *self.directory.glob(f"{self.FILENAME_PREFIX}*{self.extension}"),
            *self.directory.glob(f".{self.FILENAME_PREFIX}*.tmp"),
        ]

    def open(self) -> None:
        try:
            if not self.directory.exists():
                self.directory.mkdir(parents=True)
                self._created_directory = True
            stale = self._stale_files()
            for path in stale:
                path.unlink()
        except OSError as exc:
            raise SinkWriteError(f"Could not prepare frame directory {self.directory}: {exc}") from exc
        if stale:
            self.logger.info("Removed %s stale frames from %s", len(stale), self.directory)

    def encode(self, canvas: np.ndarray) -> bytes:
        try:
            success, buffer = cv2.imencode(
                self.extension,
                canvas,
                [cv2.IMWRITE_JPEG_QUALITY, self.jpeg_quality],
            )
        except cv2.error as exc:
            raise SinkWriteError(f"Failed to encode frame: {exc}") from exc
        if not success:
            raise SinkWriteError("Failed to encode frame")
        return buffer.tobytes()

    def _store(self, index: int, data: bytes) -> None:
        target = self.frame_path(index)
        temp_path = self.directory / f".{target.stem}.{uuid.uuid4().hex}.tmp"
        try:
            temp_path.write_bytes(data)
            temp_path.replace(target)
        except OSError as exc:
            try:
                temp_path.unlink()
            except OSError:
                pass
            raise SinkWriteError(f"Failed to write frame {target}: {exc}") from exc

    def cleanup(self) -> None:
        super().cleanup()
        if not self.directory.exists():
            return
        try:
            if self._created_directory:
                shutil.rmtree(self.directory)
            else:
                for path in self._stale_files():
                    path.unlink()
        except OSError as exc:
            self.logger.warning(
                "Failed to clean up frame directory %s: %s",
                self.directory,
                exc,
            )


__all__ = ["DirectoryFrameSink", "FrameSink"]
