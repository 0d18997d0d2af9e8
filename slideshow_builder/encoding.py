"""Video encoding of a numbered frame directory with ffmpeg."""

from __future__ import annotations

import logging
import shutil
import subprocess
import uuid
from pathlib import Path
from typing import List, Optional

from slideshow_builder.cancellation import CancellationToken, EmitStatus
from slideshow_builder.errors import EncodingError


class FFmpegEncoder:
    """Encode ``frame_%06d.jpg`` sequences into H.264 MP4 files."""

    POLL_INTERVAL_SECONDS = 0.5
    TERMINATE_TIMEOUT_SECONDS = 5.0

    def __init__(
        self,
        fps: int,
        *,
        crf: int = 21,
        binary: str = "ffmpeg",
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.fps = fps
        self.crf = crf
        self.binary = binary
        self.logger = logger or logging.getLogger(__name__)

    def build_command(self, input_pattern: Path, output_path: Path) -> List[str]:
        return [
            self.binary,
            "-y",
            "-hide_banner",
            "-loglevel",
            "error",
            "-framerate",
            str(self.fps),
            "-i",
            str(input_pattern),
            "-c:v",
            "libx264",
            "-crf",
            str(self.crf),
            "-r",
            str(self.fps),
            "-pix_fmt",
            "yuv420p",
            "-movflags",
            "+faststart",
            str(output_path),
        ]

    def _stop(self, process: subprocess.Popen) -> None:
        process.terminate()
        try:
            process.communicate(timeout=self.TERMINATE_TIMEOUT_SECONDS)
        except subprocess.TimeoutExpired:
            process.kill()
            process.communicate()

    def encode(
        self,
        frames_dir: Path,
        pattern: str,
        output_path: Path,
        cancel_token: Optional[CancellationToken] = None,
    ) -> EmitStatus:
        """Run ffmpeg over ``frames_dir/pattern`` and atomically publish ``output_path``.

        Returns ``EmitStatus.STOP`` when canceled; the partial output is removed.
        """
        if shutil.which(self.binary) is None:
            raise EncodingError(
                f"{self.binary} not found on PATH. Install ffmpeg with libx264 support "
                "to encode slideshows."
            )

        token = cancel_token or CancellationToken()
        output_path = Path(output_path)
        temp_output = output_path.with_name(f".tmp_{uuid.uuid4().hex}_{output_path.name}")
        cmd = self.build_command(Path(frames_dir) / pattern, temp_output)
        self.logger.info("Encoding video with ffmpeg: %s", output_path)
        self.logger.debug("ffmpeg command: %s", " ".join(cmd))

        try:
            try:
                process = subprocess.Popen(
                    cmd,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                )
            except OSError as exc:
                raise EncodingError(f"Failed to start {self.binary}: {exc}") from exc

            while True:
                if token.is_canceled:
                    self.logger.warning("Canceling ffmpeg encoding of %s", output_path)
                    self._stop(process)
                    return EmitStatus.STOP
                try:
                    _, stderr_bytes = process.communicate(timeout=self.POLL_INTERVAL_SECONDS)
                    break
                except subprocess.TimeoutExpired:
                    continue

            if process.returncode != 0:
                message = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
                raise EncodingError(
                    f"ffmpeg exited with code {process.returncode}: {message or 'no output'}"
                )

            try:
                temp_output.replace(output_path)
            except OSError as exc:
                raise EncodingError(f"Failed to move encoded video to {output_path}: {exc}") from exc
        finally:
            if temp_output.exists():
                try:
                    temp_output.unlink()
                except OSError as exc:
                    self.logger.warning("Failed to remove partial video %s: %s", temp_output, exc)

        return EmitStatus.CONTINUE


__all__ = ["FFmpegEncoder"]
