"""Image sources feeding the slideshow pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Protocol

import cv2
import numpy as np

from slideshow_builder.errors import RecoverableDecodeError

SUPPORTED_EXTENSIONS = (".jpg", ".jpeg", ".png", ".bmp", ".gif")


class ImageSource(Protocol):
    """Anything that can produce an 8-bit BGR image on demand."""

    label: str

    def load(self) -> np.ndarray:
        ...


def as_bgr(image: np.ndarray, label: str) -> np.ndarray:
    """Coerce grayscale and BGRA arrays into 3-channel uint8 BGR."""
    if image.dtype != np.uint8:
        raise RecoverableDecodeError(f"{label}: expected 8-bit pixels, got {image.dtype}")
    if image.size == 0:
        raise RecoverableDecodeError(f"{label}: image is empty")
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    if image.ndim == 3 and image.shape[2] == 1:
        return cv2.cvtColor(image[:, :, 0], cv2.COLOR_GRAY2BGR)
    if image.ndim == 3 and image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)
    if image.ndim == 3 and image.shape[2] == 3:
        return image
    raise RecoverableDecodeError(f"{label}: unsupported image shape {image.shape}")


@dataclass
class FileImageSource:
    """Image decoded from disk with OpenCV."""

    path: Path
    label: str = field(init=False)

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        self.label = self.path.name

    def load(self) -> np.ndarray:
        if self.path.suffix.lower() == ".gif":
            return self._load_first_gif_frame()

        try:
            data = self.path.read_bytes()
        except OSError as exc:
            raise RecoverableDecodeError(f"Could not read {self.path}: {exc}") from exc

        try:
            image = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
        except cv2.error as exc:
            raise RecoverableDecodeError(f"Could not decode {self.path}: {exc}") from exc
        if image is None:
            raise RecoverableDecodeError(f"Could not decode {self.path}")
        return as_bgr(image, self.label)

    def _load_first_gif_frame(self) -> np.ndarray:
        # imdecode has no GIF support in most OpenCV builds; the video reader does.
        capture = cv2.VideoCapture(str(self.path))
        try:
            success, frame = capture.read()
        finally:
            capture.release()
        if not success or frame is None:
            raise RecoverableDecodeError(f"Could not decode {self.path}")
        return as_bgr(frame, self.label)


@dataclass
class ArrayImageSource:
    """Wrap an in-memory array as an image source."""

    image: np.ndarray
    label: str = "<array>"

    def load(self) -> np.ndarray:
        return as_bgr(np.asarray(self.image), self.label)


def discover_images(directory: Path | str) -> List[FileImageSource]:
    """List supported images in ``directory`` sorted by file name."""
    root = Path(directory)
    files = [
        path
        for path in root.iterdir()
        if path.is_file() and path.suffix.lower() in SUPPORTED_EXTENSIONS
    ]
    return [FileImageSource(path) for path in sorted(files, key=lambda item: item.name)]


__all__ = [
    "ArrayImageSource",
    "FileImageSource",
    "ImageSource",
    "SUPPORTED_EXTENSIONS",
    "as_bgr",
    "discover_images",
]
