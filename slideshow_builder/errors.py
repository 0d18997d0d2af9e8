"""Exception types raised by the slideshow pipeline."""

from __future__ import annotations

from typing import Optional


class SlideshowError(Exception):
    """Base class for pipeline failures, tagged with the stage that failed."""

    stage = "pipeline"

    def __init__(self, message: str, *, stage: Optional[str] = None) -> None:
        super().__init__(message)
        if stage is not None:
            self.stage = stage

    def __str__(self) -> str:
        return f"[{self.stage}] {super().__str__()}"


class RecoverableDecodeError(SlideshowError):
    """A single source image could not be decoded or processed."""

    stage = "decode"


class ConfigurationError(SlideshowError, ValueError):
    """A configuration value is invalid and has to be corrected."""

    stage = "config"


class SinkWriteError(SlideshowError):
    """A frame could not be persisted; the run cannot continue."""

    stage = "sink"


class EncodingError(SlideshowError):
    """The external video encoder failed or is unavailable."""

    stage = "encode"


__all__ = [
    "ConfigurationError",
    "EncodingError",
    "RecoverableDecodeError",
    "SinkWriteError",
    "SlideshowError",
]
