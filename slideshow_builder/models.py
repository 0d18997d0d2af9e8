"""Data models used across the slideshow builder."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

from slideshow_builder.cancellation import EmitStatus


def frames_for_duration(seconds: float, fps: int) -> int:
    """Convert a duration into a frame count, rounding halves up."""
    if seconds <= 0 or fps <= 0:
        return 0
    return int(math.floor(seconds * fps + 0.5))


class SlideState(Enum):
    """Forward-only lifecycle of a single input position."""

    LOADING = "loading"
    NORMALIZED = "normalized"
    FITTED = "fitted"
    EMITTING_NORMAL = "emitting_normal"
    EMITTING_TRANSITION = "emitting_transition"
    DONE = "done"


@dataclass(frozen=True)
class SlideSpan:
    """Frame index range owned by one slide.

    ``body`` frames are plain copies of the slide canvas. ``tail`` frames are
    either the outgoing crossfade or, for the last slide, further copies of
    the canvas.
    """

    position: int
    start: int
    body_frames: int
    tail_frames: int

    @property
    def end(self) -> int:
        return self.start + self.body_frames + self.tail_frames

    @property
    def body_range(self) -> range:
        return range(self.start, self.start + self.body_frames)

    @property
    def tail_range(self) -> range:
        return range(self.start + self.body_frames, self.end)


@dataclass(frozen=True)
class FrameTiming:
    """Per-slide frame counts with the crossfade clamped below the slide length."""

    frames_per_slide: int
    crossfade_frames: int

    def __post_init__(self) -> None:
        per_slide = max(1, int(self.frames_per_slide))
        crossfade = max(0, min(int(self.crossfade_frames), per_slide - 1))
        object.__setattr__(self, "frames_per_slide", per_slide)
        object.__setattr__(self, "crossfade_frames", crossfade)

    @classmethod
    def from_durations(
        cls,
        slide_seconds: float,
        crossfade_seconds: float,
        fps: int,
    ) -> "FrameTiming":
        return cls(
            frames_per_slide=frames_for_duration(slide_seconds, fps),
            crossfade_frames=frames_for_duration(crossfade_seconds, fps),
        )

    @property
    def body_frames(self) -> int:
        return self.frames_per_slide - self.crossfade_frames

    def span_for(self, position: int, start: int) -> SlideSpan:
        return SlideSpan(
            position=position,
            start=start,
            body_frames=self.body_frames,
            tail_frames=self.crossfade_frames,
        )

    def total_frames(self, slide_count: int) -> int:
        # The crossfade sits inside the outgoing slide, so every slide is the same length.
        return max(0, slide_count) * self.frames_per_slide


@dataclass
class SequenceResult:
    """Summary returned by the sequence synthesizer."""

    status: EmitStatus
    frame_count: int
    slide_count: int
    skipped: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def completed(self) -> bool:
        return self.status is EmitStatus.CONTINUE


class SlideshowOutcome(Enum):
    COMPLETED = "completed"
    CANCELED = "canceled"
    NO_IMAGES = "no_images"


@dataclass
class SlideshowResult:
    """Summary of a slideshow run as seen by callers."""

    outcome: SlideshowOutcome
    output_path: Optional[Path]
    frame_count: int = 0
    slide_count: int = 0
    skipped: Tuple[str, ...] = field(default_factory=tuple)


__all__ = [
    "FrameTiming",
    "SequenceResult",
    "SlideSpan",
    "SlideState",
    "SlideshowOutcome",
    "SlideshowResult",
    "frames_for_duration",
]
