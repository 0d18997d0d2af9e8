"""Slideshow facade: discover images, synthesize frames, encode, clean up."""

from __future__ import annotations

import logging
import tempfile
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from slideshow_builder.cancellation import CancellationToken, EmitStatus
from slideshow_builder.config import SlideshowSettings, validate_settings
from slideshow_builder.encoding import FFmpegEncoder
from slideshow_builder.errors import SinkWriteError, SlideshowError
from slideshow_builder.models import (
    FrameTiming,
    SequenceResult,
    SlideshowOutcome,
    SlideshowResult,
)
from slideshow_builder.sequence import SequenceSynthesizer
from slideshow_builder.sinks import DirectoryFrameSink
from slideshow_builder.sources import ImageSource, discover_images


class SlideshowBuilder:
    """Build a crossfading MP4 slideshow from a directory of images."""

    OUTPUT_TEMPLATE = "new_slide_show-{date}.mp4"
    SCRATCH_PREFIX = "slideshow_frames_"

    def __init__(
        self,
        settings: Optional[SlideshowSettings] = None,
        *,
        logger: Optional[logging.Logger] = None,
        encoder: Optional[FFmpegEncoder] = None,
    ) -> None:
        self.logger = logger or logging.getLogger("slideshow_builder")
        self.settings = validate_settings(settings or SlideshowSettings(), self.logger)
        self.timing = FrameTiming.from_durations(
            self.settings.slide_seconds,
            self.settings.crossfade_seconds,
            self.settings.fps,
        )
        self.encoder = encoder or FFmpegEncoder(
            self.settings.fps,
            crf=self.settings.video_crf,
            logger=self.logger,
        )

    def default_output_path(self, input_dir: Path, today: Optional[datetime] = None) -> Path:
        date_str = (today or datetime.now()).strftime("%Y-%m-%d")
        target_dir = self.settings.output_dir or input_dir
        return Path(target_dir) / self.OUTPUT_TEMPLATE.format(date=date_str)

    def _create_sink(self) -> DirectoryFrameSink:
        scratch_dir = self.settings.scratch_dir
        if scratch_dir is None:
            scratch_dir = Path(tempfile.gettempdir()) / f"{self.SCRATCH_PREFIX}{uuid.uuid4().hex[:12]}"
        return DirectoryFrameSink(
            scratch_dir,
            jpeg_quality=self.settings.jpeg_quality,
            logger=self.logger,
        )

    def _build_synthesizer(self) -> SequenceSynthesizer:
        return SequenceSynthesizer(
            self.timing,
            self.settings.canvas_size,
            background_color=self.settings.background_color,
            workers=self.settings.frame_workers,
            logger=self.logger,
        )

    def _canceled(self, sequence: Optional[SequenceResult]) -> SlideshowResult:
        self.logger.warning("Slideshow canceled; discarding generated frames")
        return SlideshowResult(
            outcome=SlideshowOutcome.CANCELED,
            output_path=None,
            frame_count=sequence.frame_count if sequence else 0,
            slide_count=sequence.slide_count if sequence else 0,
            skipped=sequence.skipped if sequence else (),
        )

    def create_slideshow(
        self,
        input_dir: Path | str,
        output_path: Optional[Path | str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> SlideshowResult:
        """Create a slideshow from every supported image in ``input_dir``."""
        input_path = Path(input_dir)
        self.logger.info("Processing images from: %s", input_path)

        sources = discover_images(input_path)
        if not sources:
            self.logger.warning("No supported image files found in the directory: %s", input_path)
            return SlideshowResult(outcome=SlideshowOutcome.NO_IMAGES, output_path=None)

        self.logger.info("Found %s image(s).", len(sources))
        target = Path(output_path) if output_path else self.default_output_path(input_path)
        return self.render(sources, target, cancel_token)

    def render(
        self,
        sources: Sequence[ImageSource],
        output_path: Path,
        cancel_token: Optional[CancellationToken] = None,
    ) -> SlideshowResult:
        """Synthesize frames for ``sources`` into scratch storage and encode them.

        Scratch frames are removed on every exit path. Failures propagate as
        `SlideshowError` subclasses naming the failing stage.
        """
        token = cancel_token or CancellationToken()
        sink = self._create_sink()
        self.logger.info(
            "Settings: %sx%s at %s fps, slide %ss (%s frames), crossfade %ss (%s frames)",
            self.settings.canvas_width,
            self.settings.canvas_height,
            self.settings.fps,
            self.settings.slide_seconds,
            self.timing.frames_per_slide,
            self.settings.crossfade_seconds,
            self.timing.crossfade_frames,
        )
        self.logger.info(
            "Expecting up to %s frames for %s images",
            self.timing.total_frames(len(sources)),
            len(sources),
        )

        sequence: Optional[SequenceResult] = None
        try:
            sink.open()
            sequence = self._build_synthesizer().synthesize(sources, sink, token)
            if not sequence.completed:
                return self._canceled(sequence)

            if sequence.frame_count == 0:
                self.logger.warning("None of the %s images could be processed", len(sources))
                return SlideshowResult(
                    outcome=SlideshowOutcome.NO_IMAGES,
                    output_path=None,
                    skipped=sequence.skipped,
                )

            persisted = sink.verify_contiguous()
            if persisted != sequence.frame_count:
                raise SinkWriteError(
                    f"Expected {sequence.frame_count} frames but {persisted} were persisted"
                )

            output_path = Path(output_path)
            try:
                output_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise SlideshowError(
                    f"Could not create output directory {output_path.parent}: {exc}",
                    stage="output",
                ) from exc

            status = self.encoder.encode(sink.directory, sink.ffmpeg_pattern, output_path, token)
            if status is EmitStatus.STOP:
                return self._canceled(sequence)
        except SlideshowError as exc:
            self.logger.error("Slideshow generation failed: %s", exc)
            raise
        finally:
            sink.cleanup()

        self.logger.info("Slideshow created successfully: %s", output_path)
        return SlideshowResult(
            outcome=SlideshowOutcome.COMPLETED,
            output_path=output_path,
            frame_count=sequence.frame_count,
            slide_count=sequence.slide_count,
            skipped=sequence.skipped,
        )


__all__ = ["SlideshowBuilder"]
