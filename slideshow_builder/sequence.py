"""Frame sequence synthesis: slides, crossfades and frame index assignment."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import cv2
import numpy as np

from slideshow_builder.blending import blend_canvases, transition_ratios
from slideshow_builder.cancellation import CancellationToken, EmitStatus
from slideshow_builder.canvas import fit_to_canvas
from slideshow_builder.color import normalize_colors
from slideshow_builder.errors import RecoverableDecodeError
from slideshow_builder.models import FrameTiming, SequenceResult, SlideSpan, SlideState
from slideshow_builder.progress import ProgressReporter
from slideshow_builder.sinks import FrameSink
from slideshow_builder.sources import ArrayImageSource, ImageSource


@dataclass
class _ActiveSlide:
    """The most recent successfully prepared slide and its reserved index range."""

    label: str
    canvas: np.ndarray
    span: SlideSpan
    body_written: bool = False


class SequenceSynthesizer:
    """Turn ordered image sources into a gapless, index-ordered frame sequence."""

    def __init__(
        self,
        timing: FrameTiming,
        canvas_size: Tuple[int, int],
        *,
        background_color: Tuple[int, int, int] = (0, 0, 0),
        workers: int = 1,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.timing = timing
        self.canvas_width, self.canvas_height = canvas_size
        self.background_color = background_color
        self.workers = max(1, workers)
        self.logger = logger or logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # Per-image preparation
    # ------------------------------------------------------------------

    def prepare_canvas(self, source: ImageSource) -> np.ndarray:
        """Load, color balance and fit one source; raise ``RecoverableDecodeError`` on failure."""
        self._log_state(source.label, SlideState.LOADING)
        image = source.load()
        try:
            balanced = normalize_colors(image)
            self._log_state(source.label, SlideState.NORMALIZED)
            canvas = fit_to_canvas(
                balanced,
                self.canvas_width,
                self.canvas_height,
                self.background_color,
            )
        except (ValueError, cv2.error) as exc:
            raise RecoverableDecodeError(f"Could not process {source.label}: {exc}") from exc
        self._log_state(source.label, SlideState.FITTED)
        return canvas

    def _try_prepare(self, source: ImageSource) -> Optional[np.ndarray]:
        try:
            return self.prepare_canvas(source)
        except RecoverableDecodeError as exc:
            self.logger.warning("Skipping image %s: %s", source.label, exc)
            return None

    # ------------------------------------------------------------------
    # Emission
    # ------------------------------------------------------------------

    def _emit_copies(
        self,
        canvas: np.ndarray,
        indices: range,
        sink: FrameSink,
        token: CancellationToken,
    ) -> EmitStatus:
        if not indices:
            return EmitStatus.CONTINUE
        # Every copy is byte-identical, so the canvas is encoded once.
        data = sink.encode(canvas)
        for index in indices:
            if token.is_canceled:
                return EmitStatus.STOP
            sink.write_bytes(index, data)
        return EmitStatus.CONTINUE

    @staticmethod
    def _render_transition_frame(
        source: np.ndarray,
        target: np.ndarray,
        ratio: float,
        sink: FrameSink,
        token: CancellationToken,
    ) -> Optional[bytes]:
        if token.is_canceled:
            return None
        blended = blend_canvases(source, target, ratio)
        if token.is_canceled:
            return None
        return sink.encode(blended)

    def _emit_transition(
        self,
        slide: _ActiveSlide,
        target: np.ndarray,
        executor: ThreadPoolExecutor,
        sink: FrameSink,
        token: CancellationToken,
    ) -> EmitStatus:
        indices = slide.span.tail_range
        ratios = transition_ratios(len(indices))
        futures: Dict[Future, int] = {
            executor.submit(
                self._render_transition_frame,
                slide.canvas,
                target,
                ratio,
                sink,
                token,
            ): offset
            for offset, ratio in enumerate(ratios)
        }

        encoded: List[Optional[bytes]] = [None] * len(ratios)
        for future in as_completed(futures):
            encoded[futures[future]] = future.result()

        if token.is_canceled or any(data is None for data in encoded):
            return EmitStatus.STOP

        for index, data in zip(indices, encoded):
            if token.is_canceled:
                return EmitStatus.STOP
            sink.write_bytes(index, data)
        return EmitStatus.CONTINUE

    def _log_state(self, label: str, state: SlideState) -> None:
        self.logger.debug("%s: %s", label, state.value)

    # ------------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------------

    def synthesize(
        self,
        sources: Sequence[ImageSource],
        sink: FrameSink,
        cancel_token: Optional[CancellationToken] = None,
    ) -> SequenceResult:
        """Emit every frame of the slideshow to ``sink`` in index order.

        The next image is prepared on the worker pool while the current
        slide's plain frames are written. Whether a slide is the last one is
        only known once a later image has loaded, so each slide's index range
        is reserved up front and its tail becomes either the crossfade or
        further copies of the canvas.
        """
        token = cancel_token or CancellationToken()
        total = len(sources)
        skipped: List[str] = []
        slide_count = 0
        next_start = 0
        current: Optional[_ActiveSlide] = None
        progress = ProgressReporter(self.logger, "Image processing", total)

        def stopped() -> SequenceResult:
            self.logger.warning("Frame generation canceled after %s frames", sink.frame_count)
            return SequenceResult(
                status=EmitStatus.STOP,
                frame_count=sink.frame_count,
                slide_count=slide_count,
                skipped=tuple(skipped),
            )

        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            for position, source in enumerate(sources):
                if token.is_canceled:
                    return stopped()

                self.logger.info("Loading image %s/%s: %s", position + 1, total, source.label)
                pending = executor.submit(self._try_prepare, source)

                if current is not None and not current.body_written:
                    self._log_state(current.label, SlideState.EMITTING_NORMAL)
                    status = self._emit_copies(
                        current.canvas,
                        current.span.body_range,
                        sink,
                        token,
                    )
                    if status is EmitStatus.STOP:
                        pending.cancel()
                        return stopped()
                    current.body_written = True

                canvas = pending.result()
                progress.advance()
                if canvas is None:
                    skipped.append(source.label)
                    continue

                if current is not None:
                    self._log_state(current.label, SlideState.EMITTING_TRANSITION)
                    status = self._emit_transition(current, canvas, executor, sink, token)
                    if status is EmitStatus.STOP:
                        return stopped()
                    self._log_state(current.label, SlideState.DONE)
                    next_start = current.span.end

                current = _ActiveSlide(
                    label=source.label,
                    canvas=canvas,
                    span=self.timing.span_for(slide_count, next_start),
                )
                slide_count += 1

        if current is not None:
            self.logger.info("Generating frames for last image")
            span = current.span
            self._log_state(current.label, SlideState.EMITTING_NORMAL)
            indices = span.tail_range if current.body_written else range(span.start, span.end)
            if self._emit_copies(current.canvas, indices, sink, token) is EmitStatus.STOP:
                return stopped()
            self._log_state(current.label, SlideState.DONE)
            next_start = span.end

        if token.is_canceled:
            return stopped()

        self.logger.info(
            "Generated %s frames with crossfades from %s images (%s skipped)",
            next_start,
            slide_count,
            len(skipped),
        )
        return SequenceResult(
            status=EmitStatus.CONTINUE,
            frame_count=next_start,
            slide_count=slide_count,
            skipped=tuple(skipped),
        )


def synthesize_sequence(
    images: Iterable[Union[ImageSource, np.ndarray]],
    sink: FrameSink,
    timing: FrameTiming,
    *,
    canvas_size: Tuple[int, int] = (1920, 1080),
    background_color: Tuple[int, int, int] = (0, 0, 0),
    workers: int = 1,
    cancel_token: Optional[CancellationToken] = None,
    logger: Optional[logging.Logger] = None,
) -> SequenceResult:
    """Synthesize the frame sequence for ``images`` into ``sink``.

    Plain arrays are accepted alongside image sources and are labelled by
    their position.
    """
    sources: List[ImageSource] = [
        ArrayImageSource(item, label=f"image {position}")
        if isinstance(item, np.ndarray)
        else item
        for position, item in enumerate(images)
    ]
    synthesizer = SequenceSynthesizer(
        timing,
        canvas_size,
        background_color=background_color,
        workers=workers,
        logger=logger,
    )
    return synthesizer.synthesize(sources, sink, cancel_token)


__all__ = ["SequenceSynthesizer", "synthesize_sequence"]
