"""
Crossfading slideshow builder: turns an ordered set of still images into a
numbered frame sequence and encodes it with ffmpeg.
"""

from .app import SlideshowBuilder
from .blending import blend_canvases, transition_ratios
from .cancellation import CancellationToken, EmitStatus
from .canvas import fit_to_canvas
from .color import normalize_colors
from .config import SlideshowSettings, load_config
from .errors import (
    ConfigurationError,
    EncodingError,
    RecoverableDecodeError,
    SinkWriteError,
    SlideshowError,
)
from .models import FrameTiming, SequenceResult, SlideshowOutcome, SlideshowResult
from .sequence import SequenceSynthesizer, synthesize_sequence
from .sinks import DirectoryFrameSink, FrameSink

__all__ = [
    "CancellationToken",
    "ConfigurationError",
    "DirectoryFrameSink",
    "EmitStatus",
    "EncodingError",
    "FrameSink",
    "FrameTiming",
    "RecoverableDecodeError",
    "SequenceResult",
    "SequenceSynthesizer",
    "SinkWriteError",
    "SlideshowBuilder",
    "SlideshowError",
    "SlideshowOutcome",
    "SlideshowResult",
    "SlideshowSettings",
    "blend_canvases",
    "fit_to_canvas",
    "load_config",
    "normalize_colors",
    "synthesize_sequence",
    "transition_ratios",
]
