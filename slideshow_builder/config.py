"""Configuration dataclasses and loading helpers for the slideshow builder."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

from slideshow_builder.errors import ConfigurationError

DEFAULT_CANVAS_WIDTH = 1920
DEFAULT_CANVAS_HEIGHT = 1080
DEFAULT_FPS = 30
DEFAULT_SLIDE_SECONDS = 2.0
DEFAULT_CROSSFADE_SECONDS = 0.5
DEFAULT_JPEG_QUALITY = 95
DEFAULT_VIDEO_CRF = 21

ENV_PREFIX = "SLIDESHOW_"

LOGGER = logging.getLogger("slideshow_builder.config")


def _default_frame_workers() -> int:
    """Default worker count for CPU-bound blending and image preparation."""
    return max(1, min(4, os.cpu_count() or 1))


def _parse_positive_int(value: Any, default: int) -> int:
    """Parse a positive integer with fallback to default."""
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def _parse_non_negative_int(value: Any, default: int) -> int:
    """Parse an integer that may be zero, with fallback to default."""
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed >= 0 else default


def _parse_float(value: Any, default: float) -> float:
    """Parse a floating point number with fallback to default."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _parse_optional_path(value: Any) -> Optional[Path]:
    if value is None:
        return None
    text = str(value).strip()
    return Path(text) if text else None


def _parse_background_color(value: Any) -> Tuple[int, int, int]:
    """Parse a background color into a BGR tuple; black when unparseable.

    Accepts ``[r, g, b]`` lists, ``"#rrggbb"`` strings and mappings of the
    form ``{"value": [...], "order": "rgb" | "bgr"}``.
    """
    default = (0, 0, 0)

    def _clamp_triplet(triplet: Any) -> Optional[Tuple[int, int, int]]:
        if not isinstance(triplet, (list, tuple)) or len(triplet) != 3:
            return None
        try:
            return tuple(max(0, min(255, int(channel))) for channel in triplet)
        except (TypeError, ValueError):
            return None

    if isinstance(value, Mapping):
        if isinstance(value.get("hex"), str):
            return _parse_background_color(value["hex"])
        channels = _clamp_triplet(value.get("value"))
        if channels is None:
            return default
        order = str(value.get("order") or "rgb").lower()
        if order == "bgr":
            return channels
        if order == "rgb":
            return (channels[2], channels[1], channels[0])
        return default

    if isinstance(value, (list, tuple)):
        channels = _clamp_triplet(value)
        if channels is None:
            return default
        return (channels[2], channels[1], channels[0])

    if isinstance(value, str):
        hex_value = value.strip().lstrip("#")
        if len(hex_value) == 6:
            try:
                r = int(hex_value[0:2], 16)
                g = int(hex_value[2:4], 16)
                b = int(hex_value[4:6], 16)
            except ValueError:
                return default
            return (b, g, r)

    return default


@dataclass(frozen=True)
class SlideshowSettings:
    """Settings for a single slideshow run."""

    canvas_width: int = DEFAULT_CANVAS_WIDTH
    canvas_height: int = DEFAULT_CANVAS_HEIGHT
    fps: int = DEFAULT_FPS
    slide_seconds: float = DEFAULT_SLIDE_SECONDS
    crossfade_seconds: float = DEFAULT_CROSSFADE_SECONDS
    background_color: Tuple[int, int, int] = (0, 0, 0)
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    video_crf: int = DEFAULT_VIDEO_CRF
    frame_workers: int = field(default_factory=_default_frame_workers)
    output_dir: Optional[Path] = None
    scratch_dir: Optional[Path] = None
    log_file: Optional[Path] = None

    @property
    def canvas_size(self) -> Tuple[int, int]:
        return (self.canvas_width, self.canvas_height)


def _check_slide_seconds(value: Any) -> float:
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid slide duration '{value}'") from None
    if seconds <= 0:
        raise ConfigurationError(f"Invalid slide duration '{value}'")
    return seconds


def _check_crossfade_seconds(value: Any) -> float:
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid crossfade duration '{value}'") from None
    if seconds < 0:
        raise ConfigurationError(f"Invalid crossfade duration '{value}'")
    return seconds


def resolve_durations(
    slide_seconds: Any,
    crossfade_seconds: Any,
    logger: Optional[logging.Logger] = None,
) -> Tuple[float, float]:
    """Validate slide and crossfade durations, correcting invalid values.

    Invalid slide durations fall back to 2.0 seconds and invalid crossfades to
    0.5 seconds. A crossfade that is not shorter than the slide is reduced to
    half of the slide duration. Every correction is logged as a warning.
    """
    log = logger or LOGGER

    try:
        slide = _check_slide_seconds(slide_seconds)
    except ConfigurationError as exc:
        log.warning(
            "%s. Using default value of %.1f seconds.",
            exc.args[0],
            DEFAULT_SLIDE_SECONDS,
        )
        slide = DEFAULT_SLIDE_SECONDS

    try:
        crossfade = _check_crossfade_seconds(crossfade_seconds)
    except ConfigurationError as exc:
        log.warning(
            "%s. Using default value of %.1f seconds.",
            exc.args[0],
            DEFAULT_CROSSFADE_SECONDS,
        )
        crossfade = DEFAULT_CROSSFADE_SECONDS

    if crossfade >= slide:
        log.warning(
            "Crossfade duration %ss cannot be greater than or equal to slide duration %ss. "
            "Adjusting crossfade to half of slide duration.",
            crossfade,
            slide,
        )
        crossfade = slide / 2

    return slide, crossfade


def _even_dimension(value: int, name: str, logger: logging.Logger) -> int:
    if value % 2 == 0:
        return value
    corrected = max(2, value - 1)
    logger.warning(
        "Canvas %s %s is odd; using %s so the video can be encoded as yuv420p",
        name,
        value,
        corrected,
    )
    return corrected


def validate_settings(
    settings: SlideshowSettings,
    logger: Optional[logging.Logger] = None,
) -> SlideshowSettings:
    """Return a copy of ``settings`` with every invalid value corrected."""
    log = logger or LOGGER
    slide, crossfade = resolve_durations(
        settings.slide_seconds,
        settings.crossfade_seconds,
        log,
    )

    width = _parse_positive_int(settings.canvas_width, DEFAULT_CANVAS_WIDTH)
    height = _parse_positive_int(settings.canvas_height, DEFAULT_CANVAS_HEIGHT)
    if (width, height) != (settings.canvas_width, settings.canvas_height):
        log.warning(
            "Invalid canvas size %sx%s. Using %sx%s.",
            settings.canvas_width,
            settings.canvas_height,
            width,
            height,
        )
    width = _even_dimension(width, "width", log)
    height = _even_dimension(height, "height", log)

    fps = _parse_positive_int(settings.fps, DEFAULT_FPS)
    if fps != settings.fps:
        log.warning("Invalid frame rate '%s'. Using %s.", settings.fps, fps)

    quality = settings.jpeg_quality
    if not isinstance(quality, int) or not 1 <= quality <= 100:
        log.warning(
            "Invalid JPEG quality '%s'. Using %s.",
            quality,
            DEFAULT_JPEG_QUALITY,
        )
        quality = DEFAULT_JPEG_QUALITY

    crf = settings.video_crf
    if not isinstance(crf, int) or not 0 <= crf <= 51:
        log.warning("Invalid video CRF '%s'. Using %s.", crf, DEFAULT_VIDEO_CRF)
        crf = DEFAULT_VIDEO_CRF

    return replace(
        settings,
        canvas_width=width,
        canvas_height=height,
        fps=fps,
        slide_seconds=slide,
        crossfade_seconds=crossfade,
        jpeg_quality=quality,
        video_crf=crf,
        frame_workers=max(1, settings.frame_workers),
    )


def _parse_settings(data: Mapping[str, Any]) -> SlideshowSettings:
    defaults = SlideshowSettings()
    return SlideshowSettings(
        canvas_width=_parse_positive_int(data.get("canvas_width"), defaults.canvas_width),
        canvas_height=_parse_positive_int(data.get("canvas_height"), defaults.canvas_height),
        fps=_parse_positive_int(data.get("fps"), defaults.fps),
        slide_seconds=_parse_float(data.get("slide_seconds"), defaults.slide_seconds),
        crossfade_seconds=_parse_float(
            data.get("crossfade_seconds"),
            defaults.crossfade_seconds,
        ),
        background_color=_parse_background_color(data.get("background_color")),
        jpeg_quality=_parse_positive_int(data.get("jpeg_quality"), defaults.jpeg_quality),
        video_crf=_parse_non_negative_int(data.get("video_crf"), defaults.video_crf),
        frame_workers=_parse_positive_int(
            data.get("frame_workers"),
            _default_frame_workers(),
        ),
        output_dir=_parse_optional_path(data.get("output_dir")),
        scratch_dir=_parse_optional_path(data.get("scratch_dir")),
        log_file=_parse_optional_path(data.get("log_file")),
    )


def _settings_from_env(env: Mapping[str, str]) -> SlideshowSettings:
    """Build settings from ``SLIDESHOW_*`` environment variables."""
    keys = (
        "canvas_width",
        "canvas_height",
        "fps",
        "slide_seconds",
        "crossfade_seconds",
        "background_color",
        "jpeg_quality",
        "video_crf",
        "frame_workers",
        "output_dir",
        "scratch_dir",
        "log_file",
    )
    data = {
        key: env[f"{ENV_PREFIX}{key.upper()}"]
        for key in keys
        if f"{ENV_PREFIX}{key.upper()}" in env
    }
    return _parse_settings(data)


def load_config(
    config_path: Path | str | None = None,
    env: Mapping[str, str] | None = None,
) -> SlideshowSettings:
    """Load settings from a JSON file, or from the environment when it is absent."""
    source_env = os.environ if env is None else env

    if config_path is not None:
        path = Path(config_path)
        if path.exists():
            try:
                with path.open("r", encoding="utf-8") as handle:
                    data = json.load(handle)
            except (OSError, ValueError) as exc:
                LOGGER.warning("Ignoring unreadable config file %s: %s", path, exc)
                return _settings_from_env(source_env)
            if not isinstance(data, Mapping):
                LOGGER.warning("Ignoring config file %s: expected a JSON object", path)
                data = {}
            section = data.get("slideshow", data)
            return _parse_settings(section if isinstance(section, Mapping) else {})

    return _settings_from_env(source_env)


__all__ = [
    "DEFAULT_CANVAS_HEIGHT",
    "DEFAULT_CANVAS_WIDTH",
    "DEFAULT_CROSSFADE_SECONDS",
    "DEFAULT_FPS",
    "DEFAULT_SLIDE_SECONDS",
    "SlideshowSettings",
    "load_config",
    "resolve_durations",
    "validate_settings",
]
