import json
import logging
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from slideshow_builder.config import (  # noqa: E402
    SlideshowSettings,
    _parse_background_color,
    load_config,
    resolve_durations,
    validate_settings,
)
from slideshow_builder.errors import ConfigurationError, SlideshowError  # noqa: E402

LOGGER = logging.getLogger("config-tests")


def test_defaults_match_documented_values():
    settings = SlideshowSettings()

    assert settings.canvas_size == (1920, 1080)
    assert settings.fps == 30
    assert settings.slide_seconds == 2.0
    assert settings.crossfade_seconds == 0.5
    assert settings.jpeg_quality == 95
    assert settings.video_crf == 21
    assert settings.frame_workers >= 1


def test_parse_background_color_rgb_array_to_bgr():
    assert _parse_background_color([37, 150, 190]) == (190, 150, 37)


def test_parse_background_color_hex_string():
    assert _parse_background_color("#2596BE") == (190, 150, 37)


def test_parse_background_color_explicit_bgr():
    assert _parse_background_color({"value": [190, 150, 37], "order": "bgr"}) == (190, 150, 37)


@pytest.mark.parametrize("value", [None, "nope", [1, 2], {"value": [1, 2, 3], "order": "xyz"}])
def test_parse_background_color_falls_back_to_black(value):
    assert _parse_background_color(value) == (0, 0, 0)


def test_load_config_reads_slideshow_section(tmp_path):
    config_path = tmp_path / "slideshow.json"
    config_path.write_text(
        json.dumps(
            {
                "slideshow": {
                    "canvas_width": 1280,
                    "canvas_height": 720,
                    "fps": 24,
                    "slide_seconds": 3.5,
                    "crossfade_seconds": 1,
                    "background_color": "#ffffff",
                    "output_dir": "videos",
                }
            }
        ),
        encoding="utf-8",
    )

    settings = load_config(config_path, env={})

    assert settings.canvas_size == (1280, 720)
    assert settings.fps == 24
    assert settings.slide_seconds == 3.5
    assert settings.crossfade_seconds == 1.0
    assert settings.background_color == (255, 255, 255)
    assert settings.output_dir == Path("videos")
    assert settings.scratch_dir is None


def test_load_config_falls_back_to_environment(tmp_path):
    env = {
        "SLIDESHOW_FPS": "25",
        "SLIDESHOW_SLIDE_SECONDS": "4",
        "SLIDESHOW_SCRATCH_DIR": str(tmp_path / "scratch"),
        "SLIDESHOW_FRAME_WORKERS": "not-a-number",
    }

    settings = load_config(tmp_path / "missing.json", env=env)

    assert settings.fps == 25
    assert settings.slide_seconds == 4.0
    assert settings.scratch_dir == tmp_path / "scratch"
    assert settings.frame_workers >= 1


def test_load_config_ignores_malformed_json(tmp_path, caplog):
    config_path = tmp_path / "slideshow.json"
    config_path.write_text("{not json", encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        settings = load_config(config_path, env={"SLIDESHOW_FPS": "12"})

    assert settings.fps == 12
    assert "Ignoring unreadable config file" in caplog.text


def test_resolve_durations_keeps_valid_values():
    assert resolve_durations("3", "1", LOGGER) == (3.0, 1.0)
    assert resolve_durations(2.0, 0, LOGGER) == (2.0, 0.0)


@pytest.mark.parametrize(
    "slide, crossfade, expected",
    [
        ("abc", "0.5", (2.0, 0.5)),
        ("-1", "0.5", (2.0, 0.5)),
        ("0", "0.5", (2.0, 0.5)),
        ("2", "-0.1", (2.0, 0.5)),
        ("2", "x", (2.0, 0.5)),
        ("2", "2", (2.0, 1.0)),
        ("1", "3", (1.0, 0.5)),
        ("0.4", "x", (0.4, 0.2)),
    ],
)
def test_resolve_durations_corrects_invalid_values(slide, crossfade, expected, caplog):
    with caplog.at_level(logging.WARNING, logger="config-tests"):
        assert resolve_durations(slide, crossfade, LOGGER) == expected
    assert caplog.records


def test_validate_settings_makes_canvas_even():
    settings = validate_settings(
        SlideshowSettings(canvas_width=1921, canvas_height=1081),
        LOGGER,
    )

    assert settings.canvas_size == (1920, 1080)


def test_validate_settings_replaces_out_of_range_values():
    settings = validate_settings(
        SlideshowSettings(fps=0, jpeg_quality=150, video_crf=99, frame_workers=0, canvas_width=-5),
        LOGGER,
    )

    assert settings.fps == 30
    assert settings.jpeg_quality == 95
    assert settings.video_crf == 21
    assert settings.frame_workers == 1
    assert settings.canvas_width == 1920


def test_configuration_error_is_a_value_error():
    error = ConfigurationError("bad value")

    assert isinstance(error, ValueError)
    assert isinstance(error, SlideshowError)
    assert str(error) == "[config] bad value"


def test_lossless_crf_zero_is_kept(tmp_path):
    config_path = tmp_path / "slideshow.json"
    config_path.write_text(json.dumps({"video_crf": 0, "jpeg_quality": 90}), encoding="utf-8")

    settings = validate_settings(load_config(config_path, env={}), LOGGER)

    assert settings.video_crf == 0
    assert settings.jpeg_quality == 90


def test_negative_crf_falls_back_to_default():
    settings = load_config(None, env={"SLIDESHOW_VIDEO_CRF": "-3"})

    assert settings.video_crf == 21


def test_private_parsers_are_not_exported():
    import slideshow_builder.config as config_module

    assert all(not name.startswith("_") for name in config_module.__all__)
