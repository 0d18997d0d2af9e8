import sys
from pathlib import Path

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from slideshow_builder.canvas import fit_to_canvas, fitted_size


def solid(width: int, height: int, color) -> np.ndarray:
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:, :] = color
    return image


def test_wide_source_is_letterboxed_to_exact_canvas():
    image = solid(300, 150, (50, 200, 100))

    canvas = fit_to_canvas(image, 1920, 1080)

    assert canvas.shape == (1080, 1920, 3)
    # 300x150 scales by 6.4 to 1920x960, leaving 60 rows above and below.
    assert np.all(canvas[:60] == 0)
    assert np.all(canvas[1020:] == 0)
    assert np.all(canvas[60:1020] == (50, 200, 100))


def test_tall_source_is_pillarboxed_and_centered():
    image = solid(100, 200, (255, 255, 255))

    canvas = fit_to_canvas(image, 400, 300)

    # Scale 1.5 -> 150x300, offset x = (400 - 150) // 2 = 125.
    assert canvas.shape == (300, 400, 3)
    assert np.all(canvas[:, :125] == 0)
    assert np.all(canvas[:, 275:] == 0)
    assert np.all(canvas[:, 125:275] == 255)


def test_background_fill_color_is_used_outside_image():
    image = solid(10, 10, (0, 0, 255))

    canvas = fit_to_canvas(image, 40, 20, background_color=(12, 34, 56))

    assert tuple(map(int, canvas[0, 0])) == (12, 34, 56)
    assert tuple(map(int, canvas[10, 20])) == (0, 0, 255)


def test_exact_size_source_is_copied_through():
    rng = np.random.default_rng(3)
    image = rng.integers(0, 256, size=(18, 32, 3), dtype=np.uint8)

    canvas = fit_to_canvas(image, 32, 18)

    assert np.array_equal(canvas, image)
    assert canvas is not image


@pytest.mark.parametrize(
    "source, expected",
    [
        ((300, 150), (1920, 960)),
        ((1000, 1000), (1080, 1080)),
        ((1200, 800), (1620, 1080)),
        ((3840, 2160), (1920, 1080)),
        ((1, 5000), (1, 1080)),
    ],
)
def test_fitted_size_preserves_aspect(source, expected):
    assert fitted_size(source, (1920, 1080)) == expected


def test_rejects_invalid_canvas_size():
    with pytest.raises(ValueError):
        fit_to_canvas(solid(4, 4, (0, 0, 0)), 0, 10)
