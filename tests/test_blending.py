import sys
from pathlib import Path

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from slideshow_builder.blending import blend_canvases, transition_ratios


def solid(color, size=(6, 8)) -> np.ndarray:
    canvas = np.zeros((size[0], size[1], 3), dtype=np.uint8)
    canvas[:, :] = color
    return canvas


def unique_pixels(canvas: np.ndarray) -> set:
    return {tuple(map(int, pixel)) for pixel in canvas.reshape(-1, 3)}


def test_ratio_zero_reproduces_source():
    source = solid((255, 0, 0))
    target = solid((0, 0, 255))

    assert np.array_equal(blend_canvases(source, target, 0.0), source)


def test_ratio_one_reproduces_target():
    source = solid((255, 0, 0))
    target = solid((0, 0, 255))

    assert np.array_equal(blend_canvases(source, target, 1.0), target)


def test_midpoint_of_red_and_blue():
    blended = blend_canvases(solid((255, 0, 0)), solid((0, 0, 255)), 0.5)

    assert unique_pixels(blended) == {(128, 0, 128)}


def test_blend_is_directional():
    source = solid((200, 200, 200))
    target = solid((0, 0, 0))

    assert unique_pixels(blend_canvases(source, target, 0.25)) == {(150, 150, 150)}
    assert unique_pixels(blend_canvases(target, source, 0.25)) == {(50, 50, 50)}


def test_blend_does_not_mutate_inputs():
    source = solid((10, 20, 30))
    target = solid((40, 50, 60))
    source_copy, target_copy = source.copy(), target.copy()

    blend_canvases(source, target, 0.3)

    assert np.array_equal(source, source_copy)
    assert np.array_equal(target, target_copy)


def test_rejects_mismatched_shapes():
    with pytest.raises(ValueError):
        blend_canvases(solid((0, 0, 0), (4, 4)), solid((0, 0, 0), (4, 5)), 0.5)


@pytest.mark.parametrize("ratio", [-0.1, 1.5])
def test_rejects_out_of_range_ratio(ratio):
    with pytest.raises(ValueError):
        blend_canvases(solid((0, 0, 0)), solid((1, 1, 1)), ratio)


def test_transition_ratios_end_at_one():
    assert transition_ratios(0) == []
    assert transition_ratios(1) == [1.0]
    assert transition_ratios(5) == [0.0, 0.25, 0.5, 0.75, 1.0]


def test_transition_ratios_are_strictly_increasing():
    ratios = transition_ratios(15)

    assert all(later > earlier for earlier, later in zip(ratios, ratios[1:]))
    assert ratios[-1] == 1.0
