"""Aspect-preserving fit of an image onto a fixed-size canvas."""

from __future__ import annotations

import math
from typing import Tuple

import cv2
import numpy as np


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def fitted_size(
    source_size: Tuple[int, int],
    target_size: Tuple[int, int],
) -> Tuple[int, int]:
    """Return ``(width, height)`` of the source scaled to fit inside the target."""
    source_width, source_height = source_size
    target_width, target_height = target_size
    if source_width <= 0 or source_height <= 0:
        raise ValueError(f"Invalid source size {source_width}x{source_height}")

    scale = min(target_width / source_width, target_height / source_height)
    new_width = max(1, min(target_width, _round_half_up(source_width * scale)))
    new_height = max(1, min(target_height, _round_half_up(source_height * scale)))
    return new_width, new_height


def fit_to_canvas(
    image: np.ndarray,
    width: int,
    height: int,
    background_color: Tuple[int, int, int] = (0, 0, 0),
) -> np.ndarray:
    """Scale ``image`` to fit ``width`` x ``height`` and center it on a filled canvas."""
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid canvas size {width}x{height}")

    source_height, source_width = image.shape[:2]
    new_width, new_height = fitted_size((source_width, source_height), (width, height))

    if (new_width, new_height) == (source_width, source_height):
        resized = image
    else:
        shrinking = new_width < source_width or new_height < source_height
        interpolation = cv2.INTER_AREA if shrinking else cv2.INTER_LINEAR
        resized = cv2.resize(image, (new_width, new_height), interpolation=interpolation)

    canvas = np.empty((height, width, 3), dtype=np.uint8)
    canvas[:, :] = background_color

    offset_x = (width - new_width) // 2
    offset_y = (height - new_height) // 2
    canvas[offset_y:offset_y + new_height, offset_x:offset_x + new_width] = resized
    return canvas


__all__ = ["fit_to_canvas", "fitted_size"]
