"""Gray-world color balance."""

from __future__ import annotations

import cv2
import numpy as np


def channel_means(image: np.ndarray) -> np.ndarray:
    """Return the per-channel mean of a ``(h, w, 3)`` image as float64."""
    return image.reshape(-1, image.shape[-1]).mean(axis=0, dtype=np.float64)


def normalize_colors(image: np.ndarray) -> np.ndarray:
    """Rebalance the channels of ``image`` toward a neutral gray average.

    Each channel is scaled by ``gray / channel_mean`` where ``gray`` is the
    mean of the three channel means. Channels whose mean is zero are left
    unchanged. Results are rounded to the nearest integer and clamped to
    ``[0, 255]``; the input array is never modified.

    The scaling is applied through a 256-entry lookup table per channel, so
    the only full-size allocation is the uint8 result.
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected a 3-channel image, got shape {image.shape}")
    if image.shape[0] == 0 or image.shape[1] == 0:
        raise ValueError("Cannot normalize an empty image")
    if image.dtype != np.uint8:
        raise ValueError(f"Expected 8-bit pixels, got {image.dtype}")

    means = channel_means(image)
    gray = means.mean()
    scales = np.ones(3, dtype=np.float64)
    nonzero = means > 0
    scales[nonzero] = gray / means[nonzero]

    levels = np.arange(256, dtype=np.float64)[:, None] * scales
    table = np.clip(np.rint(levels), 0, 255).astype(np.uint8)
    return cv2.LUT(np.ascontiguousarray(image), table.reshape(256, 1, 3))


__all__ = ["channel_means", "normalize_colors"]
