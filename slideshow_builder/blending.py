"""Linear crossfade between two canvases."""

from __future__ import annotations

from typing import List

import numpy as np


def transition_ratios(frame_count: int) -> List[float]:
    """Blend ratios for a crossfade of ``frame_count`` frames, ending at 1.0."""
    if frame_count <= 0:
        return []
    if frame_count == 1:
        return [1.0]
    return [offset / (frame_count - 1) for offset in range(frame_count)]


def blend_canvases(source: np.ndarray, target: np.ndarray, ratio: float) -> np.ndarray:
    """Return ``source * (1 - ratio) + target * ratio`` rounded and clamped to uint8."""
    if source.shape != target.shape:
        raise ValueError(
            f"Cannot blend canvases of different shapes {source.shape} and {target.shape}"
        )
    if not 0.0 <= ratio <= 1.0:
        raise ValueError(f"Blend ratio must be within [0, 1], got {ratio}")

    if ratio == 0.0:
        return source.copy()
    if ratio == 1.0:
        return target.copy()

    blended = source.astype(np.float32) * (1.0 - ratio) + target.astype(np.float32) * ratio
    return np.clip(np.rint(blended), 0, 255).astype(np.uint8)


__all__ = ["blend_canvases", "transition_ratios"]
