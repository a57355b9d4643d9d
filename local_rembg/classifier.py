"""Decide whether a mask holds a real subject or just noise."""

from __future__ import annotations

import numpy as np

from .masks import ClassificationResult, Mask

DEFAULT_FOREGROUND_THRESHOLD = 50
DEFAULT_FOREGROUND_AREA_RATIO = 0.1


def foreground_pixels(mask: Mask, threshold: int = DEFAULT_FOREGROUND_THRESHOLD) -> np.ndarray:
    """Boolean map of pixels whose confidence is strictly above `threshold`."""
    return mask.data > threshold


def classify_foreground(
    mask: Mask,
    threshold: int = DEFAULT_FOREGROUND_THRESHOLD,
    area_ratio: float = DEFAULT_FOREGROUND_AREA_RATIO,
) -> ClassificationResult:
    """
    Count foreground pixels and gate on the share of the frame they cover.

    A subject is present only when strictly more than `area_ratio` of all
    pixels exceed `threshold`. Low-confidence or empty masks (no person in
    the shot) fall below the gate and leave the photo untouched.
    """
    count = int(np.count_nonzero(foreground_pixels(mask, threshold)))
    total = mask.width * mask.height
    return ClassificationResult(
        has_foreground=count > area_ratio * total,
        foreground_pixel_count=count,
    )
