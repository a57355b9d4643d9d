"""Crop a cutout to the bounding box of its foreground."""

from __future__ import annotations

from typing import Optional, Tuple

import cv2
import numpy as np
from PIL import Image

from .classifier import DEFAULT_FOREGROUND_THRESHOLD, foreground_pixels
from .errors import CroppingError
from .masks import Mask


def foreground_bbox(
    mask: Mask, threshold: int = DEFAULT_FOREGROUND_THRESHOLD
) -> Optional[Tuple[int, int, int, int]]:
    """
    Smallest (left, upper, right, lower) box holding every pixel above `threshold`.

    Returns None when no pixel passes. `right` and `lower` are exclusive, as
    PIL's Image.crop expects.
    """
    binary = foreground_pixels(mask, threshold).astype(np.uint8)
    points = cv2.findNonZero(binary)
    if points is None:
        return None
    x, y, w, h = cv2.boundingRect(points)
    return x, y, x + w, y + h


def crop_to_foreground(
    image: Image.Image,
    mask: Mask,
    crop_requested: bool,
    threshold: int = DEFAULT_FOREGROUND_THRESHOLD,
) -> Image.Image:
    """Crop `image` to the foreground box; pass-through when not requested or empty."""
    if not crop_requested:
        return image
    if image.size != mask.size:
        raise CroppingError(
            f"Mask size {mask.size[0]}x{mask.size[1]} does not match image size "
            f"{image.size[0]}x{image.size[1]}"
        )

    try:
        box = foreground_bbox(mask, threshold)
        if box is None:
            return image
        return image.crop(box)
    except (cv2.error, OSError, ValueError) as exc:
        raise CroppingError(f"Could not extract foreground region: {exc}") from exc
