"""Alpha compositing of a photograph with its foreground mask."""

from __future__ import annotations

import numpy as np
from PIL import Image

from .errors import CompositingError
from .masks import Mask


def _rgb_pixels(image: Image.Image) -> np.ndarray:
    try:
        rgb_np = np.asarray(image.convert("RGB"), dtype=np.uint8)
    except (OSError, ValueError) as exc:
        raise CompositingError(f"Could not decode image into RGB pixels: {exc}") from exc
    if rgb_np.ndim != 3 or rgb_np.shape[2] != 3:
        raise CompositingError(f"Unexpected pixel buffer shape {rgb_np.shape}")
    return rgb_np


def composite_with_mask(image: Image.Image, mask: Mask) -> Image.Image:
    """
    Return a new RGBA image whose alpha is the mask and whose color is the input's.

    Any alpha the input already carries is replaced. Raises CompositingError
    when the sizes differ or the image has no decodable pixel data.
    """
    if image.size != mask.size:
        raise CompositingError(
            f"Mask size {mask.size[0]}x{mask.size[1]} does not match image size "
            f"{image.size[0]}x{image.size[1]}"
        )

    rgb_np = _rgb_pixels(image)
    rgba = np.dstack((rgb_np, mask.data))
    return Image.fromarray(rgba)
