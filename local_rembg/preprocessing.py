"""
Preprocessing for the MODNet mask provider.

The preprocessing normalizes images into MODNet's expected input space and
resizes by the longest edge for a speed/quality balance.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Tuple

import numpy as np
from PIL import Image
import torch


@dataclass
class PreprocessResult:
    tensor: torch.Tensor
    orig_size: Tuple[int, int]  # (width, height)
    resized_size: Tuple[int, int]


def _compute_resize_dims(width: int, height: int, max_long_edge: int) -> Tuple[int, int]:
    """Preserve aspect ratio while constraining the longest edge."""
    if max_long_edge > 0 and max(width, height) > max_long_edge:
        scale = max_long_edge / max(width, height)
        width = int(width * scale)
        height = int(height * scale)
    # MODNet down/up sampling chains need dimensions divisible by 32.
    new_w = max(32, math.ceil(width / 32) * 32)
    new_h = max(32, math.ceil(height / 32) * 32)
    return new_w, new_h


def preprocess_image(image: Image.Image, max_long_edge: int, device: torch.device) -> PreprocessResult:
    """
    Resize longest edge to `max_long_edge` and normalize to MODNet's input space.

    MODNet expects RGB inputs normalized to [-1, 1]. Resizing on the long edge
    keeps people large enough for hair detail while keeping inference fast.
    """
    rgb = image.convert("RGB")
    orig_w, orig_h = rgb.size
    new_w, new_h = _compute_resize_dims(orig_w, orig_h, max_long_edge)

    if (new_w, new_h) != (orig_w, orig_h):
        rgb = rgb.resize((new_w, new_h), Image.BILINEAR)

    im_np = np.asarray(rgb).astype("float32") / 255.0
    im_np = (im_np - 0.5) / 0.5
    im_np = np.transpose(im_np, (2, 0, 1))  # HWC -> CHW

    tensor = torch.from_numpy(im_np).unsqueeze(0).to(device)

    return PreprocessResult(
        tensor=tensor,
        orig_size=(orig_w, orig_h),
        resized_size=(new_w, new_h),
    )
