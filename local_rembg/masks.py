"""Mask value type and the mask-provider contract."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Tuple

import numpy as np
from PIL import Image


@dataclass(frozen=True, eq=False)
class Mask:
    """
    Single-channel 8-bit foreground confidence aligned 1:1 with an image.

    0 means background, 255 means foreground. The buffer is copied on
    construction and frozen, so a Mask can be shared between stages freely.
    """

    data: np.ndarray

    def __post_init__(self) -> None:
        array = np.asarray(self.data)
        if array.ndim != 2:
            raise ValueError(f"Mask must be 2-D, got shape {array.shape}")
        if array.dtype != np.uint8:
            raise ValueError(f"Mask must be uint8, got {array.dtype}")
        array = array.copy()
        array.setflags(write=False)
        object.__setattr__(self, "data", array)

    @classmethod
    def from_probabilities(cls, alpha: np.ndarray) -> "Mask":
        """Build a mask from a float matte in [0, 1]."""
        alpha = np.nan_to_num(np.asarray(alpha, dtype=np.float32), nan=0.0)
        return cls(np.clip(alpha * 255.0, 0, 255).astype(np.uint8))

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height), matching PIL's Image.size ordering."""
        return self.width, self.height


@dataclass(frozen=True)
class ClassificationResult:
    has_foreground: bool
    foreground_pixel_count: int


class MaskProvider(Protocol):
    """
    Anything that can segment a photograph into a foreground mask.

    Implementations return a Mask with the same width/height as the image or
    raise SegmentationError. Instances are created per request.
    """

    def segment(self, image: Image.Image) -> Mask:
        ...
