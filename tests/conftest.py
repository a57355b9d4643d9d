from __future__ import annotations

import io
from typing import List, Optional

import numpy as np
import pytest
from PIL import Image

from local_rembg.config import Settings
from local_rembg.errors import SegmentationError
from local_rembg.masks import Mask


class FakeMaskProvider:
    """Deterministic provider returning a canned mask or raising."""

    def __init__(self, mask: Optional[Mask] = None, error: Optional[Exception] = None):
        self.mask = mask
        self.error = error
        self.calls: List[Image.Image] = []

    def segment(self, image: Image.Image) -> Mask:
        self.calls.append(image)
        if self.error is not None:
            raise self.error
        return self.mask


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def photo() -> Image.Image:
    """100x100 RGB image with a horizontal gradient so crops are checkable."""
    xs = np.tile(np.arange(100, dtype=np.uint8), (100, 1))
    rgb = np.dstack((xs, 255 - xs, np.full_like(xs, 90)))
    return Image.fromarray(rgb)


@pytest.fixture
def block_mask() -> Mask:
    """100x100 mask with a 50x50 block of 200 at (25, 25), rest 0."""
    data = np.zeros((100, 100), dtype=np.uint8)
    data[25:75, 25:75] = 200
    return Mask(data)


@pytest.fixture
def empty_mask() -> Mask:
    return Mask(np.zeros((100, 100), dtype=np.uint8))


@pytest.fixture
def provider_factory():
    """
    Build a provider factory around a canned mask or error.

    The returned factory records every provider it creates on `.created`.
    """

    def make(mask: Optional[Mask] = None, error: Optional[Exception] = None):
        created: List[FakeMaskProvider] = []

        def factory() -> FakeMaskProvider:
            provider = FakeMaskProvider(mask=mask, error=error)
            created.append(provider)
            return provider

        factory.created = created
        return factory

    return make


@pytest.fixture
def failing_factory(provider_factory):
    return provider_factory(error=SegmentationError("model unavailable"))


@pytest.fixture
def truncated_photo() -> Image.Image:
    """100x100 PNG whose header opens fine but whose pixel data is cut off."""
    noise = np.random.default_rng(0).integers(0, 256, size=(100, 100, 3), dtype=np.uint8)
    buf = io.BytesIO()
    Image.fromarray(noise).save(buf, format="PNG")
    return Image.open(io.BytesIO(buf.getvalue()[:100]))
