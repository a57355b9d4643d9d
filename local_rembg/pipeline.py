"""
High-level background removal pipeline.

`remove_background` is the main entry point used by the HTTP API, the batch
worker and the local CLI. It keeps orchestration simple:
image -> mask -> classify -> composite -> (crop) -> outcome.

Every call returns exactly one outcome. A photo without a clear subject is
a success carrying the untouched original, not an error.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Union

from PIL import Image

from . import config
from .classifier import classify_foreground
from .compositor import composite_with_mask
from .cropper import crop_to_foreground
from .errors import BackgroundRemovalError, FailureReason, SegmentationError
from .imaging import decode_image
from .masks import Mask, MaskProvider

ProviderFactory = Callable[[], MaskProvider]


@dataclass(frozen=True)
class Success:
    image: Image.Image
    foreground_detected: bool


@dataclass(frozen=True)
class Failure:
    reason: FailureReason
    detail: str = ""


PipelineOutcome = Union[Success, Failure]


def _request_mask(image: Image.Image, provider_factory: ProviderFactory) -> Mask:
    # A fresh provider per call; nothing request-specific outlives this function.
    try:
        provider = provider_factory()
        mask = provider.segment(image)
    except SegmentationError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise SegmentationError(f"Mask provider failed: {exc!r}") from exc
    if not isinstance(mask, Mask):
        raise SegmentationError(f"Mask provider returned {type(mask).__name__}, expected Mask")
    return mask


def remove_background(
    image: Image.Image,
    crop_image: bool,
    provider_factory: ProviderFactory,
    settings: Optional[config.Settings] = None,
) -> PipelineOutcome:
    """
    Remove the background of `image` if it holds a significant subject.

    Args:
        image: decoded input photo; never modified.
        crop_image: crop the cutout to the subject's bounding box.
        provider_factory: builds the mask provider for this call.
        settings: thresholds; defaults to the process settings.
    """
    settings = settings or config.get_settings()
    threshold = settings.foreground_threshold

    try:
        mask = _request_mask(image, provider_factory)
    except SegmentationError as exc:
        return Failure(FailureReason.SEGMENTATION_FAILED, str(exc))

    classification = classify_foreground(
        mask, threshold=threshold, area_ratio=settings.foreground_area_ratio
    )
    if not classification.has_foreground:
        return Success(image=image, foreground_detected=False)

    try:
        result = composite_with_mask(image, mask)
        result = crop_to_foreground(result, mask, crop_image, threshold=threshold)
    except BackgroundRemovalError as exc:
        return Failure(exc.reason, str(exc))

    return Success(image=result, foreground_detected=True)


def process_image_bytes(
    image_bytes: bytes,
    crop_image: bool,
    provider_factory: ProviderFactory,
    settings: Optional[config.Settings] = None,
) -> PipelineOutcome:
    """
    Decode raw bytes and run the pipeline on them.

    Raises:
        ValueError: when the bytes are not a decodable image.
    """
    image = decode_image(image_bytes)
    return remove_background(image, crop_image, provider_factory, settings=settings)
