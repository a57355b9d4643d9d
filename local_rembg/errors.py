"""Failure kinds raised by the pipeline stages."""

from __future__ import annotations

from enum import Enum


class FailureReason(str, Enum):
    SEGMENTATION_FAILED = "SegmentationFailed"
    COMPOSITING_FAILED = "CompositingFailed"
    CROPPING_FAILED = "CroppingFailed"
    # Boundary only: the input could not be decoded, the pipeline never ran.
    LOAD_FAILED = "LoadFailed"


class BackgroundRemovalError(Exception):
    """Base class for stage failures; each subclass maps to one FailureReason."""

    reason: FailureReason


class SegmentationError(BackgroundRemovalError):
    """The mask provider could not produce a mask."""

    reason = FailureReason.SEGMENTATION_FAILED


class CompositingError(BackgroundRemovalError):
    """The image could not be combined with its mask."""

    reason = FailureReason.COMPOSITING_FAILED


class CroppingError(BackgroundRemovalError):
    """The foreground region could not be extracted."""

    reason = FailureReason.CROPPING_FAILED
