"""
Local background removal package.

Turns a per-pixel foreground mask into a decision (subject present or not)
and, when a subject is present, into a transparent and optionally cropped
cutout. The MODNet mask provider and the FastAPI application live in their
own modules so the core stays free of model and transport concerns.
"""

from .masks import ClassificationResult, Mask, MaskProvider
from .pipeline import Failure, FailureReason, PipelineOutcome, Success, remove_background

__all__ = [
    "ClassificationResult",
    "Failure",
    "FailureReason",
    "Mask",
    "MaskProvider",
    "PipelineOutcome",
    "Success",
    "remove_background",
]
