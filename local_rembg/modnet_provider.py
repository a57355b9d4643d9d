"""MODNet-backed mask provider."""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from PIL import Image
import torch
import torch.nn.functional as F

from . import config
from .errors import SegmentationError
from .masks import Mask
from .model_loader import get_modnet_model
from .preprocessing import PreprocessResult, preprocess_image

logger = logging.getLogger(__name__)


def _run_inference(preprocessed: PreprocessResult, model: torch.nn.Module) -> np.ndarray:
    """Run MODNet to produce an alpha matte in the original resolution."""
    with torch.no_grad():
        _, _, pred_matte = model(preprocessed.tensor, inference=True)  # (B,1,H,W)
    matte = F.interpolate(
        pred_matte,
        size=(preprocessed.orig_size[1], preprocessed.orig_size[0]),
        mode="bilinear",
        align_corners=False,
    )
    alpha = matte[0, 0].detach().cpu().numpy()
    return np.clip(alpha, 0.0, 1.0)


class MODNetMaskProvider:
    """
    Portrait matting mask provider.

    Build one per request: the instance only holds the request's quality
    choice and settings, while the model weights are shared read-only.
    """

    def __init__(self, quality_mode: Optional[str] = None, settings: Optional[config.Settings] = None):
        self.settings = settings or config.get_settings()
        self.quality_mode = quality_mode or self.settings.default_quality_mode
        self.max_long_edge = config.quality_to_long_edge(self.quality_mode, settings=self.settings)

    def segment(self, image: Image.Image) -> Mask:
        try:
            model, device = get_modnet_model(self.settings)
            preprocessed = preprocess_image(image, self.max_long_edge, device)
            alpha = _run_inference(preprocessed, model)
        except Exception as exc:  # noqa: BLE001
            logger.exception("MODNet segmentation failed: %s", exc)
            raise SegmentationError(f"MODNet segmentation failed: {exc}") from exc
        return Mask.from_probabilities(alpha)
