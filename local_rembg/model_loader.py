"""
Model loading utilities for the MODNet mask provider.

The loader:
 - loads the TorchScript checkpoint from `MODNET_MODEL_PATH`,
 - keeps one read-only instance per process and model path,
 - exposes `get_modnet_model()` for mask providers.

Only the weights are shared. Providers built on top of them are created per
request and keep their own tensors.
"""

from __future__ import annotations

import logging
from pathlib import Path
from threading import Lock
from typing import Dict, Optional, Tuple

import torch

from . import config

logger = logging.getLogger(__name__)

_MODELS: Dict[Path, torch.nn.Module] = {}
# Prefer CUDA -> Apple MPS -> CPU to support both GPU servers and local macOS dev.
if torch.cuda.is_available():
    _DEVICE = torch.device("cuda")
elif torch.backends.mps.is_available():  # type: ignore[attr-defined]
    _DEVICE = torch.device("mps")
else:
    _DEVICE = torch.device("cpu")
_LOCK = Lock()


def get_device() -> torch.device:
    """Return the inference device (prefers CUDA when available)."""
    return _DEVICE


def _load_torchscript(model_path: Path) -> torch.nn.Module:
    model = torch.jit.load(str(model_path), map_location=_DEVICE)
    model.eval()
    return model


def get_modnet_model(
    settings: Optional[config.Settings] = None,
) -> Tuple[torch.nn.Module, torch.device]:
    """
    Return the MODNet model + device pair for the configured checkpoint.

    Raises:
        FileNotFoundError: when MODNET_MODEL_PATH is unset or missing.
    """
    settings = settings or config.get_settings()
    model_path = settings.modnet_model_path
    if model_path is None:
        raise FileNotFoundError("MODNET_MODEL_PATH is not configured")

    model = _MODELS.get(model_path)
    if model is not None:
        return model, _DEVICE

    with _LOCK:
        if model_path not in _MODELS:
            if not model_path.exists():
                raise FileNotFoundError(f"MODNet checkpoint not found at {model_path}")
            logger.info("Loading TorchScript MODNet model from %s", model_path)
            _MODELS[model_path] = _load_torchscript(model_path)
            logger.info("MODNet loaded on device: %s", _DEVICE)
    return _MODELS[model_path], _DEVICE
