"""
FastAPI layer exposing local background removal.

Endpoints:
 - GET /health
 - POST /remove-background
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, HttpUrl

from . import config
from .imaging import encode_png, load_image, resolve_under_root
from .modnet_provider import MODNetMaskProvider
from .pipeline import Failure, ProviderFactory, remove_background

settings = config.get_settings()
logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

app = FastAPI(title="Local Background Removal Service", version="0.1.0")


class RemoveBackgroundRequest(BaseModel):
    cropImage: bool
    imagePath: Optional[str] = None
    imageBase64: Optional[str] = None
    imageUrl: Optional[HttpUrl] = None
    qualityMode: Optional[str] = None


class RemoveBackgroundResponse(BaseModel):
    status: int
    message: str
    imageBytes: str  # base64 PNG
    foregroundDetected: bool


def build_provider_factory(quality_mode: Optional[str]) -> ProviderFactory:
    """Return a factory creating a fresh MODNet provider for each pipeline call."""
    quality_to_use = quality_mode or settings.default_quality_mode
    config.quality_to_long_edge(quality_to_use, settings=settings)
    return lambda: MODNetMaskProvider(quality_mode=quality_to_use, settings=settings)


def _decode_base64(value: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise HTTPException(status_code=400, detail="Invalid arguments") from exc


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/remove-background", response_model=RemoveBackgroundResponse)
def remove_background_endpoint(body: RemoveBackgroundRequest):
    sources = [body.imagePath, body.imageBase64, body.imageUrl]
    if sum(s is not None for s in sources) != 1:
        raise HTTPException(status_code=400, detail="Invalid arguments")

    try:
        provider_factory = build_provider_factory(body.qualityMode)
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve)) from ve

    image_path = None
    if body.imagePath is not None:
        if settings.image_root is None:
            raise HTTPException(status_code=400, detail="Invalid arguments")
        try:
            image_path = resolve_under_root(body.imagePath, settings.image_root)
        except ValueError as exc:
            logger.warning("Rejected image path %s: %s", body.imagePath, exc)
            raise HTTPException(status_code=400, detail="Invalid arguments") from exc

    image_bytes = _decode_base64(body.imageBase64) if body.imageBase64 is not None else None
    try:
        image = load_image(
            image_path=image_path,
            image_bytes=image_bytes,
            image_url=str(body.imageUrl) if body.imageUrl is not None else None,
            timeout_seconds=settings.request_timeout_seconds,
        )
    except ValueError as exc:
        logger.warning("Failed to load image: %s", exc)
        raise HTTPException(status_code=400, detail="Unable to load image") from exc

    outcome = remove_background(image, body.cropImage, provider_factory, settings=settings)
    if isinstance(outcome, Failure):
        logger.error("Background removal failed: %s %s", outcome.reason.value, outcome.detail)
        raise HTTPException(
            status_code=500,
            detail=f"Unable to process image: {outcome.reason.value}",
        )

    try:
        png_bytes = encode_png(outcome.image)
    except (OSError, ValueError) as exc:
        logger.exception("Failed to encode result: %s", exc)
        raise HTTPException(status_code=500, detail="Unable to convert image to bytes") from exc

    return RemoveBackgroundResponse(
        status=1,
        message="Success",
        imageBytes=base64.b64encode(png_bytes).decode("ascii"),
        foregroundDetected=outcome.foreground_detected,
    )
