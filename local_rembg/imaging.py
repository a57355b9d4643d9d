"""
Image loading and encoding at the service boundary.

Images can arrive as a local file path, raw encoded bytes, or a URL. All of
them end up as a fully decoded PIL image; results leave as PNG bytes.
"""

from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Optional, Union

import requests
from PIL import Image


def decode_image(image_bytes: bytes) -> Image.Image:
    """Decode encoded image bytes, forcing the pixel data to load."""
    try:
        image = Image.open(BytesIO(image_bytes))
        image.load()
    except Exception as exc:  # noqa: BLE001
        raise ValueError("Invalid image data") from exc
    return image


def resolve_under_root(image_path: Union[str, Path], root: Union[str, Path]) -> Path:
    """
    Resolve `image_path` against `root`, rejecting anything that escapes it.

    Symlinks and `..` segments are resolved before the check.
    """
    root = Path(root).resolve()
    path = (root / image_path).resolve()
    if not path.is_relative_to(root):
        raise ValueError(f"Image path is outside {root}")
    return path


def load_image_from_path(image_path: Union[str, Path]) -> Image.Image:
    path = Path(image_path)
    if not path.is_file():
        raise ValueError(f"Image file not found: {path}")
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise ValueError(f"Could not read image file: {path}") from exc
    return decode_image(data)


def download_image(url: str, timeout_seconds: int = 30) -> bytes:
    resp = requests.get(url, timeout=(5, timeout_seconds))
    resp.raise_for_status()
    return resp.content


def load_image(
    image_path: Optional[Union[str, Path]] = None,
    image_bytes: Optional[bytes] = None,
    image_url: Optional[str] = None,
    timeout_seconds: int = 30,
) -> Image.Image:
    """
    Load an image from exactly one source.

    Raises:
        ValueError: when zero or several sources are given, or the data
            cannot be decoded.
    """
    sources = [s for s in (image_path, image_bytes, image_url) if s is not None]
    if len(sources) != 1:
        raise ValueError("Exactly one of image_path, image_bytes or image_url is required")

    if image_path is not None:
        return load_image_from_path(image_path)
    if image_bytes is not None:
        return decode_image(image_bytes)
    try:
        data = download_image(image_url, timeout_seconds=timeout_seconds)
    except requests.RequestException as exc:
        raise ValueError(f"Could not download image: {exc}") from exc
    return decode_image(data)


PNG_MODES = {"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"}


def encode_png(image: Image.Image) -> bytes:
    """Serialize to PNG, converting modes such as CMYK or YCbCr that PNG cannot hold."""
    if image.mode not in PNG_MODES:
        image = image.convert("RGBA" if "A" in image.getbands() else "RGB")
    buf = BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()
