import io

import pytest
import requests
from PIL import Image

from local_rembg import imaging
from local_rembg.imaging import decode_image, encode_png, load_image, resolve_under_root
from local_rembg.pipeline import remove_background


def _png_bytes(size=(12, 8), color=(200, 100, 90)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


def test_decode_image():
    image = decode_image(_png_bytes())
    assert image.size == (12, 8)


def test_decode_invalid_bytes():
    with pytest.raises(ValueError, match="Invalid image data"):
        decode_image(b"\x00\x01garbage")


def test_load_from_path(tmp_path):
    path = tmp_path / "photo.png"
    path.write_bytes(_png_bytes())
    assert load_image(image_path=path).size == (12, 8)


def test_load_from_missing_path(tmp_path):
    with pytest.raises(ValueError):
        load_image(image_path=tmp_path / "missing.png")


def test_load_from_bytes():
    assert load_image(image_bytes=_png_bytes((5, 5))).size == (5, 5)


def test_load_from_url(monkeypatch):
    seen = {}

    def fake_download(url, timeout_seconds=30):
        seen["url"] = url
        seen["timeout"] = timeout_seconds
        return _png_bytes((7, 3))

    monkeypatch.setattr(imaging, "download_image", fake_download)
    image = load_image(image_url="https://example.com/p.png", timeout_seconds=9)
    assert image.size == (7, 3)
    assert seen == {"url": "https://example.com/p.png", "timeout": 9}


def test_load_from_url_network_error(monkeypatch):
    def fake_download(url, timeout_seconds=30):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(imaging, "download_image", fake_download)
    with pytest.raises(ValueError, match="Could not download image"):
        load_image(image_url="https://example.com/p.png")


@pytest.mark.parametrize(
    "kwargs",
    [{}, {"image_path": "a.png", "image_bytes": b"x"}],
)
def test_exactly_one_source_required(kwargs):
    with pytest.raises(ValueError, match="Exactly one"):
        load_image(**kwargs)


def test_encode_png_keeps_alpha():
    image = Image.new("RGBA", (4, 4), (1, 2, 3, 4))
    decoded = Image.open(io.BytesIO(encode_png(image)))
    assert decoded.format == "PNG"
    assert decoded.mode == "RGBA"
    assert decoded.getpixel((0, 0)) == (1, 2, 3, 4)


def test_load_from_unreadable_path(tmp_path, monkeypatch):
    path = tmp_path / "locked.png"
    path.write_bytes(_png_bytes())

    def deny(self):
        raise PermissionError("denied")

    monkeypatch.setattr(type(path), "read_bytes", deny)
    with pytest.raises(ValueError, match="Could not read image file"):
        load_image(image_path=path)


def test_resolve_under_root(tmp_path):
    assert resolve_under_root("a/b.png", tmp_path) == (tmp_path / "a" / "b.png").resolve()
    assert resolve_under_root(tmp_path / "c.png", tmp_path) == (tmp_path / "c.png").resolve()


@pytest.mark.parametrize("image_path", ["../outside.png", "a/../../outside.png", "/etc/passwd"])
def test_resolve_under_root_rejects_escapes(tmp_path, image_path):
    with pytest.raises(ValueError, match="outside"):
        resolve_under_root(image_path, tmp_path / "root")


@pytest.mark.parametrize("mode", ["CMYK", "YCbCr"])
def test_encode_png_converts_unsupported_modes(mode):
    image = Image.new("RGB", (6, 4), (200, 100, 90)).convert(mode)
    decoded = Image.open(io.BytesIO(encode_png(image)))
    assert decoded.format == "PNG"
    assert decoded.mode == "RGB"
    assert decoded.size == (6, 4)
    assert image.mode == mode


def test_cmyk_jpeg_original_can_be_encoded(empty_mask, provider_factory, settings):
    buf = io.BytesIO()
    Image.new("CMYK", (100, 100), (0, 50, 60, 10)).save(buf, format="JPEG")
    image = decode_image(buf.getvalue())

    outcome = remove_background(image, False, provider_factory(mask=empty_mask), settings=settings)
    assert outcome.foreground_detected is False
    assert outcome.image is image
    assert Image.open(io.BytesIO(encode_png(outcome.image))).mode == "RGB"
