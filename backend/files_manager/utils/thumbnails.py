"""Raster thumbnail generation with Pillow."""

from __future__ import annotations

import io

from PIL import Image

# JPEG cannot hold alpha or palette data.
_JPEG_MODES = ("RGB", "L", "CMYK")


def make_thumbnail(source: bytes, width: int) -> bytes:
    """Resize image bytes to `width`, keeping aspect ratio and format."""
    if width <= 0:
        raise ValueError(f"Invalid thumbnail width: {width}")

    with Image.open(io.BytesIO(source)) as img:
        img_format = img.format or "PNG"
        height = max(1, round(img.height * width / img.width))
        resized = img.resize((width, height), Image.Resampling.LANCZOS)

    if img_format == "JPEG" and resized.mode not in _JPEG_MODES:
        resized = resized.convert("RGB")

    out = io.BytesIO()
    resized.save(out, format=img_format)
    return out.getvalue()
