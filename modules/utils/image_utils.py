"""Utility helpers for preparing decoded images for JPEG output."""

from __future__ import annotations

from typing import Tuple

from PIL import Image

JPEG_MODES = ("RGB", "L", "CMYK")


def has_transparency(image: Image.Image) -> bool:
    """Return True when the image carries an alpha channel or transparent palette entry."""
    if image.mode in ("RGBA", "LA", "PA"):
        return True
    return image.mode == "P" and "transparency" in image.info


def flatten_alpha(image: Image.Image, background: Tuple[int, int, int] = (255, 255, 255)) -> Image.Image:
    """Composite a transparent image onto a solid background."""
    rgba = image.convert("RGBA")
    canvas = Image.new("RGB", rgba.size, background)
    canvas.paste(rgba, mask=rgba.getchannel("A"))
    return canvas


def prepare_for_jpeg(image: Image.Image) -> Image.Image:
    """Convert the image into a mode the JPEG encoder accepts."""
    if has_transparency(image):
        return flatten_alpha(image)
    if image.mode in JPEG_MODES:
        return image
    # I;16, F, P without transparency, YCbCr, ...
    return image.convert("RGB")
