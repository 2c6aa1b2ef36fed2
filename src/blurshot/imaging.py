"""Pillow-based transforms applied to captured screenshots."""

from __future__ import annotations

from PIL import Image, ImageFilter

BLUR_RADIUS = 15
JPEG_QUALITY = 80


def blur_image(input_path: str, output_path: str, *, radius: float = BLUR_RADIUS, quality: int = JPEG_QUALITY) -> tuple[int, int]:
    """Write a uniformly blurred JPEG copy of ``input_path`` and return its size."""

    with Image.open(input_path) as im:
        im = im.convert("RGB")
        blurred = im.filter(ImageFilter.GaussianBlur(radius=radius))
        blurred.save(output_path, format="JPEG", quality=quality)
        return blurred.size


__all__ = ["BLUR_RADIUS", "JPEG_QUALITY", "blur_image"]
