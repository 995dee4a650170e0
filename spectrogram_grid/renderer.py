import io
from pathlib import Path
from typing import Protocol

import numpy as np
from PIL import Image

from .models import ResampledMatrix


class MatrixRenderer(Protocol):
    """Anything that paints a ResampledMatrix. Color mapping is entirely its business."""

    def __call__(self, matrix: ResampledMatrix) -> bytes:
        ...


def grayscale_pixels(matrix: ResampledMatrix, height_factor: int = 1) -> np.ndarray:
    """
    Pixel rows for a plain grayscale rendering.

    One pixel column per matrix column, height_factor pixel rows per bin,
    low frequencies at the bottom. Louder bins are darker (255 - value).
    """
    if height_factor <= 0:
        raise ValueError("height_factor must be positive")
    pixels = 255 - matrix.data.T
    pixels = np.flipud(pixels)
    if height_factor > 1:
        pixels = np.repeat(pixels, height_factor, axis=0)
    return np.ascontiguousarray(pixels, dtype=np.uint8)


def render_grayscale_png(matrix: ResampledMatrix, height_factor: int = 1) -> bytes:
    image = Image.fromarray(grayscale_pixels(matrix, height_factor=height_factor))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    buffer.seek(0)
    return buffer.getvalue()


def save_png(png_bytes: bytes, output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(png_bytes)
    return output_path
