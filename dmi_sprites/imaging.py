import io
from typing import Tuple

import numpy as np
from PIL import Image

RESAMPLE_NEAREST = Image.Resampling.NEAREST

# Fill used for padding frames and empty grid cells.
BLANK_COLOR: Tuple[int, int, int, int] = (192, 192, 192, 0)


def blank_frame(width: int, height: int) -> Image.Image:
    return Image.new("RGBA", (width, height), BLANK_COLOR)


def ensure_rgba(image: Image.Image) -> Image.Image:
    return image if image.mode == "RGBA" else image.convert("RGBA")


def load(data: bytes) -> Image.Image:
    with Image.open(io.BytesIO(data)) as source_image:
        return source_image.convert("RGBA")


def crop(image: Image.Image, x: int, y: int, width: int, height: int) -> Image.Image:
    """Cut a region out of ``image``, clipped to the image bounds.

    Pillow pads out-of-range crops to the requested size; clipping instead
    lets callers detect a region that falls off the edge by its size.
    """
    left = min(max(0, x), image.width)
    top = min(max(0, y), image.height)
    right = max(left, min(image.width, x + width))
    bottom = max(top, min(image.height, y + height))
    return image.crop((left, top, right, bottom))


def paste(destination: Image.Image, source: Image.Image, x: int, y: int) -> None:
    destination.paste(ensure_rgba(source), (x, y))


def resize(image: Image.Image, width: int, height: int) -> Image.Image:
    if width <= 0 or height <= 0:
        raise ValueError("Resize target must be greater than zero.")
    if image.size == (width, height):
        return image.copy()
    return image.resize((width, height), RESAMPLE_NEAREST)


def raw_pixels(image: Image.Image) -> np.ndarray:
    return np.asarray(ensure_rgba(image), dtype=np.uint8)


def encode_png(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    ensure_rgba(image).save(buffer, format="PNG", optimize=False)
    return buffer.getvalue()


def blank_canvas(width: int, height: int) -> np.ndarray:
    canvas = np.empty((height, width, 4), dtype=np.uint8)
    canvas[...] = BLANK_COLOR
    return canvas


def paste_pixels(canvas: np.ndarray, source: Image.Image, x: int, y: int) -> None:
    """Copy ``source`` into a canvas array at (x, y), clipped to the canvas."""
    pixels = raw_pixels(source)
    height = min(pixels.shape[0], canvas.shape[0] - y)
    width = min(pixels.shape[1], canvas.shape[1] - x)
    if height > 0 and width > 0:
        canvas[y:y + height, x:x + width] = pixels[:height, :width]


def from_pixels(canvas: np.ndarray) -> Image.Image:
    return Image.fromarray(canvas)
