# palette_gif/gif_writer.py
from __future__ import annotations

"""
Single-frame GIF serialization of an index raster and its palette.

Pillow writes the container: logical screen = raster size, global colour
table = palette (a power of two, at least 2 entries), one frame with delay 0,
optional transparency index, no interlacing. Pillow's palette optimizer is
disabled so indices and palette order reach the file unchanged.
"""

import io
from typing import List, Optional

import numpy as np
from PIL import Image

from .constants import FRAME_DELAY_CS, MAX_COLOURS, MAX_GIF_DIMENSION
from .core_types import (
    IndexedRaster,
    Palette,
    SizeExceededError,
    assert_u8_raster_2d,
    unpack_colour,
)


def check_gif_bounds(width: int, height: int) -> None:
    """Raise SizeExceededError when either side does not fit 16 bits."""
    if width >= MAX_GIF_DIMENSION or height >= MAX_GIF_DIMENSION:
        raise SizeExceededError(width, height, MAX_GIF_DIMENSION)


def palette_to_flat_rgb(palette: Palette) -> List[int]:
    """[key, ...] -> [r0, g0, b0, r1, ...]; alpha is carried by the transparency index."""
    flat: List[int] = []
    for key in palette:
        r, g, b, _a = unpack_colour(key)
        flat.extend((r, g, b))
    return flat


def write_indexed_gif(
    raster: IndexedRaster,
    palette: Palette,
    transparent_slot: Optional[int] = None,
) -> bytes:
    """Serialize raster + palette to GIF bytes. Nothing is returned on failure."""
    assert_u8_raster_2d(raster)
    height, width = int(raster.shape[0]), int(raster.shape[1])
    check_gif_bounds(width, height)
    if width == 0 or height == 0:
        raise ValueError("gif: image has no pixels")
    if not palette or len(palette) > MAX_COLOURS:
        raise ValueError(f"gif: palette size must be 1..{MAX_COLOURS}, got {len(palette)}")
    if int(raster.max()) >= len(palette):
        raise ValueError(f"gif: palette index out of range: {int(raster.max())}")
    if transparent_slot is not None and not (0 <= transparent_slot < len(palette)):
        raise ValueError(f"gif: transparency index out of range: {transparent_slot}")

    im = Image.frombytes("P", (width, height), np.ascontiguousarray(raster).tobytes())
    im.putpalette(palette_to_flat_rgb(palette), rawmode="RGB")

    params = {
        "format": "GIF",
        "optimize": False,
        "interlace": False,
        "duration": FRAME_DELAY_CS * 10,
    }
    if transparent_slot is not None:
        params["transparency"] = int(transparent_slot)

    buf = io.BytesIO()
    im.save(buf, **params)
    return _shrink_global_colour_table(buf.getvalue(), len(palette))


def _shrink_global_colour_table(data: bytes, num_entries: int) -> bytes:
    """
    Cut Pillow's 4-entry padding back to a 2-entry table for 1-2 colour palettes.

    The table follows the 13-byte header + logical screen descriptor; its size
    is 2 << (packed & 7) with packed at offset 10. Frame data is unaffected
    because the LZW minimum code size is written per frame.
    """
    if num_entries > 2 or len(data) < 13:
        return data
    packed = data[10]
    if not packed & 0x80 or packed & 0x07 != 1:
        return data
    start = 13 + 3 * 2
    return data[:10] + bytes([packed & ~0x07 & 0xFF]) + data[11:start] + data[start + 6 :]


__all__ = ["check_gif_bounds", "palette_to_flat_rgb", "write_indexed_gif"]
