# palette_gif/source.py
from __future__ import annotations

"""
Pixel sources consumed by the GIF encoder.

Two variants, dispatched once at the top of the encode pipeline:
  TruecolorSource : RGBA pixels, quantised by the palette pipeline.
  PalettedSource  : an existing index raster plus palette, written as-is.
"""

from dataclasses import dataclass
from typing import Optional, Union

import numpy as np
from PIL import Image

from .constants import ALPHA_OPAQUE, ALPHA_TRANSPARENT
from .core_types import (
    IndexedRaster,
    Palette,
    U8Image,
    UnsupportedColourModelError,
    assert_u8_image_rgba,
    assert_u8_raster_2d,
    keys_to_rgba_array,
    pack_colour,
)


@dataclass(frozen=True, eq=False)
class TruecolorSource:
    """RGBA pixels, uint8 (H, W, 4)."""

    rgba: U8Image

    def __post_init__(self) -> None:
        assert_u8_image_rgba(self.rgba)

    @property
    def width(self) -> int:
        return int(self.rgba.shape[1])

    @property
    def height(self) -> int:
        return int(self.rgba.shape[0])

    def to_rgba(self) -> U8Image:
        return self.rgba


@dataclass(frozen=True, eq=False)
class PalettedSource:
    """
    Index raster with its palette.

    palette holds packed RGBA keys; the entry at `transparency` (if any)
    carries alpha 0, every other entry alpha 255.
    """

    indices: IndexedRaster
    palette: Palette
    transparency: Optional[int] = None

    def __post_init__(self) -> None:
        assert_u8_raster_2d(self.indices)
        if not self.palette:
            raise ValueError("palette must not be empty")
        if len(self.palette) > 256:
            raise ValueError("palette cannot exceed 256 colours")
        if self.indices.size and int(self.indices.max()) >= len(self.palette):
            raise ValueError(
                f"palette index out of range: {int(self.indices.max())}"
            )
        if self.transparency is not None and not (
            0 <= self.transparency < len(self.palette)
        ):
            raise ValueError(f"transparency index out of range: {self.transparency}")

    @property
    def width(self) -> int:
        return int(self.indices.shape[1])

    @property
    def height(self) -> int:
        return int(self.indices.shape[0])

    def to_rgba(self) -> U8Image:
        """Expand indices through the palette into uint8 (H, W, 4)."""
        lut = keys_to_rgba_array(self.palette)
        return lut[self.indices]


PixelSource = Union[TruecolorSource, PalettedSource]


def source_from_rgba(rgba: np.ndarray) -> TruecolorSource:
    """Wrap an RGBA array (copied to contiguous uint8)."""
    arr = np.ascontiguousarray(rgba)
    if arr.dtype != np.uint8:
        raise UnsupportedColourModelError(f"expected uint8 RGBA, got {arr.dtype}")
    return TruecolorSource(assert_u8_image_rgba(arr))


def _paletted_from_image(im: Image.Image) -> Optional[PalettedSource]:
    """PalettedSource for a "P" image with an RGB palette, else None."""
    transparency = im.info.get("transparency")
    if transparency is not None and not isinstance(transparency, int):
        return None
    flat = im.getpalette()
    if not flat:
        return None
    if im.palette is not None and im.palette.mode != "RGB":
        return None
    num_entries = len(flat) // 3
    if num_entries > 256:
        return None

    indices = np.array(im, dtype=np.uint8)
    if indices.size and int(indices.max()) >= num_entries:
        return None
    if transparency is not None and transparency >= num_entries:
        transparency = None

    palette: Palette = []
    for i in range(num_entries):
        alpha = ALPHA_TRANSPARENT if i == transparency else ALPHA_OPAQUE
        palette.append(pack_colour((flat[3 * i], flat[3 * i + 1], flat[3 * i + 2], alpha)))
    return PalettedSource(indices=indices, palette=palette, transparency=transparency)


def source_from_image(im: Image.Image) -> Union[TruecolorSource, PalettedSource]:
    """
    Classify a decoded Pillow image.

    "P" images with an RGB palette and an integer (or no) transparency index
    keep their palette; everything else is converted to RGBA.
    """
    if im.mode == "P":
        paletted = _paletted_from_image(im)
        if paletted is not None:
            return paletted
    try:
        rgba = np.array(im.convert("RGBA"), dtype=np.uint8)
    except (ValueError, OSError) as exc:
        raise UnsupportedColourModelError(
            f"cannot convert image mode {im.mode!r} to RGBA"
        ) from exc
    return TruecolorSource(rgba)


__all__ = [
    "TruecolorSource",
    "PalettedSource",
    "PixelSource",
    "source_from_rgba",
    "source_from_image",
]
