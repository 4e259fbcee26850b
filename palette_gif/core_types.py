# palette_gif/core_types.py
from __future__ import annotations

"""
Core type aliases, small value objects, errors, and lightweight helpers.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from .constants import (
    DEFAULT_DITHERER,
    DEFAULT_NUM_COLOURS,
    DITHERERS,
    MAX_COLOURS,
    MIN_COLOURS,
)

# Basic aliases

RGBTuple = Tuple[int, int, int]
RGBATuple = Tuple[int, int, int, int]
HexStr = str

U8Image = NDArray[np.uint8]  # (H, W, 4) RGBA
U8Mask = NDArray[np.uint8]  # (H, W)
IndexedRaster = NDArray[np.uint8]  # (H, W) palette indices
ColourKeys = NDArray[np.uint32]  # (...,) packed R<<24 | G<<16 | B<<8 | A

# Collections

ColourKey = int
ColourBucket = Dict[ColourKey, int]  # colour key -> occurrence count
Palette = List[ColourKey]  # palette index -> colour key

# Errors


class SizeExceededError(ValueError):
    """Image width or height does not fit the 16-bit GIF screen fields."""

    def __init__(self, width: int, height: int, limit: int) -> None:
        super().__init__(
            f"gif: image is too large to encode ({width}x{height}, limit <{limit})"
        )
        self.width = width
        self.height = height
        self.limit = limit


class UnsupportedColourModelError(TypeError):
    """Pixel source cannot be expressed as RGBA or as a valid palette."""


class UnsupportedFormatError(ValueError):
    """Image format or extension is not one of png, jpeg, gif."""


# Value objects


def clamp_num_colours(num_colours: Optional[int]) -> int:
    """Out-of-range budgets fall back to the full 256 colours."""
    if num_colours is None:
        return DEFAULT_NUM_COLOURS
    n = int(num_colours)
    if n < MIN_COLOURS or n > MAX_COLOURS:
        return MAX_COLOURS
    return n


@dataclass(frozen=True)
class EncodeOptions:
    """
    GIF encode configuration.

    num_colours        : palette budget; values outside [1, 256] become 256.
    ditherer           : "floyd-steinberg" (default) or "none".
    use_native_palette : write paletted sources as-is when their palette fits.
    """

    num_colours: int = DEFAULT_NUM_COLOURS
    ditherer: str = DEFAULT_DITHERER
    use_native_palette: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "num_colours", clamp_num_colours(self.num_colours))
        if self.ditherer not in DITHERERS:
            raise ValueError(
                f"unknown ditherer {self.ditherer!r}; expected one of {DITHERERS}"
            )


@dataclass(frozen=True)
class PaletteResult:
    """Palette after slot allocation, with the transparency index if any."""

    palette: Palette
    transparent_slot: Optional[int]

    def __len__(self) -> int:
        return len(self.palette)


# Small helpers


def pack_colour(rgba: Sequence[int]) -> ColourKey:
    """(r, g, b, a) -> canonical integer key."""
    r, g, b, a = (int(v) & 0xFF for v in rgba[:4])
    return (r << 24) | (g << 16) | (b << 8) | a


def unpack_colour(key: ColourKey) -> RGBATuple:
    """Canonical integer key -> (r, g, b, a)."""
    k = int(key)
    return ((k >> 24) & 0xFF, (k >> 16) & 0xFF, (k >> 8) & 0xFF, k & 0xFF)


def pack_rgba_array(rgba: U8Image) -> ColourKeys:
    """Vectorised pack_colour over the last axis of a uint8 (..., 4) array."""
    arr = rgba.astype(np.uint32, copy=False)
    return (
        (arr[..., 0] << 24) | (arr[..., 1] << 16) | (arr[..., 2] << 8) | arr[..., 3]
    ).astype(np.uint32, copy=False)


def keys_to_rgba_array(keys: Union[Sequence[int], NDArray[np.integer]]) -> U8Image:
    """Packed keys -> uint8 (N, 4) RGBA rows."""
    k = np.asarray(keys, dtype=np.uint32).reshape(-1)
    out = np.empty((k.shape[0], 4), dtype=np.uint8)
    out[:, 0] = (k >> 24) & 0xFF
    out[:, 1] = (k >> 16) & 0xFF
    out[:, 2] = (k >> 8) & 0xFF
    out[:, 3] = k & 0xFF
    return out


def rgb_to_hex(rgb: Sequence[int]) -> HexStr:
    """RGB(A) sequence to lowercase hex string '#rrggbb'."""
    return f"#{int(rgb[0]):02x}{int(rgb[1]):02x}{int(rgb[2]):02x}"


def assert_u8_image_rgba(image: np.ndarray) -> U8Image:
    """Validate a uint8 (H,W,4) image and return it typed as U8Image."""
    if image.dtype != np.uint8 or image.ndim != 3 or image.shape[-1] != 4:
        raise TypeError("expected uint8 (H,W,4) RGBA image")
    return image  # type: ignore[return-value]


def assert_u8_raster_2d(raster: np.ndarray) -> IndexedRaster:
    """Validate a uint8 (H,W) index raster and return it typed as IndexedRaster."""
    if raster.dtype != np.uint8 or raster.ndim != 2:
        raise TypeError("expected uint8 (H,W) index raster")
    return raster  # type: ignore[return-value]


__all__ = [
    # aliases / types
    "RGBTuple",
    "RGBATuple",
    "HexStr",
    "U8Image",
    "U8Mask",
    "IndexedRaster",
    "ColourKeys",
    "ColourKey",
    "ColourBucket",
    "Palette",
    # errors
    "SizeExceededError",
    "UnsupportedColourModelError",
    "UnsupportedFormatError",
    # value objects
    "EncodeOptions",
    "PaletteResult",
    # helpers
    "clamp_num_colours",
    "pack_colour",
    "unpack_colour",
    "pack_rgba_array",
    "keys_to_rgba_array",
    "rgb_to_hex",
    "assert_u8_image_rgba",
    "assert_u8_raster_2d",
]
