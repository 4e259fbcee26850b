# palette_gif/constants.py
"""
Tunables and format limits used across the project.

- GIF container limits (MAX_GIF_DIMENSION, MAX_COLOURS)
- Encode defaults (DEFAULT_NUM_COLOURS, DEFAULT_DITHERER)
- Error diffusion kernel
- Format conversion settings
"""
from __future__ import annotations

from typing import Dict, List, Tuple

# ==============
# GIF container
# ==============

# Logical screen width/height are 16-bit fields.
MAX_GIF_DIMENSION: int = 1 << 16

# Global colour table holds at most 2^8 entries.
MAX_COLOURS: int = 256
MIN_COLOURS: int = 1
DEFAULT_NUM_COLOURS: int = MAX_COLOURS

# Frame delay in centiseconds for the single written frame.
FRAME_DELAY_CS: int = 0

# ========
# Alpha
# ========
ALPHA_TRANSPARENT: int = 0
ALPHA_OPAQUE: int = 255

# Colour written into the palette slot reserved for transparency (RGBA).
TRANSPARENT_MARKER: Tuple[int, int, int, int] = (0, 0, 0, 0)

# =================
# Error diffusion
# =================
DITHER_FLOYD_STEINBERG: str = "floyd-steinberg"
DITHER_NONE: str = "none"
DITHERERS: Tuple[str, ...] = (DITHER_FLOYD_STEINBERG, DITHER_NONE)
DEFAULT_DITHERER: str = DITHER_FLOYD_STEINBERG

# (dx, dy, weight); weights sum to 16/16. Raster order, no serpentine.
KERNEL_FS: Tuple[Tuple[int, int, float], ...] = (
    (1, 0, 7 / 16),
    (-1, 1, 3 / 16),
    (0, 1, 5 / 16),
    (1, 1, 1 / 16),
)

# Pixel x candidate pairs per chunk for vectorised nearest-colour lookups.
NEAREST_CHUNK: int = 200_000

# ===================
# Format conversion
# ===================
EXT_PNG: str = "png"
EXT_JPEG: str = "jpeg"
EXT_GIF: str = "gif"
SUPPORTED_EXTENSIONS: List[str] = [EXT_PNG, EXT_JPEG, EXT_GIF]

# File suffix -> extension
SUFFIX_TO_EXTENSION: Dict[str, str] = {
    ".png": EXT_PNG,
    ".jpg": EXT_JPEG,
    ".jpeg": EXT_JPEG,
    ".gif": EXT_GIF,
}

# Pillow format name -> extension
PIL_FORMAT_TO_EXTENSION: Dict[str, str] = {
    "PNG": EXT_PNG,
    "JPEG": EXT_JPEG,
    "GIF": EXT_GIF,
}

EXTENSION_TO_PIL_FORMAT: Dict[str, str] = {
    EXT_PNG: "PNG",
    EXT_JPEG: "JPEG",
    EXT_GIF: "GIF",
}

JPEG_QUALITY: int = 100

# Suffix added to CLI outputs; inputs carrying it are skipped in folder mode.
OUTPUT_STEM_SUFFIX: str = "_out"

__all__ = [
    "MAX_GIF_DIMENSION",
    "MAX_COLOURS",
    "MIN_COLOURS",
    "DEFAULT_NUM_COLOURS",
    "FRAME_DELAY_CS",
    "ALPHA_TRANSPARENT",
    "ALPHA_OPAQUE",
    "TRANSPARENT_MARKER",
    "DITHER_FLOYD_STEINBERG",
    "DITHER_NONE",
    "DITHERERS",
    "DEFAULT_DITHERER",
    "KERNEL_FS",
    "NEAREST_CHUNK",
    "EXT_PNG",
    "EXT_JPEG",
    "EXT_GIF",
    "SUPPORTED_EXTENSIONS",
    "SUFFIX_TO_EXTENSION",
    "PIL_FORMAT_TO_EXTENSION",
    "EXTENSION_TO_PIL_FORMAT",
    "JPEG_QUALITY",
    "OUTPUT_STEM_SUFFIX",
]
