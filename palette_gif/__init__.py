# palette_gif/__init__.py
"""
palette_gif package.

Purpose:
  Palette construction and indexed-colour GIF encoding for truecolor and
  paletted images. See gif_convert.py for CLI.

Public API:
  encode_gif     : pixel source -> single-frame GIF bytes.
  EncodeOptions  : colour budget, ditherer, native-palette shortcut.
  analysis       : transparent/opaque colour frequency buckets.
  palette_build  : frequency-ranked palette construction.
  transparency   : transparent palette slot allocation.
  dither         : Floyd-Steinberg rasterization onto a palette.
  gif_writer     : GIF container serialization (Pillow).
  source         : TruecolorSource / PalettedSource.
  convert        : png/jpeg/gif detection, re-encoding, atomic save.
  utils          : shared helpers (formatting, logging).

Quick start:
  from palette_gif import encode_gif, EncodeOptions
  from palette_gif.convert import load_source
"""

__version__ = "0.1.0"

# Re-export namespaces for convenience.
from . import constants
from . import core_types
from . import analysis
from . import palette_build
from . import transparency
from . import dither
from . import gif_writer
from . import source
from . import utils

from .core_types import (  # noqa: E402,F401
    EncodeOptions,
    SizeExceededError,
    UnsupportedColourModelError,
    UnsupportedFormatError,
)
from .source import PalettedSource, TruecolorSource, source_from_image  # noqa: E402,F401
from .encode import encode_gif  # noqa: E402,F401
from . import convert  # noqa: E402

__all__ = [
    "__version__",
    "constants",
    "core_types",
    "analysis",
    "palette_build",
    "transparency",
    "dither",
    "gif_writer",
    "source",
    "convert",
    "utils",
    "EncodeOptions",
    "SizeExceededError",
    "UnsupportedColourModelError",
    "UnsupportedFormatError",
    "TruecolorSource",
    "PalettedSource",
    "source_from_image",
    "encode_gif",
]
