# palette_gif/encode.py
from __future__ import annotations

"""
GIF encode entry point.

  encode_gif(source, options) -> bytes

Truecolor sources run the palette pipeline:
  count_colours -> build_palette -> allocate_transparent_slot -> rasterize
  -> write_indexed_gif
Paletted sources whose palette fits the budget skip quantisation and are
written as-is.
"""

import time
from typing import Optional, Tuple

from .analysis import alpha_summary, count_colours
from .core_types import EncodeOptions, IndexedRaster, PaletteResult, U8Image
from .dither import rasterize
from .gif_writer import check_gif_bounds, write_indexed_gif
from .palette_build import build_palette
from .source import PalettedSource, PixelSource
from .transparency import MARKER_KEY, allocate_transparent_slot
from .utils import (
    debug_log,
    format_seconds_compact,
    key_value_pairs_to_string,
    palette_usage_report,
    warn,
)


def quantize_rgba(
    rgba: U8Image, options: EncodeOptions, *, debug: bool = False
) -> Tuple[PaletteResult, IndexedRaster]:
    """Run the palette pipeline on a uint8 (H,W,4) image."""
    t0 = time.perf_counter()
    transparent, opaque = count_colours(rgba)
    palette = build_palette(transparent, opaque, options.num_colours)
    if not palette:
        # Only partial-alpha pixels (or none at all): a lone transparent entry.
        palette = [MARKER_KEY]
    palette, slot = allocate_transparent_slot(palette, opaque)

    summary = alpha_summary(rgba)
    if slot is None and (summary["transparent"] or summary["partial"]):
        warn(
            f"no free palette slot for transparency; "
            f"{summary['transparent'] + summary['partial']:,} pixels lose transparency"
        )

    t1 = time.perf_counter()
    raster = rasterize(rgba, palette, slot, options.ditherer, debug=debug)
    t2 = time.perf_counter()

    if debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Transparent colours", len(transparent)),
                    ("Opaque colours", len(opaque)),
                    ("Partial alpha px", summary["partial"]),
                    ("Palette", len(palette)),
                    ("Slot", "-" if slot is None else slot),
                ]
            )
        )
        debug_log(
            f"palette {format_seconds_compact(t1 - t0)}  "
            f"raster {format_seconds_compact(t2 - t1)}"
        )
        top = palette_usage_report(raster, palette, slot)[:5]
        debug_log(
            "top slots: " + ", ".join(f"{idx}={label} x{n:,}" for idx, label, n in top)
        )
    return PaletteResult(palette=palette, transparent_slot=slot), raster


def encode_gif(
    source: PixelSource,
    options: Optional[EncodeOptions] = None,
    *,
    debug: bool = False,
) -> bytes:
    """
    Encode a pixel source as a single-frame GIF.

    Raises SizeExceededError when width or height is 65536 or more; no bytes
    are produced in that case.
    """
    opts = options if options is not None else EncodeOptions()
    check_gif_bounds(source.width, source.height)

    if (
        isinstance(source, PalettedSource)
        and opts.use_native_palette
        and len(source.palette) <= opts.num_colours
    ):
        if debug:
            debug_log(
                key_value_pairs_to_string(
                    [
                        ("Native palette", len(source.palette)),
                        ("Slot", "-" if source.transparency is None else source.transparency),
                    ]
                )
            )
        return write_indexed_gif(source.indices, source.palette, source.transparency)

    result, raster = quantize_rgba(source.to_rgba(), opts, debug=debug)
    return write_indexed_gif(raster, result.palette, result.transparent_slot)


__all__ = ["quantize_rgba", "encode_gif"]
