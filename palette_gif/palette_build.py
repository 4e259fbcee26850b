# palette_gif/palette_build.py
from __future__ import annotations

"""
Frequency-ranked palette construction.

Exports:
  rank_bucket(bucket) -> list of colour keys, most frequent first
  build_palette(transparent, opaque, num_colours) -> Palette
"""

from typing import List

from .core_types import ColourBucket, ColourKey, Palette, clamp_num_colours


def rank_bucket(bucket: ColourBucket) -> List[ColourKey]:
    """Keys by descending count; ties keep the bucket's insertion order."""
    return [key for key, _count in sorted(bucket.items(), key=lambda kv: -kv[1])]


def build_palette(
    transparent: ColourBucket, opaque: ColourBucket, num_colours: int
) -> Palette:
    """
    Transparent colours first, then opaque colours, each ranked by
    frequency, truncated to the colour budget. No padding.
    """
    budget = clamp_num_colours(num_colours)
    ranked = rank_bucket(transparent) + rank_bucket(opaque)

    palette: Palette = []
    seen = set()
    for key in ranked:
        if key in seen:
            continue
        seen.add(key)
        palette.append(key)
        if len(palette) >= budget:
            break
    return palette


__all__ = ["rank_bucket", "build_palette"]
