# palette_gif/analysis.py
from __future__ import annotations

"""
Colour frequency analysis.

Buckets every pixel of an RGBA image by alpha:
  alpha == 0   -> transparent bucket
  alpha == 255 -> opaque bucket
  otherwise    -> neither (still forced transparent at raster time)

Buckets are dicts keyed by packed RGBA integers. Insertion order is the
first encounter in row-major scan order, so a stable sort by count keeps
ties in scan order.
"""

from typing import Dict, Tuple

import numpy as np

from .constants import ALPHA_OPAQUE, ALPHA_TRANSPARENT
from .core_types import ColourBucket, U8Image, pack_rgba_array


def _bucket_from_keys(keys: np.ndarray) -> ColourBucket:
    """Count keys, ordered by first occurrence."""
    if keys.size == 0:
        return {}
    uniq, first_idx, counts = np.unique(keys, return_index=True, return_counts=True)
    order = np.argsort(first_idx, kind="stable")
    return {int(uniq[i]): int(counts[i]) for i in order.tolist()}


def count_colours(rgba: U8Image) -> Tuple[ColourBucket, ColourBucket]:
    """
    Return (transparent_bucket, opaque_bucket) for a uint8 (H,W,4) image.

    An image with zero pixels yields two empty buckets.
    """
    if rgba.size == 0:
        return {}, {}
    flat_keys = pack_rgba_array(rgba).reshape(-1)
    flat_alpha = rgba[..., 3].reshape(-1)

    transparent = _bucket_from_keys(flat_keys[flat_alpha == ALPHA_TRANSPARENT])
    opaque = _bucket_from_keys(flat_keys[flat_alpha == ALPHA_OPAQUE])
    return transparent, opaque


def alpha_summary(rgba: U8Image) -> Dict[str, int]:
    """Pixel counts by alpha class: transparent, opaque, partial."""
    alpha = rgba[..., 3]
    transparent = int(np.count_nonzero(alpha == ALPHA_TRANSPARENT))
    opaque = int(np.count_nonzero(alpha == ALPHA_OPAQUE))
    return {
        "transparent": transparent,
        "opaque": opaque,
        "partial": int(alpha.size) - transparent - opaque,
    }


__all__ = ["count_colours", "alpha_summary"]
