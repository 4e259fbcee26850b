# palette_gif/transparency.py
from __future__ import annotations

"""
Transparent palette slot allocation.

Scans the palette in order and redesignates the first entry that no opaque
pixel uses as the transparent marker. At most one substitution per encode.
When every entry is a visibly used colour the palette is left untouched and
no slot is reported; fully transparent pixels then lose their transparency.
"""

from typing import Optional, Tuple

from .constants import TRANSPARENT_MARKER
from .core_types import ColourBucket, Palette, pack_colour

MARKER_KEY = pack_colour(TRANSPARENT_MARKER)


def allocate_transparent_slot(
    palette: Palette, opaque: ColourBucket
) -> Tuple[Palette, Optional[int]]:
    """Return (palette copy with marker substituted, slot index or None)."""
    out = list(palette)
    for i, key in enumerate(out):
        if key == MARKER_KEY:
            return out, i
        if key not in opaque:
            out[i] = MARKER_KEY
            return out, i
    return out, None


__all__ = ["MARKER_KEY", "allocate_transparent_slot"]
