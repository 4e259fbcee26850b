# palette_gif/dither.py
from __future__ import annotations

"""
Indexed rasterization onto a fixed palette.

- Pixels with alpha < 255 go straight to the transparent slot.
- Opaque pixels use Floyd-Steinberg error diffusion in RGB (raster order),
  or plain nearest colour with ditherer="none".
- Candidates are the opaque palette entries; the transparent marker is never
  picked for an opaque pixel unless the palette has no opaque entry at all.
- When every opaque colour is already in the palette the exact lookup is used;
  diffusion would carry zero error and pick the same slots.
"""

from typing import Dict, Optional, Tuple

import numpy as np

from .constants import (
    ALPHA_OPAQUE,
    DEFAULT_DITHERER,
    DITHER_FLOYD_STEINBERG,
    DITHER_NONE,
    KERNEL_FS,
    NEAREST_CHUNK,
)
from .core_types import (
    IndexedRaster,
    Palette,
    U8Image,
    assert_u8_image_rgba,
    keys_to_rgba_array,
    pack_rgba_array,
)
from .utils import debug_log


# ---------- core utilities ----------------------------------------------------


def opaque_candidates(palette: Palette) -> Tuple[np.ndarray, np.ndarray]:
    """
    Palette rows opaque pixels may map to.

    Returns (candidate palette indices int32 [K], candidate RGB float32 [K,3]).
    Falls back to every entry when none is opaque.
    """
    pal_rgba = keys_to_rgba_array(palette)
    idx = np.nonzero(pal_rgba[:, 3] == ALPHA_OPAQUE)[0]
    if idx.size == 0:
        idx = np.arange(len(palette))
    return idx.astype(np.int32), pal_rgba[idx, :3].astype(np.float32)


def lookup_exact_indices(keys: np.ndarray, palette: Palette) -> Optional[np.ndarray]:
    """Palette index per packed key, or None if any key is missing."""
    if keys.size == 0:
        return np.zeros((0,), dtype=np.int64)
    pal_keys = np.asarray(palette, dtype=np.uint32)
    sorter = np.argsort(pal_keys, kind="stable")
    pos = np.searchsorted(pal_keys, keys, sorter=sorter)
    pos = np.clip(pos, 0, pal_keys.shape[0] - 1)
    hit = sorter[pos]
    if not np.all(pal_keys[hit] == keys):
        return None
    return hit


def nearest_indices_rgb(pixels_rgb: np.ndarray, cand_rgb: np.ndarray) -> np.ndarray:
    """Nearest candidate row per pixel by squared RGB distance, chunked."""
    n = pixels_rgb.shape[0]
    out = np.empty((n,), dtype=np.int64)
    cand = cand_rgb.astype(np.float32, copy=False)
    # (chunk, K, 3) temporaries stay within NEAREST_CHUNK * 3 floats
    step = max(1, NEAREST_CHUNK // max(1, cand.shape[0]))
    for start in range(0, n, step):
        pts = pixels_rgb[start : start + step].astype(np.float32)
        diff = pts[:, None, :] - cand[None, :, :]
        dist2 = np.sum(diff * diff, axis=2)
        out[start : start + step] = np.argmin(dist2, axis=1)
    return out


def _diffuse_floyd_steinberg(
    rgb: np.ndarray,
    opaque: np.ndarray,
    out: IndexedRaster,
    cand_idx: np.ndarray,
    cand_rgb: np.ndarray,
) -> None:
    """
    Raster-order Floyd-Steinberg over opaque pixels; writes into out.

    Only two error rows are kept, padded by one column on each side. Error
    landing on padding or on a non-opaque cell is never read back, which is
    the same as not diffusing it there.
    """
    H, W = opaque.shape
    src = rgb.astype(np.float32)

    right = [(dx, np.float32(w)) for dx, dy, w in KERNEL_FS if dy == 0]
    below = np.zeros((3, 1), dtype=np.float32)
    for dx, dy, w in KERNEL_FS:
        if dy == 1:
            below[dx + 1, 0] = w

    cur = np.zeros((W + 2, 3), dtype=np.float32)
    nxt = np.zeros_like(cur)
    memo: Dict[bytes, int] = {}

    for y in range(H):
        row_src = src[y]
        row_opaque = opaque[y]
        for x in range(W):
            if not row_opaque[x]:
                continue
            want = np.clip(row_src[x] + cur[x + 1], 0.0, 255.0)
            k = want.tobytes()
            j = memo.get(k)
            if j is None:
                diff = cand_rgb - want
                j = int(np.argmin(np.sum(diff * diff, axis=1)))
                memo[k] = j
            out[y, x] = cand_idx[j]

            e = want - cand_rgb[j]
            if not e.any():
                continue
            for dx, w in right:
                cur[x + 1 + dx] += e * w
            nxt[x : x + 3] += below * e
        cur, nxt = nxt, cur
        nxt.fill(0.0)


def rasterize(
    rgba: U8Image,
    palette: Palette,
    transparent_slot: Optional[int],
    ditherer: str = DEFAULT_DITHERER,
    *,
    debug: bool = False,
) -> IndexedRaster:
    """
    Map every pixel of a uint8 (H,W,4) image to a palette index.

    Non-opaque pixels take `transparent_slot` (index 0 when no slot was
    allocated). Every returned cell is a valid index into `palette`.
    """
    assert_u8_image_rgba(rgba)
    if not palette:
        raise ValueError("palette must not be empty")
    if ditherer not in (DITHER_FLOYD_STEINBERG, DITHER_NONE):
        raise ValueError(f"unknown ditherer {ditherer!r}")

    H, W = rgba.shape[0], rgba.shape[1]
    fill = transparent_slot if transparent_slot is not None else 0
    out: IndexedRaster = np.full((H, W), fill, dtype=np.uint8)

    opaque = rgba[..., 3] == ALPHA_OPAQUE
    if not np.any(opaque):
        return out

    cand_idx, cand_rgb = opaque_candidates(palette)

    exact = lookup_exact_indices(pack_rgba_array(rgba)[opaque], palette)
    if exact is not None:
        out[opaque] = exact.astype(np.uint8)
        if debug:
            debug_log(f"raster exact  pixels={int(opaque.sum()):,}  palette={len(palette)}")
        return out

    if ditherer == DITHER_NONE:
        nearest = nearest_indices_rgb(rgba[..., :3][opaque], cand_rgb)
        out[opaque] = cand_idx[nearest].astype(np.uint8)
    else:
        _diffuse_floyd_steinberg(rgba[..., :3], opaque, out, cand_idx, cand_rgb)

    if debug:
        debug_log(
            f"raster {ditherer}  pixels={int(opaque.sum()):,}  "
            f"candidates={int(cand_idx.size)}  palette={len(palette)}"
        )
    return out


__all__ = [
    "opaque_candidates",
    "lookup_exact_indices",
    "nearest_indices_rgb",
    "rasterize",
]
