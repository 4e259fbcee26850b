# palette_gif/utils.py
from __future__ import annotations

"""
Shared utilities for palette_gif.

Includes duration formatting, palette usage reporting, and tidy logging.
"""

from typing import Any, Iterable, List, Optional, Tuple

import numpy as np

from .core_types import IndexedRaster, Palette, rgb_to_hex, unpack_colour


#  Time / size formatting


def format_seconds_compact(seconds: float) -> str:
    """Human-friendly seconds: '<ms>ms', '<s>s', or 'Mm Ss'."""
    if seconds < 1.0:
        return f"{seconds * 1000.0:.1f}ms"
    if seconds < 60.0:
        return f"{seconds:.3f}s"
    minutes = int(seconds // 60)
    return f"{minutes}m {seconds - 60 * minutes:.1f}s"


def format_total_duration_compact(seconds: float) -> str:
    """Compact total duration: 'Mm Ss', 'Ss.s', or 'ms'."""
    if seconds >= 60.0:
        minutes = int(seconds // 60)
        rem = int(round(seconds - 60 * minutes))
        return f"{minutes}m {rem}s"
    if seconds >= 1.0:
        return f"{seconds:.1f}s"
    return f"{seconds * 1000.0:.1f}ms"


def format_byte_size(num_bytes: int) -> str:
    """Pretty byte count: 'B', 'KiB' or 'MiB'."""
    if num_bytes < 1024:
        return f"{num_bytes}B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024.0:.1f}KiB"
    return f"{num_bytes / (1024.0 * 1024.0):.2f}MiB"


# Palette reporting


def palette_usage_report(
    raster: IndexedRaster,
    palette: Palette,
    transparent_slot: Optional[int] = None,
) -> List[Tuple[int, str, int]]:
    """
    Per-slot usage of an indexed raster.

    Returns a list of (index, label, count) sorted by count descending, where
    label is '#rrggbb' or 'transparent' for the transparency slot.
    """
    if raster.size == 0 or not palette:
        return []
    counts = np.bincount(raster.reshape(-1), minlength=len(palette))
    report: List[Tuple[int, str, int]] = []
    for idx in np.argsort(-counts, kind="stable").tolist():
        n = int(counts[idx])
        if n == 0:
            continue
        label = (
            "transparent"
            if transparent_slot is not None and idx == transparent_slot
            else rgb_to_hex(unpack_colour(palette[idx]))
        )
        report.append((int(idx), label, n))
    return report


#  CLI / progress logging


def enable_line_buffered_stdout() -> None:
    """
    Enable line-buffered stdout when supported.
    Helps live progress printing in terminals that expose .reconfigure().
    """
    import sys

    reconfig = getattr(sys.stdout, "reconfigure", None)
    if callable(reconfig):
        try:
            reconfig(line_buffering=True, write_through=True)
        except (OSError, ValueError):
            pass


# Pretty logging


def format_bool_on_off(value: Any) -> str:
    """Pretty boolean: 'on'/'off' for bools; str(value) otherwise."""
    if isinstance(value, bool):
        return "on" if value else "off"
    return str(value)


def format_number_compact(value: Any) -> str:
    """Pretty number: 1_234 style for ints; compact for floats; passthrough otherwise."""
    if isinstance(value, int):
        return f"{value:,}"
    if isinstance(value, float):
        text = f"{value:.3f}".rstrip("0").rstrip(".")
        return text
    return str(value)


def key_value_pairs_to_string(
    pairs: Iterable[Tuple[str, Any]], sep: str = "  ", eq: str = ": "
) -> str:
    """
    Format (name, value) pairs as 'Name: value' blocks separated by sep.
    Uses format_bool_on_off / format_number_compact for readability.
    """
    out: List[str] = []
    for name, value in pairs:
        display = (
            format_bool_on_off(value)
            if isinstance(value, bool)
            else format_number_compact(value)
        )
        out.append(f"{name}{eq}{display}")
    return sep.join(out)


def print_config_line(
    section: str, pairs: Iterable[Tuple[str, Any]], debug: bool
) -> None:
    """
    Emit a single human-readable config line, e.g.:
      [gif] Colours: 256  Ditherer: floyd-steinberg  Native palette: on
    Routes to debug() when debug=True, else to log().
    """
    line = f"[{section}] {key_value_pairs_to_string(pairs)}"
    (debug_log if debug else log)(line)


def print_banner(title: str) -> None:
    """Section banner."""
    print(f"\n=== {title} ===", flush=True)


def log(message: str) -> None:
    """Plain log line."""
    print(message, flush=True)


def debug_log(message: str) -> None:
    """Debug log line."""
    print(f"[debug] {message}", flush=True)


def warn(message: str) -> None:
    """Warning log line."""
    print(f"[warn] {message}", flush=True)


def error(message: str) -> None:
    """Error log line to stderr."""
    import sys

    print(f"[error] {message}", file=sys.stderr, flush=True)


__all__ = [
    # formatting
    "format_seconds_compact",
    "format_total_duration_compact",
    "format_byte_size",
    "format_bool_on_off",
    "format_number_compact",
    # palette reporting
    "palette_usage_report",
    # logging / progress
    "enable_line_buffered_stdout",
    "key_value_pairs_to_string",
    "print_config_line",
    "print_banner",
    "log",
    "debug_log",
    "warn",
    "error",
]
