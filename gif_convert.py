#!/usr/bin/env python3
"""
gif_convert.py
Re-encode PNG/JPEG/GIF images, with a palette-building GIF encoder.

Usage:
  python gif_convert.py SRC --format [gif|png|jpeg] --colours N --dither [floyd-steinberg|none] --outdir DIR --jobs J --debug

Formats:
  gif  : Frequency-ranked palette (transparent colours first), one transparent
         slot, Floyd-Steinberg diffusion for colours that did not fit.
  png  : Lossless; paletted inputs keep their palette.
  jpeg : Quality 100; alpha is dropped.

Input:
  A PNG, JPEG or GIF file, or a folder of them.

Output:
  <stem>_out.<ext> next to the input, or inside --outdir. Files are written
  whole or not at all.
"""

from __future__ import annotations

import argparse
import io
import sys
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import redirect_stdout
from pathlib import Path
from typing import List, Optional, Tuple

from palette_gif.constants import (
    DEFAULT_DITHERER,
    DEFAULT_NUM_COLOURS,
    DITHERERS,
    EXT_GIF,
    OUTPUT_STEM_SUFFIX,
    SUFFIX_TO_EXTENSION,
    SUPPORTED_EXTENSIONS,
)
from palette_gif.convert import encode_as, load_source, save_as
from palette_gif.core_types import (
    EncodeOptions,
    SizeExceededError,
    UnsupportedColourModelError,
    UnsupportedFormatError,
)
from palette_gif.source import PalettedSource
from palette_gif.utils import (
    debug_log,
    enable_line_buffered_stdout,
    error,
    format_byte_size,
    format_seconds_compact,
    format_total_duration_compact,
    key_value_pairs_to_string,
    log,
    print_banner,
    print_config_line,
)

# CLI args & small helpers


def parse_cli_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse CLI arguments.

    Returns:
      argparse.Namespace with:
        src: Path to image or folder
        outdir: optional Path for outputs
        format: "gif" | "png" | "jpeg"
        colours: palette budget for gif (clamped to 1..256)
        dither: "floyd-steinberg" | "none"
        no_native_palette: always quantise paletted inputs
        jobs: parallel file workers
        debug: bool for verbose encode details
    """
    parser = argparse.ArgumentParser(
        prog="gif_convert",
        description="Re-encode image(s) as GIF, PNG or JPEG.",
    )
    parser.add_argument("src", type=Path, help="Input image or folder")
    parser.add_argument(
        "--outdir", type=Path, default=None, help="Output directory (optional)"
    )
    parser.add_argument(
        "--format",
        choices=SUPPORTED_EXTENSIONS,
        default=EXT_GIF,
        help="Output format.",
    )
    parser.add_argument(
        "--colours",
        type=int,
        default=DEFAULT_NUM_COLOURS,
        help="GIF palette size. Values outside 1..256 mean 256.",
    )
    parser.add_argument(
        "--dither",
        choices=list(DITHERERS),
        default=DEFAULT_DITHERER,
        help="How opaque colours missing from the palette are placed.",
    )
    parser.add_argument(
        "--no-native-palette",
        action="store_true",
        help="Quantise paletted inputs instead of writing their palette as-is.",
    )
    parser.add_argument(
        "--jobs", type=int, default=1, help="Files processed in parallel"
    )
    parser.add_argument("--debug", action="store_true", help="Verbose encode details")
    return parser.parse_args(argv)


def output_path_for(src_path: Path, extension: str, outdir: Optional[Path]) -> Path:
    """<stem>_out.<ext> beside the input or inside outdir."""
    suffix = ".jpg" if extension == "jpeg" else f".{extension}"
    name = f"{src_path.stem}{OUTPUT_STEM_SUFFIX}{suffix}"
    return (outdir / name) if outdir else src_path.with_name(name)


def list_input_files(folder: Path) -> List[Path]:
    """Supported images in folder, skipping earlier outputs, sorted by name."""
    files = [
        p
        for p in folder.iterdir()
        if p.is_file()
        and p.suffix.lower() in SUFFIX_TO_EXTENSION
        and not p.stem.endswith(OUTPUT_STEM_SUFFIX)
    ]
    files.sort(key=lambda p: p.name.lower())
    return files


# Per-file processing


def process_single_image(
    src_path: Path,
    out_path: Path,
    extension: str,
    options: EncodeOptions,
    debug: bool,
) -> bool:
    """
    Process a single image path end-to-end:
      load -> encode -> save -> report.
    Returns False when the file could not be converted.
    """
    t_start = time.perf_counter()
    print_banner(src_path.name)

    try:
        source, src_ext = load_source(src_path)
    except (UnsupportedFormatError, UnsupportedColourModelError, OSError) as e:
        error(f"{src_path.name}: {e}")
        return False
    t_loaded = time.perf_counter()

    kind = "paletted" if isinstance(source, PalettedSource) else "truecolor"
    if debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Loaded", f"{source.width}x{source.height}"),
                    ("Format", src_ext),
                    ("Source", kind),
                ]
            )
        )

    try:
        data = encode_as(source, extension, options, debug=debug)
    except SizeExceededError as e:
        error(f"{src_path.name}: {e} (downsize before retrying)")
        return False
    except ValueError as e:
        error(f"{src_path.name}: {e}")
        return False
    t_encoded = time.perf_counter()

    try:
        save_as(out_path, data)
    except OSError as e:
        error(f"{out_path.name}: {e}")
        return False
    t_saved = time.perf_counter()

    log(
        f"Wrote {out_path.name} | format={extension} | size={source.width}x{source.height} "
        f"| bytes={format_byte_size(len(data))}"
    )
    if debug:
        debug_log(
            f"Total {format_total_duration_compact(t_saved - t_start)}  "
            f"(load={format_seconds_compact(t_loaded - t_start)}, "
            f"encode={format_seconds_compact(t_encoded - t_loaded)}, "
            f"save={format_seconds_compact(t_saved - t_encoded)})"
        )
    else:
        log(f"Total time {format_total_duration_compact(t_saved - t_start)}")
    return True


class _ThreadRoutedStdout(io.TextIOBase):
    """stdout stand-in that sends each worker thread's writes to its own buffer."""

    def __init__(self, fallback) -> None:
        super().__init__()
        self._fallback = fallback
        self._local = threading.local()

    def capture(self, buf: Optional[io.StringIO]) -> None:
        self._local.buf = buf

    def write(self, text: str) -> int:
        buf = getattr(self._local, "buf", None)
        return (buf if buf is not None else self._fallback).write(text)

    def flush(self) -> None:
        buf = getattr(self._local, "buf", None)
        (buf if buf is not None else self._fallback).flush()


def _process_one_captured(
    router: _ThreadRoutedStdout,
    path: Path,
    extension: str,
    options: EncodeOptions,
    debug: bool,
    outdir: Optional[Path],
) -> Tuple[bool, str]:
    """
    Process a single file with stdout capture.

    Useful for concurrent execution where output should be printed in order.
    """
    buf = io.StringIO()
    router.capture(buf)
    try:
        ok = process_single_image(
            path, output_path_for(path, extension, outdir), extension, options, debug
        )
    finally:
        router.capture(None)
    return ok, buf.getvalue()


# Entry point


def main(argv: Optional[List[str]] = None) -> int:
    """
    CLI entry point.

    Handles single file or folder. In folder mode supports --jobs parallelism
    while preserving readable output ordering.
    """
    enable_line_buffered_stdout()
    args = parse_cli_args(argv)
    options = EncodeOptions(
        num_colours=args.colours,
        ditherer=args.dither,
        use_native_palette=not args.no_native_palette,
    )

    print_config_line(
        "run",
        [("Format", args.format), ("Jobs", args.jobs)],
        debug=False,
    )
    if args.format == EXT_GIF:
        print_config_line(
            "gif",
            [
                ("Colours", options.num_colours),
                ("Ditherer", options.ditherer),
                ("Native palette", options.use_native_palette),
            ],
            debug=args.debug,
        )

    src = args.src
    if not src.exists():
        error(f"not found: {src}")
        return 2

    if not src.is_dir():
        ok = process_single_image(
            src, output_path_for(src, args.format, args.outdir), args.format, options, args.debug
        )
        return 0 if ok else 1

    files = list_input_files(src)
    if args.debug:
        debug_log(key_value_pairs_to_string([("Images", len(files)), ("Jobs", args.jobs)]))

    results: List[bool] = []
    if args.jobs <= 1:
        for p in files:
            results.append(
                process_single_image(
                    p, output_path_for(p, args.format, args.outdir), args.format, options, args.debug
                )
            )
    else:
        router = _ThreadRoutedStdout(sys.stdout)
        with redirect_stdout(router), ThreadPoolExecutor(max_workers=args.jobs) as ex:
            futures = [
                ex.submit(
                    _process_one_captured,
                    router,
                    p,
                    args.format,
                    options,
                    args.debug,
                    args.outdir,
                )
                for p in files
            ]
            blocks = [f.result() for f in futures]
        print("".join(text for _ok, text in blocks), end="", flush=True)
        results = [ok for ok, _text in blocks]

    return 0 if all(results) else 1


if __name__ == "__main__":
    sys.exit(main())
