# palette_gif/convert.py
from __future__ import annotations

"""
Format detection, re-encoding, and all-or-nothing file output.

Supported extensions: png, jpeg, gif.
  load_source(path)         -> (PixelSource, extension)
  load_source_bytes(data)   -> (PixelSource, extension)
  encode_as(source, ext)    -> bytes
  save_as(path, data)       -> Path
"""

import io
import os
import tempfile
from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from .constants import (
    EXT_GIF,
    EXT_JPEG,
    EXT_PNG,
    EXTENSION_TO_PIL_FORMAT,
    JPEG_QUALITY,
    PIL_FORMAT_TO_EXTENSION,
    SUFFIX_TO_EXTENSION,
    SUPPORTED_EXTENSIONS,
)
from .core_types import EncodeOptions, UnsupportedFormatError
from .encode import encode_gif
from .gif_writer import palette_to_flat_rgb
from .source import PalettedSource, PixelSource, source_from_image


def is_supported_extension(extension: str) -> bool:
    return extension in SUPPORTED_EXTENSIONS


def extension_from_format(pil_format: Optional[str]) -> str:
    """Pillow format name ('PNG', 'JPEG', 'GIF') -> extension."""
    ext = PIL_FORMAT_TO_EXTENSION.get((pil_format or "").upper())
    if ext is None:
        raise UnsupportedFormatError(f"extension is not supported : {pil_format}")
    return ext


def extension_from_path(path: Union[str, Path]) -> str:
    """File suffix -> extension; '.jpg' and '.jpeg' both map to 'jpeg'."""
    suffix = Path(path).suffix.lower()
    ext = SUFFIX_TO_EXTENSION.get(suffix)
    if ext is None:
        raise UnsupportedFormatError(f"extension is not supported : {path}")
    return ext


def _decode(fp) -> Tuple[PixelSource, str]:
    try:
        with Image.open(fp) as im:
            im.load()
            ext = extension_from_format(im.format)
            return source_from_image(im), ext
    except UnidentifiedImageError as exc:
        raise UnsupportedFormatError(f"cannot identify image: {exc}") from exc


def load_source(path: Union[str, Path]) -> Tuple[PixelSource, str]:
    """Decode an image file; the detected format picks the extension."""
    return _decode(Path(path))


def load_source_bytes(data: bytes) -> Tuple[PixelSource, str]:
    """Decode image bytes; the detected format picks the extension."""
    return _decode(io.BytesIO(data))


def _to_pil_rgba(source: PixelSource) -> Image.Image:
    rgba = np.ascontiguousarray(source.to_rgba())
    return Image.frombytes("RGBA", (source.width, source.height), rgba.tobytes())


def encode_as(
    source: PixelSource,
    extension: str,
    options: Optional[EncodeOptions] = None,
    *,
    debug: bool = False,
) -> bytes:
    """Encode a pixel source as png, jpeg (quality 100, no alpha) or gif."""
    if not is_supported_extension(extension):
        raise UnsupportedFormatError("extension is unsupported")
    if extension == EXT_GIF:
        return encode_gif(source, options, debug=debug)

    buf = io.BytesIO()
    if extension == EXT_PNG:
        if isinstance(source, PalettedSource):
            # Keep the palette; PNG stores it as a PLTE chunk.
            im = Image.frombytes(
                "P",
                (source.width, source.height),
                np.ascontiguousarray(source.indices).tobytes(),
            )
            im.putpalette(palette_to_flat_rgb(source.palette), rawmode="RGB")
            params = {}
            if source.transparency is not None:
                params["transparency"] = source.transparency
            im.save(buf, format=EXTENSION_TO_PIL_FORMAT[EXT_PNG], **params)
        else:
            _to_pil_rgba(source).save(buf, format=EXTENSION_TO_PIL_FORMAT[EXT_PNG])
    elif extension == EXT_JPEG:
        im = _to_pil_rgba(source).convert("RGB")
        im.save(buf, format=EXTENSION_TO_PIL_FORMAT[EXT_JPEG], quality=JPEG_QUALITY)
    return buf.getvalue()


def save_as(path: Union[str, Path], data: bytes) -> Path:
    """
    Write a complete byte stream to path in one step.

    Bytes go to a temporary file in the destination folder which then
    replaces the target; on failure the temporary file is removed and the
    target is left untouched.
    """
    dst = Path(path)
    dst.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{dst.name}.", suffix=".tmp", dir=dst.parent)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        os.replace(tmp_name, dst)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    return dst


__all__ = [
    "EXT_PNG",
    "EXT_JPEG",
    "EXT_GIF",
    "is_supported_extension",
    "extension_from_format",
    "extension_from_path",
    "load_source",
    "load_source_bytes",
    "encode_as",
    "save_as",
]
