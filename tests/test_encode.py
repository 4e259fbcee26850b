"""End-to-end tests for the GIF encode pipeline.

Encoded bytes are decoded again with Pillow to check bounds, palette order,
transparency index and per-pixel colours.
"""

import io

import numpy as np
import pytest
from PIL import Image

from palette_gif import EncodeOptions, SizeExceededError, encode_gif
from palette_gif.convert import load_source_bytes
from palette_gif.core_types import keys_to_rgba_array
from palette_gif.encode import quantize_rgba
from palette_gif.source import PalettedSource, TruecolorSource
from palette_gif.transparency import MARKER_KEY

from conftest import RED, key


def decode(data):
    im = Image.open(io.BytesIO(data))
    im.load()
    return im


def global_table_size(data):
    """Entries in the global colour table per the logical screen descriptor."""
    assert data[10] & 0x80
    return 2 << (data[10] & 7)


def expected_rgba(result, raster):
    """Colours a decoder should produce for a palette result + raster."""
    lut = keys_to_rgba_array(result.palette)
    lut[:, 3] = 255
    if result.transparent_slot is not None:
        lut[result.transparent_slot] = (0, 0, 0, 0)
    return lut[raster]


# ============================================================================
# Scenarios
# ============================================================================


def test_red_with_transparent_corner(red_with_hole):
    result, raster = quantize_rgba(red_with_hole, EncodeOptions(num_colours=2))
    assert result.palette == [MARKER_KEY, key(RED)]
    assert result.transparent_slot == 0
    assert raster.tolist() == [[1, 1], [1, 0]]

    data = encode_gif(TruecolorSource(red_with_hole), EncodeOptions(num_colours=2))
    assert global_table_size(data) == 2
    im = decode(data)
    assert im.format == "GIF"
    assert im.size == (2, 2)
    assert im.mode == "P"
    assert im.info.get("transparency") == 0
    assert im.getpalette()[:6] == [0, 0, 0, 255, 0, 0]
    assert np.array(im).tolist() == [[1, 1], [1, 0]]


def test_single_colour_image(solid_10x10):
    result, raster = quantize_rgba(solid_10x10, EncodeOptions())
    assert len(result) == 1
    assert result.transparent_slot is None
    assert np.all(raster == 0)

    data = encode_gif(TruecolorSource(solid_10x10))
    assert global_table_size(data) == 2
    im = decode(data)
    assert im.size == (10, 10)
    rgba = np.array(im.convert("RGBA"))
    assert np.all(rgba == (12, 34, 56, 255))


def _three_hundred_colours():
    # colours 0..255 appear twice, 256..299 once
    colours = [(i % 256, (i // 256) * 100, 7, 255) for i in range(300)]
    pixels = colours[:256] * 2 + colours[256:]
    img = np.array(pixels, dtype=np.uint8).reshape(4, 139, 4)
    return colours, img


def test_three_hundred_colours_keep_most_frequent_256():
    colours, img = _three_hundred_colours()
    result, raster = quantize_rgba(img, EncodeOptions(num_colours=256, ditherer="none"))
    assert len(result) == 256
    assert result.transparent_slot is None
    assert set(result.palette) == {key(c) for c in colours[:256]}

    # dropped colours fall back to the nearest surviving entry
    flat = img.reshape(-1, 4)
    flat_raster = raster.reshape(-1)
    pal_rgba = keys_to_rgba_array(result.palette)
    for pos in range(512, 556):
        r = int(flat[pos, 0])
        assert tuple(pal_rgba[flat_raster[pos]]) == (r, 0, 7, 255)


def test_three_hundred_colours_with_diffusion_stay_in_range():
    _colours, img = _three_hundred_colours()
    result, raster = quantize_rgba(img, EncodeOptions())
    assert len(result) == 256
    assert raster.shape == (4, 139)
    assert int(raster.max()) < 256


# ============================================================================
# Properties
# ============================================================================


def test_lossless_when_colours_fit(sprite_16x16):
    result, raster = quantize_rgba(sprite_16x16, EncodeOptions())
    opaque = sprite_16x16[..., 3] == 255
    pal_rgba = keys_to_rgba_array(result.palette)
    assert np.array_equal(pal_rgba[raster][opaque], sprite_16x16[opaque])
    # two transparent colours (black border is most frequent), three opaque
    assert len(result) == 5
    assert result.palette[0] == MARKER_KEY
    assert result.transparent_slot == 0


def test_round_trip_colours_match_palette_assignment(sprite_16x16):
    opts = EncodeOptions()
    result, raster = quantize_rgba(sprite_16x16, opts)
    im = decode(encode_gif(TruecolorSource(sprite_16x16), opts))
    assert im.size == (16, 16)
    decoded = np.array(im.convert("RGBA"))
    assert np.array_equal(decoded, expected_rgba(result, raster))


def test_partial_alpha_decodes_transparent(sprite_16x16):
    im = decode(encode_gif(TruecolorSource(sprite_16x16)))
    decoded = np.array(im.convert("RGBA"))
    assert decoded[1, 1, 3] == 0
    assert decoded[0, 0, 3] == 0


def test_only_partial_alpha_pixels():
    img = np.zeros((3, 3, 4), dtype=np.uint8)
    img[...] = (200, 100, 50, 128)
    result, raster = quantize_rgba(img, EncodeOptions())
    assert result.palette == [MARKER_KEY]
    assert result.transparent_slot == 0
    assert np.all(raster == 0)


@pytest.mark.parametrize("shape", [(1, 65536, 4), (65536, 1, 4)])
def test_oversize_image_rejected(shape):
    img = np.zeros(shape, dtype=np.uint8)
    with pytest.raises(SizeExceededError):
        encode_gif(TruecolorSource(img))


def test_oversize_paletted_image_rejected():
    source = PalettedSource(np.zeros((1, 65536), dtype=np.uint8), [key(RED)])
    with pytest.raises(SizeExceededError):
        encode_gif(source)


def test_largest_allowed_width_encodes():
    img = np.zeros((1, 65535, 4), dtype=np.uint8)
    img[...] = RED
    im = decode(encode_gif(TruecolorSource(img)))
    assert im.size == (65535, 1)


@pytest.mark.parametrize("requested", [0, -3, 257, 1000])
def test_out_of_range_colour_budget_behaves_like_256(requested, sprite_16x16):
    assert EncodeOptions(num_colours=requested).num_colours == 256
    source = TruecolorSource(sprite_16x16)
    assert encode_gif(source, EncodeOptions(num_colours=requested)) == encode_gif(
        source, EncodeOptions(num_colours=256)
    )


def test_unknown_ditherer_option_rejected():
    with pytest.raises(ValueError):
        EncodeOptions(ditherer="atkinson")


# ============================================================================
# Paletted sources
# ============================================================================


def test_reencoding_a_paletted_gif_is_byte_identical(sprite_16x16):
    first = encode_gif(TruecolorSource(sprite_16x16))
    source, ext = load_source_bytes(first)
    assert ext == "gif"
    assert isinstance(source, PalettedSource)

    second = encode_gif(source)
    source_again, _ext = load_source_bytes(second)
    third = encode_gif(source_again)
    assert second == third


def test_paletted_fast_path_keeps_indices():
    indices = np.array([[0, 1], [2, 1]], dtype=np.uint8)
    palette = [key((9, 9, 9, 255)), key((0, 0, 0, 0)), key((200, 1, 2, 255))]
    source = PalettedSource(indices, palette, transparency=1)
    data = encode_gif(source)
    assert global_table_size(data) == 4
    im = decode(data)
    assert np.array(im).tolist() == [[0, 1], [2, 1]]
    assert im.info.get("transparency") == 1
    assert im.getpalette()[:9] == [9, 9, 9, 0, 0, 0, 200, 1, 2]


def test_native_palette_can_be_bypassed():
    indices = np.array([[1, 0]], dtype=np.uint8)
    palette = [key((10, 10, 10, 255)), key((250, 250, 250, 255))]
    source = PalettedSource(indices, palette)
    im = decode(encode_gif(source, EncodeOptions(use_native_palette=False)))
    # quantised palette is frequency ranked in scan order: 250 first
    assert np.array(im).tolist() == [[0, 1]]
    assert im.getpalette()[:6] == [250, 250, 250, 10, 10, 10]


def test_oversized_native_palette_is_requantised():
    indices = np.arange(8, dtype=np.uint8).reshape(2, 4)
    palette = [key((i * 30, 0, 0, 255)) for i in range(8)]
    source = PalettedSource(indices, palette)
    im = decode(encode_gif(source, EncodeOptions(num_colours=4)))
    assert int(np.array(im).max()) < 4
