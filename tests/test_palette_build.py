"""Tests for frequency-ranked palette construction and slot allocation."""

from palette_gif.palette_build import build_palette, rank_bucket
from palette_gif.transparency import MARKER_KEY, allocate_transparent_slot

from conftest import BLACK, BLUE, CLEAR, CLEAR_WHITE, GREEN, RED, WHITE, key


def test_rank_bucket_descending_with_stable_ties():
    bucket = {key(RED): 2, key(GREEN): 5, key(BLUE): 2, key(WHITE): 1}
    assert rank_bucket(bucket) == [key(GREEN), key(RED), key(BLUE), key(WHITE)]


def test_transparent_colours_come_first():
    transparent = {key(CLEAR): 1}
    opaque = {key(RED): 3}
    assert build_palette(transparent, opaque, 2) == [key(CLEAR), key(RED)]


def test_truncates_to_budget():
    transparent = {key(CLEAR_WHITE): 1, key(CLEAR): 4}
    opaque = {key(RED): 10, key(GREEN): 20, key(BLUE): 5}
    assert build_palette(transparent, opaque, 3) == [
        key(CLEAR),
        key(CLEAR_WHITE),
        key(GREEN),
    ]


def test_no_padding_when_fewer_colours_than_budget():
    palette = build_palette({}, {key(BLACK): 100}, 256)
    assert palette == [key(BLACK)]


def test_out_of_range_budget_means_256():
    opaque = {i << 8 | 0xFF: 1 for i in range(300)}
    assert len(build_palette({}, opaque, 0)) == 256
    assert len(build_palette({}, opaque, 257)) == 256
    assert build_palette({}, opaque, 257) == build_palette({}, opaque, 256)


def test_slot_replaces_first_entry_unused_by_opaque_pixels():
    palette = [key(CLEAR_WHITE), key(RED)]
    out, slot = allocate_transparent_slot(palette, {key(RED): 3})
    assert slot == 0
    assert out == [MARKER_KEY, key(RED)]
    # input list untouched
    assert palette == [key(CLEAR_WHITE), key(RED)]


def test_existing_marker_is_adopted():
    out, slot = allocate_transparent_slot([key(CLEAR), key(RED)], {key(RED): 1})
    assert slot == 0
    assert out == [key(CLEAR), key(RED)]


def test_only_one_substitution():
    palette = [key(CLEAR_WHITE), (1 << 24), key(RED)]
    out, slot = allocate_transparent_slot(palette, {key(RED): 1})
    assert slot == 0
    assert out[1] == (1 << 24)


def test_no_free_slot_leaves_palette_unchanged():
    palette = [key(RED), key(GREEN)]
    out, slot = allocate_transparent_slot(palette, {key(RED): 1, key(GREEN): 1})
    assert slot is None
    assert out == palette
