"""Shared fixtures for palette_gif tests.

Images are built directly as uint8 RGBA arrays so every pixel value is known.
"""

import numpy as np
import pytest

from palette_gif.core_types import pack_colour

RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)
BLACK = (0, 0, 0, 255)
WHITE = (255, 255, 255, 255)
CLEAR = (0, 0, 0, 0)
CLEAR_WHITE = (255, 255, 255, 0)


def rgba_image(rows):
    """Nested lists of (r, g, b, a) tuples -> uint8 (H, W, 4)."""
    return np.array(rows, dtype=np.uint8).reshape(len(rows), len(rows[0]), 4)


def key(rgba):
    return pack_colour(rgba)


@pytest.fixture
def red_with_hole():
    """2x2: opaque red everywhere except a transparent bottom-right pixel."""
    return rgba_image([[RED, RED], [RED, CLEAR]])


@pytest.fixture
def solid_10x10():
    img = np.zeros((10, 10, 4), dtype=np.uint8)
    img[...] = (12, 34, 56, 255)
    return img


@pytest.fixture
def sprite_16x16():
    """Few colours, a transparent border and one partial-alpha pixel."""
    img = np.zeros((16, 16, 4), dtype=np.uint8)
    img[2:14, 2:14] = RED
    img[4:12, 4:12] = GREEN
    img[6:10, 6:10] = BLUE
    img[0, 0] = CLEAR_WHITE
    img[1, 1] = (10, 20, 30, 128)
    return img
