from __future__ import annotations

import numpy as np
import pytest

from services.image_utils import array_to_buffer


@pytest.fixture
def rgba_image():
    """Factory for a solid HxWx4 uint8 image; tests paint regions on top of it."""

    def make(height: int, width: int, rgb=(0, 0, 0), alpha: int = 255) -> np.ndarray:
        img = np.empty((height, width, 4), dtype=np.uint8)
        img[..., :3] = rgb
        img[..., 3] = alpha
        return img

    return make


@pytest.fixture
def to_buffer():
    return array_to_buffer


@pytest.fixture
def pixel_at():
    """Read the RGBA tuple at (x, y) straight from a buffer's bytes."""

    def read(buffer, x: int, y: int):
        offset = y * buffer.stride + x * 4
        return tuple(buffer.data[offset:offset + 4])

    return read
