"""Dominant color extraction."""

from __future__ import annotations

import numpy as np
import pytest

from domain.dtos import Color, PixelBuffer
from domain.errors import InvalidInput
from services.palette_extractor import PaletteExtractor

RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)


def q(r: int, g: int, b: int) -> Color:
    return Color.from_rgb8(r, g, b)


def test_solid_image_yields_single_quantized_color(rgba_image, to_buffer) -> None:
    buffer = to_buffer(rgba_image(90, 100, (200, 100, 50)))

    for count in (1, 3, 5, 9):
        colors = PaletteExtractor().extract(buffer, count, 0)
        assert colors == (q(192, 96, 32),)

    (color,) = colors
    assert color.red == pytest.approx(0.753, abs=1e-3)
    assert color.green == pytest.approx(0.376, abs=1e-3)
    assert color.blue == pytest.approx(0.125, abs=1e-3)


@pytest.mark.parametrize("count", [0, -1, -7])
def test_non_positive_count_is_rejected(rgba_image, to_buffer, count: int) -> None:
    buffer = to_buffer(rgba_image(30, 30))

    with pytest.raises(InvalidInput):
        PaletteExtractor().extract(buffer, count, 0)


@pytest.mark.parametrize("count", [2.5, "3", True])
def test_non_integer_count_is_rejected(rgba_image, to_buffer, count) -> None:
    buffer = to_buffer(rgba_image(30, 30))

    with pytest.raises(InvalidInput):
        PaletteExtractor().extract(buffer, count, 0)


def test_zero_stride_is_rejected() -> None:
    with pytest.raises(InvalidInput):
        PaletteExtractor(stride=0)


def test_middle_zone_only_reads_its_rows(rgba_image, to_buffer) -> None:
    img = rgba_image(90, 100, GREEN)
    img[30:60, :, :3] = RED
    buffer = to_buffer(img)

    # stride 1 visits every row, so a leak outside 30..59 would show up as green
    assert PaletteExtractor(stride=1).extract(buffer, 5, 1) == (q(224, 0, 0),)
    assert PaletteExtractor(stride=1).extract(buffer, 5, 0) == (q(0, 224, 0),)


def test_zone_index_wraps_modulo_three(rgba_image, to_buffer) -> None:
    img = rgba_image(90, 40, RED)
    img[30:60, :, :3] = GREEN
    img[60:90, :, :3] = BLUE
    buffer = to_buffer(img)
    extractor = PaletteExtractor()

    results = [extractor.extract(buffer, 3, zone) for zone in range(4)]

    assert results[0] == (q(224, 0, 0),)
    assert results[1] == (q(0, 224, 0),)
    assert results[2] == (q(0, 0, 224),)
    assert results[3] == results[0]


def test_rows_past_the_last_full_band_are_never_sampled(rgba_image, to_buffer) -> None:
    # 92 rows: bands are 30 rows each, rows 90 and 91 belong to none of them
    img = rgba_image(92, 10, BLUE)
    img[90:, :, :3] = RED
    buffer = to_buffer(img)

    for zone in range(3):
        assert PaletteExtractor(stride=1).extract(buffer, 3, zone) == (q(0, 0, 224),)


def test_colors_are_ranked_by_frequency(rgba_image, to_buffer) -> None:
    # sampled columns are 0, 10, 20 on a single sampled row
    img = rgba_image(3, 30, RED)
    img[0, 10, :3] = BLUE
    img[0, 20, :3] = BLUE
    buffer = to_buffer(img)

    assert PaletteExtractor().extract(buffer, 5, 0) == (q(0, 0, 224), q(224, 0, 0))
    assert PaletteExtractor().extract(buffer, 1, 0) == (q(0, 0, 224),)


def test_ties_keep_first_encountered_color(rgba_image, to_buffer) -> None:
    img = rgba_image(3, 20, (0, 0, 0))
    img[0, 10, :3] = (255, 255, 255)
    reversed_img = rgba_image(3, 20, (255, 255, 255))
    reversed_img[0, 10, :3] = (0, 0, 0)
    extractor = PaletteExtractor()

    assert extractor.extract(to_buffer(img), 2, 0) == (q(0, 0, 0), q(224, 224, 224))
    assert extractor.extract(to_buffer(reversed_img), 2, 0) == (q(224, 224, 224), q(0, 0, 0))


def test_quantization_bucket_edges(rgba_image, to_buffer) -> None:
    img = rgba_image(3, 1, (31, 32, 255))
    assert PaletteExtractor().extract(to_buffer(img), 1, 0) == (q(0, 32, 224),)


def test_alpha_is_ignored(rgba_image, to_buffer) -> None:
    img = rgba_image(3, 20, (100, 100, 100), alpha=255)
    img[0, 10, 3] = 0

    assert PaletteExtractor().extract(to_buffer(img), 5, 0) == (q(96, 96, 96),)


def test_result_never_exceeds_count(to_buffer) -> None:
    rng = np.random.default_rng(7)
    img = rng.integers(0, 256, size=(300, 300, 4), dtype=np.uint8)
    buffer = to_buffer(img)

    for count in (1, 3, 5, 7, 9, 50):
        colors = PaletteExtractor().extract(buffer, count, 2)
        assert 1 <= len(colors) <= count
        assert all(0.0 <= ch <= 1.0 for c in colors for ch in c.as_tuple())


def test_extraction_is_deterministic(to_buffer) -> None:
    rng = np.random.default_rng(11)
    img = rng.integers(0, 256, size=(120, 80, 4), dtype=np.uint8)
    buffer = to_buffer(img)
    extractor = PaletteExtractor()

    assert extractor.extract(buffer, 7, 1) == extractor.extract(buffer, 7, 1)


def test_image_shorter_than_three_rows_has_nothing_to_sample(rgba_image, to_buffer) -> None:
    assert PaletteExtractor().extract(to_buffer(rgba_image(2, 50, RED)), 3, 0) == ()


def test_row_padding_is_skipped() -> None:
    width, height, pad = 3, 3, 8
    row = bytes([10, 10, 10, 255] * width) + bytes([250] * pad)
    buffer = PixelBuffer(width=width, height=height, data=row * height, stride=width * 4 + pad)

    assert PaletteExtractor(stride=1).extract(buffer, 5, 0) == (q(0, 0, 0),)


def test_buffer_is_not_modified(rgba_image, to_buffer) -> None:
    buffer = to_buffer(rgba_image(30, 30, (77, 88, 99)))
    before = buffer.data

    PaletteExtractor().extract(buffer, 3, 0)

    assert buffer.data == before


def test_extract_from_array(rgba_image) -> None:
    colors = PaletteExtractor().extract_from_array(rgba_image(30, 30, (200, 100, 50)), 3)
    assert colors == (q(192, 96, 32),)
