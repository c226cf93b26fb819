from __future__ import annotations
import logging
from typing import Tuple

import numpy as np

from domain.dtos import BYTES_PER_PIXEL, Color, PixelBuffer
from domain.enums import SamplingZone
from domain.errors import InvalidInput
from services.image_utils import array_to_buffer

log = logging.getLogger(__name__)

QUANT_STEP = 32  # 8 buckets per channel: 0, 32, ..., 224

class PaletteExtractor:
    """Dominant colors of one horizontal third of an image.

    Samples every `stride`-th row of the band and every `stride`-th column,
    quantizes RGB to buckets of 32 and ranks buckets by how often they were
    hit. Equal counts keep the bucket that was met first in row-major order.
    """

    def __init__(self, stride: int = 10) -> None:
        if stride <= 0:
            raise InvalidInput(f"sampling stride must be positive, got {stride}")
        self.stride = stride

    def extract(self, buffer: PixelBuffer, count: int, zone: int = 0) -> Tuple[Color, ...]:
        if isinstance(count, bool) or not isinstance(count, (int, np.integer)) or count <= 0:
            raise InvalidInput(f"color count must be a positive integer, got {count!r}")
        band = SamplingZone.from_index(int(zone))
        zone_height = buffer.height // 3
        start = band * zone_height
        pixels = self._view(buffer)
        sampled = pixels[start:start + zone_height:self.stride, ::self.stride, :3]
        keys = (sampled.reshape(-1, 3) // QUANT_STEP) * QUANT_STEP
        if keys.size == 0:
            log.debug("Zone %s of a %dx%d image has no rows to sample", band.name, buffer.width, buffer.height)
            return ()

        uniq, first_seen, counts = np.unique(keys, axis=0, return_index=True, return_counts=True)
        # lexsort: last key is primary
        order = np.lexsort((first_seen, -counts))[:int(count)]
        colors = tuple(Color.from_rgb8(*(int(c) for c in uniq[i])) for i in order)
        log.debug("Sampled %d points in zone %s, %d distinct buckets, kept %d",
                  len(keys), band.name, len(uniq), len(colors))
        return colors

    def extract_from_array(self, image_rgba: np.ndarray, count: int, zone: int = 0) -> Tuple[Color, ...]:
        return self.extract(array_to_buffer(image_rgba), count, zone)

    @staticmethod
    def _view(buffer: PixelBuffer) -> np.ndarray:
        # zero-copy (height, width, 4) view that skips row padding
        return np.ndarray(
            shape=(buffer.height, buffer.width, BYTES_PER_PIXEL),
            dtype=np.uint8,
            buffer=buffer.data,
            strides=(buffer.stride, BYTES_PER_PIXEL, 1),
        )
