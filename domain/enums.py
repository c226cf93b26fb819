from __future__ import annotations
from enum import IntEnum

# Sizes offered by the bot; the extractor itself takes any positive count
PALETTE_SIZES = (3, 5, 7, 9)
DEFAULT_PALETTE_SIZE = 5

class SamplingZone(IntEnum):
    top = 0
    middle = 1
    bottom = 2

    @staticmethod
    def from_index(index: int) -> "SamplingZone":
        return SamplingZone(index % 3)

    def next(self) -> "SamplingZone":
        return SamplingZone.from_index(self.value + 1)
