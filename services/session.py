from __future__ import annotations
import logging
import threading
from typing import Tuple

from domain.dtos import Color, Palette, PixelBuffer
from domain.enums import DEFAULT_PALETTE_SIZE, SamplingZone
from domain.errors import InvalidInput
from services.palette_extractor import PaletteExtractor

log = logging.getLogger(__name__)

class ExtractionSession:
    """One image being worked on. Each generate() samples the next horizontal third.

    generate() may be called from several executor threads at once; the lock
    makes read-extract-advance atomic so every call gets its own band.
    """

    def __init__(self, buffer: PixelBuffer, extractor: PaletteExtractor,
                 count: int = DEFAULT_PALETTE_SIZE) -> None:
        self.buffer = buffer
        self.extractor = extractor
        self.count = count
        self.zone = SamplingZone.top
        self.colors: Tuple[Color, ...] = ()
        self._lock = threading.Lock()

    def set_count(self, count: int) -> None:
        if count <= 0:
            raise InvalidInput(f"color count must be positive, got {count}")
        with self._lock:
            self.count = count

    def generate(self) -> Tuple[SamplingZone, Tuple[Color, ...]]:
        """Extract from the current zone, advance it, and return (zone used, colors)."""
        with self._lock:
            zone = self.zone
            colors = self.extractor.extract(self.buffer, self.count, zone)
            self.colors = colors
            self.zone = zone.next()
        log.debug("Generated %d colors from zone %s", len(colors), zone.name)
        return zone, colors

    def snapshot(self) -> Palette:
        """Freeze the current colors into a palette ready to be saved."""
        with self._lock:
            colors = self.colors
        if not colors:
            raise InvalidInput("nothing generated yet")
        return Palette.create(colors)
