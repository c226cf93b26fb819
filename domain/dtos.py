from __future__ import annotations
import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Tuple

from domain.errors import InvalidInput

BYTES_PER_PIXEL = 4  # RGBA

@dataclass(frozen=True)
class Color:
    red: float
    green: float
    blue: float

    def __post_init__(self) -> None:
        for name in ("red", "green", "blue"):
            v = getattr(self, name)
            if not isinstance(v, (int, float)) or not math.isfinite(v) or not 0.0 <= v <= 1.0:
                raise InvalidInput(f"{name} channel must be a finite value in [0, 1], got {v!r}")
            object.__setattr__(self, name, float(v))

    @staticmethod
    def from_rgb8(r: int, g: int, b: int) -> "Color":
        return Color(r / 255.0, g / 255.0, b / 255.0)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.red, self.green, self.blue)

@dataclass(frozen=True)
class PixelBuffer:
    """Read-only RGBA8 pixel grid, row-major. `stride` is bytes per row and may include padding."""
    width: int
    height: int
    data: bytes = field(repr=False)
    stride: int = 0

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise InvalidInput(f"pixel buffer must have a positive area, got {self.width}x{self.height}")
        row_bytes = self.width * BYTES_PER_PIXEL
        if self.stride == 0:
            object.__setattr__(self, "stride", row_bytes)
        if self.stride < row_bytes:
            raise InvalidInput(f"stride {self.stride} is shorter than a row of {row_bytes} bytes")
        if not isinstance(self.data, bytes):
            object.__setattr__(self, "data", bytes(self.data))
        needed = self.stride * (self.height - 1) + row_bytes
        if len(self.data) < needed:
            raise InvalidInput(f"pixel data holds {len(self.data)} bytes, need at least {needed}")

@dataclass(frozen=True)
class Palette:
    colors: Tuple[Color, ...]
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        object.__setattr__(self, "colors", tuple(self.colors))

    @staticmethod
    def create(colors: Iterable[Color]) -> "Palette":
        return Palette(colors=tuple(colors))
