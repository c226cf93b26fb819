from __future__ import annotations
from typing import Dict, Tuple

from domain.dtos import Color

def _to_byte(channel: float) -> int:
    return int(channel * 255)

def rgb8(color: Color) -> Tuple[int, int, int]:
    return _to_byte(color.red), _to_byte(color.green), _to_byte(color.blue)

def hex_code(color: Color) -> str:
    return "#%02X%02X%02X" % rgb8(color)

def rgb_value(color: Color) -> str:
    return "RGB(%d, %d, %d)" % rgb8(color)

def hsl_components(color: Color) -> Tuple[float, float, float]:
    """Hue in degrees, saturation and lightness in percent (unrounded)."""
    r, g, b = color.as_tuple()
    hi = max(r, g, b)
    lo = min(r, g, b)
    delta = hi - lo
    l = (hi + lo) / 2
    h = s = 0.0
    if delta != 0:
        s = delta / (2 - hi - lo) if l > 0.5 else delta / (hi + lo)
        if hi == r:
            h = (g - b) / delta + (6 if g < b else 0)
        elif hi == g:
            h = (b - r) / delta + 2
        else:
            h = (r - g) / delta + 4
        h *= 60
    return h, s * 100, l * 100

def hsl_value(color: Color) -> str:
    return "HSL(%.0f, %.0f%%, %.0f%%)" % hsl_components(color)

def describe(color: Color) -> Dict[str, str]:
    return {"hex": hex_code(color), "rgb": rgb_value(color), "hsl": hsl_value(color)}
