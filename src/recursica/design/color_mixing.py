"""Color mixing utilities.

Small, dependency-free helpers for:
- Parsing 6-digit hex colors (with or without ``#``) into RGB tuples
- Converting RGB tuples back to normalized lowercase ``#rrggbb``
- Blending a foreground color over a background at a given opacity

Blending is the straight sRGB ``a*fg + (1-a)*bg`` interpolation used when a
foreground is rendered with partial opacity on an opaque surface. It is what
the accessibility selector measures when choosing on-tone colors under
emphasis opacities.

Public API:
    hex_to_rgb(color: str) -> (r,g,b) | None
    to_hex(r,g,b) -> str
    normalize_hex(color) -> str | None
    blend_over(fg_hex, bg_hex, opacity) -> str
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

__all__ = [
    "RGB",
    "hex_to_rgb",
    "to_hex",
    "normalize_hex",
    "blend_over",
]

RGB = Tuple[int, int, int]

_HEX6_RE = re.compile(r"^#?([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$")


def hex_to_rgb(color: object) -> Optional[RGB]:
    """Parse ``#rrggbb`` / ``rrggbb`` into an (r, g, b) tuple.

    Returns None for anything that is not exactly six hex digits.
    """
    if not isinstance(color, str):
        return None
    m = _HEX6_RE.match(color.strip())
    if not m:
        return None
    return int(m.group(1), 16), int(m.group(2), 16), int(m.group(3), 16)


def _clamp_byte(v: int) -> int:
    return 0 if v < 0 else 255 if v > 255 else v


def to_hex(r: int, g: int, b: int) -> str:
    """Convert RGB components to a lowercase hex string (values clamped)."""
    return f"#{_clamp_byte(r):02x}{_clamp_byte(g):02x}{_clamp_byte(b):02x}"


def normalize_hex(color: object) -> Optional[str]:
    rgb = hex_to_rgb(color)
    if rgb is None:
        return None
    return to_hex(*rgb)


def blend_over(fg_hex: str, bg_hex: str, opacity: float) -> str:
    """Blend ``fg_hex`` over an opaque ``bg_hex`` at ``opacity`` (0-1).

    Opacity is clamped into [0, 1]. If either color cannot be parsed the
    foreground is returned unchanged.
    """
    fg = hex_to_rgb(fg_hex)
    bg = hex_to_rgb(bg_hex)
    if fg is None or bg is None:
        return fg_hex
    a = max(0.0, min(1.0, float(opacity)))
    r = int(round(a * fg[0] + (1 - a) * bg[0]))
    g = int(round(a * fg[1] + (1 - a) * bg[1]))
    b = int(round(a * fg[2] + (1 - a) * bg[2]))
    return to_hex(r, g, b)
