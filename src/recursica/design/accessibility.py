"""Accessible foreground selection.

Chooses readable foreground colors for tones and surfaces based on WCAG AA
(4.5:1) contrast. All selectors are best-effort: when no candidate reaches AA
they still return the highest-contrast option instead of failing, because
"no compliant choice" is a valid design state that the UI reports
separately.

Selectors:
 - pick_aa_on_tone(tone) -> black or white hex
 - pick_on_tone_with_opacity(tone, high=, low=) -> "white" | "black", measured
   after blending each candidate over the tone at both emphasis opacities
 - pick_min_alpha_for_aa(tone, dot, ladder) -> smallest ladder opacity that
   still reaches AA (low-emphasis dot indicators)
 - pick_aa_color_step_in_family(bg, steps, preferred) -> PaletteStep
 - find_aa_compliant_step(surface, steps, start, opacity) -> PaletteStep | None,
   walking a family outward from a start level (500, 600, 400, 700, ...)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Literal, Mapping, Optional, Sequence, Tuple

from config import settings

from .color_mixing import blend_over, normalize_hex
from .contrast import contrast_ratio
from ..documents import tokens_root

__all__ = [
    "OnTone",
    "PaletteStep",
    "OpacityToken",
    "pick_aa_on_tone",
    "pick_on_tone_with_opacity",
    "normalize_opacity",
    "opacity_tokens",
    "opacity_ladder",
    "pick_min_alpha_for_aa",
    "pick_aa_color_step_in_family",
    "alternating_level_order",
    "find_aa_compliant_step",
]

OnTone = Literal["white", "black"]


@dataclass(frozen=True)
class PaletteStep:
    level: str
    hex: str


@dataclass(frozen=True)
class OpacityToken:
    name: str
    value: float


def pick_aa_on_tone(
    tone: Optional[str],
    *,
    black: str = settings.CORE_BLACK,
    white: str = settings.CORE_WHITE,
) -> str:
    """Choose black or white text for ``tone``.

    Both pass AA -> the higher contrast one; one passes -> it; neither ->
    the higher contrast one anyway.
    """
    if not tone:
        return black
    c_black = contrast_ratio(tone, black)
    c_white = contrast_ratio(tone, white)
    aa = settings.AA_CONTRAST
    if c_black >= aa and c_white >= aa:
        return black if c_black >= c_white else white
    if c_black >= aa:
        return black
    if c_white >= aa:
        return white
    return black if c_black >= c_white else white


def pick_on_tone_with_opacity(
    tone: str,
    *,
    high: float = settings.DEFAULT_HIGH_EMPHASIS,
    low: float = settings.DEFAULT_LOW_EMPHASIS,
    black: str = settings.CORE_BLACK,
    white: str = settings.CORE_WHITE,
) -> OnTone:
    """Choose the core color for text rendered on ``tone`` at two emphases.

    A candidate is preferred outright only if it passes AA at both the high
    and the low emphasis opacity. Otherwise the low emphasis case, being the
    harder one, decides whenever exactly one candidate passes it.
    """
    aa = settings.AA_CONTRAST
    white = normalize_hex(white) or settings.CORE_WHITE
    black = normalize_hex(black) or settings.CORE_BLACK

    white_base = contrast_ratio(tone, white)
    black_base = contrast_ratio(tone, black)

    white_high = contrast_ratio(tone, blend_over(white, tone, high))
    white_low = contrast_ratio(tone, blend_over(white, tone, low))
    black_high = contrast_ratio(tone, blend_over(black, tone, high))
    black_low = contrast_ratio(tone, blend_over(black, tone, low))

    white_high_ok, white_low_ok = white_high >= aa, white_low >= aa
    black_high_ok, black_low_ok = black_high >= aa, black_low >= aa
    white_both = white_high_ok and white_low_ok
    black_both = black_high_ok and black_low_ok

    if white_both and black_both:
        if abs(white_base - black_base) > 1.0:
            return "white" if white_base >= black_base else "black"
        return "white" if white_low >= black_low else "black"

    if white_both:
        return "white"
    if black_both:
        return "black"

    if white_low_ok != black_low_ok:
        return "white" if white_low_ok else "black"

    if white_high_ok != black_high_ok:
        return "white" if white_high_ok else "black"

    if abs(white_base - black_base) > 0.5:
        return "white" if white_base >= black_base else "black"
    return "white" if white_low >= black_low else "black"


def normalize_opacity(value: Any) -> Optional[float]:
    """Coerce a token opacity to (0, 1]; values above 1 are percentages."""
    if isinstance(value, bool):
        return None
    try:
        n = float(value)
    except (TypeError, ValueError):
        return None
    if n != n:  # NaN
        return None
    if n > 1:
        n = n / 100.0
    if n <= 0 or n > 1:
        return None
    return n


def opacity_tokens(tokens: Optional[Mapping[str, Any]]) -> List[OpacityToken]:
    group = tokens_root(tokens).get("opacity")
    if not isinstance(group, Mapping):
        return []
    out: List[OpacityToken] = []
    for name, entry in group.items():
        raw = entry.get("$value") if isinstance(entry, Mapping) else entry
        value = normalize_opacity(raw)
        if value is not None:
            out.append(OpacityToken(str(name), value))
    return out


def _ladder(values: Iterable[float]) -> Tuple[float, ...]:
    vals = {v for v in (normalize_opacity(x) for x in values) if v is not None}
    if not any(abs(v - 1.0) < 1e-6 for v in vals):
        vals.add(1.0)
    return tuple(sorted(vals))


def opacity_ladder(tokens: Optional[Mapping[str, Any]]) -> Tuple[float, ...]:
    """Ascending, deduplicated opacity values of the token set (always has 1.0)."""
    return _ladder(t.value for t in opacity_tokens(tokens))


def pick_min_alpha_for_aa(tone_hex: str, dot_hex: str, ladder: Iterable[float]) -> float:
    """Smallest ladder opacity at which ``dot_hex`` over ``tone_hex`` is AA.

    Falls back to fully opaque (1.0) when nothing on the ladder qualifies.
    """
    for alpha in _ladder(ladder):
        blended = blend_over(dot_hex, tone_hex, alpha)
        if contrast_ratio(blended, tone_hex) >= settings.AA_CONTRAST:
            return alpha
    return 1.0


def pick_aa_color_step_in_family(
    bg_hex: str, steps: Sequence[PaletteStep], preferred_level: Optional[str] = None
) -> PaletteStep:
    aa = settings.AA_CONTRAST
    if preferred_level:
        for step in steps:
            if step.level == preferred_level:
                if contrast_ratio(bg_hex, step.hex) >= aa:
                    return step
                break
    for step in steps:
        if contrast_ratio(bg_hex, step.hex) >= aa:
            return step
    best = steps[0] if steps else PaletteStep("", settings.CORE_BLACK)
    best_c = -1.0
    for step in steps:
        c = contrast_ratio(bg_hex, step.hex)
        if c > best_c:
            best, best_c = step, c
    return best


def alternating_level_order(start: str, levels: Sequence[str]) -> List[str]:
    """Return ``levels`` reordered outward from ``start``: +1, -1, +2, -2 ...

    With the standard ladder and start ``500`` this yields
    500, 600, 400, 700, 300, 800, 200, 900, 100, 1000, 050, 000.
    Unknown start -> empty list.
    """
    if start not in levels:
        return []
    idx = levels.index(start)
    order = [start]
    for offset in range(1, len(levels)):
        up, down = idx + offset, idx - offset
        if up < len(levels):
            order.append(levels[up])
        if down >= 0:
            order.append(levels[down])
    return order


def find_aa_compliant_step(
    surface_hex: str,
    steps: Sequence[PaletteStep],
    start_level: str,
    opacity: float = 1.0,
) -> Optional[PaletteStep]:
    """Walk a family outward from ``start_level`` for an AA step at ``opacity``."""
    by_level = {s.level: s for s in steps}
    for level in alternating_level_order(start_level, [s.level for s in steps]):
        step = by_level[level]
        blended = blend_over(step.hex, surface_hex, opacity)
        if contrast_ratio(surface_hex, blended) >= settings.AA_CONTRAST:
            return step
    return None
