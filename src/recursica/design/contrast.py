"""WCAG 2.1 luminance and contrast for ``#rrggbb`` colors.

Bad input never raises here: an unparseable color has luminance 0.0 and
any contrast involving a missing or invalid color is 0.0, so callers can
treat "unknown" as "not compliant".
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Optional, Tuple

from config import settings

from .color_mixing import hex_to_rgb

__all__ = [
    "relative_luminance",
    "contrast_ratio",
    "meets_aa",
    "contrast_failures",
]


def _linearize(byte: int) -> float:
    s = byte / 255.0
    return s / 12.92 if s <= 0.03928 else ((s + 0.055) / 1.055) ** 2.4


# sRGB byte -> linear light
_LINEAR: Tuple[float, ...] = tuple(_linearize(i) for i in range(256))
_WEIGHTS = (0.2126, 0.7152, 0.0722)


def relative_luminance(color: Optional[str]) -> float:
    rgb = hex_to_rgb(color)
    if rgb is None:
        return 0.0
    return sum(w * _LINEAR[c] for w, c in zip(_WEIGHTS, rgb))


def contrast_ratio(a: Optional[str], b: Optional[str]) -> float:
    if hex_to_rgb(a) is None or hex_to_rgb(b) is None:
        return 0.0
    hi, lo = sorted((relative_luminance(a), relative_luminance(b)), reverse=True)
    return (hi + 0.05) / (lo + 0.05)


def meets_aa(a: Optional[str], b: Optional[str], threshold: float = settings.AA_CONTRAST) -> bool:
    return contrast_ratio(a, b) >= threshold


def contrast_failures(
    pairs: Iterable[Tuple[str, str, str]],
    resolve: Optional[Callable[[str], Optional[str]]] = None,
    threshold: float = settings.AA_CONTRAST,
) -> List[str]:
    """Check (foreground, background, label) pairs; return failure messages.

    Foreground and background may be hex colors or references; ``resolve``
    turns them into colors (for example a resolver bound to a context).
    Entries that do not resolve to a color are reported as ``[resolve-error]``.
    """
    failures: List[str] = []
    for fg_ref, bg_ref, label in pairs:
        fg = resolve(fg_ref) if resolve else fg_ref
        bg = resolve(bg_ref) if resolve else bg_ref
        missing = [ref for ref, val in ((fg_ref, fg), (bg_ref, bg)) if hex_to_rgb(val) is None]
        if missing:
            failures.append(f"[resolve-error] {label}: no color for {', '.join(missing)}")
            continue
        ratio = contrast_ratio(fg, bg)
        if ratio < threshold:
            failures.append(f"[contrast-fail] {label}: ratio={ratio:.2f} < {threshold} (fg={fg} bg={bg})")
    return failures
