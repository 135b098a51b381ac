"""Palette levels and accessible on-tone recheck.

A brand palette maps levels (``000`` … ``1000``) to a tone reference and an
on-tone reference::

    themes.light.palettes.neutral.500.color.tone    {tokens.color.gray.500}
    themes.light.palettes.neutral.500.color.on-tone {brand.palettes.core-colors.white}

On-tones are never hand-set. Whenever a palette's family, the core
black/white colors or the text-emphasis opacities change, the on-tone of
every level is recomputed with :func:`pick_on_tone_with_opacity` and written
back into a *copy* of the theme document (snapshot → transform → publish).
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, MutableMapping, Optional, Sequence, Tuple

from config import settings

from ..references.naming import brand_css_var_name
from ..references.parser import ReferenceKind, coerce_mode, parse_token_reference
from ..references.resolver import ResolutionContext, descend, resolve_token_reference_to_value
from .accessibility import OnTone, pick_on_tone_with_opacity, normalize_opacity
from .color_mixing import blend_over, normalize_hex
from .contrast import contrast_ratio
from ..documents import brand_themes

_logger = logging.getLogger(__name__)

__all__ = [
    "PALETTE_LEVELS",
    "PaletteLevel",
    "RecheckResult",
    "palette_keys",
    "palette_levels",
    "core_colors",
    "emphasis_opacities",
    "pick_on_tone_for_context",
    "on_tone_binding",
    "recheck_palette_on_tones",
    "apply_family_to_palette",
]

PALETTE_LEVELS: Tuple[str, ...] = (
    "000",
    "050",
    "100",
    "200",
    "300",
    "400",
    "500",
    "600",
    "700",
    "800",
    "900",
    "1000",
)
_ALIAS_LEVELS = ("default", "primary")
_CORE_KEY = "core-colors"


@dataclass(frozen=True)
class PaletteLevel:
    family: str
    level: str
    tone: Optional[str]
    on_tone: Optional[OnTone]


@dataclass
class RecheckResult:
    theme: Dict[str, Any]
    changed: List[PaletteLevel] = field(default_factory=list)
    non_compliant: List[PaletteLevel] = field(default_factory=list)

    @property
    def no_changes(self) -> bool:  # noqa: D401 - trivial
        return not self.changed


def _mode_node(theme: Mapping[str, Any], mode: str) -> Mapping[str, Any]:
    node = brand_themes(theme).get(mode)
    return node if isinstance(node, Mapping) else {}


def _palettes(theme: Mapping[str, Any], mode: str) -> Mapping[str, Any]:
    node = descend(_mode_node(theme, mode), ["palettes"])
    return node if isinstance(node, Mapping) else {}


def palette_keys(theme: Mapping[str, Any], mode: Any = None) -> List[str]:
    """Palette keys of ``mode`` excluding the core colors group."""
    m = coerce_mode(mode).value
    return [k for k, v in _palettes(theme, m).items() if k != _CORE_KEY and isinstance(v, Mapping)]


def _resolve_hex(value: Any, context: ResolutionContext) -> Optional[str]:
    resolved = resolve_token_reference_to_value(value, context)
    if isinstance(resolved, Mapping) and "tone" in resolved:
        resolved = resolve_token_reference_to_value(resolved["tone"], context)
    return normalize_hex(resolved)


def core_colors(context: ResolutionContext) -> Tuple[str, str]:
    """Resolved (black, white) core colors of the context's mode."""
    themes = brand_themes(context.theme)
    palettes = descend(themes.get(context.mode.value), ["palettes", _CORE_KEY])
    black = _resolve_hex(descend(palettes, ["black"]), context)
    white = _resolve_hex(descend(palettes, ["white"]), context)
    return black or settings.CORE_BLACK, white or settings.CORE_WHITE


def emphasis_opacities(context: ResolutionContext) -> Tuple[float, float]:
    """Resolved (high, low) text-emphasis opacities of the context's mode."""
    themes = brand_themes(context.theme)
    node = descend(themes.get(context.mode.value), ["text-emphasis"])
    high = normalize_opacity(resolve_token_reference_to_value(descend(node, ["high"]), context))
    low = normalize_opacity(resolve_token_reference_to_value(descend(node, ["low"]), context))
    return (
        high if high is not None else settings.DEFAULT_HIGH_EMPHASIS,
        low if low is not None else settings.DEFAULT_LOW_EMPHASIS,
    )


def pick_on_tone_for_context(tone: str, context: ResolutionContext) -> OnTone:
    high, low = emphasis_opacities(context)
    black, white = core_colors(context)
    return pick_on_tone_with_opacity(tone, high=high, low=low, black=black, white=white)


def _family_of(tone_ref: Any, fallback: str) -> str:
    parsed = parse_token_reference(tone_ref)
    if parsed is not None and parsed.kind is ReferenceKind.TOKEN and len(parsed.path) >= 3:
        return parsed.path[1]
    return fallback


def _on_tone_label(raw: Any, context: ResolutionContext, black: str, white: str) -> Optional[OnTone]:
    parsed = parse_token_reference(raw, context.mode)
    if parsed is not None and parsed.path and parsed.path[-1].lower() in ("white", "black"):
        return parsed.path[-1].lower()  # type: ignore[return-value]
    hex_value = _resolve_hex(raw, context)
    if hex_value == white:
        return "white"
    if hex_value == black:
        return "black"
    return None


def _level_keys(palette: Mapping[str, Any]) -> List[str]:
    return [lvl for lvl in PALETTE_LEVELS + _ALIAS_LEVELS if lvl in palette]


def palette_levels(palette_key: str, context: ResolutionContext) -> List[PaletteLevel]:
    """Current levels of one palette with resolved tone hex and on-tone."""
    palette = descend(_palettes(context.theme or {}, context.mode.value), [palette_key])
    if not isinstance(palette, Mapping):
        return []
    black, white = core_colors(context)
    out: List[PaletteLevel] = []
    for level in _level_keys(palette):
        color = descend(palette, [level, "color"])
        tone_ref = descend(color, ["tone"])
        out.append(
            PaletteLevel(
                family=_family_of(tone_ref, palette_key),
                level=level,
                tone=_resolve_hex(tone_ref, context),
                on_tone=_on_tone_label(descend(color, ["on-tone"]), context, black, white),
            )
        )
    return out


def on_tone_binding(palette_key: str, level: str, mode: Any, choice: OnTone) -> Tuple[str, str]:
    """Custom property name/value pair mirroring an on-tone choice."""
    name = brand_css_var_name(["palettes", palette_key, level, "color", "on-tone"], mode)
    core = brand_css_var_name(["palettes", _CORE_KEY, choice], mode)
    return str(name), f"var({core})"


def _ensure_mapping(parent: MutableMapping[str, Any], key: str) -> MutableMapping[str, Any]:
    node = parent.get(key)
    if not isinstance(node, MutableMapping):
        node = {}
        parent[key] = node
    return node


def recheck_palette_on_tones(
    theme: Mapping[str, Any],
    tokens: Optional[Mapping[str, Any]],
    palette_key: str,
    mode: Any = None,
    ui_kit: Optional[Mapping[str, Any]] = None,
) -> RecheckResult:
    """Recompute every level's on-tone of ``palette_key`` in a copy of ``theme``."""
    context = ResolutionContext.from_documents(tokens, theme, ui_kit, mode)
    new_theme: Dict[str, Any] = copy.deepcopy(dict(theme))
    result = RecheckResult(theme=new_theme)
    mode_value = context.mode.value
    palette = descend(_palettes(new_theme, mode_value), [palette_key])
    if not isinstance(palette, MutableMapping):
        return result

    high, low = emphasis_opacities(context)
    black, white = core_colors(context)
    for current in palette_levels(palette_key, context):
        if current.tone is None:
            continue
        choice = pick_on_tone_with_opacity(current.tone, high=high, low=low, black=black, white=white)
        chosen_hex = white if choice == "white" else black
        updated = PaletteLevel(current.family, current.level, current.tone, choice)
        if contrast_ratio(current.tone, blend_over(chosen_hex, current.tone, low)) < settings.AA_CONTRAST:
            result.non_compliant.append(updated)
        if current.on_tone == choice:
            continue
        color = _ensure_mapping(_ensure_mapping(palette, current.level), "color")
        color["on-tone"] = {"$value": f"{{brand.palettes.{_CORE_KEY}.{choice}}}"}
        result.changed.append(updated)

    if result.non_compliant:
        _logger.warning(
            "palette %s (%s): %d level(s) below AA at low emphasis: %s",
            palette_key,
            mode_value,
            len(result.non_compliant),
            ", ".join(p.level for p in result.non_compliant),
        )
    _logger.info("palette %s (%s) rechecked: %d on-tone change(s)", palette_key, mode_value, len(result.changed))
    return result


def apply_family_to_palette(
    theme: Mapping[str, Any],
    palette_key: str,
    family: str,
    mode: Any = None,
    levels: Sequence[str] = PALETTE_LEVELS,
) -> Dict[str, Any]:
    """Return a copy of ``theme`` whose palette tones reference ``family``."""
    new_theme: Dict[str, Any] = copy.deepcopy(dict(theme))
    mode_value = coerce_mode(mode).value
    mode_node = _ensure_mapping(brand_themes(new_theme), mode_value)  # type: ignore[arg-type]
    palettes = mode_node.get("palettes")
    if isinstance(palettes, MutableMapping) and isinstance(palettes.get("$value"), MutableMapping) and palette_key not in palettes:
        palettes = palettes["$value"]
    elif not isinstance(palettes, MutableMapping):
        palettes = _ensure_mapping(mode_node, "palettes")
    palette = _ensure_mapping(palettes, palette_key)
    for level in levels:
        color = _ensure_mapping(_ensure_mapping(palette, level), "color")
        color["tone"] = {"$value": f"{{tokens.color.{family}.{level}}}"}
    return new_theme
