"""Reference → CSS custom property name resolution.

Pure, static naming: no document traversal happens here. A parsed reference
is mapped to the custom property the styling layer declares for it.

Naming convention::

    token   {tokens.color.neutral.500}
            --recursica-tokens-color-neutral-500
    ui-kit  {ui-kit.0.global.form.indicator.color.required-asterisk}
            --recursica-ui-kit-global-form-indicator-color-required-asterisk
    brand   {brand.palettes.neutral.500.color.tone}   (mode=light)
            --recursica-brand-themes-light-palettes-neutral-500-tone

Brand names come from an ordered table of known brand sub-structures
(:class:`BrandShape`). Each entry owns its pattern and named capture groups;
the first entry whose pattern matches the dotted path wins. Paths that match
no entry have no name.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Pattern, Sequence, Tuple

from config import settings

from .parser import Mode, ParsedReference, ReferenceKind, coerce_mode, parse_token_reference

__all__ = [
    "BrandShape",
    "BrandMatch",
    "match_brand_shape",
    "brand_css_var_name",
    "resolve_token_reference_to_css_var",
    "token_to_css_var",
]


class BrandShape(str, Enum):
    DIMENSION = "dimension"
    TYPOGRAPHY = "typography"
    LAYER_PROPERTY = "layer-property"
    LAYER_ELEMENT = "layer-element"
    CORE_COLOR_STATE = "core-color-state"
    CORE_COLOR = "core-color"
    PALETTE_COLOR = "palette-color"
    PALETTE_LEVEL = "palette-level"
    PALETTE_DEFAULT = "palette-default"
    PALETTE_STATUS = "palette-status"
    PALETTE_BLACK_WHITE = "palette-black-white"
    ELEVATION = "elevation"
    ELEVATION_PROPERTY = "elevation-property"
    STATE = "state"
    TEXT_EMPHASIS = "text-emphasis"


@dataclass(frozen=True)
class BrandMatch:
    shape: BrandShape
    fields: Mapping[str, str]

    def __getitem__(self, key: str) -> str:
        return self.fields[key]


def _hyphen(value: str) -> str:
    return value.replace(".", "-")


def _palette_level(level: str) -> str:
    return "primary" if level.lower() == "default" else level


# (shape, pattern, builder) where builder(fields, mode) returns the name
# suffix after the prefix.
_Builder = Callable[[Mapping[str, str], str], str]

_BRAND_TABLE: Sequence[Tuple[BrandShape, Pattern[str], _Builder]] = (
    (
        BrandShape.DIMENSION,
        re.compile(r"^dimensions?\.(?P<rest>.+)$", re.IGNORECASE),
        lambda f, m: f"brand-dimensions-{_hyphen(f['rest'])}",
    ),
    (
        BrandShape.TYPOGRAPHY,
        re.compile(r"^typography\.(?P<rest>.+)$", re.IGNORECASE),
        lambda f, m: f"brand-typography-{_hyphen(f['rest'])}",
    ),
    (
        BrandShape.LAYER_PROPERTY,
        re.compile(r"^layers?\.(?:layer-)?(?P<layer>\d+)\.property\.(?P<prop>.+)$", re.IGNORECASE),
        lambda f, m: f"brand-themes-{m}-layer-layer-{f['layer']}-property-{_hyphen(f['prop'])}",
    ),
    (
        BrandShape.LAYER_ELEMENT,
        re.compile(r"^layers?\.(?:layer-)?(?P<layer>\d+)\.elements?\.(?P<element>.+)$", re.IGNORECASE),
        lambda f, m: (
            f"brand-themes-{m}-layer-layer-{f['layer']}-property-element-"
            + ("interactive-color" if f["element"] == "interactive" else _hyphen(f["element"]))
        ),
    ),
    (
        BrandShape.CORE_COLOR_STATE,
        re.compile(
            r"^palettes?\.core-colors?\.(?P<color>[a-z0-9-]+)\.(?P<state>[a-z0-9-]+)\.(?P<part>tone|on-tone)$",
            re.IGNORECASE,
        ),
        lambda f, m: f"brand-themes-{m}-palettes-core-{f['color']}-{f['state']}-{f['part']}",
    ),
    (
        BrandShape.CORE_COLOR,
        re.compile(
            r"^palettes?\.core-colors?\.(?P<color>alert|warning|success|interactive|black|white)$",
            re.IGNORECASE,
        ),
        lambda f, m: f"brand-themes-{m}-palettes-core-{f['color']}",
    ),
    (
        BrandShape.PALETTE_COLOR,
        re.compile(
            r"^palettes?\.(?P<palette>[a-z0-9-]+)\.(?P<level>[a-z0-9-]+)\.color\.(?P<part>tone|on-tone)$",
            re.IGNORECASE,
        ),
        lambda f, m: f"brand-themes-{m}-palettes-{f['palette']}-{_palette_level(f['level'])}-{f['part']}",
    ),
    (
        BrandShape.PALETTE_LEVEL,
        re.compile(
            r"^palettes?\.(?P<palette>[a-z0-9-]+)\.(?P<level>\d+|default|primary)\.(?P<part>tone|on-tone)$",
            re.IGNORECASE,
        ),
        lambda f, m: f"brand-themes-{m}-palettes-{f['palette']}-{_palette_level(f['level'])}-{f['part']}",
    ),
    (
        BrandShape.PALETTE_DEFAULT,
        re.compile(r"^palettes?\.(?P<palette>[a-z0-9-]+)\.(?:default|primary)$", re.IGNORECASE),
        lambda f, m: f"brand-themes-{m}-palettes-{f['palette']}-primary-tone",
    ),
    (
        BrandShape.PALETTE_STATUS,
        re.compile(r"^palettes?\.(?P<color>alert|warning|success)$", re.IGNORECASE),
        lambda f, m: f"brand-themes-{m}-palettes-core-{f['color']}",
    ),
    (
        BrandShape.PALETTE_BLACK_WHITE,
        re.compile(r"^palettes?\.(?P<color>black|white)$", re.IGNORECASE),
        lambda f, m: f"brand-themes-{m}-palettes-core-{f['color']}",
    ),
    (
        BrandShape.ELEVATION,
        re.compile(r"^elevations?\.(?P<key>elevation-\d+)$", re.IGNORECASE),
        lambda f, m: f"brand-themes-{m}-elevations-{f['key']}",
    ),
    (
        BrandShape.ELEVATION_PROPERTY,
        re.compile(r"^elevations?\.elevation-(?P<num>\d+)\.(?P<prop>.+)$", re.IGNORECASE),
        lambda f, m: f"brand-themes-{m}-elevations-elevation-{f['num']}-{_hyphen(f['prop'])}",
    ),
    (
        BrandShape.STATE,
        re.compile(r"^state\.(?P<prop>.+)$", re.IGNORECASE),
        lambda f, m: f"brand-themes-{m}-state-{_hyphen(f['prop'])}",
    ),
    (
        BrandShape.TEXT_EMPHASIS,
        re.compile(r"^text-emphasis\.(?P<emphasis>low|high)$", re.IGNORECASE),
        lambda f, m: f"brand-themes-{m}-text-emphasis-{f['emphasis']}",
    ),
)

_UI_KIT_GLUED_RE = re.compile(r"^ui-kit(\d+)", re.IGNORECASE)


def _lookup(dotted: str) -> Optional[Tuple[BrandMatch, _Builder]]:
    for shape, pattern, builder in _BRAND_TABLE:
        m = pattern.match(dotted)
        if m:
            return BrandMatch(shape, m.groupdict()), builder
    return None


def match_brand_shape(path: Sequence[str] | str) -> Optional[BrandMatch]:
    """Classify a brand path (without the ``brand`` prefix)."""
    dotted = path if isinstance(path, str) else ".".join(path)
    found = _lookup(dotted)
    return found[0] if found else None


def brand_css_var_name(path: Sequence[str] | str, mode: Any = None) -> Optional[str]:
    dotted = path if isinstance(path, str) else ".".join(path)
    found = _lookup(dotted)
    if found is None:
        return None
    match, builder = found
    return f"{settings.CSS_VAR_PREFIX}{builder(match.fields, coerce_mode(mode).value)}"


def _ui_kit_name(parsed: ParsedReference) -> Optional[str]:
    normalized = _UI_KIT_GLUED_RE.sub(r"ui-kit.\1", parsed.normalized_path or ".".join(parsed.path))
    parts = [p for p in normalized.split(".") if p]
    if len(parts) < 3:
        return None
    # drop namespace + mode index
    return f"{settings.CSS_VAR_PREFIX}ui-kit-{'-'.join(parts[2:])}"


def _name_for(parsed: ParsedReference, mode: Any) -> Optional[str]:
    if parsed.kind is ReferenceKind.TOKEN:
        if not parsed.path:
            return None
        return f"{settings.CSS_VAR_PREFIX}tokens-{'-'.join(parsed.path)}"
    if parsed.kind is ReferenceKind.UI_KIT:
        return _ui_kit_name(parsed)
    if parsed.kind is ReferenceKind.BRAND:
        return brand_css_var_name(parsed.path, parsed.mode or mode)
    if _UI_KIT_GLUED_RE.match(parsed.normalized_path):
        # "{ui-kit0.global...}" is a UI-kit reference missing its dot
        return _ui_kit_name(parsed)
    return None


def resolve_token_reference_to_css_var(
    value: Any, mode: Any = Mode.LIGHT, *, wrap: bool = False
) -> Optional[str]:
    """Return the custom property name a reference maps to, or None.

    With ``wrap=True`` the name is returned as ``var(--...)`` ready to be
    used as a declaration value.
    """
    parsed = value if isinstance(value, ParsedReference) else parse_token_reference(value, mode)
    if parsed is None:
        return None
    name = _name_for(parsed, mode)
    if name is None:
        return None
    return f"var({name})" if wrap else name


def token_to_css_var(token_name: str, *, wrap: bool = False) -> Optional[str]:
    """Convert a slash token name (``color/gray/100``) to its variable name."""
    if not isinstance(token_name, str):
        return None
    parts = [p for p in token_name.split("/") if p]
    if not parts:
        return None
    name = f"{settings.CSS_VAR_PREFIX}tokens-{'-'.join(parts)}"
    return f"var({name})" if wrap else name
