"""Token reference parser.

Turns brace-notation references found in token, brand and UI-kit documents
into a typed :class:`ParsedReference`.

Supported forms::

    {tokens.color.neutral.500}        token reference ("token." also accepted)
    {brand.palettes.neutral.500...}   brand reference ("theme." also accepted)
    {ui-kit.0.global.form...}         UI-kit reference

Brand references are theme-agnostic in source text. A theme qualifier such as
``brand.themes.light.`` or ``brand.dark.`` is stripped and the caller's current
mode is attached instead.

Whitespace is forgiven: ``{ brand themes light palettes neutral .100 }`` and
``{brand.palettes.neutral.100}`` parse to the same reference.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

from config import settings

__all__ = [
    "Mode",
    "ReferenceKind",
    "ParsedReference",
    "coerce_mode",
    "extract_brace_content",
    "parse_token_reference",
    "is_token_reference",
    "token_reference_uses_token",
]


class Mode(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class ReferenceKind(str, Enum):
    TOKEN = "token"
    BRAND = "brand"
    UI_KIT = "ui-kit"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ParsedReference:
    kind: ReferenceKind
    path: Tuple[str, ...]
    mode: Optional[Mode] = None
    normalized_path: str = ""

    @property
    def dotted(self) -> str:
        return ".".join(self.path)


_SPACED_DOT_RE = re.compile(r"\s*\.\s*")
_WHITESPACE_RE = re.compile(r"\s+")
_DOTS_RE = re.compile(r"\.+")

_TOKEN_PREFIX_RE = re.compile(r"^tokens?\.", re.IGNORECASE)
_UI_KIT_PREFIX_RE = re.compile(r"^ui-kit\.", re.IGNORECASE)
_BRAND_PREFIX_RE = re.compile(r"^(?:brand|theme)\.", re.IGNORECASE)
_THEME_PREFIX_RE = re.compile(r"^theme\.", re.IGNORECASE)
_THEMES_QUALIFIER_RE = re.compile(r"^brand\.themes\.(?:light|dark)\.", re.IGNORECASE)
_MODE_QUALIFIER_RE = re.compile(r"^brand\.(?:light|dark)\.", re.IGNORECASE)


def coerce_mode(mode: Any) -> Mode:
    """Accept ``Mode``, ``"light"``/``"Dark"`` style strings or None."""
    if isinstance(mode, Mode):
        return mode
    if isinstance(mode, str):
        try:
            return Mode(mode.strip().lower())
        except ValueError:
            pass
    return Mode(settings.DEFAULT_MODE)


def extract_brace_content(value: Any) -> Optional[str]:
    """Return the normalized interior of a ``{...}`` reference, or None.

    Unwraps ``{"$value": ...}`` first. Non-strings and strings that are not
    exactly brace-delimited are not references.
    """
    if value is None:
        return None
    if isinstance(value, Mapping) and "$value" in value:
        value = value["$value"]
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    if not (trimmed.startswith("{") and trimmed.endswith("}")) or len(trimmed) < 2:
        return None
    inner = trimmed[1:-1].strip()
    inner = _SPACED_DOT_RE.sub(".", inner)
    inner = _WHITESPACE_RE.sub(".", inner)
    inner = _DOTS_RE.sub(".", inner)
    inner = inner.strip(".")
    return inner or None


def _split(path: str) -> Tuple[str, ...]:
    return tuple(p for p in path.split(".") if p)


def parse_token_reference(value: Any, mode: Any = None) -> Optional[ParsedReference]:
    """Parse a reference string (or ``$value`` wrapper) into a ParsedReference.

    ``mode`` is the caller's current theme mode and only affects brand
    references. Unrecognized prefixes yield ``ReferenceKind.UNKNOWN`` rather
    than None so callers can tell "not a reference" from "not resolvable".
    """
    inner = extract_brace_content(value)
    if inner is None:
        return None

    if _TOKEN_PREFIX_RE.match(inner):
        path = _split(_TOKEN_PREFIX_RE.sub("", inner, count=1))
        return ParsedReference(ReferenceKind.TOKEN, path, None, "/".join(path))

    if _UI_KIT_PREFIX_RE.match(inner):
        path = _split(_UI_KIT_PREFIX_RE.sub("", inner, count=1))
        return ParsedReference(ReferenceKind.UI_KIT, path, None, inner)

    if _BRAND_PREFIX_RE.match(inner):
        normalized = _THEME_PREFIX_RE.sub("brand.", inner, count=1)
        normalized = _THEMES_QUALIFIER_RE.sub("brand.", normalized, count=1)
        normalized = _MODE_QUALIFIER_RE.sub("brand.", normalized, count=1)
        parts = _split(normalized)
        if parts and parts[0].lower() == "brand":
            parts = parts[1:]
        current = coerce_mode(mode)
        resolved = f"brand.themes.{current.value}"
        if parts:
            resolved = f"{resolved}.{'.'.join(parts)}"
        return ParsedReference(ReferenceKind.BRAND, parts, current, resolved)

    return ParsedReference(ReferenceKind.UNKNOWN, _split(inner), None, inner)


def is_token_reference(value: Any) -> bool:
    return extract_brace_content(value) is not None


def token_reference_uses_token(value: Any, family: str, level: str) -> bool:
    """True when ``value`` is a ``{tokens.color.<family>.<level>}`` reference.

    Used to find theme entries affected by a core color token change.
    """
    parsed = parse_token_reference(value)
    if parsed is None or parsed.kind is not ReferenceKind.TOKEN:
        return False
    if len(parsed.path) < 3:
        return False
    return parsed.path[0].lower() == "color" and parsed.path[1] == family and parsed.path[2] == level
