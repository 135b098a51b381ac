"""Reference → value resolution.

Walks the token index, the mode-qualified brand document and the UI-kit
document to turn a reference into the concrete value it points at. Whatever
is found is itself resolved again, so chains such as

    brand.palettes.neutral.500.color.tone -> {tokens.color.neutral.500} -> "#808080"

resolve transitively.

Two guards stop ill-formed input:
 - a depth cap (``settings.RESOLVER_MAX_DEPTH``); past it the result is None
 - the set of reference strings already visited on the current chain; a
   reference seen twice is a cycle and also resolves to None

Nothing here raises for malformed documents: missing context, missing keys
and unknown namespaces all resolve to None. Non-reference values pass
through unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, FrozenSet, Mapping, Optional, Sequence

from config import settings

from ..documents import TokenIndex, brand_themes, build_token_index, ui_kit_root
from .parser import Mode, ParsedReference, ReferenceKind, coerce_mode, extract_brace_content, parse_token_reference

_logger = logging.getLogger(__name__)

__all__ = [
    "ResolutionContext",
    "resolve_token_reference_to_value",
    "descend",
]


@dataclass(frozen=True)
class ResolutionContext:
    """Read-only view of the documents a resolution pass may consult."""

    mode: Mode = Mode.LIGHT
    token_index: Optional[TokenIndex] = None
    theme: Optional[Mapping[str, Any]] = None
    ui_kit: Optional[Mapping[str, Any]] = None

    @classmethod
    def from_documents(
        cls,
        tokens: Optional[Mapping[str, Any]] = None,
        theme: Optional[Mapping[str, Any]] = None,
        ui_kit: Optional[Mapping[str, Any]] = None,
        mode: Any = None,
    ) -> "ResolutionContext":
        index = build_token_index(tokens) if tokens is not None else None
        return cls(mode=coerce_mode(mode), token_index=index, theme=theme, ui_kit=ui_kit)

    def with_mode(self, mode: Any) -> "ResolutionContext":
        return ResolutionContext(coerce_mode(mode), self.token_index, self.theme, self.ui_kit)


def descend(node: Any, path: Sequence[str]) -> Any:
    """Follow ``path`` from ``node``.

    At each step a direct key is tried first; if absent and the node is a
    ``$value`` wrapper, the key is looked up one level inside it.
    """
    for part in path:
        if not isinstance(node, Mapping):
            return None
        nxt = node.get(part)
        if nxt is None and isinstance(node.get("$value"), Mapping):
            nxt = node["$value"].get(part)
        node = nxt
    return node


def _lookup(parsed: ParsedReference, context: ResolutionContext) -> tuple[bool, Any]:
    """Return (has_context, raw value) for one parsed reference."""
    if parsed.kind is ReferenceKind.TOKEN:
        if context.token_index is None:
            return False, None
        return True, context.token_index.get(parsed.normalized_path)
    if parsed.kind is ReferenceKind.BRAND:
        if context.theme is None:
            return False, None
        themes = brand_themes(context.theme)
        mode = (parsed.mode or context.mode).value
        return True, descend(themes.get(mode), parsed.path)
    if parsed.kind is ReferenceKind.UI_KIT:
        if context.ui_kit is None:
            return False, None
        return True, descend(ui_kit_root(context.ui_kit), parsed.path)
    return False, None


def resolve_token_reference_to_value(
    value: Any,
    context: ResolutionContext,
    depth: int = 0,
    _visited: FrozenSet[str] = frozenset(),
) -> Any:
    """Resolve ``value`` through the documents in ``context``.

    Returns the final non-reference value, the input itself when it is not a
    reference, or None when the reference cannot be resolved.
    """
    if depth > settings.RESOLVER_MAX_DEPTH:
        _logger.debug("reference depth cap reached (%d)", settings.RESOLVER_MAX_DEPTH)
        return None

    parsed = parse_token_reference(value, context.mode)
    if parsed is None:
        if isinstance(value, Mapping) and "$value" in value:
            return resolve_token_reference_to_value(value["$value"], context, depth + 1, _visited)
        return value

    key = f"{parsed.kind.value}:{parsed.normalized_path}"
    if key in _visited:
        _logger.debug("reference cycle at %s", extract_brace_content(value))
        return None

    has_context, found = _lookup(parsed, context)
    if not has_context or found is None:
        return None
    return resolve_token_reference_to_value(found, context, depth + 1, _visited | {key})
