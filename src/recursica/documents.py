"""Token, brand and UI-kit document loading.

Responsibilities:
- Load the three JSON documents (tokens, brand/theme, ui-kit) into plain dicts.
- Validate the minimal structure each resolver relies on.
- Build a flattened token index used by the value resolver.

Documents are treated as immutable snapshots: nothing here mutates what it
is given. Writers deep-copy first (see ``palettes`` and ``DocumentStore``).

Usage:
    from recursica.documents import load_tokens_document, build_token_index
    tokens = load_tokens_document("Tokens.json")
    index = build_token_index(tokens)
    index.get("color/neutral/500")
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

__all__ = [
    "DocumentValidationError",
    "TokenIndex",
    "build_token_index",
    "load_json_document",
    "load_tokens_document",
    "load_brand_document",
    "load_ui_kit_document",
    "tokens_root",
    "brand_themes",
    "ui_kit_root",
    "is_leaf",
]


class DocumentValidationError(RuntimeError):
    """Raised when a document is not a mapping or misses a required group."""


def is_leaf(node: Any) -> bool:
    return isinstance(node, Mapping) and "$value" in node


def tokens_root(tokens: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    if not isinstance(tokens, Mapping):
        return {}
    inner = tokens.get("tokens")
    return inner if isinstance(inner, Mapping) else tokens


def brand_themes(theme: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    """Return the mapping keyed by mode (``light`` / ``dark``).

    Accepts ``{"brand": {"themes": {...}}}``, ``{"themes": {...}}`` or a bare
    ``{"light": ..., "dark": ...}`` document.
    """
    if not isinstance(theme, Mapping):
        return {}
    root = theme.get("brand") if isinstance(theme.get("brand"), Mapping) else theme
    themes = root.get("themes")
    return themes if isinstance(themes, Mapping) else root


def ui_kit_root(ui_kit: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    if not isinstance(ui_kit, Mapping):
        return {}
    inner = ui_kit.get("ui-kit")
    return inner if isinstance(inner, Mapping) else ui_kit


@dataclass
class TokenIndex:
    """Flattened view of every ``$value`` leaf in a token document.

    Keys are slash-joined paths below the ``tokens`` root, e.g.
    ``color/neutral/500`` or ``opacity/veiled``.
    """

    values: Dict[str, Any] = field(default_factory=dict)

    def get(self, path: str, default: Any = None) -> Any:
        if not path:
            return default
        key = "/".join(p for p in str(path).replace(".", "/").split("/") if p)
        return self.values.get(key, default)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.get(path) is not None

    def __len__(self) -> int:
        return len(self.values)

    def items(self) -> Iterator[Tuple[str, Any]]:
        return iter(self.values.items())

    def family(self, family: str, group: str = "color") -> Dict[str, Any]:
        """Return ``level -> value`` for one color family (insertion order)."""
        prefix = f"{group}/{family}/"
        return {k[len(prefix):]: v for k, v in self.values.items() if k.startswith(prefix) and "/" not in k[len(prefix):]}


def build_token_index(tokens: Optional[Mapping[str, Any]]) -> TokenIndex:
    index = TokenIndex()

    def _walk(node: Mapping[str, Any], prefix: Tuple[str, ...]) -> None:
        for key, child in node.items():
            if key.startswith("$"):
                continue
            path = prefix + (str(key),)
            if is_leaf(child):
                index.values["/".join(path)] = child["$value"]
            elif isinstance(child, Mapping):
                _walk(child, path)

    _walk(tokens_root(tokens), ())
    return index


def load_json_document(path: str | Path) -> Dict[str, Any]:
    doc_path = Path(path)
    if not doc_path.exists():
        raise FileNotFoundError(f"Document not found: {doc_path}")
    with doc_path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise DocumentValidationError(f"{doc_path.name}: top-level JSON must be an object")
    return data


def load_tokens_document(path: str | Path) -> Dict[str, Any]:
    data = load_json_document(path)
    root = tokens_root(data)
    if not any(isinstance(v, Mapping) for v in root.values()):
        raise DocumentValidationError("Token document has no token groups")
    return data


def load_brand_document(path: str | Path) -> Dict[str, Any]:
    data = load_json_document(path)
    themes = brand_themes(data)
    if not any(mode in themes for mode in ("light", "dark")):
        raise DocumentValidationError("Brand document must define themes.light or themes.dark")
    return data


def load_ui_kit_document(path: str | Path) -> Dict[str, Any]:
    return load_json_document(path)
