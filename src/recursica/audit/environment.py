"""Audit environment model.

The auditor never talks to a browser. It consumes a snapshot of the styling
environment instead:

- a root scope (the document element) with inline and computed listings
- element scopes with the same two listings
- stylesheets whose rule listings may be inaccessible (cross-origin or
  unreadable sheets raise :class:`StylesheetAccessError` when read)

Snapshots are built by :mod:`recursica.audit.html_environment` from HTML and
CSS text, or directly from a binding map via
:meth:`AuditEnvironment.from_bindings`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Set, Tuple

__all__ = [
    "Location",
    "BrokenReason",
    "Binding",
    "BrokenReference",
    "StyleScope",
    "StyleRule",
    "Stylesheet",
    "StylesheetAccessError",
    "AuditEnvironment",
]


class Location(str, Enum):
    ROOT_INLINE = "root-inline"
    ROOT_COMPUTED = "root-computed"
    ELEMENT_INLINE = "element-inline"
    ELEMENT_COMPUTED = "element-computed"
    STYLESHEET = "stylesheet"

    @property
    def is_inline(self) -> bool:
        return self in (Location.ROOT_INLINE, Location.ELEMENT_INLINE)


class BrokenReason(str, Enum):
    NOT_DEFINED = "not-defined"
    CIRCULAR = "circular"
    INVALID_SYNTAX = "invalid-syntax"
    BRACE_NOTATION = "brace-notation"


@dataclass
class Binding:
    """A custom property observed somewhere in the environment.

    ``source`` is the location the current ``value`` came from; ``locations``
    lists every place the name was seen.
    """

    name: str
    value: str
    source: Location
    locations: Set[Location] = field(default_factory=set)


@dataclass(frozen=True)
class BrokenReference:
    variable: str
    value: str
    referenced_var: str
    reason: BrokenReason
    location: Location
    element: Optional[str] = None

    @property
    def key(self) -> Tuple[str, str, BrokenReason]:
        """Dedupe key; a variable left in brace notation counts once."""
        if self.reason is BrokenReason.BRACE_NOTATION:
            return self.variable, "", self.reason
        return self.variable, self.referenced_var, self.reason

    def to_dict(self) -> Dict[str, Any]:
        return {
            "variable": self.variable,
            "value": self.value,
            "referenced_var": self.referenced_var,
            "reason": self.reason.value,
            "location": self.location.value,
            "element": self.element,
        }


@dataclass
class StyleScope:
    """Inline and computed property listings of one element."""

    label: str
    inline: Dict[str, str] = field(default_factory=dict)
    computed: Dict[str, str] = field(default_factory=dict)

    def has(self, name: str) -> bool:
        return bool(self.inline.get(name, "").strip() or self.computed.get(name, "").strip())

    def names(self) -> Set[str]:
        return set(self.inline) | set(self.computed)


@dataclass
class StyleRule:
    selector: str
    declarations: Dict[str, str] = field(default_factory=dict)


class StylesheetAccessError(RuntimeError):
    """Raised when the rules of a stylesheet cannot be read."""


class Stylesheet:
    """A stylesheet snapshot; ``rules=None`` marks an inaccessible sheet."""

    def __init__(self, href: Optional[str] = None, rules: Optional[List[StyleRule]] = None):
        self.href = href
        self._rules = rules

    @property
    def accessible(self) -> bool:
        return self._rules is not None

    @property
    def rules(self) -> List[StyleRule]:
        if self._rules is None:
            raise StylesheetAccessError(f"Cannot read rules of stylesheet {self.href or '<inline>'}")
        return self._rules

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        count = len(self._rules) if self._rules is not None else "inaccessible"
        return f"Stylesheet(href={self.href!r}, rules={count})"


@dataclass
class AuditEnvironment:
    root: StyleScope
    elements: List[StyleScope] = field(default_factory=list)
    stylesheets: List[Stylesheet] = field(default_factory=list)

    def scopes(self) -> Iterator[StyleScope]:
        yield self.root
        yield from self.elements

    @classmethod
    def from_bindings(cls, bindings: Mapping[str, str], label: str = ":root") -> "AuditEnvironment":
        """Environment whose only content is ``bindings`` set inline on the root.

        This is how a binding store (name -> value map) is audited without
        rendering any HTML.
        """
        inline = {str(k): str(v) for k, v in bindings.items()}
        return cls(root=StyleScope(label, inline=inline, computed=dict(inline)))
