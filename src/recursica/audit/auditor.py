"""CSS custom property reference auditor.

Walks an :class:`AuditEnvironment` and reports every ``--recursica-*``
reference that cannot work at runtime:

- ``not-defined``     ``var(--recursica-x)`` where ``--recursica-x`` is set nowhere
- ``circular``        a ``var()`` chain that comes back to a name it already visited
- ``invalid-syntax``  a ``var(`` whose argument cannot be read
- ``brace-notation``  a value still in ``{tokens...}`` form, i.e. a reference that
                      escaped resolution entirely

Passes:
 1. collect bindings (root inline, root computed, stylesheet rules, elements)
 2. extract ``var()`` usages from every property value, custom or not
 3. existence check with two exemptions (component instance variables and
    the ``var(--component-var, var(--recursica-...))`` fallback pattern)
 4. circular check per existing reference (fresh visited set, depth capped;
    loop-free names are settled once per audit)
 5. syntax check

The audit is a batch diagnostic; it scans the whole environment on every
call and never raises for malformed input.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Pattern, Set, Tuple

from config import settings

from ..references.parser import extract_brace_content
from .environment import (
    AuditEnvironment,
    Binding,
    BrokenReason,
    BrokenReference,
    Location,
    StylesheetAccessError,
)

_logger = logging.getLogger(__name__)

__all__ = [
    "Usage",
    "collect_bindings",
    "extract_usages",
    "var_references",
    "invalid_var_fragments",
    "audit_css_vars",
]

_VAR_OPEN_RE = re.compile(r"var\s*\(")
_VAR_ARG_RE = re.compile(r"\s*(--[A-Za-z0-9_-]+)\s*[,)]")
_FALLBACK_RE = re.compile(r"var\s*\(\s*(--[A-Za-z0-9_-]+)\s*,\s*var\s*\(\s*(--[A-Za-z0-9_-]+)")


@dataclass(frozen=True)
class Usage:
    """One property value that references ``var(<prefix>...)`` names."""

    variable: str
    value: str
    referenced: Tuple[str, ...]
    location: Location
    element: Optional[str] = None


def _usage_pattern(prefix: str) -> Pattern[str]:
    return re.compile(r"var\s*\(\s*(" + re.escape(prefix) + r"[A-Za-z0-9_-]*)")


def var_references(value: str, prefix: str = settings.CSS_VAR_PREFIX) -> List[str]:
    """Names with ``prefix`` referenced through ``var()`` in ``value``, in order."""
    if not value or "var" not in value:
        return []
    return _usage_pattern(prefix).findall(value)


def invalid_var_fragments(value: str) -> List[str]:
    """Fragments of ``value`` starting at a ``var(`` whose argument is unreadable."""
    out: List[str] = []
    for m in _VAR_OPEN_RE.finditer(value or ""):
        if _VAR_ARG_RE.match(value, m.end()) is None:
            out.append(value[m.start():].strip())
    return out


def _is_brace_notation(value: str) -> bool:
    return extract_brace_content(value) is not None


def _iter_sources(env: AuditEnvironment) -> Iterator[Tuple[Mapping[str, str], Location, Optional[str]]]:
    """Property listings in collection order."""
    yield env.root.inline, Location.ROOT_INLINE, None
    yield env.root.computed, Location.ROOT_COMPUTED, None
    for sheet in env.stylesheets:
        try:
            rules = sheet.rules
        except StylesheetAccessError as exc:
            _logger.debug("skipping stylesheet: %s", exc)
            continue
        for rule in rules:
            yield rule.declarations, Location.STYLESHEET, rule.selector
    for scope in env.elements:
        yield scope.computed, Location.ELEMENT_COMPUTED, scope.label
        yield scope.inline, Location.ELEMENT_INLINE, scope.label


def collect_bindings(
    env: AuditEnvironment, prefix: str = settings.CSS_VAR_PREFIX
) -> Tuple[Dict[str, Binding], List[BrokenReference]]:
    """Collect every ``prefix`` custom property and any brace-notation faults.

    The first source to define a name sets its value; a later inline source
    replaces a value that came from a computed or stylesheet source.
    """
    bindings: Dict[str, Binding] = {}
    faults: List[BrokenReference] = []
    for listing, location, element in _iter_sources(env):
        for name, raw in listing.items():
            if not name.startswith(prefix):
                continue
            value = str(raw).strip()
            current = bindings.get(name)
            if current is None:
                bindings[name] = Binding(name, value, location, {location})
            else:
                current.locations.add(location)
                if location.is_inline and not current.source.is_inline:
                    current.value, current.source = value, location
            if _is_brace_notation(value):
                faults.append(BrokenReference(name, value, value, BrokenReason.BRACE_NOTATION, location, element))
    return bindings, faults


def extract_usages(env: AuditEnvironment, prefix: str = settings.CSS_VAR_PREFIX) -> List[Usage]:
    """Every property value (custom or ordinary) containing ``var(`` usage."""
    pattern = _usage_pattern(prefix)
    usages: List[Usage] = []
    for listing, location, element in _iter_sources(env):
        for name, raw in listing.items():
            value = str(raw).strip()
            if "var" not in value:
                continue
            usages.append(Usage(name, value, tuple(pattern.findall(value)), location, element))
    return usages


def _fallback_exempt(value: str) -> Set[str]:
    """Names used as the fallback of a component variable in ``value``."""
    exempt: Set[str] = set()
    for outer, inner in _FALLBACK_RE.findall(value):
        if outer.startswith(settings.COMPONENT_VAR_PREFIXES):
            exempt.add(inner)
    return exempt


class _CycleFinder:
    """Depth-capped ``var()`` cycle search over one audit's bindings.

    Names whose whole reference subgraph is loop free are found once up
    front; from such a name a walk can only come back to its origin, which
    a breadth-first search answers without enumerating paths.
    """

    def __init__(self, values: Mapping[str, str], prefix: str, max_depth: int) -> None:
        self._refs: Dict[str, Tuple[str, ...]] = {
            name: tuple(dict.fromkeys(var_references(value, prefix))) for name, value in values.items()
        }
        self._max_depth = max_depth
        self._loop_free = set(self._refs) - self._leads_to_loop()
        self._verdicts: Dict[Tuple[str, str], bool] = {}

    def _leads_to_loop(self) -> Set[str]:
        # iterative colouring DFS: 1 = on the stack, 2 = finished
        state: Dict[str, int] = {}
        tainted: Set[str] = set()
        for root in self._refs:
            if root in state:
                continue
            state[root] = 1
            stack: List[Tuple[str, Iterator[str]]] = [(root, iter(self._refs[root]))]
            while stack:
                name, children = stack[-1]
                for child in children:
                    if child not in self._refs:
                        continue
                    mark = state.get(child)
                    if mark is None:
                        state[child] = 1
                        stack.append((child, iter(self._refs[child])))
                        break
                    if mark == 1 or child in tainted:
                        tainted.add(name)
                else:
                    stack.pop()
                    state[name] = 2
                    if stack and name in tainted:
                        tainted.add(stack[-1][0])
        return tainted

    def _reaches(self, start: str, target: str, depth: int) -> bool:
        frontier, seen = [start], {start}
        while frontier:
            if target in seen:
                return True
            if depth >= self._max_depth:
                return False
            nxt: List[str] = []
            for name in frontier:
                for ref in self._refs.get(name, ()):
                    if ref not in seen:
                        seen.add(ref)
                        nxt.append(ref)
            frontier, depth = nxt, depth + 1
        return False

    def _walk(self, origin: str, name: str, seen: FrozenSet[str], depth: int) -> bool:
        if name in seen:
            return True
        if name in self._loop_free:
            return self._reaches(name, origin, depth)
        if depth >= self._max_depth:
            return False
        nxt = seen | {name}
        return any(self._walk(origin, ref, nxt, depth + 1) for ref in self._refs.get(name, ()))

    def closes_cycle(self, origin: str, start: str) -> bool:
        """True when following ``start`` comes back to ``origin`` or loops."""
        key = (origin, start)
        if key not in self._verdicts:
            self._verdicts[key] = self._walk(origin, start, frozenset({origin}), 0)
        return self._verdicts[key]


def _dedupe(items: Iterable[BrokenReference]) -> List[BrokenReference]:
    seen: Set[Tuple[str, str, BrokenReason]] = set()
    out: List[BrokenReference] = []
    for item in items:
        if item.key in seen:
            continue
        seen.add(item.key)
        out.append(item)
    return out


def audit_css_vars(
    env: Optional[AuditEnvironment], prefix: str = settings.CSS_VAR_PREFIX
) -> List[BrokenReference]:
    """Return the broken references of ``env`` (empty when ``env`` is None)."""
    if env is None:
        return []

    bindings, broken = collect_bindings(env, prefix)
    cycles = _CycleFinder({name: b.value for name, b in bindings.items()}, prefix, settings.AUDIT_MAX_DEPTH)
    present: Set[str] = set(bindings)
    for scope in env.scopes():
        present |= {n for n in scope.names() if scope.has(n)}

    for usage in extract_usages(env, prefix):
        exempt = _fallback_exempt(usage.value)
        for ref in usage.referenced:
            if ref not in present:
                if ref in settings.COMPONENT_INSTANCE_VARS or ref in exempt:
                    continue
                broken.append(
                    BrokenReference(usage.variable, usage.value, ref, BrokenReason.NOT_DEFINED, usage.location, usage.element)
                )
                continue
            if cycles.closes_cycle(usage.variable, ref):
                broken.append(
                    BrokenReference(usage.variable, usage.value, ref, BrokenReason.CIRCULAR, usage.location, usage.element)
                )
        for fragment in invalid_var_fragments(usage.value):
            broken.append(
                BrokenReference(
                    usage.variable, usage.value, fragment, BrokenReason.INVALID_SYNTAX, usage.location, usage.element
                )
            )

    result = _dedupe(broken)
    _logger.info("css var audit: %d binding(s), %d broken reference(s)", len(bindings), len(result))
    return result
