"""Build an :class:`AuditEnvironment` from an HTML page and its CSS.

There is no browser here, so "computed" values are approximated:

- ``<style>`` blocks and ``<link rel="stylesheet">`` files (resolved against
  ``base_dir``) become stylesheets, in document order, followed by any
  ``extra_css`` sources
- a linked sheet that is remote or missing becomes an inaccessible sheet,
  the same as a cross-origin sheet in a browser
- an element's computed listing is its parent's custom properties, then every
  matching rule's declarations in source order, then its inline ``style``
- the root scope is ``<html>``; ``:root`` rules apply to it

Specificity and ``!important`` are not modelled: later rules win.
Selector matching uses BeautifulSoup's ``select`` (soupsieve); selectors it
cannot parse never match.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

import soupsieve as sv
from bs4 import BeautifulSoup, Tag

from .environment import AuditEnvironment, StyleRule, StyleScope, Stylesheet

_logger = logging.getLogger(__name__)

__all__ = [
    "parse_declarations",
    "parse_css_rules",
    "load_html_environment",
]

_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_STATEMENT_AT_RULE_RE = re.compile(r"@(?:import|charset|namespace)\b[^;{]*;", re.IGNORECASE)
_DECL_RE = re.compile(r"^\s*(--[A-Za-z0-9_-]+|[A-Za-z-]+)\s*:\s*(.*?)\s*$", re.DOTALL)
_IMPORTANT_RE = re.compile(r"\s*!\s*important\s*$", re.IGNORECASE)
# Conditional groups whose nested rules still apply to a static snapshot
_GROUPING_AT_RULES = ("@media", "@supports", "@layer", "@container")
_NON_RENDERED = {"head", "style", "link", "script", "meta", "title", "noscript", "template", "base"}
_REMOTE_RE = re.compile(r"^(?:[a-z][a-z0-9+.-]*:|//)", re.IGNORECASE)


def _split_top_level(source: str, sep: str) -> Iterable[str]:
    """Split on ``sep`` outside parentheses."""
    buf: List[str] = []
    depth = 0
    for ch in source:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(0, depth - 1)
        if ch == sep and depth == 0:
            yield "".join(buf)
            buf = []
            continue
        buf.append(ch)
    if buf:
        yield "".join(buf)


def parse_declarations(text: str) -> Dict[str, str]:
    """Parse ``prop: value; ...`` into an ordered mapping (last one wins).

    Custom property names keep their case; ordinary property names are
    lower-cased. A trailing ``!important`` is dropped.
    """
    out: Dict[str, str] = {}
    for chunk in _split_top_level(_COMMENT_RE.sub("", text or ""), ";"):
        m = _DECL_RE.match(chunk)
        if not m:
            continue
        name, value = m.group(1), _IMPORTANT_RE.sub("", m.group(2))
        if not name.startswith("--"):
            name = name.lower()
        out[name] = value
    return out


def _top_level_blocks(source: str) -> Iterator[Tuple[str, str]]:
    """Yield ``(head, body)`` for each balanced top-level ``head { body }``.

    A stray ``}`` discards the text before it; an unterminated block at the
    end is dropped.
    """
    depth, start, opened = 0, 0, 0
    for i, ch in enumerate(source):
        if ch == "{":
            if depth == 0:
                opened = i
            depth += 1
        elif ch == "}":
            if depth == 0:
                start = i + 1
                continue
            depth -= 1
            if depth == 0:
                yield " ".join(source[start:opened].split()), source[opened + 1 : i]
                start = i + 1


def parse_css_rules(text: str) -> List[StyleRule]:
    """Flatten a stylesheet into style rules in source order.

    Grouping at-rules are unwrapped where they stand; other at-rules and
    blocks without a selector are skipped.
    """
    source = _STATEMENT_AT_RULE_RE.sub("", _COMMENT_RE.sub("", text or ""))
    rules: List[StyleRule] = []
    pending = [_top_level_blocks(source)]
    while pending:
        block = next(pending[-1], None)
        if block is None:
            pending.pop()
            continue
        selector, body = block
        if selector.startswith("@"):
            if selector.lower().startswith(_GROUPING_AT_RULES):
                pending.append(_top_level_blocks(body))
            continue
        if selector:
            rules.append(StyleRule(selector, parse_declarations(body)))
    return rules


def _linked_sheet(href: Optional[str], base_dir: Optional[Path]) -> Stylesheet:
    if not href or base_dir is None or _REMOTE_RE.match(href):
        return Stylesheet(href, None)
    path = base_dir / href.split("?", 1)[0].split("#", 1)[0]
    if not path.is_file():
        _logger.debug("linked stylesheet not found: %s", path)
        return Stylesheet(href, None)
    return Stylesheet(href, parse_css_rules(path.read_text(encoding="utf-8", errors="ignore")))


def _collect_stylesheets(soup: BeautifulSoup, base_dir: Optional[Path]) -> List[Stylesheet]:
    sheets: List[Stylesheet] = []
    for node in soup.find_all(["style", "link"]):
        if node.name == "style":
            sheets.append(Stylesheet(None, parse_css_rules("".join(str(c) for c in node.contents))))
            continue
        rel = [r.lower() for r in (node.get("rel") or [])]
        if "stylesheet" in rel:
            sheets.append(_linked_sheet(node.get("href"), base_dir))
    return sheets


def _label(tag: Tag) -> str:
    label = tag.name
    if tag.get("id"):
        label += f"#{tag['id']}"
    classes = tag.get("class") or []
    if classes:
        label += "." + ".".join(classes)
    return label


def _rendered_children(tag: Tag) -> List[Tag]:
    return [c for c in tag.find_all(True, recursive=False) if c.name not in _NON_RENDERED]


def _root_selector(selector: str) -> bool:
    return any(part.strip().lower() in (":root", "html") for part in selector.split(","))


class _Cascade:
    """Matches rules against the parsed document once per selector."""

    def __init__(self, soup: BeautifulSoup, rules: Sequence[StyleRule]):
        self._rules = list(rules)
        self._matches: List[Set[int]] = []
        for rule in self._rules:
            try:
                self._matches.append({id(n) for n in soup.select(rule.selector)})
            except sv.SelectorSyntaxError:
                _logger.debug("unsupported selector ignored: %s", rule.selector)
                self._matches.append(set())

    def computed(self, tag: Optional[Tag], inherited: Dict[str, str], inline: Dict[str, str], is_root: bool) -> Dict[str, str]:
        values = {k: v for k, v in inherited.items() if k.startswith("--")}
        for rule, matched in zip(self._rules, self._matches):
            if (tag is not None and id(tag) in matched) or (is_root and _root_selector(rule.selector)):
                values.update(rule.declarations)
        values.update(inline)
        return values


def load_html_environment(
    html: str,
    *,
    extra_css: Sequence[str] = (),
    base_dir: Optional[str | Path] = None,
) -> AuditEnvironment:
    soup = BeautifulSoup(html or "", "html.parser")
    base = Path(base_dir) if base_dir is not None else None
    sheets = _collect_stylesheets(soup, base)
    sheets.extend(Stylesheet(None, parse_css_rules(css)) for css in extra_css)
    cascade = _Cascade(soup, [r for s in sheets if s.accessible for r in s.rules])

    html_tag = soup.find("html")
    root_inline = parse_declarations(html_tag.get("style", "")) if html_tag is not None else {}
    root = StyleScope(
        _label(html_tag) if html_tag is not None else ":root",
        inline=root_inline,
        computed=cascade.computed(html_tag, {}, root_inline, is_root=True),
    )

    elements: List[StyleScope] = []
    # depth-first in document order without recursing per nesting level
    pending: List[Tuple[Tag, Dict[str, str]]] = [
        (child, root.computed) for child in reversed(_rendered_children(html_tag if html_tag is not None else soup))
    ]
    while pending:
        tag, inherited = pending.pop()
        inline = parse_declarations(tag.get("style", ""))
        computed = cascade.computed(tag, inherited, inline, is_root=False)
        elements.append(StyleScope(_label(tag), inline=inline, computed=computed))
        pending.extend((child, computed) for child in reversed(_rendered_children(tag)))

    _logger.debug("html environment: %d element(s), %d stylesheet(s)", len(elements), len(sheets))
    return AuditEnvironment(root=root, elements=elements, stylesheets=sheets)
