"""Audit report formatting and summary."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from config import settings

from .auditor import collect_bindings
from .environment import AuditEnvironment, BrokenReason, BrokenReference

__all__ = [
    "AuditSummary",
    "summarize_audit",
    "format_broken_references_report",
    "broken_references_to_dicts",
]

_TITLES = {
    BrokenReason.NOT_DEFINED: "Not Defined",
    BrokenReason.CIRCULAR: "Circular Reference",
    BrokenReason.INVALID_SYNTAX: "Invalid Syntax",
    BrokenReason.BRACE_NOTATION: "Brace Notation (unresolved)",
}


@dataclass
class AuditSummary:
    total_vars: int = 0
    broken_refs: int = 0
    missing_vars: List[str] = field(default_factory=list)
    all_vars: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_vars": self.total_vars,
            "broken_refs": self.broken_refs,
            "missing_vars": list(self.missing_vars),
            "all_vars": list(self.all_vars),
        }


def summarize_audit(
    env: Optional[AuditEnvironment],
    broken: Sequence[BrokenReference],
    prefix: str = settings.CSS_VAR_PREFIX,
) -> AuditSummary:
    if env is None:
        return AuditSummary()
    bindings, _ = collect_bindings(env, prefix)
    all_vars = set(bindings)
    for scope in env.scopes():
        all_vars |= {n for n in scope.names() if n.startswith(prefix)}
    missing = sorted({b.referenced_var for b in broken if b.reason is BrokenReason.NOT_DEFINED})
    return AuditSummary(
        total_vars=len(all_vars),
        broken_refs=len(broken),
        missing_vars=missing,
        all_vars=sorted(all_vars),
    )


def format_broken_references_report(broken: Sequence[BrokenReference]) -> str:
    """Human readable report grouped by reason."""
    if not broken:
        return "No broken CSS variable references found."

    lines = [f"Found {len(broken)} broken CSS variable reference(s):", ""]
    for reason in BrokenReason:
        group = [b for b in broken if b.reason is reason]
        if not group:
            continue
        lines.append(f"{_TITLES[reason]} ({len(group)}):")
        for ref in group:
            where = f" [{ref.location.value}{' ' + ref.element if ref.element else ''}]"
            lines.append(f"  - {ref.variable}{where}")
            if reason is not BrokenReason.INVALID_SYNTAX:
                lines.append(f"    -> References: {ref.referenced_var}")
            if reason is not BrokenReason.CIRCULAR:
                lines.append(f"    -> Value: {ref.value}")
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"


def broken_references_to_dicts(broken: Sequence[BrokenReference]) -> List[Dict[str, Any]]:
    return [b.to_dict() for b in broken]
