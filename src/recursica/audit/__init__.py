"""CSS custom property reference auditing."""

from .environment import (  # noqa: F401
    Location,
    BrokenReason,
    Binding,
    BrokenReference,
    StyleScope,
    StyleRule,
    Stylesheet,
    StylesheetAccessError,
    AuditEnvironment,
)
from .auditor import (  # noqa: F401
    Usage,
    collect_bindings,
    extract_usages,
    var_references,
    invalid_var_fragments,
    audit_css_vars,
)
from .html_environment import load_html_environment, parse_css_rules, parse_declarations  # noqa: F401
from .report import (  # noqa: F401
    AuditSummary,
    summarize_audit,
    format_broken_references_report,
    broken_references_to_dicts,
)

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
    "Usage",
    "collect_bindings",
    "extract_usages",
    "var_references",
    "invalid_var_fragments",
    "audit_css_vars",
    "load_html_environment",
    "parse_css_rules",
    "parse_declarations",
    "AuditSummary",
    "summarize_audit",
    "format_broken_references_report",
    "broken_references_to_dicts",
]
