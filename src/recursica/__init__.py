"""Recursica token core public API.

Curated surface for CLIs and tests. Subpackages stay importable by
namespace (``from recursica import design, audit``) rather than being
flattened here.

Import order: ``documents`` and ``references`` load before ``design``,
whose palette module depends on the resolver.
"""

from __future__ import annotations

from . import documents  # noqa: F401
from . import references  # noqa: F401
from . import design  # noqa: F401
from . import audit  # noqa: F401
from . import services  # noqa: F401

from .documents import (  # noqa: F401
    DocumentValidationError,
    TokenIndex,
    build_token_index,
    load_tokens_document,
    load_brand_document,
    load_ui_kit_document,
)
from .references import (  # noqa: F401
    Mode,
    ParsedReference,
    ReferenceKind,
    ResolutionContext,
    parse_token_reference,
    resolve_token_reference_to_css_var,
    resolve_token_reference_to_value,
)
from .audit import AuditEnvironment, BrokenReference, audit_css_vars  # noqa: F401

__version__ = "0.1.0"

__all__ = [
    "documents",
    "references",
    "design",
    "audit",
    "services",
    "DocumentValidationError",
    "TokenIndex",
    "build_token_index",
    "load_tokens_document",
    "load_brand_document",
    "load_ui_kit_document",
    "Mode",
    "ParsedReference",
    "ReferenceKind",
    "ResolutionContext",
    "parse_token_reference",
    "resolve_token_reference_to_css_var",
    "resolve_token_reference_to_value",
    "AuditEnvironment",
    "BrokenReference",
    "audit_css_vars",
    "__version__",
]
