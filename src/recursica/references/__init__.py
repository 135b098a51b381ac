"""Token reference language: parsing, naming and value resolution."""

from .parser import (  # noqa: F401
    Mode,
    ReferenceKind,
    ParsedReference,
    coerce_mode,
    extract_brace_content,
    parse_token_reference,
    is_token_reference,
    token_reference_uses_token,
)
from .naming import (  # noqa: F401
    BrandShape,
    BrandMatch,
    match_brand_shape,
    brand_css_var_name,
    resolve_token_reference_to_css_var,
    token_to_css_var,
)
from .resolver import (  # noqa: F401
    ResolutionContext,
    resolve_token_reference_to_value,
    descend,
)

__all__ = [
    "Mode",
    "ReferenceKind",
    "ParsedReference",
    "coerce_mode",
    "extract_brace_content",
    "parse_token_reference",
    "is_token_reference",
    "token_reference_uses_token",
    "BrandShape",
    "BrandMatch",
    "match_brand_shape",
    "brand_css_var_name",
    "resolve_token_reference_to_css_var",
    "token_to_css_var",
    "ResolutionContext",
    "resolve_token_reference_to_value",
    "descend",
]
