"""Resolve a token reference from the command line.

Prints the CSS custom property name a reference maps to and the value it
resolves to through the given documents.

Examples:
  python -m cli.resolve_ref "{tokens.color.neutral.500}" --tokens Tokens.json
  python -m cli.resolve_ref "{brand.palettes.neutral.500.color.tone}" \\
      --tokens Tokens.json --brand Brand.json --mode dark --json

Exit code 0 when the reference parses, 1 when it is not a reference, 2 when
a document cannot be read.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Dict

from recursica.documents import (
    DocumentValidationError,
    load_brand_document,
    load_tokens_document,
    load_ui_kit_document,
)
from recursica.references import (
    ResolutionContext,
    coerce_mode,
    parse_token_reference,
    resolve_token_reference_to_css_var,
    resolve_token_reference_to_value,
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="resolve-ref", description="Resolve a design token reference")
    p.add_argument("reference", help='Reference such as "{tokens.color.neutral.500}"')
    p.add_argument("--tokens", help="Token document (JSON)")
    p.add_argument("--brand", help="Brand/theme document (JSON)")
    p.add_argument("--ui-kit", dest="ui_kit", help="UI-kit document (JSON)")
    p.add_argument("--mode", default=None, choices=["light", "dark"], help="Theme mode for brand references")
    p.add_argument("--json", action="store_true", help="Emit JSON instead of text")
    return p.parse_args(argv)


def _load(args: argparse.Namespace) -> ResolutionContext:
    tokens = load_tokens_document(args.tokens) if args.tokens else None
    theme = load_brand_document(args.brand) if args.brand else None
    ui_kit = load_ui_kit_document(args.ui_kit) if args.ui_kit else None
    return ResolutionContext.from_documents(tokens, theme, ui_kit, args.mode)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        context = _load(args)
    except (OSError, ValueError, DocumentValidationError) as exc:
        print(f"Cannot read documents: {exc}", file=sys.stderr)
        return 2

    mode = coerce_mode(args.mode)
    parsed = parse_token_reference(args.reference, mode)
    if parsed is None:
        print(f"Not a reference: {args.reference}", file=sys.stderr)
        return 1

    value = resolve_token_reference_to_value(args.reference, context)
    payload: Dict[str, Any] = {
        "reference": args.reference,
        "kind": parsed.kind.value,
        "path": list(parsed.path),
        "mode": parsed.mode.value if parsed.mode else None,
        "css_var": resolve_token_reference_to_css_var(parsed, mode),
        "value": value,
    }
    if args.json:
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        print(f"Kind: {payload['kind']}")
        print(f"CSS var: {payload['css_var'] or '-'}")
        print(f"Value: {'-' if value is None else value}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
