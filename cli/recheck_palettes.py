"""Recompute palette on-tones and write the updated brand document.

Runs the AA on-tone recheck for the selected palettes (all palettes when
``--palette`` is omitted) and writes the new brand JSON. The input document
is never modified in place unless ``--output`` points at it.

Example:
  python -m cli.recheck_palettes --tokens Tokens.json --brand Brand.json \\
      --mode light --palette neutral --output Brand.rechecked.json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from recursica.documents import DocumentValidationError, load_brand_document, load_tokens_document
from recursica.services import bootstrap_services


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="recheck-palettes", description="Recompute accessible palette on-tones")
    p.add_argument("--tokens", required=True, help="Token document (JSON)")
    p.add_argument("--brand", required=True, help="Brand/theme document (JSON)")
    p.add_argument("--mode", default=None, choices=["light", "dark"], help="Mode to recheck (default: both)")
    p.add_argument("--palette", action="append", default=[], help="Palette key (repeatable)")
    p.add_argument("--output", help="Output path (default: stdout)")
    p.add_argument("--log-jsonl", help="Export captured log records to this JSON Lines file")
    p.add_argument("-v", "--verbose", action="store_true", help="Log recheck details to stderr")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.INFO, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")
    try:
        tokens = load_tokens_document(args.tokens)
        brand = load_brand_document(args.brand)
    except (OSError, ValueError, DocumentValidationError) as exc:
        print(f"Cannot read documents: {exc}", file=sys.stderr)
        return 2

    ctx = bootstrap_services(tokens, brand, watch=False, capture_logs=bool(args.log_jsonl))
    try:
        service = ctx.compliance
        if args.palette:
            modes = [args.mode] if args.mode else ["light", "dark"]
            outcomes = [service.recheck(key, m) for m in modes for key in args.palette]
        else:
            outcomes = service.recheck_all(args.mode)
        if ctx.log_capture is not None:
            ctx.log_capture.export_jsonl(args.log_jsonl, name_contains="recursica")
        theme = ctx.store.snapshot().theme
    finally:
        ctx.close()

    for outcome in outcomes:
        print(
            f"{outcome.palette} ({outcome.mode}): {len(outcome.changed)} changed, "
            f"{len(outcome.non_compliant)} below AA",
            file=sys.stderr,
        )

    text = json.dumps(theme, ensure_ascii=False, indent=2) + "\n"
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
    else:
        sys.stdout.write(text)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
