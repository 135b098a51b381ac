"""Audit the ``--recursica-*`` custom properties of an HTML page.

Loads the page, its ``<style>`` blocks and local ``<link rel="stylesheet">``
files (relative to the page), plus any ``--css`` files, and reports broken
variable references grouped by reason.

Example:
  python -m cli.audit_css_vars build/index.html --css build/theme.css --json

Exit code 0 when no broken references are found, else 1; 2 when an input
file cannot be read.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from config import settings
from recursica.audit import (
    audit_css_vars,
    broken_references_to_dicts,
    format_broken_references_report,
    load_html_environment,
    summarize_audit,
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="audit-css-vars", description="Find broken CSS variable references")
    p.add_argument("page", help="HTML file to audit")
    p.add_argument("--css", nargs="*", default=[], help="Additional stylesheet files")
    p.add_argument("--prefix", default=settings.CSS_VAR_PREFIX, help="Custom property prefix to audit")
    p.add_argument("--json", action="store_true", help="Emit JSON instead of the text report")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    page = Path(args.page)
    try:
        html = page.read_text(encoding="utf-8")
        extra = [Path(p).read_text(encoding="utf-8") for p in args.css]
    except OSError as exc:
        print(f"Cannot read input: {exc}", file=sys.stderr)
        return 2

    env = load_html_environment(html, extra_css=extra, base_dir=page.parent)
    broken = audit_css_vars(env, args.prefix)
    if args.json:
        summary = summarize_audit(env, broken, args.prefix)
        payload = {"summary": summary.to_dict(), "broken": broken_references_to_dicts(broken)}
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        print(format_broken_references_report(broken), end="")
    return 1 if broken else 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
