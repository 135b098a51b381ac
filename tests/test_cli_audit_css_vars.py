from __future__ import annotations

import json
from pathlib import Path

from cli import audit_css_vars

BROKEN_PAGE = """<html><head>
<style>:root { --recursica-a: var(--recursica-missing); }</style>
</head><body><p>x</p></body></html>"""

CLEAN_PAGE = """<html><head><link rel="stylesheet" href="theme.css"></head>
<body><p style="color: var(--recursica-a)">x</p></body></html>"""


def _page(tmp_path: Path, html: str, name: str = "index.html") -> Path:
    path = tmp_path / name
    path.write_text(html, encoding="utf-8")
    return path


def test_broken_page_text_report(tmp_path, capsys):
    code = audit_css_vars.main([str(_page(tmp_path, BROKEN_PAGE))])
    out = capsys.readouterr().out
    assert code == 1
    assert out.startswith("Found 1 broken CSS variable reference(s):")
    assert "Not Defined (1):" in out
    assert "--recursica-missing" in out


def test_clean_page_with_linked_sheet(tmp_path, capsys):
    (tmp_path / "theme.css").write_text(":root { --recursica-a: #fff; }", encoding="utf-8")
    code = audit_css_vars.main([str(_page(tmp_path, CLEAN_PAGE))])
    assert code == 0
    assert "No broken CSS variable references found." in capsys.readouterr().out


def test_extra_css_files_and_json(tmp_path, capsys):
    css = tmp_path / "extra.css"
    css.write_text("p { --recursica-b: {tokens.color.neutral.500}; }", encoding="utf-8")
    code = audit_css_vars.main([str(_page(tmp_path, CLEAN_PAGE)), "--css", str(css), "--json"])
    payload = json.loads(capsys.readouterr().out)
    assert code == 1
    reasons = sorted(b["reason"] for b in payload["broken"])
    # theme.css is absent here, so --recursica-a is undefined as well
    assert reasons == ["brace-notation", "not-defined"]
    assert payload["summary"]["missing_vars"] == ["--recursica-a"]
    assert payload["summary"]["broken_refs"] == 2


def test_custom_prefix(tmp_path, capsys):
    html = '<html style="--brand-a: var(--brand-b)"><body></body></html>'
    page = _page(tmp_path, html)
    assert audit_css_vars.main([str(page)]) == 0
    capsys.readouterr()
    assert audit_css_vars.main([str(page), "--prefix=--brand-"]) == 1
    assert "--brand-b" in capsys.readouterr().out


def test_unreadable_page(tmp_path, capsys):
    assert audit_css_vars.main([str(tmp_path / "nope.html")]) == 2
    assert "Cannot read input" in capsys.readouterr().err
