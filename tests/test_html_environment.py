"""HTML/CSS snapshot builder feeding the css var auditor."""

from recursica.audit import (
    BrokenReason,
    audit_css_vars,
    load_html_environment,
    parse_css_rules,
    parse_declarations,
)

PAGE = """<!doctype html>
<html style="--recursica-inline: 1px">
<head>
<style>
:root { --recursica-a: #fff; --recursica-b: var(--recursica-a); }
.card { --recursica-c: var(--recursica-b); color: var(--recursica-missing); }
@media (min-width: 10px) { .card { --recursica-d: 2px; } }
</style>
<link rel="stylesheet" href="https://cdn.example.com/x.css">
<link rel="stylesheet" href="theme.css">
</head>
<body><div id="main" class="card"><span>hi</span></div></body>
</html>
"""


def _env(tmp_path):
    (tmp_path / "theme.css").write_text(".card span { --recursica-f: var(--recursica-c); }", encoding="utf-8")
    return load_html_environment(PAGE, base_dir=tmp_path)


def test_parse_declarations():
    decls = parse_declarations("Color: Red; --Recursica-X: 1px !important; background: url(a;b); junk")
    assert decls == {"color": "Red", "--Recursica-X": "1px", "background": "url(a;b)"}
    assert parse_declarations("") == {}


def test_parse_css_rules_flattens_and_skips():
    css = """
    /* comment { } */
    @import url(x.css);
    @font-face { font-family: X; src: url(x.woff); }
    a { color: red }
    @supports (display: grid) { @media print { b { --recursica-b: 1px; } } }
    """
    rules = parse_css_rules(css)
    assert [(r.selector, r.declarations) for r in rules] == [
        ("a", {"color": "red"}),
        ("b", {"--recursica-b": "1px"}),
    ]


def test_stylesheets_in_document_order(tmp_path):
    env = _env(tmp_path)
    assert [s.accessible for s in env.stylesheets] == [True, False, True]
    assert env.stylesheets[1].href == "https://cdn.example.com/x.css"


def test_missing_local_sheet_is_inaccessible(tmp_path):
    env = load_html_environment(PAGE, base_dir=tmp_path)
    assert [s.accessible for s in env.stylesheets] == [True, False, False]
    # without a base directory no linked sheet can be read
    env = load_html_environment(PAGE)
    assert [s.accessible for s in env.stylesheets] == [True, False, False]


def test_root_and_element_scopes(tmp_path):
    env = _env(tmp_path)
    assert env.root.label == "html"
    assert env.root.inline == {"--recursica-inline": "1px"}
    assert env.root.computed["--recursica-a"] == "#fff"
    assert [e.label for e in env.elements] == ["body", "div#main.card", "span"]
    div, span = env.elements[1], env.elements[2]
    assert div.computed["--recursica-d"] == "2px"
    assert div.computed["color"] == "var(--recursica-missing)"
    # custom properties inherit, ordinary properties do not
    assert span.computed["--recursica-c"] == "var(--recursica-b)"
    assert span.computed["--recursica-f"] == "var(--recursica-c)"
    assert "color" not in span.computed


def test_audit_page(tmp_path):
    broken = audit_css_vars(_env(tmp_path))
    assert len(broken) == 1
    assert broken[0].reason is BrokenReason.NOT_DEFINED
    assert broken[0].variable == "color"
    assert broken[0].referenced_var == "--recursica-missing"


def test_extra_css_and_unsupported_selectors():
    env = load_html_environment(
        "<html><body><p>x</p></body></html>",
        extra_css=["p { --recursica-x: var(--recursica-y); } p:nonsense(1) { --recursica-z: 1px; }"],
    )
    assert "--recursica-z" not in env.elements[1].computed
    broken = audit_css_vars(env)
    assert [(b.variable, b.referenced_var) for b in broken] == [("--recursica-x", "--recursica-y")]


def test_fragment_without_html_element():
    env = load_html_environment('<div style="--recursica-a: var(--recursica-b)"></div>')
    assert env.root.label == ":root"
    assert [e.label for e in env.elements] == ["div"]
    assert audit_css_vars(env)[0].referenced_var == "--recursica-b"


def test_parse_css_rules_stray_and_unterminated_braces():
    css = "a { color: red } } b { --recursica-b: 1px } c { color: blue"
    assert [(r.selector, r.declarations) for r in parse_css_rules(css)] == [
        ("a", {"color": "red"}),
        ("b", {"--recursica-b": "1px"}),
    ]


def test_parse_css_rules_keeps_order_around_groups():
    css = "a { x: 1 } @media screen { b { x: 2 } @media print { c { x: 3 } } d { x: 4 } } e { x: 5 }"
    assert [r.selector for r in parse_css_rules(css)] == ["a", "b", "c", "d", "e"]


def test_deeply_nested_markup():
    depth = 1500
    page = '<html style="--recursica-a: 1px"><body>' + "<div>" * depth + "</div>" * depth + "</body></html>"
    env = load_html_environment(page)
    assert len(env.elements) == depth + 1
    assert [e.label for e in env.elements[:3]] == ["body", "div", "div"]
    assert env.elements[-1].computed["--recursica-a"] == "1px"
    assert audit_css_vars(env) == []
