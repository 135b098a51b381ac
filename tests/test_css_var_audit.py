import time

import pytest

from recursica.audit import (
    AuditEnvironment,
    BrokenReason,
    Location,
    StyleRule,
    StyleScope,
    Stylesheet,
    StylesheetAccessError,
    audit_css_vars,
    collect_bindings,
    extract_usages,
    invalid_var_fragments,
    var_references,
)


def _audit(bindings):
    return audit_css_vars(AuditEnvironment.from_bindings(bindings))


def test_clean_environment():
    assert _audit({"--recursica-a": "#fff", "--recursica-b": "var(--recursica-a)"}) == []
    assert audit_css_vars(None) == []


def test_not_defined():
    broken = _audit({"--recursica-a": "var(--recursica-missing)"})
    assert len(broken) == 1
    ref = broken[0]
    assert ref.reason is BrokenReason.NOT_DEFINED
    assert ref.variable == "--recursica-a"
    assert ref.referenced_var == "--recursica-missing"
    assert ref.location is Location.ROOT_INLINE


def test_circular_pair():
    broken = _audit({"--recursica-a": "var(--recursica-b)", "--recursica-b": "var(--recursica-a)"})
    assert {(b.variable, b.referenced_var) for b in broken} == {
        ("--recursica-a", "--recursica-b"),
        ("--recursica-b", "--recursica-a"),
    }
    assert all(b.reason is BrokenReason.CIRCULAR for b in broken)


def test_self_reference_is_circular():
    broken = _audit({"--recursica-a": "calc(var(--recursica-a) * 2)"})
    assert [b.reason for b in broken] == [BrokenReason.CIRCULAR]


def test_long_acyclic_chain_is_not_circular():
    chain = {f"--recursica-c{i}": f"var(--recursica-c{i + 1})" for i in range(15)}
    chain["--recursica-c15"] = "1px"
    assert _audit(chain) == []


def test_repeated_references_stay_fast():
    graph = {f"--recursica-n{i}": " ".join([f"var(--recursica-n{i + 1})"] * 4) for i in range(10)}
    graph["--recursica-n10"] = "1px"
    start = time.perf_counter()
    assert _audit(graph) == []
    assert time.perf_counter() - start < 1.0


def test_diamond_graph_with_loop_at_the_bottom():
    graph = {}
    for i in range(12):
        graph[f"--recursica-n{i}"] = f"var(--recursica-l{i}) var(--recursica-r{i})"
        graph[f"--recursica-l{i}"] = f"var(--recursica-n{i + 1})"
        graph[f"--recursica-r{i}"] = f"var(--recursica-n{i + 1})"
    graph["--recursica-n12"] = "var(--recursica-end)"
    graph["--recursica-end"] = "var(--recursica-n12)"
    start = time.perf_counter()
    broken = _audit(graph)
    assert time.perf_counter() - start < 1.0
    # only names close enough for the loop to close inside the depth cap
    expected = {"--recursica-n12", "--recursica-end"}
    expected |= {f"--recursica-n{i}" for i in range(8, 12)}
    expected |= {f"--recursica-{side}{i}" for side in "lr" for i in range(7, 12)}
    assert {b.variable for b in broken} == expected
    assert all(b.reason is BrokenReason.CIRCULAR for b in broken)


def test_brace_notation_reported_once():
    broken = _audit({"--recursica-x": "{tokens.color.neutral.500}"})
    assert len(broken) == 1
    assert broken[0].reason is BrokenReason.BRACE_NOTATION
    assert broken[0].value == "{tokens.color.neutral.500}"


def test_brace_notation_counts_once_per_variable():
    env = AuditEnvironment(
        root=StyleScope(":root", inline={"--recursica-a": "{tokens.color.x}"}),
        elements=[StyleScope("p", inline={"--recursica-a": "{tokens.color.y}"})],
    )
    broken = audit_css_vars(env)
    assert [(b.reason, b.value, b.location) for b in broken] == [
        (BrokenReason.BRACE_NOTATION, "{tokens.color.x}", Location.ROOT_INLINE)
    ]


def test_component_instance_vars_are_exempt():
    assert _audit({"--recursica-a": "var(--recursica-tabs-track-gap-width)"}) == []


def test_component_fallback_is_exempt():
    assert _audit({"--recursica-a": "var(--button-bg, var(--recursica-missing))"}) == []
    broken = _audit({"--recursica-a": "var(--card-bg, var(--recursica-missing))"})
    assert [(b.reason, b.referenced_var) for b in broken] == [(BrokenReason.NOT_DEFINED, "--recursica-missing")]


def test_invalid_syntax():
    broken = _audit({"--recursica-a": "var(, --recursica-b)", "--recursica-b": "1px"})
    assert len(broken) == 1
    assert broken[0].reason is BrokenReason.INVALID_SYNTAX
    assert broken[0].referenced_var.startswith("var(")


def test_ordinary_property_usage_on_element():
    env = AuditEnvironment(
        root=StyleScope(":root"),
        elements=[StyleScope("p", computed={"color": "var(--recursica-missing)"})],
    )
    broken = audit_css_vars(env)
    assert len(broken) == 1
    assert broken[0].variable == "color"
    assert broken[0].location is Location.ELEMENT_COMPUTED
    assert broken[0].element == "p"


def test_definition_on_element_counts():
    env = AuditEnvironment(
        root=StyleScope(":root", inline={"--recursica-a": "var(--recursica-local)"}),
        elements=[StyleScope("div", computed={"--recursica-local": "4px"})],
    )
    assert audit_css_vars(env) == []


def test_inaccessible_stylesheet_is_skipped():
    env = AuditEnvironment(
        root=StyleScope(":root"),
        stylesheets=[
            Stylesheet("https://cdn.example.com/x.css", None),
            Stylesheet(None, [StyleRule(".x", {"--recursica-a": "var(--recursica-b)"})]),
        ],
    )
    broken = audit_css_vars(env)
    assert len(broken) == 1
    assert broken[0].location is Location.STYLESHEET
    assert broken[0].element == ".x"
    with pytest.raises(StylesheetAccessError):
        env.stylesheets[0].rules


def test_collect_bindings_inline_wins():
    env = AuditEnvironment(
        root=StyleScope(":root", inline={"--recursica-r": "1px"}, computed={"--recursica-r": "2px", "--recursica-a": "1px"}),
        elements=[StyleScope("div", inline={"--recursica-a": "3px"}, computed={"--recursica-a": "1px"})],
    )
    bindings, faults = collect_bindings(env)
    assert faults == []
    assert bindings["--recursica-r"].value == "1px"
    assert bindings["--recursica-r"].source is Location.ROOT_INLINE
    assert bindings["--recursica-a"].value == "3px"
    assert bindings["--recursica-a"].source is Location.ELEMENT_INLINE
    assert bindings["--recursica-a"].locations == {
        Location.ROOT_COMPUTED,
        Location.ELEMENT_COMPUTED,
        Location.ELEMENT_INLINE,
    }


def test_collect_bindings_respects_prefix():
    env = AuditEnvironment.from_bindings({"--recursica-a": "1px", "--other-b": "2px"})
    bindings, _ = collect_bindings(env)
    assert list(bindings) == ["--recursica-a"]
    bindings, _ = collect_bindings(env, "--other-")
    assert list(bindings) == ["--other-b"]


def test_extract_usages():
    env = AuditEnvironment.from_bindings({"--recursica-a": "var(--recursica-b) var(--x)", "--recursica-b": "1px"})
    usages = extract_usages(env)
    assert {u.location for u in usages} == {Location.ROOT_INLINE, Location.ROOT_COMPUTED}
    assert all(u.referenced == ("--recursica-b",) for u in usages)


def test_var_helpers():
    assert var_references("var(--recursica-a) var( --recursica-b ) var(--other)") == ["--recursica-a", "--recursica-b"]
    assert var_references("") == []
    assert invalid_var_fragments("var(--x, 1px)") == []
    assert invalid_var_fragments("var(--x") == ["var(--x"]
    assert invalid_var_fragments("1px var()") == ["var()"]
