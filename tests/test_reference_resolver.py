from recursica.references import (
    Mode,
    ResolutionContext,
    descend,
    resolve_token_reference_to_value,
)


def test_resolve_token(light_context):
    assert resolve_token_reference_to_value("{tokens.color.neutral.500}", light_context) == "#808080"
    assert resolve_token_reference_to_value("{tokens.opacity.faint}", light_context) == 38


def test_resolve_brand_chain(light_context):
    # layer surface -> palette tone -> token
    assert resolve_token_reference_to_value("{brand.layers.layer-0.property.surface}", light_context) == "#e0e0e0"
    assert resolve_token_reference_to_value("{brand.palettes.core-colors.white}", light_context) == "#ffffff"


def test_resolve_brand_uses_context_mode(light_context):
    dark = light_context.with_mode("dark")
    assert dark.mode is Mode.DARK
    assert resolve_token_reference_to_value("{brand.palettes.neutral.500.color.tone}", dark) == "#111111"
    # the qualifier in the source text does not pick the theme
    assert (
        resolve_token_reference_to_value("{brand.themes.dark.palettes.neutral.500.color.tone}", light_context)
        == "#808080"
    )


def test_resolve_through_value_wrapper(light_context):
    # "state" is stored as {"$value": {"disabled": ...}}
    assert resolve_token_reference_to_value("{brand.state.disabled}", light_context) == 0.5
    assert resolve_token_reference_to_value({"$value": "{tokens.color.gray.900}"}, light_context) == "#eeeeee"
    assert resolve_token_reference_to_value({"$value": "#abcdef"}, light_context) == "#abcdef"


def test_resolve_ui_kit(light_context):
    ref = "{ui-kit.0.global.form.indicator.color.required-asterisk}"
    assert resolve_token_reference_to_value(ref, light_context) == "#000000"


def test_non_references_pass_through(light_context):
    assert resolve_token_reference_to_value("#abcdef", light_context) == "#abcdef"
    assert resolve_token_reference_to_value(12, light_context) == 12
    assert resolve_token_reference_to_value(None, light_context) is None


def test_unresolvable_references_are_none(light_context):
    assert resolve_token_reference_to_value("{tokens.color.neutral.555}", light_context) is None
    assert resolve_token_reference_to_value("{brand.palettes.nope.500.color.tone}", light_context) is None
    assert resolve_token_reference_to_value("{ui-kit.0.components.missing}", light_context) is None
    assert resolve_token_reference_to_value("{foo.bar}", light_context) is None


def test_missing_context_is_none():
    empty = ResolutionContext()
    assert resolve_token_reference_to_value("{tokens.color.neutral.500}", empty) is None
    assert resolve_token_reference_to_value("{brand.state.disabled}", empty) is None
    assert resolve_token_reference_to_value("{ui-kit.0.global}", empty) is None


def test_cycle_resolves_to_none():
    theme = {"light": {"a": "{brand.b}", "b": "{brand.a}", "self": "{brand.self}"}}
    ctx = ResolutionContext.from_documents(theme=theme, mode="light")
    assert resolve_token_reference_to_value("{brand.a}", ctx) is None
    assert resolve_token_reference_to_value("{brand.self}", ctx) is None


def test_depth_cap():
    chain = {f"r{i}": f"{{brand.r{i + 1}}}" for i in range(15)}
    chain["r15"] = "#123456"
    ctx = ResolutionContext.from_documents(theme={"light": chain})
    assert resolve_token_reference_to_value("{brand.r0}", ctx) is None
    # a short chain of the same shape resolves
    assert resolve_token_reference_to_value("{brand.r13}", ctx) == "#123456"


def test_descend():
    node = {"a": {"$value": {"b": 1}}, "c": {"b": 2}}
    assert descend(node, ["c", "b"]) == 2
    assert descend(node, ["a", "b"]) == 1
    assert descend(node, ["a", "x"]) is None
    assert descend("leaf", ["a"]) is None
    assert descend(node, []) is node
