import json

import pytest

from recursica.documents import (
    DocumentValidationError,
    brand_themes,
    build_token_index,
    is_leaf,
    load_brand_document,
    load_json_document,
    load_tokens_document,
    load_ui_kit_document,
    tokens_root,
    ui_kit_root,
)


def test_token_index_paths(tokens_doc):
    index = build_token_index(tokens_doc)
    assert index.get("color/neutral/500") == "#808080"
    assert index.get("color.neutral.500") == "#808080"
    assert index.get("opacity/faint") == 38
    assert index.get("color/neutral/555") is None
    assert index.get("", "fallback") == "fallback"
    assert "color/gray/900" in index
    assert "color/gray/950" not in index
    assert len(index) == 13


def test_token_index_family(tokens_doc):
    index = build_token_index(tokens_doc)
    assert index.family("gray") == {"100": "#222222", "500": "#808080", "900": "#eeeeee"}
    assert list(index.family("neutral"))[:3] == ["000", "050", "100"]
    assert index.family("teal") == {}


def test_token_index_without_root_key():
    index = build_token_index({"color": {"teal": {"500": {"$value": "#008080", "$type": "color"}}}})
    assert index.get("color/teal/500") == "#008080"
    assert build_token_index(None).values == {}


def test_root_helpers(brand_doc, ui_kit_doc):
    assert set(brand_themes(brand_doc)) == {"light", "dark"}
    assert set(brand_themes({"themes": {"light": {}}})) == {"light"}
    assert set(brand_themes({"dark": {}})) == {"dark"}
    assert brand_themes(None) == {}
    assert list(ui_kit_root(ui_kit_doc)) == ["0"]
    assert tokens_root({"tokens": {"a": 1}}) == {"a": 1}
    assert is_leaf({"$value": 1})
    assert not is_leaf({"value": 1})


def test_loaders_roundtrip(write_json, tokens_doc, brand_doc, ui_kit_doc):
    assert load_tokens_document(write_json("t.json", tokens_doc)) == tokens_doc
    assert load_brand_document(write_json("b.json", brand_doc)) == brand_doc
    assert load_ui_kit_document(write_json("u.json", ui_kit_doc)) == ui_kit_doc


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_json_document(tmp_path / "missing.json")


def test_load_rejects_non_object(write_json):
    with pytest.raises(DocumentValidationError):
        load_json_document(write_json("list.json", [1, 2]))


def test_load_rejects_bad_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(json.JSONDecodeError):
        load_json_document(path)


def test_structural_validation(write_json):
    with pytest.raises(DocumentValidationError):
        load_tokens_document(write_json("t.json", {"tokens": {}}))
    with pytest.raises(DocumentValidationError):
        load_brand_document(write_json("b.json", {"brand": {"themes": {"sepia": {}}}}))
