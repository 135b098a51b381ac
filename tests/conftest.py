# Shared document fixtures.
#
# A small token set (neutral + gray families, opacity ladder), a brand
# document with a light theme carrying a three-level neutral palette, and a
# one-entry UI-kit document. Each fixture builds fresh dicts so tests may
# mutate what they receive.

import json
from pathlib import Path

import pytest

from recursica.references import ResolutionContext
from recursica.services import services


def _leaf(value):
    return {"$value": value}


def make_tokens():
    return {
        "tokens": {
            "color": {
                "neutral": {
                    "000": _leaf("#ffffff"),
                    "050": _leaf("#f5f5f5"),
                    "100": _leaf("#e0e0e0"),
                    "500": _leaf("#808080"),
                    "900": _leaf("#111111"),
                    "1000": _leaf("#000000"),
                },
                "gray": {
                    "100": _leaf("#222222"),
                    "500": _leaf("#808080"),
                    "900": _leaf("#eeeeee"),
                },
            },
            "opacity": {
                "solid": _leaf(1),
                "smoky": _leaf(0.84),
                "veiled": _leaf(0.5),
                "faint": _leaf(38),
            },
        }
    }


def _level(tone_level, on_tone):
    return {
        "color": {
            "tone": _leaf(f"{{tokens.color.neutral.{tone_level}}}"),
            "on-tone": _leaf(f"{{brand.palettes.core-colors.{on_tone}}}"),
        }
    }


def make_brand():
    return {
        "brand": {
            "themes": {
                "light": {
                    "palettes": {
                        "core-colors": {
                            "black": _leaf("{tokens.color.neutral.1000}"),
                            "white": _leaf("{tokens.color.neutral.000}"),
                        },
                        "neutral": {
                            # 100 deliberately carries the wrong on-tone
                            "100": _level("100", "white"),
                            "500": _level("500", "black"),
                            "900": _level("900", "white"),
                        },
                    },
                    "text-emphasis": {
                        "high": _leaf("{tokens.opacity.solid}"),
                        "low": _leaf("{tokens.opacity.smoky}"),
                    },
                    "layers": {
                        "layer-0": {
                            "property": {"surface": _leaf("{brand.palettes.neutral.100.color.tone}")},
                        }
                    },
                    "state": _leaf({"disabled": "{tokens.opacity.veiled}"}),
                },
                "dark": {
                    "palettes": {
                        "neutral": {
                            "500": {"color": {"tone": _leaf("{tokens.color.neutral.900}")}},
                        }
                    }
                },
            }
        }
    }


def make_ui_kit():
    return {
        "ui-kit": {
            "0": {
                "global": {
                    "form": {
                        "indicator": {
                            "color": {"required-asterisk": _leaf("{brand.palettes.core-colors.black}")},
                        }
                    }
                }
            }
        }
    }


@pytest.fixture
def tokens_doc():
    return make_tokens()


@pytest.fixture
def brand_doc():
    return make_brand()


@pytest.fixture
def ui_kit_doc():
    return make_ui_kit()


@pytest.fixture
def light_context(tokens_doc, brand_doc, ui_kit_doc):
    return ResolutionContext.from_documents(tokens_doc, brand_doc, ui_kit_doc, "light")


@pytest.fixture
def write_json(tmp_path):
    def _write(name, data) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def isolated_services():
    """Run a test against an empty service registry, restoring it afterwards."""
    saved = {key: services.get(key) for key in services.list_keys()}
    services.clear()
    yield services
    services.clear()
    for key, value in saved.items():
        services.register(key, value)
