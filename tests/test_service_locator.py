import pytest

from recursica.services.service_locator import (
    ServiceAlreadyRegisteredError,
    ServiceKey,
    ServiceLocator,
    ServiceNotFoundError,
)


@pytest.fixture
def locator():
    return ServiceLocator()


def test_register_and_get(locator):
    locator.register("config", {"env": "test"})
    assert locator.get("config")["env"] == "test"


def test_double_register_raises(locator):
    locator.register("x", 1)
    with pytest.raises(ServiceAlreadyRegisteredError):
        locator.register("x", 2)
    locator.register("x", 3, allow_override=True)
    assert locator.get("x") == 3


def test_typed_access(locator):
    locator.register("name", "recursica")
    assert locator.get_typed("name", str) == "recursica"
    with pytest.raises(TypeError):
        locator.get_typed("name", int)
    assert locator.try_get_typed("name", int) is None
    assert locator.try_get_typed("missing", str) is None


def test_try_get_default(locator):
    assert locator.try_get("missing", 123) == 123


def test_unregister(locator):
    locator.register("temp", object())
    locator.unregister("temp")
    with pytest.raises(ServiceNotFoundError):
        locator.get("temp")


def test_override_context_restores(locator):
    locator.register("bus", "real")
    with locator.override_context(bus="fake", extra=1):
        assert locator.get("bus") == "fake"
        assert locator.get("extra") == 1
    assert locator.get("bus") == "real"
    assert locator.try_get("extra") is None


def test_list_keys_and_clear(locator):
    locator.register("a", 1)
    locator.register("b", 2)
    assert set(locator.list_keys()) == {"a", "b"}
    locator.clear()
    assert locator.list_keys() == []


def test_global_registry_is_isolated(isolated_services):
    isolated_services.register("foo", 1)
    assert isolated_services.list_keys() == ["foo"]


def test_service_key_and_string_share_a_slot(locator):
    locator.register(ServiceKey.EVENT_BUS, "bus")
    assert locator.get("event_bus") == "bus"
    with pytest.raises(ServiceAlreadyRegisteredError):
        locator.register("event_bus", "other")


def test_origin_tracks_overrides(locator):
    locator.register("store", "real")
    assert locator.origin("store") == "register"
    with locator.override_context(store="fake"):
        assert locator.origin("store") == "override"
    assert locator.origin("store") == "register"
    assert locator.origin("missing") is None
