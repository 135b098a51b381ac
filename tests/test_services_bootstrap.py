import logging

from recursica.services import (
    ServiceKey,
    ServiceLocator,
    TokenEvent,
    bootstrap_services,
    get_logging_service,
)


def test_bootstrap_registers_and_close_unregisters(tokens_doc, brand_doc):
    locator = ServiceLocator()
    ctx = bootstrap_services(tokens_doc, brand_doc, locator=locator)
    assert set(locator.list_keys()) == {"event_bus", "document_store", "compliance_service"}
    assert locator.get(ServiceKey.DOCUMENT_STORE) is ctx.store
    assert ctx.store.bus is ctx.bus
    assert ctx.compliance.attached
    assert ctx.log_capture is None
    assert ctx.duration_s >= 0
    ctx.close()
    assert locator.list_keys() == []
    assert not ctx.compliance.attached


def test_watched_bootstrap_rechecks_on_family_change(tokens_doc, brand_doc):
    ctx = bootstrap_services(tokens_doc, brand_doc, locator=ServiceLocator())
    seen = []
    ctx.bus.subscribe(TokenEvent.PALETTE_RECHECKED, lambda evt: seen.append(evt.payload["changed"]))
    assert ctx.compliance.change_family("neutral", "gray", "light") is None
    assert seen == [["900"]]
    ctx.close()


def test_unwatched_bootstrap_leaves_compliance_detached(tokens_doc, brand_doc):
    ctx = bootstrap_services(tokens_doc, brand_doc, watch=False, locator=ServiceLocator())
    assert not ctx.compliance.attached
    assert ctx.bus.subscriber_count(TokenEvent.FAMILY_CHANGED) == 0


def test_closing_stale_context_keeps_newer_services(tokens_doc, brand_doc):
    locator = ServiceLocator()
    first = bootstrap_services(tokens_doc, brand_doc, locator=locator)
    second = bootstrap_services(tokens_doc, brand_doc, locator=locator)
    first.close()
    assert locator.get(ServiceKey.EVENT_BUS) is second.bus
    second.close()
    assert locator.list_keys() == []


def test_log_capture_uses_global_registry(isolated_services, tokens_doc, brand_doc):
    root = logging.getLogger()
    before = root.level
    ctx = bootstrap_services(tokens_doc, brand_doc, capture_logs=True, log_capacity=50)
    try:
        assert get_logging_service() is ctx.log_capture
        forwarded = []
        ctx.bus.subscribe(TokenEvent.LOG_RECORD_ADDED, lambda evt: forwarded.append(evt.payload["name"]))
        ctx.compliance.recheck_all("light")
        captured = ctx.log_capture.filter(name_contains="compliance_service")
        assert [e.message for e in captured] == ["rechecked 1 palette(s)"]
        assert "recursica.services.compliance_service" in forwarded
    finally:
        ctx.close()
    assert isolated_services.list_keys() == []
    assert root.level == before
