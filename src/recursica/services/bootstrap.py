"""Wire the token services together for a CLI run or an embedding host.

``bootstrap_services`` builds a fresh event bus, document store and
compliance watcher (plus optional log capture), registers them in the
service registry and returns a :class:`ServiceContext`. ``close`` undoes the
registration so repeated bootstraps in one process stay independent.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .compliance_service import ComplianceService
from .document_store import DocumentStore
from .event_bus import EventBus
from .logging_service import LoggingService
from .service_locator import ServiceKey, ServiceLocator, services

_logger = logging.getLogger(__name__)

__all__ = ["ServiceContext", "bootstrap_services"]


@dataclass
class ServiceContext:
    """References created by :func:`bootstrap_services`.

    Attributes
    ----------
    bus: Event bus shared by the store and the compliance watcher
    store: Document store holding the loaded documents
    compliance: On-tone watcher (attached when ``watch`` was requested)
    log_capture: Log capture service, or None when not requested
    locator: Registry the services were registered in
    duration_s: Seconds spent bootstrapping
    """

    bus: EventBus
    store: DocumentStore
    compliance: ComplianceService
    log_capture: Optional[LoggingService]
    locator: ServiceLocator
    duration_s: float
    registered: List[ServiceKey] = field(default_factory=list)

    def close(self) -> None:
        self.compliance.detach()
        if self.log_capture is not None:
            self.log_capture.detach()
        owned: Dict[ServiceKey, Any] = {
            ServiceKey.EVENT_BUS: self.bus,
            ServiceKey.DOCUMENT_STORE: self.store,
            ServiceKey.COMPLIANCE: self.compliance,
            ServiceKey.LOGGING: self.log_capture,
        }
        for key in self.registered:
            # a later bootstrap may have replaced the entry
            if self.locator.try_get(key) is owned[key]:
                self.locator.unregister(key)
        self.registered = []


def bootstrap_services(
    tokens: Mapping[str, Any],
    theme: Mapping[str, Any],
    ui_kit: Optional[Mapping[str, Any]] = None,
    *,
    watch: bool = True,
    capture_logs: bool = False,
    log_capacity: int = 500,
    locator: Optional[ServiceLocator] = None,
) -> ServiceContext:
    started = time.perf_counter()
    registry = locator if locator is not None else services
    bus = EventBus()
    store = DocumentStore(tokens, theme, ui_kit, bus=bus)
    compliance = ComplianceService(store)
    log_capture = LoggingService(log_capacity) if capture_logs else None

    entries: List[tuple] = [
        (ServiceKey.EVENT_BUS, bus),
        (ServiceKey.DOCUMENT_STORE, store),
        (ServiceKey.COMPLIANCE, compliance),
    ]
    if log_capture is not None:
        entries.append((ServiceKey.LOGGING, log_capture))
    # each bootstrap owns a fresh set of services
    for key, value in entries:
        registry.register(key, value, allow_override=True)

    if log_capture is not None:
        log_capture.attach()
    if watch:
        compliance.attach()

    ctx = ServiceContext(
        bus=bus,
        store=store,
        compliance=compliance,
        log_capture=log_capture,
        locator=registry,
        duration_s=time.perf_counter() - started,
        registered=[key for key, _ in entries],
    )
    _logger.debug("services ready in %.4fs: %s", ctx.duration_s, ", ".join(k.value for k in ctx.registered))
    return ctx
