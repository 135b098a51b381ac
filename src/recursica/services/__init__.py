"""Service layer exports.

 - ``services`` registry and ``EventBus`` channels
 - ``DocumentStore`` (document snapshots + binding map)
 - ``ComplianceService`` (on-tone recheck watcher)
 - ``LoggingService`` (in-process log capture)
 - ``bootstrap_services`` (wires all of the above into the registry)
"""

from .service_locator import (  # noqa: F401
    services,
    ServiceKey,
    ServiceLocator,
    ServiceAlreadyRegisteredError,
    ServiceNotFoundError,
)
from .event_bus import EventBus, TokenEvent, Event, Subscription, TraceEntry  # noqa: F401
from .logging_service import LogEntry, LoggingService, get_logging_service  # noqa: F401
from .document_store import DocumentSnapshot, DocumentStore  # noqa: F401
from .compliance_service import PaletteRecheck, ComplianceService  # noqa: F401
from .bootstrap import ServiceContext, bootstrap_services  # noqa: F401

__all__ = [
    "services",
    "ServiceKey",
    "ServiceLocator",
    "ServiceAlreadyRegisteredError",
    "ServiceNotFoundError",
    "EventBus",
    "TokenEvent",
    "Event",
    "Subscription",
    "TraceEntry",
    "LogEntry",
    "LoggingService",
    "get_logging_service",
    "DocumentSnapshot",
    "DocumentStore",
    "PaletteRecheck",
    "ComplianceService",
    "ServiceContext",
    "bootstrap_services",
]
