"""Token document store (snapshot -> transform -> publish).

Holds the current token, theme and UI-kit documents plus the live binding
map (custom property name -> value) that a styling layer would apply.

Documents are value types: :meth:`DocumentStore.snapshot` hands out deep
copies, and writers replace whole documents through :meth:`publish` or
:meth:`transform` instead of mutating shared state. Readers therefore never
observe a half-written document.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field, replace
from threading import RLock
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..audit import AuditEnvironment, BrokenReference, audit_css_vars
from ..references.parser import coerce_mode
from ..references.resolver import ResolutionContext
from .event_bus import EventBus, Subscription, TokenEvent
from .service_locator import ServiceKey, services

_logger = logging.getLogger(__name__)

__all__ = ["DocumentSnapshot", "DocumentStore"]


@dataclass(frozen=True)
class DocumentSnapshot:
    tokens: Dict[str, Any] = field(default_factory=dict)
    theme: Dict[str, Any] = field(default_factory=dict)
    ui_kit: Dict[str, Any] = field(default_factory=dict)

    def with_theme(self, theme: Mapping[str, Any]) -> "DocumentSnapshot":
        return replace(self, theme=dict(theme))


_SnapshotTransform = Callable[[DocumentSnapshot], Optional[DocumentSnapshot]]


class DocumentStore:
    def __init__(
        self,
        tokens: Optional[Mapping[str, Any]] = None,
        theme: Optional[Mapping[str, Any]] = None,
        ui_kit: Optional[Mapping[str, Any]] = None,
        *,
        bus: Optional[EventBus] = None,
    ) -> None:
        self._lock = RLock()
        self._docs = DocumentSnapshot(
            copy.deepcopy(dict(tokens or {})),
            copy.deepcopy(dict(theme or {})),
            copy.deepcopy(dict(ui_kit or {})),
        )
        self._bindings: Dict[str, str] = {}
        self._bus = bus or services.try_get_typed(ServiceKey.EVENT_BUS, EventBus) or EventBus()

    @property
    def bus(self) -> EventBus:
        return self._bus

    # Documents ----------------------------------------------------------
    def snapshot(self) -> DocumentSnapshot:
        with self._lock:
            return copy.deepcopy(self._docs)

    def context(self, mode: Any = None) -> ResolutionContext:
        """Resolution context over a snapshot of the current documents."""
        snap = self.snapshot()
        return ResolutionContext.from_documents(snap.tokens, snap.theme, snap.ui_kit, mode)

    def publish(
        self,
        *,
        tokens: Optional[Mapping[str, Any]] = None,
        theme: Optional[Mapping[str, Any]] = None,
        ui_kit: Optional[Mapping[str, Any]] = None,
    ) -> List[str]:
        """Replace the given documents wholesale; None keeps the current one."""
        replaced: List[str] = []
        with self._lock:
            docs = self._docs
            if tokens is not None:
                docs = replace(docs, tokens=copy.deepcopy(dict(tokens)))
                replaced.append("tokens")
            if theme is not None:
                docs = replace(docs, theme=copy.deepcopy(dict(theme)))
                replaced.append("theme")
            if ui_kit is not None:
                docs = replace(docs, ui_kit=copy.deepcopy(dict(ui_kit)))
                replaced.append("ui_kit")
            self._docs = docs
        if replaced:
            self._bus.publish(TokenEvent.DOCUMENTS_PUBLISHED, {"documents": replaced})
        return replaced

    def transform(self, fn: _SnapshotTransform) -> List[str]:
        """Run ``fn`` on a snapshot and publish what it returns.

        The store lock is held for the whole call so concurrent transforms
        are serialized. ``fn`` returning None publishes nothing.
        """
        with self._lock:
            before = self.snapshot()
            after = fn(before)
            if after is None:
                return []
            current = self._docs
            return self.publish(
                tokens=after.tokens if after.tokens != current.tokens else None,
                theme=after.theme if after.theme != current.theme else None,
                ui_kit=after.ui_kit if after.ui_kit != current.ui_kit else None,
            )

    # Bindings -----------------------------------------------------------
    def bindings(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._bindings)

    def set_binding(self, name: str, value: str) -> bool:
        return bool(self.set_bindings({name: value}))

    def set_bindings(self, updates: Mapping[str, str]) -> Dict[str, str]:
        """Write bindings; publishes ``BINDINGS_CHANGED`` with what changed."""
        with self._lock:
            changed = {k: str(v) for k, v in updates.items() if self._bindings.get(k) != str(v)}
            self._bindings.update(changed)
        if changed:
            _logger.debug("%d binding(s) changed", len(changed))
            self._bus.publish(TokenEvent.BINDINGS_CHANGED, dict(changed))
        return changed

    def remove_binding(self, name: str) -> bool:
        with self._lock:
            if name not in self._bindings:
                return False
            del self._bindings[name]
        self._bus.publish(TokenEvent.BINDINGS_CHANGED, {name: None})
        return True

    def audit_bindings(self) -> List[BrokenReference]:
        """Audit the binding map as if it were declared on the root scope."""
        broken = audit_css_vars(AuditEnvironment.from_bindings(self.bindings()))
        self._bus.publish(TokenEvent.AUDIT_COMPLETED, {"broken": len(broken)})
        return broken

    # Change notifications -----------------------------------------------
    def notify_family_changed(self, palette_key: str, family: str, mode: Any = None) -> None:
        self._bus.publish(
            TokenEvent.FAMILY_CHANGED,
            {"palette": palette_key, "family": family, "mode": coerce_mode(mode).value},
        )

    def notify_core_color_changed(self, mode: Any = None) -> None:
        self._bus.publish(TokenEvent.CORE_COLOR_CHANGED, {"mode": _mode_or_none(mode)})

    def notify_opacity_changed(self, mode: Any = None) -> None:
        self._bus.publish(TokenEvent.OPACITY_CHANGED, {"mode": _mode_or_none(mode)})

    # Explicit subscriptions ---------------------------------------------
    def on_bindings_changed(self, callback: Callable[[Dict[str, Optional[str]]], None]) -> Subscription:
        return self._bus.subscribe(TokenEvent.BINDINGS_CHANGED, lambda evt: callback(evt.payload))

    def on_family_changed(self, callback: Callable[[Dict[str, Any]], None]) -> Subscription:
        return self._bus.subscribe(TokenEvent.FAMILY_CHANGED, lambda evt: callback(evt.payload))


def _mode_or_none(mode: Any) -> Optional[str]:
    return coerce_mode(mode).value if mode is not None else None
