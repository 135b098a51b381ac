"""AA compliance watcher for palette on-tones.

Listens for the three changes that can invalidate an on-tone choice
(palette family, core colors, emphasis opacities) and re-runs the
on-tone recheck for the affected palettes:

    family_changed       -> recheck that palette in that mode
    core_color_changed   -> recheck every palette (of the mode, or both modes)
    opacity_changed      -> same as core_color_changed

Each recheck publishes the new theme through the document store, writes the
matching on-tone bindings and emits ``palette_rechecked``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..design.palettes import (
    PaletteLevel,
    RecheckResult,
    apply_family_to_palette,
    on_tone_binding,
    palette_keys,
    palette_levels,
    recheck_palette_on_tones,
)
from ..references.parser import Mode, coerce_mode
from ..references.resolver import ResolutionContext
from .document_store import DocumentSnapshot, DocumentStore
from .event_bus import Event, Subscription, TokenEvent

_logger = logging.getLogger(__name__)

__all__ = ["PaletteRecheck", "ComplianceService"]


@dataclass
class PaletteRecheck:
    palette: str
    mode: str
    changed: List[PaletteLevel] = field(default_factory=list)
    non_compliant: List[PaletteLevel] = field(default_factory=list)
    bindings: Dict[str, str] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "palette": self.palette,
            "mode": self.mode,
            "changed": [lvl.level for lvl in self.changed],
            "non_compliant": [lvl.level for lvl in self.non_compliant],
        }


class ComplianceService:
    def __init__(self, store: DocumentStore) -> None:
        self._store = store
        self._subs: List[Subscription] = []

    @property
    def attached(self) -> bool:
        return bool(self._subs)

    def attach(self) -> None:
        if self._subs:
            return
        bus = self._store.bus
        self._subs = [
            bus.subscribe(TokenEvent.FAMILY_CHANGED, self._on_family_changed),
            bus.subscribe(TokenEvent.CORE_COLOR_CHANGED, self._on_global_change),
            bus.subscribe(TokenEvent.OPACITY_CHANGED, self._on_global_change),
        ]

    def detach(self) -> None:
        for sub in self._subs:
            self._store.bus.unsubscribe(sub)
        self._subs = []

    # Handlers -----------------------------------------------------------
    def _on_family_changed(self, evt: Event) -> None:
        payload = evt.payload or {}
        self.recheck(payload["palette"], payload.get("mode"))

    def _on_global_change(self, evt: Event) -> None:
        self.recheck_all((evt.payload or {}).get("mode"))

    # Actions ------------------------------------------------------------
    def recheck(self, palette_key: str, mode: Any = None) -> PaletteRecheck:
        """Recompute on-tones of one palette and publish the result."""
        mode_value = coerce_mode(mode).value
        holder: List[RecheckResult] = []

        def _transform(snap: DocumentSnapshot) -> Optional[DocumentSnapshot]:
            result = recheck_palette_on_tones(snap.theme, snap.tokens, palette_key, mode_value, snap.ui_kit)
            holder.append(result)
            return snap.with_theme(result.theme) if result.changed else None

        self._store.transform(_transform)
        result = holder[0]
        outcome = PaletteRecheck(palette_key, mode_value, list(result.changed), list(result.non_compliant))

        snap = self._store.snapshot()
        context = ResolutionContext.from_documents(snap.tokens, snap.theme, snap.ui_kit, mode_value)
        for level in palette_levels(palette_key, context):
            if level.on_tone is None:
                continue
            name, value = on_tone_binding(palette_key, level.level, mode_value, level.on_tone)
            outcome.bindings[name] = value
        self._store.set_bindings(outcome.bindings)
        self._store.bus.publish(TokenEvent.PALETTE_RECHECKED, outcome.to_payload())
        return outcome

    def recheck_all(self, mode: Any = None) -> List[PaletteRecheck]:
        """Recheck every palette of ``mode`` (both modes when None)."""
        modes = [coerce_mode(mode)] if mode is not None else list(Mode)
        outcomes: List[PaletteRecheck] = []
        for m in modes:
            for key in palette_keys(self._store.snapshot().theme, m):
                outcomes.append(self.recheck(key, m))
        _logger.info("rechecked %d palette(s)", len(outcomes))
        return outcomes

    def change_family(self, palette_key: str, family: str, mode: Any = None) -> Optional[PaletteRecheck]:
        """Point ``palette_key`` at ``family`` and recheck its on-tones.

        When attached, the recheck runs from the ``family_changed`` event and
        None is returned; otherwise it runs directly and its outcome is returned.
        """
        mode_value = coerce_mode(mode).value
        self._store.transform(
            lambda snap: snap.with_theme(apply_family_to_palette(snap.theme, palette_key, family, mode_value))
        )
        self._store.notify_family_changed(palette_key, family, mode_value)
        if self.attached:
            return None
        return self.recheck(palette_key, mode_value)
