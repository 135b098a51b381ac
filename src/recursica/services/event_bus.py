"""Explicit observer channels for token document changes.

Channels (:class:`TokenEvent`):
 - ``bindings_changed``    binding store entries written (payload: dict name -> value)
 - ``family_changed``      a palette now points at another color family
 - ``core_color_changed``  core black/white (or status) color changed
 - ``opacity_changed``     text-emphasis or opacity tokens changed
 - ``documents_published`` new token/theme/ui-kit snapshots were published
 - ``palette_rechecked``   on-tones recomputed for a palette
 - ``log_record_added``    a record was captured by the logging service
 - ``audit_completed``     a css var audit finished

Plain strings work as channel names too. Dispatch is synchronous; a failing
handler is recorded in :attr:`EventBus.errors` and the remaining handlers
still run.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from threading import RLock
from time import perf_counter
from typing import Any, Callable, Deque, Dict, List, Tuple, Union

_logger = logging.getLogger(__name__)

__all__ = ["TokenEvent", "Event", "EventBus", "Handler", "Subscription", "TraceEntry"]


class TokenEvent(str, Enum):
    BINDINGS_CHANGED = "bindings_changed"
    FAMILY_CHANGED = "family_changed"
    CORE_COLOR_CHANGED = "core_color_changed"
    OPACITY_CHANGED = "opacity_changed"
    DOCUMENTS_PUBLISHED = "documents_published"
    PALETTE_RECHECKED = "palette_rechecked"
    LOG_RECORD_ADDED = "log_record_added"
    AUDIT_COMPLETED = "audit_completed"


Channel = Union[str, TokenEvent]


@dataclass(frozen=True)
class Event:
    name: str
    payload: Any
    timestamp: float


Handler = Callable[[Event], None]


@dataclass(eq=False)
class Subscription:
    event: str
    handler: Handler
    once: bool = False
    active: bool = True

    def cancel(self) -> None:
        """Stop delivery; the bus drops the entry on its next publish."""
        self.active = False


@dataclass(frozen=True)
class TraceEntry:
    name: str
    timestamp: float
    summary: str

    @classmethod
    def of(cls, evt: Event, width: int = 40) -> "TraceEntry":
        if evt.payload is None:
            return cls(evt.name, evt.timestamp, "-")
        text = str(evt.payload)
        if len(text) > width:
            text = text[: width - 3] + "..."
        return cls(evt.name, evt.timestamp, text)


@dataclass
class _Channel:
    subscribers: List[Subscription] = field(default_factory=list)
    published: int = 0

    def live(self) -> List[Subscription]:
        self.subscribers = [s for s in self.subscribers if s.active]
        return list(self.subscribers)


def _name(channel: Channel) -> str:
    return channel.value if isinstance(channel, TokenEvent) else str(channel)


class EventBus:
    DEFAULT_TRACE_CAPACITY = 50

    def __init__(self) -> None:
        self._lock = RLock()
        self._channels: Dict[str, _Channel] = {}
        self._errors: List[Tuple[Event, BaseException]] = []
        self._trace: Deque[TraceEntry] = deque(maxlen=self.DEFAULT_TRACE_CAPACITY)
        self._tracing = False

    def _channel(self, name: str) -> _Channel:
        chan = self._channels.get(name)
        if chan is None:
            chan = self._channels[name] = _Channel()
        return chan

    def subscribe(self, name: Channel, handler: Handler, *, once: bool = False) -> Subscription:
        sub = Subscription(_name(name), handler, once)
        with self._lock:
            self._channel(sub.event).subscribers.append(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        sub.active = False
        with self._lock:
            chan = self._channels.get(sub.event)
            if chan is not None:
                chan.subscribers = [s for s in chan.subscribers if s is not sub]

    def publish(self, name: Channel, payload: Any = None) -> Event:
        """Deliver ``payload`` to the channel's current subscribers."""
        evt = Event(_name(name), payload, perf_counter())
        with self._lock:
            chan = self._channel(evt.name)
            chan.published += 1
            targets = chan.live()
            if self._tracing:
                self._trace.append(TraceEntry.of(evt))
        for sub in targets:
            # cancelled by an earlier handler of this same publish
            if sub.active and self._deliver(sub, evt) and sub.once:
                self.unsubscribe(sub)
        return evt

    def _deliver(self, sub: Subscription, evt: Event) -> bool:
        try:
            sub.handler(evt)
        except Exception as exc:  # noqa: BLE001
            _logger.debug("subscriber of %s raised %r", evt.name, exc)
            with self._lock:
                self._errors.append((evt, exc))
            return False
        return True

    def clear(self) -> None:
        with self._lock:
            self._channels = {}
            self._errors = []

    def subscriber_count(self, name: Channel) -> int:
        chan = self._channels.get(_name(name))
        return sum(1 for s in chan.subscribers if s.active) if chan else 0

    def published_count(self, name: Channel) -> int:
        chan = self._channels.get(_name(name))
        return chan.published if chan else 0

    def list_events(self) -> List[str]:
        """Channel names that have been subscribed to or published on."""
        return list(self._channels)

    @property
    def errors(self) -> List[Tuple[Event, BaseException]]:
        return list(self._errors)

    # tracing
    def enable_tracing(self, enabled: bool = True, *, capacity: int | None = None) -> None:
        with self._lock:
            self._tracing = enabled
            if capacity is not None:
                self._trace = deque(self._trace, maxlen=capacity)

    @property
    def tracing_enabled(self) -> bool:
        return self._tracing

    def recent_traces(self) -> List[TraceEntry]:
        return list(self._trace)

    def clear_traces(self) -> None:
        self._trace.clear()
