"""In-process log capture for resolver, audit and recheck diagnostics.

A :class:`LoggingService` owns a ring-buffer handler; ``attach`` hooks it on a
logger (root by default). Captured records can be filtered, exported as JSON
Lines, and are forwarded to the registered event bus on
``TokenEvent.LOG_RECORD_ADDED``.
"""

from __future__ import annotations

import json
import logging
from collections import deque
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Deque, Iterable, List, Optional

from .event_bus import EventBus, TokenEvent
from .service_locator import ServiceKey, services

__all__ = ["LogEntry", "LoggingService", "get_logging_service"]

_MESSAGE_PREVIEW = 120


@dataclass(frozen=True)
class LogEntry:
    level: str
    name: str
    message: str
    created: float

    @classmethod
    def from_record(cls, record: logging.LogRecord) -> "LogEntry":
        return cls(record.levelname, record.name, record.getMessage(), record.created)

    def matches(self, level: str | None, name_contains: str | None) -> bool:
        if level and self.level != level:
            return False
        return not name_contains or name_contains in self.name


class _CaptureHandler(logging.Handler):
    """Keeps the newest ``capacity`` records and forwards each to a bus."""

    def __init__(self, capacity: int) -> None:
        super().__init__(level=logging.DEBUG)
        self.entries: Deque[LogEntry] = deque(maxlen=capacity)
        self._forwarding = False

    def emit(self, record: logging.LogRecord) -> None:
        entry = LogEntry.from_record(record)
        self.acquire()
        try:
            self.entries.append(entry)
        finally:
            self.release()
        if not self._forwarding:
            self._forward(entry)

    def _forward(self, entry: LogEntry) -> None:
        bus = services.try_get_typed(ServiceKey.EVENT_BUS, EventBus)
        if bus is None:
            return
        # records the bus logs while dispatching this one are captured only
        self._forwarding = True
        try:
            bus.publish(
                TokenEvent.LOG_RECORD_ADDED,
                {"level": entry.level, "name": entry.name, "message": entry.message[:_MESSAGE_PREVIEW]},
            )
        finally:
            self._forwarding = False


class LoggingService:
    def __init__(self, capacity: int = 500, *, logger_name: str = "") -> None:
        self._handler = _CaptureHandler(capacity)
        self._logger = logging.getLogger(logger_name)
        self._saved_level: Optional[int] = None

    @property
    def capacity(self) -> int:
        return self._handler.entries.maxlen or 0

    @property
    def attached(self) -> bool:
        return self._handler in self._logger.handlers

    def attach(self, level: int = logging.DEBUG) -> None:
        """Start capturing; lowers the logger level to ``level`` if needed."""
        if self.attached:
            return
        self._logger.addHandler(self._handler)
        if self._logger.level == logging.NOTSET or self._logger.level > level:
            self._saved_level = self._logger.level
            self._logger.setLevel(level)

    def detach(self) -> None:
        self._logger.removeHandler(self._handler)
        if self._saved_level is not None:
            self._logger.setLevel(self._saved_level)
            self._saved_level = None

    def recent(self, limit: Optional[int] = None) -> List[LogEntry]:
        entries = list(self._handler.entries)
        if limit is None:
            return entries
        return entries[-limit:]

    def filter(self, *, level: str | None = None, name_contains: str | None = None) -> List[LogEntry]:
        return [e for e in self.recent() if e.matches(level, name_contains)]

    def clear(self) -> None:
        self._handler.entries.clear()

    def export_jsonl(
        self,
        path: str | Path,
        *,
        level: str | None = None,
        name_contains: str | None = None,
        append: bool = False,
    ) -> int:
        """Write the matching entries to ``path``, one JSON object per line."""
        rows = self.filter(level=level, name_contains=name_contains)
        _write_lines(path, (json.dumps(asdict(e), sort_keys=True) for e in rows), append)
        return len(rows)


def _write_lines(path: str | Path, lines: Iterable[str], append: bool) -> None:
    with open(path, "a" if append else "w", encoding="utf-8") as fh:
        for line in lines:
            fh.write(line + "\n")


def get_logging_service() -> LoggingService:
    return services.get_typed(ServiceKey.LOGGING, LoggingService)
