"""Process-wide registry for the token services.

The bootstrap registers the bus, document store, compliance watcher and log
capture under :class:`ServiceKey` names; anything else may use plain strings.
Each slot remembers whether it was registered or pushed by
``override_context`` so overrides unwind cleanly.
"""

from __future__ import annotations

from contextlib import contextmanager
from enum import Enum
from threading import RLock
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Type, TypeVar, Union

T = TypeVar("T")

__all__ = [
    "ServiceKey",
    "ServiceLocator",
    "services",
    "ServiceAlreadyRegisteredError",
    "ServiceNotFoundError",
]


class ServiceKey(str, Enum):
    EVENT_BUS = "event_bus"
    DOCUMENT_STORE = "document_store"
    COMPLIANCE = "compliance_service"
    LOGGING = "logging_service"


Key = Union[str, ServiceKey]


class ServiceAlreadyRegisteredError(RuntimeError):
    pass


class ServiceNotFoundError(KeyError):
    pass


class _Slot(NamedTuple):
    value: Any
    origin: str  # "register" | "override"


def _key(key: Key) -> str:
    return key.value if isinstance(key, ServiceKey) else key


class ServiceLocator:
    def __init__(self) -> None:
        self._lock = RLock()
        self._slots: Dict[str, _Slot] = {}

    def register(self, key: Key, value: Any, *, allow_override: bool = False) -> None:
        name = _key(key)
        with self._lock:
            if not allow_override and name in self._slots:
                raise ServiceAlreadyRegisteredError(f"{name!r} is already registered; pass allow_override=True to replace it")
            self._slots[name] = _Slot(value, "register")

    def unregister(self, key: Key) -> None:
        with self._lock:
            self._slots.pop(_key(key), None)

    def get(self, key: Key) -> Any:
        slot = self._slots.get(_key(key))
        if slot is None:
            raise ServiceNotFoundError(_key(key))
        return slot.value

    def try_get(self, key: Key, default: Any = None) -> Any:
        slot = self._slots.get(_key(key))
        return default if slot is None else slot.value

    def get_typed(self, key: Key, expected_type: Type[T]) -> T:
        value = self.get(key)
        if isinstance(value, expected_type):
            return value
        raise TypeError(f"{_key(key)!r} holds {type(value).__name__}, not {expected_type.__name__}")

    def try_get_typed(self, key: Key, expected_type: Type[T]) -> Optional[T]:
        value = self.try_get(key)
        if isinstance(value, expected_type):
            return value
        return None

    def origin(self, key: Key) -> Optional[str]:
        """Return how ``key`` got its current value, or None when unset."""
        slot = self._slots.get(_key(key))
        return slot.origin if slot else None

    @contextmanager
    def override_context(self, **overrides: Any) -> Iterator["ServiceLocator"]:
        """Swap in services for the duration of a ``with`` block."""
        with self._lock:
            saved = {name: self._slots.get(name) for name in overrides}
            for name, value in overrides.items():
                self._slots[name] = _Slot(value, "override")
        try:
            yield self
        finally:
            with self._lock:
                for name, slot in saved.items():
                    if slot is None:
                        self._slots.pop(name, None)
                    else:
                        self._slots[name] = slot

    def list_keys(self) -> List[str]:
        return list(self._slots)

    def clear(self) -> None:
        with self._lock:
            self._slots = {}


services = ServiceLocator()
