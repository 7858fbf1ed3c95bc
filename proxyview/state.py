"""Observable state cells used by list screens."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Generic, TypeVar

logger = logging.getLogger("proxyview.state")

T = TypeVar("T")

Listener = Callable[[T], None]


class ObservableValue(Generic[T]):
    """Hold a value and notify listeners synchronously when it changes.

    Listeners run in registration order on the thread that called
    :meth:`set`. A failing listener is logged and does not stop the others.
    """

    __slots__ = ("_name", "_value", "_listeners")

    def __init__(self, value: T, *, name: str = "") -> None:
        self._name = name
        self._value = value
        self._listeners: list[Listener[T]] = []

    def __repr__(self) -> str:
        return f"ObservableValue({self._name or '?'}={self._value!r})"

    def get(self) -> T:
        """Return the current value."""
        return self._value

    def set(self, value: T) -> bool:
        """Store *value*; return ``True`` and notify if it differs."""
        if value == self._value:
            return False
        self._value = value
        self._notify()
        return True

    def add_listener(self, listener: Listener[T]) -> Callable[[], None]:
        """Register *listener* and return a callable removing it."""
        self._listeners.append(listener)

        def _remove() -> None:
            self.remove_listener(listener)

        return _remove

    def remove_listener(self, listener: Listener[T]) -> None:
        """Unregister *listener* ignoring unknown references."""
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def clear_listeners(self) -> None:
        self._listeners.clear()

    def _notify(self) -> None:
        value = self._value
        for listener in tuple(self._listeners):
            try:
                listener(value)
            except Exception:
                logger.exception("Listener for %s raised an exception", self._name or "value")


__all__ = ["ObservableValue"]
