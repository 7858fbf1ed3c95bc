"""Collapse bursts of input into a single delayed callback."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Generic, Protocol, TypeVar

logger = logging.getLogger("proxyview.debounce")

T = TypeVar("T")


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Source of delayed calls; the event loop in production."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class AsyncioScheduler:
    """Schedule callbacks on an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class DebounceGate(Generic[T]):
    """Deliver the last pushed value once input has been quiet for *delay*.

    Each :meth:`push` restarts the timer. After :meth:`dispose` the gate
    ignores further input and never fires again.
    """

    def __init__(
        self,
        delay: float,
        callback: Callable[[T], None],
        scheduler: Scheduler | None = None,
    ) -> None:
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self._delay = delay
        self._callback = callback
        self._scheduler = scheduler or AsyncioScheduler()
        self._handle: TimerHandle | None = None
        self._value: T | None = None
        self._disposed = False

    @property
    def pending(self) -> bool:
        return self._handle is not None

    @property
    def disposed(self) -> bool:
        return self._disposed

    def push(self, value: T) -> None:
        if self._disposed:
            return
        self.cancel()
        self._value = value
        self._handle = self._scheduler.call_later(self._delay, self._fire)

    def cancel(self) -> bool:
        """Drop the pending value; return ``True`` if one was waiting."""
        handle, self._handle = self._handle, None
        if handle is None:
            return False
        handle.cancel()
        return True

    def dispose(self) -> None:
        self.cancel()
        self._disposed = True
        self._value = None

    def _fire(self) -> None:
        if self._handle is None or self._disposed:
            return
        self._handle = None
        value, self._value = self._value, None
        self._callback(value)  # type: ignore[arg-type]


__all__ = ["AsyncioScheduler", "DebounceGate", "Scheduler", "TimerHandle"]
