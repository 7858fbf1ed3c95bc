"""Cancel-and-replace ownership of in-flight requests."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any, TypeVar

__all__ = ["RequestSlot"]

T = TypeVar("T")


class RequestSlot:
    """Own at most one running request task.

    Starting a request cancels the one it replaces, so a late response can
    never overwrite the state produced by a newer request.
    """

    __slots__ = ("_task",)

    def __init__(self) -> None:
        self._task: asyncio.Task[Any] | None = None

    @property
    def active(self) -> bool:
        """Return ``True`` while the current request is still running."""

        return self._task is not None and not self._task.done()

    @property
    def task(self) -> asyncio.Task[Any] | None:
        """Return the running request task, if any."""

        return self._task if self.active else None

    def start(self, coro: Coroutine[Any, Any, T]) -> asyncio.Task[T]:
        """Cancel the current request and run *coro* in its place."""

        self.cancel()
        task = asyncio.ensure_future(coro)
        self._task = task
        return task

    def cancel(self) -> bool:
        """Cancel the current request; return ``True`` if one was running."""

        task, self._task = self._task, None
        if task is None or task.done():
            return False
        task.cancel()
        return True

    def is_current(self, task: asyncio.Task[Any] | None = None) -> bool:
        """Return ``True`` when *task* (default: the running task) owns the slot."""

        if task is None:
            task = asyncio.current_task()
        return task is not None and task is self._task
