"""Fakes shared by the proxyview unit tests."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from proxyview.core.model import PageResponse


class FakeHandle:
    def __init__(self, scheduler: FakeScheduler, due: float, callback: Callable[[], None]) -> None:
        self._scheduler = scheduler
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Scheduler driven by a virtual clock advanced by the test."""

    def __init__(self) -> None:
        self.now = 0.0
        self._handles: list[FakeHandle] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> FakeHandle:
        handle = FakeHandle(self, self.now + delay, callback)
        self._handles.append(handle)
        return handle

    @property
    def pending(self) -> list[FakeHandle]:
        return [handle for handle in self._handles if not handle.cancelled]

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = sorted(
                (h for h in self._handles if not h.cancelled and h.due <= target),
                key=lambda h: h.due,
            )
            if not due:
                break
            handle = due[0]
            self._handles.remove(handle)
            self.now = handle.due
            handle.callback()
        self.now = target


class RecordingNotifier:
    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    def warning(self, message: str) -> None:
        self.messages.append(("warning", message))

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    @property
    def errors(self) -> list[str]:
        return [text for level, text in self.messages if level == "error"]


@dataclass
class PageCall:
    page_number: int
    page_size: int
    search_term: str | None
    filters: Mapping[str, Any] | None


@dataclass
class ScriptedDataService:
    """Data service answering from a page table, optionally held on a gate."""

    rows: list[dict[str, Any]] = field(default_factory=list)
    total: int | None = None
    vocabulary: Mapping[str, Any] = field(
        default_factory=lambda: {"countries": ["US", "N/A", "de"], "types": [], "anonymityLevels": []}
    )
    page_error: Exception | None = None
    vocabulary_error: Exception | None = None
    gate: asyncio.Event | None = None
    calls: list[PageCall] = field(default_factory=list)
    vocabulary_calls: int = 0

    async def fetch_page(
        self,
        page_number: int,
        *,
        page_size: int,
        search_term: str | None = None,
        filters: Mapping[str, Any] | None = None,
    ) -> PageResponse:
        self.calls.append(PageCall(page_number, page_size, search_term, filters))
        if self.gate is not None:
            await self.gate.wait()
        if self.page_error is not None:
            raise self.page_error
        start = (page_number - 1) * page_size
        rows = self.rows[start : start + page_size]
        total = len(self.rows) if self.total is None else self.total
        return PageResponse(rows=rows, total=total)

    async def fetch_filter_vocabulary(self) -> Mapping[str, Any]:
        self.vocabulary_calls += 1
        if self.vocabulary_error is not None:
            raise self.vocabulary_error
        return self.vocabulary


@dataclass
class FakePreferenceBackend:
    document: dict[str, Any] = field(default_factory=dict)
    save_error: Exception | None = None
    fetch_error: Exception | None = None
    fetches: int = 0
    saved: list[dict[str, Any]] = field(default_factory=list)

    async def fetch_user_settings(self) -> dict[str, Any]:
        self.fetches += 1
        if self.fetch_error is not None:
            raise self.fetch_error
        return dict(self.document)

    async def save_user_settings(self, settings: Mapping[str, Any]) -> dict[str, Any]:
        if self.save_error is not None:
            raise self.save_error
        self.saved.append(dict(settings))
        self.document = dict(settings)
        return dict(settings)


class FailingStore:
    """Key-value store whose every operation fails."""

    def get(self, key: str) -> str | None:
        raise OSError("storage disabled")

    def set(self, key: str, value: str) -> None:
        raise OSError("quota exceeded")

    def remove(self, key: str) -> None:
        raise OSError("storage disabled")

    def keys(self) -> Iterator[str]:
        raise OSError("storage disabled")


def make_rows(count: int) -> list[dict[str, Any]]:
    return [
        {"id": index, "ip": f"10.0.0.{index}", "port": 8000 + index, "response_time": index * 10}
        for index in range(1, count + 1)
    ]


async def drain() -> None:
    """Let already scheduled tasks run to their next suspension point."""
    for _ in range(5):
        await asyncio.sleep(0)
