"""Cache of the user's remote settings document."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from typing import Any

from ..columns import normalize_columns
from ..services import PreferenceBackend
from ..state import ObservableValue

logger = logging.getLogger("proxyview.preferences")


class PreferenceCache:
    """Hold the settings document fetched from a :class:`PreferenceBackend`.

    The cache is created by whoever mounts a screen and passed in
    explicitly; :meth:`close` drops the cached document and every
    listener. Concurrent :meth:`load` calls share a single fetch.
    """

    def __init__(self, backend: PreferenceBackend) -> None:
        self._backend = backend
        self.settings: ObservableValue[dict[str, Any] | None] = ObservableValue(
            None, name="user_settings"
        )
        self._pending: asyncio.Task[dict[str, Any]] | None = None
        self._closed = False

    @property
    def loaded(self) -> bool:
        return self.settings.get() is not None

    async def load(self, *, force: bool = False) -> dict[str, Any]:
        """Return the settings document, fetching it when not cached."""
        current = self.settings.get()
        if current is not None and not force:
            return dict(current)
        if self._pending is None or self._pending.done():
            self._pending = asyncio.ensure_future(self._fetch())
        return dict(await self._pending)

    async def _fetch(self) -> dict[str, Any]:
        fetched = await self._backend.fetch_user_settings()
        document = dict(fetched or {})
        if not self._closed:
            self.settings.set(document)
        return document

    def columns_for(self, key: str) -> list[str]:
        """Return the normalized column list stored under *key*."""
        document = self.settings.get() or {}
        return normalize_columns(document.get(key))

    async def save_columns(self, key: str, columns: list[str]) -> list[str]:
        """Merge *columns* into the document under *key* and save it remotely."""
        document = await self.load()
        document[key] = list(columns)
        saved = await self._backend.save_user_settings(document)
        if isinstance(saved, Mapping):
            document = dict(saved)
        if not self._closed:
            self.settings.set(document)
        return normalize_columns(document.get(key, columns))

    def add_listener(self, listener: Callable[[dict[str, Any] | None], None]) -> Callable[[], None]:
        return self.settings.add_listener(listener)

    def close(self) -> None:
        self._closed = True
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self.settings.clear_listeners()
        self.settings.set(None)
        logger.debug("Preference cache closed")


__all__ = ["PreferenceCache"]
