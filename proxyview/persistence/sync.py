"""Mirror list view state into device storage and remote preferences."""

from __future__ import annotations

import asyncio
import json
import logging
import math
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from ..columns import normalize_columns
from ..core.filters import AppliedFilters, normalize_stored_filters
from ..core.model import ViewSnapshot, finite_number
from ..errors import describe_error
from ..i18n import _
from ..log import event_extra
from ..services import Notifier
from ..settings import DEFAULT_ROWS_PER_PAGE_OPTIONS
from ..state import ObservableValue
from .storage import KeyValueStore

logger = logging.getLogger("proxyview.persistence")

PAGE_SIZE_SUFFIX = "page-size"
PAGE_SUFFIX = "page"
SCROLL_SUFFIX = "scroll-y"
RESTORE_SUFFIX = "restore-state"
FILTERS_SUFFIX = "filters"

_RESTORE_MARKER = "1"


def storage_key(namespace: str, suffix: str) -> str:
    return f"{namespace}-{suffix}"


def parse_page_size(raw: str | None, options: Sequence[int]) -> int | None:
    """Return the stored page size when it is one of *options*."""
    number = finite_number(raw)
    if number is None or not number.is_integer():
        return None
    value = int(number)
    return value if value in options else None


def parse_page(raw: str | None) -> int | None:
    number = finite_number(raw)
    if number is None or not number.is_integer() or number < 1:
        return None
    return int(number)


def parse_scroll_offset(raw: str | None) -> int | None:
    number = finite_number(raw)
    if number is None or number < 0:
        return None
    return math.floor(number)


class PersistenceSync:
    """Read and write the ephemeral state of list screens.

    ``local`` outlives the process (page size, page, scroll offset,
    filters); ``session`` holds the one-shot restore flag. Storage errors
    are logged and swallowed so that a broken store only costs the
    remembered state.
    """

    def __init__(
        self,
        local: KeyValueStore,
        session: KeyValueStore | None = None,
        *,
        notifier: Notifier | None = None,
        rows_per_page_options: Sequence[int] = DEFAULT_ROWS_PER_PAGE_OPTIONS,
    ) -> None:
        self._local = local
        self._session = session if session is not None else local
        self._notifier = notifier
        self._rows_per_page_options = tuple(rows_per_page_options)

    # ------------------------------------------------------------------
    # guarded storage access
    def _read(self, store: KeyValueStore, key: str) -> str | None:
        try:
            return store.get(key)
        except Exception as exc:
            logger.debug("Storage read failed for %s: %s", key, exc)
            return None

    def _write(self, store: KeyValueStore, key: str, value: str) -> bool:
        try:
            store.set(key, value)
        except Exception as exc:
            logger.debug("Storage write failed for %s: %s", key, exc)
            return False
        return True

    def _delete(self, store: KeyValueStore, key: str) -> None:
        try:
            store.remove(key)
        except Exception as exc:
            logger.debug("Storage removal failed for %s: %s", key, exc)

    # ------------------------------------------------------------------
    # snapshot
    def save_snapshot(self, namespace: str, snapshot: ViewSnapshot) -> None:
        """Store every field of *snapshot* that is set."""
        if snapshot.page_size is not None:
            self.save_page_size(namespace, snapshot.page_size)
        if snapshot.page is not None:
            self._write(self._local, storage_key(namespace, PAGE_SUFFIX), str(int(snapshot.page)))
        offset = finite_number(snapshot.scroll_offset)
        if offset is not None:
            offset = max(0, math.floor(offset))
            self._write(self._local, storage_key(namespace, SCROLL_SUFFIX), str(offset))

    def load_snapshot(self, namespace: str) -> ViewSnapshot | None:
        """Return the validated snapshot, ``None`` when nothing usable is stored."""
        snapshot = ViewSnapshot(
            page_size=self.load_page_size(namespace),
            page=parse_page(self._read(self._local, storage_key(namespace, PAGE_SUFFIX))),
            scroll_offset=parse_scroll_offset(
                self._read(self._local, storage_key(namespace, SCROLL_SUFFIX))
            ),
        )
        return None if snapshot.is_empty() else snapshot

    def save_page_size(self, namespace: str, page_size: int) -> None:
        self._write(self._local, storage_key(namespace, PAGE_SIZE_SUFFIX), str(int(page_size)))

    def load_page_size(self, namespace: str) -> int | None:
        raw = self._read(self._local, storage_key(namespace, PAGE_SIZE_SUFFIX))
        return parse_page_size(raw, self._rows_per_page_options)

    def clear_page_and_scroll(self, namespace: str) -> None:
        self._delete(self._local, storage_key(namespace, PAGE_SUFFIX))
        self._delete(self._local, storage_key(namespace, SCROLL_SUFFIX))

    # ------------------------------------------------------------------
    # restore flag
    def mark_restore_requested(self, namespace: str) -> None:
        self._write(self._session, storage_key(namespace, RESTORE_SUFFIX), _RESTORE_MARKER)

    def consume_restore_requested(self, namespace: str) -> bool:
        """Return whether a restore was requested and forget the request."""
        key = storage_key(namespace, RESTORE_SUFFIX)
        requested = self._read(self._session, key) == _RESTORE_MARKER
        self._delete(self._session, key)
        return requested

    # ------------------------------------------------------------------
    # filters
    def save_filters(self, namespace: str, filters: AppliedFilters) -> None:
        self._write(
            self._local,
            storage_key(namespace, FILTERS_SUFFIX),
            json.dumps(filters.to_dict(), sort_keys=True),
        )

    def load_filters(self, namespace: str) -> AppliedFilters | None:
        raw = self._read(self._local, storage_key(namespace, FILTERS_SUFFIX))
        if raw is None:
            return None
        return normalize_stored_filters(raw)

    def clear_filters(self, namespace: str) -> None:
        self._delete(self._local, storage_key(namespace, FILTERS_SUFFIX))

    def clear_all(self, namespace: str) -> None:
        """Forget everything stored for *namespace*."""
        for suffix in (PAGE_SIZE_SUFFIX, PAGE_SUFFIX, SCROLL_SUFFIX, FILTERS_SUFFIX):
            self._delete(self._local, storage_key(namespace, suffix))
        self._delete(self._session, storage_key(namespace, RESTORE_SUFFIX))

    # ------------------------------------------------------------------
    # remote column preference
    async def save_columns_remote(
        self,
        columns: Any,
        *,
        target: ObservableValue[list[str]],
        save: Callable[[list[str]], Awaitable[Sequence[str] | None]],
    ) -> list[str]:
        """Apply *columns* to *target* at once and persist them with *save*.

        On failure *target* returns to its previous value, the user is
        notified and the previous columns are returned.
        """
        previous = list(target.get())
        normalized = normalize_columns(columns)
        target.set(normalized)
        try:
            saved = await save(normalized)
        except asyncio.CancelledError:
            target.set(previous)
            raise
        except Exception as exc:
            target.set(previous)
            message = describe_error(exc)
            logger.warning(
                "column_save_failed",
                extra=event_extra("column_save_failed", error=message, columns=normalized),
            )
            if self._notifier is not None:
                self._notifier.error(_("Could not save column settings: ") + message)
            return previous
        result = normalize_columns(saved) if saved is not None else normalized
        target.set(result)
        logger.info("column_save", extra=event_extra("column_save", columns=result))
        return result


__all__ = [
    "FILTERS_SUFFIX",
    "PAGE_SIZE_SUFFIX",
    "PAGE_SUFFIX",
    "PersistenceSync",
    "RESTORE_SUFFIX",
    "SCROLL_SUFFIX",
    "parse_page",
    "parse_page_size",
    "parse_scroll_offset",
    "storage_key",
]
