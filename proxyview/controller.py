"""Per-screen controller composing the proxy table view state."""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Callable, Iterable
from typing import Any

from .core.column_set import ColumnSetModel
from .core.filters import AppliedFilters, FilterModel
from .core.model import LazyLoadEvent, PageRequest, PageResponse, Row, ViewSnapshot
from .core.pagination import (
    PageState,
    PageWindow,
    from_lazy_event,
    resolve_sort_field,
    should_refetch,
    to_request,
)
from .core.sorting import SortSpec
from .errors import describe_error
from .i18n import _
from .log import event_extra
from .persistence.preferences import PreferenceCache
from .persistence.sync import PersistenceSync
from .screens import ScreenIdentity
from .services import Notifier, ProxyDataService
from .settings import ListSettings
from .state import ObservableValue
from .util.cancellation import RequestSlot
from .util.debounce import DebounceGate, Scheduler

logger = logging.getLogger("proxyview.controller")

PAGE_ERROR_PREFIX = "Could not get proxy page: "
VOCABULARY_ERROR_PREFIX = "Could not load filter options: "


def _row_id(row: Row) -> Any:
    return row.get("id")


async def _settle(task: asyncio.Task[Any] | None) -> None:
    """Wait for *task* without propagating its cancellation."""
    if task is not None:
        await asyncio.wait({task})


class ProxyListController:
    """Drive one proxy table: paging, sorting, filters, columns and storage.

    Every screen instance owns its own controller, models and storage
    namespace. All methods must be called from the thread running the
    event loop; page requests are asyncio tasks and a new request cancels
    the one in flight.
    """

    def __init__(
        self,
        screen: ScreenIdentity,
        data_service: ProxyDataService,
        sync: PersistenceSync,
        preferences: PreferenceCache,
        notifier: Notifier,
        *,
        settings: ListSettings | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.screen = screen
        self.settings = settings or ListSettings()
        self._data = data_service
        self._sync = sync
        self._preferences = preferences
        self._notifier = notifier

        self.columns = ColumnSetModel(on_invalid=notifier.error)
        self.filters = FilterModel()

        self.rows: ObservableValue[list[Row]] = ObservableValue([], name="rows")
        self.total: ObservableValue[int] = ObservableValue(0, name="total")
        self.loading: ObservableValue[bool] = ObservableValue(False, name="loading")
        self.has_loaded: ObservableValue[bool] = ObservableValue(False, name="has_loaded")
        self.page: ObservableValue[int] = ObservableValue(1, name="page")
        self.page_size: ObservableValue[int] = ObservableValue(
            screen.default_page_size, name="page_size"
        )
        self.sort: ObservableValue[SortSpec] = ObservableValue(SortSpec(), name="sort")
        self.search_term: ObservableValue[str] = ObservableValue("", name="search_term")
        self.selection: ObservableValue[frozenset[Any]] = ObservableValue(
            frozenset(), name="selection"
        )
        self.filter_panel_open: ObservableValue[bool] = ObservableValue(
            False, name="filter_panel_open"
        )
        self.vocabulary_loading: ObservableValue[bool] = ObservableValue(
            False, name="vocabulary_loading"
        )

        self._server_rows: list[Row] = []
        self._pending_scroll: int | None = None
        self._scroll_ready = False
        self._request = RequestSlot()
        self._vocabulary_task: asyncio.Task[None] | None = None
        self._search_gate: DebounceGate[str] = DebounceGate(
            self.settings.search_debounce_seconds, self._on_search_settled, scheduler
        )
        self._unsubscribers: list[Callable[[], None]] = []
        self._torn_down = False

    # ------------------------------------------------------------------
    # lifecycle
    async def mount(self) -> None:
        """Restore stored state and load the first page."""
        self._unsubscribers.append(self._preferences.add_listener(self._on_preferences))
        try:
            await self._preferences.load()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("Could not load user settings: %s", describe_error(exc))
        self.columns.replace(self._preferences.columns_for(self.screen.preference_key))

        namespace = self.screen.namespace
        stored_page_size = self._sync.load_page_size(namespace)
        if stored_page_size is not None:
            self.page_size.set(stored_page_size)

        if self._sync.consume_restore_requested(namespace):
            snapshot = self._sync.load_snapshot(namespace) or ViewSnapshot()
            self.page.set(snapshot.page or 1)
            self._pending_scroll = snapshot.scroll_offset
        else:
            self.page.set(1)
            self._pending_scroll = None
        self._sync.clear_page_and_scroll(namespace)

        stored_filters = self._sync.load_filters(namespace)
        if stored_filters is not None:
            self.filters.restore(stored_filters)

        logger.info(
            "mount",
            extra=event_extra(
                "mount",
                screen=self.screen.name,
                page=self.page.get(),
                page_size=self.page_size.get(),
                restore=self._pending_scroll is not None,
                filters=self.filters.current.active_count(),
            ),
        )
        await _settle(self.request_page())

    def navigation_started(self) -> None:
        """Abandon the request in flight; its late result is ignored."""
        if self._request.cancel():
            logger.debug("Cancelled page request for %s", self.screen.name)
        self.loading.set(False)

    def teardown(self) -> None:
        self.navigation_started()
        self._search_gate.dispose()
        if self._vocabulary_task is not None and not self._vocabulary_task.done():
            self._vocabulary_task.cancel()
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        self._torn_down = True

    # ------------------------------------------------------------------
    # page loading
    @property
    def window(self) -> PageWindow:
        return to_request(self.page.get(), self.page_size.get())

    @property
    def current_request(self) -> asyncio.Task[None] | None:
        return self._request.task

    @property
    def show_empty_state(self) -> bool:
        return self.has_loaded.get() and self.total.get() == 0

    def _page_request(self) -> PageRequest:
        term = self.search_term.get().strip()
        return PageRequest(
            page_number=max(1, self.page.get()),
            page_size=self.page_size.get(),
            search_term=term or None,
            filters=self.filters.current.to_payload(),
        )

    def request_page(self) -> asyncio.Task[None] | None:
        """Fetch the current page, replacing any request still running."""
        if self._torn_down:
            return None
        request = self._page_request()
        self.loading.set(True)
        return self._request.start(self._load_page(request))

    async def _load_page(self, request: PageRequest) -> None:
        logger.info(
            "page_request",
            extra=event_extra(
                "page_request",
                screen=self.screen.name,
                page=request.page_number,
                page_size=request.page_size,
                search=request.search_term,
                filters=request.filters,
            ),
        )
        try:
            raw = await self._data.fetch_page(
                request.page_number,
                page_size=request.page_size,
                search_term=request.search_term,
                filters=request.filters,
            )
            response = raw if isinstance(raw, PageResponse) else PageResponse.model_validate(raw)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if not self._request.is_current():
                return
            message = describe_error(exc)
            logger.warning(
                "page_request_failed",
                extra=event_extra("page_request_failed", screen=self.screen.name, error=message),
            )
            self._notifier.error(_(PAGE_ERROR_PREFIX) + message)
            self.has_loaded.set(True)
            self.loading.set(False)
            return
        if not self._request.is_current():
            return
        self._server_rows = list(response.rows)
        self.page.set(request.page_number)
        self.page_size.set(request.page_size)
        self.rows.set(self.sort.get().apply(self._server_rows))
        self.total.set(response.total)
        self._prune_selection()
        self.has_loaded.set(True)
        self.loading.set(False)
        self._scroll_ready = True
        logger.debug(
            "page_loaded",
            extra=event_extra(
                "page_loaded",
                screen=self.screen.name,
                rows=len(self._server_rows),
                total=response.total,
            ),
        )

    def take_pending_scroll(self) -> int | None:
        """Return the scroll offset to restore once, after a page has loaded."""
        if not self._scroll_ready or self._pending_scroll is None:
            return None
        offset, self._pending_scroll = self._pending_scroll, None
        return offset

    def on_lazy_load(self, event: LazyLoadEvent) -> asyncio.Task[None] | None:
        """Apply a paging/sorting event of the table control.

        Returns the new page request, or ``None`` when the rows already
        loaded can be shown (a sort change only reorders them).
        """
        previous = PageState(self.page.get(), self.page_size.get(), self.sort.get())
        page, page_size = from_lazy_event(event, previous.page_size)
        order = event.sort_order if event.sort_order in (1, -1) else None
        field = resolve_sort_field(event.sort_field, previous.sort.field) if order else None
        current = PageState(page, page_size, SortSpec(field, order))

        refetch = should_refetch(previous, current)
        logger.debug(
            "lazy_load",
            extra=event_extra(
                "lazy_load",
                screen=self.screen.name,
                page=page,
                page_size=page_size,
                sort_field=field,
                sort_order=order,
                refetch=refetch,
            ),
        )
        self.page.set(page)
        if page_size != previous.page_size:
            self.page_size.set(page_size)
            self._sync.save_page_size(self.screen.namespace, page_size)
        self._set_sort(current.sort)
        if refetch:
            return self.request_page()
        return None

    def on_sort(self, field: str, order: int | None = None) -> SortSpec:
        """Sort the loaded rows by *field*.

        Without *order* the column cycles through ascending, descending and
        unsorted.
        """
        if order is None:
            spec = self.sort.get().toggle(field)
        elif order in (1, -1):
            spec = SortSpec(field, order)
        else:
            spec = SortSpec()
        self._set_sort(spec)
        return spec

    def _set_sort(self, spec: SortSpec) -> None:
        self.sort.set(spec)
        self.rows.set(spec.apply(self._server_rows))

    def refresh(self) -> asyncio.Task[None] | None:
        self._search_gate.cancel()
        return self.request_page()

    def rows_changed(self, *, reset_page: bool = True) -> asyncio.Task[None] | None:
        """Reload after rows were added or deleted elsewhere."""
        self.clear_selection()
        if reset_page:
            self.page.set(1)
        return self.request_page()

    # ------------------------------------------------------------------
    # search
    def on_search_term_change(self, term: str) -> None:
        self.search_term.set(term)
        self._search_gate.push(term)

    def _on_search_settled(self, term: str) -> None:
        logger.debug("search_changed", extra=event_extra("search_changed", term=term))
        self.page.set(1)
        self.request_page()

    # ------------------------------------------------------------------
    # filters
    @property
    def filter_button_label(self) -> str:
        return self.filters.button_label

    def open_filter_panel(self) -> asyncio.Task[None] | None:
        """Open the panel and fetch the vocabulary the first time."""
        self.filters.sync_form()
        self.filter_panel_open.set(True)
        if self.filters.vocabulary_loaded or self.vocabulary_loading.get():
            return None
        self.vocabulary_loading.set(True)
        self._vocabulary_task = asyncio.ensure_future(self._load_vocabulary())
        return self._vocabulary_task

    def close_filter_panel(self) -> None:
        self.filter_panel_open.set(False)

    def toggle_filter_panel(self) -> asyncio.Task[None] | None:
        if self.filter_panel_open.get():
            self.close_filter_panel()
            return None
        return self.open_filter_panel()

    async def _load_vocabulary(self) -> None:
        try:
            vocabulary = await self._data.fetch_filter_vocabulary()
            self.filters.set_vocabulary(vocabulary)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            message = describe_error(exc)
            logger.warning(
                "vocabulary_failed",
                extra=event_extra("vocabulary_failed", screen=self.screen.name, error=message),
            )
            self._notifier.error(_(VOCABULARY_ERROR_PREFIX) + message)
        finally:
            self.vocabulary_loading.set(False)

    def apply_filters(self) -> asyncio.Task[None] | None:
        """Commit the panel draft, persist it and reload from page 1."""
        self.filters.apply()
        self._store_filters(self.filters.current)
        self.close_filter_panel()
        self.page.set(1)
        return self.request_page()

    def clear_filters(self) -> asyncio.Task[None] | None:
        self.filters.clear()
        self._sync.clear_filters(self.screen.namespace)
        self.page.set(1)
        return self.request_page()

    def _store_filters(self, filters: AppliedFilters) -> None:
        if filters.is_default():
            self._sync.clear_filters(self.screen.namespace)
        else:
            self._sync.save_filters(self.screen.namespace, filters)

    # ------------------------------------------------------------------
    # columns
    def _on_preferences(self, document: dict[str, Any] | None) -> None:
        if document is None:
            return
        self.columns.replace(self._preferences.columns_for(self.screen.preference_key))

    def open_column_editor(self) -> list[str]:
        return self.columns.open_editor()

    def close_column_editor(self) -> None:
        self.columns.close_editor()

    async def save_columns(self) -> list[str]:
        """Commit the editor draft optimistically and store it remotely."""
        draft = self.columns.normalized_draft()
        self.columns.close_editor()
        save = functools.partial(self._preferences.save_columns, self.screen.preference_key)
        return await self._sync.save_columns_remote(
            draft, target=self.columns.columns, save=save
        )

    # ------------------------------------------------------------------
    # selection
    def select(self, row_ids: Iterable[Any]) -> None:
        self.selection.set(frozenset(row_ids))

    def toggle_selection(self, row_id: Any) -> bool:
        """Flip *row_id*; return whether it is selected afterwards."""
        current = self.selection.get()
        if row_id in current:
            self.selection.set(current - {row_id})
            return False
        self.selection.set(current | {row_id})
        return True

    def select_page(self) -> None:
        self.select(_row_id(row) for row in self.rows.get())

    def clear_selection(self) -> None:
        self.selection.set(frozenset())

    def _prune_selection(self) -> None:
        present = {_row_id(row) for row in self._server_rows}
        self.selection.set(self.selection.get() & present)

    # ------------------------------------------------------------------
    # navigation
    def view_row(self, row_id: Any, scroll_offset: float | None = None) -> dict[str, Any]:
        """Remember the list position and return the detail route of *row_id*."""
        namespace = self.screen.namespace
        self._sync.mark_restore_requested(namespace)
        self._sync.save_snapshot(
            namespace,
            ViewSnapshot(page=self.page.get(), scroll_offset=scroll_offset),
        )
        return self.screen.detail_route(row_id)


__all__ = ["PAGE_ERROR_PREFIX", "ProxyListController", "VOCABULARY_ERROR_PREFIX"]
