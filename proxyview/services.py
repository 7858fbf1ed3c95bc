"""Contracts of the collaborators a list screen talks to."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from .core.model import FilterVocabulary, PageResponse

logger = logging.getLogger("proxyview.notify")


@runtime_checkable
class ProxyDataService(Protocol):
    """Remote source of proxy pages and filter vocabularies."""

    async def fetch_page(
        self,
        page_number: int,
        *,
        page_size: int,
        search_term: str | None = None,
        filters: Mapping[str, Any] | None = None,
    ) -> PageResponse | Mapping[str, Any]: ...

    async def fetch_filter_vocabulary(self) -> FilterVocabulary | Mapping[str, Any]: ...


@runtime_checkable
class PreferenceBackend(Protocol):
    """Remote store of the user's durable settings document."""

    async def fetch_user_settings(self) -> Mapping[str, Any]: ...

    async def save_user_settings(self, settings: Mapping[str, Any]) -> Mapping[str, Any] | None: ...


@runtime_checkable
class Notifier(Protocol):
    """Presents short messages to the user."""

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...


class LogNotifier:
    """Notifier writing messages to the log, for headless use."""

    def error(self, message: str) -> None:
        logger.error("%s", message)

    def warning(self, message: str) -> None:
        logger.warning("%s", message)

    def success(self, message: str) -> None:
        logger.info("%s", message)


__all__ = ["LogNotifier", "Notifier", "PreferenceBackend", "ProxyDataService"]
