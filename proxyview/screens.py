"""Identities of the list screens sharing the proxy table logic."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any

from .errors import InvalidRouteIdentifierError
from .i18n import _
from .services import Notifier
from .settings import ListSettings

logger = logging.getLogger("proxyview.screens")

GLOBAL_NAMESPACE = "magpie-proxy-list"
GLOBAL_COLUMNS_KEY = "proxy_list_columns"
SOURCE_COLUMNS_KEY = "scrape_source_proxy_columns"
SCRAPER_ROUTE = "/scraper"
INVALID_SOURCE_MESSAGE = "Invalid scrape source identifier"

_DECIMAL = re.compile(r"^[0-9]+$")


@dataclass(frozen=True)
class ScreenIdentity:
    """Storage namespace and preference key of one list screen."""

    name: str
    namespace: str
    preference_key: str
    default_page_size: int
    source_id: int | None = None

    def detail_route(self, row_id: Any) -> dict[str, Any]:
        """Return the navigation target of a row detail page."""
        target: dict[str, Any] = {"path": f"/proxies/{row_id}"}
        if self.source_id is not None:
            target["query"] = {"sourceId": self.source_id}
        return target


@dataclass(frozen=True)
class RouteRedirect:
    path: str


def global_list(settings: ListSettings | None = None) -> ScreenIdentity:
    settings = settings or ListSettings()
    return ScreenIdentity(
        name="global",
        namespace=GLOBAL_NAMESPACE,
        preference_key=GLOBAL_COLUMNS_KEY,
        default_page_size=settings.global_page_size,
    )


def source_list(source_id: int, settings: ListSettings | None = None) -> ScreenIdentity:
    settings = settings or ListSettings()
    return ScreenIdentity(
        name=f"source:{source_id}",
        namespace=f"magpie-scrape-source-{source_id}-proxy-list",
        preference_key=SOURCE_COLUMNS_KEY,
        default_page_size=settings.source_page_size,
        source_id=source_id,
    )


def parse_route_identifier(raw: Any) -> int:
    """Return *raw* as a positive integer id.

    Only decimal digits are accepted; anything else, including ``0``,
    raises :class:`InvalidRouteIdentifierError`.
    """
    if isinstance(raw, bool):
        raise InvalidRouteIdentifierError(raw)
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and _DECIMAL.match(raw.strip()):
        value = int(raw.strip())
    else:
        raise InvalidRouteIdentifierError(raw)
    if value <= 0:
        raise InvalidRouteIdentifierError(raw)
    return value


def open_source_screen(
    raw: Any,
    notifier: Notifier | None = None,
    settings: ListSettings | None = None,
) -> ScreenIdentity | RouteRedirect:
    """Resolve the sublist screen for route parameter *raw*.

    An invalid identifier notifies the user and redirects to the scraper
    overview instead of building a half-initialised screen.
    """
    try:
        source_id = parse_route_identifier(raw)
    except InvalidRouteIdentifierError as exc:
        logger.warning("%s", exc)
        if notifier is not None:
            notifier.error(_(INVALID_SOURCE_MESSAGE))
        return RouteRedirect(SCRAPER_ROUTE)
    return source_list(source_id, settings)


def parse_screen_name(name: str, settings: ListSettings | None = None) -> ScreenIdentity:
    """Resolve ``global`` or ``source:<id>`` into a screen identity."""
    text = name.strip()
    if text == "global":
        return global_list(settings)
    prefix, sep, rest = text.partition(":")
    if prefix == "source" and sep:
        return source_list(parse_route_identifier(rest), settings)
    raise ValueError(f"Unknown screen: {name!r}")


__all__ = [
    "GLOBAL_COLUMNS_KEY",
    "GLOBAL_NAMESPACE",
    "INVALID_SOURCE_MESSAGE",
    "RouteRedirect",
    "SCRAPER_ROUTE",
    "SOURCE_COLUMNS_KEY",
    "ScreenIdentity",
    "global_list",
    "open_source_screen",
    "parse_route_identifier",
    "parse_screen_name",
]
