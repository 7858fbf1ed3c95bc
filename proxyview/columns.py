"""Column catalogue for proxy tables."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True)
class ColumnDefinition:
    """Describe a single proxy table column."""

    id: str
    label: str
    sort_field: str | None = None
    tooltip: str | None = None
    example: str | None = None
    skeleton_width: str | None = None


COLUMN_DEFINITIONS: tuple[ColumnDefinition, ...] = (
    ColumnDefinition("alive", "Status", "alive", example="alive", skeleton_width="0.9rem"),
    ColumnDefinition(
        "health_overall",
        "Overall Health",
        "health_overall",
        tooltip="Health ratio across all checks",
        example="82%",
        skeleton_width="3.5rem",
    ),
    ColumnDefinition(
        "health_http",
        "HTTP Health",
        "health_http",
        tooltip="Health ratio for HTTP checks",
        example="79%",
        skeleton_width="3.5rem",
    ),
    ColumnDefinition(
        "health_https",
        "HTTPS Health",
        "health_https",
        tooltip="Health ratio for HTTPS checks",
        example="85%",
        skeleton_width="3.75rem",
    ),
    ColumnDefinition(
        "health_socks4",
        "SOCKS4 Health",
        "health_socks4",
        tooltip="Health ratio for SOCKS4 checks",
        example="68%",
        skeleton_width="4rem",
    ),
    ColumnDefinition(
        "health_socks5",
        "SOCKS5 Health",
        "health_socks5",
        tooltip="Health ratio for SOCKS5 checks",
        example="71%",
        skeleton_width="4rem",
    ),
    ColumnDefinition("ip", "IP Address", "ip", example="127.0.0.1", skeleton_width="7rem"),
    ColumnDefinition(
        "ip_port", "IP:Port", "ip_port", example="127.0.0.1:8080", skeleton_width="10rem"
    ),
    ColumnDefinition("port", "Port", "port", example="8080", skeleton_width="3rem"),
    ColumnDefinition(
        "response_time",
        "Time",
        "response_time",
        tooltip="Response Time",
        example="120 ms",
        skeleton_width="4rem",
    ),
    ColumnDefinition(
        "estimated_type",
        "Type",
        "estimated_type",
        tooltip="Estimated Type",
        example="HTTP",
        skeleton_width="5rem",
    ),
    ColumnDefinition("country", "Country", "country", example="US", skeleton_width="6rem"),
    ColumnDefinition(
        "reputation", "Reputation", "reputation", example="Good (82)", skeleton_width="3.5rem"
    ),
    ColumnDefinition(
        "latest_check",
        "Last Check",
        "latest_check",
        example="2026-02-20 10:30",
        skeleton_width="6rem",
    ),
    ColumnDefinition("actions", "Actions", example="Details", skeleton_width="4.5rem"),
)

_COLUMNS_BY_ID = MappingProxyType({column.id: column for column in COLUMN_DEFINITIONS})

AVAILABLE_COLUMNS: tuple[str, ...] = tuple(column.id for column in COLUMN_DEFINITIONS)

DEFAULT_COLUMNS: tuple[str, ...] = (
    "alive",
    "health_overall",
    "health_http",
    "health_https",
    "health_socks4",
    "health_socks5",
    "ip_port",
    "response_time",
    "estimated_type",
    "country",
    "reputation",
    "latest_check",
    "actions",
)

# Column ids written by older releases of the console.
LEGACY_COLUMN_ALIASES = MappingProxyType(
    {
        "alive_ratio_overall": "health_overall",
        "alive_ratio_http": "health_http",
        "alive_ratio_https": "health_https",
        "alive_ratio_socks4": "health_socks4",
        "alive_ratio_socks5": "health_socks5",
    }
)

_FALLBACK_COLUMN = "ip"


def default_columns() -> list[str]:
    """Return a fresh copy of the default column sequence."""
    return list(DEFAULT_COLUMNS)


def is_known_column(column_id: object) -> bool:
    """Return ``True`` when *column_id* names a registered column."""
    return isinstance(column_id, str) and column_id in _COLUMNS_BY_ID


def get_column_definition(column_id: str) -> ColumnDefinition:
    """Return the definition for *column_id*, falling back to the IP column."""
    return _COLUMNS_BY_ID.get(column_id, _COLUMNS_BY_ID[_FALLBACK_COLUMN])


def normalize_columns(candidate: Any) -> list[str]:
    """Coerce *candidate* into a valid, non-empty column id list.

    Anything that is not a list or tuple yields the defaults. Entries are
    mapped through :data:`LEGACY_COLUMN_ALIASES`, unknown ids and repeats are
    dropped, and first-occurrence order is kept. An empty result also falls
    back to the defaults, so the function is idempotent.
    """
    if not isinstance(candidate, (list, tuple)):
        return default_columns()
    seen: set[str] = set()
    normalized: list[str] = []
    for item in candidate:
        if not isinstance(item, str):
            continue
        column_id = LEGACY_COLUMN_ALIASES.get(item, item)
        if column_id not in _COLUMNS_BY_ID or column_id in seen:
            continue
        seen.add(column_id)
        normalized.append(column_id)
    if not normalized:
        return default_columns()
    return normalized


def hidden_columns(visible: Sequence[str]) -> list[ColumnDefinition]:
    """Return registry columns absent from *visible*, in catalogue order."""
    selected = set(visible)
    return [column for column in COLUMN_DEFINITIONS if column.id not in selected]


__all__ = [
    "AVAILABLE_COLUMNS",
    "COLUMN_DEFINITIONS",
    "ColumnDefinition",
    "DEFAULT_COLUMNS",
    "LEGACY_COLUMN_ALIASES",
    "default_columns",
    "get_column_definition",
    "hidden_columns",
    "is_known_column",
    "normalize_columns",
]
