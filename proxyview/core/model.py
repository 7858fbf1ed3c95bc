"""Value types exchanged between list screens and the data service."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Row = dict[str, Any]

NOT_AVAILABLE = "N/A"


def sort_vocabulary(values: Any) -> list[str]:
    """Drop blank entries and sort case-insensitively with ``N/A`` last."""
    if not isinstance(values, (list, tuple)):
        return []
    cleaned = [str(value) for value in values if value is not None and str(value).strip()]
    return sorted(cleaned, key=lambda value: (value == NOT_AVAILABLE, value.casefold(), value))


class FilterVocabulary(BaseModel):
    """Values offered by the filter panel's multi-select fields."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    countries: list[str] = Field(default_factory=list)
    types: list[str] = Field(default_factory=list)
    anonymity_levels: list[str] = Field(default_factory=list, alias="anonymityLevels")

    @field_validator("countries", "types", "anonymity_levels", mode="before")
    @classmethod
    def _normalize_values(cls, value: Any) -> list[str]:
        return sort_vocabulary(value)


class PageResponse(BaseModel):
    """One page of rows plus the size of the full result set."""

    model_config = ConfigDict(populate_by_name=True)

    rows: list[Row] = Field(default_factory=list, alias="proxies")
    total: int = Field(0, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _default_total(cls, data: Any) -> Any:
        """Fall back to the row count when the service omits ``total``."""
        if isinstance(data, dict) and data.get("total") is None:
            rows = data.get("rows", data.get("proxies")) or []
            data = {**data, "total": len(rows)}
        return data


@dataclass(frozen=True)
class PageRequest:
    """Parameters of a single page fetch."""

    page_number: int
    page_size: int
    search_term: str | None = None
    filters: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        if self.page_number < 1:
            raise ValueError("page_number must be >= 1")
        if self.page_size <= 0:
            raise ValueError("page_size must be > 0")


@dataclass(frozen=True)
class LazyLoadEvent:
    """Paging/sorting event raised by a lazily loaded table control."""

    first: int | float | None = 0
    rows: int | float | None = None
    sort_field: str | list[str] | None = None
    sort_order: int | None = None


@dataclass(frozen=True)
class ViewSnapshot:
    """Ephemeral list position mirrored to device storage."""

    page_size: int | None = None
    page: int | None = None
    scroll_offset: int | None = None

    def is_empty(self) -> bool:
        return self.page_size is None and self.page is None and self.scroll_offset is None


def finite_number(value: Any) -> float | None:
    """Return *value* as a finite float, or ``None`` when it is not one."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


__all__ = [
    "FilterVocabulary",
    "LazyLoadEvent",
    "NOT_AVAILABLE",
    "PageRequest",
    "PageResponse",
    "Row",
    "ViewSnapshot",
    "finite_number",
    "sort_vocabulary",
]
