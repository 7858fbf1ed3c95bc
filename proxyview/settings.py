"""Typed settings with Pydantic validation."""

from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

DEFAULT_ROWS_PER_PAGE_OPTIONS = (20, 40, 60, 100)
DEFAULT_GLOBAL_PAGE_SIZE = 40
DEFAULT_SOURCE_PAGE_SIZE = 20
DEFAULT_SEARCH_DEBOUNCE_MS = 300


def _default_state_path() -> str:
    return str(Path.home() / ".proxyview" / "state.json")


class ListSettings(BaseModel):
    """Paging and input timing for proxy list screens."""

    model_config = ConfigDict(validate_assignment=True)

    rows_per_page_options: list[int] = Field(
        default_factory=lambda: list(DEFAULT_ROWS_PER_PAGE_OPTIONS)
    )
    global_page_size: int = Field(DEFAULT_GLOBAL_PAGE_SIZE, gt=0)
    source_page_size: int = Field(DEFAULT_SOURCE_PAGE_SIZE, gt=0)
    search_debounce_ms: int = DEFAULT_SEARCH_DEBOUNCE_MS

    @field_validator("rows_per_page_options", mode="before")
    @classmethod
    def _normalize_rows_per_page_options(cls, value: object) -> object:
        """Keep positive integers only, sorted and without repeats."""
        if value is None:
            return list(DEFAULT_ROWS_PER_PAGE_OPTIONS)
        if not isinstance(value, (list, tuple)):
            return value
        options: set[int] = set()
        for item in value:
            if isinstance(item, bool):
                continue
            try:
                number = int(item)
            except (TypeError, ValueError):
                continue
            if number > 0:
                options.add(number)
        return sorted(options) or list(DEFAULT_ROWS_PER_PAGE_OPTIONS)

    @field_validator("search_debounce_ms", mode="before")
    @classmethod
    def _normalize_search_debounce(cls, value: int | str | None) -> int:
        if value is None:
            return DEFAULT_SEARCH_DEBOUNCE_MS
        if isinstance(value, str):
            raw = value.strip()
            if not raw:
                return DEFAULT_SEARCH_DEBOUNCE_MS
            try:
                value = int(raw)
            except ValueError:  # pragma: no cover - delegated to Pydantic
                return value
        if isinstance(value, bool):
            raise ValueError("Boolean is not a valid debounce delay")
        return max(0, int(value))

    @property
    def search_debounce_seconds(self) -> float:
        return self.search_debounce_ms / 1000.0


class StorageSettings(BaseModel):
    """Location of durable view state."""

    model_config = ConfigDict(validate_assignment=True)

    state_path: str = Field(default_factory=_default_state_path)

    @field_validator("state_path", mode="before")
    @classmethod
    def _normalize_state_path(cls, value: str | Path | None) -> str:
        if value is None:
            return _default_state_path()
        text = str(value).strip()
        return text or _default_state_path()


class LoggingSettings(BaseModel):
    """Logging verbosity and destination."""

    model_config = ConfigDict(validate_assignment=True)

    level: int = logging.INFO
    log_dir: str | None = None

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, value: int | str | None) -> int:
        """Accept level names such as ``"debug"`` as well as numbers."""
        if value is None:
            return logging.INFO
        if isinstance(value, str):
            raw = value.strip()
            if raw.isdigit():
                return int(raw)
            resolved = logging.getLevelName(raw.upper())
            if isinstance(resolved, int):
                return resolved
            raise ValueError(f"Unknown log level: {value}")
        return value

    @field_validator("log_dir", mode="before")
    @classmethod
    def _normalize_log_dir(cls, value: str | Path | None) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None


class AppSettings(BaseModel):
    """Aggregate settings for proxyview."""

    model_config = ConfigDict(validate_assignment=True)

    lists: ListSettings = Field(default_factory=ListSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    log: LoggingSettings = Field(default_factory=LoggingSettings)


def load_app_settings(path: str | Path) -> AppSettings:
    """Load :class:`AppSettings` from *path*.

    ``.toml`` files are parsed with :mod:`tomllib`, everything else as JSON.
    Validation errors are re-raised as :class:`ValueError`.
    """
    p = Path(path)
    with p.open("rb") as fh:
        data = tomllib.load(fh) if p.suffix.lower() == ".toml" else json.load(fh)
    try:
        return AppSettings.model_validate(data)
    except ValidationError as exc:
        raise ValueError(str(exc)) from exc


__all__ = [
    "AppSettings",
    "DEFAULT_GLOBAL_PAGE_SIZE",
    "DEFAULT_ROWS_PER_PAGE_OPTIONS",
    "DEFAULT_SEARCH_DEBOUNCE_MS",
    "DEFAULT_SOURCE_PAGE_SIZE",
    "ListSettings",
    "LoggingSettings",
    "StorageSettings",
    "load_app_settings",
]
