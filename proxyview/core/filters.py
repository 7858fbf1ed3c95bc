"""Filter form values, applied filters and their request payload."""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from ..i18n import _
from ..state import ObservableValue
from .model import FilterVocabulary

logger = logging.getLogger("proxyview.filters")

Status = Literal["all", "alive", "dead"]

STATUS_VALUES: tuple[str, ...] = ("all", "alive", "dead")
PROTOCOLS: tuple[str, ...] = ("http", "https", "socks4", "socks5")
REPUTATION_LABELS: tuple[str, ...] = ("good", "neutral", "poor", "unknown")


@dataclass(frozen=True)
class FilterOption:
    """Label/value pair rendered by a select control."""

    label: str
    value: str


STATUS_OPTIONS: tuple[FilterOption, ...] = (
    FilterOption("All Proxies", "all"),
    FilterOption("Only Alive Proxies", "alive"),
    FilterOption("Only Dead Proxies", "dead"),
)

REPUTATION_OPTIONS: tuple[FilterOption, ...] = (
    FilterOption("Good", "good"),
    FilterOption("Neutral", "neutral"),
    FilterOption("Poor", "poor"),
    FilterOption("Unknown", "unknown"),
)


def build_option_list(values: Iterable[str]) -> list[FilterOption]:
    """Turn vocabulary *values* into options labelled by themselves."""
    return [FilterOption(value, value) for value in values]


def normalize_selection(values: Any) -> tuple[str, ...]:
    """Trim, drop blanks and repeats, keep first-occurrence order."""
    if not values or isinstance(values, (str, bytes)):
        return ()
    seen: set[str] = set()
    normalized: list[str] = []
    for value in values:
        if value is None:
            continue
        trimmed = str(value).strip()
        if not trimmed or trimmed in seen:
            continue
        seen.add(trimmed)
        normalized.append(trimmed)
    return tuple(normalized)


def normalize_number(value: Any) -> int:
    """Coerce *value* into a non-negative integer, ``0`` for garbage."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            value = float(text)
        except ValueError:
            return 0
    if not isinstance(value, (int, float)):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    return max(0, math.floor(value))


def _normalize_status(value: Any) -> str:
    return value if value in STATUS_VALUES else "all"


def _normalize_protocols(values: Any) -> tuple[str, ...]:
    selected = set(normalize_selection(values))
    return tuple(protocol for protocol in PROTOCOLS if protocol in selected)


def _restrict(values: Any, allowed: Iterable[str]) -> tuple[str, ...]:
    allowed_set = set(allowed)
    return tuple(value for value in normalize_selection(values) if value in allowed_set)


@dataclass
class FilterFormValues:
    """Mutable state of the filter panel while the user edits it."""

    proxy_status: str = "all"
    http: bool = False
    https: bool = False
    socks4: bool = False
    socks5: bool = False
    max_timeout: int | float | str | None = 0
    max_retries: int | float | str | None = 0
    countries: list[str] = field(default_factory=list)
    types: list[str] = field(default_factory=list)
    anonymity_levels: list[str] = field(default_factory=list)
    reputation_labels: list[str] = field(default_factory=list)

    def protocol_flags(self) -> dict[str, bool]:
        return {protocol: bool(getattr(self, protocol)) for protocol in PROTOCOLS}


@dataclass(frozen=True)
class AppliedFilters:
    """Canonical filter value in effect for a list.

    Instances are normalized on construction: unknown status becomes
    ``"all"``, protocols follow :data:`PROTOCOLS` order, bounds are
    non-negative integers and string sets are trimmed tuples without
    repeats.
    """

    status: str = "all"
    protocols: tuple[str, ...] = ()
    max_timeout: int = 0
    max_retries: int = 0
    countries: tuple[str, ...] = ()
    types: tuple[str, ...] = ()
    anonymity_levels: tuple[str, ...] = ()
    reputation_labels: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", _normalize_status(self.status))
        object.__setattr__(self, "protocols", _normalize_protocols(self.protocols))
        object.__setattr__(self, "max_timeout", normalize_number(self.max_timeout))
        object.__setattr__(self, "max_retries", normalize_number(self.max_retries))
        for name in ("countries", "types", "anonymity_levels"):
            object.__setattr__(self, name, normalize_selection(getattr(self, name)))
        object.__setattr__(
            self,
            "reputation_labels",
            _restrict(self.reputation_labels, REPUTATION_LABELS),
        )

    @classmethod
    def from_form(cls, form: FilterFormValues) -> AppliedFilters:
        protocols = [name for name, enabled in form.protocol_flags().items() if enabled]
        return cls(
            status=form.proxy_status or "all",
            protocols=tuple(protocols),
            max_timeout=normalize_number(form.max_timeout),
            max_retries=normalize_number(form.max_retries),
            countries=normalize_selection(form.countries),
            types=normalize_selection(form.types),
            anonymity_levels=normalize_selection(form.anonymity_levels),
            reputation_labels=normalize_selection(form.reputation_labels),
        )

    def to_form(self) -> FilterFormValues:
        return FilterFormValues(
            proxy_status=self.status,
            http="http" in self.protocols,
            https="https" in self.protocols,
            socks4="socks4" in self.protocols,
            socks5="socks5" in self.protocols,
            max_timeout=self.max_timeout,
            max_retries=self.max_retries,
            countries=list(self.countries),
            types=list(self.types),
            anonymity_levels=list(self.anonymity_levels),
            reputation_labels=list(self.reputation_labels),
        )

    def _active_fields(self) -> dict[str, Any]:
        # Bounds of exactly 0 mean "no filter"; an explicit zero is not expressible.
        active: dict[str, Any] = {}
        if self.status != "all":
            active["status"] = self.status
        if self.protocols:
            active["protocols"] = list(self.protocols)
        if self.countries:
            active["countries"] = list(self.countries)
        if self.types:
            active["types"] = list(self.types)
        if self.anonymity_levels:
            active["anonymityLevels"] = list(self.anonymity_levels)
        if self.max_timeout > 0:
            active["maxTimeout"] = self.max_timeout
        if self.max_retries > 0:
            active["maxRetries"] = self.max_retries
        if self.reputation_labels:
            active["reputationLabels"] = list(self.reputation_labels)
        return active

    def to_payload(self) -> dict[str, Any] | None:
        """Return the request payload, or ``None`` when nothing is active."""
        return self._active_fields() or None

    def active_count(self) -> int:
        """Count active categories; several values in one category count once."""
        return len(self._active_fields())

    def is_default(self) -> bool:
        return not self._active_fields()

    def to_dict(self) -> dict[str, Any]:
        """Return the complete storage representation."""
        return {
            "status": self.status,
            "protocols": list(self.protocols),
            "maxTimeout": self.max_timeout,
            "maxRetries": self.max_retries,
            "countries": list(self.countries),
            "types": list(self.types),
            "anonymityLevels": list(self.anonymity_levels),
            "reputationLabels": list(self.reputation_labels),
        }


def build_filters_from_form(form: FilterFormValues) -> AppliedFilters:
    return AppliedFilters.from_form(form)


def build_filter_payload(filters: AppliedFilters) -> dict[str, Any] | None:
    return filters.to_payload()


def active_filter_count(filters: AppliedFilters) -> int:
    return filters.active_count()


def filters_to_dict(filters: AppliedFilters) -> dict[str, Any]:
    return filters.to_dict()


def filter_button_label(filters: AppliedFilters) -> str:
    """Return ``"Filters"`` or ``"Filters (n)"`` for the panel toggle."""
    count = filters.active_count()
    if count == 0:
        return _("Filters")
    return _("Filters ({count})").format(count=count)


def normalize_stored_filters(raw: Any) -> AppliedFilters | None:
    """Rebuild filters read from storage.

    *raw* may be the JSON text or an already decoded mapping. Malformed
    JSON or anything that is not an object yields ``None``. Protocols and
    reputation labels outside the known sets are dropped.
    """
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.debug("Ignoring malformed stored filters")
            return None
    if not isinstance(raw, Mapping):
        return None

    def _list(key: str) -> Any:
        value = raw.get(key)
        return value if isinstance(value, (list, tuple)) else ()

    return AppliedFilters(
        status=raw.get("status", "all"),
        protocols=_restrict(_list("protocols"), PROTOCOLS),
        max_timeout=normalize_number(raw.get("maxTimeout")),
        max_retries=normalize_number(raw.get("maxRetries")),
        countries=_list("countries"),
        types=_list("types"),
        anonymity_levels=_list("anonymityLevels"),
        reputation_labels=_restrict(_list("reputationLabels"), REPUTATION_LABELS),
    )


class FilterModel:
    """Applied filters of one screen plus the filter panel draft.

    ``applied`` notifies listeners whenever a different filter value is
    committed. The vocabulary is cached for the lifetime of the model.
    """

    def __init__(self, initial: AppliedFilters | None = None) -> None:
        self.applied: ObservableValue[AppliedFilters] = ObservableValue(
            initial or AppliedFilters(), name="applied_filters"
        )
        self.form = self.applied.get().to_form()
        self.vocabulary: FilterVocabulary | None = None

    @property
    def current(self) -> AppliedFilters:
        return self.applied.get()

    @property
    def vocabulary_loaded(self) -> bool:
        return self.vocabulary is not None

    def sync_form(self) -> FilterFormValues:
        """Reset the draft to mirror the applied filters."""
        self.form = self.current.to_form()
        return self.form

    def apply(self) -> bool:
        """Commit the draft; return ``True`` if the applied value changed."""
        filters = AppliedFilters.from_form(self.form)
        self.form = filters.to_form()
        return self.applied.set(filters)

    def restore(self, filters: AppliedFilters) -> bool:
        changed = self.applied.set(filters)
        self.sync_form()
        return changed

    def clear(self) -> bool:
        """Return to default filters; ``True`` if something was active."""
        self.form = FilterFormValues()
        return self.applied.set(AppliedFilters())

    def set_vocabulary(self, vocabulary: FilterVocabulary | Mapping[str, Any]) -> None:
        if not isinstance(vocabulary, FilterVocabulary):
            vocabulary = FilterVocabulary.model_validate(vocabulary)
        self.vocabulary = vocabulary

    @property
    def button_label(self) -> str:
        return filter_button_label(self.current)

    @property
    def country_options(self) -> list[FilterOption]:
        return build_option_list(self.vocabulary.countries if self.vocabulary else ())

    @property
    def type_options(self) -> list[FilterOption]:
        return build_option_list(self.vocabulary.types if self.vocabulary else ())

    @property
    def anonymity_options(self) -> list[FilterOption]:
        return build_option_list(self.vocabulary.anonymity_levels if self.vocabulary else ())


__all__ = [
    "AppliedFilters",
    "FilterFormValues",
    "FilterModel",
    "FilterOption",
    "PROTOCOLS",
    "REPUTATION_LABELS",
    "REPUTATION_OPTIONS",
    "STATUS_OPTIONS",
    "STATUS_VALUES",
    "Status",
    "active_filter_count",
    "build_filter_payload",
    "build_filters_from_form",
    "build_option_list",
    "filter_button_label",
    "filters_to_dict",
    "normalize_number",
    "normalize_selection",
    "normalize_stored_filters",
]
