"""Page-local sorting of proxy rows.

Only the rows of the currently loaded page are ranked; changing the sort
never asks the data service for a differently ordered page.
"""

from __future__ import annotations

import datetime
import functools
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from .model import Row

SortableValue = float | str | None

_HEALTH_PREFIX = "health_"


def _epoch_millis(moment: datetime.datetime) -> float:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=datetime.UTC)
    return moment.timestamp() * 1000.0


def _parse_timestamp(text: str) -> float | None:
    candidate = text.strip()
    if not candidate:
        return None
    if candidate.endswith(("Z", "z")):
        candidate = candidate[:-1] + "+00:00"
    try:
        return _epoch_millis(datetime.datetime.fromisoformat(candidate))
    except ValueError:
        return None


def normalize_sortable_value(value: Any) -> SortableValue:
    """Map *value* onto a comparable scalar.

    Booleans become ``0``/``1``, numbers pass through (``NaN`` becomes
    ``None``), datetimes and ISO-8601 strings become epoch milliseconds,
    other strings are lowercased. Anything else is ``None``.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return math.inf if value > 0 else -math.inf
        return None if math.isnan(number) else number
    if isinstance(value, datetime.datetime):
        return _epoch_millis(value)
    if isinstance(value, datetime.date):
        return _epoch_millis(datetime.datetime.combine(value, datetime.time()))
    if isinstance(value, str):
        timestamp = _parse_timestamp(value)
        return value.lower() if timestamp is None else timestamp
    return None


def primary_reputation(row: Mapping[str, Any]) -> Mapping[str, Any] | None:
    """Return the overall reputation, else the first per-protocol one."""
    reputation = row.get("reputation")
    if not isinstance(reputation, Mapping):
        return None
    overall = reputation.get("overall")
    if overall:
        return overall
    protocols = reputation.get("protocols")
    if isinstance(protocols, Mapping):
        for entry in protocols.values():
            if entry:
                return entry
    return None


def _ip_port(row: Mapping[str, Any]) -> str:
    ip = row.get("ip") or ""
    port = row.get("port")
    if isinstance(port, bool) or not isinstance(port, (int, float)) or not math.isfinite(port):
        port = 0
    return f"{ip}:{int(port):05d}"


def get_sortable_value(row: Mapping[str, Any], field: str | None) -> Any:
    """Return the raw value of *field* for *row*, resolving synthetic fields."""
    if not field:
        return None
    if field == "reputation":
        reputation = primary_reputation(row)
        return reputation.get("score") if isinstance(reputation, Mapping) else None
    if field == "ip_port":
        return _ip_port(row)
    if field.startswith(_HEALTH_PREFIX) and field not in row:
        health = row.get("health")
        if isinstance(health, Mapping):
            return health.get(field[len(_HEALTH_PREFIX):])
        return None
    return row.get(field)


def _kind(value: SortableValue) -> int:
    return 0 if isinstance(value, float) else 1


def compare(left: SortableValue, right: SortableValue, direction: int) -> int:
    """Compare normalized values; ``None`` is last whatever the direction."""
    if left == right:
        return 0
    if left is None:
        return 1
    if right is None:
        return -1
    if _kind(left) != _kind(right):
        # Numbers and timestamps rank before plain text.
        return (_kind(left) - _kind(right)) * direction
    if left < right:  # type: ignore[operator]
        return -direction
    if left > right:  # type: ignore[operator]
        return direction
    return 0


def apply_sort(rows: Iterable[Row], field: str | None, direction: int | None) -> list[Row]:
    """Return *rows* ordered by *field*; ties keep their input order.

    Without a field or direction the input order is returned unchanged.
    """
    prepared = list(rows)
    if not field or not direction:
        return prepared
    step = 1 if direction > 0 else -1
    keyed = [(normalize_sortable_value(get_sortable_value(row, field)), row) for row in prepared]

    def _compare(a: tuple[SortableValue, Row], b: tuple[SortableValue, Row]) -> int:
        return compare(a[0], b[0], step)

    keyed.sort(key=functools.cmp_to_key(_compare))
    return [row for _value, row in keyed]


@dataclass(frozen=True)
class SortSpec:
    """Current sort column and direction; both ``None`` means unsorted."""

    field: str | None = None
    direction: int | None = None

    @property
    def active(self) -> bool:
        return bool(self.field) and bool(self.direction)

    def toggle(self, field: str) -> SortSpec:
        """Cycle *field* through ascending, descending and unsorted."""
        if self.field != field or not self.direction:
            return SortSpec(field, 1)
        if self.direction == 1:
            return SortSpec(field, -1)
        return SortSpec()

    def apply(self, rows: Iterable[Row]) -> list[Row]:
        return apply_sort(rows, self.field, self.direction)


__all__ = [
    "SortSpec",
    "SortableValue",
    "apply_sort",
    "compare",
    "get_sortable_value",
    "normalize_sortable_value",
    "primary_reputation",
]
