"""Visible column set of a proxy table and its editable draft."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from ..columns import (
    ColumnDefinition,
    default_columns,
    get_column_definition,
    hidden_columns,
    is_known_column,
    normalize_columns,
)
from ..errors import ColumnVisibilityError
from ..i18n import _
from ..state import ObservableValue

logger = logging.getLogger("proxyview.columns")

LAST_COLUMN_MESSAGE = "At least one column must stay visible."


def move_item(items: Sequence[str], from_index: int, to_index: int) -> list[str]:
    """Return a copy of *items* with one entry moved to *to_index*."""
    moved = list(items)
    if from_index == to_index:
        return moved
    if not (0 <= from_index < len(moved)):
        raise IndexError(f"column index out of range: {from_index}")
    item = moved.pop(from_index)
    to_index = max(0, min(to_index, len(moved)))
    moved.insert(to_index, item)
    return moved


def _ensure_can_hide(columns: Sequence[str]) -> None:
    if len(columns) <= 1:
        raise ColumnVisibilityError(LAST_COLUMN_MESSAGE)


class ColumnSetModel:
    """Committed column set plus the draft edited in the column panel.

    While the editor is open, :meth:`reorder`, :meth:`move`, :meth:`hide`,
    :meth:`show` and :meth:`reset` change the draft only; otherwise they
    change the committed set directly. The committed set is always a
    normalized, non-empty list of known column ids.
    """

    def __init__(
        self,
        columns: Any = None,
        *,
        on_invalid: Callable[[str], None] | None = None,
    ) -> None:
        self.columns: ObservableValue[list[str]] = ObservableValue(
            normalize_columns(columns), name="columns"
        )
        self._draft: list[str] | None = None
        self._on_invalid = on_invalid

    @staticmethod
    def normalize(candidate: Any) -> list[str]:
        return normalize_columns(candidate)

    @property
    def visible(self) -> list[str]:
        return list(self.columns.get())

    @property
    def definitions(self) -> list[ColumnDefinition]:
        return [get_column_definition(column_id) for column_id in self.columns.get()]

    @property
    def editor_open(self) -> bool:
        return self._draft is not None

    @property
    def draft(self) -> list[str]:
        """Columns shown in the editor, or the committed set when closed."""
        return list(self._draft if self._draft is not None else self.columns.get())

    def _store(self, columns: list[str]) -> None:
        if self._draft is not None:
            self._draft = columns
        else:
            self.columns.set(columns)

    def replace(self, candidate: Any) -> list[str]:
        """Commit *candidate* after normalization; the draft is untouched."""
        columns = normalize_columns(candidate)
        self.columns.set(columns)
        return columns

    def reorder(self, from_index: int, to_index: int) -> None:
        self._store(move_item(self.draft, from_index, to_index))

    def move(self, column_id: str, to_index: int) -> None:
        working = self.draft
        if column_id not in working:
            return
        self._store(move_item(working, working.index(column_id), to_index))

    def hide(self, column_id: str) -> bool:
        """Remove *column_id*; refuse to remove the last visible column."""
        working = self.draft
        if column_id not in working:
            return False
        try:
            _ensure_can_hide(working)
        except ColumnVisibilityError as exc:
            logger.info("Rejected hiding %s: %s", column_id, exc)
            if self._on_invalid is not None:
                self._on_invalid(_(LAST_COLUMN_MESSAGE))
            return False
        self._store([item for item in working if item != column_id])
        return True

    def show(self, column_id: str) -> bool:
        working = self.draft
        if not is_known_column(column_id) or column_id in working:
            return False
        self._store([*working, column_id])
        return True

    def reset(self) -> None:
        self._store(default_columns())

    def hidden(self) -> list[ColumnDefinition]:
        """Known columns missing from the working set, in catalogue order."""
        return hidden_columns(self.draft)

    def open_editor(self) -> list[str]:
        self._draft = list(self.columns.get())
        return list(self._draft)

    def reset_editor(self) -> None:
        if self._draft is not None:
            self._draft = default_columns()

    def close_editor(self) -> None:
        self._draft = None

    def normalized_draft(self) -> list[str]:
        return normalize_columns(self.draft)


__all__ = ["ColumnSetModel", "LAST_COLUMN_MESSAGE", "move_item"]
