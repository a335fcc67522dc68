"""Board item shapes as returned by the monday GraphQL API."""

from __future__ import annotations

from typing import Any, NamedTuple


class ColumnValue(NamedTuple):
    id: str | None
    text: str | None = None
    label: str | None = None
    color: str | None = None

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> ColumnValue:
        style = raw.get("label_style") or {}
        return cls(
            id=raw.get("id"),
            text=raw.get("text"),
            label=raw.get("label"),
            color=style.get("color"),
        )


class Item(NamedTuple):
    id: str
    name: str | None = None
    board_id: str | None = None
    column_values: tuple[ColumnValue, ...] = ()
    subitems: tuple[Item, ...] = ()
    parent_id: str | None = None

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> Item:
        """Build an Item from one entry of a GraphQL ``items`` result.

        Column values that matched no fragment arrive as ``{}`` and are kept so
        positional lookups see the same order the board does.
        """
        board = raw.get("board") or {}
        parent = raw.get("parent_item") or {}
        return cls(
            id=str(raw["id"]),
            name=raw.get("name"),
            board_id=str(board["id"]) if board.get("id") is not None else None,
            column_values=tuple(ColumnValue.from_api(cv or {}) for cv in raw.get("column_values") or []),
            subitems=tuple(cls.from_api(sub) for sub in raw.get("subitems") or []),
            parent_id=str(parent["id"]) if parent.get("id") is not None else None,
        )

    def column(self, column_id: str) -> ColumnValue | None:
        """Return the column value with the given id, if any."""
        for cv in self.column_values:
            if cv.id == column_id:
                return cv
        return None

    def first_colored_column(self, *, require_id: bool = False) -> ColumnValue | None:
        """Return the first column value carrying a label colour."""
        for cv in self.column_values:
            if cv.color and (cv.id or not require_id):
                return cv
        return None
