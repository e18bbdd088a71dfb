"""Row store contract shared by the Supabase and SQL backends."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol


Row = dict[str, Any]


class StoreError(Exception):
    """Transport or database failure reported by a store client."""


@dataclass(frozen=True)
class Query:
    """Conjunctive equality filters plus ordering and limit.

    `within` is the only non-equality predicate (`column IN values`); an
    empty value list matches nothing.
    """

    filters: Mapping[str, Any] = field(default_factory=dict)
    within: Mapping[str, Sequence[Any]] = field(default_factory=dict)
    order_by: str | None = None
    ascending: bool = False
    limit: int | None = None


class StoreClient(Protocol):
    """Collections keyed by table name; every method raises `StoreError` on failure."""

    async def insert(self, table: str, row: Row) -> Row:
        """Insert one row and return it as stored (with generated columns)."""
        ...

    async def upsert(self, table: str, row: Row) -> Row:
        """Insert, or replace the row sharing the same id."""
        ...

    async def update(self, table: str, filters: Mapping[str, Any], values: Row) -> list[Row]:
        """Update every row matching `filters` and return the updated rows."""
        ...

    async def delete(self, table: str, filters: Mapping[str, Any]) -> int:
        """Delete rows matching `filters` and return how many went away."""
        ...

    async def select(self, table: str, query: Query) -> list[Row]:
        """Return rows matching `query`."""
        ...

    async def close(self) -> None:
        """Release connections."""
        ...
