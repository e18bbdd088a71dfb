"""Store client backed by Supabase's PostgREST API."""

import logging
from collections.abc import Mapping
from typing import Any

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient

from acadvizen.store.protocols import Query, Row, StoreError


logger = logging.getLogger(__name__)


def _filter_value(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


class SupabaseStoreClient:
    """Row store over an injected async Supabase client (service-role key)."""

    def __init__(self, client: AsyncClient) -> None:
        self.client = client

    def _apply_filters(self, builder: Any, filters: Mapping[str, Any]) -> Any:
        for column, value in filters.items():
            builder = builder.is_(column, "null") if value is None else builder.eq(column, _filter_value(value))
        return builder

    async def _execute(self, builder: Any, table: str) -> list[Row]:
        try:
            response = await builder.execute()
        except APIError as e:
            raise StoreError(e.message or f"PostgREST error on {table}") from e
        except httpx.HTTPError as e:
            raise StoreError(f"Could not reach the database for {table}") from e
        return list(response.data or [])

    async def insert(self, table: str, row: Row) -> Row:
        rows = await self._execute(self.client.table(table).insert(row), table)
        if not rows:
            msg = f"Insert into {table} returned no row"
            raise StoreError(msg)
        return rows[0]

    async def upsert(self, table: str, row: Row) -> Row:
        rows = await self._execute(self.client.table(table).upsert(row), table)
        if not rows:
            msg = f"Upsert into {table} returned no row"
            raise StoreError(msg)
        return rows[0]

    async def update(self, table: str, filters: Mapping[str, Any], values: Row) -> list[Row]:
        builder = self._apply_filters(self.client.table(table).update(values), filters)
        return await self._execute(builder, table)

    async def delete(self, table: str, filters: Mapping[str, Any]) -> int:
        builder = self._apply_filters(self.client.table(table).delete(), filters)
        return len(await self._execute(builder, table))

    async def select(self, table: str, query: Query) -> list[Row]:
        if any(len(values) == 0 for values in query.within.values()):
            return []

        builder = self._apply_filters(self.client.table(table).select("*"), query.filters)
        for column, values in query.within.items():
            builder = builder.in_(column, list(values))
        if query.order_by:
            builder = builder.order(query.order_by, desc=not query.ascending)
        if query.limit:
            builder = builder.limit(query.limit)
        return await self._execute(builder, table)

    async def close(self) -> None:
        await self.client.postgrest.aclose()
        logger.info("Supabase store client closed")
