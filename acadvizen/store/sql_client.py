"""Store client over the SQLAlchemy async engine (self-hosted Postgres)."""

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Table, delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from acadvizen.database import models  # noqa: F401
from acadvizen.database.base import Base
from acadvizen.store.protocols import Query, Row, StoreError


logger = logging.getLogger(__name__)


class SqlStoreClient:
    """Row store over the declarative tables registered on `Base.metadata`."""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine

    def _table(self, name: str) -> Table:
        try:
            return Base.metadata.tables[name]
        except KeyError as e:
            msg = f"Unknown table {name}"
            raise StoreError(msg) from e

    def _coerce(self, table: Table, values: Mapping[str, Any]) -> dict[str, Any]:
        """Check column names and turn ISO strings back into datetimes."""
        coerced: dict[str, Any] = {}
        for key, value in values.items():
            if key not in table.c:
                msg = f"Column {key} does not exist on {table.name}"
                raise StoreError(msg)
            if isinstance(value, str) and isinstance(table.c[key].type, DateTime):
                value = datetime.fromisoformat(value)
            coerced[key] = value
        return coerced

    def _where(self, table: Table, filters: Mapping[str, Any]) -> list[Any]:
        clauses = []
        for column, value in self._coerce(table, filters).items():
            clauses.append(table.c[column].is_(None) if value is None else table.c[column] == value)
        return clauses

    async def insert(self, table: str, row: Row) -> Row:
        t = self._table(table)
        stmt = insert(t).values(**self._coerce(t, row)).returning(*t.c)
        try:
            async with self.engine.begin() as conn:
                result = await conn.execute(stmt)
                return dict(result.mappings().one())
        except (SQLAlchemyError, ValueError) as e:
            logger.error(f"Insert into {table} failed: {e}")
            raise StoreError(f"Failed to insert into {table}") from e

    async def upsert(self, table: str, row: Row) -> Row:
        t = self._table(table)
        values = self._coerce(t, row)
        if "id" not in values:
            return await self.insert(table, row)

        changes = {k: v for k, v in values.items() if k != "id"}
        try:
            async with self.engine.begin() as conn:
                if changes:
                    stmt = update(t).where(t.c.id == values["id"]).values(**changes).returning(*t.c)
                    updated = (await conn.execute(stmt)).mappings().first()
                    if updated is not None:
                        return dict(updated)
                else:
                    existing = (await conn.execute(select(t).where(t.c.id == values["id"]))).mappings().first()
                    if existing is not None:
                        return dict(existing)
                result = await conn.execute(insert(t).values(**values).returning(*t.c))
                return dict(result.mappings().one())
        except (SQLAlchemyError, ValueError) as e:
            logger.error(f"Upsert into {table} failed: {e}")
            raise StoreError(f"Failed to upsert into {table}") from e

    async def update(self, table: str, filters: Mapping[str, Any], values: Row) -> list[Row]:
        t = self._table(table)
        stmt = update(t).where(*self._where(t, filters)).values(**self._coerce(t, values)).returning(*t.c)
        try:
            async with self.engine.begin() as conn:
                result = await conn.execute(stmt)
                return [dict(row) for row in result.mappings().all()]
        except (SQLAlchemyError, ValueError) as e:
            logger.error(f"Update of {table} failed: {e}")
            raise StoreError(f"Failed to update {table}") from e

    async def delete(self, table: str, filters: Mapping[str, Any]) -> int:
        t = self._table(table)
        stmt = delete(t).where(*self._where(t, filters))
        try:
            async with self.engine.begin() as conn:
                result = await conn.execute(stmt)
                return result.rowcount or 0
        except (SQLAlchemyError, ValueError) as e:
            logger.error(f"Delete from {table} failed: {e}")
            raise StoreError(f"Failed to delete from {table}") from e

    async def select(self, table: str, query: Query) -> list[Row]:
        t = self._table(table)
        if any(len(values) == 0 for values in query.within.values()):
            return []

        stmt = select(t).where(*self._where(t, query.filters))
        for column, values in query.within.items():
            if column not in t.c:
                msg = f"Column {column} does not exist on {table}"
                raise StoreError(msg)
            stmt = stmt.where(t.c[column].in_(list(values)))
        if query.order_by:
            if query.order_by not in t.c:
                msg = f"Column {query.order_by} does not exist on {table}"
                raise StoreError(msg)
            column = t.c[query.order_by]
            stmt = stmt.order_by(column.asc() if query.ascending else column.desc())
        if query.limit:
            stmt = stmt.limit(query.limit)

        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(stmt)
                return [dict(row) for row in result.mappings().all()]
        except (SQLAlchemyError, ValueError) as e:
            logger.error(f"Select from {table} failed: {e}")
            raise StoreError(f"Failed to read {table}") from e

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info("Database engine disposed successfully")
