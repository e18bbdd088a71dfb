"""Entity store gateway: typed CRUD over named collections.

Every call returns an `OperationResult`; store and decoding failures are
logged here and surface as `DependencyFailure` results, never as exceptions.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, TypeVar

from pydantic import ValidationError as PydanticValidationError
from pydantic_core import to_jsonable_python

from acadvizen.core.result import UNEXPECTED_ERROR, OperationResult
from acadvizen.exceptions import DependencyFailure, ResourceNotFoundError
from acadvizen.store.protocols import Query, Row, StoreClient, StoreError
from acadvizen.store.records import Record


logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)
T = TypeVar("T")


@dataclass(frozen=True)
class ListOptions:
    """Options for `EntityStore.list`; filters are conjunctive equality."""

    filters: Mapping[str, Any] = field(default_factory=dict)
    within: Mapping[str, Sequence[Any]] = field(default_factory=dict)
    order_by: str | None = None
    ascending: bool = False
    limit: int | None = None

    def to_query(self) -> Query:
        return Query(
            filters=to_jsonable_python(dict(self.filters)),
            within=to_jsonable_python({k: list(v) for k, v in self.within.items()}),
            order_by=self.order_by,
            ascending=self.ascending,
            limit=self.limit,
        )


def _payload(data: Mapping[str, Any]) -> Row:
    return to_jsonable_python(dict(data))


class EntityStore:
    """Generic create/read/update/delete/list over record kinds."""

    def __init__(self, client: StoreClient) -> None:
        self.client = client

    async def _run(self, action: str, kind: type[Record], call: Callable[[], Awaitable[T]]) -> OperationResult[T]:
        try:
            return OperationResult.ok(await call())
        except ResourceNotFoundError as e:
            return OperationResult.fail(e)
        except StoreError as e:
            logger.error(f"{action} {kind.table} error: {e}")
            return OperationResult.fail(DependencyFailure(str(e) or f"Failed to {action.lower()} {kind.table}"))
        except PydanticValidationError as e:
            logger.error(f"{action} {kind.table} returned malformed data: {e}")
            return OperationResult.fail(DependencyFailure(f"Malformed {kind.table} data from store"))
        except Exception:
            logger.exception(f"{action} {kind.table} error")
            return OperationResult.fail(DependencyFailure(UNEXPECTED_ERROR))

    async def create(self, kind: type[R], data: Mapping[str, Any]) -> OperationResult[R]:
        """Insert a row and return the stored record."""

        async def call() -> R:
            row = await self.client.insert(kind.table, _payload(data))
            return kind.model_validate(row)

        return await self._run("Create", kind, call)

    async def upsert(self, kind: type[R], data: Mapping[str, Any]) -> OperationResult[R]:
        """Insert or replace by id."""

        async def call() -> R:
            row = await self.client.upsert(kind.table, _payload(data))
            return kind.model_validate(row)

        return await self._run("Upsert", kind, call)

    async def update(
        self,
        kind: type[R],
        record_id: str,
        data: Mapping[str, Any],
        *,
        where: Mapping[str, Any] | None = None,
    ) -> OperationResult[R]:
        """Update one record by id.

        `where` adds equality guards (e.g. the expected current status); when
        nothing matches the result is a not-found failure and no row changes.
        """
        values = dict(data)
        if "updated_at" in kind.model_fields:
            values.setdefault("updated_at", datetime.now(UTC))
        filters = {"id": record_id, **(where or {})}

        async def call() -> R:
            rows = await self.client.update(kind.table, _payload(filters), _payload(values))
            if not rows:
                raise ResourceNotFoundError.for_resource(kind.__name__, record_id)
            return kind.model_validate(rows[0])

        return await self._run("Update", kind, call)

    async def delete(self, kind: type[R], record_id: str) -> OperationResult[None]:
        async def call() -> None:
            deleted = await self.client.delete(kind.table, {"id": record_id})
            if not deleted:
                raise ResourceNotFoundError.for_resource(kind.__name__, record_id)

        return await self._run("Delete", kind, call)

    async def list(self, kind: type[R], options: ListOptions | None = None) -> OperationResult[list[R]]:
        """Return records matching `options`, newest first unless told otherwise."""
        query = (options or ListOptions()).to_query()

        async def call() -> list[R]:
            rows = await self.client.select(kind.table, query)
            return [kind.model_validate(row) for row in rows]

        return await self._run("Fetch", kind, call)

    async def get_by_id(self, kind: type[R], record_id: str) -> OperationResult[R]:
        async def call() -> R:
            rows = await self.client.select(kind.table, Query(filters={"id": record_id}, limit=1))
            if not rows:
                raise ResourceNotFoundError.for_resource(kind.__name__, record_id)
            return kind.model_validate(rows[0])

        return await self._run("Fetch", kind, call)

    async def find_one(
        self,
        kind: type[R],
        filters: Mapping[str, Any],
        *,
        order_by: str | None = "created_at",
    ) -> OperationResult[R | None]:
        """Return the newest record matching `filters`, or `None` when absent."""
        query = ListOptions(filters=filters, order_by=order_by, limit=1).to_query()

        async def call() -> R | None:
            rows = await self.client.select(kind.table, query)
            return kind.model_validate(rows[0]) if rows else None

        return await self._run("Fetch", kind, call)
