"""In-memory collaborator doubles shared by the test suite."""

from collections import defaultdict
from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

from acadvizen.auth.identity import AuthIdentity, IdentityProviderError
from acadvizen.store.protocols import Query, Row, StoreError
from acadvizen.store.records import RECORD_TYPES


_EPOCH = datetime(2026, 1, 1, tzinfo=UTC)
_AUTO_TIMESTAMPS = ("created_at", "updated_at", "enrolled_at", "issued_at")


class InMemoryStoreClient:
    """Dict-backed `StoreClient`.

    Generated timestamps advance one microsecond per write so newest-first
    ordering is deterministic. `fail_on` holds (method, table) pairs that
    raise `StoreError`.
    """

    def __init__(self) -> None:
        self.tables: dict[str, dict[str, Row]] = defaultdict(dict)
        self.fail_on: set[tuple[str, str]] = set()
        self.selects: list[tuple[str, Query]] = []
        self.closed = False
        self._sequence = 0

    def _tick(self) -> str:
        self._sequence += 1
        return (_EPOCH + timedelta(microseconds=self._sequence)).isoformat()

    def _check(self, method: str, table: str) -> None:
        if (method, table) in self.fail_on:
            msg = f"{method} on {table} failed"
            raise StoreError(msg)

    @staticmethod
    def _matches(row: Row, filters: Mapping[str, Any]) -> bool:
        return all(row.get(column) == value for column, value in filters.items())

    def rows(self, table: str) -> list[Row]:
        return list(self.tables[table].values())

    def seed(self, table: str, **values: Any) -> Row:
        """Insert a row directly, bypassing failure injection."""
        row = self._complete(table, values)
        self.tables[table][row["id"]] = row
        return dict(row)

    def _complete(self, table: str, values: Mapping[str, Any]) -> Row:
        row = dict(values)
        row.setdefault("id", str(uuid4()))
        fields = RECORD_TYPES[table].model_fields if table in RECORD_TYPES else {}
        for column in _AUTO_TIMESTAMPS:
            if column in fields and row.get(column) is None:
                row[column] = self._tick()
        return row

    async def insert(self, table: str, row: Row) -> Row:
        self._check("insert", table)
        stored = self._complete(table, row)
        if stored["id"] in self.tables[table]:
            msg = f"duplicate key value violates unique constraint on {table}"
            raise StoreError(msg)
        self.tables[table][stored["id"]] = stored
        return dict(stored)

    async def upsert(self, table: str, row: Row) -> Row:
        self._check("upsert", table)
        existing = self.tables[table].get(row.get("id", ""))
        if existing is not None:
            existing.update(row)
            return dict(existing)
        stored = self._complete(table, row)
        self.tables[table][stored["id"]] = stored
        return dict(stored)

    async def update(self, table: str, filters: Mapping[str, Any], values: Row) -> list[Row]:
        self._check("update", table)
        updated = []
        for row in self.tables[table].values():
            if self._matches(row, filters):
                row.update(values)
                updated.append(dict(row))
        return updated

    async def delete(self, table: str, filters: Mapping[str, Any]) -> int:
        self._check("delete", table)
        doomed = [key for key, row in self.tables[table].items() if self._matches(row, filters)]
        for key in doomed:
            del self.tables[table][key]
        return len(doomed)

    async def select(self, table: str, query: Query) -> list[Row]:
        self._check("select", table)
        self.selects.append((table, query))
        rows = [
            dict(row)
            for row in self.tables[table].values()
            if self._matches(row, query.filters)
            and all(row.get(column) in values for column, values in query.within.items())
        ]
        if query.order_by:
            present = [row for row in rows if row.get(query.order_by) is not None]
            missing = [row for row in rows if row.get(query.order_by) is None]
            present.sort(key=lambda row: row[query.order_by], reverse=not query.ascending)
            rows = present + missing
        if query.limit:
            rows = rows[: query.limit]
        return rows

    async def close(self) -> None:
        self.closed = True


class FakeIdentityProvider:
    """Identity double with switchable failures and a token table."""

    def __init__(self, *, fail_admin: bool = False, fail_sign_up: bool = False) -> None:
        self.fail_admin = fail_admin
        self.fail_sign_up = fail_sign_up
        self.users: dict[str, AuthIdentity] = {}
        self.metadata: dict[str, dict[str, Any]] = {}
        self.passwords: dict[str, str] = {}
        self.calls: list[str] = []
        self.tokens: dict[str, str] = {}

    def _create(self, email: str, password: str, metadata: Mapping[str, Any]) -> AuthIdentity:
        if any(user.email == email for user in self.users.values()):
            msg = "User already registered"
            raise IdentityProviderError(msg)
        identity = AuthIdentity(id=str(uuid4()), email=email)
        self.users[identity.id] = identity
        self.metadata[identity.id] = dict(metadata)
        self.passwords[identity.id] = password
        return identity

    async def create_user(self, email: str, password: str, metadata: Mapping[str, Any]) -> AuthIdentity:
        self.calls.append("create_user")
        if self.fail_admin:
            msg = "admin API unavailable"
            raise IdentityProviderError(msg)
        return self._create(email, password, metadata)

    async def sign_up(self, email: str, password: str, metadata: Mapping[str, Any]) -> AuthIdentity:
        self.calls.append("sign_up")
        if self.fail_sign_up:
            msg = "sign-up disabled"
            raise IdentityProviderError(msg)
        return self._create(email, password, metadata)

    async def find_user(self, email: str) -> AuthIdentity | None:
        return next((user for user in self.users.values() if user.email == email), None)

    async def update_user(self, user_id: str, password: str, metadata: Mapping[str, Any]) -> AuthIdentity:
        self.calls.append("update_user")
        self.passwords[user_id] = password
        self.metadata[user_id] = dict(metadata)
        return self.users[user_id]

    def issue(self, user_id: str) -> str:
        token = f"token-{uuid4().hex}"
        self.tokens[token] = user_id
        return token

    async def verify_token(self, token: str) -> str | None:
        return self.tokens.get(token)
