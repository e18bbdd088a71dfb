"""SQLAlchemy store backend against a throwaway SQLite database."""

from collections.abc import AsyncGenerator
from pathlib import Path
from uuid import uuid4

import pytest

from acadvizen.auth.local import LocalIdentityProvider
from acadvizen.config.settings import Settings
from acadvizen.container import build_services
from acadvizen.database.base import create_all_tables
from acadvizen.database.engine import create_app_engine
from acadvizen.exceptions import ErrorCode
from acadvizen.registrations.schemas import RegistrationRequest
from acadvizen.store.gateway import EntityStore, ListOptions
from acadvizen.store.protocols import Query, StoreError
from acadvizen.store.records import Course, Module, Registration, RegistrationStatus
from acadvizen.store.sql_client import SqlStoreClient


@pytest.fixture
async def sql_client(tmp_path: Path) -> AsyncGenerator[SqlStoreClient, None]:
    engine = create_app_engine(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    await create_all_tables(engine)
    client = SqlStoreClient(engine)
    yield client
    await client.close()


@pytest.mark.asyncio
async def test_insert_generates_id_and_timestamps(sql_client: SqlStoreClient) -> None:
    store = EntityStore(sql_client)

    course = (await store.create(Course, {"title": "Python", "slug": "python"})).unwrap()

    assert course.id
    assert course.created_at is not None
    assert course.is_published is False
    assert (await store.get_by_id(Course, course.id)).unwrap().title == "Python"


@pytest.mark.asyncio
async def test_select_filters_within_order_and_limit(sql_client: SqlStoreClient) -> None:
    store = EntityStore(sql_client)
    course = (await store.create(Course, {"title": "Python", "slug": "python"})).unwrap()
    other = (await store.create(Course, {"title": "SQL", "slug": "sql"})).unwrap()
    for index in (3, 1, 2):
        await store.create(Module, {"course_id": course.id, "title": f"M{index}", "order_index": index})
    await store.create(Module, {"course_id": other.id, "title": "Elsewhere"})

    ordered = (
        await store.list(Module, ListOptions(filters={"course_id": course.id}, order_by="order_index", ascending=True))
    ).unwrap()
    limited = (await store.list(Module, ListOptions(within={"course_id": [other.id]}, limit=5))).unwrap()
    empty = (await store.list(Module, ListOptions(within={"course_id": []}))).unwrap()

    assert [m.title for m in ordered] == ["M1", "M2", "M3"]
    assert [m.title for m in limited] == ["Elsewhere"]
    assert empty == []


@pytest.mark.asyncio
async def test_guarded_update_only_touches_matching_rows(sql_client: SqlStoreClient) -> None:
    store = EntityStore(sql_client)
    registration = (
        await store.create(
            Registration, {"name": "Asha", "email": "asha@example.com", "phone": "9876543210", "mode": "online"}
        )
    ).unwrap()

    confirmed = await store.update(
        Registration, registration.id, {"status": RegistrationStatus.CONFIRMED}, where={"status": "pending"}
    )
    again = await store.update(
        Registration, registration.id, {"status": RegistrationStatus.REJECTED}, where={"status": "pending"}
    )

    assert confirmed.unwrap().status == RegistrationStatus.CONFIRMED
    assert confirmed.data.updated_at is not None
    assert again.code == ErrorCode.NOT_FOUND
    assert (await store.get_by_id(Registration, registration.id)).unwrap().status == RegistrationStatus.CONFIRMED


@pytest.mark.asyncio
async def test_upsert_inserts_then_replaces(sql_client: SqlStoreClient) -> None:
    profile_id = str(uuid4())

    first = await sql_client.upsert("profiles", {"id": profile_id, "email": "a@example.com", "name": "Asha"})
    second = await sql_client.upsert("profiles", {"id": profile_id, "email": "a@example.com", "name": "Asha Rao"})

    assert first["id"] == second["id"] == profile_id
    rows = await sql_client.select("profiles", Query(filters={"id": profile_id}))
    assert [row["name"] for row in rows] == ["Asha Rao"]


@pytest.mark.asyncio
async def test_delete_and_unknown_columns(sql_client: SqlStoreClient) -> None:
    store = EntityStore(sql_client)
    course = (await store.create(Course, {"title": "Python", "slug": "python"})).unwrap()

    assert (await store.delete(Course, course.id)).success
    assert (await store.delete(Course, course.id)).code == ErrorCode.NOT_FOUND
    with pytest.raises(StoreError):
        await sql_client.insert("courses", {"title": "x", "slug": "x", "bogus": 1})
    with pytest.raises(StoreError):
        await sql_client.select("courses", Query(order_by="bogus"))


@pytest.mark.asyncio
async def test_registration_confirmation_with_local_identities(sql_client: SqlStoreClient) -> None:
    settings = Settings(_env_file=None, AUTH_PROVIDER="local", STORE_PROVIDER="postgres")
    services = build_services(settings, sql_client)
    assert isinstance(services.identity, LocalIdentityProvider)

    registration = (
        await services.registrations.create(
            RegistrationRequest(name="Asha Rao", email="asha@example.com", phone="9876543210", mode="online")
        )
    ).unwrap()
    confirmation = (await services.registrations.confirm(registration.id, str(uuid4()))).unwrap()

    authenticated = await services.identity.authenticate("ASHA@example.com", confirmation.temporary_password)
    assert authenticated is not None
    assert authenticated.id == confirmation.profile.id
    assert await services.identity.authenticate("asha@example.com", "wrong") is None

    token = services.identity.issue_token(authenticated)
    assert await services.identity.verify_token(token) == authenticated.id
    assert (await services.access.check_access(authenticated.id)).has_access
