"""Shared fixtures: in-memory store, collaborator doubles, wired services and an HTTP client."""

from collections.abc import AsyncGenerator, Callable
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from acadvizen.config.settings import Settings
from acadvizen.container import Services, build_services
from acadvizen.payments.gateway import RazorpayGateway, checkout_signature
from acadvizen.store.gateway import EntityStore
from acadvizen.store.records import AccountPaymentStatus, Role
from tests.fakes import FakeIdentityProvider, InMemoryStoreClient


RAZORPAY_TEST_SECRET = "rzp_test_secret"


def sign(order_id: str, payment_id: str) -> str:
    """Signature the Razorpay checkout would send for this order/payment pair."""
    return checkout_signature(RAZORPAY_TEST_SECRET, order_id, payment_id)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        STORE_PROVIDER="supabase",
        AUTH_PROVIDER="supabase",
        RAZORPAY_KEY_SECRET=RAZORPAY_TEST_SECRET,
        SHEETS_WEBHOOK_SECRET="sheet-secret",
        FRONTEND_URL="https://app.acadvizen.test",
    )


@pytest.fixture
def store_client() -> InMemoryStoreClient:
    return InMemoryStoreClient()


@pytest.fixture
def store(store_client: InMemoryStoreClient) -> EntityStore:
    return EntityStore(store_client)


@pytest.fixture
def identity() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def gateway() -> RazorpayGateway:
    # No key id: orders are fabricated locally, signatures are checked for real
    return RazorpayGateway(key_id="", key_secret=RAZORPAY_TEST_SECRET)


@pytest.fixture
def services(
    settings: Settings,
    store_client: InMemoryStoreClient,
    identity: FakeIdentityProvider,
    gateway: RazorpayGateway,
) -> Services:
    return build_services(settings, store_client, identity, gateway)


@pytest.fixture
def make_profile(store_client: InMemoryStoreClient) -> Callable[..., dict[str, Any]]:
    def _make(**overrides: Any) -> dict[str, Any]:
        values = {
            "email": "student@example.com",
            "name": "Test Student",
            "role": Role.STUDENT.value,
            "is_confirmed": True,
            "payment_status": AccountPaymentStatus.PENDING.value,
            **overrides,
        }
        return store_client.seed("profiles", **values)

    return _make


@pytest.fixture
def make_course(store_client: InMemoryStoreClient) -> Callable[..., dict[str, Any]]:
    def _make(**overrides: Any) -> dict[str, Any]:
        values = {"title": "Data Science Bootcamp", "slug": f"course-{len(store_client.rows('courses'))}", **overrides}
        return store_client.seed("courses", **values)

    return _make


@pytest.fixture
async def api_client(services: Services) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app with the test services injected."""
    from acadvizen.main import create_app
    from acadvizen.middleware.security import limiter

    limiter.reset()
    app = create_app()
    app.state.services = services

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def auth_headers(identity: FakeIdentityProvider) -> Callable[[str], dict[str, str]]:
    def _headers(user_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {identity.issue(user_id)}"}

    return _headers


@pytest.fixture
def admin(make_profile: Callable[..., dict[str, Any]]) -> dict[str, Any]:
    return make_profile(email="admin@acadvizen.test", name="Admin", role=Role.ADMIN.value)
