"""End-to-end API flows over the in-memory store.

High-level, endpoint-first tests that mimic user flows:
- Public registration, admin confirmation, first dashboard visit
- Enrollment, checkout order, signature verification, progress
- Error envelope and status mapping for the failure kinds
"""

from collections.abc import Callable
from typing import Any

import pytest
from httpx import AsyncClient

from acadvizen.container import Services
from tests.conftest import sign
from tests.fakes import FakeIdentityProvider, InMemoryStoreClient


REGISTRATION = {"name": "Asha Rao", "email": "asha@example.com", "phone": "+91 98765 43210", "mode": "online"}


async def _register_and_confirm(
    api_client: AsyncClient, admin_headers: dict[str, str], form: dict[str, str] | None = None
) -> dict[str, Any]:
    created = await api_client.post("/api/v1/registrations", json=form or REGISTRATION)
    assert created.status_code == 201, created.text
    confirmed = await api_client.post(f"/api/v1/registrations/{created.json()['id']}/confirm", headers=admin_headers)
    assert confirmed.status_code == 200, confirmed.text
    return confirmed.json()


@pytest.mark.asyncio
async def test_health(api_client: AsyncClient) -> None:
    response = await api_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
    assert response.headers["X-Content-Type-Options"] == "nosniff"


@pytest.mark.asyncio
async def test_registration_to_paid_enrollment(
    api_client: AsyncClient,
    store_client: InMemoryStoreClient,
    identity: FakeIdentityProvider,
    admin: dict[str, Any],
    auth_headers: Callable[[str], dict[str, str]],
    make_course: Callable[..., dict[str, Any]],
) -> None:
    admin_headers = auth_headers(admin["id"])
    course = make_course(title="Python", price=4999)
    module = store_client.seed("modules", course_id=course["id"], title="Intro")
    video = store_client.seed("videos", module_id=module["id"], title="Welcome", video_url="https://v/1")
    store_client.seed("pdfs", module_id=module["id"], title="Notes", file_url="https://p/1")

    created = await api_client.post("/api/v1/registrations", json=REGISTRATION)
    assert created.status_code == 201
    registration = created.json()
    assert registration["status"] == "pending"
    assert [log["template"] for log in store_client.rows("email_logs")] == ["registration_pending"]

    confirmed = await api_client.post(f"/api/v1/registrations/{registration['id']}/confirm", headers=admin_headers)
    assert confirmed.status_code == 200
    body = confirmed.json()
    assert body["registration"]["status"] == "confirmed"
    assert body["student_id"].startswith("STU")
    (student_id,) = identity.users
    student_headers = auth_headers(student_id)

    access = await api_client.get("/api/v1/dashboard/access", headers=student_headers)
    assert access.json() == {"has_access": True, "reason": None}

    enrolled = await api_client.post(f"/api/v1/dashboard/courses/{course['id']}/enroll", headers=student_headers)
    assert enrolled.status_code == 201
    enrollment = enrolled.json()
    assert enrollment["status"] == "pending"

    order = await api_client.post(
        "/api/v1/payments/orders",
        json={"amount": 4999, "enrollment_id": enrollment["id"]},
        headers=student_headers,
    )
    assert order.status_code == 201
    order_id = order.json()["order_id"]

    verified = await api_client.post(
        "/api/v1/payments/verify",
        json={
            "razorpay_order_id": order_id,
            "razorpay_payment_id": "pay_abc",
            "razorpay_signature": sign(order_id, "pay_abc"),
        },
        headers=student_headers,
    )
    assert verified.status_code == 200
    assert verified.json()["status"] == "completed"
    assert store_client.tables["enrollments"][enrollment["id"]]["status"] == "active"
    assert store_client.tables["profiles"][student_id]["payment_status"] == "paid"

    progress = await api_client.put(
        "/api/v1/progress",
        json={"module_id": module["id"], "content_id": video["id"], "content_type": "video", "is_completed": True},
        headers=student_headers,
    )
    assert progress.status_code == 200
    summary = await api_client.get(f"/api/v1/progress/courses/{course['id']}", headers=student_headers)
    assert summary.json()["progress_percentage"] == 50.0

    dashboard = await api_client.get("/api/v1/dashboard", headers=student_headers)
    assert dashboard.status_code == 200
    data = dashboard.json()
    assert data["enrollments"][0]["course"]["title"] == "Python"
    assert data["enrollments"][0]["status"] == "active"
    assert [n["type"] for n in data["notifications"]] == ["payment", "success"]
    assert len(data["recent_progress"]) == 1

    templates = [log["template"] for log in store_client.rows("email_logs")]
    assert templates == ["registration_pending", "welcome", "payment_confirmation"]

    history = await api_client.get("/api/v1/payments/history", headers=student_headers)
    assert [p["razorpay_payment_id"] for p in history.json()] == ["pay_abc"]


@pytest.mark.asyncio
async def test_registration_validation_error_envelope(api_client: AsyncClient, store_client: InMemoryStoreClient) -> None:
    response = await api_client.post("/api/v1/registrations", json={**REGISTRATION, "phone": "123"})

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["detail"] == "Please enter a valid phone number (at least 10 digits)"
    assert error["metadata"]["errors"] == {"phone": "Please enter a valid phone number (at least 10 digits)"}
    assert store_client.rows("registrations") == []


@pytest.mark.asyncio
async def test_duplicate_registration_conflicts(api_client: AsyncClient) -> None:
    assert (await api_client.post("/api/v1/registrations", json=REGISTRATION)).status_code == 201

    response = await api_client.post("/api/v1/registrations", json=REGISTRATION)

    assert response.status_code == 409
    assert response.json()["error"]["detail"] == "A registration with this email is already pending"


@pytest.mark.asyncio
async def test_malformed_body_is_unprocessable(api_client: AsyncClient) -> None:
    response = await api_client.post("/api/v1/registrations", json={"name": ["not", "a", "string"]})

    assert response.status_code == 422
    assert response.json()["error"]["detail"] == "Invalid input data"


@pytest.mark.asyncio
async def test_registration_is_rate_limited(api_client: AsyncClient) -> None:
    statuses = []
    for index in range(11):
        form = {**REGISTRATION, "email": f"student{index}@example.com"}
        statuses.append((await api_client.post("/api/v1/registrations", json=form)).status_code)

    assert statuses[:10] == [201] * 10
    assert statuses[10] == 429


@pytest.mark.asyncio
async def test_confirm_twice_is_a_state_conflict(
    api_client: AsyncClient, admin: dict[str, Any], auth_headers: Callable[[str], dict[str, str]]
) -> None:
    admin_headers = auth_headers(admin["id"])
    confirmed = await _register_and_confirm(api_client, admin_headers)

    again = await api_client.post(
        f"/api/v1/registrations/{confirmed['registration']['id']}/confirm", headers=admin_headers
    )

    assert again.status_code == 409
    assert again.json()["error"]["code"] == "INVALID_STATE"


@pytest.mark.asyncio
async def test_identity_outage_is_service_unavailable(
    api_client: AsyncClient,
    identity: FakeIdentityProvider,
    admin: dict[str, Any],
    auth_headers: Callable[[str], dict[str, str]],
) -> None:
    identity.fail_admin = identity.fail_sign_up = True
    created = (await api_client.post("/api/v1/registrations", json=REGISTRATION)).json()

    response = await api_client.post(f"/api/v1/registrations/{created['id']}/confirm", headers=auth_headers(admin["id"]))

    assert response.status_code == 503
    assert response.json()["error"]["detail"] == "Failed to create user account"


@pytest.mark.asyncio
async def test_admin_routes_require_admin(
    api_client: AsyncClient, make_profile: Callable[..., dict[str, Any]], auth_headers: Callable[[str], dict[str, str]]
) -> None:
    student = make_profile()

    anonymous = await api_client.get("/api/v1/registrations")
    bad_token = await api_client.get("/api/v1/registrations", headers={"Authorization": "Bearer nope"})
    as_student = await api_client.get("/api/v1/registrations", headers=auth_headers(student["id"]))

    assert anonymous.status_code == 401
    assert anonymous.json()["error"]["code"] == "AUTHENTICATION_REQUIRED"
    assert bad_token.status_code == 401
    assert as_student.status_code == 403
    assert as_student.json()["error"]["code"] == "FORBIDDEN"


@pytest.mark.asyncio
async def test_unconfirmed_student_cannot_use_dashboard(
    api_client: AsyncClient,
    make_profile: Callable[..., dict[str, Any]],
    make_course: Callable[..., dict[str, Any]],
    auth_headers: Callable[[str], dict[str, str]],
) -> None:
    headers = auth_headers(make_profile(is_confirmed=False)["id"])
    course = make_course()

    dashboard = await api_client.get("/api/v1/dashboard", headers=headers)
    access = await api_client.get("/api/v1/dashboard/access", headers=headers)
    enroll = await api_client.post(f"/api/v1/dashboard/courses/{course['id']}/enroll", headers=headers)

    assert dashboard.status_code == 403
    assert access.json() == {"has_access": False, "reason": "Account not confirmed by admin"}
    assert enroll.status_code == 403


@pytest.mark.asyncio
async def test_forged_payment_signature_is_rejected(
    api_client: AsyncClient,
    store_client: InMemoryStoreClient,
    make_profile: Callable[..., dict[str, Any]],
    auth_headers: Callable[[str], dict[str, str]],
) -> None:
    headers = auth_headers(make_profile()["id"])
    order_id = (await api_client.post("/api/v1/payments/orders", json={"amount": 100}, headers=headers)).json()[
        "order_id"
    ]

    response = await api_client.post(
        "/api/v1/payments/verify",
        json={"razorpay_order_id": order_id, "razorpay_payment_id": "pay_1", "razorpay_signature": "forged"},
        headers=headers,
    )

    assert response.status_code == 400
    assert response.json()["error"]["detail"] == "Payment verification failed"
    assert store_client.rows("payments")[0]["status"] == "pending"
    assert store_client.rows("notifications") == []


@pytest.mark.asyncio
async def test_admin_manual_payment_and_refund(
    api_client: AsyncClient,
    store_client: InMemoryStoreClient,
    admin: dict[str, Any],
    make_profile: Callable[..., dict[str, Any]],
    auth_headers: Callable[[str], dict[str, str]],
) -> None:
    admin_headers = auth_headers(admin["id"])
    student = make_profile(email="payer@example.com")

    recorded = await api_client.post(
        "/api/v1/payments/manual",
        json={"student_id": student["id"], "amount": 2500, "payment_mode": "cash"},
        headers=admin_headers,
    )
    assert recorded.status_code == 201
    payment_id = recorded.json()["id"]

    refunded = await api_client.post(
        f"/api/v1/payments/{payment_id}/refund", json={"reason": "Course cancelled"}, headers=admin_headers
    )
    twice = await api_client.post(f"/api/v1/payments/{payment_id}/refund", json={}, headers=admin_headers)

    assert refunded.status_code == 200
    assert refunded.json()["status"] == "refunded"
    assert store_client.tables["profiles"][student["id"]]["payment_status"] == "refunded"
    assert twice.status_code == 409


@pytest.mark.asyncio
async def test_admin_crud_and_certificate_notification(
    api_client: AsyncClient,
    store_client: InMemoryStoreClient,
    admin: dict[str, Any],
    make_profile: Callable[..., dict[str, Any]],
    auth_headers: Callable[[str], dict[str, str]],
) -> None:
    headers = auth_headers(admin["id"])
    student = make_profile(email="grad@example.com")

    course = await api_client.post("/api/v1/admin/courses", json={"title": "Python", "slug": "python"}, headers=headers)
    assert course.status_code == 201
    course_id = course.json()["id"]

    patched = await api_client.patch(f"/api/v1/admin/courses/{course_id}", json={"is_published": True}, headers=headers)
    listed = await api_client.get("/api/v1/admin/courses", headers=headers)
    unknown = await api_client.get("/api/v1/admin/identities", headers=headers)
    content = await api_client.get(f"/api/v1/admin/courses/{course_id}/content", headers=headers)

    assert patched.json()["is_published"] is True
    assert [c["id"] for c in listed.json()] == [course_id]
    assert unknown.status_code == 404
    assert content.json()["modules"] == []

    certificate = await api_client.post(
        "/api/v1/admin/certificates",
        json={
            "student_id": student["id"],
            "course_id": course_id,
            "enrollment_id": "enrollment-1",
            "certificate_number": "CERT-0001",
            "certificate_url": "https://certs/0001.pdf",
        },
        headers=headers,
    )
    assert certificate.status_code == 201
    (notification,) = store_client.rows("notifications")
    assert notification["type"] == "certificate"
    assert notification["message"] == "Your certificate for Python is ready."

    deleted = await api_client.delete(f"/api/v1/admin/courses/{course_id}", headers=headers)
    assert deleted.status_code == 204

    stats = await api_client.get("/api/v1/admin/stats", headers=headers)
    assert stats.json()["total_students"] == 1


@pytest.mark.asyncio
async def test_sheet_sync_with_nothing_pending(
    api_client: AsyncClient, admin: dict[str, Any], auth_headers: Callable[[str], dict[str, str]]
) -> None:
    response = await api_client.post("/api/v1/admin/sheets/sync", headers=auth_headers(admin["id"]))

    assert response.status_code == 200
    assert response.json() == {"synced": 0, "errors": 0}


@pytest.mark.asyncio
async def test_sheet_webhook_requires_secret(api_client: AsyncClient) -> None:
    assert (await api_client.post("/api/v1/registrations", json=REGISTRATION)).status_code == 201
    payload = {"row_id": 2, "email": "asha@example.com", "status": "confirmed"}

    rejected = await api_client.post("/api/v1/sheets/webhook", json=payload, headers={"X-Webhook-Secret": "wrong"})
    accepted = await api_client.post(
        "/api/v1/sheets/webhook", json=payload, headers={"X-Webhook-Secret": "sheet-secret"}
    )

    assert rejected.status_code == 401
    assert accepted.status_code == 200
    assert accepted.json()["registration_status"] == "pending"


@pytest.mark.asyncio
async def test_notification_read_is_owner_only(
    api_client: AsyncClient,
    store_client: InMemoryStoreClient,
    make_profile: Callable[..., dict[str, Any]],
    auth_headers: Callable[[str], dict[str, str]],
) -> None:
    owner = make_profile(email="owner@example.com")
    other = make_profile(email="other@example.com")
    notification = store_client.seed("notifications", user_id=owner["id"], type="info", title="Hi", message="hello")
    path = f"/api/v1/dashboard/notifications/{notification['id']}/read"

    stolen = await api_client.post(path, headers=auth_headers(other["id"]))
    owned = await api_client.post(path, headers=auth_headers(owner["id"]))

    assert stolen.status_code == 404
    assert owned.json()["is_read"] is True


@pytest.mark.asyncio
async def test_login_is_only_offered_by_local_identities(api_client: AsyncClient) -> None:
    response = await api_client.post("/api/v1/auth/login", json={"email": "a@example.com", "password": "x"})

    assert response.status_code == 500


@pytest.mark.asyncio
async def test_local_login_round_trip(services: Services, store_client: InMemoryStoreClient) -> None:
    from httpx import ASGITransport

    from acadvizen.container import build_services
    from acadvizen.main import create_app
    from acadvizen.middleware.security import limiter

    local = build_services(services.settings, store_client)
    limiter.reset()
    app = create_app()
    app.state.services = local
    admin_identity = await local.identity.create_user("admin@example.com", "s3cret-pass", {})
    store_client.seed("profiles", id=admin_identity.id, email="admin@example.com", name="Admin", role="admin")

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        bad = await client.post("/api/v1/auth/login", json={"email": "admin@example.com", "password": "nope"})
        good = await client.post("/api/v1/auth/login", json={"email": "admin@example.com", "password": "s3cret-pass"})
        token = good.json()["access_token"]
        listed = await client.get("/api/v1/registrations", headers={"Authorization": f"Bearer {token}"})

    assert bad.status_code == 401
    assert good.json()["user_id"] == admin_identity.id
    assert listed.status_code == 200
    assert listed.json() == []
