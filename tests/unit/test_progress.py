"""Course progress summaries and the progress upsert."""

from collections.abc import Callable
from typing import Any

import pytest

from acadvizen.container import Services
from acadvizen.exceptions import ErrorCode
from acadvizen.progress.schemas import ProgressUpdate
from acadvizen.progress.service import completion_percentage
from acadvizen.store.records import ContentType
from tests.fakes import InMemoryStoreClient


@pytest.fixture
def student(make_profile: Callable[..., dict[str, Any]]) -> dict[str, Any]:
    return make_profile()


@pytest.fixture
def course_tree(store_client: InMemoryStoreClient, make_course: Callable[..., dict[str, Any]]) -> dict[str, Any]:
    """One course, two modules, three videos and one PDF; plus a foreign module with its own video."""
    course = make_course()
    intro = store_client.seed("modules", course_id=course["id"], title="Intro", order_index=0)
    advanced = store_client.seed("modules", course_id=course["id"], title="Advanced", order_index=1)
    videos = [
        store_client.seed("videos", module_id=intro["id"], title="Welcome", video_url="https://v/1"),
        store_client.seed("videos", module_id=intro["id"], title="Setup", video_url="https://v/2"),
        store_client.seed("videos", module_id=advanced["id"], title="Deep dive", video_url="https://v/3"),
    ]
    pdf = store_client.seed("pdfs", module_id=advanced["id"], title="Notes", file_url="https://p/1")

    other_course = make_course(title="Other")
    other_module = store_client.seed("modules", course_id=other_course["id"], title="Elsewhere")
    other_video = store_client.seed("videos", module_id=other_module["id"], title="Elsewhere", video_url="https://v/9")

    return {
        "course": course,
        "modules": [intro, advanced],
        "videos": videos,
        "pdf": pdf,
        "other_module": other_module,
        "other_video": other_video,
    }


@pytest.mark.parametrize(
    ("completed", "total", "expected"),
    [(0, 0, 0.0), (0, 4, 0.0), (1, 4, 25.0), (4, 4, 100.0)],
)
def test_completion_percentage(completed: int, total: int, expected: float) -> None:
    assert completion_percentage(completed, total) == expected


@pytest.mark.asyncio
async def test_course_progress_requires_enrollment(
    services: Services, student: dict[str, Any], course_tree: dict[str, Any]
) -> None:
    result = await services.progress.course_progress(student["id"], course_tree["course"]["id"])

    assert result.code == ErrorCode.NOT_FOUND
    assert result.error == "Not enrolled in this course"


@pytest.mark.asyncio
async def test_course_progress_counts_only_this_course(
    services: Services, store_client: InMemoryStoreClient, student: dict[str, Any], course_tree: dict[str, Any]
) -> None:
    course_id = course_tree["course"]["id"]
    intro, advanced = course_tree["modules"]
    store_client.seed("enrollments", student_id=student["id"], course_id=course_id, status="active")
    store_client.seed(
        "progress", student_id=student["id"], module_id=intro["id"], video_id=course_tree["videos"][0]["id"],
        is_completed=True,
    )
    store_client.seed(
        "progress", student_id=student["id"], module_id=advanced["id"], pdf_id=course_tree["pdf"]["id"],
        is_completed=True,
    )
    store_client.seed(
        "progress", student_id=student["id"], module_id=intro["id"], video_id=course_tree["videos"][1]["id"],
        is_completed=False,
    )
    store_client.seed(
        "progress", student_id=student["id"], module_id=course_tree["other_module"]["id"],
        video_id=course_tree["other_video"]["id"], is_completed=True,
    )

    summary = (await services.progress.course_progress(student["id"], course_id)).data

    assert summary.total_modules == 2
    assert summary.completed_modules == 0
    assert summary.total_videos == 3
    assert summary.completed_videos == 1
    assert summary.total_pdfs == 1
    assert summary.completed_pdfs == 1
    assert summary.progress_percentage == 50.0


@pytest.mark.asyncio
async def test_course_without_content_reports_zero(
    services: Services, store_client: InMemoryStoreClient, student: dict[str, Any], make_course: Callable[..., Any]
) -> None:
    course = make_course()
    store_client.seed("enrollments", student_id=student["id"], course_id=course["id"], status="active")

    summary = (await services.progress.course_progress(student["id"], course["id"])).data

    assert summary.total_modules == 0
    assert summary.progress_percentage == 0.0


@pytest.mark.asyncio
async def test_upsert_creates_then_merges(
    services: Services, store_client: InMemoryStoreClient, student: dict[str, Any], course_tree: dict[str, Any]
) -> None:
    module_id = course_tree["modules"][0]["id"]
    video_id = course_tree["videos"][0]["id"]

    created = await services.progress.upsert_progress(
        student["id"], module_id, video_id, ContentType.VIDEO, ProgressUpdate(watch_time_seconds=30)
    )
    assert created.success
    assert created.data.video_id == video_id
    assert created.data.is_completed is False
    assert created.data.completed_at is None

    merged = await services.progress.upsert_progress(
        student["id"], module_id, video_id, ContentType.VIDEO, ProgressUpdate(last_position_seconds=90, is_completed=True)
    )

    assert merged.success
    assert merged.data.id == created.data.id
    assert merged.data.watch_time_seconds == 30
    assert merged.data.last_position_seconds == 90
    assert merged.data.is_completed is True
    assert merged.data.completed_at is not None
    assert len(store_client.rows("progress")) == 1


@pytest.mark.asyncio
async def test_upsert_keys_pdf_progress_separately(
    services: Services, store_client: InMemoryStoreClient, student: dict[str, Any], course_tree: dict[str, Any]
) -> None:
    module_id = course_tree["modules"][1]["id"]

    await services.progress.upsert_progress(
        student["id"], module_id, course_tree["pdf"]["id"], ContentType.PDF, ProgressUpdate(is_completed=True)
    )
    await services.progress.upsert_progress(
        student["id"], module_id, course_tree["videos"][2]["id"], ContentType.VIDEO, ProgressUpdate(is_completed=True)
    )

    rows = store_client.rows("progress")
    assert len(rows) == 2
    assert {row.get("pdf_id") is not None for row in rows} == {True, False}


@pytest.mark.asyncio
async def test_upsert_denied_for_unconfirmed_student(
    services: Services, store_client: InMemoryStoreClient, make_profile: Callable[..., dict[str, Any]]
) -> None:
    student = make_profile(is_confirmed=False)

    result = await services.progress.upsert_progress(
        student["id"], "module-1", "video-1", ContentType.VIDEO, ProgressUpdate(is_completed=True)
    )

    assert result.code == ErrorCode.ACCESS_DENIED
    assert result.error == "Account not confirmed by admin"
    assert store_client.rows("progress") == []
