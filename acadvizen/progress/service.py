"""Course progress summaries and per-item progress tracking."""

import asyncio
import logging
from datetime import UTC, datetime
from typing import Any

from acadvizen.access.guard import AccessGuard
from acadvizen.core.result import service_operation
from acadvizen.exceptions import ResourceNotFoundError
from acadvizen.progress.schemas import CourseProgress, ProgressUpdate
from acadvizen.store.gateway import EntityStore, ListOptions
from acadvizen.store.records import ContentType, Enrollment, Module, Pdf, Progress, Video


logger = logging.getLogger(__name__)


def completion_percentage(completed: int, total: int) -> float:
    """Percentage of completed items; 0 when there is nothing to complete."""
    if total <= 0:
        return 0.0
    return completed / total * 100


class ProgressService:
    def __init__(self, store: EntityStore, access: AccessGuard) -> None:
        self.store = store
        self.access = access

    @service_operation("Get course progress")
    async def course_progress(self, student_id: str, course_id: str) -> CourseProgress:
        """Completion counts over the videos and PDFs of an enrolled course."""
        enrollment = (
            await self.store.find_one(Enrollment, {"student_id": student_id, "course_id": course_id})
        ).unwrap()
        if enrollment is None:
            msg = "Not enrolled in this course"
            raise ResourceNotFoundError(msg, "Enrollment", course_id)

        modules = (await self.store.list(Module, ListOptions(filters={"course_id": course_id}))).unwrap()
        module_ids = [module.id for module in modules]

        videos: list[Video] = []
        pdfs: list[Pdf] = []
        completed: list[Progress] = []
        if module_ids:
            within = {"module_id": module_ids}
            videos_res, pdfs_res, progress_res = await asyncio.gather(
                self.store.list(Video, ListOptions(within=within)),
                self.store.list(Pdf, ListOptions(within=within)),
                self.store.list(
                    Progress,
                    ListOptions(filters={"student_id": student_id, "is_completed": True}, within=within),
                ),
            )
            videos, pdfs, completed = videos_res.unwrap(), pdfs_res.unwrap(), progress_res.unwrap()

        completed_videos = sum(1 for row in completed if row.video_id)
        completed_pdfs = sum(1 for row in completed if row.pdf_id)
        total_items = len(videos) + len(pdfs)

        return CourseProgress(
            enrollment=enrollment,
            total_modules=len(module_ids),
            completed_modules=0,
            total_videos=len(videos),
            completed_videos=completed_videos,
            total_pdfs=len(pdfs),
            completed_pdfs=completed_pdfs,
            progress_percentage=completion_percentage(completed_videos + completed_pdfs, total_items),
        )

    @service_operation("Update progress")
    async def upsert_progress(
        self,
        student_id: str,
        module_id: str,
        content_id: str,
        content_type: ContentType,
        update: ProgressUpdate,
    ) -> Progress:
        """Create or merge the progress row for one (student, module, content item)."""
        await self.access.require_access(student_id)

        key = {"student_id": student_id, "module_id": module_id, content_type.column: content_id}
        existing = (await self.store.find_one(Progress, key)).unwrap()

        stored = existing.model_dump() if existing else {}
        values: dict[str, Any] = {
            **key,
            "is_completed": _pick(update.is_completed, stored.get("is_completed"), False),
            "watch_time_seconds": _pick(update.watch_time_seconds, stored.get("watch_time_seconds"), 0),
            "last_position_seconds": _pick(update.last_position_seconds, stored.get("last_position_seconds"), 0),
            "completed_at": datetime.now(UTC) if update.is_completed else stored.get("completed_at"),
        }

        if existing is None:
            return (await self.store.create(Progress, values)).unwrap()
        return (await self.store.update(Progress, existing.id, values)).unwrap()


def _pick(provided: Any, stored: Any, default: Any) -> Any:
    if provided is not None:
        return provided
    if stored is not None:
        return stored
    return default
