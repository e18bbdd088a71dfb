"""Progress request/response models."""

from pydantic import BaseModel, Field

from acadvizen.store.records import ContentType, Enrollment


class ProgressUpdate(BaseModel):
    """Fields left as None keep their stored value."""

    is_completed: bool | None = None
    watch_time_seconds: int | None = Field(None, ge=0)
    last_position_seconds: int | None = Field(None, ge=0)


class ProgressUpsertRequest(ProgressUpdate):
    module_id: str
    content_id: str
    content_type: ContentType


class CourseProgress(BaseModel):
    """Per-course completion summary for one student."""

    enrollment: Enrollment
    total_modules: int
    completed_modules: int  # not derived from content completion yet, always 0
    total_videos: int
    completed_videos: int
    total_pdfs: int
    completed_pdfs: int
    progress_percentage: float
