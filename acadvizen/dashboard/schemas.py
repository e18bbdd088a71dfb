from pydantic import BaseModel

from acadvizen.store.records import Certificate, Course, Enrollment, Notification, Profile, Progress


class EnrollmentWithCourse(Enrollment):
    course: Course | None = None


class StudentDashboard(BaseModel):
    """Everything the student home page shows, assembled in one read."""

    profile: Profile
    enrollments: list[EnrollmentWithCourse]
    certificates: list[Certificate]
    recent_progress: list[Progress]
    notifications: list[Notification]


class AccessResponse(BaseModel):
    has_access: bool
    reason: str | None = None
