from pydantic import BaseModel

from acadvizen.store.records import Course, Module, Pdf, Tool, Video


class ModuleWithContent(Module):
    videos: list[Video] = []
    pdfs: list[Pdf] = []
    tools: list[Tool] = []


class CourseWithContent(Course):
    modules: list[ModuleWithContent] = []


class StudentStats(BaseModel):
    total_students: int
    confirmed_students: int
    pending_registrations: int
    total_enrollments: int
    active_enrollments: int
    total_payments: int
    completed_payments: int
