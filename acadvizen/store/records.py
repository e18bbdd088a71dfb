"""Typed records for every collection the workflows touch.

Each record class is bound to its collection through the `table` class
variable, which is how the gateway stays generic over entity kinds while
callers keep field-level typing.
"""

from datetime import datetime
from enum import StrEnum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict


class StudyMode(StrEnum):
    ONLINE = "online"
    OFFLINE = "offline"


class CourseMode(StrEnum):
    ONLINE = "online"
    OFFLINE = "offline"
    HYBRID = "hybrid"


class RegistrationStatus(StrEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class Role(StrEnum):
    STUDENT = "student"
    ADMIN = "admin"
    INSTRUCTOR = "instructor"


class AccountPaymentStatus(StrEnum):
    """Payment standing kept on the profile, not on individual payments."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class EnrollmentStatus(StrEnum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    SUSPENDED = "suspended"
    CANCELLED = "cancelled"


class PaymentStatus(StrEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"
    CANCELLED = "cancelled"


class PaymentMode(StrEnum):
    RAZORPAY = "razorpay"
    BANK_TRANSFER = "bank_transfer"
    CASH = "cash"
    UPI = "upi"
    CARD = "card"
    OTHER = "other"


class ContentType(StrEnum):
    VIDEO = "video"
    PDF = "pdf"

    @property
    def column(self) -> str:
        """Progress column that references this kind of content."""
        return f"{self.value}_id"


class NotificationType(StrEnum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    COURSE = "course"
    PAYMENT = "payment"
    CERTIFICATE = "certificate"


class EmailStatus(StrEnum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class Record(BaseModel):
    """Base for all stored rows."""

    table: ClassVar[str]

    model_config = ConfigDict(extra="ignore", from_attributes=True)

    id: str
    created_at: datetime | None = None


class Registration(Record):
    table: ClassVar[str] = "registrations"

    name: str
    email: str
    phone: str
    mode: StudyMode
    status: RegistrationStatus = RegistrationStatus.PENDING
    source: str = "website"
    google_sheet_synced: bool = False
    google_sheet_row_id: int | None = None
    confirmed_at: datetime | None = None
    confirmed_by: str | None = None
    notes: str | None = None
    updated_at: datetime | None = None


class Profile(Record):
    table: ClassVar[str] = "profiles"

    email: str
    name: str
    phone: str | None = None
    role: Role = Role.STUDENT
    student_id: str | None = None
    mode: StudyMode | None = None
    is_confirmed: bool = False
    payment_status: AccountPaymentStatus = AccountPaymentStatus.PENDING
    avatar_url: str | None = None
    updated_at: datetime | None = None


class Course(Record):
    table: ClassVar[str] = "courses"

    title: str
    slug: str
    description: str | None = None
    thumbnail_url: str | None = None
    duration_weeks: int = 0
    is_published: bool = False
    is_featured: bool = False
    price: float = 0
    discount_price: float | None = None
    mode: CourseMode = CourseMode.ONLINE
    max_students: int | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    updated_at: datetime | None = None


class Module(Record):
    table: ClassVar[str] = "modules"

    course_id: str
    title: str
    description: str | None = None
    order_index: int = 0
    duration_minutes: int | None = None
    is_published: bool = False
    updated_at: datetime | None = None


class Video(Record):
    table: ClassVar[str] = "videos"

    module_id: str
    title: str
    video_url: str
    description: str | None = None
    thumbnail_url: str | None = None
    duration_seconds: int | None = None
    order_index: int = 0
    is_published: bool = False
    updated_at: datetime | None = None


class Pdf(Record):
    table: ClassVar[str] = "pdfs"

    module_id: str
    title: str
    file_url: str
    description: str | None = None
    file_size_bytes: int | None = None
    order_index: int = 0
    is_published: bool = False
    updated_at: datetime | None = None


class Tool(Record):
    table: ClassVar[str] = "tools"

    name: str
    module_id: str | None = None
    description: str | None = None
    tool_url: str | None = None
    icon_url: str | None = None
    category: str | None = None
    is_featured: bool = False
    is_published: bool = False
    updated_at: datetime | None = None


class Enrollment(Record):
    table: ClassVar[str] = "enrollments"

    student_id: str
    course_id: str
    status: EnrollmentStatus = EnrollmentStatus.PENDING
    enrolled_at: datetime | None = None
    completed_at: datetime | None = None
    progress_percentage: float = 0
    certificate_url: str | None = None
    updated_at: datetime | None = None


class Payment(Record):
    table: ClassVar[str] = "payments"

    student_id: str
    amount: float
    enrollment_id: str | None = None
    currency: str = "INR"
    payment_mode: PaymentMode | None = None
    status: PaymentStatus = PaymentStatus.PENDING
    transaction_id: str | None = None
    razorpay_order_id: str | None = None
    razorpay_payment_id: str | None = None
    razorpay_signature: str | None = None
    payment_date: datetime | None = None
    notes: str | None = None
    receipt_url: str | None = None
    updated_at: datetime | None = None


class Progress(Record):
    table: ClassVar[str] = "progress"

    student_id: str
    module_id: str
    video_id: str | None = None
    pdf_id: str | None = None
    is_completed: bool = False
    completed_at: datetime | None = None
    watch_time_seconds: int = 0
    last_position_seconds: int = 0
    updated_at: datetime | None = None


class Certificate(Record):
    table: ClassVar[str] = "certificates"

    student_id: str
    course_id: str
    enrollment_id: str
    certificate_number: str
    certificate_url: str | None = None
    issued_at: datetime | None = None


class Notification(Record):
    table: ClassVar[str] = "notifications"

    user_id: str
    type: NotificationType
    title: str
    message: str
    is_read: bool = False
    action_url: str | None = None


class EmailLog(Record):
    table: ClassVar[str] = "email_logs"

    to_email: str
    subject: str
    template: str | None = None
    status: EmailStatus
    error_message: str | None = None
    sent_at: datetime | None = None


class Identity(Record):
    """Login identity for the local auth provider (Supabase keeps its own)."""

    table: ClassVar[str] = "identities"

    email: str
    password_hash: str
    user_metadata: dict = {}


RECORD_TYPES: dict[str, type[Record]] = {
    record.table: record
    for record in (
        Registration,
        Profile,
        Course,
        Module,
        Video,
        Pdf,
        Tool,
        Enrollment,
        Payment,
        Progress,
        Certificate,
        Notification,
        EmailLog,
        Identity,
    )
}
