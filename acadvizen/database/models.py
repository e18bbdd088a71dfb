"""Table definitions for the self-hosted Postgres backend.

Column names mirror the Supabase schema so either store backend returns the
same rows to the gateway.
"""

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, Uuid

from acadvizen.database.base import Base


def _uuid() -> str:
    return str(uuid4())


def _now() -> datetime:
    return datetime.now(UTC)


def _id_column() -> Column:
    return Column(Uuid(as_uuid=False), primary_key=True, default=_uuid)


def _created_at() -> Column:
    return Column(DateTime(timezone=True), nullable=False, default=_now)


def _updated_at() -> Column:
    return Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)


class RegistrationModel(Base):
    __tablename__ = "registrations"

    id = _id_column()
    name = Column(String(255), nullable=False)
    # Not unique: a rejected or cancelled email may register again
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(32), nullable=False)
    mode = Column(String(16), nullable=False)
    status = Column(String(16), nullable=False, default="pending", index=True)
    source = Column(String(64), nullable=False, default="website")
    google_sheet_synced = Column(Boolean, nullable=False, default=False)
    google_sheet_row_id = Column(Integer)
    confirmed_at = Column(DateTime(timezone=True))
    confirmed_by = Column(Uuid(as_uuid=False))
    notes = Column(Text)
    created_at = _created_at()
    updated_at = _updated_at()


class ProfileModel(Base):
    __tablename__ = "profiles"

    id = Column(Uuid(as_uuid=False), primary_key=True)
    email = Column(String(255), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(32))
    role = Column(String(16), nullable=False, default="student")
    student_id = Column(String(32), unique=True)
    mode = Column(String(16))
    is_confirmed = Column(Boolean, nullable=False, default=False)
    payment_status = Column(String(16), nullable=False, default="pending")
    avatar_url = Column(String(500))
    created_at = _created_at()
    updated_at = _updated_at()


class IdentityModel(Base):
    __tablename__ = "identities"

    id = _id_column()
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    user_metadata = Column(JSON, nullable=False, default=dict)
    created_at = _created_at()


class CourseModel(Base):
    __tablename__ = "courses"

    id = _id_column()
    title = Column(String(255), nullable=False)
    description = Column(Text)
    slug = Column(String(255), nullable=False, unique=True)
    thumbnail_url = Column(String(500))
    duration_weeks = Column(Integer, nullable=False, default=0)
    is_published = Column(Boolean, nullable=False, default=False)
    is_featured = Column(Boolean, nullable=False, default=False)
    price = Column(Float, nullable=False, default=0)
    discount_price = Column(Float)
    mode = Column(String(16), nullable=False, default="online")
    max_students = Column(Integer)
    start_date = Column(DateTime(timezone=True))
    end_date = Column(DateTime(timezone=True))
    created_at = _created_at()
    updated_at = _updated_at()


class ModuleModel(Base):
    __tablename__ = "modules"

    id = _id_column()
    course_id = Column(Uuid(as_uuid=False), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    order_index = Column(Integer, nullable=False, default=0)
    duration_minutes = Column(Integer)
    is_published = Column(Boolean, nullable=False, default=False)
    created_at = _created_at()
    updated_at = _updated_at()


class VideoModel(Base):
    __tablename__ = "videos"

    id = _id_column()
    module_id = Column(Uuid(as_uuid=False), ForeignKey("modules.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    video_url = Column(String(500), nullable=False)
    thumbnail_url = Column(String(500))
    duration_seconds = Column(Integer)
    order_index = Column(Integer, nullable=False, default=0)
    is_published = Column(Boolean, nullable=False, default=False)
    created_at = _created_at()
    updated_at = _updated_at()


class PdfModel(Base):
    __tablename__ = "pdfs"

    id = _id_column()
    module_id = Column(Uuid(as_uuid=False), ForeignKey("modules.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    file_url = Column(String(500), nullable=False)
    file_size_bytes = Column(Integer)
    order_index = Column(Integer, nullable=False, default=0)
    is_published = Column(Boolean, nullable=False, default=False)
    created_at = _created_at()
    updated_at = _updated_at()


class ToolModel(Base):
    __tablename__ = "tools"

    id = _id_column()
    module_id = Column(Uuid(as_uuid=False), ForeignKey("modules.id", ondelete="SET NULL"), index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    tool_url = Column(String(500))
    icon_url = Column(String(500))
    category = Column(String(64))
    is_featured = Column(Boolean, nullable=False, default=False)
    is_published = Column(Boolean, nullable=False, default=False)
    created_at = _created_at()
    updated_at = _updated_at()


class EnrollmentModel(Base):
    __tablename__ = "enrollments"

    id = _id_column()
    student_id = Column(Uuid(as_uuid=False), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(Uuid(as_uuid=False), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(16), nullable=False, default="pending")
    enrolled_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    completed_at = Column(DateTime(timezone=True))
    progress_percentage = Column(Float, nullable=False, default=0)
    certificate_url = Column(String(500))
    created_at = _created_at()
    updated_at = _updated_at()


class PaymentModel(Base):
    __tablename__ = "payments"

    id = _id_column()
    student_id = Column(Uuid(as_uuid=False), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    enrollment_id = Column(Uuid(as_uuid=False), ForeignKey("enrollments.id", ondelete="SET NULL"))
    amount = Column(Float, nullable=False)
    currency = Column(String(8), nullable=False, default="INR")
    payment_mode = Column(String(32))
    status = Column(String(16), nullable=False, default="pending")
    transaction_id = Column(String(255))
    razorpay_order_id = Column(String(255), index=True)
    razorpay_payment_id = Column(String(255))
    razorpay_signature = Column(String(255))
    payment_date = Column(DateTime(timezone=True))
    notes = Column(Text)
    receipt_url = Column(String(500))
    created_at = _created_at()
    updated_at = _updated_at()


class ProgressModel(Base):
    __tablename__ = "progress"

    id = _id_column()
    student_id = Column(Uuid(as_uuid=False), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    module_id = Column(Uuid(as_uuid=False), ForeignKey("modules.id", ondelete="CASCADE"), nullable=False, index=True)
    video_id = Column(Uuid(as_uuid=False), ForeignKey("videos.id", ondelete="CASCADE"))
    pdf_id = Column(Uuid(as_uuid=False), ForeignKey("pdfs.id", ondelete="CASCADE"))
    is_completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime(timezone=True))
    watch_time_seconds = Column(Integer, nullable=False, default=0)
    last_position_seconds = Column(Integer, nullable=False, default=0)
    created_at = _created_at()
    updated_at = _updated_at()


class CertificateModel(Base):
    __tablename__ = "certificates"

    id = _id_column()
    student_id = Column(Uuid(as_uuid=False), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(Uuid(as_uuid=False), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    enrollment_id = Column(Uuid(as_uuid=False), ForeignKey("enrollments.id", ondelete="CASCADE"), nullable=False)
    certificate_number = Column(String(64), nullable=False, unique=True)
    certificate_url = Column(String(500))
    issued_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    created_at = _created_at()


class NotificationModel(Base):
    __tablename__ = "notifications"

    id = _id_column()
    user_id = Column(Uuid(as_uuid=False), nullable=False, index=True)
    type = Column(String(16), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    action_url = Column(String(500))
    created_at = _created_at()


class EmailLogModel(Base):
    __tablename__ = "email_logs"

    id = _id_column()
    to_email = Column(String(255), nullable=False)
    subject = Column(String(500), nullable=False)
    template = Column(String(64))
    status = Column(String(16), nullable=False)
    error_message = Column(Text)
    sent_at = Column(DateTime(timezone=True))
    created_at = _created_at()
