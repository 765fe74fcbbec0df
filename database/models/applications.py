"""
Application Models

Job applications, their answers to custom questions, and the append-only
status log. One application per (job, user) is enforced by a unique
constraint.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    ForeignKey,
    BigInteger,
    DateTime,
    func,
    Text,
    Enum as SQLEnum,
    Index,
    UniqueConstraint,
)
from database.engine import Base, BigIntPK, utcnow
from database.models.jobs import QuestionType
from datetime import datetime
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.jobs import Job
    from database.models.users import User


# ==================== Application Enums ===================== #
class ApplicationStatus(str, PyEnum):
    """Application review status. Admins may move between any two values."""

    PENDING = "PENDING"
    REVIEWED = "REVIEWED"
    INTERVIEW_SCHEDULED = "INTERVIEW_SCHEDULED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


# ==================== Models ===================== #
class Application(Base):
    """A user's application to a job."""

    __tablename__ = "applications"

    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    job_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("jobs.id"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id"), nullable=False, index=True
    )

    applicant_name: Mapped[str] = mapped_column(String(200), nullable=False)
    applicant_email: Mapped[str] = mapped_column(String(255), nullable=False)

    status: Mapped[ApplicationStatus] = mapped_column(
        SQLEnum(ApplicationStatus, native_enum=False, length=30),
        nullable=False,
        default=ApplicationStatus.PENDING,
    )
    applied_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    resume_url: Mapped[str | None] = mapped_column(String(1000))
    phone_number: Mapped[str] = mapped_column(String(30), nullable=False)
    linkedin_url: Mapped[str | None] = mapped_column(String(500))
    portfolio_url: Mapped[str | None] = mapped_column(String(500))
    why_interested: Mapped[str] = mapped_column(Text, nullable=False)
    relevant_experience: Mapped[str] = mapped_column(Text, nullable=False)
    expected_salary: Mapped[str | None] = mapped_column(String(100))
    availability_start: Mapped[str | None] = mapped_column(String(100))
    current_employment: Mapped[str | None] = mapped_column(String(300))
    relocation_willingness: Mapped[str | None] = mapped_column(String(100))
    work_authorization: Mapped[str] = mapped_column(String(200), nullable=False)
    cover_letter: Mapped[str | None] = mapped_column(Text)
    additional_comments: Mapped[str | None] = mapped_column(Text)
    reference_source: Mapped[str | None] = mapped_column(String(200))

    status_message: Mapped[str | None] = mapped_column(Text)
    status_updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    job: Mapped["Job"] = relationship("Job", back_populates="applications")
    user: Mapped["User"] = relationship("User", back_populates="applications")
    answers: Mapped[list["ApplicationAnswer"]] = relationship(
        "ApplicationAnswer",
        back_populates="application",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    logs: Mapped[list["ApplicationLog"]] = relationship(
        "ApplicationLog",
        back_populates="application",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ApplicationLog.created_at",
    )

    __table_args__ = (
        UniqueConstraint("job_id", "user_id", name="uq_application_job_user"),
        Index("idx_applications_status", "status"),
    )


class ApplicationAnswer(Base):
    """
    Answer to one custom question.

    The question text and type are copied in at submission time so the
    answer survives the job's questions being replaced.
    """

    __tablename__ = "application_answers"

    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    application_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    question_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("job_questions.id", ondelete="SET NULL")
    )
    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    question_type: Mapped[QuestionType] = mapped_column(
        SQLEnum(QuestionType, native_enum=False, length=20), nullable=False
    )
    answer: Mapped[str] = mapped_column(Text, nullable=False)

    application: Mapped["Application"] = relationship(
        "Application", back_populates="answers"
    )


class ApplicationLog(Base):
    """Append-only record of status changes."""

    __tablename__ = "application_logs"

    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    application_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    application: Mapped["Application"] = relationship(
        "Application", back_populates="logs"
    )
