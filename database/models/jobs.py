"""
Jobs Module

Job postings and their ordered custom question sets. A job is the
aggregate root for its questions; questions are replaced wholesale on
update.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    Boolean,
    ForeignKey,
    BigInteger,
    DateTime,
    Integer,
    func,
    Text,
    JSON,
    Enum as SQLEnum,
    Index,
)
from database.engine import Base, BigIntPK, utcnow
from datetime import datetime
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.applications import Application
    from database.models.users import Admin


# ==================== Job Enums ===================== #
class QuestionType(str, PyEnum):
    """Input type of a custom application question."""

    TEXT = "TEXT"
    EMAIL = "EMAIL"
    PHONE = "PHONE"
    TEXTAREA = "TEXTAREA"
    SELECT = "SELECT"
    CHECKBOX = "CHECKBOX"  # multi-value
    RADIO = "RADIO"


CHOICE_QUESTION_TYPES = frozenset(
    {QuestionType.SELECT, QuestionType.CHECKBOX, QuestionType.RADIO}
)


# ==================== Models ===================== #
class Job(Base):
    """
    Job posting owned by one admin.
    Inactive jobs are hidden from the public listing but kept in place.
    """

    __tablename__ = "jobs"

    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    admin_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("admins.id"), nullable=False, index=True
    )

    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    requirements: Mapped[str] = mapped_column(Text, nullable=False)
    department: Mapped[str] = mapped_column(String(200), nullable=False)
    location: Mapped[str] = mapped_column(String(200), nullable=False)
    salary: Mapped[str | None] = mapped_column(String(100))
    employment_type: Mapped[str] = mapped_column(
        String(50), nullable=False, default="full-time"
    )
    experience_level: Mapped[str] = mapped_column(
        String(50), nullable=False, default="mid"
    )

    skills: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    benefits: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    company_name: Mapped[str] = mapped_column(
        String(200), nullable=False, default="FormHire"
    )
    company_logo: Mapped[str | None] = mapped_column(String(500))
    company_website: Mapped[str | None] = mapped_column(String(500))
    company_size: Mapped[str | None] = mapped_column(String(50))

    resume_required: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    admin: Mapped["Admin"] = relationship("Admin", back_populates="jobs")
    questions: Mapped[list["JobQuestion"]] = relationship(
        "JobQuestion",
        back_populates="job",
        cascade="all, delete-orphan",
        order_by="JobQuestion.order",
    )
    applications: Mapped[list["Application"]] = relationship(
        "Application", back_populates="job"
    )

    __table_args__ = (
        Index("idx_jobs_active_created", "is_active", "created_at"),
    )


class JobQuestion(Base):
    """Custom question attached to a job, shown in ``order`` (1-based)."""

    __tablename__ = "job_questions"

    id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, nullable=False, autoincrement=True
    )
    job_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("jobs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    question: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[QuestionType] = mapped_column(
        SQLEnum(QuestionType, native_enum=False, length=20),
        nullable=False,
        default=QuestionType.TEXT,
    )
    required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    options: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    placeholder: Mapped[str | None] = mapped_column(String(300))
    order: Mapped[int] = mapped_column(Integer, nullable=False)

    job: Mapped["Job"] = relationship("Job", back_populates="questions")
