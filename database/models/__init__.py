from database.models.users import User, Admin
from database.models.jobs import Job, JobQuestion, QuestionType, CHOICE_QUESTION_TYPES
from database.models.applications import (
    Application,
    ApplicationAnswer,
    ApplicationLog,
    ApplicationStatus,
)

__all__ = [
    "User",
    "Admin",
    "Job",
    "JobQuestion",
    "QuestionType",
    "CHOICE_QUESTION_TYPES",
    "Application",
    "ApplicationAnswer",
    "ApplicationLog",
    "ApplicationStatus",
]
