"""Shared fixtures and utilities for tests."""

import asyncio
import os
import tempfile
from unittest.mock import Mock, patch

import pytest

# Settings and the engine are built at import time, so the environment has
# to be in place before any application module is imported.
TEST_DB_PATH = os.path.join(tempfile.gettempdir(), f"formhire-test-{os.getpid()}.db")

os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{TEST_DB_PATH}")
os.environ.setdefault("SESSION_SECRET", "test-session-secret-min-32-chars-long-for-hs256")
os.environ.setdefault("ADMIN_EMAILS", "admin@formhire.test,Boss@FormHire.test")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("JSON_LOGS", "false")
os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "true")
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_RESULT_BACKEND", "cache+memory://")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_S3_BUCKET", "test-resumes")

from api.schemas.applications import ApplicationPayload, CustomAnswerInput  # noqa: E402
from api.schemas.jobs import JobFields, JobQuestionInput  # noqa: E402
from core.security import Principal, Role, create_session_token  # noqa: E402
from database.engine import drop_db, init_db  # noqa: E402

ADMIN_EMAIL = "admin@formhire.test"
USER_EMAIL = "jane@example.com"


@pytest.fixture
async def db():
    """Fresh schema for an async service test."""
    await init_db()
    yield
    await drop_db()


@pytest.fixture
def database():
    """Fresh schema for a TestClient test (the client runs its own loop)."""
    asyncio.run(init_db())
    yield
    asyncio.run(drop_db())


@pytest.fixture(autouse=True)
def dispatched():
    """Capture notification dispatches instead of enqueueing Celery tasks."""
    with patch("api.services.notifications._dispatch", Mock(return_value=True)) as mock:
        yield mock


def dispatched_tasks(mock) -> list[str]:
    """Short task names in dispatch order."""
    return [c.args[0].name.rsplit(".", 1)[-1] for c in mock.call_args_list]


@pytest.fixture
def admin_principal():
    return Principal(email=ADMIN_EMAIL, name="Ada Admin", role=Role.ADMIN)


@pytest.fixture
def user_principal():
    return Principal(email=USER_EMAIL, name="Jane Doe", image="https://img.example.com/jane.png")


def auth_headers(email: str, name: str = "Test User") -> dict:
    return {"Authorization": f"Bearer {create_session_token(email, name=name)}"}


@pytest.fixture
def admin_headers():
    return auth_headers(ADMIN_EMAIL, "Ada Admin")


@pytest.fixture
def user_headers():
    return auth_headers(USER_EMAIL, "Jane Doe")


def make_job_fields(**overrides) -> JobFields:
    data = {
        "title": "Backend Engineer",
        "description": "Build APIs",
        "requirements": "Python",
        "department": "Engineering",
        "location": "Remote",
    }
    data.update(overrides)
    return JobFields(**data)


def make_payload(answers: dict | None = None, **overrides) -> ApplicationPayload:
    data = {
        "phone_number": "+1 555 123 4567",
        "why_interested": "Great team",
        "relevant_experience": "5 years of Python",
        "work_authorization": "Citizen",
        "resume_url": "https://cdn.example.com/resume.pdf",
    }
    data.update(overrides)
    data["custom_answers"] = [
        CustomAnswerInput(question_id=qid, answer=answer) for qid, answer in (answers or {}).items()
    ]
    return ApplicationPayload(**data)


def questions(*entries: tuple) -> list[JobQuestionInput]:
    """Build question inputs from (text, type, required[, options]) tuples."""
    result = []
    for entry in entries:
        text, qtype, required = entry[:3]
        options = entry[3] if len(entry) > 3 else []
        result.append(JobQuestionInput(question=text, type=qtype, required=required, options=options))
    return result
