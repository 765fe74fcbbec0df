"""
Tests for the error envelope.

Tests:
- Domain exceptions map to status + code
- Request validation answers 400
- Unhandled and database errors answer 500 without leaking detail
- Message sanitisation
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel
from sqlalchemy.exc import OperationalError

from core.exceptions import (
    DependencyFailure,
    DuplicateApplication,
    Forbidden,
    JobClosed,
    NotFound,
    Unauthenticated,
    ValidationError,
)
from core.middleware.error_handling import (
    ErrorHandlingMiddleware,
    sanitize_error_message,
    setup_error_handlers,
)


class Body(BaseModel):
    name: str
    count: int


def build_app(debug: bool = False) -> FastAPI:
    app = FastAPI()
    setup_error_handlers(app, debug=debug)
    app.add_middleware(ErrorHandlingMiddleware, debug=debug)

    errors = {
        "validation": ValidationError("Missing required fields: title", fields=["title"]),
        "duplicate": DuplicateApplication(),
        "unauthenticated": Unauthenticated(),
        "forbidden": Forbidden(),
        "closed": JobClosed(),
        "missing": NotFound("Job not found"),
        "dependency": DependencyFailure("Failed to upload resume"),
    }

    @app.get("/raise/{name}")
    async def raise_domain(name: str):
        raise errors[name]

    @app.get("/boom")
    async def boom():
        raise RuntimeError("password=hunter2 leaked")

    @app.get("/db")
    async def db_down():
        raise OperationalError("SELECT 1", {}, Exception("postgresql://user:pw@db/formhire"))

    @app.post("/body")
    async def body(payload: Body):
        return payload

    return app


@pytest.fixture
def client():
    return TestClient(build_app(), raise_server_exceptions=False)


class TestDomainErrors:
    """Test domain exception mapping."""

    @pytest.mark.parametrize(
        "name,status_code,code",
        [
            ("validation", 400, "VALIDATION_ERROR"),
            ("duplicate", 400, "DUPLICATE_APPLICATION"),
            ("unauthenticated", 401, "UNAUTHENTICATED"),
            ("forbidden", 403, "FORBIDDEN"),
            ("closed", 403, "JOB_CLOSED"),
            ("missing", 404, "NOT_FOUND"),
            ("dependency", 502, "DEPENDENCY_FAILURE"),
        ],
    )
    def test_status_and_code(self, client, name, status_code, code):
        response = client.get(f"/raise/{name}")

        assert response.status_code == status_code
        assert response.json()["code"] == code
        assert isinstance(response.json()["error"], str)

    def test_validation_lists_fields(self, client):
        body = client.get("/raise/validation").json()

        assert body == {
            "error": "Missing required fields: title",
            "code": "VALIDATION_ERROR",
            "details": {"fields": ["title"]},
        }

    def test_job_closed_is_forbidden(self):
        assert isinstance(JobClosed(), Forbidden)


class TestRequestValidation:
    """Test FastAPI request validation mapping."""

    def test_invalid_body_is_400(self, client):
        response = client.post("/body", json={"count": "many"})

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["error"].startswith("Invalid or missing fields:")
        assert {d["field"] for d in body["details"]} == {"name", "count"}

    def test_unknown_route_keeps_http_status(self, client):
        response = client.get("/nowhere")

        assert response.status_code == 404
        assert response.json()["code"] == "HTTP_404"


class TestUnexpectedErrors:
    """Test 500 handling."""

    def test_generic_error_hides_message(self, client):
        response = client.get("/boom")

        assert response.status_code == 500
        assert response.json() == {"error": "An unexpected error occurred", "code": "INTERNAL_SERVER_ERROR"}

    def test_database_error(self, client):
        response = client.get("/db")

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "DATABASE_ERROR"
        assert "postgresql" not in response.text

    def test_debug_details_are_sanitised(self):
        client = TestClient(build_app(debug=True), raise_server_exceptions=False)

        response = client.get("/boom")

        assert response.status_code == 500
        assert "hunter2" not in response.text
        assert response.json()["details"]["type"] == "RuntimeError"


class TestSanitizeErrorMessage:
    """Test secret redaction."""

    def test_redacts_credentials(self):
        message = 'password=hunter2 token: abc123 api_key="xyz"'

        sanitized = sanitize_error_message(message)

        assert "hunter2" not in sanitized
        assert "abc123" not in sanitized
        assert "xyz" not in sanitized

    def test_redacts_dsns(self):
        sanitized = sanitize_error_message("could not connect to postgresql+asyncpg://app:pw@db:5432/formhire")

        assert "pw@db" not in sanitized
        assert "[REDACTED]" in sanitized

    def test_plain_message_untouched(self):
        assert sanitize_error_message("Job not found") == "Job not found"
