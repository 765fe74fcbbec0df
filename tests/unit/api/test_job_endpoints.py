"""
Tests for the public job endpoints.

Tests:
- Listing envelope, pagination block and filter options
- Query-string filters
- Detail with ordered questions
- Inactive jobs hidden
"""

import pytest
from fastapi.testclient import TestClient

from api.main import app


@pytest.fixture
def client(database):
    """Create test client."""
    return TestClient(app, raise_server_exceptions=False)


def create_job(client, headers, **overrides) -> dict:
    body = {
        "title": "Backend Engineer",
        "description": "Build APIs",
        "requirements": "Python",
        "department": "Engineering",
        "location": "Remote",
    }
    body.update(overrides)
    response = client.post("/api/admin/jobs", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["job"]


class TestListJobs:
    """Test GET /api/jobs."""

    def test_empty_listing(self, client):
        response = client.get("/api/jobs")

        assert response.status_code == 200
        data = response.json()
        assert data["jobs"] == []
        assert data["pagination"] == {
            "currentPage": 1,
            "totalPages": 0,
            "totalCount": 0,
            "hasNext": False,
            "hasPrev": False,
        }
        assert "full-time" in data["filterOptions"]["employmentTypes"]

    def test_listing_is_camel_case(self, client, admin_headers):
        create_job(client, admin_headers, employmentType="contract", companyName="Acme")

        job = client.get("/api/jobs").json()["jobs"][0]

        assert job["employmentType"] == "contract"
        assert job["companyName"] == "Acme"
        assert job["applicationCount"] == 0
        assert "createdAt" in job

    def test_pagination(self, client, admin_headers):
        for i in range(12):
            create_job(client, admin_headers, title=f"Job {i:02d}")

        response = client.get("/api/jobs", params={"page": 2, "limit": 5, "sortBy": "title", "sortOrder": "asc"})

        data = response.json()
        assert [j["title"] for j in data["jobs"]] == [f"Job {i:02d}" for i in range(5, 10)]
        assert data["pagination"]["totalPages"] == 3
        assert data["pagination"]["hasNext"] is True
        assert data["pagination"]["hasPrev"] is True

    def test_limit_capped(self, client):
        response = client.get("/api/jobs", params={"limit": 500})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_filters(self, client, admin_headers):
        create_job(client, admin_headers, title="Go Dev", skills=["Go"], location="Berlin", featured=True)
        create_job(client, admin_headers, title="Py Dev", skills=["Python"], location="Remote")

        assert [j["title"] for j in client.get("/api/jobs", params={"skills": "Go,Rust"}).json()["jobs"]] == ["Go Dev"]
        assert [j["title"] for j in client.get("/api/jobs", params={"location": "berl"}).json()["jobs"]] == ["Go Dev"]
        assert [j["title"] for j in client.get("/api/jobs", params={"featured": "true"}).json()["jobs"]] == ["Go Dev"]
        assert [j["title"] for j in client.get("/api/jobs", params={"search": "py"}).json()["jobs"]] == ["Py Dev"]

    def test_filter_options_from_active_jobs(self, client, admin_headers):
        create_job(client, admin_headers, department="Design")
        create_job(client, admin_headers, department="Sales", isActive=False)

        options = client.get("/api/jobs").json()["filterOptions"]

        assert options["departments"] == ["Design"]

    def test_bad_sort_key(self, client):
        response = client.get("/api/jobs", params={"sortBy": "id; drop table jobs"})

        assert response.status_code == 400


class TestGetJob:
    """Test GET /api/jobs/{id}."""

    def test_detail_includes_ordered_questions(self, client, admin_headers):
        job = create_job(
            client,
            admin_headers,
            questions=[
                {"question": "First", "type": "text"},
                {"question": "Second", "type": "select", "required": True, "options": ["A", "B"]},
            ],
        )

        response = client.get(f"/api/jobs/{job['id']}")

        assert response.status_code == 200
        detail = response.json()["job"]
        assert [(q["question"], q["order"]) for q in detail["questions"]] == [("First", 1), ("Second", 2)]
        assert detail["questions"][1]["type"] == "SELECT"
        assert detail["admin"] is None

    def test_missing_job(self, client):
        response = client.get("/api/jobs/999")

        assert response.status_code == 404
        assert response.json() == {"error": "Job not found or no longer available", "code": "NOT_FOUND"}

    def test_inactive_job_hidden(self, client, admin_headers):
        job = create_job(client, admin_headers, isActive=False)

        assert client.get(f"/api/jobs/{job['id']}").status_code == 404
        assert client.get(f"/api/admin/jobs/{job['id']}", headers=admin_headers).status_code == 200
