"""Application API schemas."""

from datetime import datetime
from typing import Optional, Union
from pydantic import Field, field_validator

from api.schemas.common import CamelModel
from database.models.applications import ApplicationStatus
from database.models.jobs import QuestionType


class CustomAnswerInput(CamelModel):
    question_id: int
    answer: Union[str, list[str], None] = None


class ApplicationPayload(CamelModel):
    """
    Application form body. Required-field checks happen in the service so
    that every missing field is reported at once.
    """

    resume_url: Optional[str] = None
    phone_number: Optional[str] = None
    linkedin_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    why_interested: Optional[str] = None
    relevant_experience: Optional[str] = None
    expected_salary: Optional[str] = None
    availability_start: Optional[str] = None
    current_employment: Optional[str] = None
    relocation_willingness: Optional[str] = None
    work_authorization: Optional[str] = None
    cover_letter: Optional[str] = None
    additional_comments: Optional[str] = None
    reference_source: Optional[str] = None
    custom_answers: list[CustomAnswerInput] = Field(default_factory=list)

    @field_validator("custom_answers", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return v or []


class ApplicationCreateRequest(ApplicationPayload):
    job_id: int


class StatusUpdateRequest(CamelModel):
    """Body of ``PATCH /api/admin/applications``."""

    application_id: int
    status: str
    notes: Optional[str] = None


class StatusPatchRequest(CamelModel):
    """Body of ``PATCH /api/admin/applications/{id}``."""

    status: str
    notes: Optional[str] = None


class StatusPutRequest(CamelModel):
    """Body of ``PUT /api/admin/applications/{id}/status``."""

    status: str
    message: Optional[str] = None


class JobSummary(CamelModel):
    id: int
    title: str
    company_name: str
    department: str
    location: str
    employment_type: str
    is_active: bool


class AnswerResponse(CamelModel):
    id: int
    question_id: Optional[int] = None
    question_text: str
    question_type: QuestionType
    answer: str


class ApplicationLogResponse(CamelModel):
    id: int
    action: str
    notes: Optional[str] = None
    created_at: datetime


class ApplicationResponse(CamelModel):
    id: int
    job_id: int
    user_id: int
    applicant_name: str
    applicant_email: str
    status: ApplicationStatus
    applied_at: datetime
    resume_url: Optional[str] = None
    phone_number: str
    linkedin_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    why_interested: str
    relevant_experience: str
    expected_salary: Optional[str] = None
    availability_start: Optional[str] = None
    current_employment: Optional[str] = None
    relocation_willingness: Optional[str] = None
    work_authorization: str
    cover_letter: Optional[str] = None
    additional_comments: Optional[str] = None
    reference_source: Optional[str] = None
    status_message: Optional[str] = None
    status_updated_at: Optional[datetime] = None
    job: JobSummary
    answers: list[AnswerResponse] = Field(default_factory=list)


class AdminApplicationResponse(ApplicationResponse):
    logs: list[ApplicationLogResponse] = Field(default_factory=list)


class ApplicationEnvelope(CamelModel):
    message: Optional[str] = None
    application: ApplicationResponse


class AdminApplicationEnvelope(CamelModel):
    message: Optional[str] = None
    application: AdminApplicationResponse


class ApplicationListResponse(CamelModel):
    applications: list[ApplicationResponse]


class AdminApplicationListResponse(CamelModel):
    applications: list[AdminApplicationResponse]
    total: int


class HasAppliedResponse(CamelModel):
    has_applied: bool
    application: Optional[ApplicationResponse] = None
