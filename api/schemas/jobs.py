"""Job posting API schemas."""

from datetime import datetime
from typing import Literal, Optional
from pydantic import Field, field_validator

from api.schemas.common import CamelModel, PaginationMeta
from database.models.jobs import QuestionType

SortKey = Literal["createdAt", "salary", "company", "title"]
SortOrder = Literal["asc", "desc"]

EMPLOYMENT_TYPES: tuple[str, ...] = ("full-time", "part-time", "contract", "freelance", "internship")
EXPERIENCE_LEVELS: tuple[str, ...] = ("entry", "mid", "senior", "executive")
COMPANY_SIZES: tuple[str, ...] = ("1-10", "11-50", "51-200", "201-500", "501-1000", "1000+")


class JobQuestionInput(CamelModel):
    """A custom question as supplied by an admin."""

    question: str = Field(..., min_length=1, max_length=2000)
    type: QuestionType = QuestionType.TEXT
    required: bool = False
    options: list[str] = Field(default_factory=list)
    placeholder: Optional[str] = Field(None, max_length=300)

    @field_validator("type", mode="before")
    @classmethod
    def upper_type(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("options", mode="before")
    @classmethod
    def clean_options(cls, v):
        if v is None:
            return []
        return [str(o).strip() for o in v if str(o).strip()]


class JobFields(CamelModel):
    """
    Job fields as submitted. Everything is optional here: required-field
    and default rules are applied by the job service so that blank values
    are reported together.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[str] = None
    department: Optional[str] = None
    location: Optional[str] = None
    salary: Optional[str] = None
    employment_type: Optional[str] = None
    experience_level: Optional[str] = None
    skills: Optional[list[str]] = None
    benefits: Optional[list[str]] = None
    company_name: Optional[str] = None
    company_logo: Optional[str] = None
    company_website: Optional[str] = None
    company_size: Optional[str] = None
    resume_required: Optional[bool] = None
    featured: Optional[bool] = None
    is_active: Optional[bool] = None


class JobWriteRequest(JobFields):
    """Create/update body: job fields plus an optional question set."""

    questions: Optional[list[JobQuestionInput]] = None


class JobQuestionResponse(CamelModel):
    id: int
    question: str
    type: QuestionType
    required: bool
    options: list[str]
    placeholder: Optional[str] = None
    order: int


class AdminSummary(CamelModel):
    name: Optional[str] = None
    email: str


class JobResponse(CamelModel):
    id: int
    title: str
    description: str
    requirements: str
    department: str
    location: str
    salary: Optional[str] = None
    employment_type: str
    experience_level: str
    skills: list[str]
    benefits: list[str]
    company_name: str
    company_logo: Optional[str] = None
    company_website: Optional[str] = None
    company_size: Optional[str] = None
    resume_required: bool
    featured: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime
    admin_id: int
    application_count: int = 0


class JobDetailResponse(JobResponse):
    questions: list[JobQuestionResponse] = Field(default_factory=list)
    admin: Optional[AdminSummary] = None


class JobListFilters(CamelModel):
    """Listing filters parsed from the query string."""

    search: Optional[str] = None
    location: Optional[str] = None
    department: Optional[str] = None
    employment_type: Optional[str] = None
    experience_level: Optional[str] = None
    company_size: Optional[str] = None
    skills: list[str] = Field(default_factory=list)
    featured: Optional[bool] = None
    sort_by: SortKey = "createdAt"
    sort_order: SortOrder = "desc"


class FilterOptions(CamelModel):
    departments: list[str]
    locations: list[str]
    companies: list[str]
    employment_types: list[str] = Field(default_factory=lambda: list(EMPLOYMENT_TYPES))
    experience_levels: list[str] = Field(default_factory=lambda: list(EXPERIENCE_LEVELS))
    company_sizes: list[str] = Field(default_factory=lambda: list(COMPANY_SIZES))


class JobListResponse(CamelModel):
    jobs: list[JobResponse]
    pagination: PaginationMeta
    filter_options: Optional[FilterOptions] = None


class JobEnvelope(CamelModel):
    job: JobDetailResponse


class JobDeleteResponse(CamelModel):
    message: str
    action: Literal["deleted", "deactivated"]
    application_count: int


def job_response(job, application_count: int = 0) -> JobResponse:
    """Serialise a Job row (relationships are not touched)."""
    data = {name: getattr(job, name) for name in JobResponse.model_fields if name != "application_count"}
    return JobResponse(**data, application_count=application_count)


def job_detail_response(job, application_count: int = 0, include_admin: bool = False) -> JobDetailResponse:
    """Serialise a Job row with its (already loaded) questions and, optionally, its admin."""
    base = job_response(job, application_count).model_dump()
    return JobDetailResponse(
        **base,
        questions=[JobQuestionResponse.model_validate(q) for q in job.questions],
        admin=AdminSummary.model_validate(job.admin) if include_admin and job.admin else None,
    )
