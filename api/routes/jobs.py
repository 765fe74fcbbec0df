"""
Public job endpoints.

Anyone can browse active jobs; inactive jobs are hidden.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query

from api.dependencies import get_pagination_params
from api.schemas.common import PaginationMeta, PaginationParams
from api.schemas.jobs import (
    FilterOptions,
    JobEnvelope,
    JobListFilters,
    JobListResponse,
    SortKey,
    SortOrder,
    job_detail_response,
    job_response,
)
from api.services import jobs as job_service

router = APIRouter(prefix="/api/jobs", tags=["jobs"])


def get_job_filters(
    search: Optional[str] = Query(None, description="Search title, description, company and requirements"),
    location: Optional[str] = Query(None),
    department: Optional[str] = Query(None),
    employment_type: Optional[str] = Query(None, alias="employmentType"),
    experience_level: Optional[str] = Query(None, alias="experienceLevel"),
    company_size: Optional[str] = Query(None, alias="companySize"),
    skills: Optional[str] = Query(None, description="Comma-separated; matches any"),
    featured: Optional[bool] = Query(None),
    sort_by: SortKey = Query("createdAt", alias="sortBy"),
    sort_order: SortOrder = Query("desc", alias="sortOrder"),
) -> JobListFilters:
    return JobListFilters(
        search=search,
        location=location,
        department=department,
        employment_type=employment_type or None,
        experience_level=experience_level or None,
        company_size=company_size or None,
        skills=[s.strip() for s in (skills or "").split(",") if s.strip()],
        featured=featured,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get(
    "",
    response_model=JobListResponse,
    summary="List Jobs",
    description="Filterable, paginated listing of active jobs with filter options for the UI.",
)
async def list_jobs(
    filters: JobListFilters = Depends(get_job_filters),
    pagination: PaginationParams = Depends(get_pagination_params),
) -> JobListResponse:
    rows, total = await job_service.list_jobs(filters, pagination)
    options = await job_service.get_filter_options()
    return JobListResponse(
        jobs=[job_response(job, count) for job, count in rows],
        pagination=PaginationMeta.create(total, pagination),
        filter_options=FilterOptions(**options),
    )


@router.get(
    "/{job_id}",
    response_model=JobEnvelope,
    summary="Get Job Details",
    description="A single active job with its ordered custom questions.",
)
async def get_job(job_id: int = Path(..., description="Job ID")) -> JobEnvelope:
    job, count = await job_service.get_job(job_id)
    return JobEnvelope(job=job_detail_response(job, count))
