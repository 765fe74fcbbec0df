"""
Admin endpoints.

Every route here runs the admin gate through ``AdminGateRoute`` before
the body is parsed, so a caller outside the allow-list (or with a
deactivated Admin row) is refused whatever they send.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status

from api.dependencies import AdminGateRoute, get_pagination_params, require_admin
from api.routes.jobs import get_job_filters
from api.schemas.applications import (
    AdminApplicationEnvelope,
    AdminApplicationListResponse,
    AdminApplicationResponse,
    ApplicationResponse,
    StatusPatchRequest,
    StatusPutRequest,
    StatusUpdateRequest,
)
from api.schemas.common import MessageResponse, PaginationMeta, PaginationParams
from api.schemas.jobs import (
    JobDeleteResponse,
    JobEnvelope,
    JobListFilters,
    JobListResponse,
    JobWriteRequest,
    job_detail_response,
    job_response,
)
from api.schemas.users import AdminResponse, AdminVerifyResponse
from api.services import applications as application_service
from api.services import dashboard as dashboard_service
from api.services import jobs as job_service
from database.models.users import Admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"], route_class=AdminGateRoute)


# ==================== Identity ===================== #
@router.get(
    "/verify",
    response_model=AdminVerifyResponse,
    summary="Verify Admin",
    description="Returns the caller's Admin record, creating it on first use.",
)
async def verify_admin(admin: Admin = Depends(require_admin)) -> AdminVerifyResponse:
    return AdminVerifyResponse(admin=AdminResponse.model_validate(admin))


@router.get("/dashboard", summary="Dashboard Stats")
async def dashboard(admin: Admin = Depends(require_admin)) -> dict:
    """Site-wide counts plus the ten most recent applications."""
    stats = await dashboard_service.get_dashboard_stats()
    return {
        "totalJobs": stats["total_jobs"],
        "activeJobs": stats["active_jobs"],
        "totalApplications": stats["total_applications"],
        "pendingApplications": stats["pending_applications"],
        "totalUsers": stats["total_users"],
        "recentApplications": [
            ApplicationResponse.model_validate(a).model_dump(by_alias=True, mode="json")
            for a in stats["recent_applications"]
        ],
    }


# ==================== Jobs ===================== #
@router.get("/jobs", response_model=JobListResponse, summary="List All Jobs")
async def list_jobs(
    admin: Admin = Depends(require_admin),
    filters: JobListFilters = Depends(get_job_filters),
    pagination: PaginationParams = Depends(get_pagination_params),
) -> JobListResponse:
    """Like the public listing, but includes deactivated jobs."""
    rows, total = await job_service.list_jobs(filters, pagination, include_inactive=True)
    return JobListResponse(
        jobs=[job_response(job, count) for job, count in rows],
        pagination=PaginationMeta.create(total, pagination),
    )


@router.post(
    "/jobs",
    response_model=JobEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create Job",
)
async def create_job(
    body: JobWriteRequest,
    admin: Admin = Depends(require_admin),
) -> JobEnvelope:
    """
    Create a job owned by the caller.

    - **title**, **description**, **requirements**, **department**, **location**: required
    - **questions**: optional ordered custom questions
    """
    job = await job_service.create_job(admin.email, body, body.questions, owner_name=admin.name)
    return JobEnvelope(job=job_detail_response(job, 0, include_admin=True))


@router.get("/jobs/{job_id}", response_model=JobEnvelope, summary="Get Job")
async def get_job(
    job_id: int = Path(..., description="Job ID"),
    admin: Admin = Depends(require_admin),
) -> JobEnvelope:
    job, count = await job_service.get_job(job_id, include_inactive=True)
    return JobEnvelope(job=job_detail_response(job, count, include_admin=True))


@router.put("/jobs/{job_id}", response_model=JobEnvelope, summary="Replace Job")
async def replace_job(
    body: JobWriteRequest,
    job_id: int = Path(..., description="Job ID"),
    admin: Admin = Depends(require_admin),
) -> JobEnvelope:
    """Full replace: omitted fields reset to their defaults."""
    job = await job_service.update_job(job_id, body, body.questions, partial=False)
    _, count = await job_service.get_job(job_id, include_inactive=True)
    return JobEnvelope(job=job_detail_response(job, count, include_admin=True))


@router.patch("/jobs/{job_id}", response_model=JobEnvelope, summary="Update Job")
async def patch_job(
    body: JobWriteRequest,
    job_id: int = Path(..., description="Job ID"),
    admin: Admin = Depends(require_admin),
) -> JobEnvelope:
    """Merge: omitted fields keep their stored values."""
    job = await job_service.update_job(job_id, body, body.questions, partial=True)
    _, count = await job_service.get_job(job_id, include_inactive=True)
    return JobEnvelope(job=job_detail_response(job, count, include_admin=True))


@router.delete("/jobs/{job_id}", response_model=JobDeleteResponse, summary="Delete Job")
async def delete_job(
    job_id: int = Path(..., description="Job ID"),
    admin: Admin = Depends(require_admin),
) -> JobDeleteResponse:
    """Deletes a job with no applications; otherwise deactivates it."""
    action, count = await job_service.delete_job(job_id)
    if action == "deleted":
        message = "Job deleted successfully"
    else:
        message = f"Job has {count} application(s) and was deactivated instead of deleted"
    return JobDeleteResponse(message=message, action=action, application_count=count)


# ==================== Applications ===================== #
@router.get(
    "/applications",
    response_model=AdminApplicationListResponse,
    summary="List Applications",
)
async def list_applications(
    job_id: Optional[int] = Query(None, alias="jobId"),
    status_filter: Optional[str] = Query(None, alias="status"),
    admin: Admin = Depends(require_admin),
) -> AdminApplicationListResponse:
    applications = await application_service.list_applications_for_admin(job_id, status_filter)
    return AdminApplicationListResponse(
        applications=[AdminApplicationResponse.model_validate(a) for a in applications],
        total=len(applications),
    )


@router.patch(
    "/applications",
    response_model=AdminApplicationEnvelope,
    summary="Update Application Status",
)
async def update_application_status(
    body: StatusUpdateRequest,
    admin: Admin = Depends(require_admin),
) -> AdminApplicationEnvelope:
    application = await application_service.update_status(body.application_id, body.status, body.notes)
    return AdminApplicationEnvelope(
        message="Application status updated",
        application=AdminApplicationResponse.model_validate(application),
    )


@router.get(
    "/applications/{application_id}",
    response_model=AdminApplicationEnvelope,
    summary="Get Application",
)
async def get_application(
    application_id: int = Path(..., description="Application ID"),
    admin: Admin = Depends(require_admin),
) -> AdminApplicationEnvelope:
    application = await application_service.get_application(application_id)
    return AdminApplicationEnvelope(application=AdminApplicationResponse.model_validate(application))


@router.patch(
    "/applications/{application_id}",
    response_model=AdminApplicationEnvelope,
    summary="Update Application Status By Id",
)
async def patch_application(
    body: StatusPatchRequest,
    application_id: int = Path(..., description="Application ID"),
    admin: Admin = Depends(require_admin),
) -> AdminApplicationEnvelope:
    application = await application_service.update_status(application_id, body.status, body.notes)
    return AdminApplicationEnvelope(
        message="Application status updated",
        application=AdminApplicationResponse.model_validate(application),
    )


@router.put(
    "/applications/{application_id}/status",
    response_model=AdminApplicationEnvelope,
    summary="Set Application Status",
)
async def put_application_status(
    body: StatusPutRequest,
    application_id: int = Path(..., description="Application ID"),
    admin: Admin = Depends(require_admin),
) -> AdminApplicationEnvelope:
    """Sets status and the applicant-facing status message."""
    application = await application_service.update_status(application_id, body.status, body.message)
    return AdminApplicationEnvelope(
        message="Application status updated",
        application=AdminApplicationResponse.model_validate(application),
    )


@router.delete(
    "/applications/{application_id}",
    response_model=MessageResponse,
    summary="Delete Application",
)
async def delete_application(
    application_id: int = Path(..., description="Application ID"),
    admin: Admin = Depends(require_admin),
) -> MessageResponse:
    """Permanently deletes an application and its answers."""
    await application_service.delete_application(application_id)
    return MessageResponse(message="Application deleted successfully")
