"""Applicant-facing application endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, status

from api.dependencies import get_optional_principal, require_principal
from api.schemas.applications import (
    ApplicationCreateRequest,
    ApplicationEnvelope,
    ApplicationListResponse,
    ApplicationPayload,
    ApplicationResponse,
    HasAppliedResponse,
)
from api.services import applications as application_service
from core.security import Principal

logger = logging.getLogger(__name__)

router = APIRouter(tags=["applications"])


@router.post(
    "/api/applications",
    response_model=ApplicationEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Application",
    description="Apply to a job. One application per user per job.",
)
async def submit_application(
    body: ApplicationCreateRequest,
    principal: Principal = Depends(require_principal),
) -> ApplicationEnvelope:
    """
    Submit an application.

    - **jobId**: Job to apply to
    - **phoneNumber**, **whyInterested**, **relevantExperience**, **workAuthorization**: required
    - **resumeUrl**: required when the job requires a resume
    - **customAnswers**: `[{questionId, answer}]`; list answers are comma-joined
    """
    application = await application_service.submit_application(principal, body.job_id, body)
    return ApplicationEnvelope(
        message="Application submitted successfully",
        application=ApplicationResponse.model_validate(application),
    )


@router.post(
    "/api/jobs/{job_id}/apply",
    response_model=ApplicationEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Apply To Job",
    description="Same as POST /api/applications with the job id in the path.",
)
async def apply_to_job(
    body: ApplicationPayload,
    job_id: int = Path(..., description="Job ID"),
    principal: Principal = Depends(require_principal),
) -> ApplicationEnvelope:
    application = await application_service.submit_application(principal, job_id, body)
    return ApplicationEnvelope(
        message="Application submitted successfully",
        application=ApplicationResponse.model_validate(application),
    )


@router.get(
    "/api/applications",
    response_model=ApplicationListResponse,
    summary="My Applications",
)
@router.get(
    "/api/applications/user",
    response_model=ApplicationListResponse,
    summary="My Applications",
    include_in_schema=False,
)
async def list_my_applications(
    principal: Principal = Depends(require_principal),
) -> ApplicationListResponse:
    applications = await application_service.list_applications_for_user(principal)
    return ApplicationListResponse(
        applications=[ApplicationResponse.model_validate(a) for a in applications]
    )


@router.get(
    "/api/applications/check/{job_id}",
    response_model=HasAppliedResponse,
    summary="Check Application",
    description="Whether the caller applied to a job. Anonymous callers get hasApplied=false.",
)
async def check_application(
    job_id: int = Path(..., description="Job ID"),
    principal: Optional[Principal] = Depends(get_optional_principal),
) -> HasAppliedResponse:
    has_applied, application = await application_service.check_has_applied(principal, job_id)
    return HasAppliedResponse(
        has_applied=has_applied,
        application=ApplicationResponse.model_validate(application) if application else None,
    )
