"""
Fire-and-forget notification dispatch.

Callers invoke these after their transaction has committed. Each function
enqueues a Celery task and returns; if the broker is unreachable the error
is logged here and never reaches the caller.
"""

import logging
from typing import Any, Optional

from core.config import settings
from database.models.applications import Application, ApplicationStatus
from database.models.jobs import Job
from database.models.users import User
from workers.tasks import notifications as tasks

logger = logging.getLogger(__name__)


def _dispatch(task, **kwargs: Any) -> bool:
    try:
        task.delay(**kwargs)
        return True
    except Exception as e:
        logger.error(f"Failed to enqueue {task.name}: {type(e).__name__}: {e}")
        return False


def notify_welcome(user: User) -> bool:
    return _dispatch(
        tasks.send_welcome_email,
        to=user.email,
        user_name=user.name or user.email,
    )


def notify_application_submitted(application: Application, job: Job) -> None:
    """Confirmation to the applicant and a heads-up to every allow-listed admin."""
    _dispatch(
        tasks.send_application_confirmation,
        to=application.applicant_email,
        applicant_name=application.applicant_name,
        job_title=job.title,
        company_name=job.company_name,
        application_id=application.id,
    )

    admin_emails = sorted(settings.admin_emails)
    if not admin_emails:
        logger.info("No admin emails configured, skipping new-application notice")
        return

    _dispatch(
        tasks.send_admin_new_application,
        to=admin_emails,
        job_title=job.title,
        applicant_name=application.applicant_name,
        applicant_email=application.applicant_email,
        application_id=application.id,
        resume_url=application.resume_url,
    )


def notify_status_changed(
    application: Application,
    job: Job,
    status: ApplicationStatus,
    message: Optional[str] = None,
) -> bool:
    return _dispatch(
        tasks.send_status_update,
        to=application.applicant_email,
        applicant_name=application.applicant_name,
        job_title=job.title,
        company_name=job.company_name,
        status=status.value,
        message=message,
    )
