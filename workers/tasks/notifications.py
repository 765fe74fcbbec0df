"""
Notification email tasks.

Each task renders one FormHire template and sends it over SMTP. A failed
send is retried a few times; after that the failure is only logged.
"""

import logging
from typing import List, Optional

from celery import Task

from core.integrations.email import EmailTemplates, get_email_service
from workers.celery_app import celery_app

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
RETRY_COUNTDOWN = 60


def _deliver(task: Task, to: str | List[str], template: dict) -> dict:
    sent = get_email_service().send_template(to, template)
    if sent:
        return {"status": "sent", "subject": template["subject"]}

    if task.request.retries < MAX_RETRIES:
        raise task.retry(countdown=RETRY_COUNTDOWN, max_retries=MAX_RETRIES)

    logger.error(
        f"Giving up on email '{template['subject']}' after {MAX_RETRIES} retries",
        extra={"task_id": task.request.id},
    )
    return {"status": "failed", "subject": template["subject"]}


@celery_app.task(name="workers.tasks.notifications.send_welcome_email", bind=True)
def send_welcome_email(self: Task, to: str, user_name: str) -> dict:
    return _deliver(self, to, EmailTemplates.welcome_email(user_name))


@celery_app.task(
    name="workers.tasks.notifications.send_application_confirmation", bind=True
)
def send_application_confirmation(
    self: Task,
    to: str,
    applicant_name: str,
    job_title: str,
    company_name: str,
    application_id: int,
) -> dict:
    template = EmailTemplates.application_confirmation(
        applicant_name, job_title, company_name, application_id
    )
    return _deliver(self, to, template)


@celery_app.task(
    name="workers.tasks.notifications.send_admin_new_application", bind=True
)
def send_admin_new_application(
    self: Task,
    to: List[str],
    job_title: str,
    applicant_name: str,
    applicant_email: str,
    application_id: int,
    resume_url: Optional[str] = None,
) -> dict:
    template = EmailTemplates.admin_new_application(
        job_title, applicant_name, applicant_email, application_id, resume_url
    )
    return _deliver(self, to, template)


@celery_app.task(name="workers.tasks.notifications.send_status_update", bind=True)
def send_status_update(
    self: Task,
    to: str,
    applicant_name: str,
    job_title: str,
    company_name: str,
    status: str,
    message: Optional[str] = None,
) -> dict:
    template = EmailTemplates.application_status_update(
        applicant_name, job_title, company_name, status, message
    )
    return _deliver(self, to, template)
