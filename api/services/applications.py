"""Application service functions."""

from typing import Optional
import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from api.schemas.applications import ApplicationPayload, CustomAnswerInput
from api.services import notifications
from api.services.users import resolve_user
from core.exceptions import (
    DuplicateApplication,
    JobClosed,
    NotFound,
    Unauthenticated,
    ValidationError,
)
from core.security import Principal
from core.utils.validators import clean_text, is_blank
from database.engine import AsyncSessionLocal, utcnow
from database.models.applications import (
    Application,
    ApplicationAnswer,
    ApplicationLog,
    ApplicationStatus,
)
from database.models.jobs import Job
from database.models.users import User

logger = logging.getLogger(__name__)

# payload attribute -> name reported back to the client
REQUIRED_APPLICATION_FIELDS: dict[str, str] = {
    "phone_number": "phoneNumber",
    "why_interested": "whyInterested",
    "relevant_experience": "relevantExperience",
    "work_authorization": "workAuthorization",
}

OPTIONAL_APPLICATION_FIELDS: tuple[str, ...] = (
    "resume_url",
    "linkedin_url",
    "portfolio_url",
    "expected_salary",
    "availability_start",
    "current_employment",
    "relocation_willingness",
    "cover_letter",
    "additional_comments",
    "reference_source",
)


def parse_status(value: Optional[str]) -> ApplicationStatus:
    """
    Parse a status string case-insensitively into the canonical enum.

    Raises:
        ValidationError: Not one of the canonical statuses
    """
    normalized = (value or "").strip().upper()
    try:
        return ApplicationStatus(normalized)
    except ValueError:
        allowed = ", ".join(s.value for s in ApplicationStatus)
        raise ValidationError(f"Invalid status. Must be one of: {allowed}", fields=["status"])


def flatten_answer(answer: str | list[str] | None) -> str:
    """Multi-value answers are stored comma-joined."""
    if answer is None:
        return ""
    if isinstance(answer, list):
        return ", ".join(str(a).strip() for a in answer if str(a).strip())
    return answer.strip()


def _application_options(with_logs: bool = False) -> list:
    options = [selectinload(Application.job), selectinload(Application.answers)]
    if with_logs:
        options.append(selectinload(Application.logs))
    return options


async def _load_application(
    session: AsyncSession, application_id: int, with_logs: bool = False
) -> Optional[Application]:
    result = await session.execute(
        select(Application)
        .options(*_application_options(with_logs))
        .where(Application.id == application_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def find_existing_application(
    session: AsyncSession, job_id: int, user_id: int
) -> Optional[Application]:
    result = await session.execute(
        select(Application).where(
            Application.job_id == job_id,
            Application.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


def _validate_payload(
    job: Job, payload: ApplicationPayload
) -> dict[int, CustomAnswerInput]:
    """
    Check required fields and required question answers.

    Returns:
        Supplied answers keyed by question id

    Raises:
        ValidationError: Listing every missing field
    """
    missing = [
        api_name
        for attr, api_name in REQUIRED_APPLICATION_FIELDS.items()
        if is_blank(getattr(payload, attr))
    ]
    if job.resume_required and is_blank(payload.resume_url):
        missing.append("resumeUrl")

    questions = {q.id: q for q in job.questions}
    answers = {a.question_id: a for a in payload.custom_answers}

    unknown = sorted(set(answers) - set(questions))
    if unknown:
        raise ValidationError(
            f"Answers reference unknown questions: {', '.join(str(q) for q in unknown)}",
            fields=[f"customAnswers.{q}" for q in unknown],
        )

    for question in job.questions:
        if question.required:
            supplied = answers.get(question.id)
            if supplied is None or is_blank(supplied.answer):
                missing.append(f"customAnswers.{question.id}")

    if missing:
        raise ValidationError(
            f"Missing required fields: {', '.join(missing)}", fields=missing
        )

    return answers


async def submit_application(
    principal: Optional[Principal],
    job_id: int,
    payload: ApplicationPayload,
) -> Application:
    """
    Submit an application for the signed-in user.

    Steps: resolve the user, check the job accepts applications, reject a
    second application for the same job, validate the form, insert the
    application and its answers, then notify applicant and admins.

    The (job, user) unique constraint is the authoritative duplicate guard;
    the pre-check only gives a fast answer in the common case.

    Returns:
        The created application with job and answers loaded

    Raises:
        Unauthenticated: No principal
        NotFound: No such job
        JobClosed: Job is inactive
        DuplicateApplication: The user already applied
        ValidationError: Required fields or answers missing
    """
    if principal is None:
        raise Unauthenticated()

    async with AsyncSessionLocal() as session:
        user, user_created = await resolve_user(
            session, principal.email, principal.name, principal.image
        )
        user_id = user.id
        # The user row must survive a failed submission
        await session.commit()

        result = await session.execute(
            select(Job).options(selectinload(Job.questions)).where(Job.id == job_id)
        )
        job = result.scalar_one_or_none()
        if job is None:
            raise NotFound("Job not found")
        if not job.is_active:
            raise JobClosed()

        if await find_existing_application(session, job_id, user_id) is not None:
            raise DuplicateApplication()

        answers = _validate_payload(job, payload)
        questions = {q.id: q for q in job.questions}

        application = Application(
            job_id=job.id,
            user_id=user_id,
            applicant_name=principal.name or user.name or user.email,
            applicant_email=user.email,
            status=ApplicationStatus.PENDING,
            applied_at=utcnow(),
            phone_number=payload.phone_number.strip(),
            why_interested=payload.why_interested.strip(),
            relevant_experience=payload.relevant_experience.strip(),
            work_authorization=payload.work_authorization.strip(),
            **{field: clean_text(getattr(payload, field)) for field in OPTIONAL_APPLICATION_FIELDS},
        )
        # Answers copy the question text so they outlive question replacement
        application.answers = [
            ApplicationAnswer(
                question_id=question_id,
                question_text=questions[question_id].question,
                question_type=questions[question_id].type,
                answer=flatten_answer(supplied.answer),
            )
            for question_id, supplied in answers.items()
            if not is_blank(supplied.answer)
        ]
        session.add(application)

        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            if await find_existing_application(session, job_id, user_id) is not None:
                logger.info(f"Concurrent duplicate application for job {job_id} rejected")
                raise DuplicateApplication()
            raise

        application = await _load_application(session, application.id)

    logger.info(
        f"Application {application.id} submitted for job {job_id} "
        f"with {len(application.answers)} answer(s)"
    )

    if user_created:
        notifications.notify_welcome(user)
    notifications.notify_application_submitted(application, application.job)
    return application


async def update_status(
    application_id: int,
    status: str,
    note: Optional[str] = None,
) -> Application:
    """
    Set an application's status and status message.

    A log entry is appended only when ``note`` is non-empty. The applicant
    is emailed only when the status actually changed.

    Raises:
        ValidationError: Unknown status
        NotFound: No such application
    """
    new_status = parse_status(status)
    note = clean_text(note)

    async with AsyncSessionLocal() as session:
        application = await _load_application(session, application_id, with_logs=True)
        if application is None:
            raise NotFound("Application not found")

        previous_status = application.status
        application.status = new_status
        application.status_message = note
        application.status_updated_at = utcnow()

        if note:
            session.add(
                ApplicationLog(
                    application_id=application.id,
                    action=new_status.value,
                    notes=note,
                )
            )

        await session.commit()
        application = await _load_application(session, application_id, with_logs=True)

    logger.info(
        f"Application {application_id} status {previous_status.value} -> {new_status.value}"
    )

    if previous_status != new_status:
        notifications.notify_status_changed(application, application.job, new_status, note)

    return application


async def check_has_applied(
    principal: Optional[Principal], job_id: int
) -> tuple[bool, Optional[Application]]:
    """Whether the caller applied to ``job_id``. Anonymous callers get (False, None)."""
    if principal is None:
        return False, None

    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(Application)
            .join(User, User.id == Application.user_id)
            .options(*_application_options())
            .where(
                Application.job_id == job_id,
                User.email == principal.email.strip().lower(),
            )
        )
        application = result.scalar_one_or_none()

    return application is not None, application


async def list_applications_for_user(principal: Optional[Principal]) -> list[Application]:
    """
    The caller's applications, newest first.

    Raises:
        Unauthenticated: No principal
    """
    if principal is None:
        raise Unauthenticated()

    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(Application)
            .join(User, User.id == Application.user_id)
            .options(*_application_options())
            .where(User.email == principal.email.strip().lower())
            .order_by(Application.applied_at.desc(), Application.id.desc())
        )
        return list(result.scalars().all())


async def list_applications_for_admin(
    job_id: Optional[int] = None,
    status: Optional[str] = None,
) -> list[Application]:
    """
    All applications, newest first, optionally filtered by job and status.

    Raises:
        ValidationError: ``status`` is not a canonical status
    """
    query = select(Application).options(*_application_options(with_logs=True))
    if job_id is not None:
        query = query.where(Application.job_id == job_id)
    if status:
        query = query.where(Application.status == parse_status(status))

    async with AsyncSessionLocal() as session:
        result = await session.execute(
            query.order_by(Application.applied_at.desc(), Application.id.desc())
        )
        return list(result.scalars().all())


async def get_application(application_id: int) -> Application:
    async with AsyncSessionLocal() as session:
        application = await _load_application(session, application_id, with_logs=True)
    if application is None:
        raise NotFound("Application not found")
    return application


async def delete_application(application_id: int) -> None:
    """
    Hard-delete an application with its answers and log.

    Raises:
        NotFound: No such application
    """
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(Application.id).where(Application.id == application_id)
        )
        if result.scalar_one_or_none() is None:
            raise NotFound("Application not found")

        await session.execute(
            delete(ApplicationAnswer).where(ApplicationAnswer.application_id == application_id)
        )
        await session.execute(
            delete(ApplicationLog).where(ApplicationLog.application_id == application_id)
        )
        await session.execute(delete(Application).where(Application.id == application_id))
        await session.commit()

    logger.info(f"Deleted application {application_id}")
