"""Job service functions."""

from typing import Any, Optional
import logging

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from api.schemas.common import PaginationParams
from api.schemas.jobs import JobFields, JobListFilters, JobQuestionInput
from api.services.admins import resolve_admin
from core.exceptions import NotFound, ValidationError
from database.engine import AsyncSessionLocal, db_engine
from database.models.applications import Application
from database.models.jobs import Job, JobQuestion

logger = logging.getLogger(__name__)

REQUIRED_JOB_FIELDS: tuple[str, ...] = (
    "title",
    "description",
    "requirements",
    "department",
    "location",
)

JOB_DEFAULTS: dict[str, Any] = {
    "salary": None,
    "employment_type": "full-time",
    "experience_level": "mid",
    "skills": [],
    "benefits": [],
    "company_name": "FormHire",
    "company_logo": None,
    "company_website": None,
    "company_size": None,
    "resume_required": True,
    "featured": False,
    "is_active": True,
}

SORT_COLUMNS = {
    "createdAt": Job.created_at,
    "salary": Job.salary,
    "company": Job.company_name,
    "title": Job.title,
}


def _clean_value(field: str, value: Any) -> Any:
    if field in ("skills", "benefits"):
        return [str(v).strip() for v in (value or []) if str(v).strip()]
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _resolve_fields(fields: JobFields, current: Optional[Job] = None) -> dict[str, Any]:
    """
    Compute the full column set for a create or update.

    With ``current`` set (merge), unsupplied fields keep their stored values.
    Without it (create / replace), unsupplied fields take JOB_DEFAULTS.

    Raises:
        ValidationError: Any required field is blank after trimming
    """
    supplied = fields.model_dump(exclude_unset=True)
    values: dict[str, Any] = {}

    for field in REQUIRED_JOB_FIELDS + tuple(JOB_DEFAULTS):
        if field in supplied:
            value = _clean_value(field, supplied[field])
        elif current is not None:
            value = getattr(current, field)
        else:
            value = None

        if value is None and field in JOB_DEFAULTS and field not in REQUIRED_JOB_FIELDS:
            default = JOB_DEFAULTS[field]
            value = list(default) if isinstance(default, list) else default
        values[field] = value

    missing = [field for field in REQUIRED_JOB_FIELDS if not values.get(field)]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}", fields=missing)

    return values


def _build_questions(questions: list[JobQuestionInput]) -> list[JobQuestion]:
    return [
        JobQuestion(
            question=q.question.strip(),
            type=q.type,
            required=q.required,
            options=list(q.options),
            placeholder=q.placeholder,
            order=position,
        )
        for position, q in enumerate(questions, start=1)
    ]


def _like(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


async def _application_count(session: AsyncSession, job_id: int) -> int:
    result = await session.execute(
        select(func.count())
        .select_from(Application)
        .where(Application.job_id == job_id)
    )
    return result.scalar() or 0


async def _load_job(session: AsyncSession, job_id: int) -> Optional[Job]:
    result = await session.execute(
        select(Job)
        .options(selectinload(Job.questions), selectinload(Job.admin))
        .where(Job.id == job_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def create_job(
    owner_email: str,
    fields: JobFields,
    questions: Optional[list[JobQuestionInput]] = None,
    owner_name: Optional[str] = None,
) -> Job:
    """
    Create a job owned by the calling admin.

    Args:
        owner_email: Allow-listed admin email; its Admin row is resolved or created
        fields: Submitted job fields
        questions: Optional custom questions, stored with order 1..N
        owner_name: Name stored if the Admin row is created here

    Returns:
        The created job with questions and admin loaded

    Raises:
        ValidationError: A required field is blank
    """
    values = _resolve_fields(fields)

    async with AsyncSessionLocal() as session:
        admin = await resolve_admin(session, owner_email, owner_name)

        job = Job(**values, admin_id=admin.id)
        job.questions = _build_questions(questions or [])
        session.add(job)
        await session.commit()

        job = await _load_job(session, job.id)

    logger.info(f"Created job {job.id} with {len(job.questions)} question(s) for admin {admin.id}")
    return job


async def update_job(
    job_id: int,
    fields: JobFields,
    questions: Optional[list[JobQuestionInput]] = None,
    partial: bool = False,
) -> Job:
    """
    Update a job and, when ``questions`` is given, replace its question set.

    ``partial=False`` (PUT) replaces every field, resetting unsupplied ones
    to defaults. ``partial=True`` (PATCH) merges into the stored values.
    Field changes and question replacement commit together or not at all.

    Raises:
        NotFound: No such job
        ValidationError: A required field is blank
    """
    async with AsyncSessionLocal() as session:
        job = await _load_job(session, job_id)
        if job is None:
            raise NotFound("Job not found")

        values = _resolve_fields(fields, current=job if partial else None)
        for field, value in values.items():
            setattr(job, field, value)

        if questions is not None:
            # delete-orphan cascade removes the old set in the same flush
            job.questions = _build_questions(questions)

        await session.commit()
        job = await _load_job(session, job_id)

    logger.info(
        f"Updated job {job_id} ({'merge' if partial else 'replace'})"
        + (f", replaced questions with {len(questions)}" if questions is not None else "")
    )
    return job


async def delete_job(job_id: int) -> tuple[str, int]:
    """
    Delete a job, or deactivate it if anyone has applied.

    The job row is locked while applications are counted so a concurrent
    submission cannot slip in between the count and the delete.

    Returns:
        ("deleted" | "deactivated", application_count)

    Raises:
        NotFound: No such job
    """
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(Job).where(Job.id == job_id).with_for_update()
        )
        job = result.scalar_one_or_none()
        if job is None:
            raise NotFound("Job not found")

        application_count = await _application_count(session, job_id)

        if application_count == 0:
            await session.execute(delete(JobQuestion).where(JobQuestion.job_id == job_id))
            await session.execute(delete(Job).where(Job.id == job_id))
            action = "deleted"
        else:
            job.is_active = False
            action = "deactivated"

        await session.commit()

    logger.info(f"Job {job_id} {action} ({application_count} application(s))")
    return action, application_count


def _skill_elements():
    """Table-valued expansion of ``Job.skills`` into one text row per entry."""
    if db_engine.dialect.name == "postgresql":
        return func.json_array_elements_text(Job.skills).table_valued("value")
    return func.json_each(Job.skills).table_valued("value")


def _filter_conditions(filters: JobListFilters, include_inactive: bool) -> list:
    conditions = []
    if not include_inactive:
        conditions.append(Job.is_active.is_(True))

    if filters.search and filters.search.strip():
        pattern = _like(filters.search.strip())
        conditions.append(
            or_(
                Job.title.ilike(pattern, escape="\\"),
                Job.description.ilike(pattern, escape="\\"),
                Job.company_name.ilike(pattern, escape="\\"),
                Job.requirements.ilike(pattern, escape="\\"),
            )
        )

    if filters.location and filters.location.strip():
        conditions.append(Job.location.ilike(_like(filters.location.strip()), escape="\\"))

    if filters.department and filters.department.strip():
        conditions.append(Job.department.ilike(_like(filters.department.strip()), escape="\\"))

    if filters.employment_type:
        conditions.append(Job.employment_type == filters.employment_type)

    if filters.experience_level:
        conditions.append(Job.experience_level == filters.experience_level)

    if filters.company_size:
        conditions.append(Job.company_size == filters.company_size)

    skills = [s.strip() for s in filters.skills if s and s.strip()]
    if skills:
        elements = _skill_elements()
        conditions.append(
            select(elements.c.value).where(elements.c.value.in_(skills)).exists()
        )

    if filters.featured:
        conditions.append(Job.featured.is_(True))

    return conditions


async def list_jobs(
    filters: JobListFilters,
    pagination: PaginationParams,
    include_inactive: bool = False,
) -> tuple[list[tuple[Job, int]], int]:
    """
    List jobs matching ``filters``, one page at a time.

    Args:
        filters: Search, facet and sort options
        pagination: Page and limit
        include_inactive: Admin listings see deactivated jobs too

    Returns:
        ([(job, application_count), ...], total_matching)
    """
    conditions = _filter_conditions(filters, include_inactive)

    async with AsyncSessionLocal() as session:
        count_query = select(func.count()).select_from(select(Job.id).where(*conditions).subquery())
        total_result = await session.execute(count_query)
        total = total_result.scalar() or 0

        counts = (
            select(Application.job_id, func.count(Application.id).label("application_count"))
            .group_by(Application.job_id)
            .subquery()
        )

        sort_column = SORT_COLUMNS.get(filters.sort_by, Job.created_at)
        if filters.sort_order == "asc":
            ordering = (sort_column.asc(), Job.id.asc())
        else:
            ordering = (sort_column.desc(), Job.id.desc())

        query = (
            select(Job, func.coalesce(counts.c.application_count, 0))
            .outerjoin(counts, counts.c.job_id == Job.id)
            .where(*conditions)
            .order_by(*ordering)
            .limit(pagination.limit)
            .offset(pagination.offset)
        )
        result = await session.execute(query)
        rows = [(job, int(count)) for job, count in result.all()]

    return rows, total


async def get_filter_options() -> dict[str, list[str]]:
    """Distinct departments, locations and companies across active jobs."""
    async with AsyncSessionLocal() as session:
        options: dict[str, list[str]] = {}
        for key, column in (
            ("departments", Job.department),
            ("locations", Job.location),
            ("companies", Job.company_name),
        ):
            result = await session.execute(
                select(column).where(Job.is_active.is_(True)).distinct().order_by(column)
            )
            options[key] = [value for value in result.scalars().all() if value]
        return options


async def get_job(job_id: int, include_inactive: bool = False) -> tuple[Job, int]:
    """
    Fetch one job with its ordered questions and owning admin.

    Raises:
        NotFound: Missing, or inactive and ``include_inactive`` is False
    """
    async with AsyncSessionLocal() as session:
        job = await _load_job(session, job_id)
        if job is None or (not include_inactive and not job.is_active):
            raise NotFound("Job not found or no longer available")

        application_count = await _application_count(session, job_id)

    return job, application_count
