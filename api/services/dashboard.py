"""Admin dashboard aggregates."""

from typing import Any, Dict
import logging

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from database.engine import AsyncSessionLocal
from database.models.applications import Application, ApplicationStatus
from database.models.jobs import Job
from database.models.users import User

logger = logging.getLogger(__name__)

RECENT_APPLICATIONS_LIMIT = 10


async def get_dashboard_stats() -> Dict[str, Any]:
    """Site-wide counts plus the most recent applications."""
    async with AsyncSessionLocal() as session:
        total_jobs = (await session.execute(select(func.count()).select_from(Job))).scalar() or 0
        active_jobs = (
            await session.execute(
                select(func.count()).select_from(Job).where(Job.is_active.is_(True))
            )
        ).scalar() or 0
        total_applications = (
            await session.execute(select(func.count()).select_from(Application))
        ).scalar() or 0
        pending_applications = (
            await session.execute(
                select(func.count())
                .select_from(Application)
                .where(Application.status == ApplicationStatus.PENDING)
            )
        ).scalar() or 0
        total_users = (await session.execute(select(func.count()).select_from(User))).scalar() or 0

        result = await session.execute(
            select(Application)
            .options(selectinload(Application.job), selectinload(Application.answers))
            .order_by(Application.applied_at.desc(), Application.id.desc())
            .limit(RECENT_APPLICATIONS_LIMIT)
        )
        recent = list(result.scalars().all())

    return {
        "total_jobs": total_jobs,
        "active_jobs": active_jobs,
        "total_applications": total_applications,
        "pending_applications": pending_applications,
        "total_users": total_users,
        "recent_applications": recent,
    }
