"""
Admin authorization gate.

A caller is admitted when their email is on the configured allow-list and
their Admin row, if one exists, is active. The row is created on the first
admitted request.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import Forbidden, Unauthenticated
from core.security import Principal, is_admin_email
from database.engine import AsyncSessionLocal
from database.models.users import Admin
from database.upsert import find_or_create

logger = logging.getLogger(__name__)


async def resolve_admin(
    session: AsyncSession,
    email: str,
    name: Optional[str] = None,
) -> Admin:
    """
    Find-or-create the Admin row for an allow-listed email and check it is active.

    Raises:
        Forbidden: The Admin row is deactivated
    """
    email = email.strip().lower()
    admin, created = await find_or_create(
        session,
        Admin,
        "email",
        email,
        defaults={"name": name, "is_active": True},
    )
    if created:
        logger.info(f"Created admin {admin.id} on first admitted request")

    if not admin.is_active:
        logger.warning(f"Deactivated admin {admin.id} denied")
        raise Forbidden("Admin account is deactivated")

    return admin


async def authorize_admin(principal: Optional[Principal]) -> Admin:
    """
    Run the admin gate for a request.

    Raises:
        Unauthenticated: No session
        Forbidden: Email not allow-listed, or the admin is deactivated
    """
    if principal is None:
        raise Unauthenticated()

    if not is_admin_email(principal.email):
        logger.warning("Non allow-listed principal denied admin access")
        raise Forbidden("Admin access required")

    async with AsyncSessionLocal() as session:
        admin = await resolve_admin(session, principal.email, principal.name)
        await session.commit()

    return admin
