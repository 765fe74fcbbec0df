"""User service functions."""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.services import notifications
from core.exceptions import NotFound, Unauthenticated
from core.security import Principal
from database.engine import AsyncSessionLocal
from database.models.users import User
from database.upsert import find_or_create

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("name", "image", "bio", "location", "website", "github", "linkedin", "phone")


async def resolve_user(
    session: AsyncSession,
    email: str,
    name: Optional[str] = None,
    image: Optional[str] = None,
) -> tuple[User, bool]:
    """
    Find-or-create the user for ``email`` inside the caller's transaction.

    Returns:
        (user, created)
    """
    email = email.strip().lower()
    user, created = await find_or_create(
        session,
        User,
        "email",
        email,
        defaults={"name": name or email.split("@")[0], "image": image},
    )
    if created:
        logger.info(f"Created user {user.id}")
    return user, created


async def ensure_user(principal: Optional[Principal]) -> User:
    """
    Find-or-create the signed-in user, sending the welcome email on first sight.

    Raises:
        Unauthenticated: No principal
    """
    if principal is None:
        raise Unauthenticated()

    async with AsyncSessionLocal() as session:
        user, created = await resolve_user(session, principal.email, principal.name, principal.image)
        await session.commit()

    if created:
        notifications.notify_welcome(user)
    return user


async def get_profile(principal: Optional[Principal]) -> User:
    """Profile of the signed-in user; the row is created on first access."""
    return await ensure_user(principal)


async def update_profile(principal: Optional[Principal], changes: dict) -> User:
    """
    Apply profile changes. Only the keys present in ``changes`` are written.

    Raises:
        Unauthenticated: No principal
        NotFound: User row vanished between lookup and update
    """
    user = await ensure_user(principal)

    async with AsyncSessionLocal() as session:
        result = await session.execute(select(User).where(User.id == user.id))
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFound("User not found")

        for field in PROFILE_FIELDS:
            if field in changes:
                setattr(user, field, changes[field])

        await session.commit()
        await session.refresh(user)

    logger.info(f"Updated profile for user {user.id}: {sorted(k for k in changes if k in PROFILE_FIELDS)}")
    return user
