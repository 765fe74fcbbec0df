"""
Idempotent find-or-create keyed on a unique column.

Uses a single ``INSERT ... ON CONFLICT DO NOTHING`` followed by a select,
so concurrent first requests for the same key all end up with the same row.
"""

from typing import Any, TypeVar

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from database.engine import Base

ModelT = TypeVar("ModelT", bound=Base)


def _insert_for(session: AsyncSession, model: type[Base]):
    dialect = session.bind.dialect.name if session.bind is not None else "postgresql"
    if dialect == "sqlite":
        return sqlite.insert(model)
    return postgresql.insert(model)


async def find_or_create(
    session: AsyncSession,
    model: type[ModelT],
    key: str,
    value: Any,
    defaults: dict[str, Any] | None = None,
) -> tuple[ModelT, bool]:
    """
    Return the row whose ``key`` column equals ``value``, inserting it first
    if absent.

    Args:
        session: Open session. The caller owns the transaction.
        model: Mapped class with a unique constraint on ``key``.
        key: Column name of the unique key.
        value: Key value.
        defaults: Column values used only when inserting.

    Returns:
        (row, created) where ``created`` is True only for the inserting caller.
    """
    values = {key: value, **(defaults or {})}
    stmt = (
        _insert_for(session, model)
        .values(**values)
        .on_conflict_do_nothing(index_elements=[key])
    )
    result = await session.execute(stmt)
    created = (result.rowcount or 0) > 0

    row = (
        await session.execute(
            select(model).where(getattr(model, key) == value).execution_options(
                populate_existing=True
            )
        )
    ).scalar_one()
    return row, created
