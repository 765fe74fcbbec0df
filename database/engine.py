import logging
from datetime import datetime, timezone

from sqlalchemy import BigInteger, Integer, event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from core.config import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.database_url

# SQLite only autoincrements INTEGER primary keys
BigIntPK = BigInteger().with_variant(Integer(), "sqlite")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"echo": settings.database_echo, "poolclass": NullPool}
    return {
        "echo": settings.database_echo,
        "pool_size": settings.database_pool_size,
        "max_overflow": settings.database_max_overflow,
        "pool_pre_ping": True,
    }


db_engine = create_async_engine(DATABASE_URL, **_engine_kwargs(DATABASE_URL))


if db_engine.dialect.name == "sqlite":

    @event.listens_for(db_engine.sync_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        # SQLite ignores ON DELETE rules unless this is set per connection
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Create async session maker to be used throughout the application
AsyncSessionLocal = async_sessionmaker(
    db_engine, class_=AsyncSession, expire_on_commit=False
)


# Base class for declarative models
class Base(DeclarativeBase):
    pass


# Function to initialize the database (create tables)
async def init_db():
    # Import models so they register on Base.metadata
    import database.models  # noqa: F401

    logger.info(f"Initializing database schema on {db_engine.url.render_as_string(hide_password=True)}")
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db():
    """Drop every table. Used by the test suite."""
    import database.models  # noqa: F401

    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# Function to close database connections
async def close_db():
    """Close database engine and connections."""
    await db_engine.dispose()
