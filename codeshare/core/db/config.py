from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncAttrs,
    AsyncEngine,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from codeshare.core.config import settings


def engine_options(database_url: str) -> dict[str, Any]:
    """
    ``create_async_engine`` keyword arguments for ``database_url``.

    Pool sizing is left to SQLAlchemy's defaults for SQLite.
    """
    options: dict[str, Any] = {"echo": settings.DEBUG}
    if make_url(database_url).get_backend_name() != "sqlite":
        options.update(
            pool_size=20, max_overflow=30, pool_pre_ping=True, pool_recycle=3600
        )
    return options


async_engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL, **engine_options(settings.DATABASE_URL)
)

AsyncSessionLocal = async_sessionmaker(
    bind=async_engine, autoflush=False, expire_on_commit=False
)


class Base(AsyncAttrs, DeclarativeBase):
    pass


async def dispose_db() -> None:
    """Close every pooled connection; the CLI calls this before exiting."""
    await async_engine.dispose()
