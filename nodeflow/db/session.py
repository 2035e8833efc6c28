"""Engine and session wiring for the workflow and execution stores.

The database URL comes from ``NODEFLOW_DATABASE_URL`` and falls back to a
SQLite file in the working directory. The module-level engine and session
factory are created lazily by SQLAlchemy, so importing this module does not
touch the database until the first query or :func:`init_db`.
"""

from __future__ import annotations

import logging
from typing import AsyncGenerator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from ..core.config import settings
from . import models  # noqa: F401  (registers tables on SQLModel.metadata)

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./nodeflow.db"


def build_engine(url: str | None = None) -> AsyncEngine:
    """Create an async engine for ``url`` or the configured database."""
    database_url = url or settings.database_url or DEFAULT_DATABASE_URL
    connect_args: dict[str, object] = {}
    if make_url(database_url).get_backend_name() == "sqlite":
        # aiosqlite drives the connection from its own worker thread
        connect_args["check_same_thread"] = False
    return create_async_engine(database_url, echo=settings.debug, connect_args=connect_args)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine()
async_session_factory = build_session_factory(engine)


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create the workflow and execution tables if they are missing."""
    target = bind or engine
    logger.info("Initializing database at %s", target.url.render_as_string(hide_password=True))
    async with target.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session, rolling back whatever the request left uncommitted on error."""
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
