"""Database layer."""

from .models import ExecutionModel, WorkflowModel
from .session import (
    async_session_factory,
    build_engine,
    build_session_factory,
    engine,
    get_session,
    init_db,
)

__all__ = [
    "ExecutionModel",
    "WorkflowModel",
    "async_session_factory",
    "build_engine",
    "build_session_factory",
    "engine",
    "get_session",
    "init_db",
]
