"""FastAPI dependency injection for the workflow engine."""

from __future__ import annotations

from functools import lru_cache
from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from .config import settings


# --- Database Session Dependency ---


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get async database session."""
    from ..db import get_session

    async for session in get_session():
        yield session


# --- Repository Dependencies ---


def get_workflow_repository(session: AsyncSession = Depends(get_db_session)):
    """Get workflow repository instance."""
    from ..repositories import WorkflowRepository

    return WorkflowRepository(session)


def get_execution_repository(session: AsyncSession = Depends(get_db_session)):
    """Get execution repository instance."""
    from ..repositories import ExecutionRepository

    return ExecutionRepository(session, max_records=settings.max_execution_records)


# --- Engine Dependencies ---


@lru_cache
def get_node_registry():
    """Get node registry instance."""
    from ..engine.node_registry import node_registry, register_all_nodes

    register_all_nodes(node_registry)
    return node_registry


@lru_cache
def get_node_services():
    """Get the shared external collaborators (AI, HTTP proxy, code evaluator)."""
    from ..engine.dispatcher import NodeServices

    return NodeServices.from_settings(settings)


# --- Service Dependencies ---


def get_workflow_service(
    workflow_repo=Depends(get_workflow_repository),
    execution_repo=Depends(get_execution_repository),
    node_registry=Depends(get_node_registry),
    node_services=Depends(get_node_services),
):
    """Get workflow service instance."""
    from ..services.workflow_service import WorkflowService

    return WorkflowService(workflow_repo, execution_repo, node_registry, node_services)


def get_execution_service(
    execution_repo=Depends(get_execution_repository),
):
    """Get execution service instance."""
    from ..services.execution_service import ExecutionService

    return ExecutionService(execution_repo)


def get_node_service(
    node_registry=Depends(get_node_registry),
):
    """Get node service instance."""
    from ..services.node_service import NodeService

    return NodeService(node_registry)


def get_session_factory():
    """Get the session factory for work that outlives the request session."""
    from ..db import async_session_factory

    return async_session_factory
