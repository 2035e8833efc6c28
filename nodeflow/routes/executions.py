"""Execution routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from ..core.dependencies import get_execution_service
from ..core.exceptions import ExecutionNotFoundError
from ..schemas.common import SuccessResponse
from ..schemas.execution import (
    ClearExecutionsResponse,
    ExecutionDetailResponse,
    ExecutionListItem,
)
from ..services.execution_service import ExecutionService

router = APIRouter(prefix="/executions")


# Type alias for dependency injection
ExecutionServiceDep = Annotated[ExecutionService, Depends(get_execution_service)]


@router.get("", response_model=list[ExecutionListItem])
async def list_executions(
    service: ExecutionServiceDep,
    workflow_id: str | None = Query(None, description="Filter by workflow ID"),
) -> list[ExecutionListItem]:
    """List run records, newest first."""
    return await service.list_executions(workflow_id)


@router.delete("", response_model=ClearExecutionsResponse)
async def clear_executions(service: ExecutionServiceDep) -> ClearExecutionsResponse:
    """Clear all run records."""
    count = await service.clear_executions()
    return ClearExecutionsResponse(deleted=count)


@router.get("/{execution_id}", response_model=ExecutionDetailResponse)
async def get_execution(
    execution_id: str,
    service: ExecutionServiceDep,
) -> ExecutionDetailResponse:
    """Get a run record with its per-node results."""
    try:
        return await service.get_execution(execution_id)
    except ExecutionNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.delete("/{execution_id}", response_model=SuccessResponse)
async def delete_execution(
    execution_id: str,
    service: ExecutionServiceDep,
) -> SuccessResponse:
    """Delete a run record."""
    try:
        await service.delete_execution(execution_id)
        return SuccessResponse(message="Execution deleted")
    except ExecutionNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
