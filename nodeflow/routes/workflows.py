"""Workflow routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from ..core.dependencies import get_workflow_service
from ..core.exceptions import NoTriggerError, ValidationError, WorkflowNotFoundError
from ..schemas.common import SuccessResponse
from ..schemas.execution import ExecutionDetailResponse
from ..schemas.workflow import (
    AdhocRunRequest,
    WorkflowCreateRequest,
    WorkflowDetailResponse,
    WorkflowImportRequest,
    WorkflowListItem,
    WorkflowRunRequest,
    WorkflowUpdateRequest,
)
from ..services.workflow_service import WorkflowService

router = APIRouter(prefix="/workflows")


# Type alias for dependency injection
WorkflowServiceDep = Annotated[WorkflowService, Depends(get_workflow_service)]


@router.get("", response_model=list[WorkflowListItem])
async def list_workflows(service: WorkflowServiceDep) -> list[WorkflowListItem]:
    """List all saved workflows."""
    return await service.list_workflows()


@router.post("", response_model=WorkflowDetailResponse, status_code=201)
async def create_workflow(
    workflow: WorkflowCreateRequest,
    service: WorkflowServiceDep,
) -> WorkflowDetailResponse:
    """Save a new workflow."""
    try:
        return await service.create_workflow(workflow)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)


@router.post("/import", response_model=WorkflowDetailResponse, status_code=201)
async def import_workflow(
    request: WorkflowImportRequest,
    service: WorkflowServiceDep,
) -> WorkflowDetailResponse:
    """Import an exported workflow as a new workflow."""
    try:
        return await service.import_workflow(request.content, request.name)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)


@router.post("/run-adhoc", response_model=ExecutionDetailResponse)
async def run_adhoc_workflow(
    request: AdhocRunRequest,
    service: WorkflowServiceDep,
) -> ExecutionDetailResponse:
    """Run an unsaved graph and record the run."""
    try:
        return await service.run_adhoc(request)
    except (NoTriggerError, ValidationError) as e:
        raise HTTPException(status_code=400, detail=e.message)


@router.get("/{workflow_id}", response_model=WorkflowDetailResponse)
async def get_workflow(
    workflow_id: str,
    service: WorkflowServiceDep,
) -> WorkflowDetailResponse:
    """Get a single workflow by ID."""
    try:
        return await service.get_workflow(workflow_id)
    except WorkflowNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.put("/{workflow_id}", response_model=WorkflowDetailResponse)
async def update_workflow(
    workflow_id: str,
    workflow: WorkflowUpdateRequest,
    service: WorkflowServiceDep,
) -> WorkflowDetailResponse:
    """Update an existing workflow."""
    try:
        return await service.update_workflow(workflow_id, workflow)
    except WorkflowNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)


@router.delete("/{workflow_id}", response_model=SuccessResponse)
async def delete_workflow(
    workflow_id: str,
    service: WorkflowServiceDep,
) -> SuccessResponse:
    """Delete a workflow."""
    try:
        await service.delete_workflow(workflow_id)
        return SuccessResponse(message="Workflow deleted")
    except WorkflowNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.get("/{workflow_id}/export")
async def export_workflow(
    workflow_id: str,
    service: WorkflowServiceDep,
) -> Response:
    """Export a workflow as a JSON document."""
    try:
        content = await service.export_workflow(workflow_id)
    except WorkflowNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)

    return Response(
        content=content,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{workflow_id}.json"'},
    )


@router.post("/{workflow_id}/run", response_model=ExecutionDetailResponse)
async def run_workflow(
    workflow_id: str,
    service: WorkflowServiceDep,
    request: WorkflowRunRequest | None = None,
) -> ExecutionDetailResponse:
    """Run a saved workflow and record the run."""
    input_data = request.input_data if request else None
    try:
        return await service.run_workflow(workflow_id, input_data)
    except WorkflowNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except NoTriggerError as e:
        raise HTTPException(status_code=400, detail=e.message)
