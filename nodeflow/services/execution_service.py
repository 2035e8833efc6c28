"""Execution service for the run record log."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..core.exceptions import ExecutionNotFoundError
from ..schemas.execution import ExecutionDetailResponse, ExecutionListItem, NodeResultSchema

if TYPE_CHECKING:
    from ..engine.types import RunRecord
    from ..repositories import ExecutionRepository


def record_to_list_item(record: RunRecord) -> ExecutionListItem:
    return ExecutionListItem(
        id=record.id,
        workflow_id=record.workflow_id,
        workflow_name=record.workflow_name,
        status=record.status,
        started_at=record.started_at.isoformat(),
        duration_ms=record.duration_ms,
        nodes_executed=record.nodes_executed,
        total_nodes=record.total_nodes,
        error_message=record.error_message,
    )


def record_to_detail(record: RunRecord) -> ExecutionDetailResponse:
    return ExecutionDetailResponse(
        **record_to_list_item(record).model_dump(),
        per_node=[
            NodeResultSchema(
                node_id=e.node_id,
                node_name=e.node_name,
                status=e.status,
                duration_ms=e.duration_ms,
                output=e.output,
                error=e.error,
            )
            for e in record.per_node
        ],
    )


class ExecutionService:
    """Service for execution history operations."""

    def __init__(self, execution_repo: ExecutionRepository) -> None:
        self._execution_repo = execution_repo

    async def list_executions(self, workflow_id: str | None = None) -> list[ExecutionListItem]:
        """List run records, newest first."""
        records = await self._execution_repo.list(workflow_id)
        return [record_to_list_item(r) for r in records]

    async def get_execution(self, execution_id: str) -> ExecutionDetailResponse:
        """Get a run record by ID."""
        record = await self._execution_repo.get(execution_id)
        if not record:
            raise ExecutionNotFoundError(execution_id)
        return record_to_detail(record)

    async def delete_execution(self, execution_id: str) -> None:
        """Delete a run record."""
        deleted = await self._execution_repo.delete(execution_id)
        if not deleted:
            raise ExecutionNotFoundError(execution_id)

    async def clear_executions(self) -> int:
        """Clear the run log. Returns the number of records removed."""
        return await self._execution_repo.clear()
