"""Execution-related Pydantic schemas."""

from typing import Any

from pydantic import BaseModel, Field


class NodeResultSchema(BaseModel):
    """One node's entry in a run record."""

    node_id: str
    node_name: str
    status: str = Field(..., description="success, error or skipped")
    duration_ms: int
    output: Any = None
    error: str | None = None


class ExecutionListItem(BaseModel):
    """Schema for a run record in list response."""

    id: str
    workflow_id: str | None
    workflow_name: str | None
    status: str
    started_at: str
    duration_ms: int
    nodes_executed: int
    total_nodes: int
    error_message: str | None = None


class ExecutionDetailResponse(ExecutionListItem):
    """Full run record, per-node results in completion order."""

    per_node: list[NodeResultSchema] = Field(default_factory=list)


class ClearExecutionsResponse(BaseModel):
    """Response for clearing the run log."""

    success: bool = True
    deleted: int
