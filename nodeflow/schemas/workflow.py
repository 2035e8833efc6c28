"""Workflow-related Pydantic schemas."""

from typing import Any

from pydantic import BaseModel, Field


class NodeSchema(BaseModel):
    """Schema for a node in a workflow graph."""

    id: str = Field(..., min_length=1, description="Node id, unique within the workflow")
    type: str = Field(..., description="Node type identifier")
    name: str | None = Field(None, description="Display label for the node")
    config: dict[str, Any] = Field(default_factory=dict, description="Node configuration")
    position: dict[str, float] | None = Field(None, description="UI position {x, y}")

    class Config:
        json_schema_extra = {
            "example": {
                "id": "fetch",
                "type": "httpRequest",
                "config": {"url": "https://api.example.com", "method": "GET"},
                "position": {"x": 100, "y": 200},
            }
        }


class EdgeSchema(BaseModel):
    """Schema for a directed edge between nodes."""

    id: str | None = Field(None, description="Edge id")
    source: str = Field(..., description="Source node id")
    target: str = Field(..., description="Target node id")
    branch_tag: str | None = Field(
        None, description='Branch this edge belongs to ("true", "false", "case_0", "default")'
    )


class WorkflowCreateRequest(BaseModel):
    """Request schema for saving a workflow."""

    name: str = Field(..., min_length=1, max_length=255, description="Workflow name")
    nodes: list[NodeSchema] = Field(default_factory=list, description="List of nodes")
    edges: list[EdgeSchema] = Field(default_factory=list, description="List of edges")


class WorkflowUpdateRequest(BaseModel):
    """Request schema for updating a workflow."""

    name: str | None = Field(None, min_length=1, max_length=255, description="Workflow name")
    nodes: list[NodeSchema] | None = Field(None, description="List of nodes")
    edges: list[EdgeSchema] | None = Field(None, description="List of edges")


class WorkflowImportRequest(BaseModel):
    """Request schema for importing an exported workflow."""

    content: str = Field(..., description="Exported workflow JSON text")
    name: str | None = Field(None, max_length=255, description="Name for the imported workflow")


class WorkflowRunRequest(BaseModel):
    """Request schema for running a saved workflow."""

    input_data: Any = Field(None, description="Input handed to every entry node")


class AdhocRunRequest(BaseModel):
    """Request schema for running an unsaved graph."""

    name: str | None = Field(None, description="Optional display name")
    nodes: list[NodeSchema] = Field(default_factory=list, description="List of nodes")
    edges: list[EdgeSchema] = Field(default_factory=list, description="List of edges")
    input_data: Any = Field(None, description="Input handed to every entry node")


class WorkflowListItem(BaseModel):
    """Schema for workflow in list response."""

    id: str
    name: str
    node_count: int
    edge_count: int
    created_at: str
    updated_at: str


class WorkflowDetailResponse(BaseModel):
    """Detailed workflow response."""

    id: str
    name: str
    nodes: list[NodeSchema]
    edges: list[EdgeSchema]
    created_at: str
    updated_at: str
