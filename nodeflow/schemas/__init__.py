"""Pydantic schemas for API request/response validation."""

from .collaborators import AIExecuteRequest, HttpProxyRequest, HttpProxyResponse
from .common import HealthResponse, RootResponse, SuccessResponse
from .execution import (
    ClearExecutionsResponse,
    ExecutionDetailResponse,
    ExecutionListItem,
    NodeResultSchema,
)
from .node import ConfigFieldSchema, NodeTypeInfo
from .workflow import (
    AdhocRunRequest,
    EdgeSchema,
    NodeSchema,
    WorkflowCreateRequest,
    WorkflowDetailResponse,
    WorkflowImportRequest,
    WorkflowListItem,
    WorkflowRunRequest,
    WorkflowUpdateRequest,
)

__all__ = [
    # Collaborators
    "AIExecuteRequest",
    "HttpProxyRequest",
    "HttpProxyResponse",
    # Common
    "HealthResponse",
    "RootResponse",
    "SuccessResponse",
    # Execution
    "ClearExecutionsResponse",
    "ExecutionDetailResponse",
    "ExecutionListItem",
    "NodeResultSchema",
    # Node
    "ConfigFieldSchema",
    "NodeTypeInfo",
    # Workflow
    "AdhocRunRequest",
    "EdgeSchema",
    "NodeSchema",
    "WorkflowCreateRequest",
    "WorkflowDetailResponse",
    "WorkflowImportRequest",
    "WorkflowListItem",
    "WorkflowRunRequest",
    "WorkflowUpdateRequest",
]
