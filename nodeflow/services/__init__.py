"""Service layer for business logic."""

from .execution_service import ExecutionService
from .node_service import NodeService
from .workflow_service import WorkflowService

__all__ = ["ExecutionService", "NodeService", "WorkflowService"]
