"""Custom exceptions for the workflow engine."""

from typing import Any


class NodeflowError(Exception):
    """Base exception for all engine errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class WorkflowNotFoundError(NodeflowError):
    """Raised when a saved workflow is not found."""

    def __init__(self, workflow_id: str) -> None:
        super().__init__(
            message=f"Workflow not found: {workflow_id}",
            details={"workflow_id": workflow_id},
        )
        self.workflow_id = workflow_id


class ExecutionNotFoundError(NodeflowError):
    """Raised when a run record is not found."""

    def __init__(self, execution_id: str) -> None:
        super().__init__(
            message=f"Execution not found: {execution_id}",
            details={"execution_id": execution_id},
        )
        self.execution_id = execution_id


class NodeTypeNotFoundError(NodeflowError):
    """Raised when a node type is not registered."""

    def __init__(self, node_type: str) -> None:
        super().__init__(
            message=f"Node type not found: {node_type}",
            details={"node_type": node_type},
        )
        self.node_type = node_type


class ValidationError(NodeflowError):
    """Raised when validation fails."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(
            message=message,
            details={"field": field} if field else {},
        )
        self.field = field


class WorkflowExecutionError(NodeflowError):
    """Raised when a run cannot be carried out."""

    def __init__(
        self,
        message: str,
        workflow_id: str | None = None,
        node_id: str | None = None,
    ) -> None:
        super().__init__(
            message=message,
            details={
                "workflow_id": workflow_id,
                "node_id": node_id,
            },
        )
        self.workflow_id = workflow_id
        self.node_id = node_id


class NoTriggerError(WorkflowExecutionError):
    """Raised before a run starts when the graph has no entry node."""


class HttpProxyError(NodeflowError):
    """Raised when an outbound HTTP request cannot be completed."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message=message, details={"url": url} if url else {})
        self.url = url


class AIExecutionError(NodeflowError):
    """Raised when an AI node call fails."""

    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message=message, details={"status_code": status_code})
        self.status_code = status_code


class CodeEvaluationError(NodeflowError):
    """Raised when user-authored code or a condition fails to evaluate."""
