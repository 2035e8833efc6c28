"""Workflow execution engine."""

from .dispatcher import NodeDispatcher, NodeServices
from .graph_router import WorkflowRunner, select_edges
from .node_registry import NodeRegistryClass, node_registry, register_all_nodes
from .run_recorder import RunRecorder
from .types import (
    Edge,
    ExecutionContext,
    ExecutionEvent,
    ExecutionEventType,
    Graph,
    Node,
    NodeCategory,
    NodeExecutionResult,
    NodeResultEntry,
    RunRecord,
)

__all__ = [
    "Edge",
    "ExecutionContext",
    "ExecutionEvent",
    "ExecutionEventType",
    "Graph",
    "Node",
    "NodeCategory",
    "NodeDispatcher",
    "NodeExecutionResult",
    "NodeRegistryClass",
    "NodeResultEntry",
    "NodeServices",
    "RunRecord",
    "RunRecorder",
    "WorkflowRunner",
    "node_registry",
    "register_all_nodes",
    "select_edges",
]
