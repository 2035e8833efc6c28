"""Core type definitions for the workflow engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Literal


class NodeCategory(str, Enum):
    """Handler group a node type belongs to."""

    TRIGGER = "trigger"
    AI = "ai"
    ACTION = "action"
    LOGIC = "logic"


NodeStatus = Literal["success", "error", "skipped"]
RunStatus = Literal["success", "error"]


# --- Workflow Graph Types ---


@dataclass
class Node:
    """A typed unit of work in a workflow graph."""

    id: str
    type: str
    config: dict[str, Any] = field(default_factory=dict)
    name: str | None = None
    position: dict[str, float] | None = None

    # Transient run state, overwritten by every run
    last_output: Any = None
    last_error: str | None = None
    is_executing: bool = False

    @property
    def label(self) -> str:
        return self.name or self.id

    def reset(self) -> None:
        """Clear transient run state (config is left untouched)."""
        self.last_output = None
        self.last_error = None
        self.is_executing = False


@dataclass
class Edge:
    """Directed connection between two nodes, optionally tagged with a branch."""

    id: str
    source: str
    target: str
    branch_tag: str | None = None


@dataclass
class Graph:
    """Node and edge set of one workflow."""

    nodes: list[Node]
    edges: list[Edge] = field(default_factory=list)
    id: str | None = None
    name: str | None = None

    def get_node(self, node_id: str) -> Node | None:
        return next((n for n in self.nodes if n.id == node_id), None)

    def outgoing(self, node_id: str) -> list[Edge]:
        return [e for e in self.edges if e.source == node_id]

    def incoming(self, node_id: str) -> list[Edge]:
        return [e for e in self.edges if e.target == node_id]

    def entry_nodes(self) -> list[Node]:
        """Nodes with no incoming edge, in declaration order."""
        targets = {e.target for e in self.edges}
        return [n for n in self.nodes if n.id not in targets]


# --- Execution Types ---


@dataclass(frozen=True)
class ExecutionContext:
    """Read-only view handed to a node handler for one invocation.

    ``previous_outputs`` is the run-scoped output map, shared by reference
    across the whole run. Handlers must not mutate it.
    """

    node_id: str
    node_type: str
    input: Any
    config: dict[str, Any]
    previous_outputs: dict[str, Any]


@dataclass
class NodeExecutionResult:
    """Outcome of one node invocation. ``output`` is meaningful only on success."""

    success: bool
    output: Any = None
    error: str | None = None

    @classmethod
    def ok(cls, output: Any) -> NodeExecutionResult:
        return cls(success=True, output=output)

    @classmethod
    def fail(cls, error: str) -> NodeExecutionResult:
        return cls(success=False, error=error)


@dataclass(frozen=True)
class NodeResultEntry:
    """One node's entry in a run record."""

    node_id: str
    node_name: str
    status: NodeStatus
    duration_ms: int
    output: Any = None
    error: str | None = None


@dataclass(frozen=True)
class RunRecord:
    """Frozen summary of one run."""

    id: str
    started_at: datetime
    duration_ms: int
    status: RunStatus
    nodes_executed: int
    total_nodes: int
    per_node: tuple[NodeResultEntry, ...] = ()
    error_message: str | None = None
    workflow_id: str | None = None
    workflow_name: str | None = None


# --- Run Status Channel ---


class ExecutionEventType(str, Enum):
    """Types of live run status events."""

    EXECUTION_START = "execution:start"
    NODE_START = "node:start"
    NODE_COMPLETE = "node:complete"
    NODE_ERROR = "node:error"
    NODE_SKIPPED = "node:skipped"
    EXECUTION_COMPLETE = "execution:complete"


@dataclass
class ExecutionEvent:
    """Cosmetic per-node status push for progressive UI feedback."""

    type: ExecutionEventType
    run_id: str
    timestamp: datetime
    node_id: str | None = None
    node_type: str | None = None
    output: Any = None
    error: str | None = None
    progress: dict[str, int] | None = None


# Callback type for receiving execution events
ExecutionEventCallback = Callable[[ExecutionEvent], None]


# --- Stored Workflow Types ---


@dataclass
class StoredWorkflow:
    """A named workflow graph saved in the workflow store."""

    id: str
    name: str
    graph: Graph
    created_at: datetime
    updated_at: datetime
