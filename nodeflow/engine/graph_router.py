"""
Workflow runner - executes a workflow graph depth-first.

Every node without incoming edges is an entry point. Entry points are
processed in declaration order, and one visited set is shared by the whole
run, so a node executes at most once even when several paths lead to it.
The first path to reach a node wins; later arrivals are dropped.

A failed node stops its own branch only. Branching node types (registered
with ``branching=True``) choose their outgoing edges by the ``branch`` field
of their output.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any, Mapping, TYPE_CHECKING

from ..core.exceptions import NoTriggerError
from .run_recorder import RunRecorder, RunStore
from .types import (
    Edge,
    ExecutionContext,
    ExecutionEvent,
    ExecutionEventCallback,
    ExecutionEventType,
    Graph,
    Node,
    NodeResultEntry,
    RunRecord,
)

if TYPE_CHECKING:
    from .dispatcher import NodeDispatcher
    from .node_registry import NodeRegistryClass

logger = logging.getLogger(__name__)

RUN_DEADLINE_EXCEEDED = "Run deadline exceeded"


def select_edges(branching: bool, output: Any, edges: list[Edge]) -> list[Edge]:
    """Pick the outgoing edges to follow after a successful node."""
    if not branching or not isinstance(output, Mapping) or output.get("branch") is None:
        return edges

    branch = output["branch"]
    matching = [e for e in edges if e.branch_tag is not None and e.branch_tag == branch]
    if matching:
        return matching

    default_edges = [e for e in edges if e.branch_tag == "default"]
    if default_edges:
        return default_edges

    return [e for e in edges if not e.branch_tag]


class WorkflowRunner:
    """Runs graphs through a NodeDispatcher and records the result."""

    def __init__(
        self,
        dispatcher: NodeDispatcher | None = None,
        store: RunStore | None = None,
        node_timeout: float | None = None,
        run_timeout: float | None = None,
    ) -> None:
        if dispatcher is None:
            from .dispatcher import NodeDispatcher

            dispatcher = NodeDispatcher()
        self._dispatcher = dispatcher
        self._store = store
        self._node_timeout = node_timeout
        self._run_timeout = run_timeout

    @property
    def registry(self) -> NodeRegistryClass:
        return self._dispatcher.registry

    async def run(
        self,
        graph: Graph,
        input_data: Any = None,
        on_event: ExecutionEventCallback | None = None,
    ) -> RunRecord:
        """
        Run a workflow graph.

        Args:
            graph: Nodes and edges to execute
            input_data: Input handed to every entry node
            on_event: Optional callback for live per-node status events

        Returns:
            The frozen RunRecord (already handed to the store, if any)

        Raises:
            NoTriggerError: If the graph has no node without incoming edges
        """
        entry_nodes = graph.entry_nodes()
        if not entry_nodes:
            raise NoTriggerError(
                "No trigger node found. Add a node without incoming connections to start the workflow.",
                workflow_id=graph.id,
            )

        for node in graph.nodes:
            node.reset()

        node_map: dict[str, Node] = {n.id: n for n in graph.nodes}
        total_nodes = len(graph.nodes)

        recorder = RunRecorder(
            total_nodes,
            store=self._store,
            workflow_id=graph.id,
            workflow_name=graph.name,
        )
        recorder.start()
        run_id = recorder.run_id
        logger.info("Run %s started (%d nodes, %d entry points)", run_id, total_nodes, len(entry_nodes))

        deadline = time.monotonic() + self._run_timeout if self._run_timeout else None
        previous_outputs: dict[str, Any] = {}
        visited: set[str] = set()

        self._emit_event(
            on_event,
            ExecutionEvent(
                type=ExecutionEventType.EXECUTION_START,
                run_id=run_id,
                timestamp=datetime.now(),
                progress={"completed": 0, "total": total_nodes},
            ),
        )

        for entry in entry_nodes:
            # Stack of (node id, input); popped in the order recursion would visit
            stack: list[tuple[str, Any]] = [(entry.id, input_data)]

            while stack:
                node_id, node_input = stack.pop()
                if node_id in visited:
                    continue
                visited.add(node_id)
                node = node_map[node_id]

                if deadline is not None and time.monotonic() >= deadline:
                    self._skip_node(node, recorder, run_id, on_event, total_nodes)
                    continue

                next_edges = await self._execute(
                    graph,
                    node,
                    node_input,
                    previous_outputs,
                    recorder,
                    run_id,
                    deadline,
                    on_event,
                    total_nodes,
                )

                output = previous_outputs.get(node_id)
                for edge in reversed(next_edges):
                    if edge.target in node_map:
                        stack.append((edge.target, output))

        record = await recorder.finish()

        self._emit_event(
            on_event,
            ExecutionEvent(
                type=ExecutionEventType.EXECUTION_COMPLETE,
                run_id=run_id,
                timestamp=datetime.now(),
                error=record.error_message,
                progress={"completed": len(recorder.entries), "total": total_nodes},
            ),
        )
        return record

    async def _execute(
        self,
        graph: Graph,
        node: Node,
        node_input: Any,
        previous_outputs: dict[str, Any],
        recorder: RunRecorder,
        run_id: str,
        deadline: float | None,
        on_event: ExecutionEventCallback | None,
        total_nodes: int,
    ) -> list[Edge]:
        """Dispatch one node; returns the outgoing edges to follow."""
        node.is_executing = True
        self._emit_event(
            on_event,
            ExecutionEvent(
                type=ExecutionEventType.NODE_START,
                run_id=run_id,
                timestamp=datetime.now(),
                node_id=node.id,
                node_type=node.type,
                progress={"completed": len(recorder.entries), "total": total_nodes},
            ),
        )

        context = ExecutionContext(
            node_id=node.id,
            node_type=node.type,
            input=node_input,
            config=node.config,
            previous_outputs=previous_outputs,
        )

        timeout = self._node_timeout
        if deadline is not None:
            remaining = max(deadline - time.monotonic(), 0.001)
            timeout = min(timeout, remaining) if timeout else remaining

        started = time.perf_counter()
        result = await self._dispatcher.execute_node(context, timeout=timeout)
        duration_ms = int((time.perf_counter() - started) * 1000)

        node.is_executing = False

        if not result.success:
            node.last_error = result.error
            recorder.record(
                NodeResultEntry(
                    node_id=node.id,
                    node_name=node.label,
                    status="error",
                    duration_ms=duration_ms,
                    error=result.error,
                )
            )
            logger.warning("Node %s failed: %s", node.id, result.error)
            self._emit_event(
                on_event,
                ExecutionEvent(
                    type=ExecutionEventType.NODE_ERROR,
                    run_id=run_id,
                    timestamp=datetime.now(),
                    node_id=node.id,
                    node_type=node.type,
                    error=result.error,
                    progress={"completed": len(recorder.entries), "total": total_nodes},
                ),
            )
            return []

        previous_outputs[node.id] = result.output
        node.last_output = result.output
        recorder.record(
            NodeResultEntry(
                node_id=node.id,
                node_name=node.label,
                status="success",
                duration_ms=duration_ms,
                output=result.output,
            )
        )
        self._emit_event(
            on_event,
            ExecutionEvent(
                type=ExecutionEventType.NODE_COMPLETE,
                run_id=run_id,
                timestamp=datetime.now(),
                node_id=node.id,
                node_type=node.type,
                output=result.output,
                progress={"completed": len(recorder.entries), "total": total_nodes},
            ),
        )

        definition = self.registry.get(node.type)
        branching = definition is not None and definition.branching
        return select_edges(branching, result.output, graph.outgoing(node.id))

    def _skip_node(
        self,
        node: Node,
        recorder: RunRecorder,
        run_id: str,
        on_event: ExecutionEventCallback | None,
        total_nodes: int,
    ) -> None:
        node.last_error = RUN_DEADLINE_EXCEEDED
        recorder.record(
            NodeResultEntry(
                node_id=node.id,
                node_name=node.label,
                status="skipped",
                duration_ms=0,
                error=RUN_DEADLINE_EXCEEDED,
            )
        )
        self._emit_event(
            on_event,
            ExecutionEvent(
                type=ExecutionEventType.NODE_SKIPPED,
                run_id=run_id,
                timestamp=datetime.now(),
                node_id=node.id,
                node_type=node.type,
                error=RUN_DEADLINE_EXCEEDED,
                progress={"completed": len(recorder.entries), "total": total_nodes},
            ),
        )

    def _emit_event(
        self, on_event: ExecutionEventCallback | None, event: ExecutionEvent
    ) -> None:
        """Helper to emit events safely."""
        if on_event:
            try:
                on_event(event)
            except Exception:
                logger.exception("Error in execution event callback")
