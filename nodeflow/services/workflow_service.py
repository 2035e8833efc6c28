"""Workflow service for business logic."""

from __future__ import annotations

import logging
from typing import Any, TYPE_CHECKING

from ..core.config import settings
from ..core.exceptions import ValidationError, WorkflowNotFoundError
from ..engine.dispatcher import NodeDispatcher
from ..engine.graph_router import WorkflowRunner
from ..engine.types import Edge, ExecutionEventCallback, Graph, Node, StoredWorkflow
from ..schemas.execution import ExecutionDetailResponse
from ..schemas.workflow import (
    AdhocRunRequest,
    EdgeSchema,
    NodeSchema,
    WorkflowCreateRequest,
    WorkflowDetailResponse,
    WorkflowListItem,
    WorkflowUpdateRequest,
)
from .execution_service import record_to_detail

if TYPE_CHECKING:
    from ..engine.dispatcher import NodeServices
    from ..engine.node_registry import NodeRegistryClass
    from ..engine.run_recorder import RunStore
    from ..repositories import ExecutionRepository, WorkflowRepository

logger = logging.getLogger(__name__)


def schemas_to_graph(
    nodes: list[NodeSchema],
    edges: list[EdgeSchema],
    graph_id: str | None = None,
    name: str | None = None,
) -> Graph:
    """Convert request schemas to an engine graph."""
    seen: set[str] = set()
    for n in nodes:
        if n.id in seen:
            raise ValidationError(f"Duplicate node id: {n.id}", field="nodes")
        seen.add(n.id)

    return Graph(
        nodes=[
            Node(
                id=n.id,
                type=n.type,
                config=dict(n.config),
                name=n.name,
                position=n.position,
            )
            for n in nodes
        ],
        edges=[
            Edge(
                id=e.id or f"{e.source}-{e.target}-{index}",
                source=e.source,
                target=e.target,
                branch_tag=e.branch_tag,
            )
            for index, e in enumerate(edges)
        ],
        id=graph_id,
        name=name,
    )


def build_runner(
    store: RunStore | None,
    node_registry: NodeRegistryClass | None = None,
    node_services: NodeServices | None = None,
) -> WorkflowRunner:
    """Create a runner wired to the configured deadlines."""
    dispatcher = NodeDispatcher(registry=node_registry, services=node_services)
    return WorkflowRunner(
        dispatcher,
        store=store,
        node_timeout=settings.node_timeout_seconds,
        run_timeout=settings.run_timeout_seconds,
    )


class WorkflowService:
    """Service for workflow operations."""

    def __init__(
        self,
        workflow_repo: WorkflowRepository,
        execution_repo: ExecutionRepository,
        node_registry: NodeRegistryClass | None = None,
        node_services: NodeServices | None = None,
    ) -> None:
        self._workflow_repo = workflow_repo
        self._execution_repo = execution_repo
        self._node_registry = node_registry
        self._node_services = node_services

    async def list_workflows(self) -> list[WorkflowListItem]:
        """List all workflows."""
        workflows = await self._workflow_repo.list()
        return [
            WorkflowListItem(
                id=w.id,
                name=w.name,
                node_count=len(w.graph.nodes),
                edge_count=len(w.graph.edges),
                created_at=w.created_at.isoformat(),
                updated_at=w.updated_at.isoformat(),
            )
            for w in workflows
        ]

    async def get_workflow(self, workflow_id: str) -> WorkflowDetailResponse:
        """Get a workflow by ID."""
        stored = await self._get_stored(workflow_id)
        return self._to_detail(stored)

    async def create_workflow(self, request: WorkflowCreateRequest) -> WorkflowDetailResponse:
        """Save a new workflow."""
        graph = schemas_to_graph(request.nodes, request.edges)
        stored = await self._workflow_repo.create(request.name, graph)
        logger.info("Created workflow %s (%s)", stored.id, stored.name)
        return self._to_detail(stored)

    async def update_workflow(
        self, workflow_id: str, request: WorkflowUpdateRequest
    ) -> WorkflowDetailResponse:
        """Update an existing workflow. Omitted fields keep their stored values."""
        existing = await self._get_stored(workflow_id)

        graph: Graph | None = None
        if request.nodes is not None or request.edges is not None:
            graph = schemas_to_graph(
                request.nodes if request.nodes is not None else self._node_schemas(existing.graph),
                request.edges if request.edges is not None else self._edge_schemas(existing.graph),
            )

        updated = await self._workflow_repo.update(workflow_id, name=request.name, graph=graph)
        if not updated:
            raise WorkflowNotFoundError(workflow_id)
        return self._to_detail(updated)

    async def delete_workflow(self, workflow_id: str) -> None:
        """Delete a workflow."""
        deleted = await self._workflow_repo.delete(workflow_id)
        if not deleted:
            raise WorkflowNotFoundError(workflow_id)

    async def export_workflow(self, workflow_id: str) -> str:
        """Export a workflow as JSON text."""
        exported = await self._workflow_repo.export_json(workflow_id)
        if exported is None:
            raise WorkflowNotFoundError(workflow_id)
        return exported

    async def import_workflow(self, content: str, name: str | None = None) -> WorkflowDetailResponse:
        """Save exported workflow JSON as a new workflow."""
        stored = await self._workflow_repo.import_json(content, name)
        logger.info("Imported workflow %s (%s)", stored.id, stored.name)
        return self._to_detail(stored)

    async def run_workflow(
        self,
        workflow_id: str,
        input_data: Any = None,
        on_event: ExecutionEventCallback | None = None,
    ) -> ExecutionDetailResponse:
        """
        Run a saved workflow and record the run.

        Raises:
            WorkflowNotFoundError: If the workflow does not exist
            NoTriggerError: If the graph has no entry node
        """
        stored = await self._get_stored(workflow_id)
        runner = build_runner(self._execution_repo, self._node_registry, self._node_services)
        record = await runner.run(stored.graph, input_data, on_event)
        return record_to_detail(record)

    async def run_adhoc(
        self,
        request: AdhocRunRequest,
        on_event: ExecutionEventCallback | None = None,
    ) -> ExecutionDetailResponse:
        """Run an unsaved graph and record the run."""
        graph = schemas_to_graph(request.nodes, request.edges, name=request.name)
        runner = build_runner(self._execution_repo, self._node_registry, self._node_services)
        record = await runner.run(graph, request.input_data, on_event)
        return record_to_detail(record)

    async def _get_stored(self, workflow_id: str) -> StoredWorkflow:
        stored = await self._workflow_repo.get(workflow_id)
        if not stored:
            raise WorkflowNotFoundError(workflow_id)
        return stored

    def _to_detail(self, stored: StoredWorkflow) -> WorkflowDetailResponse:
        return WorkflowDetailResponse(
            id=stored.id,
            name=stored.name,
            nodes=self._node_schemas(stored.graph),
            edges=self._edge_schemas(stored.graph),
            created_at=stored.created_at.isoformat(),
            updated_at=stored.updated_at.isoformat(),
        )

    def _node_schemas(self, graph: Graph) -> list[NodeSchema]:
        return [
            NodeSchema(id=n.id, type=n.type, name=n.name, config=n.config, position=n.position)
            for n in graph.nodes
        ]

    def _edge_schemas(self, graph: Graph) -> list[EdgeSchema]:
        return [
            EdgeSchema(id=e.id, source=e.source, target=e.target, branch_tag=e.branch_tag)
            for e in graph.edges
        ]
