"""Workflow repository for saved workflow graphs."""

from __future__ import annotations

import json
import time
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..core.exceptions import ValidationError
from ..db.models import WorkflowModel, as_utc
from ..engine.types import Edge, Graph, Node, StoredWorkflow


def graph_to_definition(graph: Graph) -> dict[str, Any]:
    """Serialize a graph's nodes and edges (transient run state excluded)."""
    return {
        "nodes": [
            {
                "id": n.id,
                "type": n.type,
                "name": n.name,
                "config": n.config,
                "position": n.position,
            }
            for n in graph.nodes
        ],
        "edges": [
            {
                "id": e.id,
                "source": e.source,
                "target": e.target,
                **({"branch_tag": e.branch_tag} if e.branch_tag else {}),
            }
            for e in graph.edges
        ],
    }


def graph_from_definition(definition: Any) -> Graph:
    """
    Rebuild a graph from its JSON form.

    Also accepts editor exports, where node type, label and config live
    under ``data`` and an edge's branch tag is its ``sourceHandle``.

    Raises:
        ValidationError: If the definition is not a nodes/edges object
    """
    if not isinstance(definition, dict):
        raise ValidationError("Invalid workflow JSON")

    raw_nodes = definition.get("nodes")
    raw_edges = definition.get("edges")
    if not isinstance(raw_nodes, list) or not isinstance(raw_edges, list):
        raise ValidationError("Invalid workflow JSON")

    nodes: list[Node] = []
    for raw in raw_nodes:
        if not isinstance(raw, dict) or not raw.get("id"):
            raise ValidationError("Invalid workflow JSON", field="nodes")
        data = raw.get("data") if isinstance(raw.get("data"), dict) else {}
        node_type = data.get("type") or raw.get("type")
        if not node_type:
            raise ValidationError("Invalid workflow JSON", field="nodes")
        nodes.append(
            Node(
                id=str(raw["id"]),
                type=str(node_type),
                config=dict(raw.get("config") or data.get("config") or {}),
                name=raw.get("name") or data.get("label"),
                position=raw.get("position"),
            )
        )

    edges: list[Edge] = []
    for index, raw in enumerate(raw_edges):
        if not isinstance(raw, dict) or not raw.get("source") or not raw.get("target"):
            raise ValidationError("Invalid workflow JSON", field="edges")
        edges.append(
            Edge(
                id=str(raw.get("id") or f"edge-{index}"),
                source=str(raw["source"]),
                target=str(raw["target"]),
                branch_tag=raw.get("branch_tag") or raw.get("sourceHandle"),
            )
        )

    return Graph(nodes=nodes, edges=edges)


class WorkflowRepository:
    """Repository for workflow persistence."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, name: str, graph: Graph) -> StoredWorkflow:
        """Save a graph under a new id."""
        now = datetime.now(timezone.utc)

        db_workflow = WorkflowModel(
            id=self._generate_id(),
            name=name,
            definition=graph_to_definition(graph),
            created_at=now,
            updated_at=now,
        )

        self._session.add(db_workflow)
        await self._session.commit()
        await self._session.refresh(db_workflow)

        return self._to_stored_workflow(db_workflow)

    async def get(self, workflow_id: str) -> StoredWorkflow | None:
        """Get a workflow by ID."""
        result = await self._session.get(WorkflowModel, workflow_id)
        if not result:
            return None
        return self._to_stored_workflow(result)

    async def list(self) -> list[StoredWorkflow]:
        """List all workflows, most recently updated first."""
        statement = select(WorkflowModel).order_by(WorkflowModel.updated_at.desc())
        result = await self._session.execute(statement)
        workflows = result.scalars().all()
        return [self._to_stored_workflow(w) for w in workflows]

    async def update(
        self,
        workflow_id: str,
        name: str | None = None,
        graph: Graph | None = None,
    ) -> StoredWorkflow | None:
        """Update an existing workflow's name and/or graph."""
        db_workflow = await self._session.get(WorkflowModel, workflow_id)
        if not db_workflow:
            return None

        if name:
            db_workflow.name = name
        if graph is not None:
            db_workflow.definition = graph_to_definition(graph)
        db_workflow.updated_at = datetime.now(timezone.utc)

        await self._session.commit()
        await self._session.refresh(db_workflow)

        return self._to_stored_workflow(db_workflow)

    async def delete(self, workflow_id: str) -> bool:
        """Delete a workflow."""
        db_workflow = await self._session.get(WorkflowModel, workflow_id)
        if not db_workflow:
            return False

        await self._session.delete(db_workflow)
        await self._session.commit()
        return True

    async def export_json(self, workflow_id: str) -> str | None:
        """Export a workflow as JSON text."""
        db_workflow = await self._session.get(WorkflowModel, workflow_id)
        if not db_workflow:
            return None

        definition = db_workflow.definition or {}
        return json.dumps(
            {
                "nodes": definition.get("nodes", []),
                "edges": definition.get("edges", []),
                "exportedAt": datetime.now().isoformat(),
            },
            indent=2,
        )

    async def import_json(self, text: str, name: str | None = None) -> StoredWorkflow:
        """
        Save an exported workflow as a new workflow.

        Raises:
            ValidationError: If the text is not a valid workflow export
        """
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, TypeError) as e:
            raise ValidationError("Invalid workflow JSON") from e

        graph = graph_from_definition(data)
        workflow_name = name or (data.get("name") if isinstance(data.get("name"), str) else None)
        return await self.create(workflow_name or "Imported workflow", graph)

    def _generate_id(self) -> str:
        """Generate a unique workflow ID."""
        return f"workflow-{int(time.time() * 1000)}-{uuid.uuid4().hex[:7]}"

    def _to_stored_workflow(self, db_workflow: WorkflowModel) -> StoredWorkflow:
        """Convert database model to StoredWorkflow."""
        graph = graph_from_definition(db_workflow.definition or {"nodes": [], "edges": []})
        graph.id = db_workflow.id
        graph.name = db_workflow.name

        return StoredWorkflow(
            id=db_workflow.id,
            name=db_workflow.name,
            graph=graph,
            created_at=as_utc(db_workflow.created_at),
            updated_at=as_utc(db_workflow.updated_at),
        )
