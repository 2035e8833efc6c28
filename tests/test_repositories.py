"""Tests for the SQLModel-backed workflow and execution repositories."""

import dataclasses
import json
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from nodeflow.core.exceptions import ValidationError
from nodeflow.engine.graph_router import WorkflowRunner
from nodeflow.engine.types import NodeResultEntry, RunRecord
from nodeflow.repositories import ExecutionRepository, WorkflowRepository
from nodeflow.repositories.workflow_repository import graph_from_definition

from conftest import make_graph


def run_record(run_id: str, started_at: datetime, workflow_id: str | None = None) -> RunRecord:
    return RunRecord(
        id=run_id,
        started_at=started_at,
        duration_ms=5,
        status="success",
        nodes_executed=1,
        total_nodes=1,
        per_node=(
            NodeResultEntry(
                node_id="t",
                node_name="Trigger",
                status="success",
                duration_ms=1,
                output={"at": started_at},
            ),
        ),
        workflow_id=workflow_id,
    )


# =============================================================================
# Executions
# =============================================================================


@pytest.mark.asyncio
async def test_save_and_get(session):
    repo = ExecutionRepository(session)
    started = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    await repo.save(run_record("exec_1", started))

    record = await repo.get("exec_1")
    assert record is not None
    assert record.status == "success"
    assert record.per_node[0].node_name == "Trigger"
    assert record.per_node[0].output == {"at": str(started)}
    assert await repo.get("exec_missing") is None


@pytest.mark.asyncio
async def test_cap_evicts_oldest(session):
    repo = ExecutionRepository(session, max_records=3)
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for i in range(5):
        await repo.save(run_record(f"exec_{i}", base + timedelta(minutes=i)))

    records = await repo.list()
    assert [r.id for r in records] == ["exec_4", "exec_3", "exec_2"]


@pytest.mark.asyncio
async def test_list_filters_by_workflow(session):
    repo = ExecutionRepository(session)
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    await repo.save(run_record("exec_a", base, workflow_id="wf-a"))
    await repo.save(run_record("exec_b", base + timedelta(seconds=1), workflow_id="wf-b"))

    assert [r.id for r in await repo.list(workflow_id="wf-a")] == ["exec_a"]
    assert len(await repo.list()) == 2


@pytest.mark.asyncio
async def test_delete_and_clear(session):
    repo = ExecutionRepository(session)
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for i in range(3):
        await repo.save(run_record(f"exec_{i}", base + timedelta(seconds=i)))

    assert await repo.delete("exec_0") is True
    assert await repo.delete("exec_0") is False
    assert await repo.clear() == 2
    assert await repo.list() == []


@pytest.mark.asyncio
async def test_started_at_comes_back_in_utc(session):
    repo = ExecutionRepository(session)
    started = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    await repo.save(run_record("exec_1", started))

    [record] = await repo.list()
    assert record.started_at == started
    assert record.started_at.tzinfo is not None


@pytest.mark.asyncio
async def test_failed_save_leaves_session_usable(session):
    repo = ExecutionRepository(session)
    started = datetime(2024, 1, 1, tzinfo=timezone.utc)
    broken = dataclasses.replace(run_record("exec_bad", started), status=None)

    with pytest.raises(IntegrityError):
        await repo.save(broken)

    await repo.save(run_record("exec_ok", started))
    assert [r.id for r in await repo.list()] == ["exec_ok"]


@pytest.mark.asyncio
async def test_runner_records_are_listed(session, dispatcher):
    repo = ExecutionRepository(session)
    runner = WorkflowRunner(dispatcher, store=repo)

    record = await runner.run(make_graph([("t", "manualTrigger")]), input_data={"n": 1})

    listed = await repo.list()
    assert [r.id for r in listed] == [record.id]
    assert listed[0].status == "success"
    assert listed[0].started_at.tzinfo is not None
    assert listed[0].per_node[0].output == {"n": 1}


# =============================================================================
# Workflows
# =============================================================================


def sample_graph():
    graph = make_graph(
        [
            ("t", "manualTrigger"),
            ("s", "switch", {"property": "input.kind", "cases": "a"}),
            ("x", "dataTransform", {"code": "return input"}),
        ],
        [("t", "s"), ("s", "x", "case_0")],
    )
    graph.get_node("t").name = "Start"
    return graph


@pytest.mark.asyncio
async def test_workflow_crud(session):
    repo = WorkflowRepository(session)
    created = await repo.create("Routing", sample_graph())

    assert created.id.startswith("workflow-")
    assert created.graph.id == created.id
    assert created.graph.name == "Routing"

    loaded = await repo.get(created.id)
    assert loaded is not None
    assert [n.id for n in loaded.graph.nodes] == ["t", "s", "x"]
    assert loaded.graph.get_node("t").name == "Start"
    assert loaded.graph.edges[1].branch_tag == "case_0"
    assert loaded.graph.edges[0].branch_tag is None

    updated = await repo.update(created.id, name="Renamed")
    assert updated.name == "Renamed"
    assert len(updated.graph.nodes) == 3

    assert loaded.created_at.tzinfo is not None
    assert updated.updated_at >= loaded.created_at

    assert [w.id for w in await repo.list()] == [created.id]
    assert await repo.update("workflow-missing", name="x") is None

    assert await repo.delete(created.id) is True
    assert await repo.get(created.id) is None


@pytest.mark.asyncio
async def test_saved_graph_has_no_run_state(session):
    repo = WorkflowRepository(session)
    graph = sample_graph()
    graph.get_node("x").last_output = {"stale": True}

    created = await repo.create("Clean", graph)
    loaded = await repo.get(created.id)
    assert loaded.graph.get_node("x").last_output is None


@pytest.mark.asyncio
async def test_export_then_import(session):
    repo = WorkflowRepository(session)
    created = await repo.create("Original", sample_graph())

    text = await repo.export_json(created.id)
    exported = json.loads(text)
    assert set(exported) == {"nodes", "edges", "exportedAt"}

    imported = await repo.import_json(text, name="Copy")
    assert imported.id != created.id
    assert imported.name == "Copy"
    assert [n.id for n in imported.graph.nodes] == ["t", "s", "x"]

    assert await repo.export_json("workflow-missing") is None


@pytest.mark.asyncio
async def test_import_rejects_invalid_text(session):
    repo = WorkflowRepository(session)
    with pytest.raises(ValidationError):
        await repo.import_json("{not json")
    with pytest.raises(ValidationError):
        await repo.import_json('{"nodes": "nope", "edges": []}')
    with pytest.raises(ValidationError):
        await repo.import_json("[1, 2]")


@pytest.mark.asyncio
async def test_import_without_name_uses_default(session):
    repo = WorkflowRepository(session)
    imported = await repo.import_json('{"nodes": [{"id": "t", "type": "webhook"}], "edges": []}')
    assert imported.name == "Imported workflow"


def test_editor_format_definition():
    definition = {
        "nodes": [
            {"id": "1", "position": {"x": 0, "y": 0}, "data": {"type": "manualTrigger", "label": "Go"}},
            {"id": "2", "data": {"type": "ifElse", "config": {"condition": "true"}}},
            {"id": "3", "data": {"type": "sendEmail"}},
        ],
        "edges": [
            {"source": "1", "target": "2"},
            {"id": "e2", "source": "2", "target": "3", "sourceHandle": "true"},
        ],
    }
    graph = graph_from_definition(definition)

    assert graph.get_node("1").name == "Go"
    assert graph.get_node("2").config == {"condition": "true"}
    assert graph.edges[0].id == "edge-0"
    assert graph.edges[1].branch_tag == "true"


def test_definition_requires_node_type():
    with pytest.raises(ValidationError):
        graph_from_definition({"nodes": [{"id": "1"}], "edges": []})
