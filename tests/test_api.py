"""API tests over httpx's ASGI transport with dependency overrides."""

import json

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from nodeflow.core.dependencies import (
    get_db_session,
    get_node_registry,
    get_node_services,
    get_session_factory,
)
from nodeflow.core.exceptions import AIExecutionError
from nodeflow.main import create_app
from nodeflow.routes.execution_stream import _run_with_events

from conftest import make_graph


TRIGGER_TO_TRANSFORM = {
    "name": "Double",
    "nodes": [
        {"id": "t", "type": "manualTrigger"},
        {"id": "x", "type": "dataTransform", "config": {"code": "return input['n'] * 2"}},
    ],
    "edges": [{"source": "t", "target": "x"}],
}


@pytest_asyncio.fixture
async def client(session_factory, registry, services):
    app = create_app()

    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_session
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_node_registry] = lambda: registry
    app.dependency_overrides[get_node_services] = lambda: services

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# =============================================================================
# Meta
# =============================================================================


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


# =============================================================================
# Nodes
# =============================================================================


@pytest.mark.asyncio
async def test_list_nodes(client):
    response = await client.get("/api/nodes")
    assert response.status_code == 200
    nodes = response.json()
    assert len(nodes) == 13
    switch = next(n for n in nodes if n["type"] == "switch")
    assert switch["displayName"] == "Switch"
    assert switch["branching"] is True


@pytest.mark.asyncio
async def test_list_nodes_by_category(client):
    response = await client.get("/api/nodes", params={"category": "trigger"})
    assert sorted(n["type"] for n in response.json()) == ["manualTrigger", "schedule", "webhook"]


@pytest.mark.asyncio
async def test_get_node(client):
    response = await client.get("/api/nodes/delay")
    assert response.json()["defaultConfig"] == {"duration": "1", "unit": "seconds"}

    response = await client.get("/api/nodes/teleport")
    assert response.status_code == 404


# =============================================================================
# Workflows
# =============================================================================


@pytest.mark.asyncio
async def test_workflow_lifecycle(client):
    response = await client.post("/api/workflows", json=TRIGGER_TO_TRANSFORM)
    assert response.status_code == 201
    workflow = response.json()
    workflow_id = workflow["id"]
    assert workflow["edges"][0]["id"] == "t-x-0"

    listed = (await client.get("/api/workflows")).json()
    assert listed[0]["node_count"] == 2
    assert listed[0]["edge_count"] == 1

    response = await client.put(f"/api/workflows/{workflow_id}", json={"name": "Renamed"})
    assert response.json()["name"] == "Renamed"
    assert len(response.json()["nodes"]) == 2

    response = await client.delete(f"/api/workflows/{workflow_id}")
    assert response.json()["success"] is True
    assert (await client.get(f"/api/workflows/{workflow_id}")).status_code == 404


@pytest.mark.asyncio
async def test_duplicate_node_ids_rejected(client):
    payload = {"name": "Dup", "nodes": [{"id": "a", "type": "webhook"}, {"id": "a", "type": "delay"}]}
    response = await client.post("/api/workflows", json=payload)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_export_and_import(client):
    workflow_id = (await client.post("/api/workflows", json=TRIGGER_TO_TRANSFORM)).json()["id"]

    response = await client.get(f"/api/workflows/{workflow_id}/export")
    assert response.status_code == 200
    assert workflow_id in response.headers["content-disposition"]

    response = await client.post("/api/workflows/import", json={"content": response.text, "name": "Copy"})
    assert response.status_code == 201
    assert response.json()["name"] == "Copy"

    response = await client.post("/api/workflows/import", json={"content": "nope"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_run_saved_workflow_is_recorded(client):
    workflow_id = (await client.post("/api/workflows", json=TRIGGER_TO_TRANSFORM)).json()["id"]

    response = await client.post(f"/api/workflows/{workflow_id}/run", json={"input_data": {"n": 4}})
    assert response.status_code == 200
    run = response.json()
    assert run["status"] == "success"
    assert run["workflow_id"] == workflow_id
    assert run["per_node"][-1]["output"] == 8

    executions = (await client.get("/api/executions", params={"workflow_id": workflow_id})).json()
    assert [e["id"] for e in executions] == [run["id"]]

    detail = (await client.get(f"/api/executions/{run['id']}")).json()
    assert detail["nodes_executed"] == 2


@pytest.mark.asyncio
async def test_run_missing_workflow(client):
    response = await client.post("/api/workflows/workflow-missing/run")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_run_adhoc(client):
    payload = {**TRIGGER_TO_TRANSFORM, "input_data": {"n": 5}}
    response = await client.post("/api/workflows/run-adhoc", json=payload)
    assert response.status_code == 200
    assert response.json()["per_node"][-1]["output"] == 10


@pytest.mark.asyncio
async def test_run_adhoc_without_trigger(client):
    payload = {
        "nodes": [{"id": "a", "type": "delay"}, {"id": "b", "type": "delay"}],
        "edges": [{"source": "a", "target": "b"}, {"source": "b", "target": "a"}],
    }
    response = await client.post("/api/workflows/run-adhoc", json=payload)
    assert response.status_code == 400
    assert response.json()["detail"].startswith("No trigger node found")


# =============================================================================
# Executions
# =============================================================================


@pytest.mark.asyncio
async def test_execution_log_delete_and_clear(client):
    for n in range(3):
        await client.post("/api/workflows/run-adhoc", json={**TRIGGER_TO_TRANSFORM, "input_data": {"n": n}})

    executions = (await client.get("/api/executions")).json()
    assert len(executions) == 3

    response = await client.delete(f"/api/executions/{executions[0]['id']}")
    assert response.json()["success"] is True
    assert (await client.get(f"/api/executions/{executions[0]['id']}")).status_code == 404

    response = await client.delete("/api/executions")
    assert response.json() == {"success": True, "deleted": 2}


# =============================================================================
# Streaming
# =============================================================================


@pytest.mark.asyncio
async def test_stream_rejects_graph_without_trigger(client):
    payload = {"nodes": [], "edges": []}
    response = await client.post("/api/execution-stream", json=payload)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_stream_messages(session_factory, registry, services):
    graph = make_graph(
        [("t", "manualTrigger"), ("x", "dataTransform", {"code": "return 'done'"})],
        [("t", "x")],
    )
    messages = [
        message
        async for message in _run_with_events(graph, None, session_factory, registry, services)
    ]

    assert [m["event"] for m in messages] == [
        "execution:start",
        "node:start",
        "node:complete",
        "node:start",
        "node:complete",
        "execution:complete",
        "execution:record",
    ]
    node_complete = json.loads(messages[4]["data"])
    assert node_complete["nodeId"] == "x"
    assert node_complete["output"] == "done"

    record = json.loads(messages[-1]["data"])
    assert record["status"] == "success"
    assert record["total_nodes"] == 2


# =============================================================================
# Tools
# =============================================================================


@pytest.mark.asyncio
async def test_http_proxy(client, fake_http):
    response = await client.post("/api/http-proxy", json={"url": "example.com", "method": "GET", "body": "{}"})
    assert response.status_code == 200
    assert response.json()["statusText"] == "OK"
    assert fake_http.calls[0]["body"] is None

    response = await client.post("/api/http-proxy", json={"url": " "})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_ai_execute_resolves_config(client, fake_ai):
    payload = {
        "type": "aiTextGenerator",
        "config": {"prompt": "Hi {{input.name}} from {{greeter.city}}"},
        "input": {"name": "Ada"},
        "previousNodes": {"greeter": {"city": "London"}},
    }
    response = await client.post("/api/ai/execute", json=payload)
    assert response.status_code == 200
    assert response.json()["generatedText"] == "generated: Hi Ada from London"


@pytest.mark.asyncio
async def test_ai_execute_error_status(client, services):
    class FailingAI:
        async def execute(self, node_type, config, input_value, previous_outputs=None):
            raise AIExecutionError("API quota exceeded or rate limit reached", status_code=429)

    services.ai = FailingAI()
    response = await client.post("/api/ai/execute", json={"type": "aiChatbot"})
    assert response.status_code == 429
