"""Shared fixtures.

Provides:
- A fresh node registry with the built-in node types
- Fake HTTP proxy and AI collaborators that record their calls
- A dispatcher and runner wired to the fakes
- An in-memory SQLite database (StaticPool shares one connection)
"""

from __future__ import annotations

from typing import Any, AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

# Import models so they register with SQLModel.metadata
import nodeflow.db.models  # noqa: F401
from nodeflow.engine.dispatcher import NodeDispatcher, NodeServices
from nodeflow.engine.graph_router import WorkflowRunner
from nodeflow.engine.node_registry import NodeRegistryClass, register_all_nodes
from nodeflow.engine.sandbox import SandboxedEvaluator
from nodeflow.engine.types import Edge, ExecutionContext, Graph, Node


# ---------------------------------------------------------------------------
# Fake collaborators
# ---------------------------------------------------------------------------


class FakeHttpProxy:
    """Records requests and returns a canned response."""

    def __init__(self, response: dict[str, Any] | None = None, error: Exception | None = None) -> None:
        self.response = response if response is not None else {
            "status": 200,
            "statusText": "OK",
            "headers": {},
            "data": {},
        }
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def request(self, url: str, method: str = "GET", headers: Any = "{}", body: Any = None) -> dict[str, Any]:
        self.calls.append({"url": url, "method": method, "headers": headers, "body": body})
        if self.error is not None:
            raise self.error
        return self.response


class FakeAIExecutor:
    """Records AI calls and echoes the resolved config back."""

    def __init__(self, response: dict[str, Any] | None = None) -> None:
        self.response = response
        self.calls: list[dict[str, Any]] = []

    async def execute(
        self,
        node_type: str,
        config: dict[str, Any],
        input_value: Any,
        previous_outputs: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        self.calls.append({"type": node_type, "config": config, "input": input_value})
        if self.response is not None:
            return self.response
        return {"generatedText": f"generated: {config.get('prompt', '')}", "model": "fake"}


class RecordingStore:
    """Run store that keeps saved records in memory."""

    def __init__(self) -> None:
        self.records: list[Any] = []

    async def save(self, record: Any) -> Any:
        self.records.append(record)
        return record


# ---------------------------------------------------------------------------
# Graph helpers
# ---------------------------------------------------------------------------


def make_graph(nodes: list[tuple], edges: list[tuple] = ()) -> Graph:
    """Build a graph from (id, type, config) and (source, target[, tag]) tuples."""
    return Graph(
        nodes=[Node(id=n[0], type=n[1], config=dict(n[2]) if len(n) > 2 else {}) for n in nodes],
        edges=[
            Edge(
                id=f"e{i}",
                source=e[0],
                target=e[1],
                branch_tag=e[2] if len(e) > 2 else None,
            )
            for i, e in enumerate(edges)
        ],
    )


def make_context(
    node_type: str,
    config: dict[str, Any] | None = None,
    input_value: Any = None,
    previous_outputs: dict[str, Any] | None = None,
    node_id: str = "node_1",
) -> ExecutionContext:
    return ExecutionContext(
        node_id=node_id,
        node_type=node_type,
        input=input_value,
        config=config or {},
        previous_outputs=previous_outputs or {},
    )


# ---------------------------------------------------------------------------
# Engine fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def registry() -> NodeRegistryClass:
    return register_all_nodes(NodeRegistryClass())


@pytest.fixture
def fake_http() -> FakeHttpProxy:
    return FakeHttpProxy()


@pytest.fixture
def fake_ai() -> FakeAIExecutor:
    return FakeAIExecutor()


@pytest.fixture
def services(fake_http: FakeHttpProxy, fake_ai: FakeAIExecutor) -> NodeServices:
    return NodeServices(ai=fake_ai, http=fake_http, evaluator=SandboxedEvaluator(timeout=2.0))


@pytest.fixture
def dispatcher(registry: NodeRegistryClass, services: NodeServices) -> NodeDispatcher:
    return NodeDispatcher(registry=registry, services=services)


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def runner(dispatcher: NodeDispatcher, store: RecordingStore) -> WorkflowRunner:
    return WorkflowRunner(dispatcher, store=store)


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an in-memory SQLite engine for one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
