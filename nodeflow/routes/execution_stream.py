"""Server-Sent Events (SSE) route for live run status."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Annotated, Any, AsyncGenerator

from fastapi import APIRouter, Depends, HTTPException
from sse_starlette.sse import EventSourceResponse

from ..core.config import settings
from ..core.dependencies import get_node_registry, get_node_services, get_session_factory
from ..core.exceptions import ValidationError
from ..engine.types import ExecutionEvent, Graph
from ..repositories import ExecutionRepository
from ..schemas.workflow import AdhocRunRequest
from ..services.execution_service import record_to_detail
from ..services.workflow_service import build_runner, schemas_to_graph

logger = logging.getLogger(__name__)

router = APIRouter()


def _event_to_dict(event: ExecutionEvent) -> dict[str, Any]:
    """Convert ExecutionEvent to dict for SSE."""
    result: dict[str, Any] = {
        "type": event.type.value,
        "runId": event.run_id,
        "timestamp": event.timestamp.isoformat(),
    }

    if event.node_id:
        result["nodeId"] = event.node_id
    if event.node_type:
        result["nodeType"] = event.node_type
    if event.output is not None:
        result["output"] = event.output
    if event.error:
        result["error"] = event.error
    if event.progress:
        result["progress"] = event.progress

    return result


async def _run_with_events(
    graph: Graph,
    input_data: Any,
    session_factory: Any,
    node_registry: Any,
    node_services: Any,
) -> AsyncGenerator[dict[str, str], None]:
    """Run the graph and yield SSE messages as status events arrive."""
    event_queue: asyncio.Queue[dict[str, str] | None] = asyncio.Queue()

    def on_event(event: ExecutionEvent) -> None:
        event_queue.put_nowait({
            "event": event.type.value,
            "data": json.dumps(_event_to_dict(event), default=str),
        })

    async def run_workflow() -> None:
        try:
            async with session_factory() as session:
                repo = ExecutionRepository(session, max_records=settings.max_execution_records)
                runner = build_runner(repo, node_registry, node_services)
                record = await runner.run(graph, input_data, on_event)
            event_queue.put_nowait({
                "event": "execution:record",
                "data": record_to_detail(record).model_dump_json(),
            })
        except Exception as e:
            logger.exception("Streamed run failed")
            event_queue.put_nowait({
                "event": "execution:error",
                "data": json.dumps({"type": "execution:error", "error": str(e)}),
            })
        finally:
            event_queue.put_nowait(None)

    task = asyncio.create_task(run_workflow())

    try:
        while True:
            message = await event_queue.get()
            if message is None:
                break
            yield message
    finally:
        if not task.done():
            task.cancel()


@router.post("/execution-stream")
async def stream_adhoc_execution(
    request: AdhocRunRequest,
    session_factory: Annotated[Any, Depends(get_session_factory)],
    node_registry: Annotated[Any, Depends(get_node_registry)],
    node_services: Annotated[Any, Depends(get_node_services)],
) -> EventSourceResponse:
    """Run an unsaved graph, streaming per-node status as server-sent events."""
    try:
        graph = schemas_to_graph(request.nodes, request.edges, name=request.name)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)

    if not graph.entry_nodes():
        raise HTTPException(
            status_code=400,
            detail="No trigger node found. Add a node without incoming connections to start the workflow.",
        )

    return EventSourceResponse(
        _run_with_events(graph, request.input_data, session_factory, node_registry, node_services)
    )
