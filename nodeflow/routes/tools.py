"""Direct access to the HTTP proxy and AI execution collaborators."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException

from ..core.dependencies import get_node_services
from ..core.exceptions import AIExecutionError, HttpProxyError
from ..engine.template_resolver import resolve_config
from ..schemas.collaborators import AIExecuteRequest, HttpProxyRequest, HttpProxyResponse

router = APIRouter()


NodeServicesDep = Annotated[Any, Depends(get_node_services)]


@router.post("/http-proxy", response_model=HttpProxyResponse)
async def http_proxy(request: HttpProxyRequest, services: NodeServicesDep) -> dict[str, Any]:
    """Perform an outbound HTTP request on behalf of the caller."""
    if not request.url.strip():
        raise HTTPException(status_code=400, detail="URL is required")

    try:
        return await services.http.request(
            request.url,
            request.method,
            request.headers,
            request.body if request.method.upper() != "GET" else None,
        )
    except HttpProxyError as e:
        raise HTTPException(status_code=500, detail=e.message)


@router.post("/ai/execute")
async def ai_execute(request: AIExecuteRequest, services: NodeServicesDep) -> dict[str, Any]:
    """Execute one AI node type outside of a workflow run."""
    config = resolve_config(request.config, request.input, request.previous_nodes)
    try:
        return await services.ai.execute(request.type, config, request.input, request.previous_nodes)
    except AIExecutionError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
