"""Node type routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from ..core.dependencies import get_node_service
from ..core.exceptions import NodeTypeNotFoundError
from ..engine.types import NodeCategory
from ..schemas.node import NodeTypeInfo
from ..services.node_service import NodeService

router = APIRouter(prefix="/nodes")


NodeServiceDep = Annotated[NodeService, Depends(get_node_service)]


@router.get("", response_model=list[NodeTypeInfo])
async def list_nodes(
    service: NodeServiceDep,
    category: NodeCategory | None = Query(None, description="Filter by category"),
) -> list[NodeTypeInfo]:
    """List all available node types."""
    return service.list_nodes(category)


@router.get("/{node_type}", response_model=NodeTypeInfo)
async def get_node(node_type: str, service: NodeServiceDep) -> NodeTypeInfo:
    """Get one node type."""
    try:
        return service.get_node(node_type)
    except NodeTypeNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
