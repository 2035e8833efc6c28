"""Node service for business logic."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..core.exceptions import NodeTypeNotFoundError
from ..engine.types import NodeCategory
from ..schemas.node import NodeTypeInfo

if TYPE_CHECKING:
    from ..engine.node_registry import NodeRegistryClass


class NodeService:
    """Service for node type lookups."""

    def __init__(self, node_registry: NodeRegistryClass) -> None:
        self._node_registry = node_registry

    def list_nodes(self, category: NodeCategory | None = None) -> list[NodeTypeInfo]:
        """List registered node types, optionally for one category."""
        if category is not None:
            definitions = self._node_registry.list_by_category(category)
        else:
            definitions = self._node_registry.list()
        return [NodeTypeInfo.model_validate(d.to_dict()) for d in definitions]

    def get_node(self, node_type: str) -> NodeTypeInfo:
        """Get one node type."""
        definition = self._node_registry.get(node_type)
        if not definition:
            raise NodeTypeNotFoundError(node_type)
        return NodeTypeInfo.model_validate(definition.to_dict())
