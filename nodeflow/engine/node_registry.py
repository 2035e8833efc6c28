"""Node type registry - static definitions of every workflow node type."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TYPE_CHECKING

from .types import NodeCategory

if TYPE_CHECKING:
    from ..nodes.base import BaseNode


@dataclass
class ConfigFieldOption:
    """Option for a select config field."""

    label: str
    value: str


@dataclass
class ConfigField:
    """Configuration field shown in the node inspector."""

    name: str
    label: str
    type: str  # text, textarea, number, select
    required: bool = False
    default: Any = None
    placeholder: str | None = None
    options: list[ConfigFieldOption] | None = None


@dataclass
class NodeTypeDefinition:
    """Static definition of a node type."""

    type: str
    category: NodeCategory
    display_name: str
    description: str
    config_fields: list[ConfigField] = field(default_factory=list)
    default_config: dict[str, Any] = field(default_factory=dict)
    branching: bool = False
    icon: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API responses."""
        return {
            "type": self.type,
            "category": self.category.value,
            "displayName": self.display_name,
            "description": self.description,
            "icon": self.icon,
            "branching": self.branching,
            "defaultConfig": dict(self.default_config),
            "configFields": [self._field_to_dict(f) for f in self.config_fields],
        }

    @staticmethod
    def _field_to_dict(config_field: ConfigField) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": config_field.name,
            "label": config_field.label,
            "type": config_field.type,
        }
        if config_field.required:
            result["required"] = True
        if config_field.default is not None:
            result["defaultValue"] = config_field.default
        if config_field.placeholder:
            result["placeholder"] = config_field.placeholder
        if config_field.options:
            result["options"] = [
                {"label": o.label, "value": o.value} for o in config_field.options
            ]
        return result


class NodeRegistryClass:
    """Registry for workflow node types. Read-only to the engine."""

    def __init__(self) -> None:
        self._definitions: dict[str, NodeTypeDefinition] = {}

    def get(self, node_type: str | None) -> NodeTypeDefinition | None:
        """Get a node type definition, or None when it is not registered."""
        if node_type is None:
            return None
        return self._definitions.get(node_type)

    def has(self, node_type: str) -> bool:
        """Check if node type is registered."""
        return node_type in self._definitions

    def list(self) -> list[NodeTypeDefinition]:
        """List all registered node type definitions."""
        return list(self._definitions.values())

    def list_by_category(self, category: NodeCategory) -> list[NodeTypeDefinition]:
        """List definitions belonging to one category."""
        return [d for d in self._definitions.values() if d.category == category]

    def register(self, definition: NodeTypeDefinition) -> None:
        """Register a definition if not already registered."""
        if definition.type not in self._definitions:
            self._definitions[definition.type] = definition

    def register_node(self, node_class: type[BaseNode]) -> None:
        """Register every node type a handler class describes."""
        for definition in node_class.node_descriptions:
            self.register(definition)


# Singleton instance
node_registry = NodeRegistryClass()


def register_all_nodes(registry: NodeRegistryClass | None = None) -> NodeRegistryClass:
    """Register all built-in node types."""
    from ..nodes import BUILTIN_NODES

    target = registry if registry is not None else node_registry
    for node_class in BUILTIN_NODES:
        target.register_node(node_class)
    return target
