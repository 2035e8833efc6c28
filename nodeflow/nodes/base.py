"""Base node class for all workflow node handlers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, TYPE_CHECKING

from ..engine.template_resolver import resolve, resolve_config
from ..engine.types import NodeCategory, NodeExecutionResult

if TYPE_CHECKING:
    from ..engine.dispatcher import NodeServices
    from ..engine.node_registry import NodeTypeDefinition
    from ..engine.types import ExecutionContext


class BaseNode(ABC):
    """
    Abstract base class for all node handlers.

    A handler describes the node types it serves in `node_descriptions`.
    Handlers with `handles_whole_category` set serve every sub-type of their
    category; the others are looked up by node type.
    """

    node_descriptions: ClassVar[list[NodeTypeDefinition]] = []
    category: ClassVar[NodeCategory]
    handles_whole_category: ClassVar[bool] = False

    @property
    @abstractmethod
    def type(self) -> str:
        """Handler identifier."""
        ...

    @abstractmethod
    async def execute(
        self,
        context: ExecutionContext,
        services: NodeServices,
    ) -> NodeExecutionResult:
        """Execute the node logic."""
        ...

    def get_parameter(self, context: ExecutionContext, key: str, default: Any = None) -> Any:
        """Get a raw config value, falling back to the type's default config."""
        value = context.config.get(key)
        if value is None:
            for definition in self.node_descriptions:
                if definition.type == context.node_type:
                    return definition.default_config.get(key, default)
            return default
        return value

    def resolve_parameter(self, context: ExecutionContext, key: str, default: str = "") -> str:
        """Get a config value with its {{ }} references resolved."""
        value = self.get_parameter(context, key, default)
        return resolve(value, context.input, context.previous_outputs)

    def resolved_config(self, context: ExecutionContext) -> dict[str, Any]:
        """Resolve every string field of the node's config."""
        return resolve_config(context.config, context.input, context.previous_outputs)

    def output(self, data: Any) -> NodeExecutionResult:
        """Helper to create a successful result."""
        return NodeExecutionResult.ok(data)

    def failure(self, error: str) -> NodeExecutionResult:
        """Helper to create a failed result."""
        return NodeExecutionResult.fail(error)
