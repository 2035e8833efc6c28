"""
Node dispatcher - routes one node invocation to its handler.

Handler lookup goes registry type -> category -> handler group. Trigger and
AI handlers serve their whole category; action and logic handlers are keyed
by sub-type. Every failure (unknown type, handler exception, timeout) comes
back as a failed NodeExecutionResult; nothing propagates to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, TYPE_CHECKING, Union

from .ai_executor import AIExecutor
from .http_proxy import HttpProxy
from .sandbox import SandboxedEvaluator
from .types import ExecutionContext, NodeCategory, NodeExecutionResult

if TYPE_CHECKING:
    from ..core.config import Settings
    from ..nodes.base import BaseNode
    from .node_registry import NodeRegistryClass

logger = logging.getLogger(__name__)

HandlerGroup = Union["BaseNode", dict[str, "BaseNode"]]


@dataclass
class NodeServices:
    """External collaborators available to node handlers."""

    ai: Any = field(default_factory=AIExecutor)
    http: Any = field(default_factory=HttpProxy)
    evaluator: Any = field(default_factory=SandboxedEvaluator)

    @classmethod
    def from_settings(cls, settings: Settings) -> NodeServices:
        return cls(
            ai=AIExecutor(settings),
            http=HttpProxy(timeout=settings.http_timeout_seconds),
            evaluator=SandboxedEvaluator(timeout=settings.code_timeout_seconds),
        )


def build_handler_groups(node_classes: list[type[BaseNode]] | None = None) -> dict[NodeCategory, HandlerGroup]:
    """Instantiate handlers and group them by category."""
    if node_classes is None:
        from ..nodes import BUILTIN_NODES

        node_classes = BUILTIN_NODES

    groups: dict[NodeCategory, HandlerGroup] = {}
    for node_class in node_classes:
        handler = node_class()
        if node_class.handles_whole_category:
            groups[node_class.category] = handler
            continue
        group = groups.setdefault(node_class.category, {})
        if isinstance(group, dict):
            for definition in node_class.node_descriptions:
                group[definition.type] = handler
    return groups


class NodeDispatcher:
    """Executes single nodes. Stateless apart from its collaborators."""

    def __init__(
        self,
        registry: NodeRegistryClass | None = None,
        services: NodeServices | None = None,
        handlers: Mapping[NodeCategory, HandlerGroup] | None = None,
    ) -> None:
        if registry is None:
            from .node_registry import register_all_nodes

            registry = register_all_nodes()
        self._registry = registry
        self._services = services if services is not None else NodeServices()
        self._handlers = dict(handlers) if handlers is not None else build_handler_groups()

    @property
    def registry(self) -> NodeRegistryClass:
        return self._registry

    @property
    def services(self) -> NodeServices:
        return self._services

    async def execute_node(
        self,
        context: ExecutionContext,
        timeout: float | None = None,
    ) -> NodeExecutionResult:
        """Execute one node; always returns a result."""
        definition = self._registry.get(context.node_type)
        if definition is None:
            return NodeExecutionResult.fail(f"Unknown node type: {context.node_type}")

        category = definition.category
        category_name = getattr(category, "value", category)
        group = self._handlers.get(category)
        if group is None:
            return NodeExecutionResult.fail(f"Unsupported node category: {category_name}")

        if isinstance(group, dict):
            handler = group.get(context.node_type)
            if handler is None:
                return NodeExecutionResult.fail(
                    f"Unknown {category_name} node type: {context.node_type}"
                )
        else:
            handler = group

        try:
            if timeout:
                result = await asyncio.wait_for(
                    handler.execute(context, self._services), timeout=timeout
                )
            else:
                result = await handler.execute(context, self._services)
        except asyncio.TimeoutError as e:
            if not timeout:
                return NodeExecutionResult.fail(str(e) or "Operation timed out")
            logger.warning("Node %s timed out after %ss", context.node_id, timeout)
            return NodeExecutionResult.fail(f"Node execution timed out after {timeout:g}s")
        except Exception as e:
            logger.warning("Node %s (%s) failed: %s", context.node_id, context.node_type, e)
            return NodeExecutionResult.fail(str(e) or type(e).__name__)

        return result
