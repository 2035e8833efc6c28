"""Delay node - pause the branch for a duration."""

from __future__ import annotations

import asyncio
import re
from typing import Any, TYPE_CHECKING

from ...engine.node_registry import ConfigField, ConfigFieldOption, NodeTypeDefinition
from ...engine.types import NodeCategory
from ..base import BaseNode

if TYPE_CHECKING:
    from ...engine.dispatcher import NodeServices
    from ...engine.types import ExecutionContext, NodeExecutionResult

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_duration(value: Any) -> int | None:
    """Parse the leading integer of ``value`` ("5", "5s", " 10 ms"), or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    match = _LEADING_INT.match(str(value)) if value is not None else None
    return int(match.group(1)) if match else None


class DelayNode(BaseNode):
    """Wait, then pass the input through."""

    category = NodeCategory.LOGIC
    node_descriptions = [
        NodeTypeDefinition(
            type="delay",
            category=NodeCategory.LOGIC,
            display_name="Delay",
            description="Pause execution for a specified duration",
            icon="fa:hourglass-half",
            config_fields=[
                ConfigField(name="duration", label="Duration", type="number", default="1"),
                ConfigField(
                    name="unit",
                    label="Unit",
                    type="select",
                    default="seconds",
                    options=[
                        ConfigFieldOption(label="Milliseconds", value="milliseconds"),
                        ConfigFieldOption(label="Seconds", value="seconds"),
                    ],
                ),
            ],
            default_config={"duration": "1", "unit": "seconds"},
        ),
    ]

    @property
    def type(self) -> str:
        return "delay"

    async def execute(
        self,
        context: ExecutionContext,
        services: NodeServices,
    ) -> NodeExecutionResult:
        duration = self.get_parameter(context, "duration", "1")
        unit = self.get_parameter(context, "unit", "seconds")

        amount = parse_duration(duration)
        if amount is None:
            return self.failure(f"Invalid delay duration: {duration}")

        ms = amount * 1000 if unit == "seconds" else amount
        await asyncio.sleep(max(ms, 0) / 1000)

        return self.output({
            "delayed": ms,
            "input": context.input,
        })
