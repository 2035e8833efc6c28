"""Trigger nodes - workflow entry points (webhook, schedule, manual)."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from ..engine.node_registry import ConfigField, ConfigFieldOption, NodeTypeDefinition
from ..engine.types import NodeCategory
from .base import BaseNode

if TYPE_CHECKING:
    from ..engine.dispatcher import NodeServices
    from ..engine.types import ExecutionContext, NodeExecutionResult


class TriggerNode(BaseNode):
    """Single handler for every trigger sub-type.

    Passes the run's input through when one was supplied, otherwise emits a
    trigger record with the node's config.
    """

    category = NodeCategory.TRIGGER
    handles_whole_category = True
    node_descriptions = [
        NodeTypeDefinition(
            type="webhook",
            category=NodeCategory.TRIGGER,
            display_name="Webhook",
            description="Start the workflow from an incoming HTTP request",
            icon="fa:bolt",
            config_fields=[
                ConfigField(name="path", label="Webhook Path", type="text", placeholder="/my-webhook"),
                ConfigField(
                    name="method",
                    label="HTTP Method",
                    type="select",
                    default="POST",
                    options=[
                        ConfigFieldOption(label="GET", value="GET"),
                        ConfigFieldOption(label="POST", value="POST"),
                    ],
                ),
            ],
            default_config={"method": "POST"},
        ),
        NodeTypeDefinition(
            type="schedule",
            category=NodeCategory.TRIGGER,
            display_name="Schedule",
            description="Start the workflow on a schedule",
            icon="fa:clock",
            config_fields=[
                ConfigField(
                    name="cron",
                    label="Cron Expression",
                    type="text",
                    default="0 * * * *",
                    placeholder="0 * * * *",
                ),
            ],
            default_config={"cron": "0 * * * *"},
        ),
        NodeTypeDefinition(
            type="manualTrigger",
            category=NodeCategory.TRIGGER,
            display_name="Manual Trigger",
            description="Start the workflow by hand",
            icon="fa:play",
        ),
    ]

    @property
    def type(self) -> str:
        return "trigger"

    async def execute(
        self,
        context: ExecutionContext,
        services: NodeServices,
    ) -> NodeExecutionResult:
        if context.input is not None:
            return self.output(context.input)

        return self.output({
            "triggeredAt": datetime.now().isoformat(),
            "config": dict(context.config),
        })
