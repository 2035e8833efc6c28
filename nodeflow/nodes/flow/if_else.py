"""If/Else node - route the flow based on a condition (true/false edges)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...engine.node_registry import ConfigField, ConfigFieldOption, NodeTypeDefinition
from ...engine.types import NodeCategory
from ..base import BaseNode

if TYPE_CHECKING:
    from ...engine.dispatcher import NodeServices
    from ...engine.types import ExecutionContext, NodeExecutionResult

logger = logging.getLogger(__name__)

# "javascript" is kept so that workflows saved by older editors still evaluate
EXPRESSION_OPERATORS = ("expression", "javascript")


class IfElseNode(BaseNode):
    """Evaluate a condition and emit branch "true" or "false"."""

    category = NodeCategory.LOGIC
    node_descriptions = [
        NodeTypeDefinition(
            type="ifElse",
            category=NodeCategory.LOGIC,
            display_name="If / Else",
            description="Route the flow based on a condition",
            icon="fa:code-branch",
            branching=True,
            config_fields=[
                ConfigField(
                    name="condition",
                    label="Condition",
                    type="textarea",
                    placeholder="input.status == 200",
                ),
                ConfigField(
                    name="operator",
                    label="Operator",
                    type="select",
                    default="expression",
                    options=[ConfigFieldOption(label="Expression", value="expression")],
                ),
            ],
            default_config={"condition": "", "operator": "expression"},
        ),
    ]

    @property
    def type(self) -> str:
        return "ifElse"

    async def execute(
        self,
        context: ExecutionContext,
        services: NodeServices,
    ) -> NodeExecutionResult:
        condition = str(self.get_parameter(context, "condition", "") or "")
        operator = self.get_parameter(context, "operator", "expression")

        result = False
        if operator in EXPRESSION_OPERATORS and condition.strip():
            value = services.evaluator.evaluate(
                condition,
                {"input": context.input, "previousNodes": context.previous_outputs},
            )
            result = bool(value)
        elif operator not in EXPRESSION_OPERATORS:
            logger.debug("Unsupported if/else operator %r on node %s", operator, context.node_id)

        return self.output({
            "condition": result,
            "branch": "true" if result else "false",
            "input": context.input,
        })
