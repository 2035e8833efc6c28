"""Data Transform node - runs user code against the node input."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..engine.node_registry import ConfigField, NodeTypeDefinition
from ..engine.types import NodeCategory
from .base import BaseNode

if TYPE_CHECKING:
    from ..engine.dispatcher import NodeServices
    from ..engine.types import ExecutionContext, NodeExecutionResult


DEFAULT_CODE = "return input"


class DataTransformNode(BaseNode):
    """
    Execute a Python function body with two bindings:

        input          - the output of the upstream node
        previousNodes  - outputs of every node executed so far, by node id

    Mappings allow attribute access, so both ``input["data"]["value"]`` and
    ``input.data.value`` work. The returned value becomes the node output.
    """

    category = NodeCategory.ACTION
    node_descriptions = [
        NodeTypeDefinition(
            type="dataTransform",
            category=NodeCategory.ACTION,
            display_name="Data Transform",
            description="Transform data with Python code",
            icon="fa:code",
            config_fields=[
                ConfigField(
                    name="code",
                    label="Code",
                    type="textarea",
                    default=DEFAULT_CODE,
                    placeholder='return {"doubled": input.data.value * 2}',
                ),
            ],
            default_config={"code": DEFAULT_CODE},
        ),
    ]

    @property
    def type(self) -> str:
        return "dataTransform"

    async def execute(
        self,
        context: ExecutionContext,
        services: NodeServices,
    ) -> NodeExecutionResult:
        code = str(self.get_parameter(context, "code", DEFAULT_CODE) or "")

        result = await services.evaluator.run(
            code,
            {"input": context.input, "previousNodes": context.previous_outputs},
        )
        return self.output(result)
