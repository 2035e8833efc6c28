"""Switch node - route the flow to the edge of the matching case."""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

from ...engine.node_registry import ConfigField, NodeTypeDefinition
from ...engine.template_resolver import (
    UNRESOLVED,
    evaluate_path,
    lookup_reference,
    split_path,
    stringify_value,
)
from ...engine.types import NodeCategory
from ..base import BaseNode

if TYPE_CHECKING:
    from ...engine.dispatcher import NodeServices
    from ...engine.types import ExecutionContext, NodeExecutionResult


def parse_switch_cases(raw_cases: Any) -> list[str]:
    """Split newline-separated cases; trimmed, blanks dropped, first occurrence kept."""
    if not isinstance(raw_cases, str):
        return []

    cases: list[str] = []
    for line in raw_cases.split("\n"):
        value = line.strip()
        if value and value not in cases:
            cases.append(value)
    return cases


def resolve_property(path: str, input_value: Any, previous_outputs: dict[str, Any]) -> Any:
    """
    Resolve the switch property.

    ``input`` and ``input.x`` read the node input, ``nodeA.x`` reads an
    executed node's output, and any other path is read from the input.
    Returns None when the path leads nowhere.
    """
    if not path or path == "input":
        return input_value

    segments = split_path(path)
    root = segments[0] if segments else ""
    if root == "input" or root in previous_outputs:
        value = lookup_reference(path, input_value, previous_outputs)
    else:
        value = evaluate_path(input_value, path)

    return None if value is UNRESOLVED else value


class SwitchNode(BaseNode):
    """Compare a property with each case; emit branch ``case_<i>`` or ``default``."""

    category = NodeCategory.LOGIC
    node_descriptions = [
        NodeTypeDefinition(
            type="switch",
            category=NodeCategory.LOGIC,
            display_name="Switch",
            description="Route the flow based on a value",
            icon="fa:random",
            branching=True,
            config_fields=[
                ConfigField(
                    name="property",
                    label="Property",
                    type="text",
                    default="input",
                    placeholder="input.status",
                ),
                ConfigField(
                    name="cases",
                    label="Cases (one per line)",
                    type="textarea",
                    placeholder="pending\napproved\nrejected",
                ),
            ],
            default_config={"property": "input", "cases": ""},
        ),
    ]

    @property
    def type(self) -> str:
        return "switch"

    async def execute(
        self,
        context: ExecutionContext,
        services: NodeServices,
    ) -> NodeExecutionResult:
        raw_property = context.config.get("property")
        property_path = raw_property.strip() if isinstance(raw_property, str) else ""
        property_path = property_path or "input"

        cases = parse_switch_cases(context.config.get("cases"))
        value = resolve_property(property_path, context.input, context.previous_outputs)

        matched_index = -1
        if value is not None:
            string_value = stringify_value(value)
            if string_value in cases:
                matched_index = cases.index(string_value)

        return self.output({
            "branch": f"case_{matched_index}" if matched_index >= 0 else "default",
            "matchedCase": cases[matched_index] if matched_index >= 0 else None,
            "value": value,
            "cases": cases,
            "input": context.input,
        })
