"""HTTP Request node - makes HTTP requests through the HTTP proxy."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..engine.node_registry import ConfigField, ConfigFieldOption, NodeTypeDefinition
from ..engine.types import NodeCategory
from .base import BaseNode

if TYPE_CHECKING:
    from ..engine.dispatcher import NodeServices
    from ..engine.types import ExecutionContext, NodeExecutionResult


class HttpRequestNode(BaseNode):
    """Make an HTTP request; the proxy response is the node output."""

    category = NodeCategory.ACTION
    node_descriptions = [
        NodeTypeDefinition(
            type="httpRequest",
            category=NodeCategory.ACTION,
            display_name="HTTP Request",
            description="Make HTTP requests to external APIs",
            icon="fa:globe",
            config_fields=[
                ConfigField(
                    name="url",
                    label="URL",
                    type="text",
                    required=True,
                    placeholder="https://api.example.com/data",
                ),
                ConfigField(
                    name="method",
                    label="Method",
                    type="select",
                    default="GET",
                    options=[
                        ConfigFieldOption(label=m, value=m)
                        for m in ("GET", "POST", "PUT", "PATCH", "DELETE")
                    ],
                ),
                ConfigField(name="headers", label="Headers (JSON)", type="textarea", default="{}"),
                ConfigField(name="body", label="Body (JSON)", type="textarea", default="{}"),
            ],
            default_config={"url": "", "method": "GET", "headers": "{}", "body": "{}"},
        ),
    ]

    @property
    def type(self) -> str:
        return "httpRequest"

    async def execute(
        self,
        context: ExecutionContext,
        services: NodeServices,
    ) -> NodeExecutionResult:
        url = self.resolve_parameter(context, "url", "").strip()
        if not url:
            return self.failure("URL is required")

        method = str(self.get_parameter(context, "method", "GET") or "GET").upper()
        headers = self.resolve_parameter(context, "headers", "{}")
        body = None if method == "GET" else self.resolve_parameter(context, "body", "{}")

        response = await services.http.request(url, method, headers, body)
        return self.output(response)
