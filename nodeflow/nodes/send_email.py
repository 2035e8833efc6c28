"""Send Email node - composes an email from the workflow data."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

import markdown

from ..engine.node_registry import ConfigField, ConfigFieldOption, NodeTypeDefinition
from ..engine.types import NodeCategory
from .base import BaseNode

if TYPE_CHECKING:
    from ..engine.dispatcher import NodeServices
    from ..engine.types import ExecutionContext, NodeExecutionResult


# Default email styling for HTML/Markdown emails
EMAIL_CSS = """
body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Helvetica, Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px; }
h1 { color: #2c3e50; border-bottom: 2px solid #3498db; padding-bottom: 10px; }
a { color: #3498db; }
code { background: #f4f4f4; padding: 2px 6px; border-radius: 3px; }
pre { background: #2d2d2d; color: #f8f8f2; padding: 16px; border-radius: 6px; overflow-x: auto; }
table { border-collapse: collapse; width: 100%; margin: 16px 0; }
th, td { border: 1px solid #ddd; padding: 12px; text-align: left; }
"""


def wrap_html_in_template(html_content: str) -> str:
    """Wrap an HTML fragment in the styled email document."""
    if "<html" in html_content.lower() or "<body" in html_content.lower():
        return html_content

    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<style>{EMAIL_CSS}</style>
</head>
<body>
{html_content}
</body>
</html>"""


def render_markdown_to_html(markdown_text: str) -> str:
    """Convert markdown to styled HTML for emails."""
    html_content = markdown.markdown(
        markdown_text,
        extensions=["tables", "fenced_code", "nl2br", "sane_lists"],
    )
    return wrap_html_in_template(html_content)


class SendEmailNode(BaseNode):
    """Compose an email. Nothing is delivered; the message is the node output."""

    category = NodeCategory.ACTION
    node_descriptions = [
        NodeTypeDefinition(
            type="sendEmail",
            category=NodeCategory.ACTION,
            display_name="Send Email",
            description="Send an email notification",
            icon="fa:envelope",
            config_fields=[
                ConfigField(name="to", label="To", type="text", required=True, placeholder="user@example.com"),
                ConfigField(name="subject", label="Subject", type="text", placeholder="Workflow finished"),
                ConfigField(name="body", label="Body", type="textarea", placeholder="Result: {{input}}"),
                ConfigField(
                    name="bodyFormat",
                    label="Body Format",
                    type="select",
                    default="plain",
                    options=[
                        ConfigFieldOption(label="Plain Text", value="plain"),
                        ConfigFieldOption(label="Markdown", value="markdown"),
                        ConfigFieldOption(label="HTML", value="html"),
                    ],
                ),
            ],
            default_config={"to": "", "subject": "", "body": "", "bodyFormat": "plain"},
        ),
    ]

    @property
    def type(self) -> str:
        return "sendEmail"

    async def execute(
        self,
        context: ExecutionContext,
        services: NodeServices,
    ) -> NodeExecutionResult:
        to = self.resolve_parameter(context, "to", "")
        subject = self.resolve_parameter(context, "subject", "")
        body = self.resolve_parameter(context, "body", "")
        body_format = self.get_parameter(context, "bodyFormat", "plain")

        result = {
            "sent": True,
            "to": to,
            "subject": subject,
            "body": body,
            "sentAt": datetime.now().isoformat(),
            "message": "Email sent successfully (simulated)",
        }

        if body_format == "markdown":
            result["html"] = render_markdown_to_html(body)
        elif body_format == "html":
            result["html"] = wrap_html_in_template(body)

        return self.output(result)
