"""AI nodes - text generation, analysis, chat and data extraction."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..engine.node_registry import ConfigField, ConfigFieldOption, NodeTypeDefinition
from ..engine.types import NodeCategory
from .base import BaseNode

if TYPE_CHECKING:
    from ..engine.dispatcher import NodeServices
    from ..engine.types import ExecutionContext, NodeExecutionResult


_MODEL_FIELD = ConfigField(
    name="model",
    label="Model",
    type="text",
    placeholder="gemini-2.0-flash",
)


class AINode(BaseNode):
    """Single handler for every AI sub-type.

    Resolves the config templates and hands the node to the AI execution
    collaborator, whose response becomes the node output unchanged.
    """

    category = NodeCategory.AI
    handles_whole_category = True
    node_descriptions = [
        NodeTypeDefinition(
            type="aiTextGenerator",
            category=NodeCategory.AI,
            display_name="AI Text Generator",
            description="Generate text from a prompt",
            icon="fa:robot",
            config_fields=[
                ConfigField(
                    name="prompt",
                    label="Prompt",
                    type="textarea",
                    required=True,
                    placeholder="Write a short summary of {{input}}",
                ),
                ConfigField(name="temperature", label="Temperature", type="number", default="0.7"),
                ConfigField(name="maxTokens", label="Max Tokens", type="number", default="500"),
                _MODEL_FIELD,
            ],
            default_config={"prompt": "", "temperature": "0.7", "maxTokens": "500"},
        ),
        NodeTypeDefinition(
            type="aiAnalyzer",
            category=NodeCategory.AI,
            display_name="AI Analyzer",
            description="Analyze sentiment, keywords or summarize text",
            icon="fa:chart-line",
            config_fields=[
                ConfigField(
                    name="analysisType",
                    label="Analysis Type",
                    type="select",
                    default="sentiment",
                    options=[
                        ConfigFieldOption(label="Sentiment", value="sentiment"),
                        ConfigFieldOption(label="Keywords", value="keywords"),
                        ConfigFieldOption(label="Summary", value="summary"),
                    ],
                ),
                ConfigField(name="text", label="Text", type="textarea", placeholder="{{input}}"),
                _MODEL_FIELD,
            ],
            default_config={"analysisType": "sentiment", "text": ""},
        ),
        NodeTypeDefinition(
            type="aiChatbot",
            category=NodeCategory.AI,
            display_name="AI Chatbot",
            description="Reply to a message with a configurable personality",
            icon="fa:comments",
            config_fields=[
                ConfigField(
                    name="systemPrompt",
                    label="System Prompt",
                    type="textarea",
                    default="You are a helpful assistant.",
                ),
                ConfigField(name="userMessage", label="User Message", type="textarea"),
                ConfigField(
                    name="personality",
                    label="Personality",
                    type="select",
                    default="friendly",
                    options=[
                        ConfigFieldOption(label="Professional", value="professional"),
                        ConfigFieldOption(label="Friendly", value="friendly"),
                        ConfigFieldOption(label="Concise", value="concise"),
                    ],
                ),
                _MODEL_FIELD,
            ],
            default_config={
                "systemPrompt": "You are a helpful assistant.",
                "userMessage": "",
                "personality": "friendly",
            },
        ),
        NodeTypeDefinition(
            type="aiDataExtractor",
            category=NodeCategory.AI,
            display_name="AI Data Extractor",
            description="Extract structured JSON from free text",
            icon="fa:table",
            config_fields=[
                ConfigField(name="text", label="Text", type="textarea", placeholder="{{input}}"),
                ConfigField(
                    name="schema",
                    label="Schema",
                    type="textarea",
                    placeholder='{"name": "string", "email": "string"}',
                ),
                _MODEL_FIELD,
            ],
            default_config={"text": "", "schema": ""},
        ),
    ]

    @property
    def type(self) -> str:
        return "ai"

    async def execute(
        self,
        context: ExecutionContext,
        services: NodeServices,
    ) -> NodeExecutionResult:
        config = self.resolved_config(context)
        result = await services.ai.execute(
            context.node_type,
            config,
            context.input,
            context.previous_outputs,
        )
        return self.output(result)
