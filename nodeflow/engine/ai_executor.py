"""AI execution collaborator for the ai* node types.

Public API:
    AIExecutor.execute(node_type, config, input, previous_outputs) -> dict

Routing:
  - NODEFLOW_GEMINI_OPENAI_API_KEY  -> openai SDK against the Gemini
                                       OpenAI-compatible endpoint
  - NODEFLOW_GOOGLE_GENAI_API_KEY   -> google.genai SDK
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, TYPE_CHECKING

from ..core.exceptions import AIExecutionError

if TYPE_CHECKING:
    from ..core.config import Settings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data Classes
# ---------------------------------------------------------------------------


@dataclass
class LLMResponse:
    """Standardized response from a model call."""

    text: str = ""
    usage: dict[str, int] = field(
        default_factory=lambda: {"promptTokens": 0, "completionTokens": 0, "totalTokens": 0}
    )


ModelCaller = Callable[[str, str, float, "int | None"], Awaitable[LLMResponse]]


# ---------------------------------------------------------------------------
# Prompt templates
# ---------------------------------------------------------------------------

ANALYSIS_PROMPTS: dict[str, str] = {
    "sentiment": (
        "Analyze the sentiment of the following text. Respond with: Positive, "
        "Negative, or Neutral, followed by a confidence score (0-1) and brief explanation."
    ),
    "keywords": (
        "Extract the most important keywords and phrases from the following text. "
        "Return them as a JSON array."
    ),
    "summary": "Provide a concise summary of the following text in 2-3 sentences.",
}
DEFAULT_ANALYSIS_PROMPT = "Analyze the following data and provide insights."

PERSONALITY_PROMPTS: dict[str, str] = {
    "professional": "Respond in a professional and formal manner.",
    "friendly": "Respond in a warm, friendly, and conversational manner.",
    "concise": "Respond with brief, to-the-point answers.",
}

_JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")


def _input_as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def _to_float(value: Any, default: float) -> float:
    try:
        return float(value) if value not in (None, "") else default
    except (TypeError, ValueError):
        return default


def _to_int(value: Any, default: int | None) -> int | None:
    try:
        return int(float(value)) if value not in (None, "") else default
    except (TypeError, ValueError):
        return default


class AIExecutor:
    """Builds prompts for each AI node type and calls the configured model."""

    def __init__(
        self,
        settings: Settings | None = None,
        call_model: ModelCaller | None = None,
    ) -> None:
        if settings is None:
            from ..core.config import settings as default_settings

            settings = default_settings
        self._settings = settings
        self._call_model_override = call_model
        self._clients: dict[str, Any] = {}

    async def execute(
        self,
        node_type: str,
        config: dict[str, Any],
        input_value: Any,
        previous_outputs: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Run one AI node. ``config`` is expected to be template-resolved already."""
        handlers = {
            "aiTextGenerator": self._text_generator,
            "aiAnalyzer": self._analyzer,
            "aiChatbot": self._chatbot,
            "aiDataExtractor": self._data_extractor,
        }
        handler = handlers.get(node_type)
        if handler is None:
            raise AIExecutionError(f"Unknown AI node type: {node_type}", status_code=400)

        model = self._model_name(config)
        try:
            return await handler(config, input_value, model)
        except AIExecutionError:
            raise
        except Exception as e:
            logger.exception("AI execution error for %s", node_type)
            raise self._classify_error(e) from e

    # -----------------------------------------------------------------------
    # Node types
    # -----------------------------------------------------------------------

    async def _text_generator(self, config: dict[str, Any], input_value: Any, model: str) -> dict[str, Any]:
        prompt = str(config.get("prompt") or "")

        if input_value and "{{input}}" not in prompt:
            input_text = _input_as_text(input_value)
            prompt = f"{prompt}\n\nInput:\n{input_text}" if prompt else input_text

        logger.info("Executing text generator with model %s", model)
        response = await self._call_model(
            prompt,
            model,
            _to_float(config.get("temperature"), 0.7),
            _to_int(config.get("maxTokens"), 500),
        )
        return {
            "generatedText": response.text,
            "model": model,
            "usage": response.usage,
        }

    async def _analyzer(self, config: dict[str, Any], input_value: Any, model: str) -> dict[str, Any]:
        text = str(config.get("text") or "")
        analysis_type = config.get("analysisType")

        if input_value and not text:
            text = _input_as_text(input_value)

        system_prompt = ANALYSIS_PROMPTS.get(str(analysis_type), DEFAULT_ANALYSIS_PROMPT)
        full_prompt = f"{system_prompt}\n\nText to analyze:\n{text}"

        response = await self._call_model(full_prompt, model, 0.3, None)
        return {
            "analysisType": analysis_type,
            "result": response.text,
            "usage": response.usage,
        }

    async def _chatbot(self, config: dict[str, Any], input_value: Any, model: str) -> dict[str, Any]:
        system_prompt = str(config.get("systemPrompt") or "") or "You are a helpful assistant."
        user_message = str(config.get("userMessage") or "")
        personality = config.get("personality")

        if input_value and not user_message:
            user_message = _input_as_text(input_value)

        personality_prompt = PERSONALITY_PROMPTS.get(str(personality), "")
        if personality_prompt:
            full_prompt = f"{system_prompt}\n\n{personality_prompt}\n\nUser message: {user_message}"
        else:
            full_prompt = f"{system_prompt}\n\nUser message: {user_message}"

        response = await self._call_model(full_prompt, model, 0.7, None)
        return {
            "response": response.text,
            "personality": personality,
            "usage": response.usage,
        }

    async def _data_extractor(self, config: dict[str, Any], input_value: Any, model: str) -> dict[str, Any]:
        text = str(config.get("text") or "")
        schema = str(config.get("schema") or "")

        if input_value and not text:
            text = _input_as_text(input_value)

        if schema:
            system_prompt = (
                f"Extract information from the text according to this schema: {schema}. "
                "Return ONLY a valid JSON object matching the schema, with no additional text or explanation."
            )
        else:
            system_prompt = (
                "Extract structured information from the following text. "
                "Return ONLY a valid JSON object, with no additional text or explanation."
            )
        full_prompt = f"{system_prompt}\n\nText to extract from:\n{text}"

        response = await self._call_model(full_prompt, model, 0.1, None)

        match = _JSON_OBJECT_PATTERN.search(response.text)
        if match:
            try:
                return {
                    "extractedData": json.loads(match.group(0)),
                    "schema": schema,
                    "usage": response.usage,
                }
            except json.JSONDecodeError:
                pass

        return {
            "extractedData": response.text,
            "schema": schema,
            "usage": response.usage,
            "note": "Could not parse as JSON, returning raw text",
        }

    # -----------------------------------------------------------------------
    # Model backends
    # -----------------------------------------------------------------------

    def _uses_openai_compat(self) -> bool:
        return bool(self._settings.gemini_openai_api_key)

    def _model_name(self, config: dict[str, Any]) -> str:
        model = config.get("model") or self._settings.default_model
        if model:
            return str(model)
        return "gemini-2.0-flash" if self._uses_openai_compat() else "gemini-1.5-flash"

    async def _call_model(
        self,
        prompt: str,
        model: str,
        temperature: float,
        max_tokens: int | None,
    ) -> LLMResponse:
        if self._call_model_override is not None:
            return await self._call_model_override(prompt, model, temperature, max_tokens)

        if self._uses_openai_compat():
            return await self._call_openai_compat(prompt, model, temperature, max_tokens)
        if self._settings.google_genai_api_key:
            return await self._call_genai(prompt, model, temperature, max_tokens)

        raise AIExecutionError(
            "Gemini API key not configured. Set NODEFLOW_GEMINI_OPENAI_API_KEY "
            "or NODEFLOW_GOOGLE_GENAI_API_KEY",
            status_code=500,
        )

    def _get_openai_client(self) -> Any:
        if "openai" not in self._clients:
            from openai import AsyncOpenAI

            self._clients["openai"] = AsyncOpenAI(
                api_key=self._settings.gemini_openai_api_key,
                base_url=self._settings.gemini_openai_base_url,
            )
        return self._clients["openai"]

    def _get_genai_client(self) -> Any:
        if "genai" not in self._clients:
            from google import genai

            self._clients["genai"] = genai.Client(api_key=self._settings.google_genai_api_key)
        return self._clients["genai"]

    async def _call_openai_compat(
        self,
        prompt: str,
        model: str,
        temperature: float,
        max_tokens: int | None,
    ) -> LLMResponse:
        client = self._get_openai_client()

        completion_kwargs: dict[str, Any] = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
        }
        if max_tokens:
            completion_kwargs["max_tokens"] = max_tokens

        completion = await client.chat.completions.create(**completion_kwargs)

        resp = LLMResponse()
        choice = completion.choices[0] if completion.choices else None
        if choice and choice.message:
            resp.text = choice.message.content or ""
        if completion.usage:
            resp.usage = {
                "promptTokens": completion.usage.prompt_tokens or 0,
                "completionTokens": completion.usage.completion_tokens or 0,
                "totalTokens": completion.usage.total_tokens or 0,
            }
        return resp

    async def _call_genai(
        self,
        prompt: str,
        model: str,
        temperature: float,
        max_tokens: int | None,
    ) -> LLMResponse:
        from google.genai.types import GenerateContentConfig

        client = self._get_genai_client()

        config_kwargs: dict[str, Any] = {"temperature": temperature}
        if max_tokens:
            config_kwargs["max_output_tokens"] = max_tokens
        config = GenerateContentConfig(**config_kwargs)

        def do_sync_call() -> Any:
            return client.models.generate_content(model=model, contents=prompt, config=config)

        response = await asyncio.to_thread(do_sync_call)

        resp = LLMResponse(text=getattr(response, "text", None) or "")
        usage = getattr(response, "usage_metadata", None)
        if usage is not None:
            resp.usage = {
                "promptTokens": getattr(usage, "prompt_token_count", None) or 0,
                "completionTokens": getattr(usage, "candidates_token_count", None) or 0,
                "totalTokens": getattr(usage, "total_token_count", None) or 0,
            }
        return resp

    def _classify_error(self, error: Exception) -> AIExecutionError:
        """Map provider failures to user-facing messages."""
        message = str(error) or type(error).__name__
        code = getattr(error, "status_code", None) or getattr(error, "code", None)
        lowered = message.lower()

        if "api key" in lowered or "authentication" in lowered or code == 401:
            return AIExecutionError("Invalid or missing Gemini API key", status_code=401)
        if "quota" in lowered or "rate limit" in lowered or code == 429:
            return AIExecutionError("API quota exceeded or rate limit reached", status_code=429)
        if "model" in lowered and "not found" in lowered:
            return AIExecutionError("Model not found or unavailable", status_code=400)
        return AIExecutionError(message, status_code=500)
