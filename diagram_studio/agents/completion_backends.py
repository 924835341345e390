"""Text-completion backends for the diagram assistant.

Both backends take the same :class:`CompletionRequest`. Deep-reasoning mode
switches to the higher-effort model and never sends a temperature, since the
reasoning tiers reject sampling controls.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Protocol

from google.genai import types

from diagram_studio.utils.config import settings
from diagram_studio.utils.errors import ConfigurationError
from diagram_studio.utils.gemini_client import get_gemini_client
from diagram_studio.utils.openai_client import get_openai_client


@dataclass
class CompletionRequest:
    system_instruction: str
    prompt: str
    deep_reasoning: bool = False
    temperature: float | None = None
    json_output: bool = False


class CompletionBackend(Protocol):
    async def complete(self, request: CompletionRequest) -> str:
        ...


class OpenAIBackend:
    def __init__(self, client: Any = None) -> None:
        self._client = client or get_openai_client()

    def build_kwargs(self, request: CompletionRequest) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "messages": [
                {"role": "system", "content": request.system_instruction},
                {"role": "user", "content": request.prompt},
            ],
        }
        if request.deep_reasoning:
            kwargs["model"] = settings.openai_reasoning_model
            kwargs["reasoning_effort"] = settings.openai_reasoning_effort
        else:
            kwargs["model"] = settings.openai_model
            if request.temperature is not None:
                kwargs["temperature"] = request.temperature
        if request.json_output:
            kwargs["response_format"] = {"type": "json_object"}
        return kwargs

    async def complete(self, request: CompletionRequest) -> str:
        response = await self._client.chat.completions.create(**self.build_kwargs(request))
        return response.choices[0].message.content or ""


class GeminiBackend:
    def __init__(self, client: Any = None) -> None:
        self._client = client or get_gemini_client()

    def build_config(self, request: CompletionRequest) -> types.GenerateContentConfig:
        config: Dict[str, Any] = {"system_instruction": request.system_instruction}
        if request.deep_reasoning:
            config["thinking_config"] = types.ThinkingConfig(thinking_budget=settings.thinking_budget)
        elif request.temperature is not None:
            config["temperature"] = request.temperature
        if request.json_output:
            config["response_mime_type"] = "application/json"
        return types.GenerateContentConfig(**config)

    async def complete(self, request: CompletionRequest) -> str:
        model = settings.gemini_reasoning_model if request.deep_reasoning else settings.gemini_model
        response = await self._client.aio.models.generate_content(
            model=model,
            contents=request.prompt,
            config=self.build_config(request),
        )
        return response.text or ""


def build_backend(provider: str | None = None) -> CompletionBackend:
    """Create the configured backend; raises ConfigurationError up front."""
    provider = (provider or settings.assistant_provider).lower()
    if provider == "openai":
        return OpenAIBackend()
    if provider == "gemini":
        return GeminiBackend()
    raise ConfigurationError(f"Unknown assistant provider: {provider}")
