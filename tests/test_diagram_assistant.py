import pytest

from diagram_studio.agents import completion_backends
from diagram_studio.agents.completion_backends import (
    CompletionRequest,
    GeminiBackend,
    OpenAIBackend,
    build_backend,
)
from diagram_studio.agents.diagram_assistant import (
    CHAT_EMPTY_FALLBACK,
    EXPLAIN_FALLBACK,
    DiagramAssistant,
    build_files_context,
    build_generation_prompt,
    render_conversation,
    strip_code_fences,
)
from diagram_studio.models.chat import ChatMessage
from diagram_studio.models.documents import Document
from diagram_studio.utils import openai_client
from diagram_studio.utils.config import settings
from diagram_studio.utils.errors import AssistantError, ConfigurationError

from fakes import ScriptedBackend


def test_strip_code_fences_variants():
    assert strip_code_fences("```mermaid\ngraph TD\nA-->B-->C\n```") == "graph TD\nA-->B-->C"
    assert strip_code_fences("```\ngraph LR\nX-->Y\n```\n") == "graph LR\nX-->Y"
    assert strip_code_fences("  graph TD\nA-->B  ") == "graph TD\nA-->B"


def test_generation_prompt_includes_current_text_only_when_present():
    assert build_generation_prompt("add C", "graph TD\n A-->B") == (
        "Current Diagram Code:\ngraph TD\n A-->B\n\nRequest: add C"
    )
    assert build_generation_prompt("draw a login flow", "") == "draw a login flow"


def test_files_context_truncates_each_document():
    docs = [Document(name="Billing", text="x" * 900, kind="micro")]
    context = build_files_context(docs, preview_chars=500)
    assert "- Billing (micro):" in context
    assert "x" * 500 + "..." in context
    assert "x" * 501 not in context
    assert build_files_context([]) == ""


def test_render_conversation_alternates_turns():
    history = [
        ChatMessage(role="user", text="Plan billing"),
        ChatMessage(role="assistant", text="Start with invoices"),
    ]
    assert render_conversation(history, "What's missing?") == (
        "User: Plan billing\nPlanner: Start with invoices\nUser: What's missing?\nPlanner:"
    )


@pytest.mark.asyncio
async def test_generate_code_modes_and_grounding():
    backend = ScriptedBackend("```mermaid\ngraph TD\nA-->B\n```", "graph TD\nA-->C")
    assistant = DiagramAssistant(backend)
    other = Document(name="Payments", text="graph LR\nP-->Q", kind="micro")

    fast = await assistant.generate_code("add B", "graph TD\nA", False, "Xero sync", [other])
    deep = await assistant.generate_code("add C", "", True, "", [])

    assert fast == "graph TD\nA-->B"
    assert deep == "graph TD\nA-->C"
    fast_request, deep_request = backend.requests
    assert fast_request.temperature == settings.generation_temperature
    assert fast_request.deep_reasoning is False
    assert "Xero sync" in fast_request.system_instruction
    assert "Payments (micro)" in fast_request.system_instruction
    assert deep_request.temperature is None
    assert deep_request.deep_reasoning is True
    assert "No specific project context provided." in deep_request.system_instruction


@pytest.mark.asyncio
async def test_generate_code_raises_on_empty_or_failed_reply():
    assistant = DiagramAssistant(ScriptedBackend("", RuntimeError("boom")))
    with pytest.raises(AssistantError):
        await assistant.generate_code("x", "", False, "", [])
    with pytest.raises(AssistantError):
        await assistant.generate_code("x", "", False, "", [])


@pytest.mark.asyncio
async def test_explain_and_chat_fallbacks_for_empty_replies():
    assistant = DiagramAssistant(ScriptedBackend("", ""))
    assert await assistant.explain("graph TD\nA-->B") == EXPLAIN_FALLBACK
    assert await assistant.chat("hi", [], "ctx", []) == CHAT_EMPTY_FALLBACK


@pytest.mark.asyncio
async def test_chat_sends_every_document_and_project_context():
    backend = ScriptedBackend("Looks consistent.")
    assistant = DiagramAssistant(backend)
    docs = [
        Document(name="Main Flow", text="graph TD\nA-->B", kind="macro"),
        Document(name="Invoice Sync", text="graph TD\nI-->X", kind="micro"),
    ]

    await assistant.chat("Any gaps?", [], "Links to Xero", docs)

    request = backend.requests[0]
    assert "Links to Xero" in request.system_instruction
    assert "FILE: Main Flow (macro)" in request.system_instruction
    assert "FILE: Invoice Sync (micro)" in request.system_instruction
    assert "graph TD\nI-->X" in request.system_instruction
    assert request.prompt == "User: Any gaps?\nPlanner:"
    assert request.deep_reasoning is True


class _Dummy:
    pass


def test_openai_kwargs_drop_temperature_in_deep_mode():
    backend = OpenAIBackend(client=_Dummy())
    fast = backend.build_kwargs(CompletionRequest("sys", "hi", temperature=0.2))
    deep = backend.build_kwargs(CompletionRequest("sys", "hi", deep_reasoning=True, temperature=0.2))
    analysis = backend.build_kwargs(CompletionRequest("sys", "hi", json_output=True))

    assert fast["model"] == settings.openai_model
    assert fast["temperature"] == 0.2
    assert deep["model"] == settings.openai_reasoning_model
    assert "temperature" not in deep
    assert deep["reasoning_effort"] == settings.openai_reasoning_effort
    assert analysis["response_format"] == {"type": "json_object"}
    assert fast["messages"][0] == {"role": "system", "content": "sys"}


def test_gemini_config_uses_thinking_budget_in_deep_mode():
    backend = GeminiBackend(client=_Dummy())
    fast = backend.build_config(CompletionRequest("sys", "hi", temperature=0.2))
    deep = backend.build_config(CompletionRequest("sys", "hi", deep_reasoning=True, temperature=0.2))
    analysis = backend.build_config(CompletionRequest("sys", "hi", json_output=True))

    assert fast.temperature == 0.2
    assert fast.thinking_config is None
    assert deep.temperature is None
    assert deep.thinking_config.thinking_budget == settings.thinking_budget
    assert analysis.response_mime_type == "application/json"


def test_missing_credential_fails_before_any_request(monkeypatch):
    monkeypatch.setattr(settings, "openai_api_key", "")
    openai_client.get_openai_client.cache_clear()
    with pytest.raises(ConfigurationError):
        build_backend("openai")


def test_unknown_provider_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        build_backend("carrier-pigeon")


def test_build_backend_uses_configured_provider(monkeypatch):
    monkeypatch.setattr(completion_backends, "get_gemini_client", lambda: _Dummy())
    monkeypatch.setattr(settings, "assistant_provider", "gemini")
    assert isinstance(build_backend(), GeminiBackend)
