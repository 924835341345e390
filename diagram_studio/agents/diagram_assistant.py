"""Generative assistant for authoring, explaining, analyzing and planning diagrams."""
from __future__ import annotations

import json
import logging
import re
from typing import Sequence

from pydantic import ValidationError

from diagram_studio.agents.completion_backends import CompletionBackend, CompletionRequest
from diagram_studio.models.chat import ChatMessage
from diagram_studio.models.documents import ANALYSIS_UNAVAILABLE, AnalysisResult, Document
from diagram_studio.utils.config import settings
from diagram_studio.utils.errors import AssistantError

logger = logging.getLogger(__name__)

EXPLAIN_FALLBACK = "Could not generate explanation."
CHAT_EMPTY_FALLBACK = "I'm thinking, but I couldn't formulate a response."

GENERATE_INSTRUCTION = (
    "You are an expert diagram architect.\n\n"
    "PROJECT CONTEXT (Global definitions for this project):\n"
    "{project_context}\n"
    "{files_context}\n\n"
    "Your task is to generate VALID Mermaid.js code based on the user's description.\n\n"
    "Rules:\n"
    "1. Return ONLY the raw Mermaid code.\n"
    "2. Do NOT wrap the code in markdown code blocks.\n"
    "3. Do NOT provide explanations.\n"
    "4. Maintain valid syntax.\n"
    "5. Prefer modern syntax (graph TD/LR).\n"
)

EXPLAIN_INSTRUCTION = (
    "You are a helpful assistant. "
    "Explain this Mermaid diagram concisely to a non-technical stakeholder."
)

ANALYZE_INSTRUCTION = (
    "You are a QA bot for Mermaid diagrams.\n"
    "Project Context: {project_context}\n\n"
    "Analyze the code for:\n"
    "1. Syntax correctness.\n"
    "2. Logical flow gaps (dead ends, isolated nodes).\n"
    "3. Alignment with project context (if provided).\n\n"
    "Return JSON format:\n"
    "{{\n"
    "  \"suggestions\": [\"suggestion1\", \"suggestion2\"],\n"
    "  \"syntaxValid\": true/false,\n"
    "  \"logicGaps\": [\"gap1\", \"gap2\"]\n"
    "}}\n"
)

PLANNER_INSTRUCTION = (
    "You are the Strategic Planning Lead for this project.\n"
    "Your role is to help the user plan macro and micro architectures, "
    "ensuring consistency across the entire system.\n\n"
    "You have access to the current state of all diagram files in the project.\n\n"
    "PROJECT CONTEXT:\n"
    "{project_context}\n\n"
    "CURRENT DIAGRAM STATES:\n"
    "{file_states}\n\n"
    "Your Goals:\n"
    "1. Provide high-level architectural advice.\n"
    "2. Identify inconsistencies between macro and micro flows.\n"
    "3. Help plan next steps for implementation.\n"
    "4. Be concise but insightful.\n\n"
    "Do not generate Mermaid code unless specifically asked for a snippet example. "
    "Focus on reasoning and strategy."
)

_FENCE_OPEN_RE = re.compile(r"^```[\w-]*[ \t]*\n?")
_FENCE_CLOSE_RE = re.compile(r"\n?```[ \t]*$")


def strip_code_fences(text: str) -> str:
    """Remove an enclosing ```lang ... ``` block and surrounding whitespace."""
    cleaned = (text or "").strip()
    cleaned = _FENCE_OPEN_RE.sub("", cleaned, count=1)
    cleaned = _FENCE_CLOSE_RE.sub("", cleaned, count=1)
    return cleaned.strip()


def build_generation_prompt(prompt: str, current_text: str) -> str:
    if current_text:
        return f"Current Diagram Code:\n{current_text}\n\nRequest: {prompt}"
    return prompt


def build_files_context(other_documents: Sequence[Document], preview_chars: int | None = None) -> str:
    """Summarize the other documents, each cut to a bounded prefix."""
    if not other_documents:
        return ""
    limit = preview_chars if preview_chars is not None else settings.other_document_preview_chars
    entries = [f"- {d.name} ({d.kind}):\n{d.text[:limit]}..." for d in other_documents]
    return "\nCONTEXT - OTHER RELATED DIAGRAMS IN PROJECT:\n" + "\n".join(entries)


def render_file_states(documents: Sequence[Document]) -> str:
    return "\n\n".join(f"FILE: {d.name} ({d.kind}) \nCODE:\n{d.text}" for d in documents)


def render_conversation(history: Sequence[ChatMessage], new_message: str) -> str:
    turns = [f"{'User' if m.role == 'user' else 'Planner'}: {m.text}" for m in history]
    turns.append(f"User: {new_message}")
    return "\n".join(turns) + "\nPlanner:"


def parse_analysis(raw: str) -> AnalysisResult:
    """Parse the JSON analysis reply; malformed payloads become a safe fallback."""
    if not raw or not raw.strip():
        return AnalysisResult()
    try:
        data = json.loads(strip_code_fences(raw))
        return AnalysisResult.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as exc:
        logger.warning("Analysis response was not valid JSON", extra={"error": str(exc)})
        return ANALYSIS_UNAVAILABLE.model_copy(deep=True)


class DiagramAssistant:
    """The four assistant operations over a single completion backend."""

    def __init__(self, backend: CompletionBackend) -> None:
        self.backend = backend

    async def _complete(self, request: CompletionRequest, operation: str) -> str:
        try:
            return await self.backend.complete(request)
        except Exception as exc:
            logger.exception("Assistant call failed", extra={"operation": operation})
            raise AssistantError(f"{operation} failed: {exc}") from exc

    async def generate_code(
        self,
        prompt: str,
        current_text: str,
        deep_reasoning: bool = False,
        project_context: str = "",
        other_documents: Sequence[Document] = (),
    ) -> str:
        system_instruction = GENERATE_INSTRUCTION.format(
            project_context=project_context or "No specific project context provided.",
            files_context=build_files_context(other_documents),
        )
        request = CompletionRequest(
            system_instruction=system_instruction,
            prompt=build_generation_prompt(prompt, current_text),
            deep_reasoning=deep_reasoning,
            temperature=None if deep_reasoning else settings.generation_temperature,
        )
        text = await self._complete(request, "generate")
        if not text:
            raise AssistantError("No content generated")
        return strip_code_fences(text)

    async def explain(self, text: str, deep_reasoning: bool = False) -> str:
        request = CompletionRequest(
            system_instruction=EXPLAIN_INSTRUCTION,
            prompt=f"Explain this diagram:\n{text}",
            deep_reasoning=deep_reasoning,
        )
        return await self._complete(request, "explain") or EXPLAIN_FALLBACK

    async def analyze(self, text: str, project_context: str) -> AnalysisResult:
        request = CompletionRequest(
            system_instruction=ANALYZE_INSTRUCTION.format(project_context=project_context),
            prompt=f"Analyze this Mermaid code:\n{text}",
            json_output=True,
        )
        return parse_analysis(await self._complete(request, "analyze"))

    async def chat(
        self,
        message: str,
        history: Sequence[ChatMessage],
        project_context: str,
        documents: Sequence[Document],
    ) -> str:
        # Rebuilt every turn: documents change between messages.
        system_instruction = PLANNER_INSTRUCTION.format(
            project_context=project_context,
            file_states=render_file_states(documents),
        )
        request = CompletionRequest(
            system_instruction=system_instruction,
            prompt=render_conversation(history, message),
            deep_reasoning=True,
        )
        return await self._complete(request, "chat") or CHAT_EMPTY_FALLBACK
