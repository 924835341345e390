"""Natural-language authoring and one-shot explanations."""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Set

from diagram_studio.agents.diagram_assistant import DiagramAssistant
from diagram_studio.models.documents import Document
from diagram_studio.services.analysis_coordinator import AnalysisCoordinator
from diagram_studio.services.document_store import DocumentStore
from diagram_studio.utils.errors import AssistantError

logger = logging.getLogger(__name__)

GENERATION_ERROR = "Failed to generate diagram. Please try again."
EXPLANATION_ERROR = "Failed to explain diagram."


class GenerationCoordinator:
    """Turns a prompt into new text for the document active at issue time."""

    def __init__(
        self,
        assistant: DiagramAssistant,
        store: DocumentStore,
        analysis: AnalysisCoordinator,
        *,
        context_provider: Callable[[], str],
        apply_text: Callable[[str, str], Optional[Document]],
    ) -> None:
        self.assistant = assistant
        self.store = store
        self.analysis = analysis
        self._context_provider = context_provider
        self._apply_text = apply_text
        self.prompt = ""
        self.error: str | None = None
        self.is_generating = False
        self._tasks: Set[asyncio.Task] = set()

    async def generate(self, prompt: str | None = None, *, deep_reasoning: bool = False) -> bool:
        """Generate from ``prompt`` (or the held prompt). Returns True on success."""
        if prompt is not None:
            self.prompt = prompt
        if not self.prompt.strip():
            return False

        document = self.store.active
        document_id = document.id
        others = self.store.others(document_id)
        self.is_generating = True
        self.error = None
        try:
            new_text = await self.assistant.generate_code(
                self.prompt,
                document.text,
                deep_reasoning,
                self._context_provider(),
                others,
            )
        except AssistantError:
            self.error = GENERATION_ERROR
            return False
        finally:
            self.is_generating = False

        if self._apply_text(document_id, new_text) is None:
            # Target was deleted mid-request; keep the prompt for a retry.
            logger.warning("Generated text had no target document", extra={"document_id": document_id})
            self.error = GENERATION_ERROR
            return False
        self.prompt = ""
        self.error = None
        task = asyncio.ensure_future(self.analysis.analyze_now(new_text, document_id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return True

    async def drain(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


class ExplanationService:
    """Plain-language summaries; never mutates documents."""

    def __init__(self, assistant: DiagramAssistant) -> None:
        self.assistant = assistant
        self.explanation: str | None = None
        self.is_explaining = False

    async def explain(self, text: str, *, deep_reasoning: bool = False) -> str | None:
        if not text.strip():
            return None
        self.is_explaining = True
        self.explanation = None
        try:
            self.explanation = await self.assistant.explain(text, deep_reasoning)
        except AssistantError:
            self.explanation = EXPLANATION_ERROR
        finally:
            self.is_explaining = False
        return self.explanation
