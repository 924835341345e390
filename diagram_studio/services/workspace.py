"""Application state: documents, preview, insights, generation and chat.

The workspace owns every coordinator and is the only place that wires an
edit to its side effects: a text change clears the inline render error and
schedules both the preview render and the background analysis, each on its
own debounce window.
"""
from __future__ import annotations

import logging
from pathlib import Path

from diagram_studio.agents.completion_backends import build_backend
from diagram_studio.agents.diagram_assistant import DiagramAssistant
from diagram_studio.db import init_db
from diagram_studio.models.chat import ChatMessage
from diagram_studio.models.documents import Document, DocumentKind
from diagram_studio.models.templates import Template, find_template
from diagram_studio.renderers.mermaid_renderer import DiagramRenderer, MermaidCliRenderer
from diagram_studio.services.analysis_coordinator import AnalysisCoordinator
from diagram_studio.services.document_store import DocumentStore
from diagram_studio.services.generation_coordinator import ExplanationService, GenerationCoordinator
from diagram_studio.services.local_store import ChatTranscriptStore, LocalRecordStore
from diagram_studio.services.planning_chat import PlanningChatSession
from diagram_studio.services.render_coordinator import RenderCoordinator
from diagram_studio.tools.exporter import ExportFormat, export_bytes, export_diagram
from diagram_studio.utils.config import settings

logger = logging.getLogger(__name__)


class Workspace:
    def __init__(
        self,
        assistant: DiagramAssistant,
        renderer: DiagramRenderer,
        transcript: ChatTranscriptStore,
        *,
        store: DocumentStore | None = None,
        project_context: str | None = None,
        render_debounce_seconds: float | None = None,
        analysis_debounce_seconds: float | None = None,
    ) -> None:
        self.store = store or DocumentStore()
        self._project_context = settings.default_project_context if project_context is None else project_context
        self.deep_reasoning = False
        self.render = RenderCoordinator(
            renderer,
            debounce_seconds=settings.render_debounce_seconds
            if render_debounce_seconds is None
            else render_debounce_seconds,
        )
        self.analysis = AnalysisCoordinator(
            assistant,
            self.store,
            self.get_project_context,
            debounce_seconds=settings.analysis_debounce_seconds
            if analysis_debounce_seconds is None
            else analysis_debounce_seconds,
        )
        self.generation = GenerationCoordinator(
            assistant,
            self.store,
            self.analysis,
            context_provider=self.get_project_context,
            apply_text=self.update_document,
        )
        self.explanation = ExplanationService(assistant)
        self.chat = PlanningChatSession(assistant, self.store, transcript, self.get_project_context)

    # --- project context -------------------------------------------------

    def get_project_context(self) -> str:
        return self._project_context

    def set_project_context(self, text: str | None) -> str:
        self._project_context = text or ""
        return self._project_context

    # --- documents -------------------------------------------------------

    @property
    def active(self) -> Document:
        return self.store.active

    def start(self) -> None:
        """Schedule the first render and analysis. Needs a running loop."""
        self._refresh_active()

    def _refresh_active(self) -> None:
        document = self.store.active
        self.render.request(document.text, document.id)
        self.analysis.request(document.text, document.id)

    def edit(self, text: str) -> Document:
        """Replace the active document's text."""
        self.update_document(self.store.active_id, text)
        return self.store.active

    def update_document(self, document_id: str, text: str) -> Document | None:
        document = self.store.update(document_id, text)
        if document is None:
            return None
        if document_id == self.store.active_id:
            self.render.clear_error()
            self._refresh_active()
        return document

    def add_document(self, kind: DocumentKind = "macro") -> Document:
        document = self.store.create(kind)
        self.render.clear_error()
        self._refresh_active()
        return document

    def rename_document(self, document_id: str, name: str) -> Document | None:
        return self.store.rename(document_id, name)

    def delete_document(self, document_id: str) -> bool:
        was_active = document_id == self.store.active_id
        deleted = self.store.delete(document_id)
        if deleted and was_active:
            self.render.clear_error()
            self._refresh_active()
        return deleted

    def select(self, document_id: str) -> Document:
        previous = self.store.active_id
        document = self.store.set_active(document_id)
        if document_id != previous:
            self.render.clear_error()
            self._refresh_active()
        return document

    def apply_template(self, name: str) -> Template:
        template = find_template(name)
        if template is None:
            raise KeyError(name)
        self.edit(template.code)
        return template

    # --- assistant side channels ----------------------------------------

    async def generate(self, prompt: str, *, deep_reasoning: bool | None = None) -> bool:
        mode = self.deep_reasoning if deep_reasoning is None else deep_reasoning
        return await self.generation.generate(prompt, deep_reasoning=mode)

    async def explain(self, *, deep_reasoning: bool | None = None) -> str | None:
        mode = self.deep_reasoning if deep_reasoning is None else deep_reasoning
        return await self.explanation.explain(self.store.active.text, deep_reasoning=mode)

    async def send_chat(self, text: str) -> ChatMessage | None:
        return await self.chat.send(text)

    def clear_chat(self) -> None:
        self.chat.clear()

    # --- export ----------------------------------------------------------

    def export(self, fmt: ExportFormat, output_dir: str | None = None) -> Path:
        if not self.render.svg:
            raise ValueError("Nothing has been rendered yet")
        return export_diagram(self.render.svg, self.store.active.name, fmt, output_dir)

    def export_payload(self, fmt: ExportFormat) -> bytes:
        if not self.render.svg:
            raise ValueError("Nothing has been rendered yet")
        return export_bytes(self.render.svg, fmt)

    # --- lifecycle -------------------------------------------------------

    async def drain(self) -> None:
        """Wait for fired render/analysis/generation work to settle."""
        await self.render.drain()
        await self.analysis.drain()
        await self.generation.drain()

    def close(self) -> None:
        self.render.close()
        self.analysis.close()


def build_workspace(*, provider: str | None = None, renderer: DiagramRenderer | None = None) -> Workspace:
    """Create a workspace from settings.

    Raises ConfigurationError when the assistant credential is missing, so no
    request is ever attempted without one.
    """
    assistant = DiagramAssistant(build_backend(provider))
    init_db()
    transcript = ChatTranscriptStore(LocalRecordStore(), settings.chat_storage_key)
    logger.info("Workspace ready", extra={"provider": provider or settings.assistant_provider})
    return Workspace(assistant, renderer or MermaidCliRenderer(), transcript)
