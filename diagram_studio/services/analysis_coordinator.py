"""Debounced background quality analysis of the active document."""
from __future__ import annotations

import logging
from typing import Callable

from diagram_studio.agents.diagram_assistant import DiagramAssistant
from diagram_studio.models.documents import AnalysisResult
from diagram_studio.services.document_store import DocumentStore
from diagram_studio.utils.debounce import Debouncer

logger = logging.getLogger(__name__)


class AnalysisCoordinator:
    """Keeps an advisory AnalysisResult for the active document.

    Overlapping analyses are not ordered: whichever completes last wins, as
    long as the document it was issued for is still the active one.
    """

    def __init__(
        self,
        assistant: DiagramAssistant,
        store: DocumentStore,
        context_provider: Callable[[], str],
        *,
        debounce_seconds: float = 2.0,
    ) -> None:
        self.assistant = assistant
        self.store = store
        self._context_provider = context_provider
        self.result: AnalysisResult | None = None
        self.result_document_id: str | None = None
        self.analysis_calls = 0
        self._in_flight = 0
        self._debouncer = Debouncer(debounce_seconds, self.analyze_now, name="analysis")

    @property
    def is_analyzing(self) -> bool:
        return self._in_flight > 0

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def request(self, text: str, document_id: str) -> None:
        self._debouncer.schedule(text, document_id)

    async def analyze_now(self, text: str, document_id: str) -> bool:
        """Run one analysis. Returns True when the result was stored."""
        if not text.strip():
            return False
        self._in_flight += 1
        self.analysis_calls += 1
        try:
            result = await self.assistant.analyze(text, self._context_provider())
        except Exception:
            logger.exception("Analysis failed", extra={"document_id": document_id})
            return False
        finally:
            self._in_flight -= 1
        if document_id != self.store.active_id:
            logger.debug("Discarding analysis for inactive document", extra={"document_id": document_id})
            return False
        self.result = result
        self.result_document_id = document_id
        return True

    async def drain(self) -> None:
        await self._debouncer.drain()

    def close(self) -> None:
        self._debouncer.cancel()
