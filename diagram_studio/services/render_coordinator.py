"""Debounced live-preview rendering with stale-result suppression."""
from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass

from diagram_studio.renderers.mermaid_renderer import DiagramRenderer
from diagram_studio.utils.debounce import Debouncer
from diagram_studio.utils.errors import DiagramSyntaxError, RendererUnavailableError

logger = logging.getLogger(__name__)


@dataclass
class PreviewState:
    svg: str | None = None
    error: str | None = None
    document_id: str | None = None
    last_rendered_text: str = ""


class RenderCoordinator:
    """Keeps the displayed graphic in sync with the active document text.

    Each render takes a token from a monotonic counter; only the newest
    token may touch the preview. A failed render sets ``error`` and leaves
    the last good ``svg`` in place.
    """

    def __init__(self, renderer: DiagramRenderer, *, debounce_seconds: float = 0.5) -> None:
        self.renderer = renderer
        self.state = PreviewState()
        self.render_calls = 0
        self._tokens = itertools.count(1)
        self._latest_token = 0
        self._closed = False
        self._debouncer = Debouncer(debounce_seconds, self.render_now, name="render")

    @property
    def svg(self) -> str | None:
        return self.state.svg

    @property
    def error(self) -> str | None:
        return self.state.error

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def request(self, text: str, document_id: str | None = None) -> None:
        """Schedule a render after the quiescence window."""
        if self._closed:
            return
        self._debouncer.schedule(text, document_id)

    def clear_error(self) -> None:
        self.state.error = None

    async def render_now(self, text: str, document_id: str | None = None) -> bool:
        """Render immediately. Returns True when the result was applied."""
        if self._closed:
            return False
        token = next(self._tokens)
        self._latest_token = token
        if text == self.state.last_rendered_text:
            self.state.document_id = document_id
            return False
        if not text.strip():
            self.state.svg = None
            self.state.document_id = document_id
            self.state.last_rendered_text = ""
            return True

        self.render_calls += 1
        try:
            svg = await self.renderer.render(text)
        except (DiagramSyntaxError, RendererUnavailableError) as exc:
            if not self._is_current(token):
                return False
            logger.info("Render failed", extra={"document_id": document_id, "error": str(exc)})
            self.state.error = str(exc) or "Syntax Error"
            return True
        except Exception:
            if not self._is_current(token):
                return False
            logger.exception("Unexpected renderer failure", extra={"document_id": document_id})
            self.state.error = "Syntax Error"
            return True
        if not self._is_current(token):
            logger.debug("Discarding stale render", extra={"token": token, "latest": self._latest_token})
            return False
        self.state.svg = svg
        self.state.document_id = document_id
        self.state.last_rendered_text = text
        self.state.error = None
        return True

    def _is_current(self, token: int) -> bool:
        return not self._closed and token == self._latest_token

    async def drain(self) -> None:
        await self._debouncer.drain()

    def close(self) -> None:
        """Tear down: cancel the pending timer and ignore in-flight results."""
        self._closed = True
        self._debouncer.cancel()
