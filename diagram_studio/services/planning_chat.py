"""Persisted planning conversation grounded in every document's current text."""
from __future__ import annotations

import logging
from typing import Callable, List

from diagram_studio.agents.diagram_assistant import DiagramAssistant
from diagram_studio.models.chat import ChatMessage
from diagram_studio.services.document_store import DocumentStore
from diagram_studio.services.local_store import ChatTranscriptStore
from diagram_studio.utils.errors import AssistantError

logger = logging.getLogger(__name__)

CHAT_ERROR_REPLY = "I encountered an error while thinking. Please try again."


class PlanningChatSession:
    """idle -> awaiting_response -> idle.

    The session does not guard against a second ``send`` while a reply is
    pending; callers check :attr:`awaiting_response` first.
    """

    def __init__(
        self,
        assistant: DiagramAssistant,
        store: DocumentStore,
        transcript: ChatTranscriptStore,
        context_provider: Callable[[], str],
    ) -> None:
        self.assistant = assistant
        self.store = store
        self.transcript = transcript
        self._context_provider = context_provider
        self.awaiting_response = False
        self._messages: List[ChatMessage] = transcript.load()

    @property
    def messages(self) -> List[ChatMessage]:
        return list(self._messages)

    def _append(self, message: ChatMessage) -> None:
        self._messages.append(message)
        self.transcript.save(self._messages)

    async def send(self, text: str) -> ChatMessage | None:
        """Send one user line; returns the paired assistant message."""
        if not text.strip():
            return None
        history = list(self._messages)
        self._append(ChatMessage(role="user", text=text))
        self.awaiting_response = True
        try:
            reply_text = await self.assistant.chat(
                text,
                history,
                self._context_provider(),
                self.store.documents,
            )
        except AssistantError:
            logger.warning("Planning chat request failed", extra={"history_length": len(history)})
            reply_text = CHAT_ERROR_REPLY
        finally:
            self.awaiting_response = False
        reply = ChatMessage(role="assistant", text=reply_text)
        self._append(reply)
        return reply

    def clear(self) -> None:
        self._messages = []
        self.transcript.erase()
