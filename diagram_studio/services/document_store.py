"""In-memory document set with a single active selection."""
from __future__ import annotations

import logging
from typing import List

from diagram_studio.models.documents import Document, DocumentKind, utc_now
from diagram_studio.models.templates import INITIAL_CODE, NEW_DOCUMENT_CODE

logger = logging.getLogger(__name__)

_DEFAULT_NAMES = {
    "macro": "New Macro Flow",
    "micro": "New Micro Flow",
}


class DocumentStore:
    """Ordered set of diagram documents.

    The set is never empty and the active id always resolves to a member.
    Mutations happen on the event loop thread only, so no locking is needed.
    """

    def __init__(self, documents: List[Document] | None = None) -> None:
        if documents:
            self._documents = list(documents)
        else:
            self._documents = [Document(name="Main Flow", text=INITIAL_CODE, kind="macro")]
        self._active_id = self._documents[0].id

    @property
    def documents(self) -> List[Document]:
        return list(self._documents)

    @property
    def active_id(self) -> str:
        return self._active_id

    @property
    def active(self) -> Document:
        return self.get(self._active_id) or self._documents[0]

    def __len__(self) -> int:
        return len(self._documents)

    def get(self, document_id: str) -> Document | None:
        for document in self._documents:
            if document.id == document_id:
                return document
        return None

    def others(self, document_id: str) -> List[Document]:
        return [d for d in self._documents if d.id != document_id]

    def create(self, kind: DocumentKind = "macro") -> Document:
        document = Document(name=_DEFAULT_NAMES[kind], text=NEW_DOCUMENT_CODE, kind=kind)
        self._documents.append(document)
        self._active_id = document.id
        logger.info("Created document", extra={"document_id": document.id, "kind": kind})
        return document

    def update(self, document_id: str, text: str) -> Document | None:
        document = self.get(document_id)
        if document is None:
            return None
        document.text = text
        document.last_modified = utc_now()
        return document

    def rename(self, document_id: str, name: str) -> Document | None:
        document = self.get(document_id)
        if document is None:
            return None
        document.name = name
        document.last_modified = utc_now()
        return document

    def delete(self, document_id: str) -> bool:
        """Remove a document; refused when it is the only one left."""
        if len(self._documents) == 1:
            return False
        remaining = [d for d in self._documents if d.id != document_id]
        if len(remaining) == len(self._documents):
            return False
        self._documents = remaining
        if self._active_id == document_id:
            self._active_id = remaining[0].id
        logger.info("Deleted document", extra={"document_id": document_id})
        return True

    def set_active(self, document_id: str) -> Document:
        document = self.get(document_id)
        if document is None:
            raise KeyError(document_id)
        self._active_id = document_id
        return document
