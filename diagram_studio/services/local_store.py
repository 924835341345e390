"""Durable single-user storage for the planning chat transcript."""
from __future__ import annotations

import logging
from typing import Callable, List

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.orm import Session as DbSession

from diagram_studio.db import SessionLocal
from diagram_studio.db_models import LocalRecord
from diagram_studio.models.chat import ChatMessage

logger = logging.getLogger(__name__)

_TRANSCRIPT = TypeAdapter(List[ChatMessage])


class LocalRecordStore:
    """Key/value records addressed by a namespace string."""

    def __init__(self, session_factory: Callable[[], DbSession] = SessionLocal) -> None:
        self._session_factory = session_factory

    def get(self, namespace: str) -> str | None:
        with self._session_factory() as db:
            record = db.get(LocalRecord, namespace)
            return record.payload if record else None

    def put(self, namespace: str, payload: str) -> None:
        with self._session_factory() as db:
            record = db.get(LocalRecord, namespace)
            if record is None:
                db.add(LocalRecord(namespace=namespace, payload=payload))
            else:
                record.payload = payload
            db.commit()

    def remove(self, namespace: str) -> None:
        with self._session_factory() as db:
            record = db.get(LocalRecord, namespace)
            if record is not None:
                db.delete(record)
                db.commit()


def serialize_transcript(messages: List[ChatMessage]) -> str:
    return _TRANSCRIPT.dump_json(messages).decode("utf-8")


def deserialize_transcript(payload: str) -> List[ChatMessage]:
    return _TRANSCRIPT.validate_json(payload)


class ChatTranscriptStore:
    """Reads and writes the transcript under one fixed namespace."""

    def __init__(self, records: LocalRecordStore, namespace: str) -> None:
        self.records = records
        self.namespace = namespace

    def load(self) -> List[ChatMessage]:
        payload = self.records.get(self.namespace)
        if not payload:
            return []
        try:
            return deserialize_transcript(payload)
        except ValidationError:
            logger.exception("Failed to load chat history", extra={"namespace": self.namespace})
            return []

    def save(self, messages: List[ChatMessage]) -> None:
        self.records.put(self.namespace, serialize_transcript(messages))

    def erase(self) -> None:
        self.records.remove(self.namespace)
