"""Pydantic schemas for API."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from diagram_studio.models.chat import ChatMessage
from diagram_studio.models.documents import AnalysisResult, Document, DocumentKind


class DocumentCreate(BaseModel):
    kind: DocumentKind = "macro"


class DocumentTextUpdate(BaseModel):
    text: str


class DocumentRename(BaseModel):
    name: str


class DocumentResponse(BaseModel):
    id: str
    name: str
    text: str
    kind: DocumentKind
    last_modified: datetime
    active: bool = False

    @classmethod
    def from_document(cls, document: Document, active_id: str) -> "DocumentResponse":
        return cls(**document.model_dump(), active=document.id == active_id)


class DocumentListResponse(BaseModel):
    active_id: str
    documents: List[DocumentResponse]


class PreviewResponse(BaseModel):
    svg: Optional[str]
    error: Optional[str]
    document_id: Optional[str]
    pending: bool


class AnalysisResponse(BaseModel):
    result: Optional[AnalysisResult]
    document_id: Optional[str]
    is_analyzing: bool


class GenerateRequest(BaseModel):
    prompt: str
    deep_reasoning: Optional[bool] = None


class GenerateResponse(BaseModel):
    ok: bool
    error: Optional[str]
    document: DocumentResponse


class ExplainRequest(BaseModel):
    deep_reasoning: Optional[bool] = None


class ExplainResponse(BaseModel):
    explanation: Optional[str]


class ChatSendRequest(BaseModel):
    message: str


class ChatHistoryResponse(BaseModel):
    messages: List[ChatMessage]
    awaiting_response: bool


class ProjectContextPayload(BaseModel):
    project_context: str
    deep_reasoning: Optional[bool] = None


class TemplateResponse(BaseModel):
    name: str
    type: str
    description: str
    code: str
