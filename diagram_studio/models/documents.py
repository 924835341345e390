"""Core document and analysis models (framework-agnostic)."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal
from uuid import uuid4

from pydantic import BaseModel, Field

DocumentKind = Literal["macro", "micro"]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid4().hex


class Document(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    text: str
    kind: DocumentKind = "macro"
    last_modified: datetime = Field(default_factory=utc_now)


class AnalysisResult(BaseModel):
    suggestions: List[str] = []
    syntax_valid: bool = Field(True, alias="syntaxValid")
    logic_gaps: List[str] = Field(default_factory=list, alias="logicGaps")

    model_config = {
        "populate_by_name": True,
    }


ANALYSIS_UNAVAILABLE = AnalysisResult(suggestions=["Analysis unavailable"], syntax_valid=True, logic_gaps=[])
