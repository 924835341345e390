"""SQLAlchemy models for locally persisted records."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from diagram_studio.db import Base
from diagram_studio.models.documents import utc_now


class LocalRecord(Base):
    """One serialized value per namespace key."""

    __tablename__ = "local_records"

    namespace: Mapped[str] = mapped_column(String(200), primary_key=True)
    payload: Mapped[str] = mapped_column(Text)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
