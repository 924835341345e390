"""Database session and engine."""
from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from diagram_studio.utils.config import settings


class Base(DeclarativeBase):
    pass


engine = create_engine(settings.database_url, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def init_db(bind=None) -> None:
    """Create tables that do not exist yet."""
    from diagram_studio import db_models  # noqa: F401  (registers tables)

    Base.metadata.create_all(bind=bind or engine)
