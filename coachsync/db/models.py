from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""


class DocumentRow(Base):
    """One schemaless document of a named collection.

    Stores:
    - collection: Collection name ("matches", "players", "users")
    - id: Document id, unique within the collection
    - data: Document body with camelCase keys (datetimes tagged, see store.sql)
    - created_at / updated_at: Row timestamps mirrored from the document
    """

    __tablename__ = "documents"

    collection: Mapped[str] = mapped_column(String, primary_key=True)
    id: Mapped[str] = mapped_column(String, primary_key=True)
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (Index("idx_documents_collection", "collection"),)
