"""SQLAlchemy model backing the document store."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Index, Integer, JSON, String

from .database import Base


class StoredDocument(Base):
    """One schemaless document of a collection."""

    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    collection = Column(String(64), nullable=False)
    body = Column(JSON, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (Index("ix_documents_collection", "collection"),)

    def __repr__(self) -> str:
        return f"<StoredDocument(id={self.id}, collection='{self.collection}')>"
