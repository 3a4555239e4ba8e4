import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, Boolean, DateTime, Index, Uuid

from notetree.core.db import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Document(Base):
    __tablename__ = "documents"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(String(255), nullable=False)
    # Без ForeignKey: родитель может исчезнуть после remove, ребенок отвязывается лениво
    parent_document = Column(Uuid(as_uuid=True), nullable=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=True)
    cover_image = Column(String(2048), nullable=True)
    icon = Column(String(255), nullable=True)
    is_archived = Column(Boolean, nullable=False, default=False)
    is_published = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        Index("ix_documents_user_parent", "user_id", "parent_document"),
        Index("ix_documents_user", "user_id"),
    )
