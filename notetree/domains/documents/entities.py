import uuid
from datetime import datetime, timezone
from typing import Optional


class Document:
    """Сущность документа: узел дерева заметок одного пользователя"""

    def __init__(
        self,
        id: uuid.UUID,
        user_id: str,
        title: str,
        parent_document: Optional[uuid.UUID] = None,
        content: Optional[str] = None,
        cover_image: Optional[str] = None,
        icon: Optional[str] = None,
        is_archived: bool = False,
        is_published: bool = False,
        created_at: Optional[datetime] = None
    ):
        self.id = id
        self.user_id = user_id
        self.title = title
        self.parent_document = parent_document
        self.content = content
        self.cover_image = cover_image
        self.icon = icon
        self.is_archived = is_archived
        self.is_published = is_published
        self.created_at = created_at or datetime.now(timezone.utc)

    def is_owned_by(self, user_id: Optional[str]) -> bool:
        """Проверка является ли пользователь владельцем"""
        return user_id is not None and user_id == self.user_id

    def is_public(self) -> bool:
        """Опубликованный и не архивированный документ доступен всем"""
        return self.is_published and not self.is_archived

    @classmethod
    def create_document(
        cls,
        title: str,
        user_id: str,
        parent_document: Optional[uuid.UUID] = None
    ) -> "Document":
        """Создание нового документа"""
        return cls(
            id=uuid.uuid4(),
            user_id=user_id,
            title=title,
            parent_document=parent_document,
            is_archived=False,
            is_published=False
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Document):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"Document(id={self.id}, title={self.title}, archived={self.is_archived})"
