import uuid
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from notetree.db.repositories.document_repository import DocumentRepository
from notetree.domains.documents.entities import Document
from notetree.domains.documents.errors import (
    DocumentNotFoundError, NotAuthenticatedError, UnauthorizedError
)
from notetree.domains.documents.tree import require_identity


class DocumentQueryService:
    """Чтение документов с учетом владельца и видимости"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.document_repository = DocumentRepository(session)

    async def get_sidebar(
        self,
        user_id: Optional[str],
        parent_document: Optional[uuid.UUID] = None
    ) -> List[Document]:
        """Неархивированные прямые потомки (или корневые документы)"""
        user_id = require_identity(user_id)
        return await self.document_repository.get_children(
            user_id, parent_document, is_archived=False
        )

    async def get_trash(self, user_id: Optional[str]) -> List[Document]:
        """Все архивированные документы пользователя"""
        user_id = require_identity(user_id)
        return await self.document_repository.get_by_user(user_id, is_archived=True)

    async def get_search(self, user_id: Optional[str]) -> List[Document]:
        """Все неархивированные документы пользователя плоским списком"""
        user_id = require_identity(user_id)
        return await self.document_repository.get_by_user(user_id, is_archived=False)

    async def get_by_id(self, document_id: uuid.UUID, user_id: Optional[str]) -> Document:
        """Получение документа: опубликованные доступны без аутентификации"""
        document = await self.document_repository.get_by_id(document_id)

        if not document:
            raise DocumentNotFoundError(document_id)

        if document.is_public():
            return document

        if not user_id:
            raise NotAuthenticatedError()

        if not document.is_owned_by(user_id):
            raise UnauthorizedError(document_id)

        return document

    async def list_all(self, user_id: Optional[str]) -> List[Document]:
        # Только аутентификация, без фильтра по владельцу (административный список)
        require_identity(user_id)
        return await self.document_repository.get_all()
