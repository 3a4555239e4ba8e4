import logging
import uuid
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from notetree.db.repositories.document_repository import DocumentRepository
from notetree.domains.documents.entities import Document
from notetree.domains.documents.errors import DocumentNotFoundError, UnauthorizedError
from notetree.domains.documents.propagation import PropagationJob, PropagationQueue
from notetree.domains.documents.queries import DocumentQueryService
from notetree.domains.documents.schemas import DocumentCreate, DocumentUpdate
from notetree.domains.documents.tree import TreeMutator, get_owned_document, require_identity

logger = logging.getLogger(__name__)


class DocumentService:
    """Сервис для работы с документами"""

    def __init__(self, session: AsyncSession, propagation: PropagationQueue):
        self.session = session
        self.document_repository = DocumentRepository(session)
        self.tree = TreeMutator(session, propagation)
        self.queries = DocumentQueryService(session)

    async def create_document(self, document_data: DocumentCreate, user_id: Optional[str]) -> Document:
        """Создание нового документа"""
        user_id = require_identity(user_id)

        if document_data.parent_document is not None:
            parent = await self.document_repository.get_by_id(document_data.parent_document)
            if not parent:
                raise DocumentNotFoundError(document_data.parent_document)
            if not parent.is_owned_by(user_id):
                raise UnauthorizedError(document_data.parent_document)

        document = Document.create_document(
            title=document_data.title,
            user_id=user_id,
            parent_document=document_data.parent_document
        )
        created_document = await self.document_repository.create(document)

        logger.info(f"Document {created_document.id} created by {user_id}")
        return created_document

    async def update_document(
        self,
        document_id: uuid.UUID,
        update_data: DocumentUpdate,
        user_id: Optional[str]
    ) -> Document:
        """Частичное обновление: меняются только переданные поля"""
        user_id = require_identity(user_id)
        await get_owned_document(self.document_repository, document_id, user_id)

        values = update_data.model_dump(exclude_unset=True)
        # title и is_published не могут быть пустыми в таблице
        for field in ("title", "is_published"):
            if field in values and values[field] is None:
                del values[field]

        document = await self.document_repository.patch(document_id, **values)
        if document is None:
            raise DocumentNotFoundError(document_id)
        return document

    async def remove_icon(self, document_id: uuid.UUID, user_id: Optional[str]) -> Document:
        """Удаление иконки документа"""
        user_id = require_identity(user_id)
        await get_owned_document(self.document_repository, document_id, user_id)

        document = await self.document_repository.patch(document_id, icon=None)
        if document is None:
            raise DocumentNotFoundError(document_id)
        return document

    async def remove_document(self, document_id: uuid.UUID, user_id: Optional[str]) -> Document:
        """Окончательное удаление одного документа.

        Потомки не удаляются и остаются со ссылкой на несуществующего родителя.
        """
        user_id = require_identity(user_id)
        document = await get_owned_document(self.document_repository, document_id, user_id)

        await self.document_repository.delete(document_id)

        logger.info(f"Document {document_id} removed by {user_id}")
        return document

    async def archive_document(
        self,
        document_id: uuid.UUID,
        user_id: Optional[str]
    ) -> Tuple[Document, PropagationJob]:
        return await self.tree.archive(document_id, user_id)

    async def restore_document(
        self,
        document_id: uuid.UUID,
        user_id: Optional[str]
    ) -> Tuple[Document, PropagationJob]:
        return await self.tree.restore(document_id, user_id)

    async def get_document(self, document_id: uuid.UUID, user_id: Optional[str]) -> Document:
        return await self.queries.get_by_id(document_id, user_id)

    async def get_sidebar(
        self,
        user_id: Optional[str],
        parent_document: Optional[uuid.UUID] = None
    ) -> List[Document]:
        return await self.queries.get_sidebar(user_id, parent_document)

    async def get_trash(self, user_id: Optional[str]) -> List[Document]:
        return await self.queries.get_trash(user_id)

    async def get_search(self, user_id: Optional[str]) -> List[Document]:
        return await self.queries.get_search(user_id)

    async def get_all_documents(self, user_id: Optional[str]) -> List[Document]:
        return await self.queries.list_all(user_id)
