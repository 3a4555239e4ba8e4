import logging
import uuid
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from notetree.db.repositories.document_repository import DocumentRepository
from notetree.domains.documents.entities import Document
from notetree.domains.documents.errors import (
    DocumentNotFoundError, NotAuthenticatedError, UnauthorizedError
)
from notetree.domains.documents.propagation import PropagationJob, PropagationQueue

logger = logging.getLogger(__name__)


def require_identity(user_id: Optional[str]) -> str:
    """Проверка что вызывающий аутентифицирован"""
    if not user_id:
        raise NotAuthenticatedError()
    return user_id


async def get_owned_document(
    repository: DocumentRepository,
    document_id: uuid.UUID,
    user_id: str
) -> Document:
    """Получение документа с проверкой владельца"""
    document = await repository.get_by_id(document_id)

    if not document:
        raise DocumentNotFoundError(document_id)

    if not document.is_owned_by(user_id):
        raise UnauthorizedError(document_id)

    return document


class TreeMutator:
    """Архивация и восстановление документов вместе с поддеревом.

    Сам документ обновляется синхронно и возвращается вызывающему, потомки
    обновляются фоновой задачей из PropagationQueue.
    """

    def __init__(self, session: AsyncSession, propagation: PropagationQueue):
        self.session = session
        self.propagation = propagation
        self.document_repository = DocumentRepository(session)

    async def archive(
        self,
        document_id: uuid.UUID,
        user_id: Optional[str]
    ) -> Tuple[Document, PropagationJob]:
        """Архивация документа и всех его потомков"""
        user_id = require_identity(user_id)
        await get_owned_document(self.document_repository, document_id, user_id)

        document = await self.document_repository.patch(document_id, is_archived=True)
        if document is None:
            raise DocumentNotFoundError(document_id)

        job = self.propagation.submit(document_id, user_id, is_archived=True)

        logger.info(f"Document {document_id} archived by {user_id}, propagation job {job.id}")
        return document, job

    async def restore(
        self,
        document_id: uuid.UUID,
        user_id: Optional[str]
    ) -> Tuple[Document, PropagationJob]:
        """Восстановление документа и всех его потомков"""
        user_id = require_identity(user_id)
        existing = await get_owned_document(self.document_repository, document_id, user_id)

        values = {"is_archived": False}

        # Родитель все еще в корзине: отвязываем документ, иначе его не видно в сайдбаре
        if existing.parent_document is not None:
            parent = await self.document_repository.get_by_id(existing.parent_document)
            if parent is not None and parent.is_archived:
                values["parent_document"] = None
                logger.info(
                    f"Document {document_id} detached from archived parent {existing.parent_document}"
                )

        document = await self.document_repository.patch(document_id, **values)
        if document is None:
            raise DocumentNotFoundError(document_id)

        job = self.propagation.submit(document_id, user_id, is_archived=False)

        logger.info(f"Document {document_id} restored by {user_id}, propagation job {job.id}")
        return document, job
