from typing import Optional, List, TYPE_CHECKING
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete
import uuid

from notetree.db.models.document import Document as DocumentModel

if TYPE_CHECKING:
    from notetree.domains.documents.entities import Document


class DocumentRepository:
    """Репозиторий для работы с документами.

    Каждая запись изменяется в собственной транзакции: insert, patch и delete
    коммитятся сразу.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, document: "Document") -> "Document":
        """Создание нового документа"""
        db_document = DocumentModel(
            id=document.id,
            user_id=document.user_id,
            parent_document=document.parent_document,
            title=document.title,
            content=document.content,
            cover_image=document.cover_image,
            icon=document.icon,
            is_archived=document.is_archived,
            is_published=document.is_published,
            created_at=document.created_at
        )

        self.session.add(db_document)
        await self.session.commit()
        return self._to_domain(db_document)

    async def get_by_id(self, document_id: uuid.UUID) -> Optional["Document"]:
        """Получение документа по id"""
        result = await self.session.execute(
            self._select().where(DocumentModel.id == document_id)
        )
        db_document = result.scalar_one_or_none()
        return self._to_domain(db_document) if db_document else None

    async def get_children(
        self,
        user_id: str,
        parent_document: Optional[uuid.UUID],
        is_archived: Optional[bool] = None
    ) -> List["Document"]:
        """Прямые потомки документа (или корни, если parent_document не задан)"""
        query = self._select().where(DocumentModel.user_id == user_id)

        if parent_document is None:
            query = query.where(DocumentModel.parent_document.is_(None))
        else:
            query = query.where(DocumentModel.parent_document == parent_document)

        if is_archived is not None:
            query = query.where(DocumentModel.is_archived == is_archived)

        result = await self.session.execute(query.order_by(DocumentModel.created_at.desc()))
        return [self._to_domain(doc) for doc in result.scalars().all()]

    async def get_by_user(self, user_id: str, is_archived: Optional[bool] = None) -> List["Document"]:
        """Получение документов владельца, новые первыми"""
        query = self._select().where(DocumentModel.user_id == user_id)

        if is_archived is not None:
            query = query.where(DocumentModel.is_archived == is_archived)

        result = await self.session.execute(query.order_by(DocumentModel.created_at.desc()))
        return [self._to_domain(doc) for doc in result.scalars().all()]

    async def get_all(self) -> List["Document"]:
        """Получение всех документов без фильтра по владельцу"""
        result = await self.session.execute(
            self._select().order_by(DocumentModel.created_at.asc())
        )
        return [self._to_domain(doc) for doc in result.scalars().all()]

    async def patch(self, document_id: uuid.UUID, **values) -> Optional["Document"]:
        """Частичное обновление одной записи"""
        if values:
            await self.session.execute(
                update(DocumentModel)
                .where(DocumentModel.id == document_id)
                .values(**values)
            )
            await self.session.commit()

        return await self.get_by_id(document_id)

    async def set_archived(self, document_id: uuid.UUID, is_archived: bool) -> None:
        """Установка флага архивации без чтения записи"""
        await self.session.execute(
            update(DocumentModel)
            .where(DocumentModel.id == document_id)
            .values(is_archived=is_archived)
        )
        await self.session.commit()

    async def delete(self, document_id: uuid.UUID) -> bool:
        """Удаление документа"""
        stmt = delete(DocumentModel).where(DocumentModel.id == document_id)
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount > 0

    def _select(self):
        # Записи могут меняться фоновыми задачами через другую сессию
        return select(DocumentModel).execution_options(populate_existing=True)

    def _to_domain(self, db_document: DocumentModel) -> "Document":
        """Преобразование модели БД в доменную сущность"""
        from notetree.domains.documents.entities import Document

        return Document(
            id=db_document.id,
            user_id=db_document.user_id,
            title=db_document.title,
            parent_document=db_document.parent_document,
            content=db_document.content,
            cover_image=db_document.cover_image,
            icon=db_document.icon,
            is_archived=db_document.is_archived,
            is_published=db_document.is_published,
            created_at=db_document.created_at
        )
