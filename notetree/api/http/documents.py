from fastapi import APIRouter, Depends, HTTPException, Response, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, List
import asyncio
import uuid

from notetree.api.http.auth import get_current_identity, get_propagation_queue
from notetree.core.db import get_db
from notetree.domains.documents.entities import Document
from notetree.domains.documents.errors import (
    DocumentError, DocumentNotFoundError, NotAuthenticatedError, UnauthorizedError
)
from notetree.domains.documents.propagation import PropagationJob, PropagationQueue
from notetree.domains.documents.schemas import (
    DocumentCreate, DocumentUpdate, DocumentResponse, PropagationJobResponse
)
from notetree.domains.documents.services import DocumentService

router = APIRouter(prefix="/documents", tags=["documents"])

PROPAGATION_JOB_HEADER = "X-Propagation-Job"


def get_document_service(
    db: AsyncSession = Depends(get_db),
    propagation: PropagationQueue = Depends(get_propagation_queue)
) -> DocumentService:
    return DocumentService(db, propagation)


def to_http_exception(error: DocumentError) -> HTTPException:
    """Преобразование доменной ошибки в HTTP ответ"""
    if isinstance(error, NotAuthenticatedError):
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(error),
            headers={"WWW-Authenticate": "Bearer"},
        )
    if isinstance(error, DocumentNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, UnauthorizedError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(error))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


def to_response(document: Document) -> DocumentResponse:
    return DocumentResponse(
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


def to_job_response(job: PropagationJob) -> PropagationJobResponse:
    return PropagationJobResponse(
        id=job.id,
        root_id=job.root_id,
        is_archived=job.is_archived,
        status=job.status.value,
        updated_count=job.updated_count,
        error=job.error,
        created_at=job.created_at,
        finished_at=job.finished_at
    )


@router.post("/", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def create_document(
    document_data: DocumentCreate,
    user_id: Optional[str] = Depends(get_current_identity),
    document_service: DocumentService = Depends(get_document_service)
):
    """Создание нового документа"""
    try:
        document = await document_service.create_document(document_data, user_id)
    except DocumentError as e:
        raise to_http_exception(e)

    return to_response(document)


@router.get("/", response_model=List[DocumentResponse])
async def get_documents(
    user_id: Optional[str] = Depends(get_current_identity),
    document_service: DocumentService = Depends(get_document_service)
):
    """Получение всех документов (административный список без фильтра по владельцу)"""
    try:
        documents = await document_service.get_all_documents(user_id)
    except DocumentError as e:
        raise to_http_exception(e)

    return [to_response(doc) for doc in documents]


@router.get("/sidebar", response_model=List[DocumentResponse])
async def get_sidebar(
    parent_document: Optional[uuid.UUID] = Query(None),
    user_id: Optional[str] = Depends(get_current_identity),
    document_service: DocumentService = Depends(get_document_service)
):
    """Неархивированные потомки документа или корневые документы"""
    try:
        documents = await document_service.get_sidebar(user_id, parent_document)
    except DocumentError as e:
        raise to_http_exception(e)

    return [to_response(doc) for doc in documents]


@router.get("/trash", response_model=List[DocumentResponse])
async def get_trash(
    user_id: Optional[str] = Depends(get_current_identity),
    document_service: DocumentService = Depends(get_document_service)
):
    """Корзина: архивированные документы пользователя"""
    try:
        documents = await document_service.get_trash(user_id)
    except DocumentError as e:
        raise to_http_exception(e)

    return [to_response(doc) for doc in documents]


@router.get("/search", response_model=List[DocumentResponse])
async def get_search(
    user_id: Optional[str] = Depends(get_current_identity),
    document_service: DocumentService = Depends(get_document_service)
):
    """Плоский список неархивированных документов для поиска"""
    try:
        documents = await document_service.get_search(user_id)
    except DocumentError as e:
        raise to_http_exception(e)

    return [to_response(doc) for doc in documents]


@router.get("/jobs/{job_id}", response_model=PropagationJobResponse)
async def get_propagation_job(
    job_id: uuid.UUID,
    wait: bool = Query(False),
    timeout: float = Query(10.0, gt=0, le=60),
    user_id: Optional[str] = Depends(get_current_identity),
    propagation: PropagationQueue = Depends(get_propagation_queue)
):
    """Состояние фоновой задачи распространения архивации"""
    if not user_id:
        raise to_http_exception(NotAuthenticatedError())

    job = propagation.get(job_id)

    # Чужие задачи не раскрываем: для другого пользователя их нет
    if not job or job.user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Propagation job not found"
        )

    if wait:
        try:
            await asyncio.wait_for(job.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            pass

    return to_job_response(job)


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: uuid.UUID,
    user_id: Optional[str] = Depends(get_current_identity),
    document_service: DocumentService = Depends(get_document_service)
):
    """Получение документа по id"""
    try:
        document = await document_service.get_document(document_id, user_id)
    except DocumentError as e:
        raise to_http_exception(e)

    return to_response(document)


@router.patch("/{document_id}", response_model=DocumentResponse)
async def update_document(
    document_id: uuid.UUID,
    update_data: DocumentUpdate,
    user_id: Optional[str] = Depends(get_current_identity),
    document_service: DocumentService = Depends(get_document_service)
):
    """Обновление документа"""
    try:
        document = await document_service.update_document(document_id, update_data, user_id)
    except DocumentError as e:
        raise to_http_exception(e)

    return to_response(document)


@router.delete("/{document_id}/icon", response_model=DocumentResponse)
async def remove_icon(
    document_id: uuid.UUID,
    user_id: Optional[str] = Depends(get_current_identity),
    document_service: DocumentService = Depends(get_document_service)
):
    """Удаление иконки документа"""
    try:
        document = await document_service.remove_icon(document_id, user_id)
    except DocumentError as e:
        raise to_http_exception(e)

    return to_response(document)


@router.delete("/{document_id}", response_model=DocumentResponse)
async def delete_document(
    document_id: uuid.UUID,
    user_id: Optional[str] = Depends(get_current_identity),
    document_service: DocumentService = Depends(get_document_service)
):
    """Удаление документа (без потомков)"""
    try:
        document = await document_service.remove_document(document_id, user_id)
    except DocumentError as e:
        raise to_http_exception(e)

    return to_response(document)


@router.post("/{document_id}/archive", response_model=DocumentResponse)
async def archive_document(
    document_id: uuid.UUID,
    response: Response,
    user_id: Optional[str] = Depends(get_current_identity),
    document_service: DocumentService = Depends(get_document_service)
):
    """Перемещение документа и его потомков в корзину"""
    try:
        document, job = await document_service.archive_document(document_id, user_id)
    except DocumentError as e:
        raise to_http_exception(e)

    response.headers[PROPAGATION_JOB_HEADER] = str(job.id)
    return to_response(document)


@router.post("/{document_id}/restore", response_model=DocumentResponse)
async def restore_document(
    document_id: uuid.UUID,
    response: Response,
    user_id: Optional[str] = Depends(get_current_identity),
    document_service: DocumentService = Depends(get_document_service)
):
    """Восстановление документа и его потомков из корзины"""
    try:
        document, job = await document_service.restore_document(document_id, user_id)
    except DocumentError as e:
        raise to_http_exception(e)

    response.headers[PROPAGATION_JOB_HEADER] = str(job.id)
    return to_response(document)
