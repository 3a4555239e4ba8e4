from pydantic import BaseModel, Field, field_validator, ConfigDict
from typing import Optional
import uuid
from datetime import datetime


def _clean_title(v: Optional[str]) -> Optional[str]:
    if v is not None and not v.strip():
        raise ValueError('Title cannot be empty')
    return v.strip() if v else v


class DocumentCreate(BaseModel):
    """Схема для создания документа"""
    title: str = Field(..., min_length=1, max_length=255)
    parent_document: Optional[uuid.UUID] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        return _clean_title(v)


class DocumentUpdate(BaseModel):
    """Схема для частичного обновления документа"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = None
    cover_image: Optional[str] = Field(None, max_length=2048)
    icon: Optional[str] = Field(None, max_length=255)
    is_published: Optional[bool] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        return _clean_title(v)


class DocumentResponse(BaseModel):
    """Схема для ответа с данными документа"""
    id: uuid.UUID
    user_id: str
    parent_document: Optional[uuid.UUID] = None
    title: str
    content: Optional[str] = None
    cover_image: Optional[str] = None
    icon: Optional[str] = None
    is_archived: bool
    is_published: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PropagationJobResponse(BaseModel):
    """Схема для состояния фоновой задачи распространения"""
    id: uuid.UUID
    root_id: uuid.UUID
    is_archived: bool
    status: str
    updated_count: int
    error: Optional[str] = None
    created_at: datetime
    finished_at: Optional[datetime] = None
