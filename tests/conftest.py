"""Shared fixtures: a throwaway SQLite database, the propagation queue and
factories for documents and bearer tokens.

Environment variables are set before any ``notetree`` import because the
settings object is created at import time.
"""

import os

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("CREATE_TABLES", "true")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from notetree.core.config import settings
from notetree.core.db import create_session_factory, init_models
from notetree.db.repositories.document_repository import DocumentRepository
from notetree.domains.documents import DocumentCreate, DocumentService, PropagationQueue

ALICE = "user_alice"
BOB = "user_bob"


def make_token(claims: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Подпись токена так, как его выдал бы внешний провайдер"""
    to_encode = dict(claims)
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=15))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'notetree.db'}"


@pytest.fixture
async def engine(database_url):
    engine = create_async_engine(database_url, poolclass=NullPool)
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def propagation(session_factory):
    queue = PropagationQueue(session_factory)
    yield queue
    await queue.drain()


@pytest.fixture
def service(session, propagation):
    return DocumentService(session, propagation)


@pytest.fixture
def repository(session):
    return DocumentRepository(session)


@pytest.fixture
def create_doc(service):
    """Factory creating a document through the public create operation."""

    async def _create(title: str, user_id: str = ALICE, parent=None):
        return await service.create_document(
            DocumentCreate(title=title, parent_document=parent.id if parent else None),
            user_id
        )

    return _create


@pytest.fixture
def auth_headers():
    def _headers(user_id: Optional[str] = ALICE) -> dict:
        token = make_token({"sub": user_id})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def client(database_url):
    from notetree.main import create_app

    engine = create_async_engine(database_url, poolclass=NullPool)
    app = create_app(engine=engine)

    with TestClient(app) as client:
        yield client


@pytest.fixture
def removed_before_patch(monkeypatch):
    """Makes a repository delete the record right before patching it, as a
    concurrent remove landing between the ownership check and the write."""

    def _install(repository: DocumentRepository) -> None:
        original_patch = repository.patch

        async def patch(document_id, **values):
            await repository.delete(document_id)
            return await original_patch(document_id, **values)

        monkeypatch.setattr(repository, "patch", patch)

    return _install
