from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncEngine

from notetree.api.http.health import router as health_router
from notetree.api.http.documents import router as documents_router
from notetree.core.config import settings
from notetree.core.db import create_engine, create_session_factory, init_models
from notetree.domains.documents.propagation import PropagationQueue

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(engine: Optional[AsyncEngine] = None) -> FastAPI:
    """Сборка приложения; engine можно передать для тестов"""
    owns_engine = engine is None
    engine = engine or create_engine()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.create_tables:
            await init_models(engine)

        app.state.session_factory = create_session_factory(engine)
        app.state.propagation = PropagationQueue(app.state.session_factory)
        logger.info("NoteTree API started")

        yield

        # Не бросаем поддеревья наполовину архивированными
        await app.state.propagation.drain()
        if owns_engine:
            await engine.dispose()
        logger.info("NoteTree API shutdown complete")

    app = FastAPI(
        title="NoteTree",
        description="Иерархическое хранилище документов с корзиной",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Настройка CORS для работы с frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # В продакшене указать конкретные домены
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Propagation-Job"],
    )

    # Подключаем роутеры
    app.include_router(health_router)
    app.include_router(documents_router)

    @app.get("/")
    async def root():
        """Корневой эндпоинт"""
        return {
            "message": "NoteTree API",
            "version": "1.0.0",
            "docs": "/docs",
            "health": "/health"
        }

    return app


configure_logging()
app = create_app()
