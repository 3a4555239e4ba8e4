from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from notetree.core.db import get_db

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(request: Request, db: AsyncSession = Depends(get_db)):
    """Проверка доступности сервиса и базы данных"""
    await db.execute(text("SELECT 1"))
    propagation = request.app.state.propagation

    return {
        "status": "healthy",
        "propagation": {
            "in_flight": propagation.pending_count,
            "failed": len(propagation.failed_jobs())
        }
    }
