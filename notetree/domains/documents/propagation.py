"""Фоновое распространение флага архивации на поддерево документа"""

import asyncio
import logging
import uuid
from collections import OrderedDict
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from notetree.core.config import settings
from notetree.db.repositories.document_repository import DocumentRepository

logger = logging.getLogger(__name__)


class PropagationStatus(str, Enum):
    """Состояние фоновой задачи распространения"""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class PropagationJob:
    """Задача распространения флага is_archived на поддерево"""

    def __init__(self, root_id: uuid.UUID, user_id: str, is_archived: bool):
        self.id = uuid.uuid4()
        self.root_id = root_id
        self.user_id = user_id
        self.is_archived = is_archived
        self.status = PropagationStatus.PENDING
        self.updated_count = 0
        self.error: Optional[str] = None
        self.created_at = datetime.now(timezone.utc)
        self.finished_at: Optional[datetime] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def is_finished(self) -> bool:
        return self.status in (PropagationStatus.COMPLETED, PropagationStatus.FAILED)

    async def wait(self) -> "PropagationJob":
        """Ожидание завершения задачи; ошибки не пробрасываются"""
        if self._task is not None and not self.is_finished:
            await asyncio.shield(self._task)
        return self

    def __repr__(self) -> str:
        return (
            f"PropagationJob(id={self.id}, root_id={self.root_id}, "
            f"is_archived={self.is_archived}, status={self.status.value})"
        )


class PropagationQueue:
    """Реестр и исполнитель задач распространения; каждая задача работает в своей сессии"""

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        max_depth: Optional[int] = None,
        history_size: Optional[int] = None
    ):
        self.session_factory = session_factory
        self.max_depth = max_depth if max_depth is not None else settings.propagation_max_depth
        self.history_size = history_size if history_size is not None else settings.propagation_history_size
        self._jobs: "OrderedDict[uuid.UUID, PropagationJob]" = OrderedDict()
        self._in_flight: Dict[uuid.UUID, asyncio.Task] = {}

    def submit(self, root_id: uuid.UUID, user_id: str, is_archived: bool) -> PropagationJob:
        """Запуск распространения флага на потомков root_id"""
        job = PropagationJob(root_id, user_id, is_archived)
        self._jobs[job.id] = job
        self._evict_finished()

        task = asyncio.create_task(self._run(job))
        job._task = task
        self._in_flight[job.id] = task
        task.add_done_callback(lambda _: self._in_flight.pop(job.id, None))

        logger.info(
            f"Scheduled propagation job {job.id}: is_archived={is_archived} below document {root_id}"
        )
        return job

    def get(self, job_id: uuid.UUID) -> Optional[PropagationJob]:
        return self._jobs.get(job_id)

    def jobs(self) -> List[PropagationJob]:
        return list(self._jobs.values())

    def failed_jobs(self) -> List[PropagationJob]:
        return [job for job in self._jobs.values() if job.status == PropagationStatus.FAILED]

    @property
    def pending_count(self) -> int:
        return len(self._in_flight)

    async def drain(self) -> None:
        """Ожидание завершения всех выполняющихся задач"""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight.values()), return_exceptions=True)

    async def _run(self, job: PropagationJob) -> None:
        job.status = PropagationStatus.RUNNING
        try:
            async with self.session_factory() as session:
                job.updated_count = await self._propagate(DocumentRepository(session), job)
        except Exception as e:
            job.status = PropagationStatus.FAILED
            job.error = str(e) or e.__class__.__name__
            logger.exception(
                f"Propagation job {job.id} failed below document {job.root_id} "
                f"after {job.updated_count} updates"
            )
        else:
            job.status = PropagationStatus.COMPLETED
            logger.info(
                f"Propagation job {job.id} completed: {job.updated_count} descendants "
                f"set is_archived={job.is_archived}"
            )
        finally:
            job.finished_at = datetime.now(timezone.utc)

    async def _propagate(self, repository: DocumentRepository, job: PropagationJob) -> int:
        # Обход в глубину через явный стек; родитель всегда обновляется раньше потомков
        visited = {job.root_id}
        stack = [(job.root_id, 0)]
        updated = 0

        while stack:
            document_id, depth = stack.pop()

            if depth >= self.max_depth:
                logger.warning(
                    f"Propagation job {job.id} reached max depth {self.max_depth} at document {document_id}"
                )
                continue

            children = await repository.get_children(job.user_id, document_id)
            for child in children:
                if child.id in visited:
                    logger.warning(
                        f"Propagation job {job.id} skipped document {child.id}: cycle in parent links"
                    )
                    continue
                visited.add(child.id)

                await repository.set_archived(child.id, job.is_archived)
                updated += 1
                job.updated_count = updated
                stack.append((child.id, depth + 1))

        return updated

    def _evict_finished(self) -> None:
        while len(self._jobs) > self.history_size:
            oldest_id = next(
                (job_id for job_id, job in self._jobs.items() if job.is_finished),
                None
            )
            if oldest_id is None:
                break
            del self._jobs[oldest_id]
