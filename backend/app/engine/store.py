"""Session Store as seen from the engine side.

Every call is a coroutine; the database-backed implementation runs the
synchronous service functions in a worker thread so the event loop (and the
deadline ticker on it) keeps going during the round trip.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Protocol, Set

from sqlalchemy.orm import Session

from app.db.session import SessionLocal
from app.engine.scoring import SessionSummary
from app.schemas.sessions import SessionSummaryIn
from app.services import session_store_service

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    async def create_summary(self, payload: Dict[str, Any]) -> Dict[str, Any]: ...

    async def list_summaries(self, duration_min: Optional[int] = None) -> List[Dict[str, Any]]: ...

    async def get_speed_series(self, summary_id: str) -> List[Dict[str, Any]]: ...

    async def update_notes(self, summary_id: str, notes: str) -> Dict[str, Any]: ...


class DbSessionStore:
    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    def _call(self, fn, *args, **kwargs):
        db = self.session_factory()
        try:
            return fn(db, *args, **kwargs)
        finally:
            db.close()

    async def create_summary(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        body = SessionSummaryIn.model_validate(payload)
        return await asyncio.to_thread(self._call, session_store_service.create_summary, body)

    async def list_summaries(self, duration_min: Optional[int] = None) -> List[Dict[str, Any]]:
        return await asyncio.to_thread(self._call, session_store_service.list_summaries, duration_min=duration_min)

    async def get_speed_series(self, summary_id: str) -> List[Dict[str, Any]]:
        return await asyncio.to_thread(self._call, session_store_service.get_speed_series, summary_id)

    async def update_notes(self, summary_id: str, notes: str) -> Dict[str, Any]:
        return await asyncio.to_thread(self._call, session_store_service.update_notes, summary_id, notes)


# Strong references so pending emissions are not garbage collected mid-flight.
_pending: Set[asyncio.Task] = set()


def _log_outcome(task: asyncio.Task) -> None:
    _pending.discard(task)
    if task.cancelled():
        logger.warning("summary emission cancelled")
        return
    exc = task.exception()
    if exc is not None:
        logger.warning("persist summary failed: %s", exc)


def emit_summary(store: SessionStore, summary: SessionSummary) -> asyncio.Task:
    """Hand a summary to the store without waiting. At most once: no retry."""
    task = asyncio.get_running_loop().create_task(store.create_summary(summary.to_payload()))
    _pending.add(task)
    task.add_done_callback(_log_outcome)
    return task
