from __future__ import annotations

import asyncio
import logging
from typing import Optional

from app.engine.session_engine import EngineState, SessionEngine

logger = logging.getLogger(__name__)


class DeadlineTicker:
    """Polls ``engine.tick()`` on the running event loop while the session runs.

    The task ends by itself once the engine leaves ``running``; ``stop()``
    cancels it early (reset, restart, client removal).
    """

    def __init__(self, engine: SessionEngine, interval_ms: int):
        self.engine = engine
        self.interval = max(1, int(interval_ms)) / 1000
        self._task: Optional[asyncio.Task] = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        self.stop()
        self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _run(self) -> None:
        while self.engine.state == EngineState.running:
            await asyncio.sleep(self.interval)
            if self.engine.tick():
                break
        logger.debug("deadline ticker exited (state=%s)", self.engine.state.value)
