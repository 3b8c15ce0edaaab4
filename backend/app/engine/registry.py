"""One engine + dashboard slot per browser client, kept in process memory."""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from typing import Callable, Dict, Optional

from app.core.config import settings
from app.engine.dashboard import DashboardView
from app.engine.scoring import SessionSummary
from app.engine.session_engine import Clock, EngineState, SessionEngine
from app.engine.store import DbSessionStore, SessionStore, emit_summary
from app.engine.ticker import DeadlineTicker

logger = logging.getLogger(__name__)


class PlayerSlot:
    def __init__(self, client_id: str, store: SessionStore, *, clock: Optional[Clock] = None):
        self.client_id = client_id
        self.store = store
        self.engine = SessionEngine(clock=clock, on_summary=self._emit)
        self.ticker = DeadlineTicker(self.engine, settings.QUIZ_TICK_INTERVAL_MS)
        self.dashboard = DashboardView(store)

    def _emit(self, summary: SessionSummary) -> None:
        logger.info("client %s: emitting summary %s", self.client_id, summary.id)
        emit_summary(self.store, summary)

    def start(self, duration_min: int, reveal_mode: str = "none") -> None:
        self.ticker.stop()
        self.engine.start(duration_min, reveal_mode)
        self.ticker.start()

    def acknowledge(self) -> Optional[SessionSummary]:
        summary = self.engine.acknowledge()
        if summary is not None:
            self.ticker.stop()
        return summary

    def reset(self) -> None:
        self.ticker.stop()
        self.engine.reset()

    def close(self) -> None:
        self.ticker.stop()


class PlayRegistry:
    """Client slots keyed by client id.

    Slots whose session is not running are evicted once idle for longer than
    ``idle_ttl_sec``, and least recently used first while more than
    ``max_clients`` are held. Eviction runs on every ``get``.
    """

    def __init__(
        self,
        store_factory: Callable[[], SessionStore] = DbSessionStore,
        *,
        clock: Optional[Clock] = None,
        idle_ttl_sec: Optional[int] = None,
        max_clients: Optional[int] = None,
        now: Callable[[], float] = time.monotonic,
    ):
        self.store_factory = store_factory
        self.clock = clock
        self.idle_ttl_sec = idle_ttl_sec if idle_ttl_sec is not None else settings.QUIZ_CLIENT_IDLE_TTL_SEC
        self.max_clients = max_clients if max_clients is not None else settings.QUIZ_MAX_CLIENTS
        self.now = now
        self._slots: OrderedDict[str, PlayerSlot] = OrderedDict()
        self._last_seen: Dict[str, float] = {}

    def get(self, client_id: str) -> PlayerSlot:
        slot = self._slots.get(client_id)
        if slot is None:
            slot = PlayerSlot(client_id, self.store_factory(), clock=self.clock)
            self._slots[client_id] = slot
        else:
            self._slots.move_to_end(client_id)
        self._last_seen[client_id] = self.now()
        self.evict(keep=client_id)
        return slot

    def evict(self, keep: Optional[str] = None) -> int:
        now = self.now()
        evictable = [
            cid
            for cid, slot in self._slots.items()
            if cid != keep and slot.engine.state != EngineState.running
        ]

        expired = [cid for cid in evictable if now - self._last_seen[cid] > self.idle_ttl_sec]
        for cid in expired:
            self.remove(cid)

        removed = len(expired)
        # evictable is oldest first
        for cid in evictable:
            if len(self._slots) <= self.max_clients:
                break
            if cid in self._slots:
                self.remove(cid)
                removed += 1

        if removed:
            logger.info("evicted %d idle client slot(s), %d left", removed, len(self._slots))
        return removed

    def remove(self, client_id: str) -> None:
        slot = self._slots.pop(client_id, None)
        self._last_seen.pop(client_id, None)
        if slot is not None:
            slot.close()

    def close_all(self) -> None:
        for cid in list(self._slots):
            self.remove(cid)

    def client_count(self) -> int:
        return len(self._slots)


registry = PlayRegistry()


def get_registry() -> PlayRegistry:
    return registry
