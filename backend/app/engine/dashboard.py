from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from app.engine.store import SessionStore

logger = logging.getLogger(__name__)


class DashboardView:
    """Read side of the quiz: past summaries, speed charts and note drafts.

    Non-empty speed series are cached per summary id until the next successful
    load.
    Store failures are logged and leave the current view untouched.
    """

    def __init__(self, store: SessionStore):
        self.store = store
        self.summaries: List[Dict[str, Any]] = []
        self.duration_filter: Optional[int] = None
        self.drafts: Dict[str, str] = {}
        self._speed_cache: Dict[str, List[Dict[str, Any]]] = {}
        self.loading = False

    async def load(self, duration_min: Optional[int] = None) -> List[Dict[str, Any]]:
        self.loading = True
        try:
            rows = await self.store.list_summaries(duration_min)
        except Exception as e:
            logger.warning("load sessions failed: %s", e)
            return self.summaries
        finally:
            self.loading = False

        self.summaries = list(rows)
        self._speed_cache.clear()
        self.duration_filter = duration_min
        self.drafts = {str(r["id"]): r.get("notes") or "" for r in self.summaries}
        return self.summaries

    async def speed_series(self, summary_id: str) -> List[Dict[str, Any]]:
        sid = str(summary_id)
        if sid in self._speed_cache:
            return self._speed_cache[sid]
        try:
            series = list(await self.store.get_speed_series(sid))
        except Exception as e:
            logger.warning("load speeds failed for %s: %s", sid, e)
            return []
        # An empty series may just mean the summary write has not landed yet.
        if series:
            self._speed_cache[sid] = series
        return series

    def set_draft(self, summary_id: str, notes: str) -> None:
        self.drafts[str(summary_id)] = notes

    async def save_note(self, summary_id: str) -> bool:
        sid = str(summary_id)
        notes = self.drafts.get(sid, "")
        try:
            await self.store.update_notes(sid, notes)
        except Exception as e:
            logger.warning("save note failed for %s: %s", sid, e)
            return False

        for row in self.summaries:
            if str(row["id"]) == sid:
                row["notes"] = notes
        return True
