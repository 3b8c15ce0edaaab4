"""Timed parity quiz session: idle -> running -> finished -> idle.

The engine is synchronous and single-threaded. Time only moves through the
injected clock, and the running -> finished transition only happens inside
``tick()`` (or the deadline check that ``answer()`` performs first), so the
caller decides how often the deadline is polled.
"""

from __future__ import annotations

import logging
import random
import time
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from app.core.config import settings
from app.engine.questions import DurationMinutes, Parity, Question, RevealMode, make_page
from app.engine.scoring import Aggregates, SessionSummary, package_summary

logger = logging.getLogger(__name__)

Clock = Callable[[], int]
SummarySink = Callable[[SessionSummary], None]


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


class EngineState(str, Enum):
    idle = "idle"
    running = "running"
    finished = "finished"


class SessionEngine:
    def __init__(
        self,
        *,
        page_size: Optional[int] = None,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
        on_summary: Optional[SummarySink] = None,
    ):
        self.page_size = int(page_size or settings.QUIZ_PAGE_SIZE)
        self._clock = clock or wall_clock_ms
        self._rng = rng
        self._on_summary = on_summary
        self._clear()

    def _clear(self) -> None:
        self.state = EngineState.idle
        self.duration_min: Optional[DurationMinutes] = None
        self.reveal_mode = RevealMode.none
        self.deadline: Optional[int] = None
        self._questions: List[Question] = []
        self._slots: Dict[str, int] = {}
        self._page_count = 0
        self.current_page = 0
        self._live = Aggregates()

    # ----- transitions -----

    def start(self, duration_min: int, reveal_mode: str = "none") -> None:
        """Begin a new session, discarding whatever was in progress."""
        duration = DurationMinutes(int(duration_min))
        mode = RevealMode(reveal_mode)
        if self.state != EngineState.idle:
            logger.info("start while %s: discarding %d questions", self.state.value, len(self._questions))
        self._clear()

        now = self._clock()
        self.duration_min = duration
        self.reveal_mode = mode
        self.deadline = now + int(duration) * 60_000
        self._append_page(now)
        self.state = EngineState.running

    def answer(self, question_id: str, parity: str) -> bool:
        """Record an answer. Returns False when nothing changed."""
        self.tick()
        if self.state != EngineState.running:
            return False

        slot = self._slots.get(str(question_id))
        if slot is None:
            return False
        current = self._questions[slot]
        if current.is_answered:
            return False

        updated = current.answered(Parity(parity), self._clock())
        self._questions[slot] = updated
        self._live = self._live.with_answer(updated.is_correct)
        return True

    def advance_page(self) -> int:
        if self.state != EngineState.running:
            return self.current_page
        nxt = self.current_page + 1
        if nxt >= self._page_count:
            self._append_page(self._clock())
        self.current_page = nxt
        return self.current_page

    def previous_page(self) -> int:
        if self.state == EngineState.running and self.current_page > 0:
            self.current_page -= 1
        return self.current_page

    def tick(self) -> bool:
        """Finish the session once the deadline has passed. True on transition."""
        if self.state != EngineState.running or self.deadline is None:
            return False
        if self._clock() >= self.deadline:
            self.state = EngineState.finished
            logger.info("session finished: answered=%d correct=%d", self._live.answered, self._live.correct)
            return True
        return False

    def acknowledge(self) -> Optional[SessionSummary]:
        """Package and emit the summary of a finished session, then go idle."""
        if self.state != EngineState.finished:
            return None

        summary = package_summary(
            list(self._questions),
            duration_min=int(self.duration_min),
            deadline=int(self.deadline),
            ended_at=self._clock(),
        )
        self._clear()
        if self._on_summary is not None:
            self._on_summary(summary)
        return summary

    def reset(self) -> None:
        self._clear()

    # ----- views -----

    @property
    def questions(self) -> tuple[Question, ...]:
        return tuple(self._questions)

    @property
    def page_count(self) -> int:
        return self._page_count

    @property
    def live_aggregates(self) -> Aggregates:
        return self._live

    def page_questions(self, page: Optional[int] = None) -> List[Question]:
        p = self.current_page if page is None else int(page)
        start = p * self.page_size
        return self._questions[start:start + self.page_size]

    def remaining_ms(self) -> int:
        if self.deadline is None or self.state == EngineState.idle:
            return 0
        return max(0, self.deadline - self._clock())

    def progress_percent(self) -> float:
        if self.duration_min is None or self.state == EngineState.idle:
            return 0.0
        total = int(self.duration_min) * 60_000
        return (1 - self.remaining_ms() / total) * 100

    def question_view(self, q: Question, position: int) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": q.id,
            "position": position,
            "a": q.operand_a,
            "b": q.operand_b,
            "answer": q.user_answer.value if q.user_answer else None,
        }
        if self.reveal_mode == RevealMode.after and q.is_answered:
            out["is_correct"] = q.is_correct
            out["correct"] = q.correct_parity.value
        return out

    def snapshot(self) -> Dict[str, Any]:
        offset = self.current_page * self.page_size
        return {
            "state": self.state.value,
            "duration_min": int(self.duration_min) if self.duration_min else None,
            "reveal_mode": self.reveal_mode.value,
            "deadline": self.deadline,
            "remaining_ms": self.remaining_ms(),
            "progress_percent": round(self.progress_percent(), 2),
            "page": self.current_page,
            "page_count": self._page_count,
            "questions": [
                self.question_view(q, offset + i + 1) for i, q in enumerate(self.page_questions())
            ],
            **self._live.as_dict(),
        }

    def _append_page(self, now: int) -> None:
        page = make_page(self.page_size, now, self._rng)
        base = len(self._questions)
        for i, q in enumerate(page):
            self._slots[q.id] = base + i
        self._questions.extend(page)
        self._page_count += 1
