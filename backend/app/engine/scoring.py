from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from app.engine.questions import Question, new_token


@dataclass(frozen=True)
class Aggregates:
    answered: int = 0
    correct: int = 0

    @property
    def wrong(self) -> int:
        return self.answered - self.correct

    def with_answer(self, is_correct: bool) -> "Aggregates":
        return Aggregates(answered=self.answered + 1, correct=self.correct + (1 if is_correct else 0))

    def as_dict(self) -> Dict[str, int]:
        return {"answered": self.answered, "correct": self.correct, "wrong": self.wrong}


@dataclass(frozen=True)
class SpeedSample:
    x: int
    seconds: float


@dataclass
class SessionSummary:
    id: str
    duration_min: int
    started_at: int
    ended_at: int
    answered: int
    correct: int
    wrong: int
    avg_seconds: float
    speed_series: List[SpeedSample] = field(default_factory=list)
    notes: str = ""

    def to_payload(self) -> Dict[str, Any]:
        return asdict(self)


def compute_aggregates(questions: Iterable[Question]) -> Aggregates:
    answered = 0
    correct = 0
    for q in questions:
        if q.is_answered:
            answered += 1
            if q.is_correct:
                correct += 1
    return Aggregates(answered=answered, correct=correct)


def build_speed_series(questions: Iterable[Question]) -> List[SpeedSample]:
    """Latency per answered question, ranked 1..N in generation order."""
    answered = [q for q in questions if q.answer_ended_at is not None and q.answer_started_at is not None]
    return [SpeedSample(x=idx + 1, seconds=q.latency_seconds()) for idx, q in enumerate(answered)]


def mean_seconds(series: List[SpeedSample]) -> float:
    if not series:
        return 0
    return sum(s.seconds for s in series) / len(series)


def package_summary(
    questions: List[Question],
    *,
    duration_min: int,
    deadline: int,
    ended_at: int,
    summary_id: Optional[str] = None,
) -> SessionSummary:
    """Build the persisted summary from the full question sequence.

    Counts are recomputed here rather than taken from the running totals, and
    the start time is derived from the deadline.
    """

    agg = compute_aggregates(questions)
    series = build_speed_series(questions)
    return SessionSummary(
        id=summary_id or new_token(),
        duration_min=int(duration_min),
        started_at=int(deadline) - int(duration_min) * 60_000,
        ended_at=int(ended_at),
        answered=agg.answered,
        correct=agg.correct,
        wrong=agg.wrong,
        avg_seconds=mean_seconds(series),
        speed_series=series,
        notes="",
    )
