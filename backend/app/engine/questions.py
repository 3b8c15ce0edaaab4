"""Question values for the parity quiz.

A question is a frozen value. Answering produces a new value that replaces the
old one at the same slot, so every reader of the question sequence sees either
the unanswered or the answered version, never a half-updated one.
"""

from __future__ import annotations

import random
import secrets
from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from typing import Optional


class Parity(str, Enum):
    odd = "odd"
    even = "even"


class DurationMinutes(IntEnum):
    one = 1
    five = 5
    ten = 10
    fifteen = 15
    thirty = 30


class RevealMode(str, Enum):
    none = "none"
    after = "after"


OPERAND_MIN = 1
OPERAND_MAX = 9


def parity_of(n: int) -> Parity:
    return Parity.even if n % 2 == 0 else Parity.odd


def new_token() -> str:
    return secrets.token_hex(8)


@dataclass(frozen=True)
class Question:
    id: str
    operand_a: int
    operand_b: int
    answer_started_at: int
    user_answer: Optional[Parity] = None
    answer_ended_at: Optional[int] = None

    @property
    def total(self) -> int:
        return self.operand_a + self.operand_b

    @property
    def correct_parity(self) -> Parity:
        return parity_of(self.total)

    @property
    def is_answered(self) -> bool:
        return self.user_answer is not None

    @property
    def is_correct(self) -> bool:
        return self.user_answer is not None and self.user_answer == self.correct_parity

    def answered(self, parity: Parity, at_ms: int) -> "Question":
        """Return the answered copy; an already answered question is returned as is."""
        if self.is_answered:
            return self
        return replace(self, user_answer=Parity(parity), answer_ended_at=int(at_ms))

    def latency_seconds(self) -> Optional[float]:
        if self.answer_ended_at is None:
            return None
        # A wall clock stepped backwards must not yield a negative latency.
        return max(0, self.answer_ended_at - self.answer_started_at) / 1000


def make_question(now_ms: int, rng: Optional[random.Random] = None) -> Question:
    r = rng or random
    return Question(
        id=new_token(),
        operand_a=r.randint(OPERAND_MIN, OPERAND_MAX),
        operand_b=r.randint(OPERAND_MIN, OPERAND_MAX),
        answer_started_at=int(now_ms),
    )


def make_page(size: int, now_ms: int, rng: Optional[random.Random] = None) -> list[Question]:
    return [make_question(now_ms, rng) for _ in range(int(size))]
