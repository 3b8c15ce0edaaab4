from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from app.core.config import ALLOWED_DURATIONS


class SpeedPoint(BaseModel):
    x: int = Field(ge=1)
    seconds: float = Field(ge=0)


class SessionSummaryIn(BaseModel):
    id: str = Field(min_length=1, max_length=64)
    duration_min: int
    started_at: int = Field(ge=0)
    ended_at: int = Field(ge=0)
    answered: int = Field(ge=0)
    correct: int = Field(ge=0)
    wrong: int = Field(ge=0)
    avg_seconds: float = Field(ge=0)
    speed_series: List[SpeedPoint] = Field(default_factory=list)
    notes: Optional[str] = None

    @field_validator("duration_min")
    @classmethod
    def _duration_allowed(cls, v: int) -> int:
        if int(v) not in ALLOWED_DURATIONS:
            raise ValueError(f"duration_min must be one of {ALLOWED_DURATIONS}")
        return int(v)

    @model_validator(mode="after")
    def _counts_consistent(self):
        if self.correct > self.answered:
            raise ValueError("correct must be <= answered")
        if self.wrong != self.answered - self.correct:
            raise ValueError("wrong must equal answered - correct")
        if len(self.speed_series) != self.answered:
            raise ValueError("speed_series must have one entry per answered question")
        positions = [p.x for p in self.speed_series]
        if positions != list(range(1, len(positions) + 1)):
            raise ValueError("speed_series positions must run 1..N in order")
        return self


class NotesUpdateIn(BaseModel):
    id: str = Field(min_length=1)
    notes: str
