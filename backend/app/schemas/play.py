from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from app.core.config import ALLOWED_DURATIONS, settings


class PlayStartIn(BaseModel):
    duration_min: int = Field(default_factory=lambda: settings.QUIZ_DEFAULT_DURATION_MIN)
    reveal_mode: Literal["none", "after"] = "none"

    @field_validator("duration_min")
    @classmethod
    def _duration_allowed(cls, v: int) -> int:
        if int(v) not in ALLOWED_DURATIONS:
            raise ValueError(f"duration_min must be one of {ALLOWED_DURATIONS}")
        return int(v)


class PlayAnswerIn(BaseModel):
    question_id: str = Field(min_length=1)
    answer: Literal["odd", "even"]


class NoteDraftIn(BaseModel):
    notes: str
