from app.engine.questions import DurationMinutes, Parity, Question, RevealMode, make_question, parity_of
from app.engine.scoring import Aggregates, SessionSummary, SpeedSample, package_summary
from app.engine.session_engine import EngineState, SessionEngine

__all__ = [
    "Aggregates",
    "DurationMinutes",
    "EngineState",
    "Parity",
    "Question",
    "RevealMode",
    "SessionEngine",
    "SessionSummary",
    "SpeedSample",
    "make_question",
    "package_summary",
    "parity_of",
]
