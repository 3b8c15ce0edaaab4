from app.models.session_summary import SessionSummaryRecord
from app.models.session_speed import SessionSpeed

__all__ = [
    "SessionSummaryRecord",
    "SessionSpeed",
]
