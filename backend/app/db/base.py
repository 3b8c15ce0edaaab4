from app.db.base_class import Base

# Import every model so Base.metadata knows all tables
from app.models.session_summary import SessionSummaryRecord
from app.models.session_speed import SessionSpeed

__all__ = ["Base", "SessionSummaryRecord", "SessionSpeed"]
