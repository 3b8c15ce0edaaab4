from __future__ import annotations

from sqlalchemy import Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base_class import Base


class SessionSpeed(Base):
    __tablename__ = "session_speeds"
    __table_args__ = (UniqueConstraint("session_id", "question_index", name="uq_session_speeds_session_index"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    session_id: Mapped[str] = mapped_column(ForeignKey("sessions.id"), index=True, nullable=False)
    # 1-based rank among answered questions, not the position in the full question list.
    question_index: Mapped[int] = mapped_column(Integer, nullable=False)
    seconds: Mapped[float] = mapped_column(Float, nullable=False)

    session: Mapped["SessionSummaryRecord"] = relationship(back_populates="speeds")
