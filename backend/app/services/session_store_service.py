from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.session_speed import SessionSpeed
from app.models.session_summary import SessionSummaryRecord
from app.schemas.sessions import SessionSummaryIn

logger = logging.getLogger(__name__)


def _persistence_error(message: str) -> HTTPException:
    return HTTPException(status_code=500, detail={"code": "PERSISTENCE_ERROR", "message": message})


def summary_to_dict(row: SessionSummaryRecord) -> Dict[str, Any]:
    return {
        "id": str(row.id),
        "duration_min": int(row.duration_min),
        "started_at": int(row.started_at),
        "ended_at": int(row.ended_at),
        "answered": int(row.answered),
        "correct": int(row.correct),
        "wrong": int(row.wrong),
        "avg_seconds": float(row.avg_seconds),
        "notes": row.notes,
        "created_at": row.created_at.isoformat() if row.created_at else None,
    }


def create_summary(db: Session, payload: SessionSummaryIn) -> Dict[str, Any]:
    """Insert one summary plus its speed rows in a single transaction.

    A second create for an id that already exists is accepted and leaves the
    stored rows untouched.
    """

    existing = db.query(SessionSummaryRecord).filter(SessionSummaryRecord.id == payload.id).first()
    if existing:
        logger.info("summary %s already stored, skipping insert", payload.id)
        return {"ok": True, "created": False}

    row = SessionSummaryRecord(
        id=payload.id,
        duration_min=int(payload.duration_min),
        started_at=int(payload.started_at),
        ended_at=int(payload.ended_at),
        answered=int(payload.answered),
        correct=int(payload.correct),
        wrong=int(payload.wrong),
        avg_seconds=float(payload.avg_seconds),
        notes=payload.notes,
    )
    row.speeds = [
        SessionSpeed(question_index=int(p.x), seconds=float(p.seconds)) for p in payload.speed_series
    ]

    try:
        db.add(row)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("insert summary %s failed: %s", payload.id, e)
        raise _persistence_error("Insert failed")

    return {"ok": True, "created": True}


def list_summaries(db: Session, *, duration_min: Optional[int] = None) -> List[Dict[str, Any]]:
    q = db.query(SessionSummaryRecord)
    if duration_min is not None:
        q = q.filter(SessionSummaryRecord.duration_min == int(duration_min))
    rows = q.order_by(SessionSummaryRecord.created_at.desc(), SessionSummaryRecord.ended_at.desc()).all()
    return [summary_to_dict(r) for r in rows]


def get_speed_series(db: Session, summary_id: str) -> List[Dict[str, Any]]:
    rows = (
        db.query(SessionSpeed)
        .filter(SessionSpeed.session_id == str(summary_id))
        .order_by(SessionSpeed.question_index.asc())
        .all()
    )
    return [{"x": int(r.question_index), "seconds": float(r.seconds)} for r in rows]


def update_notes(db: Session, summary_id: str, notes: str) -> Dict[str, Any]:
    row = db.query(SessionSummaryRecord).filter(SessionSummaryRecord.id == str(summary_id)).first()
    if not row:
        raise HTTPException(status_code=404, detail={"code": "NOT_FOUND", "message": "Session not found"})

    row.notes = notes
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("update notes for %s failed: %s", summary_id, e)
        raise _persistence_error("Update failed")

    return {"ok": True}
