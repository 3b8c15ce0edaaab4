from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.schemas.sessions import SessionSummaryIn
from app.services.session_store_service import create_summary, list_summaries

router = APIRouter(tags=["sessions"])


@router.post("/sessions")
def sessions_create(request: Request, payload: SessionSummaryIn, db: Session = Depends(get_db)):
    data = create_summary(db, payload)
    return {"request_id": request.state.request_id, "data": data, "error": None}


@router.get("/sessions")
def sessions_list(
    request: Request,
    duration_min: Optional[int] = Query(default=None, ge=1),
    db: Session = Depends(get_db),
):
    data = list_summaries(db, duration_min=duration_min)
    return {"request_id": request.state.request_id, "data": data, "error": None}
