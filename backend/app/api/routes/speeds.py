from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.services.session_store_service import get_speed_series

router = APIRouter(tags=["sessions"])


@router.get("/speeds")
def speeds_for_session(
    request: Request,
    session_id: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
):
    data = get_speed_series(db, session_id)
    return {"request_id": request.state.request_id, "data": data, "error": None}
