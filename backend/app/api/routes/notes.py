from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.schemas.sessions import NotesUpdateIn
from app.services.session_store_service import update_notes

router = APIRouter(tags=["sessions"])


@router.post("/notes")
def notes_update(request: Request, payload: NotesUpdateIn, db: Session = Depends(get_db)):
    data = update_notes(db, payload.id, payload.notes)
    return {"request_id": request.state.request_id, "data": data, "error": None}
