from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from app.api.deps import require_client_id
from app.engine.registry import PlayRegistry, PlayerSlot, get_registry
from app.engine.session_engine import EngineState
from app.schemas.play import NoteDraftIn, PlayAnswerIn, PlayStartIn

router = APIRouter(tags=["play"])


async def get_slot(
    client_id: str = Depends(require_client_id),
    reg: PlayRegistry = Depends(get_registry),
) -> PlayerSlot:
    # async so eviction stops tickers on the event loop thread
    return reg.get(client_id)


def _invalid_state(message: str) -> HTTPException:
    return HTTPException(status_code=409, detail={"code": "INVALID_STATE", "message": message})


def _ok(request: Request, data):
    return {"request_id": request.state.request_id, "data": data, "error": None}


def _require_dashboard_mode(slot: PlayerSlot) -> None:
    slot.engine.tick()
    if slot.engine.state == EngineState.running:
        raise _invalid_state("Dashboard is unavailable while a session is running")


@router.post("/play/start")
async def play_start(request: Request, payload: PlayStartIn, slot: PlayerSlot = Depends(get_slot)):
    slot.start(payload.duration_min, payload.reveal_mode)
    return _ok(request, slot.engine.snapshot())


@router.get("/play/state")
async def play_state(request: Request, slot: PlayerSlot = Depends(get_slot)):
    slot.engine.tick()
    return _ok(request, slot.engine.snapshot())


@router.post("/play/answer")
async def play_answer(request: Request, payload: PlayAnswerIn, slot: PlayerSlot = Depends(get_slot)):
    accepted = slot.engine.answer(payload.question_id, payload.answer)
    data = slot.engine.snapshot()
    data["accepted"] = accepted
    return _ok(request, data)


@router.post("/play/page/next")
async def play_next_page(request: Request, slot: PlayerSlot = Depends(get_slot)):
    slot.engine.tick()
    slot.engine.advance_page()
    return _ok(request, slot.engine.snapshot())


@router.post("/play/page/prev")
async def play_prev_page(request: Request, slot: PlayerSlot = Depends(get_slot)):
    slot.engine.tick()
    slot.engine.previous_page()
    return _ok(request, slot.engine.snapshot())


@router.post("/play/acknowledge")
async def play_acknowledge(request: Request, slot: PlayerSlot = Depends(get_slot)):
    slot.engine.tick()
    summary = slot.acknowledge()
    if summary is None:
        raise _invalid_state("Session is not finished")
    return _ok(request, {"summary": summary.to_payload(), "state": slot.engine.state.value})


@router.post("/play/reset")
async def play_reset(request: Request, slot: PlayerSlot = Depends(get_slot)):
    slot.reset()
    return _ok(request, slot.engine.snapshot())


@router.get("/play/dashboard")
async def dashboard_list(
    request: Request,
    duration_min: Optional[int] = Query(default=None, ge=1),
    slot: PlayerSlot = Depends(get_slot),
):
    _require_dashboard_mode(slot)
    rows = await slot.dashboard.load(duration_min)
    data = {
        "duration_min": slot.dashboard.duration_filter,
        "sessions": rows,
        "drafts": dict(slot.dashboard.drafts),
    }
    return _ok(request, data)


@router.get("/play/dashboard/{summary_id}/speeds")
async def dashboard_speeds(request: Request, summary_id: str, slot: PlayerSlot = Depends(get_slot)):
    _require_dashboard_mode(slot)
    series = await slot.dashboard.speed_series(summary_id)
    return _ok(request, series)


@router.put("/play/dashboard/{summary_id}/draft")
async def dashboard_set_draft(
    request: Request,
    summary_id: str,
    payload: NoteDraftIn,
    slot: PlayerSlot = Depends(get_slot),
):
    _require_dashboard_mode(slot)
    slot.dashboard.set_draft(summary_id, payload.notes)
    return _ok(request, {"id": summary_id, "notes": payload.notes})


@router.post("/play/dashboard/{summary_id}/save")
async def dashboard_save_note(request: Request, summary_id: str, slot: PlayerSlot = Depends(get_slot)):
    _require_dashboard_mode(slot)
    saved = await slot.dashboard.save_note(summary_id)
    return _ok(request, {"id": summary_id, "saved": saved, "notes": slot.dashboard.drafts.get(summary_id, "")})
