from fastapi import APIRouter

from app.engine.registry import registry


router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    return {"status": "ok", "clients": registry.client_count()}
