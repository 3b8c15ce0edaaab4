"""Common FastAPI dependencies.

There is no login. The browser page generates a random client id once and
sends it on every play call in the ``X-Client-Id`` header; the id selects the
client's engine and dashboard slot.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Header, HTTPException

from app.db.session import get_db

__all__ = ["get_db", "get_client_id_optional", "require_client_id"]

MAX_CLIENT_ID_LEN = 64


def get_client_id_optional(
    x_client_id: Optional[str] = Header(default=None, alias="X-Client-Id"),
) -> Optional[str]:
    if not x_client_id:
        return None
    cid = str(x_client_id).strip()
    if not cid or len(cid) > MAX_CLIENT_ID_LEN:
        return None
    return cid


def require_client_id(
    x_client_id: Optional[str] = Header(default=None, alias="X-Client-Id"),
) -> str:
    cid = get_client_id_optional(x_client_id)
    if not cid:
        raise HTTPException(status_code=401, detail={"code": "NOT_AUTHENTICATED", "message": "Missing X-Client-Id"})
    return cid
