"""Session identity routes.

There are no passwords: a session carries either a caller-supplied user id
or an anonymous one issued here, stored in the signed session cookie.
"""

import logging
from typing import Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, Request

from ..deps import get_engine
from ..schemas import SessionRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/session")
async def start_session(
    request: Request,
    data: Optional[SessionRequest] = None,
):
    """Start (or replace) the session identity."""
    data = data or SessionRequest()
    anonymous = not (data.user_id or "").strip()
    user_id = f"anon-{uuid4().hex}" if anonymous else data.user_id.strip()

    request.session["user_id"] = user_id
    request.session["display_name"] = data.display_name or ("Guest" if anonymous else user_id)
    request.session["anonymous"] = anonymous
    logger.info(f"Session started for {user_id}")

    return {
        "success": True,
        "user": {
            "user_id": user_id,
            "display_name": request.session["display_name"],
            "anonymous": anonymous,
        },
    }


@router.get("/me")
async def get_me(request: Request):
    """Get the current session identity."""
    user_id = request.session.get("user_id")
    if not user_id:
        return {"success": True, "authenticated": False, "user": None}
    return {
        "success": True,
        "authenticated": True,
        "user": {
            "user_id": user_id,
            "display_name": request.session.get("display_name"),
            "anonymous": request.session.get("anonymous", True),
        },
    }


@router.post("/logout")
async def logout(request: Request, engine=Depends(get_engine)):
    """End the session and drop its in-memory editing state."""
    user_id = request.session.get("user_id")
    if user_id:
        engine.end_session(user_id)
    request.session.clear()
    return {"success": True, "message": "Logged out successfully"}
