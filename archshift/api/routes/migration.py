"""Migration kickoff and job status routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..deps import get_current_user, get_engine
from ..responses import outcome_response
from archshift.core.errors import StoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/migrations", tags=["migrations"])


@router.post("/kickoff")
async def kickoff(
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
):
    """Derive jobs for every detailed, not-yet-migrating source component."""
    return outcome_response(engine.kickoff(user["user_id"]))


@router.get("")
async def list_jobs(
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
):
    """The caller's jobs, newest first."""
    try:
        jobs = engine.list_jobs(user["user_id"])
    except StoreError as e:
        raise HTTPException(status_code=503, detail=e.to_dict())
    return {"jobs": jobs, "count": len(jobs)}
