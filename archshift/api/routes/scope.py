"""Migration scope routes (application details)."""

import logging

from fastapi import APIRouter, Depends

from ..deps import get_current_user, get_engine
from ..responses import outcome_response
from ..schemas import ScopeUpdate
from archshift.core.constants import TARGET_REGIONS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scope", tags=["scope"])


@router.get("")
async def get_scope(
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
):
    return {
        "scope": engine.get_scope(user["user_id"]),
        "regions": [{"code": code, "name": name} for code, name in TARGET_REGIONS.items()],
    }


@router.put("")
async def update_scope(
    data: ScopeUpdate,
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
):
    outcome = engine.update_scope(
        user["user_id"], data.app_name, data.source_env, data.target_region
    )
    return outcome_response(outcome)
