"""Architecture editing routes.

  GET    /architecture                                 full session state
  GET    /architecture/palette                         kinds for the active phase
  POST   /architecture/phase                           switch source/target
  POST   /architecture/nodes                           place a component
  PUT    /architecture/{phase}/nodes/{node_id}         save checklist details
  PUT    /architecture/{phase}/nodes/{node_id}/position
  DELETE /architecture/{phase}/nodes/{node_id}
  POST   /architecture/{phase}/nodes/{node_id}/click   two-click connect gesture
  POST   /architecture/confirm                         toggle source confirmation
  GET    /architecture/{phase}/validation              guidance report
  POST   /architecture/save                            manual save
"""

import logging

from fastapi import APIRouter, Depends

from ..deps import get_current_user, get_engine
from ..responses import outcome_response
from ..schemas import (
    NodeDetailsUpdate,
    PhaseSwitchRequest,
    PlaceComponentRequest,
    PositionUpdate,
)
from archshift.core.graph.model import Phase

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/architecture", tags=["architecture"])


@router.get("")
async def get_architecture(
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
):
    return engine.get_state(user["user_id"])


@router.get("/palette")
async def get_palette(
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
):
    components = engine.palette(user["user_id"])
    return {"components": components, "count": len(components)}


@router.post("/phase")
async def switch_phase(
    data: PhaseSwitchRequest,
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
):
    return outcome_response(engine.switch_phase(user["user_id"], data.phase))


@router.post("/nodes", status_code=201)
async def place_component(
    data: PlaceComponentRequest,
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
):
    outcome = engine.place_component(user["user_id"], data.kind, (data.x, data.y))
    return outcome_response(outcome)


@router.put("/{phase}/nodes/{node_id}")
async def save_node_details(
    phase: Phase,
    node_id: int,
    data: NodeDetailsUpdate,
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
):
    outcome = engine.save_node_details(user["user_id"], phase, node_id, data.name, data.details)
    return outcome_response(outcome)


@router.put("/{phase}/nodes/{node_id}/position")
async def move_component(
    phase: Phase,
    node_id: int,
    data: PositionUpdate,
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
):
    outcome = engine.move_component(user["user_id"], phase, node_id, (data.x, data.y))
    return outcome_response(outcome)


@router.delete("/{phase}/nodes/{node_id}")
async def delete_component(
    phase: Phase,
    node_id: int,
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
):
    return outcome_response(engine.delete_component(user["user_id"], phase, node_id))


@router.post("/{phase}/nodes/{node_id}/click")
async def click_node(
    phase: Phase,
    node_id: int,
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
):
    return outcome_response(engine.click_node(user["user_id"], phase, node_id))


@router.post("/confirm")
async def toggle_source_confirmation(
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
):
    return outcome_response(engine.toggle_source_confirmation(user["user_id"]))


@router.get("/{phase}/validation")
async def get_validation(
    phase: Phase,
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
):
    return engine.validate_phase(user["user_id"], phase)


@router.post("/save")
async def save_architecture(
    user: dict = Depends(get_current_user),
    engine=Depends(get_engine),
):
    return outcome_response(engine.save(user["user_id"]))
