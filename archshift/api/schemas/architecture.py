"""Architecture editing request schemas."""

from typing import Any, Dict
from pydantic import BaseModel, Field

from archshift.core.graph.model import Phase


class PhaseSwitchRequest(BaseModel):
    phase: Phase


class PlaceComponentRequest(BaseModel):
    """Drop a palette component into the active diagram."""
    kind: str = Field(..., description="Component kind, e.g. onprem-server")
    x: float = Field(0.0, description="Canvas x coordinate")
    y: float = Field(0.0, description="Canvas y coordinate")


class NodeDetailsUpdate(BaseModel):
    """Checklist dialog contents for one component."""
    name: str = Field("", description="Display name")
    details: Dict[str, Any] = Field(default_factory=dict)


class PositionUpdate(BaseModel):
    x: float
    y: float
