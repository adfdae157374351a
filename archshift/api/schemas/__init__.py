"""Pydantic schemas for API request models."""

from .session import SessionRequest
from .scope import ScopeUpdate
from .architecture import (
    PhaseSwitchRequest,
    PlaceComponentRequest,
    NodeDetailsUpdate,
    PositionUpdate,
)

__all__ = [
    'SessionRequest',
    'ScopeUpdate',
    'PhaseSwitchRequest',
    'PlaceComponentRequest',
    'NodeDetailsUpdate',
    'PositionUpdate',
]
