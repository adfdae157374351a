"""Session identity request schema."""

from typing import Optional
from pydantic import BaseModel, Field


class SessionRequest(BaseModel):
    """Start a session. Without a user_id an anonymous identity is issued."""
    user_id: Optional[str] = Field(None, description="Caller-supplied identity", max_length=128)
    display_name: Optional[str] = Field(None, description="Shown in the UI")
