"""Migration scope request schema."""

from pydantic import BaseModel, Field

from archshift.core.catalog import SourceEnvironment
from archshift.core.constants import DEFAULT_TARGET_REGION


class ScopeUpdate(BaseModel):
    """Update the application scope (the "App Details" form)."""
    app_name: str = Field("", description="Application name (required)")
    source_env: str = Field(SourceEnvironment.ONPREM.value, description="onprem or aws-to-aws")
    target_region: str = Field(DEFAULT_TARGET_REGION, description="AWS region code")
