"""
ATLAS Ops - Entitlement Schemas
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import ClientTier


class TierInfo(BaseModel):
    """One tier of the catalogue with everything it unlocks."""
    tier: ClientTier
    name: str
    description: str
    features: List[str] = Field(default_factory=list)
    modules: List[str] = Field(default_factory=list, description="Cumulative module list")


class ModuleAccessResponse(BaseModel):
    module: str
    required_tier: ClientTier
    allowed: bool
    locked: bool

    model_config = ConfigDict(from_attributes=True)


class NavigationResponse(BaseModel):
    tier: ClientTier
    modules: List[ModuleAccessResponse]


class EntitlementCheckResponse(BaseModel):
    tier: ClientTier
    module: str
    known_module: bool
    allowed: bool
    required_tier: Optional[ClientTier] = None
    upgrade_options: List[ClientTier] = Field(default_factory=list)
