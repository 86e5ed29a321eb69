"""
ATLAS Ops - Entitlements Router

Read-only views over the tier/module registry. Access decisions are pure
functions of (tier, module), so no database session is involved.
"""

import logging
from typing import List

from fastapi import APIRouter, Query

from app.models.enums import ClientTier
from app.schemas.entitlement import (
    EntitlementCheckResponse,
    ModuleAccessResponse,
    NavigationResponse,
    TierInfo,
)
from app.services.entitlement_service import (
    get_required_tier,
    get_upgrade_options,
    is_module_allowed,
    parse_tier,
    resolve_navigation,
)
from app.tier_config import get_modules_for_tier, get_tier_details

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/entitlements", tags=["Entitlements"])


@router.get("/tiers", response_model=List[TierInfo])
async def list_tiers():
    """All tiers, lowest first, with the modules each one unlocks."""
    tiers = []
    for tier in sorted(ClientTier):
        details = get_tier_details(tier)
        tiers.append(
            TierInfo(
                tier=tier,
                name=details.name,
                description=details.description,
                features=details.features,
                modules=get_modules_for_tier(tier),
            )
        )
    return tiers


@router.get("/navigation", response_model=NavigationResponse)
async def get_navigation(
    tier: str = Query(ClientTier.BASIC.value, description="Client tier"),
):
    """Every module with allowed/locked flags for the given tier."""
    client_tier = parse_tier(tier)
    modules = [
        ModuleAccessResponse(
            module=entry.module,
            required_tier=entry.required_tier,
            allowed=entry.allowed,
            locked=entry.locked,
        )
        for entry in resolve_navigation(client_tier)
    ]
    return NavigationResponse(tier=client_tier, modules=modules)


@router.get("/check", response_model=EntitlementCheckResponse)
async def check_module_access(
    module: str = Query(..., min_length=1),
    tier: str = Query(ClientTier.BASIC.value, description="Client tier"),
):
    """Whether `tier` may open `module`, plus the tiers that would unlock it."""
    client_tier = parse_tier(tier)
    required = get_required_tier(module)
    return EntitlementCheckResponse(
        tier=client_tier,
        module=module,
        known_module=required is not None,
        allowed=is_module_allowed(client_tier, module),
        required_tier=required,
        upgrade_options=get_upgrade_options(client_tier, module),
    )
