"""
ATLAS Ops - Entitlement Service

Decides which portal modules a client tier may use.
Pure lookups over the static registry in app.tier_config; no I/O.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from app.models.enums import ClientTier
from app.tier_config import MODULE_TIERS, get_modules_for_tier
from app.utils.error_handling import ErrorCode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModuleAccess:
    """Access decision for one navigation entry."""
    module: str
    required_tier: ClientTier
    allowed: bool

    @property
    def locked(self) -> bool:
        # Locked modules are rendered with an upgrade prompt, not hidden
        return not self.allowed


def parse_tier(value: Union[ClientTier, str, None]) -> ClientTier:
    """
    Coerce a raw tier value to ClientTier.

    Unknown or missing values fall back to BASIC, the least-privileged tier.
    """
    if isinstance(value, ClientTier):
        return value
    if isinstance(value, str):
        try:
            return ClientTier(value.strip().lower())
        except ValueError:
            pass
    logger.warning(f"Unknown client tier {value!r}, treating as {ClientTier.BASIC.value}")
    return ClientTier.BASIC


def get_required_tier(module: str) -> Optional[ClientTier]:
    """Minimal tier for a module, or None if the module is not registered."""
    return MODULE_TIERS.get(module)


def is_module_allowed(client_tier: Union[ClientTier, str], module: str) -> bool:
    """
    Check whether a client on `client_tier` may access `module`.

    Unregistered modules are denied rather than raising.
    """
    required = get_required_tier(module)
    if required is None:
        logger.debug(f"{ErrorCode.UNKNOWN_MODULE.value}: {module!r} is not registered, denying access")
        return False
    return required <= parse_tier(client_tier)


def get_upgrade_options(client_tier: Union[ClientTier, str], module: str) -> List[ClientTier]:
    """
    Tiers that unlock `module`, lowest first.

    Empty when the module is already allowed or is not registered.
    """
    required = get_required_tier(module)
    if required is None or required <= parse_tier(client_tier):
        return []
    return sorted(tier for tier in ClientTier if tier >= required)


def resolve_navigation(client_tier: Union[ClientTier, str]) -> List[ModuleAccess]:
    """Every registered module with its access decision for `client_tier`."""
    tier = parse_tier(client_tier)
    return [
        ModuleAccess(module=module, required_tier=required, allowed=required <= tier)
        for module, required in MODULE_TIERS.items()
    ]


def get_allowed_modules(client_tier: Union[ClientTier, str]) -> List[str]:
    """Modules usable at `client_tier`."""
    return get_modules_for_tier(parse_tier(client_tier))
