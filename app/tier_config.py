"""
ATLAS Ops - Tier Configuration

Central configuration for client tiers and the portal modules they unlock.
"""

from dataclasses import dataclass, field
from typing import Dict, List

from app.config import settings
from app.models.enums import ClientTier


# =============================================================================
# MODULE REGISTRY
# =============================================================================

# Each module is assigned exactly one minimal tier.
# Order here is the portal navigation order.
MODULE_TIERS: Dict[str, ClientTier] = {
    # Basic
    "Dashboard": ClientTier.BASIC,
    "Projects": ClientTier.BASIC,
    "Files": ClientTier.BASIC,
    "Invoices": ClientTier.BASIC,
    "Tickets": ClientTier.BASIC,
    "Settings": ClientTier.BASIC,
    # Standard
    "Meetings": ClientTier.STANDARD,
    "Team Directory": ClientTier.STANDARD,
    "Feedback": ClientTier.STANDARD,
    # Advanced
    "AI Dashboard": ClientTier.ADVANCED,
    "Resources Library": ClientTier.ADVANCED,
    # Enterprise
    "MSP Monitoring": ClientTier.ENTERPRISE,
    "Priority Support": ClientTier.ENTERPRISE,
    "Custom Integrations": ClientTier.ENTERPRISE,
}


# =============================================================================
# TIER DETAILS (For upgrade prompts)
# =============================================================================

@dataclass
class TierDetails:
    """Display configuration for a tier."""
    tier: ClientTier
    name: str
    description: str
    features: List[str] = field(default_factory=list)


TIER_DETAILS: Dict[ClientTier, TierDetails] = {
    ClientTier.BASIC: TierDetails(
        tier=ClientTier.BASIC,
        name="Basic",
        description="Essential features for individuals",
        features=["Dashboard", "Projects", "Files", "Invoices", "Tickets", "Settings"],
    ),
    ClientTier.STANDARD: TierDetails(
        tier=ClientTier.STANDARD,
        name="Standard",
        description="Perfect for small businesses",
        features=["Everything in Basic", "Meetings", "Team Directory", "Feedback"],
    ),
    ClientTier.ADVANCED: TierDetails(
        tier=ClientTier.ADVANCED,
        name="Advanced",
        description="Advanced features for growing companies",
        features=["Everything in Standard", "AI Dashboard", "Resources Library"],
    ),
    ClientTier.ENTERPRISE: TierDetails(
        tier=ClientTier.ENTERPRISE,
        name="Enterprise",
        description="Full access for enterprise clients",
        features=["Everything in Advanced", "MSP Monitoring", "Priority Support", "Custom Integrations"],
    ),
}


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def get_tier_details(tier: ClientTier) -> TierDetails:
    """Get display configuration for a tier."""
    return TIER_DETAILS[tier]


def get_tier_display_name(tier: ClientTier) -> str:
    """
    Get display name for a tier.

    Args:
        tier: The tier enum value

    Returns:
        Human-readable display name (e.g., "Advanced")
    """
    details = TIER_DETAILS.get(tier)
    if details:
        return details.name
    return "Basic"


def get_modules_for_tier(tier: ClientTier) -> List[str]:
    """Get all modules available at a tier (cumulative, navigation order)."""
    return [module for module, required in MODULE_TIERS.items() if required <= tier]


def format_inr(amount) -> str:
    """Format amount as Indian Rupees."""
    return f"{settings.currency_symbol}{amount:,.2f}"
