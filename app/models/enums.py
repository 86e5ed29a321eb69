"""
ATLAS Ops - Domain Enums

Shared enums for tiers, pricing and the quote/invoice workflow.
Kept free of SQLAlchemy imports so the pricing engine and the tier
config can use them without pulling in the ORM.
"""

from enum import Enum


class ClientTier(str, Enum):
    """
    Client entitlement tiers.

    Totally ordered: BASIC < STANDARD < ADVANCED < ENTERPRISE.
    A higher tier includes every module of the tiers below it.
    """
    BASIC = "basic"
    STANDARD = "standard"
    ADVANCED = "advanced"
    ENTERPRISE = "enterprise"

    @property
    def rank(self) -> int:
        return TIER_RANK[self]

    # str already defines these lexicographically ("advanced" < "basic"),
    # so all four must be overridden.
    def __lt__(self, other):
        if not isinstance(other, ClientTier):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, ClientTier):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, ClientTier):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, ClientTier):
            return NotImplemented
        return self.rank >= other.rank


TIER_RANK = {
    ClientTier.BASIC: 0,
    ClientTier.STANDARD: 1,
    ClientTier.ADVANCED: 2,
    ClientTier.ENTERPRISE: 3,
}


class ModifierType(str, Enum):
    """Client attribute a pricing modifier is keyed on."""
    CLIENT_TYPE = "client_type"
    INDUSTRY = "industry"
    REGION = "region"


class DiscountType(str, Enum):
    """Coupon discount types."""
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class QuoteStatus(str, Enum):
    """Quote workflow. REJECTED and CONVERTED are terminal."""
    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CONVERTED = "converted"


class InvoiceStatus(str, Enum):
    """Invoice workflow. PAID and CANCELLED are terminal."""
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"
