"""
ATLAS Ops - SQLAlchemy Models Package

This package contains all database models for the application.
"""

from app.models.base import BaseModel, TimestampMixin
from app.models.enums import (
    ClientTier,
    ModifierType,
    DiscountType,
    QuoteStatus,
    InvoiceStatus,
)
from app.models.pricing import ServicePricing, PricingAddon, PricingModifier, CouponCode
from app.models.quote import Quote
from app.models.invoice import Invoice

__all__ = [
    "BaseModel",
    "TimestampMixin",
    "ClientTier",
    "ModifierType",
    "DiscountType",
    "QuoteStatus",
    "InvoiceStatus",
    "ServicePricing",
    "PricingAddon",
    "PricingModifier",
    "CouponCode",
    "Quote",
    "Invoice",
]
