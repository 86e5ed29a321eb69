"""
ATLAS Ops - Pricing Catalogue Models

Services, add-ons, client-attribute modifiers and coupon codes.
Rows convert to the pure pricing types via `to_domain()`.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import (
    String, Text, Integer, Boolean, DateTime, Numeric,
    Enum as SQLEnum, JSON, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel
from app.models.enums import ClientTier, DiscountType, ModifierType

if TYPE_CHECKING:
    from app.services.pricing_engine import Coupon, PriceModifier


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class ServicePricing(BaseModel):
    """Base price for a sellable service plan."""
    __tablename__ = "service_pricing"

    service_name: Mapped[str] = mapped_column(String(150), nullable=False)
    service_category: Mapped[str] = mapped_column(String(100), nullable=False)
    plan_tier: Mapped[ClientTier] = mapped_column(
        SQLEnum(ClientTier, name="client_tier", values_callable=_enum_values),
        nullable=False,
        default=ClientTier.BASIC,
    )
    base_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    features: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class PricingAddon(BaseModel):
    """Flat-priced add-on module (not subject to modifiers)."""
    __tablename__ = "pricing_addons"

    name: Mapped[str] = mapped_column(String(150), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class PricingModifier(BaseModel):
    """Multiplier applied to a base price for a client type, industry or region."""
    __tablename__ = "pricing_modifiers"
    __table_args__ = (
        UniqueConstraint("modifier_type", "modifier_key", name="uq_pricing_modifiers_type_key"),
    )

    modifier_type: Mapped[ModifierType] = mapped_column(
        SQLEnum(ModifierType, name="modifier_type", values_callable=_enum_values),
        nullable=False,
    )
    modifier_key: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="e.g. enterprise, healthcare, india"
    )
    multiplier: Mapped[Decimal] = mapped_column(Numeric(6, 3), nullable=False, default=Decimal("1"))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    def to_domain(self) -> "PriceModifier":
        from app.services.pricing_engine import PriceModifier

        return PriceModifier(
            modifier_type=self.modifier_type,
            key=self.modifier_key,
            multiplier=self.multiplier,
            active=bool(self.is_active),
        )


class CouponCode(BaseModel):
    """
    Discount coupon.

    `current_uses` is only ever incremented through
    CouponService.redeem, which uses a conditional UPDATE.
    """
    __tablename__ = "coupon_codes"

    code: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        index=True,
        comment="Stored upper-case (e.g. WELCOME10)"
    )
    discount_type: Mapped[DiscountType] = mapped_column(
        SQLEnum(DiscountType, name="discount_type", values_callable=_enum_values),
        nullable=False,
    )
    discount_value: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        comment="Percentage (0-100) or fixed amount"
    )
    max_uses: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="Null = unlimited"
    )
    current_uses: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    valid_until: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Null = never expires"
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    def to_domain(self) -> "Coupon":
        from app.services.pricing_engine import Coupon

        return Coupon(
            code=self.code,
            discount_type=self.discount_type,
            value=self.discount_value,
            max_uses=self.max_uses,
            current_uses=self.current_uses or 0,
            valid_until=self.valid_until,
            active=bool(self.is_active),
        )
