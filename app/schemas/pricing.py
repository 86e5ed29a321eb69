"""
ATLAS Ops - Pricing Schemas

Money leaves the API as a 2-decimal string ("81774.00") so clients never
see binary float artefacts.
"""

from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Annotated, List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field, PlainSerializer, field_validator

from app.models.enums import DiscountType, ModifierType


def _money_str(value: Decimal) -> str:
    return str(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


Money = Annotated[Decimal, PlainSerializer(_money_str, return_type=str)]


# =============================================================================
# PURE CALCULATION
# =============================================================================

class ModifierInput(BaseModel):
    modifier_type: ModifierType
    key: str = Field(..., min_length=1, max_length=100)
    multiplier: Decimal
    active: bool = True


class CouponInput(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    discount_type: DiscountType
    value: Decimal
    max_uses: Optional[int] = Field(None, ge=0)
    current_uses: int = Field(0, ge=0)
    valid_until: Optional[Union[datetime, date]] = None
    active: bool = True

    @field_validator('valid_until', mode='before')
    @classmethod
    def date_only_expiry(cls, v):
        """Keep "YYYY-MM-DD" as a date so it covers the whole day."""
        if isinstance(v, str) and len(v) == 10:
            return date.fromisoformat(v)
        return v


class PriceCalculateRequest(BaseModel):
    """Raw inputs for the price composer. Range checks happen in the engine."""
    base_price: Decimal
    modifiers: List[ModifierInput] = Field(default_factory=list)
    addons: List[Decimal] = Field(default_factory=list, description="Add-on prices")
    coupon: Optional[CouponInput] = None
    tax_percent: Optional[Decimal] = Field(None, description="Defaults to the configured tax rate")
    as_of: Optional[datetime] = None


class PriceBreakdownResponse(BaseModel):
    base_price: Money
    multiplier: Decimal
    modified_base: Money
    addons_total: Money
    gross_amount: Money
    discount_amount: Money
    subtotal: Money
    tax_rate: Decimal
    tax_amount: Money
    total_amount: Money
    coupon_code: Optional[str] = None
    currency: str = "INR"


# =============================================================================
# CATALOGUE-BACKED PREVIEW
# =============================================================================

class PricePreviewRequest(BaseModel):
    service_id: UUID
    client_type: Optional[str] = Field(None, max_length=100)
    industry: Optional[str] = Field(None, max_length=100)
    region: Optional[str] = Field(None, max_length=100)
    addon_ids: List[UUID] = Field(default_factory=list)
    coupon_code: Optional[str] = Field(None, max_length=50)


class PricePreviewResponse(BaseModel):
    service_id: UUID
    service_name: str
    plan_tier: Optional[str] = None
    applied_modifiers: List[str] = Field(default_factory=list)
    addons: List[str] = Field(default_factory=list)
    breakdown: PriceBreakdownResponse


# =============================================================================
# COUPONS
# =============================================================================

class CouponValidateRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)


class CouponValidateResponse(BaseModel):
    valid: bool = True
    code: str
    discount_type: DiscountType
    value: Money
    remaining_uses: Optional[int] = None
    valid_until: Optional[Union[datetime, date]] = None
