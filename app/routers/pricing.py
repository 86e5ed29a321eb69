"""
ATLAS Ops - Pricing Router

- POST /calculate: price composer over raw numbers (no database)
- POST /preview: price a catalogue selection without creating a quote
- POST /coupons/validate: check a coupon code without redeeming it
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_async_session
from app.schemas.pricing import (
    CouponValidateRequest,
    CouponValidateResponse,
    PriceBreakdownResponse,
    PriceCalculateRequest,
    PricePreviewRequest,
    PricePreviewResponse,
)
from app.services.coupon_service import CouponService
from app.services.pricing_engine import (
    Coupon,
    PriceBreakdown,
    PriceModifier,
    compute_final_price,
    tax_rate_from_percent,
)
from app.services.pricing_service import PricingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pricing", tags=["Pricing"])


def _breakdown_response(breakdown: PriceBreakdown) -> PriceBreakdownResponse:
    return PriceBreakdownResponse(
        base_price=breakdown.base_price,
        multiplier=breakdown.multiplier,
        modified_base=breakdown.modified_base,
        addons_total=breakdown.addons_total,
        gross_amount=breakdown.gross_amount,
        discount_amount=breakdown.discount_amount,
        subtotal=breakdown.subtotal,
        tax_rate=breakdown.tax_rate,
        tax_amount=breakdown.tax_amount,
        total_amount=breakdown.total_amount,
        coupon_code=breakdown.coupon_code,
        currency=settings.currency_code,
    )


@router.post("/calculate", response_model=PriceBreakdownResponse)
async def calculate_price(request: PriceCalculateRequest):
    """Compose a price from raw inputs. Nothing is read or written."""
    coupon = None
    if request.coupon is not None:
        coupon = Coupon(
            code=request.coupon.code.strip().upper(),
            discount_type=request.coupon.discount_type,
            value=request.coupon.value,
            max_uses=request.coupon.max_uses,
            current_uses=request.coupon.current_uses,
            valid_until=request.coupon.valid_until,
            active=request.coupon.active,
        )

    tax_rate = (
        tax_rate_from_percent(request.tax_percent)
        if request.tax_percent is not None
        else settings.tax_rate
    )

    breakdown = compute_final_price(
        base_price=request.base_price,
        modifiers=[
            PriceModifier(
                modifier_type=m.modifier_type,
                key=m.key,
                multiplier=m.multiplier,
                active=m.active,
            )
            for m in request.modifiers
        ],
        addons=request.addons,
        coupon=coupon,
        tax_rate=tax_rate,
        as_of=request.as_of,
    )
    return _breakdown_response(breakdown)


@router.post("/preview", response_model=PricePreviewResponse)
async def preview_price(
    request: PricePreviewRequest,
    db: AsyncSession = Depends(get_async_session),
):
    """Price a catalogue selection with the configured tax rate."""
    priced = await PricingService(db).preview(
        service_id=request.service_id,
        client_type=request.client_type,
        industry=request.industry,
        region=request.region,
        addon_ids=request.addon_ids,
        coupon_code=request.coupon_code,
    )
    return PricePreviewResponse(
        service_id=priced.service.id,
        service_name=priced.service.service_name,
        plan_tier=priced.service.plan_tier.value if priced.service.plan_tier else None,
        applied_modifiers=priced.applied_modifier_keys,
        addons=[addon.name for addon in priced.addons],
        breakdown=_breakdown_response(priced.breakdown),
    )


@router.post("/coupons/validate", response_model=CouponValidateResponse)
async def validate_coupon(
    request: CouponValidateRequest,
    db: AsyncSession = Depends(get_async_session),
):
    """Validate a coupon code. Unusable codes yield a 422 with the reason."""
    coupon = await CouponService(db).validate(request.code)
    return CouponValidateResponse(
        code=coupon.code,
        discount_type=coupon.discount_type,
        value=coupon.value,
        remaining_uses=coupon.remaining_uses,
        valid_until=coupon.valid_until,
    )
