"""
ATLAS Ops - Pricing Service

Loads catalogue rows (service, add-ons, modifiers, coupon) and prices them
with the pure pricing engine. Read-only: coupon redemption happens in
QuoteService when a quote is actually created.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import select, and_, or_, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.enums import ModifierType
from app.models.pricing import ServicePricing, PricingAddon, PricingModifier
from app.services.coupon_service import CouponService
from app.services.pricing_engine import Coupon, PriceBreakdown, compute_final_price
from app.utils.error_handling import NotFoundException

logger = logging.getLogger(__name__)


@dataclass
class PricedSelection:
    """Catalogue rows that went into a price, plus the breakdown."""
    service: ServicePricing
    addons: List[PricingAddon]
    modifiers: List[PricingModifier]
    coupon: Optional[Coupon]
    breakdown: PriceBreakdown
    applied_modifier_keys: List[str] = field(default_factory=list)


class PricingService:
    """Catalogue-backed price computation."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.coupons = CouponService(db)

    async def get_service(self, service_id: UUID) -> ServicePricing:
        result = await self.db.execute(
            select(ServicePricing).where(
                ServicePricing.id == service_id,
                ServicePricing.is_active.is_(True),
            )
        )
        service = result.scalar_one_or_none()
        if service is None:
            raise NotFoundException("Service", service_id)
        return service

    async def get_addons(self, addon_ids: Sequence[UUID]) -> List[PricingAddon]:
        """Active add-ons by id. Any unknown or inactive id is an error."""
        if not addon_ids:
            return []
        wanted = list(dict.fromkeys(addon_ids))
        result = await self.db.execute(
            select(PricingAddon).where(
                PricingAddon.id.in_(wanted),
                PricingAddon.is_active.is_(True),
            )
        )
        found = {addon.id: addon for addon in result.scalars().all()}
        missing = [addon_id for addon_id in wanted if addon_id not in found]
        if missing:
            raise NotFoundException("Add-on", missing[0])
        # Keep request order; duplicates are charged once
        return [found[addon_id] for addon_id in wanted]

    async def get_matching_modifiers(
        self,
        client_type: Optional[str] = None,
        industry: Optional[str] = None,
        region: Optional[str] = None,
    ) -> List[PricingModifier]:
        """Active modifiers whose (type, key) matches the client attributes."""
        criteria: List[Tuple[ModifierType, str]] = [
            (modifier_type, key.strip().lower())
            for modifier_type, key in (
                (ModifierType.CLIENT_TYPE, client_type),
                (ModifierType.INDUSTRY, industry),
                (ModifierType.REGION, region),
            )
            if key
        ]
        if not criteria:
            return []

        result = await self.db.execute(
            select(PricingModifier)
            .where(
                and_(
                    PricingModifier.is_active.is_(True),
                    or_(*[
                        and_(
                            PricingModifier.modifier_type == modifier_type,
                            func.lower(PricingModifier.modifier_key) == key,
                        )
                        for modifier_type, key in criteria
                    ]),
                )
            )
            .order_by(PricingModifier.modifier_type)
        )
        return list(result.scalars().all())

    async def preview(
        self,
        service_id: UUID,
        client_type: Optional[str] = None,
        industry: Optional[str] = None,
        region: Optional[str] = None,
        addon_ids: Sequence[UUID] = (),
        coupon_code: Optional[str] = None,
        as_of: Optional[datetime] = None,
    ) -> PricedSelection:
        """
        Price a catalogue selection with the configured tax rate.

        Raises NotFoundException for unknown service/add-ons and
        CouponInvalidException for unusable coupons.
        """
        service = await self.get_service(service_id)
        addons = await self.get_addons(addon_ids)
        modifiers = await self.get_matching_modifiers(client_type, industry, region)
        coupon = await self.coupons.validate(coupon_code, as_of) if coupon_code else None

        breakdown = compute_final_price(
            base_price=service.base_price,
            modifiers=[modifier.to_domain() for modifier in modifiers],
            addons=[addon.price for addon in addons],
            coupon=coupon,
            tax_rate=settings.tax_rate,
            as_of=as_of,
        )

        logger.debug(
            f"Priced {service.service_name}: subtotal={breakdown.subtotal} "
            f"total={breakdown.total_amount} modifiers={len(modifiers)} addons={len(addons)}"
        )

        return PricedSelection(
            service=service,
            addons=addons,
            modifiers=modifiers,
            coupon=coupon,
            breakdown=breakdown,
            applied_modifier_keys=[f"{m.modifier_type.value}:{m.modifier_key}" for m in modifiers],
        )
