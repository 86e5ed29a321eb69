"""
ATLAS Ops - Quote Service

Quote creation and the forward-only quote workflow:

    draft -> pending -> approved -> converted
                    \\-> rejected

Conversion to an invoice lives in InvoiceService.convert_quote.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, FrozenSet, List, Optional
from uuid import UUID

from sqlalchemy import and_, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import DiscountType, QuoteStatus
from app.models.quote import Quote
from app.services.pricing_engine import utcnow
from app.services.pricing_service import PricingService
from app.tier_config import format_inr
from app.utils.error_handling import (
    InvalidStatusTransitionException,
    QuoteNotFoundException,
)

logger = logging.getLogger(__name__)


QUOTE_TRANSITIONS: Dict[QuoteStatus, FrozenSet[QuoteStatus]] = {
    QuoteStatus.DRAFT: frozenset({QuoteStatus.PENDING}),
    QuoteStatus.PENDING: frozenset({QuoteStatus.APPROVED, QuoteStatus.REJECTED}),
    QuoteStatus.APPROVED: frozenset({QuoteStatus.CONVERTED}),
    QuoteStatus.REJECTED: frozenset(),
    QuoteStatus.CONVERTED: frozenset(),
}


def can_transition_quote(current: QuoteStatus, new: QuoteStatus) -> bool:
    return new in QUOTE_TRANSITIONS[current]


@dataclass
class QuoteRequest:
    """A client's quote submission."""
    service_id: UUID
    client_type: str
    industry: Optional[str] = None
    region: Optional[str] = None
    complexity: str = "standard"
    addon_ids: List[UUID] = field(default_factory=list)
    coupon_code: Optional[str] = None
    user_id: Optional[UUID] = None
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_company: Optional[str] = None
    notes: Optional[str] = None
    submit: bool = True  # False keeps the quote as a draft


class QuoteService:
    """Service for quote operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.pricing = PricingService(db)

    # ===========================================
    # QUOTE NUMBER GENERATION
    # ===========================================

    async def generate_quote_number(self, as_of: Optional[datetime] = None) -> str:
        """
        Generate unique quote number.

        Format: QT-YYYYMM-NNNN (e.g., QT-202610-0001)
        """
        today = (as_of or utcnow()).date()
        prefix = f"QT-{today.year}{today.month:02d}"

        result = await self.db.execute(
            select(func.count(Quote.id)).where(Quote.quote_number.like(f"{prefix}%"))
        )
        count = result.scalar() or 0
        return f"{prefix}-{count + 1:04d}"

    # ===========================================
    # READ
    # ===========================================

    async def get_quote(self, quote_id: UUID) -> Quote:
        quote = await self.db.get(Quote, quote_id, populate_existing=True)
        if quote is None:
            raise QuoteNotFoundException(quote_id)
        return quote

    @staticmethod
    def _filters(status: Optional[QuoteStatus], user_id: Optional[UUID]) -> list:
        filters = []
        if status is not None:
            filters.append(Quote.status == status)
        if user_id is not None:
            filters.append(Quote.user_id == user_id)
        return filters

    async def list_quotes(
        self,
        status: Optional[QuoteStatus] = None,
        user_id: Optional[UUID] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Quote]:
        query = (
            select(Quote)
            .where(*self._filters(status, user_id))
            .order_by(Quote.created_at.desc(), Quote.quote_number.desc())
        )
        result = await self.db.execute(query.limit(limit).offset(offset))
        return list(result.scalars().all())

    async def count_quotes(
        self,
        status: Optional[QuoteStatus] = None,
        user_id: Optional[UUID] = None,
    ) -> int:
        result = await self.db.execute(
            select(func.count(Quote.id)).where(*self._filters(status, user_id))
        )
        return result.scalar() or 0

    # ===========================================
    # CREATE
    # ===========================================

    async def create_quote(self, request: QuoteRequest, as_of: Optional[datetime] = None) -> Quote:
        """
        Price and persist a quote.

        The coupon (if any) is validated while pricing and then redeemed
        atomically in the same transaction as the quote insert.
        """
        as_of = as_of or utcnow()
        priced = await self.pricing.preview(
            service_id=request.service_id,
            client_type=request.client_type,
            industry=request.industry,
            region=request.region,
            addon_ids=request.addon_ids,
            coupon_code=request.coupon_code,
            as_of=as_of,
        )
        breakdown = priced.breakdown

        try:
            if priced.coupon is not None:
                await self.pricing.coupons.redeem(priced.coupon.code, as_of)

            discount_percent = None
            if priced.coupon is not None and priced.coupon.discount_type == DiscountType.PERCENTAGE:
                discount_percent = breakdown.discount_percent

            quote = Quote(
                quote_number=await self.generate_quote_number(as_of),
                user_id=request.user_id,
                service_id=priced.service.id,
                service_type=priced.service.service_name,
                client_type=request.client_type,
                industry=request.industry,
                region=request.region,
                complexity=request.complexity,
                addons=[addon.name for addon in priced.addons],
                features=list(priced.service.features or []),
                coupon_code=priced.coupon.code if priced.coupon else None,
                discount_percent=discount_percent,
                estimated_price=breakdown.gross_amount,
                final_price=breakdown.subtotal,
                status=QuoteStatus.PENDING if request.submit else QuoteStatus.DRAFT,
                contact_name=request.contact_name,
                contact_email=request.contact_email,
                contact_phone=request.contact_phone,
                contact_company=request.contact_company,
                notes=request.notes,
            )
            self.db.add(quote)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(quote)
        logger.info(
            f"Quote {quote.quote_number} created for {quote.service_type}: "
            f"{format_inr(quote.final_price)} ({quote.status.value})"
        )
        return quote

    # ===========================================
    # WORKFLOW
    # ===========================================

    async def transition(self, quote_id: UUID, new_status: QuoteStatus) -> Quote:
        """
        Move a quote along the workflow.

        CONVERTED is only reachable through InvoiceService.convert_quote.
        The UPDATE only matches while the quote is still in the status it
        was read in, so two concurrent moves cannot both succeed.
        """
        quote = await self.get_quote(quote_id)
        if new_status == QuoteStatus.CONVERTED or not can_transition_quote(quote.status, new_status):
            raise InvalidStatusTransitionException("quote", quote.status.value, new_status.value)

        previous = quote.status
        result = await self.db.execute(
            update(Quote)
            .where(and_(Quote.id == quote_id, Quote.status == previous))
            .values(status=new_status)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await self.db.rollback()
            current = await self.get_quote(quote_id)
            raise InvalidStatusTransitionException("quote", current.status.value, new_status.value)

        await self.db.commit()
        quote = await self.get_quote(quote_id)

        logger.info(f"Quote {quote.quote_number}: {previous.value} -> {new_status.value}")
        return quote

    async def submit(self, quote_id: UUID) -> Quote:
        return await self.transition(quote_id, QuoteStatus.PENDING)

    async def approve(self, quote_id: UUID) -> Quote:
        return await self.transition(quote_id, QuoteStatus.APPROVED)

    async def reject(self, quote_id: UUID) -> Quote:
        return await self.transition(quote_id, QuoteStatus.REJECTED)
