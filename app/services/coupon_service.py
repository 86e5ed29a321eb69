"""
ATLAS Ops - Coupon Service

Lookup, validation and redemption of coupon codes.

Redemption is a single conditional UPDATE so concurrent requests cannot
push `current_uses` past `max_uses`.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update, func, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.pricing import CouponCode
from app.services.pricing_engine import Coupon, utcnow
from app.utils.error_handling import CouponInvalidException

logger = logging.getLogger(__name__)


def normalize_code(code: str) -> str:
    return code.strip().upper()


class CouponService:
    """
    Handle coupon code operations.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_code(self, code: str) -> Optional[CouponCode]:
        """Case-insensitive lookup."""
        result = await self.db.execute(
            select(CouponCode).where(func.upper(CouponCode.code) == normalize_code(code))
        )
        return result.scalar_one_or_none()

    async def validate(self, code: str, as_of: Optional[datetime] = None) -> Coupon:
        """
        Return the coupon as a pricing-engine Coupon if it is usable.

        Raises CouponInvalidException with reason not_found, inactive,
        expired or exhausted.
        """
        row = await self.get_by_code(code)
        if row is None:
            raise CouponInvalidException(normalize_code(code), "not_found")

        coupon = row.to_domain()
        reason = coupon.usability_error(as_of)
        if reason is not None:
            raise CouponInvalidException(coupon.code, reason)
        return coupon

    async def redeem(self, code: str, as_of: Optional[datetime] = None) -> None:
        """
        Atomically consume one use of a coupon.

        Increments only if the coupon is active, unexpired and below its
        usage cap at the moment the UPDATE runs. Does not commit.
        """
        as_of = as_of or utcnow()
        normalized = normalize_code(code)

        result = await self.db.execute(
            update(CouponCode)
            .where(
                and_(
                    func.upper(CouponCode.code) == normalized,
                    CouponCode.is_active.is_(True),
                    or_(
                        CouponCode.max_uses.is_(None),
                        CouponCode.current_uses < CouponCode.max_uses,
                    ),
                    or_(
                        CouponCode.valid_until.is_(None),
                        CouponCode.valid_until >= as_of,
                    ),
                )
            )
            .values(current_uses=CouponCode.current_uses + 1)
            .execution_options(synchronize_session=False)
        )

        if result.rowcount != 1:
            # Re-read to report why; the UPDATE itself is the guard
            row = await self.get_by_code(normalized)
            reason = "not_found"
            if row is not None:
                await self.db.refresh(row)
                reason = row.to_domain().usability_error(as_of) or "exhausted"
            logger.info(f"Coupon {normalized} redemption refused: {reason}")
            raise CouponInvalidException(normalized, reason)

        logger.info(f"Coupon {normalized} redeemed")
