"""
ATLAS Ops - Coupon Service Tests

Lookup, validation and atomic redemption against the database.
"""

from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import DiscountType
from app.services.coupon_service import CouponService, normalize_code
from app.services.pricing_engine import utcnow
from app.utils.error_handling import CouponInvalidException


class TestCouponLookup:

    def test_normalize_code(self):
        assert normalize_code("  save10 ") == "SAVE10"

    async def test_lookup_is_case_insensitive(self, db_session: AsyncSession, save10_coupon):
        service = CouponService(db_session)
        row = await service.get_by_code("save10")
        assert row is not None
        assert row.id == save10_coupon.id

    async def test_lookup_missing(self, db_session: AsyncSession):
        assert await CouponService(db_session).get_by_code("NOPE") is None


class TestCouponValidation:

    async def test_valid_coupon(self, db_session: AsyncSession, save10_coupon):
        coupon = await CouponService(db_session).validate("save10")
        assert coupon.code == "SAVE10"
        assert coupon.discount_type == DiscountType.PERCENTAGE
        assert coupon.remaining_uses == 5

    async def test_unknown_coupon(self, db_session: AsyncSession):
        with pytest.raises(CouponInvalidException) as exc_info:
            await CouponService(db_session).validate("bogus")
        assert exc_info.value.reason == "not_found"
        assert exc_info.value.details == {"coupon_code": "BOGUS", "reason": "not_found"}

    async def test_inactive_coupon(self, db_session: AsyncSession, make_coupon):
        await make_coupon("OFF", is_active=False)
        with pytest.raises(CouponInvalidException) as exc_info:
            await CouponService(db_session).validate("OFF")
        assert exc_info.value.reason == "inactive"

    async def test_expired_coupon(self, db_session: AsyncSession, make_coupon):
        await make_coupon("OLD", valid_days=-1)
        with pytest.raises(CouponInvalidException) as exc_info:
            await CouponService(db_session).validate("OLD")
        assert exc_info.value.reason == "expired"

    async def test_exhausted_coupon(self, db_session: AsyncSession, make_coupon):
        await make_coupon("USED", max_uses=2, current_uses=2)
        with pytest.raises(CouponInvalidException) as exc_info:
            await CouponService(db_session).validate("USED")
        assert exc_info.value.reason == "exhausted"

    async def test_no_expiry_and_unlimited(self, db_session: AsyncSession, make_coupon):
        await make_coupon("FOREVER", DiscountType.FIXED, "500", valid_days=None)
        coupon = await CouponService(db_session).validate("forever")
        assert coupon.remaining_uses is None
        assert coupon.valid_until is None


class TestCouponRedemption:
    """Redemption is a conditional UPDATE; the usage cap is never exceeded."""

    async def test_redeem_increments(self, db_session: AsyncSession, save10_coupon):
        service = CouponService(db_session)
        await service.redeem("save10")
        await db_session.commit()

        await db_session.refresh(save10_coupon)
        assert save10_coupon.current_uses == 1

    async def test_redeem_stops_at_max_uses(self, db_session: AsyncSession, make_coupon):
        coupon = await make_coupon("ONCE", max_uses=1)
        service = CouponService(db_session)

        await service.redeem("ONCE")
        await db_session.commit()

        with pytest.raises(CouponInvalidException) as exc_info:
            await service.redeem("ONCE")
        assert exc_info.value.reason == "exhausted"

        await db_session.refresh(coupon)
        assert coupon.current_uses == 1

    async def test_redeem_many_never_exceeds_cap(self, db_session: AsyncSession, make_coupon):
        coupon = await make_coupon("FIVE", max_uses=5)
        service = CouponService(db_session)

        redeemed = 0
        for _ in range(8):
            try:
                await service.redeem("FIVE")
                redeemed += 1
            except CouponInvalidException:
                pass
        await db_session.commit()

        await db_session.refresh(coupon)
        assert redeemed == 5
        assert coupon.current_uses == 5

    async def test_redeem_expired(self, db_session: AsyncSession, make_coupon):
        await make_coupon("LATE", valid_days=-1)
        with pytest.raises(CouponInvalidException) as exc_info:
            await CouponService(db_session).redeem("LATE")
        assert exc_info.value.reason == "expired"

    async def test_redeem_checks_expiry_at_as_of(self, db_session: AsyncSession, make_coupon):
        await make_coupon("SOON", valid_days=1)
        with pytest.raises(CouponInvalidException) as exc_info:
            await CouponService(db_session).redeem("SOON", as_of=utcnow() + timedelta(days=2))
        assert exc_info.value.reason == "expired"

    async def test_redeem_unknown(self, db_session: AsyncSession):
        with pytest.raises(CouponInvalidException) as exc_info:
            await CouponService(db_session).redeem("GHOST")
        assert exc_info.value.reason == "not_found"
