"""
ATLAS Ops - Test Configuration

Pytest fixtures and configuration. Database tests run against an
in-memory SQLite database shared through a StaticPool.
"""

from datetime import timedelta
from decimal import Decimal
from typing import AsyncGenerator, Optional

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_async_session
from app.models import (
    ClientTier,
    CouponCode,
    DiscountType,
    ModifierType,
    PricingAddon,
    PricingModifier,
    ServicePricing,
)
from app.services.pricing_engine import utcnow
from main import app


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    session_factory = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database session override."""

    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_async_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ===========================================
# CATALOGUE FIXTURES
# ===========================================

async def _make_coupon(
    db_session: AsyncSession,
    code: str,
    discount_type: DiscountType = DiscountType.PERCENTAGE,
    value: str = "10",
    max_uses: Optional[int] = None,
    current_uses: int = 0,
    valid_days: Optional[int] = None,
    is_active: bool = True,
) -> CouponCode:
    """Insert a coupon. `valid_days=None` (default) means no expiry, negative means already expired."""
    coupon = CouponCode(
        code=code,
        discount_type=discount_type,
        discount_value=Decimal(value),
        max_uses=max_uses,
        current_uses=current_uses,
        valid_until=None if valid_days is None else utcnow() + timedelta(days=valid_days),
        is_active=is_active,
    )
    db_session.add(coupon)
    await db_session.commit()
    await db_session.refresh(coupon)
    return coupon


@pytest_asyncio.fixture
async def managed_it_service(db_session: AsyncSession) -> ServicePricing:
    """Standard-tier service with a 50,000 base price."""
    service = ServicePricing(
        service_name="Managed IT Support",
        service_category="it_services",
        plan_tier=ClientTier.STANDARD,
        base_price=Decimal("50000.00"),
        description="Monthly managed IT support",
        features=["Helpdesk", "Patch management"],
        is_active=True,
    )
    db_session.add(service)
    await db_session.commit()
    await db_session.refresh(service)
    return service


@pytest_asyncio.fixture
async def backup_addon(db_session: AsyncSession) -> PricingAddon:
    addon = PricingAddon(
        name="Cloud Backup",
        description="Daily offsite backup",
        price=Decimal("2000.00"),
        category="storage",
        is_active=True,
    )
    db_session.add(addon)
    await db_session.commit()
    await db_session.refresh(addon)
    return addon


@pytest_asyncio.fixture
async def enterprise_modifier(db_session: AsyncSession) -> PricingModifier:
    modifier = PricingModifier(
        modifier_type=ModifierType.CLIENT_TYPE,
        modifier_key="enterprise",
        multiplier=Decimal("1.500"),
        description="Enterprise clients",
        is_active=True,
    )
    db_session.add(modifier)
    await db_session.commit()
    await db_session.refresh(modifier)
    return modifier


@pytest_asyncio.fixture
async def save10_coupon(db_session: AsyncSession) -> CouponCode:
    """10% off, five uses."""
    return await _make_coupon(db_session, "SAVE10", max_uses=5)


@pytest_asyncio.fixture
async def catalogue(managed_it_service, backup_addon, enterprise_modifier, save10_coupon):
    return {
        "service": managed_it_service,
        "addon": backup_addon,
        "modifier": enterprise_modifier,
        "coupon": save10_coupon,
    }


@pytest_asyncio.fixture
async def make_coupon(db_session: AsyncSession):
    """Factory fixture: `await make_coupon("CODE", max_uses=1, ...)`."""

    async def factory(code: str, *args, **kwargs) -> CouponCode:
        return await _make_coupon(db_session, code, *args, **kwargs)

    return factory
