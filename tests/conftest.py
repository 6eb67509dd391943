"""Pytest configuration and fixtures.

Services are wired to the in-memory repositories and redemption gateway;
the SQLAlchemy repositories run against SQLite in-memory.
"""
import pytest
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from resort_pricing.domain.models import CreateRateRequest, ModifierType
from resort_pricing.infrastructure.database import Base
from resort_pricing.infrastructure import models  # noqa: F401
from resort_pricing.infrastructure.redemptions_inmemory import (
    Coupon,
    GiftCard,
    InMemoryRedemptionGateway,
)
from resort_pricing.infrastructure.repositories_inmemory import (
    InMemoryDynamicConfigRepository,
    InMemoryOccupancyProvider,
    InMemoryRateRepository,
    InMemorySeasonalRuleRepository,
)
from resort_pricing.infrastructure.repositories_postgres import (
    PostgresDynamicConfigRepository,
    PostgresRateRepository,
    PostgresSeasonalRuleRepository,
)
from resort_pricing.services.discount_pipeline import DiscountPipeline
from resort_pricing.services.loyalty_accrual import LoyaltyAccrualService
from resort_pricing.services.order_pricing_service import OrderPricingService
from resort_pricing.services.rate_service import RateService
from resort_pricing.services.seasonal_pricing_service import SeasonalPricingService

# Monday
TODAY = date(2025, 6, 2)


@pytest.fixture
async def async_session():
    """Create async session for testing with SQLite in-memory."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session_factory() as session:
        yield session
        await session.rollback()

    await engine.dispose()


@pytest.fixture
def postgres_rate_repository(async_session: AsyncSession) -> PostgresRateRepository:
    """PostgreSQL rate repository (with SQLite backend for tests)."""
    return PostgresRateRepository(async_session)


@pytest.fixture
def postgres_rule_repository(async_session: AsyncSession) -> PostgresSeasonalRuleRepository:
    return PostgresSeasonalRuleRepository(async_session)


@pytest.fixture
def postgres_config_repository(async_session: AsyncSession) -> PostgresDynamicConfigRepository:
    return PostgresDynamicConfigRepository(async_session)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def mock_item_id() -> UUID:
    """Mock chalet ID."""
    return UUID("550e8400-e29b-41d4-a716-446655440000")


@pytest.fixture
def mock_customer_id() -> UUID:
    """Mock customer ID."""
    return UUID("123e4567-e89b-12d3-a456-426614174000")


@pytest.fixture
def mock_order_id() -> UUID:
    """Mock order ID."""
    return UUID("9b2f6c1e-3d4a-4f5b-8c7d-0e1f2a3b4c5d")


@pytest.fixture
def rate_repository() -> InMemoryRateRepository:
    return InMemoryRateRepository()


@pytest.fixture
def rule_repository() -> InMemorySeasonalRuleRepository:
    return InMemorySeasonalRuleRepository()


@pytest.fixture
def config_repository() -> InMemoryDynamicConfigRepository:
    return InMemoryDynamicConfigRepository()


@pytest.fixture
def occupancy_provider() -> InMemoryOccupancyProvider:
    return InMemoryOccupancyProvider()


@pytest.fixture
def rate_service(rate_repository: InMemoryRateRepository) -> RateService:
    """Rate service over the in-memory catalog."""
    return RateService(rate_repository)


@pytest.fixture
def seasonal_pricing_service(
    rule_repository: InMemorySeasonalRuleRepository,
    config_repository: InMemoryDynamicConfigRepository,
    occupancy_provider: InMemoryOccupancyProvider,
    today: date,
) -> SeasonalPricingService:
    """Adjuster with a fixed clock."""
    return SeasonalPricingService(
        rule_repository=rule_repository,
        config_repository=config_repository,
        occupancy_provider=occupancy_provider,
        clock=lambda: today,
    )


@pytest.fixture
def redemption_gateway(mock_customer_id: UUID) -> InMemoryRedemptionGateway:
    """Gateway seeded with a fixed coupon, two gift cards and a points balance."""
    gateway = InMemoryRedemptionGateway()
    gateway.add_coupon(
        Coupon(
            coupon_id="coupon-001",
            code="SAVE20",
            discount_type=ModifierType.FIXED,
            value=Decimal("20.00"),
        )
    )
    gateway.add_coupon(
        Coupon(
            coupon_id="coupon-002",
            code="TENPCT",
            discount_type=ModifierType.PERCENTAGE,
            value=Decimal("10"),
            max_discount=Decimal("15.00"),
        )
    )
    gateway.add_gift_card(
        GiftCard(gift_card_id="gc-001", code="GIFT30", balance=Decimal("30.00"))
    )
    gateway.add_gift_card(
        GiftCard(gift_card_id="gc-002", code="GIFT500", balance=Decimal("500.00"))
    )
    gateway.set_points(mock_customer_id, 5000)
    return gateway


@pytest.fixture
def discount_pipeline(redemption_gateway: InMemoryRedemptionGateway) -> DiscountPipeline:
    return DiscountPipeline(redemption_gateway)


@pytest.fixture
def order_pricing_service(
    rate_service: RateService,
    seasonal_pricing_service: SeasonalPricingService,
    redemption_gateway: InMemoryRedemptionGateway,
) -> OrderPricingService:
    """Order pricing with an 11% tax rate and in-memory redemptions."""
    return OrderPricingService(
        rate_service=rate_service,
        seasonal_pricing_service=seasonal_pricing_service,
        discount_pipeline=DiscountPipeline(redemption_gateway),
        loyalty_accrual=LoyaltyAccrualService(redemption_gateway, points_per_dollar=1),
        tax_rate=Decimal("0.11"),
        service_charge_rate=Decimal("0.10"),
        delivery_fee=Decimal("5.00"),
    )


@pytest.fixture
def chalet_rate_request() -> CreateRateRequest:
    """Standard chalet rate valid all summer."""
    return CreateRateRequest(
        name="Summer Chalet",
        description="Standard summer nightly rate",
        rate_type="standard",
        base_price=Decimal("100.00"),
        applicable_item_type="chalet",
        start_date="2025-06-01",
        end_date="2025-08-31",
        priority=5,
    )
