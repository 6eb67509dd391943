"""API dependencies with dependency injection."""
from typing import Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from resort_pricing.infrastructure.clients import RedemptionClient
from resort_pricing.infrastructure.database import get_async_session
from resort_pricing.infrastructure.redemptions import RedemptionGateway
from resort_pricing.infrastructure.repositories import OccupancyProvider
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

# Singleton instances for clients
_redemption_client: Optional[RedemptionClient] = None


def get_redemption_gateway() -> RedemptionGateway:
    """Get RedemptionClient singleton."""
    global _redemption_client
    if _redemption_client is None:
        _redemption_client = RedemptionClient()
    return _redemption_client


async def close_redemption_gateway() -> None:
    global _redemption_client
    if _redemption_client is not None:
        await _redemption_client.close()
    _redemption_client = None


def get_occupancy_provider() -> Optional[OccupancyProvider]:
    """No occupancy source is wired by default; callers pass occupancy explicitly."""
    return None


async def get_rate_service(
    session: AsyncSession = Depends(get_async_session),
) -> RateService:
    """Get RateService bound to the request session."""
    return RateService(PostgresRateRepository(session))


async def get_seasonal_pricing_service(
    session: AsyncSession = Depends(get_async_session),
    occupancy_provider: Optional[OccupancyProvider] = Depends(get_occupancy_provider),
) -> SeasonalPricingService:
    """Get SeasonalPricingService bound to the request session."""
    return SeasonalPricingService(
        rule_repository=PostgresSeasonalRuleRepository(session),
        config_repository=PostgresDynamicConfigRepository(session),
        occupancy_provider=occupancy_provider,
    )


async def get_order_pricing_service(
    rate_service: RateService = Depends(get_rate_service),
    seasonal_pricing_service: SeasonalPricingService = Depends(get_seasonal_pricing_service),
    gateway: RedemptionGateway = Depends(get_redemption_gateway),
) -> OrderPricingService:
    """Get OrderPricingService with dependencies."""
    return OrderPricingService(
        rate_service=rate_service,
        seasonal_pricing_service=seasonal_pricing_service,
        discount_pipeline=DiscountPipeline(gateway),
        loyalty_accrual=LoyaltyAccrualService(gateway),
    )
