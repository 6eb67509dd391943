"""Service layer."""
from resort_pricing.services.discount_pipeline import DiscountPipeline
from resort_pricing.services.loyalty_accrual import LoyaltyAccrualService
from resort_pricing.services.order_pricing_service import OrderPricingService
from resort_pricing.services.rate_service import RateService
from resort_pricing.services.seasonal_pricing_service import SeasonalPricingService

__all__ = [
    "DiscountPipeline",
    "LoyaltyAccrualService",
    "OrderPricingService",
    "RateService",
    "SeasonalPricingService",
]
