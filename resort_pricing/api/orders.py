"""Order pricing routes."""
import logging

from fastapi import APIRouter, Depends
from prometheus_client import Counter, Histogram

from resort_pricing.domain.models import (
    OrderTotal,
    PriceOrderRequest,
    StayQuote,
    StayQuoteRequest,
)
from resort_pricing.services.order_pricing_service import OrderPricingService

from .dependencies import get_order_pricing_service
from .errors import handle_errors

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/internal/orders", tags=["orders"])

# Prometheus metrics
order_requests_counter = Counter(
    "order_pricing_requests_total", "Total number of order pricing requests", ["operation", "status"]
)
declined_steps_counter = Counter(
    "discount_steps_declined_total", "Discount and accrual steps that were declined", ["step"]
)
order_pricing_duration = Histogram(
    "order_pricing_duration_seconds", "Time spent pricing orders"
)


@router.post("/price", response_model=OrderTotal)
async def price_order(
    request: PriceOrderRequest,
    service: OrderPricingService = Depends(get_order_pricing_service),
) -> OrderTotal:
    """Price an order and apply coupon, gift card and loyalty discounts.

    Used by the restaurant, snack and pool modules at order creation.
    Declined discounts are reported in ``declined_steps``.
    """
    with handle_errors(order_requests_counter, "price"):
        with order_pricing_duration.time():
            order_total = await service.price_order(request)
        for declined in order_total.declined_steps:
            declined_steps_counter.labels(step=declined.step.value).inc()
        return order_total


@router.post("/quote-stay", response_model=StayQuote)
async def quote_stay(
    request: StayQuoteRequest,
    service: OrderPricingService = Depends(get_order_pricing_service),
) -> StayQuote:
    """Quote a chalet stay for booking creation."""
    with handle_errors(order_requests_counter, "quote_stay"):
        return await service.quote_stay(
            request.item_type,
            request.item_id,
            request.check_in,
            request.nights,
            occupancy=request.occupancy,
        )
