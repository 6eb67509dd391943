"""Order Pricing Service implementation."""
import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from resort_pricing.config import settings
from resort_pricing.domain.exceptions import InvalidOrderException
from resort_pricing.domain.models import (
    OrderTotal,
    OrderType,
    PriceOrderRequest,
    StayQuote,
)
from resort_pricing.services.discount_pipeline import DiscountPipeline, PipelineContext
from resort_pricing.services.loyalty_accrual import LoyaltyAccrualService
from resort_pricing.services.rate_service import RateService
from resort_pricing.services.seasonal_pricing_service import SeasonalPricingService
from resort_pricing.utils import quantize_money

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


class OrderPricingService:
    """Prices orders (fees, tax, discounts, accrual) and quotes stays."""

    def __init__(
        self,
        rate_service: RateService,
        seasonal_pricing_service: SeasonalPricingService,
        discount_pipeline: DiscountPipeline,
        loyalty_accrual: LoyaltyAccrualService,
        tax_rate: Decimal = settings.tax_rate,
        service_charge_rate: Decimal = settings.service_charge_rate,
        delivery_fee: Decimal = settings.delivery_fee,
    ):
        self.rate_service = rate_service
        self.seasonal_pricing_service = seasonal_pricing_service
        self.discount_pipeline = discount_pipeline
        self.loyalty_accrual = loyalty_accrual
        self.tax_rate = tax_rate
        self.service_charge_rate = service_charge_rate
        self.delivery_fee = delivery_fee

    async def price_order(self, request: PriceOrderRequest) -> OrderTotal:
        """Compute an order's totals and apply its discounts.

        Discount and accrual failures are recorded on the result and never
        raised; only a malformed order fails.
        """
        if not request.lines:
            raise InvalidOrderException("Order must contain at least one line")

        logger.info(
            f"Pricing order {request.order_id} ({request.order_type.value}, "
            f"{len(request.lines)} lines)"
        )

        subtotal = quantize_money(
            sum((line.unit_price * line.quantity for line in request.lines), ZERO)
        )
        tax_amount = quantize_money(subtotal * self.tax_rate)
        service_charge = ZERO
        if request.order_type == OrderType.DINE_IN:
            service_charge = quantize_money(subtotal * self.service_charge_rate)
        delivery_fee = ZERO
        if request.order_type == OrderType.DELIVERY:
            delivery_fee = quantize_money(self.delivery_fee)
        pre_discount_total = subtotal + tax_amount + service_charge + delivery_fee

        context = PipelineContext(
            order_id=request.order_id,
            customer_id=request.customer_id,
            subtotal=subtotal,
            pre_discount_total=pre_discount_total,
            tax_rate=self.tax_rate,
            module_scope=request.module_scope,
        )
        summary = await self.discount_pipeline.run(context, request.discounts)
        total = quantize_money(summary.total)

        points_earned, accrual_error = await self.loyalty_accrual.accrue(
            request.customer_id, total, request.order_id
        )
        declined = list(summary.declined)
        if accrual_error is not None:
            declined.append(accrual_error)

        order_total = OrderTotal(
            order_id=request.order_id,
            subtotal=subtotal,
            tax_amount=max(ZERO, tax_amount - summary.tax_savings),
            service_charge=service_charge,
            delivery_fee=delivery_fee,
            pre_discount_total=pre_discount_total,
            discount_amount=summary.discount_amount,
            coupon_id=summary.coupon_id,
            coupon_code=summary.coupon_code,
            coupon_discount=summary.coupon_discount,
            tax_savings=summary.tax_savings,
            gift_card_amount=summary.gift_card_amount,
            gift_card_redemptions=summary.gift_card_redemptions,
            loyalty_points_used=summary.loyalty_points_used,
            loyalty_discount=summary.loyalty_discount,
            loyalty_points_earned=points_earned,
            total=total,
            declined_steps=declined,
        )

        logger.info(
            f"Order {request.order_id} priced: subtotal {subtotal}, "
            f"discount {order_total.discount_amount}, total {total}"
        )
        return order_total

    async def quote_stay(
        self,
        item_type: str,
        item_id: Optional[str],
        check_in: date,
        nights: int = 1,
        occupancy: Optional[Decimal] = None,
        today: Optional[date] = None,
    ) -> StayQuote:
        """Rate-catalog price for a stay, adjusted for season, weekend and demand."""
        rate_price = await self.rate_service.calculate_price(item_type, item_id, check_in, nights)
        adjusted = await self.seasonal_pricing_service.calculate_adjusted_price(
            item_type,
            item_id,
            rate_price.total_price,
            check_in,
            occupancy=occupancy,
            today=today,
        )
        return StayQuote(
            item_type=item_type,
            item_id=item_id,
            check_in=check_in,
            nights=nights,
            rate_price=rate_price,
            adjusted=adjusted,
            total=adjusted.final_price,
            currency=rate_price.currency,
        )
