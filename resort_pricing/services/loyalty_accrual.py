"""Loyalty point accrual after discounting."""
import logging
from decimal import Decimal
from typing import Optional, Tuple
from uuid import UUID

from resort_pricing.config import settings
from resort_pricing.domain.exceptions import DomainException
from resort_pricing.domain.models import DiscountError, DiscountStep
from resort_pricing.infrastructure.redemptions import RedemptionGateway

logger = logging.getLogger(__name__)


class LoyaltyAccrualService:
    """Credits loyalty points for paid orders. Never fails the order."""

    def __init__(
        self,
        gateway: RedemptionGateway,
        points_per_dollar: int = settings.points_per_dollar,
    ):
        self.gateway = gateway
        self.points_per_dollar = points_per_dollar

    async def accrue(
        self, customer_id: Optional[UUID], order_total: Decimal, order_id: UUID
    ) -> Tuple[int, Optional[DiscountError]]:
        """Earn points for an order.

        Returns ``(points_earned, error)`` where ``error`` is a
        ``DiscountError`` when accrual was attempted and failed.
        """
        if customer_id is None or order_total <= 0:
            return 0, None

        try:
            result = await self.gateway.earn_loyalty_points(
                customer_id, order_total, order_id, self.points_per_dollar
            )
        except DomainException as e:
            logger.warning(f"Loyalty accrual failed for order {order_id}: {e.message}")
            return 0, DiscountError(step=DiscountStep.ACCRUAL, code=e.code, reason=e.message)
        except Exception as e:
            logger.exception(f"Unexpected loyalty accrual failure for order {order_id}")
            return 0, DiscountError(step=DiscountStep.ACCRUAL, code="ACCRUAL_FAILED", reason=str(e))

        if not result.success:
            reason = result.error_message or "Points not earned"
            logger.warning(f"Loyalty accrual declined for order {order_id}: {reason}")
            return 0, DiscountError(
                step=DiscountStep.ACCRUAL, code="ACCRUAL_DECLINED", reason=reason
            )

        logger.info(f"Customer {customer_id} earned {result.points_earned} points")
        return result.points_earned, None
