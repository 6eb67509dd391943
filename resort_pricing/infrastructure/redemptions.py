"""Abstract redemption gateway.

Every call is keyed by ``order_id``; implementations must consume a coupon,
gift card balance or loyalty balance at most once per order.
"""
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional
from uuid import UUID

from resort_pricing.domain.models import (
    CouponRedemption,
    GiftCardRedemption,
    LoyaltyAccrual,
    LoyaltyRedemption,
)


class RedemptionGateway(ABC):
    """Atomic coupon, gift card and loyalty operations."""

    @abstractmethod
    async def apply_coupon(
        self,
        code: str,
        user_id: Optional[UUID],
        order_total: Decimal,
        order_id: UUID,
        module_scope: str = "all",
    ) -> CouponRedemption:
        """Validate and consume a coupon against a pre-tax order total."""
        pass

    @abstractmethod
    async def redeem_gift_card(
        self, code: str, amount: Decimal, order_id: UUID
    ) -> GiftCardRedemption:
        """Debit up to ``amount`` from a gift card balance."""
        pass

    @abstractmethod
    async def redeem_loyalty_points(
        self,
        user_id: UUID,
        points: int,
        order_id: UUID,
        dollar_value: Decimal,
    ) -> LoyaltyRedemption:
        """Spend loyalty points worth ``dollar_value``."""
        pass

    @abstractmethod
    async def earn_loyalty_points(
        self,
        user_id: UUID,
        order_total: Decimal,
        order_id: UUID,
        points_per_dollar: int = 1,
    ) -> LoyaltyAccrual:
        """Credit loyalty points for a paid order."""
        pass
