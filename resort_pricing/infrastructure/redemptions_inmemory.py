"""In-memory redemption gateway for development/testing.

A single ``asyncio.Lock`` serializes every balance mutation and a ledger of
``(kind, code, order_id)`` keys rejects repeated redemptions for an order.
"""
import asyncio
import logging
from decimal import ROUND_FLOOR, Decimal
from typing import Dict, Optional, Set, Tuple
from uuid import UUID

from pydantic import BaseModel

from resort_pricing.domain.models import (
    CouponRedemption,
    GiftCardRedemption,
    LoyaltyAccrual,
    LoyaltyRedemption,
    ModifierType,
)
from resort_pricing.infrastructure.redemptions import RedemptionGateway
from resort_pricing.utils import quantize_money, to_decimal

logger = logging.getLogger(__name__)


class Coupon(BaseModel):
    """Coupon held by the in-memory gateway."""

    coupon_id: str
    code: str
    discount_type: ModifierType
    value: Decimal
    max_discount: Optional[Decimal] = None
    min_order_amount: Decimal = Decimal("0")
    module_scope: str = "all"
    usage_limit: Optional[int] = None
    used_count: int = 0
    is_active: bool = True


class GiftCard(BaseModel):
    """Gift card held by the in-memory gateway."""

    gift_card_id: str
    code: str
    balance: Decimal
    is_active: bool = True


class InMemoryRedemptionGateway(RedemptionGateway):
    """Redemption gateway backed by dictionaries."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._coupons: Dict[str, Coupon] = {}
        self._gift_cards: Dict[str, GiftCard] = {}
        self._points: Dict[UUID, int] = {}
        self._ledger: Set[Tuple[str, str, UUID]] = set()

    # ---- seeding ----

    def add_coupon(self, coupon: Coupon) -> None:
        self._coupons[coupon.code.upper()] = coupon

    def add_gift_card(self, gift_card: GiftCard) -> None:
        self._gift_cards[gift_card.code.upper()] = gift_card

    def set_points(self, user_id: UUID, points: int) -> None:
        self._points[user_id] = points

    def get_points(self, user_id: UUID) -> int:
        return self._points.get(user_id, 0)

    def get_gift_card(self, code: str) -> Optional[GiftCard]:
        return self._gift_cards.get(code.upper())

    def get_coupon(self, code: str) -> Optional[Coupon]:
        return self._coupons.get(code.upper())

    def _claim(self, kind: str, code: str, order_id: UUID) -> bool:
        """Record a redemption key; False if the order already used it."""
        key = (kind, code, order_id)
        if key in self._ledger:
            logger.warning(f"Duplicate {kind} redemption for {code} on order {order_id}")
            return False
        self._ledger.add(key)
        return True

    # ---- gateway ----

    async def apply_coupon(
        self,
        code: str,
        user_id: Optional[UUID],
        order_total: Decimal,
        order_id: UUID,
        module_scope: str = "all",
    ) -> CouponRedemption:
        code = code.upper()
        order_total = to_decimal(order_total)

        async with self._lock:
            coupon = self._coupons.get(code)
            if coupon is None or not coupon.is_active:
                return CouponRedemption(success=False, error_message="Invalid coupon code")
            if coupon.usage_limit is not None and coupon.used_count >= coupon.usage_limit:
                return CouponRedemption(success=False, error_message="Coupon usage limit reached")
            if module_scope != "all" and coupon.module_scope not in ("all", module_scope):
                return CouponRedemption(
                    success=False, error_message="Coupon not valid for this module"
                )
            if order_total < coupon.min_order_amount:
                return CouponRedemption(
                    success=False,
                    error_message=f"Minimum order amount is {coupon.min_order_amount}",
                )

            if coupon.discount_type == ModifierType.PERCENTAGE:
                discount = order_total * coupon.value / Decimal("100")
            else:
                discount = coupon.value
            if coupon.max_discount is not None:
                discount = min(discount, coupon.max_discount)
            discount = quantize_money(min(discount, order_total))

            if not self._claim("coupon", code, order_id):
                return CouponRedemption(
                    success=False, error_message="Coupon already applied to this order"
                )
            self._coupons[code] = coupon.model_copy(update={"used_count": coupon.used_count + 1})

        logger.info(f"Coupon {code} applied to order {order_id}: {discount}")
        return CouponRedemption(
            success=True, discount_amount=discount, coupon_id=coupon.coupon_id
        )

    async def redeem_gift_card(
        self, code: str, amount: Decimal, order_id: UUID
    ) -> GiftCardRedemption:
        code = code.upper()

        async with self._lock:
            gift_card = self._gift_cards.get(code)
            if gift_card is None or not gift_card.is_active:
                return GiftCardRedemption(success=False, error_message="Invalid gift card")
            if gift_card.balance <= 0:
                return GiftCardRedemption(
                    success=False, error_message="Gift card has no remaining balance"
                )
            if not self._claim("gift_card", code, order_id):
                return GiftCardRedemption(
                    success=False, error_message="Gift card already redeemed for this order"
                )

            redeemed = quantize_money(min(to_decimal(amount), gift_card.balance))
            self._gift_cards[code] = gift_card.model_copy(
                update={"balance": gift_card.balance - redeemed}
            )

        logger.info(f"Gift card {code} redeemed {redeemed} on order {order_id}")
        return GiftCardRedemption(
            success=True, amount_redeemed=redeemed, gift_card_id=gift_card.gift_card_id
        )

    async def redeem_loyalty_points(
        self,
        user_id: UUID,
        points: int,
        order_id: UUID,
        dollar_value: Decimal,
    ) -> LoyaltyRedemption:
        async with self._lock:
            balance = self._points.get(user_id, 0)
            if points <= 0 or points > balance:
                return LoyaltyRedemption(success=False, error_message="Insufficient points")
            if not self._claim("loyalty", str(user_id), order_id):
                return LoyaltyRedemption(
                    success=False, error_message="Points already redeemed for this order"
                )
            self._points[user_id] = balance - points

        logger.info(f"Redeemed {points} points ({dollar_value}) for user {user_id}")
        return LoyaltyRedemption(success=True, points_redeemed=points)

    async def earn_loyalty_points(
        self,
        user_id: UUID,
        order_total: Decimal,
        order_id: UUID,
        points_per_dollar: int = 1,
    ) -> LoyaltyAccrual:
        earned = int(
            (to_decimal(order_total) * points_per_dollar).to_integral_value(rounding=ROUND_FLOOR)
        )

        async with self._lock:
            if not self._claim("accrual", str(user_id), order_id):
                return LoyaltyAccrual(
                    success=False, error_message="Points already earned for this order"
                )
            self._points[user_id] = self._points.get(user_id, 0) + earned

        logger.info(f"User {user_id} earned {earned} points on order {order_id}")
        return LoyaltyAccrual(success=True, points_earned=earned)
