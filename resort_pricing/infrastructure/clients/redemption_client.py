"""Redemption Service client."""
import logging
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

import httpx

from resort_pricing.config import settings
from resort_pricing.domain.exceptions import RedemptionServiceUnavailableException
from resort_pricing.domain.models import (
    CouponRedemption,
    GiftCardRedemption,
    LoyaltyAccrual,
    LoyaltyRedemption,
)
from resort_pricing.infrastructure.clients.base import BaseHTTPClient
from resort_pricing.infrastructure.redemptions import RedemptionGateway

logger = logging.getLogger(__name__)


class RedemptionClient(RedemptionGateway):
    """Client for the Redemption Service.

    Every request carries the order id, so a retried call is deduplicated
    remotely and cannot consume a balance twice.
    """

    def __init__(
        self,
        base_url: str = settings.redemption_service_url,
        timeout: float = settings.redemption_service_timeout,
        retries: int = settings.redemption_service_retries,
        retry_wait: float = settings.redemption_retry_wait,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.http_client = BaseHTTPClient(
            base_url, timeout, retries=retries, retry_wait=retry_wait, transport=transport
        )

    async def close(self) -> None:
        """Close the client."""
        await self.http_client.close()

    async def _call(self, operation: str, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            return await self.http_client.post(path, data=payload)
        except httpx.HTTPError as e:
            logger.error(f"Redemption call {operation} failed: {e}")
            raise RedemptionServiceUnavailableException(operation) from e

    async def apply_coupon(
        self,
        code: str,
        user_id: Optional[UUID],
        order_total: Decimal,
        order_id: UUID,
        module_scope: str = "all",
    ) -> CouponRedemption:
        response = await self._call(
            "apply_coupon",
            "/api/v1/coupons/apply",
            {
                "code": code.upper(),
                "user_id": str(user_id) if user_id else None,
                "order_total": str(order_total),
                "order_id": str(order_id),
                "module_type": module_scope,
            },
        )
        return CouponRedemption(**response)

    async def redeem_gift_card(
        self, code: str, amount: Decimal, order_id: UUID
    ) -> GiftCardRedemption:
        response = await self._call(
            "redeem_gift_card",
            "/api/v1/gift-cards/redeem",
            {"code": code.upper(), "amount": str(amount), "order_id": str(order_id)},
        )
        return GiftCardRedemption(**response)

    async def redeem_loyalty_points(
        self,
        user_id: UUID,
        points: int,
        order_id: UUID,
        dollar_value: Decimal,
    ) -> LoyaltyRedemption:
        response = await self._call(
            "redeem_loyalty_points",
            "/api/v1/loyalty/redeem",
            {
                "user_id": str(user_id),
                "points": points,
                "order_id": str(order_id),
                "dollar_value": str(dollar_value),
            },
        )
        return LoyaltyRedemption(**response)

    async def earn_loyalty_points(
        self,
        user_id: UUID,
        order_total: Decimal,
        order_id: UUID,
        points_per_dollar: int = 1,
    ) -> LoyaltyAccrual:
        response = await self._call(
            "earn_loyalty_points",
            "/api/v1/loyalty/earn",
            {
                "user_id": str(user_id),
                "order_total": str(order_total),
                "order_id": str(order_id),
                "points_per_dollar": points_per_dollar,
            },
        )
        return LoyaltyAccrual(**response)
