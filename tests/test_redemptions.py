"""Tests for redemption gateways."""
import asyncio
import json
import pytest
from decimal import Decimal
from uuid import UUID, uuid4

import httpx

from resort_pricing.domain.exceptions import RedemptionServiceUnavailableException
from resort_pricing.domain.models import ModifierType
from resort_pricing.infrastructure.clients.redemption_client import RedemptionClient
from resort_pricing.infrastructure.redemptions_inmemory import (
    Coupon,
    GiftCard,
    InMemoryRedemptionGateway,
)


# ==================== IN-MEMORY GATEWAY ====================


@pytest.mark.asyncio
async def test_apply_percentage_coupon_with_cap(
    redemption_gateway: InMemoryRedemptionGateway,
    mock_order_id: UUID,
) -> None:
    result = await redemption_gateway.apply_coupon(
        "tenpct", None, Decimal("300.00"), mock_order_id
    )

    assert result.success is True
    assert result.discount_amount == Decimal("15.00")
    assert result.coupon_id == "coupon-002"


@pytest.mark.asyncio
async def test_coupon_rules(
    redemption_gateway: InMemoryRedemptionGateway,
    mock_order_id: UUID,
) -> None:
    """Test usage limit, minimum order amount and inactive coupons."""
    # Arrange
    redemption_gateway.add_coupon(
        Coupon(
            coupon_id="coupon-once",
            code="ONCE",
            discount_type=ModifierType.FIXED,
            value=Decimal("5"),
            usage_limit=1,
        )
    )
    redemption_gateway.add_coupon(
        Coupon(
            coupon_id="coupon-min",
            code="BIGSPEND",
            discount_type=ModifierType.FIXED,
            value=Decimal("25"),
            min_order_amount=Decimal("200"),
        )
    )
    redemption_gateway.add_coupon(
        Coupon(
            coupon_id="coupon-off",
            code="RETIRED",
            discount_type=ModifierType.FIXED,
            value=Decimal("5"),
            is_active=False,
        )
    )

    # Act
    first = await redemption_gateway.apply_coupon("ONCE", None, Decimal("50"), mock_order_id)
    exhausted = await redemption_gateway.apply_coupon("ONCE", None, Decimal("50"), uuid4())
    below_min = await redemption_gateway.apply_coupon("BIGSPEND", None, Decimal("150"), mock_order_id)
    retired = await redemption_gateway.apply_coupon("RETIRED", None, Decimal("50"), mock_order_id)

    # Assert
    assert first.success is True
    assert exhausted.error_message == "Coupon usage limit reached"
    assert below_min.error_message == "Minimum order amount is 200"
    assert retired.error_message == "Invalid coupon code"


@pytest.mark.asyncio
async def test_gift_card_partial_balance(
    redemption_gateway: InMemoryRedemptionGateway,
    mock_order_id: UUID,
) -> None:
    result = await redemption_gateway.redeem_gift_card("GIFT30", Decimal("45.00"), mock_order_id)
    empty = await redemption_gateway.redeem_gift_card("GIFT30", Decimal("5.00"), uuid4())

    assert result.amount_redeemed == Decimal("30.00")
    assert result.gift_card_id == "gc-001"
    assert empty.success is False
    assert empty.error_message == "Gift card has no remaining balance"


@pytest.mark.asyncio
async def test_inactive_gift_card(
    redemption_gateway: InMemoryRedemptionGateway,
    mock_order_id: UUID,
) -> None:
    redemption_gateway.add_gift_card(
        GiftCard(gift_card_id="gc-009", code="FROZEN", balance=Decimal("50"), is_active=False)
    )

    result = await redemption_gateway.redeem_gift_card("FROZEN", Decimal("5"), mock_order_id)

    assert result.error_message == "Invalid gift card"


@pytest.mark.asyncio
async def test_concurrent_gift_card_redemptions_never_overdraw(
    redemption_gateway: InMemoryRedemptionGateway,
) -> None:
    """Test parallel orders cannot spend more than the balance."""
    # Act
    results = await asyncio.gather(
        *[
            redemption_gateway.redeem_gift_card("GIFT30", Decimal("10.00"), uuid4())
            for _ in range(5)
        ]
    )

    # Assert
    assert sum(r.amount_redeemed for r in results) == Decimal("30.00")
    assert sum(1 for r in results if r.success) == 3
    assert redemption_gateway.get_gift_card("GIFT30").balance == Decimal("0.00")


@pytest.mark.asyncio
async def test_earn_loyalty_points_floors(
    redemption_gateway: InMemoryRedemptionGateway,
    mock_customer_id: UUID,
    mock_order_id: UUID,
) -> None:
    result = await redemption_gateway.earn_loyalty_points(
        mock_customer_id, Decimal("48.99"), mock_order_id, points_per_dollar=2
    )

    assert result.points_earned == 97
    assert redemption_gateway.get_points(mock_customer_id) == 5097


@pytest.mark.asyncio
async def test_redeem_more_points_than_balance(
    redemption_gateway: InMemoryRedemptionGateway,
    mock_customer_id: UUID,
    mock_order_id: UUID,
) -> None:
    result = await redemption_gateway.redeem_loyalty_points(
        mock_customer_id, 6000, mock_order_id, Decimal("60.00")
    )

    assert result.success is False
    assert redemption_gateway.get_points(mock_customer_id) == 5000


# ==================== HTTP CLIENT ====================


def _client(handler) -> RedemptionClient:
    return RedemptionClient(
        base_url="http://redemption.test/",
        timeout=1.0,
        retries=3,
        retry_wait=0,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_client_apply_coupon(mock_customer_id: UUID, mock_order_id: UUID) -> None:
    """Test coupon request payload and response parsing."""
    # Arrange
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={"success": True, "discount_amount": "20.00", "coupon_id": "coupon-001"},
        )

    client = _client(handler)

    # Act
    result = await client.apply_coupon(
        "save20", mock_customer_id, Decimal("100.00"), mock_order_id, "restaurant"
    )
    await client.close()

    # Assert
    assert captured["url"] == "http://redemption.test/api/v1/coupons/apply"
    assert captured["body"] == {
        "code": "SAVE20",
        "user_id": str(mock_customer_id),
        "order_total": "100.00",
        "order_id": str(mock_order_id),
        "module_type": "restaurant",
    }
    assert result.success is True
    assert result.discount_amount == Decimal("20.00")


@pytest.mark.asyncio
async def test_client_declined_response(mock_order_id: UUID) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": False, "error_message": "Invalid gift card"})

    client = _client(handler)
    result = await client.redeem_gift_card("nope", Decimal("10.00"), mock_order_id)
    await client.close()

    assert result.success is False
    assert result.error_message == "Invalid gift card"


@pytest.mark.asyncio
async def test_client_retries_transport_errors(mock_order_id: UUID) -> None:
    """Test connect errors are retried, then surface as unavailable."""
    # Arrange
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)

    # Act / Assert
    with pytest.raises(RedemptionServiceUnavailableException) as exc_info:
        await client.redeem_loyalty_points(uuid4(), 100, mock_order_id, Decimal("1.00"))
    await client.close()

    assert len(calls) == 3
    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_client_recovers_after_transient_error(
    mock_customer_id: UUID, mock_order_id: UUID
) -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) == 1:
            raise httpx.ReadTimeout("timed out", request=request)
        return httpx.Response(200, json={"success": True, "points_earned": 48})

    client = _client(handler)
    result = await client.earn_loyalty_points(mock_customer_id, Decimal("48.80"), mock_order_id)
    await client.close()

    assert len(calls) == 2
    assert result.points_earned == 48


@pytest.mark.asyncio
async def test_client_does_not_retry_http_errors(mock_order_id: UUID) -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(500, json={"detail": "boom"})

    client = _client(handler)

    with pytest.raises(RedemptionServiceUnavailableException):
        await client.apply_coupon("SAVE20", None, Decimal("100.00"), mock_order_id)
    await client.close()

    assert len(calls) == 1
