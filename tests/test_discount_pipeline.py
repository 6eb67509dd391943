"""Tests for the order-time discount pipeline."""
import pytest
from decimal import Decimal
from typing import Optional
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

from pydantic import ValidationError

from resort_pricing.domain.exceptions import RedemptionServiceUnavailableException
from resort_pricing.domain.models import (
    DiscountRequest,
    DiscountStep,
    GiftCardRedemption,
    GiftCardRequest,
    ModifierType,
)
from resort_pricing.infrastructure.redemptions import RedemptionGateway
from resort_pricing.infrastructure.redemptions_inmemory import (
    Coupon,
    InMemoryRedemptionGateway,
)
from resort_pricing.services.discount_pipeline import (
    CouponStep,
    DiscountPipeline,
    GiftCardStep,
    LoyaltyStep,
    PipelineContext,
    build_steps,
)


def _context(
    order_id: UUID,
    customer_id: Optional[UUID] = None,
    subtotal: str = "100.00",
    module_scope: str = "all",
) -> PipelineContext:
    subtotal = Decimal(subtotal)
    return PipelineContext(
        order_id=order_id,
        customer_id=customer_id,
        subtotal=subtotal,
        pre_discount_total=subtotal + subtotal * Decimal("0.11"),
        tax_rate=Decimal("0.11"),
        module_scope=module_scope,
    )


# ==================== STEP ORDER ====================


def test_build_steps_order() -> None:
    steps = build_steps(
        DiscountRequest(
            coupon_code=" save20 ",
            gift_cards=[
                GiftCardRequest(code="gift30", amount=Decimal("10")),
                GiftCardRequest(code="GIFT500", amount=Decimal("5")),
            ],
            loyalty_points=1000,
        )
    )

    assert [type(s) for s in steps] == [CouponStep, GiftCardStep, GiftCardStep, LoyaltyStep]
    assert steps[0].code == "SAVE20"
    assert [s.code for s in steps[1:3]] == ["GIFT30", "GIFT500"]
    assert steps[3].dollar_value == Decimal("10.00")


def test_build_steps_empty_request() -> None:
    assert build_steps(DiscountRequest(coupon_code="  ")) == []


# ==================== STACKING ====================


@pytest.mark.asyncio
async def test_full_stack_applies_in_order(
    discount_pipeline: DiscountPipeline,
    redemption_gateway: InMemoryRedemptionGateway,
    mock_order_id: UUID,
    mock_customer_id: UUID,
) -> None:
    """Test coupon, gift card and loyalty points stack on a 100.00 order."""
    # Arrange
    context = _context(mock_order_id, mock_customer_id)
    discounts = DiscountRequest(
        coupon_code="SAVE20",
        gift_cards=[GiftCardRequest(code="GIFT30", amount=Decimal("30"))],
        loyalty_points=1000,
    )

    # Act
    summary = await discount_pipeline.run(context, discounts)

    # Assert
    assert summary.coupon_discount == Decimal("20.00")
    assert summary.coupon_id == "coupon-001"
    assert summary.tax_savings == Decimal("2.20")
    assert summary.gift_card_amount == Decimal("30.00")
    assert summary.loyalty_discount == Decimal("10.00")
    assert summary.loyalty_points_used == 1000
    assert summary.discount_amount == Decimal("60.00")
    assert summary.total == Decimal("48.80")
    assert summary.remaining == Decimal("48.80")
    assert summary.declined == []
    assert redemption_gateway.get_gift_card("GIFT30").balance == Decimal("0.00")
    assert redemption_gateway.get_points(mock_customer_id) == 4000


@pytest.mark.asyncio
async def test_coupon_tax_savings_consistency(
    discount_pipeline: DiscountPipeline,
    mock_order_id: UUID,
) -> None:
    """Tax savings equal the discount times the tax rate, rounded to cents."""
    context = _context(mock_order_id, subtotal="200.00")

    summary = await discount_pipeline.run(context, DiscountRequest(coupon_code="TENPCT"))

    # 10% of 200 capped at 15.00
    assert summary.coupon_discount == Decimal("15.00")
    assert summary.tax_savings == Decimal("1.65")
    assert summary.total == Decimal("222.00") - Decimal("15.00") - Decimal("1.65")


@pytest.mark.asyncio
async def test_gift_card_skipped_when_nothing_remains(
    discount_pipeline: DiscountPipeline,
    redemption_gateway: InMemoryRedemptionGateway,
    mock_order_id: UUID,
    mock_customer_id: UUID,
) -> None:
    """Test later gift cards and loyalty are not touched once the total is covered."""
    # Arrange
    context = _context(mock_order_id, mock_customer_id)
    discounts = DiscountRequest(
        gift_cards=[
            GiftCardRequest(code="GIFT500", amount=Decimal("500")),
            GiftCardRequest(code="GIFT30", amount=Decimal("30")),
        ],
        loyalty_points=1000,
    )

    # Act
    summary = await discount_pipeline.run(context, discounts)

    # Assert
    assert summary.gift_card_amount == Decimal("111.00")
    assert [g.code for g in summary.gift_card_redemptions] == ["GIFT500"]
    assert summary.total == Decimal("0.00")
    assert summary.declined == []
    assert redemption_gateway.get_gift_card("GIFT500").balance == Decimal("389.00")
    assert redemption_gateway.get_gift_card("GIFT30").balance == Decimal("30.00")
    assert redemption_gateway.get_points(mock_customer_id) == 5000


@pytest.mark.asyncio
async def test_loyalty_capped_at_remaining(
    discount_pipeline: DiscountPipeline,
    mock_order_id: UUID,
    mock_customer_id: UUID,
) -> None:
    context = _context(mock_order_id, mock_customer_id)
    discounts = DiscountRequest(
        gift_cards=[GiftCardRequest(code="GIFT500", amount=Decimal("100"))],
        loyalty_points=5000,
    )

    summary = await discount_pipeline.run(context, discounts)

    assert summary.loyalty_discount == Decimal("11.00")
    assert summary.total == Decimal("0.00")


def test_negative_loyalty_dollar_value_rejected() -> None:
    with pytest.raises(ValidationError):
        DiscountRequest(loyalty_points=1000, loyalty_points_dollar_value=Decimal("-50"))


@pytest.mark.asyncio
async def test_loyalty_step_never_raises_total(
    redemption_gateway: InMemoryRedemptionGateway,
    mock_order_id: UUID,
    mock_customer_id: UUID,
) -> None:
    """Test a negative dollar value is declined without debiting points."""
    # Arrange
    step = LoyaltyStep(1000, Decimal("-50"))

    # Act
    result = await step.execute(
        redemption_gateway, _context(mock_order_id, mock_customer_id), Decimal("111.00")
    )

    # Assert
    assert result.code == "INVALID_LOYALTY_VALUE"
    assert redemption_gateway.get_points(mock_customer_id) == 5000


@pytest.mark.asyncio
async def test_total_never_negative(
    redemption_gateway: InMemoryRedemptionGateway,
    discount_pipeline: DiscountPipeline,
    mock_order_id: UUID,
) -> None:
    redemption_gateway.add_coupon(
        Coupon(
            coupon_id="coupon-big",
            code="BIG150",
            discount_type=ModifierType.FIXED,
            value=Decimal("150"),
        )
    )

    summary = await discount_pipeline.run(
        _context(mock_order_id), DiscountRequest(coupon_code="BIG150")
    )

    # Coupon is capped at the subtotal; tax on it is fully removed
    assert summary.coupon_discount == Decimal("100.00")
    assert summary.tax_savings == Decimal("11.00")
    assert summary.total == Decimal("0.00")


# ==================== DECLINES ====================


@pytest.mark.asyncio
async def test_declined_steps_are_recorded(
    discount_pipeline: DiscountPipeline,
    mock_order_id: UUID,
    mock_customer_id: UUID,
) -> None:
    """Test declined steps do not stop the pipeline."""
    # Arrange
    context = _context(mock_order_id, mock_customer_id)
    discounts = DiscountRequest(
        coupon_code="NOPE",
        gift_cards=[
            GiftCardRequest(code="MISSING", amount=Decimal("10")),
            GiftCardRequest(code="GIFT30", amount=Decimal("10")),
        ],
        loyalty_points=999999,
    )

    # Act
    summary = await discount_pipeline.run(context, discounts)

    # Assert
    assert [(d.step, d.code) for d in summary.declined] == [
        (DiscountStep.COUPON, "COUPON_DECLINED"),
        (DiscountStep.GIFT_CARD, "GIFT_CARD_DECLINED"),
        (DiscountStep.LOYALTY, "LOYALTY_DECLINED"),
    ]
    assert summary.declined[0].reason == "Invalid coupon code"
    assert summary.declined[0].reference == "NOPE"
    assert summary.declined[1].reference == "MISSING"
    assert summary.declined[2].reason == "Insufficient points"
    assert summary.gift_card_amount == Decimal("10.00")
    assert summary.total == Decimal("101.00")


@pytest.mark.asyncio
async def test_loyalty_requires_customer(
    discount_pipeline: DiscountPipeline,
    mock_order_id: UUID,
) -> None:
    summary = await discount_pipeline.run(
        _context(mock_order_id), DiscountRequest(loyalty_points=100)
    )

    assert summary.declined[0].code == "CUSTOMER_REQUIRED"
    assert summary.loyalty_discount == Decimal("0.00")


@pytest.mark.asyncio
async def test_coupon_module_scope(
    redemption_gateway: InMemoryRedemptionGateway,
    discount_pipeline: DiscountPipeline,
    mock_order_id: UUID,
) -> None:
    redemption_gateway.add_coupon(
        Coupon(
            coupon_id="coupon-spa",
            code="SPA10",
            discount_type=ModifierType.FIXED,
            value=Decimal("10"),
            module_scope="spa",
        )
    )

    summary = await discount_pipeline.run(
        _context(mock_order_id, module_scope="restaurant"), DiscountRequest(coupon_code="SPA10")
    )

    assert summary.declined[0].reason == "Coupon not valid for this module"


@pytest.mark.asyncio
async def test_gateway_failure_becomes_declined_step(mock_order_id: UUID) -> None:
    """Test an unavailable redemption service does not fail the order."""
    # Arrange
    gateway = AsyncMock(spec=RedemptionGateway)
    gateway.apply_coupon.side_effect = RedemptionServiceUnavailableException("apply_coupon")
    gateway.redeem_gift_card.return_value = GiftCardRedemption(
        success=True, amount_redeemed=Decimal("30.00"), gift_card_id="gc-001"
    )
    pipeline = DiscountPipeline(gateway)

    # Act
    summary = await pipeline.run(
        _context(mock_order_id),
        DiscountRequest(
            coupon_code="SAVE20",
            gift_cards=[GiftCardRequest(code="GIFT30", amount=Decimal("30"))],
        ),
    )

    # Assert
    assert summary.declined[0].step == DiscountStep.COUPON
    assert summary.declined[0].code == "REDEMPTION_SERVICE_UNAVAILABLE"
    assert summary.gift_card_amount == Decimal("30.00")
    assert summary.total == Decimal("81.00")
    gateway.redeem_gift_card.assert_called_once_with("GIFT30", Decimal("30.00"), mock_order_id)


@pytest.mark.asyncio
async def test_unexpected_error_becomes_step_failed(mock_order_id: UUID) -> None:
    gateway = AsyncMock(spec=RedemptionGateway)
    gateway.redeem_gift_card.side_effect = RuntimeError("boom")
    pipeline = DiscountPipeline(gateway)

    summary = await pipeline.run(
        _context(mock_order_id),
        DiscountRequest(gift_cards=[GiftCardRequest(code="GIFT30", amount=Decimal("30"))]),
    )

    assert summary.declined[0].code == "STEP_FAILED"
    assert summary.declined[0].reason == "boom"
    assert summary.total == Decimal("111.00")


@pytest.mark.asyncio
async def test_gift_card_amount_requested_is_capped(mock_order_id: UUID) -> None:
    gateway = AsyncMock(spec=RedemptionGateway)
    gateway.redeem_gift_card.return_value = GiftCardRedemption(
        success=True, amount_redeemed=Decimal("111.00"), gift_card_id="gc-002"
    )

    await DiscountPipeline(gateway).run(
        _context(mock_order_id),
        DiscountRequest(gift_cards=[GiftCardRequest(code="GIFT500", amount=Decimal("500"))]),
    )

    gateway.redeem_gift_card.assert_called_once_with("GIFT500", Decimal("111.00"), mock_order_id)


# ==================== IDEMPOTENCY ====================


@pytest.mark.asyncio
async def test_replayed_order_does_not_debit_twice(
    discount_pipeline: DiscountPipeline,
    redemption_gateway: InMemoryRedemptionGateway,
    mock_order_id: UUID,
    mock_customer_id: UUID,
) -> None:
    """Test running the same order twice debits balances once."""
    # Arrange
    context = _context(mock_order_id, mock_customer_id)
    discounts = DiscountRequest(
        coupon_code="SAVE20",
        gift_cards=[GiftCardRequest(code="GIFT30", amount=Decimal("10"))],
        loyalty_points=500,
    )

    # Act
    first = await discount_pipeline.run(context, discounts)
    second = await discount_pipeline.run(context, discounts)

    # Assert
    assert first.declined == []
    assert [d.reason for d in second.declined] == [
        "Coupon already applied to this order",
        "Gift card already redeemed for this order",
        "Points already redeemed for this order",
    ]
    assert redemption_gateway.get_gift_card("GIFT30").balance == Decimal("20.00")
    assert redemption_gateway.get_points(mock_customer_id) == 4500
    assert redemption_gateway.get_coupon("SAVE20").used_count == 1


@pytest.mark.asyncio
async def test_same_codes_on_another_order_are_applied(
    discount_pipeline: DiscountPipeline,
    redemption_gateway: InMemoryRedemptionGateway,
    mock_order_id: UUID,
) -> None:
    discounts = DiscountRequest(
        gift_cards=[GiftCardRequest(code="GIFT30", amount=Decimal("10"))]
    )

    await discount_pipeline.run(_context(mock_order_id), discounts)
    await discount_pipeline.run(_context(uuid4()), discounts)

    assert redemption_gateway.get_gift_card("GIFT30").balance == Decimal("10.00")
