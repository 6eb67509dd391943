"""Order-time discount pipeline.

Steps run in a fixed order (coupon, gift cards in caller order, loyalty
points) against a running remaining total. Each step returns either a
``DiscountOutcome`` or a ``DiscountError``; a declined or failing step never
aborts the pipeline.
"""
import logging
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field

from resort_pricing.config import settings
from resort_pricing.domain.exceptions import DomainException
from resort_pricing.domain.models import (
    AppliedGiftCard,
    DiscountError,
    DiscountOutcome,
    DiscountRequest,
    DiscountStep,
    GiftCardRequest,
)
from resort_pricing.infrastructure.redemptions import RedemptionGateway
from resort_pricing.utils import quantize_money

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")

StepResult = Union[DiscountOutcome, DiscountError]


class PipelineContext(BaseModel):
    """Order figures every step reads."""

    order_id: UUID
    customer_id: Optional[UUID] = None
    subtotal: Decimal
    pre_discount_total: Decimal
    tax_rate: Decimal
    module_scope: str = "all"


class DiscountSummary(BaseModel):
    """Accumulated effect of all pipeline steps."""

    pre_discount_total: Decimal
    remaining: Decimal
    coupon_id: Optional[str] = None
    coupon_code: Optional[str] = None
    coupon_discount: Decimal = ZERO
    tax_savings: Decimal = ZERO
    gift_card_amount: Decimal = ZERO
    gift_card_redemptions: List[AppliedGiftCard] = Field(default_factory=list)
    loyalty_points_used: int = 0
    loyalty_discount: Decimal = ZERO
    declined: List[DiscountError] = Field(default_factory=list)

    @property
    def discount_amount(self) -> Decimal:
        return self.coupon_discount + self.gift_card_amount + self.loyalty_discount

    @property
    def total(self) -> Decimal:
        return max(ZERO, self.pre_discount_total - self.discount_amount - self.tax_savings)

    def record(self, outcome: DiscountOutcome) -> None:
        if outcome.step == DiscountStep.COUPON:
            self.coupon_discount += outcome.amount
            self.tax_savings += outcome.tax_savings
            self.coupon_code = outcome.code
            self.coupon_id = outcome.reference
        elif outcome.step == DiscountStep.GIFT_CARD:
            self.gift_card_amount += outcome.amount
            self.gift_card_redemptions.append(
                AppliedGiftCard(
                    code=outcome.code, amount=outcome.amount, gift_card_id=outcome.reference
                )
            )
        elif outcome.step == DiscountStep.LOYALTY:
            self.loyalty_discount += outcome.amount
            self.loyalty_points_used += outcome.points
        self.remaining -= outcome.amount + outcome.tax_savings


class DiscountStepHandler(ABC):
    """One step of the pipeline."""

    step: DiscountStep
    reference: Optional[str] = None

    def should_skip(self, remaining: Decimal) -> bool:
        return False

    @abstractmethod
    async def execute(
        self, gateway: RedemptionGateway, context: PipelineContext, remaining: Decimal
    ) -> StepResult:
        """Perform the redemption and describe its effect."""
        pass

    def declined(self, code: str, reason: str) -> DiscountError:
        return DiscountError(step=self.step, code=code, reason=reason, reference=self.reference)


class CouponStep(DiscountStepHandler):
    """Pre-tax coupon; also removes the tax on the discounted amount."""

    step = DiscountStep.COUPON

    def __init__(self, code: str):
        self.code = code.strip().upper()
        self.reference = self.code

    async def execute(
        self, gateway: RedemptionGateway, context: PipelineContext, remaining: Decimal
    ) -> StepResult:
        result = await gateway.apply_coupon(
            self.code,
            context.customer_id,
            context.subtotal,
            context.order_id,
            context.module_scope,
        )
        if not result.success:
            return self.declined("COUPON_DECLINED", result.error_message or "Coupon not applied")

        discount = quantize_money(result.discount_amount)
        return DiscountOutcome(
            step=self.step,
            amount=discount,
            tax_savings=quantize_money(discount * context.tax_rate),
            code=self.code,
            reference=result.coupon_id,
        )


class GiftCardStep(DiscountStepHandler):
    """Gift card debit capped at the remaining total."""

    step = DiscountStep.GIFT_CARD

    def __init__(self, gift_card: GiftCardRequest):
        self.code = gift_card.code.strip().upper()
        self.amount = gift_card.amount
        self.reference = self.code

    def should_skip(self, remaining: Decimal) -> bool:
        return remaining <= 0

    async def execute(
        self, gateway: RedemptionGateway, context: PipelineContext, remaining: Decimal
    ) -> StepResult:
        requested = quantize_money(min(self.amount, remaining))
        result = await gateway.redeem_gift_card(self.code, requested, context.order_id)
        if not result.success:
            return self.declined(
                "GIFT_CARD_DECLINED", result.error_message or "Gift card not redeemed"
            )

        return DiscountOutcome(
            step=self.step,
            amount=quantize_money(min(result.amount_redeemed, requested)),
            code=self.code,
            reference=result.gift_card_id,
        )


class LoyaltyStep(DiscountStepHandler):
    """Loyalty point redemption capped at the remaining total."""

    step = DiscountStep.LOYALTY

    def __init__(self, points: int, dollar_value: Optional[Decimal] = None):
        self.points = points
        if dollar_value is None:
            dollar_value = Decimal(points) / Decimal(settings.loyalty_points_per_dollar_value)
        self.dollar_value = quantize_money(dollar_value)

    def should_skip(self, remaining: Decimal) -> bool:
        return remaining <= 0

    async def execute(
        self, gateway: RedemptionGateway, context: PipelineContext, remaining: Decimal
    ) -> StepResult:
        if context.customer_id is None:
            return self.declined("CUSTOMER_REQUIRED", "Loyalty points require a customer")

        redeem_amount = quantize_money(max(ZERO, min(self.dollar_value, remaining)))
        if redeem_amount <= 0:
            return self.declined(
                "INVALID_LOYALTY_VALUE", "Loyalty points have no redeemable value"
            )
        result = await gateway.redeem_loyalty_points(
            context.customer_id, self.points, context.order_id, redeem_amount
        )
        if not result.success:
            return self.declined(
                "LOYALTY_DECLINED", result.error_message or "Points not redeemed"
            )

        return DiscountOutcome(
            step=self.step, amount=redeem_amount, points=result.points_redeemed
        )


def build_steps(discounts: DiscountRequest) -> List[DiscountStepHandler]:
    """Step descriptors for the requested discounts, in execution order."""
    steps: List[DiscountStepHandler] = []
    if discounts.coupon_code and discounts.coupon_code.strip():
        steps.append(CouponStep(discounts.coupon_code))
    for gift_card in discounts.gift_cards:
        steps.append(GiftCardStep(gift_card))
    if discounts.loyalty_points > 0:
        steps.append(LoyaltyStep(discounts.loyalty_points, discounts.loyalty_points_dollar_value))
    return steps


class DiscountPipeline:
    """Runs discount steps sequentially against a redemption gateway."""

    def __init__(self, gateway: RedemptionGateway):
        self.gateway = gateway

    async def _run_step(
        self, step: DiscountStepHandler, context: PipelineContext, remaining: Decimal
    ) -> StepResult:
        try:
            return await step.execute(self.gateway, context, remaining)
        except DomainException as e:
            return step.declined(e.code, e.message)
        except Exception as e:
            logger.exception(f"Unexpected {step.step.value} failure on order {context.order_id}")
            return step.declined("STEP_FAILED", str(e))

    async def run(self, context: PipelineContext, discounts: DiscountRequest) -> DiscountSummary:
        summary = DiscountSummary(
            pre_discount_total=context.pre_discount_total,
            remaining=context.pre_discount_total,
        )

        for step in build_steps(discounts):
            if step.should_skip(summary.remaining):
                logger.info(
                    f"Skipping {step.step.value} {step.reference or ''} on order "
                    f"{context.order_id}: nothing left to discount"
                )
                continue

            result = await self._run_step(step, context, summary.remaining)
            if isinstance(result, DiscountError):
                logger.warning(
                    f"{step.step.value} step declined on order {context.order_id}: "
                    f"[{result.code}] {result.reason}"
                )
                summary.declined.append(result)
                continue

            summary.record(result)
            logger.info(
                f"{step.step.value} applied on order {context.order_id}: "
                f"{result.amount} (tax savings {result.tax_savings})"
            )

        return summary
