"""Domain models for Resort Pricing Service."""
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.utcnow()


class RateType(str, Enum):
    """Rate type enum."""

    STANDARD = "standard"
    SEASONAL = "seasonal"
    PROMOTIONAL = "promotional"
    EVENT = "event"
    PACKAGE = "package"


class ModifierType(str, Enum):
    """Rate modifier type enum."""

    PERCENTAGE = "percentage"
    FIXED = "fixed"


class DayOfWeek(str, Enum):
    """Canonical day-of-week names."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class AdjustmentType(str, Enum):
    """Kinds of calendar/occupancy adjustments."""

    SEASONAL = "seasonal"
    WEEKEND = "weekend"
    DYNAMIC = "dynamic"
    EARLY_BIRD = "early_bird"
    LAST_MINUTE = "last_minute"


class OrderType(str, Enum):
    """Order type enum."""

    DINE_IN = "dine_in"
    TAKEAWAY = "takeaway"
    DELIVERY = "delivery"
    BOOKING = "booking"


class DiscountStep(str, Enum):
    """Discount pipeline steps, in execution order."""

    COUPON = "coupon"
    GIFT_CARD = "gift_card"
    LOYALTY = "loyalty"
    ACCRUAL = "accrual"


# ==================== RATE CATALOG ====================


class Rate(BaseModel):
    """Rate domain model."""

    rate_id: UUID = Field(default_factory=uuid4)
    name: str
    description: str
    rate_type: RateType = RateType.STANDARD
    base_price: Decimal
    currency: str = "USD"
    applicable_item_type: str
    applicable_item_id: Optional[UUID] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    days_of_week: List[DayOfWeek] = Field(default_factory=list)
    min_stay: int = 1
    max_stay: Optional[int] = None
    is_active: bool = True
    priority: int = 0
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    class Config:
        """Pydantic config."""

        from_attributes = True


class RateModifier(BaseModel):
    """Named percentage or fixed adjustment attached to a rate."""

    modifier_id: UUID = Field(default_factory=uuid4)
    rate_id: UUID
    name: str
    modifier_type: ModifierType
    value: Decimal
    condition: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)

    class Config:
        """Pydantic config."""

        from_attributes = True


class RateFilters(BaseModel):
    """Filters for listing rates."""

    item_type: Optional[str] = None
    item_id: Optional[UUID] = None
    rate_type: Optional[RateType] = None
    is_active: Optional[bool] = None


class CreateRateRequest(BaseModel):
    """Request to create a rate.

    Enumerated fields arrive as plain strings and are validated by the
    service so callers get a domain error code instead of a schema error.
    """

    name: str
    description: str
    rate_type: str
    base_price: Decimal
    currency: Optional[str] = None
    applicable_item_type: str
    applicable_item_id: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    days_of_week: Optional[List[str]] = None
    min_stay: Optional[int] = None
    max_stay: Optional[int] = None
    priority: Optional[int] = None


class UpdateRateRequest(BaseModel):
    """Partial rate update; only explicitly supplied fields are applied."""

    name: Optional[str] = None
    description: Optional[str] = None
    rate_type: Optional[str] = None
    base_price: Optional[Decimal] = None
    currency: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    days_of_week: Optional[List[str]] = None
    min_stay: Optional[int] = None
    max_stay: Optional[int] = None
    priority: Optional[int] = None


class AddModifierRequest(BaseModel):
    """Request to attach a modifier to a rate."""

    name: str
    modifier_type: str
    value: Decimal
    condition: Optional[str] = None


class ModifierContribution(BaseModel):
    """One modifier's contribution to a price."""

    name: str
    amount: Decimal

    class Config:
        """Pydantic config."""

        frozen = True


class PriceBreakdown(BaseModel):
    """Rate-catalog price for an item, date and stay length."""

    base_price: Decimal = Decimal("0.00")
    modifiers: List[ModifierContribution] = Field(default_factory=list)
    total_price: Decimal = Decimal("0.00")
    currency: str = "USD"
    applied_rate: Optional[Rate] = None

    class Config:
        """Pydantic config."""

        frozen = True

    @property
    def has_rate(self) -> bool:
        return self.applied_rate is not None


class RateStats(BaseModel):
    """Catalog statistics."""

    total_rates: int = 0
    active_rates: int = 0
    inactive_rates: int = 0
    by_type: dict = Field(default_factory=lambda: {t.value: 0 for t in RateType})
    avg_base_price: Decimal = Decimal("0.00")


# ==================== SEASONAL & DYNAMIC ====================


class SeasonalRule(BaseModel):
    """Calendar-recurring (MM-DD) price multiplier."""

    rule_id: UUID = Field(default_factory=uuid4)
    name: str
    start_date: str  # MM-DD
    end_date: str  # MM-DD
    price_multiplier: Decimal
    applicable_to: List[str]
    specific_items: List[str] = Field(default_factory=list)
    priority: int = 0
    is_active: bool = True
    created_at: datetime = Field(default_factory=_utcnow)

    class Config:
        """Pydantic config."""

        from_attributes = True


class CreateSeasonalRuleRequest(BaseModel):
    """Request to create a seasonal rule."""

    name: str
    start_date: str
    end_date: str
    price_multiplier: Decimal
    applicable_to: List[str]
    specific_items: List[str] = Field(default_factory=list)
    priority: int = 0
    is_active: bool = True


class UpdateSeasonalRuleRequest(BaseModel):
    """Partial seasonal rule update."""

    name: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    price_multiplier: Optional[Decimal] = None
    applicable_to: Optional[List[str]] = None
    specific_items: Optional[List[str]] = None
    priority: Optional[int] = None
    is_active: Optional[bool] = None


class DynamicPricingConfig(BaseModel):
    """Occupancy and booking-window pricing configuration."""

    enabled: bool = False
    min_occupancy_threshold: Decimal = Decimal("30")
    max_occupancy_threshold: Decimal = Decimal("80")
    min_price_multiplier: Decimal = Decimal("0.85")
    max_price_multiplier: Decimal = Decimal("1.25")
    advance_booking_days: int = 30
    early_bird_discount: Decimal = Decimal("0.1")
    last_minute_days: int = 3
    last_minute_premium: Decimal = Decimal("0.0")


class WeekendPricingConfig(BaseModel):
    """Weekend surcharge configuration."""

    enabled: bool = False
    multiplier: Decimal = Decimal("1.2")
    weekend_days: List[DayOfWeek] = Field(
        default_factory=lambda: [DayOfWeek.SATURDAY, DayOfWeek.SUNDAY]
    )


class AppliedAdjustment(BaseModel):
    """One adjustment contributing to an adjusted price."""

    name: str
    type: AdjustmentType
    multiplier: Decimal
    amount: Decimal


class AdjustedPrice(BaseModel):
    """Seasonal/dynamic adjustment breakdown for a single date."""

    target_date: date
    base_price: Decimal
    final_price: Decimal
    applied_rules: List[AppliedAdjustment] = Field(default_factory=list)
    seasonal_adjustment: Decimal = Decimal("0.00")
    weekend_adjustment: Decimal = Decimal("0.00")
    dynamic_adjustment: Decimal = Decimal("0.00")
    total_adjustments: Decimal = Decimal("0.00")
    occupancy: Optional[Decimal] = None


class AdjustedPriceRequest(BaseModel):
    """Request to compute an adjusted price."""

    category: str
    item_id: Optional[str] = None
    base_price: Decimal
    target_date: date
    occupancy: Optional[Decimal] = None


class PricingCalendarRequest(BaseModel):
    """Request to compute adjusted prices over a date range."""

    category: str
    item_id: Optional[str] = None
    base_price: Decimal
    start_date: date
    end_date: date


# ==================== ORDERS & DISCOUNTS ====================


class OrderLine(BaseModel):
    """Priced order line."""

    item_id: Optional[str] = None
    name: str
    unit_price: Decimal = Field(ge=0)
    quantity: int = Field(default=1, ge=1)


class GiftCardRequest(BaseModel):
    """Gift card to redeem against an order."""

    code: str
    amount: Decimal = Field(gt=0)


class DiscountRequest(BaseModel):
    """Redemptions requested for an order."""

    coupon_code: Optional[str] = None
    gift_cards: List[GiftCardRequest] = Field(default_factory=list)
    loyalty_points: int = Field(default=0, ge=0)
    loyalty_points_dollar_value: Optional[Decimal] = Field(default=None, ge=0)


class PriceOrderRequest(BaseModel):
    """Request to price an order."""

    order_id: UUID = Field(default_factory=uuid4)
    customer_id: Optional[UUID] = None
    order_type: OrderType = OrderType.TAKEAWAY
    module_scope: str = "all"
    lines: List[OrderLine]
    discounts: DiscountRequest = Field(default_factory=DiscountRequest)


class AppliedGiftCard(BaseModel):
    """Gift card redemption recorded on an order."""

    code: str
    amount: Decimal
    gift_card_id: Optional[str] = None


class DiscountOutcome(BaseModel):
    """A discount step that reduced the order total."""

    step: DiscountStep
    amount: Decimal
    tax_savings: Decimal = Decimal("0.00")
    code: Optional[str] = None
    reference: Optional[str] = None
    points: int = 0


class DiscountError(BaseModel):
    """A discount or accrual step that contributed nothing."""

    step: DiscountStep
    code: str
    reason: str
    reference: Optional[str] = None


class OrderTotal(BaseModel):
    """Order-time price breakdown."""

    order_id: UUID
    subtotal: Decimal
    tax_amount: Decimal
    service_charge: Decimal = Decimal("0.00")
    delivery_fee: Decimal = Decimal("0.00")
    pre_discount_total: Decimal
    discount_amount: Decimal = Decimal("0.00")
    coupon_id: Optional[str] = None
    coupon_code: Optional[str] = None
    coupon_discount: Decimal = Decimal("0.00")
    tax_savings: Decimal = Decimal("0.00")
    gift_card_amount: Decimal = Decimal("0.00")
    gift_card_redemptions: List[AppliedGiftCard] = Field(default_factory=list)
    loyalty_points_used: int = 0
    loyalty_discount: Decimal = Decimal("0.00")
    loyalty_points_earned: int = 0
    total: Decimal
    declined_steps: List[DiscountError] = Field(default_factory=list)


class StayQuoteRequest(BaseModel):
    """Request to quote a stay."""

    item_type: str
    item_id: Optional[str] = None
    check_in: date
    nights: int = Field(default=1, ge=1)
    occupancy: Optional[Decimal] = None


class StayQuote(BaseModel):
    """Rate-catalog price combined with calendar/occupancy adjustments."""

    item_type: str
    item_id: Optional[str] = None
    check_in: date
    nights: int
    rate_price: PriceBreakdown
    adjusted: AdjustedPrice
    total: Decimal
    currency: str


# ==================== REDEMPTION RESULTS ====================


class CouponRedemption(BaseModel):
    """Result of an atomic coupon application."""

    success: bool
    discount_amount: Decimal = Decimal("0.00")
    coupon_id: Optional[str] = None
    error_message: Optional[str] = None


class GiftCardRedemption(BaseModel):
    """Result of an atomic gift card redemption."""

    success: bool
    amount_redeemed: Decimal = Decimal("0.00")
    gift_card_id: Optional[str] = None
    error_message: Optional[str] = None


class LoyaltyRedemption(BaseModel):
    """Result of an atomic loyalty point redemption."""

    success: bool
    points_redeemed: int = 0
    error_message: Optional[str] = None


class LoyaltyAccrual(BaseModel):
    """Result of an atomic loyalty point accrual."""

    success: bool
    points_earned: int = 0
    error_message: Optional[str] = None
