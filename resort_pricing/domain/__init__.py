"""Domain layer."""
from resort_pricing.domain.exceptions import (
    DomainException,
    InvalidBasePriceException,
    InvalidCurrencyException,
    InvalidDateRangeException,
    InvalidDayOfWeekException,
    InvalidDescriptionException,
    InvalidDynamicConfigException,
    InvalidItemIdException,
    InvalidItemTypeException,
    InvalidModifierTypeException,
    InvalidModifierIdException,
    InvalidModifierValueException,
    InvalidNameException,
    InvalidOrderException,
    InvalidRateIdException,
    InvalidRateTypeException,
    InvalidSeasonalRuleException,
    InvalidStayRangeException,
    ModifierNotFoundException,
    RateNotFoundException,
    RateServiceError,
    RateStateConflictException,
    RedemptionServiceUnavailableException,
    SeasonalRuleNotFoundException,
)
from resort_pricing.domain.models import (
    AdjustedPrice,
    AdjustmentType,
    AppliedAdjustment,
    DayOfWeek,
    DiscountRequest,
    DiscountError,
    DiscountOutcome,
    DiscountStep,
    DynamicPricingConfig,
    ModifierType,
    OrderTotal,
    OrderType,
    PriceBreakdown,
    PriceOrderRequest,
    Rate,
    RateModifier,
    RateType,
    SeasonalRule,
    WeekendPricingConfig,
)

__all__ = [
    # Models
    "Rate",
    "RateModifier",
    "RateType",
    "ModifierType",
    "DayOfWeek",
    "PriceBreakdown",
    "SeasonalRule",
    "DynamicPricingConfig",
    "WeekendPricingConfig",
    "AdjustedPrice",
    "AdjustmentType",
    "AppliedAdjustment",
    "OrderType",
    "OrderTotal",
    "PriceOrderRequest",
    "DiscountRequest",
    "DiscountStep",
    "DiscountOutcome",
    "DiscountError",
    # Exceptions
    "DomainException",
    "RateServiceError",
    "InvalidNameException",
    "InvalidDescriptionException",
    "InvalidRateTypeException",
    "InvalidBasePriceException",
    "InvalidCurrencyException",
    "InvalidItemTypeException",
    "InvalidItemIdException",
    "InvalidRateIdException",
    "InvalidDateRangeException",
    "InvalidDayOfWeekException",
    "InvalidStayRangeException",
    "InvalidModifierTypeException",
    "InvalidModifierIdException",
    "InvalidModifierValueException",
    "RateNotFoundException",
    "ModifierNotFoundException",
    "RateStateConflictException",
    "InvalidSeasonalRuleException",
    "SeasonalRuleNotFoundException",
    "InvalidDynamicConfigException",
    "InvalidOrderException",
    "RedemptionServiceUnavailableException",
]
