"""Seasonal, weekend and dynamic price adjustment."""
import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Dict, List, Optional
from uuid import UUID

from resort_pricing.config import settings
from resort_pricing.domain.exceptions import (
    InvalidDateRangeException,
    InvalidDynamicConfigException,
    InvalidSeasonalRuleException,
    SeasonalRuleNotFoundException,
)
from resort_pricing.domain.models import (
    AdjustedPrice,
    AdjustmentType,
    AppliedAdjustment,
    CreateSeasonalRuleRequest,
    DynamicPricingConfig,
    SeasonalRule,
    UpdateSeasonalRuleRequest,
    WeekendPricingConfig,
)
from resort_pricing.infrastructure.repositories import (
    DynamicConfigRepository,
    OccupancyProvider,
    SeasonalRuleRepository,
)
from resort_pricing.utils import (
    date_range,
    days_between,
    is_weekend,
    parse_month_day,
    quantize_money,
    to_decimal,
    today,
)

logger = logging.getLogger(__name__)

MIN_MULTIPLIER = Decimal("0.1")
MAX_MULTIPLIER = Decimal("3.0")
ONE = Decimal("1")
ZERO = Decimal("0")


def _validate_multiplier(multiplier: Decimal, error_cls) -> None:
    if not (MIN_MULTIPLIER <= multiplier <= MAX_MULTIPLIER):
        raise error_cls(f"Multiplier must be between {MIN_MULTIPLIER} and {MAX_MULTIPLIER}")


def _validate_rule_fields(
    name: str, start_date: str, end_date: str, multiplier: Decimal, applicable_to: List[str]
) -> None:
    if not name or not name.strip():
        raise InvalidSeasonalRuleException("Rule name is required")
    for label, value in (("start", start_date), ("end", end_date)):
        try:
            parse_month_day(value)
        except ValueError:
            raise InvalidSeasonalRuleException(f"Invalid {label} date, expected MM-DD: {value}")
    _validate_multiplier(multiplier, InvalidSeasonalRuleException)
    if not applicable_to:
        raise InvalidSeasonalRuleException("Rule must apply to at least one category")


def _validate_dynamic_config(config: DynamicPricingConfig) -> None:
    for label, value in (
        ("min_occupancy_threshold", config.min_occupancy_threshold),
        ("max_occupancy_threshold", config.max_occupancy_threshold),
    ):
        if not (ZERO <= value <= Decimal("100")):
            raise InvalidDynamicConfigException(f"{label} must be between 0 and 100")
    if config.min_occupancy_threshold > config.max_occupancy_threshold:
        raise InvalidDynamicConfigException(
            "min_occupancy_threshold cannot exceed max_occupancy_threshold"
        )
    if config.min_price_multiplier <= 0 or config.max_price_multiplier <= 0:
        raise InvalidDynamicConfigException("Price multipliers must be positive")
    if config.min_price_multiplier > config.max_price_multiplier:
        raise InvalidDynamicConfigException(
            "min_price_multiplier cannot exceed max_price_multiplier"
        )
    if config.advance_booking_days < 0 or config.last_minute_days < 0:
        raise InvalidDynamicConfigException("Booking windows cannot be negative")
    if config.advance_booking_days <= config.last_minute_days:
        raise InvalidDynamicConfigException(
            "advance_booking_days must be greater than last_minute_days"
        )
    if not (ZERO <= config.early_bird_discount <= ONE):
        raise InvalidDynamicConfigException("early_bird_discount must be between 0 and 1")
    if config.last_minute_premium < 0:
        raise InvalidDynamicConfigException("last_minute_premium cannot be negative")


def calculate_occupancy_multiplier(
    occupancy: Decimal, config: DynamicPricingConfig
) -> Decimal:
    """Multiplier for an occupancy percentage.

    Clamped to the min/max multipliers outside the thresholds and linearly
    interpolated between them.
    """
    occupancy = to_decimal(occupancy)
    if occupancy >= config.max_occupancy_threshold:
        return config.max_price_multiplier
    if occupancy <= config.min_occupancy_threshold:
        return config.min_price_multiplier

    span = config.max_occupancy_threshold - config.min_occupancy_threshold
    position = (occupancy - config.min_occupancy_threshold) / span
    return config.min_price_multiplier + position * (
        config.max_price_multiplier - config.min_price_multiplier
    )


def calculate_dynamic_price(
    base_price: Decimal, occupancy: Decimal, config: DynamicPricingConfig
) -> Decimal:
    return to_decimal(base_price) * calculate_occupancy_multiplier(occupancy, config)


class SeasonalPricingService:
    """Service for calendar and occupancy based price adjustments."""

    def __init__(
        self,
        rule_repository: SeasonalRuleRepository,
        config_repository: DynamicConfigRepository,
        occupancy_provider: Optional[OccupancyProvider] = None,
        clock: Callable[[], date] = today,
    ):
        self.rule_repository = rule_repository
        self.config_repository = config_repository
        self.occupancy_provider = occupancy_provider
        self.clock = clock

    # ==================== SEASONAL RULES ====================

    async def create_seasonal_rule(self, request: CreateSeasonalRuleRequest) -> SeasonalRule:
        _validate_rule_fields(
            request.name,
            request.start_date,
            request.end_date,
            request.price_multiplier,
            request.applicable_to,
        )
        rule = SeasonalRule(
            name=request.name.strip(),
            start_date=request.start_date.strip(),
            end_date=request.end_date.strip(),
            price_multiplier=request.price_multiplier,
            applicable_to=request.applicable_to,
            specific_items=request.specific_items,
            priority=request.priority,
            is_active=request.is_active,
        )
        created = await self.rule_repository.create(rule)
        logger.info(f"Created seasonal rule {created.rule_id} ({created.name})")
        return created

    async def get_seasonal_rule(self, rule_id: UUID) -> SeasonalRule:
        rule = await self.rule_repository.get_by_id(rule_id)
        if rule is None:
            raise SeasonalRuleNotFoundException(str(rule_id))
        return rule

    async def list_seasonal_rules(self) -> List[SeasonalRule]:
        return await self.rule_repository.list()

    async def update_seasonal_rule(
        self, rule_id: UUID, request: UpdateSeasonalRuleRequest
    ) -> SeasonalRule:
        rule = await self.get_seasonal_rule(rule_id)
        updates = request.model_dump(exclude_unset=True, exclude_none=True)
        merged = rule.model_copy(update=updates)
        _validate_rule_fields(
            merged.name,
            merged.start_date,
            merged.end_date,
            merged.price_multiplier,
            merged.applicable_to,
        )
        if not updates:
            return rule
        updated = await self.rule_repository.update(rule_id, updates)
        logger.info(f"Updated seasonal rule {rule_id}")
        return updated

    async def delete_seasonal_rule(self, rule_id: UUID) -> None:
        await self.get_seasonal_rule(rule_id)
        await self.rule_repository.delete(rule_id)
        logger.info(f"Deleted seasonal rule {rule_id}")

    # ==================== CONFIGS ====================

    async def get_dynamic_config(self, domain: Optional[str] = None) -> DynamicPricingConfig:
        """Config for a pricing domain, falling back to the default domain."""
        domain = domain or settings.default_pricing_domain
        config = await self.config_repository.get(domain)
        if config is None and domain != settings.default_pricing_domain:
            config = await self.config_repository.get(settings.default_pricing_domain)
        return config or DynamicPricingConfig()

    async def replace_dynamic_config(
        self, domain: Optional[str], config: DynamicPricingConfig
    ) -> DynamicPricingConfig:
        """Validate and replace the whole config for a domain (None: default)."""
        _validate_dynamic_config(config)
        domain = domain or settings.default_pricing_domain
        await self.config_repository.replace(domain, config)
        logger.info(f"Replaced dynamic pricing config for {domain} (enabled={config.enabled})")
        return config

    async def get_weekend_config(self) -> WeekendPricingConfig:
        return await self.config_repository.get_weekend() or WeekendPricingConfig()

    async def replace_weekend_config(self, config: WeekendPricingConfig) -> WeekendPricingConfig:
        _validate_multiplier(config.multiplier, InvalidDynamicConfigException)
        if not config.weekend_days:
            raise InvalidDynamicConfigException("At least one weekend day is required")
        await self.config_repository.replace_weekend(config)
        logger.info(f"Replaced weekend pricing config (enabled={config.enabled})")
        return config

    # ==================== ADJUSTMENT ====================

    async def _select_seasonal_rule(
        self, category: str, item_id: Optional[str], target_date: date
    ) -> Optional[SeasonalRule]:
        rules = await self.rule_repository.get_active_rules_for(category, target_date)
        for rule in rules:
            if rule.specific_items and item_id not in rule.specific_items:
                continue
            return rule
        return None

    async def _resolve_occupancy(
        self, category: str, target_date: date, occupancy: Optional[Decimal]
    ) -> Optional[Decimal]:
        if occupancy is not None:
            return to_decimal(occupancy)
        if self.occupancy_provider is None:
            return None
        return await self.occupancy_provider.get_occupancy(category, target_date)

    async def calculate_adjusted_price(
        self,
        category: str,
        item_id: Optional[str],
        base_price: Decimal,
        target_date: date,
        occupancy: Optional[Decimal] = None,
        today: Optional[date] = None,
    ) -> AdjustedPrice:
        """Apply seasonal, weekend and dynamic adjustments to a base price.

        Every adjustment is computed against ``base_price`` and summed; the
        final price is clamped at zero and rounded to cents.
        """
        base_price = to_decimal(base_price)
        today = today or self.clock()
        applied: List[AppliedAdjustment] = []
        seasonal = weekend = dynamic = ZERO

        def apply(name: str, kind: AdjustmentType, multiplier: Decimal) -> Decimal:
            amount = base_price * (multiplier - ONE)
            applied.append(
                AppliedAdjustment(
                    name=name,
                    type=kind,
                    multiplier=multiplier,
                    amount=quantize_money(amount),
                )
            )
            return amount

        rule = await self._select_seasonal_rule(category, item_id, target_date)
        if rule is not None:
            seasonal = apply(rule.name, AdjustmentType.SEASONAL, rule.price_multiplier)

        weekend_config = await self.get_weekend_config()
        if weekend_config.enabled and is_weekend(target_date, weekend_config.weekend_days):
            weekend = apply("Weekend Pricing", AdjustmentType.WEEKEND, weekend_config.multiplier)

        used_occupancy = None
        config = await self.get_dynamic_config(category)
        if config.enabled:
            days_until = days_between(today, target_date)

            # Early-bird and last-minute are independent; overlapping windows apply both
            if days_until >= config.advance_booking_days:
                dynamic += apply(
                    "Early Bird Discount",
                    AdjustmentType.EARLY_BIRD,
                    ONE - config.early_bird_discount,
                )
            if days_until <= config.last_minute_days and config.last_minute_premium != 0:
                dynamic += apply(
                    "Last Minute Rate",
                    AdjustmentType.LAST_MINUTE,
                    ONE + config.last_minute_premium,
                )

            used_occupancy = await self._resolve_occupancy(category, target_date, occupancy)
            if used_occupancy is not None:
                multiplier = calculate_occupancy_multiplier(used_occupancy, config)
                label = used_occupancy.quantize(ONE, rounding=ROUND_HALF_UP)
                dynamic += apply(
                    f"Demand-based ({label}% occupancy)",
                    AdjustmentType.DYNAMIC,
                    multiplier,
                )

        total = seasonal + weekend + dynamic
        return AdjustedPrice(
            target_date=target_date,
            base_price=quantize_money(base_price),
            final_price=quantize_money(max(ZERO, base_price + total)),
            applied_rules=applied,
            seasonal_adjustment=quantize_money(seasonal),
            weekend_adjustment=quantize_money(weekend),
            dynamic_adjustment=quantize_money(dynamic),
            total_adjustments=quantize_money(total),
            occupancy=used_occupancy,
        )

    async def get_pricing_calendar(
        self,
        category: str,
        item_id: Optional[str],
        base_price: Decimal,
        start_date: date,
        end_date: date,
        today: Optional[date] = None,
    ) -> Dict[date, AdjustedPrice]:
        """Adjusted price for every date in an inclusive range, in date order."""
        if start_date > end_date:
            raise InvalidDateRangeException()
        if days_between(start_date, end_date) + 1 > settings.calendar_max_days:
            raise InvalidDateRangeException(
                f"Calendar range cannot exceed {settings.calendar_max_days} days"
            )

        today = today or self.clock()
        calendar: Dict[date, AdjustedPrice] = {}
        for day in date_range(start_date, end_date):
            calendar[day] = await self.calculate_adjusted_price(
                category, item_id, base_price, day, today=today
            )
        return calendar
