"""Rate catalog, resolver and price calculator."""
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from resort_pricing.config import settings
from resort_pricing.domain.exceptions import (
    InvalidBasePriceException,
    InvalidCurrencyException,
    InvalidDateRangeException,
    InvalidDayOfWeekException,
    InvalidDescriptionException,
    InvalidItemIdException,
    InvalidItemTypeException,
    InvalidModifierIdException,
    InvalidModifierTypeException,
    InvalidModifierValueException,
    InvalidNameException,
    InvalidRateIdException,
    InvalidRateTypeException,
    InvalidStayRangeException,
    ModifierNotFoundException,
    RateNotFoundException,
    RateStateConflictException,
)
from resort_pricing.domain.models import (
    AddModifierRequest,
    CreateRateRequest,
    DayOfWeek,
    ModifierContribution,
    ModifierType,
    PriceBreakdown,
    Rate,
    RateFilters,
    RateModifier,
    RateStats,
    RateType,
    UpdateRateRequest,
)
from resort_pricing.infrastructure.repositories import RateRepository
from resort_pricing.utils import parse_date, quantize_money

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500
MIN_PERCENTAGE = Decimal("-100")
MAX_PERCENTAGE = Decimal("1000")

IdLike = Union[str, UUID]


# ==================== VALIDATION HELPERS ====================


def _parse_uuid(value: IdLike) -> Optional[UUID]:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


def _validate_name(name: str) -> str:
    if not name or len(name.strip()) < MIN_NAME_LENGTH:
        raise InvalidNameException(f"Name must be at least {MIN_NAME_LENGTH} characters")
    if len(name) > MAX_NAME_LENGTH:
        raise InvalidNameException(f"Name cannot exceed {MAX_NAME_LENGTH} characters")
    return name.strip()


def _validate_description(description: str) -> str:
    if not description or not description.strip():
        raise InvalidDescriptionException("Description is required")
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise InvalidDescriptionException(
            f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters"
        )
    return description.strip()


def _validate_rate_type(rate_type: str) -> RateType:
    try:
        return RateType(rate_type)
    except ValueError:
        raise InvalidRateTypeException(rate_type)


def _validate_base_price(base_price: Decimal) -> Decimal:
    if base_price < 0:
        raise InvalidBasePriceException()
    return quantize_money(base_price)


def _validate_currency(currency: str) -> str:
    if currency not in settings.supported_currencies:
        raise InvalidCurrencyException(currency)
    return currency


def _parse_rate_date(value: Optional[str], label: str) -> Optional[date]:
    try:
        return parse_date(value)
    except ValueError:
        raise InvalidDateRangeException(f"Invalid {label} date format")


def _validate_date_range(start: Optional[date], end: Optional[date]) -> None:
    if start is not None and end is not None and start > end:
        raise InvalidDateRangeException()


def _validate_days_of_week(days: List[str]) -> List[DayOfWeek]:
    result: List[DayOfWeek] = []
    for day in days:
        try:
            parsed = DayOfWeek(day)
        except ValueError:
            raise InvalidDayOfWeekException(day)
        if parsed not in result:
            result.append(parsed)
    return result


def _validate_stay_limits(min_stay: int, max_stay: Optional[int]) -> None:
    if min_stay < 1:
        raise InvalidStayRangeException("Minimum stay must be at least 1")
    if max_stay is not None:
        if max_stay < 1:
            raise InvalidStayRangeException("Maximum stay must be at least 1")
        if max_stay < min_stay:
            raise InvalidStayRangeException("Maximum stay cannot be less than minimum stay")


def _stay_allows(rate: Rate, nights: int) -> bool:
    if nights < rate.min_stay:
        return False
    return rate.max_stay is None or nights <= rate.max_stay


class RateService:
    """Service for the rate catalog and rate-based price calculation."""

    def __init__(self, rate_repository: RateRepository):
        self.rate_repository = rate_repository

    async def _require_rate(self, rate_id: IdLike) -> Rate:
        parsed = _parse_uuid(rate_id)
        if parsed is None:
            raise InvalidRateIdException(str(rate_id))
        rate = await self.rate_repository.get_by_id(parsed)
        if rate is None:
            raise RateNotFoundException(str(rate_id))
        return rate

    # ==================== CATALOG ====================

    async def create_rate(self, request: CreateRateRequest) -> Rate:
        """Validate and store a new rate."""
        name = _validate_name(request.name)
        description = _validate_description(request.description)
        rate_type = _validate_rate_type(request.rate_type)
        base_price = _validate_base_price(request.base_price)
        currency = _validate_currency(request.currency or settings.default_currency)

        if not request.applicable_item_type or not request.applicable_item_type.strip():
            raise InvalidItemTypeException()

        item_id = None
        if request.applicable_item_id:
            item_id = _parse_uuid(request.applicable_item_id)
            if item_id is None:
                raise InvalidItemIdException(request.applicable_item_id)

        start_date = _parse_rate_date(request.start_date, "start")
        end_date = _parse_rate_date(request.end_date, "end")
        _validate_date_range(start_date, end_date)

        days_of_week = _validate_days_of_week(request.days_of_week or [])

        min_stay = request.min_stay if request.min_stay is not None else 1
        _validate_stay_limits(min_stay, request.max_stay)

        rate = Rate(
            name=name,
            description=description,
            rate_type=rate_type,
            base_price=base_price,
            currency=currency,
            applicable_item_type=request.applicable_item_type.strip(),
            applicable_item_id=item_id,
            start_date=start_date,
            end_date=end_date,
            days_of_week=days_of_week,
            min_stay=min_stay,
            max_stay=request.max_stay,
            priority=request.priority or 0,
        )
        created = await self.rate_repository.create(rate)

        logger.info(
            f"Created rate {created.rate_id} ({created.rate_type.value}) "
            f"for {created.applicable_item_type}"
        )
        return created

    async def get_rate(self, rate_id: IdLike) -> Optional[Rate]:
        """Get rate by ID; None when it does not exist."""
        parsed = _parse_uuid(rate_id)
        if parsed is None:
            raise InvalidRateIdException(str(rate_id))
        return await self.rate_repository.get_by_id(parsed)

    async def update_rate(self, rate_id: IdLike, request: UpdateRateRequest) -> Rate:
        """Apply a partial update.

        Only fields present in the request are validated; date and stay
        bounds are checked against the stored record merged with the update.
        """
        rate = await self._require_rate(rate_id)
        supplied = request.model_fields_set
        updates: Dict[str, Any] = {}

        if "name" in supplied and request.name is not None:
            updates["name"] = _validate_name(request.name)
        if "description" in supplied and request.description is not None:
            updates["description"] = _validate_description(request.description)
        if "rate_type" in supplied and request.rate_type is not None:
            updates["rate_type"] = _validate_rate_type(request.rate_type)
        if "base_price" in supplied and request.base_price is not None:
            updates["base_price"] = _validate_base_price(request.base_price)
        if "currency" in supplied and request.currency is not None:
            updates["currency"] = _validate_currency(request.currency)

        if "start_date" in supplied or "end_date" in supplied:
            start_date = rate.start_date
            end_date = rate.end_date
            if "start_date" in supplied:
                start_date = _parse_rate_date(request.start_date, "start")
                updates["start_date"] = start_date
            if "end_date" in supplied:
                end_date = _parse_rate_date(request.end_date, "end")
                updates["end_date"] = end_date
            _validate_date_range(start_date, end_date)

        if "days_of_week" in supplied:
            updates["days_of_week"] = _validate_days_of_week(request.days_of_week or [])

        if "min_stay" in supplied or "max_stay" in supplied:
            min_stay = rate.min_stay
            max_stay = rate.max_stay
            if "min_stay" in supplied and request.min_stay is not None:
                min_stay = request.min_stay
                updates["min_stay"] = min_stay
            if "max_stay" in supplied:
                max_stay = request.max_stay
                updates["max_stay"] = max_stay
            _validate_stay_limits(min_stay, max_stay)

        if "priority" in supplied and request.priority is not None:
            updates["priority"] = request.priority

        if not updates:
            return rate

        updated = await self.rate_repository.update(rate.rate_id, updates)
        logger.info(f"Updated rate {rate.rate_id}")
        return updated

    async def delete_rate(self, rate_id: IdLike) -> None:
        """Soft-delete a rate; a no-op when it is already inactive."""
        rate = await self._require_rate(rate_id)
        if not rate.is_active:
            return
        await self.rate_repository.delete(rate.rate_id)
        logger.info(f"Deleted (deactivated) rate {rate.rate_id}")

    async def activate_rate(self, rate_id: IdLike) -> Rate:
        rate = await self._require_rate(rate_id)
        if rate.is_active:
            raise RateStateConflictException(str(rate.rate_id), "active")
        logger.info(f"Activating rate {rate.rate_id}")
        return await self.rate_repository.update(rate.rate_id, {"is_active": True})

    async def deactivate_rate(self, rate_id: IdLike) -> Rate:
        rate = await self._require_rate(rate_id)
        if not rate.is_active:
            raise RateStateConflictException(str(rate.rate_id), "inactive")
        logger.info(f"Deactivating rate {rate.rate_id}")
        return await self.rate_repository.update(rate.rate_id, {"is_active": False})

    async def list_rates(self, filters: Optional[RateFilters] = None) -> List[Rate]:
        return await self.rate_repository.list(filters)

    # ==================== MODIFIERS ====================

    async def add_modifier(self, rate_id: IdLike, request: AddModifierRequest) -> RateModifier:
        """Attach a percentage or fixed modifier to an existing rate."""
        rate = await self._require_rate(rate_id)
        name = _validate_name(request.name)

        try:
            modifier_type = ModifierType(request.modifier_type)
        except ValueError:
            raise InvalidModifierTypeException(request.modifier_type)

        if modifier_type == ModifierType.PERCENTAGE and not (
            MIN_PERCENTAGE <= request.value <= MAX_PERCENTAGE
        ):
            raise InvalidModifierValueException()

        condition = request.condition.strip() if request.condition else None
        modifier = RateModifier(
            rate_id=rate.rate_id,
            name=name,
            modifier_type=modifier_type,
            value=request.value,
            condition=condition or None,
        )
        created = await self.rate_repository.add_modifier(modifier)

        logger.info(f"Added {modifier_type.value} modifier '{name}' to rate {rate.rate_id}")
        return created

    async def get_modifiers(self, rate_id: IdLike) -> List[RateModifier]:
        rate = await self._require_rate(rate_id)
        return await self.rate_repository.get_modifiers(rate.rate_id)

    async def remove_modifier(self, modifier_id: IdLike) -> None:
        parsed = _parse_uuid(modifier_id)
        if parsed is None:
            raise InvalidModifierIdException(str(modifier_id))
        if await self.rate_repository.get_modifier(parsed) is None:
            raise ModifierNotFoundException(str(modifier_id))
        await self.rate_repository.delete_modifier(parsed)
        logger.info(f"Removed modifier {parsed}")

    # ==================== RESOLUTION & PRICING ====================

    async def get_best_rate(
        self,
        item_type: str,
        item_id: Optional[IdLike],
        target_date: date,
        nights: Optional[int] = None,
    ) -> Optional[Rate]:
        """Highest-priority active rate for an item on a date.

        An ``item_id`` that is not a UUID can only match unscoped rates.
        When ``nights`` is given, rates whose stay bounds exclude it are skipped.
        """
        parsed_item_id = _parse_uuid(item_id) if item_id is not None else None
        rates = await self.rate_repository.get_applicable_rates(
            item_type, parsed_item_id, target_date
        )
        for rate in rates:
            if nights is None or _stay_allows(rate, nights):
                return rate
        return None

    async def calculate_price(
        self,
        item_type: str,
        item_id: Optional[IdLike],
        target_date: date,
        nights: int = 1,
    ) -> PriceBreakdown:
        """Price an item for a stay using the best rate and its modifiers.

        Percentage modifiers apply to the stay base, fixed modifiers apply per
        night; contributions are additive and never compounded.
        """
        if nights < 1:
            raise InvalidStayRangeException("Nights must be at least 1")

        rate = await self.get_best_rate(item_type, item_id, target_date)
        if rate is None:
            logger.info(f"No rate for {item_type}/{item_id} on {target_date}")
            return PriceBreakdown(currency=settings.default_currency)

        base_price = rate.base_price * nights
        contributions: List[ModifierContribution] = []
        total_modifiers = Decimal("0")

        for modifier in await self.rate_repository.get_modifiers(rate.rate_id):
            if modifier.modifier_type == ModifierType.PERCENTAGE:
                amount = base_price * modifier.value / Decimal("100")
            else:
                amount = modifier.value * nights
            contributions.append(
                ModifierContribution(name=modifier.name, amount=quantize_money(amount))
            )
            total_modifiers += amount

        return PriceBreakdown(
            base_price=quantize_money(base_price),
            modifiers=contributions,
            total_price=quantize_money(max(Decimal("0"), base_price + total_modifiers)),
            currency=rate.currency,
            applied_rate=rate,
        )

    # ==================== STATS & LOOKUPS ====================

    async def get_stats(self) -> RateStats:
        rates = await self.rate_repository.list()
        stats = RateStats(total_rates=len(rates))
        total_price = Decimal("0")

        for rate in rates:
            if rate.is_active:
                stats.active_rates += 1
            else:
                stats.inactive_rates += 1
            stats.by_type[rate.rate_type.value] += 1
            total_price += rate.base_price

        if rates:
            stats.avg_base_price = quantize_money(total_price / len(rates))
        return stats

    def get_rate_types(self) -> List[str]:
        return [rate_type.value for rate_type in RateType]

    def get_days_of_week(self) -> List[str]:
        return [day.value for day in DayOfWeek]

    def get_currencies(self) -> List[str]:
        return list(settings.supported_currencies)
