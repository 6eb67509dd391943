"""In-memory repository implementations for development/testing.

Writes replace whole records (copy-on-write), so a concurrent reader sees
either the old or the new version of a rate, never a partial update.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from resort_pricing.domain.models import (
    DynamicPricingConfig,
    Rate,
    RateFilters,
    RateModifier,
    SeasonalRule,
    WeekendPricingConfig,
)
from resort_pricing.infrastructure.repositories import (
    DynamicConfigRepository,
    OccupancyProvider,
    RateRepository,
    SeasonalRuleRepository,
)
from resort_pricing.utils import is_month_day_in_range, matches_day_of_week, month_day


def _priority_order(rate: Rate) -> Tuple[int, datetime]:
    return (-rate.priority, rate.created_at)


class InMemoryRateRepository(RateRepository):
    """In-memory implementation of rate repository."""

    def __init__(self) -> None:
        self._rates: Dict[UUID, Rate] = {}
        self._modifiers: Dict[UUID, RateModifier] = {}

    async def create(self, rate: Rate) -> Rate:
        """Create a new rate."""
        self._rates[rate.rate_id] = rate
        return rate

    async def get_by_id(self, rate_id: UUID) -> Optional[Rate]:
        """Get rate by ID."""
        return self._rates.get(rate_id)

    async def update(self, rate_id: UUID, updates: Dict[str, Any]) -> Rate:
        """Apply field updates atomically and return the stored rate."""
        current = self._rates[rate_id]
        updated = current.model_copy(
            update={**updates, "updated_at": datetime.utcnow()}
        )
        self._rates[rate_id] = updated
        return updated

    async def delete(self, rate_id: UUID) -> None:
        """Soft-delete (deactivate) a rate."""
        if rate_id in self._rates:
            await self.update(rate_id, {"is_active": False})

    async def list(self, filters: Optional[RateFilters] = None) -> List[Rate]:
        """List rates matching filters."""
        rates = list(self._rates.values())
        if filters is not None:
            if filters.item_type is not None:
                rates = [r for r in rates if r.applicable_item_type == filters.item_type]
            if filters.item_id is not None:
                rates = [r for r in rates if r.applicable_item_id == filters.item_id]
            if filters.rate_type is not None:
                rates = [r for r in rates if r.rate_type == filters.rate_type]
            if filters.is_active is not None:
                rates = [r for r in rates if r.is_active == filters.is_active]
        return sorted(rates, key=_priority_order)

    async def get_applicable_rates(
        self, item_type: str, item_id: Optional[UUID], target_date: date
    ) -> List[Rate]:
        """Active rates for the item whose date window and weekday mask match."""
        matches = [
            rate
            for rate in self._rates.values()
            if rate.is_active
            and rate.applicable_item_type == item_type
            and (rate.applicable_item_id is None or rate.applicable_item_id == item_id)
            and (rate.start_date is None or rate.start_date <= target_date)
            and (rate.end_date is None or rate.end_date >= target_date)
            and matches_day_of_week(target_date, rate.days_of_week)
        ]
        return sorted(matches, key=_priority_order)

    async def add_modifier(self, modifier: RateModifier) -> RateModifier:
        """Attach a modifier to a rate."""
        self._modifiers[modifier.modifier_id] = modifier
        return modifier

    async def get_modifiers(self, rate_id: UUID) -> List[RateModifier]:
        """Get modifiers of a rate in creation order."""
        modifiers = [m for m in self._modifiers.values() if m.rate_id == rate_id]
        return sorted(modifiers, key=lambda m: m.created_at)

    async def get_modifier(self, modifier_id: UUID) -> Optional[RateModifier]:
        """Get modifier by ID."""
        return self._modifiers.get(modifier_id)

    async def delete_modifier(self, modifier_id: UUID) -> None:
        """Remove a modifier."""
        self._modifiers.pop(modifier_id, None)

    def clear(self) -> None:
        """Clear all data (for testing)."""
        self._rates.clear()
        self._modifiers.clear()


class InMemorySeasonalRuleRepository(SeasonalRuleRepository):
    """In-memory implementation of seasonal rule repository."""

    def __init__(self) -> None:
        self._rules: Dict[UUID, SeasonalRule] = {}

    async def create(self, rule: SeasonalRule) -> SeasonalRule:
        self._rules[rule.rule_id] = rule
        return rule

    async def get_by_id(self, rule_id: UUID) -> Optional[SeasonalRule]:
        return self._rules.get(rule_id)

    async def update(self, rule_id: UUID, updates: Dict[str, Any]) -> SeasonalRule:
        updated = self._rules[rule_id].model_copy(update=updates)
        self._rules[rule_id] = updated
        return updated

    async def delete(self, rule_id: UUID) -> None:
        self._rules.pop(rule_id, None)

    async def list(self) -> List[SeasonalRule]:
        return sorted(self._rules.values(), key=lambda r: (-r.priority, r.created_at))

    async def get_active_rules_for(
        self, category: str, target_date: date
    ) -> List[SeasonalRule]:
        current = month_day(target_date)
        return [
            rule
            for rule in await self.list()
            if rule.is_active
            and category in rule.applicable_to
            and is_month_day_in_range(current, rule.start_date, rule.end_date)
        ]

    def clear(self) -> None:
        """Clear all data (for testing)."""
        self._rules.clear()


class InMemoryDynamicConfigRepository(DynamicConfigRepository):
    """In-memory implementation of dynamic config repository."""

    def __init__(self) -> None:
        self._configs: Dict[str, DynamicPricingConfig] = {}
        self._weekend: Optional[WeekendPricingConfig] = None

    async def get(self, domain: str) -> Optional[DynamicPricingConfig]:
        return self._configs.get(domain)

    async def replace(self, domain: str, config: DynamicPricingConfig) -> None:
        self._configs[domain] = config.model_copy()

    async def get_weekend(self) -> Optional[WeekendPricingConfig]:
        return self._weekend

    async def replace_weekend(self, config: WeekendPricingConfig) -> None:
        self._weekend = config.model_copy()


class InMemoryOccupancyProvider(OccupancyProvider):
    """Occupancy figures set explicitly per category and date."""

    def __init__(self) -> None:
        self._occupancy: Dict[Tuple[str, date], Decimal] = {}

    def set_occupancy(self, category: str, target_date: date, occupancy: Decimal) -> None:
        self._occupancy[(category, target_date)] = Decimal(str(occupancy))

    async def get_occupancy(self, category: str, target_date: date) -> Optional[Decimal]:
        return self._occupancy.get((category, target_date))
