"""Abstract repository interfaces."""
from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from resort_pricing.domain.models import (
    DynamicPricingConfig,
    Rate,
    RateFilters,
    RateModifier,
    SeasonalRule,
    WeekendPricingConfig,
)


class RateRepository(ABC):
    """Abstract rate catalog interface.

    ``list`` and ``get_applicable_rates`` return rates ordered by priority
    descending, then by creation time ascending.
    """

    @abstractmethod
    async def create(self, rate: Rate) -> Rate:
        """Create a new rate."""
        pass

    @abstractmethod
    async def get_by_id(self, rate_id: UUID) -> Optional[Rate]:
        """Get rate by ID."""
        pass

    @abstractmethod
    async def update(self, rate_id: UUID, updates: Dict[str, Any]) -> Rate:
        """Apply field updates atomically and return the stored rate."""
        pass

    @abstractmethod
    async def delete(self, rate_id: UUID) -> None:
        """Soft-delete (deactivate) a rate."""
        pass

    @abstractmethod
    async def list(self, filters: Optional[RateFilters] = None) -> List[Rate]:
        """List rates matching filters."""
        pass

    @abstractmethod
    async def get_applicable_rates(
        self, item_type: str, item_id: Optional[UUID], target_date: date
    ) -> List[Rate]:
        """Active rates for the item whose date window and weekday mask match."""
        pass

    @abstractmethod
    async def add_modifier(self, modifier: RateModifier) -> RateModifier:
        """Attach a modifier to a rate."""
        pass

    @abstractmethod
    async def get_modifiers(self, rate_id: UUID) -> List[RateModifier]:
        """Get modifiers of a rate in creation order."""
        pass

    @abstractmethod
    async def get_modifier(self, modifier_id: UUID) -> Optional[RateModifier]:
        """Get modifier by ID."""
        pass

    @abstractmethod
    async def delete_modifier(self, modifier_id: UUID) -> None:
        """Remove a modifier."""
        pass


class SeasonalRuleRepository(ABC):
    """Abstract seasonal rule store."""

    @abstractmethod
    async def create(self, rule: SeasonalRule) -> SeasonalRule:
        """Create a new rule."""
        pass

    @abstractmethod
    async def get_by_id(self, rule_id: UUID) -> Optional[SeasonalRule]:
        """Get rule by ID."""
        pass

    @abstractmethod
    async def update(self, rule_id: UUID, updates: Dict[str, Any]) -> SeasonalRule:
        """Apply field updates and return the stored rule."""
        pass

    @abstractmethod
    async def delete(self, rule_id: UUID) -> None:
        """Delete a rule."""
        pass

    @abstractmethod
    async def list(self) -> List[SeasonalRule]:
        """All rules, priority descending."""
        pass

    @abstractmethod
    async def get_active_rules_for(
        self, category: str, target_date: date
    ) -> List[SeasonalRule]:
        """Active rules for the category whose MM-DD window contains the date."""
        pass


class DynamicConfigRepository(ABC):
    """Abstract store for dynamic and weekend pricing configs."""

    @abstractmethod
    async def get(self, domain: str) -> Optional[DynamicPricingConfig]:
        """Get the dynamic config for a pricing domain, if set."""
        pass

    @abstractmethod
    async def replace(self, domain: str, config: DynamicPricingConfig) -> None:
        """Replace the dynamic config for a pricing domain."""
        pass

    @abstractmethod
    async def get_weekend(self) -> Optional[WeekendPricingConfig]:
        """Get the weekend pricing config, if set."""
        pass

    @abstractmethod
    async def replace_weekend(self, config: WeekendPricingConfig) -> None:
        """Replace the weekend pricing config."""
        pass


class OccupancyProvider(ABC):
    """Source of occupancy percentages for dynamic pricing."""

    @abstractmethod
    async def get_occupancy(self, category: str, target_date: date) -> Optional[Decimal]:
        """Occupancy (0-100) for the category on a date, or None if unknown."""
        pass
