"""PostgreSQL repository implementations."""
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from resort_pricing.domain.models import (
    DynamicPricingConfig,
    Rate,
    RateFilters,
    RateModifier,
    SeasonalRule,
    WeekendPricingConfig,
)
from resort_pricing.infrastructure.models import (
    PricingSettingModel,
    RateModel,
    RateModifierModel,
    SeasonalRuleModel,
)
from resort_pricing.infrastructure.repositories import (
    DynamicConfigRepository,
    RateRepository,
    SeasonalRuleRepository,
)
from resort_pricing.utils import is_month_day_in_range, matches_day_of_week, month_day

logger = logging.getLogger(__name__)

DYNAMIC_PRICING_KEY = "dynamic_pricing"
WEEKEND_PRICING_KEY = "weekend_pricing"

_RATE_COLUMNS = (
    "name",
    "description",
    "rate_type",
    "base_price",
    "currency",
    "applicable_item_type",
    "applicable_item_id",
    "start_date",
    "end_date",
    "min_stay",
    "max_stay",
    "is_active",
    "priority",
    "created_at",
    "updated_at",
)


class PostgresRateRepository(RateRepository):
    """PostgreSQL implementation of rate repository.

    Updates lock the row (``SELECT ... FOR UPDATE``) so the resolver never
    reads a rate half-way through an edit.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_domain(self, model: RateModel) -> Rate:
        """Convert SQLAlchemy model to domain model."""
        return Rate(
            rate_id=model.rate_id,
            days_of_week=list(model.days_of_week or []),
            **{column: getattr(model, column) for column in _RATE_COLUMNS},
        )

    def _to_model(self, rate: Rate) -> RateModel:
        """Convert domain model to SQLAlchemy model."""
        return RateModel(
            rate_id=rate.rate_id,
            days_of_week=[day.value for day in rate.days_of_week],
            **{column: getattr(rate, column) for column in _RATE_COLUMNS},
        )

    async def _get_model(self, rate_id: UUID, for_update: bool = False) -> Optional[RateModel]:
        stmt = select(RateModel).where(RateModel.rate_id == rate_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, rate: Rate) -> Rate:
        """Create a new rate."""
        model = self._to_model(rate)
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)

        logger.info(f"Created rate {rate.rate_id} in database")
        return self._to_domain(model)

    async def get_by_id(self, rate_id: UUID) -> Optional[Rate]:
        """Get rate by ID."""
        model = await self._get_model(rate_id)
        if model is None:
            return None
        return self._to_domain(model)

    async def update(self, rate_id: UUID, updates: Dict[str, Any]) -> Rate:
        """Apply field updates atomically and return the stored rate."""
        model = await self._get_model(rate_id, for_update=True)
        if model is None:
            raise LookupError(f"Rate {rate_id} not found")

        for field, value in updates.items():
            if field == "days_of_week":
                value = [getattr(day, "value", day) for day in value]
            setattr(model, field, value)
        model.updated_at = datetime.utcnow()
        await self.session.flush()

        logger.info(f"Updated rate {rate_id}: {sorted(updates)}")
        return self._to_domain(model)

    async def delete(self, rate_id: UUID) -> None:
        """Soft-delete (deactivate) a rate."""
        model = await self._get_model(rate_id, for_update=True)
        if model is not None:
            model.is_active = False
            model.updated_at = datetime.utcnow()
            await self.session.flush()
            logger.info(f"Deactivated rate {rate_id}")

    async def list(self, filters: Optional[RateFilters] = None) -> List[Rate]:
        """List rates matching filters."""
        stmt = select(RateModel)
        if filters is not None:
            if filters.item_type is not None:
                stmt = stmt.where(RateModel.applicable_item_type == filters.item_type)
            if filters.item_id is not None:
                stmt = stmt.where(RateModel.applicable_item_id == filters.item_id)
            if filters.rate_type is not None:
                stmt = stmt.where(RateModel.rate_type == filters.rate_type)
            if filters.is_active is not None:
                stmt = stmt.where(RateModel.is_active == filters.is_active)
        stmt = stmt.order_by(RateModel.priority.desc(), RateModel.created_at.asc())

        result = await self.session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def get_applicable_rates(
        self, item_type: str, item_id: Optional[UUID], target_date: date
    ) -> List[Rate]:
        """Active rates for the item whose date window and weekday mask match."""
        item_scope = RateModel.applicable_item_id.is_(None)
        if item_id is not None:
            item_scope = or_(item_scope, RateModel.applicable_item_id == item_id)

        stmt = (
            select(RateModel)
            .where(
                RateModel.is_active.is_(True),
                RateModel.applicable_item_type == item_type,
                item_scope,
                or_(RateModel.start_date.is_(None), RateModel.start_date <= target_date),
                or_(RateModel.end_date.is_(None), RateModel.end_date >= target_date),
            )
            .order_by(RateModel.priority.desc(), RateModel.created_at.asc())
        )
        result = await self.session.execute(stmt)
        rates = [self._to_domain(model) for model in result.scalars().all()]

        # Weekday mask is a JSON list; filtered after the query
        return [rate for rate in rates if matches_day_of_week(target_date, rate.days_of_week)]

    async def add_modifier(self, modifier: RateModifier) -> RateModifier:
        """Attach a modifier to a rate."""
        model = RateModifierModel(
            modifier_id=modifier.modifier_id,
            rate_id=modifier.rate_id,
            name=modifier.name,
            modifier_type=modifier.modifier_type,
            value=modifier.value,
            condition=modifier.condition,
            created_at=modifier.created_at,
        )
        self.session.add(model)
        await self.session.flush()

        logger.info(f"Added modifier {modifier.modifier_id} to rate {modifier.rate_id}")
        return RateModifier.model_validate(model)

    async def get_modifiers(self, rate_id: UUID) -> List[RateModifier]:
        """Get modifiers of a rate in creation order."""
        stmt = (
            select(RateModifierModel)
            .where(RateModifierModel.rate_id == rate_id)
            .order_by(RateModifierModel.created_at.asc())
        )
        result = await self.session.execute(stmt)
        return [RateModifier.model_validate(model) for model in result.scalars().all()]

    async def get_modifier(self, modifier_id: UUID) -> Optional[RateModifier]:
        """Get modifier by ID."""
        stmt = select(RateModifierModel).where(RateModifierModel.modifier_id == modifier_id)
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            return None
        return RateModifier.model_validate(model)

    async def delete_modifier(self, modifier_id: UUID) -> None:
        """Remove a modifier."""
        await self.session.execute(
            delete(RateModifierModel).where(RateModifierModel.modifier_id == modifier_id)
        )
        await self.session.flush()
        logger.info(f"Removed modifier {modifier_id}")


class PostgresSeasonalRuleRepository(SeasonalRuleRepository):
    """PostgreSQL implementation of seasonal rule repository."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get_model(self, rule_id: UUID) -> Optional[SeasonalRuleModel]:
        stmt = select(SeasonalRuleModel).where(SeasonalRuleModel.rule_id == rule_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, rule: SeasonalRule) -> SeasonalRule:
        model = SeasonalRuleModel(**rule.model_dump())
        self.session.add(model)
        await self.session.flush()

        logger.info(f"Created seasonal rule {rule.rule_id} ({rule.name})")
        return SeasonalRule.model_validate(model)

    async def get_by_id(self, rule_id: UUID) -> Optional[SeasonalRule]:
        model = await self._get_model(rule_id)
        if model is None:
            return None
        return SeasonalRule.model_validate(model)

    async def update(self, rule_id: UUID, updates: Dict[str, Any]) -> SeasonalRule:
        model = await self._get_model(rule_id)
        if model is None:
            raise LookupError(f"Seasonal rule {rule_id} not found")
        for field, value in updates.items():
            setattr(model, field, value)
        await self.session.flush()
        return SeasonalRule.model_validate(model)

    async def delete(self, rule_id: UUID) -> None:
        await self.session.execute(
            delete(SeasonalRuleModel).where(SeasonalRuleModel.rule_id == rule_id)
        )
        await self.session.flush()

    async def list(self) -> List[SeasonalRule]:
        stmt = select(SeasonalRuleModel).order_by(
            SeasonalRuleModel.priority.desc(), SeasonalRuleModel.created_at.asc()
        )
        result = await self.session.execute(stmt)
        return [SeasonalRule.model_validate(model) for model in result.scalars().all()]

    async def get_active_rules_for(
        self, category: str, target_date: date
    ) -> List[SeasonalRule]:
        stmt = (
            select(SeasonalRuleModel)
            .where(SeasonalRuleModel.is_active.is_(True))
            .order_by(SeasonalRuleModel.priority.desc(), SeasonalRuleModel.created_at.asc())
        )
        result = await self.session.execute(stmt)
        current = month_day(target_date)
        # Category list and wrapping MM-DD windows are matched in Python
        return [
            SeasonalRule.model_validate(model)
            for model in result.scalars().all()
            if category in (model.applicable_to or [])
            and is_month_day_in_range(current, model.start_date, model.end_date)
        ]


class PostgresDynamicConfigRepository(DynamicConfigRepository):
    """Dynamic/weekend configs stored as JSON rows in pricing_settings."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get_value(self, key: str) -> Optional[dict]:
        model = await self.session.get(PricingSettingModel, key)
        if model is None:
            return None
        return model.value

    async def _upsert(self, key: str, value: dict) -> None:
        model = await self.session.get(PricingSettingModel, key, with_for_update=True)
        if model is None:
            self.session.add(PricingSettingModel(key=key, value=value))
        else:
            model.value = value
            model.updated_at = datetime.utcnow()
        await self.session.flush()
        logger.info(f"Replaced pricing setting {key}")

    async def get(self, domain: str) -> Optional[DynamicPricingConfig]:
        value = await self._get_value(f"{DYNAMIC_PRICING_KEY}:{domain}")
        if value is None:
            return None
        return DynamicPricingConfig.model_validate(value)

    async def replace(self, domain: str, config: DynamicPricingConfig) -> None:
        await self._upsert(f"{DYNAMIC_PRICING_KEY}:{domain}", config.model_dump(mode="json"))

    async def get_weekend(self) -> Optional[WeekendPricingConfig]:
        value = await self._get_value(WEEKEND_PRICING_KEY)
        if value is None:
            return None
        return WeekendPricingConfig.model_validate(value)

    async def replace_weekend(self, config: WeekendPricingConfig) -> None:
        await self._upsert(WEEKEND_PRICING_KEY, config.model_dump(mode="json"))
