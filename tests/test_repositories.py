"""Tests for the SQLAlchemy repositories (SQLite in-memory backend)."""
import pytest
from datetime import date, datetime, timedelta
from decimal import Decimal
from uuid import UUID, uuid4

from resort_pricing.domain.models import (
    AddModifierRequest,
    CreateRateRequest,
    DayOfWeek,
    DynamicPricingConfig,
    ModifierType,
    Rate,
    RateFilters,
    RateModifier,
    RateType,
    SeasonalRule,
    WeekendPricingConfig,
)
from resort_pricing.infrastructure.repositories_postgres import (
    PostgresDynamicConfigRepository,
    PostgresRateRepository,
    PostgresSeasonalRuleRepository,
)
from resort_pricing.services.rate_service import RateService
from resort_pricing.services.seasonal_pricing_service import SeasonalPricingService


def _rate(**overrides) -> Rate:
    data = {
        "name": "Summer Chalet",
        "description": "Standard summer nightly rate",
        "rate_type": RateType.STANDARD,
        "base_price": Decimal("100.00"),
        "applicable_item_type": "chalet",
        "start_date": date(2025, 6, 1),
        "end_date": date(2025, 8, 31),
        "priority": 5,
    }
    data.update(overrides)
    return Rate(**data)


# ==================== RATES ====================


@pytest.mark.asyncio
async def test_create_and_get_rate(postgres_rate_repository: PostgresRateRepository) -> None:
    """Test rate round trip through the database."""
    # Arrange
    rate = _rate(days_of_week=[DayOfWeek.FRIDAY, DayOfWeek.SATURDAY], max_stay=14)

    # Act
    await postgres_rate_repository.create(rate)
    stored = await postgres_rate_repository.get_by_id(rate.rate_id)

    # Assert
    assert stored is not None
    assert stored.rate_type == RateType.STANDARD
    assert stored.base_price == Decimal("100.00")
    assert stored.days_of_week == [DayOfWeek.FRIDAY, DayOfWeek.SATURDAY]
    assert stored.max_stay == 14
    assert await postgres_rate_repository.get_by_id(uuid4()) is None


@pytest.mark.asyncio
async def test_update_and_soft_delete_rate(
    postgres_rate_repository: PostgresRateRepository,
) -> None:
    rate = await postgres_rate_repository.create(_rate())

    updated = await postgres_rate_repository.update(
        rate.rate_id, {"base_price": Decimal("120.00"), "days_of_week": [DayOfWeek.SUNDAY]}
    )
    await postgres_rate_repository.delete(rate.rate_id)
    stored = await postgres_rate_repository.get_by_id(rate.rate_id)

    assert updated.base_price == Decimal("120.00")
    assert updated.days_of_week == [DayOfWeek.SUNDAY]
    assert stored.is_active is False

    with pytest.raises(LookupError):
        await postgres_rate_repository.update(uuid4(), {"priority": 1})


@pytest.mark.asyncio
async def test_list_rates_with_filters(
    postgres_rate_repository: PostgresRateRepository,
) -> None:
    low = await postgres_rate_repository.create(_rate(priority=1))
    high = await postgres_rate_repository.create(_rate(priority=9, rate_type=RateType.EVENT))
    await postgres_rate_repository.create(_rate(applicable_item_type="pool"))

    chalets = await postgres_rate_repository.list(RateFilters(item_type="chalet"))
    events = await postgres_rate_repository.list(RateFilters(rate_type=RateType.EVENT))

    assert [r.rate_id for r in chalets] == [high.rate_id, low.rate_id]
    assert [r.rate_id for r in events] == [high.rate_id]
    assert len(await postgres_rate_repository.list()) == 3


@pytest.mark.asyncio
async def test_get_applicable_rates(
    postgres_rate_repository: PostgresRateRepository,
    mock_item_id: UUID,
) -> None:
    """Test window, scope, weekday mask and ordering in the resolver query."""
    # Arrange
    now = datetime(2025, 1, 1, 12, 0)
    unscoped = await postgres_rate_repository.create(_rate(created_at=now))
    tie = await postgres_rate_repository.create(_rate(created_at=now + timedelta(seconds=1)))
    scoped = await postgres_rate_repository.create(
        _rate(applicable_item_id=mock_item_id, priority=10)
    )
    weekend_only = await postgres_rate_repository.create(
        _rate(days_of_week=[DayOfWeek.SATURDAY], priority=20)
    )
    await postgres_rate_repository.create(_rate(is_active=False, priority=50))
    await postgres_rate_repository.create(_rate(start_date=date(2025, 7, 1), priority=50))

    # Act
    # 2025-06-07 is a Saturday, 2025-06-09 a Monday
    saturday = await postgres_rate_repository.get_applicable_rates(
        "chalet", mock_item_id, date(2025, 6, 7)
    )
    monday_other_item = await postgres_rate_repository.get_applicable_rates(
        "chalet", uuid4(), date(2025, 6, 9)
    )

    # Assert
    assert [r.rate_id for r in saturday] == [
        weekend_only.rate_id,
        scoped.rate_id,
        unscoped.rate_id,
        tie.rate_id,
    ]
    assert [r.rate_id for r in monday_other_item] == [unscoped.rate_id, tie.rate_id]


@pytest.mark.asyncio
async def test_modifiers(postgres_rate_repository: PostgresRateRepository) -> None:
    rate = await postgres_rate_repository.create(_rate())
    first = await postgres_rate_repository.add_modifier(
        RateModifier(
            rate_id=rate.rate_id,
            name="Peak",
            modifier_type=ModifierType.PERCENTAGE,
            value=Decimal("10"),
            created_at=datetime(2025, 1, 1),
        )
    )
    second = await postgres_rate_repository.add_modifier(
        RateModifier(
            rate_id=rate.rate_id,
            name="Cleaning",
            modifier_type=ModifierType.FIXED,
            value=Decimal("15"),
            condition="stays under 3 nights",
            created_at=datetime(2025, 1, 2),
        )
    )

    modifiers = await postgres_rate_repository.get_modifiers(rate.rate_id)
    assert [m.modifier_id for m in modifiers] == [first.modifier_id, second.modifier_id]
    assert modifiers[1].condition == "stays under 3 nights"

    await postgres_rate_repository.delete_modifier(first.modifier_id)
    assert await postgres_rate_repository.get_modifier(first.modifier_id) is None
    assert (await postgres_rate_repository.get_modifier(second.modifier_id)).value == Decimal("15")


@pytest.mark.asyncio
async def test_rate_service_over_database(
    postgres_rate_repository: PostgresRateRepository,
    chalet_rate_request: CreateRateRequest,
) -> None:
    """Test price calculation end to end on the SQLAlchemy repository."""
    service = RateService(postgres_rate_repository)
    rate = await service.create_rate(chalet_rate_request)
    await service.add_modifier(
        rate.rate_id,
        AddModifierRequest(name="High demand", modifier_type="percentage", value=Decimal("30")),
    )

    breakdown = await service.calculate_price("chalet", None, date(2025, 7, 1), nights=2)

    assert breakdown.total_price == Decimal("260.00")


# ==================== SEASONAL RULES ====================


@pytest.mark.asyncio
async def test_seasonal_rule_repository(
    postgres_rule_repository: PostgresSeasonalRuleRepository,
) -> None:
    summer = await postgres_rule_repository.create(
        SeasonalRule(
            name="Summer Peak",
            start_date="06-01",
            end_date="08-31",
            price_multiplier=Decimal("1.5"),
            applicable_to=["chalet", "pool"],
            priority=1,
        )
    )
    winter = await postgres_rule_repository.create(
        SeasonalRule(
            name="Winter Holidays",
            start_date="12-15",
            end_date="01-05",
            price_multiplier=Decimal("1.3"),
            applicable_to=["chalet"],
            priority=5,
        )
    )

    assert [r.rule_id for r in await postgres_rule_repository.list()] == [
        winter.rule_id,
        summer.rule_id,
    ]
    assert [r.rule_id for r in await postgres_rule_repository.get_active_rules_for("chalet", date(2026, 1, 3))] == [winter.rule_id]
    assert [r.rule_id for r in await postgres_rule_repository.get_active_rules_for("pool", date(2025, 7, 3))] == [summer.rule_id]
    assert await postgres_rule_repository.get_active_rules_for("spa", date(2025, 7, 3)) == []

    updated = await postgres_rule_repository.update(summer.rule_id, {"is_active": False})
    assert updated.is_active is False
    assert await postgres_rule_repository.get_active_rules_for("pool", date(2025, 7, 3)) == []

    await postgres_rule_repository.delete(winter.rule_id)
    assert await postgres_rule_repository.get_by_id(winter.rule_id) is None


# ==================== CONFIGS ====================


@pytest.mark.asyncio
async def test_dynamic_config_repository(
    postgres_config_repository: PostgresDynamicConfigRepository,
) -> None:
    """Test configs replace whole documents per domain."""
    # Arrange
    assert await postgres_config_repository.get("default") is None
    assert await postgres_config_repository.get_weekend() is None

    # Act
    await postgres_config_repository.replace(
        "default", DynamicPricingConfig(enabled=True, early_bird_discount=Decimal("0.15"))
    )
    await postgres_config_repository.replace("default", DynamicPricingConfig(enabled=True))
    await postgres_config_repository.replace_weekend(
        WeekendPricingConfig(enabled=True, weekend_days=[DayOfWeek.FRIDAY])
    )

    # Assert
    config = await postgres_config_repository.get("default")
    assert config == DynamicPricingConfig(enabled=True)
    assert await postgres_config_repository.get("spa") is None
    weekend = await postgres_config_repository.get_weekend()
    assert weekend.weekend_days == [DayOfWeek.FRIDAY]


@pytest.mark.asyncio
async def test_seasonal_service_over_database(
    postgres_rule_repository: PostgresSeasonalRuleRepository,
    postgres_config_repository: PostgresDynamicConfigRepository,
    today: date,
) -> None:
    service = SeasonalPricingService(
        rule_repository=postgres_rule_repository,
        config_repository=postgres_config_repository,
        clock=lambda: today,
    )
    await service.replace_weekend_config(WeekendPricingConfig(enabled=True))

    adjusted = await service.calculate_adjusted_price(
        "chalet", None, Decimal("100.00"), date(2025, 6, 7)
    )

    assert adjusted.final_price == Decimal("120.00")
