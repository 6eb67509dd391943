"""SQLAlchemy ORM models for database tables."""
import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import UUID as PostgreSQL_UUID
from sqlalchemy.types import CHAR, TypeDecorator

from resort_pricing.domain.models import ModifierType, RateType
from resort_pricing.infrastructure.database import Base


class GUID(TypeDecorator):
    """Platform-independent GUID type.

    Uses PostgreSQL UUID, otherwise CHAR(32), storing as stringified hex.
    """
    impl = CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(PostgreSQL_UUID(as_uuid=True))
        else:
            return dialect.type_descriptor(CHAR(32))

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        elif dialect.name == 'postgresql':
            return str(value)
        else:
            if not isinstance(value, uuid.UUID):
                return "%.32x" % uuid.UUID(value).int
            else:
                return "%.32x" % value.int

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        else:
            if not isinstance(value, uuid.UUID):
                value = uuid.UUID(value)
            return value


class RateModel(Base):
    """SQLAlchemy model for rates table."""

    __tablename__ = "rates"

    rate_id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    rate_type = Column(Enum(RateType, name="rate_type"), nullable=False)
    base_price = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    applicable_item_type = Column(String(100), nullable=False, index=True)
    applicable_item_id = Column(GUID(), nullable=True, index=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    days_of_week = Column(JSON, nullable=False, default=list)
    min_stay = Column(Integer, nullable=False, default=1)
    max_stay = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    priority = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # Composite index for the resolver query
    __table_args__ = (
        Index("idx_rates_lookup", "applicable_item_type", "is_active", "priority"),
    )


class RateModifierModel(Base):
    """SQLAlchemy model for rate_modifiers table."""

    __tablename__ = "rate_modifiers"

    modifier_id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    rate_id = Column(
        GUID(), ForeignKey("rates.rate_id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(100), nullable=False)
    modifier_type = Column(Enum(ModifierType, name="modifier_type"), nullable=False)
    value = Column(Numeric(12, 2), nullable=False)
    condition = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class SeasonalRuleModel(Base):
    """SQLAlchemy model for seasonal_pricing_rules table."""

    __tablename__ = "seasonal_pricing_rules"

    rule_id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    start_date = Column(String(5), nullable=False)  # MM-DD
    end_date = Column(String(5), nullable=False)  # MM-DD
    price_multiplier = Column(Numeric(6, 3), nullable=False)
    applicable_to = Column(JSON, nullable=False, default=list)
    specific_items = Column(JSON, nullable=False, default=list)
    priority = Column(Integer, nullable=False, default=0, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class PricingSettingModel(Base):
    """Key/value store for dynamic and weekend pricing configs."""

    __tablename__ = "pricing_settings"

    key = Column(String(100), primary_key=True)
    value = Column(JSON, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)
