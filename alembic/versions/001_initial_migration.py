"""Initial migration - create rate catalog and pricing tables

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create rates table
    op.create_table(
        'rates',
        sa.Column('rate_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column(
            'rate_type',
            sa.Enum('STANDARD', 'SEASONAL', 'PROMOTIONAL', 'EVENT', 'PACKAGE', name='rate_type'),
            nullable=False,
        ),
        sa.Column('base_price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('applicable_item_type', sa.String(length=100), nullable=False),
        sa.Column('applicable_item_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('days_of_week', postgresql.JSON(astext_type=sa.Text()), nullable=False),
        sa.Column('min_stay', sa.Integer(), nullable=False),
        sa.Column('max_stay', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('priority', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('rate_id')
    )

    # Create indexes for rates table
    op.create_index('idx_rates_lookup', 'rates', ['applicable_item_type', 'is_active', 'priority'])
    op.create_index(op.f('ix_rates_applicable_item_type'), 'rates', ['applicable_item_type'])
    op.create_index(op.f('ix_rates_applicable_item_id'), 'rates', ['applicable_item_id'])
    op.create_index(op.f('ix_rates_is_active'), 'rates', ['is_active'])
    op.create_index(op.f('ix_rates_created_at'), 'rates', ['created_at'])

    # Create rate_modifiers table
    op.create_table(
        'rate_modifiers',
        sa.Column('modifier_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('rate_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column(
            'modifier_type',
            sa.Enum('PERCENTAGE', 'FIXED', name='modifier_type'),
            nullable=False,
        ),
        sa.Column('value', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('condition', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['rate_id'], ['rates.rate_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('modifier_id')
    )
    op.create_index(op.f('ix_rate_modifiers_rate_id'), 'rate_modifiers', ['rate_id'])

    # Create seasonal_pricing_rules table
    op.create_table(
        'seasonal_pricing_rules',
        sa.Column('rule_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('start_date', sa.String(length=5), nullable=False),
        sa.Column('end_date', sa.String(length=5), nullable=False),
        sa.Column('price_multiplier', sa.Numeric(precision=6, scale=3), nullable=False),
        sa.Column('applicable_to', postgresql.JSON(astext_type=sa.Text()), nullable=False),
        sa.Column('specific_items', postgresql.JSON(astext_type=sa.Text()), nullable=False),
        sa.Column('priority', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('rule_id')
    )
    op.create_index(
        op.f('ix_seasonal_pricing_rules_priority'), 'seasonal_pricing_rules', ['priority']
    )

    # Create pricing_settings table
    op.create_table(
        'pricing_settings',
        sa.Column('key', sa.String(length=100), nullable=False),
        sa.Column('value', postgresql.JSON(astext_type=sa.Text()), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('key')
    )


def downgrade() -> None:
    op.drop_table('pricing_settings')

    op.drop_index(op.f('ix_seasonal_pricing_rules_priority'), table_name='seasonal_pricing_rules')
    op.drop_table('seasonal_pricing_rules')

    op.drop_index(op.f('ix_rate_modifiers_rate_id'), table_name='rate_modifiers')
    op.drop_table('rate_modifiers')

    op.drop_index(op.f('ix_rates_created_at'), table_name='rates')
    op.drop_index(op.f('ix_rates_is_active'), table_name='rates')
    op.drop_index(op.f('ix_rates_applicable_item_id'), table_name='rates')
    op.drop_index(op.f('ix_rates_applicable_item_type'), table_name='rates')
    op.drop_index('idx_rates_lookup', table_name='rates')
    op.drop_table('rates')

    # Drop enum types
    op.execute("DROP TYPE modifier_type")
    op.execute("DROP TYPE rate_type")
