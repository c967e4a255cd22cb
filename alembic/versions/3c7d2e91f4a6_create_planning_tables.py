"""create_planning_tables

Users, plans, plan activities and plan status history.

Revision ID: 3c7d2e91f4a6
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3c7d2e91f4a6'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_MONEY = sa.Numeric(15, 2)


def upgrade() -> None:
    op.create_table(
        'app_user',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('province', sa.String(255), nullable=False),
        sa.Column('district', sa.String(255), nullable=False),
        sa.Column('hospital', sa.String(255), nullable=False),
        sa.Column('email_verified', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('last_login', sa.DateTime, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'plan',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('plan_code', sa.String(30), nullable=True, unique=True),
        sa.Column('facility_name', sa.String(255), nullable=False),
        sa.Column('facility_type', sa.String(50), nullable=False),
        sa.Column('facility_district', sa.String(255), nullable=False, server_default=''),
        sa.Column('province', sa.String(255), nullable=False, server_default=''),
        sa.Column('program', sa.String(50), nullable=False),
        sa.Column('fiscal_year', sa.String(20), nullable=False),
        sa.Column('status', sa.String(50), nullable=False, server_default='draft'),
        sa.Column('general_total_budget', _MONEY, nullable=False, server_default='0'),
        sa.Column('created_by', sa.String(255), nullable=False, server_default=''),
        sa.Column('created_by_email', sa.String(255), nullable=False, server_default=''),
        sa.Column('submitted_by', sa.String(255), nullable=True),
        sa.Column('submitted_at', sa.DateTime, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint(
            'facility_name', 'facility_type', 'program', 'fiscal_year',
            name='uq_plan_facility_program_fy',
        ),
    )

    op.create_table(
        'plan_activity',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('plan_id', sa.Integer, sa.ForeignKey('plan.id', ondelete='CASCADE'), nullable=False),
        sa.Column('sort_order', sa.Integer, nullable=False, server_default='0'),
        sa.Column('category', sa.String(255), nullable=False, server_default=''),
        sa.Column('activity', sa.String(500), nullable=False),
        sa.Column('activity_description', sa.Text, nullable=False, server_default=''),
        sa.Column('quantity', _MONEY, nullable=False, server_default='0'),
        sa.Column('frequency', _MONEY, nullable=False, server_default='0'),
        sa.Column('unit_cost', _MONEY, nullable=False, server_default='0'),
        sa.Column('amount_q1', _MONEY, nullable=False, server_default='0'),
        sa.Column('amount_q2', _MONEY, nullable=False, server_default='0'),
        sa.Column('amount_q3', _MONEY, nullable=False, server_default='0'),
        sa.Column('amount_q4', _MONEY, nullable=False, server_default='0'),
        sa.Column('annual_budget', _MONEY, nullable=False, server_default='0'),
        sa.Column('comment', sa.Text, nullable=False, server_default=''),
    )
    op.create_index('ix_plan_activity_plan_id', 'plan_activity', ['plan_id'])

    op.create_table(
        'plan_status_history',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('plan_id', sa.Integer, sa.ForeignKey('plan.id', ondelete='CASCADE'), nullable=False),
        sa.Column('previous_status', sa.String(50), nullable=True),
        sa.Column('new_status', sa.String(50), nullable=False),
        sa.Column('reviewed_by', sa.String(255), nullable=True),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_plan_status_history_plan_id', 'plan_status_history', ['plan_id'])


def downgrade() -> None:
    op.drop_index('ix_plan_status_history_plan_id', 'plan_status_history')
    op.drop_table('plan_status_history')
    op.drop_index('ix_plan_activity_plan_id', 'plan_activity')
    op.drop_table('plan_activity')
    op.drop_table('plan')
    op.drop_table('app_user')
