"""Saved financial reports and in_progress period status

Revision ID: 002_saved_reports
Revises: 001_ledger_core
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = '002_saved_reports'
down_revision: Union[str, None] = '001_ledger_core'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


REPORT_TYPES = ('trial_balance', 'income_statement', 'cash_flow_statement', 'balance_sheet')


def upgrade() -> None:
    with op.get_context().autocommit_block():
        op.execute("ALTER TYPE periodstatus ADD VALUE IF NOT EXISTS 'in_progress'")

    labels = ", ".join(f"'{value}'" for value in REPORT_TYPES)
    op.execute(f"DO $$ BEGIN CREATE TYPE reporttype AS ENUM ({labels}); EXCEPTION WHEN duplicate_object THEN null; END $$;")

    op.create_table(
        'saved_financial_reports',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('report_type', postgresql.ENUM(*REPORT_TYPES, name='reporttype', create_type=False), nullable=False),
        sa.Column('report_name', sa.String(200), nullable=False),
        sa.Column('report_description', sa.Text(), nullable=True),
        sa.Column('period_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('accounting_periods.id', ondelete='SET NULL'), nullable=True),
        sa.Column('period_name', sa.String(100), nullable=True),
        sa.Column('period_start_date', sa.Date(), nullable=True),
        sa.Column('period_end_date', sa.Date(), nullable=True),
        sa.Column('report_data', sa.JSON(), nullable=False),
        sa.Column('report_summary', sa.JSON(), nullable=True),
        sa.Column('currency_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('currencies.id'), nullable=True),
        sa.Column('created_by', sa.String(100), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('tags', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('report_type', 'report_name', name='uq_saved_report_type_name'),
    )
    op.create_index('idx_saved_reports_type_saved', 'saved_financial_reports', ['report_type', 'created_at'])


def downgrade() -> None:
    op.drop_index('idx_saved_reports_type_saved', table_name='saved_financial_reports')
    op.drop_table('saved_financial_reports')
    op.execute("DROP TYPE IF EXISTS reporttype")
    # Postgres cannot drop a single enum label; 'in_progress' stays on periodstatus
