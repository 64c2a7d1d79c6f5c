"""Ledger core tables

Revision ID: 001_ledger_core
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = '001_ledger_core'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


ENUMS = {
    'accounttype': ('asset', 'liability', 'equity', 'revenue', 'expense'),
    'entrykind': ('normal', 'opening_balance', 'closing_entry'),
    'periodtype': ('monthly', 'quarterly', 'yearly'),
    'periodstatus': ('open', 'closed'),
    'closingentrytype': ('revenue_close', 'expense_close', 'income_summary_close'),
    'balancetype': ('debit', 'credit'),
    'transactiontype': ('DEBIT', 'CREDIT', 'NEUTRAL'),
}


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # Create enums (with IF NOT EXISTS check)
    for name, values in ENUMS.items():
        labels = ", ".join(f"'{value}'" for value in values)
        op.execute(f"DO $$ BEGIN CREATE TYPE {name} AS ENUM ({labels}); EXCEPTION WHEN duplicate_object THEN null; END $$;")

    # Currencies
    op.create_table(
        'currencies',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('code', sa.String(10), nullable=False, unique=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('symbol', sa.String(10), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('base_currency', sa.Boolean(), nullable=False, server_default='false'),
        *_timestamps(),
    )

    # Chart of Accounts
    op.create_table(
        'chart_of_accounts',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('code', sa.String(50), nullable=False, unique=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('account_type', _enum('accounttype'), nullable=False),
        sa.Column('parent_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('chart_of_accounts.id'), nullable=True),
        sa.Column('is_cash', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(),
    )
    op.create_index('idx_chart_of_accounts_type_active', 'chart_of_accounts', ['account_type', 'is_active'])

    # Journal Entries
    op.create_table(
        'journal_entries',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('entry_date', sa.Date(), nullable=False),
        sa.Column('reference', sa.String(100), nullable=True),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('entry_kind', _enum('entrykind'), nullable=False, server_default='normal'),
        sa.Column('created_by', sa.String(100), nullable=True),
        *_timestamps(),
    )
    op.create_index('idx_journal_entries_entry_date', 'journal_entries', ['entry_date'])

    # Journal Lines
    op.create_table(
        'journal_lines',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('journal_entry_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('journal_entries.id', ondelete='CASCADE'), nullable=False),
        sa.Column('account_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('chart_of_accounts.id'), nullable=False),
        sa.Column('currency_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('currencies.id'), nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('debit', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.Column('credit', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.Column('exchange_rate', sa.Numeric(18, 6), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('debit >= 0', name='check_debit_non_negative'),
        sa.CheckConstraint('credit >= 0', name='check_credit_non_negative'),
    )
    op.create_index('idx_journal_lines_account', 'journal_lines', ['account_id'])
    op.create_index('idx_journal_lines_entry', 'journal_lines', ['journal_entry_id'])

    # Account Balances
    op.create_table(
        'account_balances',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('account_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('chart_of_accounts.id'), nullable=False),
        sa.Column('currency_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('currencies.id'), nullable=False),
        sa.Column('balance', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.Column('as_of_date', sa.Date(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('account_id', 'currency_id', 'as_of_date', name='uq_account_balance_snapshot'),
    )
    op.create_index('idx_account_balances_lookup', 'account_balances', ['account_id', 'currency_id', 'as_of_date'])

    # Accounting Periods
    op.create_table(
        'accounting_periods',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('period_name', sa.String(100), nullable=False),
        sa.Column('period_type', _enum('periodtype'), nullable=False, server_default='monthly'),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('status', _enum('periodstatus'), nullable=False, server_default='open'),
        sa.Column('closed_at', sa.DateTime(), nullable=True),
        sa.Column('closed_by', sa.String(100), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('start_date', 'end_date', name='uq_accounting_period_range'),
    )

    op.create_table(
        'period_closing_entries',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('period_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('accounting_periods.id', ondelete='CASCADE'), nullable=False),
        sa.Column('journal_entry_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('journal_entries.id'), nullable=False),
        sa.Column('entry_type', _enum('closingentrytype'), nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'period_opening_balances',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('period_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('accounting_periods.id', ondelete='CASCADE'), nullable=False),
        sa.Column('account_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('chart_of_accounts.id'), nullable=False),
        sa.Column('opening_balance', sa.Numeric(18, 2), nullable=False),
        sa.Column('balance_type', _enum('balancetype'), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('period_id', 'account_id', name='uq_period_opening_balance'),
    )

    # Billing tables read by the general ledger view
    op.create_table(
        'student_transactions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('student_reg_number', sa.String(50), nullable=False, index=True),
        sa.Column('transaction_type', _enum('transactiontype'), nullable=False),
        sa.Column('amount', sa.Numeric(18, 2), nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('transaction_date', sa.Date(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'fee_payments',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('student_reg_number', sa.String(50), nullable=False, index=True),
        sa.Column('receipt_number', sa.String(100), nullable=False),
        sa.Column('reference_number', sa.String(100), nullable=True),
        sa.Column('payment_method', sa.String(50), nullable=True),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('payment_currency', sa.String(10), nullable=True),
        sa.Column('base_currency_amount', sa.Numeric(18, 2), nullable=False),
        sa.Column('exchange_rate', sa.Numeric(18, 6), nullable=True),
        *_timestamps(),
    )


def downgrade() -> None:
    # Drop tables in reverse order
    op.drop_table('fee_payments')
    op.drop_table('student_transactions')
    op.drop_table('period_opening_balances')
    op.drop_table('period_closing_entries')
    op.drop_table('accounting_periods')
    op.drop_table('account_balances')
    op.drop_table('journal_lines')
    op.drop_table('journal_entries')
    op.drop_table('chart_of_accounts')
    op.drop_table('currencies')

    # Drop enums
    for name in reversed(list(ENUMS)):
        op.execute(f"DROP TYPE IF EXISTS {name}")
