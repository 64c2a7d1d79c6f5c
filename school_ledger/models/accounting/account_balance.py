"""Account balance snapshot model."""

from datetime import date
from decimal import Decimal
from uuid import uuid4, UUID
from sqlalchemy import Date, ForeignKey, Numeric, UniqueConstraint, Index
from sqlalchemy.orm import mapped_column, Mapped
from sqlalchemy.dialects.postgresql import UUID as PGUUID

from school_ledger.models.base import Base, TimestampMixin


class AccountBalance(TimestampMixin, Base):
    """Cumulative balance of one account in one currency as of a date.

    The balance is signed on the account's normal side: positive debit balance
    for Asset/Expense, positive credit balance for Liability/Equity/Revenue.
    """

    __tablename__ = "account_balances"

    id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True, default=uuid4)

    account_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("chart_of_accounts.id"),
        nullable=False
    )
    currency_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("currencies.id"),
        nullable=False
    )

    balance: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=0, nullable=False)
    as_of_date: Mapped[date] = mapped_column(Date, nullable=False)

    __table_args__ = (
        UniqueConstraint("account_id", "currency_id", "as_of_date", name="uq_account_balance_snapshot"),
        Index("idx_account_balances_lookup", "account_id", "currency_id", "as_of_date"),
    )
