"""Accounting period models."""

from datetime import date, datetime
from decimal import Decimal
from uuid import uuid4, UUID
from sqlalchemy import String, Date, DateTime, Enum, ForeignKey, Numeric, UniqueConstraint
from sqlalchemy.orm import mapped_column, Mapped, relationship
from sqlalchemy.dialects.postgresql import UUID as PGUUID

from school_ledger.models.base import Base, TimestampMixin, enum_values
from school_ledger.domain.accounting.enums import (
    PeriodStatus,
    PeriodType,
    BalanceType,
    ClosingEntryType,
)


class AccountingPeriod(TimestampMixin, Base):
    """Reporting window. Journal entries fall into a period by entry_date."""

    __tablename__ = "accounting_periods"

    id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True, default=uuid4)

    period_name: Mapped[str] = mapped_column(String(100), nullable=False)
    period_type: Mapped[PeriodType] = mapped_column(
        Enum(PeriodType, name="periodtype", values_callable=enum_values),
        default=PeriodType.MONTHLY,
        nullable=False,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    status: Mapped[PeriodStatus] = mapped_column(
        Enum(PeriodStatus, name="periodstatus", values_callable=enum_values),
        default=PeriodStatus.OPEN,
        nullable=False,
    )
    closed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    closed_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    closing_entries: Mapped[list["PeriodClosingEntry"]] = relationship(
        "PeriodClosingEntry",
        back_populates="period",
        cascade="all, delete-orphan",
    )
    opening_balances: Mapped[list["PeriodOpeningBalance"]] = relationship(
        "PeriodOpeningBalance",
        back_populates="period",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("start_date", "end_date", name="uq_accounting_period_range"),
    )

    @property
    def is_closed(self) -> bool:
        return self.status == PeriodStatus.CLOSED


class PeriodClosingEntry(TimestampMixin, Base):
    """Journal entry emitted while closing a period."""

    __tablename__ = "period_closing_entries"

    id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True, default=uuid4)
    period_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("accounting_periods.id", ondelete="CASCADE"),
        nullable=False
    )
    journal_entry_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("journal_entries.id"),
        nullable=False
    )
    entry_type: Mapped[ClosingEntryType] = mapped_column(
        Enum(ClosingEntryType, name="closingentrytype", values_callable=enum_values),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    period: Mapped[AccountingPeriod] = relationship("AccountingPeriod", back_populates="closing_entries")
    journal_entry = relationship("JournalEntry")


class PeriodOpeningBalance(TimestampMixin, Base):
    """Balance carried forward into a period when the previous one closed."""

    __tablename__ = "period_opening_balances"

    id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True, default=uuid4)
    period_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("accounting_periods.id", ondelete="CASCADE"),
        nullable=False
    )
    account_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("chart_of_accounts.id"),
        nullable=False
    )
    opening_balance: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    balance_type: Mapped[BalanceType] = mapped_column(
        Enum(BalanceType, name="balancetype", values_callable=enum_values),
        nullable=False,
    )

    period: Mapped[AccountingPeriod] = relationship("AccountingPeriod", back_populates="opening_balances")
    account = relationship("ChartOfAccount")

    __table_args__ = (
        UniqueConstraint("period_id", "account_id", name="uq_period_opening_balance"),
    )
