"""Journal Entry and Journal Line models."""

from datetime import date
from decimal import Decimal
from uuid import uuid4, UUID
from sqlalchemy import String, Date, Enum, ForeignKey, Numeric, CheckConstraint, Index
from sqlalchemy.orm import mapped_column, Mapped, relationship
from sqlalchemy.dialects.postgresql import UUID as PGUUID

from school_ledger.models.base import Base, TimestampMixin, enum_values
from school_ledger.domain.accounting.enums import EntryKind


class JournalEntry(TimestampMixin, Base):
    """Journal Entry model."""

    __tablename__ = "journal_entries"

    id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True, default=uuid4)

    entry_date: Mapped[date] = mapped_column(Date, nullable=False)
    # External correlation id, e.g. a receipt number. Not deduplicated.
    reference: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    entry_kind: Mapped[EntryKind] = mapped_column(
        Enum(EntryKind, name="entrykind", values_callable=enum_values),
        default=EntryKind.NORMAL,
        nullable=False,
    )

    created_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Relationships
    lines: Mapped[list["JournalLine"]] = relationship(
        "JournalLine",
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="JournalLine.created_at",
    )

    __table_args__ = (
        Index("idx_journal_entries_entry_date", "entry_date"),
    )

    @property
    def total_debit(self) -> Decimal:
        return sum((line.debit for line in self.lines), Decimal("0"))

    @property
    def total_credit(self) -> Decimal:
        return sum((line.credit for line in self.lines), Decimal("0"))


class JournalLine(TimestampMixin, Base):
    """Journal Line model."""

    __tablename__ = "journal_lines"

    id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True, default=uuid4)
    journal_entry_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("journal_entries.id", ondelete="CASCADE"),
        nullable=False
    )

    # Relationship
    entry: Mapped[JournalEntry] = relationship("JournalEntry", back_populates="lines")

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

    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    debit: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=0, nullable=False)
    credit: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=0, nullable=False)
    # Only set when the line currency differs from the base currency
    exchange_rate: Mapped[Decimal | None] = mapped_column(Numeric(18, 6), nullable=True)

    account = relationship("ChartOfAccount")

    __table_args__ = (
        CheckConstraint("debit >= 0", name="check_debit_non_negative"),
        CheckConstraint("credit >= 0", name="check_credit_non_negative"),
        Index("idx_journal_lines_account", "account_id"),
        Index("idx_journal_lines_entry", "journal_entry_id"),
    )
