"""Saved financial report model."""

from datetime import date
from typing import Any
from uuid import uuid4, UUID
from sqlalchemy import String, Text, Date, Enum, ForeignKey, JSON, UniqueConstraint, Index
from sqlalchemy.orm import mapped_column, Mapped
from sqlalchemy.dialects.postgresql import UUID as PGUUID

from school_ledger.models.base import Base, TimestampMixin, enum_values
from school_ledger.domain.accounting.enums import ReportType


class SavedFinancialReport(TimestampMixin, Base):
    """A generated statement stored as JSON. created_at is the save time."""

    __tablename__ = "saved_financial_reports"

    id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True, default=uuid4)

    report_type: Mapped[ReportType] = mapped_column(
        Enum(ReportType, name="reporttype", values_callable=enum_values),
        nullable=False,
    )
    report_name: Mapped[str] = mapped_column(String(200), nullable=False)
    report_description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Period snapshot; the name and dates survive the period being deleted
    period_id: Mapped[UUID | None] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("accounting_periods.id", ondelete="SET NULL"),
        nullable=True,
    )
    period_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    period_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    period_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    report_data: Mapped[Any] = mapped_column(JSON, nullable=False)
    report_summary: Mapped[Any | None] = mapped_column(JSON, nullable=True)

    currency_id: Mapped[UUID | None] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("currencies.id"),
        nullable=True,
    )
    created_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[str | None] = mapped_column(String(500), nullable=True)

    __table_args__ = (
        UniqueConstraint("report_type", "report_name", name="uq_saved_report_type_name"),
        Index("idx_saved_reports_type_saved", "report_type", "created_at"),
    )
