"""Billing tables owned by the fee collaborators.

The ledger only reads these for the general ledger view.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4, UUID
from sqlalchemy import String, Date, Enum, Numeric
from sqlalchemy.orm import mapped_column, Mapped
from sqlalchemy.dialects.postgresql import UUID as PGUUID

from school_ledger.models.base import Base, TimestampMixin, enum_values
from school_ledger.domain.accounting.enums import TransactionType


class StudentTransaction(TimestampMixin, Base):
    """Debit/credit movement on a student's fee account."""

    __tablename__ = "student_transactions"

    id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True, default=uuid4)
    student_reg_number: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    transaction_type: Mapped[TransactionType] = mapped_column(
        Enum(TransactionType, name="transactiontype", values_callable=enum_values),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)


class FeePayment(TimestampMixin, Base):
    """Fee payment receipt, amount already converted to the base currency."""

    __tablename__ = "fee_payments"

    id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True, default=uuid4)
    student_reg_number: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    receipt_number: Mapped[str] = mapped_column(String(100), nullable=False)
    reference_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    payment_method: Mapped[str | None] = mapped_column(String(50), nullable=True)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_currency: Mapped[str | None] = mapped_column(String(10), nullable=True)
    base_currency_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    exchange_rate: Mapped[Decimal | None] = mapped_column(Numeric(18, 6), nullable=True)
