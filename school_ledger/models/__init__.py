"""Database models."""

from .base import Base, TimestampMixin
from .accounting import (
    ChartOfAccount,
    Currency,
    JournalEntry,
    JournalLine,
    AccountBalance,
    AccountingPeriod,
    PeriodClosingEntry,
    PeriodOpeningBalance,
    SavedFinancialReport,
)
from .billing import StudentTransaction, FeePayment

__all__ = [
    "Base",
    "TimestampMixin",
    "ChartOfAccount",
    "Currency",
    "JournalEntry",
    "JournalLine",
    "AccountBalance",
    "AccountingPeriod",
    "PeriodClosingEntry",
    "PeriodOpeningBalance",
    "SavedFinancialReport",
    "StudentTransaction",
    "FeePayment",
]
