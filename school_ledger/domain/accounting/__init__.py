"""Accounting domain module."""

from .enums import (
    AccountType,
    EntryKind,
    PeriodStatus,
    PeriodType,
    BalanceSheetBucket,
    BalanceType,
    TransactionType,
    ClosingEntryType,
    LedgerSource,
    ReportType,
)

__all__ = [
    "AccountType",
    "EntryKind",
    "PeriodStatus",
    "PeriodType",
    "BalanceSheetBucket",
    "BalanceType",
    "TransactionType",
    "ClosingEntryType",
    "LedgerSource",
    "ReportType",
]
