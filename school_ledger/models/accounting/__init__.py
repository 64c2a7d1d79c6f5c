"""Accounting models."""

from .chart_of_accounts import ChartOfAccount
from .currency import Currency
from .journal_entry import JournalEntry, JournalLine
from .account_balance import AccountBalance
from .accounting_period import AccountingPeriod, PeriodClosingEntry, PeriodOpeningBalance
from .saved_report import SavedFinancialReport

__all__ = [
    "ChartOfAccount",
    "Currency",
    "JournalEntry",
    "JournalLine",
    "AccountBalance",
    "AccountingPeriod",
    "PeriodClosingEntry",
    "PeriodOpeningBalance",
    "SavedFinancialReport",
]
