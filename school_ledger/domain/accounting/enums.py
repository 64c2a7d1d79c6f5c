"""Accounting domain enums."""

from enum import Enum as PyEnum


class AccountType(str, PyEnum):
    """Chart of Accounts account types."""
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"

    @property
    def is_debit_normal(self) -> bool:
        """Debits increase Asset and Expense balances; credits increase the rest."""
        return self in (AccountType.ASSET, AccountType.EXPENSE)


class EntryKind(str, PyEnum):
    """What a journal entry records. Reports only count NORMAL entries."""
    NORMAL = "normal"
    OPENING_BALANCE = "opening_balance"
    CLOSING_ENTRY = "closing_entry"


class PeriodStatus(str, PyEnum):
    """Accounting period status. CLOSED is terminal and only reached by closing."""
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    CLOSED = "closed"


class PeriodType(str, PyEnum):
    """Accounting period length."""
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class BalanceSheetBucket(str, PyEnum):
    """Balance sheet presentation buckets."""
    CURRENT_ASSET = "current_asset"
    FIXED_ASSET = "fixed_asset"
    OTHER_ASSET = "other_asset"
    CURRENT_LIABILITY = "current_liability"
    LONG_TERM_LIABILITY = "long_term_liability"
    EQUITY = "equity"


class BalanceType(str, PyEnum):
    """Side on which a carried-forward balance sits."""
    DEBIT = "debit"
    CREDIT = "credit"


class TransactionType(str, PyEnum):
    """Direction of a general ledger row."""
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"
    NEUTRAL = "NEUTRAL"


class ClosingEntryType(str, PyEnum):
    """Journal entries emitted when a period is closed."""
    REVENUE_CLOSE = "revenue_close"
    EXPENSE_CLOSE = "expense_close"
    INCOME_SUMMARY_CLOSE = "income_summary_close"


class LedgerSource(str, PyEnum):
    """Origin table of a general ledger row."""
    STUDENT_TRANSACTION = "student_transaction"
    FEE_PAYMENT = "fee_payment"
    JOURNAL_ENTRY = "journal_entry"


class ReportType(str, PyEnum):
    """Financial statements that can be saved."""
    TRIAL_BALANCE = "trial_balance"
    INCOME_STATEMENT = "income_statement"
    CASH_FLOW_STATEMENT = "cash_flow_statement"
    BALANCE_SHEET = "balance_sheet"
