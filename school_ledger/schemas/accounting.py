"""Ledger schemas: accounts, journal entries, balances and periods."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from school_ledger.domain.accounting.enums import (
    AccountType,
    BalanceSheetBucket,
    BalanceType,
    ClosingEntryType,
    EntryKind,
    PeriodStatus,
    PeriodType,
)


# Chart of Accounts
class AccountCreate(BaseModel):
    """Schema for creating an account."""
    code: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=200)
    account_type: AccountType
    parent_id: Optional[UUID] = None
    is_cash: bool = False


class AccountUpdate(BaseModel):
    """Partial update; only fields that are set are applied."""
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    account_type: Optional[AccountType] = None
    parent_id: Optional[UUID] = None
    is_cash: Optional[bool] = None
    is_active: Optional[bool] = None


class AccountResponse(BaseModel):
    id: UUID
    code: str
    name: str
    account_type: AccountType
    parent_id: Optional[UUID] = None
    is_cash: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AccountClassificationResponse(BaseModel):
    account_id: UUID
    code: str
    name: str
    account_type: AccountType
    bucket: BalanceSheetBucket


class OpeningBalanceCreate(BaseModel):
    """Schema for posting an opening balance against Retained Earnings."""
    account_id: UUID
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    balance_type: BalanceType
    description: str = Field(..., min_length=1, max_length=300)
    currency_id: UUID
    reference: Optional[str] = Field(None, max_length=100)
    opening_balance_date: Optional[date] = None


# Journal Entries
class JournalLineCreate(BaseModel):
    account_id: UUID
    currency_id: UUID
    debit: Decimal = Field(default=Decimal("0"), decimal_places=2)
    credit: Decimal = Field(default=Decimal("0"), decimal_places=2)
    description: Optional[str] = Field(None, max_length=500)
    exchange_rate: Optional[Decimal] = None


class JournalEntryCreate(BaseModel):
    """Schema for posting a journal entry."""
    entry_date: date
    reference: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    lines: List[JournalLineCreate]
    created_by: Optional[str] = Field(None, max_length=100)
    entry_kind: Optional[EntryKind] = None


class JournalLineResponse(BaseModel):
    id: UUID
    account_id: UUID
    currency_id: UUID
    debit: Decimal
    credit: Decimal
    description: Optional[str] = None
    exchange_rate: Optional[Decimal] = None

    class Config:
        from_attributes = True


class JournalEntryResponse(BaseModel):
    id: UUID
    entry_date: date
    reference: Optional[str] = None
    description: Optional[str] = None
    entry_kind: EntryKind
    created_by: Optional[str] = None
    created_at: datetime
    total_debit: Decimal
    total_credit: Decimal
    lines: List[JournalLineResponse]

    class Config:
        from_attributes = True


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_records: int
    limit: int


class AccountRef(BaseModel):
    id: str
    code: str
    name: str


class AccountEntryRow(BaseModel):
    line_id: str
    journal_entry_id: str
    entry_date: str
    reference: Optional[str] = None
    description: Optional[str] = None
    entry_kind: str
    debit: float
    credit: float
    currency_id: str


class AccountEntriesResponse(BaseModel):
    account: AccountRef
    entries: List[AccountEntryRow]
    pagination: Pagination


# Account Balances
class AccountBalanceUpdate(BaseModel):
    """Administrative balance override."""
    currency_id: UUID
    balance: Decimal = Field(..., decimal_places=2)
    as_of_date: date


class AccountBalanceResponse(BaseModel):
    id: UUID
    account_id: UUID
    currency_id: UUID
    balance: Decimal
    as_of_date: date
    updated_at: datetime

    class Config:
        from_attributes = True


class RecalculateResponse(BaseModel):
    snapshots_written: int


# Accounting Periods
class PeriodCreate(BaseModel):
    period_name: str = Field(..., min_length=1, max_length=100)
    period_type: PeriodType
    start_date: date
    end_date: date


class PeriodGenerate(BaseModel):
    period_type: PeriodType = PeriodType.MONTHLY


class PeriodStatusUpdate(BaseModel):
    status: PeriodStatus


class PeriodClose(BaseModel):
    closed_by: Optional[str] = Field(None, max_length=100)


class PeriodResponse(BaseModel):
    id: UUID
    period_name: str
    period_type: PeriodType
    start_date: date
    end_date: date
    status: PeriodStatus
    closed_at: Optional[datetime] = None
    closed_by: Optional[str] = None

    class Config:
        from_attributes = True


class ClosingEntryResponse(BaseModel):
    id: UUID
    period_id: UUID
    journal_entry_id: UUID
    entry_type: ClosingEntryType
    description: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class OpeningBalanceResponse(BaseModel):
    id: UUID
    period_id: UUID
    account_id: UUID
    opening_balance: Decimal
    balance_type: BalanceType

    class Config:
        from_attributes = True


class ClosingEntrySummary(BaseModel):
    entry_type: ClosingEntryType
    journal_entry_id: str
    description: Optional[str] = None


class PeriodCloseResponse(BaseModel):
    period: PeriodResponse
    net_income: Decimal
    closing_entries: List[ClosingEntrySummary]
    next_period: PeriodResponse
    opening_balances: List[OpeningBalanceResponse]
