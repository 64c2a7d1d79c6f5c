"""Reporting schemas for financial statements."""

from typing import Dict, List, Optional
from pydantic import BaseModel


class CurrencyInfo(BaseModel):
    """Base (reporting) currency."""
    id: str
    code: str
    name: str
    symbol: Optional[str] = None


class DateRange(BaseModel):
    start_date: str
    end_date: str


# Income Statement Schemas
class IncomeStatementLine(BaseModel):
    """A single revenue or expense account."""
    account_id: str
    account_code: str
    account_name: str
    amount: float
    percentage: float


class IncomeStatementTotals(BaseModel):
    total_revenue: float
    total_expenses: float
    net_income: float
    gross_profit_margin: float


class IncomeStatementData(BaseModel):
    period: DateRange
    revenue: List[IncomeStatementLine]
    expenses: List[IncomeStatementLine]
    totals: IncomeStatementTotals


class IncomeStatementResponse(IncomeStatementData):
    """Income statement report response."""
    period_info: Optional[Dict[str, str]] = None
    currency: Optional[CurrencyInfo] = None


class PeriodSummary(BaseModel):
    id: str
    period_name: str
    period_type: str
    start_date: str
    end_date: str
    status: str


class PercentageChanges(BaseModel):
    revenue: float
    expenses: float
    net_income: float


class Variances(BaseModel):
    revenue_variance: Optional[float] = None
    expense_variance: Optional[float] = None
    net_income_variance: Optional[float] = None
    percentage_changes: Optional[PercentageChanges] = None


class ComparativeIncomeStatementResponse(BaseModel):
    current_period: PeriodSummary
    previous_period: Optional[PeriodSummary] = None
    current_data: IncomeStatementData
    previous_data: Optional[IncomeStatementData] = None
    variances: Variances
    currency: Optional[CurrencyInfo] = None


class MonthlyBreakdown(BaseModel):
    month: int
    month_name: str
    data: IncomeStatementData


class YearToDateIncomeStatementResponse(BaseModel):
    year: int
    year_start_date: str
    year_end_date: str
    ytd_data: IncomeStatementData
    monthly_breakdown: List[MonthlyBreakdown]
    currency: Optional[CurrencyInfo] = None


class QuarterlyIncomeStatementResponse(BaseModel):
    year: int
    quarter: int
    quarter_start_date: str
    quarter_end_date: str
    quarterly_data: IncomeStatementData
    monthly_breakdown: List[MonthlyBreakdown]
    currency: Optional[CurrencyInfo] = None


# Balance Sheet Schemas
class BalanceSheetAccount(BaseModel):
    """A single account in balance sheet."""
    account_id: Optional[str] = None
    account_code: str
    account_name: str
    balance: float


class BalanceSheetAssets(BaseModel):
    current_assets: List[BalanceSheetAccount]
    fixed_assets: List[BalanceSheetAccount]
    other_assets: List[BalanceSheetAccount]
    total_current_assets: float
    total_fixed_assets: float
    total_other_assets: float
    total_assets: float


class BalanceSheetLiabilities(BaseModel):
    current_liabilities: List[BalanceSheetAccount]
    long_term_liabilities: List[BalanceSheetAccount]
    total_current_liabilities: float
    total_long_term_liabilities: float
    total_liabilities: float


class BalanceSheetEquity(BaseModel):
    accounts: List[BalanceSheetAccount]
    total_equity: float


class BalanceSheetTotals(BaseModel):
    total_assets: float
    total_liabilities: float
    total_equity: float
    total_liabilities_and_equity: float
    net_income: float
    difference: float
    is_balanced: bool


class BalanceSheetResponse(BaseModel):
    """Balance Sheet report response."""
    as_of_date: str
    assets: BalanceSheetAssets
    liabilities: BalanceSheetLiabilities
    equity: BalanceSheetEquity
    totals: BalanceSheetTotals
    period_info: Optional[Dict[str, str]] = None
    currency: Optional[CurrencyInfo] = None


# Cash Flow Schemas
class CashFlowItem(BaseModel):
    """Cash moved against one contra account."""
    account_id: str
    account_code: str
    account_name: str
    activity: str  # OPERATING, INVESTING or FINANCING
    amount: float


class CashFlowCategoryBreakdown(BaseModel):
    """Breakdown for a cash flow category."""
    inflows: float
    outflows: float
    net: float


class CashFlowTotals(BaseModel):
    total_inflows: float
    total_outflows: float
    net_cash_flow: float
    beginning_cash: float
    ending_cash: float


class CashFlowResponse(BaseModel):
    """Cash Flow report response."""
    period: DateRange
    inflows: List[CashFlowItem]
    outflows: List[CashFlowItem]
    activities: Dict[str, CashFlowCategoryBreakdown]
    totals: CashFlowTotals
    period_info: Optional[Dict[str, str]] = None
    currency: Optional[CurrencyInfo] = None


# Trial Balance Schemas
class TrialBalanceRow(BaseModel):
    account_id: str
    account_code: str
    account_name: str
    account_type: str
    opening_balance: Optional[float] = None
    period_debit: Optional[float] = None
    period_credit: Optional[float] = None
    total_debit: float
    total_credit: float
    balance: float


class TrialBalanceTotals(BaseModel):
    total_debit: float
    total_credit: float
    difference: float


class TrialBalanceResponse(BaseModel):
    trial_balance: List[TrialBalanceRow]
    totals: TrialBalanceTotals
    is_balanced: bool
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    as_of_date: Optional[str] = None
    period: Optional[PeriodSummary] = None
    currency: Optional[CurrencyInfo] = None


# General Ledger Schemas
class LedgerRowResponse(BaseModel):
    source: str
    id: str
    account_id: str
    debit_amount: float
    credit_amount: float
    description: Optional[str] = None
    transaction_date: str
    transaction_type: str
    reference: Optional[str] = None
    student_reg_number: Optional[str] = None
    payment_method: Optional[str] = None
    currency: Optional[str] = None
    exchange_rate: Optional[float] = None


class LedgerPagination(BaseModel):
    current_page: int
    total_pages: int
    total_records: int
    limit: int


class GeneralLedgerResponse(BaseModel):
    data: List[LedgerRowResponse]
    pagination: LedgerPagination


class SourceTotals(BaseModel):
    total_transactions: int
    total_debits: float
    total_credits: float


class TransactionSummaryResponse(BaseModel):
    """Per-source totals behind the general ledger."""
    student_transaction: SourceTotals
    fee_payment: SourceTotals
    journal_entry: SourceTotals


# Trial Balance Summary
class TrialBalanceTypeSummary(BaseModel):
    account_type: str
    total_debit: float
    total_credit: float
    net_balance: float
    account_count: int


class TrialBalanceSummaryResponse(BaseModel):
    as_of_date: str
    summary: List[TrialBalanceTypeSummary]
