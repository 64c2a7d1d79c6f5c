"""Financial statement API endpoints."""

import io
from datetime import date
from typing import Dict, Optional, Tuple
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from school_ledger.core.exceptions import ValidationError
from school_ledger.db.dependencies import get_db
from school_ledger.api.params import (
    parse_date_range,
    parse_iso_date,
    validate_month_year,
    validate_quarter,
    validate_year,
)
from school_ledger.domain.accounting.period_service import get_period, month_report_window
from school_ledger.models.accounting import AccountingPeriod
from school_ledger.services.reporting_service import (
    generate_balance_sheet,
    generate_cash_flow,
    generate_comparative_income_statement,
    generate_income_statement,
    generate_quarterly_income_statement,
    generate_trial_balance,
    generate_trial_balance_as_of,
    generate_trial_balance_summary,
    generate_year_to_date_income_statement,
    get_base_currency,
)
from school_ledger.services.exports import TRIAL_BALANCE_COLUMNS, export_to_csv, trial_balance_filename
from school_ledger.schemas.reporting import (
    BalanceSheetResponse,
    CashFlowResponse,
    ComparativeIncomeStatementResponse,
    IncomeStatementResponse,
    QuarterlyIncomeStatementResponse,
    TrialBalanceResponse,
    TrialBalanceSummaryResponse,
    YearToDateIncomeStatementResponse,
)

router = APIRouter()


def _period_info(period: AccountingPeriod) -> Dict[str, str]:
    return {
        "id": str(period.id),
        "period_name": period.period_name,
        "start_date": period.start_date.isoformat(),
        "end_date": period.end_date.isoformat(),
        "status": period.status.value,
    }


def _month_window(db: Session, month: int, year: int) -> Tuple[date, date, Optional[AccountingPeriod]]:
    month, year = validate_month_year(month, year)
    return month_report_window(db, month, year)


# Income Statement
def _income_statement(db: Session, start: date, end: date, period: Optional[AccountingPeriod] = None) -> IncomeStatementResponse:
    result = generate_income_statement(db, start, end)
    return IncomeStatementResponse(
        **result,
        period_info=_period_info(period) if period else None,
        currency=get_base_currency(db),
    )


@router.get("/income-statement/period/{period_id}", response_model=IncomeStatementResponse)
def get_income_statement_for_period(
    period_id: UUID,
    db: Session = Depends(get_db),
) -> IncomeStatementResponse:
    period = get_period(db, period_id)
    return _income_statement(db, period.start_date, period.end_date, period)


@router.get("/income-statement/month/{month}/year/{year}", response_model=IncomeStatementResponse)
def get_income_statement_for_month(
    month: int,
    year: int,
    db: Session = Depends(get_db),
) -> IncomeStatementResponse:
    """
    Income statement for a calendar month.

    The monthly period is created if missing, unless the month lies inside a
    longer period.
    """
    start_date, end_date, period = _month_window(db, month, year)
    return _income_statement(db, start_date, end_date, period)


@router.get("/income-statement/range", response_model=IncomeStatementResponse)
def get_income_statement_for_range(
    start: Optional[str] = Query(None, description="Start date YYYY-MM-DD"),
    end: Optional[str] = Query(None, description="End date YYYY-MM-DD"),
    db: Session = Depends(get_db),
) -> IncomeStatementResponse:
    start_date, end_date = parse_date_range(start, end)
    return _income_statement(db, start_date, end_date)


@router.get("/income-statement/comparative/{period_id}", response_model=ComparativeIncomeStatementResponse)
def get_comparative_income_statement(
    period_id: UUID,
    db: Session = Depends(get_db),
) -> ComparativeIncomeStatementResponse:
    """Period against the one that ended just before it, with variances."""
    return ComparativeIncomeStatementResponse(**generate_comparative_income_statement(db, period_id))


@router.get("/income-statement/ytd/{year}", response_model=YearToDateIncomeStatementResponse)
def get_year_to_date_income_statement(
    year: int,
    db: Session = Depends(get_db),
) -> YearToDateIncomeStatementResponse:
    validate_year(year)
    return YearToDateIncomeStatementResponse(**generate_year_to_date_income_statement(db, year))


@router.get("/income-statement/quarterly/{year}/{quarter}", response_model=QuarterlyIncomeStatementResponse)
def get_quarterly_income_statement(
    year: int,
    quarter: int,
    db: Session = Depends(get_db),
) -> QuarterlyIncomeStatementResponse:
    validate_year(year)
    validate_quarter(quarter)
    return QuarterlyIncomeStatementResponse(**generate_quarterly_income_statement(db, year, quarter))


# Balance Sheet
def _balance_sheet(db: Session, as_of: date, period: Optional[AccountingPeriod] = None) -> BalanceSheetResponse:
    result = generate_balance_sheet(db, as_of)
    return BalanceSheetResponse(
        **result,
        period_info=_period_info(period) if period else None,
        currency=get_base_currency(db),
    )


@router.get("/balance-sheet/period/{period_id}", response_model=BalanceSheetResponse)
def get_balance_sheet_for_period(
    period_id: UUID,
    db: Session = Depends(get_db),
) -> BalanceSheetResponse:
    period = get_period(db, period_id)
    return _balance_sheet(db, period.end_date, period)


@router.get("/balance-sheet/month/{month}/year/{year}", response_model=BalanceSheetResponse)
def get_balance_sheet_for_month(
    month: int,
    year: int,
    db: Session = Depends(get_db),
) -> BalanceSheetResponse:
    _, end_date, period = _month_window(db, month, year)
    return _balance_sheet(db, end_date, period)


@router.get("/balance-sheet/range", response_model=BalanceSheetResponse)
def get_balance_sheet_for_range(
    end: Optional[str] = Query(None, description="As-of date YYYY-MM-DD"),
    start: Optional[str] = Query(None, description="Optional start date YYYY-MM-DD"),
    db: Session = Depends(get_db),
) -> BalanceSheetResponse:
    """Balance sheet as of end. start is validated but a balance sheet is a point in time."""
    end_date = parse_iso_date(end, "end")
    parse_iso_date(start, "start", required=False)
    return _balance_sheet(db, end_date)


# Cash Flow
def _cash_flow(db: Session, start: date, end: date, period: Optional[AccountingPeriod] = None) -> CashFlowResponse:
    result = generate_cash_flow(db, start, end)
    return CashFlowResponse(
        **result,
        period_info=_period_info(period) if period else None,
        currency=get_base_currency(db),
    )


@router.get("/cash-flow/period/{period_id}", response_model=CashFlowResponse)
def get_cash_flow_for_period(
    period_id: UUID,
    db: Session = Depends(get_db),
) -> CashFlowResponse:
    period = get_period(db, period_id)
    return _cash_flow(db, period.start_date, period.end_date, period)


@router.get("/cash-flow/month/{month}/year/{year}", response_model=CashFlowResponse)
def get_cash_flow_for_month(
    month: int,
    year: int,
    db: Session = Depends(get_db),
) -> CashFlowResponse:
    start_date, end_date, period = _month_window(db, month, year)
    return _cash_flow(db, start_date, end_date, period)


@router.get("/cash-flow/range", response_model=CashFlowResponse)
def get_cash_flow_for_range(
    start: Optional[str] = Query(None, description="Start date YYYY-MM-DD"),
    end: Optional[str] = Query(None, description="End date YYYY-MM-DD"),
    db: Session = Depends(get_db),
) -> CashFlowResponse:
    start_date, end_date = parse_date_range(start, end)
    return _cash_flow(db, start_date, end_date)


# Trial Balance
@router.get("/trial-balance/period/{period_id}", response_model=TrialBalanceResponse)
def get_trial_balance_for_period(
    period_id: UUID,
    db: Session = Depends(get_db),
) -> TrialBalanceResponse:
    """Period activity merged with the balances carried into the period."""
    period = get_period(db, period_id)
    result = generate_trial_balance(db, period.start_date, period.end_date, period=period)
    return TrialBalanceResponse(**result, currency=get_base_currency(db))


@router.get("/trial-balance/month/{month}/year/{year}", response_model=TrialBalanceResponse)
def get_trial_balance_for_month(
    month: int,
    year: int,
    db: Session = Depends(get_db),
) -> TrialBalanceResponse:
    start_date, end_date, period = _month_window(db, month, year)
    result = generate_trial_balance(db, start_date, end_date, period=period)
    return TrialBalanceResponse(**result, currency=get_base_currency(db))


@router.get("/trial-balance/as-of", response_model=TrialBalanceResponse)
def get_trial_balance_as_of(
    as_of_date: Optional[str] = Query(None, description="As-of date YYYY-MM-DD"),
    db: Session = Depends(get_db),
) -> TrialBalanceResponse:
    result = generate_trial_balance_as_of(db, parse_iso_date(as_of_date, "as_of_date"))
    return TrialBalanceResponse(**result, currency=get_base_currency(db))


@router.get("/trial-balance/summary", response_model=TrialBalanceSummaryResponse)
def get_trial_balance_summary(
    as_of_date: Optional[str] = Query(None, description="As-of date YYYY-MM-DD"),
    db: Session = Depends(get_db),
) -> TrialBalanceSummaryResponse:
    """Snapshot trial balance totals per account type."""
    result = generate_trial_balance_summary(db, parse_iso_date(as_of_date, "as_of_date"))
    return TrialBalanceSummaryResponse(**result)


@router.get("/trial-balance/export")
def export_trial_balance(
    as_of_date: Optional[str] = Query(None, description="As-of date YYYY-MM-DD"),
    start_date: Optional[str] = Query(None, description="Start date YYYY-MM-DD"),
    end_date: Optional[str] = Query(None, description="End date YYYY-MM-DD"),
    db: Session = Depends(get_db),
) -> StreamingResponse:
    """
    Download the trial balance as CSV.

    Either as_of_date (snapshot balances) or both start_date and end_date
    (period activity) must be given.
    """
    if as_of_date:
        as_of = parse_iso_date(as_of_date, "as_of_date")
        result = generate_trial_balance_as_of(db, as_of)
        filename = trial_balance_filename(as_of_date=as_of)
    elif start_date and end_date:
        start, end = parse_date_range(start_date, end_date)
        result = generate_trial_balance(db, start, end)
        filename = trial_balance_filename(start_date=start, end_date=end)
    else:
        raise ValidationError("Provide either as_of_date or both start_date and end_date")

    content = export_to_csv(result["trial_balance"], TRIAL_BALANCE_COLUMNS)
    return StreamingResponse(
        io.BytesIO(content.encode("utf-8")),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
