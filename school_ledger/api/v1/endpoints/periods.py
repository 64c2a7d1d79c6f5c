"""Accounting period API endpoints."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from school_ledger.db.dependencies import get_db
from school_ledger.api.params import validate_month_year, validate_year
from school_ledger.domain.accounting import period_service
from school_ledger.domain.accounting.enums import PeriodStatus, PeriodType
from school_ledger.schemas.accounting import (
    ClosingEntryResponse,
    OpeningBalanceResponse,
    PeriodClose,
    PeriodCloseResponse,
    PeriodCreate,
    PeriodGenerate,
    PeriodResponse,
    PeriodStatusUpdate,
)

router = APIRouter()


@router.get("", response_model=List[PeriodResponse])
def list_periods(
    status_filter: Optional[PeriodStatus] = Query(None, alias="status"),
    year: Optional[int] = Query(None),
    period_type: Optional[PeriodType] = Query(None, alias="type"),
    db: Session = Depends(get_db),
) -> List[PeriodResponse]:
    periods = period_service.list_periods(db, status=status_filter, year=year, period_type=period_type)
    return [PeriodResponse.model_validate(period) for period in periods]


@router.get("/current", response_model=PeriodResponse)
def get_current_period(db: Session = Depends(get_db)) -> PeriodResponse:
    return PeriodResponse.model_validate(period_service.get_current_period(db))


@router.post("", response_model=PeriodResponse, status_code=status.HTTP_201_CREATED)
def create_period(period_data: PeriodCreate, db: Session = Depends(get_db)) -> PeriodResponse:
    """Create an open period. Overlapping an existing period is rejected with 400."""
    period = period_service.create_period(
        db,
        period_name=period_data.period_name,
        period_type=period_data.period_type,
        start_date=period_data.start_date,
        end_date=period_data.end_date,
    )
    return PeriodResponse.model_validate(period)


@router.post("/month/{month}/year/{year}", response_model=PeriodResponse)
def get_or_create_month_period(month: int, year: int, db: Session = Depends(get_db)) -> PeriodResponse:
    month, year = validate_month_year(month, year)
    return PeriodResponse.model_validate(period_service.get_or_create_month_period(db, month, year))


@router.post("/generate/{year}", response_model=List[PeriodResponse], status_code=status.HTTP_201_CREATED)
def generate_yearly_periods(
    year: int,
    data: Optional[PeriodGenerate] = Body(None),
    db: Session = Depends(get_db),
) -> List[PeriodResponse]:
    validate_year(year)
    period_type = data.period_type if data else PeriodType.MONTHLY
    periods = period_service.generate_yearly_periods(db, year, period_type)
    return [PeriodResponse.model_validate(period) for period in periods]


@router.get("/{period_id}", response_model=PeriodResponse)
def get_period(period_id: UUID, db: Session = Depends(get_db)) -> PeriodResponse:
    return PeriodResponse.model_validate(period_service.get_period(db, period_id))


@router.put("/{period_id}/status", response_model=PeriodResponse)
def update_period_status(
    period_id: UUID,
    data: PeriodStatusUpdate,
    db: Session = Depends(get_db),
) -> PeriodResponse:
    """Switch an unclosed period between open and in_progress."""
    return PeriodResponse.model_validate(period_service.update_period_status(db, period_id, data.status))


@router.delete("/{period_id}")
def delete_period(period_id: UUID, db: Session = Depends(get_db)):
    """Delete a period that is not closed and holds no carried-forward balances."""
    period_service.delete_period(db, period_id)
    return {"message": "Period deleted", "period_id": str(period_id)}


@router.post("/{period_id}/close", response_model=PeriodCloseResponse)
def close_period(
    period_id: UUID,
    data: Optional[PeriodClose] = Body(None),
    db: Session = Depends(get_db),
) -> PeriodCloseResponse:
    """
    Close a period.

    Posts the closing entries, carries balances into the next period and
    marks the period closed. 400 if it is already closed, 500 if the ledger
    fails an integrity check.
    """
    result = period_service.close_period(db, period_id, closed_by=data.closed_by if data else None)
    return PeriodCloseResponse(
        period=PeriodResponse.model_validate(result["period"]),
        net_income=result["net_income"],
        closing_entries=result["closing_entries"],
        next_period=PeriodResponse.model_validate(result["next_period"]),
        opening_balances=[OpeningBalanceResponse.model_validate(row) for row in result["opening_balances"]],
    )


@router.get("/{period_id}/closing-entries", response_model=List[ClosingEntryResponse])
def get_closing_entries(period_id: UUID, db: Session = Depends(get_db)) -> List[ClosingEntryResponse]:
    return [ClosingEntryResponse.model_validate(row) for row in period_service.get_closing_entries(db, period_id)]


@router.get("/{period_id}/opening-balances", response_model=List[OpeningBalanceResponse])
def get_opening_balances(period_id: UUID, db: Session = Depends(get_db)) -> List[OpeningBalanceResponse]:
    return [OpeningBalanceResponse.model_validate(row) for row in period_service.get_opening_balances(db, period_id)]
