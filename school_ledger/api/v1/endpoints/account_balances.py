"""Account balance API endpoints."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from school_ledger.db.dependencies import get_db
from school_ledger.domain.accounting import balance_service
from school_ledger.domain.accounting.chart_service import get_account
from school_ledger.schemas.accounting import (
    AccountBalanceResponse,
    AccountBalanceUpdate,
    RecalculateResponse,
)

router = APIRouter()


@router.post("/recalculate", response_model=RecalculateResponse)
def recalculate_balances(db: Session = Depends(get_db)) -> RecalculateResponse:
    """Rebuild every balance snapshot from journal history."""
    return RecalculateResponse(snapshots_written=balance_service.recalculate_all_balances(db))


@router.get("/{account_id}", response_model=Optional[AccountBalanceResponse])
def get_account_balance(
    account_id: UUID,
    currency_id: UUID = Query(..., description="Currency UUID"),
    db: Session = Depends(get_db),
) -> Optional[AccountBalanceResponse]:
    """Latest balance snapshot for the account in a currency, or null."""
    get_account(db, account_id)
    snapshot = balance_service.get_latest_balance(db, account_id, currency_id)
    if snapshot is None:
        return None
    return AccountBalanceResponse.model_validate(snapshot)


@router.put("/{account_id}", response_model=AccountBalanceResponse)
def set_account_balance(
    account_id: UUID,
    data: AccountBalanceUpdate,
    db: Session = Depends(get_db),
) -> AccountBalanceResponse:
    """
    Administrative balance override.

    Snapshots are derived from journal lines; an override holds until the
    next recalculation.
    """
    snapshot = balance_service.set_balance(
        db,
        account_id=account_id,
        currency_id=data.currency_id,
        balance=data.balance,
        as_of_date=data.as_of_date,
    )
    return AccountBalanceResponse.model_validate(snapshot)
