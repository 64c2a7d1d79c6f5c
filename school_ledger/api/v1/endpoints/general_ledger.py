"""General ledger API endpoints."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from school_ledger.core.config import get_settings
from school_ledger.db.dependencies import get_db
from school_ledger.api.params import parse_iso_date
from school_ledger.domain.accounting.enums import TransactionType
from school_ledger.services.general_ledger_service import get_general_ledger, get_transaction_summary
from school_ledger.schemas.reporting import GeneralLedgerResponse, TransactionSummaryResponse

router = APIRouter()


@router.get("", response_model=GeneralLedgerResponse)
def get_general_ledger_entries(
    account_id: Optional[UUID] = Query(None, description="Include this account's journal lines"),
    search: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    end_date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    transaction_type: Optional[TransactionType] = Query(None),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
) -> GeneralLedgerResponse:
    """
    Student transactions, fee payments and (with account_id) journal lines,
    newest first.
    """
    settings = get_settings()
    result = get_general_ledger(
        db,
        account_id=account_id,
        search=search,
        start_date=parse_iso_date(start_date, "start_date", required=False),
        end_date=parse_iso_date(end_date, "end_date", required=False),
        transaction_type=transaction_type,
        page=page,
        limit=min(limit or settings.default_page_size, settings.max_page_size),
    )
    return GeneralLedgerResponse(**result)


@router.get("/summary", response_model=TransactionSummaryResponse)
def get_general_ledger_summary(db: Session = Depends(get_db)) -> TransactionSummaryResponse:
    """Transaction counts and debit/credit totals per source table."""
    return TransactionSummaryResponse(**get_transaction_summary(db))
