"""Chart of accounts API endpoints."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from school_ledger.core.config import get_settings
from school_ledger.db.dependencies import get_db
from school_ledger.domain.accounting import chart_service
from school_ledger.domain.accounting.classification import classify
from school_ledger.domain.accounting.enums import AccountType, TransactionType
from school_ledger.domain.accounting.gl_service import get_entries_for_account
from school_ledger.api.params import parse_iso_date
from school_ledger.core.exceptions import ValidationError
from school_ledger.schemas.accounting import (
    AccountClassificationResponse,
    AccountCreate,
    AccountEntriesResponse,
    AccountResponse,
    AccountUpdate,
    JournalEntryResponse,
    OpeningBalanceCreate,
)

router = APIRouter()


@router.get("", response_model=List[AccountResponse])
def list_accounts(
    account_type: Optional[AccountType] = Query(None, description="Filter by account type"),
    is_active: Optional[bool] = Query(None, description="Filter by active flag"),
    db: Session = Depends(get_db),
) -> List[AccountResponse]:
    accounts = chart_service.list_accounts(db, account_type=account_type, is_active=is_active)
    return [AccountResponse.model_validate(account) for account in accounts]


@router.post("", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def create_account(
    account_data: AccountCreate,
    db: Session = Depends(get_db),
) -> AccountResponse:
    account = chart_service.create_account(
        db,
        code=account_data.code,
        name=account_data.name,
        account_type=account_data.account_type,
        parent_id=account_data.parent_id,
        is_cash=account_data.is_cash,
    )
    return AccountResponse.model_validate(account)


@router.post("/opening-balance", response_model=JournalEntryResponse, status_code=status.HTTP_201_CREATED)
def create_opening_balance(
    data: OpeningBalanceCreate,
    db: Session = Depends(get_db),
) -> JournalEntryResponse:
    """
    Post an opening balance for an account against Retained Earnings (3998).

    The entry is tagged as an opening balance and never counts towards
    income statements.
    """
    entry = chart_service.create_opening_balance(
        db,
        account_id=data.account_id,
        amount=data.amount,
        balance_type=data.balance_type,
        description=data.description,
        currency_id=data.currency_id,
        reference=data.reference,
        opening_balance_date=data.opening_balance_date,
    )
    return JournalEntryResponse.model_validate(entry)


@router.get("/code/{code}", response_model=AccountResponse)
def get_account_by_code(code: str, db: Session = Depends(get_db)) -> AccountResponse:
    return AccountResponse.model_validate(chart_service.get_account_by_code(db, code))


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(account_id: UUID, db: Session = Depends(get_db)) -> AccountResponse:
    return AccountResponse.model_validate(chart_service.get_account(db, account_id))


@router.put("/{account_id}", response_model=AccountResponse)
def update_account(
    account_id: UUID,
    changes: AccountUpdate,
    db: Session = Depends(get_db),
) -> AccountResponse:
    account = chart_service.update_account(db, account_id, changes.model_dump(exclude_unset=True))
    return AccountResponse.model_validate(account)


@router.delete("/{account_id}", response_model=AccountResponse)
def deactivate_account(account_id: UUID, db: Session = Depends(get_db)) -> AccountResponse:
    """Soft delete: the account is marked inactive and kept for history."""
    return AccountResponse.model_validate(chart_service.deactivate_account(db, account_id))


@router.get("/{account_id}/classification", response_model=AccountClassificationResponse)
def get_account_classification(account_id: UUID, db: Session = Depends(get_db)) -> AccountClassificationResponse:
    account = chart_service.get_account(db, account_id)
    try:
        bucket = classify(account)
    except ValueError as e:
        raise ValidationError(str(e), details={"account_id": str(account_id)})
    return AccountClassificationResponse(
        account_id=account.id,
        code=account.code,
        name=account.name,
        account_type=account.account_type,
        bucket=bucket,
    )


@router.get("/{account_id}/entries", response_model=AccountEntriesResponse)
def get_account_entries(
    account_id: UUID,
    search: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    end_date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    transaction_type: Optional[TransactionType] = Query(None),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
) -> AccountEntriesResponse:
    settings = get_settings()
    result = get_entries_for_account(
        db,
        account_id=account_id,
        search=search,
        start_date=parse_iso_date(start_date, "start_date", required=False),
        end_date=parse_iso_date(end_date, "end_date", required=False),
        transaction_type=transaction_type,
        page=page,
        limit=min(limit or settings.default_page_size, settings.max_page_size),
    )
    return AccountEntriesResponse(**result)
