"""Journal entry API endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from school_ledger.db.dependencies import get_db
from school_ledger.domain.accounting.gl_service import post_entry, get_entry_by_id
from school_ledger.schemas.accounting import JournalEntryCreate, JournalEntryResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=JournalEntryResponse, status_code=status.HTTP_201_CREATED)
def create_journal_entry(
    entry_data: JournalEntryCreate,
    db: Session = Depends(get_db),
) -> JournalEntryResponse:
    """
    Post a balanced journal entry.

    Balances of every account touched are updated in the same transaction.
    Returns 400 when the entry is unbalanced, has fewer than two lines, or
    references an unknown or inactive account or currency.
    """
    entry = post_entry(
        db,
        entry_date=entry_data.entry_date,
        reference=entry_data.reference,
        description=entry_data.description,
        lines=[line.model_dump() for line in entry_data.lines],
        created_by=entry_data.created_by,
        entry_kind=entry_data.entry_kind,
    )
    return JournalEntryResponse.model_validate(entry)


@router.get("/{entry_id}", response_model=JournalEntryResponse)
def get_journal_entry(
    entry_id: UUID,
    db: Session = Depends(get_db),
) -> JournalEntryResponse:
    return JournalEntryResponse.model_validate(get_entry_by_id(db, entry_id))
