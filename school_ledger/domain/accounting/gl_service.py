"""General Ledger service for journal entry operations."""

import logging
import math
import re
from datetime import date
from decimal import Decimal
from typing import List, Dict, Any
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from school_ledger.core.config import get_settings
from school_ledger.core.exceptions import (
    NotFoundError,
    ReferenceIntegrityError,
    UnbalancedEntryError,
    ValidationError,
)
from school_ledger.models.accounting import (
    ChartOfAccount,
    Currency,
    JournalEntry,
    JournalLine,
)
from school_ledger.domain.accounting.enums import EntryKind, TransactionType
from school_ledger.domain.accounting.balance_service import apply_delta

logger = logging.getLogger(__name__)


# Descriptions written by older posting code before entries carried a kind
LEGACY_KIND_MARKERS = [
    (re.compile(r"Opening Balances B/D", re.IGNORECASE), EntryKind.OPENING_BALANCE),
    (re.compile(r"Opening Balance:", re.IGNORECASE), EntryKind.OPENING_BALANCE),
    (re.compile(r"Close .* to Income Summary", re.IGNORECASE), EntryKind.CLOSING_ENTRY),
    (re.compile(r"Close Income Summary to Retained Earnings", re.IGNORECASE), EntryKind.CLOSING_ENTRY),
]


def infer_entry_kind(description: str | None) -> EntryKind:
    """Map a legacy description marker to its entry kind, defaulting to NORMAL."""
    for pattern, kind in LEGACY_KIND_MARKERS:
        if description and pattern.search(description):
            return kind
    return EntryKind.NORMAL


def _to_decimal(value: Any, field: str, index: int) -> Decimal:
    try:
        return Decimal(str(value if value is not None else 0))
    except ArithmeticError:
        raise ValidationError(
            f"Line {index + 1}: {field} is not a number",
            details={"line": index + 1, field: str(value)},
        )


def _validate_lines(lines_list: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Check shape and balance of the lines. Returns them with Decimal amounts."""
    settings = get_settings()

    if len(lines_list) < 2:
        raise UnbalancedEntryError(
            f"Journal entry needs at least 2 lines, got {len(lines_list)}"
        )

    normalized = []
    for index, line in enumerate(lines_list):
        if not line.get("account_id"):
            raise ValidationError(f"Line {index + 1}: account_id is required", details={"line": index + 1})
        if not line.get("currency_id"):
            raise ValidationError(f"Line {index + 1}: currency_id is required", details={"line": index + 1})

        debit = _to_decimal(line.get("debit"), "debit", index)
        credit = _to_decimal(line.get("credit"), "credit", index)

        if debit < 0 or credit < 0:
            raise ValidationError(
                f"Line {index + 1}: debit and credit must not be negative",
                details={"line": index + 1, "debit": str(debit), "credit": str(credit)},
            )
        if (debit == 0) == (credit == 0):
            raise ValidationError(
                f"Line {index + 1}: exactly one of debit or credit must be nonzero",
                details={"line": index + 1, "debit": str(debit), "credit": str(credit)},
            )

        normalized.append({**line, "debit": debit, "credit": credit})

    total_debit = sum((line["debit"] for line in normalized), Decimal("0"))
    total_credit = sum((line["credit"] for line in normalized), Decimal("0"))

    if abs(total_debit - total_credit) > Decimal(str(settings.balance_epsilon)):
        raise UnbalancedEntryError(
            f"Journal entry is not balanced: debits={total_debit}, credits={total_credit}",
            total_debit=total_debit,
            total_credit=total_credit,
        )

    return normalized


def post_entry(
    db: Session,
    entry_date: date,
    reference: str | None,
    description: str | None,
    lines: List[Dict[str, Any]],
    created_by: str | None = None,
    entry_kind: EntryKind | None = None,
    commit: bool = True,
) -> JournalEntry:
    """
    Post a balanced journal entry and update account balances.

    The entry, its lines and the balance snapshots are written in one
    transaction. On any failure the session is rolled back.

    Args:
        db: Database session
        entry_date: Journal entry date, also the effective date for balances
        reference: External reference (receipt number, invoice number)
        description: Entry description
        lines: List of line dictionaries with:
            - account_id: UUID
            - currency_id: UUID
            - debit: Decimal or float
            - credit: Decimal or float
            - description: Optional string
            - exchange_rate: Optional Decimal
        created_by: Optional user identifier
        entry_kind: Entry kind; inferred from the description when None
        commit: Commit when done. With False the caller owns the transaction
            and only a flush happens.

    Returns:
        Created JournalEntry instance

    Raises:
        UnbalancedEntryError: Fewer than 2 lines, or debits != credits
        ValidationError: Negative amounts, or a line with both or neither side set
        ReferenceIntegrityError: Unknown or inactive account or currency
    """
    try:
        normalized = _validate_lines(lines)

        kind = EntryKind(entry_kind) if entry_kind is not None else infer_entry_kind(description)

        journal_entry = JournalEntry(
            entry_date=entry_date,
            reference=reference,
            description=description,
            entry_kind=kind,
            created_by=created_by,
        )
        db.add(journal_entry)
        db.flush()  # Get the ID

        accounts: Dict[UUID, ChartOfAccount] = {}
        currencies: Dict[UUID, Currency] = {}

        for line_data in normalized:
            account_id = line_data["account_id"]
            currency_id = line_data["currency_id"]

            # Verify account exists
            account = accounts.get(account_id) or db.get(ChartOfAccount, account_id)
            if not account or not account.is_active:
                raise ReferenceIntegrityError(
                    f"Account {account_id} does not exist or is inactive",
                    details={"account_id": str(account_id)},
                )
            accounts[account_id] = account

            currency = currencies.get(currency_id) or db.get(Currency, currency_id)
            if not currency or not currency.is_active:
                raise ReferenceIntegrityError(
                    f"Currency {currency_id} does not exist or is inactive",
                    details={"currency_id": str(currency_id)},
                )
            currencies[currency_id] = currency

            journal_line = JournalLine(
                journal_entry_id=journal_entry.id,
                account_id=account.id,
                currency_id=currency.id,
                description=line_data.get("description"),
                debit=line_data["debit"],
                credit=line_data["credit"],
                exchange_rate=line_data.get("exchange_rate"),
            )
            db.add(journal_line)

            apply_delta(
                db,
                account=account,
                currency_id=currency.id,
                debit=line_data["debit"],
                credit=line_data["credit"],
                effective_date=entry_date,
            )

        if commit:
            db.commit()
            db.refresh(journal_entry)
        else:
            db.flush()
    except Exception:
        db.rollback()
        raise

    logger.info(
        f"Posted journal entry {journal_entry.id} ({kind.value}) dated {entry_date} "
        f"reference={reference} with {len(normalized)} lines"
    )

    return journal_entry


def get_entry_by_id(db: Session, entry_id: UUID) -> JournalEntry:
    entry = (
        db.query(JournalEntry)
        .options(selectinload(JournalEntry.lines))
        .filter(JournalEntry.id == entry_id)
        .first()
    )
    if not entry:
        raise NotFoundError("Journal entry", entry_id)
    return entry


def get_entries_for_account(
    db: Session,
    account_id: UUID,
    search: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    transaction_type: TransactionType | None = None,
    page: int = 1,
    limit: int = 10,
) -> Dict[str, Any]:
    """
    Journal lines posted to an account, newest first.

    Returns:
        Dict with "entries" and "pagination"
        ({current_page, total_pages, total_records, limit})
    """
    account = db.get(ChartOfAccount, account_id)
    if not account:
        raise NotFoundError("Account", account_id)

    query = (
        db.query(JournalLine, JournalEntry)
        .join(JournalEntry, JournalEntry.id == JournalLine.journal_entry_id)
        .filter(JournalLine.account_id == account_id)
    )

    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            JournalEntry.description.ilike(pattern),
            JournalEntry.reference.ilike(pattern),
            JournalLine.description.ilike(pattern),
        ))
    if start_date:
        query = query.filter(JournalEntry.entry_date >= start_date)
    if end_date:
        query = query.filter(JournalEntry.entry_date <= end_date)
    if transaction_type == TransactionType.DEBIT:
        query = query.filter(JournalLine.debit > 0)
    elif transaction_type == TransactionType.CREDIT:
        query = query.filter(JournalLine.credit > 0)

    total_records = query.count()
    rows = (
        query.order_by(JournalEntry.entry_date.desc(), JournalLine.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    entries = []
    for line, entry in rows:
        entries.append({
            "line_id": str(line.id),
            "journal_entry_id": str(entry.id),
            "entry_date": entry.entry_date.isoformat(),
            "reference": entry.reference,
            "description": line.description or entry.description,
            "entry_kind": entry.entry_kind.value,
            "debit": float(line.debit),
            "credit": float(line.credit),
            "currency_id": str(line.currency_id),
        })

    return {
        "account": {"id": str(account.id), "code": account.code, "name": account.name},
        "entries": entries,
        "pagination": {
            "current_page": page,
            "total_pages": math.ceil(total_records / limit) if limit else 0,
            "total_records": total_records,
            "limit": limit,
        },
    }
