"""Tests for journal entry posting."""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from sqlalchemy.orm import Session

from school_ledger.core.exceptions import (
    NotFoundError,
    ReferenceIntegrityError,
    UnbalancedEntryError,
    ValidationError,
)
from school_ledger.models.accounting import AccountBalance, JournalEntry, JournalLine
from school_ledger.domain.accounting.enums import AccountType, BalanceType, EntryKind, TransactionType
from school_ledger.domain.accounting.gl_service import (
    get_entries_for_account,
    get_entry_by_id,
    infer_entry_kind,
    post_entry,
)
from school_ledger.domain.accounting.chart_service import (
    create_account,
    create_opening_balance,
    deactivate_account,
    update_account,
)
from school_ledger.domain.accounting.balance_service import get_balance
from school_ledger.services.reporting_service import generate_balance_sheet


def test_post_balanced_entry(db: Session, currency, sample_chart_of_accounts):
    """Posting a balanced entry creates the entry and its lines."""
    cash = sample_chart_of_accounts["cash"]
    tuition = sample_chart_of_accounts["tuition"]

    entry = post_entry(
        db,
        entry_date=date(2024, 3, 15),
        reference="RCT-001",
        description="Term 1 tuition",
        lines=[
            {"account_id": cash.id, "currency_id": currency.id, "debit": 100, "credit": 0},
            {"account_id": tuition.id, "currency_id": currency.id, "debit": 0, "credit": 100},
        ],
    )

    je = db.query(JournalEntry).filter(JournalEntry.id == entry.id).first()
    assert je is not None
    assert je.entry_kind == EntryKind.NORMAL
    assert je.reference == "RCT-001"

    lines = db.query(JournalLine).filter(JournalLine.journal_entry_id == je.id).all()
    assert len(lines) == 2

    cash_line = next((l for l in lines if l.account_id == cash.id), None)
    assert cash_line.debit == Decimal("100.00")
    assert cash_line.credit == Decimal("0.00")

    fetched = get_entry_by_id(db, entry.id)
    assert fetched.total_debit == fetched.total_credit == Decimal("100.00")


def test_unbalanced_entry_leaves_no_trace(db: Session, currency, sample_chart_of_accounts):
    cash = sample_chart_of_accounts["cash"]
    tuition = sample_chart_of_accounts["tuition"]

    with pytest.raises(UnbalancedEntryError):
        post_entry(
            db,
            entry_date=date(2024, 3, 15),
            reference=None,
            description="Broken",
            lines=[
                {"account_id": cash.id, "currency_id": currency.id, "debit": 100, "credit": 0},
                {"account_id": tuition.id, "currency_id": currency.id, "debit": 0, "credit": 90},
            ],
        )

    assert db.query(JournalEntry).count() == 0
    assert db.query(JournalLine).count() == 0
    assert db.query(AccountBalance).count() == 0
    assert get_entries_for_account(db, cash.id)["entries"] == []


def test_single_line_entry_rejected(db: Session, currency, sample_chart_of_accounts):
    cash = sample_chart_of_accounts["cash"]

    with pytest.raises(UnbalancedEntryError):
        post_entry(
            db,
            entry_date=date(2024, 3, 15),
            reference=None,
            description="One line",
            lines=[{"account_id": cash.id, "currency_id": currency.id, "debit": 50, "credit": 0}],
        )

    assert db.query(JournalEntry).count() == 0


def test_rounding_within_epsilon_accepted(db: Session, currency, sample_chart_of_accounts):
    cash = sample_chart_of_accounts["cash"]
    tuition = sample_chart_of_accounts["tuition"]
    expense = sample_chart_of_accounts["expense"]

    entry = post_entry(
        db,
        entry_date=date(2024, 3, 1),
        reference=None,
        description="Split",
        lines=[
            {"account_id": cash.id, "currency_id": currency.id, "debit": "33.33", "credit": 0},
            {"account_id": expense.id, "currency_id": currency.id, "debit": "66.67", "credit": 0},
            {"account_id": tuition.id, "currency_id": currency.id, "debit": 0, "credit": "100.01"},
        ],
    )
    assert entry.id is not None


@pytest.mark.parametrize("debit,credit", [(-10, 0), (10, 10), (0, 0)])
def test_invalid_line_amounts(db: Session, currency, sample_chart_of_accounts, debit, credit):
    cash = sample_chart_of_accounts["cash"]
    tuition = sample_chart_of_accounts["tuition"]

    with pytest.raises(ValidationError):
        post_entry(
            db,
            entry_date=date(2024, 3, 15),
            reference=None,
            description="Bad line",
            lines=[
                {"account_id": cash.id, "currency_id": currency.id, "debit": debit, "credit": credit},
                {"account_id": tuition.id, "currency_id": currency.id, "debit": 0, "credit": 10},
            ],
        )


def test_unknown_account_rejected(db: Session, currency, sample_chart_of_accounts):
    cash = sample_chart_of_accounts["cash"]

    with pytest.raises(ReferenceIntegrityError):
        post_entry(
            db,
            entry_date=date(2024, 3, 15),
            reference=None,
            description="Ghost account",
            lines=[
                {"account_id": cash.id, "currency_id": currency.id, "debit": 10, "credit": 0},
                {"account_id": uuid4(), "currency_id": currency.id, "debit": 0, "credit": 10},
            ],
        )

    assert db.query(JournalEntry).count() == 0
    assert db.query(AccountBalance).count() == 0


def test_inactive_account_rejected(db: Session, currency, sample_chart_of_accounts, post):
    boarding = sample_chart_of_accounts["boarding"]
    boarding.is_active = False
    db.commit()

    with pytest.raises(ReferenceIntegrityError):
        post(date(2024, 3, 15), sample_chart_of_accounts["cash"], boarding, 10)


def test_legacy_description_infers_kind():
    assert infer_entry_kind("Opening Balances B/D 2024-04-01") == EntryKind.OPENING_BALANCE
    assert infer_entry_kind("Close Tuition Revenue to Income Summary") == EntryKind.CLOSING_ENTRY
    assert infer_entry_kind("Close Income Summary to Retained Earnings") == EntryKind.CLOSING_ENTRY
    assert infer_entry_kind("opening balance: Bus (1600) - migrated") == EntryKind.OPENING_BALANCE
    assert infer_entry_kind("Tuition receipt") == EntryKind.NORMAL
    assert infer_entry_kind(None) == EntryKind.NORMAL


def test_entries_for_account_ordering_and_filters(db: Session, sample_chart_of_accounts, post):
    cash = sample_chart_of_accounts["cash"]
    tuition = sample_chart_of_accounts["tuition"]
    expense = sample_chart_of_accounts["expense"]

    post(date(2024, 3, 1), cash, tuition, 100, "March fees")
    post(date(2024, 3, 20), expense, cash, 40, "Stationery")
    post(date(2024, 2, 10), cash, tuition, 70, "February fees")

    result = get_entries_for_account(db, cash.id)
    dates = [row["entry_date"] for row in result["entries"]]
    assert dates == ["2024-03-20", "2024-03-01", "2024-02-10"]
    assert result["pagination"]["total_records"] == 3
    assert result["account"]["code"] == "1000"

    debits = get_entries_for_account(db, cash.id, transaction_type=TransactionType.DEBIT)
    assert [row["debit"] for row in debits["entries"]] == [100.0, 70.0]

    march = get_entries_for_account(db, cash.id, start_date=date(2024, 3, 1), end_date=date(2024, 3, 31))
    assert march["pagination"]["total_records"] == 2

    searched = get_entries_for_account(db, cash.id, search="station")
    assert len(searched["entries"]) == 1

    paged = get_entries_for_account(db, cash.id, page=2, limit=2)
    assert paged["pagination"]["total_pages"] == 2
    assert len(paged["entries"]) == 1


def test_opening_balance_posts_against_retained_earnings(db: Session, currency, sample_chart_of_accounts):
    equipment = sample_chart_of_accounts["equipment"]

    entry = create_opening_balance(
        db,
        account_id=equipment.id,
        amount=Decimal("5000.00"),
        balance_type=BalanceType.DEBIT,
        description="Migrated from old books",
        currency_id=currency.id,
        opening_balance_date=date(2024, 1, 1),
    )

    assert entry.entry_kind == EntryKind.OPENING_BALANCE
    assert entry.description.startswith("Opening Balance: Equipment (1500)")
    assert entry.reference.startswith("OB-COA-1500-")

    retained = next(l for l in entry.lines if l.account_id != equipment.id)
    assert retained.credit == Decimal("5000.00")
    assert get_balance(db, equipment.id, currency.id, date(2024, 1, 1)) == Decimal("5000.00")
    assert get_balance(db, retained.account_id, currency.id, date(2024, 1, 1)) == Decimal("5000.00")


def test_create_account_rejects_duplicate_code(db: Session, sample_chart_of_accounts):
    with pytest.raises(ValidationError):
        create_account(db, code="1000", name="Another Cash", account_type=AccountType.ASSET)


def test_account_type_locked_once_used(db: Session, sample_chart_of_accounts, post):
    cash = sample_chart_of_accounts["cash"]
    post(date(2024, 3, 1), cash, sample_chart_of_accounts["tuition"], 10)

    with pytest.raises(ValidationError):
        update_account(db, cash.id, {"account_type": AccountType.EXPENSE})

    renamed = update_account(db, cash.id, {"name": "Cash on Hand"})
    assert renamed.name == "Cash on Hand"


@pytest.mark.parametrize("field", ["code", "name", "account_type", "is_cash", "is_active"])
def test_update_rejects_null_required_field(db: Session, sample_chart_of_accounts, field):
    cash = sample_chart_of_accounts["cash"]

    with pytest.raises(ValidationError):
        update_account(db, cash.id, {field: None})

    db.refresh(cash)
    assert cash.name == "Cash"


def test_update_strips_code_and_checks_parent(db: Session, sample_chart_of_accounts):
    bank = sample_chart_of_accounts["bank"]

    updated = update_account(db, bank.id, {"code": "  1020 "})
    assert updated.code == "1020"

    with pytest.raises(NotFoundError):
        update_account(db, bank.id, {"parent_id": uuid4()})

    with pytest.raises(ValidationError):
        update_account(db, bank.id, {"parent_id": bank.id})

    child = update_account(db, bank.id, {"parent_id": sample_chart_of_accounts["cash"].id})
    assert child.parent_id == sample_chart_of_accounts["cash"].id


def test_account_with_balance_cannot_be_deactivated(db: Session, sample_chart_of_accounts, post):
    a = sample_chart_of_accounts
    post(date(2024, 3, 1), a["equipment"], a["capital"], 1000, "Donated equipment")

    with pytest.raises(ValidationError):
        deactivate_account(db, a["equipment"].id)
    with pytest.raises(ValidationError):
        update_account(db, a["equipment"].id, {"is_active": False})

    db.refresh(a["equipment"])
    assert a["equipment"].is_active is True
    totals = generate_balance_sheet(db, date(2024, 3, 31))["totals"]
    assert totals["total_assets"] == 1000.0
    assert totals["is_balanced"] is True


def test_account_emptied_can_be_deactivated(db: Session, sample_chart_of_accounts, post):
    a = sample_chart_of_accounts
    post(date(2024, 3, 1), a["equipment"], a["capital"], 1000, "Donated equipment")
    post(date(2024, 3, 20), a["cash"], a["equipment"], 1000, "Equipment sold")

    assert deactivate_account(db, a["equipment"].id).is_active is False
    assert generate_balance_sheet(db, date(2024, 3, 31))["totals"]["is_balanced"] is True
