"""Tests for the combined general ledger view."""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from sqlalchemy.orm import Session

from school_ledger.models.billing import FeePayment, StudentTransaction
from school_ledger.domain.accounting.enums import TransactionType
from school_ledger.services.general_ledger_service import get_general_ledger, get_transaction_summary


@pytest.fixture
def billing_rows(db: Session):
    db.add_all([
        StudentTransaction(
            id=uuid4(),
            student_reg_number="STU-001",
            transaction_type=TransactionType.DEBIT,
            amount=Decimal("450.00"),
            description="Term 1 tuition invoice",
            transaction_date=date(2024, 3, 1),
        ),
        StudentTransaction(
            id=uuid4(),
            student_reg_number="STU-002",
            transaction_type=TransactionType.CREDIT,
            amount=Decimal("25.00"),
            description="Sibling discount",
            transaction_date=date(2024, 3, 3),
        ),
        FeePayment(
            id=uuid4(),
            student_reg_number="STU-001",
            receipt_number="RCT-1001",
            reference_number=None,
            payment_method="Cash",
            payment_date=date(2024, 3, 10),
            payment_currency="ZWG",
            base_currency_amount=Decimal("300.00"),
            exchange_rate=Decimal("13.5"),
        ),
    ])
    db.commit()


def test_rows_merged_newest_first(db: Session, billing_rows):
    result = get_general_ledger(db)

    assert [row["source"] for row in result["data"]] == [
        "fee_payment",
        "student_transaction",
        "student_transaction",
    ]
    assert result["pagination"]["total_records"] == 3


def test_fee_payment_projection(db: Session, billing_rows):
    payment = get_general_ledger(db)["data"][0]

    assert payment["description"] == "Fee Payment - RCT-1001"
    assert payment["debit_amount"] == 300.0
    assert payment["credit_amount"] == 0.0
    assert payment["transaction_type"] == "CREDIT"
    assert payment["reference"] == "RCT-1001"
    assert payment["currency"] == "ZWG"
    assert payment["exchange_rate"] == 13.5
    assert payment["account_id"] == "STU-001"


def test_student_transaction_sides(db: Session, billing_rows):
    rows = get_general_ledger(db, transaction_type=TransactionType.DEBIT)["data"]

    assert len(rows) == 1
    assert rows[0]["debit_amount"] == 450.0
    assert rows[0]["credit_amount"] == 0.0


def test_journal_lines_need_account(db: Session, billing_rows, sample_chart_of_accounts, post):
    cash = sample_chart_of_accounts["cash"]
    post(date(2024, 3, 12), cash, sample_chart_of_accounts["tuition"], 80, "Walk-in payment")

    assert get_general_ledger(db)["pagination"]["total_records"] == 3

    result = get_general_ledger(db, account_id=cash.id)
    assert result["pagination"]["total_records"] == 4
    latest = result["data"][0]
    assert latest["source"] == "journal_entry"
    assert latest["transaction_type"] == "DEBIT"
    assert latest["debit_amount"] == 80.0


def test_search_and_dates(db: Session, billing_rows):
    assert len(get_general_ledger(db, search="discount")["data"]) == 1
    assert len(get_general_ledger(db, search="RCT-1001")["data"]) == 1

    early = get_general_ledger(db, start_date=date(2024, 3, 1), end_date=date(2024, 3, 5))
    assert early["pagination"]["total_records"] == 2


def test_pagination(db: Session, billing_rows):
    result = get_general_ledger(db, page=2, limit=2)

    assert len(result["data"]) == 1
    assert result["pagination"]["total_pages"] == 2
    assert result["pagination"]["current_page"] == 2


def test_transaction_summary_per_source(db: Session, billing_rows, sample_chart_of_accounts, post):
    post(date(2024, 3, 12), sample_chart_of_accounts["cash"], sample_chart_of_accounts["tuition"], 80)

    summary = get_transaction_summary(db)

    assert summary["student_transaction"] == {"total_transactions": 2, "total_debits": 450.0, "total_credits": 25.0}
    assert summary["fee_payment"] == {"total_transactions": 1, "total_debits": 300.0, "total_credits": 0.0}
    assert summary["journal_entry"] == {"total_transactions": 2, "total_debits": 80.0, "total_credits": 80.0}


def test_transaction_summary_when_empty(db: Session):
    summary = get_transaction_summary(db)

    assert summary["fee_payment"]["total_transactions"] == 0
    assert summary["journal_entry"]["total_debits"] == 0.0
