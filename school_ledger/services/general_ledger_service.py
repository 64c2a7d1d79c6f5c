"""General ledger view over student transactions, fee payments and journal lines."""

import math
from dataclasses import dataclass, asdict
from datetime import date
from decimal import Decimal
from typing import List, Optional, Dict, Any
from uuid import UUID

import structlog
from sqlalchemy import case, func, or_
from sqlalchemy.orm import Session

from school_ledger.models.accounting import JournalEntry, JournalLine
from school_ledger.models.billing import FeePayment, StudentTransaction
from school_ledger.domain.accounting.enums import LedgerSource, TransactionType

logger = structlog.get_logger()


@dataclass
class LedgerRow:
    """One row of the general ledger, whatever table it came from."""
    source: LedgerSource
    id: str
    account_id: str
    debit_amount: Decimal
    credit_amount: Decimal
    description: Optional[str]
    transaction_date: date
    transaction_type: TransactionType
    reference: Optional[str] = None
    student_reg_number: Optional[str] = None
    payment_method: Optional[str] = None
    currency: Optional[str] = None
    exchange_rate: Optional[Decimal] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["source"] = self.source.value
        data["transaction_type"] = self.transaction_type.value
        data["transaction_date"] = self.transaction_date.isoformat()
        data["debit_amount"] = float(self.debit_amount)
        data["credit_amount"] = float(self.credit_amount)
        data["exchange_rate"] = float(self.exchange_rate) if self.exchange_rate is not None else None
        return data


def student_transaction_row(txn: StudentTransaction) -> LedgerRow:
    amount = Decimal(str(txn.amount))
    return LedgerRow(
        source=LedgerSource.STUDENT_TRANSACTION,
        id=str(txn.id),
        account_id=txn.student_reg_number,
        debit_amount=amount if txn.transaction_type == TransactionType.DEBIT else Decimal("0"),
        credit_amount=amount if txn.transaction_type == TransactionType.CREDIT else Decimal("0"),
        description=txn.description,
        transaction_date=txn.transaction_date,
        transaction_type=txn.transaction_type,
        student_reg_number=txn.student_reg_number,
    )


def fee_payment_row(payment: FeePayment) -> LedgerRow:
    # Receipts are recorded against the student in base currency on the debit column
    return LedgerRow(
        source=LedgerSource.FEE_PAYMENT,
        id=str(payment.id),
        account_id=payment.student_reg_number,
        debit_amount=Decimal(str(payment.base_currency_amount)),
        credit_amount=Decimal("0"),
        description=f"Fee Payment - {payment.receipt_number}",
        transaction_date=payment.payment_date,
        transaction_type=TransactionType.CREDIT,
        reference=payment.reference_number or payment.receipt_number,
        student_reg_number=payment.student_reg_number,
        payment_method=payment.payment_method,
        currency=payment.payment_currency,
        exchange_rate=payment.exchange_rate,
    )


def journal_line_row(line: JournalLine, entry: JournalEntry) -> LedgerRow:
    if line.debit > 0:
        transaction_type = TransactionType.DEBIT
    elif line.credit > 0:
        transaction_type = TransactionType.CREDIT
    else:
        transaction_type = TransactionType.NEUTRAL

    return LedgerRow(
        source=LedgerSource.JOURNAL_ENTRY,
        id=str(entry.id),
        account_id=str(line.account_id),
        debit_amount=Decimal(str(line.debit)),
        credit_amount=Decimal(str(line.credit)),
        description=line.description or entry.description,
        transaction_date=entry.entry_date,
        transaction_type=transaction_type,
        reference=entry.reference,
        currency=str(line.currency_id),
        exchange_rate=line.exchange_rate,
    )


def _student_transactions(db, search, start_date, end_date, transaction_type) -> List[LedgerRow]:
    query = db.query(StudentTransaction)
    if search:
        query = query.filter(StudentTransaction.description.ilike(f"%{search}%"))
    if start_date:
        query = query.filter(StudentTransaction.transaction_date >= start_date)
    if end_date:
        query = query.filter(StudentTransaction.transaction_date <= end_date)
    if transaction_type:
        query = query.filter(StudentTransaction.transaction_type == transaction_type)
    return [student_transaction_row(txn) for txn in query.all()]


def _fee_payments(db, search, start_date, end_date, transaction_type) -> List[LedgerRow]:
    # Every fee payment is a CREDIT row
    if transaction_type and transaction_type != TransactionType.CREDIT:
        return []
    query = db.query(FeePayment)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            FeePayment.receipt_number.ilike(pattern),
            FeePayment.reference_number.ilike(pattern),
        ))
    if start_date:
        query = query.filter(FeePayment.payment_date >= start_date)
    if end_date:
        query = query.filter(FeePayment.payment_date <= end_date)
    return [fee_payment_row(payment) for payment in query.all()]


def _journal_lines(db, account_id, search, start_date, end_date, transaction_type) -> List[LedgerRow]:
    query = (
        db.query(JournalLine, JournalEntry)
        .join(JournalEntry, JournalEntry.id == JournalLine.journal_entry_id)
        .filter(JournalLine.account_id == account_id)
    )
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            JournalLine.description.ilike(pattern),
            JournalEntry.description.ilike(pattern),
        ))
    if start_date:
        query = query.filter(JournalEntry.entry_date >= start_date)
    if end_date:
        query = query.filter(JournalEntry.entry_date <= end_date)
    if transaction_type == TransactionType.DEBIT:
        query = query.filter(JournalLine.debit > 0)
    elif transaction_type == TransactionType.CREDIT:
        query = query.filter(JournalLine.credit > 0)
    elif transaction_type == TransactionType.NEUTRAL:
        query = query.filter(JournalLine.debit == 0, JournalLine.credit == 0)
    return [journal_line_row(line, entry) for line, entry in query.all()]


def get_general_ledger(
    db: Session,
    account_id: UUID | None = None,
    search: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    transaction_type: TransactionType | None = None,
    page: int = 1,
    limit: int = 10,
) -> Dict[str, Any]:
    """
    Merge student transactions, fee payments and, for a given account, its
    journal lines into one list, newest first, paginated in memory.

    Returns:
        Dict with "data" rows and "pagination"
    """
    rows = _student_transactions(db, search, start_date, end_date, transaction_type)
    rows += _fee_payments(db, search, start_date, end_date, transaction_type)
    if account_id is not None:
        rows += _journal_lines(db, account_id, search, start_date, end_date, transaction_type)

    rows.sort(key=lambda row: row.transaction_date, reverse=True)

    total_records = len(rows)
    offset = (page - 1) * limit
    page_rows = rows[offset:offset + limit]

    logger.info(
        "General ledger fetched",
        account_id=str(account_id) if account_id else None,
        total_records=total_records,
        page=page,
    )

    return {
        "data": [row.to_dict() for row in page_rows],
        "pagination": {
            "current_page": page,
            "total_pages": math.ceil(total_records / limit) if limit else 0,
            "total_records": total_records,
            "limit": limit,
        },
    }


def _source_totals(count, debits, credits) -> Dict[str, Any]:
    return {
        "total_transactions": int(count or 0),
        "total_debits": float(debits or 0),
        "total_credits": float(credits or 0),
    }


def get_transaction_summary(db: Session) -> Dict[str, Dict[str, Any]]:
    """
    Row counts and debit/credit totals for each general ledger source.

    Fee payments only ever contribute debits, mirroring their ledger rows.
    """
    student = db.query(
        func.count(StudentTransaction.id),
        func.sum(case((StudentTransaction.transaction_type == TransactionType.DEBIT, StudentTransaction.amount), else_=0)),
        func.sum(case((StudentTransaction.transaction_type == TransactionType.CREDIT, StudentTransaction.amount), else_=0)),
    ).one()

    fees = db.query(
        func.count(FeePayment.id),
        func.sum(FeePayment.base_currency_amount),
    ).one()

    journal = db.query(
        func.count(JournalLine.id),
        func.sum(JournalLine.debit),
        func.sum(JournalLine.credit),
    ).one()

    summary = {
        LedgerSource.STUDENT_TRANSACTION.value: _source_totals(*student),
        LedgerSource.FEE_PAYMENT.value: _source_totals(fees[0], fees[1], 0),
        LedgerSource.JOURNAL_ENTRY.value: _source_totals(*journal),
    }
    logger.info("Transaction summary computed", **{source: totals["total_transactions"] for source, totals in summary.items()})
    return summary
