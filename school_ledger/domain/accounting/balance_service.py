"""Balance accumulator: per (account, currency, date) running balance snapshots."""

import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, Tuple
from uuid import uuid4, UUID

from sqlalchemy import select, update, func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from school_ledger.core.exceptions import NotFoundError
from school_ledger.models.accounting import (
    AccountBalance,
    ChartOfAccount,
    JournalEntry,
    JournalLine,
)

logger = logging.getLogger(__name__)


def normal_side_delta(account: ChartOfAccount, debit: Decimal, credit: Decimal) -> Decimal:
    """Signed change to an account balance under its normal-side convention."""
    debit = Decimal(str(debit or 0))
    credit = Decimal(str(credit or 0))
    if account.account_type.is_debit_normal:
        return debit - credit
    return credit - debit


def _latest_snapshot(
    db: Session,
    account_id: UUID,
    currency_id: UUID,
    as_of_date: date | None = None,
    lock: bool = False,
) -> AccountBalance | None:
    stmt = select(AccountBalance).where(
        AccountBalance.account_id == account_id,
        AccountBalance.currency_id == currency_id,
    )
    if as_of_date is not None:
        stmt = stmt.where(AccountBalance.as_of_date <= as_of_date)
    stmt = stmt.order_by(AccountBalance.as_of_date.desc()).limit(1)
    if lock:
        stmt = stmt.with_for_update()
    return db.execute(stmt).scalars().first()


def _insert_for(db: Session):
    """Dialect insert construct that supports ON CONFLICT."""
    if db.get_bind().dialect.name == "sqlite":
        return sqlite_insert
    return pg_insert


def apply_delta(
    db: Session,
    account: ChartOfAccount,
    currency_id: UUID,
    debit: Decimal,
    credit: Decimal,
    effective_date: date,
) -> AccountBalance:
    """
    Apply one journal line to the account's balance snapshots.

    The snapshot dated effective_date is upserted: inserted from the prior
    balance plus delta, or incremented by delta when it already exists, so
    concurrent postings on one date add to the same row. Does not commit;
    the caller owns the transaction.

    Args:
        db: Database session
        account: Account the line posts to
        currency_id: Line currency
        debit: Line debit amount
        credit: Line credit amount
        effective_date: Entry date of the owning journal entry

    Returns:
        The snapshot dated effective_date
    """
    delta = normal_side_delta(account, debit, credit)

    prior = _latest_snapshot(db, account.id, currency_id, effective_date - timedelta(days=1), lock=True)
    opening = Decimal(str(prior.balance)) if prior is not None else Decimal("0.00")

    insert = _insert_for(db)
    stmt = insert(AccountBalance).values(
        id=uuid4(),
        account_id=account.id,
        currency_id=currency_id,
        as_of_date=effective_date,
        balance=opening + delta,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["account_id", "currency_id", "as_of_date"],
        set_={
            "balance": AccountBalance.balance + delta,
            "updated_at": datetime.utcnow(),
        },
    )
    db.execute(stmt)

    if delta != 0:
        # Later snapshots already include everything up to their own date
        db.execute(
            update(AccountBalance)
            .where(
                AccountBalance.account_id == account.id,
                AccountBalance.currency_id == currency_id,
                AccountBalance.as_of_date > effective_date,
            )
            .values(balance=AccountBalance.balance + delta)
            .execution_options(synchronize_session="fetch")
        )

    return db.execute(
        select(AccountBalance)
        .where(
            AccountBalance.account_id == account.id,
            AccountBalance.currency_id == currency_id,
            AccountBalance.as_of_date == effective_date,
        )
        .execution_options(populate_existing=True)
    ).scalars().one()


def get_balance(
    db: Session,
    account_id: UUID,
    currency_id: UUID,
    as_of_date: date,
) -> Decimal:
    """Balance as of a date: the latest snapshot on or before it, or zero."""
    snapshot = _latest_snapshot(db, account_id, currency_id, as_of_date)
    if snapshot is None:
        return Decimal("0.00")
    return Decimal(str(snapshot.balance))


def get_latest_balance(
    db: Session,
    account_id: UUID,
    currency_id: UUID,
) -> AccountBalance | None:
    return _latest_snapshot(db, account_id, currency_id)


def get_balances_as_of(db: Session, as_of_date: date) -> Dict[UUID, Decimal]:
    """
    Per-account balance as of a date, summed across currencies.

    Uses the latest snapshot on or before the date for every
    (account, currency) pair.
    """
    latest = (
        select(
            AccountBalance.account_id,
            AccountBalance.currency_id,
            func.max(AccountBalance.as_of_date).label("as_of_date"),
        )
        .where(AccountBalance.as_of_date <= as_of_date)
        .group_by(AccountBalance.account_id, AccountBalance.currency_id)
        .subquery()
    )

    rows = db.execute(
        select(AccountBalance.account_id, AccountBalance.balance)
        .join(
            latest,
            (AccountBalance.account_id == latest.c.account_id)
            & (AccountBalance.currency_id == latest.c.currency_id)
            & (AccountBalance.as_of_date == latest.c.as_of_date),
        )
    ).all()

    balances: Dict[UUID, Decimal] = {}
    for row in rows:
        balances[row.account_id] = balances.get(row.account_id, Decimal("0.00")) + Decimal(str(row.balance))
    return balances


def set_balance(
    db: Session,
    account_id: UUID,
    currency_id: UUID,
    balance: Decimal,
    as_of_date: date,
) -> AccountBalance:
    """
    Overwrite the snapshot for (account, currency, as_of_date).

    Administrative correction only. Snapshots are derived from journal lines,
    so the override diverges from history until recalculate_all_balances runs.
    """
    account = db.get(ChartOfAccount, account_id)
    if not account:
        raise NotFoundError("Account", account_id)

    snapshot = db.execute(
        select(AccountBalance).where(
            AccountBalance.account_id == account_id,
            AccountBalance.currency_id == currency_id,
            AccountBalance.as_of_date == as_of_date,
        ).with_for_update()
    ).scalars().first()

    previous = Decimal(str(snapshot.balance)) if snapshot else None
    if snapshot is None:
        snapshot = AccountBalance(
            account_id=account_id,
            currency_id=currency_id,
            as_of_date=as_of_date,
            balance=Decimal(str(balance)),
        )
        db.add(snapshot)
    else:
        snapshot.balance = Decimal(str(balance))

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(snapshot)

    logger.warning(
        f"Balance override for account {account.code} currency={currency_id} "
        f"as_of={as_of_date}: {previous} -> {balance}"
    )
    return snapshot


def recalculate_all_balances(db: Session) -> int:
    """
    Rebuild every balance snapshot from journal history.

    Writes one snapshot per (account, currency, entry date) with the running
    balance at the end of that date.

    Returns:
        Number of snapshots written
    """
    rows = db.execute(
        select(
            JournalLine.account_id,
            JournalLine.currency_id,
            JournalEntry.entry_date,
            func.sum(JournalLine.debit).label("debit"),
            func.sum(JournalLine.credit).label("credit"),
        )
        .join(JournalEntry, JournalEntry.id == JournalLine.journal_entry_id)
        .group_by(JournalLine.account_id, JournalLine.currency_id, JournalEntry.entry_date)
        .order_by(JournalLine.account_id, JournalLine.currency_id, JournalEntry.entry_date)
    ).all()

    accounts = {account.id: account for account in db.execute(select(ChartOfAccount)).scalars()}
    running: Dict[Tuple[UUID, UUID], Decimal] = {}

    try:
        db.query(AccountBalance).delete(synchronize_session=False)

        written = 0
        for row in rows:
            key = (row.account_id, row.currency_id)
            delta = normal_side_delta(accounts[row.account_id], row.debit, row.credit)
            running[key] = running.get(key, Decimal("0.00")) + delta
            db.add(AccountBalance(
                account_id=row.account_id,
                currency_id=row.currency_id,
                as_of_date=row.entry_date,
                balance=running[key],
            ))
            written += 1

        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"Recalculated {written} balance snapshots for {len(running)} account/currency pairs")
    return written
