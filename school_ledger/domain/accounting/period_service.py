"""Accounting period registry and period closing."""

import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import List, Dict, Any, Tuple
from uuid import UUID

from sqlalchemy import extract
from sqlalchemy.orm import Session

from school_ledger.core.config import get_settings
from school_ledger.core.exceptions import (
    DataIntegrityError,
    NotFoundError,
    PeriodClosedError,
    ValidationError,
)
from school_ledger.models.accounting import (
    AccountingPeriod,
    ChartOfAccount,
    Currency,
    JournalEntry,
    JournalLine,
    PeriodClosingEntry,
    PeriodOpeningBalance,
)
from school_ledger.domain.accounting.enums import (
    AccountType,
    BalanceType,
    ClosingEntryType,
    EntryKind,
    PeriodStatus,
    PeriodType,
)
from school_ledger.domain.accounting.chart_service import (
    income_summary_account,
    retained_earnings_account,
)
from school_ledger.domain.accounting.balance_service import get_balances_as_of
from school_ledger.domain.accounting.date_ranges import (
    month_bounds,
    month_period_name,
    next_month_start,
    quarter_bounds,
)
from school_ledger.domain.accounting.gl_service import post_entry
from school_ledger.services.reporting_service import (
    generate_balance_sheet,
    generate_income_statement,
    generate_trial_balance,
    reportable_entry_filter,
)

logger = logging.getLogger(__name__)


def get_period(db: Session, period_id: UUID) -> AccountingPeriod:
    period = db.get(AccountingPeriod, period_id)
    if not period:
        raise NotFoundError("Accounting period", period_id)
    return period


def list_periods(
    db: Session,
    status: PeriodStatus | None = None,
    year: int | None = None,
    period_type: PeriodType | None = None,
) -> List[AccountingPeriod]:
    query = db.query(AccountingPeriod)
    if status is not None:
        query = query.filter(AccountingPeriod.status == status)
    if year is not None:
        query = query.filter(extract("year", AccountingPeriod.start_date) == year)
    if period_type is not None:
        query = query.filter(AccountingPeriod.period_type == period_type)
    return query.order_by(AccountingPeriod.start_date.desc()).all()


def _overlapping(db: Session, start_date: date, end_date: date) -> AccountingPeriod | None:
    return (
        db.query(AccountingPeriod)
        .filter(
            AccountingPeriod.start_date <= end_date,
            AccountingPeriod.end_date >= start_date,
        )
        .first()
    )


def create_period(
    db: Session,
    period_name: str,
    period_type: PeriodType,
    start_date: date,
    end_date: date,
    commit: bool = True,
) -> AccountingPeriod:
    """
    Create an open accounting period.

    Raises:
        ValidationError: If the dates are inverted or overlap an existing period
    """
    if not period_name:
        raise ValidationError("Period name is required")
    if end_date < start_date:
        raise ValidationError(
            "Period end date must not be before its start date",
            details={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
        )

    clash = _overlapping(db, start_date, end_date)
    if clash:
        raise ValidationError(
            f"Period overlaps with existing period {clash.period_name}",
            details={"period_id": str(clash.id)},
        )

    period = AccountingPeriod(
        period_name=period_name,
        period_type=PeriodType(period_type),
        start_date=start_date,
        end_date=end_date,
        status=PeriodStatus.OPEN,
    )
    db.add(period)

    if commit:
        db.commit()
        db.refresh(period)
    else:
        db.flush()

    logger.info(f"Created accounting period {period_name} ({start_date} to {end_date})")
    return period


def _exact_period(db: Session, start_date: date, end_date: date) -> AccountingPeriod | None:
    return (
        db.query(AccountingPeriod)
        .filter(
            AccountingPeriod.start_date == start_date,
            AccountingPeriod.end_date == end_date,
        )
        .first()
    )


def get_or_create_month_period(db: Session, month: int, year: int) -> AccountingPeriod:
    """Return the period spanning exactly this calendar month, creating it when missing."""
    start_date, end_date = month_bounds(year, month)

    period = _exact_period(db, start_date, end_date)
    if period:
        return period

    return create_period(
        db,
        period_name=month_period_name(year, month),
        period_type=PeriodType.MONTHLY,
        start_date=start_date,
        end_date=end_date,
    )


def month_report_window(
    db: Session, month: int, year: int
) -> Tuple[date, date, AccountingPeriod | None]:
    """
    Date window of a calendar-month report and the period it belongs to.

    The month's own period is created when no period overlaps it. A month
    inside a longer period (a quarter or a year) is reported over its calendar
    bounds without a period of its own.
    """
    start_date, end_date = month_bounds(year, month)

    period = _exact_period(db, start_date, end_date)
    if period:
        return start_date, end_date, period

    container = _overlapping(db, start_date, end_date)
    if container:
        logger.info(
            f"{month_period_name(year, month)} lies inside {container.period_name}; "
            f"reporting over calendar bounds"
        )
        return start_date, end_date, None

    period = create_period(
        db,
        period_name=month_period_name(year, month),
        period_type=PeriodType.MONTHLY,
        start_date=start_date,
        end_date=end_date,
    )
    return start_date, end_date, period


def get_current_period(db: Session, today: date | None = None) -> AccountingPeriod:
    """The open or closed period containing today; the shortest one when several do."""
    today = today or date.today()
    periods = (
        db.query(AccountingPeriod)
        .filter(
            AccountingPeriod.start_date <= today,
            AccountingPeriod.end_date >= today,
        )
        .all()
    )
    if not periods:
        raise NotFoundError("Accounting period", today.isoformat())
    return min(periods, key=lambda period: period.end_date - period.start_date)


def generate_yearly_periods(
    db: Session,
    year: int,
    period_type: PeriodType = PeriodType.MONTHLY,
) -> List[AccountingPeriod]:
    """
    Create the monthly or quarterly periods of a year.

    Windows already covered by an existing period are skipped.

    Returns:
        The periods created by this call
    """
    period_type = PeriodType(period_type)
    if period_type == PeriodType.MONTHLY:
        windows = [
            (month_period_name(year, month), *month_bounds(year, month))
            for month in range(1, 13)
        ]
    elif period_type == PeriodType.QUARTERLY:
        windows = [
            (f"Q{quarter} {year}", *quarter_bounds(year, quarter))
            for quarter in range(1, 5)
        ]
    else:
        raise ValidationError("Yearly generation supports monthly or quarterly periods")

    created = []
    for name, start_date, end_date in windows:
        if _overlapping(db, start_date, end_date):
            logger.info(f"Skipping {name}: overlaps an existing period")
            continue
        created.append(create_period(db, name, period_type, start_date, end_date, commit=False))

    db.commit()
    logger.info(f"Generated {len(created)} {period_type.value} periods for {year}")
    return created


def update_period_status(db: Session, period_id: UUID, status: PeriodStatus) -> AccountingPeriod:
    """
    Move an unclosed period between open and in_progress.

    Raises:
        PeriodClosedError: The period is already closed
        ValidationError: The target status is closed; closing goes through close_period
    """
    status = PeriodStatus(status)
    period = get_period(db, period_id)
    if period.is_closed:
        raise PeriodClosedError(period.id, period.period_name)
    if status == PeriodStatus.CLOSED:
        raise ValidationError(
            "Periods are closed through the close operation, which posts the closing entries",
            details={"period_id": str(period_id)},
        )

    previous = period.status
    period.status = status
    db.commit()
    db.refresh(period)
    logger.info(f"Period {period.period_name} status {previous.value} -> {status.value}")
    return period


def delete_period(db: Session, period_id: UUID) -> None:
    """
    Delete an unclosed period.

    Raises:
        ValidationError: The period is closed or holds carried-forward balances
    """
    period = get_period(db, period_id)
    if period.is_closed:
        raise ValidationError("Cannot delete a closed period", details={"period_id": str(period_id)})

    carried = (
        db.query(PeriodOpeningBalance.id)
        .filter(PeriodOpeningBalance.period_id == period_id)
        .first()
    )
    if carried:
        raise ValidationError(
            f"Period {period.period_name} holds balances carried forward from a closed period",
            details={"period_id": str(period_id)},
        )

    db.delete(period)
    db.commit()
    logger.info(f"Deleted accounting period {period.period_name}")


def _next_period(db: Session, period: AccountingPeriod) -> AccountingPeriod:
    """First period starting after this one ends, or a new monthly period right after it."""
    following = (
        db.query(AccountingPeriod)
        .filter(AccountingPeriod.start_date > period.end_date)
        .order_by(AccountingPeriod.start_date)
        .first()
    )
    if following:
        return following

    start_date = period.end_date + timedelta(days=1)
    end_date = next_month_start(start_date) - timedelta(days=1)
    return create_period(
        db,
        period_name=month_period_name(start_date.year, start_date.month),
        period_type=PeriodType.MONTHLY,
        start_date=start_date,
        end_date=end_date,
        commit=False,
    )


def _revenue_expense_net(db: Session, start_date: date, end_date: date) -> Decimal:
    """Revenue minus expense movement of reportable lines in the range, on each account's normal side."""
    rows = (
        db.query(ChartOfAccount.account_type, JournalLine.debit, JournalLine.credit)
        .join(JournalLine, JournalLine.account_id == ChartOfAccount.id)
        .join(JournalEntry, JournalEntry.id == JournalLine.journal_entry_id)
        .filter(
            JournalEntry.entry_date.between(start_date, end_date),
            reportable_entry_filter(),
            ChartOfAccount.is_active == True,  # noqa: E712
            ChartOfAccount.account_type.in_([AccountType.REVENUE, AccountType.EXPENSE]),
        )
        .all()
    )

    net = Decimal("0.00")
    for account_type, debit, credit in rows:
        if account_type == AccountType.REVENUE:
            net += Decimal(str(credit)) - Decimal(str(debit))
        else:
            net -= Decimal(str(debit)) - Decimal(str(credit))
    return net


def _base_currency_id(db: Session) -> UUID:
    currency = db.query(Currency).filter(Currency.base_currency == True).first()  # noqa: E712
    if not currency:
        raise DataIntegrityError("No base currency configured; closing entries need one")
    return currency.id


def _post_closing_entry(
    db: Session,
    period: AccountingPeriod,
    entry_type: ClosingEntryType,
    description: str,
    lines: List[Dict[str, Any]],
    closed_by: str | None,
) -> JournalEntry:
    entry = post_entry(
        db,
        entry_date=period.end_date,
        reference=f"CLOSE-{period.end_date.isoformat()}",
        description=description,
        lines=lines,
        created_by=closed_by,
        entry_kind=EntryKind.CLOSING_ENTRY,
        commit=False,
    )
    db.add(PeriodClosingEntry(
        period_id=period.id,
        journal_entry_id=entry.id,
        entry_type=entry_type,
        description=description,
    ))
    return entry


def _lock_period(db: Session, period_id: UUID) -> AccountingPeriod:
    """Load the period with a row lock held until the closing transaction ends."""
    period = (
        db.query(AccountingPeriod)
        .filter(AccountingPeriod.id == period_id)
        .populate_existing()
        .with_for_update()
        .first()
    )
    if not period:
        raise NotFoundError("Accounting period", period_id)
    return period


def close_period(db: Session, period_id: UUID, closed_by: str | None = None) -> Dict[str, Any]:
    """
    Close an accounting period.

    Revenue and expense activity is closed into Income Summary, Income Summary
    into Retained Earnings, and the resulting balances are carried into the
    next period. Everything happens in one transaction.

    Args:
        db: Database session
        period_id: Period to close
        closed_by: Optional user identifier

    Returns:
        Dict with the closed period, closing entries and opening balances

    Raises:
        NotFoundError: Unknown period
        PeriodClosedError: Period already closed
        DataIntegrityError: Unbalanced trial balance, revenue/expense drift,
            or a balance sheet that fails the accounting equation
    """
    settings = get_settings()
    epsilon = Decimal(str(settings.balance_epsilon))

    period = _lock_period(db, period_id)
    if period.is_closed:
        period_name = period.period_name
        db.rollback()
        raise PeriodClosedError(period_id, period_name)

    try:
        trial_balance = generate_trial_balance(db, period.start_date, period.end_date, period=period)
        if not trial_balance["is_balanced"]:
            raise DataIntegrityError(
                f"Trial balance for {period.period_name} is not balanced",
                details={"totals": trial_balance["totals"]},
            )

        income_statement = generate_income_statement(db, period.start_date, period.end_date)
        net_income = Decimal(str(income_statement["totals"]["net_income"]))

        activity_net = _revenue_expense_net(db, period.start_date, period.end_date)
        if abs(activity_net - net_income) > epsilon:
            raise DataIntegrityError(
                f"Revenue and expense accounts for {period.period_name} do not net to the income statement",
                details={"net_income": str(net_income), "account_net": str(activity_net)},
            )

        currency_id = _base_currency_id(db)
        income_summary = income_summary_account(db)
        retained_earnings = retained_earnings_account(db)

        closing_entries = []

        for item in income_statement["revenue"]:
            amount = Decimal(str(item["amount"]))
            if amount == 0:
                continue
            description = f"Close {item['account_name']} to Income Summary"
            entry = _post_closing_entry(db, period, ClosingEntryType.REVENUE_CLOSE, description, [
                {"account_id": UUID(item["account_id"]), "currency_id": currency_id, "debit": amount, "credit": 0},
                {"account_id": income_summary.id, "currency_id": currency_id, "debit": 0, "credit": amount},
            ], closed_by)
            closing_entries.append((ClosingEntryType.REVENUE_CLOSE, entry))

        for item in income_statement["expenses"]:
            amount = Decimal(str(item["amount"]))
            if amount == 0:
                continue
            description = f"Close {item['account_name']} to Income Summary"
            entry = _post_closing_entry(db, period, ClosingEntryType.EXPENSE_CLOSE, description, [
                {"account_id": income_summary.id, "currency_id": currency_id, "debit": amount, "credit": 0},
                {"account_id": UUID(item["account_id"]), "currency_id": currency_id, "debit": 0, "credit": amount},
            ], closed_by)
            closing_entries.append((ClosingEntryType.EXPENSE_CLOSE, entry))

        if net_income != 0:
            amount = abs(net_income)
            # Profit credits Retained Earnings, a loss debits it
            debit_account, credit_account = (
                (income_summary, retained_earnings) if net_income > 0 else (retained_earnings, income_summary)
            )
            entry = _post_closing_entry(
                db, period, ClosingEntryType.INCOME_SUMMARY_CLOSE,
                "Close Income Summary to Retained Earnings",
                [
                    {"account_id": debit_account.id, "currency_id": currency_id, "debit": amount, "credit": 0},
                    {"account_id": credit_account.id, "currency_id": currency_id, "debit": 0, "credit": amount},
                ],
                closed_by,
            )
            closing_entries.append((ClosingEntryType.INCOME_SUMMARY_CLOSE, entry))

        balance_sheet = generate_balance_sheet(db, period.end_date)
        if not balance_sheet["totals"]["is_balanced"]:
            raise DataIntegrityError(
                f"Balance sheet as of {period.end_date} does not balance after closing {period.period_name}",
                details={"totals": balance_sheet["totals"]},
            )

        next_period = _next_period(db, period)
        opening_balances = _carry_forward(db, period, next_period)

        period.status = PeriodStatus.CLOSED
        period.closed_at = datetime.utcnow()
        period.closed_by = closed_by

        db.commit()
    except DataIntegrityError as e:
        db.rollback()
        logger.error(f"Closing {period.period_name} failed: {e.message} {e.details}")
        raise
    except Exception:
        db.rollback()
        raise

    logger.info(
        f"Closed period {period.period_name}: net_income={net_income} "
        f"closing_entries={len(closing_entries)} carried_forward={len(opening_balances)} "
        f"into {next_period.period_name}"
    )

    return {
        "period": period,
        "net_income": net_income,
        "closing_entries": [
            {"entry_type": entry_type.value, "journal_entry_id": str(entry.id), "description": entry.description}
            for entry_type, entry in closing_entries
        ],
        "next_period": next_period,
        "opening_balances": opening_balances,
    }


def _carry_forward(
    db: Session,
    period: AccountingPeriod,
    next_period: AccountingPeriod,
) -> List[PeriodOpeningBalance]:
    """Write balances as of the period end as the next period's opening balances."""
    balances = get_balances_as_of(db, period.end_date)
    accounts = {
        account.id: account
        for account in db.query(ChartOfAccount).filter(ChartOfAccount.id.in_(list(balances)))
    } if balances else {}

    db.query(PeriodOpeningBalance).filter(
        PeriodOpeningBalance.period_id == next_period.id
    ).delete(synchronize_session=False)

    written = []
    for account_id, balance in balances.items():
        if balance == 0:
            continue
        account = accounts[account_id]
        # Debit-positive view of the normal-side balance
        signed = balance if account.account_type.is_debit_normal else -balance
        row = PeriodOpeningBalance(
            period_id=next_period.id,
            account_id=account_id,
            opening_balance=abs(signed),
            balance_type=BalanceType.DEBIT if signed > 0 else BalanceType.CREDIT,
        )
        db.add(row)
        written.append(row)

    db.flush()
    return written


def get_closing_entries(db: Session, period_id: UUID) -> List[PeriodClosingEntry]:
    get_period(db, period_id)
    return (
        db.query(PeriodClosingEntry)
        .filter(PeriodClosingEntry.period_id == period_id)
        .order_by(PeriodClosingEntry.created_at)
        .all()
    )


def get_opening_balances(db: Session, period_id: UUID) -> List[PeriodOpeningBalance]:
    get_period(db, period_id)
    return (
        db.query(PeriodOpeningBalance)
        .join(ChartOfAccount, ChartOfAccount.id == PeriodOpeningBalance.account_id)
        .filter(PeriodOpeningBalance.period_id == period_id)
        .order_by(ChartOfAccount.code)
        .all()
    )
