"""Reporting service for generating financial statements."""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Any, Optional
from uuid import UUID

import structlog
from sqlalchemy.orm import Session
from sqlalchemy import func, and_, select

from school_ledger.core.config import get_settings
from school_ledger.core.exceptions import NotFoundError
from school_ledger.models.accounting import (
    AccountingPeriod,
    ChartOfAccount,
    Currency,
    JournalEntry,
    JournalLine,
    PeriodOpeningBalance,
)
from school_ledger.domain.accounting.enums import (
    AccountType,
    BalanceSheetBucket,
    BalanceType,
    EntryKind,
)
from school_ledger.domain.accounting.classification import classify
from school_ledger.domain.accounting.balance_service import get_balances_as_of
from school_ledger.domain.accounting.date_ranges import (
    month_bounds,
    month_name,
    quarter_bounds,
    year_bounds,
)

logger = structlog.get_logger()

ZERO = Decimal("0.00")
CENT = Decimal("0.01")

# Descriptions that marked carried-forward and closing entries before entry_kind
# existed. Matched case-insensitively on every backend.
LEGACY_EXCLUSION_PATTERNS = [
    "%Opening Balances B/D%",
    "%Opening Balance:%",
    "%Close % to Income Summary%",
    "%Close Income Summary to Retained Earnings%",
]


def reportable_entry_filter():
    """
    SQL condition selecting entries that count towards period-relative reports.

    Opening-balance and closing entries are excluded so a period never counts
    its own carried-forward or closing postings.
    """
    settings = get_settings()
    conditions = [JournalEntry.entry_kind == EntryKind.NORMAL]
    if settings.legacy_description_exclusions:
        description = func.coalesce(JournalEntry.description, "")
        conditions.extend(~description.ilike(pattern) for pattern in LEGACY_EXCLUSION_PATTERNS)
    return and_(*conditions)


def _percentage(part: Decimal, whole: Decimal) -> float:
    if whole == 0:
        return 0.0
    return float((part / whole * 100).quantize(CENT, rounding=ROUND_HALF_UP))


def _epsilon() -> Decimal:
    return Decimal(str(get_settings().balance_epsilon))


def get_base_currency(db: Session) -> Optional[Dict[str, Any]]:
    currency = db.query(Currency).filter(Currency.base_currency == True).first()  # noqa: E712
    if not currency:
        return None
    return {
        "id": str(currency.id),
        "code": currency.code,
        "name": currency.name,
        "symbol": currency.symbol,
    }


def _period_activity(db: Session, start_date: date, end_date: date):
    """Per-account debit/credit sums of reportable lines dated in range."""
    return (
        select(
            JournalLine.account_id.label("account_id"),
            func.sum(JournalLine.debit).label("debit"),
            func.sum(JournalLine.credit).label("credit"),
        )
        .join(JournalEntry, JournalEntry.id == JournalLine.journal_entry_id)
        .where(
            JournalEntry.entry_date.between(start_date, end_date),
            reportable_entry_filter(),
        )
        .group_by(JournalLine.account_id)
        .subquery()
    )


def generate_income_statement(
    db: Session,
    start_date: date,
    end_date: date,
) -> Dict[str, Any]:
    """
    Generate an income statement for an inclusive date range.

    Every active Revenue account is listed with the credits posted to it and
    every active Expense account with the debits, including accounts with no
    activity.

    Args:
        db: Database session
        start_date: First day of the range
        end_date: Last day of the range

    Returns:
        Dict with period, revenue, expenses and totals
    """
    activity = _period_activity(db, start_date, end_date)

    rows = db.execute(
        select(
            ChartOfAccount.id,
            ChartOfAccount.code,
            ChartOfAccount.name,
            ChartOfAccount.account_type,
            activity.c.debit,
            activity.c.credit,
        )
        .outerjoin(activity, activity.c.account_id == ChartOfAccount.id)
        .where(
            ChartOfAccount.is_active == True,  # noqa: E712
            ChartOfAccount.account_type.in_([AccountType.REVENUE, AccountType.EXPENSE]),
        )
        .order_by(ChartOfAccount.code)
    ).all()

    revenue_items = []
    expense_items = []
    total_revenue = ZERO
    total_expenses = ZERO

    for row in rows:
        if row.account_type == AccountType.REVENUE:
            amount = Decimal(str(row.credit or 0))
            revenue_items.append((row, amount))
            total_revenue += amount
        else:
            amount = Decimal(str(row.debit or 0))
            expense_items.append((row, amount))
            total_expenses += amount

    def line_item(row, amount: Decimal, total: Decimal) -> Dict[str, Any]:
        return {
            "account_id": str(row.id),
            "account_code": row.code,
            "account_name": row.name,
            "amount": float(amount),
            "percentage": _percentage(amount, total),
        }

    net_income = total_revenue - total_expenses

    return {
        "period": {
            "start_date": start_date.isoformat(),
            "end_date": end_date.isoformat(),
        },
        "revenue": [line_item(row, amount, total_revenue) for row, amount in revenue_items],
        "expenses": [line_item(row, amount, total_expenses) for row, amount in expense_items],
        "totals": {
            "total_revenue": float(total_revenue),
            "total_expenses": float(total_expenses),
            "net_income": float(net_income),
            "gross_profit_margin": _percentage(net_income, total_revenue),
        },
    }


def _variances(current: Dict[str, Any], previous: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if previous is None:
        return {
            "revenue_variance": None,
            "expense_variance": None,
            "net_income_variance": None,
            "percentage_changes": None,
        }

    cur = {key: Decimal(str(value)) for key, value in current["totals"].items()}
    prev = {key: Decimal(str(value)) for key, value in previous["totals"].items()}

    revenue_variance = cur["total_revenue"] - prev["total_revenue"]
    expense_variance = cur["total_expenses"] - prev["total_expenses"]
    net_income_variance = cur["net_income"] - prev["net_income"]

    return {
        "revenue_variance": float(revenue_variance),
        "expense_variance": float(expense_variance),
        "net_income_variance": float(net_income_variance),
        "percentage_changes": {
            "revenue": _percentage(revenue_variance, prev["total_revenue"]),
            "expenses": _percentage(expense_variance, prev["total_expenses"]),
            # Against the magnitude of the previous net income
            "net_income": _percentage(net_income_variance, abs(prev["net_income"])),
        },
    }


def _period_summary(period: Optional[AccountingPeriod]) -> Optional[Dict[str, Any]]:
    if period is None:
        return None
    return {
        "id": str(period.id),
        "period_name": period.period_name,
        "period_type": period.period_type.value,
        "start_date": period.start_date.isoformat(),
        "end_date": period.end_date.isoformat(),
        "status": period.status.value,
    }


def generate_comparative_income_statement(db: Session, period_id: UUID) -> Dict[str, Any]:
    """Income statement for a period next to the period that ended just before it."""
    current_period = db.get(AccountingPeriod, period_id)
    if not current_period:
        raise NotFoundError("Accounting period", period_id)

    previous_period = (
        db.query(AccountingPeriod)
        .filter(AccountingPeriod.end_date < current_period.start_date)
        .order_by(AccountingPeriod.end_date.desc())
        .first()
    )

    current_data = generate_income_statement(db, current_period.start_date, current_period.end_date)
    previous_data = None
    if previous_period is not None:
        previous_data = generate_income_statement(db, previous_period.start_date, previous_period.end_date)

    return {
        "current_period": _period_summary(current_period),
        "previous_period": _period_summary(previous_period),
        "current_data": current_data,
        "previous_data": previous_data,
        "variances": _variances(current_data, previous_data),
        "currency": get_base_currency(db),
    }


def _monthly_breakdown(db: Session, year: int, months: List[int]) -> List[Dict[str, Any]]:
    # Each month is an independent report over its own range
    breakdown = []
    for month in months:
        start, end = month_bounds(year, month)
        breakdown.append({
            "month": month,
            "month_name": month_name(month),
            "data": generate_income_statement(db, start, end),
        })
    return breakdown


def generate_year_to_date_income_statement(db: Session, year: int) -> Dict[str, Any]:
    start, end = year_bounds(year)
    return {
        "year": year,
        "year_start_date": start.isoformat(),
        "year_end_date": end.isoformat(),
        "ytd_data": generate_income_statement(db, start, end),
        "monthly_breakdown": _monthly_breakdown(db, year, list(range(1, 13))),
        "currency": get_base_currency(db),
    }


def generate_quarterly_income_statement(db: Session, year: int, quarter: int) -> Dict[str, Any]:
    start, end = quarter_bounds(year, quarter)
    first_month = (quarter - 1) * 3 + 1
    return {
        "year": year,
        "quarter": quarter,
        "quarter_start_date": start.isoformat(),
        "quarter_end_date": end.isoformat(),
        "quarterly_data": generate_income_statement(db, start, end),
        "monthly_breakdown": _monthly_breakdown(db, year, [first_month, first_month + 1, first_month + 2]),
        "currency": get_base_currency(db),
    }


BUCKET_SECTIONS = {
    BalanceSheetBucket.CURRENT_ASSET: ("assets", "current_assets"),
    BalanceSheetBucket.FIXED_ASSET: ("assets", "fixed_assets"),
    BalanceSheetBucket.OTHER_ASSET: ("assets", "other_assets"),
    BalanceSheetBucket.CURRENT_LIABILITY: ("liabilities", "current_liabilities"),
    BalanceSheetBucket.LONG_TERM_LIABILITY: ("liabilities", "long_term_liabilities"),
    BalanceSheetBucket.EQUITY: ("equity", "accounts"),
}


def generate_balance_sheet(db: Session, as_of_date: date) -> Dict[str, Any]:
    """
    Generate a balance sheet from balance snapshots.

    Balances are summed across currencies. Revenue minus expense balances as of
    the same date appear in equity as "Current Period Net Income".

    Args:
        db: Database session
        as_of_date: Balance sheet date

    Returns:
        Dict with assets, liabilities, equity and totals
    """
    balances = get_balances_as_of(db, as_of_date)

    accounts = (
        db.query(ChartOfAccount)
        .filter(ChartOfAccount.is_active == True)  # noqa: E712
        .order_by(ChartOfAccount.code)
        .all()
    )

    sections: Dict[str, Dict[str, List[Dict[str, Any]]]] = {
        "assets": {"current_assets": [], "fixed_assets": [], "other_assets": []},
        "liabilities": {"current_liabilities": [], "long_term_liabilities": []},
        "equity": {"accounts": []},
    }
    subtotals: Dict[str, Decimal] = {bucket: ZERO for bucket in BalanceSheetBucket}

    total_revenue = ZERO
    total_expenses = ZERO

    for account in accounts:
        balance = balances.get(account.id, ZERO)
        if balance == 0:
            continue

        if account.account_type == AccountType.REVENUE:
            total_revenue += balance
            continue
        if account.account_type == AccountType.EXPENSE:
            total_expenses += balance
            continue

        bucket = classify(account)
        section, group = BUCKET_SECTIONS[bucket]
        sections[section][group].append({
            "account_id": str(account.id),
            "account_code": account.code,
            "account_name": account.name,
            "balance": float(balance),
        })
        subtotals[bucket] += balance

    net_income = total_revenue - total_expenses
    if net_income != 0:
        sections["equity"]["accounts"].append({
            "account_id": None,
            "account_code": "NET_INCOME",
            "account_name": "Current Period Net Income",
            "balance": float(net_income),
        })
        subtotals[BalanceSheetBucket.EQUITY] += net_income

    total_current_assets = subtotals[BalanceSheetBucket.CURRENT_ASSET]
    total_fixed_assets = subtotals[BalanceSheetBucket.FIXED_ASSET]
    total_other_assets = subtotals[BalanceSheetBucket.OTHER_ASSET]
    total_current_liabilities = subtotals[BalanceSheetBucket.CURRENT_LIABILITY]
    total_long_term_liabilities = subtotals[BalanceSheetBucket.LONG_TERM_LIABILITY]

    total_assets = total_current_assets + total_fixed_assets + total_other_assets
    total_liabilities = total_current_liabilities + total_long_term_liabilities
    total_equity = subtotals[BalanceSheetBucket.EQUITY]

    difference = total_assets - (total_liabilities + total_equity)
    is_balanced = abs(difference) <= _epsilon()

    if not is_balanced:
        logger.warning(
            "Balance sheet out of balance",
            as_of_date=as_of_date.isoformat(),
            total_assets=float(total_assets),
            total_liabilities=float(total_liabilities),
            total_equity=float(total_equity),
            difference=float(difference),
        )

    return {
        "as_of_date": as_of_date.isoformat(),
        "assets": {
            **sections["assets"],
            "total_current_assets": float(total_current_assets),
            "total_fixed_assets": float(total_fixed_assets),
            "total_other_assets": float(total_other_assets),
            "total_assets": float(total_assets),
        },
        "liabilities": {
            **sections["liabilities"],
            "total_current_liabilities": float(total_current_liabilities),
            "total_long_term_liabilities": float(total_long_term_liabilities),
            "total_liabilities": float(total_liabilities),
        },
        "equity": {
            **sections["equity"],
            "total_equity": float(total_equity),
        },
        "totals": {
            "total_assets": float(total_assets),
            "total_liabilities": float(total_liabilities),
            "total_equity": float(total_equity),
            "total_liabilities_and_equity": float(total_liabilities + total_equity),
            "net_income": float(net_income),
            "difference": float(difference),
            "is_balanced": is_balanced,
        },
    }


def classify_account_for_cash_flow(account: ChartOfAccount) -> str:
    """
    Classify a contra account for cash flow activity grouping.

    Returns:
        "OPERATING", "INVESTING", or "FINANCING"
    """
    if account.account_type in [AccountType.REVENUE, AccountType.EXPENSE]:
        return "OPERATING"
    if account.account_type == AccountType.ASSET:
        if classify(account) == BalanceSheetBucket.CURRENT_ASSET:
            # Receivables and inventory move with day-to-day activity
            return "OPERATING"
        return "INVESTING"
    if account.account_type == AccountType.LIABILITY:
        if classify(account) == BalanceSheetBucket.CURRENT_LIABILITY:
            return "OPERATING"
        return "FINANCING"
    return "FINANCING"


def get_cash_account_ids(db: Session) -> set:
    """Ids of configured cash/bank accounts, flagged cash accounts and all their sub-accounts."""
    settings = get_settings()
    accounts = db.query(ChartOfAccount).all()

    cash_ids = {
        account.id
        for account in accounts
        if account.code in settings.cash_account_codes or account.is_cash
    }

    # Walk down the hierarchy until no new sub-accounts turn up
    grew = True
    while grew:
        grew = False
        for account in accounts:
            if account.parent_id in cash_ids and account.id not in cash_ids:
                cash_ids.add(account.id)
                grew = True

    return cash_ids


def _allocate(total: Decimal, weights: List[Decimal]) -> List[Decimal]:
    """Split total proportionally to weights, rounded to cents, remainder on the last share."""
    weight_sum = sum(weights, ZERO)
    shares = [(total * weight / weight_sum).quantize(CENT, rounding=ROUND_HALF_UP) for weight in weights]
    shares[-1] += total - sum(shares, ZERO)
    return shares


def generate_cash_flow(
    db: Session,
    start_date: date,
    end_date: date,
) -> Dict[str, Any]:
    """
    Generate a cash flow statement for an inclusive date range.

    Net cash movement of every reportable entry is attributed to the entry's
    contra lines in proportion to their amounts. Transfers between cash
    accounts net to zero and produce no flow.

    Args:
        db: Database session
        start_date: First day of the range
        end_date: Last day of the range

    Returns:
        Dict with inflows, outflows, activities and totals
    """
    cash_ids = get_cash_account_ids(db)

    beginning_cash = ZERO
    if cash_ids:
        opening_result = (
            db.query(func.sum(JournalLine.debit - JournalLine.credit))
            .join(JournalEntry, JournalEntry.id == JournalLine.journal_entry_id)
            .filter(
                JournalEntry.entry_date < start_date,
                JournalLine.account_id.in_(list(cash_ids)),
            )
            .scalar()
        )
        beginning_cash = Decimal(str(opening_result or 0))

    # Entries in range that touch at least one cash account
    cash_entries = (
        select(JournalLine.journal_entry_id)
        .join(JournalEntry, JournalEntry.id == JournalLine.journal_entry_id)
        .where(
            JournalEntry.entry_date.between(start_date, end_date),
            reportable_entry_filter(),
            JournalLine.account_id.in_(list(cash_ids)),
        )
        .distinct()
    )

    lines = []
    if cash_ids:
        lines = (
            db.query(JournalLine)
            .filter(JournalLine.journal_entry_id.in_(cash_entries))
            .all()
        )

    entries: Dict[UUID, List[JournalLine]] = {}
    for line in lines:
        entries.setdefault(line.journal_entry_id, []).append(line)

    inflows: Dict[UUID, Decimal] = {}
    outflows: Dict[UUID, Decimal] = {}

    for entry_lines in entries.values():
        cash_lines = [line for line in entry_lines if line.account_id in cash_ids]
        contra_lines = [line for line in entry_lines if line.account_id not in cash_ids]

        net_cash = sum((Decimal(str(line.debit)) - Decimal(str(line.credit)) for line in cash_lines), ZERO)
        if net_cash == 0:
            continue

        if net_cash > 0:
            sources = [line for line in contra_lines if line.credit > 0]
            weights = [Decimal(str(line.credit)) for line in sources]
            bucket = inflows
        else:
            sources = [line for line in contra_lines if line.debit > 0]
            weights = [Decimal(str(line.debit)) for line in sources]
            bucket = outflows

        if not sources:
            continue

        for line, share in zip(sources, _allocate(abs(net_cash), weights)):
            bucket[line.account_id] = bucket.get(line.account_id, ZERO) + share

    contra_accounts = {}
    if inflows or outflows:
        contra_accounts = {
            account.id: account
            for account in db.query(ChartOfAccount).filter(
                ChartOfAccount.id.in_(list(set(inflows) | set(outflows)))
            )
        }

    activities = {
        name: {"inflows": ZERO, "outflows": ZERO}
        for name in ("OPERATING", "INVESTING", "FINANCING")
    }

    def flow_items(flows: Dict[UUID, Decimal], direction: str) -> List[Dict[str, Any]]:
        items = []
        for account_id, amount in flows.items():
            account = contra_accounts[account_id]
            activity = classify_account_for_cash_flow(account)
            activities[activity][direction] += amount
            items.append({
                "account_id": str(account.id),
                "account_code": account.code,
                "account_name": account.name,
                "activity": activity,
                "amount": float(amount),
            })
        return sorted(items, key=lambda item: item["account_code"])

    inflow_items = flow_items(inflows, "inflows")
    outflow_items = flow_items(outflows, "outflows")

    total_inflows = sum(inflows.values(), ZERO)
    total_outflows = sum(outflows.values(), ZERO)
    net_cash_flow = total_inflows - total_outflows
    ending_cash = beginning_cash + net_cash_flow

    return {
        "period": {
            "start_date": start_date.isoformat(),
            "end_date": end_date.isoformat(),
        },
        "inflows": inflow_items,
        "outflows": outflow_items,
        "activities": {
            name: {
                "inflows": float(values["inflows"]),
                "outflows": float(values["outflows"]),
                "net": float(values["inflows"] - values["outflows"]),
            }
            for name, values in activities.items()
        },
        "totals": {
            "total_inflows": float(total_inflows),
            "total_outflows": float(total_outflows),
            "net_cash_flow": float(net_cash_flow),
            "beginning_cash": float(beginning_cash),
            "ending_cash": float(ending_cash),
        },
    }


def _trial_balance_totals(rows: List[Dict[str, Any]], total_debit: Decimal, total_credit: Decimal) -> Dict[str, Any]:
    difference = total_debit - total_credit
    return {
        "trial_balance": rows,
        "totals": {
            "total_debit": float(total_debit),
            "total_credit": float(total_credit),
            "difference": float(difference),
        },
        "is_balanced": abs(difference) <= _epsilon(),
    }


def generate_trial_balance(
    db: Session,
    start_date: date,
    end_date: date,
    period: Optional[AccountingPeriod] = None,
) -> Dict[str, Any]:
    """
    Trial balance over a date range.

    Period activity comes from reportable journal lines dated in range. When a
    period is given, its carried-forward opening balances are merged in.

    Returns:
        Dict with trial_balance rows, totals and is_balanced
    """
    activity = _period_activity(db, start_date, end_date)
    activity_rows = db.execute(
        select(activity.c.account_id, activity.c.debit, activity.c.credit)
    ).all()

    opening: Dict[UUID, Decimal] = {}
    if period is not None:
        for row in db.query(PeriodOpeningBalance).filter(PeriodOpeningBalance.period_id == period.id):
            amount = Decimal(str(row.opening_balance))
            # Debit-positive so openings and activity add up directly
            opening[row.account_id] = amount if row.balance_type == BalanceType.DEBIT else -amount

    movements = {
        row.account_id: (Decimal(str(row.debit or 0)), Decimal(str(row.credit or 0)))
        for row in activity_rows
    }

    account_ids = set(movements) | set(opening)
    accounts = {}
    if account_ids:
        accounts = {
            account.id: account
            for account in db.query(ChartOfAccount).filter(ChartOfAccount.id.in_(list(account_ids)))
        }

    rows = []
    total_debit = ZERO
    total_credit = ZERO

    for account in sorted(accounts.values(), key=lambda acc: acc.code):
        opening_amount = opening.get(account.id, ZERO)
        period_debit, period_credit = movements.get(account.id, (ZERO, ZERO))

        debit = period_debit + (opening_amount if opening_amount > 0 else ZERO)
        credit = period_credit + (-opening_amount if opening_amount < 0 else ZERO)

        if debit == 0 and credit == 0:
            continue

        rows.append({
            "account_id": str(account.id),
            "account_code": account.code,
            "account_name": account.name,
            "account_type": account.account_type.value,
            "opening_balance": float(opening_amount),
            "period_debit": float(period_debit),
            "period_credit": float(period_credit),
            "total_debit": float(debit),
            "total_credit": float(credit),
            "balance": float(debit - credit),
        })
        total_debit += debit
        total_credit += credit

    result = _trial_balance_totals(rows, total_debit, total_credit)
    result["start_date"] = start_date.isoformat()
    result["end_date"] = end_date.isoformat()
    result["as_of_date"] = None
    result["period"] = _period_summary(period)
    return result


def generate_trial_balance_as_of(db: Session, as_of_date: date) -> Dict[str, Any]:
    """
    Trial balance from balance snapshots as of a date.

    A positive balance sits in the account's normal column, a negative one in
    the opposite column.
    """
    balances = get_balances_as_of(db, as_of_date)

    accounts = (
        db.query(ChartOfAccount)
        .filter(ChartOfAccount.is_active == True)  # noqa: E712
        .order_by(ChartOfAccount.code)
        .all()
    )

    rows = []
    total_debit = ZERO
    total_credit = ZERO

    for account in accounts:
        balance = balances.get(account.id, ZERO)
        if balance == 0:
            continue

        if account.account_type.is_debit_normal:
            debit, credit = (balance, ZERO) if balance >= 0 else (ZERO, -balance)
        else:
            debit, credit = (ZERO, balance) if balance >= 0 else (-balance, ZERO)

        rows.append({
            "account_id": str(account.id),
            "account_code": account.code,
            "account_name": account.name,
            "account_type": account.account_type.value,
            "total_debit": float(debit),
            "total_credit": float(credit),
            "balance": float(balance),
        })
        total_debit += debit
        total_credit += credit

    result = _trial_balance_totals(rows, total_debit, total_credit)
    result["start_date"] = None
    result["end_date"] = None
    result["as_of_date"] = as_of_date.isoformat()
    result["period"] = None
    return result


ACCOUNT_TYPE_ORDER = [
    AccountType.ASSET,
    AccountType.LIABILITY,
    AccountType.EQUITY,
    AccountType.REVENUE,
    AccountType.EXPENSE,
]


def generate_trial_balance_summary(db: Session, as_of_date: date) -> Dict[str, Any]:
    """
    Snapshot trial balance as of a date, grouped by account type.

    Returns:
        Dict with as_of_date and one summary row per account type that has
        a nonzero balance, in Asset, Liability, Equity, Revenue, Expense order
    """
    trial_balance = generate_trial_balance_as_of(db, as_of_date)

    groups: Dict[str, Dict[str, Any]] = {}
    for row in trial_balance["trial_balance"]:
        group = groups.setdefault(row["account_type"], {
            "total_debit": ZERO,
            "total_credit": ZERO,
            "net_balance": ZERO,
            "account_count": 0,
        })
        group["total_debit"] += Decimal(str(row["total_debit"]))
        group["total_credit"] += Decimal(str(row["total_credit"]))
        group["net_balance"] += Decimal(str(row["balance"]))
        group["account_count"] += 1

    summary = [
        {
            "account_type": account_type.value,
            "total_debit": float(groups[account_type.value]["total_debit"]),
            "total_credit": float(groups[account_type.value]["total_credit"]),
            "net_balance": float(groups[account_type.value]["net_balance"]),
            "account_count": groups[account_type.value]["account_count"],
        }
        for account_type in ACCOUNT_TYPE_ORDER
        if account_type.value in groups
    ]

    logger.info("Trial balance summary generated", as_of_date=as_of_date.isoformat(), groups=len(summary))
    return {"as_of_date": as_of_date.isoformat(), "summary": summary}
