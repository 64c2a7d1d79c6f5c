"""Chart of accounts registry."""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import List, Dict, Any
from uuid import UUID

from sqlalchemy.orm import Session

from school_ledger.core.config import get_settings
from school_ledger.core.exceptions import NotFoundError, ValidationError
from school_ledger.models.accounting import AccountBalance, ChartOfAccount, JournalEntry, JournalLine
from school_ledger.domain.accounting.enums import AccountType, BalanceType, EntryKind
from school_ledger.domain.accounting.balance_service import get_latest_balance
from school_ledger.domain.accounting.gl_service import post_entry

logger = logging.getLogger(__name__)

# Columns a partial update may not clear
NON_NULLABLE_FIELDS = ("code", "name", "account_type", "is_cash", "is_active")


def get_account(db: Session, account_id: UUID) -> ChartOfAccount:
    account = db.get(ChartOfAccount, account_id)
    if not account:
        raise NotFoundError("Account", account_id)
    return account


def get_account_by_code(db: Session, code: str) -> ChartOfAccount:
    account = db.query(ChartOfAccount).filter(ChartOfAccount.code == code).first()
    if not account:
        raise NotFoundError("Account", code)
    return account


def list_accounts(
    db: Session,
    account_type: AccountType | None = None,
    is_active: bool | None = None,
) -> List[ChartOfAccount]:
    query = db.query(ChartOfAccount)
    if account_type is not None:
        query = query.filter(ChartOfAccount.account_type == account_type)
    if is_active is not None:
        query = query.filter(ChartOfAccount.is_active == is_active)
    return query.order_by(ChartOfAccount.code).all()


def create_account(
    db: Session,
    code: str,
    name: str,
    account_type: AccountType,
    parent_id: UUID | None = None,
    is_cash: bool = False,
    commit: bool = True,
) -> ChartOfAccount:
    """
    Create a chart of accounts entry.

    Raises:
        ValidationError: If the code is already used
        NotFoundError: If parent_id does not exist
    """
    code = code.strip()
    if not code or not name:
        raise ValidationError("Account code and name are required")

    existing = db.query(ChartOfAccount).filter(ChartOfAccount.code == code).first()
    if existing:
        raise ValidationError(f"Account code {code} already exists", details={"code": code})

    if parent_id is not None:
        get_account(db, parent_id)

    account = ChartOfAccount(
        code=code,
        name=name,
        account_type=account_type,
        parent_id=parent_id,
        is_cash=is_cash,
        is_active=True,
    )
    db.add(account)

    if commit:
        db.commit()
        db.refresh(account)
    else:
        db.flush()

    logger.info(f"Created account {code} {name} ({account_type.value})")
    return account


def _carries_balance(db: Session, account_id: UUID) -> bool:
    """True when the latest snapshot in any currency is nonzero."""
    currency_ids = [
        currency_id
        for (currency_id,) in db.query(AccountBalance.currency_id)
        .filter(AccountBalance.account_id == account_id)
        .distinct()
    ]
    for currency_id in currency_ids:
        latest = get_latest_balance(db, account_id, currency_id)
        if latest is not None and Decimal(str(latest.balance)) != 0:
            return True
    return False


def _check_can_deactivate(db: Session, account: ChartOfAccount) -> None:
    if _carries_balance(db, account.id):
        raise ValidationError(
            f"Account {account.code} still carries a balance; move it out before deactivating",
            details={"account_id": str(account.id)},
        )


def update_account(db: Session, account_id: UUID, changes: Dict[str, Any]) -> ChartOfAccount:
    """
    Apply a partial update.

    Account type cannot change once lines reference the account, and an
    account carrying a balance cannot be deactivated.

    Raises:
        ValidationError: Null required field, duplicate code, locked type,
            self-parenting or deactivation with a balance
        NotFoundError: Unknown account or parent
    """
    account = get_account(db, account_id)
    changes = dict(changes)

    nulled = [field for field in NON_NULLABLE_FIELDS if field in changes and changes[field] is None]
    if nulled:
        raise ValidationError(f"Fields cannot be null: {', '.join(nulled)}", details={"fields": nulled})

    if "code" in changes:
        changes["code"] = changes["code"].strip()
        if not changes["code"]:
            raise ValidationError("Account code is required")

    if "code" in changes and changes["code"] != account.code:
        clash = db.query(ChartOfAccount).filter(ChartOfAccount.code == changes["code"]).first()
        if clash:
            raise ValidationError(f"Account code {changes['code']} already exists", details={"code": changes["code"]})

    if "account_type" in changes and changes["account_type"] != account.account_type:
        referenced = db.query(JournalLine.id).filter(JournalLine.account_id == account_id).first()
        if referenced:
            raise ValidationError(
                f"Account {account.code} has journal lines; its type cannot change",
                details={"account_id": str(account_id)},
            )

    if changes.get("parent_id") is not None:
        if changes["parent_id"] == account.id:
            raise ValidationError("An account cannot be its own parent")
        get_account(db, changes["parent_id"])

    if changes.get("is_active") is False and account.is_active:
        _check_can_deactivate(db, account)

    for field, value in changes.items():
        setattr(account, field, value)

    db.commit()
    db.refresh(account)
    logger.info(f"Updated account {account.code}: {sorted(changes)}")
    return account


def deactivate_account(db: Session, account_id: UUID) -> ChartOfAccount:
    """
    Soft delete. Referenced accounts stay in place for historical reports.

    Raises:
        ValidationError: If the account still carries a balance
    """
    account = get_account(db, account_id)
    _check_can_deactivate(db, account)
    account.is_active = False
    db.commit()
    db.refresh(account)
    logger.info(f"Deactivated account {account.code}")
    return account


def find_or_create_system_account(
    db: Session,
    code: str,
    name: str,
    account_type: AccountType,
) -> ChartOfAccount:
    """Return the account with this code, creating it when missing. Does not commit."""
    account = db.query(ChartOfAccount).filter(ChartOfAccount.code == code).first()
    if account:
        if not account.is_active:
            account.is_active = True
            logger.warning(f"Reactivated system account {code} {account.name}")
        return account

    logger.info(f"Creating system account {code} {name}")
    return create_account(db, code=code, name=name, account_type=account_type, commit=False)


def retained_earnings_account(db: Session) -> ChartOfAccount:
    settings = get_settings()
    return find_or_create_system_account(
        db,
        settings.retained_earnings_code,
        settings.retained_earnings_name,
        AccountType.EQUITY,
    )


def income_summary_account(db: Session) -> ChartOfAccount:
    settings = get_settings()
    return find_or_create_system_account(
        db,
        settings.income_summary_code,
        settings.income_summary_name,
        AccountType.EQUITY,
    )


def create_opening_balance(
    db: Session,
    account_id: UUID,
    amount: Decimal,
    balance_type: BalanceType,
    description: str,
    currency_id: UUID,
    reference: str | None = None,
    opening_balance_date: date | None = None,
    created_by: str | None = None,
) -> JournalEntry:
    """
    Post an opening balance for an account against Retained Earnings.

    The account takes the balance_type side: a debit balance raises an Asset or
    Expense account and lowers the others. The contra line goes to Retained
    Earnings.

    Args:
        db: Database session
        account_id: Account receiving the opening balance
        amount: Positive amount
        balance_type: Side the opening balance sits on
        description: Free text appended to the generated description
        currency_id: Currency of both lines
        reference: Optional reference, generated when omitted
        opening_balance_date: Entry date, defaults to today
        created_by: Optional user

    Returns:
        The posted opening_balance JournalEntry
    """
    amount = Decimal(str(amount))
    if amount <= 0:
        raise ValidationError("Opening balance amount must be positive", details={"amount": str(amount)})

    account = get_account(db, account_id)
    if not account.is_active:
        raise ValidationError(f"Account {account.code} is inactive")

    retained = retained_earnings_account(db)
    if retained.id == account.id:
        raise ValidationError("Opening balances cannot be posted to Retained Earnings itself")

    balance_type = BalanceType(balance_type)
    if balance_type == BalanceType.DEBIT:
        account_line = {"debit": amount, "credit": Decimal("0")}
        contra_line = {"debit": Decimal("0"), "credit": amount}
    else:
        account_line = {"debit": Decimal("0"), "credit": amount}
        contra_line = {"debit": amount, "credit": Decimal("0")}

    if reference is None:
        reference = f"OB-COA-{account.code}-{int(datetime.utcnow().timestamp() * 1000)}"

    entry_description = f"Opening Balance: {account.name} ({account.code}) - {description}"

    lines = [
        {
            "account_id": account.id,
            "currency_id": currency_id,
            "description": f"Opening Balance - {account.name} ({account.code})",
            **account_line,
        },
        {
            "account_id": retained.id,
            "currency_id": currency_id,
            "description": "Opening Balance - Retained Earnings",
            **contra_line,
        },
    ]

    return post_entry(
        db,
        entry_date=opening_balance_date or date.today(),
        reference=reference,
        description=entry_description,
        lines=lines,
        created_by=created_by,
        entry_kind=EntryKind.OPENING_BALANCE,
    )
