"""Balance sheet classification for chart of accounts entries.

Classification is two-tier: a code-range table first, then ordered keyword
rules over the lower-cased account name. Both tiers are scoped by account type,
so a liability named "Bank Loan" never lands in current assets.
"""

from typing import List, Optional, Tuple

from school_ledger.domain.accounting.enums import AccountType, BalanceSheetBucket


# (low, high, account_type, bucket), inclusive bounds on the numeric code
CODE_RANGES: List[Tuple[int, int, AccountType, BalanceSheetBucket]] = [
    (1000, 1499, AccountType.ASSET, BalanceSheetBucket.CURRENT_ASSET),
    (1500, 1999, AccountType.ASSET, BalanceSheetBucket.FIXED_ASSET),
    (2000, 2499, AccountType.LIABILITY, BalanceSheetBucket.CURRENT_LIABILITY),
    (2500, 2999, AccountType.LIABILITY, BalanceSheetBucket.LONG_TERM_LIABILITY),
]

# Evaluated in order; first match wins
KEYWORD_RULES: List[Tuple[AccountType, Tuple[str, ...], BalanceSheetBucket]] = [
    (AccountType.ASSET, ("cash", "bank", "receivable", "inventory"), BalanceSheetBucket.CURRENT_ASSET),
    (AccountType.ASSET, ("property", "equipment", "building", "vehicle"), BalanceSheetBucket.FIXED_ASSET),
    (AccountType.LIABILITY, ("payable", "current", "short"), BalanceSheetBucket.CURRENT_LIABILITY),
    (AccountType.LIABILITY, ("long", "term", "loan"), BalanceSheetBucket.LONG_TERM_LIABILITY),
]

DEFAULT_BUCKETS = {
    AccountType.ASSET: BalanceSheetBucket.OTHER_ASSET,
    AccountType.LIABILITY: BalanceSheetBucket.CURRENT_LIABILITY,
    AccountType.EQUITY: BalanceSheetBucket.EQUITY,
}


def _numeric_code(code: str) -> Optional[int]:
    try:
        return int(str(code).strip())
    except (TypeError, ValueError):
        return None


def classify_by_code(code: str, account_type: AccountType) -> Optional[BalanceSheetBucket]:
    """Return the bucket for a code inside a known range, else None."""
    numeric = _numeric_code(code)
    if numeric is None:
        return None

    for low, high, range_type, bucket in CODE_RANGES:
        if low <= numeric <= high and range_type == account_type:
            return bucket
    return None


def classify_by_name(name: str, account_type: AccountType) -> Optional[BalanceSheetBucket]:
    """Return the bucket of the first keyword rule matching the name, else None."""
    lowered = (name or "").lower()
    for rule_type, keywords, bucket in KEYWORD_RULES:
        if rule_type != account_type:
            continue
        if any(keyword in lowered for keyword in keywords):
            return bucket
    return None


def classify(account) -> BalanceSheetBucket:
    """
    Classify an Asset, Liability or Equity account into a balance sheet bucket.

    Args:
        account: Anything with code, name and account_type attributes

    Returns:
        BalanceSheetBucket

    Raises:
        ValueError: If the account is a Revenue or Expense account
    """
    account_type = AccountType(account.account_type)

    if account_type == AccountType.EQUITY:
        return BalanceSheetBucket.EQUITY

    if account_type not in DEFAULT_BUCKETS:
        raise ValueError(f"Account {account.code} ({account_type.value}) is not a balance sheet account")

    bucket = classify_by_code(account.code, account_type)
    if bucket is None:
        bucket = classify_by_name(account.name, account_type)
    if bucket is None:
        bucket = DEFAULT_BUCKETS[account_type]
    return bucket
