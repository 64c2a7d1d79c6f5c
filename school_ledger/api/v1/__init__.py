from fastapi import APIRouter

from .endpoints import (
    health,
    accounts,
    journal_entries,
    account_balances,
    reports,
    periods,
    general_ledger,
    saved_reports,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(journal_entries.router, prefix="/journal-entries", tags=["journal-entries"])
api_router.include_router(accounts.router, prefix="/accounting/accounts", tags=["chart-of-accounts"])
api_router.include_router(account_balances.router, prefix="/accounting/account-balances", tags=["account-balances"])
api_router.include_router(reports.router, prefix="/accounting", tags=["reports"])
api_router.include_router(periods.router, prefix="/accounting/periods", tags=["periods"])
api_router.include_router(general_ledger.router, prefix="/accounting/general-ledger", tags=["general-ledger"])
api_router.include_router(saved_reports.router, prefix="/accounting/saved-reports", tags=["saved-reports"])
