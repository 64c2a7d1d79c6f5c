"""Tests for accounting periods and period closing."""

import pytest
from datetime import date
from decimal import Decimal

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
    JournalEntry,
    PeriodClosingEntry,
)
from school_ledger.domain.accounting.enums import (
    BalanceType,
    ClosingEntryType,
    EntryKind,
    PeriodStatus,
    PeriodType,
)
from school_ledger.domain.accounting.chart_service import get_account_by_code
from school_ledger.domain.accounting.balance_service import get_balance
from school_ledger.domain.accounting.period_service import (
    close_period,
    create_period,
    delete_period,
    generate_yearly_periods,
    get_closing_entries,
    get_current_period,
    get_opening_balances,
    get_or_create_month_period,
    get_period,
    list_periods,
    month_report_window,
    update_period_status,
)
from school_ledger.services.reporting_service import (
    generate_balance_sheet,
    generate_income_statement,
    generate_trial_balance,
)


@pytest.fixture
def march(db: Session) -> AccountingPeriod:
    return create_period(db, "March 2024", PeriodType.MONTHLY, date(2024, 3, 1), date(2024, 3, 31))


@pytest.fixture
def profitable_march(sample_chart_of_accounts, post):
    a = sample_chart_of_accounts
    post(date(2024, 2, 1), a["cash"], a["capital"], 1000, "Owner capital")
    post(date(2024, 3, 2), a["bank"], a["loan"], 500, "Bank loan drawdown")
    post(date(2024, 3, 5), a["equipment"], a["bank"], 400, "Projector purchase")
    post(date(2024, 3, 15), a["cash"], a["tuition"], 300, "Term 1 tuition")
    post(date(2024, 3, 18), a["expense"], a["cash"], 120, "Stationery")
    post(date(2024, 3, 25), a["expense"], a["payable"], 80, "Cleaning on credit")
    return a


class TestPeriodRegistry:

    def test_overlapping_period_rejected(self, db: Session, march):
        with pytest.raises(ValidationError):
            create_period(db, "Mid March", PeriodType.MONTHLY, date(2024, 3, 15), date(2024, 4, 14))

    def test_inverted_dates_rejected(self, db: Session):
        with pytest.raises(ValidationError):
            create_period(db, "Backwards", PeriodType.MONTHLY, date(2024, 3, 31), date(2024, 3, 1))

    def test_month_period_is_reused(self, db: Session, march):
        assert get_or_create_month_period(db, 3, 2024).id == march.id

        april = get_or_create_month_period(db, 4, 2024)
        assert april.period_name == "April 2024"
        assert april.end_date == date(2024, 4, 30)

    def test_generate_quarterly_periods(self, db: Session):
        periods = generate_yearly_periods(db, 2024, PeriodType.QUARTERLY)

        assert [period.period_name for period in periods] == ["Q1 2024", "Q2 2024", "Q3 2024", "Q4 2024"]
        assert periods[0].end_date == date(2024, 3, 31)
        assert periods[3].end_date == date(2024, 12, 31)

    def test_generate_monthly_skips_existing(self, db: Session, march):
        periods = generate_yearly_periods(db, 2024)

        assert len(periods) == 11
        assert len(list_periods(db, year=2024)) == 12
        assert list_periods(db, period_type=PeriodType.MONTHLY)[0].period_name == "December 2024"

    def test_month_inside_quarter_reports_without_a_period(self, db: Session):
        generate_yearly_periods(db, 2024, PeriodType.QUARTERLY)

        start_date, end_date, period = month_report_window(db, 3, 2024)

        assert (start_date, end_date) == (date(2024, 3, 1), date(2024, 3, 31))
        assert period is None
        assert len(list_periods(db)) == 4

    def test_month_window_creates_free_month(self, db: Session, march):
        assert month_report_window(db, 3, 2024)[2].id == march.id

        _, _, april = month_report_window(db, 4, 2024)
        assert april.period_name == "April 2024"
        assert len(list_periods(db)) == 2

    def test_current_period(self, db: Session, march):
        assert get_current_period(db, today=date(2024, 3, 10)).id == march.id

        with pytest.raises(NotFoundError):
            get_current_period(db, today=date(2023, 1, 1))


class TestClosePeriod:

    def test_close_profitable_period(self, db: Session, march, profitable_march):
        result = close_period(db, march.id, closed_by="bursar")

        assert result["period"].status == PeriodStatus.CLOSED
        assert result["period"].closed_by == "bursar"
        assert result["period"].closed_at is not None
        assert result["net_income"] == Decimal("100")

        types = sorted(entry["entry_type"] for entry in result["closing_entries"])
        assert types == ["expense_close", "income_summary_close", "revenue_close"]

        entries = db.query(JournalEntry).filter(JournalEntry.entry_kind == EntryKind.CLOSING_ENTRY).all()
        assert len(entries) == 3
        assert all(entry.entry_date == date(2024, 3, 31) for entry in entries)

    def test_closing_zeroes_revenue_and_expense(self, db: Session, currency, march, profitable_march):
        close_period(db, march.id)
        settings = get_settings()

        as_of = date(2024, 3, 31)
        assert get_balance(db, profitable_march["tuition"].id, currency.id, as_of) == Decimal("0")
        assert get_balance(db, profitable_march["expense"].id, currency.id, as_of) == Decimal("0")

        income_summary = get_account_by_code(db, settings.income_summary_code)
        retained = get_account_by_code(db, settings.retained_earnings_code)
        assert get_balance(db, income_summary.id, currency.id, as_of) == Decimal("0")
        assert get_balance(db, retained.id, currency.id, as_of) == Decimal("100")

    def test_closing_entries_do_not_touch_reports(self, db: Session, march, profitable_march):
        before = generate_income_statement(db, march.start_date, march.end_date)

        close_period(db, march.id)

        assert generate_income_statement(db, march.start_date, march.end_date) == before

    def test_balance_sheet_after_close(self, db: Session, march, profitable_march):
        close_period(db, march.id)

        result = generate_balance_sheet(db, date(2024, 3, 31))
        assert result["totals"]["is_balanced"] is True
        assert result["totals"]["net_income"] == 0.0
        assert "NET_INCOME" not in [row["account_code"] for row in result["equity"]["accounts"]]
        assert result["totals"]["total_equity"] == 1100.0

    def test_balances_carried_forward(self, db: Session, march, profitable_march):
        result = close_period(db, march.id)

        april = result["next_period"]
        assert april.period_name == "April 2024"
        assert april.start_date == date(2024, 4, 1)
        assert april.status == PeriodStatus.OPEN

        rows = {row.account_id: row for row in get_opening_balances(db, april.id)}
        assert len(rows) == 7
        cash = rows[profitable_march["cash"].id]
        assert cash.balance_type == BalanceType.DEBIT
        assert cash.opening_balance == Decimal("1180")
        loan = rows[profitable_march["loan"].id]
        assert loan.balance_type == BalanceType.CREDIT
        assert loan.opening_balance == Decimal("500")
        assert profitable_march["tuition"].id not in rows

        trial_balance = generate_trial_balance(db, april.start_date, april.end_date, period=april)
        assert trial_balance["is_balanced"] is True
        assert trial_balance["totals"]["total_debit"] == 1680.0

    def test_existing_next_period_is_used(self, db: Session, march, profitable_march):
        quarter_two = create_period(db, "Q2 2024", PeriodType.QUARTERLY, date(2024, 4, 1), date(2024, 6, 30))

        result = close_period(db, march.id)

        assert result["next_period"].id == quarter_two.id

    def test_loss_debits_retained_earnings(self, db: Session, currency, march, sample_chart_of_accounts, post):
        a = sample_chart_of_accounts
        post(date(2024, 3, 1), a["cash"], a["capital"], 1000)
        post(date(2024, 3, 10), a["cash"], a["tuition"], 200)
        post(date(2024, 3, 20), a["expense"], a["cash"], 500)

        result = close_period(db, march.id)

        assert result["net_income"] == Decimal("-300")
        retained = get_account_by_code(db, get_settings().retained_earnings_code)
        assert get_balance(db, retained.id, currency.id, date(2024, 3, 31)) == Decimal("-300")

        rows = {row.account_id: row for row in get_opening_balances(db, result["next_period"].id)}
        assert rows[retained.id].balance_type == BalanceType.DEBIT
        assert rows[retained.id].opening_balance == Decimal("300")

    def test_closing_entries_recorded(self, db: Session, march, profitable_march):
        close_period(db, march.id)

        recorded = get_closing_entries(db, march.id)
        assert {row.entry_type for row in recorded} == {
            ClosingEntryType.REVENUE_CLOSE,
            ClosingEntryType.EXPENSE_CLOSE,
            ClosingEntryType.INCOME_SUMMARY_CLOSE,
        }

    def test_closing_twice_rejected(self, db: Session, march, profitable_march):
        close_period(db, march.id)

        with pytest.raises(PeriodClosedError):
            close_period(db, march.id)

    def test_close_rereads_period_status(self, db: Session, march, profitable_march):
        stale = db.get(AccountingPeriod, march.id)
        assert stale.status == PeriodStatus.OPEN

        other = Session(bind=db.get_bind(), expire_on_commit=False)
        try:
            close_period(other, march.id)
        finally:
            other.close()

        with pytest.raises(PeriodClosedError):
            close_period(db, march.id)
        assert db.query(PeriodClosingEntry).count() == 3

    def test_revenue_refund_fails_close(self, db: Session, march, profitable_march, post):
        post(date(2024, 3, 28), profitable_march["tuition"], profitable_march["cash"], 50, "Tuition refund")

        with pytest.raises(DataIntegrityError):
            close_period(db, march.id)

        period = db.get(AccountingPeriod, march.id)
        assert period.status == PeriodStatus.OPEN
        assert db.query(PeriodClosingEntry).count() == 0
        assert db.query(JournalEntry).filter(JournalEntry.entry_kind == EntryKind.CLOSING_ENTRY).count() == 0

    def test_unknown_period(self, db: Session):
        from uuid import uuid4

        with pytest.raises(NotFoundError):
            close_period(db, uuid4())


class TestPeriodMaintenance:

    def test_status_moves_between_open_and_in_progress(self, db: Session, march):
        assert update_period_status(db, march.id, PeriodStatus.IN_PROGRESS).status == PeriodStatus.IN_PROGRESS
        assert update_period_status(db, march.id, "open").status == PeriodStatus.OPEN

    def test_status_cannot_be_set_to_closed(self, db: Session, march):
        with pytest.raises(ValidationError):
            update_period_status(db, march.id, PeriodStatus.CLOSED)

        assert db.get(AccountingPeriod, march.id).status == PeriodStatus.OPEN

    def test_closed_period_status_is_final(self, db: Session, march, profitable_march):
        close_period(db, march.id)

        with pytest.raises(PeriodClosedError):
            update_period_status(db, march.id, PeriodStatus.OPEN)

    def test_in_progress_period_can_close(self, db: Session, march, profitable_march):
        update_period_status(db, march.id, PeriodStatus.IN_PROGRESS)

        result = close_period(db, march.id)

        assert result["period"].status == PeriodStatus.CLOSED

    def test_delete_open_period(self, db: Session, march):
        delete_period(db, march.id)

        with pytest.raises(NotFoundError):
            get_period(db, march.id)

        assert list_periods(db) == []

    def test_delete_rejects_closed_period(self, db: Session, march, profitable_march):
        close_period(db, march.id)

        with pytest.raises(ValidationError):
            delete_period(db, march.id)

    def test_delete_rejects_period_with_carried_balances(self, db: Session, march, profitable_march):
        next_period = close_period(db, march.id)["next_period"]

        with pytest.raises(ValidationError):
            delete_period(db, next_period.id)

        assert len(get_opening_balances(db, next_period.id)) > 0
