"""Tests for the financial statements."""

import pytest
from datetime import date

from sqlalchemy.orm import Session

from school_ledger.domain.accounting.enums import EntryKind, PeriodType
from school_ledger.domain.accounting.period_service import create_period
from school_ledger.services.exports import TRIAL_BALANCE_COLUMNS, export_to_csv
from school_ledger.services.reporting_service import (
    generate_balance_sheet,
    generate_cash_flow,
    generate_comparative_income_statement,
    generate_income_statement,
    generate_quarterly_income_statement,
    generate_trial_balance,
    generate_trial_balance_as_of,
    generate_trial_balance_summary,
    generate_year_to_date_income_statement,
)

MARCH = (date(2024, 3, 1), date(2024, 3, 31))


def line_for(items, code):
    return next(item for item in items if item["account_code"] == code)


@pytest.fixture
def school_activity(sample_chart_of_accounts, post):
    """A month of typical school postings."""
    a = sample_chart_of_accounts
    post(date(2024, 2, 1), a["cash"], a["capital"], 1000, "Owner capital")
    post(date(2024, 3, 2), a["bank"], a["loan"], 500, "Bank loan drawdown")
    post(date(2024, 3, 5), a["equipment"], a["bank"], 400, "Projector purchase")
    post(date(2024, 3, 15), a["cash"], a["tuition"], 300, "Term 1 tuition")
    post(date(2024, 3, 18), a["expense"], a["cash"], 120, "Stationery")
    post(date(2024, 3, 25), a["expense"], a["payable"], 80, "Cleaning on credit")
    return a


class TestIncomeStatement:

    def test_simple_payment(self, db: Session, sample_chart_of_accounts, post):
        post(date(2024, 3, 15), sample_chart_of_accounts["cash"], sample_chart_of_accounts["tuition"], 100)

        result = generate_income_statement(db, *MARCH)

        assert line_for(result["revenue"], "4000")["amount"] == 100.0
        assert result["totals"]["total_revenue"] == 100.0
        assert result["totals"]["total_expenses"] == 0.0
        assert result["totals"]["net_income"] == 100.0

    def test_lists_accounts_without_activity(self, db: Session, sample_chart_of_accounts):
        result = generate_income_statement(db, *MARCH)

        assert [item["account_code"] for item in result["revenue"]] == ["4000", "4100"]
        assert line_for(result["expenses"], "5000")["amount"] == 0.0
        assert result["totals"]["gross_profit_margin"] == 0.0

    def test_percentages_and_margin(self, db: Session, school_activity):
        result = generate_income_statement(db, *MARCH)

        assert result["totals"]["total_revenue"] == 300.0
        assert result["totals"]["total_expenses"] == 200.0
        assert result["totals"]["net_income"] == 100.0
        assert line_for(result["revenue"], "4000")["percentage"] == 100.0
        assert abs(result["totals"]["gross_profit_margin"] - 33.33) < 0.01

    def test_date_range_is_inclusive(self, db: Session, sample_chart_of_accounts, post):
        post(date(2024, 3, 31), sample_chart_of_accounts["cash"], sample_chart_of_accounts["tuition"], 10)
        post(date(2024, 4, 1), sample_chart_of_accounts["cash"], sample_chart_of_accounts["tuition"], 99)

        assert generate_income_statement(db, *MARCH)["totals"]["total_revenue"] == 10.0

    def test_opening_and_closing_entries_excluded(self, db: Session, sample_chart_of_accounts, post):
        a = sample_chart_of_accounts
        post(date(2024, 3, 10), a["cash"], a["tuition"], 100, "Term fees")
        post(date(2024, 3, 1), a["cash"], a["tuition"], 500, "Opening Balances B/D 2024-03-01")
        # Marked NORMAL but carrying a legacy closing description
        post(date(2024, 3, 31), a["tuition"], a["expense"], 70,
             "Close Tuition Revenue to Income Summary", entry_kind=EntryKind.NORMAL)
        post(date(2024, 3, 20), a["cash"], a["boarding"], 40, "Boarding", entry_kind=EntryKind.CLOSING_ENTRY)

        result = generate_income_statement(db, *MARCH)

        assert result["totals"]["total_revenue"] == 100.0
        assert result["totals"]["total_expenses"] == 0.0

    def test_legacy_descriptions_match_regardless_of_case(self, db: Session, sample_chart_of_accounts, post):
        a = sample_chart_of_accounts
        post(date(2024, 3, 10), a["cash"], a["tuition"], 100, "Term fees")
        post(date(2024, 3, 2), a["cash"], a["tuition"], 500,
             "OPENING BALANCES B/D 2024-03-01", entry_kind=EntryKind.NORMAL)
        post(date(2024, 3, 31), a["tuition"], a["expense"], 70,
             "close tuition revenue to income summary", entry_kind=EntryKind.NORMAL)

        result = generate_income_statement(db, *MARCH)

        assert result["totals"]["total_revenue"] == 100.0
        assert result["totals"]["total_expenses"] == 0.0

    def test_reads_are_idempotent(self, db: Session, school_activity):
        assert generate_income_statement(db, *MARCH) == generate_income_statement(db, *MARCH)

    def test_comparative(self, db: Session, school_activity):
        create_period(db, "February 2024", PeriodType.MONTHLY, date(2024, 2, 1), date(2024, 2, 29))
        march = create_period(db, "March 2024", PeriodType.MONTHLY, *MARCH)

        result = generate_comparative_income_statement(db, march.id)

        assert result["previous_period"]["period_name"] == "February 2024"
        assert result["previous_data"]["totals"]["total_revenue"] == 0.0
        assert result["variances"]["revenue_variance"] == 300.0
        # No previous revenue to compare against
        assert result["variances"]["percentage_changes"]["revenue"] == 0.0
        assert result["currency"]["code"] == "USD"

    def test_comparative_without_previous_period(self, db: Session, school_activity):
        march = create_period(db, "March 2024", PeriodType.MONTHLY, *MARCH)

        result = generate_comparative_income_statement(db, march.id)

        assert result["previous_period"] is None
        assert result["variances"]["revenue_variance"] is None

    def test_year_to_date(self, db: Session, school_activity):
        result = generate_year_to_date_income_statement(db, 2024)

        assert result["ytd_data"]["totals"]["net_income"] == 100.0
        assert len(result["monthly_breakdown"]) == 12
        march = result["monthly_breakdown"][2]
        assert march["month_name"] == "March"
        assert march["data"]["totals"]["total_revenue"] == 300.0

    def test_quarterly_covers_third_month(self, db: Session, school_activity):
        result = generate_quarterly_income_statement(db, 2024, 1)

        assert result["quarter_end_date"] == "2024-03-31"
        assert [month["month"] for month in result["monthly_breakdown"]] == [1, 2, 3]
        assert result["quarterly_data"]["totals"]["total_revenue"] == 300.0


class TestBalanceSheet:

    def test_accounting_equation(self, db: Session, school_activity):
        result = generate_balance_sheet(db, date(2024, 3, 31))
        totals = result["totals"]

        assert totals["total_assets"] == 1680.0
        assert totals["total_liabilities"] == 580.0
        assert totals["total_equity"] == 1100.0
        assert totals["is_balanced"] is True
        assert abs(totals["total_assets"] - totals["total_liabilities_and_equity"]) < 0.01

    def test_buckets(self, db: Session, school_activity):
        result = generate_balance_sheet(db, date(2024, 3, 31))

        assert result["assets"]["total_current_assets"] == 1280.0
        assert result["assets"]["total_fixed_assets"] == 400.0
        assert result["liabilities"]["total_long_term_liabilities"] == 500.0
        assert [row["account_code"] for row in result["liabilities"]["current_liabilities"]] == ["2000"]

    def test_net_income_line_in_equity(self, db: Session, school_activity):
        result = generate_balance_sheet(db, date(2024, 3, 31))

        net_income = line_for(result["equity"]["accounts"], "NET_INCOME")
        assert net_income["account_name"] == "Current Period Net Income"
        assert net_income["account_id"] is None
        assert net_income["balance"] == 100.0

    def test_earlier_date_balances(self, db: Session, school_activity):
        result = generate_balance_sheet(db, date(2024, 2, 29))

        assert result["totals"]["total_assets"] == 1000.0
        assert result["totals"]["is_balanced"] is True

    def test_zero_balances_omitted(self, db: Session, school_activity):
        result = generate_balance_sheet(db, date(2024, 3, 31))
        codes = [row["account_code"] for row in result["assets"]["current_assets"]]
        assert "1200" not in codes


class TestCashFlow:

    def test_boarding_revenue_inflow(self, db: Session, sample_chart_of_accounts, post):
        post(date(2024, 3, 10), sample_chart_of_accounts["cash"], sample_chart_of_accounts["boarding"], 200)

        result = generate_cash_flow(db, *MARCH)

        boarding = line_for(result["inflows"], "4100")
        assert boarding["account_name"] == "Boarding Revenue"
        assert boarding["amount"] == 200.0
        assert boarding["activity"] == "OPERATING"
        assert result["totals"]["total_inflows"] == 200.0

    def test_activities_and_cash_totals(self, db: Session, school_activity):
        result = generate_cash_flow(db, *MARCH)

        assert line_for(result["inflows"], "2500")["activity"] == "FINANCING"
        assert line_for(result["outflows"], "1500")["activity"] == "INVESTING"
        assert line_for(result["outflows"], "5000")["amount"] == 120.0

        totals = result["totals"]
        assert totals["total_inflows"] == 800.0
        assert totals["total_outflows"] == 520.0
        assert totals["net_cash_flow"] == 280.0
        assert totals["beginning_cash"] == 1000.0
        assert totals["ending_cash"] == 1280.0
        assert result["activities"]["OPERATING"]["net"] == 180.0

    def test_transfers_between_cash_accounts_ignored(self, db: Session, sample_chart_of_accounts, post):
        post(date(2024, 3, 10), sample_chart_of_accounts["bank"], sample_chart_of_accounts["cash"], 75)

        result = generate_cash_flow(db, *MARCH)

        assert result["inflows"] == []
        assert result["outflows"] == []

    def test_multi_line_receipt_split_by_contra(self, db: Session, currency, sample_chart_of_accounts):
        from school_ledger.domain.accounting.gl_service import post_entry

        a = sample_chart_of_accounts
        post_entry(
            db,
            entry_date=date(2024, 3, 12),
            reference="RCT-9",
            description="Tuition and boarding",
            lines=[
                {"account_id": a["cash"].id, "currency_id": currency.id, "debit": 300, "credit": 0},
                {"account_id": a["tuition"].id, "currency_id": currency.id, "debit": 0, "credit": 200},
                {"account_id": a["boarding"].id, "currency_id": currency.id, "debit": 0, "credit": 100},
            ],
        )

        result = generate_cash_flow(db, *MARCH)

        assert line_for(result["inflows"], "4000")["amount"] == 200.0
        assert line_for(result["inflows"], "4100")["amount"] == 100.0

    def test_cash_sub_accounts_count_as_cash(self, db: Session, currency, sample_chart_of_accounts, post):
        from school_ledger.domain.accounting.chart_service import create_account
        from school_ledger.domain.accounting.enums import AccountType

        petty = create_account(
            db, code="1001", name="Petty Cash Office", account_type=AccountType.ASSET,
            parent_id=sample_chart_of_accounts["cash"].id,
        )
        post(date(2024, 3, 3), petty, sample_chart_of_accounts["boarding"], 30)

        result = generate_cash_flow(db, *MARCH)
        assert line_for(result["inflows"], "4100")["amount"] == 30.0


class TestTrialBalance:

    def test_range_trial_balance_is_balanced(self, db: Session, school_activity):
        result = generate_trial_balance(db, *MARCH)

        assert result["is_balanced"] is True
        assert result["totals"]["total_debit"] == result["totals"]["total_credit"] == 1400.0
        assert "3000" not in [row["account_code"] for row in result["trial_balance"]]

    def test_as_of_trial_balance(self, db: Session, school_activity):
        result = generate_trial_balance_as_of(db, date(2024, 3, 31))

        assert result["is_balanced"] is True
        cash = line_for(result["trial_balance"], "1000")
        assert cash["total_debit"] == 1180.0
        assert cash["total_credit"] == 0.0
        capital = line_for(result["trial_balance"], "3000")
        assert capital["total_credit"] == 1000.0
        assert result["totals"]["total_debit"] == 1880.0

    def test_summary_groups_by_account_type(self, db: Session, school_activity):
        result = generate_trial_balance_summary(db, date(2024, 3, 31))

        assert result["as_of_date"] == "2024-03-31"
        assert [row["account_type"] for row in result["summary"]] == [
            "asset", "liability", "equity", "revenue", "expense",
        ]
        assets = result["summary"][0]
        assert assets["account_count"] == 3
        assert assets["total_debit"] == 1680.0
        assert assets["net_balance"] == 1680.0
        liabilities = result["summary"][1]
        assert liabilities["account_count"] == 2
        assert liabilities["total_credit"] == 580.0
        assert sum(row["total_debit"] for row in result["summary"]) == 1880.0

    def test_summary_skips_empty_types(self, db: Session, sample_chart_of_accounts, post):
        post(date(2024, 3, 1), sample_chart_of_accounts["cash"], sample_chart_of_accounts["capital"], 50)

        summary = generate_trial_balance_summary(db, date(2024, 3, 31))["summary"]

        assert [row["account_type"] for row in summary] == ["asset", "equity"]

    def test_csv_export(self, db: Session, school_activity):
        rows = generate_trial_balance_as_of(db, date(2024, 3, 31))["trial_balance"]

        lines = export_to_csv(rows, TRIAL_BALANCE_COLUMNS).splitlines()

        assert lines[0] == "Account Code,Account Name,Account Type,Debit,Credit,Balance"
        assert lines[1] == "1000,Cash,asset,1180.00,0.00,1180.00"
        assert len(lines) == len(rows) + 1
