"""
CSV export of report rows.

Columns are declared as dicts with a row 'key' and a 'header' label.
"""

import csv
import io
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List


TRIAL_BALANCE_COLUMNS = [
    {"key": "account_code", "header": "Account Code"},
    {"key": "account_name", "header": "Account Name"},
    {"key": "account_type", "header": "Account Type"},
    {"key": "total_debit", "header": "Debit"},
    {"key": "total_credit", "header": "Credit"},
    {"key": "balance", "header": "Balance"},
]


def format_value(value: Any) -> str:
    """Format a value for export."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float):
        return f"{value:.2f}"
    if isinstance(value, Decimal):
        return str(value)
    return str(value)


def export_to_csv(
    data: List[Dict[str, Any]],
    columns: List[Dict[str, str]],
    delimiter: str = ",",
) -> str:
    """
    Export rows to CSV.

    Args:
        data: Rows as dictionaries
        columns: Column definitions with 'key' and 'header'
        delimiter: Field delimiter

    Returns:
        CSV text with a header row
    """
    output = io.StringIO()
    writer = csv.writer(output, delimiter=delimiter, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")

    writer.writerow([col["header"] for col in columns])
    for row_data in data:
        writer.writerow([format_value(row_data.get(col["key"], "")) for col in columns])

    return output.getvalue()


def trial_balance_filename(as_of_date: date | None = None, start_date: date | None = None, end_date: date | None = None) -> str:
    if as_of_date is not None:
        return f"trial_balance_{as_of_date.isoformat()}.csv"
    return f"trial_balance_{start_date.isoformat()}_to_{end_date.isoformat()}.csv"
