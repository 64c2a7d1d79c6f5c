"""Validation for path and query parameters shared by the ledger endpoints."""

import re
from datetime import date

from school_ledger.core.exceptions import ValidationError

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MIN_YEAR = 1900
MAX_YEAR = 2100


def parse_iso_date(value: str | None, field: str, required: bool = True) -> date | None:
    """Parse a strict YYYY-MM-DD string."""
    if value is None or value == "":
        if required:
            raise ValidationError(f"{field} query parameter is required (YYYY-MM-DD)", details={"field": field})
        return None

    if not ISO_DATE_RE.match(value):
        raise ValidationError(f"Invalid date format for {field}. Use YYYY-MM-DD", details={"field": field, "value": value})

    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid date for {field}: {value}", details={"field": field, "value": value})


def parse_date_range(start: str | None, end: str | None) -> tuple[date, date]:
    start_date = parse_iso_date(start, "start")
    end_date = parse_iso_date(end, "end")
    if end_date < start_date:
        raise ValidationError(
            "end must not be before start",
            details={"start": start, "end": end},
        )
    return start_date, end_date


def validate_year(year: int) -> int:
    if year < MIN_YEAR or year > MAX_YEAR:
        raise ValidationError(
            f"Invalid year. Must be between {MIN_YEAR} and {MAX_YEAR}.",
            details={"year": year},
        )
    return year


def validate_month_year(month: int, year: int) -> tuple[int, int]:
    if month < 1 or month > 12:
        raise ValidationError("Invalid month. Must be between 1 and 12.", details={"month": month})
    return month, validate_year(year)


def validate_quarter(quarter: int) -> int:
    if quarter < 1 or quarter > 4:
        raise ValidationError("Invalid quarter. Must be between 1 and 4.", details={"quarter": quarter})
    return quarter
