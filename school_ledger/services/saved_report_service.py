"""Saved financial reports: generated statements stored for later retrieval."""

import math
from datetime import date
from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from school_ledger.core.exceptions import NotFoundError, ValidationError
from school_ledger.models.accounting import AccountingPeriod, Currency, SavedFinancialReport
from school_ledger.domain.accounting.enums import ReportType

logger = structlog.get_logger()

VALID_REPORT_TYPES = [report_type.value for report_type in ReportType]


def _report_type(value: Any) -> ReportType:
    try:
        return ReportType(value)
    except ValueError:
        raise ValidationError(
            f"Invalid report type. Must be one of: {', '.join(VALID_REPORT_TYPES)}",
            details={"report_type": str(value)},
        )


def save_report(
    db: Session,
    report_type: str,
    report_name: str,
    report_data: Any,
    report_description: Optional[str] = None,
    period_id: Optional[UUID] = None,
    period_name: Optional[str] = None,
    period_start_date: Optional[date] = None,
    period_end_date: Optional[date] = None,
    report_summary: Any = None,
    currency_id: Optional[UUID] = None,
    created_by: Optional[str] = None,
    notes: Optional[str] = None,
    tags: Optional[str] = None,
) -> SavedFinancialReport:
    """
    Store a generated report.

    Period name and dates default from period_id, and the currency defaults to
    the base currency.

    Raises:
        ValidationError: Missing name or data, unknown report type, or a
            report of this type with the same name already exists
        NotFoundError: Unknown period_id
    """
    if not report_type or not report_name or not report_data:
        raise ValidationError("Report type, name, and data are required")

    report_type = _report_type(report_type)

    existing = (
        db.query(SavedFinancialReport.id)
        .filter(
            SavedFinancialReport.report_type == report_type,
            SavedFinancialReport.report_name == report_name,
        )
        .first()
    )
    if existing:
        raise ValidationError(
            f'A {report_type.value} report with name "{report_name}" already exists. Please use a different name.',
            details={"report_type": report_type.value, "report_name": report_name},
        )

    if period_id is not None:
        period = db.get(AccountingPeriod, period_id)
        if not period:
            raise NotFoundError("Accounting period", period_id)
        period_name = period_name or period.period_name
        period_start_date = period_start_date or period.start_date
        period_end_date = period_end_date or period.end_date

    if currency_id is None:
        base = db.query(Currency).filter(Currency.base_currency == True).first()  # noqa: E712
        currency_id = base.id if base else None

    report = SavedFinancialReport(
        report_type=report_type,
        report_name=report_name,
        report_description=report_description,
        period_id=period_id,
        period_name=period_name,
        period_start_date=period_start_date,
        period_end_date=period_end_date,
        report_data=report_data,
        report_summary=report_summary,
        currency_id=currency_id,
        created_by=created_by,
        notes=notes,
        tags=tags,
    )
    db.add(report)
    db.commit()
    db.refresh(report)

    logger.info("Report saved", report_id=str(report.id), report_type=report_type.value, report_name=report_name)
    return report


def list_reports(
    db: Session,
    report_type: Optional[str] = None,
    period_id: Optional[UUID] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 50,
) -> Dict[str, Any]:
    """Saved reports, newest first, paginated. Rows carry no report_data."""
    query = db.query(SavedFinancialReport)
    if report_type:
        query = query.filter(SavedFinancialReport.report_type == _report_type(report_type))
    if period_id is not None:
        query = query.filter(SavedFinancialReport.period_id == period_id)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            SavedFinancialReport.report_name.ilike(pattern),
            SavedFinancialReport.report_description.ilike(pattern),
            SavedFinancialReport.tags.ilike(pattern),
        ))

    total = query.count()
    reports = (
        query.order_by(SavedFinancialReport.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "reports": reports,
        "pagination": {
            "total": total,
            "page": page,
            "limit": limit,
            "pages": math.ceil(total / limit) if limit else 0,
        },
    }


def get_report(db: Session, report_id: UUID) -> SavedFinancialReport:
    report = db.get(SavedFinancialReport, report_id)
    if not report:
        raise NotFoundError("Saved report", report_id)
    return report


def delete_report(db: Session, report_id: UUID) -> None:
    report = get_report(db, report_id)
    db.delete(report)
    db.commit()
    logger.info("Report deleted", report_id=str(report_id), report_type=report.report_type.value)


def get_reports_summary(db: Session) -> List[Dict[str, Any]]:
    """Count and latest save time per report type."""
    rows = (
        db.query(
            SavedFinancialReport.report_type,
            func.count(SavedFinancialReport.id),
            func.max(SavedFinancialReport.created_at),
        )
        .group_by(SavedFinancialReport.report_type)
        .all()
    )
    summary = [
        {"report_type": report_type.value, "count": count, "latest_saved": latest_saved}
        for report_type, count, latest_saved in rows
    ]
    return sorted(summary, key=lambda row: row["report_type"])
