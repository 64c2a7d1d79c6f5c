"""Saved financial report API endpoints."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from school_ledger.core.config import get_settings
from school_ledger.db.dependencies import get_db
from school_ledger.services import saved_report_service
from school_ledger.schemas.saved_reports import (
    SavedReportCreate,
    SavedReportListItem,
    SavedReportListResponse,
    SavedReportResponse,
    SavedReportTypeSummary,
)

router = APIRouter()


@router.post("", response_model=SavedReportResponse, status_code=status.HTTP_201_CREATED)
def save_report(data: SavedReportCreate, db: Session = Depends(get_db)) -> SavedReportResponse:
    """
    Store a generated report.

    400 for an unknown report type or when a report of the same type already
    uses the name.
    """
    report = saved_report_service.save_report(db, **data.model_dump())
    return SavedReportResponse.model_validate(report)


@router.get("", response_model=SavedReportListResponse)
def list_reports(
    report_type: Optional[str] = Query(None),
    period_id: Optional[UUID] = Query(None),
    search: Optional[str] = Query(None, description="Matches name, description or tags"),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1),
    db: Session = Depends(get_db),
) -> SavedReportListResponse:
    settings = get_settings()
    result = saved_report_service.list_reports(
        db,
        report_type=report_type,
        period_id=period_id,
        search=search,
        page=page,
        limit=min(limit, settings.max_page_size),
    )
    return SavedReportListResponse(
        reports=[SavedReportListItem.model_validate(report) for report in result["reports"]],
        pagination=result["pagination"],
    )


@router.get("/summary", response_model=List[SavedReportTypeSummary])
def get_reports_summary(db: Session = Depends(get_db)) -> List[SavedReportTypeSummary]:
    return [SavedReportTypeSummary(**row) for row in saved_report_service.get_reports_summary(db)]


@router.get("/{report_id}", response_model=SavedReportResponse)
def get_report(report_id: UUID, db: Session = Depends(get_db)) -> SavedReportResponse:
    return SavedReportResponse.model_validate(saved_report_service.get_report(db, report_id))


@router.delete("/{report_id}")
def delete_report(report_id: UUID, db: Session = Depends(get_db)):
    saved_report_service.delete_report(db, report_id)
    return {"message": "Report deleted", "report_id": str(report_id)}
