"""Saved financial report schemas."""

from datetime import date, datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from school_ledger.domain.accounting.enums import ReportType


class SavedReportCreate(BaseModel):
    # Plain string so an unknown type reaches the service and fails with 400
    report_type: str
    report_name: str = Field(..., max_length=200)
    report_description: Optional[str] = None
    period_id: Optional[UUID] = None
    period_name: Optional[str] = None
    period_start_date: Optional[date] = None
    period_end_date: Optional[date] = None
    report_data: Any
    report_summary: Optional[Any] = None
    currency_id: Optional[UUID] = None
    created_by: Optional[str] = None
    notes: Optional[str] = None
    tags: Optional[str] = Field(None, max_length=500)


class SavedReportListItem(BaseModel):
    """A saved report without its stored data."""
    id: UUID
    report_type: ReportType
    report_name: str
    report_description: Optional[str] = None
    period_id: Optional[UUID] = None
    period_name: Optional[str] = None
    period_start_date: Optional[date] = None
    period_end_date: Optional[date] = None
    report_summary: Optional[Any] = None
    created_by: Optional[str] = None
    tags: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class SavedReportResponse(SavedReportListItem):
    report_data: Any
    currency_id: Optional[UUID] = None
    notes: Optional[str] = None
    updated_at: datetime


class SavedReportPagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class SavedReportListResponse(BaseModel):
    reports: List[SavedReportListItem]
    pagination: SavedReportPagination


class SavedReportTypeSummary(BaseModel):
    report_type: str
    count: int
    latest_saved: Optional[datetime] = None
