from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from school_ledger.db.dependencies import get_db

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    database: str


@router.get("", response_model=HealthResponse)
def health_check(db: Session = Depends(get_db)):
    """Check database connectivity."""
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError as e:
        db_status = f"unhealthy: {str(e)}"

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        database=db_status,
    )


@router.get("/ready", response_model=dict)
def readiness_check(db: Session = Depends(get_db)):
    """Kubernetes readiness check."""
    try:
        db.execute(text("SELECT 1"))
        return {"status": "ready"}
    except SQLAlchemyError:
        return {"status": "not_ready"}


@router.get("/live", response_model=dict)
def liveness_check():
    """Kubernetes liveness check."""
    return {"status": "alive"}
