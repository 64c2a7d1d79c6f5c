"""Request-scoped database session."""

from typing import Generator

from sqlalchemy.orm import Session

from school_ledger.db.session import SessionLocal


def get_db() -> Generator[Session, None, None]:
    """
    Yield a session for one request.

    Work the endpoint left uncommitted is rolled back if the request fails.
    """
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
