"""
Database session configuration.

Creates the SQLAlchemy engine and session factory from settings.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from school_ledger.core.config import get_settings

settings = get_settings()

engine = create_engine(
    settings.database_url,
    echo=settings.db_echo,
    pool_pre_ping=settings.db_pool_pre_ping,
    future=True,
)

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)
