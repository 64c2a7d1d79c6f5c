"""Currency model."""

from uuid import uuid4, UUID
from sqlalchemy import String, Boolean
from sqlalchemy.orm import mapped_column, Mapped
from sqlalchemy.dialects.postgresql import UUID as PGUUID

from school_ledger.models.base import Base, TimestampMixin


class Currency(TimestampMixin, Base):
    """Currency seeded by configuration. Exactly one row is the base currency."""

    __tablename__ = "currencies"

    id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True, default=uuid4)

    code: Mapped[str] = mapped_column(String(10), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    symbol: Mapped[str | None] = mapped_column(String(10), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    base_currency: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
