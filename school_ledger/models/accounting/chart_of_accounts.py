"""Chart of Accounts model."""

from uuid import uuid4, UUID
from sqlalchemy import String, Boolean, Enum, ForeignKey, Index
from sqlalchemy.orm import mapped_column, Mapped, relationship
from sqlalchemy.dialects.postgresql import UUID as PGUUID

from school_ledger.models.base import Base, TimestampMixin, enum_values
from school_ledger.domain.accounting.enums import AccountType


class ChartOfAccount(TimestampMixin, Base):
    """Chart of Accounts model.

    Codes follow the 1xxx Asset / 2xxx Liability / 3xxx Equity / 4xxx Revenue /
    5xxx Expense convention, which is not enforced on write.
    """

    __tablename__ = "chart_of_accounts"

    id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True, default=uuid4)

    code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    account_type: Mapped[AccountType] = mapped_column(
        Enum(AccountType, name="accounttype", values_callable=enum_values),
        nullable=False,
    )
    parent_id: Mapped[UUID | None] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("chart_of_accounts.id"),
        nullable=True,
    )
    is_cash: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Sub-accounts, e.g. individual bank accounts under "Bank"
    parent: Mapped["ChartOfAccount | None"] = relationship(
        "ChartOfAccount",
        remote_side=[id],
        back_populates="children",
    )
    children: Mapped[list["ChartOfAccount"]] = relationship(
        "ChartOfAccount",
        back_populates="parent",
    )

    __table_args__ = (
        Index("idx_chart_of_accounts_type_active", "account_type", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<ChartOfAccount {self.code} {self.name} ({self.account_type.value})>"
