"""Finance account model."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Mapped, mapped_column, relationship

from fintrack.domains.finance.constants import AccountType
from fintrack.extensions import db


class Account(db.Model):
    __tablename__ = "finance_account"
    __table_args__ = (
        db.Index("ix_finance_account_user_default", "user_id", "is_default"),
        db.UniqueConstraint("user_id", "name", name="uq_finance_account_user_name"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(db.ForeignKey("user.id"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(db.String(255), nullable=False)
    account_type: Mapped[str] = mapped_column(db.String(16), nullable=False, default=AccountType.CURRENT.value)
    # Materialized running balance; only moved by relative increments from transaction writes.
    balance: Mapped[Decimal] = mapped_column(db.Numeric(18, 2), nullable=False, default=Decimal("0"))
    is_default: Mapped[bool] = mapped_column(default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)

    user: Mapped["User"] = relationship("User", back_populates="accounts")
    transactions: Mapped[list["Transaction"]] = relationship(
        "Transaction", back_populates="account", cascade="all, delete-orphan"
    )
