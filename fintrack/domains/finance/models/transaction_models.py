"""Finance transaction model."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

from sqlalchemy.orm import Mapped, mapped_column, relationship

from fintrack.domains.finance.constants import TransactionStatus
from fintrack.extensions import db


class Transaction(db.Model):
    __tablename__ = "finance_transaction"
    __table_args__ = (
        db.Index("ix_finance_transaction_user_date", "user_id", "date"),
        db.Index("ix_finance_transaction_account_date", "account_id", "date"),
        db.Index("ix_finance_transaction_recurring_due", "is_recurring", "next_recurring_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(db.ForeignKey("user.id"), index=True, nullable=False)
    account_id: Mapped[int] = mapped_column(db.ForeignKey("finance_account.id"), index=True, nullable=False)
    type: Mapped[str] = mapped_column(db.String(16), nullable=False)
    amount: Mapped[Decimal] = mapped_column(db.Numeric(18, 2), nullable=False)
    date: Mapped[dt.date] = mapped_column(nullable=False)
    description: Mapped[str | None] = mapped_column(db.Text)
    category: Mapped[str | None] = mapped_column(db.String(64))
    status: Mapped[str] = mapped_column(db.String(16), nullable=False, default=TransactionStatus.COMPLETED.value)
    receipt_url: Mapped[str | None] = mapped_column(db.String(512))

    # Recurrence: is_recurring <=> recurring_interval <=> next_recurring_date
    is_recurring: Mapped[bool] = mapped_column(default=False, nullable=False)
    recurring_interval: Mapped[str | None] = mapped_column(db.String(16), nullable=True)
    next_recurring_date: Mapped[dt.date | None] = mapped_column(nullable=True)
    last_processed: Mapped[dt.datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(default=dt.datetime.utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(default=dt.datetime.utcnow, onupdate=dt.datetime.utcnow)

    account: Mapped["Account"] = relationship("Account", back_populates="transactions")
