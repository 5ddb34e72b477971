"""Pydantic schemas for finance domain."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from fintrack.domains.finance.constants import (
    MAX_AMOUNT,
    AccountType,
    RecurringInterval,
    TransactionStatus,
    TransactionType,
)


class AccountCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    account_type: AccountType = AccountType.CURRENT
    balance: Decimal = Field(default=Decimal("0"), ge=-MAX_AMOUNT, le=MAX_AMOUNT, decimal_places=2)
    is_default: bool = False


class TransactionWrite(BaseModel):
    """Full editable state of a transaction, shared by create and update."""

    model_config = ConfigDict(str_strip_whitespace=True)

    account_id: int = Field(gt=0)
    type: TransactionType
    amount: Decimal = Field(ge=0, le=MAX_AMOUNT, decimal_places=2)
    date: dt.date
    description: Optional[str] = Field(default=None, max_length=512)
    category: Optional[str] = Field(default=None, max_length=64)
    status: TransactionStatus = TransactionStatus.COMPLETED
    receipt_url: Optional[str] = Field(default=None, max_length=512)
    is_recurring: bool = False
    recurring_interval: Optional[RecurringInterval] = None

    @model_validator(mode="after")
    def _check_recurrence(self) -> "TransactionWrite":
        if self.is_recurring and self.recurring_interval is None:
            raise ValueError("recurring_interval is required for recurring transactions")
        if not self.is_recurring:
            self.recurring_interval = None
        return self


class TransactionCreate(TransactionWrite):
    pass


class TransactionUpdate(TransactionWrite):
    pass


class TransactionFilter(BaseModel):
    """Equality filters accepted by the transaction listing."""

    account_id: Optional[int] = None
    type: Optional[TransactionType] = None
    category: Optional[str] = None
    status: Optional[TransactionStatus] = None
    is_recurring: Optional[bool] = None

    def as_criteria(self) -> dict:
        criteria = {}
        for key, value in self.model_dump(exclude_none=True).items():
            criteria[key] = value.value if isinstance(value, (TransactionType, TransactionStatus)) else value
        return criteria


class ReceiptData(BaseModel):
    """Best-effort fields pulled from a receipt image; all absent for non-receipts."""

    amount: Optional[Decimal] = None
    date: Optional[dt.date] = None
    description: Optional[str] = None
    category: Optional[str] = None
    merchant_name: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return all(value is None for value in self.model_dump().values())
