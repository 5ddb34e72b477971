"""Finance enumerations."""

from __future__ import annotations

import enum
from decimal import Decimal


class TransactionType(str, enum.Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class RecurringInterval(str, enum.Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class TransactionStatus(str, enum.Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class AccountType(str, enum.Enum):
    CURRENT = "CURRENT"
    SAVINGS = "SAVINGS"


DEFAULT_CATEGORY = "other-expense"

# Largest single amount accepted; leaves Numeric(18, 2) balances headroom to accumulate.
MAX_AMOUNT = Decimal("999999999999.99")
