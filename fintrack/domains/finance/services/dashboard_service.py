"""Finance dashboard aggregations."""

from __future__ import annotations

import datetime as dt
from collections import defaultdict
from decimal import Decimal
from typing import Optional

from sqlalchemy import select

from fintrack.core.errors import Unauthenticated
from fintrack.domains.finance.constants import TransactionType
from fintrack.domains.finance.mappers import map_account, map_transaction
from fintrack.domains.finance.models.account_models import Account
from fintrack.domains.finance.models.transaction_models import Transaction
from fintrack.extensions import db

RECENT_LIMIT = 5


def _month_bounds(today: dt.date) -> tuple[dt.date, dt.date]:
    start = today.replace(day=1)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end


def get_dashboard(user_id: Optional[int], today: Optional[dt.date] = None, session=None) -> dict:
    session = session or db.session
    if user_id is None:
        raise Unauthenticated()
    today = today or dt.date.today()

    # Balances per account
    accounts = session.scalars(
        select(Account).where(Account.user_id == user_id).order_by(Account.is_default.desc(), Account.name.asc())
    ).all()
    total_balance = sum((Decimal(a.balance) for a in accounts), Decimal("0"))

    # Recent transactions
    recent = session.scalars(
        select(Transaction)
        .where(Transaction.user_id == user_id)
        .order_by(Transaction.date.desc(), Transaction.id.desc())
        .limit(RECENT_LIMIT)
    ).all()

    # Current month totals
    start, end = _month_bounds(today)
    month_txns = session.scalars(
        select(Transaction).where(
            Transaction.user_id == user_id,
            Transaction.date >= start,
            Transaction.date < end,
        )
    ).all()
    income = Decimal("0")
    expense = Decimal("0")
    by_category = defaultdict(lambda: Decimal("0"))
    for txn in month_txns:
        if txn.type == TransactionType.INCOME.value:
            income += txn.amount
        else:
            expense += txn.amount
            by_category[txn.category or "uncategorized"] += txn.amount

    return {
        "accounts": [map_account(a) for a in accounts],
        "total_balance": float(total_balance),
        "recent_transactions": [map_transaction(t) for t in recent],
        "month": {
            "start": start.isoformat(),
            "income": float(income),
            "expense": float(expense),
            "net": float(income - expense),
            "expenses_by_category": {k: float(v) for k, v in sorted(by_category.items())},
        },
    }
