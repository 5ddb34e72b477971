"""Balance adjustment for transaction writes.

Account balances are a materialized sum of signed transaction amounts. Every
write moves the balance by a delta expressed as a relative SQL increment so
concurrent adjustments commute instead of overwriting each other.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Union

from sqlalchemy import update

from fintrack.domains.finance.constants import TransactionType
from fintrack.domains.finance.models.account_models import Account

TypeLike = Union[TransactionType, str]


def signed_amount(type_: TypeLike, amount: Decimal) -> Decimal:
    """Amount as it contributes to the balance: positive income, negative expense."""
    amount = Decimal(amount)
    return amount if TransactionType(type_) is TransactionType.INCOME else -amount


def create_delta(type_: TypeLike, amount: Decimal) -> Decimal:
    return signed_amount(type_, amount)


def update_delta(old_type: TypeLike, old_amount: Decimal, new_type: TypeLike, new_amount: Decimal) -> Decimal:
    """Net change between a transaction's prior and new signed contribution."""
    return signed_amount(new_type, new_amount) - signed_amount(old_type, old_amount)


def apply_balance_delta(session, account_id: int, delta: Decimal) -> None:
    """Stage ``balance = balance + delta`` on the account within the caller's transaction."""
    session.execute(
        update(Account)
        .where(Account.id == account_id)
        .values(balance=Account.balance + delta)
        .execution_options(synchronize_session="fetch")
    )
