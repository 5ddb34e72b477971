"""Account management for the finance domain."""

from __future__ import annotations

import logging
from typing import List, Optional, Union

from sqlalchemy import func, select, update

from fintrack.core.errors import NotFound, Unauthenticated, ValidationFailed
from fintrack.core.utils.validation import validate_payload
from fintrack.domains.finance.events import FINANCE_ACCOUNT_CREATED
from fintrack.domains.finance.mappers import map_account, map_transaction
from fintrack.domains.finance.models.account_models import Account
from fintrack.domains.finance.models.transaction_models import Transaction
from fintrack.domains.finance.schemas.finance_schemas import AccountCreate
from fintrack.extensions import db
from fintrack.platform.outbox import enqueue as enqueue_outbox

logger = logging.getLogger(__name__)


def create_account(user_id: Optional[int], data: Union[AccountCreate, dict], session=None) -> dict:
    """Create an account with its opening balance.

    The first account a user opens becomes the default; asking for a new
    default clears the flag on the previous one.
    """
    session = session or db.session
    if user_id is None:
        raise Unauthenticated()
    data = validate_payload(AccountCreate, data)

    name_taken = session.scalar(
        select(Account.id).where(Account.user_id == user_id, func.lower(Account.name) == data.name.lower())
    )
    if name_taken:
        raise ValidationFailed("Account name already exists")

    has_accounts = session.scalar(select(func.count(Account.id)).where(Account.user_id == user_id)) > 0
    is_default = data.is_default or not has_accounts
    if is_default and has_accounts:
        session.execute(
            update(Account)
            .where(Account.user_id == user_id, Account.is_default.is_(True))
            .values(is_default=False)
            .execution_options(synchronize_session="fetch")
        )

    account = Account(
        user_id=user_id,
        name=data.name,
        account_type=data.account_type.value,
        balance=data.balance,
        is_default=is_default,
    )
    session.add(account)
    session.flush()
    enqueue_outbox(
        FINANCE_ACCOUNT_CREATED,
        {
            "account_id": account.id,
            "user_id": user_id,
            "name": account.name,
            "account_type": account.account_type,
            "balance": float(account.balance),
            "is_default": account.is_default,
        },
        user_id=user_id,
        session=session,
    )
    session.commit()
    logger.info("Created account %s for user %s", account.id, user_id)
    return map_account(account)


def list_accounts(user_id: Optional[int], session=None) -> List[dict]:
    session = session or db.session
    if user_id is None:
        raise Unauthenticated()
    counts = (
        select(Transaction.account_id, func.count(Transaction.id).label("n"))
        .where(Transaction.user_id == user_id)
        .group_by(Transaction.account_id)
        .subquery()
    )
    rows = session.execute(
        select(Account, func.coalesce(counts.c.n, 0))
        .outerjoin(counts, counts.c.account_id == Account.id)
        .where(Account.user_id == user_id)
        .order_by(Account.is_default.desc(), Account.name.asc())
    ).all()
    return [map_account(account, transaction_count=count) for account, count in rows]


def get_account_with_transactions(user_id: Optional[int], account_id: int, session=None) -> dict:
    session = session or db.session
    if user_id is None:
        raise Unauthenticated()
    account = session.scalar(select(Account).where(Account.id == account_id, Account.user_id == user_id))
    if account is None:
        raise NotFound("Account not found")
    txns = session.scalars(
        select(Transaction)
        .where(Transaction.account_id == account.id, Transaction.user_id == user_id)
        .order_by(Transaction.date.desc(), Transaction.id.desc())
    ).all()
    payload = map_account(account, transaction_count=len(txns))
    payload["transactions"] = [map_transaction(t) for t in txns]
    return payload
