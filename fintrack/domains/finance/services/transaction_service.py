"""Transaction orchestration: create, update, read and list with balance upkeep.

create/update/list return a ServiceResult and never raise past this module;
get_transaction raises so callers fail fast.
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import Callable, List, Optional, Union

from sqlalchemy import select

from fintrack.core.errors import AppError, NotFound, Unauthenticated
from fintrack.core.users.models import User
from fintrack.core.utils.results import ServiceResult
from fintrack.core.utils.validation import validate_payload
from fintrack.domains.finance.errors import Blocked, RateLimited
from fintrack.domains.finance.events import (
    FINANCE_RECURRING_PROCESSED,
    FINANCE_TRANSACTION_CREATED,
    FINANCE_TRANSACTION_UPDATED,
)
from fintrack.domains.finance.mappers import map_account, map_transaction
from fintrack.domains.finance.models.account_models import Account
from fintrack.domains.finance.models.transaction_models import Transaction
from fintrack.domains.finance.schemas.finance_schemas import (
    TransactionCreate,
    TransactionFilter,
    TransactionUpdate,
    TransactionWrite,
)
from fintrack.domains.finance.services.abuse_guard import AbuseGuard, abuse_guard
from fintrack.domains.finance.services.balance_service import (
    apply_balance_delta,
    create_delta,
    signed_amount,
    update_delta,
)
from fintrack.domains.finance.services.recurrence import advance, occurrence
from fintrack.domains.finance.views import stage_view_invalidations
from fintrack.extensions import db
from fintrack.platform.outbox import enqueue as enqueue_outbox

logger = logging.getLogger(__name__)


def _require_user(session, user_id: Optional[int]) -> User:
    if user_id is None:
        raise Unauthenticated()
    user = session.get(User, user_id)
    if user is None or not user.is_active:
        raise NotFound("User not found")
    return user


def _owned_account(session, user_id: int, account_id: int) -> Account:
    account = session.scalar(select(Account).where(Account.id == account_id, Account.user_id == user_id))
    if account is None:
        raise NotFound("Account not found")
    return account


def _owned_transaction(session, user_id: int, transaction_id: int) -> Transaction:
    txn = session.scalar(
        select(Transaction).where(Transaction.id == transaction_id, Transaction.user_id == user_id)
    )
    if txn is None:
        raise NotFound("Transaction not found")
    return txn


def _next_recurring_date(data: TransactionWrite) -> Optional[dt.date]:
    if data.is_recurring and data.recurring_interval:
        return advance(data.date, data.recurring_interval)
    return None


def _apply_fields(txn: Transaction, data: TransactionWrite) -> None:
    txn.account_id = data.account_id
    txn.type = data.type.value
    txn.amount = data.amount
    txn.date = data.date
    txn.description = data.description
    txn.category = data.category
    txn.status = data.status.value
    txn.receipt_url = data.receipt_url
    txn.is_recurring = data.is_recurring
    txn.recurring_interval = data.recurring_interval.value if data.recurring_interval else None
    txn.next_recurring_date = _next_recurring_date(data)


def _at_boundary(action: str, user_id: Optional[int], session, fn: Callable[[], ServiceResult]) -> ServiceResult:
    """Run ``fn`` converting every error into a failed ServiceResult after rolling back."""
    try:
        return fn()
    except AppError as exc:
        session.rollback()
        logger.info("%s rejected for user %s: %s (%s)", action, user_id, exc.code, exc.message)
        return ServiceResult.failure(exc)
    except Exception as exc:
        session.rollback()
        logger.exception("%s failed for user %s", action, user_id)
        return ServiceResult.failure(exc)


def create_transaction(
    user_id: Optional[int],
    data: Union[TransactionCreate, dict],
    session=None,
    guard: Optional[AbuseGuard] = None,
    user_agent: Optional[str] = None,
) -> ServiceResult[dict]:
    """Insert a transaction and move its account balance in one commit."""
    session = session or db.session
    guard = guard or abuse_guard

    def _create() -> ServiceResult[dict]:
        if user_id is None:
            raise Unauthenticated()
        decision = guard.protect(user_id, requested=1, user_agent=user_agent)
        if decision.is_denied():
            if decision.is_rate_limit():
                raise RateLimited()
            raise Blocked()

        _require_user(session, user_id)
        payload = validate_payload(TransactionCreate, data)
        account = _owned_account(session, user_id, payload.account_id)

        txn = Transaction(user_id=user_id)
        _apply_fields(txn, payload)
        session.add(txn)
        delta = create_delta(payload.type, payload.amount)
        apply_balance_delta(session, account.id, delta)
        session.flush()

        enqueue_outbox(
            FINANCE_TRANSACTION_CREATED,
            {
                "transaction_id": txn.id,
                "user_id": user_id,
                "account_id": account.id,
                "type": txn.type,
                "amount": float(txn.amount),
                "balance_delta": float(delta),
                "date": txn.date.isoformat(),
                "is_recurring": txn.is_recurring,
                "next_recurring_date": txn.next_recurring_date.isoformat() if txn.next_recurring_date else None,
            },
            user_id=user_id,
            session=session,
        )
        stage_view_invalidations(user_id, [account.id], session=session)
        session.commit()
        logger.info("Created transaction %s on account %s (delta %s)", txn.id, account.id, delta)
        return ServiceResult.success(map_transaction(txn), status=201)

    return _at_boundary("create_transaction", user_id, session, _create)


def update_transaction(
    user_id: Optional[int],
    transaction_id: int,
    data: Union[TransactionUpdate, dict],
    session=None,
) -> ServiceResult[dict]:
    """Replace a transaction's editable state and move balances by the net change."""
    session = session or db.session

    def _update() -> ServiceResult[dict]:
        _require_user(session, user_id)
        payload = validate_payload(TransactionUpdate, data)
        txn = _owned_transaction(session, user_id, transaction_id)
        target = _owned_account(session, user_id, payload.account_id)

        old_type, old_amount, old_account_id = txn.type, txn.amount, txn.account_id
        _apply_fields(txn, payload)

        if target.id == old_account_id:
            delta = update_delta(old_type, old_amount, payload.type, payload.amount)
            apply_balance_delta(session, target.id, delta)
        else:
            # Moving between accounts: retract from the old one, add to the new one.
            apply_balance_delta(session, old_account_id, -signed_amount(old_type, old_amount))
            delta = signed_amount(payload.type, payload.amount)
            apply_balance_delta(session, target.id, delta)
        session.flush()

        enqueue_outbox(
            FINANCE_TRANSACTION_UPDATED,
            {
                "transaction_id": txn.id,
                "user_id": user_id,
                "account_id": target.id,
                "previous_account_id": old_account_id,
                "type": txn.type,
                "amount": float(txn.amount),
                "balance_delta": float(delta),
                "next_recurring_date": txn.next_recurring_date.isoformat() if txn.next_recurring_date else None,
            },
            user_id=user_id,
            session=session,
        )
        stage_view_invalidations(user_id, [target.id, old_account_id], session=session)
        session.commit()
        logger.info("Updated transaction %s on account %s (delta %s)", txn.id, target.id, delta)
        return ServiceResult.success(map_transaction(txn))

    return _at_boundary("update_transaction", user_id, session, _update)


def get_transaction(user_id: Optional[int], transaction_id: int, session=None) -> dict:
    """Return one owned transaction; raises Unauthenticated or NotFound."""
    session = session or db.session
    _require_user(session, user_id)
    return map_transaction(_owned_transaction(session, user_id, transaction_id))


def list_transactions(
    user_id: Optional[int],
    filters: Union[TransactionFilter, dict, None] = None,
    session=None,
) -> ServiceResult[List[dict]]:
    """All owned transactions matching an equality filter, newest first."""
    session = session or db.session

    def _list() -> ServiceResult[List[dict]]:
        _require_user(session, user_id)
        criteria = validate_payload(TransactionFilter, filters).as_criteria()
        stmt = select(Transaction).where(Transaction.user_id == user_id)
        for key, value in criteria.items():
            stmt = stmt.where(getattr(Transaction, key) == value)
        stmt = stmt.order_by(Transaction.date.desc(), Transaction.id.desc())
        rows = []
        for txn in session.scalars(stmt):
            item = map_transaction(txn)
            item["account"] = map_account(txn.account)
            rows.append(item)
        return ServiceResult.success(rows)

    return _at_boundary("list_transactions", user_id, session, _list)


def process_due_recurring(as_of: Optional[dt.date] = None, session=None) -> int:
    """Materialize due occurrences of recurring transactions.

    Each template is committed on its own so one bad row does not hold back
    the rest. Returns the number of occurrences created.
    """
    session = session or db.session
    as_of = as_of or dt.date.today()
    template_ids = list(
        session.scalars(
            select(Transaction.id)
            .where(
                Transaction.is_recurring.is_(True),
                Transaction.next_recurring_date.is_not(None),
                Transaction.next_recurring_date <= as_of,
            )
            .order_by(Transaction.next_recurring_date, Transaction.id)
        )
    )

    created = 0
    for template_id in template_ids:
        try:
            created += _materialize_occurrences(session, template_id, as_of)
            session.commit()
        except Exception:
            session.rollback()
            logger.exception("Failed to process recurring transaction %s", template_id)
    return created


def _pending_index(template: Transaction) -> int:
    """Position of the stored next date in the schedule anchored at the template's own date."""
    index = 1
    while occurrence(template.date, template.recurring_interval, index) < template.next_recurring_date:
        index += 1
    return index


def _materialize_occurrences(session, template_id: int, as_of: dt.date) -> int:
    template = session.get(Transaction, template_id, with_for_update=True)
    if template is None or not template.is_recurring or not template.recurring_interval:
        return 0

    interval = template.recurring_interval
    index = _pending_index(template)
    count = 0
    touched = set()
    while template.next_recurring_date and template.next_recurring_date <= as_of:
        occurrence_date = template.next_recurring_date
        child = Transaction(
            user_id=template.user_id,
            account_id=template.account_id,
            type=template.type,
            amount=template.amount,
            date=occurrence_date,
            description=f"{template.description or ''} (Recurring)".strip(),
            category=template.category,
            status=template.status,
            is_recurring=False,
        )
        session.add(child)
        apply_balance_delta(session, template.account_id, create_delta(template.type, template.amount))
        template.last_processed = dt.datetime.utcnow()
        index += 1
        template.next_recurring_date = occurrence(template.date, interval, index)
        session.flush()

        enqueue_outbox(
            FINANCE_RECURRING_PROCESSED,
            {
                "template_id": template.id,
                "transaction_id": child.id,
                "user_id": template.user_id,
                "account_id": template.account_id,
                "occurrence_date": occurrence_date.isoformat(),
                "next_recurring_date": template.next_recurring_date.isoformat(),
            },
            user_id=template.user_id,
            session=session,
        )
        touched.add(template.account_id)
        count += 1

    if touched:
        stage_view_invalidations(template.user_id, touched, session=session)
    return count
