"""Model -> JSON payload mappers for the finance domain."""

from __future__ import annotations

from fintrack.domains.finance.models.account_models import Account
from fintrack.domains.finance.models.transaction_models import Transaction
from fintrack.domains.finance.schemas.finance_schemas import ReceiptData


def _iso(value):
    return value.isoformat() if value is not None else None


def map_transaction(txn: Transaction) -> dict:
    # Amounts leave the service layer as plain numbers.
    return {
        "id": txn.id,
        "account_id": txn.account_id,
        "user_id": txn.user_id,
        "type": txn.type,
        "amount": float(txn.amount),
        "date": _iso(txn.date),
        "description": txn.description,
        "category": txn.category,
        "status": txn.status,
        "receipt_url": txn.receipt_url,
        "is_recurring": bool(txn.is_recurring),
        "recurring_interval": txn.recurring_interval,
        "next_recurring_date": _iso(txn.next_recurring_date),
        "last_processed": _iso(txn.last_processed),
        "created_at": _iso(txn.created_at),
        "updated_at": _iso(txn.updated_at),
    }


def map_account(account: Account, transaction_count: int | None = None) -> dict:
    payload = {
        "id": account.id,
        "name": account.name,
        "account_type": account.account_type,
        "balance": float(account.balance),
        "is_default": bool(account.is_default),
        "created_at": _iso(account.created_at),
    }
    if transaction_count is not None:
        payload["transaction_count"] = transaction_count
    return payload


def map_receipt(receipt: ReceiptData) -> dict:
    return {
        "amount": float(receipt.amount) if receipt.amount is not None else None,
        "date": _iso(receipt.date),
        "description": receipt.description,
        "category": receipt.category,
        "merchant_name": receipt.merchant_name,
    }
