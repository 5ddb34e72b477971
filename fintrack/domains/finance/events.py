"""Finance domain event catalog."""

from __future__ import annotations

FINANCE_ACCOUNT_CREATED = "finance.account.created"
FINANCE_TRANSACTION_CREATED = "finance.transaction.created"
FINANCE_TRANSACTION_UPDATED = "finance.transaction.updated"
FINANCE_RECURRING_PROCESSED = "finance.transaction.recurring_processed"
FINANCE_VIEW_INVALIDATED = "finance.view.invalidated"

DASHBOARD_VIEW_PATH = "/dashboard"


def account_view_path(account_id: int) -> str:
    return f"/account/{account_id}"


EVENT_CATALOG = {
    FINANCE_ACCOUNT_CREATED: {
        "version": "v1",
        "payload": {
            "account_id": "int",
            "user_id": "int",
            "name": "str",
            "account_type": "str",  # 'CURRENT', 'SAVINGS'
            "balance": "decimal",
            "is_default": "bool",
        },
    },
    FINANCE_TRANSACTION_CREATED: {
        "version": "v1",
        "payload": {
            "transaction_id": "int",
            "user_id": "int",
            "account_id": "int",
            "type": "str",  # 'INCOME', 'EXPENSE'
            "amount": "decimal",
            "balance_delta": "decimal",
            "date": "date",
            "is_recurring": "bool",
            "next_recurring_date": "date?",
        },
    },
    FINANCE_TRANSACTION_UPDATED: {
        "version": "v1",
        "payload": {
            "transaction_id": "int",
            "user_id": "int",
            "account_id": "int",
            "previous_account_id": "int",
            "type": "str",
            "amount": "decimal",
            "balance_delta": "decimal",
            "next_recurring_date": "date?",
        },
    },
    FINANCE_RECURRING_PROCESSED: {
        "version": "v1",
        "payload": {
            "template_id": "int",
            "transaction_id": "int",
            "user_id": "int",
            "account_id": "int",
            "occurrence_date": "date",
            "next_recurring_date": "date",
        },
    },
    FINANCE_VIEW_INVALIDATED: {
        "version": "v1",
        "payload": {
            "user_id": "int",
            "path": "str",  # '/dashboard' or '/account/<id>'
        },
    },
}

__all__ = [
    "EVENT_CATALOG",
    "DASHBOARD_VIEW_PATH",
    "FINANCE_ACCOUNT_CREATED",
    "FINANCE_TRANSACTION_CREATED",
    "FINANCE_TRANSACTION_UPDATED",
    "FINANCE_RECURRING_PROCESSED",
    "FINANCE_VIEW_INVALIDATED",
    "account_view_path",
]
