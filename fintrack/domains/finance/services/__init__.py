from fintrack.domains.finance.services.account_service import (
    create_account,
    get_account_with_transactions,
    list_accounts,
)
from fintrack.domains.finance.services.balance_service import (
    apply_balance_delta,
    create_delta,
    signed_amount,
    update_delta,
)
from fintrack.domains.finance.services.dashboard_service import get_dashboard
from fintrack.domains.finance.services.receipt_service import scan_receipt
from fintrack.domains.finance.services.recurrence import advance
from fintrack.domains.finance.services.transaction_service import (
    create_transaction,
    get_transaction,
    list_transactions,
    process_due_recurring,
    update_transaction,
)

__all__ = [
    "advance",
    "signed_amount",
    "create_delta",
    "update_delta",
    "apply_balance_delta",
    "create_transaction",
    "update_transaction",
    "get_transaction",
    "list_transactions",
    "process_due_recurring",
    "create_account",
    "list_accounts",
    "get_account_with_transactions",
    "get_dashboard",
    "scan_receipt",
]
