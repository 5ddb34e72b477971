"""Background task that materializes due recurring transactions."""

from __future__ import annotations

import datetime as dt
from typing import Optional

from fintrack.domains.finance.services.transaction_service import process_due_recurring


def run(as_of: Optional[dt.date] = None) -> int:
    return process_due_recurring(as_of=as_of)
