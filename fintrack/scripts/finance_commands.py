"""Finance maintenance CLI.

Usage:
    flask finance process-recurring [--as-of 2024-02-15]
    flask finance seed-transactions --account-id 1 [--days 90]
"""

from __future__ import annotations

import datetime as dt
import random
from decimal import Decimal
from typing import Optional

import click
from flask.cli import AppGroup

from fintrack.domains.finance.constants import DEFAULT_CATEGORY, TransactionStatus, TransactionType
from fintrack.domains.finance.models.account_models import Account
from fintrack.domains.finance.models.transaction_models import Transaction
from fintrack.domains.finance.services.balance_service import signed_amount
from fintrack.domains.finance.tasks import process_recurring
from fintrack.extensions import db

INCOME_SHARE = 0.4
MAX_SEED_AMOUNT = 500
INCOME_CATEGORY = "salary"

finance_cli = AppGroup("finance", help="Finance maintenance commands.")


def seed_transactions(
    account_id: int,
    days: int = 90,
    rng: Optional[random.Random] = None,
    today: Optional[dt.date] = None,
) -> int:
    """Insert one random completed transaction per day and reset the balance to their sum."""
    rng = rng or random.Random()
    today = today or dt.date.today()
    account = db.session.get(Account, account_id)
    if account is None:
        raise click.ClickException(f"Account {account_id} not found")

    total = Decimal("0")
    rows = []
    for offset in range(days, -1, -1):
        day = today - dt.timedelta(days=offset)
        type_ = TransactionType.INCOME if rng.random() < INCOME_SHARE else TransactionType.EXPENSE
        amount = Decimal(str(round(rng.random() * MAX_SEED_AMOUNT, 2)))
        stamp = dt.datetime.combine(day, dt.time())
        rows.append(
            Transaction(
                user_id=account.user_id,
                account_id=account.id,
                type=type_.value,
                amount=amount,
                date=day,
                description="Seed transaction",
                category=INCOME_CATEGORY if type_ is TransactionType.INCOME else DEFAULT_CATEGORY,
                status=TransactionStatus.COMPLETED.value,
                is_recurring=False,
                created_at=stamp,
                updated_at=stamp,
            )
        )
        total += signed_amount(type_, amount)

    db.session.add_all(rows)
    account.balance = total
    db.session.commit()
    return len(rows)


@finance_cli.command("process-recurring")
@click.option("--as-of", type=click.DateTime(formats=["%Y-%m-%d"]), help="Process occurrences due on or before this date")
def process_recurring_command(as_of: Optional[dt.datetime]) -> None:
    """Materialize recurring transactions that have come due."""
    created = process_recurring.run(as_of.date() if as_of else None)
    click.echo(f"Created {created} recurring transaction(s)")


@finance_cli.command("seed-transactions")
@click.option("--account-id", type=int, required=True, help="Account to fill with sample data")
@click.option("--days", type=int, default=90, show_default=True, help="Number of past days to cover")
def seed_transactions_command(account_id: int, days: int) -> None:
    count = seed_transactions(account_id, days=days)
    click.echo(f"Seeded {count} transactions on account {account_id}")


def register_commands(app) -> None:
    app.cli.add_command(finance_cli)
