from __future__ import annotations

from decimal import Decimal

import pytest

from fintrack.domains.finance.constants import TransactionType
from fintrack.domains.finance.services.balance_service import create_delta, signed_amount, update_delta

pytestmark = pytest.mark.unit


def test_signed_amount_follows_type():
    assert signed_amount(TransactionType.INCOME, Decimal("12.50")) == Decimal("12.50")
    assert signed_amount(TransactionType.EXPENSE, Decimal("12.50")) == Decimal("-12.50")
    assert signed_amount("EXPENSE", Decimal("0")) == Decimal("0")


def test_create_delta_is_signed_amount():
    assert create_delta("INCOME", Decimal("40")) == Decimal("40")
    assert create_delta("EXPENSE", Decimal("30")) == Decimal("-30")


@pytest.mark.parametrize(
    "old_type,old_amount,new_type,new_amount,expected",
    [
        ("EXPENSE", "30", "EXPENSE", "45", "-15"),
        ("INCOME", "100", "INCOME", "60", "-40"),
        ("EXPENSE", "30", "INCOME", "30", "60"),
        ("INCOME", "20", "EXPENSE", "20", "-40"),
        ("EXPENSE", "30", "INCOME", "50", "80"),
        ("INCOME", "10", "INCOME", "10", "0"),
    ],
)
def test_update_delta_is_net_change(old_type, old_amount, new_type, new_amount, expected):
    assert update_delta(old_type, Decimal(old_amount), new_type, Decimal(new_amount)) == Decimal(expected)


def test_unknown_type_is_rejected():
    with pytest.raises(ValueError):
        signed_amount("TRANSFER", Decimal("1"))
