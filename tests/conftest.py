from datetime import date
from itertools import count

import pytest

from moneymosaic.services.records import TransactionRecord

_ids = count(1)


@pytest.fixture
def make_txn():
    """Factory for TransactionRecord with dollar amounts (positive = expense)."""

    def _make(
        day,
        amount,
        category="Food",
        *,
        account_id="acc-1",
        merchant=None,
        name="",
        pending=False,
        txn_id=None,
    ) -> TransactionRecord:
        if isinstance(day, str):
            day = date.fromisoformat(day)
        return TransactionRecord(
            id=txn_id or f"t{next(_ids)}",
            date=day,
            amount_cents=round(amount * 100),
            category=category,
            account_id=account_id,
            merchant_name=merchant,
            name=name,
            pending=pending,
        )

    return _make
