"""Immutable records consumed by the analytics engine.

Amounts are integer cents with a fixed sign convention:
positive = money out (expense), negative = money in (income).
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class TransactionRecord:
    id: str
    date: date
    amount_cents: int
    category: str
    account_id: str
    merchant_name: Optional[str] = None
    name: str = ""
    pending: bool = False

    @property
    def is_expense(self) -> bool:
        return self.amount_cents > 0

    @property
    def is_income(self) -> bool:
        return self.amount_cents < 0


@dataclass(frozen=True)
class BudgetRecord:
    category: str
    budgeted_cents: int


def cents_to_dollars(cents: float) -> float:
    return round(cents / 100, 2)


@dataclass(frozen=True)
class AccountRecord:
    account_id: str
    type: Optional[str]            # depository | credit | investment
    balance_cents: int = 0
