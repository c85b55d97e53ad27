"""Financial-health score: savings rate, debt load and emergency-fund cover.

The score is out of 100: up to 40 points for the month's savings rate, 30
for debt-to-income and 30 for months of expenses covered by cash.
"""

from datetime import date
from typing import Iterable, Optional

from .comparison import savings_rate
from .daterange import DateRange
from .records import AccountRecord, TransactionRecord, cents_to_dollars

# (minimum value, points), checked in order
_SAVINGS_RATE_POINTS = [(20.0, 40), (10.0, 30), (5.0, 20), (0.0, 10)]
# (maximum value, points)
_DEBT_TO_INCOME_POINTS = [(20.0, 30), (40.0, 20), (60.0, 10)]
_EMERGENCY_FUND_POINTS = [(6.0, 30), (3.0, 20), (1.0, 10)]


def _at_least(value: float, table: list[tuple[float, int]]) -> int:
    for floor, points in table:
        if value >= floor:
            return points
    return 0


def _at_most(value: float, table: list[tuple[float, int]]) -> int:
    for ceiling, points in table:
        if value <= ceiling:
            return points
    return 0


def financial_health(
    transactions: Iterable[TransactionRecord],
    accounts: Iterable[AccountRecord],
    *,
    today: Optional[date] = None,
) -> dict:
    """Month-to-date cash flow scored against account balances.

    Savings are the balances of depository accounts; debt is the magnitude
    of credit-account balances.
    """
    today = today or date.today()
    month = DateRange(today.replace(day=1), today)

    income = expenses = 0
    for t in transactions:
        if not month.contains(t.date):
            continue
        if t.amount_cents < 0:
            income += -t.amount_cents
        else:
            expenses += t.amount_cents

    savings = debt = 0
    for a in accounts:
        if a.type == "depository":
            savings += a.balance_cents
        elif a.type == "credit":
            debt += abs(a.balance_cents)

    rate = savings_rate(income, expenses)
    debt_to_income = round(debt / income * 100, 2) if income > 0 else 0.0
    emergency_fund = round(savings / expenses, 2) if expenses > 0 else 0.0

    score = (
        _at_least(rate, _SAVINGS_RATE_POINTS)
        + _at_most(debt_to_income, _DEBT_TO_INCOME_POINTS)
        + _at_least(emergency_fund, _EMERGENCY_FUND_POINTS)
    )
    return {
        "range": month.as_dict(),
        "monthly_income": cents_to_dollars(income),
        "monthly_expenses": cents_to_dollars(expenses),
        "total_savings": cents_to_dollars(savings),
        "total_debt": cents_to_dollars(debt),
        "savings_rate": rate,
        "debt_to_income_ratio": debt_to_income,
        "emergency_fund_ratio": emergency_fund,
        "score": score,
    }
