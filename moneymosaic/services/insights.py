"""Insights: savings opportunities, recurring payments, unusual spending, category pace."""

import logging
import statistics
from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable, Optional

from .categories import spend_by_category
from .comparison import pct_change
from .daterange import DateRange, previous_period, resolve_date_range
from .records import TransactionRecord, cents_to_dollars

logger = logging.getLogger(__name__)

# Month-over-month growth (percent) that marks a category as "increasing"
INCREASE_THRESHOLD_PCT = 10.0
# Rolling window used for month-over-month comparisons and "recent" spend
_MONTH_DAYS = 30
# History window for merchant baselines
_HISTORY_DAYS = 90
_MAX_OPPORTUNITIES = 5

# Recurring-payment detection
_RECURRING_MIN_COUNT = 3
_AMOUNT_TOLERANCE = 0.15     # ±15% of the group's median amount
_INTERVAL_TOLERANCE_DAYS = 5  # ±5 days of the group's median interval

_CADENCES = [
    ("weekly", 5, 9),
    ("biweekly", 11, 17),
    ("monthly", 23, 36),
    ("quarterly", 85, 95),
    ("yearly", 355, 375),
]

# Unusual spending
_UNUSUAL_MULTIPLIER = 3.0
_UNUSUAL_LIMIT = 5

# Recent category spend vs the monthly average of the history window
_HISTORY_MONTHS = 3
_HIGH_SPEND_RATIO = 1.5
_LOW_SPEND_RATIO = 0.7


def _merchant_key(t: TransactionRecord) -> str:
    return (t.merchant_name or "").lower().strip()


def _in_range(transactions: Iterable[TransactionRecord], rng: DateRange) -> list[TransactionRecord]:
    return [t for t in transactions if rng.contains(t.date)]


# ── Savings opportunities ─────────────────────────────────────────────────────


def find_savings_opportunities(
    transactions: Iterable[TransactionRecord],
    budget_lines: Iterable[dict],
    *,
    today: Optional[date] = None,
) -> list[dict]:
    """Categories that are over budget or growing month over month.

    Potential savings is the overage above budget, or the month-over-month
    increase; when both apply the larger figure is reported.
    """
    today = today or date.today()
    txns = list(transactions)
    current_rng = resolve_date_range(_MONTH_DAYS, today=today)
    prev_rng = previous_period(current_rng)
    current_spend = spend_by_category(_in_range(txns, current_rng))
    previous_spend = spend_by_category(_in_range(txns, prev_rng))

    candidates: dict[str, dict] = {}

    def _offer(category: str, potential_cents: float, suggestion: str, reason: str) -> None:
        potential = cents_to_dollars(potential_cents)
        if potential <= 0:
            return
        existing = candidates.get(category)
        if existing is None or potential > existing["potential_savings"]:
            candidates[category] = {
                "category": category,
                "suggestion": suggestion,
                "potential_savings": potential,
                "reason": reason,
            }

    for line in budget_lines:
        if not line["over_budget"]:
            continue
        overage = round((line["spent"] - line["budgeted"]) * 100)
        _offer(
            line["category"],
            overage,
            f"Spending in {line['category']} is above budget. "
            f"Cutting back to the budgeted ${line['budgeted']:,.2f} would save the difference.",
            "over_budget",
        )

    for category, cur in current_spend.items():
        prev = previous_spend.get(category, 0)
        change = pct_change(prev, cur)
        if change is None or change <= INCREASE_THRESHOLD_PCT:
            continue
        _offer(
            category,
            cur - prev,
            f"{category} spending rose {change:.0f}% compared with the previous "
            f"{_MONTH_DAYS} days. Returning to last month's level would save the increase.",
            "increasing",
        )

    ranked = sorted(
        candidates.values(), key=lambda o: (-o["potential_savings"], o["category"])
    )
    return ranked[:_MAX_OPPORTUNITIES]


# ── Recurring payments ────────────────────────────────────────────────────────


def _frequency_label(interval_days: int) -> str:
    for label, low, high in _CADENCES:
        if low <= interval_days <= high:
            return label
    return f"every {interval_days} days"


def detect_recurring_payments(transactions: Iterable[TransactionRecord]) -> list[dict]:
    """Merchants charged at a consistent amount and interval, 3+ times."""
    groups: dict[str, list[TransactionRecord]] = defaultdict(list)
    for t in transactions:
        if t.amount_cents <= 0:
            continue
        key = _merchant_key(t)
        if key:
            groups[key].append(t)

    results = []
    for key, txlist in groups.items():
        if len(txlist) < _RECURRING_MIN_COUNT:
            continue
        txlist = sorted(txlist, key=lambda t: (t.date, t.id))

        amounts = [t.amount_cents for t in txlist]
        median_amount = statistics.median(amounts)
        if any(abs(a - median_amount) > median_amount * _AMOUNT_TOLERANCE for a in amounts):
            continue

        gaps = [(txlist[i + 1].date - txlist[i].date).days for i in range(len(txlist) - 1)]
        median_gap = statistics.median(gaps)
        if median_gap < 1:
            continue
        if any(abs(g - median_gap) > _INTERVAL_TOLERANCE_DAYS for g in gaps):
            continue

        interval = int(round(median_gap))
        last = txlist[-1]
        results.append({
            "merchant": last.merchant_name,
            "merchant_key": key,
            "amount": cents_to_dollars(median_amount),
            "frequency": _frequency_label(interval),
            "interval_days": interval,
            "occurrences": len(txlist),
            "last_date": last.date.isoformat(),
            "next_expected_date": (last.date + timedelta(days=interval)).isoformat(),
        })

    results.sort(key=lambda r: (r["next_expected_date"], r["merchant_key"]))
    return results


# ── Unusual spending ──────────────────────────────────────────────────────────


def detect_unusual_spending(
    recent: Iterable[TransactionRecord],
    history: Iterable[TransactionRecord],
    *,
    multiplier: float = _UNUSUAL_MULTIPLIER,
    limit: int = _UNUSUAL_LIMIT,
) -> list[dict]:
    """Recent expenses far above the merchant's historical average."""
    merch_hist: dict[str, list[int]] = defaultdict(list)
    for t in history:
        key = _merchant_key(t)
        if key and t.amount_cents > 0:
            merch_hist[key].append(t.amount_cents)

    unusual = []
    for t in recent:
        key = _merchant_key(t)
        hist = merch_hist.get(key)
        if t.amount_cents <= 0 or not hist:
            continue
        avg = sum(hist) / len(hist)
        if t.amount_cents > avg * multiplier:
            unusual.append({
                "id": t.id,
                "merchant": t.merchant_name,
                "amount": cents_to_dollars(t.amount_cents),
                "date": t.date.isoformat(),
                "reason": (
                    f"Amount is {t.amount_cents / avg * 100:.0f}% of your usual "
                    f"spending at this merchant"
                ),
            })

    unusual.sort(key=lambda u: (-u["amount"], u["date"], u["id"]))
    return unusual[:limit]


# ── Category spending ─────────────────────────────────────────────────────────


def category_spending(
    recent: Iterable[TransactionRecord],
    history: Iterable[TransactionRecord],
) -> list[dict]:
    """Recent spend per category against the history's monthly average."""
    recent_spend = spend_by_category(recent)
    history_spend = spend_by_category(history)

    results = []
    for category in set(recent_spend) | set(history_spend):
        spent = recent_spend.get(category, 0)
        avg_monthly = history_spend.get(category, 0) / _HISTORY_MONTHS
        if spent > avg_monthly * _HIGH_SPEND_RATIO:
            status = "higher"
            recommendation = (
                f"Spending is 50% higher than usual. Consider reviewing {category} expenses."
            )
        elif spent < avg_monthly * _LOW_SPEND_RATIO:
            status = "lower"
            recommendation = f"Great job! Spending is lower than usual in {category}."
        else:
            status = "consistent"
            recommendation = "Spending is consistent with your usual pattern."
        results.append({
            "category": category,
            "spent": cents_to_dollars(spent),
            "avg_monthly": cents_to_dollars(avg_monthly),
            "status": status,
            "recommendation": recommendation,
        })

    results.sort(key=lambda r: (-r["spent"], r["category"]))
    return results


# ── Combined ──────────────────────────────────────────────────────────────────


def generate_insights(
    transactions: Iterable[TransactionRecord],
    budget_lines: Iterable[dict],
    *,
    today: Optional[date] = None,
) -> dict:
    today = today or date.today()
    txns = list(transactions)
    recent = _in_range(txns, resolve_date_range(_MONTH_DAYS, today=today))
    history = _in_range(txns, resolve_date_range(_HISTORY_DAYS, today=today))

    insights = {
        "savings_opportunities": find_savings_opportunities(txns, budget_lines, today=today),
        "recurring_payments": detect_recurring_payments(txns),
        "unusual_spending": detect_unusual_spending(recent, history),
        "category_spending": category_spending(recent, history),
    }
    logger.debug(
        "insights: %d opportunities, %d recurring, %d unusual, %d categories",
        len(insights["savings_opportunities"]),
        len(insights["recurring_payments"]),
        len(insights["unusual_spending"]),
        len(insights["category_spending"]),
    )
    return insights
