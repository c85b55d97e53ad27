"""Period comparison: summary metrics for a window vs the equal-length window before it."""

import logging
from datetime import date
from typing import Iterable, Optional

from .categories import aggregate_categories
from .daterange import DateRange, previous_period, resolve_period
from .filters import FilterSpec, apply_filters
from .records import TransactionRecord, cents_to_dollars

logger = logging.getLogger(__name__)

# Metrics reported in ComparisonResult.changes
COMPARED_METRICS = (
    "total_income",
    "total_expenses",
    "net_cash_flow",
    "transaction_count",
    "avg_transaction_amount",
    "savings_rate",
)


def savings_rate(income_cents: int, expense_cents: int) -> float:
    """Share of income kept, in percent; 0 when there is no income."""
    if income_cents <= 0:
        return 0.0
    return round((income_cents - expense_cents) / income_cents * 100, 2)


def pct_change(previous: float, current: float) -> Optional[float]:
    """Percent change from ``previous`` to ``current``.

    None means "no prior baseline" (previous is zero, current is not),
    which is distinct from a real 0% change.
    """
    if previous == 0:
        return 0.0 if current == 0 else None
    return round((current - previous) / abs(previous) * 100, 1)


def _cash_flow_trend(net_cents: int) -> str:
    if net_cents > 0:
        return "positive"
    if net_cents < 0:
        return "negative"
    return "neutral"


def summarize(
    transactions: Iterable[TransactionRecord],
    *,
    days: Optional[int] = None,
) -> dict:
    txns = list(transactions)
    income = sum(-t.amount_cents for t in txns if t.amount_cents < 0)
    expenses = sum(t.amount_cents for t in txns if t.amount_cents > 0)
    net = income - expenses

    cat_totals: dict[str, int] = {}
    for t in txns:
        if t.amount_cents > 0:
            cat_totals[t.category] = cat_totals.get(t.category, 0) + t.amount_cents
    top_category = (
        min(cat_totals.items(), key=lambda kv: (-kv[1], kv[0]))[0] if cat_totals else ""
    )

    summary = {
        "total_income": cents_to_dollars(income),
        "total_expenses": cents_to_dollars(expenses),
        "net_cash_flow": cents_to_dollars(net),
        "transaction_count": len(txns),
        "avg_transaction_amount": (
            cents_to_dollars((income + expenses) / len(txns)) if txns else 0.0
        ),
        "top_expense_category": top_category,
        "savings_rate": savings_rate(income, expenses),
    }
    if days is not None:
        summary["daily_average"] = cents_to_dollars(net / days) if days > 0 else 0.0
        summary["trend"] = _cash_flow_trend(net)
    return summary


def _changes(current: dict, previous: dict) -> dict:
    changes = {}
    for metric in COMPARED_METRICS:
        cur = current[metric]
        prev = previous[metric]
        changes[metric] = {
            "current": cur,
            "previous": prev,
            "delta": round(cur - prev, 2),
            "percentage": pct_change(prev, cur),
        }
    return changes


def compare_periods(
    transactions: Iterable[TransactionRecord],
    current_range: DateRange,
    spec: Optional[FilterSpec] = None,
) -> dict:
    """Compare ``current_range`` against the equal-length window before it.

    The same non-date filters apply to both windows.
    """
    prev_range = previous_period(current_range)
    pool = apply_filters(transactions, spec) if spec is not None else list(transactions)

    current_txns = [t for t in pool if current_range.contains(t.date)]
    previous_txns = [t for t in pool if prev_range.contains(t.date)]

    current = summarize(current_txns, days=current_range.days)
    previous = summarize(previous_txns, days=prev_range.days)

    notes: list[str] = []
    if not previous_txns:
        notes.append("Previous period has no transactions.")
    if not current_txns:
        notes.append("Current period has no transactions.")

    logger.debug(
        "compared %s (%d txns) with %s (%d txns)",
        current_range.as_dict(), len(current_txns),
        prev_range.as_dict(), len(previous_txns),
    )
    return {
        "current_range": current_range.as_dict(),
        "previous_range": prev_range.as_dict(),
        "current": current,
        "previous": previous,
        "changes": _changes(current, previous),
        "notes": notes,
    }


def period_summary(
    transactions: Iterable[TransactionRecord],
    period: str,
    *,
    compare_with_previous: bool = False,
    spec: Optional[FilterSpec] = None,
    today: Optional[date] = None,
) -> dict:
    """Summary and full category breakdown for a named period."""
    rng = resolve_period(period, today=today)
    pool = apply_filters(transactions, spec) if spec is not None else list(transactions)
    in_range = [t for t in pool if rng.contains(t.date)]

    result = {
        "period": period,
        "range": rng.as_dict(),
        "summary": summarize(in_range, days=rng.days),
        "category_breakdown": aggregate_categories(in_range, limit=None),
        "comparison": None,
    }
    if compare_with_previous:
        result["comparison"] = compare_periods(pool, rng)
    return result
