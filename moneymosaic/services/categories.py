"""Category breakdown of expense transactions."""

from collections import defaultdict
from datetime import date
from typing import Iterable, Optional

from .daterange import resolve_date_range
from .records import TransactionRecord, cents_to_dollars

TOP_CATEGORIES = 8


def spend_by_category(transactions: Iterable[TransactionRecord]) -> dict[str, int]:
    """Expense cents per category label (income and zero amounts ignored)."""
    totals: dict[str, int] = defaultdict(int)
    for t in transactions:
        if t.amount_cents > 0:
            totals[t.category] += t.amount_cents
    return dict(totals)


def aggregate_categories(
    transactions: Iterable[TransactionRecord],
    selected_category: Optional[str] = None,
    *,
    limit: Optional[int] = TOP_CATEGORIES,
) -> list[dict]:
    """Expense slices sorted by amount, largest first.

    Percentages are relative to the expense total of the slices considered,
    so restricting to one category yields a single 100% slice.
    """
    restrict = selected_category not in (None, "", "all")

    amounts: dict[str, int] = defaultdict(int)
    counts: dict[str, int] = defaultdict(int)
    for t in transactions:
        if t.amount_cents <= 0:
            continue
        if restrict and t.category != selected_category:
            continue
        amounts[t.category] += t.amount_cents
        counts[t.category] += 1

    total = sum(amounts.values())
    slices = [
        {
            "category": category,
            "amount": cents_to_dollars(cents),
            "percentage": round(cents / total * 100, 2) if total > 0 else 0.0,
            "transaction_count": counts[category],
        }
        for category, cents in sorted(amounts.items(), key=lambda kv: (-kv[1], kv[0]))
    ]
    return slices[:limit] if limit is not None else slices


def list_categories(transactions: Iterable[TransactionRecord]) -> list[str]:
    """Distinct expense categories, alphabetically (filter options)."""
    return sorted({t.category for t in transactions if t.amount_cents > 0})


def top_merchants(
    transactions: Iterable[TransactionRecord],
    *,
    limit: int = 10,
) -> list[dict]:
    totals: dict[str, int] = defaultdict(int)
    counts: dict[str, int] = defaultdict(int)
    for t in transactions:
        if t.amount_cents <= 0 or not t.merchant_name:
            continue
        totals[t.merchant_name] += t.amount_cents
        counts[t.merchant_name] += 1

    ranked = sorted(totals.items(), key=lambda kv: (-kv[1], kv[0]))[:limit]
    return [
        {
            "merchant": merchant,
            "amount": cents_to_dollars(cents),
            "transaction_count": counts[merchant],
            "average_amount": cents_to_dollars(cents / counts[merchant]),
        }
        for merchant, cents in ranked
    ]


# ── Single-category drill-down ────────────────────────────────────────────────


def category_analysis(
    transactions: Iterable[TransactionRecord],
    category: str,
    *,
    days: int = 90,
    today: Optional[date] = None,
) -> Optional[dict]:
    """Totals, daily spend and top merchants for one category.

    Returns None when the category has no expenses in the window.
    """
    rng = resolve_date_range(days, today=today)
    expenses = [
        t for t in transactions
        if t.category == category and t.amount_cents > 0 and rng.contains(t.date)
    ]
    if not expenses:
        return None

    total = sum(t.amount_cents for t in expenses)
    daily: dict[date, list[int]] = defaultdict(lambda: [0, 0])
    for t in expenses:
        daily[t.date][0] += t.amount_cents
        daily[t.date][1] += 1

    return {
        "category": category,
        "total_spent": cents_to_dollars(total),
        "transaction_count": len(expenses),
        "average_amount": cents_to_dollars(total / len(expenses)),
        "range": {
            **rng.as_dict(),
            "days": rng.days,
            "first_transaction": min(t.date for t in expenses).isoformat(),
            "last_transaction": max(t.date for t in expenses).isoformat(),
        },
        "trends": [
            {"date": day.isoformat(), "spent": cents_to_dollars(cents), "transaction_count": n}
            for day, (cents, n) in sorted(daily.items())
        ],
        "top_merchants": top_merchants(expenses),
    }
