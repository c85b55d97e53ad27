"""Trend aggregation: dense income/spending/net series for charting."""

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable, Optional

from .daterange import DateRange
from .records import TransactionRecord, cents_to_dollars

logger = logging.getLogger(__name__)

# Weekly spending is "increasing"/"decreasing" beyond this change, first vs last week
_TREND_DIRECTION_PCT = 10.0

GRANULARITIES = ("day", "week", "month")


def _point(day: date, income_cents: int, spending_cents: int) -> dict:
    return {
        "date": day.isoformat(),
        "income": cents_to_dollars(income_cents),
        "spending": cents_to_dollars(spending_cents),
        "net": cents_to_dollars(income_cents - spending_cents),
    }


def _daily_totals(
    transactions: Iterable[TransactionRecord],
    categories: Optional[Iterable[str]] = None,
) -> dict[date, list[int]]:
    """date → [income_cents, spending_cents]"""
    wanted = set(categories or ())
    totals: dict[date, list[int]] = defaultdict(lambda: [0, 0])
    for t in transactions:
        if wanted and t.category not in wanted:
            continue
        if t.amount_cents < 0:
            totals[t.date][0] += -t.amount_cents
        elif t.amount_cents > 0:
            totals[t.date][1] += t.amount_cents
    return totals


# ── Daily series ──────────────────────────────────────────────────────────────


def aggregate_trends(
    transactions: Iterable[TransactionRecord],
    rng: DateRange,
    bucket_count: int,
    *,
    categories: Optional[Iterable[str]] = None,
) -> list[dict]:
    """One point per calendar day for the ``bucket_count`` days ending at ``rng.end``.

    Days without transactions are zero points, so the series always has
    exactly ``bucket_count`` entries.
    """
    if bucket_count < 0:
        raise ValueError("bucket_count must not be negative")

    totals = _daily_totals(transactions, categories)
    first = rng.end - timedelta(days=bucket_count - 1)

    points = []
    for i in range(bucket_count):
        day = first + timedelta(days=i)
        income, spending = totals.get(day, (0, 0))
        points.append(_point(day, income, spending))

    logger.debug(
        "trend series %s..%s: %d buckets, %d active days",
        first.isoformat(), rng.end.isoformat(), bucket_count,
        sum(1 for d in totals if first <= d <= rng.end),
    )
    return points


# ── Weekly / monthly series ──────────────────────────────────────────────────


def _bucket_start(day: date, granularity: str) -> date:
    if granularity == "week":
        return day - timedelta(days=day.weekday())
    if granularity == "month":
        return day.replace(day=1)
    return day


def _next_bucket(start: date, granularity: str) -> date:
    if granularity == "week":
        return start + timedelta(days=7)
    if granularity == "month":
        if start.month == 12:
            return start.replace(year=start.year + 1, month=1, day=1)
        return start.replace(month=start.month + 1, day=1)
    return start + timedelta(days=1)


def aggregate_trends_by_period(
    transactions: Iterable[TransactionRecord],
    rng: DateRange,
    granularity: str,
    *,
    categories: Optional[Iterable[str]] = None,
) -> list[dict]:
    """Dense series covering the whole range in day, week or month buckets.

    Weeks start on Monday. The first bucket's date is clipped to
    ``rng.start`` so a point never reports a day outside the range.
    """
    if granularity not in GRANULARITIES:
        raise ValueError(f"granularity must be one of {', '.join(GRANULARITIES)}")

    totals: dict[date, list[int]] = defaultdict(lambda: [0, 0])
    for day, (income, spending) in _daily_totals(transactions, categories).items():
        if not rng.contains(day):
            continue
        bucket = _bucket_start(day, granularity)
        totals[bucket][0] += income
        totals[bucket][1] += spending

    points = []
    cur = _bucket_start(rng.start, granularity)
    while cur <= rng.end:
        income, spending = totals.get(cur, (0, 0))
        points.append(_point(max(cur, rng.start), income, spending))
        try:
            cur = _next_bucket(cur, granularity)
        except (OverflowError, ValueError):
            break  # bucket after date.max
    return points


# ── Spending trend direction ─────────────────────────────────────────────────


def spending_trend(
    transactions: Iterable[TransactionRecord],
    rng: DateRange,
) -> dict:
    """Weekly spending totals with an increasing/decreasing/stable verdict."""
    weekly = [
        {"week": p["date"], "amount": p["spending"]}
        for p in aggregate_trends_by_period(transactions, rng, "week")
    ]

    average = round(sum(w["amount"] for w in weekly) / len(weekly), 2) if weekly else 0.0

    direction = "stable"
    percentage_change: Optional[float] = 0.0
    if len(weekly) >= 2:
        first = weekly[0]["amount"]
        last = weekly[-1]["amount"]
        if first > 0:
            percentage_change = round((last - first) / first * 100, 1)
            if percentage_change > _TREND_DIRECTION_PCT:
                direction = "increasing"
            elif percentage_change < -_TREND_DIRECTION_PCT:
                direction = "decreasing"
        elif last > 0:
            percentage_change = None  # no spending in the first week to compare against
            direction = "increasing"

    return {
        "weekly_trends": weekly,
        "average_weekly_spending": average,
        "trend_direction": direction,
        "percentage_change": percentage_change,
    }
