"""Spending-pattern alerts: spikes against the past week and likely duplicates."""

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable, Optional

from .records import TransactionRecord, cents_to_dollars

logger = logging.getLogger(__name__)

# Today's spend above this multiple of the trailing daily average raises an alert
HIGH_SPENDING_MULTIPLIER = 2.0
# Days looked back for both the spending baseline and duplicate detection
LOOKBACK_DAYS = 7
_MAX_DUPLICATES_SHOWN = 5


# ── High spending ─────────────────────────────────────────────────────────────


def high_spending_alert(
    transactions: Iterable[TransactionRecord],
    *,
    today: Optional[date] = None,
) -> Optional[dict]:
    """Alert when today's spend exceeds twice the trailing daily average.

    The average runs over the days in the previous week that have any
    activity. Without such days there is no baseline and no alert.
    """
    today = today or date.today()
    window_start = today - timedelta(days=LOOKBACK_DAYS)

    today_cents = 0
    daily: dict[date, int] = defaultdict(int)
    for t in transactions:
        spend = t.amount_cents if t.amount_cents > 0 else 0
        if t.date == today:
            today_cents += spend
        elif window_start <= t.date < today:
            daily[t.date] += spend

    if not daily or today_cents <= 0:
        return None
    average = sum(daily.values()) / len(daily)
    if today_cents <= average * HIGH_SPENDING_MULTIPLIER:
        return None

    return {
        "id": f"high-spending-{today.isoformat()}",
        "type": "high_spending",
        "category": None,
        "severity": "medium",
        "message": "Today's spending is significantly higher than your weekly average",
        "percentage": round(today_cents / average * 100, 2) if average > 0 else None,
        "details": {
            "today_spending": cents_to_dollars(today_cents),
            "weekly_average": cents_to_dollars(average),
        },
    }


# ── Duplicates ────────────────────────────────────────────────────────────────


def find_duplicate_transactions(
    transactions: Iterable[TransactionRecord],
    *,
    today: Optional[date] = None,
) -> list[dict]:
    """Groups sharing merchant, amount and date within the lookback window."""
    today = today or date.today()
    window_start = today - timedelta(days=LOOKBACK_DAYS)

    groups: dict[tuple[str, int, date], list[TransactionRecord]] = defaultdict(list)
    for t in transactions:
        if not window_start <= t.date <= today:
            continue
        key = (t.merchant_name or t.name).lower().strip()
        if key:
            groups[(key, t.amount_cents, t.date)].append(t)

    duplicates = [
        {
            "merchant": txns[0].merchant_name or txns[0].name,
            "amount": cents_to_dollars(amount),
            "date": day.isoformat(),
            "count": len(txns),
            "transaction_ids": sorted(t.id for t in txns),
        }
        for (_key, amount, day), txns in groups.items()
        if len(txns) > 1
    ]
    duplicates.sort(key=lambda d: (d["date"], d["merchant"], d["amount"]), reverse=True)
    return duplicates


def duplicate_transactions_alert(
    transactions: Iterable[TransactionRecord],
    *,
    today: Optional[date] = None,
) -> Optional[dict]:
    duplicates = find_duplicate_transactions(transactions, today=today)
    if not duplicates:
        return None
    return {
        "id": "duplicate-transactions",
        "type": "duplicate_transactions",
        "category": None,
        "severity": "low",
        "message": "Potential duplicate transactions detected",
        "percentage": None,
        "details": {
            "duplicate_count": len(duplicates),
            "duplicates": duplicates[:_MAX_DUPLICATES_SHOWN],
        },
    }


# ── Combined ──────────────────────────────────────────────────────────────────


def pattern_alerts(
    transactions: Iterable[TransactionRecord],
    *,
    today: Optional[date] = None,
) -> list[dict]:
    today = today or date.today()
    txns = list(transactions)
    alerts = [
        alert
        for alert in (
            high_spending_alert(txns, today=today),
            duplicate_transactions_alert(txns, today=today),
        )
        if alert is not None
    ]
    logger.debug("pattern alerts for %s: %d", today.isoformat(), len(alerts))
    return alerts


def alerts_summary(alerts: list[dict]) -> dict:
    """Alert counts by severity (drives the notification badge)."""
    return {
        "total_alerts": len(alerts),
        "high": sum(1 for a in alerts if a["severity"] == "high"),
        "medium": sum(1 for a in alerts if a["severity"] == "medium"),
        "low": sum(1 for a in alerts if a["severity"] == "low"),
    }
