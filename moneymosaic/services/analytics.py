"""Dashboard payload: runs the whole analytics pipeline for one filter state."""

import logging
from datetime import date
from typing import Iterable, Optional

from .alerts import alerts_summary, pattern_alerts
from .budgets import budget_alerts, evaluate_budgets
from .categories import aggregate_categories, list_categories, spend_by_category, top_merchants
from .comparison import compare_periods, summarize
from .daterange import resolve_filter_range, trend_bucket_count
from .filters import FilterSpec, apply_filters, count_active_filters
from .insights import generate_insights
from .records import BudgetRecord, TransactionRecord
from .trends import aggregate_trends

logger = logging.getLogger(__name__)


def _selected_category(spec: FilterSpec) -> Optional[str]:
    if len(spec.categories) == 1:
        return next(iter(spec.categories))
    return None


def build_dashboard(
    transactions: Iterable[TransactionRecord],
    budgets: Iterable[BudgetRecord],
    spec: FilterSpec,
    *,
    today: Optional[date] = None,
) -> dict:
    """Trends, categories, comparison, budgets and insights for ``spec``.

    Raises InvalidRangeError when the filter's date range cannot be resolved.
    """
    today = today or date.today()
    txns = list(transactions)
    rng = resolve_filter_range(spec, today=today)
    bucket_count = trend_bucket_count(rng)

    filtered = apply_filters(txns, spec, rng=rng)

    budget_lines = evaluate_budgets(budgets, spend_by_category(filtered))
    alerts = budget_alerts(budget_lines) + pattern_alerts(apply_filters(txns, spec), today=today)

    payload = {
        "range": rng.as_dict(),
        "bucket_count": bucket_count,
        "active_filters": count_active_filters(spec),
        "summary": summarize(filtered, days=rng.days),
        "trends": aggregate_trends(filtered, rng, bucket_count),
        "categories": aggregate_categories(filtered, _selected_category(spec)),
        "all_categories": list_categories(txns),
        "top_merchants": top_merchants(filtered),
        "comparison": compare_periods(txns, rng, spec),
        "budgets": budget_lines,
        "alerts": alerts,
        "alerts_summary": alerts_summary(alerts),
        "insights": generate_insights(txns, budget_lines, today=today),
    }
    logger.debug(
        "dashboard %s: %d of %d transactions after filters",
        payload["range"], len(filtered), len(txns),
    )
    return payload
