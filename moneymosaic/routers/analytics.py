"""Analytics router: trend series, category breakdowns, period summaries and budget insights."""

import logging
from dataclasses import replace
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas import (
    AlertsResponse,
    CategoriesResponse,
    CategoryAnalysisResponse,
    ComparisonSchema,
    FinancialHealthResponse,
    InsightsResponse,
    PeriodSummaryResponse,
    SpendingTrendResponse,
    TrendsResponse,
)
from ..services.alerts import alerts_summary, pattern_alerts
from ..services.analytics import build_dashboard
from ..services.budgets import budget_alerts, evaluate_budgets
from ..services.categories import (
    aggregate_categories,
    category_analysis,
    list_categories,
    spend_by_category,
)
from ..services.comparison import compare_periods, period_summary
from ..services.daterange import (
    DateRange,
    InvalidRangeError,
    resolve_filter_range,
    trend_bucket_count,
)
from ..services.filters import FilterSpec, apply_filters
from ..services.health import financial_health
from ..services.insights import generate_insights
from ..services.repository import load_accounts, load_budgets, load_transactions
from ..services.trends import aggregate_trends, aggregate_trends_by_period, spending_trend

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["analytics"])


def filter_spec(
    date_range: str = Query("30", alias="range", description="Day count (e.g. '30') or 'custom'"),
    start: Optional[str] = Query(None, description="Custom range start YYYY-MM-DD"),
    end: Optional[str] = Query(None, description="Custom range end YYYY-MM-DD"),
    categories: list[str] = Query([], description="Category labels; empty = all"),
    accounts: list[str] = Query([], description="Account ids; empty = all"),
    min_amount: Optional[float] = Query(None, ge=0),
    max_amount: Optional[float] = Query(None, ge=0),
    search: str = Query("", description="Case-insensitive match on name, merchant, category"),
    include_pending: bool = Query(True),
) -> FilterSpec:
    return FilterSpec(
        date_range=date_range,
        custom_start=start,
        custom_end=end,
        categories=frozenset(categories),
        accounts=frozenset(accounts),
        amount_min=min_amount,
        amount_max=max_amount,
        search_term=search,
        include_pending=include_pending,
    )


def _resolve(spec: FilterSpec) -> DateRange:
    try:
        return resolve_filter_range(spec)
    except InvalidRangeError as exc:
        logger.warning("Rejected date range %r: %s", spec.date_range, exc)
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("/trends", response_model=TrendsResponse, summary="Dense income/spending/net series")
def trends(
    days: Optional[int] = Query(None, ge=1, description="Shortcut for range=<days>"),
    granularity: str = Query("day", description="day | week | month"),
    spec: FilterSpec = Depends(filter_spec),
    db: Session = Depends(get_db),
):
    if days is not None:
        spec = replace(spec, date_range=str(days))
    if granularity not in ("day", "week", "month"):
        raise HTTPException(status_code=422, detail="granularity must be 'day', 'week' or 'month'")
    rng = _resolve(spec)
    filtered = apply_filters(load_transactions(db), spec, rng=rng)

    if granularity == "day":
        points = aggregate_trends(filtered, rng, trend_bucket_count(rng))
    else:
        points = aggregate_trends_by_period(filtered, rng, granularity)
    return {"range": rng.as_dict(), "granularity": granularity, "points": points}


@router.get(
    "/spending-trend",
    response_model=SpendingTrendResponse,
    summary="Weekly spending with increasing/decreasing/stable direction",
)
def weekly_spending_trend(
    spec: FilterSpec = Depends(filter_spec),
    db: Session = Depends(get_db),
):
    rng = _resolve(spec)
    return spending_trend(apply_filters(load_transactions(db), spec, rng=rng), rng)


@router.get("/categories", response_model=CategoriesResponse, summary="Top expense categories")
def categories(
    category: Optional[str] = Query(None, description="Restrict to one category ('all' = none)"),
    spec: FilterSpec = Depends(filter_spec),
    db: Session = Depends(get_db),
):
    rng = _resolve(spec)
    txns = load_transactions(db)
    filtered = apply_filters(txns, spec, rng=rng)
    return {
        "range": rng.as_dict(),
        "categories": aggregate_categories(filtered, category),
        "all_categories": list_categories(txns),
    }


@router.get(
    "/categories/{category}",
    response_model=CategoryAnalysisResponse,
    summary="Totals, daily spend and top merchants for one category",
)
def category_detail(
    category: str,
    days: int = Query(90, ge=1, le=3650),
    db: Session = Depends(get_db),
):
    analysis = category_analysis(load_transactions(db), category, days=days)
    if analysis is None:
        raise HTTPException(
            status_code=404, detail=f"No spending in {category!r} over the last {days} days"
        )
    return analysis


@router.get(
    "/financial-health",
    response_model=FinancialHealthResponse,
    summary="Month-to-date savings rate, debt load and emergency-fund score",
)
def health_score(db: Session = Depends(get_db)):
    return financial_health(load_transactions(db), load_accounts(db))


@router.get(
    "/summary",
    response_model=PeriodSummaryResponse,
    summary="Summary metrics for a named period, optionally vs the previous one",
)
def summary(
    period: str = Query("month", description="week | month | quarter | year"),
    compare_with_previous: bool = Query(False, alias="compareWithPrevious"),
    spec: FilterSpec = Depends(filter_spec),
    db: Session = Depends(get_db),
):
    try:
        return period_summary(
            load_transactions(db),
            period,
            compare_with_previous=compare_with_previous,
            spec=spec,
        )
    except InvalidRangeError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get(
    "/comparison",
    response_model=ComparisonSchema,
    summary="Filtered totals vs the equal-length preceding window",
)
def comparison(
    spec: FilterSpec = Depends(filter_spec),
    db: Session = Depends(get_db),
):
    rng = _resolve(spec)
    try:
        return compare_periods(load_transactions(db), rng, spec)
    except InvalidRangeError as exc:
        logger.warning("No comparison window for %s: %s", rng.as_dict(), exc)
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("/alerts", response_model=AlertsResponse, summary="Budget utilization and alerts")
def alerts(
    spec: FilterSpec = Depends(filter_spec),
    db: Session = Depends(get_db),
):
    rng = _resolve(spec)
    txns = load_transactions(db)
    lines = evaluate_budgets(
        load_budgets(db), spend_by_category(apply_filters(txns, spec, rng=rng))
    )
    alerts = budget_alerts(lines) + pattern_alerts(apply_filters(txns, spec))
    return {
        "range": rng.as_dict(),
        "budgets": lines,
        "alerts": alerts,
        "summary": alerts_summary(alerts),
    }


@router.get(
    "/insights",
    response_model=InsightsResponse,
    summary="Savings opportunities, recurring payments, and unusual spending",
)
def insights(
    spec: FilterSpec = Depends(filter_spec),
    db: Session = Depends(get_db),
):
    rng = _resolve(spec)
    txns = load_transactions(db)
    lines = evaluate_budgets(
        load_budgets(db), spend_by_category(apply_filters(txns, spec, rng=rng))
    )
    return generate_insights(txns, lines)


@router.get("/dashboard", summary="Full analytics payload for one filter state")
def dashboard(
    spec: FilterSpec = Depends(filter_spec),
    db: Session = Depends(get_db),
):
    try:
        return build_dashboard(load_transactions(db), load_budgets(db), spec)
    except InvalidRangeError as exc:
        logger.warning("Rejected date range %r: %s", spec.date_range, exc)
        raise HTTPException(status_code=422, detail=str(exc)) from exc
