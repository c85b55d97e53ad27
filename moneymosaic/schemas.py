from typing import Literal, Optional

from pydantic import BaseModel, Field


# ─────────────────────────────────────────────────────────────────────────────
# Health
# ─────────────────────────────────────────────────────────────────────────────


class HealthResponse(BaseModel):
    status: str
    version: str


# ─────────────────────────────────────────────────────────────────────────────
# Shared
# ─────────────────────────────────────────────────────────────────────────────


class DateRangeSchema(BaseModel):
    start: str
    end: str


# ─────────────────────────────────────────────────────────────────────────────
# Trends
# ─────────────────────────────────────────────────────────────────────────────


class TrendPointSchema(BaseModel):
    date: str
    income: float
    spending: float
    net: float


class TrendsResponse(BaseModel):
    range: DateRangeSchema
    granularity: Literal["day", "week", "month"]
    points: list[TrendPointSchema]


class WeeklySpendingSchema(BaseModel):
    week: str
    amount: float


class SpendingTrendResponse(BaseModel):
    weekly_trends: list[WeeklySpendingSchema]
    average_weekly_spending: float
    trend_direction: Literal["increasing", "decreasing", "stable"]
    percentage_change: Optional[float] = None


# ─────────────────────────────────────────────────────────────────────────────
# Categories
# ─────────────────────────────────────────────────────────────────────────────


class CategorySliceSchema(BaseModel):
    category: str
    amount: float
    percentage: float
    transaction_count: int


class CategoriesResponse(BaseModel):
    range: DateRangeSchema
    categories: list[CategorySliceSchema]
    all_categories: list[str]


class MerchantTotalSchema(BaseModel):
    merchant: str
    amount: float
    transaction_count: int
    average_amount: float


class CategoryAnalysisRangeSchema(DateRangeSchema):
    days: int
    first_transaction: str
    last_transaction: str


class CategoryDaySchema(BaseModel):
    date: str
    spent: float
    transaction_count: int


class CategoryAnalysisResponse(BaseModel):
    category: str
    total_spent: float
    transaction_count: int
    average_amount: float
    range: CategoryAnalysisRangeSchema
    trends: list[CategoryDaySchema]
    top_merchants: list[MerchantTotalSchema]


# ─────────────────────────────────────────────────────────────────────────────
# Summary / comparison
# ─────────────────────────────────────────────────────────────────────────────


class SummarySchema(BaseModel):
    total_income: float
    total_expenses: float
    net_cash_flow: float
    transaction_count: int
    avg_transaction_amount: float
    top_expense_category: str
    savings_rate: float
    daily_average: Optional[float] = None
    trend: Optional[Literal["positive", "negative", "neutral"]] = None


class MetricChangeSchema(BaseModel):
    current: float
    previous: float
    delta: float
    percentage: Optional[float] = Field(
        default=None, description="Percent change; null when the previous value is zero"
    )


class ComparisonSchema(BaseModel):
    current_range: DateRangeSchema
    previous_range: DateRangeSchema
    current: SummarySchema
    previous: SummarySchema
    changes: dict[str, MetricChangeSchema]
    notes: list[str] = []


class PeriodSummaryResponse(BaseModel):
    period: str
    range: DateRangeSchema
    summary: SummarySchema
    category_breakdown: list[CategorySliceSchema]
    comparison: Optional[ComparisonSchema] = None


# ─────────────────────────────────────────────────────────────────────────────
# Budgets / alerts
# ─────────────────────────────────────────────────────────────────────────────


class BudgetIn(BaseModel):
    amount: float = Field(..., ge=0, description="Budget ceiling in dollars")


class BudgetSchema(BaseModel):
    category: str
    amount: float


class BudgetLineSchema(BaseModel):
    category: str
    budgeted: float
    spent: float
    remaining: float
    percentage: Optional[float] = None
    severity: Literal["healthy", "warning", "over"]
    over_budget: bool


class AlertSchema(BaseModel):
    id: str
    type: Literal["budget", "high_spending", "duplicate_transactions"]
    category: Optional[str] = None
    severity: Literal["low", "medium", "high"]
    message: str
    percentage: Optional[float] = None
    details: Optional[dict] = None


class AlertsSummarySchema(BaseModel):
    total_alerts: int
    high: int
    medium: int
    low: int


class AlertsResponse(BaseModel):
    range: DateRangeSchema
    budgets: list[BudgetLineSchema]
    alerts: list[AlertSchema]
    summary: AlertsSummarySchema


# ─────────────────────────────────────────────────────────────────────────────
# Insights
# ─────────────────────────────────────────────────────────────────────────────


class SavingsOpportunitySchema(BaseModel):
    category: str
    suggestion: str
    potential_savings: float
    reason: Literal["over_budget", "increasing"]


class RecurringPaymentSchema(BaseModel):
    merchant: Optional[str] = None
    merchant_key: str
    amount: float
    frequency: str
    interval_days: int
    occurrences: int
    last_date: str
    next_expected_date: str


class UnusualSpendingSchema(BaseModel):
    id: str
    merchant: Optional[str] = None
    amount: float
    date: str
    reason: str


class CategorySpendingSchema(BaseModel):
    category: str
    spent: float
    avg_monthly: float
    status: Literal["higher", "lower", "consistent"]
    recommendation: str


class InsightsResponse(BaseModel):
    savings_opportunities: list[SavingsOpportunitySchema]
    recurring_payments: list[RecurringPaymentSchema]
    unusual_spending: list[UnusualSpendingSchema]
    category_spending: list[CategorySpendingSchema]


# ─────────────────────────────────────────────────────────────────────────────
# Financial health
# ─────────────────────────────────────────────────────────────────────────────


class FinancialHealthResponse(BaseModel):
    range: DateRangeSchema
    monthly_income: float
    monthly_expenses: float
    total_savings: float
    total_debt: float
    savings_rate: float
    debt_to_income_ratio: float
    emergency_fund_ratio: float
    score: int = Field(..., ge=0, le=100)
