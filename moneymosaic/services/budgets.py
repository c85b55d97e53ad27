"""Budget utilization: per-category spend vs budget ceilings, with alerts."""

from collections.abc import Mapping
from typing import Iterable, Optional

from .records import BudgetRecord, cents_to_dollars

# Utilization thresholds, percent of budget
WARNING_THRESHOLD = 80.0
OVER_THRESHOLD = 100.0

SEVERITY_OVER = "over"
SEVERITY_WARNING = "warning"
SEVERITY_HEALTHY = "healthy"

_ALERT_LEVEL = {
    SEVERITY_OVER: "high",
    SEVERITY_WARNING: "medium",
    SEVERITY_HEALTHY: "low",
}

# Budget baselines derived from history when the user has none configured
_HISTORY_HEADROOM = 1.1
_NO_HISTORY_HEADROOM = 1.2


def classify_severity(percentage: Optional[float], *, over_budget: bool = False) -> str:
    if over_budget or percentage is None or percentage > OVER_THRESHOLD:
        return SEVERITY_OVER
    if percentage >= WARNING_THRESHOLD:
        return SEVERITY_WARNING
    return SEVERITY_HEALTHY


def _budget_line(category: str, budgeted_cents: int, spent_cents: int) -> dict:
    if budgeted_cents <= 0:
        # Any spend against a zero ceiling is an overage; no ratio is defined.
        percentage = None
        over_budget = True
    else:
        percentage = round(spent_cents / budgeted_cents * 100, 2)
        over_budget = spent_cents > budgeted_cents

    return {
        "category": category,
        "budgeted": cents_to_dollars(budgeted_cents),
        "spent": cents_to_dollars(spent_cents),
        "remaining": cents_to_dollars(budgeted_cents - spent_cents),
        "percentage": percentage,
        "severity": classify_severity(percentage, over_budget=over_budget),
        "over_budget": over_budget,
    }


def evaluate_budgets(
    budgets: Iterable[BudgetRecord],
    spend_by_category: Mapping[str, int],
) -> list[dict]:
    """One line per budget, most utilized first (zero-ceiling lines lead)."""
    lines = [
        _budget_line(b.category, b.budgeted_cents, spend_by_category.get(b.category, 0))
        for b in budgets
    ]
    lines.sort(
        key=lambda line: (
            line["percentage"] is not None,
            -(line["percentage"] or 0.0),
            line["category"],
        )
    )
    return lines


def budget_alerts(lines: Iterable[dict]) -> list[dict]:
    alerts = []
    for line in lines:
        severity = line["severity"]
        if severity == SEVERITY_HEALTHY:
            continue
        category = line["category"]
        if line["percentage"] is None:
            message = f"{category} has a zero budget (${line['spent']:,.2f} spent)"
        elif severity == SEVERITY_OVER:
            message = (
                f"{category} is over budget by ${-line['remaining']:,.2f} "
                f"({line['percentage']:.0f}% of ${line['budgeted']:,.2f})"
            )
        else:
            message = (
                f"{category} has used {line['percentage']:.0f}% of its "
                f"${line['budgeted']:,.2f} budget"
            )
        alerts.append({
            "id": f"budget-{category}",
            "type": "budget",
            "category": category,
            "severity": _ALERT_LEVEL[severity],
            "message": message,
            "percentage": line["percentage"],
        })
    return alerts


def suggest_budgets(
    current_spend: Mapping[str, int],
    previous_spend: Mapping[str, int],
) -> list[BudgetRecord]:
    """Budget ceilings from last period's spend plus headroom.

    Categories without history get headroom over the current spend instead.
    """
    suggestions = []
    for category in sorted(set(current_spend) | set(previous_spend)):
        prev = previous_spend.get(category, 0)
        if prev > 0:
            budgeted = round(prev * _HISTORY_HEADROOM)
        else:
            budgeted = round(current_spend.get(category, 0) * _NO_HISTORY_HEADROOM)
        suggestions.append(BudgetRecord(category=category, budgeted_cents=budgeted))
    return suggestions
