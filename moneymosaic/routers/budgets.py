from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas import BudgetIn, BudgetSchema
from ..services.budgets import suggest_budgets
from ..services.categories import spend_by_category
from ..services.daterange import previous_period, resolve_period
from ..services.normalizer import to_cents
from ..services.repository import delete_budget, load_budgets, load_transactions, upsert_budget

router = APIRouter(prefix="/budgets", tags=["budgets"])


@router.get("/", response_model=list[BudgetSchema], summary="Configured budget ceilings")
def list_budgets(db: Session = Depends(get_db)):
    return [
        BudgetSchema(category=b.category, amount=b.budgeted_cents / 100)
        for b in load_budgets(db)
    ]


@router.get(
    "/suggestions",
    response_model=list[BudgetSchema],
    summary="Ceilings derived from last month's spending",
)
def budget_suggestions(db: Session = Depends(get_db)):
    current = resolve_period("month")
    previous = previous_period(current)
    txns = load_transactions(db, previous.start.isoformat(), current.end.isoformat())
    current_spend = spend_by_category(t for t in txns if current.contains(t.date))
    previous_spend = spend_by_category(t for t in txns if previous.contains(t.date))
    return [
        BudgetSchema(category=b.category, amount=round(b.budgeted_cents / 100, 2))
        for b in suggest_budgets(current_spend, previous_spend)
    ]


@router.put("/{category}", response_model=BudgetSchema, summary="Create or update a budget")
def put_budget(category: str, body: BudgetIn, db: Session = Depends(get_db)):
    if not category.strip():
        raise HTTPException(status_code=422, detail="category must not be blank")
    budget = upsert_budget(db, category, to_cents(body.amount))
    return BudgetSchema(category=budget.category, amount=budget.amount_cents / 100)


@router.delete("/{category}", status_code=204, summary="Remove a budget")
def remove_budget(category: str, db: Session = Depends(get_db)):
    if not delete_budget(db, category):
        raise HTTPException(status_code=404, detail=f"No budget for {category!r}")
