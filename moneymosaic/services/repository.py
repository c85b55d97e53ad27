"""Loads stored rows and hands them to the engine as normalized records."""

from typing import Optional

from sqlalchemy.orm import Session

from ..models import Account, Budget, Transaction
from .normalizer import normalize_transaction
from .records import AccountRecord, BudgetRecord, TransactionRecord


def _row_to_record(t: Transaction) -> TransactionRecord:
    return normalize_transaction({
        "id": t.transaction_id,
        "date": t.posted_date,
        "amount_cents": t.amount_cents,
        "category": t.category_primary,
        "account_id": t.account_id,
        "merchant_name": t.merchant_name,
        "name": t.name,
        "pending": t.pending,
    })


def load_transactions(
    db: Session,
    from_date: Optional[str] = None,
    to_date: Optional[str] = None,
) -> list[TransactionRecord]:
    q = db.query(Transaction)
    if from_date:
        q = q.filter(Transaction.posted_date >= from_date)
    if to_date:
        q = q.filter(Transaction.posted_date <= to_date)
    rows = q.order_by(Transaction.posted_date, Transaction.transaction_id).all()
    return [_row_to_record(t) for t in rows]


def load_accounts(db: Session) -> list[AccountRecord]:
    rows = db.query(Account).order_by(Account.account_id).all()
    return [
        AccountRecord(
            account_id=a.account_id,
            type=a.type,
            balance_cents=a.current_balance_cents or 0,
        )
        for a in rows
    ]


def load_budgets(db: Session) -> list[BudgetRecord]:
    rows = db.query(Budget).order_by(Budget.category).all()
    return [BudgetRecord(category=b.category, budgeted_cents=b.amount_cents) for b in rows]


def upsert_budget(db: Session, category: str, amount_cents: int) -> Budget:
    budget = db.query(Budget).filter(Budget.category == category).first()
    if budget is None:
        budget = Budget(category=category, amount_cents=amount_cents)
        db.add(budget)
    else:
        budget.amount_cents = amount_cents
    db.commit()
    db.refresh(budget)
    return budget


def delete_budget(db: Session, category: str) -> bool:
    budget = db.query(Budget).filter(Budget.category == category).first()
    if budget is None:
        return False
    db.delete(budget)
    db.commit()
    return True
