from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from .database import Base


class Account(Base):
    __tablename__ = "accounts"

    account_id = Column(String(100), primary_key=True)
    name = Column(String(255), nullable=False)
    type = Column(String(20), nullable=True)   # depository | credit | investment
    institution = Column(String(255), nullable=True)
    current_balance_cents = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    transactions = relationship("Transaction", back_populates="account")


class Transaction(Base):
    __tablename__ = "transactions"

    transaction_id = Column(String(100), primary_key=True)
    account_id = Column(String(100), ForeignKey("accounts.account_id"), nullable=False, index=True)
    posted_date = Column(String(20), nullable=False, index=True)   # YYYY-MM-DD
    name = Column(Text, nullable=False, default="")
    merchant_name = Column(String(255), nullable=True)
    amount_cents = Column(Integer, nullable=False)   # positive = outflow
    category_primary = Column(String(100), nullable=True)
    pending = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    account = relationship("Account", back_populates="transactions")


class Budget(Base):
    __tablename__ = "budgets"

    id = Column(Integer, primary_key=True, index=True)
    category = Column(String(100), nullable=False, unique=True)
    amount_cents = Column(Integer, nullable=False)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
