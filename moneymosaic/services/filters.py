"""Filter predicate shared by every aggregator."""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from .daterange import DateRange
from .records import TransactionRecord


@dataclass(frozen=True)
class FilterSpec:
    date_range: str = "30"
    custom_start: Optional[str] = None
    custom_end: Optional[str] = None
    categories: frozenset[str] = field(default_factory=frozenset)
    accounts: frozenset[str] = field(default_factory=frozenset)
    amount_min: Optional[float] = None   # dollars, on the absolute amount
    amount_max: Optional[float] = None
    search_term: str = ""
    include_pending: bool = True


def matches_filters(
    txn: TransactionRecord,
    spec: FilterSpec,
    *,
    rng: Optional[DateRange] = None,
) -> bool:
    if rng is not None and not rng.contains(txn.date):
        return False
    if spec.categories and txn.category not in spec.categories:
        return False
    if spec.accounts and txn.account_id not in spec.accounts:
        return False
    if not spec.include_pending and txn.pending:
        return False

    amount = abs(txn.amount_cents) / 100
    if spec.amount_min is not None and amount < spec.amount_min:
        return False
    if spec.amount_max is not None and amount > spec.amount_max:
        return False

    term = spec.search_term.strip().lower()
    if term:
        haystack = " ".join(
            s for s in (txn.name, txn.merchant_name or "", txn.category) if s
        ).lower()
        if term not in haystack:
            return False
    return True


def apply_filters(
    transactions: Iterable[TransactionRecord],
    spec: FilterSpec,
    *,
    rng: Optional[DateRange] = None,
) -> list[TransactionRecord]:
    return [t for t in transactions if matches_filters(t, spec, rng=rng)]


def count_active_filters(spec: FilterSpec) -> int:
    """Number of non-date filters in effect (drives the filter-bar badge)."""
    count = 0
    if spec.categories:
        count += 1
    if spec.accounts:
        count += 1
    if spec.amount_min is not None or spec.amount_max is not None:
        count += 1
    if spec.search_term.strip():
        count += 1
    if not spec.include_pending:
        count += 1
    return count
