"""Normalization boundary between aggregator/storage records and the engine.

Covers:
  - Date parsing (common bank formats, ISO fallback)
  - Amount parsing and dollars → cents conversion
  - Sign-convention enforcement (engine convention: outflow positive)
  - Category coalescing (multi-label arrays → single primary label)
  - Merchant fallback from the raw description
"""

import decimal
import re
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Optional

from .records import TransactionRecord

UNCATEGORIZED = "Uncategorized"

OUTFLOW_POSITIVE = "outflow_positive"
INFLOW_POSITIVE = "inflow_positive"
_SIGN_CONVENTIONS = {OUTFLOW_POSITIVE, INFLOW_POSITIVE}


class NormalizationError(ValueError):
    """A raw record cannot be turned into a TransactionRecord."""


# ─────────────────────────────────────────────────────────────────────────────
# Date parsing
# ─────────────────────────────────────────────────────────────────────────────

_DATE_FORMATS = [
    "%Y-%m-%d",             # 2026-01-15
    "%m/%d/%Y",             # 01/15/2026
    "%Y/%m/%d",             # 2026/01/15
    "%m/%d/%y",             # 01/15/26
    "%d %b %Y",             # 15 Jan 2026
    "%b %d, %Y",            # Jan 15, 2026
    "%Y-%m-%dT%H:%M:%S",    # 2026-01-15T12:00:00
    "%Y-%m-%dT%H:%M:%S.%f", # 2026-01-15T12:00:00.000000
]


def parse_date(value: Any) -> date:
    """Return a calendar day; time components and timezones are dropped."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    v = str(value or "").strip()
    if not v:
        raise ValueError("empty date string")
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(v, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(v).date()
    except ValueError:
        raise ValueError(f"unrecognised date {value!r}") from None


# ─────────────────────────────────────────────────────────────────────────────
# Amount parsing
# ─────────────────────────────────────────────────────────────────────────────


def parse_amount(value: Any) -> float:
    """Parse an amount cell.

    Handles:
      42.99  |  -42.99  |  (42.99)  |  $1,234.56  |  1 234.56
    Numbers pass through unchanged.
    """
    if isinstance(value, bool):
        raise ValueError("boolean is not an amount")
    if isinstance(value, (int, float, decimal.Decimal)):
        return float(value)

    v = str(value or "").strip()
    if not v:
        raise ValueError("empty amount string")

    negative = v.startswith("(") and v.endswith(")")
    if negative:
        v = v[1:-1]

    v = v.lstrip("$€£").strip()
    v = v.replace(" ", "")
    v = re.sub(r",(?=\d{3}(?:[,.]|$))", "", v)

    amount = float(v)
    return -amount if negative else amount


def to_cents(amount: float) -> int:
    """Convert dollars to integer cents (ROUND_HALF_UP)."""
    return int(
        (decimal.Decimal(str(amount)) * 100).quantize(
            decimal.Decimal("1"), rounding=decimal.ROUND_HALF_UP
        )
    )


# ─────────────────────────────────────────────────────────────────────────────
# Category / merchant
# ─────────────────────────────────────────────────────────────────────────────


def coalesce_category(value: Any) -> str:
    """Collapse a label or list of labels into the single primary category."""
    if value is None:
        return UNCATEGORIZED
    if isinstance(value, str):
        return value.strip() or UNCATEGORIZED
    if isinstance(value, (list, tuple)):
        for item in value:
            if isinstance(item, str) and item.strip():
                return item.strip()
        return UNCATEGORIZED
    raise NormalizationError(f"unsupported category value {value!r}")


# Payment-network prefixes that carry no merchant signal.
_PREFIX_RE = re.compile(
    r"^(?:"
    r"DEBIT CARD (?:PURCHASE|PAYMENT)\s+|"
    r"RECURRING (?:CHARGE|PAYMENT|PMT)\s+|"
    r"POS (?:PURCHASE|DEBIT)?\s*|"
    r"ACH (?:DEBIT|CREDIT|PMT|PAYMENT)?\s*|"
    r"SQ\s*\*\s*|"
    r"TST\s*\*\s*|"
    r"PAYPAL\s*\*?\s*"
    r")",
    re.IGNORECASE,
)
_TRAILING_REF_RE = re.compile(r"(?:\s+(?:#\w+|\d{4,}|\d{2}/\d{2}))+$")


def merchant_from_description(raw: str) -> Optional[str]:
    """Best-effort merchant name from a bank description.

    "SQ *BLUE BOTTLE #1234"   → "Blue Bottle"
    "ACH DEBIT NETFLIX.COM"   → "Netflix.Com"
    """
    s = (raw or "").strip()
    if not s:
        return None
    s = _PREFIX_RE.sub("", s).strip()
    s = s.split("*", 1)[0].strip() if "*" in s else s
    s = _TRAILING_REF_RE.sub("", s)
    s = re.sub(r"\s+", " ", s).strip()
    return s.title() if s else None


# ─────────────────────────────────────────────────────────────────────────────
# Record construction
# ─────────────────────────────────────────────────────────────────────────────


def _first(raw: Mapping, *keys: str) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def normalize_transaction(
    raw: Mapping,
    *,
    sign: str = OUTFLOW_POSITIVE,
) -> TransactionRecord:
    """Build an engine record from a loosely-typed mapping.

    ``sign`` states how the source encodes direction. Sources using
    inflow-positive amounts (most bank CSV exports) are flipped so that the
    engine always sees expenses as positive.
    """
    if sign not in _SIGN_CONVENTIONS:
        raise NormalizationError(f"unknown sign convention {sign!r}")

    txn_id = _first(raw, "id", "transaction_id")
    if txn_id is None or str(txn_id).strip() == "":
        raise NormalizationError("transaction is missing an id")

    raw_date = _first(raw, "date", "posted_date")
    if raw_date is None:
        raise NormalizationError(f"transaction {txn_id} is missing a date")
    try:
        posted = parse_date(raw_date)
    except ValueError as exc:
        raise NormalizationError(f"transaction {txn_id}: {exc}") from exc

    raw_amount = _first(raw, "amount", "amount_cents")
    if raw_amount is None:
        raise NormalizationError(f"transaction {txn_id} is missing an amount")
    try:
        if "amount" in raw and raw["amount"] is not None:
            cents = to_cents(parse_amount(raw["amount"]))
        else:
            cents = int(raw["amount_cents"])
    except (ValueError, TypeError, decimal.InvalidOperation) as exc:
        raise NormalizationError(f"transaction {txn_id}: bad amount {raw_amount!r}") from exc

    if sign == INFLOW_POSITIVE:
        cents = -cents

    name = str(_first(raw, "name", "description") or "")
    merchant = _first(raw, "merchant_name", "merchant")
    if merchant is not None:
        merchant = str(merchant).strip() or None
    if merchant is None:
        merchant = merchant_from_description(name)

    return TransactionRecord(
        id=str(txn_id),
        date=posted,
        amount_cents=cents,
        category=coalesce_category(_first(raw, "category", "category_primary")),
        account_id=str(_first(raw, "account_id", "accountId") or ""),
        merchant_name=merchant,
        name=name,
        pending=bool(raw.get("pending", False)),
    )
