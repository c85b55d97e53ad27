"""Date-range resolution for analytics filters.

Relative windows are inclusive of today: "30" means the 30 calendar days
ending today. Trend charts are capped at ``MAX_TREND_BUCKETS`` daily buckets
anchored to the end of the range; wider windows keep their full extent for
totals but only the most recent days are charted.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import TYPE_CHECKING, Iterator, Optional, Union

if TYPE_CHECKING:
    from .filters import FilterSpec

MAX_TREND_BUCKETS = 30

PERIOD_DAYS = {
    "week": 7,
    "month": 30,
    "quarter": 90,
    "year": 365,
}


class InvalidRangeError(ValueError):
    """Malformed, unparsable, or inverted date range."""


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise InvalidRangeError(
                f"start {self.start.isoformat()} is after end {self.end.isoformat()}"
            )

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def iter_days(self) -> Iterator[date]:
        for offset in range(self.days):
            yield self.start + timedelta(days=offset)

    def previous(self) -> "DateRange":
        return previous_period(self)

    def as_dict(self) -> dict:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


def _parse_iso(value: Optional[str], param: str) -> date:
    if not value:
        raise InvalidRangeError(f"custom range requires {param}")
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise InvalidRangeError(f"{param} must be YYYY-MM-DD, got {value!r}") from None


def resolve_date_range(
    date_range: Union[str, int],
    custom_start: Optional[str] = None,
    custom_end: Optional[str] = None,
    *,
    today: Optional[date] = None,
) -> DateRange:
    today = today or date.today()

    if date_range == "custom":
        start = _parse_iso(custom_start, "start")
        end = _parse_iso(custom_end, "end")
        if start > end:
            raise InvalidRangeError("start must be on or before end")
        return DateRange(start, end)

    try:
        days = int(date_range)
    except (TypeError, ValueError):
        raise InvalidRangeError(
            f"date range must be a day count or 'custom', got {date_range!r}"
        ) from None
    if days < 1:
        raise InvalidRangeError(f"day count must be at least 1, got {days}")
    try:
        start = today - timedelta(days=days - 1)
    except OverflowError:
        raise InvalidRangeError(f"{days} days before {today.isoformat()} is out of range") from None
    return DateRange(start, today)


def resolve_filter_range(spec: "FilterSpec", *, today: Optional[date] = None) -> DateRange:
    return resolve_date_range(
        spec.date_range, spec.custom_start, spec.custom_end, today=today
    )


def resolve_period(period: str, *, today: Optional[date] = None) -> DateRange:
    """Named reporting period (week | month | quarter | year) ending today."""
    if period not in PERIOD_DAYS:
        raise InvalidRangeError(
            f"period must be one of {', '.join(PERIOD_DAYS)}, got {period!r}"
        )
    return resolve_date_range(PERIOD_DAYS[period], today=today)


def trend_bucket_count(rng: DateRange) -> int:
    return min(rng.days, MAX_TREND_BUCKETS)


def previous_period(rng: DateRange) -> DateRange:
    """Equal-length window immediately preceding ``rng``."""
    try:
        prev_end = rng.start - timedelta(days=1)
        prev_start = prev_end - timedelta(days=rng.days - 1)
    except OverflowError:
        raise InvalidRangeError(
            f"no period precedes {rng.start.isoformat()}"
        ) from None
    return DateRange(prev_start, prev_end)
