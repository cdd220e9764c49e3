"""Base utilities and helpers for statistics services.

Holds the period resolver (period token -> concrete date range, plus the
equal-length previous range used for comparisons) and the derived-metric
calculations shared by every report. Rates are kept at full precision here;
``round_metric`` is applied only when a value is placed in a response.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from decimal import ROUND_HALF_UP, Decimal

from storefront.dashboard.services.statistics.config import PERIOD_TOKENS

# Smallest representable step between two ranges; adjacent ranges are
# separated by exactly this much.
RESOLUTION = timedelta(microseconds=1)

TREND_UP = "up"
TREND_DOWN = "down"
TREND_STABLE = "stable"

Number = int | float | Decimal
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class DateRange:
    """Inclusive [start, end] pair of timezone-aware instants."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"Range start {self.start} is after end {self.end}")

    @property
    def duration_days(self) -> int:
        """Whole days between start and end."""
        return (self.end - self.start).days

    @property
    def days(self) -> int:
        """Number of days covered, counting both endpoints."""
        return self.duration_days + 1

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


@dataclass(frozen=True)
class PeriodComparison:
    """A range and the equal-length range immediately before it."""

    current: DateRange
    previous: DateRange


class PeriodResolver:
    """Turns period tokens into date ranges relative to an injected clock.

    Args:
        clock: Returns the current instant (timezone-aware).
        tz: Zone in which day, week, month and year boundaries are taken.
        week_start: First day of the week, 0 = Monday.
        default_period: Token used when an unknown token is given.
    """

    def __init__(
        self,
        clock: Clock = utc_now,
        tz: tzinfo = UTC,
        week_start: int = 0,
        default_period: str = "month",
    ):
        self.clock = clock
        self.tz = tz
        self.week_start = week_start
        self.default_period = default_period

    def now(self) -> datetime:
        return self.clock().astimezone(self.tz)

    def normalize(self, period: str | None) -> str:
        """Return the token that will actually be used for ``period``."""
        if period in PERIOD_TOKENS:
            return period  # type: ignore[return-value]
        return self.default_period

    def resolve(self, period: str | None) -> DateRange:
        """Get the calendar range for a period token.

        Args:
            period: One of 'today', 'week', 'month', 'year'. Anything else
                resolves as the default period.

        Returns:
            DateRange from the first to the last instant of the current
            day, week, month or year.
        """
        token = self.normalize(period)
        today_start = self.now().replace(hour=0, minute=0, second=0, microsecond=0)

        if token == "today":
            start = today_start
            next_start = start + timedelta(days=1)
        elif token == "week":
            offset = (today_start.weekday() - self.week_start) % 7
            start = today_start - timedelta(days=offset)
            next_start = start + timedelta(days=7)
        elif token == "year":
            start = today_start.replace(month=1, day=1)
            next_start = start.replace(year=start.year + 1)
        else:
            start = today_start.replace(day=1)
            if start.month == 12:
                next_start = start.replace(year=start.year + 1, month=1)
            else:
                next_start = start.replace(month=start.month + 1)

        return DateRange(start, next_start - RESOLUTION)

    def custom(self, start_date: date, end_date: date) -> DateRange:
        """Range covering whole calendar days from start_date to end_date.

        Raises:
            ValueError: If end_date is before start_date.
        """
        return DateRange(
            datetime.combine(start_date, time.min, tzinfo=self.tz),
            datetime.combine(end_date, time.max, tzinfo=self.tz),
        )

    @staticmethod
    def previous_range(current: DateRange) -> DateRange:
        """Get the previous range of the same duration.

        The previous range ends one RESOLUTION step before ``current.start``
        and spans exactly ``current.end - current.start``, so the two never
        overlap and leave no gap.
        """
        span = current.end - current.start
        previous_end = current.start - RESOLUTION
        return DateRange(previous_end - span, previous_end)

    def comparison(self, current: DateRange) -> PeriodComparison:
        return PeriodComparison(current=current, previous=self.previous_range(current))


# ============ Derived metrics ============


def growth_rate(previous: Number, current: Number) -> float:
    """Percentage change from ``previous`` to ``current``.

    Returns 100.0 if previous is 0 and current > 0, and 0.0 if both are 0.
    Otherwise the change is not clamped and may be negative or exceed 100.
    """
    previous_value = float(previous)
    current_value = float(current)
    if previous_value == 0:
        return 100.0 if current_value > 0 else 0.0
    return ((current_value - previous_value) / previous_value) * 100


def trend_label(change: Number) -> str:
    if change > 0:
        return TREND_UP
    if change < 0:
        return TREND_DOWN
    return TREND_STABLE


def rate(part: Number, whole: Number) -> float:
    """``part`` as a percentage of ``whole``; 0.0 when ``whole`` is 0."""
    if not whole:
        return 0.0
    return (float(part) / float(whole)) * 100


def repeat_rate(order_counts: Iterable[int]) -> float:
    """Share of buyers with two or more orders, as a percentage."""
    counts = list(order_counts)
    return rate(sum(1 for count in counts if count >= 2), len(counts))


def average_order_value(total_revenue: Number, order_count: int) -> Decimal:
    if order_count <= 0:
        return Decimal("0")
    return Decimal(str(total_revenue)) / order_count


def discounted_price(price: Number, discount_percent: Number | None) -> Decimal:
    """Price after applying a percentage discount, to the cent."""
    base = Decimal(str(price))
    discount = Decimal(str(discount_percent or 0))
    final = base * (Decimal("100") - discount) / Decimal("100")
    return final.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def round_metric(value: Number) -> float:
    """Round a metric for exposure in a report (2 decimal places)."""
    return round(float(value), 2)
