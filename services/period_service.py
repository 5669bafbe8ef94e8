"""
Period selection and growth arithmetic.

Resolves named analysis windows into calendar-month-aligned date ranges
and defines the growth percentage used everywhere in client analytics.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, Optional, Tuple, Union

import structlog
from dateutil.relativedelta import relativedelta

from exceptions import InvalidPeriodError
from models.analytics import DateRange, PeriodToken, PeriodWindow

logger = structlog.get_logger(__name__)

# Months covered by each bounded period; None = unbounded
PERIOD_MONTHS: Dict[PeriodToken, Optional[int]] = {
    PeriodToken.ONE_MONTH: 1,
    PeriodToken.THREE_MONTHS: 3,
    PeriodToken.SIX_MONTHS: 6,
    PeriodToken.ONE_YEAR: 12,
    PeriodToken.ALL_TIME: None,
}

# Short aliases used by the dashboards' period filter
PERIOD_ALIASES: Dict[str, PeriodToken] = {
    "1m": PeriodToken.ONE_MONTH,
    "3m": PeriodToken.THREE_MONTHS,
    "6m": PeriodToken.SIX_MONTHS,
    "1y": PeriodToken.ONE_YEAR,
    "all": PeriodToken.ALL_TIME,
}

ZERO = Decimal("0")
HUNDRED = Decimal("100")

DateLike = Union[date, datetime]


def parse_period(value: Union[str, PeriodToken]) -> PeriodToken:
    """
    Parse a period token in long ("3 months") or short ("3m") form.

    Raises:
        InvalidPeriodError: If the token is not recognised
    """
    if isinstance(value, PeriodToken):
        return value

    normalized = (value or "").strip().lower()
    if normalized in PERIOD_ALIASES:
        return PERIOD_ALIASES[normalized]
    try:
        return PeriodToken(normalized)
    except ValueError:
        raise InvalidPeriodError(
            str(value),
            valid=[p.value for p in PeriodToken] + list(PERIOD_ALIASES),
        )


def to_reference_date(now: Optional[DateLike] = None) -> date:
    """Reduce an optional 'now' to a calendar date (wall clock by default)."""
    if now is None:
        return date.today()
    if isinstance(now, datetime):
        return now.date()
    return now


def month_start(day: date) -> date:
    """First day of the month containing day."""
    return day.replace(day=1)


def month_end(day: date) -> date:
    """Last day of the month containing day."""
    return month_start(day) + relativedelta(months=1) - timedelta(days=1)


def shift_months(day: date, months: int) -> date:
    """Move day by a number of months, clamping to the month's last day."""
    return day + relativedelta(months=months)


def calendar_month(reference: date, months_back: int = 0) -> DateRange:
    """Calendar month that is months_back months before the reference month."""
    anchor = shift_months(month_start(reference), -months_back)
    return DateRange(start=anchor, end=month_end(anchor))


def trailing_ranges(reference: date, months: int) -> Tuple[DateRange, DateRange]:
    """
    Rolling span of N months ending on the reference date, and the N months
    before it.

    The comparison range ends the day before the current range starts so
    an invoice never counts in both.
    """
    current_start = shift_months(reference, -months)
    previous_start = shift_months(reference, -2 * months)
    return (
        DateRange(start=current_start, end=reference),
        DateRange(start=previous_start, end=current_start - timedelta(days=1)),
    )


def resolve_period_window(
    period: Union[str, PeriodToken],
    now: Optional[DateLike] = None,
) -> PeriodWindow:
    """
    Resolve a named period into concrete window boundaries.

    For N months the window runs from the first day of the month N months
    back through the last day of the current month. The previous window
    has the same number of calendar months and ends the day before.
    "all time" is unbounded and has no previous window.

    Args:
        period: Period token ("3 months", "3m", ...)
        now: Reference timestamp (defaults to today)

    Returns:
        PeriodWindow with current and previous ranges
    """
    token = parse_period(period)
    reference = to_reference_date(now)
    months = PERIOD_MONTHS[token]

    if months is None:
        return PeriodWindow(
            period=token,
            reference_date=reference,
            current=DateRange(start=date.min, end=date.max),
            previous=None,
        )

    current = DateRange(
        start=shift_months(month_start(reference), -months),
        end=month_end(reference),
    )
    previous_start = shift_months(month_start(reference), -(2 * months + 1))
    previous = DateRange(
        start=previous_start,
        end=current.start - timedelta(days=1),
    )

    logger.debug(
        "period_window_resolved",
        period=token.value,
        current=f"{current.start} to {current.end}",
        previous=f"{previous.start} to {previous.end}",
    )
    return PeriodWindow(
        period=token,
        reference_date=reference,
        current=current,
        previous=previous,
    )


def calculate_growth(current: Decimal, previous: Decimal) -> Decimal:
    """
    Percentage change from previous to current.

    - previous > 0: (current - previous) / previous * 100
    - previous == 0, current > 0: +100
    - previous > 0, current == 0: -100 (covered by the formula)
    - both zero: 0
    """
    if previous > 0:
        return (current - previous) / previous * HUNDRED
    if current > 0:
        return HUNDRED
    return ZERO
