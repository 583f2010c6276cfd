"""Attribution of recurring expenses to an arbitrary date window.

A recurring expense is active over ``[start_date, end_date or range_end]``.
Only the part overlapping the query window is charged:

* DAILY   -> amount * days
* WEEKLY  -> amount * days / 7
* MONTHLY -> amount * months
* ANNUAL  -> amount * months / 12

``months`` counts calendar-month indices touched by the overlap, not elapsed
time: 1-28 February and 1-31 March both count as one month, 31 January to
1 February counts as two.
"""

import logging
from datetime import date, datetime
from typing import Optional, Protocol

from models import Cadence

logger = logging.getLogger(__name__)


class Prorated(Protocol):
    amount_cents: int
    cadence: str
    start_date: date
    end_date: Optional[date]


def _as_date(value: date) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def days_between_inclusive(start: date, end: date) -> int:
    return (_as_date(end) - _as_date(start)).days + 1


def months_between_inclusive(start: date, end: date) -> int:
    return (end.year - start.year) * 12 + (end.month - start.month) + 1


def overlap_range(
    start: date, end: date, range_start: date, range_end: date
) -> Optional[tuple[date, date]]:
    effective_start = max(_as_date(start), _as_date(range_start))
    effective_end = min(_as_date(end), _as_date(range_end))
    if effective_end < effective_start:
        return None
    return effective_start, effective_end


def parse_cadence(value: object) -> Optional[Cadence]:
    if isinstance(value, Cadence):
        return value
    try:
        return Cadence(str(value).upper())
    except ValueError:
        return None


def attributed_amount(expense: Prorated, range_start: date, range_end: date) -> float:
    end = expense.end_date or range_end
    overlap = overlap_range(expense.start_date, end, range_start, range_end)
    if overlap is None:
        return 0.0

    cadence = parse_cadence(expense.cadence)
    if cadence is None:
        logger.warning(
            f"proration_skipped: expense_id={getattr(expense, 'id', None)} "
            f"reason=unknown_cadence cadence={expense.cadence!r}"
        )
        return 0.0
    amount = expense.amount_cents
    if amount is None or amount < 0:
        logger.warning(
            f"proration_skipped: expense_id={getattr(expense, 'id', None)} "
            f"reason=invalid_amount amount={amount!r}"
        )
        return 0.0

    start, stop = overlap
    day_count = days_between_inclusive(start, stop)
    month_count = months_between_inclusive(start, stop)

    if cadence == Cadence.daily:
        return float(amount * day_count)
    if cadence == Cadence.weekly:
        return amount * (day_count / 7)
    if cadence == Cadence.monthly:
        return float(amount * month_count)
    return amount * (month_count / 12)


def total_attributed(
    expenses: list[Prorated], range_start: date, range_end: date
) -> float:
    return sum(
        (attributed_amount(expense, range_start, range_end) for expense in expenses),
        0.0,
    )
