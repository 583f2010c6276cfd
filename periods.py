from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterator, Optional
from zoneinfo import ZoneInfo

from config import get_settings


@dataclass(frozen=True)
class Period:
    slug: str
    start: date
    end: date

    @property
    def day_count(self) -> int:
        return max(0, (self.end - self.start).days + 1)

    def days(self) -> Iterator[date]:
        for offset in range(self.day_count):
            yield self.start + timedelta(days=offset)

    def label(self) -> str:
        return f"{self.start.isoformat()}to{self.end.isoformat()}"


def local_now() -> datetime:
    """Wall-clock time in the configured timezone, naive like stored timestamps."""
    tz = ZoneInfo(get_settings().timezone)
    return datetime.now(tz).replace(tzinfo=None)


def local_today() -> date:
    return local_now().date()


def _parse_bounds(start: str, end: str) -> tuple[date, date]:
    start_date = date.fromisoformat(start[:10])
    end_date = date.fromisoformat(end[:10])
    if start_date > end_date:
        raise ValueError("Start date must be before end date")
    return start_date, end_date


def custom_period(start: Optional[str], end: Optional[str]) -> Period:
    if not start or not end:
        raise ValueError("startDate and endDate required")
    start_date, end_date = _parse_bounds(start, end)
    return Period("custom", start_date, end_date)


def trailing_days(days: int, *, today: Optional[date] = None) -> Period:
    """``days`` back from today through today, both ends included."""
    if days < 0:
        raise ValueError("days must not be negative")
    today = today or local_today()
    return Period(f"last_{days}_days", today - timedelta(days=days), today)


def month_to_date(*, today: Optional[date] = None) -> Period:
    today = today or local_today()
    return Period("month_to_date", today.replace(day=1), today)


def resolve_trend_period(
    start: Optional[str],
    end: Optional[str],
    days: Optional[str],
    *,
    today: Optional[date] = None,
) -> Period:
    if start and end:
        return custom_period(start, end)
    if days:
        try:
            count = int(days)
        except ValueError as exc:
            raise ValueError(f"Invalid days value: {days}") from exc
    else:
        count = get_settings().default_trend_days
    return trailing_days(count, today=today)


def resolve_statement_period(
    start: Optional[str],
    end: Optional[str],
    *,
    today: Optional[date] = None,
) -> Period:
    today = today or local_today()
    default = month_to_date(today=today)
    start_date = date.fromisoformat(start[:10]) if start else default.start
    end_date = date.fromisoformat(end[:10]) if end else default.end
    if start_date > end_date:
        raise ValueError("Start date must be before end date")
    slug = "custom" if start or end else default.slug
    return Period(slug, start_date, end_date)
