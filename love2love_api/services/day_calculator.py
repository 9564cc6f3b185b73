"""
Content day arithmetic.

Every couple has a start date (UTC midnight of day 1). The content shown on a
given date is derived from the number of whole UTC days elapsed since then,
cycled over the catalog so it never runs out. The couple's timezone only
decides *when* content is generated; it never shifts the day number.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

from love2love_api.models.content_kind import ContentKind
from love2love_api.models.settings import CoupleContentSettings

DateLike = Union[date, datetime]


def to_utc(value: datetime) -> datetime:
    # Naive datetimes are assumed to already be in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_midnight(value: datetime) -> datetime:
    return to_utc(value).replace(hour=0, minute=0, second=0, microsecond=0)


def utc_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return to_utc(value).date()
    return value


def utc_date_string(value: DateLike) -> str:
    """yyyy-MM-dd of the UTC calendar date."""
    return utc_date(value).isoformat()


def next_date_string(value: DateLike) -> str:
    return (utc_date(value) + timedelta(days=1)).isoformat()


def expected_day(start_date: datetime, on: DateLike) -> int:
    """Uncycled 1-based day number of `on` relative to `start_date`."""
    days_since_start = (utc_date(on) - utc_date(start_date)).days
    return days_since_start + 1


def cycle_day(day: int, catalog_size: int) -> int:
    if catalog_size < 1:
        raise ValueError(f"catalog_size must be positive, got {catalog_size}")
    return ((day - 1) % catalog_size) + 1


def calculate_content_day(
    settings: Optional[CoupleContentSettings],
    now: Optional[datetime] = None,
    catalog_size: Optional[int] = None,
) -> int:
    if settings is None or settings.start_date is None:
        return 1  # First visit

    now = now or datetime.now(timezone.utc)
    size = catalog_size or ContentKind.QUESTION.catalog_size
    # Dates before the start (clock skew or a reset) count as day 1
    day = max(expected_day(settings.start_date, now), 1)
    return cycle_day(day, size)


def content_key(kind: ContentKind, day: int) -> str:
    return f"{kind.key_prefix}_{cycle_day(day, kind.catalog_size)}"
