"""
Calendar and Month-Key Utilities

Every due date in this system is a CIVIL calendar day: the day a person
has to pay something. It is never an instant. All helpers here work on
plain `date` objects so that no timezone offset can shift the day
component (the classic "shows one day early" bug).

The only place an instant enters is "today", which is always taken in a
single fixed zone (America/Sao_Paulo by default) so that overdue and
due-soon judgments do not depend on where the code happens to run.

MonthKey format: "<MonthName> de <Year>", e.g. "Março de 2026".
"""

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Iterable, Optional, Union

import structlog
from dateutil import tz
from dateutil.relativedelta import relativedelta

from financas.config import get_settings


logger = structlog.get_logger(__name__)

MONTH_NAMES = (
    "Janeiro", "Fevereiro", "Março", "Abril", "Maio", "Junho",
    "Julho", "Agosto", "Setembro", "Outubro", "Novembro", "Dezembro",
)

MONTH_KEY_SEPARATOR = " de "


class InvalidMonthKeyError(ValueError):
    """A MonthKey string does not follow '<MonthName> de <Year>'."""

    def __init__(self, month_key: str):
        self.month_key = month_key
        super().__init__(f"Invalid month key: {month_key!r}")


# =============================================================================
# MONTH KEYS
# =============================================================================

def parse_month_key(month_key: str) -> Optional[tuple[int, int]]:
    """
    Split a MonthKey into (month_index 0-11, year).

    Returns None when the name is unknown or the year is not numeric.
    """
    if not isinstance(month_key, str):
        return None

    parts = month_key.split(MONTH_KEY_SEPARATOR)
    if len(parts) != 2:
        return None

    month_name, year_str = parts[0].strip(), parts[1].strip()
    if month_name not in MONTH_NAMES or not year_str.isdigit():
        return None

    return MONTH_NAMES.index(month_name), int(year_str)


def format_month_key(month_index: int, year: int) -> str:
    """Build a MonthKey from a 0-based month index and a year."""
    return f"{MONTH_NAMES[month_index]}{MONTH_KEY_SEPARATOR}{year}"


def month_key_for(value: date) -> str:
    """MonthKey of the month a date falls in."""
    return format_month_key(value.month - 1, value.year)


def month_sort_key(month_key: str) -> tuple[int, int]:
    """Ordering key (year, month_index). MonthKeys never sort lexicographically."""
    parsed = parse_month_key(month_key)
    if parsed is None:
        raise InvalidMonthKeyError(month_key)
    month_index, year = parsed
    return year, month_index


def sort_month_keys(month_keys: Iterable[str]) -> list[str]:
    """Chronologically ordered copy of the given MonthKeys."""
    return sorted(month_keys, key=month_sort_key)


def expand_month_span(month_name: str, year: int, count: int = 12) -> list[str]:
    """
    Consecutive MonthKeys starting at month_name/year.

    expand_month_span("Novembro", 2025, 3)
    -> ["Novembro de 2025", "Dezembro de 2025", "Janeiro de 2026"]
    """
    if month_name not in MONTH_NAMES:
        raise InvalidMonthKeyError(f"{month_name}{MONTH_KEY_SEPARATOR}{year}")

    start = MONTH_NAMES.index(month_name)
    keys = []
    for offset in range(count):
        month_index = (start + offset) % 12
        key_year = year + (start + offset) // 12
        keys.append(format_month_key(month_index, key_year))
    return keys


# =============================================================================
# CIVIL DATES
# =============================================================================

def db_date_string(month_key: str, day: Union[int, str, None]) -> Optional[str]:
    """
    Convert (MonthKey, day-of-month) into a 'YYYY-MM-DD' string.

    Returns None when the MonthKey is malformed or the day is not an
    integer in [1, 31]. The date is built as a civil date, so the stored
    day is exactly the day the user picked. A day past the end of the
    month rolls over into the next month (31 in February -> early March).
    """
    if isinstance(day, bool) or day is None:
        return None
    if isinstance(day, str):
        day = day.strip()
        if not day.isdigit():
            return None
        day = int(day)
    if not isinstance(day, int) or day < 1 or day > 31:
        return None

    parsed = parse_month_key(month_key)
    if parsed is None:
        return None
    month_index, year = parsed

    civil = date(year, month_index + 1, 1) + timedelta(days=day - 1)
    return civil.isoformat()


def parse_civil_date(value: Union[str, date, None]) -> Optional[date]:
    """Read 'YYYY-MM-DD' (or a date) as a naive calendar date, no shifting."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def format_display_date(value: Union[str, date]) -> str:
    """Render a civil date as DD/MM/YYYY. Unparseable input is returned as-is."""
    try:
        parsed = parse_civil_date(value)
    except (TypeError, ValueError):
        logger.warning("date_format_failed", value=str(value))
        return str(value)
    if parsed is None:
        return ""
    return parsed.strftime("%d/%m/%Y")


def add_months(value: date, months: int) -> date:
    """Calendar-month addition; the day is clamped to the target month's length."""
    return value + relativedelta(months=months)


# =============================================================================
# FIXED CIVIL ZONE
# =============================================================================

def fixed_zone(name: Optional[str] = None) -> tzinfo:
    """The zone used for every 'today' anchor."""
    zone_name = name or get_settings().app.timezone
    zone = tz.gettz(zone_name)
    if zone is None:
        raise ValueError(f"Unknown timezone: {zone_name}")
    return zone


def now_in_fixed_zone(now: Optional[datetime] = None) -> datetime:
    """
    Current instant projected into the fixed civil zone.

    Args:
        now: Instant to project instead of the system clock.
             Naive values are taken as UTC.
    """
    instant = now or datetime.now(timezone.utc)
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(fixed_zone())


def today_in_fixed_zone(now: Optional[datetime] = None) -> date:
    """Today's civil date in the fixed zone."""
    return now_in_fixed_zone(now).date()


def current_month_key(now: Optional[datetime] = None) -> str:
    """MonthKey of today's month in the fixed zone."""
    return month_key_for(today_in_fixed_zone(now))
