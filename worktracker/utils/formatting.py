"""Date, duration and money formatting helpers."""
import re
from datetime import date, datetime
from typing import Optional

from worktracker.models.user import Currency

CURRENCY_SYMBOLS = {
    Currency.USD: "$",
    Currency.EUR: "€",
    Currency.GBP: "£",
    Currency.CAD: "CA$",
}

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def day_key(value: date) -> str:
    """
    Local calendar day of an instant as ``YYYY-MM-DD``.

    Examples:
        >>> day_key(datetime(2024, 3, 4, 23, 59))
        '2024-03-04'
    """
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def parse_day_key(value: str) -> Optional[datetime]:
    """Parse ``YYYY-MM-DD`` to local midnight, or None when malformed."""
    try:
        return datetime.strptime(value, "%Y-%m-%d")
    except (TypeError, ValueError):
        return None


def parse_month(value: str) -> Optional[tuple[int, int]]:
    """
    Parse ``YYYY-MM`` into ``(year, zero_based_month)``.

    Examples:
        >>> parse_month("2024-05")
        (2024, 4)
        >>> parse_month("2024-13") is None
        True
    """
    match = _MONTH_RE.match(value or "")
    if not match:
        return None

    year = int(match.group(1))
    month = int(match.group(2))
    if month < 1 or month > 12:
        return None

    return year, month - 1


def format_date(value: date) -> str:
    return f"{value:%b} {value.day}, {value.year}"


def format_time(value: datetime) -> str:
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {suffix}"


def format_datetime(value: datetime) -> str:
    return f"{format_date(value)} {format_time(value)}"


def format_duration(minutes: float) -> str:
    """
    Render whole minutes as ``Xh Ym``.

    Examples:
        >>> format_duration(450)
        '7h 30m'
    """
    whole_minutes = max(0, int(minutes))
    hours, remainder = divmod(whole_minutes, 60)
    return f"{hours}h {remainder}m"


def format_clock(milliseconds: int) -> str:
    """Render elapsed milliseconds as ``HH:MM:SS``."""
    total_seconds = max(0, milliseconds // 1000)
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_currency(amount: float, currency: Currency) -> str:
    symbol = CURRENCY_SYMBOLS[Currency(currency)]
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"
