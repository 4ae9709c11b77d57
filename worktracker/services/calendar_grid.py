"""Monday-first month grid."""
import calendar
from datetime import datetime

from worktracker.models.report import CalendarCell
from worktracker.utils.clock import Clock
from worktracker.utils.formatting import parse_month


def build_calendar_cells(year: int, month_index: int) -> list[CalendarCell]:
    """
    Cells for a month laid out in rows of seven, Monday first.

    Args:
        year: Four digit year
        month_index: Zero-based month (0 = January)

    Returns:
        A multiple of seven cells; blanks before day 1 and after the last
        day have no date
    """
    month = month_index + 1
    first_weekday = (datetime(year, month, 1).weekday() + 1) % 7  # 0 = Sunday
    offset = (first_weekday + 6) % 7
    days_in_month = calendar.monthrange(year, month)[1]
    total_cells = -(-(offset + days_in_month) // 7) * 7

    cells = []
    for index in range(total_cells):
        day = index - offset + 1
        if day < 1 or day > days_in_month:
            cells.append(CalendarCell(key=f"empty-{index}"))
            continue

        cells.append(CalendarCell(
            key=f"{year:04d}-{month:02d}-{day}",
            date=datetime(year, month, day),
        ))

    return cells


def build_month_calendar(month_value: str, clock: Clock) -> list[CalendarCell]:
    """Grid for a ``YYYY-MM`` value, falling back to the clock's current month."""
    parsed = parse_month(month_value)
    if parsed is None:
        today = clock.now()
        parsed = (today.year, today.month - 1)

    return build_calendar_cells(*parsed)
