from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone, tzinfo
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from lunacal.utils.astronomy import PhaseDescriptor, compute_phase

log = logging.getLogger(__name__)

HIGHLIGHT_TODAY = "today"
HIGHLIGHT_MAJOR = "major-phase"

# Sunday-first weeks, matching the weekday header row.
WEEKDAY_HEADERS = ["S", "M", "T", "W", "T", "F", "S"]


@dataclass(frozen=True)
class DayCell:
    day_number: int
    phase: PhaseDescriptor
    is_today: bool

    @property
    def highlight(self) -> Optional[str]:
        """'today' wins over 'major-phase'; a cell never carries both."""
        if self.is_today:
            return HIGHLIGHT_TODAY
        if self.phase.is_major:
            return HIGHLIGHT_MAJOR
        return None


@dataclass(frozen=True)
class MonthGrid:
    month_index: int  # zero-based, 0 = January
    year: int
    leading_blanks: int
    cells: Tuple[DayCell, ...]

    @property
    def month_name(self) -> str:
        return calendar.month_name[self.month_index + 1]

    @property
    def days_in_month(self) -> int:
        return len(self.cells)

    def weeks(self) -> List[List[Optional[DayCell]]]:
        """
        Lays the cells out in rows of seven.

        Leading blanks and the padding after the last day are None.
        """
        slots: List[Optional[DayCell]] = [None] * self.leading_blanks
        slots.extend(self.cells)
        slots.extend([None] * (-len(slots) % 7))
        return [slots[i : i + 7] for i in range(0, len(slots), 7)]


def _local_date(today: Union[datetime, date], tz: Optional[tzinfo]) -> date:
    """Calendar date of `today`, seen from the display timezone."""
    if isinstance(today, datetime):
        if today.tzinfo is not None and tz is not None:
            today = today.astimezone(tz)
        return today.date()
    return today


def build_month_grid(
    month_index: int,
    year: int,
    today: Union[datetime, date],
    tz: Optional[tzinfo] = None,
) -> MonthGrid:
    """
    Builds one month of day cells, each annotated with its moon phase.

    Args:
        month_index: Zero-based month (0 = January, 11 = December).
        year: Four-digit year.
        today: The "today" reference. Only its date components matter.
        tz: Display timezone. Each day's phase is computed at local midnight
            in this zone; UTC when omitted.

    Returns:
        A MonthGrid with one DayCell per day of the month.

    Raises:
        ValueError: If month_index is outside 0-11.
        InvalidInstant: If a day of the month cannot be placed on the UTC
            timeline, e.g. January of year 1 east of Greenwich.
    """
    if not 0 <= month_index <= 11:
        raise ValueError(f"Month index {month_index} out of range (expected 0-11)")

    month = month_index + 1
    zone = tz or timezone.utc
    first_weekday, days_in_month = calendar.monthrange(year, month)
    # calendar.monthrange() counts Monday as 0; the grid starts on Sunday.
    leading_blanks = (first_weekday + 1) % 7

    today_date = _local_date(today, tz)

    cells = []
    for day in range(1, days_in_month + 1):
        midnight = datetime(year, month, day, tzinfo=zone)
        cells.append(
            DayCell(
                day_number=day,
                phase=compute_phase(midnight),
                is_today=today_date == date(year, month, day),
            )
        )

    return MonthGrid(
        month_index=month_index,
        year=year,
        leading_blanks=leading_blanks,
        cells=tuple(cells),
    )


def build_calendar(
    months: Iterable[Sequence[int]],
    today: Union[datetime, date],
    tz: Optional[tzinfo] = None,
) -> List[MonthGrid]:
    """
    Builds one MonthGrid per (month_index, year) pair, preserving order.
    """
    grids = [
        build_month_grid(month_index, year, today, tz) for month_index, year in months
    ]
    log.debug(f"Built {len(grids)} month grids for {_local_date(today, tz)}")
    return grids
