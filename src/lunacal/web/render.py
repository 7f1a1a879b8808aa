from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Any, Dict, List, Optional

from lunacal.core.grid import WEEKDAY_HEADERS, DayCell, MonthGrid

BASE_CELL_CLASSES = ["calendar-cell", "text-center", "p-1", "rounded", "cursor-default", "select-none"]
HOVER_CLASS = "hover:bg-gray-700"


def cell_classes(cell: DayCell) -> List[str]:
    """CSS classes for a day cell: today, major-phase or plain, never two."""
    return BASE_CELL_CLASSES + [cell.highlight or HOVER_CLASS]


def render_cell(cell: DayCell) -> Dict[str, Any]:
    return {
        "day": cell.day_number,
        "emoji": cell.phase.symbol,
        "phase": cell.phase.name,
        "illumination": f"{cell.phase.illumination_percent}%",
        "is_today": cell.is_today,
        "is_major": cell.phase.is_major,
        "classes": " ".join(cell_classes(cell)),
    }


def render_month(grid: MonthGrid) -> Dict[str, Any]:
    """
    Turns a MonthGrid into the dict the page template and the JSON API
    consume. Blank slots in `weeks` are None.
    """
    weeks: List[List[Optional[Dict[str, Any]]]] = [
        [render_cell(cell) if cell else None for cell in week] for week in grid.weeks()
    ]
    return {
        "title": f"{grid.month_name} {grid.year}",
        "month_index": grid.month_index,
        "year": grid.year,
        "weekdays": list(WEEKDAY_HEADERS),
        "leading_blanks": grid.leading_blanks,
        "weeks": weeks,
    }


def format_clock(now: datetime, tz: Optional[tzinfo] = None) -> str:
    """
    Full date and medium time in the display timezone,
    e.g. 'Tuesday, 15 July 2025, 03:47:00 PM'.
    """
    if tz is not None and now.tzinfo is not None:
        now = now.astimezone(tz)
    return f"{now:%A}, {now.day} {now:%B %Y, %I:%M:%S %p}"
