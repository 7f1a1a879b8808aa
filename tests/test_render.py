from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from lunacal.core.grid import DayCell, build_month_grid
from lunacal.utils.astronomy import PhaseDescriptor
from lunacal.web.render import HOVER_CLASS, cell_classes, format_clock, render_month

FULL = PhaseDescriptor("Full Moon", "🌕", True, 100)
GIBBOUS = PhaseDescriptor("Waxing Gibbous", "🌔", False, 82)


def test_cell_classes_pick_exactly_one_state() -> None:
    today_major = cell_classes(DayCell(1, FULL, is_today=True))
    assert "today" in today_major
    assert "major-phase" not in today_major
    assert HOVER_CLASS not in today_major

    major = cell_classes(DayCell(1, FULL, is_today=False))
    assert "major-phase" in major
    assert "today" not in major

    plain = cell_classes(DayCell(1, GIBBOUS, is_today=False))
    assert plain[-1] == HOVER_CLASS
    assert "today" not in plain and "major-phase" not in plain


def test_render_month_shape() -> None:
    grid = build_month_grid(6, 2025, date(2025, 7, 15))
    rendered = render_month(grid)

    assert rendered["title"] == "July 2025"
    assert rendered["weekdays"] == ["S", "M", "T", "W", "T", "F", "S"]
    assert rendered["leading_blanks"] == 2

    first_week = rendered["weeks"][0]
    assert first_week[:2] == [None, None]
    assert first_week[2]["day"] == 1

    cells = [c for week in rendered["weeks"] for c in week if c]
    assert len(cells) == 31
    today = [c for c in cells if c["is_today"]]
    assert [c["day"] for c in today] == [15]
    assert "today" in today[0]["classes"].split()
    assert all(c["illumination"].endswith("%") for c in cells)


def test_format_clock_uses_display_timezone() -> None:
    now = datetime(2025, 7, 15, 10, 17, 0, tzinfo=timezone.utc)
    assert format_clock(now, ZoneInfo("Asia/Kolkata")) == "Tuesday, 15 July 2025, 03:47:00 PM"


def test_format_clock_without_timezone_keeps_wall_time() -> None:
    assert format_clock(datetime(2025, 12, 1, 9, 5, 3)) == "Monday, 1 December 2025, 09:05:03 AM"
