from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from lunacal.core.grid import (
    HIGHLIGHT_MAJOR,
    HIGHLIGHT_TODAY,
    DayCell,
    build_calendar,
    build_month_grid,
)
from lunacal.utils.astronomy import InvalidInstant, PhaseDescriptor, compute_phase

KOLKATA = ZoneInfo("Asia/Kolkata")


def _today_days(grid) -> list:
    return [cell.day_number for cell in grid.cells if cell.is_today]


def test_july_2025_grid_layout_and_today() -> None:
    grid = build_month_grid(6, 2025, datetime(2025, 7, 15, 15, 47))

    assert grid.month_name == "July"
    assert grid.days_in_month == 31
    assert [cell.day_number for cell in grid.cells] == list(range(1, 32))
    # 1 July 2025 is a Tuesday
    assert grid.leading_blanks == 2
    assert _today_days(grid) == [15]


def test_time_of_day_does_not_move_today() -> None:
    early = build_month_grid(6, 2025, datetime(2025, 7, 15, 0, 0, 0))
    late = build_month_grid(6, 2025, datetime(2025, 7, 15, 23, 59, 59))
    assert _today_days(early) == _today_days(late) == [15]


def test_today_uses_date_components_in_display_timezone() -> None:
    # 20:00 UTC on the 14th is already the 15th in Kolkata
    today = datetime(2025, 7, 14, 20, 0, tzinfo=timezone.utc)
    assert _today_days(build_month_grid(6, 2025, today, KOLKATA)) == [15]
    assert _today_days(build_month_grid(6, 2025, today)) == [14]


def test_today_in_another_month_marks_nothing() -> None:
    grid = build_month_grid(6, 2025, date(2025, 8, 15))
    assert _today_days(grid) == []

    other_year = build_month_grid(6, 2024, date(2025, 7, 15))
    assert _today_days(other_year) == []


@pytest.mark.parametrize(
    "month_index,year,days,blanks",
    [
        (1, 2024, 29, 4),  # leap year, starts Thursday
        (1, 2025, 28, 6),  # starts Saturday
        (1, 2100, 28, 1),  # century, not a leap year
        (5, 2025, 30, 0),  # starts Sunday
        (11, 2025, 31, 1),
    ],
)
def test_days_in_month_and_leading_blanks(month_index, year, days, blanks) -> None:
    grid = build_month_grid(month_index, year, date(2000, 1, 1))
    assert grid.days_in_month == days
    assert grid.leading_blanks == blanks


def test_cells_use_local_midnight_phase() -> None:
    grid = build_month_grid(6, 2025, date(2025, 7, 1), KOLKATA)
    for cell in grid.cells:
        assert cell.phase == compute_phase(datetime(2025, 7, cell.day_number, tzinfo=KOLKATA))


def test_weeks_pad_to_seven_columns() -> None:
    grid = build_month_grid(6, 2025, date(2025, 7, 1))
    weeks = grid.weeks()

    assert len(weeks) == 5
    assert all(len(week) == 7 for week in weeks)
    assert weeks[0][:2] == [None, None]
    assert weeks[0][2].day_number == 1
    assert sum(cell is not None for week in weeks for cell in week) == 31


def test_today_highlight_wins_over_major_phase() -> None:
    full = PhaseDescriptor("Full Moon", "🌕", True, 100)
    crescent = PhaseDescriptor("Waxing Crescent", "🌒", False, 20)

    assert DayCell(10, full, is_today=True).highlight == HIGHLIGHT_TODAY
    assert DayCell(10, full, is_today=False).highlight == HIGHLIGHT_MAJOR
    assert DayCell(10, crescent, is_today=True).highlight == HIGHLIGHT_TODAY
    assert DayCell(10, crescent, is_today=False).highlight is None


def test_today_on_a_major_phase_day_is_today_styled() -> None:
    grid = build_month_grid(6, 2025, date(2000, 1, 1))
    major_day = next(cell.day_number for cell in grid.cells if cell.phase.is_major)

    grid = build_month_grid(6, 2025, date(2025, 7, major_day))
    cell = grid.cells[major_day - 1]
    assert cell.is_today and cell.phase.is_major
    assert cell.highlight == HIGHLIGHT_TODAY


@pytest.mark.parametrize("month_index", [-1, 12])
def test_rejects_out_of_range_month(month_index) -> None:
    with pytest.raises(ValueError):
        build_month_grid(month_index, 2025, date(2025, 1, 1))


def test_build_calendar_preserves_order() -> None:
    months = [(11, 2025), (0, 2026), (6, 2025)]
    grids = build_calendar(months, date(2026, 1, 3))

    assert [(g.month_index, g.year) for g in grids] == months
    assert [_today_days(g) for g in grids] == [[], [3], []]


def test_month_that_falls_off_the_timeline_raises_invalid_instant() -> None:
    with pytest.raises(InvalidInstant):
        build_month_grid(0, 1, date(2025, 1, 1), KOLKATA)

    # The same month in UTC is representable
    assert build_month_grid(0, 1, date(2025, 1, 1)).days_in_month == 31
