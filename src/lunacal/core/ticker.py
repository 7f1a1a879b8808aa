from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo
from typing import Callable, List, Optional, Sequence, Tuple

from lunacal.core.grid import MonthGrid, build_calendar

log = logging.getLogger(__name__)


def _default_formatter(now: datetime) -> str:
    return now.isoformat(timespec="seconds")


@dataclass(frozen=True)
class CalendarSnapshot:
    """What the display shows right now."""

    clock_text: str = ""
    grids: List[MonthGrid] = field(default_factory=list)
    rendered_at: Optional[datetime] = None


class CalendarTicker:
    """
    Keeps the clock text and the month grids current.

    tick() is meant to be called once per second. The clock text is
    refreshed on every call; the grids are only rebuilt when the calendar
    day has changed since the last rebuild.
    """

    def __init__(
        self,
        months: Sequence[Tuple[int, int]],
        tz: tzinfo = timezone.utc,
        clock: Optional[Callable[[], datetime]] = None,
        formatter: Callable[[datetime], str] = _default_formatter,
        today: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """
        Args:
            months: Ordered (month_index, year) pairs to display.
            tz: Display timezone; "today" and day changes are judged here.
            clock: Returns the current instant. Defaults to the system clock.
            formatter: Turns the current instant into the clock text.
            today: Returns the "today" used for highlighting and day-change
                detection. Defaults to the clock; the clock text always
                follows the clock.
        """
        self.months = list(months)
        self.tz = tz
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.formatter = formatter
        self.today = today

        # Day of month of the last rebuild. Only tick() touches it.
        self.last_rendered_day: Optional[int] = None

        self._lock = threading.Lock()
        self._snapshot = CalendarSnapshot()

    def _localize(self, now: datetime) -> datetime:
        if now.tzinfo is None:
            # Naive clocks are read as display-local wall time
            return now.replace(tzinfo=self.tz)
        return now.astimezone(self.tz)

    def tick(self, now: Optional[datetime] = None) -> bool:
        """
        Runs one refresh cycle.

        Args:
            now: Overrides the clock for this tick.

        Returns:
            True if the grids were rebuilt on this tick.
        """
        now = self._localize(now or self.clock())
        clock_text = self.formatter(now)
        today = self._localize(self.today()) if self.today else now

        with self._lock:
            previous = self._snapshot

        if today.day == self.last_rendered_day:
            with self._lock:
                self._snapshot = CalendarSnapshot(
                    clock_text=clock_text,
                    grids=previous.grids,
                    rendered_at=previous.rendered_at,
                )
            log.debug(f"Clock tick: {clock_text}")
            return False

        log.info(f"Day changed to {today.date()}. Rebuilding {len(self.months)} months.")
        grids = build_calendar(self.months, today, self.tz)

        with self._lock:
            self._snapshot = CalendarSnapshot(
                clock_text=clock_text, grids=grids, rendered_at=today
            )
        self.last_rendered_day = today.day
        return True

    def run_job(self) -> None:
        """
        Scheduler entry point. A failed tick is logged and the previous
        snapshot stays on display.
        """
        try:
            self.tick()
        except Exception as e:
            log.error(f"Calendar tick failed: {e}", exc_info=True)

    def snapshot(self) -> CalendarSnapshot:
        with self._lock:
            return self._snapshot


def run_clock_scheduler(
    stop_event: threading.Event, ticker: CalendarTicker, interval_seconds: float = 1.0
) -> None:
    """
    Runs the CalendarTicker on a fixed schedule until stop_event is set.

    This function is designed to be run in its own thread.

    Args:
        stop_event: A threading.Event used to signal the loop to stop.
        ticker: The ticker to drive.
        interval_seconds: Seconds between ticks.
    """
    from apscheduler.schedulers.background import BackgroundScheduler

    log.info("Clock scheduler starting...")

    # Render immediately so the first page load has data
    ticker.run_job()

    scheduler = BackgroundScheduler()
    # max_instances=1 keeps ticks from overlapping if one runs long
    scheduler.add_job(
        ticker.run_job,
        "interval",
        seconds=interval_seconds,
        id="clock_tick",
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()

    stop_event.wait()

    log.info("Clock scheduler stopping...")
    scheduler.shutdown(wait=False)
