from __future__ import annotations

import logging
import signal
import sys
import threading
from datetime import datetime
from typing import Any, Callable, Optional
from wsgiref.simple_server import make_server

from lunacal.core.ticker import CalendarTicker, run_clock_scheduler
from lunacal.utils.config import settings
from lunacal.web.app import app, bind_ticker
from lunacal.web.render import format_clock

# --- Global Stop Event ---
# This event is used to signal all background threads to stop.
stop_event = threading.Event()


# --- Logging Setup ---
def setup_logging() -> None:
    """Configures the root logger."""
    settings.LOG_PATH.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] [%(name)s] %(message)s",
        handlers=[
            logging.FileHandler(settings.LOG_PATH),
            logging.StreamHandler(sys.stdout),
        ],
    )
    # APScheduler logs every job execution at INFO
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    log = logging.getLogger(__name__)
    log.info("--- LunaCal Application Starting ---")
    log.info(f"Display timezone: {settings.DISPLAY_TIMEZONE}")
    log.info(f"Displaying months: {settings.DISPLAY_MONTHS}")


# --- Graceful Shutdown Handler ---
def signal_handler(sig: int, frame: Any) -> None:
    """
    Handles SIGINT (Ctrl+C) and SIGTERM.

    Sets the global stop_event, which signals background threads
    to terminate their loops.
    """
    log = logging.getLogger(__name__)
    log.warning("Shutdown signal received. Stopping services...")
    stop_event.set()


def build_ticker() -> CalendarTicker:
    """Creates the CalendarTicker described by the settings."""
    tz = settings.display_tz
    today: Optional[Callable[[], datetime]] = None
    if settings.SIMULATED_TODAY is not None:
        simulated = settings.SIMULATED_TODAY
        logging.getLogger(__name__).warning(f"Using simulated date {simulated}")
        # Pins the highlighted day only; the clock keeps real time
        today = lambda: simulated  # noqa: E731

    return CalendarTicker(
        months=settings.DISPLAY_MONTHS,
        tz=tz,
        formatter=lambda now: format_clock(now, tz),
        today=today,
    )


# --- Main `run` function ---
def run() -> None:
    """
    The main application entry point.

    1. Sets up logging.
    2. Registers signal handlers.
    3. Starts the clock scheduler thread.
    4. Starts the Flask web server in the main thread.
    5. Waits for shutdown signal.
    """
    setup_logging()
    log = logging.getLogger(__name__)

    # Register signal handlers for graceful exit
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    ticker = build_ticker()
    bind_ticker(ticker)

    # 1. Start Clock Thread
    log.info("Starting clock scheduler thread...")
    clock_thread = threading.Thread(
        target=run_clock_scheduler,
        args=(stop_event, ticker, settings.CLOCK_INTERVAL_SECONDS),
        name="ClockThread",
    )
    clock_thread.daemon = True  # Dies if main thread dies
    clock_thread.start()

    # 2. Start Flask Web Server (in the main thread)
    log.info(
        f"Starting Flask web server at "
        f"http://{settings.SERVER_HOST}:{settings.SERVER_PORT}"
    )

    try:
        with make_server(settings.SERVER_HOST, settings.SERVER_PORT, app) as httpd:

            # A short timeout lets the loop notice stop_event between requests
            httpd.timeout = 1.0
            while not stop_event.is_set():
                httpd.handle_request()  # Process one request

            log.info("Web server shutting down.")

    except Exception as e:
        log.error(f"Web server failed: {e}", exc_info=True)
        stop_event.set()

    # 3. Wait for the clock thread to finish
    log.info("Waiting for clock thread to stop...")
    clock_thread.join(timeout=5.0)
    log.info("--- LunaCal Application Stopped ---")


if __name__ == "__main__":
    run()
