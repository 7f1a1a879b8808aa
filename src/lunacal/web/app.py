from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, Response, jsonify, render_template, request

from lunacal.core.ticker import CalendarTicker
from lunacal.utils.astronomy import InvalidInstant, compute_phase
from lunacal.web.render import render_month

log = logging.getLogger(__name__)

# Create the Flask application instance
app = Flask(__name__)


def bind_ticker(ticker: CalendarTicker) -> None:
    """Attaches the ticker whose snapshot the routes display."""
    app.config["LUNACAL_TICKER"] = ticker


def _ticker() -> Optional[CalendarTicker]:
    return app.config.get("LUNACAL_TICKER")


# --- UI Route ---
@app.route("/")
def index() -> str | tuple[str, int]:
    """Serves the calendar page."""
    ticker = _ticker()
    if ticker is None:
        return "Calendar is not running", 503

    snap = ticker.snapshot()
    months = [render_month(grid) for grid in snap.grids]
    return render_template("index.html", clock=snap.clock_text, months=months)


# --- API Endpoints ---


@app.route("/api/v1/calendar", methods=["GET"])
def get_calendar() -> Response | tuple[Response, int]:
    """
    Returns every configured month, rendered for display.
    """
    ticker = _ticker()
    if ticker is None:
        return jsonify({"error": "Calendar is not running"}), 503

    snap = ticker.snapshot()
    return jsonify(
        {
            "rendered_at": snap.rendered_at.isoformat() if snap.rendered_at else None,
            "months": [render_month(grid) for grid in snap.grids],
        }
    )


@app.route("/api/v1/clock", methods=["GET"])
def get_clock() -> Response | tuple[Response, int]:
    """Returns the current clock text, polled once per second by the page."""
    ticker = _ticker()
    if ticker is None:
        return jsonify({"error": "Calendar is not running"}), 503

    snap = ticker.snapshot()
    return jsonify(
        {
            "clock": snap.clock_text,
            "rendered_at": snap.rendered_at.isoformat() if snap.rendered_at else None,
        }
    )


@app.route("/api/v1/phase", methods=["GET"])
def get_phase() -> Response | tuple[Response, int]:
    """
    Computes the moon phase for one instant.

    Accepts an optional 'at' query parameter, either an ISO-8601 instant
    or a UNIX timestamp in seconds. Defaults to now.
    """
    raw = request.args.get("at")
    try:
        if raw is None:
            instant = datetime.now(timezone.utc)
        else:
            instant = _parse_at(raw)
        phase = compute_phase(instant)
    except InvalidInstant as e:
        log.warning(f"Rejected phase request for at={raw!r}: {e}")
        return jsonify({"error": str(e)}), 400

    return jsonify({"at": raw, **phase.to_dict()})


def _parse_at(raw: str) -> str | float:
    """Numeric strings are UNIX timestamps; anything else is left for ISO parsing."""
    try:
        return float(raw)
    except ValueError:
        return raw
