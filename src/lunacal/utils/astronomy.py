from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, Union

# Average new-moon-to-new-moon interval
SYNODIC_PERIOD_DAYS = 29.530588853

# A known new moon, used as the reference point for every calculation.
REFERENCE_NEW_MOON = datetime(2000, 1, 6, 18, 14, tzinfo=timezone.utc)

MS_PER_DAY = 1000 * 60 * 60 * 24

# Eight equal bins of SYNODIC_PERIOD_DAYS / 8, centred on each phase.
# (name, symbol, is_major), in cycle order starting at New Moon.
PHASES = [
    ("New Moon", "🌑", True),
    ("Waxing Crescent", "🌒", False),
    ("First Quarter", "🌓", True),
    ("Waxing Gibbous", "🌔", False),
    ("Full Moon", "🌕", True),
    ("Waning Gibbous", "🌖", False),
    ("Last Quarter", "🌗", True),
    ("Waning Crescent", "🌘", False),
]

BIN_WIDTH_DAYS = SYNODIC_PERIOD_DAYS / len(PHASES)

InstantLike = Union[datetime, date, int, float, str]


class InvalidInstant(ValueError):
    """Raised when an instant is non-finite, unparseable or of an unsupported type."""


@dataclass(frozen=True)
class PhaseDescriptor:
    name: str
    symbol: str
    is_major: bool
    illumination_percent: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def to_utc_datetime(instant: InstantLike) -> datetime:
    """
    Normalizes any supported instant into an aware UTC datetime.

    Args:
        instant: An aware or naive datetime (naive is read as UTC), a date
            (its midnight, UTC), a UNIX timestamp in seconds, or an
            ISO-8601 string.

    Returns:
        An aware datetime in UTC.

    Raises:
        InvalidInstant: If the value cannot be interpreted as a finite instant.
    """
    if isinstance(instant, bool):
        raise InvalidInstant(f"Unsupported instant type: {type(instant).__name__}")

    if isinstance(instant, datetime):
        dt = instant
    elif isinstance(instant, date):
        dt = datetime(instant.year, instant.month, instant.day)
    elif isinstance(instant, (int, float)):
        if not math.isfinite(instant):
            raise InvalidInstant(f"Non-finite timestamp: {instant}")
        try:
            dt = datetime.fromtimestamp(instant, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise InvalidInstant(f"Timestamp out of range: {instant}") from e
    elif isinstance(instant, str):
        text = instant.strip()
        # fromisoformat() only learned the 'Z' suffix in Python 3.11
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError as e:
            raise InvalidInstant(f"Unparseable instant: '{instant}'") from e
    else:
        raise InvalidInstant(f"Unsupported instant type: {type(instant).__name__}")

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    try:
        return dt.astimezone(timezone.utc)
    except OverflowError as e:
        raise InvalidInstant(f"Instant out of range: {instant!r}") from e


def phase_age(instant: InstantLike) -> float:
    """
    Returns the moon's age in days, normalized into [0, SYNODIC_PERIOD_DAYS).

    Instants before the reference new moon wrap backwards through the
    cycle (floor modulo), so ten days before a new moon is an age of
    SYNODIC_PERIOD_DAYS - 10.
    """
    dt = to_utc_datetime(instant)
    try:
        delta = dt - REFERENCE_NEW_MOON
    except OverflowError as e:
        raise InvalidInstant(f"Instant out of range: {instant!r}") from e
    elapsed_ms = (delta.days * 86400 + delta.seconds) * 1000 + delta.microseconds // 1000
    elapsed_days = elapsed_ms / MS_PER_DAY

    age = elapsed_days - math.floor(elapsed_days / SYNODIC_PERIOD_DAYS) * SYNODIC_PERIOD_DAYS
    # Float rounding can land exactly on the period for tiny negative inputs
    if age >= SYNODIC_PERIOD_DAYS:
        age -= SYNODIC_PERIOD_DAYS
    return age


def illumination_fraction(age: float) -> float:
    """Approximate lit fraction of the disc: 0.0 at new moon, 1.0 at full."""
    return 0.5 * (1 - math.cos(2 * math.pi * age / SYNODIC_PERIOD_DAYS))


def classify_age(age: float) -> tuple[str, str, bool]:
    """Maps a phase age onto its (name, symbol, is_major) bin."""
    index = int(math.floor((age + BIN_WIDTH_DAYS / 2) / BIN_WIDTH_DAYS)) % len(PHASES)
    return PHASES[index]


def compute_phase(instant: InstantLike) -> PhaseDescriptor:
    """
    Calculates the moon phase for a given instant.

    Uses a constant-period model anchored on REFERENCE_NEW_MOON; there is
    no ephemeris and no eccentricity correction.

    Args:
        instant: Any value accepted by to_utc_datetime().

    Returns:
        A PhaseDescriptor with the phase name, its symbol, whether it is a
        major phase and the illumination percentage (0-100).

    Raises:
        InvalidInstant: If the instant cannot be interpreted.
    """
    age = phase_age(instant)
    percent = int(round(illumination_fraction(age) * 100))
    name, symbol, is_major = classify_age(age)
    return PhaseDescriptor(
        name=name,
        symbol=symbol,
        is_major=is_major,
        illumination_percent=min(100, max(0, percent)),
    )
