"""Scalar transforms that map raw track attributes into [0, 1].

Out-of-range inputs are clamped. Unparsable release dates map to the
neutral midpoint 0.5 instead of raising.
"""

import re
from datetime import date, datetime

from songvec.config import BASE_YEAR

NEUTRAL = 0.5

_YEAR_RE = re.compile(r"^\s*(\d{4})(?:-(\d{1,2})(?:-(\d{1,2}))?)?(?:[T ].*)?\s*$")


def clamp(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    return max(lower, min(upper, value))


def normalize_loudness(db: float) -> float:
    """Loudness in dB, typically -60 to 0."""
    return clamp((db + 60) / 60)


def normalize_tempo(bpm: float) -> float:
    """Tempo in BPM, typically 50 to 200."""
    return clamp((bpm - 50) / 150)


def normalize_duration(duration_ms: float) -> float:
    """Duration in milliseconds, 1 to 10 minutes maps onto [0, 1]."""
    minutes = duration_ms / 60000
    return clamp((minutes - 1) / 9)


def parse_release_year(value: object) -> int | None:
    """Extract the year from a release date.

    Accepts catalog date strings at year, month or day precision
    ("1999", "1999-04", "1999-04-12"), ISO datetimes, and date objects.
    """
    if isinstance(value, (date, datetime)):
        return value.year
    if not isinstance(value, str):
        return None
    match = _YEAR_RE.match(value)
    if match is None:
        return None
    year, month, day = match.groups()
    if month is not None and not 1 <= int(month) <= 12:
        return None
    if day is not None and not 1 <= int(day) <= 31:
        return None
    return int(year)


def normalize_year(release_date: object, current_year: int | None = None) -> float:
    year = parse_release_year(release_date)
    if year is None:
        return NEUTRAL
    if current_year is None:
        current_year = date.today().year
    span = current_year - BASE_YEAR
    if span <= 0:
        return NEUTRAL
    return clamp((year - BASE_YEAR) / span)
