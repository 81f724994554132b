# SPDX-License-Identifier: LGPL-3.0-or-later
# Copyright (C) 2025-2026 Kris Kirby, KE4AHR

"""
pydispatchtimer/core/units.py

Time literal conversions.

Every function turns a plain number into a duration expressed in
seconds, the unit all timer APIs take:

    Timer.every(milliseconds(250), tick)
    Timer.after(minutes(5), remind)
"""

from __future__ import annotations

from datetime import datetime, timedelta
from numbers import Real
from typing import Union

Duration = Union[float, int, timedelta]
Timestamp = Union[float, int, datetime]

MILLISECONDS_PER_SECOND = 1000.0
SECONDS_PER_MINUTE = 60.0
SECONDS_PER_HOUR = 3600.0


def milliseconds(value: float) -> float:
    return value / MILLISECONDS_PER_SECOND


def seconds(value: float) -> float:
    return float(value)


def minutes(value: float) -> float:
    return value * SECONDS_PER_MINUTE


def hours(value: float) -> float:
    return value * SECONDS_PER_HOUR


# Singular spellings read better for a count of one: after(second(1), ...)
millisecond = milliseconds
second = seconds
minute = minutes
hour = hours


def as_seconds(value: Duration) -> float:
    """
    Normalize a duration to float seconds.

    Args:
        value: Number of seconds or a timedelta

    Raises:
        TypeError: If value is neither
    """
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, Real) and not isinstance(value, bool):
        return float(value)
    raise TypeError(f"Expected seconds or timedelta, got {type(value).__name__}")


def as_timestamp(value: Timestamp) -> float:
    """
    Normalize an absolute time to epoch seconds.

    Naive datetimes are interpreted as local time, as datetime.timestamp() does.
    """
    if isinstance(value, datetime):
        return value.timestamp()
    if isinstance(value, Real) and not isinstance(value, bool):
        return float(value)
    raise TypeError(f"Expected epoch seconds or datetime, got {type(value).__name__}")


__all__ = [
    'Duration',
    'Timestamp',
    'milliseconds',
    'millisecond',
    'seconds',
    'second',
    'minutes',
    'minute',
    'hours',
    'hour',
    'as_seconds',
    'as_timestamp',
]
