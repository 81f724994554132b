"""
PyDispatchTimer Core Module

Contains:
- Timer state machine (one-shot, repeating and deadline timers)
- Time unit conversions
- Timer configuration

License: LGPLv3.0
Copyright (C) 2025-2026 Kris Kirby, KE4AHR
"""

from .config import TimerConfig, DEFAULT_CONFIG
from .units import (
    milliseconds,
    millisecond,
    seconds,
    second,
    minutes,
    minute,
    hours,
    hour,
    as_seconds,
    as_timestamp
)
from .timer import Timer, every, after, until

__all__ = [
    # Timer
    'Timer',
    'every',
    'after',
    'until',

    # Units
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

    # Configuration
    'TimerConfig',
    'DEFAULT_CONFIG'
]

def _verify_versions() -> None:
    """Internal compatibility check."""
    import sys
    if sys.version_info < (3, 8):
        raise RuntimeError("PyDispatchTimer requires Python 3.8+")

_verify_versions()
