# SPDX-License-Identifier: LGPL-3.0-or-later
# Copyright (C) 2025-2026 Kris Kirby, KE4AHR

"""
pydispatchtimer/exceptions.py

Exception hierarchy for PyDispatchTimer.

Timer operations themselves never raise for late or repeated calls
(firing after invalidation and double invalidation are no-ops). These
exceptions cover misuse of the collaborators a timer is built on:
execution contexts and configuration.
"""


class TimerError(Exception):
    """Base exception for all PyDispatchTimer errors"""


class ContextClosedError(TimerError):
    """Work was submitted to an execution context that has been closed"""


class ConfigurationError(TimerError, ValueError):
    """A TimerConfig value is out of range"""


__all__ = [
    'TimerError',
    'ContextClosedError',
    'ConfigurationError',
]
