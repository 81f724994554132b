# SPDX-License-Identifier: LGPL-3.0-or-later
# Copyright (C) 2025-2026 Kris Kirby, KE4AHR

"""
pydispatchtimer/core/config.py

Timer configuration defaults.

A TimerConfig bundles the values every Timer would otherwise take as
loose keyword arguments: default tolerance, how private lanes are named,
the wall clock used for deadline timers, and sizing for the shared
thread pool context.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field, replace
from typing import Callable

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimerConfig:
    """
    Immutable timer configuration.

    Attributes:
        tolerance: Default leeway in seconds for newly created timers
        lane_prefix: Prefix for private lane labels (and their thread names)
        clock: Wall clock returning epoch seconds, used for deadlines
        pool_workers: Worker count for the shared thread pool context
    """
    tolerance: float = 0.0
    lane_prefix: str = "pydispatchtimer.timer"
    clock: Callable[[], float] = field(default=time.time, compare=False)
    pool_workers: int = 4

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """
        Check every field.

        Raises:
            ConfigurationError: On any out-of-range value
        """
        if self.tolerance < 0:
            raise ConfigurationError(f"tolerance must be >= 0, got {self.tolerance}")
        if not self.lane_prefix:
            raise ConfigurationError("lane_prefix must not be empty")
        if not callable(self.clock):
            raise ConfigurationError("clock must be callable")
        if self.pool_workers < 1:
            raise ConfigurationError(f"pool_workers must be >= 1, got {self.pool_workers}")
        logger.debug("Timer configuration validated")

    def with_changes(self, **changes) -> "TimerConfig":
        """Return a copy with the given fields replaced (validated again)."""
        return replace(self, **changes)


DEFAULT_CONFIG = TimerConfig()
