# SPDX-License-Identifier: LGPL-3.0-or-later
# Copyright (C) 2025-2026 Kris Kirby, KE4AHR

"""
pydispatchtimer/interfaces/source.py

Timer source: the low-level timer primitive a Timer is built on.

A TimerSource is bound to one SerialContext and fires its callback on
that context. It starts suspended; arm() sets the first deadline, the
repeat interval and the leeway, resume() activates it, cancel() stops it
for good.

All methods must be called from the source's own context.
"""

import logging
import time
from typing import Callable, Optional

from .context import DelayedCall, SerialContext

logger = logging.getLogger(__name__)


class TimerSource:
    """
    Repeating or one-shot timer primitive.

    Args:
        context: Serial context the fire callback runs on
    """
    def __init__(self, context: SerialContext):
        self._context = context
        self._callback: Optional[Callable[[], None]] = None
        self._deadline: Optional[float] = None
        self._interval = 0.0
        self._leeway = 0.0
        self._pending: Optional[DelayedCall] = None
        self._resumed = False
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def armed(self) -> bool:
        return self._pending is not None

    def arm(self, deadline: float, interval: float, leeway: float) -> None:
        """
        Set when the source fires.

        Args:
            deadline: Monotonic time of the first fire
            interval: Seconds between fires; <= 0 fires once
            leeway: Seconds each fire may be delayed
        """
        if self._cancelled:
            return
        self._deadline = deadline
        self._interval = max(0.0, interval)
        self._leeway = max(0.0, leeway)
        if self._resumed:
            self._rearm()

    def set_fire_callback(self, callback: Optional[Callable[[], None]]) -> None:
        if self._cancelled:
            return
        self._callback = callback

    def resume(self) -> None:
        """Activate the source (idempotent)"""
        if self._cancelled or self._resumed:
            return
        self._resumed = True
        self._rearm()

    def cancel(self) -> None:
        """Stop the source permanently (idempotent)"""
        if self._cancelled:
            return
        self._cancelled = True
        self._drop_pending()
        self._callback = None
        logger.debug(f"Timer source on {self._context.label} cancelled")

    def _drop_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _rearm(self) -> None:
        self._drop_pending()
        if self._deadline is None or self._context.closed:
            return
        self._pending = self._context.run_at(
            self._deadline,
            self._on_deadline,
            leeway=self._leeway
        )

    def _on_deadline(self) -> None:
        self._pending = None
        if self._cancelled:
            return

        if self._interval > 0:
            # Ticks late by more than the leeway collapse into this one
            overdue = time.monotonic() - self._leeway - self._deadline
            missed = int(overdue // self._interval) if overdue > 0 else 0
            self._deadline += (missed + 1) * self._interval
            self._rearm()
        else:
            self._deadline = None

        callback = self._callback
        if callback is not None:
            callback()

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else ("resumed" if self._resumed else "suspended")
        return f"TimerSource(context={self._context.label!r}, state={state})"
