# SPDX-License-Identifier: LGPL-3.0-or-later
# Copyright (C) 2025-2026 Kris Kirby, KE4AHR

"""
pydispatchtimer/core/timer.py

Cancellable, reschedulable timer.

A Timer runs an action on a target execution context after an interval,
once or repeatedly, and can run a "progress until deadline" sequence
that ends with a completion callback.

Every state change (arming, firing, invalidation) happens on a private
serial lane owned by the timer, so the background fire path, explicit
invalidate() calls from any thread and rescheduling never race. User
callbacks are always handed to the target context asynchronously and
never run on the lane, so they may call back into the timer freely.

Example:
    main = main_context()
    with Timer.every(seconds(1), lambda: print("tick")):
        main.run_for(5)
"""

import logging
import sys
import threading
import time
import weakref
from typing import Callable, Optional

from ..exceptions import ContextClosedError
from ..interfaces.context import ExecutionContext, SerialContext, main_context
from ..interfaces.source import TimerSource
from ..utils.threadsafe import AtomicCounter
from .config import DEFAULT_CONFIG, TimerConfig
from .units import Duration, Timestamp, as_seconds, as_timestamp

logger = logging.getLogger(__name__)

TimerAction = Callable[[], None]
ProgressCallback = Callable[[float, float], None]

_timer_ids = AtomicCounter()


def _non_negative(value: float, what: str) -> float:
    if value < 0:
        logger.warning(f"Negative {what} {value} clamped to 0")
        return 0.0
    return value


class Timer:
    """
    One-shot or repeating timer bound to a target execution context.

    Args:
        interval: Delay before the first fire and between repeats
        action: Callable run on the target context at each fire
        repeats: Reschedule after every fire (default False)
        context: Target context (default: the host main context)
        tolerance: Allowed firing delay (default: config.tolerance)
        name: Label for logging and the lane thread
        config: TimerConfig (default DEFAULT_CONFIG)

    The caller must keep a reference to the timer. Once the last
    reference is dropped the timer is invalidated and stops firing.

    A zero interval on a repeating timer fires once per schedule().
    """
    def __init__(
        self,
        interval: Duration,
        action: TimerAction,
        repeats: bool = False,
        context: Optional[ExecutionContext] = None,
        *,
        tolerance: Optional[Duration] = None,
        name: Optional[str] = None,
        config: Optional[TimerConfig] = None
    ):
        self._config = config or DEFAULT_CONFIG
        self._interval = _non_negative(as_seconds(interval), "interval")
        self._repeats = repeats
        self._action = action
        self._completion: Optional[TimerAction] = None
        self._start_time: Optional[float] = None
        self._deadline: Optional[float] = None
        self._clock = self._config.clock
        self._target = context if context is not None else main_context()
        self._tolerance = self._config.tolerance
        if tolerance is not None:
            self.tolerance = tolerance

        self._name = name or f"{self._config.lane_prefix}.{_timer_ids.increment()}"
        self._invalidated = False
        self._done = threading.Event()
        self._lane = SerialContext(self._name)
        self._source = TimerSource(self._lane)

        # The source only holds a weak reference back to the timer
        timer_ref = weakref.ref(self)

        def on_fire() -> None:
            timer = timer_ref()
            if timer is not None:
                timer._timer_fired()

        self._fire_callback = on_fire
        logger.debug(f"Created {self!r}")

    @classmethod
    def with_deadline(
        cls,
        interval: Duration,
        deadline: Timestamp,
        context: Optional[ExecutionContext],
        on_progress: ProgressCallback,
        on_complete: TimerAction,
        *,
        tolerance: Optional[Duration] = None,
        name: Optional[str] = None,
        config: Optional[TimerConfig] = None
    ) -> "Timer":
        """
        Create a repeating timer that reports progress towards a deadline.

        Each fire calls on_progress(remaining, total) on the target context,
        where total is the span from construction to the deadline and
        remaining never drops below zero. The first fire after the deadline
        also queues on_complete and invalidates the timer.

        Args:
            interval: Seconds between progress reports
            deadline: Epoch seconds or datetime
            context: Target context (None: the host main context)
            on_progress: Callable(remaining, total)
            on_complete: Callable run once the deadline has passed
            tolerance: Allowed firing delay (default: config.tolerance)
        """
        config = config or DEFAULT_CONFIG
        clock = config.clock
        start = clock()
        end = as_timestamp(deadline)
        total = end - start

        def report_progress() -> None:
            remaining = end - clock()
            on_progress(remaining if remaining >= 0 else 0.0, total)

        timer = cls(
            interval,
            report_progress,
            repeats=True,
            context=context,
            tolerance=tolerance,
            name=name,
            config=config
        )
        timer._completion = on_complete
        timer._start_time = start
        timer._deadline = end
        return timer

    @classmethod
    def every(
        cls,
        interval: Duration,
        action: TimerAction,
        context: Optional[ExecutionContext] = None,
        **kwargs
    ) -> "Timer":
        """Create and schedule a repeating timer."""
        timer = cls(interval, action, repeats=True, context=context, **kwargs)
        timer.schedule()
        return timer

    @classmethod
    def after(
        cls,
        interval: Duration,
        action: TimerAction,
        context: Optional[ExecutionContext] = None,
        **kwargs
    ) -> "Timer":
        """Create and schedule a single-shot timer."""
        timer = cls(interval, action, repeats=False, context=context, **kwargs)
        timer.schedule()
        return timer

    @classmethod
    def until(
        cls,
        deadline: Timestamp,
        interval: Duration,
        on_progress: ProgressCallback,
        on_complete: TimerAction,
        context: Optional[ExecutionContext] = None,
        **kwargs
    ) -> "Timer":
        """Create and schedule a deadline timer (see with_deadline)."""
        timer = cls.with_deadline(interval, deadline, context, on_progress, on_complete, **kwargs)
        timer.schedule()
        return timer

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def repeats(self) -> bool:
        return self._repeats

    @property
    def name(self) -> str:
        return self._name

    @property
    def context(self) -> ExecutionContext:
        return self._target

    @property
    def start_time(self) -> Optional[float]:
        return self._start_time

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    @property
    def tolerance(self) -> float:
        """Leeway in seconds; takes effect at the next schedule()."""
        return self._tolerance

    @tolerance.setter
    def tolerance(self, value: Duration) -> None:
        self._tolerance = _non_negative(as_seconds(value), "tolerance")

    @property
    def is_valid(self) -> bool:
        return not self._invalidated

    def schedule(self) -> None:
        """
        Arm the timer: first fire one interval from now, then every
        interval, with the current tolerance as leeway.

        Calling it again re-arms from now. No-op once invalidated.
        """
        def arm() -> None:
            if self._invalidated:
                return
            self._source.arm(
                time.monotonic() + self._interval,
                self._interval,
                self._tolerance
            )
            self._source.set_fire_callback(self._fire_callback)
            self._source.resume()
            logger.debug(f"Timer {self._name} armed ({self._interval}s, leeway {self._tolerance}s)")

        self._dispatch_in_timer_lane(arm)

    def fire(self) -> None:
        """Fire now, then re-arm if the timer repeats."""
        self._timer_fired()
        if self._repeats:
            self.schedule()

    def invalidate(self) -> None:
        """
        Stop the timer permanently.

        Safe from any thread and from inside the timer's own callbacks.
        Work already handed to the target context still runs.
        """
        self._dispatch_in_timer_lane(self._invalidate_in_lane)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the timer is invalidated.

        Returns:
            True if invalidated, False on timeout
        """
        return self._done.wait(timeout)

    def _dispatch_in_timer_lane(self, fn: Callable[[], None]) -> None:
        if self._lane.is_current():
            fn()
            return
        try:
            self._lane.run_sync(fn)
        except ContextClosedError:
            # The lane is closed only after invalidation
            logger.debug(f"Timer {self._name} already invalidated")

    def _invalidate_in_lane(self) -> None:
        if self._invalidated:
            return
        self._invalidated = True
        self._source.cancel()
        self._lane.close()
        self._done.set()
        logger.debug(f"Timer {self._name} invalidated")

    def _timer_fired(self) -> None:
        def handle() -> None:
            if self._invalidated:
                return
            try:
                self._target.run_async(self._action)
                logger.debug(f"Timer {self._name} fired")

                if not self._repeats:
                    self._invalidate_in_lane()

                if self._deadline is not None and self._clock() > self._deadline:
                    if self._completion is not None:
                        self._target.run_async(self._completion)
                    logger.debug(f"Timer {self._name} reached its deadline")
                    self._invalidate_in_lane()
            except ContextClosedError as e:
                logger.warning(f"Timer {self._name} target context gone: {e}")
                self._invalidate_in_lane()

        self._dispatch_in_timer_lane(handle)

    def __enter__(self) -> "Timer":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.invalidate()

    def __del__(self):
        if getattr(self, "_invalidated", True) or sys.is_finalizing():
            return
        try:
            self.invalidate()
        except Exception as e:
            logger.debug(f"Timer cleanup failed: {e}")

    def __repr__(self) -> str:
        state = "valid" if not self._invalidated else "invalidated"
        return (
            f"Timer(name={self._name!r}, interval={self._interval}, "
            f"repeats={self._repeats}, {state})"
        )


every = Timer.every
after = Timer.after
until = Timer.until
