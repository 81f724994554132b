# SPDX-License-Identifier: LGPL-3.0-or-later
# Copyright (C) 2025-2026 Kris Kirby, KE4AHR

"""
tests/test_timer.py

Timer state machine.

Covers:
- Automatic and programmatic firing (one-shot and repeating)
- Invalidation before, during and after firing, from any thread
- Re-entrant invalidation from work running on the timer's lane
- Target context guarantees (main thread, context-specific values)
- Scoped release: with blocks and dropped references
"""

import gc
import threading
import time
import weakref
from unittest.mock import Mock

import pytest

import pydispatchtimer
from pydispatchtimer import (
    SerialContext,
    Timer,
    TimerConfig,
    get_specific,
    milliseconds,
)
from pydispatchtimer.utils.threadsafe import AtomicCounter


def wait_for(predicate, timeout=1.0):
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            return False
        time.sleep(0.001)
    return True


class TestFiring:
    def test_single_shot_fires_automatically(self, main):
        fired = []
        timer = Timer(0.003, lambda: fired.append(True))
        timer.schedule()
        assert main.run_until(lambda: bool(fired), timeout=0.5)
        assert not timer.is_valid

    def test_fire_programmatically(self, main):
        fired = []
        timer = Timer.after(0.003, lambda: fired.append(True))
        timer.fire()
        main.run_pending()
        assert fired == [True]

    def test_fire_before_deadline_prevents_automatic_fire(self, main):
        fired = []
        timer = Timer.after(0.02, lambda: fired.append(True))
        timer.fire()
        main.run_for(0.1)
        assert fired == [True]
        assert not timer.is_valid

    def test_repeating_fires_multiple_times(self, main):
        counter = []
        timer = Timer.every(0.003, lambda: counter.append(1))
        main.run_for(0.05)
        timer.invalidate()
        assert len(counter) >= 3

    def test_repeating_counts_three_ticks_in_ten_milliseconds(self, serial_context):
        counter = AtomicCounter()
        timer = Timer.every(0.003, counter.increment, context=serial_context)
        time.sleep(0.01)
        timer.invalidate()
        serial_context.run_sync(lambda: None)
        assert counter.get() >= 3

    @pytest.mark.parametrize("tolerance", [0.0, 0.005, 0.05])
    def test_repeating_fire_count_over_window(self, serial_context, tolerance):
        counter = AtomicCounter()
        interval, window = 0.01, 0.5
        timer = Timer(interval, counter.increment, repeats=True, context=serial_context, tolerance=tolerance)
        timer.schedule()
        time.sleep(window)
        timer.invalidate()
        serial_context.run_sync(lambda: None)
        # floor(W / I) - 1
        assert counter.get() >= round(window / interval) - 1

    def test_repeating_fire_reschedules(self, serial_context):
        counter = AtomicCounter()
        timer = Timer(0.01, counter.increment, repeats=True, context=serial_context)
        timer.fire()
        assert wait_for(lambda: counter.get() >= 3)
        assert timer.is_valid
        timer.invalidate()

    def test_after_fires_within_interval_and_tolerance(self, serial_context):
        fired_at = []
        start = time.monotonic()
        timer = Timer.after(
            0.02,
            lambda: fired_at.append(time.monotonic() - start),
            context=serial_context,
            tolerance=0.01
        )
        assert timer.wait(1.0)
        assert wait_for(lambda: bool(fired_at))
        assert 0.02 <= fired_at[0] < 0.02 + 0.01 + 0.1

    def test_schedule_again_rearms_from_now(self, serial_context):
        fired_at = []
        start = time.monotonic()
        timer = Timer.after(0.05, lambda: fired_at.append(time.monotonic() - start), context=serial_context)
        time.sleep(0.03)
        timer.schedule()
        assert wait_for(lambda: bool(fired_at))
        assert fired_at[0] >= 0.08
        assert len(fired_at) == 1

    def test_module_level_factories(self, serial_context):
        assert pydispatchtimer.every == Timer.every
        counter = AtomicCounter()
        timer = pydispatchtimer.after(0.005, counter.increment, serial_context)
        assert timer.wait(1.0)
        assert wait_for(lambda: counter.get() == 1)

    def test_wait_reports_invalidation(self, serial_context):
        timer = Timer.after(0.005, lambda: None, context=serial_context)
        assert timer.wait(1.0)
        repeating = Timer.every(0.005, lambda: None, context=serial_context)
        assert not repeating.wait(0.03)
        repeating.invalidate()
        assert repeating.wait(0)


class TestInvalidation:
    def test_invalidate_before_first_fire(self, main):
        fired = []
        timer = Timer(0.003, lambda: fired.append(True), repeats=True)
        timer.invalidate()
        main.run_for(0.1)
        assert fired == []

    def test_invalidate_after_schedule(self, main):
        fired = []
        timer = Timer.every(0.003, lambda: fired.append(True))
        timer.invalidate()
        main.run_for(0.1)
        assert fired == []
        assert not timer.is_valid

    def test_invalidate_is_idempotent(self, serial_context):
        timer = Timer.every(0.01, lambda: None, context=serial_context)
        timer.invalidate()
        timer.invalidate()
        assert not timer.is_valid

    def test_fire_after_invalidation_is_a_noop(self, main):
        action = Mock()
        timer = Timer(0.01, action)
        timer.invalidate()
        timer.fire()
        timer.schedule()
        main.run_for(0.05)
        action.assert_not_called()

    def test_invalidate_from_inside_action(self, serial_context):
        counter = AtomicCounter()
        holder = []

        def action():
            if counter.increment() == 3:
                holder[0].invalidate()

        holder.append(Timer.every(0.005, action, context=serial_context))
        assert holder[0].wait(1.0)
        time.sleep(0.05)
        assert counter.get() == 3

    def test_invalidate_reentrant_on_lane(self, inline_context):
        # InlineContext runs the action on the lane thread itself, so the
        # action's invalidate() must not wait for the lane
        calls = []
        holder = []

        def action():
            calls.append(threading.current_thread().name)
            holder[0].invalidate()

        holder.append(Timer.every(0.005, action, context=inline_context))
        assert holder[0].wait(1.0)
        time.sleep(0.03)
        assert calls == [holder[0].name]

    def test_concurrent_invalidation(self, serial_context):
        timer = Timer.every(0.001, lambda: None, context=serial_context)
        barrier = threading.Barrier(8)
        errors = []

        def cancel():
            try:
                barrier.wait(1.0)
                timer.invalidate()
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=cancel) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(2.0)
        assert not any(thread.is_alive() for thread in threads)
        assert errors == []
        assert timer.wait(0)

    def test_lane_thread_exits_after_invalidation(self, serial_context):
        timer = Timer.every(0.01, lambda: None, context=serial_context)
        timer.invalidate()
        timer._lane.join(1.0)
        assert not timer._lane.alive

    def test_closed_target_context_invalidates_timer(self):
        target = SerialContext("test.gone")
        target.close()
        timer = Timer.every(0.005, lambda: None, context=target)
        assert timer.wait(1.0)


class TestTargetContext:
    def test_fires_on_main_thread(self, main):
        on_main = []
        timer = Timer.after(
            milliseconds(5),
            lambda: on_main.append(threading.current_thread() is threading.main_thread())
        )
        assert main.run_until(lambda: bool(on_main), timeout=0.5)
        assert on_main == [True]
        assert not timer.is_valid

    def test_fires_on_custom_context(self, serial_context):
        serial_context.set_specific("timerQueue", "com.pydispatchtimer.test")
        seen = []
        timer = Timer.after(milliseconds(5), lambda: seen.append(get_specific("timerQueue")), serial_context)
        assert timer.wait(0.5)
        assert wait_for(lambda: bool(seen))
        assert seen == ["com.pydispatchtimer.test"]

    def test_action_never_runs_on_lane(self, serial_context):
        names = []
        timer = Timer.every(0.005, lambda: names.append(threading.current_thread().name), serial_context)
        assert wait_for(lambda: len(names) >= 2)
        timer.invalidate()
        assert timer.name not in names

    def test_failing_action_keeps_timer_running(self, serial_context):
        counter = AtomicCounter()

        def action():
            counter.increment()
            raise ValueError("callback failure")

        timer = Timer.every(0.005, action, context=serial_context)
        assert wait_for(lambda: counter.get() >= 3)
        assert timer.is_valid
        timer.invalidate()


class TestConfiguration:
    def test_tolerance_defaults_and_clamps(self):
        timer = Timer(1.0, lambda: None)
        assert timer.tolerance == 0.0
        timer.tolerance = milliseconds(10)
        assert timer.tolerance == pytest.approx(0.01)
        timer.tolerance = -1
        assert timer.tolerance == 0.0
        timer.invalidate()

    def test_config_supplies_tolerance_and_lane_name(self):
        config = TimerConfig(tolerance=0.5, lane_prefix="heartbeat")
        timer = Timer(1.0, lambda: None, config=config)
        assert timer.tolerance == 0.5
        assert timer.name.startswith("heartbeat.")
        timer.invalidate()

    def test_negative_interval_is_clamped(self):
        timer = Timer(-5, lambda: None)
        assert timer.interval == 0.0
        timer.invalidate()

    def test_properties_and_repr(self, serial_context):
        timer = Timer(0.25, lambda: None, repeats=True, context=serial_context, name="probe")
        assert timer.interval == 0.25
        assert timer.repeats
        assert timer.context is serial_context
        assert timer.deadline is None
        assert "probe" in repr(timer)
        assert "valid" in repr(timer)
        timer.invalidate()
        assert "invalidated" in repr(timer)


class TestScopedRelease:
    def test_with_block_invalidates(self, serial_context):
        with Timer.every(0.005, lambda: None, context=serial_context) as timer:
            assert timer.is_valid
        assert not timer.is_valid

    def test_with_block_invalidates_on_exception(self, serial_context):
        with pytest.raises(RuntimeError):
            with Timer.every(0.005, lambda: None, context=serial_context) as timer:
                raise RuntimeError("leave early")
        assert not timer.is_valid

    def test_dropping_last_reference_stops_timer(self, serial_context):
        counter = AtomicCounter()
        timer = Timer.every(0.005, counter.increment, context=serial_context)
        assert wait_for(lambda: counter.get() >= 1)
        lane = timer._lane
        ref = weakref.ref(timer)
        del timer
        gc.collect()
        assert wait_for(lambda: ref() is None)
        lane.join(1.0)
        assert not lane.alive
        count = counter.get()
        time.sleep(0.05)
        assert counter.get() <= count + 1
