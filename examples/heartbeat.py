# SPDX-License-Identifier: LGPL-3.0-or-later
# Copyright (C) 2025-2026 Kris Kirby, KE4AHR

"""
examples/heartbeat.py

Repeating timer on a worker context, cancelled from inside its own
callback.

A heartbeat ticks every 200 ms on a SerialContext. After ten beats the
callback invalidates the timer itself; a one-shot watchdog on the main
context reports how many beats were seen.
"""

import threading

from pydispatchtimer import SerialContext, Timer, configure_logging, main_context, milliseconds
from pydispatchtimer.utils import AtomicCounter


def main() -> None:
    configure_logging("DEBUG")
    worker = SerialContext("heartbeat-worker")
    beats = AtomicCounter()
    holder = []

    def beat() -> None:
        count = beats.increment()
        print(f"beat {count} on {threading.current_thread().name}")
        if count == 10:
            holder[0].invalidate()

    heartbeat = Timer.every(milliseconds(200), beat, context=worker)
    heartbeat.tolerance = milliseconds(20)
    holder.append(heartbeat)

    reported = []

    def report() -> None:
        print(f"watchdog: {beats.get()} beats, heartbeat valid={heartbeat.is_valid}")
        reported.append(True)

    watchdog = Timer.after(3.0, report)

    main_context().run_until(lambda: bool(reported), timeout=5)
    watchdog.invalidate()
    worker.close()
    worker.join()


if __name__ == "__main__":
    main()
