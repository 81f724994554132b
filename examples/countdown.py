# SPDX-License-Identifier: LGPL-3.0-or-later
# Copyright (C) 2025-2026 Kris Kirby, KE4AHR

"""
examples/countdown.py

Deadline timer demonstration.

Counts down to a deadline five seconds away, printing progress every
half second on the main thread, then prints a completion message.

Run this script directly to see the output.
"""

import time

from pydispatchtimer import Timer, configure_logging, main_context, milliseconds


def main() -> None:
    """
    Run a countdown on the main context until it completes.
    """
    configure_logging("INFO")
    finished = []

    def show_progress(remaining: float, total: float) -> None:
        done = total - remaining
        bar = "#" * int(20 * done / total) if total > 0 else ""
        print(f"[{bar:<20}] {remaining:4.1f}s left")

    def on_complete() -> None:
        print("Countdown complete")
        finished.append(True)

    countdown = Timer.until(
        time.time() + 5,
        milliseconds(500),
        show_progress,
        on_complete
    )

    main_context().run_until(lambda: bool(finished), timeout=10)
    print(f"Timer still valid: {countdown.is_valid}")


if __name__ == "__main__":
    main()
