# SPDX-License-Identifier: LGPL-3.0-or-later
# Copyright (C) 2025-2026 Kris Kirby, KE4AHR

"""
pydispatchtimer/interfaces/context.py

Execution contexts: the places timer work runs.

Provides:
- ExecutionContext: abstract base (run_async, run_sync, is_current)
- SerialContext: FIFO worker thread with timed work, used as a timer's private lane
- MainContext: queue drained by the main thread (the host's "main context")
- ThreadPoolContext: concurrent context on a ThreadPoolExecutor
- AsyncioContext: submits work to an asyncio event loop

Each context can carry context-specific values (set_specific). Code running
on a context reads them through get_specific(), which is how callers check
"am I on context X" from inside a callback.
"""

import asyncio
import heapq
import itertools
import logging
import threading
import time
from abc import ABC, abstractmethod
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple

from ..exceptions import ContextClosedError

logger = logging.getLogger(__name__)

_local = threading.local()


def _context_stack() -> List["ExecutionContext"]:
    stack = getattr(_local, "stack", None)
    if stack is None:
        stack = _local.stack = []
    return stack


def current_context() -> Optional["ExecutionContext"]:
    """Return the context executing the calling code, or None."""
    stack = _context_stack()
    return stack[-1] if stack else None


def get_specific(key: Any, default: Any = None) -> Any:
    """
    Read a value set with set_specific() on the current context.

    Returns default when the caller is not running on any context, or the
    current context has no value for key.
    """
    context = current_context()
    if context is None:
        return default
    return context.get_specific(key, default)


class ExecutionContext(ABC):
    """
    Abstract base class for execution contexts.

    Args:
        label: Human-readable name (also used for thread names)
    """
    def __init__(self, label: str):
        self.label = label
        self._specifics: Dict[Any, Any] = {}
        self._specifics_lock = threading.Lock()

    @abstractmethod
    def run_async(self, fn: Callable[[], Any]) -> None:
        """
        Queue fn to run on this context and return immediately.

        Raises:
            ContextClosedError: If the context no longer accepts work
        """
        pass

    def is_current(self) -> bool:
        """True when the calling code is running on this context."""
        return current_context() is self

    def run_sync(self, fn: Callable[[], Any]) -> Any:
        """
        Run fn on this context and wait for it to finish.

        Runs fn inline when the caller is already on this context, so a
        context never blocks waiting for itself.

        Returns:
            Whatever fn returns

        Raises:
            Any exception raised by fn
            ContextClosedError: If the context no longer accepts work
        """
        if self.is_current():
            return fn()

        future: Future = Future()

        def work() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(fn())
            except BaseException as e:
                future.set_exception(e)

        self.run_async(work)
        return future.result()

    def set_specific(self, key: Any, value: Any) -> None:
        """Attach a value to this context, readable by code running on it."""
        with self._specifics_lock:
            if value is None:
                self._specifics.pop(key, None)
            else:
                self._specifics[key] = value

    def get_specific(self, key: Any, default: Any = None) -> Any:
        with self._specifics_lock:
            return self._specifics.get(key, default)

    def _execute(self, fn: Callable[[], Any]) -> None:
        """Run one work item with this context marked current."""
        stack = _context_stack()
        stack.append(self)
        try:
            fn()
        except Exception as e:
            logger.error(f"Work item failed on {self.label}: {e}", exc_info=True)
        finally:
            stack.pop()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(label={self.label!r})"


class DelayedCall:
    """
    Handle for timed work queued with SerialContext.run_at().

    Attributes:
        when: Monotonic time the call becomes due
        latest: Monotonic time the call must have run by (when + leeway)
    """
    def __init__(self, when: float, leeway: float, fn: Callable[[], Any]):
        self.when = when
        self.latest = when + leeway
        self.fn = fn
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def __repr__(self) -> str:
        return f"DelayedCall(when={self.when:.6f}, cancelled={self.cancelled})"


class SerialContext(ExecutionContext):
    """
    Serial execution context backed by one daemon worker thread.

    Work runs one item at a time in submission order. Timed work becomes
    ready at its due time. A due item with leeway waits for later timed work
    that becomes due inside its leeway window, so both run in one wake-up;
    with nothing to batch it runs on time.

    Args:
        label: Context name, also the worker thread name
    """
    def __init__(self, label: str = "serial"):
        super().__init__(label)
        self._cond = threading.Condition()
        self._ready: Deque[Callable[[], Any]] = deque()
        self._timed: List[Tuple[float, int, DelayedCall]] = []
        self._seq = itertools.count()
        self._closed = False
        self._thread = threading.Thread(
            target=self._worker,
            name=label,
            daemon=True
        )
        self._thread.start()
        logger.debug(f"Serial context {label} started")

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def alive(self) -> bool:
        return self._thread.is_alive()

    def is_current(self) -> bool:
        return threading.current_thread() is self._thread

    def run_async(self, fn: Callable[[], Any]) -> None:
        with self._cond:
            if self._closed:
                raise ContextClosedError(f"Context {self.label} is closed")
            self._ready.append(fn)
            self._cond.notify()

    def run_at(
        self,
        when: float,
        fn: Callable[[], Any],
        leeway: float = 0.0
    ) -> DelayedCall:
        """
        Queue fn to run once time.monotonic() reaches when.

        Args:
            when: Monotonic due time
            fn: Work item
            leeway: Seconds the call may run late

        Returns:
            DelayedCall handle; cancel() it to drop the call
        """
        call = DelayedCall(when, max(0.0, leeway), fn)
        with self._cond:
            if self._closed:
                raise ContextClosedError(f"Context {self.label} is closed")
            heapq.heappush(self._timed, (call.when, next(self._seq), call))
            self._cond.notify()
        return call

    def close(self) -> None:
        """
        Stop accepting work.

        Already queued immediate work still runs; pending timed work is
        dropped. Safe to call from the worker itself.
        """
        with self._cond:
            if self._closed:
                return
            self._closed = True
            self._timed.clear()
            self._cond.notify_all()
        logger.debug(f"Serial context {self.label} closing")

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the worker thread to exit after close()."""
        if not self.is_current():
            self._thread.join(timeout)

    def _promote_due(self, now: float) -> None:
        while self._timed and self._timed[0][0] <= now:
            _, _, call = heapq.heappop(self._timed)
            if not call.cancelled:
                self._ready.append(call.fn)

    def _prune_cancelled(self) -> None:
        if any(entry[2].cancelled for entry in self._timed):
            self._timed = [entry for entry in self._timed if not entry[2].cancelled]
            heapq.heapify(self._timed)

    def _batch_until(self, now: float) -> Optional[float]:
        """
        Due time of later work that due work can wait for, or None.

        Due items are held back only while another timed item becomes due
        inside every due item's leeway window.
        """
        horizon = None
        for when, _, call in self._timed:
            if when <= now:
                horizon = call.latest if horizon is None else min(horizon, call.latest)
        if horizon is None:
            return None
        later = [when for when, _, _ in self._timed if now < when <= horizon]
        return min(later) if later else None

    def _next_item(self) -> Optional[Callable[[], Any]]:
        with self._cond:
            while True:
                now = time.monotonic()
                self._prune_cancelled()
                hold = self._batch_until(now)
                if hold is None:
                    self._promote_due(now)
                if self._ready:
                    return self._ready.popleft()
                if self._closed:
                    return None
                if hold is not None:
                    timeout = hold - now
                elif self._timed:
                    timeout = self._timed[0][0] - now
                else:
                    timeout = None
                self._cond.wait(timeout)

    def _worker(self) -> None:
        """Main worker loop (runs in thread)"""
        stack = _context_stack()
        stack.append(self)
        try:
            while True:
                item = self._next_item()
                if item is None:
                    break
                self._execute(item)
                # Drop the reference before blocking for the next item
                del item
        finally:
            stack.pop()
            logger.debug(f"Serial context {self.label} stopped")


class MainContext(ExecutionContext):
    """
    The host's main context: work queued here runs on the main thread.

    The main thread drives it explicitly, the way a UI run loop would:

        main = main_context()
        timer = Timer.after(0.5, done)
        main.run_for(1.0)

    Work submitted from the main thread while it is not pumping waits in
    the queue until the next run_*() call.
    """
    def __init__(self, label: str = "main"):
        super().__init__(label)
        self._cond = threading.Condition()
        self._queue: Deque[Callable[[], Any]] = deque()

    def is_current(self) -> bool:
        return threading.current_thread() is threading.main_thread()

    def run_async(self, fn: Callable[[], Any]) -> None:
        with self._cond:
            self._queue.append(fn)
            self._cond.notify()

    def _check_thread(self) -> None:
        if not self.is_current():
            raise RuntimeError("The main context can only be run from the main thread")

    def _pop(self, timeout: Optional[float]) -> Optional[Callable[[], Any]]:
        with self._cond:
            if not self._queue and timeout:
                self._cond.wait(timeout)
            if self._queue:
                return self._queue.popleft()
            return None

    def run_pending(self) -> int:
        """
        Run everything queued right now without waiting.

        Returns:
            Number of work items executed
        """
        self._check_thread()
        executed = 0
        while True:
            item = self._pop(None)
            if item is None:
                return executed
            self._execute(item)
            executed += 1

    def run_until(
        self,
        predicate: Callable[[], bool],
        timeout: Optional[float] = None
    ) -> bool:
        """
        Run queued work until predicate() is true or timeout elapses.

        Returns:
            Final value of predicate()
        """
        self._check_thread()
        deadline = None if timeout is None else time.monotonic() + timeout
        while not predicate():
            if deadline is None:
                wait = 0.05
            else:
                wait = deadline - time.monotonic()
                if wait <= 0:
                    break
            item = self._pop(wait)
            if item is not None:
                self._execute(item)
        return predicate()

    def run_for(self, duration: float) -> int:
        """
        Run queued work for duration seconds.

        Returns:
            Number of work items executed
        """
        self._check_thread()
        deadline = time.monotonic() + duration
        executed = 0
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return executed
            item = self._pop(remaining)
            if item is not None:
                self._execute(item)
                executed += 1

    def pending(self) -> int:
        with self._cond:
            return len(self._queue)


class ThreadPoolContext(ExecutionContext):
    """
    Concurrent context: work items may run in parallel on pool threads.

    Args:
        max_workers: Pool size
        label: Context name, used as the thread name prefix
    """
    def __init__(self, max_workers: int = 4, label: str = "pool"):
        super().__init__(label)
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix=label
        )

    def run_async(self, fn: Callable[[], Any]) -> None:
        try:
            self._executor.submit(self._execute, fn)
        except RuntimeError as e:
            raise ContextClosedError(f"Context {self.label} is closed") from e

    def close(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
        logger.info(f"Thread pool context {self.label} shut down")


class AsyncioContext(ExecutionContext):
    """
    Context that runs work on an asyncio event loop.

    Args:
        loop: Target loop (default: the loop running in the calling thread)
    """
    def __init__(
        self,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        label: str = "asyncio"
    ):
        super().__init__(label)
        self._loop = loop or asyncio.get_running_loop()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def is_current(self) -> bool:
        try:
            return asyncio.get_running_loop() is self._loop
        except RuntimeError:
            return False

    def run_async(self, fn: Callable[[], Any]) -> None:
        try:
            self._loop.call_soon_threadsafe(self._execute, fn)
        except RuntimeError as e:
            raise ContextClosedError(f"Event loop for {self.label} is closed") from e


_main_context: ExecutionContext = MainContext()
_global_context: Optional[ThreadPoolContext] = None
_global_lock = threading.Lock()


def main_context() -> ExecutionContext:
    """Get the host main context (default target for timers)"""
    return _main_context


def set_main_context(context: ExecutionContext) -> None:
    """Replace the host main context, e.g. with an AsyncioContext"""
    global _main_context
    _main_context = context
    logger.info(f"Main context set to {context!r}")


def global_context() -> ThreadPoolContext:
    """Get the shared concurrent context, created on first use"""
    global _global_context
    with _global_lock:
        if _global_context is None:
            from ..core.config import DEFAULT_CONFIG
            _global_context = ThreadPoolContext(
                max_workers=DEFAULT_CONFIG.pool_workers,
                label="pydispatchtimer.global"
            )
        return _global_context
