"""
Asynchronous Thread Utilities

Provides:
- run_in_thread: Execute blocking calls in thread pool without blocking event loop
- invalidate_async: Invalidate a timer from a coroutine
- wait_invalidated: Await a timer's invalidation with a timeout

Timer.invalidate() may block briefly while the timer's lane finishes a
fire pass, so coroutines should go through these helpers instead of
calling it on the event loop thread.

License: LGPLv3.0
Copyright (C) 2025-2026 Kris Kirby, KE4AHR
"""

import asyncio
import atexit
import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any, Callable, Optional, TYPE_CHECKING

import async_timeout

if TYPE_CHECKING:
    from ..core.timer import Timer

logger = logging.getLogger(__name__)

# Global thread pool for blocking operations
_DEFAULT_EXECUTOR = ThreadPoolExecutor(
    max_workers=4,
    thread_name_prefix='AsyncThreadPool'
)

async def run_in_thread(func: Callable[..., Any], *args, **kwargs) -> Any:
    """
    Run blocking function in thread pool executor.
    
    Args:
        func: Blocking callable to execute
        *args: Positional arguments for func
        **kwargs: Keyword arguments for func
        
    Returns:
        Result of func(*args, **kwargs)
        
    Example:
        async def main():
            result = await run_in_thread(blocking_io_function, arg1, arg2)
    """
    loop = asyncio.get_running_loop()
    wrapped = partial(func, *args, **kwargs)
    name = getattr(func, "__name__", repr(func))
    logger.debug(f"Executing {name} in thread pool")
    try:
        result = await loop.run_in_executor(_DEFAULT_EXECUTOR, wrapped)
    except Exception as e:
        logger.error(f"Thread execution failed: {e}")
        raise
    logger.debug(f"Completed {name} in thread pool")
    return result

async def invalidate_async(timer: "Timer") -> None:
    """Invalidate timer without blocking the event loop"""
    await run_in_thread(timer.invalidate)

async def wait_invalidated(
    timer: "Timer",
    timeout: Optional[float] = None,
    poll_interval: float = 0.005
) -> bool:
    """
    Wait until timer is invalidated (fired once, hit its deadline or
    was cancelled).
    
    Args:
        timer: Timer to watch
        timeout: Maximum wait in seconds (None waits forever)
        poll_interval: Seconds between checks
        
    Returns:
        True if the timer was invalidated, False on timeout
    """
    try:
        async with async_timeout.timeout(timeout):
            while not timer.wait(0):
                await asyncio.sleep(poll_interval)
    except asyncio.TimeoutError:
        logger.debug(f"Timed out waiting for {timer.name}")
        return False
    return True

def get_executor() -> ThreadPoolExecutor:
    """Get the global thread pool executor"""
    return _DEFAULT_EXECUTOR

atexit.register(lambda: _DEFAULT_EXECUTOR.shutdown(wait=False))
