"""
PyDispatchTimer Utilities Module

Provides thread-safe helpers, asyncio bridges and logging setup.

License: LGPLv3.0
Copyright (C) 2025-2026 Kris Kirby, KE4AHR
"""

from .threadsafe import AtomicCounter
from .async_thread import run_in_thread, invalidate_async, wait_invalidated
from typing import List

__all__: List[str] = [
    'AtomicCounter',
    'run_in_thread',
    'invalidate_async',
    'wait_invalidated',
    'configure_logging'
]

def configure_logging(level: str = "INFO") -> None:
    """
    Configure package-wide logging.
    
    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    import logging
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s %(name)s %(levelname)s: %(message)s'
    )
