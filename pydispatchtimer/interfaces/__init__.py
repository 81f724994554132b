"""
PyDispatchTimer Execution Interfaces

Provides:
- Execution contexts (serial, main, thread pool, asyncio)
- The timer source primitive timers are built on

License: LGPLv3.0
Copyright (C) 2025-2026 Kris Kirby, KE4AHR
"""

from .context import (
    ExecutionContext,
    SerialContext,
    MainContext,
    ThreadPoolContext,
    AsyncioContext,
    DelayedCall,
    current_context,
    get_specific,
    main_context,
    set_main_context,
    global_context
)
from .source import TimerSource

__all__ = [
    # Contexts
    'ExecutionContext',
    'SerialContext',
    'MainContext',
    'ThreadPoolContext',
    'AsyncioContext',
    'DelayedCall',
    'current_context',
    'get_specific',
    'main_context',
    'set_main_context',
    'global_context',

    # Timer primitive
    'TimerSource'
]
