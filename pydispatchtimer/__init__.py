"""
PyDispatchTimer - Cancellable, reschedulable timers for Python

Provides:
- One-shot, repeating and deadline timers
- Execution contexts the timer callbacks run on (main, serial, pool, asyncio)
- Thread-safe invalidation from any context, including the timer's own callbacks

License: LGPLv3.0
Copyright (C) 2025-2026 Kris Kirby, KE4AHR

"""

__version__ = "0.1.0"

# Timers
from .core.timer import (
    Timer,
    every,
    after,
    until
)
from .core.units import (
    milliseconds,
    millisecond,
    seconds,
    second,
    minutes,
    minute,
    hours,
    hour
)
from .core.config import (
    TimerConfig,
    DEFAULT_CONFIG
)

# Execution contexts
from .interfaces.context import (
    ExecutionContext,
    SerialContext,
    MainContext,
    ThreadPoolContext,
    AsyncioContext,
    current_context,
    get_specific,
    main_context,
    set_main_context,
    global_context
)
from .interfaces.source import TimerSource

# Exceptions
from .exceptions import (
    TimerError,
    ContextClosedError,
    ConfigurationError
)

# Utilities
from .utils import (
    configure_logging,
    wait_invalidated,
    invalidate_async
)

__all__ = [
    # Core
    'Timer',
    'every',
    'after',
    'until',
    'milliseconds',
    'millisecond',
    'seconds',
    'second',
    'minutes',
    'minute',
    'hours',
    'hour',
    'TimerConfig',
    'DEFAULT_CONFIG',

    # Contexts
    'ExecutionContext',
    'SerialContext',
    'MainContext',
    'ThreadPoolContext',
    'AsyncioContext',
    'current_context',
    'get_specific',
    'main_context',
    'set_main_context',
    'global_context',
    'TimerSource',

    # Exceptions
    'TimerError',
    'ContextClosedError',
    'ConfigurationError',

    # Utilities
    'configure_logging',
    'wait_invalidated',
    'invalidate_async',
    'get_version',

    # Metadata
    '__version__'
]

def get_version() -> str:
    """Return the package version."""
    return __version__
