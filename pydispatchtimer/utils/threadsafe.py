"""
Thread-safe Helpers

Provides:
- AtomicCounter: Thread-safe integer counter (timer sequence numbers,
  fire counts observed from several contexts)

License: LGPLv3.0
Copyright (C) 2024 Kris Kirby, KE4AHR
"""

import threading
import logging

logger = logging.getLogger(__name__)

class AtomicCounter:
    """
    Thread-safe atomic counter with increment/decrement operations.
    
    Args:
        initial: Initial value (default 0)
    """
    def __init__(self, initial: int = 0):
        self._value = initial
        self._lock = threading.Lock()
        
    def increment(self, amount: int = 1) -> int:
        """
        Increment counter and return new value.
        
        Args:
            amount: Value to add (default 1)
        """
        with self._lock:
            self._value += amount
            return self._value
            
    def decrement(self, amount: int = 1) -> int:
        """
        Decrement counter and return new value.
        
        Args:
            amount: Value to subtract (default 1)
        """
        with self._lock:
            self._value -= amount
            return self._value
            
    def set(self, value: int) -> None:
        """Set counter to specific value."""
        with self._lock:
            self._value = value
            logger.debug(f"Counter set to {value}")
            
    def get(self) -> int:
        """Get current value."""
        with self._lock:
            return self._value
            
    def __repr__(self) -> str:
        return f"AtomicCounter(value={self.get()})"
