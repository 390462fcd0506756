"""
Run-once barrier for lazy initialization.

The first caller executes the wrapped function while every concurrent
caller blocks; once it returns, all of them proceed and later calls are
no-ops.
"""

import threading
from typing import Callable, Optional


class RunOnce:
    """Execute a callable exactly once and broadcast its completion."""

    def __init__(self, func: Callable[[], None]):
        self._func = func
        self._lock = threading.Lock()
        self._done = threading.Event()

    @property
    def done(self) -> bool:
        """True once the wrapped function has run (or raised)."""
        return self._done.is_set()

    def __call__(self) -> None:
        if self._done.is_set():
            return
        with self._lock:
            if self._done.is_set():
                return
            try:
                self._func()
            finally:
                # A failed run still counts; there is no retry path.
                self._done.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the function has run. Returns False on timeout."""
        return self._done.wait(timeout)
