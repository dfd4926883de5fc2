"""
Recursion guard.

Only one formatting run may be in flight at a time. A formatter that
triggers formatting from its own side effects (save hooks) and a second
caller on another thread both find the guard held and skip.
"""

import threading
from contextlib import contextmanager
from typing import Iterator


class RecursionGuard:
    """Non-blocking "formatting in progress" flag."""

    def __init__(self):
        self._lock = threading.Lock()

    def try_acquire(self) -> bool:
        """Take the guard if it is free; never waits."""
        return self._lock.acquire(blocking=False)

    def release(self) -> None:
        if self._lock.locked():
            self._lock.release()

    @property
    def is_held(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def hold(self) -> Iterator[bool]:
        """Hold the guard for the duration of the block.

        Yields whether it was acquired; when it was not, the block must
        not do any work and the guard is left untouched.
        """
        acquired = self.try_acquire()
        try:
            yield acquired
        finally:
            if acquired:
                self.release()

    def reset(self) -> None:
        """Clear the guard on service start and shutdown."""
        self.release()


# Process-wide guard shared by every executor unless one is injected
formatting_guard = RecursionGuard()
