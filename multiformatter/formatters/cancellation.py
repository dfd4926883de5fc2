"""
Cooperative cancellation of formatting runs.

The executor checks the token at every step boundary. Cancelling never
interrupts a formatter that is already running; it stops the chain before
the next one, and the run still restores the active-formatter slot.

Example:
    token = setup_cancellation_handler()
    try:
        result = service.format_document(document, token=token)
    finally:
        restore_default_handler()
"""

import logging
import signal
import threading
from typing import Optional

import click


logger = logging.getLogger(__name__)


class CancellationToken:
    """Thread-safe cancellation flag."""

    def __init__(self):
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._cancel_reason: Optional[str] = None

    def cancel(self, reason: Optional[str] = None) -> None:
        """
        Mark the token as cancelled.

        Safe to call from any thread, including signal handlers. Calling
        it again has no effect.
        """
        with self._lock:
            if self._cancelled.is_set():
                return

            self._cancel_reason = reason
            self._cancelled.set()

            logger.info(f"Cancellation requested: {reason or 'user initiated'}")

    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def cancel_reason(self) -> Optional[str]:
        return self._cancel_reason


_original_sigint_handler = None


def setup_cancellation_handler(
    show_message: bool = True,
    message: str = "⚠ Cancellation requested. Finishing the current formatter...",
) -> CancellationToken:
    """
    Install a SIGINT (Ctrl+C) handler that cancels the returned token.

    The first Ctrl+C cancels gracefully; a second one raises
    KeyboardInterrupt.
    """
    global _original_sigint_handler

    token = CancellationToken()
    interrupted = [False]

    def signal_handler(sig: int, frame) -> None:
        if interrupted[0]:
            click.echo("⚠ Forced exit. Settings may not have been restored.", err=True)
            if _original_sigint_handler is not None:
                signal.signal(signal.SIGINT, _original_sigint_handler)
            raise KeyboardInterrupt

        interrupted[0] = True
        if show_message:
            click.echo(message, err=True)
        token.cancel("user interrupted (SIGINT)")

    _original_sigint_handler = signal.getsignal(signal.SIGINT)
    signal.signal(signal.SIGINT, signal_handler)

    return token


def restore_default_handler() -> None:
    """Put back the SIGINT handler that was active before setup."""
    global _original_sigint_handler

    if _original_sigint_handler is not None:
        signal.signal(signal.SIGINT, _original_sigint_handler)
        _original_sigint_handler = None
