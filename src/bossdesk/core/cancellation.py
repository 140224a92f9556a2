"""Caller-initiated cancellation and the periodic refresh loop.

``CancellationToken`` is shared between the caller and a long-running
operation (a connectivity check, a refresh cycle). Cancelling never touches
shared state; the operation observes the token at its checkpoints and stops
waiting. Cancelling twice, or after completion, is a no-op.

Usage::

    token = CancellationToken()
    loop = RefreshLoop(refresh, interval=30.0)
    loop.start()
    ...
    loop.stop()   # idempotent
"""

from __future__ import annotations

import threading
from collections.abc import Callable

from bossdesk.core.errors import BossDeskError, ErrorCategory
from bossdesk.core.logging import get_logger

logger = get_logger(__name__)


class OperationCancelledError(BossDeskError):
    """Raised at a checkpoint after the token was cancelled."""

    default_category = ErrorCategory.INTERNAL
    code = "CANCELLED"

    def __init__(self, message: str = "Cancelled", **kwargs):
        super().__init__(message, **kwargs)


class CancellationToken:
    """Thread-safe, idempotent cancellation flag."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError()

    def wait(self, timeout: float) -> bool:
        """Sleep up to *timeout* seconds; return ``True`` if cancelled meanwhile."""
        return self._event.wait(timeout)


class RefreshLoop:
    """Run ``refresh`` every ``interval`` seconds on a daemon thread.

    A failing refresh is logged and the loop keeps going; the next tick
    retries the whole cycle. ``stop()`` cancels the loop's token, so the
    current sleep ends immediately.
    """

    def __init__(
        self,
        refresh: Callable[[CancellationToken], None],
        interval: float = 30.0,
        *,
        name: str = "bossdesk-refresh",
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._refresh = refresh
        self._interval = interval
        self._name = name
        self._token = CancellationToken()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()
        self.cycles = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> threading.Thread:
        with self._lock:
            if self._thread is not None:
                return self._thread
            self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
            self._thread.start()
            logger.info("refresh_loop_started", interval=self._interval)
            return self._thread

    def stop(self, timeout: float | None = 5.0) -> None:
        self._token.cancel()
        with self._lock:
            thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _run(self) -> None:
        while not self._token.cancelled:
            try:
                self._refresh(self._token)
            except OperationCancelledError:
                break
            except Exception:
                logger.exception("refresh_cycle_failed")
            self.cycles += 1
            if self._token.wait(self._interval):
                break
        logger.info("refresh_loop_stopped", cycles=self.cycles)


__all__ = ["CancellationToken", "OperationCancelledError", "RefreshLoop"]
