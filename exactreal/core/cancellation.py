"""
Cooperative cancellation for long-running evaluations.

Two sources are consulted by ``check_cancelled``:

* a process-wide token, raised with ``please_stop()`` and cleared with
  ``reset_stop()``;
* the token bound to the current execution context by
  ``cancellation_scope``. Context variables are per thread (and per task),
  so a background evaluation can be cancelled without affecting others.

Every iterative series, every MSD search step and every precision-doubling
comparison loop calls ``check_cancelled``.
"""

import contextvars
import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from .errors import AbortedComputationError

logger = logging.getLogger(__name__)


class CancellationToken:
    """A one-shot cancellation flag that may be shared between threads."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def reset(self) -> None:
        self._event.clear()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            logger.debug("cancellation observed")
            raise AbortedComputationError()

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"


_GLOBAL_TOKEN = CancellationToken()

_current_token: contextvars.ContextVar[Optional[CancellationToken]] = contextvars.ContextVar(
    "exactreal_cancellation_token", default=None
)


def please_stop() -> None:
    """Ask every running evaluation in the process to abort."""
    _GLOBAL_TOKEN.cancel()


def reset_stop() -> None:
    """Clear the process-wide stop request."""
    _GLOBAL_TOKEN.reset()


def stop_requested() -> bool:
    token = _current_token.get()
    return _GLOBAL_TOKEN.cancelled or (token is not None and token.cancelled)


def current_token() -> Optional[CancellationToken]:
    return _current_token.get()


def check_cancelled() -> None:
    """Raise AbortedComputationError if the process or the current scope was cancelled."""
    _GLOBAL_TOKEN.raise_if_cancelled()
    token = _current_token.get()
    if token is not None:
        token.raise_if_cancelled()


@contextmanager
def cancellation_scope(token: Optional[CancellationToken] = None) -> Iterator[CancellationToken]:
    """
    Bind a cancellation token to the current context.

    Example:
        token = CancellationToken()
        with cancellation_scope(token):
            PI.approx_get(-100000)   # aborts once token.cancel() is called
    """
    if token is None:
        token = CancellationToken()
    reset = _current_token.set(token)
    try:
        yield token
    finally:
        _current_token.reset(reset)
