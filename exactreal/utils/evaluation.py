"""
Background evaluation with cancellation and timeouts.

Constructive-real evaluation has no timeout of its own; callers that need a
bounded latency run it here and cancel it. Each task runs inside its own
cancellation scope, so cancelling one task does not disturb other
evaluations, even ones sharing the same CR nodes.

Example:
    task = EvaluationTask(lambda: PI.to_decimal_string(5000))
    try:
        digits = task.result(timeout=2.0)
    except AbortedComputationError:
        ...   # timed out and cancelled
"""

import logging
import threading
from concurrent.futures import CancelledError, Executor, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from enum import Enum
from typing import Any, Callable, Optional

from ..core.cancellation import CancellationToken, cancellation_scope
from ..core.errors import AbortedComputationError

logger = logging.getLogger(__name__)


class TaskStatus(Enum):
    PENDING = "pending"
    RUNNING = "running"
    FINISHED = "finished"
    CANCELLED = "cancelled"


_executor_lock = threading.Lock()
_default_executor: Optional[ThreadPoolExecutor] = None


def default_executor() -> ThreadPoolExecutor:
    """Shared worker pool used when a task is not given an executor."""
    global _default_executor
    with _executor_lock:
        if _default_executor is None:
            _default_executor = ThreadPoolExecutor(thread_name_prefix="exactreal-eval")
        return _default_executor


def shutdown(wait: bool = True) -> None:
    """Shut down the shared pool; a later task starts a new one."""
    global _default_executor
    with _executor_lock:
        executor, _default_executor = _default_executor, None
    if executor is not None:
        executor.shutdown(wait=wait)


class EvaluationTask:
    """
    A cancellable evaluation of ``fn(*args, **kwargs)`` on a worker thread.

    Args:
        fn: The computation; it should consist of exactreal operations so that
            it observes cancellation.
        on_done: Called with the result when the computation finishes. Not
            called if the task was cancelled or failed.
        executor: Executor to run on; defaults to the shared pool.
    """

    def __init__(self, fn: Callable[..., Any], *args: Any,
                 on_done: Optional[Callable[[Any], None]] = None,
                 executor: Optional[Executor] = None,
                 **kwargs: Any):
        self.token = CancellationToken()
        self._lock = threading.Lock()
        self._status = TaskStatus.PENDING
        self._on_done = on_done
        self._name = getattr(fn, "__name__", repr(fn))
        pool = executor if executor is not None else default_executor()
        self._future = pool.submit(self._run, fn, args, kwargs)
        if on_done is not None:
            self._future.add_done_callback(self._notify)

    @property
    def status(self) -> TaskStatus:
        with self._lock:
            return self._status

    @property
    def cancelled(self) -> bool:
        return self.status is TaskStatus.CANCELLED

    def done(self) -> bool:
        return self._future.done()

    def _run(self, fn, args, kwargs):
        with self._lock:
            if self._status is TaskStatus.CANCELLED:
                raise AbortedComputationError()
            self._status = TaskStatus.RUNNING
        logger.debug("evaluation %s started", self._name)
        try:
            with cancellation_scope(self.token):
                result = fn(*args, **kwargs)
        except AbortedComputationError:
            with self._lock:
                self._status = TaskStatus.CANCELLED
            logger.debug("evaluation %s cancelled", self._name)
            raise
        except Exception:
            with self._lock:
                self._status = TaskStatus.FINISHED
            logger.debug("evaluation %s failed", self._name, exc_info=True)
            raise
        with self._lock:
            self._status = TaskStatus.FINISHED
        logger.debug("evaluation %s finished", self._name)
        return result

    def _notify(self, future) -> None:
        if future.cancelled() or future.exception() is not None:
            return
        if self.cancelled:
            return
        self._on_done(future.result())

    def cancel(self) -> None:
        """Request cancellation; a running computation aborts at its next check."""
        self.token.cancel()
        with self._lock:
            if self._status is TaskStatus.PENDING:
                self._status = TaskStatus.CANCELLED
        self._future.cancel()

    def result(self, timeout: Optional[float] = None) -> Any:
        """
        Wait for and return the result.

        Raises:
            AbortedComputationError: If the task was cancelled, or did not
                finish within ``timeout`` seconds (it is then cancelled).
        """
        try:
            return self._future.result(timeout)
        except FutureTimeoutError:
            logger.debug("evaluation %s timed out after %s s", self._name, timeout)
            self.cancel()
            raise AbortedComputationError(f"evaluation timed out after {timeout} s") from None
        except CancelledError:
            raise AbortedComputationError() from None

    def __repr__(self) -> str:
        return f"EvaluationTask({self._name}, status={self.status.value})"


def evaluate_async(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> EvaluationTask:
    """Start ``fn(*args, **kwargs)`` on the shared pool."""
    return EvaluationTask(fn, *args, **kwargs)
