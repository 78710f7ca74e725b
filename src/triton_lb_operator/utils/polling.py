"""Bounded polling for asynchronous instance operations."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

from .. import metrics
from ..services.triton.exceptions import OperationCancelledError, OperationTimeoutError

logger = logging.getLogger(__name__)


@dataclass
class PollState:
    """Progress of a wait loop."""

    ticks: int = 0
    elapsed: float = 0.0


def wait_for(
    operation: str,
    name: str,
    check: Callable[[], bool],
    timeout: float,
    interval: float,
    stop_event: threading.Event | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> PollState:
    """Call ``check`` every ``interval`` seconds until it returns True.

    Each tick checks for cancellation before calling ``check``, so a stop
    request aborts the wait without another remote call. Errors raised by
    ``check`` propagate unchanged.

    Args:
        operation: Operation name used in errors and metrics (e.g. "create")
        name: Load balancer name
        check: Returns True once the desired state is observed
        timeout: Upper bound in seconds
        interval: Seconds to sleep between ticks
        stop_event: Set to abort the wait
        clock: Monotonic clock, injectable for tests

    Returns:
        Final poll state

    Raises:
        OperationCancelledError: If ``stop_event`` is set
        OperationTimeoutError: If ``timeout`` elapses first
    """
    stop_event = stop_event or threading.Event()
    state = PollState()
    started = clock()

    while True:
        state.elapsed = clock() - started
        if stop_event.is_set():
            metrics.poll_wait_seconds.labels(operation=operation, result="cancelled").observe(state.elapsed)
            raise OperationCancelledError(operation, name, state.elapsed)

        state.ticks += 1
        if check():
            metrics.poll_wait_seconds.labels(operation=operation, result="success").observe(state.elapsed)
            return state

        state.elapsed = clock() - started
        if state.elapsed >= timeout:
            metrics.poll_wait_seconds.labels(operation=operation, result="timeout").observe(state.elapsed)
            raise OperationTimeoutError(operation, name, state.elapsed)

        logger.debug(f"Waiting for {operation} of {name} (tick {state.ticks}, {state.elapsed:.0f}s elapsed)")
        stop_event.wait(min(interval, timeout - state.elapsed))
