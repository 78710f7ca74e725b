"""Rate limiting utilities for API calls."""

from __future__ import annotations

import os
import threading
import time
from functools import wraps
from typing import Any, Callable, TypeVar

from .. import metrics

_F = TypeVar("_F", bound=Callable[..., Any])

# Rate limit configuration
_TRITON_RATE_LIMIT_PER_SECOND = float(os.getenv("TRITON_RATE_LIMIT_PER_SECOND", "5.0"))

# Track last call time
_triton_last_call_time: float = 0.0
_triton_lock = threading.Lock()


def rate_limit_triton(func: _F) -> _F:
    """Decorator to rate limit Triton CloudAPI calls.

    Spaces calls at least ``1 / TRITON_RATE_LIMIT_PER_SECOND`` seconds apart
    across all worker threads.
    """
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        global _triton_last_call_time
        with _triton_lock:
            current_time = time.time()
            min_interval = 1.0 / _TRITON_RATE_LIMIT_PER_SECOND

            time_since_last_call = current_time - _triton_last_call_time
            if time_since_last_call < min_interval:
                metrics.rate_limit_hits_total.labels(api_type="triton").inc()
                time.sleep(min_interval - time_since_last_call)

            _triton_last_call_time = time.time()
        return func(*args, **kwargs)

    return wrapper  # type: ignore
