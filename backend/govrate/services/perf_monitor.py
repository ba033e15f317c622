"""Timing and counters for pricing calculations."""
import time
import logging
import threading
import functools
from typing import Any, Callable, Dict

logger = logging.getLogger("govrate.perf")


def timed(func: Callable) -> Callable:
    """
    Decorator that logs execution time and counts the call in ``tracker``.

    Usage::

        @timed
        def summarize(...):
            ...
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 3)
            tracker.record_call(func.__qualname__, duration_ms)
            logger.debug(
                "function timed",
                extra={
                    "function": func.__qualname__,
                    "duration_ms": duration_ms,
                },
            )
    return wrapper


class CalculationTracker:
    """
    Thread-safe in-memory counters for engine operations.

    Tracks call counts and cumulative duration per operation, plus how many
    validation findings of each severity have been produced.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._calls: Dict[str, int] = {}
        self._durations_ms: Dict[str, float] = {}
        self._findings: Dict[str, int] = {}

    def record_call(self, operation: str, duration_ms: float) -> None:
        with self._lock:
            self._calls[operation] = self._calls.get(operation, 0) + 1
            self._durations_ms[operation] = self._durations_ms.get(operation, 0.0) + duration_ms

    def record_findings(self, severity: str, count: int = 1) -> None:
        with self._lock:
            self._findings[severity] = self._findings.get(severity, 0) + count

    def get_metrics(self) -> Dict[str, Any]:
        """
        Return a snapshot of all collected counters.

        Returns
        -------
        dict with keys:
            calls              : dict  {operation: count}
            avg_duration_ms    : dict  {operation: avg_ms}
            findings           : dict  {severity: count}
            total_calls        : int
        """
        with self._lock:
            avgs = {
                op: round(self._durations_ms[op] / n, 3) if n else 0.0
                for op, n in self._calls.items()
            }
            return {
                "calls": dict(self._calls),
                "avg_duration_ms": avgs,
                "findings": dict(self._findings),
                "total_calls": sum(self._calls.values()),
            }

    def reset(self) -> None:
        """Reset all counters (useful in tests)."""
        with self._lock:
            self._calls.clear()
            self._durations_ms.clear()
            self._findings.clear()


# Module-level singleton; import this instance everywhere else.
tracker = CalculationTracker()
