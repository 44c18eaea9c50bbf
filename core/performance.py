import time
from collections import defaultdict, deque
from contextlib import contextmanager
from datetime import datetime
from typing import Deque, Dict, Optional

from core import constants
from core.logger import get_logger

logger = get_logger(__name__)


class PerformanceMonitor:
    """
    Records duration and outcome of named operations (one per fetched URL).
    Only the most recent `sample_limit` durations are kept per operation;
    success and failure counts are cumulative.
    """

    def __init__(self, sample_limit: int = constants.PERFORMANCE_SAMPLE_LIMIT):
        self.sample_limit = sample_limit
        self.metrics: Dict[str, Deque[dict]] = defaultdict(lambda: deque(maxlen=self.sample_limit))
        self.success_counts: Dict[str, int] = defaultdict(int)
        self.failure_counts: Dict[str, int] = defaultdict(int)

    @contextmanager
    def measure(self, operation_name: str, context: Optional[Dict] = None):
        """
        Times the enclosed block. Exceptions are counted and re-raised.

        Usage:
            with monitor.measure("fetch_url", {"url": url}):
                html = await fetch(...)
        """
        start_time = time.perf_counter()
        error = None

        try:
            yield
            self.success_counts[operation_name] += 1
        except Exception as e:
            error = e
            self.failure_counts[operation_name] += 1
            raise
        finally:
            duration = time.perf_counter() - start_time
            self.metrics[operation_name].append(
                {
                    "duration": duration,
                    "timestamp": datetime.now(),
                    "success": error is None,
                }
            )

            if error:
                logger.warning(
                    f"[PERF] {operation_name} failed: {error}",
                    duration_ms=duration * 1000,
                    context=context or {},
                )
            else:
                logger.debug(
                    f"[PERF] {operation_name} completed",
                    duration_ms=duration * 1000,
                    context=context or {},
                )

    def get_stats(self, operation_name: str) -> Dict:
        """Summary of one operation, or {} if it never ran."""
        durations = [m["duration"] for m in self.metrics.get(operation_name, ())]
        if not durations:
            return {}

        return {
            "operation": operation_name,
            "count": len(durations),
            "success_count": self.success_counts[operation_name],
            "failure_count": self.failure_counts[operation_name],
            "avg_duration_ms": sum(durations) * 1000 / len(durations),
            "max_duration_ms": max(durations) * 1000,
        }

    def reset(self):
        self.metrics.clear()
        self.success_counts.clear()
        self.failure_counts.clear()


_performance_monitor: Optional[PerformanceMonitor] = None


def get_performance_monitor() -> PerformanceMonitor:
    """Process-wide monitor shared by every fetcher."""
    global _performance_monitor
    if _performance_monitor is None:
        _performance_monitor = PerformanceMonitor()
    return _performance_monitor
