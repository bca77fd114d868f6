"""
Performance monitoring for the matching pipeline.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Deque, Dict, Optional

import numpy as np

from .config import PERFORMANCE_CONFIG

logger = logging.getLogger(__name__)


@dataclass
class MetricEntry:
    duration: float
    timestamp: float
    success: bool
    error: Optional[str] = None


class PerformanceMonitor:
    """Records durations per metric name, keeping the most recent samples."""

    def __init__(self, max_samples: Optional[int] = None, slow_threshold: Optional[float] = None):
        self.max_samples = max_samples or PERFORMANCE_CONFIG["max_samples_per_metric"]
        self.slow_threshold = (
            slow_threshold if slow_threshold is not None else PERFORMANCE_CONFIG["slow_operation_seconds"]
        )
        self._metrics: Dict[str, Deque[MetricEntry]] = {}

    @asynccontextmanager
    async def measure(self, metric_name: str) -> AsyncIterator[None]:
        start = time.perf_counter()
        success = True
        error: Optional[str] = None
        try:
            yield
        except Exception as e:
            success = False
            error = str(e)
            raise
        finally:
            duration = time.perf_counter() - start
            self.record(metric_name, duration, success, error)
            if duration > self.slow_threshold:
                logger.warning(f"Slow operation detected: {metric_name} took {duration:.2f} seconds")

    def record(self, metric_name: str, duration: float, success: bool = True, error: Optional[str] = None) -> None:
        entries = self._metrics.setdefault(metric_name, deque(maxlen=self.max_samples))
        entries.append(MetricEntry(duration=duration, timestamp=time.time(), success=success, error=error))

    def get_stats(self, metric_name: str) -> Optional[Dict[str, float]]:
        entries = self._metrics.get(metric_name)
        if not entries:
            return None

        durations = np.array([e.duration for e in entries])
        successes = sum(1 for e in entries if e.success)
        p50, p95, p99 = np.percentile(durations, [50, 95, 99])
        return {
            "count": len(durations),
            "min": float(durations.min()),
            "max": float(durations.max()),
            "avg": float(durations.mean()),
            "p50": float(p50),
            "p95": float(p95),
            "p99": float(p99),
            "success_rate": successes / len(durations),
        }

    def all_stats(self) -> Dict[str, Dict[str, float]]:
        return {name: self.get_stats(name) for name in self._metrics if self._metrics[name]}

    def clear(self) -> None:
        self._metrics.clear()
