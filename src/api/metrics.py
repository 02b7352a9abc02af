"""Metrics service for tracking recommendation cycles.

Singleton service counting cycles, their latency and how many partitions
the workers processed.
"""

import threading
from typing import Dict


class MetricsService:
    """Singleton service for tracking cycle metrics.

    Thread-safe counters for recommendation cycles and partition outcomes.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        """Create singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(MetricsService, cls).__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize metrics counters."""
        if self._initialized:
            return

        self._lock = threading.Lock()
        self.reset()
        self._initialized = True

    def record_cycle(
        self,
        latency_ms: float,
        partitions_total: int,
        partitions_succeeded: int,
    ) -> None:
        """Record a recommendation cycle.

        Args:
            latency_ms: Duration of the cycle in milliseconds
            partitions_total: Partitions produced for the cycle
            partitions_succeeded: Partitions whose results were merged
        """
        with self._lock:
            self._cycle_count += 1
            self._total_latency_ms += latency_ms
            self._max_latency_ms = max(self._max_latency_ms, latency_ms)
            self._partitions_total += partitions_total
            self._partitions_succeeded += partitions_succeeded
            if partitions_succeeded < partitions_total:
                self._degraded_cycles += 1

    def get_metrics(self) -> Dict:
        """Get current metrics.

        Returns:
            Dictionary with metrics including:
            - cycle_count: Total number of recommendation cycles
            - degraded_cycles: Cycles where at least one partition was lost
            - average_latency_ms: Average cycle latency in milliseconds
            - max_latency_ms: Maximum cycle latency observed
            - partitions_total: Partitions produced across all cycles
            - partitions_succeeded: Partitions merged across all cycles
        """
        with self._lock:
            avg_latency = (
                self._total_latency_ms / self._cycle_count
                if self._cycle_count > 0
                else 0.0
            )

            return {
                "cycle_count": self._cycle_count,
                "degraded_cycles": self._degraded_cycles,
                "average_latency_ms": round(avg_latency, 2),
                "max_latency_ms": round(self._max_latency_ms, 2),
                "partitions_total": self._partitions_total,
                "partitions_succeeded": self._partitions_succeeded,
            }

    def reset(self) -> None:
        """Reset all metrics (useful for testing)."""
        with self._lock:
            self._cycle_count = 0
            self._degraded_cycles = 0
            self._total_latency_ms = 0.0
            self._max_latency_ms = 0.0
            self._partitions_total = 0
            self._partitions_succeeded = 0


# Global singleton instance
metrics_service = MetricsService()
