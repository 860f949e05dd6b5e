"""
Poloniex Futures - Adapter Metrics.

============================================================
PURPOSE
============================================================
In-process bookkeeping of adapter round trips.

METRICS TRACKED:
- Request latency (overall and per endpoint template)
- Request success/failure counts
- Failures by error category and exchange code
- Declared rate limit weight consumed
- Orders created and canceled

Bookkeeping only: nothing here throttles or retries.

============================================================
"""

from collections import Counter, defaultdict, deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional

from .errors import ErrorCategory


# ============================================================
# STATS
# ============================================================

@dataclass
class LatencyStats:
    """Latency statistics."""

    count: int = 0
    total_ms: float = 0.0
    min_ms: float = float("inf")
    max_ms: float = 0.0

    @property
    def avg_ms(self) -> float:
        return self.total_ms / self.count if self.count > 0 else 0.0

    def record(self, latency_ms: float) -> None:
        self.count += 1
        self.total_ms += latency_ms
        self.min_ms = min(self.min_ms, latency_ms)
        self.max_ms = max(self.max_ms, latency_ms)

    def to_dict(self) -> Dict[str, float]:
        return {
            "count": self.count,
            "avg_ms": self.avg_ms,
            "min_ms": self.min_ms if self.min_ms != float("inf") else 0,
            "max_ms": self.max_ms,
        }


# ============================================================
# ADAPTER METRICS
# ============================================================

class AdapterMetrics:
    """
    Metrics collector for one adapter instance.
    """

    def __init__(self, exchange_id: str, max_recent: int = 100):
        self._exchange_id = exchange_id
        self._max_recent = max_recent
        self.reset()

    # --------------------------------------------------------
    # RECORDING
    # --------------------------------------------------------

    def record_request(
        self,
        endpoint: str,
        latency_ms: float,
        success: bool,
        status_code: Optional[int] = None,
        error_category: Optional[ErrorCategory] = None,
        error_code: Optional[str] = None,
        weight: Optional[float] = None,
    ) -> None:
        """
        Record one round trip.

        Args:
            endpoint: Endpoint path template
            latency_ms: Request latency in ms
            success: Whether the call succeeded
            status_code: HTTP status code (None if never received)
            error_category: Category of the raised failure
            error_code: Exchange error code of the failure
            weight: Declared rate limit weight of the endpoint
        """
        self._latency[endpoint].record(latency_ms)
        self._latency["_all"].record(latency_ms)

        if weight:
            self._weight_consumed += weight

        if success:
            self._success += 1
        else:
            self._failure += 1
            if error_category is not None:
                self._error_categories[error_category.value] += 1
            if error_code:
                self._error_codes[error_code] += 1

        self._recent_requests.append({
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "endpoint": endpoint,
            "latency_ms": latency_ms,
            "success": success,
            "status_code": status_code,
            "error_code": error_code,
        })

    def record_order_created(self) -> None:
        self._orders_created += 1

    def record_orders_canceled(self, count: int = 1) -> None:
        self._orders_canceled += count

    # --------------------------------------------------------
    # REPORTING
    # --------------------------------------------------------

    @property
    def weight_consumed(self) -> float:
        return self._weight_consumed

    def get_summary(self) -> Dict[str, Any]:
        """
        Get metrics summary.

        Returns:
            Dict with all metrics
        """
        uptime = (datetime.now(timezone.utc) - self._start_time).total_seconds()
        total = self._success + self._failure

        return {
            "exchange_id": self._exchange_id,
            "uptime_seconds": uptime,
            "requests": {
                "total": total,
                "success": self._success,
                "failure": self._failure,
                "success_rate": self._success / total if total > 0 else 1.0,
                "weight_consumed": self._weight_consumed,
            },
            "latency": self._latency["_all"].to_dict(),
            "orders": {
                "created": self._orders_created,
                "canceled": self._orders_canceled,
            },
            "errors": {
                "rate_limit_hits": self._error_categories.get(ErrorCategory.RATE_LIMIT.value, 0),
                "timeouts": self._error_categories.get(ErrorCategory.TIMEOUT.value, 0),
                "by_category": dict(self._error_categories),
                "by_code": dict(self._error_codes),
            },
        }

    def get_latency_by_endpoint(self) -> Dict[str, Dict[str, float]]:
        return {
            endpoint: stats.to_dict()
            for endpoint, stats in self._latency.items()
            if endpoint != "_all"
        }

    def get_recent_requests(self, limit: int = 20) -> List[Dict[str, Any]]:
        recent = list(self._recent_requests)
        return recent[-limit:] if limit > 0 else []

    def get_error_distribution(self) -> Dict[str, int]:
        return dict(self._error_codes)

    def reset(self) -> None:
        """Reset all metrics."""
        self._start_time = datetime.now(timezone.utc)
        self._latency: Dict[str, LatencyStats] = defaultdict(LatencyStats)
        self._success = 0
        self._failure = 0
        self._weight_consumed = 0.0
        self._orders_created = 0
        self._orders_canceled = 0
        self._error_categories: Counter = Counter()
        self._error_codes: Counter = Counter()
        self._recent_requests: Deque[Dict[str, Any]] = deque(maxlen=self._max_recent)


# ============================================================
# METRICS AGGREGATOR
# ============================================================

class MetricsAggregator:
    """
    Aggregates metrics from multiple adapter instances.
    """

    def __init__(self):
        self._adapters: Dict[str, AdapterMetrics] = {}

    def register(self, name: str, metrics: AdapterMetrics) -> None:
        self._adapters[name] = metrics

    def unregister(self, name: str) -> None:
        self._adapters.pop(name, None)

    def get_all_summaries(self) -> Dict[str, Dict[str, Any]]:
        return {name: metrics.get_summary() for name, metrics in self._adapters.items()}

    def get_aggregate_summary(self) -> Dict[str, Any]:
        """Totals across all registered adapters."""
        total_success = 0
        total_failure = 0
        total_weight = 0.0

        for metrics in self._adapters.values():
            summary = metrics.get_summary()
            total_success += summary["requests"]["success"]
            total_failure += summary["requests"]["failure"]
            total_weight += summary["requests"]["weight_consumed"]

        total = total_success + total_failure
        return {
            "adapters": list(self._adapters.keys()),
            "total_requests": total,
            "total_success": total_success,
            "total_failure": total_failure,
            "success_rate": total_success / total if total > 0 else 1.0,
            "weight_consumed": total_weight,
        }


# Global aggregator instance
_global_aggregator = MetricsAggregator()


def get_global_aggregator() -> MetricsAggregator:
    """Get global metrics aggregator."""
    return _global_aggregator
