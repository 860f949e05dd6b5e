"""
Adapter Metrics Tests.
"""

from poloniex_futures.errors import ErrorCategory
from poloniex_futures.metrics import AdapterMetrics, MetricsAggregator


class TestAdapterMetrics:
    """Tests for request bookkeeping."""

    def test_empty_summary(self):
        summary = AdapterMetrics("poloniexfutures").get_summary()

        assert summary["requests"]["total"] == 0
        assert summary["requests"]["success_rate"] == 1.0
        assert summary["latency"]["min_ms"] == 0

    def test_success_and_failure(self):
        metrics = AdapterMetrics("poloniexfutures")

        metrics.record_request("ticker", 10.0, True, 200, weight=10)
        metrics.record_request(
            "orders", 30.0, False, 429,
            error_category=ErrorCategory.RATE_LIMIT, error_code="429", weight=1.5,
        )

        summary = metrics.get_summary()
        assert summary["requests"]["total"] == 2
        assert summary["requests"]["success_rate"] == 0.5
        assert summary["requests"]["weight_consumed"] == 11.5
        assert summary["latency"]["avg_ms"] == 20.0
        assert summary["errors"]["rate_limit_hits"] == 1
        assert summary["errors"]["by_category"] == {"RATE_LIMIT": 1}
        assert metrics.get_error_distribution() == {"429": 1}

    def test_latency_by_endpoint(self):
        metrics = AdapterMetrics("poloniexfutures")

        metrics.record_request("orders/{order-id}", 5.0, True)
        metrics.record_request("orders/{order-id}", 15.0, True)

        latency = metrics.get_latency_by_endpoint()
        assert list(latency) == ["orders/{order-id}"]
        assert latency["orders/{order-id}"]["max_ms"] == 15.0

    def test_recent_requests_bounded(self):
        metrics = AdapterMetrics("poloniexfutures", max_recent=3)

        for i in range(5):
            metrics.record_request(f"e{i}", 1.0, True)

        assert [r["endpoint"] for r in metrics.get_recent_requests()] == ["e2", "e3", "e4"]

    def test_orders_and_reset(self):
        metrics = AdapterMetrics("poloniexfutures")
        metrics.record_order_created()
        metrics.record_orders_canceled(3)

        assert metrics.get_summary()["orders"] == {"created": 1, "canceled": 3}

        metrics.reset()
        assert metrics.get_summary()["orders"] == {"created": 0, "canceled": 0}
        assert metrics.weight_consumed == 0.0


class TestMetricsAggregator:
    """Tests for cross-adapter totals."""

    def test_aggregate(self):
        aggregator = MetricsAggregator()
        first = AdapterMetrics("a")
        second = AdapterMetrics("b")
        first.record_request("x", 1.0, True, weight=1)
        second.record_request("x", 1.0, False, weight=2)
        aggregator.register("a", first)
        aggregator.register("b", second)

        summary = aggregator.get_aggregate_summary()

        assert summary["total_requests"] == 2
        assert summary["success_rate"] == 0.5
        assert summary["weight_consumed"] == 3.0
        assert set(aggregator.get_all_summaries()) == {"a", "b"}

        aggregator.unregister("a")
        assert aggregator.get_aggregate_summary()["adapters"] == ["b"]
