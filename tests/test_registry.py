"""Tests for the complex metric registry"""
import threading
from datetime import timedelta

import pytest

from metrics.engine import MetricsEngine
from metrics.registry import ComplexMetricRegistry


BOUNDS = [0.01, 0.1, 1]


def find(engine, name):
    return [s for s in engine.snapshot() if s.name == name]


class TestComplexMetricRegistry:
    """Test idempotent registration"""

    def setup_method(self):
        """Setup test fixtures"""
        self.engine = MetricsEngine()
        self.registry = ComplexMetricRegistry(self.engine)

    def test_registers_three_maps(self):
        """Test sub-metric names and types"""
        metric = self.registry.register_complex_map("db", "Database calls", BOUNDS)
        assert metric.counter.name == "db_counter"
        assert metric.gauge.name == "db_gauge"
        assert metric.histogram.name == "db_histogram"
        assert self.engine.get_map("db_histogram").bounds == BOUNDS
        assert self.engine.get_map("db_counter").help == "Database calls"

    def test_register_twice_returns_same_bundle(self):
        first = self.registry.register_complex_map("db", "Database calls", BOUNDS)
        second = self.registry.register_complex_map("db", "ignored", [5])
        assert first is second
        assert self.registry.list_metrics() == ["db"]

    def test_bundles_observe_each_other(self):
        """Test writes through the first bundle are visible through the second's names"""
        first = self.registry.register_complex_map("x", "help", BOUNDS)
        first.add("op", "read", counter_delta=3)
        second = self.registry.register_complex_map("x", "help", BOUNDS)
        second.add("op", "read", counter_delta=2)

        counters = find(self.engine, second.counter.name)
        assert len(counters) == 1
        assert counters[0].value == 5

    def test_concurrent_registration(self):
        """Test concurrent registration yields one bundle"""
        results = []

        def worker():
            results.append(self.registry.register_complex_map("race", "", BOUNDS))

        threads = [threading.Thread(target=worker) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len({id(m) for m in results}) == 1
        assert self.registry.get("race") is results[0]

    def test_get_unknown(self):
        assert self.registry.get("missing") is None


class TestComplexMetricAdd:
    """Test the conditional update policy"""

    def setup_method(self):
        """Setup test fixtures"""
        self.engine = MetricsEngine()
        self.metric = ComplexMetricRegistry(self.engine).register_complex_map("db", "", BOUNDS)

    def test_all_parts_recorded(self):
        self.metric.add("query", "users", 1, 2, timedelta(milliseconds=50))

        assert find(self.engine, "db_counter")[0].value == 1
        assert find(self.engine, "db_gauge")[0].value == 2
        histogram = find(self.engine, "db_histogram")[0]
        assert histogram.counts == [0, 1, 0, 0]
        assert histogram.value == 0.05

    def test_non_positive_counter_skipped(self):
        self.metric.add("query", "users", 0, 1)
        self.metric.add("query", "users", -1, 1)
        assert find(self.engine, "db_counter") == []
        assert find(self.engine, "db_gauge")[0].value == 2

    def test_zero_gauge_skipped(self):
        self.metric.add("query", "users", 1, 0)
        assert find(self.engine, "db_gauge") == []

    def test_negative_gauge_recorded(self):
        self.metric.add("query", "users", gauge_delta=1)
        self.metric.add("query", "users", gauge_delta=-1)
        gauge = find(self.engine, "db_gauge")[0]
        assert gauge.value == 0

    def test_negative_duration_skipped(self):
        self.metric.add("query", "users", 1, 0, timedelta(seconds=-1))
        self.metric.add("query", "users", 1, 0, -0.5)
        self.metric.add("query", "users", 1, 0, None)
        assert find(self.engine, "db_histogram") == []

    def test_zero_duration_recorded(self):
        """Test a zero duration is a valid observation"""
        self.metric.add("query", "users", duration=timedelta(0))
        self.metric.add("query", "users", duration=0.0)
        histogram = find(self.engine, "db_histogram")[0]
        assert histogram.counts == [2, 0, 0, 0]
        assert histogram.value == 0

    def test_duration_in_seconds(self):
        """Test durations are observed as fractional seconds"""
        self.metric.add("query", "users", duration=timedelta(seconds=2, milliseconds=500))
        self.metric.add("query", "users", duration=0.2)
        histogram = find(self.engine, "db_histogram")[0]
        assert histogram.counts == [0, 0, 1, 1]
        assert histogram.value == pytest.approx(2.7)

    def test_series_keyed_by_label(self):
        self.metric.add("query", "users", 1)
        self.metric.add("query", "orders", 1)
        counters = find(self.engine, "db_counter")
        assert sorted(s.labels["item"] for s in counters) == ["orders", "users"]
