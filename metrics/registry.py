"""Registry of complex metrics (counter + gauge + histogram under one name)"""
import threading
from datetime import timedelta
from typing import Dict, List, Optional, Sequence, Union

from .engine import MetricsEngine, default_engine
from .labeled import (
    CounterMap,
    GaugeMap,
    HistogramMap,
    register_counter_map,
    register_gauge_map,
    register_histogram_map,
)
from logging_config import get_logger


logger = get_logger(__name__)

Duration = Union[timedelta, float, None]


class ComplexMetric:
    """A counter, a gauge and a histogram recorded together under one label"""

    def __init__(self, name: str, counter: CounterMap, gauge: GaugeMap, histogram: HistogramMap):
        self.name = name
        self.counter = counter
        self.gauge = gauge
        self.histogram = histogram

    def add(self, name: str, item: str, counter_delta: float = 0, gauge_delta: float = 0,
            duration: Duration = None) -> None:
        """Record one event for the ``(name, item)`` series.

        Only the parts that changed are written: the counter when
        ``counter_delta`` is positive, the gauge when ``gauge_delta`` is
        non-zero, and the histogram when ``duration`` is zero or more.
        ``duration`` is a ``timedelta`` or seconds; ``None`` or a negative
        value means there is nothing to observe.
        """
        if counter_delta > 0:
            self.counter.add(name, item, counter_delta)
        if gauge_delta != 0:
            self.gauge.add(name, item, gauge_delta)

        if duration is None:
            return
        if isinstance(duration, timedelta):
            duration = duration.total_seconds()
        if duration >= 0:
            self.histogram.add(name, item, duration)


class ComplexMetricRegistry:
    """Process-wide registry of complex metrics keyed by name"""

    def __init__(self, engine: Optional[MetricsEngine] = None):
        self.engine = engine or default_engine
        self._lock = threading.Lock()
        self._metrics: Dict[str, ComplexMetric] = {}

    def register_complex_map(self, name: str, help_text: str, buckets: Sequence[float]) -> ComplexMetric:
        """Register the complex metric ``name``, or return the existing one unchanged"""
        with self._lock:
            metric = self._metrics.get(name)
            if metric is None:
                metric = ComplexMetric(
                    name,
                    counter=register_counter_map(name + "_counter", help_text, self.engine),
                    gauge=register_gauge_map(name + "_gauge", help_text, self.engine),
                    histogram=register_histogram_map(name + "_histogram", help_text, buckets, self.engine),
                )
                self._metrics[name] = metric
                logger.info("Registered complex metric", metric=name, buckets=len(buckets), event_type="complex_metric_registered")
            return metric

    def get(self, name: str) -> Optional[ComplexMetric]:
        with self._lock:
            return self._metrics.get(name)

    def list_metrics(self) -> List[str]:
        with self._lock:
            return list(self._metrics.keys())


default_registry = ComplexMetricRegistry()


def register_complex_map(name: str, help_text: str, buckets: Sequence[float]) -> ComplexMetric:
    """Register a complex metric with the default registry"""
    return default_registry.register_complex_map(name, help_text, buckets)
