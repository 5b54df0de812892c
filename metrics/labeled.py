"""Label-keyed metric maps"""
import threading
from typing import Dict, Generic, Hashable, Optional, Sequence, TypeVar

from .engine import Metric, MetricMap, MetricsEngine, default_engine
from .models import Label, MetricType


K = TypeVar("K", bound=Hashable)


class LabeledMetricMap(Generic[K]):
    """Caches per-series handles of one metric map by key.

    The handles are owned by the engine; this map only remembers them so the
    engine is consulted once per distinct key. Entries are never removed.
    """

    def __init__(self, metric: MetricMap):
        self.metric = metric
        self._lock = threading.Lock()
        self._handles: Dict[K, Metric] = {}

    @property
    def name(self) -> str:
        return self.metric.name

    def get(self, key: K) -> Metric:
        handle = self._handles.get(key)
        if handle is None:
            with self._lock:
                handle = self._handles.get(key)
                if handle is None:
                    handle = self.metric.get(key)
                    self._handles[key] = handle
        return handle

    def __len__(self) -> int:
        return len(self._handles)


class CounterMap(LabeledMetricMap[Label]):
    """Counters keyed by ``(name, item)``"""

    def add(self, name: str, item: str, value: float) -> None:
        self.get(Label(name, item)).add(value)

    def set(self, name: str, item: str, value: float) -> None:
        self.get(Label(name, item)).set(value)


class GaugeMap(LabeledMetricMap[Label]):
    """Gauges keyed by ``(name, item)``"""

    def add(self, name: str, item: str, value: float) -> None:
        self.get(Label(name, item)).add(value)

    def set(self, name: str, item: str, value: float) -> None:
        self.get(Label(name, item)).set(value)


class HistogramMap(LabeledMetricMap[Label]):
    """Histograms keyed by ``(name, item)``"""

    def add(self, name: str, item: str, value: float) -> None:
        """Record ``value`` as one observation"""
        self.get(Label(name, item)).put(value)


def register_counter_map(name: str, help_text: str, engine: Optional[MetricsEngine] = None) -> CounterMap:
    engine = engine or default_engine
    return CounterMap(engine.register_map(MetricType.COUNTER, name, help_text))


def register_gauge_map(name: str, help_text: str, engine: Optional[MetricsEngine] = None) -> GaugeMap:
    engine = engine or default_engine
    return GaugeMap(engine.register_map(MetricType.GAUGE, name, help_text))


def register_histogram_map(name: str, help_text: str, buckets: Sequence[float],
                           engine: Optional[MetricsEngine] = None) -> HistogramMap:
    engine = engine or default_engine
    return HistogramMap(engine.register_map(MetricType.HISTOGRAM, name, help_text, buckets))
