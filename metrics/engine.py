"""In-process metric storage.

The engine owns every series value. Callers register a typed map once,
fetch per-series handles from it with ``MetricMap.get`` and record through
those handles. ``MetricsEngine.snapshot`` copies the current state of every
series for exposition.
"""
import bisect
import dataclasses
import itertools
import threading
from typing import Any, Dict, Hashable, List, Optional, Sequence

from .errors import ConfigurationError
from .models import MetricSnapshot, MetricType
from logging_config import get_logger


logger = get_logger(__name__)


def labels_for_key(key: Hashable) -> Dict[str, str]:
    """Derive the label set of a series from its map key"""
    if key is None:
        return {}
    if dataclasses.is_dataclass(key) and not isinstance(key, type):
        return {f.name: str(getattr(key, f.name)) for f in dataclasses.fields(key)}
    return {"key": str(key)}


class Metric:
    """A single series. Updates and reads are guarded by the series' own lock."""

    def __init__(self, metric_id: int, metric_map: "MetricMap", labels: Dict[str, str]):
        self.id = metric_id
        self.labels = labels
        self._map = metric_map
        self._lock = threading.Lock()
        self._value = 0.0
        self._counts = [0] * (len(metric_map.bounds) + 1) if metric_map.is_histogram else []

    def add(self, delta: float) -> None:
        """Add ``delta`` to a counter or gauge"""
        self._require_scalar("add")
        if self._map.metric_type == MetricType.COUNTER and delta < 0:
            logger.debug("Ignoring negative counter delta", metric=self._map.name, delta=delta)
            return
        with self._lock:
            self._value += delta

    def set(self, value: float) -> None:
        """Overwrite the value of a counter or gauge"""
        self._require_scalar("set")
        with self._lock:
            self._value = value

    def put(self, observation: float) -> None:
        """Record one histogram observation"""
        if not self._map.is_histogram:
            raise TypeError(f"put() is only valid for histograms, {self._map.name} is a {self._map.metric_type.value}")
        idx = bisect.bisect_left(self._map.bounds, observation)
        with self._lock:
            self._value += observation
            self._counts[idx] += 1

    def snapshot(self) -> MetricSnapshot:
        with self._lock:
            value = self._value
            counts = list(self._counts)
        return MetricSnapshot(
            id=self.id,
            name=self._map.name,
            help=self._map.help,
            type=self._map.metric_type,
            value=value,
            labels=dict(self.labels),
            bounds=list(self._map.bounds),
            counts=counts,
        )

    def _require_scalar(self, operation: str) -> None:
        if self._map.is_histogram:
            raise TypeError(f"{operation}() is not valid for histogram {self._map.name}, use put()")


class MetricMap:
    """A named, typed family of series keyed by an arbitrary hashable key"""

    def __init__(self, engine: "MetricsEngine", metric_type: MetricType, name: str,
                 help_text: str, bounds: Sequence[float]):
        self.metric_type = metric_type
        self.name = name
        self.help = help_text
        self.bounds = list(bounds)
        self._engine = engine
        self._lock = threading.Lock()
        self._series: Dict[Any, Metric] = {}

    @property
    def is_histogram(self) -> bool:
        return self.metric_type == MetricType.HISTOGRAM

    def get(self, key: Hashable = None) -> Metric:
        """Get the series for ``key``, creating it on first use"""
        with self._lock:
            metric = self._series.get(key)
            if metric is None:
                metric = Metric(self._engine.next_id(), self, labels_for_key(key))
                self._series[key] = metric
                logger.debug("Created series", metric=self.name, labels=metric.labels, event_type="series_created")
            return metric

    def series(self) -> List[Metric]:
        with self._lock:
            return list(self._series.values())


class MetricsEngine:
    """Registry of metric maps and source of snapshots"""

    def __init__(self):
        self._lock = threading.Lock()
        self._maps: Dict[str, MetricMap] = {}
        self._ids = itertools.count(1)

    def next_id(self) -> int:
        return next(self._ids)

    def register_map(self, metric_type: MetricType, name: str, help_text: str = "",
                     buckets: Optional[Sequence[float]] = None) -> MetricMap:
        """Register a typed metric map, or return the one already registered under ``name``.

        ``buckets`` are only used by histograms and must be strictly increasing.
        """
        if not name:
            raise ConfigurationError("metric name must not be empty")

        bounds: List[float] = []
        if metric_type == MetricType.HISTOGRAM:
            bounds = [float(b) for b in (buckets or [])]
            for lower, upper in zip(bounds, bounds[1:]):
                if not lower < upper:
                    raise ConfigurationError(f"histogram {name} bounds must be strictly increasing: {bounds}")

        with self._lock:
            existing = self._maps.get(name)
            if existing is not None:
                if existing.metric_type != metric_type:
                    raise ConfigurationError(
                        f"metric {name} already registered as {existing.metric_type.value}, "
                        f"cannot register as {metric_type.value}"
                    )
                return existing

            metric_map = MetricMap(self, metric_type, name, help_text, bounds)
            self._maps[name] = metric_map

        logger.debug("Registered metric map", metric=name, metric_type=metric_type.value, event_type="metric_registered")
        return metric_map

    def get_map(self, name: str) -> Optional[MetricMap]:
        with self._lock:
            return self._maps.get(name)

    def snapshot(self) -> List[MetricSnapshot]:
        """Snapshot every series of every registered map"""
        with self._lock:
            maps = list(self._maps.values())
        return [metric.snapshot() for metric_map in maps for metric in metric_map.series()]

    def series_count(self) -> int:
        with self._lock:
            maps = list(self._maps.values())
        return sum(len(metric_map.series()) for metric_map in maps)


default_engine = MetricsEngine()
