"""Label-keyed metrics and Prometheus exposition"""
from .buckets import new_buckets
from .engine import MetricsEngine, default_engine
from .errors import ConfigurationError
from .labeled import (
    CounterMap,
    GaugeMap,
    HistogramMap,
    LabeledMetricMap,
    register_counter_map,
    register_gauge_map,
    register_histogram_map,
)
from .models import Label, MetricSnapshot, MetricType
from .registry import ComplexMetric, ComplexMetricRegistry, default_registry, register_complex_map

__all__ = [
    "ComplexMetric",
    "ComplexMetricRegistry",
    "ConfigurationError",
    "CounterMap",
    "GaugeMap",
    "HistogramMap",
    "Label",
    "LabeledMetricMap",
    "MetricSnapshot",
    "MetricType",
    "MetricsEngine",
    "default_engine",
    "default_registry",
    "new_buckets",
    "register_complex_map",
    "register_counter_map",
    "register_gauge_map",
    "register_histogram_map",
]
