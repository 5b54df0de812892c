"""Metric data models"""
from dataclasses import dataclass, field
from typing import Dict, List
from enum import Enum


class MetricType(Enum):
    """Prometheus metric types"""
    COUNTER = "counter"
    GAUGE = "gauge"
    HISTOGRAM = "histogram"


@dataclass(frozen=True)
class Label:
    """Two-part key identifying one series within a labeled metric map"""
    name: str
    item: str


@dataclass
class MetricSnapshot:
    """Point-in-time readout of a single series.

    For histograms ``value`` is the sum of all observations, ``bounds`` holds
    the bucket upper bounds and ``counts`` the per-bucket observation counts.
    ``counts`` has one more entry than ``bounds``; the last one is the
    overflow (+Inf) bucket.
    """
    id: int
    name: str
    help: str
    type: MetricType
    value: float
    labels: Dict[str, str] = field(default_factory=dict)
    bounds: List[float] = field(default_factory=list)
    counts: List[int] = field(default_factory=list)

    def __post_init__(self):
        # Ensure labels is never None
        if self.labels is None:
            self.labels = {}
