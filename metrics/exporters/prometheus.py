"""Prometheus text exposition format.

Format reference:
https://github.com/prometheus/docs/blob/main/content/docs/instrumenting/exposition_formats.md#text-format-details
"""
import math
import time
from decimal import Decimal
from itertools import groupby
from typing import Dict, Iterable, List, Optional

from ..engine import MetricsEngine, default_engine
from ..models import MetricSnapshot, MetricType
from logging_config import get_logger, log_scrape


logger = get_logger(__name__)

CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


def escape_label_value(value: str) -> str:
    """Escape backslash, line feed and double-quote in a label value"""
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def format_float(value: float) -> str:
    """Shortest decimal text that round-trips ``value``, without an exponent"""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    text = format(Decimal(repr(float(value))), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_labels(labels: Dict[str, str], le: Optional[float] = None) -> str:
    """Render a label set sorted by name, with the histogram ``le`` label last"""
    if not labels and le is None:
        return ""
    pairs = [f'{name}="{escape_label_value(labels[name])}"' for name in sorted(labels)]
    if le is not None:
        pairs.append(f'le="{format_float(le)}"')
    return "{" + ",".join(pairs) + "}"


def _entry(name: str, value: float, labels: Dict[str, str], suffix: str = "", le: Optional[float] = None) -> str:
    return f"{name}{suffix}{format_labels(labels, le)} {format_float(value)}"


def _histogram_lines(metric: MetricSnapshot) -> List[str]:
    # Buckets are cumulative, in increasing order of their bound, and the
    # +Inf bucket must be present with the same value as _count.
    lines = []
    count = 0
    has_inf = False
    for idx, bound in enumerate(metric.bounds):
        count += metric.counts[idx]
        lines.append(_entry(metric.name, count, metric.labels, "_bucket", bound))
        if math.isinf(bound) and bound > 0:
            has_inf = True

    count += metric.counts[len(metric.bounds)]
    if not has_inf:
        lines.append(_entry(metric.name, count, metric.labels, "_bucket", math.inf))
    lines.append(_entry(metric.name, metric.value, metric.labels, "_sum"))
    lines.append(_entry(metric.name, count, metric.labels, "_count"))
    return lines


def _group_lines(metrics: List[MetricSnapshot]) -> List[str]:
    """Lines for all series sharing one metric name"""
    first = metrics[0]
    lines = []

    # All series share the name, so HELP and TYPE are written once.
    if first.help:
        lines.append(f"# HELP {first.name} {first.help}")
    lines.append(f"# TYPE {first.name} {first.type.value}")

    is_histogram = first.type == MetricType.HISTOGRAM
    for idx, metric in enumerate(metrics):
        if is_histogram:
            lines.extend(_histogram_lines(metric))
            if idx != len(metrics) - 1:
                lines.append("")
        else:
            lines.append(_entry(metric.name, metric.value, metric.labels))

    lines.append("")
    return lines


def translate(snapshots: Iterable[MetricSnapshot]) -> str:
    """Translate metric snapshots to the Prometheus text format.

    Series are grouped by name, groups are ordered by name and series inside
    a group by id, so the output does not depend on the input order.
    """
    ordered = sorted(snapshots, key=lambda m: (m.name, m.id))

    lines = []
    for _, group in groupby(ordered, key=lambda m: m.name):
        lines.extend(_group_lines(list(group)))

    if not lines:
        return ""
    return "\n".join(lines) + "\n"


class PrometheusExporter:
    """Renders the current state of a metrics engine"""

    def __init__(self, engine: Optional[MetricsEngine] = None):
        self.engine = engine or default_engine

    def export_metrics(self) -> str:
        start_time = time.time()
        snapshots = self.engine.snapshot()
        content = translate(snapshots)
        log_scrape(logger, len(snapshots), time.time() - start_time)
        return content
