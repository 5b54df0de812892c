"""Histogram bucket helpers"""
from typing import List

from .errors import ConfigurationError


def new_buckets(start: float, factor: float, count: int) -> List[float]:
    """Return ``count`` exponentially growing bucket upper bounds.

    The first bound is ``start`` and each following bound is the previous
    one multiplied by ``factor``.
    """
    if count < 1:
        raise ConfigurationError("new_buckets needs a positive count")
    if start <= 0:
        raise ConfigurationError("new_buckets needs a positive start value")
    if factor <= 1:
        raise ConfigurationError("new_buckets needs a factor greater than 1")

    buckets = []
    for _ in range(count):
        buckets.append(start)
        start *= factor
    return buckets
