"""Metric exporters"""
from .prometheus import CONTENT_TYPE, PrometheusExporter, translate

__all__ = ["CONTENT_TYPE", "PrometheusExporter", "translate"]
