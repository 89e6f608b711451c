"""Metrics hooks. Pass a MetricsHook to clients and helpers to collect them."""

from . import names
from .base import MetricsHook, NoOpMetricsHook

__all__ = [
    "MetricsHook",
    "NoOpMetricsHook",
    "names",
]
