"""Data models for the benchmark metrics pipeline."""

from .badge import Badge
from .benchmark import (
    BenchmarkMetrics,
    BenchmarkType,
    HistoricalDataPoint,
    TrendDirection,
    TrendMetrics,
)
from .jmh import JmhBenchmarkResult, PrimaryMetric
from .metrics import HttpEndpointMetrics, MetricSample


__all__ = [
    "Badge",
    "BenchmarkMetrics",
    "BenchmarkType",
    "HistoricalDataPoint",
    "HttpEndpointMetrics",
    "JmhBenchmarkResult",
    "MetricSample",
    "PrimaryMetric",
    "TrendDirection",
    "TrendMetrics",
]
