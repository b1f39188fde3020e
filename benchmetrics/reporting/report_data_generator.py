"""Builds the benchmark-data.json document consumed by the HTML pages.

The same document is archived into the history directory, so its
``metadata.timestamp`` and ``overview`` fields are what later runs read back
for trend analysis.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from loguru import logger

from ..models.benchmark import BenchmarkMetrics, BenchmarkType, HistoricalDataPoint, TrendDirection, TrendMetrics
from ..models.jmh import JmhBenchmarkResult
from ..utils.file_io import write_json_atomic
from .badge_generator import grade_css_class
from .conversion import (
    format_for_display,
    format_latency,
    format_throughput,
    to_milliseconds_per_op,
    to_ops_per_second,
)
from .trend_processor import TrendDataProcessor

DATA_DIR = "data"
DATA_FILE_NAME = "benchmark-data.json"
REPORT_VERSION = "1.0"
DISPLAY_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S UTC"
NO_HISTORY_MESSAGE = "Historical data not yet available"

PERCENTILE_CHART_KEYS = ("0.0", "50.0", "90.0", "95.0", "99.0", "99.9", "99.99", "100.0")
PERCENTILE_CHART_LABELS = ("Min", "P50", "P90", "P95", "P99", "P99.9", "P99.99", "Max")


def is_throughput_mode(result: JmhBenchmarkResult) -> bool:
    return result.mode == "thrpt" or "ops" in result.unit


def is_latency_mode(result: JmhBenchmarkResult) -> bool:
    return result.mode in ("avgt", "sample") or "/op" in result.unit


def iso_timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def format_score(score: float, unit: str) -> str:
    """Human-readable score in ops/s or ms/s depending on the unit."""
    if "ops" in unit:
        return format_throughput(to_ops_per_second(score, unit))
    if "/op" in unit:
        return format_latency(to_milliseconds_per_op(score, unit))
    return f"{format_for_display(score)} {unit}".strip()


def trend_summary(trend: TrendMetrics) -> str:
    change = abs(trend.change_percentage)
    if trend.direction is TrendDirection.STABLE:
        return f"Performance is stable ({change:.1f}% change)"
    if trend.direction is TrendDirection.UP:
        return f"Performance improved by {change:.1f}%"
    return f"Performance decreased by {change:.1f}%"


class ReportDataGenerator:
    """Assembles and writes the report data document of one run."""

    def __init__(self, benchmark_type: BenchmarkType = BenchmarkType.MICRO):
        self.benchmark_type = benchmark_type

    def create_metadata(self, now: datetime) -> dict[str, Any]:
        return {
            "timestamp": iso_timestamp(now),
            "displayTimestamp": now.astimezone(timezone.utc).strftime(DISPLAY_TIMESTAMP_FORMAT),
            "benchmarkType": self.benchmark_type.display_name,
            "reportVersion": REPORT_VERSION,
        }

    @staticmethod
    def create_overview(metrics: BenchmarkMetrics) -> dict[str, Any]:
        return {
            "throughput": metrics.throughput_formatted,
            "latency": metrics.latency_formatted,
            "throughputValue": metrics.throughput,
            "latencyValue": metrics.latency,
            "throughputBenchmarkName": metrics.throughput_benchmark_name,
            "latencyBenchmarkName": metrics.latency_benchmark_name,
            "performanceScore": round(metrics.performance_score, 2),
            "performanceGrade": metrics.performance_grade,
            "performanceGradeClass": grade_css_class(metrics.performance_grade),
        }

    @staticmethod
    def create_benchmark_results(results: Sequence[JmhBenchmarkResult]) -> list[dict[str, Any]]:
        entries: list[dict[str, Any]] = []
        for result in results:
            metric = result.primary_metric
            entry: dict[str, Any] = {
                "name": result.simple_name,
                "fullName": result.benchmark,
                "mode": result.mode,
                "score": format_score(result.score, result.unit),
                "scoreUnit": result.unit,
            }
            if is_throughput_mode(result):
                entry["throughput"] = format_throughput(to_ops_per_second(result.score, result.unit))
            elif is_latency_mode(result):
                entry["latency"] = format_latency(to_milliseconds_per_op(result.score, result.unit))

            entry["error"] = metric.score_error
            entry["errorPercentage"] = metric.score_error / result.score * 100 if result.score else 0.0
            if len(metric.score_confidence) == 2:
                entry["confidenceLow"] = metric.score_confidence[0]
                entry["confidenceHigh"] = metric.score_confidence[1]
            if metric.score_percentiles:
                entry["percentiles"] = dict(metric.score_percentiles)
            entries.append(entry)
        return entries

    @staticmethod
    def create_chart_data(results: Sequence[JmhBenchmarkResult]) -> dict[str, Any]:
        labels: list[str] = []
        throughput: list[float | None] = []
        latency: list[float | None] = []
        percentile_data: dict[str, list[float | None]] = {}

        for result in results:
            labels.append(result.simple_name)
            if is_throughput_mode(result):
                throughput.append(to_ops_per_second(result.score, result.unit))
                latency.append(None)
            elif is_latency_mode(result):
                throughput.append(None)
                latency.append(to_milliseconds_per_op(result.score, result.unit))
            else:
                throughput.append(None)
                latency.append(None)

            if result.mode in ("avgt", "sample"):
                percentile_data[result.simple_name] = [
                    to_milliseconds_per_op(value, result.unit) if value is not None else None
                    for value in (result.primary_metric.percentile(k) for k in PERCENTILE_CHART_KEYS)
                ]

        return {
            "labels": labels,
            "throughput": throughput,
            "latency": latency,
            "percentilesData": {
                "percentileLabels": list(PERCENTILE_CHART_LABELS),
                "benchmarks": list(percentile_data),
                "data": percentile_data,
            },
        }

    @staticmethod
    def create_trend_data(
        metrics: BenchmarkMetrics,
        history: Sequence[HistoricalDataPoint],
        trend: TrendMetrics | None,
    ) -> dict[str, Any]:
        if not history or trend is None:
            return {"available": False, "message": NO_HISTORY_MESSAGE}

        return {
            "available": True,
            "direction": trend.direction.value,
            "changePercentage": trend.change_percentage,
            "movingAverage": trend.moving_average,
            "throughputTrend": trend.throughput_trend,
            "latencyTrend": trend.latency_trend,
            "chartData": TrendDataProcessor.generate_trend_chart_data(history, metrics),
            "summary": trend_summary(trend),
        }

    def build(
        self,
        results: Sequence[JmhBenchmarkResult],
        metrics: BenchmarkMetrics,
        history: Sequence[HistoricalDataPoint] = (),
        trend: TrendMetrics | None = None,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """Build the full report data document."""
        now = now or datetime.now(timezone.utc)
        return {
            "metadata": self.create_metadata(now),
            "overview": self.create_overview(metrics),
            "benchmarks": self.create_benchmark_results(results),
            "chartData": self.create_chart_data(results),
            "trends": self.create_trend_data(metrics, history, trend),
        }

    @staticmethod
    def write(report_data: dict[str, Any], output_dir: Path | str) -> Path:
        """Write ``data/benchmark-data.json`` below the output directory.

        Raises:
            FileSystemError: If the document cannot be written
        """
        target = Path(output_dir) / DATA_DIR / DATA_FILE_NAME
        write_json_atomic(target, report_data)
        logger.info(f"Generated report data {target}")
        return target
