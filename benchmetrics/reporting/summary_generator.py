"""benchmark-summary.json: execution status, quality gates and recommendations."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from loguru import logger

from ..config.schemas import ReportConfig
from ..models.benchmark import BenchmarkMetrics, BenchmarkType, TrendMetrics
from ..models.jmh import JmhBenchmarkResult
from ..utils.file_io import write_json_atomic
from .badge_generator import performance_grade
from .conversion import to_ops_per_second
from .report_data_generator import iso_timestamp

SUMMARY_FILE_NAME = "benchmark-summary.json"

LOW_THROUGHPUT = 1_000.0
EXCELLENT_THROUGHPUT = 100_000.0
MIN_BENCHMARK_COVERAGE = 5


def execution_status(results: Sequence[JmhBenchmarkResult]) -> str:
    """FAILED without results, SUCCESS if every score is positive, else PARTIAL."""
    if not results:
        return "FAILED"
    return "SUCCESS" if all(r.score > 0 for r in results) else "PARTIAL"


def average_throughput(results: Sequence[JmhBenchmarkResult]) -> float:
    """Mean ops/s over all entries, latency entries inverted."""
    values = [to_ops_per_second(r.score, r.unit) for r in results]
    positive = [v for v in values if v > 0]
    return sum(positive) / len(positive) if positive else 0.0


class SummaryGenerator:
    """Builds and writes the machine-readable run summary."""

    def __init__(
        self,
        benchmark_type: BenchmarkType = BenchmarkType.MICRO,
        report_config: ReportConfig | None = None,
    ):
        self.benchmark_type = benchmark_type
        self.report_config = report_config or ReportConfig()

    @property
    def throughput_threshold(self) -> float:
        if self.benchmark_type is BenchmarkType.MICRO:
            return self.report_config.micro_throughput_threshold
        return self.report_config.integration_throughput_threshold

    def evaluate_quality_gates(self, avg_throughput: float, trend: TrendMetrics | None) -> dict[str, Any]:
        threshold = self.throughput_threshold
        gates: dict[str, Any] = {
            "throughput": {
                "threshold": threshold,
                "actual": avg_throughput,
                "status": "PASS" if avg_throughput >= threshold else "FAIL",
            }
        }

        regression_threshold = self.report_config.regression_threshold_percent
        if trend is None:
            gates["regression"] = {
                "threshold_percent": regression_threshold,
                "actual_percent": 0.0,
                "status": "PASS",
                "note": "Historical comparison not available",
            }
        else:
            gates["regression"] = {
                "threshold_percent": regression_threshold,
                "actual_percent": trend.change_percentage,
                "status": "FAIL" if trend.change_percentage <= -regression_threshold else "PASS",
            }

        all_passed = all(gate["status"] == "PASS" for gate in gates.values())
        gates["overall_status"] = "PASS" if all_passed else "FAIL"
        return gates

    def generate_recommendations(
        self, results: Sequence[JmhBenchmarkResult], avg_throughput: float, gates: dict[str, Any]
    ) -> dict[str, str]:
        if avg_throughput < LOW_THROUGHPUT:
            performance = "Consider performance optimization - throughput below baseline"
        elif avg_throughput > EXCELLENT_THROUGHPUT:
            performance = "Excellent performance - consider this as new baseline"
        else:
            performance = "Performance within acceptable range"

        ready = execution_status(results) == "SUCCESS" and gates["overall_status"] == "PASS"
        return {
            "performance": performance,
            "deployment": (
                "Ready for deployment - all quality gates passed"
                if ready
                else "Review performance before deployment"
            ),
            "monitoring": (
                "Consider increasing benchmark coverage"
                if len(results) < MIN_BENCHMARK_COVERAGE
                else "Benchmark coverage adequate"
            ),
        }

    @staticmethod
    def list_artifacts() -> dict[str, Any]:
        return {
            "badges": {
                "performance": "badges/performance-badge.json",
                "trend": "badges/trend-badge.json",
                "last_run": "badges/last-run-badge.json",
            },
            "reports": {
                "overview": "index.html",
                "trends": "trends.html",
                "detailed": "detailed.html",
            },
            "data": {"report_data": "data/benchmark-data.json"},
            "api": {"latest": "api/latest.json", "status": "api/status.json"},
        }

    def build(
        self,
        results: Sequence[JmhBenchmarkResult],
        metrics: BenchmarkMetrics | None = None,
        trend: TrendMetrics | None = None,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """Build the summary document.

        Without computed metrics the run is graded F with a zero score.
        """
        now = now or datetime.now(timezone.utc)
        avg = average_throughput(results)
        score = metrics.performance_score if metrics is not None else 0.0
        grade = metrics.performance_grade if metrics is not None else performance_grade(0.0)
        gates = self.evaluate_quality_gates(avg, trend)

        return {
            "timestamp": iso_timestamp(now),
            "benchmark_type": self.benchmark_type.value,
            "execution_status": execution_status(results),
            "metrics": {
                "total_benchmarks": len(results),
                "successful_benchmarks": sum(1 for r in results if r.score > 0),
                "average_throughput": avg,
                "performance_score": score,
            },
            "total_benchmarks": len(results),
            "performance_grade": grade,
            "average_throughput": avg,
            "quality_gates": gates,
            "recommendations": self.generate_recommendations(results, avg, gates),
            "artifacts": self.list_artifacts(),
        }

    def write(self, summary: dict[str, Any], output_dir: Path | str) -> Path:
        """Write benchmark-summary.json into the output directory.

        Raises:
            FileSystemError: If the summary cannot be written
        """
        target = Path(output_dir) / SUMMARY_FILE_NAME
        write_json_atomic(target, summary)
        logger.info(
            f"Wrote {self.benchmark_type.display_name} summary "
            f"({summary['execution_status']}) to {target}"
        )
        return target
