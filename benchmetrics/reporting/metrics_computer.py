"""Computation of the run-level BenchmarkMetrics from JMH results."""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from ..config.schemas import ScoringConfig
from ..exceptions import BenchmarkNotFoundError
from ..models.benchmark import BenchmarkMetrics
from ..models.jmh import JmhBenchmarkResult
from .badge_generator import performance_grade
from .conversion import (
    format_for_display,
    format_latency,
    format_throughput,
    to_milliseconds_per_op,
    to_ops_per_second,
)


def _is_throughput_result(result: JmhBenchmarkResult) -> bool:
    return result.mode == "thrpt" or "ops" in result.unit


def _is_latency_result(result: JmhBenchmarkResult) -> bool:
    return result.mode in ("avgt", "sample") or "/op" in result.unit


class MetricsComputer:
    """Selects the headline benchmarks and derives the composite score.

    The composite score is a weighted sum of three component scores:

    - throughput score: ops/s / 100
    - latency score: 100 / (ms/op)
    - error resilience score: ops/s / 100 of the mixed-token benchmark

    Weights come from the scoring configuration and are renormalised over the
    components that are present, so a run without the error resilience
    benchmark is scored on throughput and latency alone.
    """

    def __init__(self, scoring: ScoringConfig | None = None):
        self.scoring = scoring or ScoringConfig()
        if not self.scoring.throughput_benchmark.strip():
            raise ValueError("Throughput benchmark name must be specified")
        if not self.scoring.latency_benchmark.strip():
            raise ValueError("Latency benchmark name must be specified")

    def _find(
        self, results: Sequence[JmhBenchmarkResult], name: str, accept
    ) -> JmhBenchmarkResult | None:
        for result in results:
            if name in result.benchmark and accept(result):
                return result
        return None

    def extract_throughput(self, results: Sequence[JmhBenchmarkResult]) -> float:
        """Throughput of the configured throughput benchmark in ops/s.

        Raises:
            BenchmarkNotFoundError: If no matching throughput entry exists
        """
        name = self.scoring.throughput_benchmark
        result = self._find(results, name, _is_throughput_result)
        if result is None:
            raise BenchmarkNotFoundError(
                f"Required throughput benchmark '{name}' not found in results", benchmark_name=name
            )
        return to_ops_per_second(result.score, result.unit)

    def extract_latency(self, results: Sequence[JmhBenchmarkResult]) -> float:
        """Latency of the configured latency benchmark in ms/op.

        Raises:
            BenchmarkNotFoundError: If no matching latency entry exists
        """
        name = self.scoring.latency_benchmark
        result = self._find(results, name, _is_latency_result)
        if result is None:
            raise BenchmarkNotFoundError(
                f"Required latency benchmark '{name}' not found in results", benchmark_name=name
            )
        return to_milliseconds_per_op(result.score, result.unit)

    def extract_error_resilience(self, results: Sequence[JmhBenchmarkResult]) -> float | None:
        name = self.scoring.error_resilience_benchmark
        if not name:
            return None
        result = self._find(results, name, _is_throughput_result)
        if result is None:
            logger.debug(f"Error resilience benchmark '{name}' not present, scoring without it")
            return None
        return to_ops_per_second(result.score, result.unit)

    def calculate_performance_score(
        self, throughput: float, latency: float, error_resilience: float | None = None
    ) -> float:
        components = [
            (throughput / 100.0, self.scoring.throughput_weight),
            (100.0 / latency if latency > 0 else 0.0, self.scoring.latency_weight),
        ]
        if error_resilience is not None:
            components.append((error_resilience / 100.0, self.scoring.error_resilience_weight))

        total_weight = sum(weight for _, weight in components)
        if total_weight == 0:
            return 0.0
        return sum(score * weight for score, weight in components) / total_weight

    def compute_metrics(self, results: Sequence[JmhBenchmarkResult]) -> BenchmarkMetrics:
        """Compute throughput, latency, score and grade for one run.

        Raises:
            BenchmarkNotFoundError: If results are empty or a headline benchmark is missing
        """
        if not results:
            raise BenchmarkNotFoundError("No benchmark results provided")

        throughput = self.extract_throughput(results)
        latency = self.extract_latency(results)
        error_resilience = self.extract_error_resilience(results)
        score = self.calculate_performance_score(throughput, latency, error_resilience)

        metrics = BenchmarkMetrics(
            throughput_benchmark_name=self.scoring.throughput_benchmark,
            latency_benchmark_name=self.scoring.latency_benchmark,
            throughput=throughput,
            latency=latency,
            error_resilience=error_resilience,
            performance_score=score,
            performance_grade=performance_grade(score),
            throughput_formatted=format_throughput(throughput),
            latency_formatted=format_latency(latency),
            performance_score_formatted=format_for_display(score),
        )
        logger.info(
            f"Computed metrics: throughput={metrics.throughput_formatted}, "
            f"latency={metrics.latency_formatted}, score={metrics.performance_score_formatted} "
            f"({metrics.performance_grade})"
        )
        return metrics
