"""Post-processing of JMH integration benchmark results into endpoint metrics.

Sample-mode JMH entries are grouped into logical HTTP endpoint buckets by
substring match on the benchmark name. Several benchmark methods may feed the
same bucket, so their latency distributions are combined:

- When every source carries a ``rawDataHistogram``, the ``(value, count)``
  pairs are pooled and percentiles are computed exactly (nearest rank) from
  the pooled distribution.
- Otherwise each source's percentiles are averaged with equal weight per
  source. Sources without a histogram have no sample count to weigh by, so a
  histogram source in a mixed bucket counts the same as any other source. This
  is an approximation and the endpoint is marked ``exact=False``.

Throughput-mode entries of a bucket contribute the mean of their scores in
ops/s.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from ..config.schemas import EndpointConfig, default_endpoints
from ..exceptions import FileSystemError, MetricsParseError
from ..models.jmh import JmhBenchmarkResult
from ..models.metrics import HttpEndpointMetrics
from ..reporting.conversion import to_microseconds, to_ops_per_second
from ..utils.error_handling import ArtifactResults, run_isolated
from ..utils.file_io import read_json, write_json_atomic
from .file_processor import (
    MetricsFileProcessor,
    extract_jwt_validation_metrics,
    extract_resource_metrics,
)
from .json_exporter import MetricsJsonExporter
from .resource_aggregator import QuarkusMetricsAggregator
from .wrk_converter import load_wrk_results

HTTP_METRICS_FILE = "http-metrics.json"
PERCENTILE_KEYS = {"p50": "50.0", "p95": "95.0", "p99": "99.0"}


class ResultFormat(str, Enum):
    """Input format of the benchmark result path."""

    JMH = "jmh"
    WRK = "wrk"


def load_jmh_results(path: Path) -> list[JmhBenchmarkResult]:
    """Decode a JMH JSON result file.

    Individual entries that do not match the JMH schema are skipped.

    Raises:
        FileSystemError: If the file does not exist or cannot be read
        MetricsParseError: If the file is not a JSON array
    """
    if not path.is_file():
        raise FileSystemError(
            f"Benchmark results file not found: {path}",
            file_path=str(path),
            operation="load_jmh_results",
        )
    try:
        raw = read_json(path)
    except json.JSONDecodeError as e:
        raise MetricsParseError(
            f"Invalid JSON in benchmark results: {e}", source=str(path), cause=e
        ) from e
    except OSError as e:
        raise FileSystemError(
            f"Failed to read benchmark results: {e}",
            file_path=str(path),
            operation="load_jmh_results",
            cause=e,
        ) from e

    if not isinstance(raw, list):
        raise MetricsParseError("Benchmark results must be a JSON array", source=str(path))

    return decode_jmh_entries(raw)


def decode_jmh_entries(raw: Sequence[object]) -> list[JmhBenchmarkResult]:
    results: list[JmhBenchmarkResult] = []
    for index, entry in enumerate(raw):
        try:
            results.append(JmhBenchmarkResult.model_validate(entry))
        except ValidationError as e:
            logger.debug(f"Skipping malformed JMH entry #{index}: {e.error_count()} errors")
    return results


def pooled_percentile(pairs: Sequence[tuple[float, int]], percentile: float) -> float:
    """Nearest-rank percentile of a weighted distribution of (value, count) pairs."""
    ordered = sorted((v, c) for v, c in pairs if c > 0)
    total = sum(c for _, c in ordered)
    if total == 0:
        return 0.0

    rank = max(1, math.ceil(percentile / 100.0 * total))
    cumulative = 0
    for value, count in ordered:
        cumulative += count
        if cumulative >= rank:
            return value
    return ordered[-1][0]


@dataclass
class _SampleSource:
    name: str
    sample_count: int
    unit: str
    percentiles: dict[str, float]
    histogram: list[tuple[float, int]]


@dataclass
class EndpointAccumulator:
    """Collects the JMH entries that map to one endpoint bucket."""

    endpoint: str
    display_name: str
    sources: list[_SampleSource] = field(default_factory=list)
    throughputs: list[float] = field(default_factory=list)

    def add_sample(self, result: JmhBenchmarkResult) -> bool:
        metric = result.primary_metric
        percentiles = {
            label: metric.percentile(key)
            for label, key in PERCENTILE_KEYS.items()
            if metric.percentile(key) is not None
        }
        histogram = metric.histogram_pairs()
        if len(percentiles) < len(PERCENTILE_KEYS) and not histogram:
            logger.debug(f"Skipping {result.benchmark}: no percentiles or histogram")
            return False

        self.sources.append(
            _SampleSource(
                name=result.class_and_method,
                sample_count=sum(c for _, c in histogram),
                unit=metric.score_unit,
                percentiles=percentiles,
                histogram=histogram,
            )
        )
        return True

    def add_throughput(self, result: JmhBenchmarkResult) -> None:
        self.throughputs.append(to_ops_per_second(result.score, result.unit))

    def finalize(self, timestamp: str) -> HttpEndpointMetrics | None:
        """Combine all sources into one HttpEndpointMetrics.

        Returns None if the bucket only saw throughput entries.

        Raises:
            pydantic.ValidationError: If the combined percentiles are not ordered
        """
        if not self.sources:
            return None

        sample_count = sum(s.sample_count for s in self.sources)
        exact = all(s.histogram for s in self.sources)

        if exact:
            pooled = [
                (to_microseconds(value, s.unit), count) for s in self.sources for value, count in s.histogram
            ]
            values = {
                label: pooled_percentile(pooled, float(key)) for label, key in PERCENTILE_KEYS.items()
            }
        else:
            values = {}
            for label, key in PERCENTILE_KEYS.items():
                per_source = []
                for source in self.sources:
                    value = source.percentiles.get(label)
                    if value is None:
                        value = pooled_percentile(source.histogram, float(key))
                    per_source.append(to_microseconds(value, source.unit))
                values[label] = sum(per_source) / len(per_source)

        throughput = sum(self.throughputs) / len(self.throughputs) if self.throughputs else None

        return HttpEndpointMetrics(
            endpoint=self.endpoint,
            name=self.display_name,
            timestamp=timestamp,
            sample_count=sample_count,
            p50_us=values["p50"],
            p95_us=values["p95"],
            p99_us=values["p99"],
            throughput_ops_per_sec=throughput,
            sources=[s.name for s in self.sources],
            exact=exact,
        )


class MetricsPostProcessor:
    """Turns an integration benchmark result file into metric documents."""

    def __init__(
        self,
        benchmark_results_file: Path | str,
        output_dir: Path | str,
        endpoints: Mapping[str, EndpointConfig] | None = None,
        metrics_dir: Path | str | None = None,
        result_format: ResultFormat = ResultFormat.JMH,
    ):
        """Initialize the post-processor.

        Args:
            benchmark_results_file: JMH JSON result file, or wrk output file or
                directory when `result_format` is WRK
            output_dir: Directory receiving the exported documents
            endpoints: Endpoint buckets; defaults to the configured buckets
            metrics_dir: Directory of Quarkus metrics scrapes; defaults to
                ``<output_dir>/../metrics-download``
            result_format: Format of `benchmark_results_file`
        """
        self.benchmark_results_file = Path(benchmark_results_file)
        self.output_dir = Path(output_dir)
        self.endpoints = dict(endpoints) if endpoints is not None else default_endpoints()
        self.metrics_dir = (
            Path(metrics_dir)
            if metrics_dir is not None
            else self.output_dir.resolve().parent / "metrics-download"
        )
        self.result_format = ResultFormat(result_format)

    def load_results(self) -> list[JmhBenchmarkResult]:
        """Read the benchmark results in the configured format.

        Raises:
            FileSystemError: If the results path is missing or unreadable
            MetricsParseError: If the results cannot be decoded
        """
        if self.result_format is ResultFormat.WRK:
            return load_wrk_results(self.benchmark_results_file)
        return load_jmh_results(self.benchmark_results_file)

    def determine_endpoint(self, benchmark_name: str) -> str | None:
        """Return the first endpoint bucket whose pattern occurs in the name."""
        for endpoint, config in self.endpoints.items():
            if any(pattern in benchmark_name for pattern in config.patterns):
                return endpoint
        return None

    def aggregate(
        self, results: Sequence[JmhBenchmarkResult], timestamp: str
    ) -> dict[str, HttpEndpointMetrics]:
        """Group sample and throughput entries by endpoint and combine them.

        Entries that match no endpoint are dropped. Buckets whose combined
        percentiles are not ordered are skipped with a warning.
        """
        buckets: dict[str, EndpointAccumulator] = {}

        for result in results:
            endpoint = self.determine_endpoint(result.benchmark)
            if endpoint is None:
                continue
            acc = buckets.get(endpoint)
            if acc is None:
                acc = EndpointAccumulator(endpoint, self.endpoints[endpoint].name)
                buckets[endpoint] = acc

            if result.mode == "sample":
                acc.add_sample(result)
            elif result.mode == "thrpt":
                acc.add_throughput(result)

        metrics: dict[str, HttpEndpointMetrics] = {}
        for endpoint, acc in buckets.items():
            try:
                finalized = acc.finalize(timestamp)
            except ValidationError as e:
                logger.warning(f"Skipping endpoint {endpoint}: {e.errors()[0]['msg']}")
                continue
            if finalized is not None:
                metrics[endpoint] = finalized
                logger.debug(
                    f"Processed {endpoint} - samples: {finalized.sample_count}, "
                    f"p50: {finalized.p50_us:.1f}us, p95: {finalized.p95_us:.1f}us, "
                    f"p99: {finalized.p99_us:.1f}us"
                )
        return metrics

    def parse_and_export_http_metrics(self, timestamp: str | None = None) -> Path:
        """Write http-metrics.json for all endpoint buckets.

        Raises:
            FileSystemError: If the result file is missing or the output cannot be written
            MetricsParseError: If the results cannot be decoded
        """
        timestamp = timestamp or datetime.now(timezone.utc).isoformat()
        logger.debug(
            f"Parsing {self.result_format.value} benchmark results from {self.benchmark_results_file}"
        )

        endpoint_metrics = self.aggregate(self.load_results(), timestamp)
        document = {endpoint: m.to_export_dict() for endpoint, m in endpoint_metrics.items()}

        target = self.output_dir / HTTP_METRICS_FILE
        write_json_atomic(target, document)
        logger.info(f"Exported HTTP metrics for {len(document)} endpoints to {target}")
        return target

    def parse_and_export_quarkus_metrics(self, timestamp: str | None = None) -> Path | None:
        aggregator = QuarkusMetricsAggregator(self.metrics_dir, self.output_dir)
        return aggregator.parse_and_export(timestamp)

    def parse_and_export_prometheus_metrics(
        self, timestamp: str | None = None, benchmark_name: str = "JwtValidation"
    ) -> list[Path]:
        """Export JWT validation counters and resource gauges from the scrape files.

        Returns:
            Paths of the written documents; empty when there are no scrapes
        """
        timestamp = timestamp or datetime.now(timezone.utc).isoformat()
        all_metrics = MetricsFileProcessor(self.metrics_dir).process_metrics_files()
        if not all_metrics:
            logger.info(f"No Prometheus metrics found in {self.metrics_dir}")
            return []

        exporter = MetricsJsonExporter(self.output_dir)
        written: list[Path] = []
        validation_path = exporter.export_jwt_validation_metrics(
            benchmark_name, timestamp, extract_jwt_validation_metrics(all_metrics)
        )
        if validation_path is not None:
            written.append(validation_path)
        written.append(exporter.export_resource_metrics(timestamp, extract_resource_metrics(all_metrics)))
        return written

    def parse_and_export_all_metrics(self, timestamp: str | None = None) -> ArtifactResults:
        """Export every metric document; a failure in one does not stop the others."""
        timestamp = timestamp or datetime.now(timezone.utc).isoformat()
        results = ArtifactResults()
        run_isolated(HTTP_METRICS_FILE, self.parse_and_export_http_metrics, results, timestamp)
        run_isolated("prometheus-metrics", self.parse_and_export_prometheus_metrics, results, timestamp)
        run_isolated("quarkus-metrics.json", self.parse_and_export_quarkus_metrics, results, timestamp)
        return results
