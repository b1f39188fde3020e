"""Conversion of wrk load-test output into benchmark result entries.

wrk prints a plain-text summary per run::

    Running 30s test @ https://localhost:8443/jwt/validate
      4 threads and 100 connections
      Thread Stats   Avg      Stdev     Max   +/- Stdev
        Latency     1.52ms    2.01ms  30.12ms   92.31%
        Req/Sec     1.03k   120.40     1.30k    70.00%
      Latency Distribution
         50%    1.10ms
         75%    1.60ms
         90%    2.40ms
         99%    9.80ms
      123456 requests in 30.01s, 12.34MB read
    Requests/sec:   4113.47

Each run becomes two `JmhBenchmarkResult` entries named ``wrk.<name>``: a
``sample`` entry carrying p50/p95/p99 in ms/op and a ``thrpt`` entry carrying
requests per second, so wrk runs flow through the same endpoint bucketing as
JMH integration results.

Percentiles wrk did not print are filled in. p95 is interpolated between p90
and p99 when both exist; any other gap is estimated from the average and
standard deviation of the thread latency line.
"""

from __future__ import annotations

import re
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, Field

from ..exceptions import FileSystemError, MetricsParseError
from ..models.jmh import JmhBenchmarkResult, PrimaryMetric

WRK_FILE_SUFFIX = ".txt"
WRK_OUTPUT_MARKER = "=== WRK OUTPUT ==="
BENCHMARK_NAME_PREFIX = "benchmark_name: "
STANDARD_PERCENTILES = (50.0, 95.0, 99.0)

_REQUESTS_PER_SEC = re.compile(r"Requests/sec:\s+([\d.]+)")
_LATENCY_STATS = re.compile(
    r"Latency\s+([\d.]+)(\w+)\s+([\d.]+)(\w+)\s+([\d.]+)(\w+)\s+([\d.]+)%"
)
_PERCENTILE_LINE = re.compile(r"^\s*(\d+(?:\.\d+)?)%\s+([\d.]+)(\w+)\s*$")
_TOTAL_REQUESTS = re.compile(r"(\d+)\s+requests in\s+([\d.]+)(\w+)")
_THREADS = re.compile(r"(\d+)\s+threads and\s+(\d+)\s+connections")

_MS_PER_UNIT = {"us": 0.001, "ms": 1.0, "s": 1000.0, "m": 60000.0}


def to_milliseconds(value: float, unit: str) -> float:
    """Convert a wrk duration (us, ms, s, m) to milliseconds; unknown units pass through."""
    return value * _MS_PER_UNIT.get(unit.lower(), 1.0)


def estimate_percentile(percentile: float, avg: float, stdev: float) -> float:
    """Rough percentile estimate from the mean and standard deviation."""
    if percentile <= 50:
        return max(0.0, avg - stdev * (50 - percentile) / 50)
    return avg + stdev * (percentile - 50) / 50 * 2


def benchmark_name_from_filename(file_name: str) -> str:
    if "jwt" in file_name:
        return "jwtValidation"
    if "health-live" in file_name:
        return "healthLiveCheck"
    if "health" in file_name:
        return "healthCheck"
    return file_name.replace("-results.txt", "").replace("wrk-", "").replace("-output", "")


def extract_benchmark_name(text: str, file_name: str) -> str:
    """Name from a ``benchmark_name:`` header line, else derived from the file name.

    Header lines are only honoured before the ``=== WRK OUTPUT ===`` marker.
    """
    for line in text.splitlines():
        if line.startswith(BENCHMARK_NAME_PREFIX):
            name = line[len(BENCHMARK_NAME_PREFIX) :].strip()
            if name:
                return name
        if line.strip() == WRK_OUTPUT_MARKER:
            break
    return benchmark_name_from_filename(file_name)


class WrkRun(BaseModel):
    """Figures parsed from one wrk output."""

    name: str
    requests_per_sec: float | None = None
    latency_avg_ms: float | None = None
    latency_stdev_ms: float | None = None
    percentiles_ms: dict[float, float] = Field(default_factory=dict)
    total_requests: int | None = None
    duration_s: float | None = None
    threads: int = 1
    connections: int | None = None

    @property
    def has_latency_stats(self) -> bool:
        return self.latency_avg_ms is not None and self.latency_stdev_ms is not None

    def percentile_ms(self, percentile: float) -> float | None:
        """Measured, interpolated or estimated latency at `percentile`."""
        measured = self.percentiles_ms.get(percentile)
        if measured is not None:
            return measured

        if percentile == 95.0 and 90.0 in self.percentiles_ms and 99.0 in self.percentiles_ms:
            low = self.percentiles_ms[90.0]
            high = self.percentiles_ms[99.0]
            return low + (high - low) * (95.0 - 90.0) / (99.0 - 90.0)

        if self.has_latency_stats:
            return estimate_percentile(percentile, self.latency_avg_ms, self.latency_stdev_ms)
        return None

    def standard_percentiles(self) -> dict[str, float] | None:
        """p50/p95/p99 keyed the way JMH keys them, or None if any cannot be derived."""
        values: dict[str, float] = {}
        for percentile in STANDARD_PERCENTILES:
            value = self.percentile_ms(percentile)
            if value is None:
                return None
            values[f"{percentile:.1f}"] = value
        return values

    def to_jmh_results(self) -> list[JmhBenchmarkResult]:
        benchmark = f"wrk.{self.name}"
        results: list[JmhBenchmarkResult] = []

        percentiles = self.standard_percentiles()
        if percentiles is not None:
            score = self.latency_avg_ms if self.latency_avg_ms is not None else percentiles["50.0"]
            results.append(
                JmhBenchmarkResult(
                    benchmark=benchmark,
                    mode="sample",
                    threads=self.threads,
                    primary_metric=PrimaryMetric(
                        score=score,
                        score_error=self.latency_stdev_ms or 0.0,
                        score_unit="ms/op",
                        score_percentiles=percentiles,
                    ),
                )
            )

        if self.requests_per_sec is not None:
            results.append(
                JmhBenchmarkResult(
                    benchmark=benchmark,
                    mode="thrpt",
                    threads=self.threads,
                    primary_metric=PrimaryMetric(score=self.requests_per_sec, score_unit="ops/s"),
                )
            )
        return results


def parse_wrk_output(text: str, name: str) -> WrkRun:
    """Parse the text of one wrk run.

    Raises:
        MetricsParseError: If the text has neither a Requests/sec line nor latency figures
    """
    run = WrkRun(name=name)

    match = _REQUESTS_PER_SEC.search(text)
    if match:
        run.requests_per_sec = float(match.group(1))

    match = _LATENCY_STATS.search(text)
    if match:
        run.latency_avg_ms = to_milliseconds(float(match.group(1)), match.group(2))
        run.latency_stdev_ms = to_milliseconds(float(match.group(3)), match.group(4))

    for line in text.splitlines():
        match = _PERCENTILE_LINE.match(line)
        if match:
            run.percentiles_ms[float(match.group(1))] = to_milliseconds(
                float(match.group(2)), match.group(3)
            )

    match = _TOTAL_REQUESTS.search(text)
    if match:
        run.total_requests = int(match.group(1))
        run.duration_s = to_milliseconds(float(match.group(2)), match.group(3)) / 1000.0

    match = _THREADS.search(text)
    if match:
        run.threads = int(match.group(1))
        run.connections = int(match.group(2))

    if run.requests_per_sec is None and not run.has_latency_stats and not run.percentiles_ms:
        raise MetricsParseError(f"No wrk figures found in output for '{name}'", source=name)

    logger.debug(
        f"Parsed wrk run {name}: {run.requests_per_sec} req/s, "
        f"avg {run.latency_avg_ms}ms, {run.total_requests} requests"
    )
    return run


def read_wrk_file(path: Path) -> WrkRun:
    """Parse one wrk output file.

    Raises:
        FileSystemError: If the file cannot be read
        MetricsParseError: If the file holds no wrk figures
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise FileSystemError(
            f"Failed to read wrk output: {e}", file_path=str(path), operation="read_wrk_file", cause=e
        ) from e
    return parse_wrk_output(text, extract_benchmark_name(text, path.name))


def load_wrk_results(path: Path) -> list[JmhBenchmarkResult]:
    """Convert a wrk output file, or every ``.txt`` file of a directory.

    In directory mode unparseable files are skipped with a warning.

    Raises:
        FileSystemError: If the path does not exist or a single file cannot be read
        MetricsParseError: If a single file holds no wrk figures
    """
    if path.is_dir():
        results: list[JmhBenchmarkResult] = []
        files = sorted(p for p in path.iterdir() if p.is_file() and p.suffix == WRK_FILE_SUFFIX)
        for file in files:
            try:
                results.extend(read_wrk_file(file).to_jmh_results())
            except (FileSystemError, MetricsParseError) as e:
                logger.warning(f"Skipping wrk output {file.name}: {e.message}")
        logger.info(f"Converted {len(files)} wrk output files from {path}")
        return results

    if not path.is_file():
        raise FileSystemError(
            f"wrk output not found: {path}", file_path=str(path), operation="load_wrk_results"
        )
    return read_wrk_file(path).to_jmh_results()
