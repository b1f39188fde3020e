"""Export of JWT validation counters and resource gauges to JSON documents.

Aggregate documents (``integration-metrics.json``, ``quarkus-metrics.json``)
are updated with read-merge-write: the existing document is read, the entry
for one benchmark is replaced, and the result is written back. A corrupt
existing document is deleted and treated as empty.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from loguru import logger

from ..exceptions import FileSystemError, wrap_exception
from ..utils.file_io import read_json, write_json_atomic
from .file_processor import extract_tag

INTEGRATION_METRICS_FILE = "integration-metrics.json"
RESOURCE_METRICS_FILE = "resource-metrics.json"
QUARKUS_METRICS_FILE = "quarkus-metrics.json"
QUARKUS_RUNTIME_KEY = "quarkus-runtime-metrics"

BEARER_TOKEN_RESULT = "getBearerTokenResult"
VALIDATION_TIMER = "bearer_token_validation_seconds"
ERRORS_COUNTER = "cui_jwt_validation_errors_total"
SUCCESS_COUNTER = "cui_jwt_validation_success"


def format_number(value: float) -> float | int:
    """Values below 10 keep one decimal, larger values become integers."""
    if value < 10:
        return round(value, 1)
    return int(round(value))


def format_percentage(ratio: float) -> float | int:
    """Convert a 0..1 ratio to a percentage formatted like `format_number`."""
    return format_number(ratio * 100.0)


def simple_benchmark_name(full_name: str) -> str:
    return full_name.rsplit(".", 1)[-1]


def is_jwt_validation_benchmark(benchmark_name: str) -> bool:
    """True for benchmarks that exercise bearer token validation."""
    return (
        "JwtValidationBenchmark" in benchmark_name
        or benchmark_name == "JwtValidation"
        or benchmark_name.startswith("validateJwt")
        or "validateAccessToken" in benchmark_name
        or "validateIdToken" in benchmark_name
    )


class MetricsJsonExporter:
    """Writes metric documents into a target directory."""

    def __init__(self, output_dir: Path | str):
        """Create the exporter and its output directory.

        Raises:
            FileSystemError: If the output directory cannot be created
        """
        self.output_dir = Path(output_dir)
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise wrap_exception(
                e,
                FileSystemError,
                message=f"Cannot create metrics output directory {self.output_dir}: {e}",
                file_path=str(self.output_dir),
                component="metrics.exporter",
                operation="create_output_dir",
            ) from e

    def export_to_file(self, file_name: str, data: Mapping[str, Any]) -> Path:
        """Write one document, replacing any existing file.

        Raises:
            FileSystemError: If the document cannot be written
        """
        target = self.output_dir / file_name
        write_json_atomic(target, dict(data))
        logger.debug(f"Exported metrics to {target}")
        return target

    def read_existing_metrics(self, file_name: str) -> dict[str, Any]:
        """Read an aggregate document; missing, empty or corrupt files yield `{}`.

        A corrupt file is deleted so the next write replaces it.
        """
        path = self.output_dir / file_name
        if not path.exists():
            return {}

        try:
            data = read_json(path)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Discarding unreadable metrics file {path}: {e}")
            path.unlink(missing_ok=True)
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Discarding metrics file {path}: top-level value is not an object")
            path.unlink(missing_ok=True)
            return {}
        return data

    def update_aggregated_metrics(
        self, file_name: str, benchmark_name: str, benchmark_data: Mapping[str, Any]
    ) -> Path:
        """Read-merge-write one benchmark entry into an aggregate document.

        Entries stored under other keys are preserved. Quarkus runtime metrics
        are always stored under a fixed key without their `benchmark` field.
        """
        merged = self.read_existing_metrics(file_name)

        if file_name == QUARKUS_METRICS_FILE:
            data = {k: v for k, v in benchmark_data.items() if k != "benchmark"}
            merged[QUARKUS_RUNTIME_KEY] = data
        else:
            merged[benchmark_name] = dict(benchmark_data)

        target = self.export_to_file(file_name, merged)
        logger.debug(f"Updated {file_name} with {len(merged)} entries")
        return target

    def export_jwt_validation_metrics(
        self, benchmark_name: str, timestamp: str, all_metrics: Mapping[str, float]
    ) -> Path | None:
        """Export bearer token timings and security event counters.

        Only JWT validation benchmarks are exported; others return None.
        """
        if not is_jwt_validation_benchmark(benchmark_name):
            logger.debug(f"Benchmark {benchmark_name} is not a JWT validation benchmark")
            return None

        document = {
            "timestamp": timestamp,
            "bearer_token_producer_metrics": extract_timed_metrics(all_metrics),
            "security_event_counter_metrics": extract_security_event_metrics(all_metrics),
        }
        return self.update_aggregated_metrics(
            INTEGRATION_METRICS_FILE, simple_benchmark_name(benchmark_name), document
        )

    def export_resource_metrics(self, timestamp: str, all_metrics: Mapping[str, float]) -> Path:
        """Export CPU and memory gauges to resource-metrics.json."""
        document = {
            "timestamp": timestamp,
            "cpu_metrics": extract_cpu_metrics(all_metrics),
            "memory_metrics": extract_memory_metrics(all_metrics),
        }
        return self.export_to_file(RESOURCE_METRICS_FILE, document)


def extract_timed_metrics(all_metrics: Mapping[str, float]) -> dict[str, Any]:
    """Approximate validation latency percentiles from the timer summary.

    Only count, sum and max are exported by the timer, so p50 is the mean,
    p95 is capped at twice the mean and p99 is derived from the max.
    """
    count = total = maximum = None
    for key, value in all_metrics.items():
        if VALIDATION_TIMER not in key or BEARER_TOKEN_RESULT not in key:
            continue
        if "_count" in key:
            count = value
        elif "_sum" in key:
            total = value
        elif "_max" in key:
            maximum = value

    if count is not None and total is not None and maximum is not None and count > 0:
        avg_us = (total / count) * 1_000_000
        p95_us = min(avg_us * 2, maximum * 1_000_000 * 0.8)
        p99_us = maximum * 1_000_000 * 0.9
        # The approximations above can invert on skewed timers
        p95_us = max(p95_us, avg_us)
        p99_us = max(p99_us, p95_us)
        validation = {
            "sample_count": format_number(count),
            "p50_us": format_number(avg_us),
            "p95_us": format_number(p95_us),
            "p99_us": format_number(p99_us),
        }
    else:
        validation = {"sample_count": 0, "p50_us": 0, "p95_us": 0, "p99_us": 0}

    return {"validation": validation}


def extract_security_event_metrics(all_metrics: Mapping[str, float]) -> dict[str, Any]:
    """Sum error counters by category/event type and success counters by type."""
    errors_by_category: dict[str, dict[str, int | float]] = {}
    success_by_type: dict[str, int | float] = {}
    total_errors = 0
    total_success = 0

    for key, value in all_metrics.items():
        if value <= 0:
            continue
        if key.startswith(ERRORS_COUNTER):
            category = extract_tag(key, "category")
            event_type = extract_tag(key, "event_type")
            if category and event_type:
                errors_by_category.setdefault(category, {})[event_type] = format_number(int(value))
                total_errors += int(value)
        elif key.startswith(SUCCESS_COUNTER):
            event_type = extract_tag(key, "event_type")
            if event_type and extract_tag(key, "result") == "success":
                success_by_type[event_type] = format_number(int(value))
                total_success += int(value)

    return {
        "total_errors": format_number(total_errors),
        "total_success": format_number(total_success),
        "errors_by_category": errors_by_category,
        "success_by_type": success_by_type,
    }


def extract_cpu_metrics(all_metrics: Mapping[str, float]) -> dict[str, Any]:
    cpu: dict[str, Any] = {}
    for key, value in all_metrics.items():
        if key.startswith("system_cpu_usage"):
            cpu["system_cpu_usage"] = format_percentage(value)
        elif key.startswith("process_cpu_usage"):
            cpu["process_cpu_usage"] = format_percentage(value)
        elif key.startswith("system_cpu_count"):
            cpu["cpu_count"] = int(value)
    return cpu


def extract_memory_metrics(all_metrics: Mapping[str, float]) -> dict[str, Any]:
    """Sum `jvm_memory_used_bytes` over memory pools per area."""
    heap = nonheap = None
    for key, value in all_metrics.items():
        if not key.startswith("jvm_memory_used_bytes"):
            continue
        area = extract_tag(key, "area")
        if area == "heap":
            heap = (heap or 0) + int(value)
        elif area == "nonheap":
            nonheap = (nonheap or 0) + int(value)

    memory: dict[str, Any] = {}
    if heap is not None:
        memory["heap_used_bytes"] = heap
    if nonheap is not None:
        memory["nonheap_used_bytes"] = nonheap
    return memory
