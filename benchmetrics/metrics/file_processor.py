"""Prometheus text exposition parsing.

Reads metric scrape files into a flat `{metric_key: value}` mapping where the
key is the metric name plus its brace-delimited label list exactly as written,
e.g. ``jvm_memory_used_bytes{area="heap",id="G1 Eden Space"}``.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from pathlib import Path

from loguru import logger

from ..models.metrics import MetricSample

METRICS_FILE_SUFFIX = ".txt"

JWT_VALIDATION_MARKERS = (
    "cui_jwt_validation",
    "cui_jwt_bearer_token",
    "jwt_bearer_token",
    "bearer_token_validation",
)
RESOURCE_PREFIXES = ("system_cpu_", "process_cpu_", "jvm_memory_", "system_load_average")

_LABEL_PATTERN = re.compile(r'([a-zA-Z_][a-zA-Z0-9_]*)="((?:[^"\\]|\\.)*)"')


def parse_line(line: str) -> tuple[str, float] | None:
    """Parse one exposition line into `(key, value)`.

    Comments, blank lines and lines whose trailing token is not a number
    return None.
    """
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None

    split_at = max(stripped.rfind(" "), stripped.rfind("\t"))
    if split_at <= 0:
        return None

    key = stripped[:split_at].strip()
    raw_value = stripped[split_at + 1 :]
    try:
        return key, float(raw_value)
    except ValueError:
        logger.debug(f"Skipping non-numeric metric line: {stripped}")
        return None


def parse_text(text: str) -> dict[str, float]:
    """Parse exposition text; duplicate keys keep the last value."""
    metrics: dict[str, float] = {}
    for line in text.splitlines():
        parsed = parse_line(line)
        if parsed is not None:
            key, value = parsed
            metrics[key] = value
    return metrics


def split_key(key: str) -> tuple[str, tuple[tuple[str, str], ...]]:
    """Split a metric key into its name and ordered label pairs."""
    brace = key.find("{")
    if brace < 0:
        return key, ()
    name = key[:brace]
    labels = tuple((m.group(1), m.group(2)) for m in _LABEL_PATTERN.finditer(key, brace))
    return name, labels


def to_sample(key: str, value: float) -> MetricSample:
    """Build a MetricSample from a flat key/value entry."""
    name, labels = split_key(key)
    return MetricSample(name=name, labels=labels, value=value)


def parse_samples(text: str) -> list[MetricSample]:
    """Parse exposition text into MetricSample objects (one per unique key)."""
    return [to_sample(key, value) for key, value in parse_text(text).items()]


def format_sample(key: str, value: float) -> str:
    """Render a key/value pair as an exposition line that parses back exactly."""
    return f"{key} {value!r}"


def extract_tag(metric_key: str, tag_name: str) -> str | None:
    """Return the quoted value of `tag_name` in a metric key, or None if absent.

    Never raises.
    """
    needle = f'{tag_name}="'
    start = 0
    while True:
        idx = metric_key.find(needle, start)
        if idx < 0:
            return None
        # Reject partial label names such as `xarea="` when looking for `area`
        if idx == 0 or metric_key[idx - 1] in "{, ":
            value_start = idx + len(needle)
            value_end = metric_key.find('"', value_start)
            if value_end < 0:
                return None
            return metric_key[value_start:value_end]
        start = idx + 1


class MetricsFileProcessor:
    """Reads Prometheus scrape files from a directory."""

    def __init__(self, metrics_dir: Path | str):
        self.metrics_dir = Path(metrics_dir)

    def _metrics_files(self) -> list[Path]:
        if not self.metrics_dir.is_dir():
            return []
        return sorted(
            p for p in self.metrics_dir.iterdir() if p.is_file() and p.suffix == METRICS_FILE_SUFFIX
        )

    def has_metrics_files(self) -> bool:
        return bool(self._metrics_files())

    def iter_files(self) -> Iterator[tuple[Path, dict[str, float]]]:
        """Yield `(path, metrics)` for each readable scrape file."""
        for path in self._metrics_files():
            try:
                text = path.read_text(encoding="utf-8")
            except OSError as e:
                logger.warning(f"Failed to read metrics file {path}: {e}")
                continue
            yield path, parse_text(text)

    def process_metrics_files(self) -> dict[str, float]:
        """Parse every scrape file; later files overwrite earlier keys.

        Returns:
            Flat metric map, empty if the directory is missing or has no files
        """
        if not self.metrics_dir.is_dir():
            logger.debug(f"Metrics directory does not exist: {self.metrics_dir}")
            return {}

        all_metrics: dict[str, float] = {}
        file_count = 0
        for path, metrics in self.iter_files():
            logger.debug(f"Parsed {len(metrics)} metrics from {path.name}")
            all_metrics.update(metrics)
            file_count += 1

        logger.info(f"Processed {file_count} metrics files with {len(all_metrics)} metrics")
        return all_metrics


def extract_jwt_validation_metrics(all_metrics: Mapping[str, float]) -> dict[str, float]:
    """Select bearer token and JWT validation metrics."""
    return {
        key: value
        for key, value in all_metrics.items()
        if any(marker in key for marker in JWT_VALIDATION_MARKERS)
    }


def extract_resource_metrics(all_metrics: Mapping[str, float]) -> dict[str, float]:
    """Select CPU, load and JVM memory gauges."""
    return {
        key: value for key, value in all_metrics.items() if key.startswith(RESOURCE_PREFIXES)
    }
