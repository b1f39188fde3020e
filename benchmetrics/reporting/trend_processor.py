"""Trend analysis of the current run against archived history.

The score trend compares the current score to an exponentially weighted
baseline of the historical scores rather than to the previous run alone.
After a step change, the previous run already sits on the new plateau and a
single-point comparison would report no change; the weighted baseline still
carries the older runs and reports the jump.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import ValidationError

from ..config.schemas import TrendsConfig
from ..models.benchmark import BenchmarkMetrics, HistoricalDataPoint, TrendMetrics
from ..utils.file_io import read_json
from .conversion import parse_formatted_number
from .history_manager import (
    extract_commit_from_filename,
    extract_timestamp_from_filename,
    list_history_files,
)
from .statistics import compute_statistics, determine_trend_direction, ewma, mean, percentage_change

MAX_HISTORY_ENTRIES = 10


def parse_latency_value(value: Any) -> float:
    """Parse a formatted latency ("12ms", "1.5s") to milliseconds."""
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("s") and not text.endswith("ms"):
            return parse_formatted_number(text) * 1000.0
    return parse_formatted_number(value)


def _numeric(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def extract_data_point(data: Mapping[str, Any], filename: str) -> HistoricalDataPoint | None:
    """Build a HistoricalDataPoint from an archived report-data document.

    Raw ``throughputValue``/``latencyValue`` numbers are used when present.
    Snapshots without them fall back to the formatted display strings.

    Returns None when the document lacks the expected sections.
    """
    metadata = data.get("metadata")
    overview = data.get("overview")
    if not isinstance(metadata, Mapping) or not isinstance(overview, Mapping):
        return None

    throughput = _numeric(overview.get("throughputValue"))
    if throughput is None:
        throughput = parse_formatted_number(overview.get("throughput"))
    latency = _numeric(overview.get("latencyValue"))
    if latency is None:
        latency = parse_latency_value(overview.get("latency"))

    try:
        return HistoricalDataPoint(
            timestamp=str(metadata.get("timestamp") or extract_timestamp_from_filename(filename)),
            throughput=throughput,
            latency=latency,
            performance_score=overview.get("performanceScore") or 0.0,
            commit_hash=extract_commit_from_filename(filename),
        )
    except ValidationError as e:
        logger.warning(f"Invalid history data in {filename}: {e.error_count()} errors")
        return None


class TrendDataProcessor:
    """Loads history snapshots and computes trends and chart series."""

    def __init__(self, config: TrendsConfig | None = None, max_entries: int = MAX_HISTORY_ENTRIES):
        self.config = config or TrendsConfig()
        self.max_entries = max_entries

    def load_historical_data(self, history_dir: Path | str) -> list[HistoricalDataPoint]:
        """Load the newest snapshots, newest first.

        At most `max_entries` files are considered. Unreadable or corrupt files
        are skipped with a warning.
        """
        points: list[HistoricalDataPoint] = []
        for path in list_history_files(Path(history_dir))[: self.max_entries]:
            try:
                data = read_json(path)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Skipping unreadable history file {path.name}: {e}")
                continue
            if not isinstance(data, Mapping):
                logger.warning(f"Skipping history file {path.name}: not a JSON object")
                continue

            point = extract_data_point(data, path.name)
            if point is None:
                logger.warning(f"Skipping history file {path.name}: missing metadata or overview")
                continue
            points.append(point)

        logger.debug(f"Loaded {len(points)} historical data points from {history_dir}")
        return points

    def calculate_trends(
        self, current: BenchmarkMetrics, history: Sequence[HistoricalDataPoint]
    ) -> TrendMetrics:
        """Compare the current run to its history (newest first)."""
        if not history:
            return TrendMetrics.stable(current.performance_score)

        scores = [p.performance_score for p in history]
        baseline = ewma(scores, self.config.ewma_lambda)
        change = percentage_change(current.performance_score, baseline)
        direction = determine_trend_direction(change, self.config.stability_threshold)

        window = [current.performance_score] + scores[: self.config.moving_average_window - 1]
        previous = history[0]

        trend = TrendMetrics(
            direction=direction,
            change_percentage=change,
            moving_average=mean(window),
            throughput_trend=percentage_change(current.throughput, previous.throughput),
            # Lower latency is an improvement
            latency_trend=-percentage_change(current.latency, previous.latency),
            baseline=baseline,
        )
        logger.info(
            f"Trend {trend.direction.value}: {trend.change_percentage:+.1f}% "
            f"against EWMA baseline {baseline:.2f} over {len(history)} runs"
        )
        return trend

    @staticmethod
    def generate_trend_chart_data(
        history: Sequence[HistoricalDataPoint], current: BenchmarkMetrics | None = None
    ) -> dict[str, Any]:
        """Chart series oldest-first, with the current run appended as "Current"."""
        ordered = list(reversed(history))
        timestamps = [p.timestamp for p in ordered]
        throughput = [p.throughput for p in ordered]
        latency = [p.latency for p in ordered]
        scores = [p.performance_score for p in ordered]

        if current is not None:
            timestamps.append("Current")
            throughput.append(current.throughput)
            latency.append(current.latency)
            scores.append(current.performance_score)

        throughput_stats = compute_statistics(throughput)
        latency_stats = compute_statistics(latency)

        return {
            "timestamps": timestamps,
            "throughput": throughput,
            "latency": latency,
            "performanceScores": scores,
            "statistics": {
                "throughputMin": throughput_stats["min"],
                "throughputMax": throughput_stats["max"],
                "throughputAvg": throughput_stats["mean"],
                "latencyMin": latency_stats["min"],
                "latencyMax": latency_stats["max"],
                "latencyAvg": latency_stats["mean"],
            },
        }
