"""Unit tests for the HTML report pages."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from benchmetrics.config.schemas import ReportConfig
from benchmetrics.metrics.post_processor import decode_jmh_entries
from benchmetrics.models.benchmark import BenchmarkType, HistoricalDataPoint, TrendDirection, TrendMetrics
from benchmetrics.reporting.metrics_computer import MetricsComputer
from benchmetrics.reporting.report_data_generator import ReportDataGenerator
from benchmetrics.reporting.report_generator import (
    ReportGenerator,
    average_latency,
    average_throughput,
)

pytestmark = pytest.mark.fast

NOW = datetime(2025, 3, 4, 5, 6, 7, tzinfo=timezone.utc)


# ==================== Fixtures ====================


@pytest.fixture
def results(micro_results):
    return decode_jmh_entries(micro_results)


@pytest.fixture
def report_data(results):
    metrics = MetricsComputer().compute_metrics(results)
    return ReportDataGenerator(BenchmarkType.MICRO).build(results, metrics, now=NOW)


@pytest.fixture
def report_data_with_trends(results):
    metrics = MetricsComputer().compute_metrics(results)
    history = [
        HistoricalDataPoint(timestamp="2025-03-03T00:00:00Z", throughput=4000.0, latency=2.5, performance_score=40.0)
    ]
    trend = TrendMetrics(
        direction=TrendDirection.UP,
        change_percentage=25.0,
        moving_average=45.0,
        throughput_trend=25.0,
        latency_trend=20.0,
    )
    return ReportDataGenerator(BenchmarkType.MICRO).build(results, metrics, history, trend, now=NOW)


@pytest.fixture
def generator() -> ReportGenerator:
    return ReportGenerator(ReportConfig(title="JWT Validation Benchmarks"))


# ==================== Averages ====================


def test_averages_by_mode(results):
    assert average_throughput(results) == 5000.0
    assert average_latency(results) == 2.0
    assert average_throughput([]) == 0.0
    assert average_latency([]) == 0.0


# ==================== Pages ====================


class TestRenderPages:
    def test_index(self, generator, report_data, results):
        html = generator.render_index(report_data, results)

        assert "<title>JWT Validation Benchmarks</title>" in html
        assert '<a href="index.html" class="active">Overview</a>' in html
        assert "Generated: 2025-03-04 05:06:07 UTC" in html
        assert '<div class="metric-card-value grade-f">F</div>' in html
        assert "<td class=\"metric-value\">measureThroughput</td>" in html
        assert "5.0K ops/s" in html

    def test_trends_without_history_shows_alert(self, generator, report_data):
        html = generator.render_trends(report_data)

        assert '<div class="alert">Historical data not yet available</div>' in html
        assert "scoreChart" not in html

    def test_trends_with_history(self, generator, report_data_with_trends):
        html = generator.render_trends(report_data_with_trends)

        assert '<canvas id="scoreChart"></canvas>' in html
        assert "Performance improved by 25.0%" in html
        assert '<div class="delta-positive">+25.0%</div>' in html
        assert "Run-over-run Changes" in html
        # Current run compared with the archived one (50 vs 40)
        assert "<td class=\"metric-value\">+25.0%</td>" in html

    def test_detailed(self, generator, report_data):
        html = generator.render_detailed(report_data)

        assert "Benchmark Details" in html
        assert "Latency Percentiles (ms)" in html
        assert "<th>P99</th>" in html
        assert "Micro Benchmarks" in html


class TestGenerateAll:
    def test_writes_every_page(self, generator, report_data, results, tmp_path: Path):
        outcome = generator.generate_all(report_data, results, tmp_path)

        assert outcome.ok
        assert outcome.succeeded == ["index.html", "trends.html", "detailed.html"]
        for page in ("index.html", "trends.html", "detailed.html"):
            assert (tmp_path / page).read_text(encoding="utf-8").startswith("<!DOCTYPE html>")

    def test_failed_page_does_not_stop_others(self, generator, report_data, results, tmp_path: Path):
        (tmp_path / "trends.html").mkdir()

        outcome = generator.generate_all(report_data, results, tmp_path)

        assert not outcome.ok
        assert list(outcome.failed) == ["trends.html"]
        assert (tmp_path / "index.html").is_file()
        assert (tmp_path / "detailed.html").is_file()
