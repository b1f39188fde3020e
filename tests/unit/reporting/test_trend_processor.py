"""Unit tests for trend analysis."""

import json
from pathlib import Path

import pytest

from benchmetrics.config.schemas import TrendsConfig
from benchmetrics.models.benchmark import BenchmarkMetrics, HistoricalDataPoint, TrendDirection
from benchmetrics.reporting.trend_processor import (
    TrendDataProcessor,
    extract_data_point,
    parse_latency_value,
)

pytestmark = pytest.mark.fast


# ==================== Fixtures ====================


def _current(score: float, throughput: float = 5000.0, latency: float = 2.0) -> BenchmarkMetrics:
    return BenchmarkMetrics(
        throughput_benchmark_name="measureThroughput",
        latency_benchmark_name="measureAverageTime",
        throughput=throughput,
        latency=latency,
        performance_score=score,
        performance_grade="F",
    )


def _point(score: float, throughput: float = 5000.0, latency: float = 2.0, ts: str = "t") -> HistoricalDataPoint:
    return HistoricalDataPoint(timestamp=ts, throughput=throughput, latency=latency, performance_score=score)


def _snapshot(score: float, throughput: str = "5.0K ops/s", latency: str = "2.0ms", ts: str | None = None) -> dict:
    metadata = {"timestamp": ts} if ts else {}
    return {
        "metadata": metadata,
        "overview": {"throughput": throughput, "latency": latency, "performanceScore": score},
    }


@pytest.fixture
def processor() -> TrendDataProcessor:
    return TrendDataProcessor(TrendsConfig())


@pytest.fixture
def history_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "history"
    directory.mkdir()
    return directory


# ==================== Parsing ====================


class TestParsing:
    @pytest.mark.parametrize(
        "value, expected", [("12ms", 12.0), ("1.5s", 1500.0), ("0.50ms", 0.5), (3.0, 3.0), (None, 0.0)]
    )
    def test_parse_latency_value(self, value, expected):
        assert parse_latency_value(value) == pytest.approx(expected)

    def test_extract_data_point(self):
        point = extract_data_point(
            _snapshot(66.5, "1.50K ops/s", "1.50s", ts="2025-01-01T00:00:00Z"),
            "2025-01-01T0000Z-abcdef12.json",
        )
        assert point.timestamp == "2025-01-01T00:00:00Z"
        assert point.throughput == pytest.approx(1500.0)
        assert point.latency == pytest.approx(1500.0)
        assert point.performance_score == 66.5
        assert point.commit_hash == "abcdef12"

    def test_raw_values_preferred_over_display_strings(self):
        data = _snapshot(50.0, "0 ops/s", "0.00ms", ts="2025-01-01T00:00:00Z")
        data["overview"].update({"throughputValue": 250000.0, "latencyValue": 0.004})

        point = extract_data_point(data, "2025-01-01T000000Z-abcdef12.json")

        assert point.throughput == 250000.0
        assert point.latency == pytest.approx(0.004)

    def test_non_numeric_raw_values_fall_back(self):
        data = _snapshot(50.0, "1.50K ops/s", "12ms")
        data["overview"].update({"throughputValue": "fast", "latencyValue": None})

        point = extract_data_point(data, "2025-01-01T000000Z-abcdef12.json")

        assert point.throughput == pytest.approx(1500.0)
        assert point.latency == pytest.approx(12.0)

    def test_timestamp_falls_back_to_filename(self):
        point = extract_data_point(_snapshot(10.0), "2025-01-01T0000Z-abcdef12.json")
        assert point.timestamp == "2025-01-01T0000Z"

    def test_missing_sections(self):
        assert extract_data_point({"overview": {}}, "x-abcdef12.json") is None
        assert extract_data_point({"metadata": {}, "overview": "bad"}, "x-abcdef12.json") is None

    def test_invalid_score(self):
        data = {"metadata": {}, "overview": {"performanceScore": "not a number"}}
        assert extract_data_point(data, "x-abcdef12.json") is None


# ==================== Loading ====================


class TestLoadHistoricalData:
    def test_empty_or_missing_directory(self, processor, history_dir: Path, tmp_path: Path):
        assert processor.load_historical_data(history_dir) == []
        assert processor.load_historical_data(tmp_path / "missing") == []

    def test_corrupt_files_skipped(self, processor, history_dir: Path):
        for i in range(3):
            (history_dir / f"2025-01-0{i + 1}T0000Z-abcdef12.json").write_text(
                json.dumps(_snapshot(10.0 * (i + 1))), encoding="utf-8"
            )
        (history_dir / "2025-01-05T0000Z-corrupt1.json").write_text("{oops", encoding="utf-8")
        (history_dir / "2025-01-06T0000Z-notadict.json").write_text("[1, 2]", encoding="utf-8")
        (history_dir / "2025-01-07T0000Z-nofields.json").write_text('{"foo": 1}', encoding="utf-8")

        points = processor.load_historical_data(history_dir)

        assert [p.performance_score for p in points] == [30.0, 20.0, 10.0]

    def test_fifteen_snapshots_yield_ten_newest(self, processor, history_dir: Path):
        for day in range(1, 16):
            (history_dir / f"2025-01-{day:02d}T0000Z-abcdef12.json").write_text(
                json.dumps(_snapshot(float(day), ts=f"2025-01-{day:02d}T00:00:00Z")), encoding="utf-8"
            )

        points = processor.load_historical_data(history_dir)

        assert len(points) == 10
        assert points[0].timestamp == "2025-01-15T00:00:00Z"
        assert points[-1].timestamp == "2025-01-06T00:00:00Z"

    def test_limited_to_newest_entries(self, history_dir: Path):
        for day in range(1, 10):
            (history_dir / f"2025-01-0{day}T0000Z-abcdef12.json").write_text(
                json.dumps(_snapshot(float(day))), encoding="utf-8"
            )

        points = TrendDataProcessor(TrendsConfig(), max_entries=3).load_historical_data(history_dir)

        assert [p.performance_score for p in points] == [9.0, 8.0, 7.0]


# ==================== Trends ====================


class TestCalculateTrends:
    def test_no_history_is_stable(self, processor):
        trend = processor.calculate_trends(_current(42.0), [])
        assert trend.direction is TrendDirection.STABLE
        assert trend.change_percentage == 0.0
        assert trend.moving_average == 42.0
        assert trend.baseline is None

    def test_step_change_detected_after_plateau(self, processor):
        # The previous run already sits on the new plateau
        history = [_point(79.0)] + [_point(28.0) for _ in range(8)]

        trend = processor.calculate_trends(_current(79.0), history)

        assert trend.direction is TrendDirection.UP
        assert trend.change_percentage > 10.0
        assert trend.baseline == pytest.approx(66.25, abs=0.01)
        assert trend.change_percentage == pytest.approx(19.25, abs=0.05)

    def test_unchanged_score_is_stable(self, processor):
        trend = processor.calculate_trends(_current(50.0), [_point(50.0), _point(50.0)])
        assert trend.direction is TrendDirection.STABLE
        assert trend.change_percentage == pytest.approx(0.0)

    def test_regression_is_down(self, processor):
        trend = processor.calculate_trends(_current(40.0), [_point(50.0)])
        assert trend.direction is TrendDirection.DOWN
        assert trend.change_percentage == pytest.approx(-20.0)

    def test_moving_average_window(self):
        processor = TrendDataProcessor(TrendsConfig(moving_average_window=3))
        history = [_point(20.0), _point(30.0), _point(1000.0)]
        assert processor.calculate_trends(_current(10.0), history).moving_average == pytest.approx(20.0)

    def test_throughput_and_latency_trends(self, processor):
        trend = processor.calculate_trends(
            _current(50.0, throughput=5500.0, latency=1.5),
            [_point(50.0, throughput=5000.0, latency=2.0), _point(50.0, throughput=1.0, latency=100.0)],
        )
        assert trend.throughput_trend == pytest.approx(10.0)
        assert trend.latency_trend == pytest.approx(25.0)


class TestChartData:
    def test_oldest_first_with_current(self):
        history = [_point(30.0, ts="c"), _point(20.0, ts="b"), _point(10.0, ts="a")]

        chart = TrendDataProcessor.generate_trend_chart_data(history, _current(40.0, throughput=8000.0))

        assert chart["timestamps"] == ["a", "b", "c", "Current"]
        assert chart["performanceScores"] == [10.0, 20.0, 30.0, 40.0]
        assert chart["statistics"]["throughputMax"] == 8000.0
        assert chart["statistics"]["throughputMin"] == 5000.0
        assert chart["statistics"]["latencyAvg"] == pytest.approx(2.0)

    def test_empty_history(self):
        chart = TrendDataProcessor.generate_trend_chart_data([])
        assert chart["timestamps"] == []
        assert chart["statistics"]["throughputAvg"] == 0.0
