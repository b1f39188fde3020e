"""Unit tests for shields.io badge generation."""

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from benchmetrics.models.benchmark import BenchmarkMetrics, TrendDirection, TrendMetrics
from benchmetrics.reporting.badge_generator import (
    LAST_RUN_BADGE_FILE,
    PERFORMANCE_BADGE_FILE,
    TREND_BADGE_FILE,
    BadgeGenerator,
    create_last_run_badge,
    create_performance_badge,
    create_trend_badge,
    grade_color,
    grade_css_class,
    performance_grade,
)

pytestmark = pytest.mark.fast


# ==================== Fixtures ====================


@pytest.fixture
def metrics() -> BenchmarkMetrics:
    return BenchmarkMetrics(
        throughput_benchmark_name="measureThroughput",
        latency_benchmark_name="measureAverageTime",
        throughput=9150.0,
        latency=1.1,
        performance_score=91.5,
        performance_grade="A",
        throughput_formatted="9.2K ops/s",
        latency_formatted="1.10ms",
        performance_score_formatted="92",
    )


def _trend(direction: TrendDirection, change: float) -> TrendMetrics:
    return TrendMetrics(direction=direction, change_percentage=change, moving_average=50.0)


# ==================== Grades ====================


class TestGrades:
    @pytest.mark.parametrize(
        "score, grade, color",
        [
            (96.0, "A+", "brightgreen"),
            (150.0, "A+", "brightgreen"),
            (95.9, "A", "green"),
            (86.0, "A", "green"),
            (85.9, "B", "yellowgreen"),
            (76.0, "B", "yellowgreen"),
            (66.0, "C", "yellow"),
            (56.0, "D", "orange"),
            (55.9, "F", "red"),
            (0.0, "F", "red"),
        ],
    )
    def test_grade_and_color(self, score, grade, color):
        assert performance_grade(score) == grade
        assert grade_color(grade) == color

    def test_css_class(self):
        assert grade_css_class("A+") == "grade-a-plus"
        assert grade_css_class("D") == "grade-d"
        assert grade_css_class("N/A") == "grade-f"


# ==================== Badges ====================


class TestBadgeContent:
    def test_performance_badge(self, metrics):
        badge = create_performance_badge(metrics)
        assert badge.label == "Performance Score"
        assert badge.message == "A (92)"
        assert badge.color == "green"

    @pytest.mark.parametrize(
        "direction, change, message, color",
        [
            (TrendDirection.UP, 19.24, "↑ +19.2%", "green"),
            (TrendDirection.DOWN, -3.0, "↓ 3.0%", "red"),
            (TrendDirection.STABLE, 0.5, "→ stable", "blue"),
        ],
    )
    def test_trend_badge(self, direction, change, message, color):
        badge = create_trend_badge(_trend(direction, change))
        assert badge.label == "Performance Trend"
        assert badge.message == message
        assert badge.color == color

    def test_last_run_badge(self):
        badge = create_last_run_badge(datetime(2025, 1, 2, 23, 59, tzinfo=timezone.utc))
        assert badge.message == "2025-01-02"
        assert badge.color == "blue"


class TestBadgeGenerator:
    def test_writes_all_badges(self, tmp_path: Path, metrics):
        generator = BadgeGenerator(tmp_path)
        results = generator.write_badges(
            metrics, TrendMetrics.stable(91.5), now=datetime(2025, 1, 2, tzinfo=timezone.utc)
        )

        assert results.ok
        assert results.succeeded == [PERFORMANCE_BADGE_FILE, TREND_BADGE_FILE, LAST_RUN_BADGE_FILE]
        for name in results.succeeded:
            data = json.loads((tmp_path / "badges" / name).read_text(encoding="utf-8"))
            assert data["schemaVersion"] == 1
            assert set(data) == {"schemaVersion", "label", "message", "color"}

    def test_one_failed_badge_does_not_stop_others(self, tmp_path: Path, metrics):
        # A directory in place of the target file makes that single write fail
        (tmp_path / "badges" / TREND_BADGE_FILE).mkdir(parents=True)

        results = BadgeGenerator(tmp_path).write_badges(metrics, TrendMetrics.stable(91.5))

        assert list(results.failed) == [TREND_BADGE_FILE]
        assert results.succeeded == [PERFORMANCE_BADGE_FILE, LAST_RUN_BADGE_FILE]
        assert (tmp_path / "badges" / LAST_RUN_BADGE_FILE).is_file()
