"""Shields.io endpoint badges for the benchmark site.

Badges are written to ``<output>/badges``. Each badge is written on its own,
so one failed write does not prevent the others.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from loguru import logger

from ..models.badge import Badge
from ..models.benchmark import BenchmarkMetrics, TrendDirection, TrendMetrics
from ..utils.error_handling import ArtifactResults, run_isolated
from ..utils.file_io import write_json_atomic

PERFORMANCE_BADGE_FILE = "performance-badge.json"
TREND_BADGE_FILE = "trend-badge.json"
LAST_RUN_BADGE_FILE = "last-run-badge.json"

# (minimum score, grade, colour), checked top-down
GRADE_THRESHOLDS = (
    (96.0, "A+", "brightgreen"),
    (86.0, "A", "green"),
    (76.0, "B", "yellowgreen"),
    (66.0, "C", "yellow"),
    (56.0, "D", "orange"),
)
FAILING_GRADE = ("F", "red")

GRADE_CSS_CLASSES = {
    "A+": "grade-a-plus",
    "A": "grade-a",
    "B": "grade-b",
    "C": "grade-c",
    "D": "grade-d",
    "F": "grade-f",
}


def performance_grade(score: float) -> str:
    for minimum, grade, _ in GRADE_THRESHOLDS:
        if score >= minimum:
            return grade
    return FAILING_GRADE[0]


def grade_color(grade: str) -> str:
    for _, known, color in GRADE_THRESHOLDS:
        if known == grade:
            return color
    return FAILING_GRADE[1]


def grade_css_class(grade: str) -> str:
    return GRADE_CSS_CLASSES.get(grade, "grade-f")


def trend_message(trend: TrendMetrics) -> str:
    if trend.direction is TrendDirection.UP:
        return f"↑ +{trend.change_percentage:.1f}%"
    if trend.direction is TrendDirection.DOWN:
        return f"↓ {abs(trend.change_percentage):.1f}%"
    return "→ stable"


def trend_color(direction: TrendDirection) -> str:
    if direction is TrendDirection.UP:
        return "green"
    if direction is TrendDirection.DOWN:
        return "red"
    return "blue"


def create_performance_badge(metrics: BenchmarkMetrics) -> Badge:
    grade = metrics.performance_grade
    return Badge(
        label="Performance Score",
        message=f"{grade} ({metrics.performance_score_formatted})",
        color=grade_color(grade),
    )


def create_trend_badge(trend: TrendMetrics) -> Badge:
    return Badge(
        label="Performance Trend",
        message=trend_message(trend),
        color=trend_color(trend.direction),
    )


def create_last_run_badge(now: datetime | None = None) -> Badge:
    now = now or datetime.now(timezone.utc)
    return Badge(label="Last Run", message=now.strftime("%Y-%m-%d"), color="blue")


class BadgeGenerator:
    """Writes the performance, trend and last-run badges."""

    def __init__(self, output_dir: Path | str):
        self.badges_dir = Path(output_dir) / "badges"

    def write_badge(self, file_name: str, badge: Badge) -> Path:
        target = self.badges_dir / file_name
        write_json_atomic(target, badge.to_json_dict())
        logger.info(f"Generated badge {target}")
        return target

    def write_badges(
        self,
        metrics: BenchmarkMetrics,
        trend: TrendMetrics,
        now: datetime | None = None,
    ) -> ArtifactResults:
        """Write all three badges, isolating failures per badge."""
        results = ArtifactResults()
        run_isolated(
            PERFORMANCE_BADGE_FILE,
            self.write_badge,
            results,
            PERFORMANCE_BADGE_FILE,
            create_performance_badge(metrics),
        )
        run_isolated(
            TREND_BADGE_FILE, self.write_badge, results, TREND_BADGE_FILE, create_trend_badge(trend)
        )
        run_isolated(
            LAST_RUN_BADGE_FILE,
            self.write_badge,
            results,
            LAST_RUN_BADGE_FILE,
            create_last_run_badge(now),
        )
        return results
