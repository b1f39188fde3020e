"""End-to-end report generation for one benchmark run.

Stages run in order: metrics, history, trends, report data, archive, badges,
summary, HTML. Every artifact is written in isolation; a failed write is
recorded in the returned ArtifactResults and the remaining artifacts are still
attempted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from loguru import logger

from ..config.schemas import PipelineConfig
from ..exceptions import BenchmarkNotFoundError
from ..metrics.post_processor import load_jmh_results
from ..models.benchmark import BenchmarkMetrics, BenchmarkType, HistoricalDataPoint, TrendMetrics
from ..utils.error_handling import ArtifactResults, run_isolated
from .badge_generator import BadgeGenerator
from .history_manager import HistoricalDataManager
from .metrics_computer import MetricsComputer
from .report_data_generator import DATA_FILE_NAME, ReportDataGenerator
from .report_generator import ReportGenerator
from .summary_generator import SUMMARY_FILE_NAME, SummaryGenerator
from .trend_processor import TrendDataProcessor


@dataclass
class ReportOutcome:
    """What a report run produced."""

    artifacts: ArtifactResults = field(default_factory=ArtifactResults)
    metrics: BenchmarkMetrics | None = None
    trend: TrendMetrics | None = None
    history: list[HistoricalDataPoint] = field(default_factory=list)


class ReportPipeline:
    """Generates all report artifacts for a JMH result file."""

    def __init__(
        self,
        config: PipelineConfig | None = None,
        benchmark_type: BenchmarkType = BenchmarkType.MICRO,
    ):
        self.config = config or PipelineConfig()
        self.benchmark_type = benchmark_type
        self.metrics_computer = MetricsComputer(self.config.scoring)
        self.history_manager = HistoricalDataManager(self.config.history)
        self.trend_processor = TrendDataProcessor(self.config.trends, self.config.history.max_entries)
        self.report_data_generator = ReportDataGenerator(benchmark_type)
        self.summary_generator = SummaryGenerator(benchmark_type, self.config.report)
        self.report_generator = ReportGenerator(self.config.report)

    def run(
        self,
        results_file: Path | str,
        output_dir: Path | str,
        history_dir: Path | str | None = None,
        commit: str | None = None,
        now: datetime | None = None,
    ) -> ReportOutcome:
        """Generate every report artifact.

        Raises:
            FileSystemError: If the result file is missing or unreadable
            MetricsParseError: If the result file is not a JMH JSON array
        """
        output_dir = Path(output_dir)
        history_dir = Path(history_dir) if history_dir is not None else output_dir / "history"
        now = now or datetime.now(timezone.utc)
        outcome = ReportOutcome()
        artifacts = outcome.artifacts

        results = load_jmh_results(Path(results_file))
        logger.info(f"Generating {self.benchmark_type.display_name} report for {len(results)} results")

        try:
            outcome.metrics = self.metrics_computer.compute_metrics(results)
        except BenchmarkNotFoundError as e:
            logger.error(f"Cannot compute benchmark metrics: {e.message}")
            artifacts.failed["metrics"] = e.message
            summary = self.summary_generator.build(results, None, None, now)
            run_isolated(SUMMARY_FILE_NAME, self.summary_generator.write, artifacts, summary, output_dir)
            return outcome

        metrics = outcome.metrics
        outcome.history = self.trend_processor.load_historical_data(history_dir)
        if outcome.history:
            outcome.trend = self.trend_processor.calculate_trends(metrics, outcome.history)
        badge_trend = outcome.trend or TrendMetrics.stable(metrics.performance_score)

        report_data = self.report_data_generator.build(
            results, metrics, outcome.history, outcome.trend, now
        )
        run_isolated(DATA_FILE_NAME, self.report_data_generator.write, artifacts, report_data, output_dir)
        run_isolated(
            "history",
            self.history_manager.archive_current_run,
            artifacts,
            report_data,
            history_dir,
            commit,
            now,
        )
        self.history_manager.enforce_retention_policy(history_dir)

        artifacts.merge(BadgeGenerator(output_dir).write_badges(metrics, badge_trend, now))

        summary = self.summary_generator.build(results, metrics, outcome.trend, now)
        run_isolated(SUMMARY_FILE_NAME, self.summary_generator.write, artifacts, summary, output_dir)

        artifacts.merge(self.report_generator.generate_all(report_data, results, output_dir))

        logger.info(
            f"Report generation finished: {len(artifacts.succeeded)} artifacts written, "
            f"{len(artifacts.failed)} failed"
        )
        return outcome
