"""Self-contained HTML report pages: index.html, trends.html and detailed.html.

Pages are rendered from the report data document so that the HTML and the
archived JSON always describe the same run.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from loguru import logger

from ..config.schemas import ReportConfig
from ..models.jmh import JmhBenchmarkResult
from ..utils.error_handling import ArtifactResults, run_isolated
from ..utils.file_io import write_text_atomic
from .conversion import format_latency, format_throughput, to_milliseconds_per_op, to_ops_per_second
from .html_templates import HTMLReportBuilder
from .report_data_generator import is_latency_mode, is_throughput_mode

INDEX_PAGE = "index.html"
TRENDS_PAGE = "trends.html"
DETAILED_PAGE = "detailed.html"
REPORT_PAGES = (INDEX_PAGE, TRENDS_PAGE, DETAILED_PAGE)


def average_throughput(results: Sequence[JmhBenchmarkResult]) -> float:
    values = [to_ops_per_second(r.score, r.unit) for r in results if is_throughput_mode(r)]
    return sum(values) / len(values) if values else 0.0


def average_latency(results: Sequence[JmhBenchmarkResult]) -> float:
    values = [
        to_milliseconds_per_op(r.score, r.unit)
        for r in results
        if not is_throughput_mode(r) and is_latency_mode(r)
    ]
    values = [v for v in values if v > 0]
    return sum(values) / len(values) if values else 0.0


def _line_chart(labels: list[Any], datasets: list[tuple[str, list[Any]]]) -> str:
    config = {
        "type": "line",
        "data": {
            "labels": labels,
            "datasets": [
                {"label": label, "data": data, "fill": False, "tension": 0.2}
                for label, data in datasets
            ],
        },
        "options": {"responsive": True, "maintainAspectRatio": False},
    }
    return json.dumps(config)


class ReportGenerator:
    """Renders the report pages into the output directory."""

    def __init__(self, report_config: ReportConfig | None = None):
        self.config = report_config or ReportConfig()

    def _layout(self, title: str, content: str, page: str, report_data: Mapping[str, Any]) -> str:
        return HTMLReportBuilder.create_report_layout(
            title=title,
            content=content,
            active_page=page,
            chart_script_url=self.config.chart_script_url,
            timestamp=report_data.get("metadata", {}).get("displayTimestamp"),
        )

    def render_index(
        self, report_data: Mapping[str, Any], results: Sequence[JmhBenchmarkResult]
    ) -> str:
        overview = report_data.get("overview", {})
        grade = overview.get("performanceGrade", "N/A")
        cards = [
            HTMLReportBuilder.create_metric_card("Total Benchmarks", str(len(results))),
            HTMLReportBuilder.create_metric_card(
                "Performance Grade", grade, value_class=overview.get("performanceGradeClass")
            ),
            HTMLReportBuilder.create_metric_card(
                "Performance Score", str(overview.get("performanceScore", 0))
            ),
            HTMLReportBuilder.create_metric_card(
                "Avg Throughput", format_throughput(average_throughput(results))
            ),
            HTMLReportBuilder.create_metric_card(
                "Avg Latency", format_latency(average_latency(results))
            ),
        ]

        rows = [
            {
                "Benchmark": r.simple_name,
                "Mode": r.mode,
                "Score": float(r.score),
                "Unit": r.unit,
            }
            for r in results
        ]
        content = "\n".join(
            [
                "<h2>Overview</h2>",
                HTMLReportBuilder.create_metric_grid(cards),
                HTMLReportBuilder.create_table(
                    rows, ["Benchmark", "Mode", "Score", "Unit"], "Benchmark Results"
                ),
            ]
        )
        return self._layout(self.config.title, content, INDEX_PAGE, report_data)

    def render_trends(self, report_data: Mapping[str, Any]) -> str:
        trends = report_data.get("trends", {})
        if not trends.get("available"):
            content = HTMLReportBuilder.create_alert(
                trends.get("message", "Historical data not yet available")
            )
            return self._layout("Performance Trends", content, TRENDS_PAGE, report_data)

        chart = trends.get("chartData", {})
        cards = [
            HTMLReportBuilder.create_metric_card(
                "Score Trend",
                str(trends.get("direction", "stable")),
                delta=f"{trends.get('changePercentage', 0.0):+.1f}%",
            ),
            HTMLReportBuilder.create_metric_card(
                "Moving Average", f"{trends.get('movingAverage', 0.0):.2f}"
            ),
            HTMLReportBuilder.create_metric_card(
                "Throughput Trend", "", delta=f"{trends.get('throughputTrend', 0.0):+.1f}%"
            ),
            HTMLReportBuilder.create_metric_card(
                "Latency Trend", "", delta=f"{trends.get('latencyTrend', 0.0):+.1f}%"
            ),
        ]

        timestamps = chart.get("timestamps", [])
        scores = chart.get("performanceScores", [])
        throughput = chart.get("throughput", [])
        latency = chart.get("latency", [])
        rows = []
        for i in range(len(timestamps) - 1, 0, -1):
            previous = scores[i - 1]
            change = (scores[i] - previous) / previous * 100 if previous else 0.0
            rows.append(
                {
                    "Run": timestamps[i],
                    "Current": float(scores[i]),
                    "Previous": float(previous),
                    "Change": f"{change:+.1f}%",
                    "Throughput": format_throughput(throughput[i]),
                    "Latency": format_latency(latency[i]),
                }
            )

        content = "\n".join(
            [
                f"<p>{trends.get('summary', '')}</p>",
                HTMLReportBuilder.create_metric_grid(cards),
                "<h2>Performance Score History</h2>",
                HTMLReportBuilder.create_chart(
                    "scoreChart",
                    _line_chart(timestamps, [("Performance Score", scores)]),
                ),
                HTMLReportBuilder.create_table(
                    rows,
                    ["Run", "Current", "Previous", "Change", "Throughput", "Latency"],
                    "Run-over-run Changes",
                ),
            ]
        )
        return self._layout("Performance Trends", content, TRENDS_PAGE, report_data)

    def render_detailed(self, report_data: Mapping[str, Any]) -> str:
        metadata = report_data.get("metadata", {})
        rows = []
        for entry in report_data.get("benchmarks", []):
            rows.append(
                {
                    "Benchmark": entry.get("name"),
                    "Mode": entry.get("mode"),
                    "Score": entry.get("score"),
                    "Error": entry.get("error"),
                    "Error %": entry.get("errorPercentage"),
                    "Confidence Low": entry.get("confidenceLow"),
                    "Confidence High": entry.get("confidenceHigh"),
                }
            )

        percentiles = report_data.get("chartData", {}).get("percentilesData", {})
        percentile_rows = [
            {"Benchmark": name, **dict(zip(percentiles.get("percentileLabels", []), values))}
            for name, values in percentiles.get("data", {}).items()
        ]

        parts = [
            f"<p>{metadata.get('benchmarkType', '')}</p>",
            HTMLReportBuilder.create_table(
                rows,
                ["Benchmark", "Mode", "Score", "Error", "Error %", "Confidence Low", "Confidence High"],
                "Benchmark Details",
            ),
        ]
        if percentile_rows:
            parts.append(
                HTMLReportBuilder.create_table(
                    percentile_rows,
                    ["Benchmark", *percentiles.get("percentileLabels", [])],
                    "Latency Percentiles (ms)",
                )
            )
        return self._layout("Detailed Benchmark Analysis", "\n".join(parts), DETAILED_PAGE, report_data)

    def write_page(self, output_dir: Path, page: str, html: str) -> Path:
        target = output_dir / page
        write_text_atomic(target, html)
        logger.info(f"Generated {page} at {target}")
        return target

    def generate_all(
        self,
        report_data: Mapping[str, Any],
        results: Sequence[JmhBenchmarkResult],
        output_dir: Path | str,
    ) -> ArtifactResults:
        """Render and write every page, isolating failures per page."""
        output_dir = Path(output_dir)
        results_log = ArtifactResults()
        logger.info(f"Generating HTML reports for {len(results)} benchmarks")

        run_isolated(
            INDEX_PAGE,
            lambda: self.write_page(output_dir, INDEX_PAGE, self.render_index(report_data, results)),
            results_log,
        )
        run_isolated(
            TRENDS_PAGE,
            lambda: self.write_page(output_dir, TRENDS_PAGE, self.render_trends(report_data)),
            results_log,
        )
        run_isolated(
            DETAILED_PAGE,
            lambda: self.write_page(output_dir, DETAILED_PAGE, self.render_detailed(report_data)),
            results_log,
        )
        return results_log
