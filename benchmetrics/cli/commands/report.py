"""Report commands: generate report artifacts and package the static site."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.panel import Panel

from ...exceptions import BenchmetricsError
from ...models.benchmark import BenchmarkType
from ...reporting.github_pages import GitHubPagesGenerator
from ...reporting.pipeline import ReportPipeline
from ..context import CommandContext
from ..display.errors import CLIError, handle_error
from .process import render_artifacts

app = typer.Typer(name="report", help="Generate benchmark reports and deployment trees")


@app.command("generate")
def generate(
    ctx: typer.Context,
    results_file: Path = typer.Argument(..., help="JMH JSON result file"),
    output_dir: Path | None = typer.Option(None, "--output-dir", "-o", help="Report output directory"),
    history_dir: Path | None = typer.Option(None, "--history-dir", help="History snapshot directory"),
    benchmark_type: BenchmarkType = typer.Option(
        BenchmarkType.MICRO, "--type", "-t", case_sensitive=False, help="Benchmark type"
    ),
    commit: str | None = typer.Option(None, "--commit", help="Commit SHA (defaults to $GITHUB_SHA)"),
) -> None:
    """Compute metrics and trends, then write badges, data, summary and HTML."""
    context: CommandContext = ctx.obj
    paths = context.config.paths
    output_dir = output_dir or Path(paths.output_dir)
    history_dir = history_dir or Path(paths.history_dir)

    try:
        if not results_file.is_file():
            raise CLIError(f"Benchmark result file not found: {results_file}")
        outcome = ReportPipeline(context.config, benchmark_type).run(
            results_file, output_dir, history_dir=history_dir, commit=commit
        )
    except (BenchmetricsError, CLIError) as e:
        handle_error(e, context=context)
        return

    render_artifacts(context, outcome.artifacts, "Report Artifacts")

    if outcome.metrics is not None:
        metrics = outcome.metrics
        lines = [
            f"Throughput: {metrics.throughput_formatted}",
            f"Latency: {metrics.latency_formatted}",
            f"Score: {metrics.performance_score_formatted} ({metrics.performance_grade})",
        ]
        if outcome.trend is not None:
            lines.append(
                f"Trend: {outcome.trend.direction.value} ({outcome.trend.change_percentage:+.1f}%)"
            )
        context.console.print(Panel("\n".join(lines), title="Benchmark Metrics", border_style="blue"))

    if not outcome.artifacts.ok:
        raise typer.Exit(code=1)


@app.command("deploy")
def deploy(
    ctx: typer.Context,
    source_dir: Path | None = typer.Option(None, "--source-dir", "-s", help="Report output directory"),
    deploy_dir: Path | None = typer.Option(None, "--deploy-dir", "-d", help="Deployment directory"),
) -> None:
    """Package the report output into a GitHub Pages tree."""
    context: CommandContext = ctx.obj
    source_dir = source_dir or Path(context.config.paths.output_dir)
    deploy_dir = deploy_dir or Path(context.config.paths.deploy_dir)

    try:
        if not source_dir.is_dir():
            raise CLIError(
                f"Report directory not found: {source_dir}",
                suggestions=["Run 'benchmetrics report generate' first"],
            )
        results = GitHubPagesGenerator(context.config.report).prepare_deployment_structure(
            source_dir, deploy_dir
        )
    except (BenchmetricsError, CLIError) as e:
        handle_error(e, context=context)
        return

    render_artifacts(context, results, "Deployment Artifacts")
    if not results.ok:
        raise typer.Exit(code=1)

    context.console.print(f"[green]✓[/green] Deployment tree ready at {deploy_dir}")


def register_command(main_app: typer.Typer) -> None:
    """Register report commands with main app."""
    main_app.add_typer(app, name="report")
