"""Trends command for inspecting archived benchmark history."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.panel import Panel
from rich.table import Table

from ...models.benchmark import BenchmarkMetrics, TrendDirection
from ...reporting.badge_generator import performance_grade
from ...reporting.trend_processor import TrendDataProcessor
from ..context import CommandContext

app = typer.Typer(name="trends", help="Inspect historical benchmark trends")

DIRECTION_STYLES = {
    TrendDirection.UP: "[green]↑ up[/green]",
    TrendDirection.DOWN: "[red]↓ down[/red]",
    TrendDirection.STABLE: "[blue]→ stable[/blue]",
}


@app.command("show")
def show(
    ctx: typer.Context,
    history_dir: Path | None = typer.Option(None, "--history-dir", help="History snapshot directory"),
) -> None:
    """Show the archived runs and the trend of the newest run against the rest."""
    context: CommandContext = ctx.obj
    history_dir = history_dir or Path(context.config.paths.history_dir)
    processor = TrendDataProcessor(context.config.trends, context.config.history.max_entries)

    history = processor.load_historical_data(history_dir)
    if not history:
        context.console.print(f"[yellow]No historical data found in {history_dir}[/yellow]")
        return

    table = Table(title="Benchmark History", show_header=True, header_style="bold magenta")
    table.add_column("Timestamp", style="dim")
    table.add_column("Commit", style="cyan")
    table.add_column("Throughput (ops/s)", justify="right")
    table.add_column("Latency (ms)", justify="right")
    table.add_column("Score", justify="right")

    for point in history:
        table.add_row(
            point.timestamp,
            point.commit_hash,
            f"{point.throughput:,.0f}",
            f"{point.latency:.3f}",
            f"{point.performance_score:.2f}",
        )
    context.console.print(table)

    if len(history) < 2:
        return

    newest, previous = history[0], history[1:]
    current = BenchmarkMetrics(
        throughput_benchmark_name=context.config.scoring.throughput_benchmark,
        latency_benchmark_name=context.config.scoring.latency_benchmark,
        throughput=newest.throughput,
        latency=newest.latency,
        performance_score=newest.performance_score,
        performance_grade=performance_grade(newest.performance_score),
    )
    trend = processor.calculate_trends(current, previous)

    summary = f"""
Direction: {DIRECTION_STYLES[trend.direction]}
Change vs EWMA baseline: {trend.change_percentage:+.1f}% (baseline {trend.baseline:.2f})
Moving average: {trend.moving_average:.2f}
Throughput trend: {trend.throughput_trend:+.1f}%
Latency trend: {trend.latency_trend:+.1f}%
    """.strip()
    context.console.print(Panel(summary, title="Latest Trend", border_style="blue"))


def register_command(main_app: typer.Typer) -> None:
    """Register trends commands with main app."""
    main_app.add_typer(app, name="trends")
