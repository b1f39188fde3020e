"""Process command: export metric documents from a benchmark run."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.table import Table

from ...exceptions import BenchmetricsError
from ...metrics.post_processor import MetricsPostProcessor, ResultFormat
from ...metrics.resource_aggregator import QuarkusMetricsAggregator
from ...utils.error_handling import ArtifactResults
from ..context import CommandContext
from ..display.errors import CLIError, handle_error

app = typer.Typer(name="process", help="Export metric documents from JMH results and Prometheus scrapes")


def render_artifacts(context: CommandContext, results: ArtifactResults, title: str) -> None:
    """Print a table of succeeded and failed artifacts."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Artifact", style="cyan")
    table.add_column("Status", justify="center")
    table.add_column("Detail", style="dim")

    for name in results.succeeded:
        table.add_row(name, "[green]✓[/green]", "")
    for name, reason in results.failed.items():
        table.add_row(name, "[red]✗[/red]", reason)

    context.console.print(table)


@app.command("run")
def run(
    ctx: typer.Context,
    results_file: Path = typer.Argument(..., help="JMH JSON result file, or wrk output file or directory"),
    output_dir: Path | None = typer.Option(None, "--output-dir", "-o", help="Directory for metric documents"),
    metrics_dir: Path | None = typer.Option(
        None, "--metrics-dir", "-m", help="Directory of Prometheus scrape files"
    ),
    result_format: ResultFormat = typer.Option(
        ResultFormat.JMH, "--format", "-f", case_sensitive=False, help="Format of the benchmark results"
    ),
) -> None:
    """Export HTTP, JWT validation, resource and Quarkus metrics."""
    context: CommandContext = ctx.obj
    paths = context.config.paths
    output_dir = output_dir or Path(paths.output_dir)
    metrics_dir = metrics_dir or Path(paths.results_dir) / "metrics-download"

    try:
        wrk_directory = result_format is ResultFormat.WRK and results_file.is_dir()
        if not (results_file.is_file() or wrk_directory):
            raise CLIError(
                f"Benchmark results not found: {results_file}",
                suggestions=[
                    "Run the benchmarks first",
                    "Pass the JMH JSON output, or wrk output with --format wrk",
                ],
            )

        processor = MetricsPostProcessor(
            results_file,
            output_dir,
            endpoints=context.config.endpoints,
            metrics_dir=metrics_dir,
            result_format=result_format,
        )
        results = processor.parse_and_export_all_metrics()
        render_artifacts(context, results, "Exported Metrics")

        if not results.ok:
            raise typer.Exit(code=1)
    except (BenchmetricsError, CLIError) as e:
        handle_error(e, context=context)


@app.command("quarkus")
def quarkus(
    ctx: typer.Context,
    metrics_dir: Path = typer.Argument(..., help="Directory of Quarkus metrics scrapes"),
    output_dir: Path | None = typer.Option(None, "--output-dir", "-o", help="Directory for metric documents"),
) -> None:
    """Aggregate Quarkus runtime metrics into quarkus-metrics.json."""
    context: CommandContext = ctx.obj
    output_dir = output_dir or Path(context.config.paths.output_dir)

    try:
        target = QuarkusMetricsAggregator(metrics_dir, output_dir).parse_and_export()
    except BenchmetricsError as e:
        handle_error(e, context=context)
        return

    if target is None:
        context.console.print(f"[yellow]No Quarkus metrics files found in {metrics_dir}[/yellow]")
        return
    context.console.print(f"[green]✓[/green] Wrote {target}")


def register_command(main_app: typer.Typer) -> None:
    """Register process commands with main app."""
    main_app.add_typer(app, name="process")
