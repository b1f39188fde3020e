"""Main CLI application entry point for the benchmark metrics pipeline.

This module provides the Typer application instance and command registration.
"""

from __future__ import annotations

import typer

from ..exceptions import ConfigurationError
from ..utils.logging_config import setup_logging
from .display.errors import handle_error

app = typer.Typer(
    name="benchmetrics",
    help="JWT benchmark metrics and reporting pipeline",
    add_completion=False,
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Benchmark metrics pipeline CLI.

    Provides commands to export metrics, generate reports, package the
    static site and inspect trends.
    """
    setup_logging(level="DEBUG" if verbose else "INFO", include_timestamps=False)

    from .context import CommandContext

    try:
        ctx.obj = CommandContext.create()
    except ConfigurationError as e:
        handle_error(e, exit_code=2)


from .commands import process, report, trends  # noqa: E402

process.register_command(app)
report.register_command(app)
trends.register_command(app)


if __name__ == "__main__":
    app()
