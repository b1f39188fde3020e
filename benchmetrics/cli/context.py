"""CLI command context and shared utilities.

Provides CommandContext dataclass for dependency injection of shared state
across CLI commands.
"""

from __future__ import annotations

import os
import uuid
from dataclasses import dataclass, field

from loguru import logger
from rich.console import Console

from ..config.schemas import PipelineConfig


@dataclass
class CommandContext:
    """Shared context for CLI commands.

    Attributes:
        config: Pipeline configuration
        console: Rich console for formatted output
        run_id: Unique identifier for this CLI session
        logger: Loguru logger with context binding
    """

    config: PipelineConfig
    console: Console
    run_id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])

    def __post_init__(self) -> None:
        self.logger = logger.bind(
            component="cli",
            run_id=self.run_id,
            environment=self.config.pipeline.get("environment", "unknown"),
        )

    @classmethod
    def create(cls, config: PipelineConfig | None = None, run_id: str | None = None) -> CommandContext:
        """Create a CommandContext with the loaded configuration.

        Args:
            config: Optional PipelineConfig. If None, loads from get_config().
            run_id: Optional run identifier. If None, generates a unique ID.

        Raises:
            ConfigurationError: If the configuration cannot be loaded
        """
        from ..config.loader import get_config

        if config is None:
            config = get_config()

        if run_id is not None:
            context = cls(config=config, console=Console(), run_id=run_id)
        else:
            context = cls(config=config, console=Console())

        context.logger.debug(f"CLI session started (pid={os.getpid()})")
        return context
