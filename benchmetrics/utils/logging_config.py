"""Structured logging configuration using loguru."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

from ..config.loader import get_config


def setup_logging(
    level: str = "INFO",
    format_type: str = "text",
    file_path: str | None = None,
    max_file_size_mb: int = 10,
    backup_count: int = 3,
    include_timestamps: bool = True,
) -> None:
    """Set up console and optional file logging.

    Invalid logging level names fall back to 'INFO'.

    Args:
        level: Loguru level name
        format_type: "json" for serialized records, anything else for a
            coloured human readable format
        file_path: Optional log file; rotated by size
        max_file_size_mb: Rotation size for the file sink
        backup_count: Rotated files to keep
        include_timestamps: Prefix pretty records with a timestamp
    """
    logger.remove()

    format_parts = []
    if include_timestamps:
        format_parts.append("<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green>")
    format_parts.append("<level>{level: <8}</level>")
    format_parts.append("<cyan>{name}</cyan>")
    format_parts.append("<level>{message}</level>")

    if format_type == "json":
        log_format = "{message}"
        serialize = True
    else:
        log_format = " | ".join(format_parts)
        serialize = False

    try:
        logger.level(level)
        safe_level = level
    except ValueError:
        safe_level = "INFO"

    logger.add(
        sys.stderr,
        level=safe_level,
        format=log_format,
        serialize=serialize,
        colorize=format_type != "json",
    )

    if safe_level != level:
        logger.warning(f"Invalid logging level '{level}' provided; falling back to 'INFO'")

    if file_path:
        log_file_path = Path(file_path)
        log_file_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_file_path,
            level=safe_level,
            format=log_format,
            serialize=serialize,
            rotation=f"{max_file_size_mb} MB",
            retention=backup_count,
            encoding="utf-8",
        )


def configure_logging_from_config() -> None:
    """Configure logging using the current configuration."""
    config = get_config()

    setup_logging(
        level=config.logging.level,
        format_type=config.logging.format,
        file_path=config.logging.file_path,
        max_file_size_mb=config.logging.max_file_size_mb,
        backup_count=config.logging.backup_count,
        include_timestamps=config.logging.include_timestamps,
    )
