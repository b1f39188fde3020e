"""Configuration loading utilities."""

from benchmetrics.config.loader import get_config, load_config_from_files, reload_config
from benchmetrics.config.schemas import PipelineConfig


__all__ = ["get_config", "load_config_from_files", "reload_config", "PipelineConfig"]
