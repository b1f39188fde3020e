"""Configuration loader: YAML file merging plus cached, validated access.

`load_config_from_files` only reads and deep-merges YAML files (base plus an
optional environment file). Environment variable overrides and validation are
applied in `get_config()`.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..exceptions import ConfigurationError, ErrorCode
from .schemas import PipelineConfig

ENV_PREFIX = "BENCHMETRICS"
DEFAULT_CONFIG_DIR = Path(__file__).resolve().parent


def _deep_merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


def _convert_env_value(value: str) -> Any:
    """Convert environment variable string to appropriate type."""
    if value.lower() in ("true", "false"):
        return value.lower() == "true"

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    return value


def _apply_env_overrides(config_dict: dict[str, Any], prefix: str = ENV_PREFIX) -> dict[str, Any]:
    """Apply environment variable overrides to configuration dictionary.

    Example:
      BENCHMETRICS__TRENDS__EWMA_LAMBDA=0.5 -> config_dict["trends"]["ewma_lambda"] = 0.5
    """
    result = config_dict.copy()

    for env_key, env_value in os.environ.items():
        if not env_key.startswith(f"{prefix}__"):
            continue

        config_path = env_key[len(f"{prefix}__") :].lower().split("__")

        current = result
        for path_part in config_path[:-1]:
            if path_part not in current or not isinstance(current[path_part], dict):
                current[path_part] = {}
            else:
                current[path_part] = dict(current[path_part])
            current = current[path_part]

        current[config_path[-1]] = _convert_env_value(env_value)

    return result


def _read_yaml(path: Path, operation: str) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse config file {path}: {e}",
            operation=operation,
            details={"file_path": str(path)},
            status_code=ErrorCode.CONFIG_LOAD_FAILED,
            cause=e,
        ) from e


def load_config_from_files(
    environment: str | None = None, config_dir: Path | None = None
) -> dict[str, Any]:
    """Load configuration from YAML files with environment-specific overrides.

    Args:
        environment: Optional environment name; `<environment>.yaml` is merged
            on top of `base.yaml` when it exists
        config_dir: Directory holding the YAML files (defaults to the packaged
            configuration directory)

    Returns:
        Merged configuration dictionary

    Raises:
        ConfigurationError: If base.yaml is missing or a file fails to parse
    """
    config_dir = Path(config_dir) if config_dir is not None else DEFAULT_CONFIG_DIR

    base_file = config_dir / "base.yaml"
    if not base_file.exists():
        raise ConfigurationError(
            f"Base configuration file not found: {base_file}",
            operation="load_config_from_files",
            details={"file_path": str(base_file), "config_dir": str(config_dir)},
            status_code=ErrorCode.CONFIG_LOAD_FAILED,
        )

    config = _read_yaml(base_file, "load_config_from_files")

    if environment:
        env_file = config_dir / f"{environment}.yaml"
        if env_file.exists():
            config = _deep_merge_dicts(config, _read_yaml(env_file, "load_config_from_files"))

    return config


@lru_cache(maxsize=1)
def get_config(
    environment: str | None = None,
    config_dir: Path | None = None,
    apply_env_overrides_flag: bool = True,
) -> PipelineConfig:
    """Get validated configuration with caching.

    Loads the merged file configuration, applies `BENCHMETRICS__*` environment
    variable overrides (if requested) and validates the result.
    """
    if environment is None:
        environment = os.getenv(f"{ENV_PREFIX}__PIPELINE__ENVIRONMENT", "development")

    config_dict = load_config_from_files(environment=environment, config_dir=config_dir)

    config_dict.setdefault("pipeline", {})
    config_dict["pipeline"].setdefault("environment", environment)

    if apply_env_overrides_flag:
        config_dict = _apply_env_overrides(config_dict)

    try:
        return PipelineConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(
            f"Configuration validation failed: {e}",
            operation="get_config",
            details={"environment": environment},
            cause=e,
        ) from e


def reload_config() -> None:
    """Clear configuration cache to force reload on next access."""
    get_config.cache_clear()
