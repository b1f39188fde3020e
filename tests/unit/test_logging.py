"""Unit tests for loguru configuration."""

import sys
from pathlib import Path

import pytest
from loguru import logger

from benchmetrics.utils.logging_config import configure_logging_from_config, setup_logging

pytestmark = pytest.mark.fast


@pytest.fixture(autouse=True)
def restore_logger():
    yield
    logger.remove()
    logger.add(sys.stderr, level="INFO")


def test_file_sink_receives_records(tmp_path: Path):
    log_file = tmp_path / "logs" / "benchmetrics.log"
    setup_logging(level="DEBUG", file_path=str(log_file), include_timestamps=False)

    logger.debug("exported http metrics")
    logger.remove()

    content = log_file.read_text(encoding="utf-8")
    assert "exported http metrics" in content
    assert "DEBUG" in content


def test_level_filters_records(tmp_path: Path):
    log_file = tmp_path / "app.log"
    setup_logging(level="WARNING", file_path=str(log_file))

    logger.info("hidden")
    logger.warning("visible")
    logger.remove()

    content = log_file.read_text(encoding="utf-8")
    assert "visible" in content
    assert "hidden" not in content


def test_invalid_level_falls_back_to_info(tmp_path: Path):
    log_file = tmp_path / "app.log"
    setup_logging(level="NOT_A_LEVEL", file_path=str(log_file))

    logger.info("still logged")
    logger.remove()

    assert "still logged" in log_file.read_text(encoding="utf-8")


def test_json_format_serializes(tmp_path: Path):
    log_file = tmp_path / "app.json"
    setup_logging(level="INFO", format_type="json", file_path=str(log_file))

    logger.info("structured")
    logger.remove()

    assert '"message": "structured"' in log_file.read_text(encoding="utf-8")


def test_configure_from_config(monkeypatch, tmp_path: Path):
    log_file = tmp_path / "configured.log"
    monkeypatch.setenv("BENCHMETRICS__LOGGING__FILE_PATH", str(log_file))
    monkeypatch.setenv("BENCHMETRICS__LOGGING__LEVEL", "DEBUG")

    configure_logging_from_config()
    logger.debug("from config")
    logger.remove()

    assert "from config" in log_file.read_text(encoding="utf-8")
