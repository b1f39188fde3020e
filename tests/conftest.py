# benchmetrics/tests/conftest.py
#
# Test bootstrap for pytest: ensure repository root is on sys.path so tests can import
# the `benchmetrics` package without an editable install.
#
# Fixture Organization:
# - This file: config cache reset, JMH result builders and result file writers
# - tests/integration: end-to-end report runs built from the same fixtures
#
from __future__ import annotations

import json
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from loguru import logger


_repo_root = Path(__file__).resolve().parents[1]
_repo_root_str = str(_repo_root)

if _repo_root_str not in sys.path:
    sys.path.insert(0, _repo_root_str)

# Configure test logging using loguru for consistency with application code
logger.remove()
logger.add(
    sys.stderr,
    level="INFO",
    format="{time:YYYY-MM-DD HH:mm:ss} {level} {name}: {message}",
)


# Pytest Configuration
# ===================


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers",
        "fast: Fast unit tests that should complete in < 1 second",
    )
    config.addinivalue_line(
        "markers",
        "integration: Tests that exercise several pipeline stages together",
    )


@pytest.fixture(autouse=True)
def reset_config_cache():
    """Clear the cached configuration around every test."""
    from benchmetrics.config.loader import reload_config

    reload_config()
    yield
    reload_config()


@pytest.fixture(scope="session")
def repo_root() -> Path:
    return _repo_root


# JMH Result Fixtures
# ===================

BENCHMARK_PACKAGE = "de.cuioss.jwt.validation.benchmark"


def build_jmh_entry(
    benchmark: str,
    mode: str,
    score: float,
    unit: str,
    percentiles: dict[str, float] | None = None,
    histogram: list[list[float]] | None = None,
    error: float = 0.0,
) -> dict[str, Any]:
    """Build one entry of a JMH JSON result array."""
    metric: dict[str, Any] = {
        "score": score,
        "scoreError": error,
        "scoreConfidence": [score - error, score + error],
        "scoreUnit": unit,
        "scorePercentiles": percentiles or {},
    }
    if histogram is not None:
        metric["rawDataHistogram"] = [[histogram]]
    return {
        "benchmark": benchmark if benchmark.startswith("de.") else f"{BENCHMARK_PACKAGE}.{benchmark}",
        "mode": mode,
        "threads": 4,
        "forks": 1,
        "primaryMetric": metric,
    }


@pytest.fixture
def jmh_entry() -> Callable[..., dict[str, Any]]:
    """Factory for JMH result entries."""
    return build_jmh_entry


@pytest.fixture
def micro_results() -> list[dict[str, Any]]:
    """A micro benchmark run scoring exactly 50 (5000 ops/s and 2 ms/op)."""
    return [
        build_jmh_entry("SimpleCoreValidationBenchmark.measureThroughput", "thrpt", 5000.0, "ops/s", error=50.0),
        build_jmh_entry(
            "SimpleCoreValidationBenchmark.measureAverageTime",
            "avgt",
            2.0,
            "ms/op",
            percentiles={"0.0": 1.0, "50.0": 2.0, "90.0": 2.5, "95.0": 3.0, "99.0": 4.0, "100.0": 5.0},
            error=0.1,
        ),
    ]


@pytest.fixture
def write_results(tmp_path: Path) -> Callable[[list[dict[str, Any]]], Path]:
    """Write a JMH result array and return its path."""

    def _write(entries: list[dict[str, Any]], name: str = "micro-result.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(entries), encoding="utf-8")
        return path

    return _write
