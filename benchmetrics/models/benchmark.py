"""Pydantic models for run summaries, history points and trends."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class BenchmarkType(str, Enum):
    """Kind of benchmark run a report covers."""

    MICRO = "micro"
    INTEGRATION = "integration"

    @property
    def display_name(self) -> str:
        return "Micro Benchmarks" if self is BenchmarkType.MICRO else "Integration Benchmarks"


class TrendDirection(str, Enum):
    """Direction of the performance score relative to its historical baseline."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class BenchmarkMetrics(BaseModel):
    """Summary of one completed benchmark run."""

    throughput_benchmark_name: str = Field(..., description="Benchmark used for throughput")
    latency_benchmark_name: str = Field(..., description="Benchmark used for latency")
    throughput: float = Field(..., ge=0.0, description="Throughput in ops/s")
    latency: float = Field(..., ge=0.0, description="Latency in ms/op")
    error_resilience: float | None = Field(
        None, description="Mixed valid/invalid token throughput in ops/s"
    )
    performance_score: float = Field(..., description="Composite weighted score")
    performance_grade: str = Field(..., description="Letter grade A+ through F")
    throughput_formatted: str = ""
    latency_formatted: str = ""
    performance_score_formatted: str = ""

    model_config = ConfigDict(frozen=True)


class HistoricalDataPoint(BaseModel):
    """A previous run loaded from the history directory."""

    timestamp: str
    throughput: float = 0.0
    latency: float = 0.0
    performance_score: float = 0.0
    commit_hash: str = "unknown"

    model_config = ConfigDict(frozen=True)


class TrendMetrics(BaseModel):
    """Trend of the current run against the historical series."""

    direction: TrendDirection
    change_percentage: float
    moving_average: float
    throughput_trend: float = 0.0
    latency_trend: float = 0.0
    baseline: float | None = Field(None, description="EWMA baseline of historical scores")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def stable(cls, current_score: float) -> TrendMetrics:
        """Trend used when there is no history to compare against."""
        return cls(
            direction=TrendDirection.STABLE,
            change_percentage=0.0,
            moving_average=current_score,
        )
