"""Configuration schemas using Pydantic for type-safe configuration."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PathsConfig(BaseModel):
    """File system locations used by the pipeline."""

    results_dir: str = Field(
        default="target/benchmark-results", description="JMH result and metrics scrape directory"
    )
    output_dir: str = Field(
        default="target/benchmark-results/report", description="Generated report artifacts"
    )
    history_dir: str = Field(
        default="target/benchmark-results/report/history",
        description="Archived per-run report data used for trend analysis",
    )
    deploy_dir: str = Field(
        default="target/benchmark-results/gh-pages-ready",
        description="Static-site deployment tree",
    )


class HistoryConfig(BaseModel):
    """Historical run archive settings."""

    max_entries: int = Field(default=10, ge=1, description="Retained history snapshots")
    commit_env_var: str = Field(default="GITHUB_SHA", description="Env var holding commit SHA")
    local_commit: str = Field(default="local-run", description="Commit id when env var unset")
    commit_length: int = Field(default=8, ge=1, description="Commit SHA prefix length in filenames")


class TrendsConfig(BaseModel):
    """Trend analysis parameters."""

    ewma_lambda: float = Field(default=0.25, description="EWMA decay factor per history position")
    stability_threshold: float = Field(
        default=2.0, ge=0.0, description="|change %| below which the trend is stable"
    )
    moving_average_window: int = Field(
        default=5, ge=1, description="Points (current included) in the display moving average"
    )

    @field_validator("ewma_lambda")
    @classmethod
    def validate_lambda(cls, v: float) -> float:
        """Validate that the decay factor lies in (0, 1]."""
        if not (0.0 < v <= 1.0):
            raise ValueError("ewma_lambda must be in (0, 1]")
        return v


class ScoringConfig(BaseModel):
    """Benchmark selection and composite score weighting."""

    throughput_benchmark: str = "measureThroughput"
    latency_benchmark: str = "measureAverageTime"
    error_resilience_benchmark: str | None = "validateMixedTokens"
    throughput_weight: float = Field(default=0.57, ge=0.0)
    latency_weight: float = Field(default=0.40, ge=0.0)
    error_resilience_weight: float = Field(default=0.03, ge=0.0)


class EndpointConfig(BaseModel):
    """A logical HTTP endpoint bucket for JMH sample-mode benchmarks."""

    name: str
    patterns: list[str]


def default_endpoints() -> dict[str, EndpointConfig]:
    return {
        "jwt_validation": EndpointConfig(
            name="JWT Validation",
            patterns=["validateJwt", "validateAccessToken", "JwtValidationBenchmark", "jwtValidation"],
        ),
        "health": EndpointConfig(
            name="Health Check", patterns=["JwtHealthBenchmark", "health"]
        ),
    }


class ReportConfig(BaseModel):
    """HTML report and static-site settings."""

    title: str = "JWT Validation Benchmarks"
    chart_script_url: str = "https://cdn.jsdelivr.net/npm/chart.js"
    site_url: str = "https://cuioss.github.io/cui-jwt/benchmarks"
    micro_throughput_threshold: float = 10_000.0
    integration_throughput_threshold: float = 5_000.0
    regression_threshold_percent: float = 10.0


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "text"
    file_path: str | None = None
    max_file_size_mb: int = 10
    backup_count: int = 3
    include_timestamps: bool = True

    @field_validator("format")
    @classmethod
    def _normalize_format(cls, v: str) -> str:
        """Normalize 'pretty'/'plain' to 'text' and 'structured' to 'json'."""
        vv = v.lower()
        if vv in ("pretty", "text", "plain"):
            return "text"
        if vv in ("json", "structured"):
            return "json"
        return v


class PipelineConfig(BaseModel):
    """Root configuration model for the benchmark metrics pipeline."""

    pipeline: dict[str, Any] = Field(
        default_factory=lambda: {
            "name": "benchmetrics",
            "environment": "development",
        }
    )
    paths: PathsConfig = Field(default_factory=PathsConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    trends: TrendsConfig = Field(default_factory=TrendsConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    endpoints: dict[str, EndpointConfig] = Field(default_factory=default_endpoints)
    report: ReportConfig = Field(default_factory=ReportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(
        validate_assignment=True,
        extra="allow",
    )
