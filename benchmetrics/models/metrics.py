"""Pydantic models for parsed Prometheus samples and HTTP endpoint metrics."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class MetricSample(BaseModel):
    """One Prometheus exposition sample: a metric name, its labels and a value.

    Labels keep their exposition order for display. Label matching treats
    them as an unordered set.
    """

    name: str = Field(..., description="Metric family name")
    labels: tuple[tuple[str, str], ...] = Field(default=(), description="Ordered label pairs")
    value: float = Field(..., description="Sample value")

    model_config = ConfigDict(frozen=True)

    @property
    def key(self) -> str:
        """Metric key as written in the exposition format."""
        if not self.labels:
            return self.name
        rendered = ",".join(f'{k}="{v}"' for k, v in self.labels)
        return f"{self.name}{{{rendered}}}"

    def label(self, name: str) -> str | None:
        """Return the value of label `name`, or None if absent."""
        for key, value in self.labels:
            if key == name:
                return value
        return None

    def matches(self, name: str, **labels: str) -> bool:
        """True if this sample has the given name and carries every given label."""
        if self.name != name:
            return False
        own = dict(self.labels)
        return all(own.get(k) == v for k, v in labels.items())


class HttpEndpointMetrics(BaseModel):
    """Latency percentiles and sample counts for one logical HTTP endpoint.

    Percentiles are stored in microseconds and must be non-decreasing
    (p50 <= p95 <= p99). Any other ordering is rejected on construction.
    """

    endpoint: str = Field(..., description="Endpoint bucket key, e.g. 'jwt_validation'")
    name: str = Field(..., description="Display name, e.g. 'JWT Validation'")
    timestamp: str = Field(..., description="ISO-8601 timestamp of the export")
    sample_count: int = Field(..., ge=0, description="Total samples across all sources")
    p50_us: float = Field(..., ge=0.0)
    p95_us: float = Field(..., ge=0.0)
    p99_us: float = Field(..., ge=0.0)
    throughput_ops_per_sec: float | None = Field(None, description="From thrpt-mode entries")
    sources: list[str] = Field(default_factory=list, description="Contributing benchmark names")
    exact: bool = Field(
        default=True, description="False when percentiles were blended rather than pooled"
    )

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def check_percentile_order(self) -> HttpEndpointMetrics:
        if not (self.p50_us <= self.p95_us <= self.p99_us):
            raise ValueError(
                f"percentiles must be non-decreasing: p50={self.p50_us} "
                f"p95={self.p95_us} p99={self.p99_us}"
            )
        return self

    @property
    def source(self) -> str:
        """Provenance string naming the contributing JMH benchmarks."""
        names = ", ".join(self.sources) if self.sources else self.endpoint
        return f"JMH benchmark - {names} sample mode"

    def to_export_dict(self) -> dict[str, object]:
        """Render the http-metrics.json entry for this endpoint."""
        data: dict[str, object] = {
            "name": self.name,
            "timestamp": self.timestamp,
            "sample_count": self.sample_count,
        }
        if self.throughput_ops_per_sec is not None:
            data["throughput_ops_per_sec"] = round(self.throughput_ops_per_sec, 1)
        data["percentiles"] = {
            "p50_us": round(self.p50_us, 1),
            "p95_us": round(self.p95_us, 1),
            "p99_us": round(self.p99_us, 1),
            "p50_ms": round(self.p50_us / 1000.0, 3),
            "p95_ms": round(self.p95_us / 1000.0, 3),
            "p99_ms": round(self.p99_us / 1000.0, 3),
        }
        data["source"] = self.source
        return data
