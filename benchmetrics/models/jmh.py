"""Typed decoding of JMH JSON result files."""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PrimaryMetric(BaseModel):
    """The `primaryMetric` block of a JMH result entry."""

    score: float
    score_error: float = Field(default=0.0, alias="scoreError")
    score_confidence: list[float] = Field(default_factory=list, alias="scoreConfidence")
    score_unit: str = Field(default="", alias="scoreUnit")
    score_percentiles: dict[str, float] = Field(default_factory=dict, alias="scorePercentiles")
    raw_data_histogram: list[list[list[list[float]]]] | None = Field(
        default=None, alias="rawDataHistogram"
    )

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("score_error")
    @classmethod
    def _nan_error_to_zero(cls, v: float) -> float:
        # JMH writes "NaN" when a run has a single iteration
        return 0.0 if math.isnan(v) else v

    def percentile(self, key: str) -> float | None:
        """Return a percentile by its JMH key ("50.0", "95.0", ...), if present."""
        return self.score_percentiles.get(key)

    def histogram_pairs(self) -> list[tuple[float, int]]:
        """Flatten forks and iterations into (value, count) pairs."""
        pairs: list[tuple[float, int]] = []
        for fork in self.raw_data_histogram or []:
            for iteration in fork:
                for entry in iteration:
                    if len(entry) >= 2:
                        pairs.append((float(entry[0]), int(entry[1])))
        return pairs


class JmhBenchmarkResult(BaseModel):
    """One entry of the JMH JSON result array."""

    benchmark: str
    mode: str
    threads: int = 1
    forks: int = 1
    primary_metric: PrimaryMetric = Field(..., alias="primaryMetric")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @property
    def simple_name(self) -> str:
        """Method name without the package and class prefix."""
        return self.benchmark.rsplit(".", 1)[-1]

    @property
    def class_and_method(self) -> str:
        """`Class.method` part of the fully-qualified benchmark name."""
        parts = self.benchmark.split(".")
        return ".".join(parts[-2:])

    @property
    def score(self) -> float:
        return self.primary_metric.score

    @property
    def unit(self) -> str:
        return self.primary_metric.score_unit
