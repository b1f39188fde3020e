"""Error handling utilities for isolating artifact failures.

A failed badge, page or export must not stop the remaining artifacts of the
same run. `ArtifactResults` records the outcome of every attempted artifact and
`run_isolated` executes one attempt.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from loguru import logger

from ..exceptions import BenchmetricsError


T = TypeVar("T")


@dataclass
class ArtifactResults:
    """Outcome of a batch of independently generated artifacts."""

    succeeded: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed

    def merge(self, other: ArtifactResults) -> None:
        self.succeeded.extend(other.succeeded)
        self.failed.update(other.failed)


def run_isolated(
    name: str,
    func: Callable[..., T],
    results: ArtifactResults,
    *args: Any,
    **kwargs: Any,
) -> T | None:
    """Run one artifact step, recording success or failure in `results`.

    Pipeline errors and OS errors are logged and recorded; other exceptions
    indicate programming errors and propagate.

    Returns:
        The step's return value, or None if the step failed
    """
    try:
        value = func(*args, **kwargs)
    except (BenchmetricsError, OSError) as e:
        logger.error(f"Artifact '{name}' failed: {e}")
        results.failed[name] = str(e)
        return None

    results.succeeded.append(name)
    return value
