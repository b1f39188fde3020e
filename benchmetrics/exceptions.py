"""Central exception hierarchy for the benchmark metrics pipeline.

All custom exceptions inherit from BenchmetricsError.

Exception Hierarchy:
    BenchmetricsError (base)
    ├── ConfigurationError
    ├── FileSystemError
    ├── MetricsParseError
    ├── BenchmarkNotFoundError
    ├── ReportGenerationError
    └── DeploymentError

The pipeline never retries. Parse problems on single lines or entries are
logged and skipped by the processors; the exceptions below surface failures
that abort one artifact or one stage.

Usage:
    from benchmetrics.exceptions import FileSystemError, wrap_exception

    try:
        target.write_text(html, encoding="utf-8")
    except OSError as exc:
        raise wrap_exception(
            exc,
            FileSystemError,
            file_path=str(target),
            operation="write_html",
        ) from exc
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Error codes for programmatic handling.

    Categories:
        1xxx - Configuration errors
        2xxx - Input and validation errors
        4xxx - File I/O errors
        5xxx - Pipeline stage errors
    """

    # Configuration errors (1xxx)
    CONFIG_LOAD_FAILED = 1001
    CONFIG_VALIDATION_FAILED = 1002

    # Input errors (2xxx)
    METRICS_PARSE_FAILED = 2001
    BENCHMARK_NOT_FOUND = 2002
    INVALID_BENCHMARK_DATA = 2003

    # File I/O errors (4xxx)
    FILE_NOT_FOUND = 4001
    FILE_READ_FAILED = 4002
    FILE_WRITE_FAILED = 4003

    # Pipeline stage errors (5xxx)
    EXPORT_FAILED = 5001
    REPORT_FAILED = 5002
    DEPLOYMENT_FAILED = 5003


class BenchmetricsError(Exception):
    """Base exception for all benchmark metrics pipeline errors.

    Attributes:
        message: Human-readable error description
        component: Pipeline component (e.g., "metrics.exporter")
        operation: Operation being performed (e.g., "export_resource_metrics")
        details: Additional context as dictionary
        status_code: Numeric error code from ErrorCode enum
        cause: Original exception if wrapping another error
    """

    def __init__(
        self,
        message: str,
        component: str | None = None,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
        status_code: ErrorCode | None = None,
        cause: Exception | None = None,
    ):
        """Initialize a pipeline error.

        Args:
            message: Human-readable error description
            component: Pipeline component that raised the error
            operation: Operation being performed when error occurred
            details: Additional context as key-value pairs
            status_code: Numeric error code for programmatic handling
            cause: Original exception if this wraps another error
        """
        self.message = message
        self.component = component or self.__class__.__module__
        self.operation = operation
        self.details = details or {}
        self.status_code = status_code
        self.cause = cause

        parts = [message]
        if component:
            parts.append(f"[component={component}]")
        if operation:
            parts.append(f"[operation={operation}]")
        if status_code:
            parts.append(f"[code={status_code}]")

        super().__init__(" ".join(parts))

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization.

        Returns:
            Dictionary with all exception attributes
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "component": self.component,
            "operation": self.operation,
            "details": self.details,
            "status_code": self.status_code.value if self.status_code else None,
            "cause": str(self.cause) if self.cause else None,
        }


class ConfigurationError(BenchmetricsError):
    """Configuration loading or validation failed.

    Example:
        raise ConfigurationError(
            "EWMA lambda must be in (0, 1]",
            config_key="trends.ewma_lambda",
        )
    """

    def __init__(self, message: str, config_key: str | None = None, **kwargs: Any):
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key

        component = kwargs.pop("component", "config")

        super().__init__(
            message,
            component=component,
            details=details,
            status_code=kwargs.pop("status_code", ErrorCode.CONFIG_VALIDATION_FAILED),
            **kwargs,
        )


class FileSystemError(BenchmetricsError):
    """File I/O operation failed.

    Raised when an output artifact cannot be written or an input file that
    must exist cannot be read. Missing optional inputs are not errors.
    """

    def __init__(self, message: str, file_path: str | None = None, **kwargs: Any):
        details = kwargs.pop("details", {})
        if file_path:
            details["file_path"] = file_path

        component = kwargs.pop("component", "filesystem")

        super().__init__(
            message,
            component=component,
            details=details,
            status_code=kwargs.pop("status_code", ErrorCode.FILE_WRITE_FAILED),
            **kwargs,
        )


class MetricsParseError(BenchmetricsError):
    """A whole input document (JMH result file) could not be decoded."""

    def __init__(self, message: str, source: str | None = None, **kwargs: Any):
        details = kwargs.pop("details", {})
        if source:
            details["source"] = source

        super().__init__(
            message,
            component=kwargs.pop("component", "metrics"),
            details=details,
            status_code=kwargs.pop("status_code", ErrorCode.METRICS_PARSE_FAILED),
            **kwargs,
        )


class BenchmarkNotFoundError(BenchmetricsError):
    """A benchmark required for score computation is absent from the results.

    Example:
        raise BenchmarkNotFoundError(
            "Required throughput benchmark 'measureThroughput' not found in results",
            benchmark_name="measureThroughput",
        )
    """

    def __init__(self, message: str, benchmark_name: str | None = None, **kwargs: Any):
        details = kwargs.pop("details", {})
        if benchmark_name:
            details["benchmark_name"] = benchmark_name

        super().__init__(
            message,
            component=kwargs.pop("component", "reporting.metrics"),
            details=details,
            status_code=kwargs.pop("status_code", ErrorCode.BENCHMARK_NOT_FOUND),
            **kwargs,
        )


class ReportGenerationError(BenchmetricsError):
    """Generating a report artifact (badge, HTML page, data document) failed."""

    def __init__(self, message: str, artifact: str | None = None, **kwargs: Any):
        details = kwargs.pop("details", {})
        if artifact:
            details["artifact"] = artifact

        super().__init__(
            message,
            component=kwargs.pop("component", "reporting"),
            details=details,
            status_code=kwargs.pop("status_code", ErrorCode.REPORT_FAILED),
            **kwargs,
        )


class DeploymentError(BenchmetricsError):
    """Preparing the static-site deployment tree failed."""

    def __init__(self, message: str, deploy_dir: str | None = None, **kwargs: Any):
        details = kwargs.pop("details", {})
        if deploy_dir:
            details["deploy_dir"] = deploy_dir

        super().__init__(
            message,
            component=kwargs.pop("component", "reporting.pages"),
            details=details,
            status_code=kwargs.pop("status_code", ErrorCode.DEPLOYMENT_FAILED),
            **kwargs,
        )


def wrap_exception(
    original: Exception,
    error_class: type[BenchmetricsError],
    message: str | None = None,
    **kwargs: Any,
) -> BenchmetricsError:
    """Wrap a generic exception in a structured pipeline exception.

    Args:
        original: Original exception to wrap
        error_class: Pipeline exception class to use
        message: Override message (defaults to original message)
        **kwargs: Additional arguments for exception constructor

    Returns:
        Instance of error_class with original exception as cause
    """
    return error_class(message or str(original), cause=original, **kwargs)


def get_error_code(exc: Exception) -> int | None:
    """Get error code from exception if available."""
    if isinstance(exc, BenchmetricsError) and exc.status_code:
        return exc.status_code.value
    return None
