"""Unit tests for the exception hierarchy."""

import pytest

from benchmetrics.exceptions import (
    BenchmarkNotFoundError,
    BenchmetricsError,
    ConfigurationError,
    DeploymentError,
    ErrorCode,
    FileSystemError,
    MetricsParseError,
    ReportGenerationError,
    get_error_code,
    wrap_exception,
)

pytestmark = pytest.mark.fast


class TestBenchmetricsError:
    def test_message_and_context_in_str(self):
        error = BenchmetricsError(
            "boom",
            component="reporting.badges",
            operation="write_badge",
            status_code=ErrorCode.REPORT_FAILED,
        )

        text = str(error)
        assert text.startswith("boom")
        assert "[component=reporting.badges]" in text
        assert "[operation=write_badge]" in text
        assert "5002" in text
        assert error.message == "boom"

    def test_default_component_is_module(self):
        error = BenchmetricsError("boom")
        assert error.component == "benchmetrics.exceptions"
        assert str(error) == "boom"

    def test_to_dict(self):
        cause = OSError("disk full")
        error = BenchmetricsError(
            "write failed",
            operation="write",
            details={"file_path": "/tmp/x"},
            status_code=ErrorCode.FILE_WRITE_FAILED,
            cause=cause,
        )

        data = error.to_dict()
        assert data["error_type"] == "BenchmetricsError"
        assert data["status_code"] == 4003
        assert data["details"] == {"file_path": "/tmp/x"}
        assert data["cause"] == "disk full"


class TestSubclasses:
    def test_configuration_error_defaults(self):
        error = ConfigurationError("bad lambda", config_key="trends.ewma_lambda")
        assert error.component == "config"
        assert error.status_code == ErrorCode.CONFIG_VALIDATION_FAILED
        assert error.details["config_key"] == "trends.ewma_lambda"

    def test_configuration_error_status_override(self):
        error = ConfigurationError("missing", status_code=ErrorCode.CONFIG_LOAD_FAILED)
        assert error.status_code == ErrorCode.CONFIG_LOAD_FAILED

    @pytest.mark.parametrize(
        "error, key, value, code",
        [
            (FileSystemError("x", file_path="/a"), "file_path", "/a", ErrorCode.FILE_WRITE_FAILED),
            (MetricsParseError("x", source="r.json"), "source", "r.json", ErrorCode.METRICS_PARSE_FAILED),
            (
                BenchmarkNotFoundError("x", benchmark_name="measureThroughput"),
                "benchmark_name",
                "measureThroughput",
                ErrorCode.BENCHMARK_NOT_FOUND,
            ),
            (ReportGenerationError("x", artifact="index.html"), "artifact", "index.html", ErrorCode.REPORT_FAILED),
            (DeploymentError("x", deploy_dir="/site"), "deploy_dir", "/site", ErrorCode.DEPLOYMENT_FAILED),
        ],
    )
    def test_details_and_codes(self, error, key, value, code):
        assert isinstance(error, BenchmetricsError)
        assert error.details[key] == value
        assert error.status_code == code


class TestHelpers:
    def test_wrap_exception_keeps_cause(self):
        original = PermissionError("denied")
        wrapped = wrap_exception(original, FileSystemError, file_path="/out/a.json")

        assert isinstance(wrapped, FileSystemError)
        assert wrapped.cause is original
        assert wrapped.message == "denied"
        assert wrapped.details["file_path"] == "/out/a.json"

    def test_wrap_exception_message_override(self):
        wrapped = wrap_exception(ValueError("raw"), MetricsParseError, message="nicer")
        assert wrapped.message == "nicer"

    def test_get_error_code(self):
        assert get_error_code(BenchmarkNotFoundError("x")) == 2002
        assert get_error_code(ValueError("x")) is None
