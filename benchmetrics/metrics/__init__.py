"""Parsing and export of Prometheus scrapes, JMH results and wrk output."""

from .file_processor import (
    MetricsFileProcessor,
    extract_jwt_validation_metrics,
    extract_resource_metrics,
    extract_tag,
    parse_samples,
    parse_text,
)
from .json_exporter import MetricsJsonExporter, format_number, format_percentage
from .post_processor import MetricsPostProcessor, ResultFormat, load_jmh_results
from .resource_aggregator import QuarkusMetricsAggregator
from .wrk_converter import load_wrk_results, parse_wrk_output


__all__ = [
    "MetricsFileProcessor",
    "MetricsJsonExporter",
    "MetricsPostProcessor",
    "QuarkusMetricsAggregator",
    "ResultFormat",
    "extract_jwt_validation_metrics",
    "extract_resource_metrics",
    "extract_tag",
    "format_number",
    "format_percentage",
    "load_jmh_results",
    "load_wrk_results",
    "parse_samples",
    "parse_text",
    "parse_wrk_output",
]
