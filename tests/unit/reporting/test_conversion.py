"""Unit tests for unit conversion and display formatting."""

import pytest

from benchmetrics.reporting.conversion import (
    format_for_display,
    format_latency,
    format_throughput,
    parse_formatted_number,
    to_microseconds,
    to_milliseconds_per_op,
    to_ops_per_second,
)

pytestmark = pytest.mark.fast


class TestConversions:
    @pytest.mark.parametrize(
        "score, unit, expected",
        [
            (5000.0, "ops/s", 5000.0),
            (2.0, "ops/ms", 2000.0),
            (0.002, "ops/us", 2000.0),
            (0.5, "ms/op", 2000.0),
            (500.0, "us/op", 2000.0),
            (500_000.0, "ns/op", 2000.0),
            (0.5, "s/op", 2.0),
            (0.0, "ms/op", 0.0),
            (7.0, "furlongs", 7.0),
        ],
    )
    def test_to_ops_per_second(self, score, unit, expected):
        assert to_ops_per_second(score, unit) == pytest.approx(expected)

    @pytest.mark.parametrize(
        "score, unit, expected",
        [
            (2.0, "ms/op", 2.0),
            (2000.0, "us/op", 2.0),
            (2_000_000.0, "ns/op", 2.0),
            (0.002, "s/op", 2.0),
            (1000.0, "ops/s", 1.0),
            (0.5, "ops/ms", 2.0),
            (0.0, "ops/s", 0.0),
            (3.0, "furlongs", 0.0),
        ],
    )
    def test_to_milliseconds_per_op(self, score, unit, expected):
        assert to_milliseconds_per_op(score, unit) == pytest.approx(expected)

    def test_to_microseconds(self):
        assert to_microseconds(1.5, "ms/op") == pytest.approx(1500.0)
        assert to_microseconds(250.0, "us/op") == pytest.approx(250.0)


class TestFormatting:
    @pytest.mark.parametrize(
        "value, expected", [(1.234, "1.23"), (0.5, "0.50"), (5.44, "5.4"), (12.5, "13"), (99.4, "99")]
    )
    def test_format_for_display(self, value, expected):
        assert format_for_display(value) == expected

    def test_format_throughput(self):
        assert format_throughput(1_500_000.0) == "1.50M ops/s"
        assert format_throughput(1_500.0) == "1.50K ops/s"
        assert format_throughput(15_000.0) == "15K ops/s"
        assert format_throughput(5_000.0) == "5.0K ops/s"
        assert format_throughput(500.0) == "500 ops/s"

    def test_format_latency(self):
        assert format_latency(0.5) == "0.50ms"
        assert format_latency(2.0) == "2.0ms"
        assert format_latency(1500.0) == "1.50s"


class TestParseFormattedNumber:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("1.5K ops/s", 1500.0),
            ("2.5M ops/s", 2_500_000.0),
            ("12ms", 12.0),
            ("N/A", 0.0),
            ("", 0.0),
            (None, 0.0),
            (42, 42.0),
            ("garbage", 0.0),
        ],
    )
    def test_parse(self, text, expected):
        assert parse_formatted_number(text) == pytest.approx(expected)

    def test_formatted_values_parse_back(self):
        assert parse_formatted_number(format_throughput(5_000.0)) == pytest.approx(5_000.0)
        assert parse_formatted_number(format_latency(2.0)) == pytest.approx(2.0)
