"""Unit conversion and display formatting for JMH scores.

JMH reports throughput as ``ops/<unit>`` and latency as ``<unit>/op``. Unit
strings are matched by substring, most specific first, because ``us/op`` and
``ns/op`` both contain ``s/op``.
"""

from __future__ import annotations

import math
import re

NANOS_PER_SECOND = 1_000_000_000.0
MICROS_PER_SECOND = 1_000_000.0
MILLIS_PER_SECOND = 1_000.0
NANOS_PER_MILLI = 1_000_000.0
MICROS_PER_MILLI = 1_000.0

_FORMATTED_NUMBER = re.compile(r"[^0-9.KMG]")
_MULTIPLIERS = {"K": 1_000.0, "M": 1_000_000.0, "G": 1_000_000_000.0}


def to_ops_per_second(score: float, unit: str) -> float:
    """Convert a throughput or latency score to operations per second.

    Latency units are inverted. Unknown units return the raw score.
    """
    if "ops/ns" in unit:
        return score * NANOS_PER_SECOND
    if "ops/us" in unit:
        return score * MICROS_PER_SECOND
    if "ops/ms" in unit:
        return score * MILLIS_PER_SECOND
    if "ops/s" in unit or "ops/sec" in unit:
        return score
    if score == 0:
        return 0.0
    if "ns/op" in unit:
        return NANOS_PER_SECOND / score
    if "us/op" in unit:
        return MICROS_PER_SECOND / score
    if "ms/op" in unit:
        return MILLIS_PER_SECOND / score
    if "s/op" in unit:
        return 1.0 / score
    return score


def to_milliseconds_per_op(score: float, unit: str) -> float:
    """Convert a latency or throughput score to milliseconds per operation.

    Unknown units return 0 so callers can filter them out.
    """
    if "ns/op" in unit:
        return score / NANOS_PER_MILLI
    if "us/op" in unit:
        return score / MICROS_PER_MILLI
    if "ms/op" in unit:
        return score
    if "s/op" in unit:
        return score * MILLIS_PER_SECOND
    if score == 0:
        return 0.0
    if "ops/ns" in unit:
        return 1.0 / (score * NANOS_PER_MILLI)
    if "ops/us" in unit:
        return 1.0 / (score * MICROS_PER_MILLI)
    if "ops/ms" in unit:
        return 1.0 / score
    if "ops/s" in unit or "ops/sec" in unit:
        return MILLIS_PER_SECOND / score
    return 0.0


def to_microseconds(value: float, unit: str) -> float:
    """Convert a latency value in `unit` (e.g. "ms/op") to microseconds."""
    return to_milliseconds_per_op(value, unit) * MICROS_PER_MILLI


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_for_display(value: float) -> str:
    """Two decimals below 2, one decimal below 10, otherwise a whole number."""
    if value < 2:
        return f"{value:.2f}"
    if value < 10:
        return f"{value:.1f}"
    return str(round_half_up(value))


def format_throughput(ops_per_second: float) -> str:
    if ops_per_second >= 1_000_000:
        return format_for_display(ops_per_second / 1_000_000) + "M ops/s"
    if ops_per_second >= 1_000:
        return format_for_display(ops_per_second / 1_000) + "K ops/s"
    return format_for_display(ops_per_second) + " ops/s"


def format_latency(milliseconds: float) -> str:
    if milliseconds >= 1_000:
        return format_for_display(milliseconds / 1_000) + "s"
    return format_for_display(milliseconds) + "ms"


def parse_formatted_number(text: str | float | int | None) -> float:
    """Parse a display string such as "1.5K ops/s" or "12ms" back to a number.

    K, M and G suffixes are applied as multipliers. "N/A", empty and
    unparseable values yield 0.
    """
    if text is None:
        return 0.0
    if isinstance(text, (int, float)):
        return float(text)
    if text.strip().upper() == "N/A":
        return 0.0

    cleaned = _FORMATTED_NUMBER.sub("", text)
    multiplier = 1.0
    if cleaned and cleaned[-1] in _MULTIPLIERS:
        multiplier = _MULTIPLIERS[cleaned[-1]]
        cleaned = cleaned[:-1]
    cleaned = cleaned.rstrip("KMG")
    try:
        return float(cleaned) * multiplier
    except ValueError:
        return 0.0
