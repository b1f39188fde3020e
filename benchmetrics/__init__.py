"""Benchmark metrics pipeline for the JWT validation benchmarks.

Post-processes JMH results and Prometheus scrapes into metric documents,
trend analysis, badges, HTML reports and a static-site deployment tree.
"""

__version__ = "0.1.0"
