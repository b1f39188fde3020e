"""Report generation: scoring, trends, badges, HTML pages and site packaging.

Import the concrete modules directly, e.g.
``from benchmetrics.reporting.pipeline import ReportPipeline``.
"""
