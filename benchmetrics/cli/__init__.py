"""Command-line interface for the benchmark metrics pipeline."""
