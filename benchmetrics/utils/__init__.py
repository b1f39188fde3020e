"""Shared utilities: logging setup, file I/O and error isolation."""

from .error_handling import ArtifactResults, run_isolated
from .file_io import copy_if_exists, list_tree_files, read_json, write_json_atomic, write_text_atomic


__all__ = [
    "ArtifactResults",
    "copy_if_exists",
    "list_tree_files",
    "read_json",
    "run_isolated",
    "write_json_atomic",
    "write_text_atomic",
]
