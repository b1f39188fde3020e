"""Centralized file I/O utilities for report artifacts.

This module provides:
- Atomic JSON and text write operations
- JSON reading for report documents
- Directory copy helpers used by the deployment packager
"""

from __future__ import annotations

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any

from loguru import logger

from ..exceptions import FileSystemError, wrap_exception


def ensure_parent_dir(path: Path) -> None:
    """Create the parent directory of `path` if needed."""
    path.parent.mkdir(parents=True, exist_ok=True)


def _write_atomic(target: Path, content: str, suffix: str) -> None:
    ensure_parent_dir(target)

    fd, tmp_path = tempfile.mkstemp(prefix=target.stem + "_", suffix=suffix, dir=str(target.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(content)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_path, str(target))
    except OSError:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


def write_json_atomic(
    target: Path,
    data: dict[str, Any] | list[Any],
    indent: int = 2,
    sort_keys: bool = False,
    ensure_ascii: bool = False,
) -> None:
    """Write JSON atomically to target path using a temp file + os.replace.

    The target is either completely written or left untouched.

    Args:
        target: Target path for JSON file
        data: Data to write (dict or list)
        indent: JSON indentation level
        sort_keys: Whether to sort dictionary keys
        ensure_ascii: Whether to escape non-ASCII characters

    Raises:
        FileSystemError: If the file cannot be written
    """
    content = json.dumps(data, indent=indent, sort_keys=sort_keys, ensure_ascii=ensure_ascii)
    try:
        _write_atomic(target, content, ".json.tmp")
    except OSError as e:
        logger.error(f"Failed to write JSON atomically to {target}: {e}")
        raise wrap_exception(
            e, FileSystemError, file_path=str(target), operation="write_json_atomic"
        ) from e
    logger.debug(f"Atomically wrote JSON: {target}")


def write_text_atomic(target: Path, content: str) -> None:
    """Write a text artifact (HTML, XML, robots.txt) atomically.

    Raises:
        FileSystemError: If the file cannot be written
    """
    try:
        _write_atomic(target, content, ".tmp")
    except OSError as e:
        logger.error(f"Failed to write {target}: {e}")
        raise wrap_exception(
            e, FileSystemError, file_path=str(target), operation="write_text_atomic"
        ) from e
    logger.debug(f"Atomically wrote text file: {target}")


def read_json(path: Path) -> Any:
    """Read a JSON document.

    Raises:
        FileNotFoundError: If the file does not exist
        json.JSONDecodeError: If the content is not valid JSON
    """
    with path.open("r", encoding="utf-8") as fh:
        return json.load(fh)


def copy_if_exists(source: Path, target: Path) -> bool:
    """Copy a single file when it exists, replacing any existing target.

    Returns:
        True if the file was copied
    """
    if not source.is_file():
        return False
    ensure_parent_dir(target)
    shutil.copy2(source, target)
    return True


def list_tree_files(source_dir: Path, suffix: str | None = None) -> list[Path]:
    """Regular files below `source_dir`, relative to it and sorted.

    Args:
        source_dir: Directory to scan (a missing directory yields nothing)
        suffix: Optional file suffix filter such as ".json"
    """
    if not source_dir.is_dir():
        return []
    return [
        path.relative_to(source_dir)
        for path in sorted(source_dir.rglob("*"))
        if path.is_file() and (not suffix or path.suffix == suffix)
    ]
