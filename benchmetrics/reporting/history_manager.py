"""Archive of per-run report data used for trend analysis.

Each run's report data is stored as ``<YYYY-MM-DD>T<HHMM>Z-<commit>.json`` in
the history directory. Filenames sort chronologically, so the newest runs are
simply the lexicographically largest names.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from loguru import logger

from ..config.schemas import HistoryConfig
from ..utils.file_io import write_json_atomic

HISTORY_FILE_SUFFIX = ".json"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H%M%SZ"
UNKNOWN_COMMIT = "unknown"

_NON_ALNUM = re.compile(r"[^0-9A-Za-z]")


def extract_timestamp_from_filename(filename: str) -> str:
    """Part of the filename before the last '-', or the whole name."""
    dash = filename.rfind("-")
    return filename[:dash] if dash > 0 else filename


def extract_commit_from_filename(filename: str) -> str:
    """Part of the filename between the last '-' and the extension."""
    dash = filename.rfind("-")
    dot = filename.rfind(".")
    if dash > 0 and dot > dash:
        return filename[dash + 1 : dot]
    return UNKNOWN_COMMIT


def list_history_files(history_dir: Path) -> list[Path]:
    """History snapshot files, newest first."""
    if not history_dir.is_dir():
        return []
    files = [p for p in history_dir.iterdir() if p.is_file() and p.suffix == HISTORY_FILE_SUFFIX]
    return sorted(files, key=lambda p: p.name, reverse=True)


class HistoricalDataManager:
    """Writes run snapshots into the history directory and prunes old ones."""

    def __init__(self, config: HistoryConfig | None = None):
        self.config = config or HistoryConfig()

    def resolve_commit(self) -> str:
        """Commit id of the current run from the environment, or the local marker."""
        return os.environ.get(self.config.commit_env_var) or self.config.local_commit

    def short_commit(self, commit: str | None) -> str:
        # '-' separates timestamp and commit in the filename
        cleaned = _NON_ALNUM.sub("", commit or "")
        if len(cleaned) < self.config.commit_length:
            return UNKNOWN_COMMIT
        return cleaned[: self.config.commit_length]

    def archive_current_run(
        self,
        report_data: Mapping[str, Any],
        history_dir: Path | str,
        commit: str | None = None,
        now: datetime | None = None,
    ) -> Path:
        """Write the report data of this run into the history directory.

        Raises:
            FileSystemError: If the snapshot cannot be written
        """
        history_dir = Path(history_dir)
        now = now or datetime.now(timezone.utc)
        commit = commit if commit is not None else self.resolve_commit()

        filename = f"{now.strftime(TIMESTAMP_FORMAT)}-{self.short_commit(commit)}{HISTORY_FILE_SUFFIX}"
        target = history_dir / filename
        write_json_atomic(target, dict(report_data))
        logger.info(f"Archived benchmark data to {target}")
        return target

    def enforce_retention_policy(self, history_dir: Path | str) -> list[Path]:
        """Delete all but the newest `max_entries` snapshots.

        Returns:
            Deleted files
        """
        files = list_history_files(Path(history_dir))
        removed: list[Path] = []
        for path in files[self.config.max_entries :]:
            try:
                path.unlink()
            except OSError as e:
                logger.warning(f"Failed to remove old history file {path.name}: {e}")
                continue
            removed.append(path)
            logger.info(f"Removed old history file: {path.name}")
        return removed

    @staticmethod
    def has_historical_data(history_dir: Path | str) -> bool:
        return bool(list_history_files(Path(history_dir)))
