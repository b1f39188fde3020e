"""Packaging of report artifacts into a GitHub Pages deployment tree.

The deployment directory is deleted and rebuilt on every run, so repeated runs
overwrite earlier output instead of failing on it. Every page, API endpoint
and site file is written in isolation; one failed write does not stop the
rest of the tree.
"""

from __future__ import annotations

import json
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from loguru import logger

from ..config.schemas import ReportConfig
from ..exceptions import DeploymentError, FileSystemError
from ..utils.error_handling import ArtifactResults, run_isolated
from ..utils.file_io import copy_if_exists, list_tree_files, read_json, write_json_atomic, write_text_atomic
from .html_templates import HTMLReportBuilder
from .report_data_generator import DATA_DIR, DATA_FILE_NAME, iso_timestamp
from .report_generator import INDEX_PAGE, REPORT_PAGES
from .summary_generator import SUMMARY_FILE_NAME

API_DIR = "api"
BADGES_DIR = "badges"
NOT_FOUND_PAGE = "404.html"
ROBOTS_TXT = "robots.txt"
SITEMAP_XML = "sitemap.xml"


def _read_optional_json(path: Path) -> dict[str, Any] | None:
    if not path.is_file():
        return None
    try:
        data = read_json(path)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Ignoring unreadable {path.name} while building API endpoints: {e}")
        return None
    return data if isinstance(data, dict) else None


def _copy_file(source: Path, target: Path) -> bool:
    try:
        return copy_if_exists(source, target)
    except OSError as e:
        raise FileSystemError(
            f"Failed to copy {source.name}: {e}", file_path=str(target), operation="copy_file", cause=e
        ) from e


def check_deploy_location(source: Path, deploy: Path) -> None:
    """Reject a deployment directory that is, or contains, the source.

    Raises:
        DeploymentError: If rebuilding `deploy` would delete the source
    """
    resolved_source = source.resolve()
    resolved_deploy = deploy.resolve()
    if resolved_deploy == resolved_source or resolved_deploy in resolved_source.parents:
        raise DeploymentError(
            f"Deployment directory {deploy} would overwrite the report source {source}",
            deploy_dir=str(deploy),
            operation="prepare_deployment_structure",
        )


class GitHubPagesGenerator:
    """Builds the static-site tree from a report output directory."""

    def __init__(self, report_config: ReportConfig | None = None):
        self.config = report_config or ReportConfig()

    def prepare_deployment_structure(
        self, source_dir: Path | str, deploy_dir: Path | str, now: datetime | None = None
    ) -> ArtifactResults:
        """Rebuild the deployment tree from the generated report artifacts.

        Returns:
            Outcome of every page, endpoint and site file

        Raises:
            DeploymentError: If the deployment directory overlaps the source or
                cannot be recreated
        """
        source = Path(source_dir)
        deploy = Path(deploy_dir)
        now = now or datetime.now(timezone.utc)
        results = ArtifactResults()

        check_deploy_location(source, deploy)
        logger.info(f"Preparing GitHub Pages deployment: {source} -> {deploy}")
        try:
            if deploy.exists():
                shutil.rmtree(deploy)
            deploy.mkdir(parents=True)
        except OSError as e:
            raise DeploymentError(
                f"Failed to recreate deployment directory: {e}", deploy_dir=str(deploy), cause=e
            ) from e

        self.copy_html_files(source, deploy, results)
        self.create_api_endpoints(source, deploy, now, results)
        self.copy_directory(source, deploy, BADGES_DIR, results, suffix=".json")
        self.copy_directory(source, deploy, DATA_DIR, results)
        self.generate_additional_pages(deploy, now, results)

        if results.ok:
            logger.info(f"GitHub Pages deployment ready at {deploy}")
        else:
            logger.warning(
                f"GitHub Pages deployment at {deploy} is incomplete: {', '.join(results.failed)}"
            )
        return results

    @staticmethod
    def copy_html_files(source: Path, deploy: Path, results: ArtifactResults) -> list[str]:
        copied = []
        for page in REPORT_PAGES:
            if not (source / page).is_file():
                continue
            if run_isolated(page, _copy_file, results, source / page, deploy / page):
                copied.append(page)
        logger.debug(f"Copied HTML pages: {', '.join(copied) or 'none'}")
        return copied

    @staticmethod
    def copy_directory(
        source: Path, deploy: Path, name: str, results: ArtifactResults, suffix: str | None = None
    ) -> None:
        """Copy every file below `source/name` into `deploy/name`, one artifact per file."""
        files = list_tree_files(source / name, suffix=suffix)
        for relative in files:
            run_isolated(
                f"{name}/{relative.as_posix()}",
                _copy_file,
                results,
                source / name / relative,
                deploy / name / relative,
            )
        logger.debug(f"Copied {len(files)} files from {name}/")

    def build_api_documents(self, source: Path, now: datetime) -> dict[str, dict[str, Any]]:
        """The api/*.json documents keyed by file name."""
        generated = iso_timestamp(now)
        summary = _read_optional_json(source / SUMMARY_FILE_NAME)
        report_data = _read_optional_json(source / DATA_DIR / DATA_FILE_NAME)

        if summary is not None:
            latest_summary = {
                "total_benchmarks": summary.get("total_benchmarks", 0),
                "performance_grade": summary.get("performance_grade", "N/A"),
                "average_throughput": summary.get("average_throughput", 0.0),
            }
        else:
            latest_summary = {"total_benchmarks": 0, "performance_grade": "N/A"}

        return {
            "latest.json": {
                "timestamp": generated,
                "status": "success",
                "summary": latest_summary,
                "links": {"benchmarks": "api/benchmarks.json", "badges": "badges/"},
            },
            "benchmarks.json": {
                "benchmarks": (report_data or {}).get("benchmarks", []),
                "generated": generated,
            },
            "status.json": {
                "status": "healthy",
                "timestamp": generated,
                "last_run": (summary or {}).get("timestamp", generated),
                "services": {
                    "benchmarks": "operational" if report_data is not None else "no_data",
                    "reports": "operational" if (source / INDEX_PAGE).is_file() else "no_data",
                },
            },
        }

    def create_api_endpoints(
        self, source: Path, deploy: Path, now: datetime, results: ArtifactResults
    ) -> None:
        for name, document in self.build_api_documents(source, now).items():
            run_isolated(f"{API_DIR}/{name}", write_json_atomic, results, deploy / API_DIR / name, document)

    def generate_additional_pages(self, deploy: Path, now: datetime, results: ArtifactResults) -> None:
        pages = {
            NOT_FOUND_PAGE: HTMLReportBuilder.create_not_found_page(self.config.title),
            ROBOTS_TXT: HTMLReportBuilder.create_robots_txt(self.config.site_url),
            SITEMAP_XML: HTMLReportBuilder.create_sitemap(
                self.config.site_url, list(REPORT_PAGES), now.strftime("%Y-%m-%d")
            ),
        }
        for name, content in pages.items():
            run_isolated(name, write_text_atomic, results, deploy / name, content)
