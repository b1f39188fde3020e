"""Unit tests for the GitHub Pages deployment packager."""

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from benchmetrics.config.schemas import ReportConfig
from benchmetrics.exceptions import DeploymentError, FileSystemError
from benchmetrics.reporting import github_pages
from benchmetrics.reporting.github_pages import GitHubPagesGenerator

pytestmark = pytest.mark.fast

NOW = datetime(2025, 3, 4, 5, 6, 7, tzinfo=timezone.utc)


# ==================== Fixtures ====================


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    """A report output directory as written by a pipeline run."""
    source = tmp_path / "report"
    (source / "badges").mkdir(parents=True)
    (source / "data").mkdir()
    for page in ("index.html", "trends.html", "detailed.html"):
        (source / page).write_text(f"<html>{page}</html>", encoding="utf-8")
    (source / "badges" / "performance-badge.json").write_text('{"schemaVersion": 1}', encoding="utf-8")
    (source / "badges" / "notes.txt").write_text("scratch", encoding="utf-8")
    (source / "data" / "benchmark-data.json").write_text(
        json.dumps({"benchmarks": [{"name": "measureThroughput"}]}), encoding="utf-8"
    )
    (source / "benchmark-summary.json").write_text(
        json.dumps(
            {
                "timestamp": "2025-03-04T05:00:00Z",
                "total_benchmarks": 2,
                "performance_grade": "B",
                "average_throughput": 2750.0,
            }
        ),
        encoding="utf-8",
    )
    return source


@pytest.fixture
def packager() -> GitHubPagesGenerator:
    return GitHubPagesGenerator(ReportConfig(site_url="https://example.org/bench/"))


def _load(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


# ==================== Deployment ====================


class TestPrepareDeployment:
    def test_copies_pages_badges_and_data(self, packager, source_dir: Path, tmp_path: Path):
        deploy = tmp_path / "site"
        results = packager.prepare_deployment_structure(source_dir, deploy, now=NOW)

        assert results.ok, results.failed
        assert {"index.html", "api/latest.json", "sitemap.xml"} <= set(results.succeeded)

        for page in ("index.html", "trends.html", "detailed.html"):
            assert (deploy / page).read_text(encoding="utf-8") == f"<html>{page}</html>"
        assert (deploy / "badges" / "performance-badge.json").is_file()
        assert not (deploy / "badges" / "notes.txt").exists()
        assert (deploy / "data" / "benchmark-data.json").is_file()

    def test_api_endpoints(self, packager, source_dir: Path, tmp_path: Path):
        deploy = tmp_path / "site"
        results = packager.prepare_deployment_structure(source_dir, deploy, now=NOW)

        assert results.ok, results.failed

        latest = _load(deploy / "api" / "latest.json")
        assert latest["timestamp"] == "2025-03-04T05:06:07Z"
        assert latest["summary"] == {
            "total_benchmarks": 2,
            "performance_grade": "B",
            "average_throughput": 2750.0,
        }

        benchmarks = _load(deploy / "api" / "benchmarks.json")
        assert benchmarks["benchmarks"] == [{"name": "measureThroughput"}]

        status = _load(deploy / "api" / "status.json")
        assert status["last_run"] == "2025-03-04T05:00:00Z"
        assert status["services"] == {"benchmarks": "operational", "reports": "operational"}

    def test_site_pages(self, packager, source_dir: Path, tmp_path: Path):
        deploy = tmp_path / "site"
        results = packager.prepare_deployment_structure(source_dir, deploy, now=NOW)

        assert results.ok, results.failed

        assert "404" in (deploy / "404.html").read_text(encoding="utf-8")
        assert "Sitemap: https://example.org/bench/sitemap.xml" in (deploy / "robots.txt").read_text(
            encoding="utf-8"
        )
        sitemap = (deploy / "sitemap.xml").read_text(encoding="utf-8")
        assert "<loc>https://example.org/bench/trends.html</loc>" in sitemap
        assert "<lastmod>2025-03-04</lastmod>" in sitemap

    def test_repeated_runs_rebuild_tree(self, packager, source_dir: Path, tmp_path: Path):
        deploy_dir = tmp_path / "site"
        packager.prepare_deployment_structure(source_dir, deploy_dir, now=NOW)
        (deploy_dir / "stale.html").write_text("old", encoding="utf-8")

        packager.prepare_deployment_structure(source_dir, deploy_dir, now=NOW)

        assert not (deploy_dir / "stale.html").exists()
        assert (deploy_dir / "index.html").is_file()

    def test_empty_source(self, packager, tmp_path: Path):
        source = tmp_path / "empty"
        source.mkdir()

        deploy = tmp_path / "site"
        packager.prepare_deployment_structure(source, deploy, now=NOW)

        assert not (deploy / "index.html").exists()
        latest = _load(deploy / "api" / "latest.json")
        assert latest["summary"] == {"total_benchmarks": 0, "performance_grade": "N/A"}
        status = _load(deploy / "api" / "status.json")
        assert status["services"] == {"benchmarks": "no_data", "reports": "no_data"}

    def test_corrupt_summary_ignored(self, packager, source_dir: Path, tmp_path: Path):
        (source_dir / "benchmark-summary.json").write_text("{oops", encoding="utf-8")

        deploy = tmp_path / "site"
        results = packager.prepare_deployment_structure(source_dir, deploy, now=NOW)

        assert results.ok, results.failed

        assert _load(deploy / "api" / "latest.json")["summary"]["performance_grade"] == "N/A"

    def test_unusable_deploy_dir(self, packager, source_dir: Path, tmp_path: Path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")

        with pytest.raises(DeploymentError) as exc_info:
            packager.prepare_deployment_structure(source_dir, blocker / "site", now=NOW)

        assert exc_info.value.details["deploy_dir"] == str(blocker / "site")


class TestDeployLocation:
    def test_deploy_equal_to_source_rejected(self, packager, source_dir: Path):
        with pytest.raises(DeploymentError) as exc_info:
            packager.prepare_deployment_structure(source_dir, source_dir, now=NOW)

        assert exc_info.value.details["deploy_dir"] == str(source_dir)
        assert (source_dir / "index.html").is_file()
        assert (source_dir / "benchmark-summary.json").is_file()

    def test_deploy_containing_source_rejected(self, packager, source_dir: Path):
        with pytest.raises(DeploymentError):
            packager.prepare_deployment_structure(source_dir, source_dir.parent, now=NOW)

        assert (source_dir / "data" / "benchmark-data.json").is_file()

    def test_relative_spelling_of_source_rejected(self, packager, source_dir: Path):
        with pytest.raises(DeploymentError):
            packager.prepare_deployment_structure(source_dir, source_dir / "badges" / "..", now=NOW)

        assert (source_dir / "badges" / "performance-badge.json").is_file()

    def test_deploy_inside_source_allowed(self, packager, source_dir: Path):
        results = packager.prepare_deployment_structure(source_dir, source_dir / "site", now=NOW)

        assert results.ok, results.failed
        assert (source_dir / "site" / "index.html").is_file()
        assert (source_dir / "index.html").is_file()


class TestIsolation:
    def test_failed_endpoint_does_not_stop_site(self, packager, source_dir: Path, tmp_path: Path, monkeypatch):
        real_write = github_pages.write_json_atomic

        def failing_write(target: Path, data):
            if target.name == "latest.json":
                raise FileSystemError("disk full", file_path=str(target))
            real_write(target, data)

        monkeypatch.setattr(github_pages, "write_json_atomic", failing_write)
        deploy = tmp_path / "site"

        results = packager.prepare_deployment_structure(source_dir, deploy, now=NOW)

        assert not results.ok
        assert list(results.failed) == ["api/latest.json"]
        assert "api/status.json" in results.succeeded
        assert not (deploy / "api" / "latest.json").exists()
        assert (deploy / "api" / "benchmarks.json").is_file()
        assert (deploy / "index.html").is_file()
        assert (deploy / "sitemap.xml").is_file()

    def test_failed_page_copy_recorded(self, packager, source_dir: Path, tmp_path: Path, monkeypatch):
        def failing_copy(source: Path, target: Path) -> bool:
            raise PermissionError(13, "Permission denied", str(source))

        monkeypatch.setattr(github_pages, "copy_if_exists", failing_copy)

        results = packager.prepare_deployment_structure(source_dir, tmp_path / "site", now=NOW)

        assert set(results.failed) == {
            "index.html",
            "trends.html",
            "detailed.html",
            "badges/performance-badge.json",
            "data/benchmark-data.json",
        }
        assert "api/latest.json" in results.succeeded
        assert (tmp_path / "site" / "404.html").is_file()
