"""Unit tests for artifact failure isolation."""

import pytest

from benchmetrics.exceptions import FileSystemError
from benchmetrics.utils.error_handling import ArtifactResults, run_isolated

pytestmark = pytest.mark.fast


def test_run_isolated_success():
    results = ArtifactResults()
    value = run_isolated("index.html", lambda a, b=0: a + b, results, 1, b=2)

    assert value == 3
    assert results.succeeded == ["index.html"]
    assert results.ok


def test_run_isolated_records_pipeline_error():
    results = ArtifactResults()

    def fail():
        raise FileSystemError("cannot write", file_path="/out/index.html")

    assert run_isolated("index.html", fail, results) is None
    assert "index.html" in results.failed
    assert "cannot write" in results.failed["index.html"]
    assert not results.ok


def test_run_isolated_records_os_error():
    results = ArtifactResults()

    def fail():
        raise PermissionError("denied")

    run_isolated("badge", fail, results)
    assert results.failed == {"badge": "denied"}


def test_run_isolated_propagates_programming_errors():
    results = ArtifactResults()

    def broken():
        raise KeyError("missing")

    with pytest.raises(KeyError):
        run_isolated("trends.html", broken, results)


def test_later_steps_still_run():
    results = ArtifactResults()
    calls = []

    def fail():
        raise OSError("first failed")

    run_isolated("first", fail, results)
    run_isolated("second", lambda: calls.append("second"), results)

    assert calls == ["second"]
    assert results.succeeded == ["second"]
    assert list(results.failed) == ["first"]


def test_merge():
    first = ArtifactResults(succeeded=["a"], failed={"b": "x"})
    second = ArtifactResults(succeeded=["c"], failed={"d": "y"})
    first.merge(second)

    assert first.succeeded == ["a", "c"]
    assert first.failed == {"b": "x", "d": "y"}
