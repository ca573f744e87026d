"""Tests for concurrent query execution and its failure model."""

import threading

import pandas as pd
import pytest

from venue_reports.exceptions import QueryError, ReportingError
from venue_reports.fetch import QueryTask, run_queries


def _boom():
    raise RuntimeError("connection reset")


def test_results_keyed_by_name() -> None:
    """Test that query results are keyed by task name."""
    results = run_queries(
        [
            QueryTask("a", lambda: 1),
            QueryTask("b", lambda: 2, fallback=lambda: 0),
        ]
    )
    assert results == {"a": 1, "b": 2}


def test_tasks_run_concurrently() -> None:
    """Test that queries run concurrently."""
    barrier = threading.Barrier(3, timeout=5)

    def wait():
        barrier.wait()
        return threading.current_thread().name

    results = run_queries([QueryTask(name, wait) for name in ("a", "b", "c")])
    assert all(name.startswith("venue-reports-query") for name in results.values())


def test_secondary_failure_uses_fallback(caplog) -> None:
    """Test that a failed secondary query is logged and replaced by its fallback."""
    results = run_queries(
        [
            QueryTask("orders", lambda: pd.DataFrame({"x": [1]})),
            QueryTask("refunds", _boom, fallback=pd.DataFrame),
        ]
    )
    assert len(results["orders"]) == 1
    assert results["refunds"].empty
    assert "refunds" in caplog.text
    assert "connection reset" in caplog.text


def test_primary_failure_raises_query_error() -> None:
    """Test that a failed primary query raises QueryError."""
    with pytest.raises(QueryError) as excinfo:
        run_queries(
            [
                QueryTask("orders", _boom),
                QueryTask("refunds", lambda: pd.DataFrame(), fallback=pd.DataFrame),
            ]
        )
    assert excinfo.value.query == "orders"
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert isinstance(excinfo.value, ReportingError)


def test_duplicate_names_rejected() -> None:
    """Test that duplicate task names are rejected."""
    with pytest.raises(ValueError):
        run_queries([QueryTask("a", lambda: 1), QueryTask("a", lambda: 2)])


def test_no_tasks() -> None:
    """Test that no tasks give no results."""
    assert run_queries([]) == {}
