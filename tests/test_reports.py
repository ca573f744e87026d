"""Tests for the full business report and its console rendering."""

import pytest

from venue_reports import BusinessReport, TransactionStore, get_report
from venue_reports.daterange import DateRange
from venue_reports.formatters import (
    format_business_report_for_console,
    format_currency,
    format_tracking_links_for_console,
    tax_label,
)

JANUARY = DateRange.from_bounds("2025-01-01", "2025-01-31")


@pytest.fixture
def report(store_factory, order_a, booking_b) -> BusinessReport:
    store = store_factory(
        orders=[dict(order_a, tracking_ref="ig_story")],
        table_bookings=[booking_b],
        tracking_links=[{"business_id": "b1", "ref_code": "ig_story", "name": "Instagram Story"}],
        page_views=[
            {"business_id": "b1", "page_type": "event", "visitor_id": "v1", "created_at": "2025-01-10T08:00:00Z"},
        ],
    )
    return get_report(store, "b1", JANUARY)


def test_report_bundles_every_view(report) -> None:
    """Test that the report bundles revenue, tracking and page views."""
    assert report.business_name == "Harbor Hall"
    assert report.tax_percentage == 8.25
    assert report.date_range is JANUARY
    assert report.analytics.total_revenue == 142.0
    assert [r.tracking_ref for r in report.tracking_links] == ["ig_story"]
    assert report.page_views.total_views == 1


def test_business_lookup_failure_degrades(store, monkeypatch) -> None:
    """Test that a failed business lookup leaves the report without a name."""
    def fail(*args, **kwargs):
        raise ConnectionError("db down")

    monkeypatch.setattr(TransactionStore, "fetch_business", fail)
    report = get_report(store, "b1")
    assert report.business is None
    assert report.tax_percentage is None
    assert report.analytics.total_orders == 1


@pytest.mark.parametrize(
    "amount, expected",
    [
        (1234.5, "$1,234.50"),
        ("99.999", "$100.00"),
        (0, "$0.00"),
        (-5, "-$5.00"),
        (float("nan"), "$0.00"),
        ("abc", "$0.00"),
        (None, "$0.00"),
    ],
)
def test_format_currency(amount, expected) -> None:
    """Test currency formatting of numbers and bad values."""
    assert format_currency(amount) == expected


def test_format_currency_without_decimals() -> None:
    """Test currency formatting rounded to whole units."""
    assert format_currency(1234.56, show_decimals=False) == "$1,235"
    assert format_currency("x", show_decimals=False) == "$0"


def test_tax_label() -> None:
    """Test the tax label with and without a rate."""
    assert tax_label(8.25) == "Tax (8.25%)"
    assert tax_label(8.0) == "Tax (8%)"
    assert tax_label(None) == "Tax"


def test_console_report(report) -> None:
    """Test the console rendering of a report."""
    text = format_business_report_for_console(report)
    assert "Revenue Report - Harbor Hall" in text
    assert "2025-01-01 to 2025-01-31" in text
    assert "Tax (8.25%)" in text
    assert "Gala: $92.00" in text
    assert "Instagram Story [ig_story]" in text
    assert "Page views: 1 (1 unique visitors)" in text


def test_console_report_without_sales(empty_store) -> None:
    """Test the console rendering of a report with no sales."""
    text = format_business_report_for_console(get_report(empty_store, "b1"))
    assert "All time" in text
    assert "No sales in this period." in text
    assert "Tax (" not in text


def test_tracking_links_without_rows() -> None:
    """Test the tracking link rendering with no rows."""
    assert format_tracking_links_for_console([]) == "No tracked sales."
