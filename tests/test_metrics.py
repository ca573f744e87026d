"""Tests for the derived revenue metrics."""

import pandas as pd

from venue_reports.revenue.metrics import derive, gross_revenue, net_revenue, total_received


def test_derive_worked_example() -> None:
    """Test the derived metrics on a worked example."""
    m = derive(subtotal=87.0, tax=8.0, business_paid_fees=3.0, refunds=20.0)
    assert m.gross == 95.0
    assert m.net == 64.0
    assert m.total == 72.0


def test_tax_is_excluded_from_net() -> None:
    """Test that tax is not part of net revenue."""
    assert derive(100.0, 50.0).net == 100.0
    assert derive(100.0, 0.0).net == 100.0


def test_metrics_add_rederives_from_base_amounts() -> None:
    """Test that adding metrics re-derives from the base amounts."""
    combined = derive(87.0, 8.0, 3.0, 20.0) + derive(50.0, 4.0, 3.0, 0.0)
    assert combined == derive(137.0, 12.0, 6.0, 20.0)


def test_formulas_work_on_series() -> None:
    """Test that the formulas accept pandas Series."""
    subtotal = pd.Series([10.0, 20.0])
    tax = pd.Series([1.0, 2.0])
    fees = pd.Series([0.5, 0.0])
    refunds = pd.Series([0.0, 5.0])
    assert gross_revenue(subtotal, tax).tolist() == [11.0, 22.0]
    assert net_revenue(subtotal, fees, refunds).tolist() == [9.5, 15.0]
    assert total_received(subtotal, tax, fees, refunds).tolist() == [10.5, 17.0]
