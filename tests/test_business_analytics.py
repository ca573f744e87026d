"""Tests for the business revenue report and its per-event breakdown."""

import math

import pytest

from venue_reports.daterange import DateRange
from venue_reports.exceptions import QueryError
from venue_reports.revenue import BusinessAnalytics, get_business_analytics
from venue_reports.store import TransactionStore

JANUARY = DateRange.from_bounds("2025-01-01", "2025-01-31")


def _event(analytics: BusinessAnalytics, event_id: str):
    return next(e for e in analytics.events if e.event_id == event_id)


def test_single_order_fee_split(store_factory, order_a) -> None:
    """Test that one order splits its fees by payer into the report."""
    analytics = get_business_analytics(
        store_factory(orders=[order_a], table_bookings=[], refunds=[]), "b1"
    )
    assert analytics.ticket_gross_revenue == 100.0
    assert analytics.ticket_net_revenue == 92.0
    assert analytics.ticket_customer_paid_fees == 5.0
    assert analytics.ticket_business_paid_fees == 3.0
    assert analytics.ticket_tax_collected == 8.0
    assert analytics.ticket_subtotal == 87.0
    assert analytics.total_tickets_sold == 2
    assert analytics.total_orders == 1
    assert analytics.total_revenue == 92.0

    (event,) = analytics.events
    assert event.event_id == "e1"
    assert event.event_title == "Gala"
    assert event.ticket_gross_revenue == 100.0
    assert event.ticket_net_revenue == 92.0
    assert event.total_revenue == 92.0


def test_single_booking_contributes_amount(store_factory, booking_b) -> None:
    """Test that a booking contributes its amount as table revenue."""
    analytics = get_business_analytics(
        store_factory(orders=[], table_bookings=[booking_b], refunds=[]), "b1"
    )
    assert analytics.total_table_revenue == 50.0
    assert analytics.table_tax_collected == 4.0
    assert analytics.table_business_paid_fees == 3.0
    assert analytics.table_customer_paid_fees == 0.0
    assert analytics.total_table_bookings == 1

    (event,) = analytics.events
    assert event.event_id == "e2"
    assert event.table_revenue == 50.0
    assert event.total_revenue == 50.0
    assert event.total_orders == 0


def test_refund_attributed_to_event(store_factory, order_a, refund_c) -> None:
    """Test that a refund lands in its order's event bucket."""
    analytics = get_business_analytics(
        store_factory(orders=[order_a], table_bookings=[], refunds=[refund_c]), "b1", JANUARY
    )
    event = _event(analytics, "e1")
    assert event.ticket_refunds == 20.0
    assert event.total_refunds == 20.0
    assert analytics.total_ticket_refunds == 20.0
    assert analytics.refund_count == 1
    assert analytics.unattributed_refunds == 0.0

    metrics = analytics.overall_metrics()
    assert (metrics.gross, metrics.net, metrics.total) == (95.0, 64.0, 72.0)


def test_refund_with_parent_outside_range(store_factory, order_a, refund_c) -> None:
    """Test that a refund whose order is out of range counts only business-wide."""
    old_order = dict(order_a, created_at="2024-12-20T10:00:00Z")
    analytics = get_business_analytics(
        store_factory(orders=[old_order], table_bookings=[], refunds=[refund_c]), "b1", JANUARY
    )
    assert analytics.total_ticket_refunds == 20.0
    assert analytics.total_refunds == 20.0
    assert analytics.refund_count == 1
    assert analytics.events == []
    assert analytics.total_revenue == 0.0
    assert analytics.unattributed_refunds == 20.0


def test_table_refunds(store_factory, booking_b) -> None:
    """Test that table booking refunds are summed and attributed."""
    refund = {
        "id": "tr1",
        "table_booking_id": "tb1",
        "status": "succeeded",
        "created_at": "2025-01-13T09:00:00Z",
        "amount": "15.5",
    }
    analytics = get_business_analytics(
        store_factory(table_bookings=[booking_b], table_booking_refunds=[refund]), "b1"
    )
    assert analytics.total_table_refunds == 15.5
    assert analytics.total_refunds == 20.0 + 15.5
    assert analytics.refund_count == 2
    assert _event(analytics, "e2").table_refunds == 15.5


def test_mixed_report_totals(store) -> None:
    """Test that business totals equal the sum of the event buckets."""
    analytics = get_business_analytics(store, "b1", JANUARY)

    assert analytics.total_revenue == 92.0 + 50.0
    assert analytics.total_tax_collected == 12.0
    event_total = sum(e.total_revenue for e in analytics.events)
    assert analytics.total_revenue == pytest.approx(event_total, abs=1e-9)
    assert [e.event_id for e in analytics.events] == ["e1", "e2"]


def test_gross_is_subtotal_plus_tax_everywhere(store) -> None:
    """Test that gross equals subtotal plus tax at every level."""
    analytics = get_business_analytics(store, "b1")
    summaries = [analytics, *analytics.events]
    for summary in summaries:
        for metrics in (summary.ticket_metrics(), summary.table_metrics()):
            assert metrics.gross == pytest.approx(metrics.subtotal + metrics.tax)


def test_events_sorted_by_revenue_with_stable_ties(store_factory, order_a) -> None:
    """Test that events sort by revenue and keep their order on ties."""
    orders = [
        dict(order_a, id="o1", event_id="e1", total=10, tax_amount=0, platform_fee=0, stripe_fee=0),
        dict(order_a, id="o2", event_id="e2", total=10, tax_amount=0, platform_fee=0, stripe_fee=0),
    ]
    analytics = get_business_analytics(
        store_factory(orders=orders, table_bookings=[], refunds=[]), "b1"
    )
    assert [e.event_id for e in analytics.events] == ["e1", "e2"]

    bigger = [orders[0], dict(orders[1], total=11)]
    analytics = get_business_analytics(
        store_factory(orders=bigger, table_bookings=[], refunds=[]), "b1"
    )
    assert [e.event_id for e in analytics.events] == ["e2", "e1"]


def test_other_business_data_is_excluded(store_factory, order_a, booking_b) -> None:
    """Test that another business's orders and bookings are not counted."""
    store = store_factory(
        orders=[order_a, dict(order_a, id="o2", event_id="e3", total=1000)],
        table_bookings=[booking_b, dict(booking_b, id="tb2", event_id="e3")],
    )
    analytics = get_business_analytics(store, "b1")
    assert analytics.total_orders == 1
    assert analytics.total_table_bookings == 1
    assert {e.event_id for e in analytics.events} == {"e1", "e2"}


def test_no_rows_in_range_is_canonical_empty(store) -> None:
    """Test that an empty range gives the all-zero report."""
    far_future = DateRange.from_bounds("2030-01-01", "2030-01-31")
    analytics = get_business_analytics(store, "b1", far_future)
    assert analytics == BusinessAnalytics.empty()
    assert analytics.events == []
    assert all(getattr(analytics, name) == 0 for name in BusinessAnalytics.scalar_fields())


def test_business_without_data(empty_store) -> None:
    """Test that a business with no sales gives the all-zero report."""
    assert get_business_analytics(empty_store, "b1") == BusinessAnalytics.empty()


def test_repeated_calls_are_identical(store) -> None:
    """Test that the report is deterministic."""
    first = get_business_analytics(store, "b1", JANUARY)
    second = get_business_analytics(store, "b1", JANUARY)
    assert first.to_dict() == second.to_dict()


def test_every_numeric_output_is_finite(store_factory, order_a) -> None:
    """Test that malformed amounts never produce non-finite totals."""
    messy = dict(order_a, id="o2", total="NaN", tax_amount=None, platform_fee="abc", quantity=None)
    analytics = get_business_analytics(store_factory(orders=[order_a, messy]), "b1")
    values = [getattr(analytics, name) for name in BusinessAnalytics.scalar_fields()]
    assert all(math.isfinite(v) for v in values)
    assert analytics.total_orders == 2
    assert analytics.ticket_gross_revenue == 100.0


def test_orders_query_failure_is_fatal(store, monkeypatch) -> None:
    """Test that a failed order read raises QueryError."""
    def fail(*args, **kwargs):
        raise ConnectionError("db down")

    monkeypatch.setattr(TransactionStore, "fetch_orders", fail)
    with pytest.raises(QueryError) as excinfo:
        get_business_analytics(store, "b1")
    assert excinfo.value.query == "orders"


def test_secondary_failures_degrade_to_zero(store, monkeypatch, caplog) -> None:
    """Test that failed secondary reads are logged and count as zero."""
    def fail(*args, **kwargs):
        raise ConnectionError("db down")

    monkeypatch.setattr(TransactionStore, "fetch_table_bookings", fail)
    monkeypatch.setattr(TransactionStore, "fetch_refunds", fail)

    analytics = get_business_analytics(store, "b1")
    assert analytics.total_table_revenue == 0.0
    assert analytics.total_table_bookings == 0
    assert analytics.total_refunds == 0.0
    assert analytics.ticket_net_revenue == 92.0
    assert "table_bookings" in caplog.text


def test_event_index_failure_leaves_refunds_unattributed(store, monkeypatch) -> None:
    """Test that refunds stay business-wide when the event index fails."""
    def fail(*args, **kwargs):
        raise ConnectionError("db down")

    # fetch_refunds reads the index too; serve it a precomputed result
    refunds = store.fetch_refunds("b1")
    monkeypatch.setattr(TransactionStore, "fetch_event_index", fail)
    monkeypatch.setattr(TransactionStore, "fetch_refunds", lambda self, *a, **k: refunds)

    analytics = get_business_analytics(store, "b1")
    assert analytics.total_ticket_refunds == 20.0
    assert _event(analytics, "e1").ticket_refunds == 0.0
    assert analytics.unattributed_refunds == 20.0


def test_to_dict_includes_events(store) -> None:
    """Test that to_dict serializes the event breakdown."""
    data = get_business_analytics(store, "b1").to_dict()
    assert data["total_orders"] == 1
    assert data["events"][0]["event_id"] == "e1"
    assert data["events"][0]["total_revenue"] == 92.0


def test_other_business_refunds_are_excluded(store_factory, order_a, booking_b, refund_c) -> None:
    """Test that refunds on another business's orders and bookings are not counted."""
    foreign_order = dict(order_a, id="o2", event_id="e3")
    foreign_booking = dict(booking_b, id="tb2", event_id="e3")
    foreign_ticket_refund = dict(refund_c, id="r2", order_id="o2", amount=70.0)
    foreign_table_refund = {
        "id": "tr2",
        "table_booking_id": "tb2",
        "status": "succeeded",
        "created_at": "2025-01-16T10:00:00Z",
        "amount": 30.0,
    }
    store = store_factory(
        orders=[order_a, foreign_order],
        table_bookings=[booking_b, foreign_booking],
        refunds=[refund_c, foreign_ticket_refund],
        table_booking_refunds=[foreign_table_refund],
    )

    analytics = get_business_analytics(store, "b1", JANUARY)
    assert analytics.refund_count == 1
    assert analytics.total_ticket_refunds == 20.0
    assert analytics.total_table_refunds == 0.0
    assert analytics.total_refunds == 20.0
    assert analytics.unattributed_refunds == 0.0

    other = get_business_analytics(store, "b2", JANUARY)
    assert other.refund_count == 2
    assert other.total_ticket_refunds == 70.0
    assert other.total_table_refunds == 30.0
    assert _event(other, "e3").total_refunds == 100.0


def test_refund_on_pending_order_is_counted_without_event_bucket(
    store_factory, order_a, refund_c
) -> None:
    """Test that a refund whose order is not completed counts only business-wide."""
    pending = dict(order_a, status="pending")
    analytics = get_business_analytics(
        store_factory(orders=[pending], refunds=[refund_c]), "b1", JANUARY
    )
    assert analytics.total_orders == 0
    assert analytics.refund_count == 1
    assert analytics.total_ticket_refunds == 20.0
    assert [e.event_id for e in analytics.events] == ["e2"]
    assert analytics.unattributed_refunds == 20.0
