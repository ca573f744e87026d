"""Public API for business revenue analytics.

This module provides the main entry point for the revenue report of one
business: business-wide totals plus the per-event breakdown.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING, Any

import pandas as pd

from venue_reports.fetch import QueryTask, run_queries
from venue_reports.revenue.events import (
    TABLE_SUMS,
    TICKET_SUMS,
    column_totals,
    merge_refunds,
    refund_total,
    summarize_by_event,
    to_event_analytics,
)
from venue_reports.revenue.fees import normalize_orders, normalize_table_bookings
from venue_reports.revenue.types import BusinessAnalytics

if TYPE_CHECKING:
    from venue_reports.daterange import DateRange
    from venue_reports.store import TransactionStore

logger = logging.getLogger(__name__)

# Event-level field name -> business-level field name, where they differ
_BUSINESS_NAMES = {
    "ticket_tax": "ticket_tax_collected",
    "table_tax": "table_tax_collected",
    "table_revenue": "total_table_revenue",
}


def _empty_index() -> pd.Series:
    return pd.Series(dtype=object, name="event_id")


def get_business_analytics(
    store: TransactionStore,
    business_id: Any,
    date_range: DateRange | None = None,
    *,
    max_workers: int | None = None,
) -> BusinessAnalytics:
    """Compute the revenue report of one business.

    This function:
    1. Reads orders (primary), bookings, both refund families and the two
       parent -> event indexes concurrently, all with the same date_range
       (the indexes are unfiltered)
    2. Normalizes every order and booking into canonical money columns
    3. Accumulates per-event buckets and business-wide scalars from the same
       normalized rows
    4. Merges refunds into the buckets they can be attributed to

    Args:
        store: Source of the transactional collections.
        business_id: Business to report on.
        date_range: Inclusive created_at bound, or None for all-time.
        max_workers: Thread pool size for the reads (default: one per read).

    Returns:
        BusinessAnalytics. With nothing in range this is
        BusinessAnalytics.empty(), never None.

    Raises:
        QueryError: If the orders query fails. Failures of any other read
            are logged and that source is treated as empty.

    Examples:
        >>> from venue_reports.daterange import DateRange
        >>> analytics = get_business_analytics(
        ...     store, "b1", DateRange.from_bounds("2025-01-01", "2025-01-31")
        ... )
        >>> analytics.total_revenue
        92.0

    """
    logger.info(
        "Computing business analytics for %s (%s)",
        business_id,
        f"{date_range.start} to {date_range.end}" if date_range else "all time",
    )

    results = run_queries(
        [
            QueryTask("orders", partial(store.fetch_orders, business_id, date_range)),
            QueryTask(
                "table_bookings",
                partial(store.fetch_table_bookings, business_id, date_range),
                fallback=pd.DataFrame,
            ),
            QueryTask(
                "refunds",
                partial(store.fetch_refunds, business_id, date_range),
                fallback=pd.DataFrame,
            ),
            QueryTask(
                "table_booking_refunds",
                partial(store.fetch_table_booking_refunds, business_id, date_range),
                fallback=pd.DataFrame,
            ),
            QueryTask(
                "order_events",
                partial(store.fetch_event_index, "orders", business_id),
                fallback=_empty_index,
            ),
            QueryTask(
                "table_booking_events",
                partial(store.fetch_event_index, "table_bookings", business_id),
                fallback=_empty_index,
            ),
        ],
        max_workers=max_workers,
    )

    refunds = results["refunds"]
    table_refunds = results["table_booking_refunds"]

    if (
        results["orders"].empty
        and results["table_bookings"].empty
        and refunds.empty
        and table_refunds.empty
    ):
        logger.info("No transactions in range for %s", business_id)
        return BusinessAnalytics.empty()

    orders = normalize_orders(results["orders"])
    bookings = normalize_table_bookings(results["table_bookings"])

    events = summarize_by_event(orders, bookings)
    events = merge_refunds(
        events,
        refunds,
        results["order_events"],
        table_refunds,
        results["table_booking_events"],
    )

    totals = {**column_totals(orders, TICKET_SUMS), **column_totals(bookings, TABLE_SUMS)}
    totals = {_BUSINESS_NAMES.get(name, name): value for name, value in totals.items()}

    ticket_refunds = refund_total(refunds)
    table_refunds_total = refund_total(table_refunds)

    analytics = BusinessAnalytics(
        **{name: value for name, value in totals.items() if name != "total_tickets_sold"},
        total_revenue=totals["ticket_net_revenue"] + totals["total_table_revenue"],
        total_tax_collected=totals["ticket_tax_collected"] + totals["table_tax_collected"],
        total_tickets_sold=int(totals["total_tickets_sold"]),
        total_orders=len(orders),
        total_table_bookings=len(bookings),
        total_ticket_refunds=ticket_refunds,
        total_table_refunds=table_refunds_total,
        total_refunds=ticket_refunds + table_refunds_total,
        refund_count=len(refunds) + len(table_refunds),
        events=to_event_analytics(events),
    )

    logger.info(
        "Business %s: %d orders, %d bookings, %d refunds across %d events",
        business_id,
        analytics.total_orders,
        analytics.total_table_bookings,
        analytics.refund_count,
        len(analytics.events),
    )
    return analytics
