"""Event-level revenue aggregation.

Normalized orders and bookings are grouped by event id into one bucket per
event. Ticket and table figures live in separate columns; a bucket exists as
soon as either side has a row for the event.

Refunds are merged in a second pass. A refund only carries its parent id, so
it is resolved to an event through an id -> event-id index built from an
unfiltered read of the parent collection. The refund is added to that
event's bucket only when the bucket already exists: a refund inside the date
range whose parent order is outside it has no bucket at this level, and
only shows up in the business-wide refund totals.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np
import pandas as pd

from venue_reports.revenue.fees import coerce_money
from venue_reports.revenue.types import EventAnalytics

logger = logging.getLogger(__name__)

EVENT_META_COLUMNS = ["event_id", "event_title", "event_date", "event_status"]

# Event field -> normalized order column
TICKET_SUMS = {
    "total_tickets_sold": "quantity",
    "ticket_gross_revenue": "charge_total",
    "ticket_net_revenue": "net_to_business",
    "ticket_subtotal": "subtotal",
    "ticket_fees": "fees",
    "ticket_tax": "tax",
    "ticket_customer_paid_platform_fees": "customer_paid_platform_fees",
    "ticket_customer_paid_stripe_fees": "customer_paid_stripe_fees",
    "ticket_business_paid_platform_fees": "business_paid_platform_fees",
    "ticket_business_paid_stripe_fees": "business_paid_stripe_fees",
}

# Event field -> normalized booking column
TABLE_SUMS = {
    "table_revenue": "subtotal",
    "table_tax": "tax",
    "table_fees": "fees",
    "table_customer_paid_platform_fees": "customer_paid_platform_fees",
    "table_customer_paid_stripe_fees": "customer_paid_stripe_fees",
    "table_business_paid_platform_fees": "business_paid_platform_fees",
    "table_business_paid_stripe_fees": "business_paid_stripe_fees",
}

REFUND_FIELDS = ["ticket_refunds", "table_refunds", "total_refunds"]
COUNT_FIELDS = ["total_orders", "total_tickets_sold", "total_table_bookings"]
AMOUNT_FIELDS = (
    ["total_revenue"]
    + [f for f in TICKET_SUMS if f not in COUNT_FIELDS]
    + list(TABLE_SUMS)
    + REFUND_FIELDS
)


def _sum_by_event(frame: pd.DataFrame, sums: dict[str, str], count_field: str) -> pd.DataFrame:
    columns = [count_field, *sums]
    if frame.empty:
        return pd.DataFrame(columns=columns, index=pd.Index([], name="event_id"), dtype=float)

    grouped = frame.groupby("event_id", sort=False)
    named = {dst: (src, "sum") for dst, src in sums.items()}
    named[count_field] = ("subtotal", "size")
    return grouped.agg(**named)[columns]


def column_totals(frame: pd.DataFrame, sums: dict[str, str]) -> dict[str, float]:
    """Whole-frame sums of the same columns the event buckets use."""
    if frame.empty:
        return {dst: 0.0 for dst in sums}
    return {dst: float(frame[src].sum()) for dst, src in sums.items()}


def refund_total(refunds: pd.DataFrame) -> float:
    """Sum of refund amounts, with the usual money coercion."""
    if refunds.empty or "amount" not in refunds.columns:
        return 0.0
    return float(coerce_money(refunds["amount"]).sum())


def summarize_by_event(orders: pd.DataFrame, bookings: pd.DataFrame) -> pd.DataFrame:
    """Group normalized orders and bookings into one row per event.

    Args:
        orders: Normalized orders joined to their event (EVENT_META_COLUMNS).
        bookings: Normalized bookings joined to their event.

    Returns:
        DataFrame indexed by event_id in first-seen order (orders first),
        with the event metadata, COUNT_FIELDS, AMOUNT_FIELDS. Refund
        columns are zero until merge_refunds runs.

    """
    ticket = _sum_by_event(orders, TICKET_SUMS, "total_orders")
    table = _sum_by_event(bookings, TABLE_SUMS, "total_table_bookings")

    meta = pd.concat(
        [orders.reindex(columns=EVENT_META_COLUMNS), bookings.reindex(columns=EVENT_META_COLUMNS)],
        ignore_index=True,
    )
    meta = meta.dropna(subset=["event_id"]).drop_duplicates("event_id").set_index("event_id")

    frame = meta.join(ticket).join(table)
    money = [f for f in AMOUNT_FIELDS if f in frame.columns]
    frame[money] = frame[money].fillna(0.0).astype(float)
    frame[COUNT_FIELDS] = frame[COUNT_FIELDS].fillna(0).astype("int64")

    frame["total_revenue"] = frame["ticket_net_revenue"] + frame["table_revenue"]
    for col in REFUND_FIELDS:
        frame[col] = 0.0

    logger.debug(
        "Summarized %d orders and %d bookings into %d event buckets",
        len(orders),
        len(bookings),
        len(frame),
    )
    return frame


def attribute_refunds(
    events: pd.DataFrame,
    refunds: pd.DataFrame,
    parent_index: pd.Series,
    parent_column: str,
) -> pd.Series:
    """Refund amounts per existing event bucket.

    Args:
        events: Output of summarize_by_event.
        refunds: Refund rows with ``parent_column`` and ``amount``.
        parent_index: Parent transaction id -> event id.
        parent_column: Column of ``refunds`` holding the parent id.

    Returns:
        Series aligned to ``events.index``. Refunds whose parent cannot be
        resolved, or whose event has no bucket, are left out.

    """
    if events.empty or refunds.empty:
        return pd.Series(0.0, index=events.index)

    event_ids = refunds[parent_column].map(parent_index)
    amounts = coerce_money(refunds["amount"])
    per_event = amounts.groupby(event_ids, sort=False).sum()

    unattributed = ~event_ids.isin(events.index)
    if unattributed.any():
        logger.debug(
            "%d %s refund(s) have no event bucket in range", int(unattributed.sum()), parent_column
        )

    return per_event.reindex(events.index, fill_value=0.0).astype(float)


def merge_refunds(
    events: pd.DataFrame,
    refunds: pd.DataFrame,
    order_index: pd.Series,
    table_refunds: pd.DataFrame,
    booking_index: pd.Series,
) -> pd.DataFrame:
    """Fill the refund columns of the event buckets."""
    events = events.copy()
    events["ticket_refunds"] = attribute_refunds(events, refunds, order_index, "order_id")
    events["table_refunds"] = attribute_refunds(
        events, table_refunds, booking_index, "table_booking_id"
    )
    events["total_refunds"] = events["ticket_refunds"] + events["table_refunds"]
    return events


def _native(value: Any) -> Any:
    if isinstance(value, np.generic):
        return value.item()
    return value


def _optional(value: Any) -> Any:
    if value is None or (pd.api.types.is_scalar(value) and pd.isna(value)):
        return None
    return _native(value)


def to_event_analytics(events: pd.DataFrame) -> list[EventAnalytics]:
    """Convert event buckets to EventAnalytics, highest total_revenue first.

    The sort is stable, so ties keep first-seen order.
    """
    ordered = events.sort_values("total_revenue", ascending=False, kind="mergesort")
    result = []
    for event_id, row in ordered.iterrows():
        result.append(
            EventAnalytics(
                event_id=_native(event_id),
                event_title=_optional(row.get("event_title")),
                event_date=_optional(row.get("event_date")),
                event_status=_optional(row.get("event_status")),
                **{f: int(row[f]) for f in COUNT_FIELDS},
                **{f: float(row[f]) for f in AMOUNT_FIELDS},
            )
        )
    return result
