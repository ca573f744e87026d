"""Public API for marketing attribution by tracking link.

Orders and bookings that carry a ``tracking_ref`` are grouped by that
reference string. Revenue here excludes every processing fee:

    order revenue   = subtotal - discount + tax
    booking revenue = amount + tax

This is a different convention from the business report, whose ticket
figures are netted of fees, so the two totals are not expected to match.
Business-paid fees are tracked alongside so a display can show the amount
left after the fees the business absorbs (``total_after_fees``).
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from functools import partial
from typing import TYPE_CHECKING, Any

import pandas as pd

from venue_reports.fetch import QueryTask, run_queries
from venue_reports.revenue.fees import (
    coerce_money,
    normalize_orders,
    normalize_table_bookings,
)
from venue_reports.revenue.metrics import DerivedMetrics, derive

if TYPE_CHECKING:
    from venue_reports.daterange import DateRange
    from venue_reports.store import TransactionStore

logger = logging.getLogger(__name__)

_SUM_COLUMNS = ["revenue", "subtotal", "tax", "business_paid_fees"]


@dataclass
class TrackingLinkAnalytics:
    """Attributed sales of one tracking reference.

    Attributes:
        tracking_ref: Reference code found on the transactions.
        link_name: Display name of the registered link, or None when the
            ref_code has no (or no longer a) TrackingLink.
        total_orders: Ticket orders plus table bookings.
        total_revenue: ticket_revenue + table_revenue (fees excluded).
        subtotal: Revenue before tax (order subtotal - discount, booking amount).
        tax: Tax on the attributed transactions.
        business_paid_fees: Fees absorbed by the business on those transactions.
        last_activity: Latest created_at among the attributed transactions.
    """

    tracking_ref: str
    link_name: str | None = None
    total_orders: int = 0
    total_revenue: float = 0.0
    ticket_orders: int = 0
    ticket_revenue: float = 0.0
    table_bookings: int = 0
    table_revenue: float = 0.0
    subtotal: float = 0.0
    tax: float = 0.0
    business_paid_fees: float = 0.0
    last_activity: pd.Timestamp | None = None

    @property
    def total_after_fees(self) -> float:
        return self.metrics().total

    def metrics(self) -> DerivedMetrics:
        return derive(self.subtotal, self.tax, self.business_paid_fees)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _attributed_orders(orders: pd.DataFrame) -> pd.DataFrame:
    if orders.empty:
        return pd.DataFrame()
    listed = coerce_money(orders["subtotal"]) - coerce_money(orders["discount_amount"])
    normalized = normalize_orders(orders)
    return pd.DataFrame(
        {
            "tracking_ref": normalized["tracking_ref"],
            "subtotal": listed,
            "tax": normalized["tax"],
            "revenue": listed + normalized["tax"],
            "business_paid_fees": normalized["business_paid_fees"],
            "created_at": normalized["created_at"],
        }
    )


def _attributed_bookings(bookings: pd.DataFrame) -> pd.DataFrame:
    if bookings.empty:
        return pd.DataFrame()
    normalized = normalize_table_bookings(bookings)
    return pd.DataFrame(
        {
            "tracking_ref": normalized["tracking_ref"],
            "subtotal": normalized["subtotal"],
            "tax": normalized["tax"],
            "revenue": normalized["subtotal"] + normalized["tax"],
            "business_paid_fees": normalized["business_paid_fees"],
            "created_at": normalized["created_at"],
        }
    )


def _by_ref(rows: pd.DataFrame, prefix: str) -> pd.DataFrame:
    columns = [f"{prefix}_count", *(f"{prefix}_{c}" for c in _SUM_COLUMNS), f"{prefix}_last"]
    if rows.empty:
        return pd.DataFrame(columns=columns, index=pd.Index([], name="tracking_ref"))
    grouped = rows.groupby("tracking_ref", sort=False)
    named = {f"{prefix}_{c}": (c, "sum") for c in _SUM_COLUMNS}
    named[f"{prefix}_count"] = ("revenue", "size")
    named[f"{prefix}_last"] = ("created_at", "max")
    return grouped.agg(**named)[columns]


def _optional_timestamp(value: Any) -> pd.Timestamp | None:
    return None if pd.isna(value) else pd.Timestamp(value)


def summarize_by_ref(
    orders: pd.DataFrame,
    bookings: pd.DataFrame,
    link_names: dict[str, str],
) -> list[TrackingLinkAnalytics]:
    """Group attributed orders and bookings by tracking reference.

    Args:
        orders: Tracked orders (raw rows with subtotal, discount_amount, ...).
        bookings: Tracked table bookings (raw rows).
        link_names: ref_code -> display name.

    Returns:
        One TrackingLinkAnalytics per reference, highest total_revenue first
        (stable, ties keep first-seen order).

    """
    ticket = _by_ref(_attributed_orders(orders), "ticket")
    table = _by_ref(_attributed_bookings(bookings), "table")

    refs = pd.Index(list(dict.fromkeys([*ticket.index, *table.index])), name="tracking_ref")
    frame = ticket.reindex(refs).join(table.reindex(refs))

    for prefix in ("ticket", "table"):
        numeric = [f"{prefix}_count", *(f"{prefix}_{c}" for c in _SUM_COLUMNS)]
        frame[numeric] = frame[numeric].fillna(0).astype(float)

    frame["total_revenue"] = frame["ticket_revenue"] + frame["table_revenue"]
    frame = frame.sort_values("total_revenue", ascending=False, kind="mergesort")

    result = []
    for ref, row in frame.iterrows():
        last = [v for v in (row["ticket_last"], row["table_last"]) if not pd.isna(v)]
        result.append(
            TrackingLinkAnalytics(
                tracking_ref=ref,
                link_name=link_names.get(ref),
                total_orders=int(row["ticket_count"] + row["table_count"]),
                total_revenue=float(row["total_revenue"]),
                ticket_orders=int(row["ticket_count"]),
                ticket_revenue=float(row["ticket_revenue"]),
                table_bookings=int(row["table_count"]),
                table_revenue=float(row["table_revenue"]),
                subtotal=float(row["ticket_subtotal"] + row["table_subtotal"]),
                tax=float(row["ticket_tax"] + row["table_tax"]),
                business_paid_fees=float(
                    row["ticket_business_paid_fees"] + row["table_business_paid_fees"]
                ),
                last_activity=_optional_timestamp(max(last)) if last else None,
            )
        )
    return result


def get_tracking_link_analytics(
    store: TransactionStore,
    business_id: Any,
    date_range: DateRange | None = None,
    *,
    max_workers: int | None = None,
) -> list[TrackingLinkAnalytics]:
    """Attribute a business's sales to its tracking references.

    This function:
    1. Reads the business's event ids (none -> empty list)
    2. Reads tracked orders (primary), tracked bookings and link names
       concurrently, with the same date_range
    3. Groups by tracking_ref and sorts by total revenue, descending

    Args:
        store: Source of the transactional collections.
        business_id: Business to report on.
        date_range: Inclusive created_at bound, or None for all-time.
        max_workers: Thread pool size for the reads.

    Returns:
        List of TrackingLinkAnalytics; references without a registered link
        are included with link_name None.

    Raises:
        QueryError: If the tracked orders query fails.

    """
    event_ids = run_queries(
        [QueryTask("event_ids", partial(store.fetch_event_ids, business_id), fallback=list)]
    )["event_ids"]
    if not event_ids:
        logger.info("No events for %s; no attribution data", business_id)
        return []

    results = run_queries(
        [
            QueryTask("orders", partial(store.fetch_tracked_orders, event_ids, date_range)),
            QueryTask(
                "table_bookings",
                partial(store.fetch_tracked_table_bookings, event_ids, date_range),
                fallback=pd.DataFrame,
            ),
            QueryTask(
                "tracking_links",
                partial(store.fetch_tracking_links, business_id),
                fallback=pd.DataFrame,
            ),
        ],
        max_workers=max_workers,
    )

    links = results["tracking_links"]
    link_names: dict[str, str] = {}
    if not links.empty:
        links = links.dropna(subset=["ref_code"]).drop_duplicates("ref_code")
        # blank names count as unnamed
        link_names = {
            ref: name
            for ref, name in zip(links["ref_code"], links["name"])
            if not pd.isna(name) and name
        }

    analytics = summarize_by_ref(results["orders"], results["table_bookings"], link_names)
    logger.info("Attributed sales for %s to %d tracking refs", business_id, len(analytics))
    return analytics
