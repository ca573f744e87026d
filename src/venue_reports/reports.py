"""Full reports view of one business.

Bundles the business record, the revenue report, the tracking-link
attribution and the page view statistics, all computed over the same
date range.

Example:
    >>> from venue_reports import StorePaths, TransactionStore, get_report
    >>> from venue_reports.daterange import preset_date_range
    >>>
    >>> store = TransactionStore.from_paths(StorePaths.from_root("data"))
    >>> report = get_report(store, "b1", preset_date_range("last-30-days"))
    >>> report.analytics.overall_metrics().total
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import partial
from typing import TYPE_CHECKING, Any

from venue_reports.attribution import TrackingLinkAnalytics, get_tracking_link_analytics
from venue_reports.fetch import QueryTask, run_queries
from venue_reports.revenue import BusinessAnalytics, get_business_analytics
from venue_reports.traffic import PageViewStats, get_page_view_analytics

if TYPE_CHECKING:
    from venue_reports.daterange import DateRange
    from venue_reports.store import TransactionStore

logger = logging.getLogger(__name__)


@dataclass
class BusinessReport:
    """Everything the reports view shows for one business.

    Attributes:
        business_id: Business the report is for.
        date_range: Range every part was computed with (None for all-time).
        business: Business record (name, slug, tax_percentage), or None when
            the lookup failed or the business is unknown.
        analytics: Revenue totals and per-event breakdown.
        tracking_links: Attributed sales per tracking reference.
        page_views: Page view statistics.
    """

    business_id: Any
    date_range: DateRange | None
    business: dict[str, Any] | None
    analytics: BusinessAnalytics
    tracking_links: list[TrackingLinkAnalytics] = field(default_factory=list)
    page_views: PageViewStats = field(default_factory=PageViewStats.empty)

    @property
    def business_name(self) -> str | None:
        return self.business.get("name") if self.business else None

    @property
    def tax_percentage(self) -> float | None:
        if not self.business:
            return None
        value = self.business.get("tax_percentage")
        return None if value is None else float(value)


def _no_business() -> None:
    return None


def get_report(
    store: TransactionStore,
    business_id: Any,
    date_range: DateRange | None = None,
    *,
    max_workers: int | None = None,
) -> BusinessReport:
    """Compute the full report of a business.

    Args:
        store: Source of the collections.
        business_id: Business to report on.
        date_range: Inclusive created_at bound, or None for all-time.
        max_workers: Thread pool size for each aggregation's reads.

    Returns:
        BusinessReport.

    Raises:
        QueryError: If the orders read of the revenue report or of the
            attribution fails.

    """
    business = run_queries(
        [QueryTask("business", partial(store.fetch_business, business_id), fallback=_no_business)]
    )["business"]
    if business is None:
        logger.warning("No business record for %s; labels fall back to defaults", business_id)

    report = BusinessReport(
        business_id=business_id,
        date_range=date_range,
        business=business,
        analytics=get_business_analytics(store, business_id, date_range, max_workers=max_workers),
        tracking_links=get_tracking_link_analytics(
            store, business_id, date_range, max_workers=max_workers
        ),
        page_views=get_page_view_analytics(store, business_id, date_range),
    )
    logger.info("Built report for %s", business_id)
    return report
