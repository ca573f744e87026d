"""Public API for page view statistics."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from functools import partial
from typing import TYPE_CHECKING, Any

import pandas as pd

from venue_reports.fetch import QueryTask, run_queries

if TYPE_CHECKING:
    from venue_reports.daterange import DateRange
    from venue_reports.store import TransactionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageTypeViews:
    page_type: str | None
    views: int


@dataclass(frozen=True)
class DailyViews:
    date: date
    views: int
    unique_visitors: int


@dataclass
class PageViewStats:
    """Page view statistics over a date range.

    Attributes:
        total_views: Number of recorded views.
        unique_visitors: Distinct non-null visitor ids.
        views_by_page: Views per page type, most viewed first.
        daily_views: Views and distinct visitors per UTC day, oldest first.
    """

    total_views: int = 0
    unique_visitors: int = 0
    views_by_page: list[PageTypeViews] = field(default_factory=list)
    daily_views: list[DailyViews] = field(default_factory=list)

    @classmethod
    def empty(cls) -> PageViewStats:
        return cls()


def summarize_page_views(views: pd.DataFrame) -> PageViewStats:
    """Build PageViewStats from page view rows (page_type, visitor_id, created_at)."""
    if views.empty:
        return PageViewStats.empty()

    by_page = (
        views.groupby("page_type", sort=False, dropna=False)
        .size()
        .sort_values(ascending=False, kind="mergesort")
    )

    dated = views.dropna(subset=["created_at"])
    days = dated["created_at"].dt.tz_convert("UTC").dt.date
    daily = (
        dated.groupby(days)
        .agg(views=("created_at", "size"), unique_visitors=("visitor_id", "nunique"))
        .sort_index()
    )

    return PageViewStats(
        total_views=len(views),
        unique_visitors=int(views["visitor_id"].nunique()),
        views_by_page=[
            PageTypeViews(page_type=None if pd.isna(page) else page, views=int(count))
            for page, count in by_page.items()
        ],
        daily_views=[
            DailyViews(date=day, views=int(row["views"]), unique_visitors=int(row["unique_visitors"]))
            for day, row in daily.iterrows()
        ],
    )


def get_page_view_analytics(
    store: TransactionStore,
    business_id: Any,
    date_range: DateRange | None = None,
) -> PageViewStats:
    """Page view statistics for a business.

    Args:
        store: Source of the page_views collection.
        business_id: Business whose pages were viewed.
        date_range: Inclusive created_at bound, or None for all-time.

    Returns:
        PageViewStats. A failed read or no views in range gives
        PageViewStats.empty().

    """
    views = run_queries(
        [
            QueryTask(
                "page_views",
                partial(store.fetch_page_views, business_id, date_range),
                fallback=pd.DataFrame,
            )
        ]
    )["page_views"]

    stats = summarize_page_views(views)
    logger.info(
        "Page views for %s: %d views, %d unique visitors",
        business_id,
        stats.total_views,
        stats.unique_visitors,
    )
    return stats
