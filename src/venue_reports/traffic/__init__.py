"""Page view statistics for a business's public pages."""

from venue_reports.traffic.api import (
    DailyViews,
    PageTypeViews,
    PageViewStats,
    get_page_view_analytics,
)

__all__ = ["DailyViews", "PageTypeViews", "PageViewStats", "get_page_view_analytics"]
