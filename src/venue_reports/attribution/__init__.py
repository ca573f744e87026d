"""Attribution module.

Groups a business's tracked orders and table bookings by tracking reference.

Example:
    >>> from venue_reports.attribution import get_tracking_link_analytics
    >>>
    >>> for link in get_tracking_link_analytics(store, "b1"):
    ...     print(link.tracking_ref, link.link_name, link.total_revenue)
"""

from venue_reports.attribution.api import TrackingLinkAnalytics, get_tracking_link_analytics

__all__ = ["TrackingLinkAnalytics", "get_tracking_link_analytics"]
