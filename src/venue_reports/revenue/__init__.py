"""Revenue domain module.

This module provides the financial core of the reports:

- **Normalization**: `revenue.fees` - raw rows -> canonical money columns
- **Event buckets**: `revenue.events` - per-event grouping and refund merge
- **Business report**: `revenue.api.get_business_analytics()`
- **Derived metrics**: `revenue.metrics` - gross / net / total formulas

Example:
    >>> from venue_reports.revenue import get_business_analytics
    >>>
    >>> analytics = get_business_analytics(store, "b1")
    >>> analytics.overall_metrics().total
"""

from venue_reports.revenue.api import get_business_analytics
from venue_reports.revenue.metrics import DerivedMetrics, derive
from venue_reports.revenue.types import BusinessAnalytics, EventAnalytics

__all__ = [
    "BusinessAnalytics",
    "DerivedMetrics",
    "EventAnalytics",
    "derive",
    "get_business_analytics",
]
