"""Venue Reports - revenue reporting for multi-tenant venue businesses.

This package turns raw ticket orders, table bookings and refunds into the
revenue reports a business sees:

- **Revenue**: business totals plus the per-event breakdown
- **Attribution**: sales grouped by marketing tracking link
- **Traffic**: page view statistics
- **QA**: reconciliation checks over a computed report

Module Structure:
    venue_reports.revenue: Fee normalization, event buckets, business report
    venue_reports.attribution: Tracking link attribution
    venue_reports.traffic: Page view statistics
    venue_reports.reports: Full report (all of the above, one date range)
    venue_reports.qa: Reconciliation checks
    venue_reports.daterange: DateRange and the reporting presets
    venue_reports.store: TransactionStore (in-memory frames or CSV exports)
    venue_reports.config: StorePaths configuration and status constants

Quick Start:
    >>> from venue_reports import StorePaths, TransactionStore, get_report
    >>> from venue_reports.daterange import DateRange
    >>> from venue_reports.formatters import format_business_report_for_console
    >>>
    >>> store = TransactionStore.from_paths(StorePaths.from_root("data"))
    >>> date_range = DateRange.from_bounds("2025-01-01", "2025-01-31")
    >>>
    >>> report = get_report(store, "b1", date_range)
    >>> print(format_business_report_for_console(report))

Money conventions:
    - ticket_net_revenue: order totals minus all processing fees
    - table_revenue: booking amounts (before tax and fees)
    - total_revenue: ticket_net_revenue + table_revenue
    - attribution revenue: subtotal - discount + tax (fees excluded)
"""

__version__ = "0.1.0"

from venue_reports.config import StorePaths
from venue_reports.daterange import DateRange
from venue_reports.exceptions import ConfigError, DataQualityError, QueryError, ReportingError
from venue_reports.reports import BusinessReport, get_report
from venue_reports.store import TransactionStore

__all__ = [
    "BusinessReport",
    "ConfigError",
    "DataQualityError",
    "DateRange",
    "QueryError",
    "ReportingError",
    "StorePaths",
    "TransactionStore",
    "__version__",
    "get_report",
]
