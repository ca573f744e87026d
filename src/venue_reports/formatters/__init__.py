"""Output formatters for reports."""

from venue_reports.formatters.console import (
    format_business_report_for_console,
    format_currency,
    format_tracking_links_for_console,
    tax_label,
)

__all__ = [
    "format_business_report_for_console",
    "format_currency",
    "format_tracking_links_for_console",
    "tax_label",
]
