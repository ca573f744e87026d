"""Console output formatting utilities."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from venue_reports.attribution import TrackingLinkAnalytics
    from venue_reports.reports import BusinessReport
    from venue_reports.revenue.metrics import DerivedMetrics


def format_currency(amount: Any, show_decimals: bool = True) -> str:
    """Format an amount as US dollars.

    Args:
        amount: Number or numeric string.
        show_decimals: Show cents (default True).

    Returns:
        e.g. ``$1,234.56`` or ``-$5.00``. Anything that is not a finite number
        formats as zero.

    Examples:
        >>> format_currency(1234.5)
        '$1,234.50'
        >>> format_currency("abc")
        '$0.00'

    """
    try:
        value = float(amount)
    except (TypeError, ValueError):
        value = math.nan
    if not math.isfinite(value):
        value = 0.0

    digits = 2 if show_decimals else 0
    text = f"${abs(value):,.{digits}f}"
    return f"-{text}" if round(value, digits) < 0 else text


def tax_label(tax_percentage: float | None) -> str:
    """Label of the tax line, e.g. ``Tax (8.25%)``; plain ``Tax`` when unknown."""
    if tax_percentage is None:
        return "Tax"
    try:
        value = float(tax_percentage)
    except (TypeError, ValueError):
        return "Tax"
    if not math.isfinite(value):
        return "Tax"
    return f"Tax ({value:g}%)"


def _metric_lines(metrics: DerivedMetrics, tax_text: str, indent: str = "  ") -> list[str]:
    rows = [
        ("Subtotal", metrics.subtotal),
        (tax_text, metrics.tax),
        ("Gross revenue", metrics.gross),
        ("Business-paid fees", -metrics.business_paid_fees),
        ("Refunds", -metrics.refunds),
        ("Net revenue", metrics.net),
        ("Total received", metrics.total),
    ]
    return [f"{indent}{label:<22}{format_currency(value):>14}" for label, value in rows]


def format_business_report_for_console(report: BusinessReport) -> str:
    """Build a human-readable string of a business report for console output.

    Args:
        report: BusinessReport from get_report.

    Returns:
        Human-readable text string for console output
    """
    analytics = report.analytics
    tax_text = tax_label(report.tax_percentage)

    lines = []
    title = report.business_name or str(report.business_id)
    lines.append(f"Revenue Report - {title}")
    if report.date_range is None:
        lines.append("All time")
    else:
        lines.append(
            f"{report.date_range.start:%Y-%m-%d} to {report.date_range.end:%Y-%m-%d}"
        )
    lines.append("=" * 60)
    lines.append("")

    lines.append("Overall:")
    lines.extend(_metric_lines(analytics.overall_metrics(), tax_text))
    lines.append("")

    lines.append(
        f"Tickets: {analytics.total_orders} orders, {analytics.total_tickets_sold} tickets"
    )
    lines.extend(_metric_lines(analytics.ticket_metrics(), tax_text))
    lines.append(
        f"  {'Customer-paid fees':<22}{format_currency(analytics.ticket_customer_paid_fees):>14}"
    )
    lines.append("")

    lines.append(f"Tables: {analytics.total_table_bookings} bookings")
    lines.extend(_metric_lines(analytics.table_metrics(), tax_text))
    lines.append(
        f"  {'Customer-paid fees':<22}{format_currency(analytics.table_customer_paid_fees):>14}"
    )
    lines.append("")

    if analytics.events:
        lines.append("By event:")
        for event in analytics.events:
            name = event.event_title or str(event.event_id)
            lines.append(f"  {name}: {format_currency(event.total_revenue)}")
            lines.append(
                f"    {event.total_orders} orders, {event.total_tickets_sold} tickets, "
                f"{event.total_table_bookings} bookings, "
                f"refunds {format_currency(event.total_refunds)}"
            )
        lines.append("")
    else:
        lines.append("No sales in this period.")
        lines.append("")

    if report.tracking_links:
        lines.append(format_tracking_links_for_console(report.tracking_links))
        lines.append("")

    views = report.page_views
    lines.append(f"Page views: {views.total_views} ({views.unique_visitors} unique visitors)")
    for page in views.views_by_page:
        lines.append(f"  {page.page_type or 'unknown'}: {page.views}")

    return "\n".join(lines)


def format_tracking_links_for_console(rows: list[TrackingLinkAnalytics]) -> str:
    """Build a text table of tracking link attribution.

    Args:
        rows: Output of get_tracking_link_analytics.

    Returns:
        Human-readable text string for console output
    """
    if not rows:
        return "No tracked sales."

    lines = ["Tracking links:"]
    for row in rows:
        name = row.link_name or "(deleted link)"
        last = f"{row.last_activity:%Y-%m-%d}" if row.last_activity is not None else "-"
        lines.append(f"  {name} [{row.tracking_ref}]")
        lines.append(
            f"    {row.ticket_orders} orders {format_currency(row.ticket_revenue)}, "
            f"{row.table_bookings} bookings {format_currency(row.table_revenue)}, "
            f"total {format_currency(row.total_revenue)}, "
            f"after fees {format_currency(row.total_after_fees)}, last {last}"
        )
    return "\n".join(lines)
