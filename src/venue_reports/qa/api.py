"""Public API for reconciliation checks over a computed revenue report.

The checks only read a BusinessAnalytics that was already computed; they
never query the store.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, fields

import pandas as pd

from venue_reports.exceptions import DataQualityError
from venue_reports.revenue.metrics import DerivedMetrics, gross_revenue, net_revenue, total_received
from venue_reports.revenue.types import BusinessAnalytics, EventAnalytics

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationResult:
    """Result of the reconciliation checks.

    Attributes:
        summary: Dictionary with counts and flags.
        issues: One human-readable line per failed check.
    """

    summary: dict
    issues: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


def _close(a: float, b: float, tolerance: float) -> bool:
    return math.isclose(a, b, rel_tol=tolerance, abs_tol=tolerance)


def _non_finite(obj: BusinessAnalytics | EventAnalytics) -> list[str]:
    bad = []
    for f in fields(obj):
        value = getattr(obj, f.name)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if not math.isfinite(value):
                bad.append(f.name)
    return bad


def _check_metrics(label: str, metrics: DerivedMetrics, tolerance: float) -> list[str]:
    issues = []
    expected = {
        "gross": gross_revenue(metrics.subtotal, metrics.tax),
        "net": net_revenue(metrics.subtotal, metrics.business_paid_fees, metrics.refunds),
        "total": total_received(
            metrics.subtotal, metrics.tax, metrics.business_paid_fees, metrics.refunds
        ),
    }
    for name, value in expected.items():
        actual = getattr(metrics, name)
        if not _close(actual, value, tolerance):
            issues.append(f"{label}: {name} is {actual}, expected {value}")
    return issues


def check_fee_split(normalized: pd.DataFrame, tolerance: float = 1e-9) -> pd.DataFrame:
    """Rows where customer- and business-paid fees do not add up to the fees.

    Args:
        normalized: Output of normalize_orders or normalize_table_bookings.
        tolerance: Absolute tolerance of the comparison.

    Returns:
        The offending rows (empty when the split holds everywhere).

    """
    if normalized.empty:
        return normalized
    split = normalized["customer_paid_fees"] + normalized["business_paid_fees"]
    fees = normalized["platform_fee"] + normalized["stripe_fee"]
    return normalized[(split - fees).abs() > tolerance]


def run_reconciliation_qa(
    analytics: BusinessAnalytics,
    *,
    tolerance: float = 1e-9,
    strict: bool = False,
) -> ReconciliationResult:
    """Check that a revenue report is internally consistent.

    Checks:
    - every numeric field is finite
    - total_revenue equals the sum of the event buckets' total_revenue
    - each event's total_revenue is ticket_net_revenue + table_revenue
    - total_refunds is total_ticket_refunds + total_table_refunds
    - refunds attributed to events never exceed the business refunds
    - gross / net / total follow their formulas at every level

    Args:
        analytics: Output of get_business_analytics.
        tolerance: Relative and absolute tolerance for float comparisons.
        strict: Raise instead of returning when an issue is found.

    Returns:
        ReconciliationResult.

    Raises:
        DataQualityError: If strict is True and any check fails.

    """
    logger.info("Running reconciliation checks over %d events", len(analytics.events))
    issues: list[str] = []

    for name in _non_finite(analytics):
        issues.append(f"business: {name} is not finite")
    for event in analytics.events:
        for name in _non_finite(event):
            issues.append(f"event {event.event_id}: {name} is not finite")

    event_revenue = sum(e.total_revenue for e in analytics.events)
    if not _close(analytics.total_revenue, event_revenue, tolerance):
        issues.append(
            f"business: total_revenue {analytics.total_revenue} != "
            f"sum of event total_revenue {event_revenue}"
        )

    for event in analytics.events:
        expected = event.ticket_net_revenue + event.table_revenue
        if not _close(event.total_revenue, expected, tolerance):
            issues.append(
                f"event {event.event_id}: total_revenue {event.total_revenue} != "
                f"ticket_net_revenue + table_revenue {expected}"
            )
        if not _close(event.total_refunds, event.ticket_refunds + event.table_refunds, tolerance):
            issues.append(f"event {event.event_id}: total_refunds does not add up")

    refunds = analytics.total_ticket_refunds + analytics.total_table_refunds
    if not _close(analytics.total_refunds, refunds, tolerance):
        issues.append(
            f"business: total_refunds {analytics.total_refunds} != "
            f"ticket + table refunds {refunds}"
        )

    event_refunds = sum(e.total_refunds for e in analytics.events)
    if event_refunds > analytics.total_refunds + tolerance:
        issues.append(
            f"business: event refunds {event_refunds} exceed total_refunds {analytics.total_refunds}"
        )

    for label, metrics in (
        ("business ticket", analytics.ticket_metrics()),
        ("business table", analytics.table_metrics()),
        ("business overall", analytics.overall_metrics()),
    ):
        issues.extend(_check_metrics(label, metrics, tolerance))
    for event in analytics.events:
        issues.extend(_check_metrics(f"event {event.event_id}", event.overall_metrics(), tolerance))

    summary = {
        "total_events": len(analytics.events),
        "total_orders": analytics.total_orders,
        "total_table_bookings": analytics.total_table_bookings,
        "refund_count": analytics.refund_count,
        "unattributed_refunds": analytics.unattributed_refunds,
        "issue_count": len(issues),
        "has_issues": bool(issues),
    }

    if issues:
        logger.warning("Reconciliation found %d issue(s)", len(issues))
        if strict:
            raise DataQualityError(
                f"Reconciliation failed with {len(issues)} issue(s): " + "; ".join(issues)
            )
    else:
        logger.info("Reconciliation passed")

    return ReconciliationResult(summary=summary, issues=issues)
