"""Result types of the revenue aggregators."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Any

from venue_reports.revenue.metrics import DerivedMetrics, derive


@dataclass
class EventAnalytics:
    """Revenue summary of one event.

    Ticket and table figures are kept in separate namespaces. Refund fields
    only include refunds whose parent transaction produced this bucket.

    Attributes:
        total_revenue: ticket_net_revenue + table_revenue.
        ticket_gross_revenue: Sum of order charge totals (tax and
            customer-paid fees included).
        ticket_net_revenue: Sum of charge totals minus all fees.
        ticket_subtotal: Sum of order subtotals (before tax and fees).
        table_revenue: Sum of booking amounts (before tax and fees).
    """

    event_id: Any
    event_title: str | None = None
    event_date: Any = None
    event_status: str | None = None
    total_orders: int = 0
    total_tickets_sold: int = 0
    total_revenue: float = 0.0
    ticket_gross_revenue: float = 0.0
    ticket_net_revenue: float = 0.0
    ticket_subtotal: float = 0.0
    ticket_fees: float = 0.0
    ticket_tax: float = 0.0
    ticket_customer_paid_platform_fees: float = 0.0
    ticket_customer_paid_stripe_fees: float = 0.0
    ticket_business_paid_platform_fees: float = 0.0
    ticket_business_paid_stripe_fees: float = 0.0
    total_table_bookings: int = 0
    table_revenue: float = 0.0
    table_tax: float = 0.0
    table_fees: float = 0.0
    table_customer_paid_platform_fees: float = 0.0
    table_customer_paid_stripe_fees: float = 0.0
    table_business_paid_platform_fees: float = 0.0
    table_business_paid_stripe_fees: float = 0.0
    ticket_refunds: float = 0.0
    table_refunds: float = 0.0
    total_refunds: float = 0.0

    @property
    def ticket_customer_paid_fees(self) -> float:
        return self.ticket_customer_paid_platform_fees + self.ticket_customer_paid_stripe_fees

    @property
    def ticket_business_paid_fees(self) -> float:
        return self.ticket_business_paid_platform_fees + self.ticket_business_paid_stripe_fees

    @property
    def table_customer_paid_fees(self) -> float:
        return self.table_customer_paid_platform_fees + self.table_customer_paid_stripe_fees

    @property
    def table_business_paid_fees(self) -> float:
        return self.table_business_paid_platform_fees + self.table_business_paid_stripe_fees

    def ticket_metrics(self) -> DerivedMetrics:
        return derive(
            self.ticket_subtotal, self.ticket_tax, self.ticket_business_paid_fees, self.ticket_refunds
        )

    def table_metrics(self) -> DerivedMetrics:
        return derive(
            self.table_revenue, self.table_tax, self.table_business_paid_fees, self.table_refunds
        )

    def overall_metrics(self) -> DerivedMetrics:
        return self.ticket_metrics() + self.table_metrics()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class BusinessAnalytics:
    """Business-wide revenue summary plus the per-event breakdown.

    Scalars are accumulated from the same normalized rows as the event
    buckets, not summed from ``events``. Refund totals and ``refund_count``
    cover every succeeded refund in range, including refunds whose parent
    transaction is outside the range (and therefore has no event bucket).

    Use ``BusinessAnalytics.empty()`` for the canonical all-zero result.
    """

    total_revenue: float = 0.0
    total_tax_collected: float = 0.0
    ticket_tax_collected: float = 0.0
    table_tax_collected: float = 0.0
    total_tickets_sold: int = 0
    total_orders: int = 0
    ticket_gross_revenue: float = 0.0
    ticket_net_revenue: float = 0.0
    ticket_subtotal: float = 0.0
    ticket_fees: float = 0.0
    ticket_customer_paid_platform_fees: float = 0.0
    ticket_customer_paid_stripe_fees: float = 0.0
    ticket_business_paid_platform_fees: float = 0.0
    ticket_business_paid_stripe_fees: float = 0.0
    total_table_bookings: int = 0
    total_table_revenue: float = 0.0
    table_fees: float = 0.0
    table_customer_paid_platform_fees: float = 0.0
    table_customer_paid_stripe_fees: float = 0.0
    table_business_paid_platform_fees: float = 0.0
    table_business_paid_stripe_fees: float = 0.0
    total_ticket_refunds: float = 0.0
    total_table_refunds: float = 0.0
    total_refunds: float = 0.0
    refund_count: int = 0
    events: list[EventAnalytics] = field(default_factory=list)

    @classmethod
    def empty(cls) -> BusinessAnalytics:
        return cls()

    @classmethod
    def scalar_fields(cls) -> list[str]:
        return [f.name for f in fields(cls) if f.name != "events"]

    @property
    def ticket_customer_paid_fees(self) -> float:
        return self.ticket_customer_paid_platform_fees + self.ticket_customer_paid_stripe_fees

    @property
    def ticket_business_paid_fees(self) -> float:
        return self.ticket_business_paid_platform_fees + self.ticket_business_paid_stripe_fees

    @property
    def table_customer_paid_fees(self) -> float:
        return self.table_customer_paid_platform_fees + self.table_customer_paid_stripe_fees

    @property
    def table_business_paid_fees(self) -> float:
        return self.table_business_paid_platform_fees + self.table_business_paid_stripe_fees

    @property
    def unattributed_refunds(self) -> float:
        """Refunds in range whose parent transaction has no event bucket."""
        return self.total_refunds - sum(e.total_refunds for e in self.events)

    def ticket_metrics(self) -> DerivedMetrics:
        return derive(
            self.ticket_subtotal,
            self.ticket_tax_collected,
            self.ticket_business_paid_fees,
            self.total_ticket_refunds,
        )

    def table_metrics(self) -> DerivedMetrics:
        return derive(
            self.total_table_revenue,
            self.table_tax_collected,
            self.table_business_paid_fees,
            self.total_table_refunds,
        )

    def overall_metrics(self) -> DerivedMetrics:
        return self.ticket_metrics() + self.table_metrics()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
