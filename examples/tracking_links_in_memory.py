"""Example: Tracking link attribution over in-memory records

Builds a small store from row dicts (the same shape as the CSV exports) and
compares the attribution view with the business revenue view. The two use
different revenue conventions, so their totals differ:

- attribution: subtotal - discount + tax, fees excluded
- business report: order totals net of every fee, plus booking amounts
"""

import logging

from venue_reports import TransactionStore
from venue_reports.attribution import get_tracking_link_analytics
from venue_reports.formatters import format_currency, format_tracking_links_for_console
from venue_reports.revenue import get_business_analytics

logging.basicConfig(level=logging.INFO)

store = TransactionStore.from_records(
    events=[{"id": "e1", "business_id": "b1", "title": "Jazz Night", "event_date": "2025-02-14"}],
    orders=[
        {
            "id": "o1",
            "event_id": "e1",
            "status": "completed",
            "created_at": "2025-02-01T18:00:00Z",
            "quantity": 2,
            "total": 100.0,
            "subtotal": 87.0,
            "tax_amount": 8.0,
            "platform_fee": 5.0,
            "stripe_fee": 3.0,
            "platform_fee_payer": "customer",
            "stripe_fee_payer": "business",
            "tracking_ref": "ig_story",
        },
        {
            "id": "o2",
            "event_id": "e1",
            "status": "completed",
            "created_at": "2025-02-03T12:30:00Z",
            "quantity": 1,
            "total": 45.0,
            "subtotal": 40.0,
            "discount_amount": 4.0,
            "tax_amount": 3.0,
            "platform_fee": 2.0,
            "stripe_fee": 1.0,
            "tracking_ref": "newsletter",
        },
    ],
    table_bookings=[
        {
            "id": "tb1",
            "event_id": "e1",
            "status": "confirmed",
            "created_at": "2025-02-05T20:00:00Z",
            "amount": 50.0,
            "tax_amount": 4.0,
            "platform_fee": 2.0,
            "stripe_fee": 1.0,
            "platform_fee_payer": "business",
            "stripe_fee_payer": "business",
            "tracking_ref": "ig_story",
        }
    ],
    tracking_links=[{"business_id": "b1", "ref_code": "ig_story", "name": "Instagram Story"}],
)

links = get_tracking_link_analytics(store, "b1")
print(format_tracking_links_for_console(links))

analytics = get_business_analytics(store, "b1")
attributed = sum(link.total_revenue for link in links)
print(f"\nAttributed revenue:     {format_currency(attributed)}")
print(f"Business total_revenue: {format_currency(analytics.total_revenue)}")
