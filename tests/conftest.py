"""Shared fixtures: a small in-memory venue dataset.

Business ``b1`` owns two events (``e1`` Gala, ``e2`` Brunch); business
``b2`` owns ``e3``. Amounts follow the worked examples used across the
test modules:

- ``o1``: total 100, tax 8, platform 5 (customer), stripe 3 (business), qty 2
- ``tb1``: amount 50, tax 4, platform 2 and stripe 1 paid by the business
- ``r1``: 20 refunded on ``o1``
"""

from __future__ import annotations

import copy

import pytest

from venue_reports.store import TransactionStore

EVENTS = [
    {"id": "e1", "business_id": "b1", "title": "Gala", "event_date": "2025-01-20", "status": "published"},
    {"id": "e2", "business_id": "b1", "title": "Brunch", "event_date": "2025-01-25", "status": "published"},
    {"id": "e3", "business_id": "b2", "title": "Other venue", "event_date": "2025-01-22", "status": "published"},
]

ORDER_A = {
    "id": "o1",
    "event_id": "e1",
    "status": "completed",
    "created_at": "2025-01-10T18:00:00Z",
    "quantity": 2,
    "total": 100.0,
    "subtotal": 87.0,
    "discount_amount": 0.0,
    "tax_amount": 8.0,
    "platform_fee": 5.0,
    "stripe_fee": 3.0,
    "platform_fee_payer": "customer",
    "stripe_fee_payer": "business",
}

BOOKING_B = {
    "id": "tb1",
    "event_id": "e2",
    "status": "confirmed",
    "created_at": "2025-01-12T19:00:00Z",
    "amount": 50.0,
    "tax_amount": 4.0,
    "platform_fee": 2.0,
    "stripe_fee": 1.0,
    "platform_fee_payer": "business",
    "stripe_fee_payer": "business",
}

REFUND_C = {
    "id": "r1",
    "order_id": "o1",
    "status": "succeeded",
    "created_at": "2025-01-15T10:00:00Z",
    "amount": 20.0,
}


def make_store(**overrides) -> TransactionStore:
    """Build a store from the default dataset, replacing collections by keyword."""
    records = {
        "events": copy.deepcopy(EVENTS),
        "orders": [dict(ORDER_A)],
        "table_bookings": [dict(BOOKING_B)],
        "refunds": [dict(REFUND_C)],
        "table_booking_refunds": [],
        "businesses": [
            {"id": "b1", "name": "Harbor Hall", "slug": "harbor-hall", "tax_percentage": 8.25},
            {"id": "b2", "name": "Elsewhere", "slug": "elsewhere", "tax_percentage": None},
        ],
    }
    records.update(overrides)
    return TransactionStore.from_records(**records)


@pytest.fixture
def store() -> TransactionStore:
    return make_store()


@pytest.fixture
def empty_store() -> TransactionStore:
    return TransactionStore.from_records(events=copy.deepcopy(EVENTS))


@pytest.fixture
def store_factory():
    """Factory fixture: ``store_factory(orders=[...])`` overrides collections."""
    return make_store


@pytest.fixture
def order_a() -> dict:
    return dict(ORDER_A)


@pytest.fixture
def booking_b() -> dict:
    return dict(BOOKING_B)


@pytest.fixture
def refund_c() -> dict:
    return dict(REFUND_C)
