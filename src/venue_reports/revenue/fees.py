"""Fee decomposition: raw transaction rows -> canonical money columns.

Fee responsibility is frozen on each transaction at sale time. The platform
fee and the Stripe fee each carry their own payer, so one row can have a
customer-paid platform fee and a business-paid Stripe fee. This module reads
those stored values; it never recomputes tax or fees.

Canonical columns added by normalize_orders / normalize_table_bookings:

    subtotal                     amount before tax and before any fee
    tax                          stored tax amount
    platform_fee, stripe_fee     stored fees
    fees                         platform_fee + stripe_fee
    customer_paid_platform_fees  platform_fee when its payer is the customer
    customer_paid_stripe_fees    stripe_fee when its payer is the customer
    business_paid_platform_fees  platform_fee when its payer is the business
    business_paid_stripe_fees    stripe_fee when its payer is the business
    customer_paid_fees           sum of the customer-paid parts
    business_paid_fees           sum of the business-paid parts
    charge_total                 amount charged to the customer
    net_to_business              charge_total - platform_fee - stripe_fee
    quantity                     tickets on the order (1 per booking)

Orders store ``total`` = subtotal + tax + customer-paid fees, so the
subtotal is derived from it. Bookings store ``amount`` = subtotal; tax and
fees are always separate fields on top of it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd

from venue_reports.config import DEFAULT_FEE_PAYER, FEE_PAYERS

CANONICAL_COLUMNS = [
    "subtotal",
    "tax",
    "platform_fee",
    "stripe_fee",
    "fees",
    "customer_paid_platform_fees",
    "customer_paid_stripe_fees",
    "business_paid_platform_fees",
    "business_paid_stripe_fees",
    "customer_paid_fees",
    "business_paid_fees",
    "charge_total",
    "net_to_business",
    "quantity",
]

# Stored money columns consumed (and replaced) by normalization
ORDER_MONEY_COLUMNS = ["total", "tax_amount", "platform_fee", "stripe_fee"]
BOOKING_MONEY_COLUMNS = ["amount", "tax_amount", "platform_fee", "stripe_fee"]


def coerce_money(values: pd.Series) -> pd.Series:
    """Coerce stored money values to finite floats; anything else becomes 0.0.

    Examples:
        >>> coerce_money(pd.Series(["12.50", None, "n/a", float("inf")])).tolist()
        [12.5, 0.0, 0.0, 0.0]

    """
    numeric = pd.to_numeric(values, errors="coerce").astype(float)
    return numeric.where(np.isfinite(numeric), 0.0)


def resolve_fee_payer(values: pd.Series) -> pd.Series:
    """Resolve stored fee payers; absent or unrecognized values mean the customer.

    Examples:
        >>> resolve_fee_payer(pd.Series(["Business", None, "platform"])).tolist()
        ['business', 'customer', 'customer']

    """
    normalized = values.map(lambda v: v.strip().lower() if isinstance(v, str) else None)
    return normalized.where(normalized.isin(FEE_PAYERS), DEFAULT_FEE_PAYER)


def _column(frame: pd.DataFrame, name: str) -> pd.Series:
    if name in frame.columns:
        return frame[name]
    return pd.Series(np.nan, index=frame.index, dtype=float)


def _split_fees(frame: pd.DataFrame) -> pd.DataFrame:
    """Money columns shared by orders and bookings, fees split by payer."""
    out = pd.DataFrame(index=frame.index)
    out["tax"] = coerce_money(_column(frame, "tax_amount"))
    out["platform_fee"] = coerce_money(_column(frame, "platform_fee"))
    out["stripe_fee"] = coerce_money(_column(frame, "stripe_fee"))
    out["fees"] = out["platform_fee"] + out["stripe_fee"]

    for fee in ("platform", "stripe"):
        amount = out[f"{fee}_fee"]
        business_pays = resolve_fee_payer(_column(frame, f"{fee}_fee_payer")) == "business"
        out[f"customer_paid_{fee}_fees"] = amount.where(~business_pays, 0.0)
        out[f"business_paid_{fee}_fees"] = amount.where(business_pays, 0.0)

    out["customer_paid_fees"] = out["customer_paid_platform_fees"] + out["customer_paid_stripe_fees"]
    out["business_paid_fees"] = out["business_paid_platform_fees"] + out["business_paid_stripe_fees"]
    return out


def _attach(frame: pd.DataFrame, canonical: pd.DataFrame, consumed: list[str]) -> pd.DataFrame:
    drop = [col for col in frame.columns if col in consumed or col in CANONICAL_COLUMNS]
    return pd.concat([frame.drop(columns=drop), canonical[CANONICAL_COLUMNS]], axis=1)


def normalize_orders(orders: pd.DataFrame) -> pd.DataFrame:
    """Add canonical money columns to ticket orders.

    ``subtotal = total - tax - customer_paid_fees`` and
    ``net_to_business = total - platform_fee - stripe_fee``, whoever pays.

    Args:
        orders: Raw order rows (any extra columns are carried through).

    Returns:
        New DataFrame: the input's non-money columns plus CANONICAL_COLUMNS.

    """
    out = _split_fees(orders)
    out["charge_total"] = coerce_money(_column(orders, "total"))
    out["subtotal"] = out["charge_total"] - out["tax"] - out["customer_paid_fees"]
    out["net_to_business"] = out["charge_total"] - out["fees"]
    out["quantity"] = coerce_money(_column(orders, "quantity")).astype("int64")
    return _attach(orders, out, ORDER_MONEY_COLUMNS)


def normalize_table_bookings(bookings: pd.DataFrame) -> pd.DataFrame:
    """Add canonical money columns to table bookings.

    ``subtotal = amount``; the customer is charged amount + tax + the fees
    they pay, and the business nets that charge minus both fees.

    Args:
        bookings: Raw booking rows (any extra columns are carried through).

    Returns:
        New DataFrame: the input's non-money columns plus CANONICAL_COLUMNS.

    """
    out = _split_fees(bookings)
    out["subtotal"] = coerce_money(_column(bookings, "amount"))
    out["charge_total"] = out["subtotal"] + out["tax"] + out["customer_paid_fees"]
    out["net_to_business"] = out["charge_total"] - out["fees"]
    out["quantity"] = np.ones(len(bookings), dtype="int64")
    return _attach(bookings, out, BOOKING_MONEY_COLUMNS)


@dataclass(frozen=True)
class FeeBreakdown:
    """Canonical money tuple of a single transaction."""

    subtotal: float
    tax: float
    platform_fee: float
    stripe_fee: float
    customer_paid_fees: float
    business_paid_fees: float
    net_to_business: float

    @classmethod
    def from_normalized(cls, row: pd.Series) -> FeeBreakdown:
        return cls(
            subtotal=float(row["subtotal"]),
            tax=float(row["tax"]),
            platform_fee=float(row["platform_fee"]),
            stripe_fee=float(row["stripe_fee"]),
            customer_paid_fees=float(row["customer_paid_fees"]),
            business_paid_fees=float(row["business_paid_fees"]),
            net_to_business=float(row["net_to_business"]),
        )


def breakdown_order(row: Mapping[str, Any]) -> FeeBreakdown:
    """Fee breakdown of one raw order row.

    Examples:
        >>> breakdown_order({"total": 100, "tax_amount": 8, "platform_fee": 5,
        ...                  "stripe_fee": 3, "stripe_fee_payer": "business"}).subtotal
        87.0

    """
    return FeeBreakdown.from_normalized(normalize_orders(pd.DataFrame([dict(row)])).iloc[0])


def breakdown_table_booking(row: Mapping[str, Any]) -> FeeBreakdown:
    """Fee breakdown of one raw table booking row."""
    return FeeBreakdown.from_normalized(
        normalize_table_bookings(pd.DataFrame([dict(row)])).iloc[0]
    )
