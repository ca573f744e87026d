"""Derived revenue metrics shown wherever a summary is displayed.

One formula per metric, used at every level (event, business, attribution):

    gross = subtotal + tax
    net   = subtotal - business_paid_fees - refunds
    total = gross - business_paid_fees - refunds

Tax is a pass-through: it is part of gross and total but never of net.
Customer-paid fees never reduce what the business receives.

The functions accept floats or pandas Series alike.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeVar

import pandas as pd

Amount = TypeVar("Amount", float, pd.Series)


def gross_revenue(subtotal: Amount, tax: Amount) -> Amount:
    return subtotal + tax


def net_revenue(subtotal: Amount, business_paid_fees: Amount, refunds: Amount) -> Amount:
    return subtotal - business_paid_fees - refunds


def total_received(
    subtotal: Amount, tax: Amount, business_paid_fees: Amount, refunds: Amount
) -> Amount:
    """What the business actually receives, tax included."""
    return gross_revenue(subtotal, tax) - business_paid_fees - refunds


@dataclass(frozen=True)
class DerivedMetrics:
    """Display-facing figures for one summary.

    Attributes:
        subtotal: Amount before tax and fees.
        tax: Tax collected.
        business_paid_fees: Fees absorbed by the business.
        refunds: Refunded amount.
        gross: subtotal + tax.
        net: subtotal - business_paid_fees - refunds.
        total: gross - business_paid_fees - refunds.
    """

    subtotal: float
    tax: float
    business_paid_fees: float
    refunds: float
    gross: float
    net: float
    total: float

    def __add__(self, other: DerivedMetrics) -> DerivedMetrics:
        return derive(
            self.subtotal + other.subtotal,
            self.tax + other.tax,
            self.business_paid_fees + other.business_paid_fees,
            self.refunds + other.refunds,
        )


def derive(
    subtotal: float,
    tax: float,
    business_paid_fees: float = 0.0,
    refunds: float = 0.0,
) -> DerivedMetrics:
    """Compute gross, net and total from the four base amounts.

    Examples:
        >>> m = derive(subtotal=87.0, tax=8.0, business_paid_fees=3.0, refunds=20.0)
        >>> (m.gross, m.net, m.total)
        (95.0, 64.0, 72.0)

    """
    subtotal = float(subtotal)
    tax = float(tax)
    business_paid_fees = float(business_paid_fees)
    refunds = float(refunds)
    return DerivedMetrics(
        subtotal=subtotal,
        tax=tax,
        business_paid_fees=business_paid_fees,
        refunds=refunds,
        gross=gross_revenue(subtotal, tax),
        net=net_revenue(subtotal, business_paid_fees, refunds),
        total=total_received(subtotal, tax, business_paid_fees, refunds),
    )
