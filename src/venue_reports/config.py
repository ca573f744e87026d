"""Unified configuration for venue reporting.

This module provides the filesystem configuration for collection exports and
the constants shared by every aggregation (status sets, fee payers).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from venue_reports.exceptions import ConfigError

# Environment variable holding the export root for StorePaths.from_env()
DATA_ROOT_ENV = "VENUE_REPORTS_DATA"

# Statuses that count as a successful transaction
ORDER_SUCCESS_STATUSES = ("completed",)
BOOKING_SUCCESS_STATUSES = ("confirmed", "arrived", "seated", "completed")
REFUND_SUCCESS_STATUSES = ("succeeded",)

# Who bears a fee; legacy rows without a payer were charged to the customer
FEE_PAYERS = ("customer", "business")
DEFAULT_FEE_PAYER = "customer"

# Collection name -> (required columns, optional columns)
COLLECTIONS: dict[str, tuple[tuple[str, ...], tuple[str, ...]]] = {
    "orders": (
        ("id", "event_id", "status", "created_at"),
        (
            "quantity",
            "total",
            "subtotal",
            "discount_amount",
            "tax_amount",
            "platform_fee",
            "stripe_fee",
            "platform_fee_payer",
            "stripe_fee_payer",
            "tracking_ref",
            "tracking_link_id",
        ),
    ),
    "table_bookings": (
        ("id", "event_id", "status", "created_at"),
        (
            "amount",
            "tax_amount",
            "platform_fee",
            "stripe_fee",
            "platform_fee_payer",
            "stripe_fee_payer",
            "tracking_ref",
            "tracking_link_id",
        ),
    ),
    "refunds": (("id", "order_id", "status", "created_at"), ("amount",)),
    "table_booking_refunds": (
        ("id", "table_booking_id", "status", "created_at"),
        ("amount",),
    ),
    "events": (("id", "business_id"), ("title", "event_date", "status")),
    "tracking_links": (("business_id", "ref_code"), ("id", "name", "is_active")),
    "businesses": (("id",), ("name", "slug", "tax_percentage")),
    "page_views": (("business_id", "created_at"), ("id", "page_type", "visitor_id")),
}


@dataclass
class StorePaths:
    """Filesystem location of the transactional collection exports.

    Attributes:
        data_root: Root directory holding one sub-directory per collection.

    Directory Structure:
        data_root/
        ├── orders/                  # ticket orders (*.csv)
        ├── table_bookings/
        ├── refunds/                 # ticket refunds
        ├── table_booking_refunds/
        ├── events/
        ├── tracking_links/
        ├── businesses/
        └── page_views/

    Every *.csv file in a collection directory is read and concatenated.
    """

    data_root: Path

    @classmethod
    def from_root(cls, data_root: str | Path) -> StorePaths:
        """Create StorePaths from a root directory.

        Args:
            data_root: Root directory of the collection exports.

        Returns:
            StorePaths instance.

        Examples:
            >>> paths = StorePaths.from_root("data")
            >>> paths.collection_dir("orders")
            PosixPath('data/orders')

        """
        if isinstance(data_root, str):
            data_root = Path(data_root)
        return cls(data_root=data_root)

    @classmethod
    def from_env(cls) -> StorePaths:
        """Create StorePaths from the VENUE_REPORTS_DATA environment variable.

        Raises:
            ConfigError: If the variable is unset or empty.

        """
        root = os.environ.get(DATA_ROOT_ENV, "").strip()
        if not root:
            raise ConfigError(f"{DATA_ROOT_ENV} is not set")
        return cls.from_root(root)

    def collection_dir(self, name: str) -> Path:
        """Directory holding the CSV exports of one collection."""
        if name not in COLLECTIONS:
            raise ConfigError(f"Unknown collection '{name}'. Known: {sorted(COLLECTIONS)}")
        return self.data_root / name
