"""Read-only access to the transactional collections.

The store exposes the query surface the aggregators need: each method is one
independent read, keyed by business (or event ids) plus an optional inclusive
DateRange on ``created_at``. Methods return fresh DataFrames on every call so
that concurrent queries never share mutable state.

Two backings are supported:

- In-memory frames (``TransactionStore.from_records`` / ``from_frames``)
- CSV exports on disk (``TransactionStore.from_paths``), re-read on every query

Example:
    >>> from venue_reports.store import TransactionStore
    >>> store = TransactionStore.from_records(
    ...     events=[{"id": "e1", "business_id": "b1", "title": "Gala"}],
    ...     orders=[{"id": "o1", "event_id": "e1", "status": "completed",
    ...              "created_at": "2025-03-01T20:00:00Z", "total": 100}],
    ... )
    >>> len(store.fetch_orders("b1"))
    1
"""

from __future__ import annotations

import glob
import logging
from collections.abc import Iterable, Mapping
from typing import Any

import pandas as pd

from venue_reports.config import (
    BOOKING_SUCCESS_STATUSES,
    COLLECTIONS,
    ORDER_SUCCESS_STATUSES,
    REFUND_SUCCESS_STATUSES,
    StorePaths,
)
from venue_reports.daterange import DateRange, apply_date_range
from venue_reports.exceptions import ConfigError, DataQualityError

logger = logging.getLogger(__name__)

# Event columns carried onto joined transactions
EVENT_JOIN_COLUMNS = {
    "id": "event_id",
    "title": "event_title",
    "event_date": "event_date",
    "status": "event_status",
}


def _all_columns(name: str) -> list[str]:
    required, optional = COLLECTIONS[name]
    return list(required) + list(optional)


def empty_collection(name: str) -> pd.DataFrame:
    """Empty frame with the full column set of a collection."""
    if name not in COLLECTIONS:
        raise ConfigError(f"Unknown collection '{name}'. Known: {sorted(COLLECTIONS)}")
    return prepare_collection(name, pd.DataFrame(columns=_all_columns(name)))


def prepare_collection(name: str, frame: pd.DataFrame) -> pd.DataFrame:
    """Validate and standardize raw rows of one collection.

    - Required columns must be present (DataQualityError otherwise)
    - Missing optional columns are added as nulls
    - ``created_at`` is parsed to UTC; unparseable values become NaT

    Args:
        name: Collection name (key of COLLECTIONS).
        frame: Raw rows.

    Returns:
        A new DataFrame with every schema column present.

    Raises:
        DataQualityError: If required columns are missing.

    """
    required, optional = COLLECTIONS[name]
    missing = [col for col in required if col not in frame.columns]
    if missing:
        raise DataQualityError(
            f"Missing required columns in {name}: {missing}. Required: {list(required)}"
        )

    df = frame.copy()
    for col in optional:
        if col not in df.columns:
            df[col] = None

    if "created_at" in df.columns:
        parsed = pd.to_datetime(df["created_at"], utc=True, errors="coerce", format="ISO8601")
        bad = int(parsed.isna().sum() - df["created_at"].isna().sum())
        if bad > 0:
            logger.warning("%s: %d row(s) with unparseable created_at", name, bad)
        df["created_at"] = parsed

    return df


class TransactionStore:
    """Read-only view over orders, bookings, refunds and their lookups.

    Args:
        frames: In-memory collections keyed by name. Collections not given
            are empty.
        paths: CSV export location. When given, collections not present in
            ``frames`` are read from disk on every query.

    """

    def __init__(
        self,
        frames: Mapping[str, pd.DataFrame] | None = None,
        paths: StorePaths | None = None,
    ) -> None:
        frames = dict(frames or {})
        unknown = set(frames) - set(COLLECTIONS)
        if unknown:
            raise ConfigError(f"Unknown collections: {sorted(unknown)}")
        self._frames = {name: prepare_collection(name, df) for name, df in frames.items()}
        self.paths = paths

    @classmethod
    def from_frames(cls, **frames: pd.DataFrame) -> TransactionStore:
        """Build an in-memory store from DataFrames."""
        return cls(frames=frames)

    @classmethod
    def from_records(cls, **records: Iterable[Mapping[str, Any]]) -> TransactionStore:
        """Build an in-memory store from lists of row dicts."""
        frames = {}
        for name, rows in records.items():
            rows = list(rows)
            frames[name] = pd.DataFrame(rows) if rows else pd.DataFrame(columns=_all_columns(name))
        return cls(frames=frames)

    @classmethod
    def from_paths(cls, paths: StorePaths) -> TransactionStore:
        """Build a store backed by CSV exports under ``paths``."""
        return cls(paths=paths)

    # ------------------------------------------------------------------
    # Collection access
    # ------------------------------------------------------------------

    def collection(self, name: str) -> pd.DataFrame:
        """Return a fresh copy of one collection.

        Raises:
            ConfigError: If the collection name is unknown.
            FileNotFoundError: If the collection is disk-backed and has no CSVs.

        """
        if name not in COLLECTIONS:
            raise ConfigError(f"Unknown collection '{name}'. Known: {sorted(COLLECTIONS)}")
        if name in self._frames:
            return self._frames[name].copy()
        if self.paths is None:
            return empty_collection(name)
        return self._read_csv(name)

    def _read_csv(self, name: str) -> pd.DataFrame:
        collection_dir = self.paths.collection_dir(name)
        csv_files = sorted(glob.glob(str(collection_dir / "*.csv")))

        if not csv_files:
            raise FileNotFoundError(f"No {name} CSVs found in {collection_dir}")

        logger.debug("Reading %d CSV file(s) for %s", len(csv_files), name)
        dfs = [pd.read_csv(f, encoding="utf-8-sig") for f in csv_files]
        return prepare_collection(name, pd.concat(dfs, ignore_index=True))

    def _business_events(self, business_id: Any) -> pd.DataFrame:
        events = self.collection("events")
        events = events[events["business_id"] == business_id]
        return events[list(EVENT_JOIN_COLUMNS)].rename(columns=EVENT_JOIN_COLUMNS)

    def _join_events(
        self,
        name: str,
        business_id: Any,
        statuses: tuple[str, ...],
        date_range: DateRange | None,
    ) -> pd.DataFrame:
        rows = self.collection(name)
        rows = rows[rows["status"].isin(statuses)]
        rows = apply_date_range(rows, date_range)
        # Inner join: rows whose event is missing or belongs elsewhere drop out
        return rows.merge(self._business_events(business_id), on="event_id", how="inner")

    # ------------------------------------------------------------------
    # Transaction queries (business scoped, date filtered)
    # ------------------------------------------------------------------

    def fetch_orders(self, business_id: Any, date_range: DateRange | None = None) -> pd.DataFrame:
        """Completed orders of the business, joined to their event."""
        return self._join_events("orders", business_id, ORDER_SUCCESS_STATUSES, date_range)

    def fetch_table_bookings(
        self, business_id: Any, date_range: DateRange | None = None
    ) -> pd.DataFrame:
        """Success-family table bookings of the business, joined to their event."""
        return self._join_events(
            "table_bookings", business_id, BOOKING_SUCCESS_STATUSES, date_range
        )

    def _business_refunds(
        self,
        name: str,
        parent: str,
        parent_column: str,
        business_id: Any,
        date_range: DateRange | None,
    ) -> pd.DataFrame:
        parent_ids = self.fetch_event_index(parent, business_id).index
        refunds = self.collection(name)
        refunds = refunds[
            refunds["status"].isin(REFUND_SUCCESS_STATUSES)
            & refunds[parent_column].isin(parent_ids)
        ]
        return apply_date_range(refunds, date_range)

    def fetch_refunds(self, business_id: Any, date_range: DateRange | None = None) -> pd.DataFrame:
        """Succeeded ticket refunds on any order of the business.

        The range applies to the refund's own ``created_at``, never to the
        parent order's.
        """
        return self._business_refunds("refunds", "orders", "order_id", business_id, date_range)

    def fetch_table_booking_refunds(
        self, business_id: Any, date_range: DateRange | None = None
    ) -> pd.DataFrame:
        """Succeeded table-booking refunds on any booking of the business."""
        return self._business_refunds(
            "table_booking_refunds",
            "table_bookings",
            "table_booking_id",
            business_id,
            date_range,
        )

    def fetch_event_index(self, name: str, business_id: Any) -> pd.Series:
        """Unfiltered parent id -> event id index for one transaction collection.

        Includes every row of the business regardless of status or date, so
        refunds can be attributed even when the parent is outside the range.

        Args:
            name: "orders" or "table_bookings".
            business_id: Business whose events scope the index.

        Returns:
            Series indexed by transaction id with event ids as values.

        """
        if name not in ("orders", "table_bookings"):
            raise ConfigError(f"No event index for collection '{name}'")
        rows = self.collection(name)
        event_ids = self._business_events(business_id)["event_id"]
        rows = rows[rows["event_id"].isin(event_ids)]

        duplicated = rows["id"].duplicated()
        if duplicated.any():
            logger.warning("%s: %d duplicate id(s) in event index", name, int(duplicated.sum()))
            rows = rows[~duplicated]

        return pd.Series(rows["event_id"].to_numpy(), index=rows["id"].to_numpy(), name="event_id")

    # ------------------------------------------------------------------
    # Attribution queries
    # ------------------------------------------------------------------

    def fetch_event_ids(self, business_id: Any) -> list[Any]:
        """All event ids of the business."""
        return self._business_events(business_id)["event_id"].tolist()

    def _tracked(
        self,
        name: str,
        event_ids: Iterable[Any],
        statuses: tuple[str, ...],
        date_range: DateRange | None,
    ) -> pd.DataFrame:
        rows = self.collection(name)
        rows = rows[
            rows["event_id"].isin(list(event_ids))
            & rows["status"].isin(statuses)
            & rows["tracking_ref"].notna()
        ]
        return apply_date_range(rows, date_range)

    def fetch_tracked_orders(
        self, event_ids: Iterable[Any], date_range: DateRange | None = None
    ) -> pd.DataFrame:
        """Completed orders on ``event_ids`` carrying a tracking reference."""
        return self._tracked("orders", event_ids, ORDER_SUCCESS_STATUSES, date_range)

    def fetch_tracked_table_bookings(
        self, event_ids: Iterable[Any], date_range: DateRange | None = None
    ) -> pd.DataFrame:
        """Success-family bookings on ``event_ids`` carrying a tracking reference."""
        return self._tracked("table_bookings", event_ids, BOOKING_SUCCESS_STATUSES, date_range)

    def fetch_tracking_links(self, business_id: Any) -> pd.DataFrame:
        """Tracking links registered by the business (ref_code, name)."""
        links = self.collection("tracking_links")
        return links[links["business_id"] == business_id][["ref_code", "name"]]

    # ------------------------------------------------------------------
    # Other lookups
    # ------------------------------------------------------------------

    def fetch_page_views(
        self, business_id: Any, date_range: DateRange | None = None
    ) -> pd.DataFrame:
        """Page views recorded for the business."""
        views = self.collection("page_views")
        views = views[views["business_id"] == business_id]
        return apply_date_range(views, date_range)

    def fetch_business(self, business_id: Any) -> dict[str, Any] | None:
        """Business record (name, slug, tax_percentage), or None if unknown."""
        businesses = self.collection("businesses")
        match = businesses[businesses["id"] == business_id]
        if match.empty:
            return None
        record = match.iloc[0].to_dict()
        return {key: (None if pd.isna(value) else value) for key, value in record.items()}
