"""Example: Full business report from CSV exports

This example builds the reports view of one business for a preset date range
and prints it, then runs the reconciliation checks over the revenue numbers.

Prerequisites:
- Export each collection as CSV under one directory per collection
  (data/orders/*.csv, data/table_bookings/*.csv, data/events/*.csv, ...)
- Set VENUE_REPORTS_DATA to that root, or modify the path below
"""

import logging
import os

from venue_reports import StorePaths, TransactionStore, get_report
from venue_reports.daterange import PRESET_LABELS, preset_date_range
from venue_reports.formatters import format_business_report_for_console
from venue_reports.qa import run_reconciliation_qa

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

if os.environ.get("VENUE_REPORTS_DATA"):
    paths = StorePaths.from_env()
else:
    paths = StorePaths.from_root("data")

store = TransactionStore.from_paths(paths)

business_id = "b1"  # MODIFY AS NEEDED
preset = "last-90-days"  # any key of PRESET_LABELS

print(f"Building report for {business_id} ({PRESET_LABELS[preset]})...")
report = get_report(store, business_id, preset_date_range(preset))

print()
print(format_business_report_for_console(report))

# Reconciliation checks over the revenue numbers
print("\nRunning reconciliation checks...")
result = run_reconciliation_qa(report.analytics)
print(result.summary)
for issue in result.issues:
    print(f"  - {issue}")
