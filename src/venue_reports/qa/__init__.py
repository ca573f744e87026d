"""QA module for revenue report reconciliation.

Example:
    >>> from venue_reports.revenue import get_business_analytics
    >>> from venue_reports.qa import run_reconciliation_qa
    >>>
    >>> analytics = get_business_analytics(store, "b1")
    >>> result = run_reconciliation_qa(analytics)
    >>> print(result.summary)
    >>> for issue in result.issues:
    ...     print(issue)

"""

from venue_reports.qa.api import ReconciliationResult, check_fee_split, run_reconciliation_qa

__all__ = ["ReconciliationResult", "check_fee_split", "run_reconciliation_qa"]
