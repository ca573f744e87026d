"""Domain-specific exceptions for venue reporting.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from ReportingError for easy catching.
"""


class ReportingError(Exception):
    """Base exception for all venue reporting errors.

    This is the base class for all domain-specific exceptions in the package.
    Users can catch this exception to handle any reporting error.
    """

    pass


class ConfigError(ReportingError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - Invalid configuration values are provided
    - Required configuration is missing (e.g. VENUE_REPORTS_DATA is unset)
    - An unknown collection name is requested from the store
    """

    pass


class DataQualityError(ReportingError):
    """Raised when data quality checks fail.

    This exception is raised when:
    - Required columns are missing from a collection
    - A strict reconciliation check finds inconsistent totals
    """

    pass


class QueryError(ReportingError):
    """Raised when the primary query of an aggregation call fails.

    Only the primary source (orders) is fatal. Secondary sources degrade to
    empty results and never raise this exception.

    Attributes:
        query: Name of the query task that failed.
    """

    def __init__(self, query: str, message: str | None = None) -> None:
        self.query = query
        super().__init__(message or f"Primary query '{query}' failed")
