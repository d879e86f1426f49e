"""Exception types raised by the household budget package."""

from __future__ import annotations


class HouseholdBudgetError(Exception):
    """Base class for all package errors."""


class ConfigurationError(HouseholdBudgetError, ValueError):
    """A configuration value is outside its documented domain."""


class TransactionSourceError(HouseholdBudgetError):
    """The transaction source could not be read.

    Recoverable: callers may fall back to another source such as the
    bundled sample data.
    """

    def __init__(self, message: str, source: str = ""):
        super().__init__(message)
        self.source = source


class StorageError(HouseholdBudgetError):
    """Persisted household state could not be written."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path
