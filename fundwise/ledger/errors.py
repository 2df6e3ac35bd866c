"""Mini README: Domain errors raised by the ledger write path.

All errors derive from ``LedgerError`` (a ``ValueError``) so callers that only
care about "the request was rejected" can catch a single type, while the web
layer maps each subclass to its own status code.
"""

from __future__ import annotations


class LedgerError(ValueError):
    """Base class for rejected ledger operations."""


class UnknownYearError(LedgerError):
    """Raised when an entry or action references a year that is not registered."""

    def __init__(self, year_id: str) -> None:
        super().__init__(f"Fiscal year {year_id} does not exist.")
        self.year_id = year_id


class YearExistsError(LedgerError):
    """Raised when a rollover would create a year that is already registered."""

    def __init__(self, year_id: str) -> None:
        super().__init__(f"Fiscal year {year_id} already exists.")
        self.year_id = year_id


class YearClosedError(LedgerError):
    """Raised when a closed year would receive an entry mutation or a second close."""

    def __init__(self, year_id: str) -> None:
        super().__init__(f"Fiscal year {year_id} is closed.")
        self.year_id = year_id


class PersistenceError(LedgerError):
    """Raised when the repository could not store a change; the change is rolled back."""
