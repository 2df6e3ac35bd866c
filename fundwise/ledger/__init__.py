"""Mini README: Fund ledger domain for Fundwise.

Groups the entry and year contracts, the pure balance arithmetic, year
rollover/closing and the ``FundLedger`` service that enforces the write-path
rules on top of a pluggable repository.
"""

from .balance import compute_stats, monthly_breakdown
from .errors import (
    LedgerError,
    PersistenceError,
    UnknownYearError,
    YearClosedError,
    YearExistsError,
)
from .models import Entry, EntryType, FinancialStats, YearRecord
from .repository import InMemoryRepository, JsonFileRepository, LedgerSnapshot
from .store import FundLedger
from .years import close_year, latest_year, next_year, roll_over, sort_years

__all__ = [
    "Entry",
    "EntryType",
    "FinancialStats",
    "FundLedger",
    "InMemoryRepository",
    "JsonFileRepository",
    "LedgerError",
    "LedgerSnapshot",
    "PersistenceError",
    "UnknownYearError",
    "YearClosedError",
    "YearExistsError",
    "YearRecord",
    "close_year",
    "compute_stats",
    "latest_year",
    "monthly_breakdown",
    "next_year",
    "roll_over",
    "sort_years",
]
