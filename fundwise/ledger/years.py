"""Mini README: Fiscal year ordering, rollover and closing.

Structure:
    * sort_years / latest_year - most-recent-first ordering of year records.
    * roll_over - builds the open year following a given year and balance.
    * next_year - rolls the latest registered year over using its balance.
    * close_year - the one-way open -> closed transition.

Numeric ids are compared by integer value so ``"10"`` is more recent than ``"9"``.
Ids that are not base-10 integers sort after every numeric id, in descending
lexical order, and cannot be rolled over.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from .balance import compute_stats
from .errors import LedgerError, YearClosedError, YearExistsError
from .models import Entry, YearRecord, utc_now


def _is_numeric(value: str) -> bool:
    return value.isascii() and value.isdigit()


def _ordering_key(year: YearRecord) -> Tuple[int, int, str]:
    if _is_numeric(year.id):
        return (1, int(year.id), year.id)
    return (0, 0, year.id)


def sort_years(years: Iterable[YearRecord]) -> List[YearRecord]:
    """Return years most recent first."""

    return sorted(years, key=_ordering_key, reverse=True)


def latest_year(years: Iterable[YearRecord]) -> Optional[YearRecord]:
    ordered = sort_years(years)
    return ordered[0] if ordered else None


def roll_over(latest: YearRecord, current_balance: Decimal, years: Iterable[YearRecord]) -> YearRecord:
    """Build the open year following ``latest`` with ``current_balance`` carried in."""

    if not _is_numeric(latest.id):
        raise LedgerError(f"Fiscal year id {latest.id!r} is not numeric.")
    next_id = str(int(latest.id) + 1)
    if any(year.id == next_id for year in years):
        raise YearExistsError(next_id)
    return YearRecord(id=next_id, opening_balance=current_balance, is_closed=False)


def next_year(years: Iterable[YearRecord], entries: Iterable[Entry]) -> YearRecord:
    """Build the record following the latest registered year.

    Nothing is registered here; callers add the returned record to their
    registry.
    """

    years = list(years)
    latest = latest_year(years)
    if latest is None:
        raise LedgerError("No fiscal year exists to roll over from.")
    stats = compute_stats(latest.id, entries, years)
    return roll_over(latest, stats.current_balance, years)


def close_year(year: YearRecord, now: Optional[datetime] = None) -> YearRecord:
    """Return ``year`` marked closed and stamped with ``now``."""

    if year.is_closed:
        raise YearClosedError(year.id)
    return YearRecord(
        id=year.id,
        opening_balance=year.opening_balance,
        is_closed=True,
        closed_at=now or utc_now(),
    )
