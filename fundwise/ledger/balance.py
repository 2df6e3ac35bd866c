"""Mini README: Pure balance arithmetic over the ledger.

Structure:
    * compute_stats - FinancialStats for one year from entries and years.
    * monthly_breakdown - twelve collected/spent buckets for charting.

Neither function mutates its inputs, so calling them repeatedly with the same
collections yields identical results.
"""

from __future__ import annotations

import calendar
from decimal import Decimal
from typing import Dict, Iterable, List

from .models import ZERO, Entry, EntryType, FinancialStats, YearRecord, wire_number


def _sum_amounts(entries: Iterable[Entry], year_id: str, entry_type: EntryType) -> Decimal:
    return sum(
        (entry.amount for entry in entries if entry.year_id == year_id and entry.type is entry_type),
        ZERO,
    )


def compute_stats(year_id: str, entries: Iterable[Entry], years: Iterable[YearRecord]) -> FinancialStats:
    """Derive totals and the running balance for ``year_id``.

    An unregistered year contributes an opening balance of zero.
    """

    entries = list(entries)
    opening = next((year.opening_balance for year in years if year.id == year_id), ZERO)
    collected = _sum_amounts(entries, year_id, EntryType.COLLECTION)
    spent = _sum_amounts(entries, year_id, EntryType.EXPENSE)
    return FinancialStats(
        total_collection=collected,
        total_expense=spent,
        opening_balance=opening,
        current_balance=opening + collected - spent,
    )


def monthly_breakdown(year_id: str, entries: Iterable[Entry]) -> List[Dict[str, object]]:
    """Return collected and spent totals per calendar month, January first."""

    collected = [ZERO] * 12
    spent = [ZERO] * 12
    for entry in entries:
        if entry.year_id != year_id:
            continue
        bucket = collected if entry.type is EntryType.COLLECTION else spent
        bucket[entry.date.month - 1] += entry.amount
    return [
        {
            "name": calendar.month_abbr[index + 1],
            "collected": wire_number(collected[index]),
            "spent": wire_number(spent[index]),
        }
        for index in range(12)
    ]
