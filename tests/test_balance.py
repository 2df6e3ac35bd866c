"""Mini README: Tests for the pure balance arithmetic.

Structure:
    * test_compute_stats_scenario - collections minus expenses on a zero opening.
    * test_compute_stats_matches_formula - opening + collections - expenses per year.
    * test_compute_stats_unknown_year_defaults_opening - missing year opens at zero.
    * test_compute_stats_is_idempotent - repeated calls return equal stats, inputs untouched.
    * test_monthly_breakdown_buckets_by_month - twelve buckets keyed by calendar month.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from fundwise.ledger import Entry, EntryType, YearRecord, compute_stats, monthly_breakdown


def _entry(entry_type: str, amount: str, year_id: str, day: date = date(2024, 3, 1)) -> Entry:
    return Entry(
        id=None,
        type=entry_type,
        title=f"{entry_type} {amount}",
        amount=amount,
        date=day,
        year_id=year_id,
    )


def test_compute_stats_scenario() -> None:
    """A 100 collection and a 40 expense leave a balance of 60."""

    entries = [_entry("collection", "100", "2024"), _entry("expense", "40", "2024")]
    stats = compute_stats("2024", entries, [YearRecord(id="2024")])

    assert stats.as_dict() == {
        "totalCollection": 100,
        "totalExpense": 40,
        "openingBalance": 0,
        "currentBalance": 60,
    }


def test_compute_stats_matches_formula() -> None:
    """Only entries of the requested year count, and the opening balance is added."""

    entries = [
        _entry("collection", "250.50", "2024"),
        _entry("collection", "0.10", "2024"),
        _entry("expense", "0.20", "2024"),
        _entry("expense", "75", "2024"),
        _entry("collection", "9999", "2023"),
        _entry("expense", "5", "2025"),
    ]
    years = [YearRecord(id="2023"), YearRecord(id="2024", opening_balance=Decimal("120"))]

    stats = compute_stats("2024", entries, years)

    assert stats.total_collection == Decimal("250.60")
    assert stats.total_expense == Decimal("75.20")
    assert stats.opening_balance == Decimal("120")
    assert stats.current_balance == Decimal("295.40")


def test_compute_stats_unknown_year_defaults_opening() -> None:
    """A year missing from the registry still gets totals with a zero opening balance."""

    stats = compute_stats("2030", [_entry("expense", "12", "2030")], [YearRecord(id="2024")])

    assert stats.opening_balance == Decimal("0")
    assert stats.current_balance == Decimal("-12")


def test_compute_stats_is_idempotent() -> None:
    """Calling the calculator twice yields equal stats and leaves the inputs alone."""

    entries = [_entry("collection", "10", "2024"), _entry("expense", "3", "2024")]
    years = [YearRecord(id="2024", opening_balance=Decimal("1"))]
    before = [entry.as_dict() for entry in entries]

    first = compute_stats("2024", entries, years)
    second = compute_stats("2024", entries, years)

    assert first == second
    assert [entry.as_dict() for entry in entries] == before


def test_monthly_breakdown_buckets_by_month() -> None:
    """Collections and expenses land in the bucket of their calendar month."""

    entries = [
        _entry("collection", "30", "2024", date(2024, 1, 5)),
        _entry("collection", "20", "2024", date(2024, 1, 20)),
        _entry("expense", "15", "2024", date(2024, 12, 31)),
        _entry("expense", "99", "2023", date(2023, 12, 1)),
    ]

    months = monthly_breakdown("2024", entries)

    assert len(months) == 12
    assert months[0] == {"name": "Jan", "collected": 50, "spent": 0}
    assert months[11]["spent"] == 15
    assert all(month["collected"] == 0 for month in months[1:])
    assert entries[0].type is EntryType.COLLECTION
