"""Mini README: Tests for fiscal year ordering, rollover and closing.

Rollover carries the latest year's current balance into a new open year and
refuses to overwrite an existing year; closing is a one-way stamp.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from fundwise.ledger import (
    Entry,
    LedgerError,
    YearClosedError,
    YearExistsError,
    YearRecord,
    close_year,
    latest_year,
    next_year,
    roll_over,
    sort_years,
)


def test_sort_years_orders_numeric_ids_by_value() -> None:
    """Year "10" is more recent than "9", and non-numeric ids trail numeric ones."""

    years = [YearRecord(id="9"), YearRecord(id="legacy"), YearRecord(id="10"), YearRecord(id="2024")]

    assert [year.id for year in sort_years(years)] == ["2024", "10", "9", "legacy"]
    assert latest_year([]) is None


def test_next_year_carries_forward_current_balance() -> None:
    """2024 closing at 500 rolls into an open 2025 opening at 500."""

    years = [YearRecord(id="2023"), YearRecord(id="2024", opening_balance=Decimal("200"))]
    entries = [
        Entry(id="a", type="collection", title="Dues", amount="450", date=date(2024, 2, 1), year_id="2024"),
        Entry(id="b", type="expense", title="Repairs", amount="150", date=date(2024, 3, 1), year_id="2024"),
    ]

    rolled = next_year(years, entries)

    assert rolled == YearRecord(id="2025", opening_balance=Decimal("500"), is_closed=False)
    assert len(years) == 2


def test_roll_over_builds_following_year() -> None:
    """Year 2024 with a current balance of 500 becomes an open 2025 at 500."""

    latest = YearRecord(id="2024", is_closed=True)

    rolled = roll_over(latest, Decimal("500"), [latest])

    assert rolled.as_dict() == {"id": "2025", "openingBalance": 500, "isClosed": False}


def test_roll_over_rejects_existing_target() -> None:
    """Rolling over into an id that already exists fails and leaves the registry alone."""

    years = [YearRecord(id="2024"), YearRecord(id="2025", opening_balance=Decimal("7"))]

    with pytest.raises(YearExistsError):
        roll_over(years[0], Decimal("500"), years)
    assert years == [YearRecord(id="2024"), YearRecord(id="2025", opening_balance=Decimal("7"))]


def test_next_year_requires_numeric_latest_year() -> None:
    """An empty registry or a non-numeric latest id cannot be rolled over."""

    with pytest.raises(LedgerError):
        next_year([], [])
    with pytest.raises(LedgerError):
        next_year([YearRecord(id="legacy")], [])


def test_close_year_stamps_timestamp_once() -> None:
    """Closing marks the year closed with the given time; a second close fails."""

    stamp = datetime(2024, 12, 31, 18, 0, tzinfo=timezone.utc)
    closed = close_year(YearRecord(id="2024", opening_balance=Decimal("5")), stamp)

    assert closed.is_closed is True
    assert closed.closed_at == stamp
    assert closed.opening_balance == Decimal("5")
    assert closed.as_dict()["closedAt"] == "2024-12-31T18:00:00+00:00"
    with pytest.raises(YearClosedError):
        close_year(closed, stamp)
