"""Mini README: The fund ledger service combining entries and fiscal years.

Structure:
    * FundLedger - owns the entry store and year registry, applies every
      mutation as a command (apply locally, persist, roll back on failure)
      and exposes the derived balance views.

Write-path rules:
    * Entries must reference a registered year.
    * Closed years reject creates, edits and deletes of their entries, and an
      entry cannot be moved out of a closed year either.
    * Saving without an id creates a new record; saving with an id replaces
      exactly that record (upsert by id, last write wins).
    * Deleting an unknown id succeeds without changing anything.

Reads and writes share one re-entrant lock, so listings and totals never see
a half-applied mutation.
"""

from __future__ import annotations

import threading
import uuid
from datetime import date, datetime
from typing import Callable, Dict, List, Optional

from ..logging_utils import get_logger
from .balance import compute_stats, monthly_breakdown
from .errors import UnknownYearError, YearClosedError, YearExistsError
from .models import Entry, EntryType, FinancialStats, YearRecord
from .repository import InMemoryRepository, LedgerRepository, LedgerSnapshot
from .years import close_year, latest_year, next_year, sort_years

LOGGER = get_logger(__name__)


def _new_entry_id() -> str:
    return uuid.uuid4().hex


class FundLedger:
    """Manage fiscal years and their entries with persistence rollback."""

    def __init__(
        self,
        repository: Optional[LedgerRepository] = None,
        *,
        id_factory: Callable[[], str] = _new_entry_id,
    ) -> None:
        self._repository = repository if repository is not None else InMemoryRepository()
        self._id_factory = id_factory
        self._lock = threading.RLock()
        self._years: Dict[str, YearRecord] = {}
        self._entries: Dict[str, Entry] = {}

        snapshot = self._repository.load()
        for year in snapshot.years:
            if year.id in self._years:
                raise YearExistsError(year.id)
            self._years[year.id] = year
        for entry in snapshot.entries:
            stored = entry if entry.id else entry.with_id(self._id_factory())
            self._entries[stored.id] = stored
        LOGGER.debug(
            "Fund ledger initialised with %s years and %s entries",
            len(self._years),
            len(self._entries),
        )

    # ------------------------------------------------------------------
    # Command execution
    # ------------------------------------------------------------------

    def _snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(years=list(self._years.values()), entries=list(self._entries.values()))

    def _commit(self, apply: Callable[[], None], revert: Callable[[], None], action: str) -> None:
        """Apply a mutation locally, persist it and undo it if persisting fails."""

        with self._lock:
            apply()
            try:
                self._repository.save(self._snapshot())
            except Exception:
                revert()
                LOGGER.error("Persisting %s failed; local change rolled back", action)
                raise

    def _require_open_year(self, year_id: str) -> YearRecord:
        year = self._years.get(year_id)
        if year is None:
            raise UnknownYearError(year_id)
        if year.is_closed:
            raise YearClosedError(year_id)
        return year

    # ------------------------------------------------------------------
    # Years
    # ------------------------------------------------------------------

    def list_years(self) -> List[YearRecord]:
        """Return years most recent first."""

        with self._lock:
            return sort_years(self._years.values())

    def get_year(self, year_id: str) -> YearRecord:
        with self._lock:
            if year_id not in self._years:
                raise UnknownYearError(year_id)
            return self._years[year_id]

    def latest_year(self) -> Optional[YearRecord]:
        with self._lock:
            return latest_year(self._years.values())

    def add_year(self, year: YearRecord) -> YearRecord:
        """Register ``year``; ids are unique across the registry."""

        with self._lock:
            if year.id in self._years:
                raise YearExistsError(year.id)
            self._commit(
                lambda: self._years.__setitem__(year.id, year),
                lambda: self._years.pop(year.id, None),
                f"year {year.id}",
            )
        LOGGER.info("Registered fiscal year %s (opening balance %s)", year.id, year.opening_balance)
        return year

    def ensure_default_year(self, today: Optional[date] = None) -> Optional[YearRecord]:
        """Create the current calendar year when no year is registered yet."""

        with self._lock:
            if self._years:
                return None
            current = str((today or date.today()).year)
            return self.add_year(YearRecord(id=current))

    def create_next_year(self) -> YearRecord:
        """Roll the latest year's balance into a newly registered year."""

        with self._lock:
            record = next_year(self._years.values(), self._entries.values())
            return self.add_year(record)

    def close_year(self, year_id: str, now: Optional[datetime] = None) -> YearRecord:
        with self._lock:
            previous = self.get_year(year_id)
            closed = close_year(previous, now)
            self._commit(
                lambda: self._years.__setitem__(year_id, closed),
                lambda: self._years.__setitem__(year_id, previous),
                f"closing year {year_id}",
            )
        LOGGER.info("Closed fiscal year %s at %s", year_id, closed.closed_at.isoformat())
        return closed

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    def get_entry(self, entry_id: str) -> Entry:
        with self._lock:
            if entry_id not in self._entries:
                raise KeyError(f"Entry {entry_id} not found")
            return self._entries[entry_id]

    def list_entries(
        self,
        year_id: str,
        entry_type: Optional[EntryType] = None,
        search: Optional[str] = None,
    ) -> List[Entry]:
        """Return a year's entries, newest date first, optionally filtered."""

        needle = (search or "").strip().lower()
        with self._lock:
            matches = [
                entry
                for entry in self._entries.values()
                if entry.year_id == year_id
                and (entry_type is None or entry.type is entry_type)
                and needle in entry.title.lower()
            ]
        return sorted(matches, key=lambda entry: (entry.date, entry.id), reverse=True)

    def save_entry(self, entry: Entry) -> Entry:
        """Create or replace an entry keyed by its id."""

        with self._lock:
            self._require_open_year(entry.year_id)
            previous = self._entries.get(entry.id) if entry.id else None
            if previous is not None:
                self._require_open_year(previous.year_id)
            stored = entry if entry.id else entry.with_id(self._id_factory())

            def revert() -> None:
                if previous is None:
                    self._entries.pop(stored.id, None)
                else:
                    self._entries[stored.id] = previous

            self._commit(
                lambda: self._entries.__setitem__(stored.id, stored),
                revert,
                f"entry {stored.id}",
            )
        LOGGER.info(
            "%s %s entry %s in year %s",
            "Updated" if previous is not None else "Created",
            stored.type.value,
            stored.id,
            stored.year_id,
        )
        return stored

    def delete_entry(self, entry_id: str) -> bool:
        """Remove an entry. Returns ``False`` when nothing was stored under the id."""

        with self._lock:
            existing = self._entries.get(entry_id)
            if existing is None:
                LOGGER.debug("Delete of unknown entry %s ignored", entry_id)
                return False
            year = self._years.get(existing.year_id)
            if year is not None and year.is_closed:
                raise YearClosedError(year.id)
            self._commit(
                lambda: self._entries.pop(entry_id, None),
                lambda: self._entries.__setitem__(entry_id, existing),
                f"deletion of entry {entry_id}",
            )
        LOGGER.info("Deleted entry %s from year %s", entry_id, existing.year_id)
        return True

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def stats(self, year_id: str) -> FinancialStats:
        with self._lock:
            return compute_stats(year_id, self._entries.values(), self._years.values())

    def monthly_breakdown(self, year_id: str) -> List[Dict[str, object]]:
        with self._lock:
            return monthly_breakdown(year_id, self._entries.values())

    def snapshot(self) -> Dict[str, List[Dict[str, object]]]:
        """Export years (most recent first) and entries for JSON responses."""

        with self._lock:
            return {
                "years": [year.as_dict() for year in self.list_years()],
                "entries": [entry.as_dict() for entry in self._entries.values()],
            }
