"""Mini README: Storage backends for the fund ledger.

Structure:
    * LedgerSnapshot - the years and entries persisted together.
    * LedgerRepository - minimal load/save protocol used by ``FundLedger``.
    * InMemoryRepository - keeps the last saved snapshot in memory.
    * JsonFileRepository - stores the snapshot in a JSON document.
    * write_json_atomically - temp-file-and-replace JSON writer shared with
      the credential store.

Writes replace the whole document through a temporary file so a crash
mid-write leaves the previous snapshot intact. Amounts are stored as decimal
strings so a reload returns exactly what was saved.
"""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Protocol

from ..logging_utils import get_logger
from .errors import PersistenceError
from .models import Entry, YearRecord

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class LedgerSnapshot:
    years: List[YearRecord] = field(default_factory=list)
    entries: List[Entry] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "years": [year.as_record() for year in self.years],
            "entries": [entry.as_record() for entry in self.entries],
        }

    @classmethod
    def from_dict(cls, payload: dict) -> "LedgerSnapshot":
        return cls(
            years=[YearRecord.from_dict(item) for item in payload.get("years", [])],
            entries=[Entry.from_dict(item) for item in payload.get("entries", [])],
        )


class LedgerRepository(Protocol):
    def load(self) -> LedgerSnapshot: ...

    def save(self, snapshot: LedgerSnapshot) -> None: ...


class InMemoryRepository:
    """Repository used for tests and ephemeral runs."""

    def __init__(self, snapshot: Optional[LedgerSnapshot] = None) -> None:
        self._payload = (snapshot or LedgerSnapshot()).as_dict()
        self.save_count = 0

    def load(self) -> LedgerSnapshot:
        return LedgerSnapshot.from_dict(self._payload)

    def save(self, snapshot: LedgerSnapshot) -> None:
        self._payload = snapshot.as_dict()
        self.save_count += 1


class JsonFileRepository:
    """Persist the ledger as ``{"years": [...], "entries": [...]}`` on disk."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> LedgerSnapshot:
        if not self.path.exists():
            LOGGER.info("No ledger file at %s, starting empty", self.path)
            return LedgerSnapshot()
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as error:
            raise PersistenceError(f"Could not read ledger file {self.path}") from error
        snapshot = LedgerSnapshot.from_dict(payload)
        LOGGER.debug(
            "Loaded %s years and %s entries from %s",
            len(snapshot.years),
            len(snapshot.entries),
            self.path,
        )
        return snapshot

    def save(self, snapshot: LedgerSnapshot) -> None:
        write_json_atomically(self.path, snapshot.as_dict(), label="ledger")


def write_json_atomically(path: Path, payload: object, *, label: str) -> None:
    """Write ``payload`` as JSON beside ``path`` and swap it into place.

    Serialisation happens before anything touches the disk and non-finite
    numbers are refused. Any failure raises ``PersistenceError``, leaves the
    existing file untouched and removes the temporary file.
    """

    try:
        document = json.dumps(payload, indent=2, allow_nan=False)
    except (TypeError, ValueError) as error:
        raise PersistenceError(f"Could not serialise {label} file {path}") from error
    temp_name: Optional[str] = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handle, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}-", suffix=".json")
        with os.fdopen(handle, "w", encoding="utf-8") as stream:
            stream.write(document)
        os.replace(temp_name, path)
        temp_name = None
    except OSError as error:
        raise PersistenceError(f"Could not write {label} file {path}") from error
    finally:
        if temp_name is not None:
            with contextlib.suppress(OSError):
                os.unlink(temp_name)
