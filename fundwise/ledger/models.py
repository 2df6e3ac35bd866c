"""Mini README: Data contracts for the fund ledger.

Structure:
    * EntryType - collection versus expense.
    * Entry - a dated monetary record tagged with its fiscal year.
    * YearRecord - a fiscal year with opening balance and closed flag.
    * FinancialStats - derived totals for one year (never persisted).

Records are plain dataclasses. ``from_dict`` accepts the camelCase wire
format used by the JSON API and ``as_dict`` produces it again. Amounts are
``Decimal`` internally so sums never pick up binary floating point noise;
``as_record`` keeps them as decimal strings for storage. Amounts are bounded
to ``MAX_WHOLE_DIGITS`` whole digits and ``MAX_DECIMAL_PLACES`` places.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Mapping, Optional

ZERO = Decimal("0")
MAX_WHOLE_DIGITS = 14
MAX_DECIMAL_PLACES = 4
MAX_AMOUNT_DIGITS = MAX_WHOLE_DIGITS + MAX_DECIMAL_PLACES


class EntryType(str, Enum):
    """Enumerate the two kinds of ledger entries."""

    COLLECTION = "collection"
    EXPENSE = "expense"

    @classmethod
    def from_str(cls, value: str) -> "EntryType":
        """Coerce arbitrary casing into a valid entry type."""

        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError) as error:
            raise ValueError(f"Unsupported entry type: {value}") from error


def parse_amount(value: object) -> Decimal:
    """Parse a non-negative decimal amount from numbers or strings."""

    if isinstance(value, bool):
        raise ValueError("Amounts must be numeric.")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, AttributeError) as error:
        raise ValueError(f"Invalid amount: {value!r}") from error
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    if amount < ZERO:
        raise ValueError("Amounts cannot be negative.")
    _, digits, exponent = amount.normalize().as_tuple()
    if len(digits) + exponent > MAX_WHOLE_DIGITS:
        raise ValueError(f"Amounts are limited to {MAX_WHOLE_DIGITS} digits before the decimal point.")
    if -exponent > MAX_DECIMAL_PLACES:
        raise ValueError(f"Amounts are limited to {MAX_DECIMAL_PLACES} decimal places.")
    return amount


def parse_date(value: object) -> date:
    """Parse ISO formatted strings or date objects safely."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        # Accept full timestamps too, the date part is all we keep.
        return date.fromisoformat(value.strip()[:10])
    raise ValueError("Dates must be provided as ISO strings or date/datetime instances.")


def wire_number(amount: Decimal) -> int | float:
    """Render a decimal as a JSON number, keeping whole amounts integral."""

    if amount == amount.to_integral_value():
        return int(amount)
    return float(amount)


def decimal_text(amount: Decimal) -> str:
    """Render a decimal exactly, without exponent notation, for storage."""

    return format(amount, "f")


@dataclass(slots=True)
class Entry:
    """A single collection or expense recorded against a fiscal year."""

    id: Optional[str]
    type: EntryType
    title: str
    amount: Decimal
    date: date
    year_id: str
    receipt_image: Optional[str] = None

    def __post_init__(self) -> None:
        self.type = EntryType.from_str(self.type) if isinstance(self.type, str) else self.type
        self.amount = parse_amount(self.amount)
        self.date = parse_date(self.date)
        self.title = str(self.title).strip()
        self.year_id = str(self.year_id).strip()
        if not self.title:
            raise ValueError("Entries require a title.")
        if not self.year_id:
            raise ValueError("Entries require a fiscal year.")

    def with_id(self, entry_id: str) -> "Entry":
        return replace(self, id=entry_id)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Entry":
        """Build an entry from the camelCase wire representation."""

        try:
            return cls(
                id=payload.get("id") or None,
                type=payload["type"],
                title=payload["title"],
                amount=payload["amount"],
                date=payload["date"],
                year_id=payload["yearId"],
                receipt_image=payload.get("receiptImage") or None,
            )
        except KeyError as error:
            raise ValueError(f"Entry field {error.args[0]!r} is required.") from error

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "amount": wire_number(self.amount),
            "date": self.date.isoformat(),
            "yearId": self.year_id,
        }
        if self.receipt_image:
            data["receiptImage"] = self.receipt_image
        return data

    def as_record(self) -> Dict[str, Any]:
        """Storage form of ``as_dict`` with the amount as an exact decimal string."""

        data = self.as_dict()
        data["amount"] = decimal_text(self.amount)
        return data


@dataclass(frozen=True, slots=True)
class YearRecord:
    """A fiscal year. Closed years accept no further entry mutations."""

    id: str
    opening_balance: Decimal = ZERO
    is_closed: bool = False
    closed_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "YearRecord":
        closed_at = payload.get("closedAt")
        return cls(
            id=str(payload["id"]),
            opening_balance=Decimal(str(payload.get("openingBalance", 0))),
            is_closed=bool(payload.get("isClosed", False)),
            closed_at=datetime.fromisoformat(closed_at) if closed_at else None,
        )

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "openingBalance": wire_number(self.opening_balance),
            "isClosed": self.is_closed,
        }
        if self.closed_at is not None:
            data["closedAt"] = self.closed_at.isoformat()
        return data

    def as_record(self) -> Dict[str, Any]:
        data = self.as_dict()
        data["openingBalance"] = decimal_text(self.opening_balance)
        return data


@dataclass(frozen=True, slots=True)
class FinancialStats:
    """Totals for one fiscal year."""

    total_collection: Decimal
    total_expense: Decimal
    opening_balance: Decimal
    current_balance: Decimal

    def as_dict(self) -> Dict[str, Any]:
        return {
            "totalCollection": wire_number(self.total_collection),
            "totalExpense": wire_number(self.total_expense),
            "openingBalance": wire_number(self.opening_balance),
            "currentBalance": wire_number(self.current_balance),
        }


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
