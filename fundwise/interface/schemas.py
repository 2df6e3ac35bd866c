"""Mini README: Request bodies accepted by the Fundwise JSON API.

Field names follow the camelCase wire format of the browser client; the
Python attributes stay snake_case through pydantic aliases.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..ledger import Entry
from ..ledger.models import MAX_AMOUNT_DIGITS, MAX_DECIMAL_PLACES


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class EntryPayload(_WireModel):
    id: Optional[str] = None
    type: str
    title: str = Field(..., min_length=1)
    amount: Decimal = Field(..., ge=0, max_digits=MAX_AMOUNT_DIGITS, decimal_places=MAX_DECIMAL_PLACES)
    date: dt.date
    year_id: str = Field(..., alias="yearId", min_length=1)
    receipt_image: Optional[str] = Field(None, alias="receiptImage")

    def to_entry(self) -> Entry:
        return Entry(
            id=self.id or None,
            type=self.type,
            title=self.title,
            amount=self.amount,
            date=self.date,
            year_id=self.year_id,
            receipt_image=self.receipt_image,
        )


class LoginRequest(_WireModel):
    username: str
    password: str


class PasswordUpdateRequest(_WireModel):
    current_password: str = Field(..., alias="currentPassword")
    new_password: str = Field(..., alias="newPassword")
    confirm_password: Optional[str] = Field(None, alias="confirmPassword")


class CollectionKeyRequest(_WireModel):
    key: str


class CollectionKeyUpdateRequest(_WireModel):
    admin_password: str = Field(..., alias="adminPassword")
    new_collection_key: str = Field(..., alias="newCollectionKey")
    confirm_collection_key: Optional[str] = Field(None, alias="confirmCollectionKey")
