"""Pydantic schemas for purchase/status archive records and archive writes."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

ItemType = Literal["complementary", "component"]
ItemStatus = Literal["Active", "Inactive"]

_TEXT_FIELDS = (
    "warranty",
    "active_date",
    "purchase_date",
    "serial_number",
    "part_number",
    "supplier_vendor",
    "purchase_order_number",
    "notes",
)


class ArchiveRecord(BaseModel):
    """One purchase/ownership/status snapshot of an item.

    ``id`` is assigned by the server on first persist and is how single
    records are addressed afterwards.
    """

    model_config = {"extra": "ignore"}

    id: Optional[str] = None
    status: ItemStatus
    warranty: str = ""
    active_date: str = ""
    purchase_date: str = ""
    serial_number: str = ""
    part_number: str = ""
    purchase_price: float = Field(default=0, ge=0)
    supplier_vendor: str = ""
    purchase_order_number: str = ""
    notes: str = ""

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def none_to_empty(cls, value):
        return "" if value is None else value

    @field_validator("purchase_price", mode="before")
    @classmethod
    def none_to_zero(cls, value):
        return 0 if value in (None, "") else value


class ArchiveUpdate(BaseModel):
    """Whole-array replace of an item's archive."""

    id: str = Field(min_length=1)
    type: ItemType
    archive: list[ArchiveRecord]
    expected_version: Optional[int] = Field(default=None, ge=0)


class ArchiveRecordWrite(ArchiveRecord):
    """Single-record append/edit with an optional optimistic version check."""

    expected_version: Optional[int] = Field(default=None, ge=0)


class ArchiveOut(BaseModel):
    success: bool = True
    id: str
    type: ItemType
    archive_version: int
    archive: list[ArchiveRecord]
