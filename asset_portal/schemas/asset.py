"""Pydantic schemas for asset creation, state updates and the nested read-model."""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Any, Literal, Optional

from pydantic import BaseModel, Field, PlainSerializer, field_validator

from .archive import ItemStatus

DepreciationMethod = Literal["Straight-Line", "Declining Balance"]
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

ID_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9._-]*$"


class PurchaseFields(BaseModel):
    """Flat purchase fields collected by the creation forms.

    For complementary and component items they become the first archive record.
    """

    serial_number: str = ""
    part_number: str = ""
    purchase_price: float = Field(default=0, ge=0)
    purchase_order_number: str = ""
    purchase_date: Optional[str] = None
    warranty: str = ""
    status: ItemStatus = "Active"
    active_date: Optional[str] = None


class AssetCreate(PurchaseFields):
    id: str = Field(min_length=1, max_length=64, pattern=ID_PATTERN)
    name: str = Field(min_length=1)
    brand: str = ""
    model: str = ""
    category: str = ""
    sub_category: str = ""
    department_owner: str = ""
    primary_user: str = ""
    vendor_supplier: str = ""
    expected_lifespan: int = Field(default=0, ge=0)
    depreciation_method: DepreciationMethod = "Straight-Line"
    depreciation_rate: float = Field(default=0, ge=0)
    notes: str = ""

    @field_validator("id", "name", mode="before")
    @classmethod
    def strip_required(cls, value):
        return value.strip() if isinstance(value, str) else value


class ComplementaryCreate(PurchaseFields):
    id: str = Field(min_length=1, max_length=64, pattern=ID_PATTERN)
    name: str = Field(min_length=1)
    relation: str = ""
    brand: str = ""
    model: str = ""
    category: str = ""
    sub_category: str = ""
    department_owner: str = ""
    supplier_vendor: str = ""
    expected_lifespan: int = Field(default=0, ge=0)
    depreciation_method: DepreciationMethod = "Straight-Line"
    depreciation_rate: float = Field(default=0, ge=0)
    notes: str = ""
    purchase_notes: str = ""

    @field_validator("id", "name", mode="before")
    @classmethod
    def strip_required(cls, value):
        return value.strip() if isinstance(value, str) else value


class ComponentCreate(PurchaseFields):
    id: str = Field(min_length=1, max_length=64, pattern=ID_PATTERN)
    name: str = Field(min_length=1)
    relation: str = ""
    brand: str = ""
    model: str = ""
    supplier_vendor: str = ""
    expected_lifespan: int = Field(default=0, ge=0)
    notes: str = ""
    purchase_notes: str = ""

    @field_validator("id", "name", mode="before")
    @classmethod
    def strip_required(cls, value):
        return value.strip() if isinstance(value, str) else value


class AssetBundleCreate(BaseModel):
    asset: AssetCreate
    complementary_items: list[ComplementaryCreate] = Field(default_factory=list)
    component_items: list[ComponentCreate] = Field(default_factory=list)


class AssetStateUpdate(BaseModel):
    status: ItemStatus
    active_date: str = Field(min_length=1)
    notes: str = ""
    primary_user: Optional[str] = None


class ComplementaryOut(BaseModel):
    complementary_id: str = ""
    relation: str = ""
    name: str = ""
    brand: str = ""
    model: str = ""
    category: str = ""
    sub_category: str = ""
    department_owner: str = ""
    expected_lifespan: int = 0
    depreciation_method: str = ""
    depreciation_rate: float = 0
    notes: str = ""
    archive: list[dict[str, Any]] = Field(default_factory=list)
    archive_version: int = 0
    current_status: Optional[str] = None
    current_book_value: Money = Decimal("0")


class ComponentOut(BaseModel):
    component_id: str = ""
    relation: str = ""
    name: str = ""
    brand: str = ""
    model: str = ""
    expected_lifespan: int = 0
    notes: str = ""
    archive: list[dict[str, Any]] = Field(default_factory=list)
    archive_version: int = 0
    current_status: Optional[str] = None
    current_book_value: Money = Decimal("0")


class AssetAggregate(BaseModel):
    id: str
    name: str = ""
    brand: str = ""
    model: str = ""
    serial_number: str = ""
    part_number: str = ""
    category: str = ""
    sub_category: str = ""
    department_owner: str = ""
    primary_user: str = ""
    purchase_price: float = 0
    purchase_order_number: str = ""
    vendor_supplier: str = ""
    purchase_date: Optional[str] = None
    expected_lifespan: int = 0
    depreciation_method: str = ""
    depreciation_rate: float = 0
    status: str = ""
    warranty: str = ""
    active_date: Optional[str] = None
    image_url: str = ""
    notes: str = ""
    current_book_value: Money = Decimal("0")
    complementary_items: list[ComplementaryOut] = Field(default_factory=list)
    component_items: list[ComponentOut] = Field(default_factory=list)
