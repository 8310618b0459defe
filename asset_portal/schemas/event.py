"""Pydantic schemas for lifecycle events.

An event is a tagged variant discriminated by ``event_type``: each variant
carries exactly one type-specific payload (``location``, ``maintenance`` or
``repair``). Maintenance and repair costs are derived from their materials
and cannot be supplied by clients.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, computed_field

from ..core.currency import quantize_currency, to_decimal

EventType = Literal["location", "maintenance", "repair"]


class MaterialItem(BaseModel):
    name: str = Field(min_length=1)
    quantity: float = Field(default=0, ge=0)
    uom: str = ""
    price: float = Field(default=0, ge=0)


class ActionRecord(BaseModel):
    description: str = ""
    start_time: Optional[str] = None
    finish_time: Optional[str] = None


def materials_cost(materials: list[MaterialItem]) -> Decimal:
    """Total cost of the materials used: the sum of quantity × unit price."""

    total = sum(
        (to_decimal(item.quantity) * to_decimal(item.price) for item in materials),
        Decimal("0"),
    )
    return quantize_currency(total)


class LocationDetails(BaseModel):
    location: str = Field(min_length=1)
    checked_out_by: str = ""
    checked_in_by: Optional[str] = None


class WorkOrderDetails(BaseModel):
    model_config = {"extra": "ignore"}

    technician: str = ""
    duration_minutes: int = Field(default=0, ge=0)
    downtime_minutes: int = Field(default=0, ge=0)
    notes: Optional[str] = None
    materials_used: list[MaterialItem] = Field(default_factory=list)
    actions: list[ActionRecord] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cost(self) -> float:
        return float(materials_cost(self.materials_used))


class MaintenanceDetails(WorkOrderDetails):
    maintenance_type: str = "preventive"


class RepairDetails(WorkOrderDetails):
    failure_description: str = ""
    root_cause: str = ""


class EventBase(BaseModel):
    event_id: Optional[str] = None
    asset_id: str = Field(min_length=1)
    asset_name: str = ""
    event_date: str = Field(min_length=1)
    event_start: Optional[str] = None
    event_finish: Optional[str] = None
    recorded_by: str = ""
    description: str = ""
    status: str = ""
    created_at: Optional[str] = None


class LocationEventRecord(EventBase):
    event_type: Literal["location"] = "location"
    location: LocationDetails


class MaintenanceEventRecord(EventBase):
    event_type: Literal["maintenance"] = "maintenance"
    maintenance: MaintenanceDetails


class RepairEventRecord(EventBase):
    event_type: Literal["repair"] = "repair"
    repair: RepairDetails


EventRecord = Annotated[
    Union[LocationEventRecord, MaintenanceEventRecord, RepairEventRecord],
    Field(discriminator="event_type"),
]


class EventAmendment(BaseModel):
    event_start: Optional[str] = None
    event_finish: Optional[str] = None
    status: str = ""


class LocationEventUpdate(EventAmendment):
    event_type: Literal["location"] = "location"
    location: LocationDetails


class MaintenanceEventUpdate(EventAmendment):
    event_type: Literal["maintenance"] = "maintenance"
    maintenance: MaintenanceDetails


class RepairEventUpdate(EventAmendment):
    event_type: Literal["repair"] = "repair"
    repair: RepairDetails


EventUpdate = Annotated[
    Union[LocationEventUpdate, MaintenanceEventUpdate, RepairEventUpdate],
    Field(discriminator="event_type"),
]
