"""Lifecycle events: one shared ``events`` row plus exactly one type-specific row."""

from __future__ import annotations

from sqlalchemy import JSON, Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from ..db.session import Base


class Event(Base):
    __tablename__ = "events"

    event_id = Column(Text, primary_key=True)
    asset_id = Column(Text, ForeignKey("assets.id"), nullable=False, index=True)
    asset_name = Column(Text, nullable=False, default="")
    event_type = Column(Text, nullable=False)
    event_date = Column(Text, nullable=False)
    event_start = Column(Text, nullable=True)
    event_finish = Column(Text, nullable=True)
    recorded_by = Column(Text, nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    status = Column(Text, nullable=False, default="")
    created_at = Column(Text, nullable=False)

    location = relationship("LocationEvent", uselist=False, lazy="joined", cascade="all, delete-orphan")
    maintenance = relationship("MaintenanceEvent", uselist=False, lazy="joined", cascade="all, delete-orphan")
    repair = relationship("RepairEvent", uselist=False, lazy="joined", cascade="all, delete-orphan")


class LocationEvent(Base):
    __tablename__ = "location_events"

    event_id = Column(Text, ForeignKey("events.event_id"), primary_key=True)
    location = Column(Text, nullable=False, default="")
    checked_out_by = Column(Text, nullable=False, default="")
    checked_in_by = Column(Text, nullable=True)


class MaintenanceEvent(Base):
    __tablename__ = "maintenance_events"

    event_id = Column(Text, ForeignKey("events.event_id"), primary_key=True)
    maintenance_type = Column(Text, nullable=False, default="preventive")
    technician = Column(Text, nullable=False, default="")
    duration_minutes = Column(Integer, nullable=False, default=0)
    downtime_minutes = Column(Integer, nullable=False, default=0)
    notes = Column(Text, nullable=True)
    materials_used = Column(JSON, nullable=False, default=list)
    actions = Column(JSON, nullable=False, default=list)


class RepairEvent(Base):
    __tablename__ = "repair_events"

    event_id = Column(Text, ForeignKey("events.event_id"), primary_key=True)
    failure_description = Column(Text, nullable=False, default="")
    technician = Column(Text, nullable=False, default="")
    duration_minutes = Column(Integer, nullable=False, default=0)
    downtime_minutes = Column(Integer, nullable=False, default=0)
    root_cause = Column(Text, nullable=False, default="")
    notes = Column(Text, nullable=True)
    materials_used = Column(JSON, nullable=False, default=list)
    actions = Column(JSON, nullable=False, default=list)


# Maps ``Event.event_type`` to the relationship attribute and detail model.
DETAIL_MODELS = {
    "location": LocationEvent,
    "maintenance": MaintenanceEvent,
    "repair": RepairEvent,
}


__all__ = ["Event", "LocationEvent", "MaintenanceEvent", "RepairEvent", "DETAIL_MODELS"]
