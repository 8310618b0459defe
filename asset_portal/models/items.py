"""Complementary and component items plus the relation tables tying them to assets."""

from __future__ import annotations

from sqlalchemy import JSON, Column, Float, ForeignKey, Integer, Text

from ..db.session import Base


class ComplementaryItem(Base):
    """Auxiliary equipment shipped or used with an asset.

    ``archive`` holds the ordered purchase/status history as a JSON array; the
    last element is the item's current state. ``archive_version`` increases on
    every archive write and backs the optimistic check in ``crud.archive``.
    """

    __tablename__ = "complementary_items"

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    brand = Column(Text, nullable=False, default="")
    model = Column(Text, nullable=False, default="")
    category = Column(Text, nullable=False, default="")
    sub_category = Column(Text, nullable=False, default="")
    department_owner = Column(Text, nullable=False, default="")
    expected_lifespan = Column(Integer, nullable=False, default=0)
    depreciation_method = Column(Text, nullable=False, default="Straight-Line")
    depreciation_rate = Column(Float, nullable=False, default=0)
    notes = Column(Text, nullable=False, default="")
    archive = Column(JSON, nullable=False, default=list)
    archive_version = Column(Integer, nullable=False, default=0)


class ComponentItem(Base):
    """A sub-part of an asset. Lighter than a complementary item: no category or depreciation settings."""

    __tablename__ = "component_items"

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    brand = Column(Text, nullable=False, default="")
    model = Column(Text, nullable=False, default="")
    expected_lifespan = Column(Integer, nullable=False, default=0)
    notes = Column(Text, nullable=False, default="")
    archive = Column(JSON, nullable=False, default=list)
    archive_version = Column(Integer, nullable=False, default=0)


class ComplementaryRelation(Base):
    __tablename__ = "complementary_relations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    parent_id = Column(Text, ForeignKey("assets.id"), nullable=False, index=True)
    complementary_id = Column(Text, ForeignKey("complementary_items.id"), nullable=False, index=True)
    relation = Column(Text, nullable=False, default="")


class ComponentRelation(Base):
    __tablename__ = "component_relations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    parent_id = Column(Text, ForeignKey("assets.id"), nullable=False, index=True)
    component_id = Column(Text, ForeignKey("component_items.id"), nullable=False, index=True)
    relation = Column(Text, nullable=False, default="")


__all__ = ["ComplementaryItem", "ComponentItem", "ComplementaryRelation", "ComponentRelation"]
