"""SQLAlchemy model for the root asset catalog entry."""

from __future__ import annotations

from sqlalchemy import Column, Float, Integer, Text

from ..db.session import Base


class Asset(Base):
    """A tracked piece of equipment.

    ``id`` is the vendor/asset-tag string entered by the user, not a generated
    key. Book value is computed on read and therefore has no column.
    """

    __tablename__ = "assets"

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    brand = Column(Text, nullable=False, default="")
    model = Column(Text, nullable=False, default="")
    serial_number = Column(Text, nullable=False, default="")
    part_number = Column(Text, nullable=False, default="")
    category = Column(Text, nullable=False, default="", index=True)
    sub_category = Column(Text, nullable=False, default="")
    department_owner = Column(Text, nullable=False, default="")
    primary_user = Column(Text, nullable=False, default="")
    purchase_price = Column(Float, nullable=False, default=0)
    purchase_order_number = Column(Text, nullable=False, default="")
    vendor_supplier = Column(Text, nullable=False, default="")
    purchase_date = Column(Text, nullable=True)
    expected_lifespan = Column(Integer, nullable=False, default=0)
    depreciation_method = Column(Text, nullable=False, default="Straight-Line")
    depreciation_rate = Column(Float, nullable=False, default=0)
    status = Column(Text, nullable=False, default="Active")
    warranty = Column(Text, nullable=False, default="")
    active_date = Column(Text, nullable=True)
    image_url = Column(Text, nullable=False, default="")
    notes = Column(Text, nullable=False, default="")
    created_at = Column(Text, nullable=False)


__all__ = ["Asset"]
