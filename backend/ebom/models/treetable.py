"""
treetable.py — ORM Models for EBOM Tables and Their Line Nodes

Purpose:
- `Treetable` is the header row for one imported / edited bill of materials.
- `TreetableNode` is one BOM line. Nodes form a hierarchy via parent_id, but
  hierarchy and line_no only matter for display; the LCA computation reads
  material + total_mass_kg only.

Used by:
- services/treetables.py (create, import, list)
- services/reports.py (row source for the LCA report)
"""

import datetime
import uuid

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, String
from sqlalchemy.orm import relationship

from ebom.core.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class Treetable(Base):
    __tablename__ = "treetables"

    id = Column(String(36), primary_key=True, default=_new_id)

    # e.g. "EBOM-20251019093012" or "Scenario-size-change-20251019093012"
    name = Column(String, nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow)

    nodes = relationship(
        "TreetableNode",
        back_populates="treetable",
        cascade="all, delete-orphan",
        foreign_keys="TreetableNode.treetable_id",
    )

    def __repr__(self):
        return f"<Treetable {self.name} ({self.id})>"


class TreetableNode(Base):
    __tablename__ = "treetable_nodes"

    id = Column(String(36), primary_key=True, default=_new_id)

    treetable_id = Column(String(36), ForeignKey("treetables.id"), nullable=False)
    parent_id = Column(String(36), ForeignKey("treetable_nodes.id"), nullable=True)

    # Display / identity fields
    line_no = Column(String, nullable=True)       # "1", "1.1", "2" ...
    part_no = Column(String, nullable=True)
    revision = Column(String, nullable=True)
    name = Column(String, nullable=True)

    # Free-form material label as entered or imported
    material = Column(String, nullable=True)

    # Quantity and mass
    qty = Column(Float, nullable=True)
    qty_uom = Column(String, nullable=True)       # ea, kg, g, lb
    mass_per_ea_kg = Column(Float, nullable=True)
    total_mass_kg = Column(Float, nullable=True)  # qty * mass_per_ea_kg

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    treetable = relationship("Treetable", back_populates="nodes", foreign_keys=[treetable_id])
    parent = relationship("TreetableNode", remote_side=[id])

    __table_args__ = (
        Index("idx_treetable_nodes_treetable", "treetable_id"),
    )

    def __repr__(self):
        return f"<TreetableNode {self.line_no} | {self.material} | {self.total_mass_kg}>"
