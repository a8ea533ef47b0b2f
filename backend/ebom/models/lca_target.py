"""
lca_target.py — ORM Model for User-Defined Yearly Carbon Targets

Purpose:
- Store the carbon ceiling (kgCO2e) a user sets for a treetable and a year.
- One row per (treetable_id, year); saves upsert on that compound key and
  concurrent edits are last-write-wins.

treetable_id is deliberately not a foreign key: the target editor can be
opened with the "default" table id before any treetable exists.
"""

import uuid

from sqlalchemy import Column, Float, Integer, String, UniqueConstraint

from ebom.core.database import Base


class LcaTarget(Base):
    __tablename__ = "lca_targets"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    treetable_id = Column(String, nullable=False, index=True)
    year = Column(Integer, nullable=False)

    target_kg_co2e = Column(Float, nullable=False, default=0.0)
    notes = Column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint("treetable_id", "year", name="uq_lca_targets_treetable_year"),
    )

    def __repr__(self):
        return f"<LcaTarget {self.treetable_id} | {self.year} | {self.target_kg_co2e}>"
