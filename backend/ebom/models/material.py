"""
material.py — ORM Model for the Material Emission-Factor Catalog

Purpose:
- One row per material label with its emission factor (kgCO2e per kg).
- Scoped globally, not per treetable.

Labels are matched against BOM material names after trim + lowercase, so the
catalog should not hold two labels that normalize to the same value; if it
does, the one with the lowest id wins.
"""

from sqlalchemy import Column, Float, Integer, String

from ebom.core.database import Base


class Material(Base):
    __tablename__ = "materials"

    id = Column(Integer, primary_key=True, index=True)

    # Display name, e.g. "Steel", "Aluminum 6061"
    label = Column(String, unique=True, nullable=False)

    # kgCO2e emitted per kg of material; NULL treated as 0
    emission_factor = Column(Float, nullable=True)

    def __repr__(self):
        return f"<Material {self.label} | EF {self.emission_factor}>"
