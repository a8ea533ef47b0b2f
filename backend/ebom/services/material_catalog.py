"""
material_catalog.py — Material Catalog Access

Reads and maintains the global material → emission factor table.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.orm import Session

from ebom.core.logging import get_logger
from ebom.models.material import Material
from ebom.services.lca.types import MaterialEntry

logger = get_logger(__name__)


def list_materials(db: Session) -> List[MaterialEntry]:
    """Catalog in id order, which is the order duplicate labels are resolved in."""
    return [
        MaterialEntry(label=m.label, emission_factor=m.emission_factor)
        for m in db.query(Material).order_by(Material.id).all()
    ]


def upsert_material(db: Session, label: str, emission_factor: Optional[float]) -> Material:
    """
    Create or update a catalog row by exact label.
    """
    label = label.strip()
    if not label:
        raise ValueError("Material label must not be empty")

    material = db.query(Material).filter(Material.label == label).one_or_none()
    if material is None:
        material = Material(label=label, emission_factor=emission_factor)
        db.add(material)
        logger.info("Added material %s (EF %s)", label, emission_factor)
    else:
        material.emission_factor = emission_factor
        logger.info("Updated material %s (EF %s)", label, emission_factor)

    db.commit()
    db.refresh(material)
    return material
