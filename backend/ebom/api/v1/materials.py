"""
materials.py — Material Catalog Endpoints

Endpoints:
- GET /api/v1/materials        → full catalog, or ?q= substring search for pickers
- PUT /api/v1/materials        → create / update one material by label
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from ebom.core.database import get_db
from ebom.core.logging import get_logger
from ebom.services.lca import find_materials_containing
from ebom.services.material_catalog import list_materials, upsert_material

logger = get_logger(__name__)

router = APIRouter(
    prefix="/materials",
    tags=["materials"]
)


class MaterialBody(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    label: str
    emission_factor: Optional[float] = None


@router.get("/", response_model=List[MaterialBody])
def get_materials(
    q: Optional[str] = Query(None, description="Case-insensitive substring filter on label"),
    db: Session = Depends(get_db),
):
    materials = list_materials(db)
    if q:
        materials = find_materials_containing(materials, q)
    return [MaterialBody(label=m.label, emission_factor=m.emission_factor) for m in materials]


@router.put("/", response_model=MaterialBody)
def put_material(body: MaterialBody, db: Session = Depends(get_db)):
    try:
        material = upsert_material(db, body.label, body.emission_factor)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return MaterialBody(label=material.label, emission_factor=material.emission_factor)
