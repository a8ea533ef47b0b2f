"""
treetables.py — EBOM Table & Node Endpoints

Endpoints:
- POST /api/v1/treetables                 → create a table header
- POST /api/v1/treetables/{id}/nodes      → save rows (replace | append)
- GET  /api/v1/treetables/{id}/nodes      → rows with per-line carbon for the grid

Rows arrive already extracted from the spreadsheet / CAD export.
"""

import datetime
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from ebom.core.config import settings
from ebom.core.database import get_db
from ebom.core.logging import get_logger
from ebom.services.lca import line_carbon, max_carbon_indexes
from ebom.services.material_catalog import list_materials
from ebom.services.treetables import (
    InvalidImportError,
    TreetableNotFoundError,
    create_treetable,
    list_nodes,
    nodes_to_bom_rows,
    save_nodes,
)

logger = get_logger(__name__)

router = APIRouter(
    prefix="/treetables",
    tags=["treetables"]
)

# -----------------------------------------------------------------------------
# Schemas
# -----------------------------------------------------------------------------


class TreetableCreateRequest(BaseModel):
    name: Optional[str] = None


class TreetableOut(BaseModel):
    ok: bool = True
    treetable_id: str
    name: str
    url: str


class NodeIn(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    line_no: str
    parent_line_no: Optional[str] = None
    part_no: Optional[str] = None
    revision: Optional[str] = None
    name: Optional[str] = None
    material: Optional[str] = None
    qty: Optional[float] = None
    qty_uom: Optional[str] = None
    mass_per_ea_kg: Optional[float] = None
    total_mass_kg: Optional[float] = None


class NodesSaveRequest(BaseModel):
    rows: List[NodeIn]
    mode: Literal["replace", "append"] = "replace"


class NodesSaveResponse(BaseModel):
    ok: bool
    treetable_id: str
    saved: int


class NodeOut(BaseModel):
    id: str
    parent_id: Optional[str] = None
    line_no: Optional[str] = None
    part_no: Optional[str] = None
    revision: Optional[str] = None
    name: Optional[str] = None
    material: Optional[str] = None
    qty: Optional[float] = None
    qty_uom: Optional[str] = None
    mass_per_ea_kg: Optional[float] = None
    total_mass_kg: Optional[float] = None
    carbon_kg_co2e: float
    is_max_carbon: bool
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------


@router.post("/", response_model=TreetableOut)
def create_table(request: TreetableCreateRequest, db: Session = Depends(get_db)):
    table = create_treetable(db, request.name)
    return TreetableOut(treetable_id=table.id, name=table.name, url=f"/treetable/{table.id}")


@router.post("/{treetable_id}/nodes", response_model=NodesSaveResponse)
def save_table_nodes(treetable_id: str, request: NodesSaveRequest, db: Session = Depends(get_db)):
    """
    POST /treetables/{treetable_id}/nodes

    replace: existing rows are deleted first. append: rows are added after them.
    """
    try:
        nodes = save_nodes(db, treetable_id, [r.model_dump() for r in request.rows], request.mode)
    except TreetableNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidImportError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        db.rollback()
        logger.exception("Error saving nodes for %s: %s", treetable_id, e)
        raise HTTPException(status_code=500, detail=f"insert node failed: {str(e)}")

    return NodesSaveResponse(ok=True, treetable_id=treetable_id, saved=len(nodes))


@router.get("/{treetable_id}/nodes", response_model=List[NodeOut])
def get_table_nodes(treetable_id: str, db: Session = Depends(get_db)):
    """
    GET /treetables/{treetable_id}/nodes

    Each row carries its own carbon (total_mass_kg × EF); the row(s) with the
    highest positive carbon are flagged with is_max_carbon.
    """
    try:
        nodes = list_nodes(db, treetable_id)
    except TreetableNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    carbon = line_carbon(
        nodes_to_bom_rows(nodes),
        list_materials(db),
        unassigned_labels=settings.LCA_UNASSIGNED_MATERIAL_LABELS,
    )
    peaks = set(max_carbon_indexes(carbon))

    return [
        NodeOut(
            id=n.id,
            parent_id=n.parent_id,
            line_no=n.line_no,
            part_no=n.part_no,
            revision=n.revision,
            name=n.name,
            material=n.material,
            qty=n.qty,
            qty_uom=n.qty_uom,
            mass_per_ea_kg=n.mass_per_ea_kg,
            total_mass_kg=n.total_mass_kg,
            carbon_kg_co2e=carbon[i],
            is_max_carbon=i in peaks,
            created_at=n.created_at,
            updated_at=n.updated_at,
        )
        for i, n in enumerate(nodes)
    ]
