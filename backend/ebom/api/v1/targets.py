"""
targets.py — Yearly LCA Target Endpoints

Endpoints:
- GET /api/v1/lca-targets/{treetable_id} → stored targets + blank rows for upcoming years
- PUT /api/v1/lca-targets/{treetable_id} → upsert on (treetable_id, year)
"""

import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from ebom.core.config import settings
from ebom.core.database import get_db
from ebom.core.logging import get_logger
from ebom.services.targets import TargetRow, list_targets, upsert_targets
from ebom.services.workflow import record_target_update

logger = get_logger(__name__)

router = APIRouter(
    prefix="/lca-targets",
    tags=["lca-targets"]
)


class TargetIn(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    year: int
    target_kg_co2e: float = 0.0
    notes: Optional[str] = None


class TargetsSaveRequest(BaseModel):
    targets: List[TargetIn]


class TargetOut(BaseModel):
    id: Optional[str] = None
    treetable_id: str
    year: int
    target_kg_co2e: float
    notes: Optional[str] = None


def _out(row: TargetRow) -> TargetOut:
    return TargetOut(
        id=row.id,
        treetable_id=row.treetable_id,
        year=row.year,
        target_kg_co2e=row.target_kg_co2e,
        notes=row.notes,
    )


@router.get("/{treetable_id}", response_model=List[TargetOut])
def get_targets(treetable_id: str, db: Session = Depends(get_db)):
    """
    GET /lca-targets/{treetable_id}

    Unsaved rows (id = null) are returned for missing years starting at the
    current year.
    """
    rows = list_targets(
        db,
        treetable_id,
        current_year=datetime.date.today().year,
        default_years=settings.LCA_TARGET_DEFAULT_YEARS,
    )
    return [_out(r) for r in rows]


@router.put("/{treetable_id}", response_model=List[TargetOut])
def save_targets(treetable_id: str, request: TargetsSaveRequest, db: Session = Depends(get_db)):
    """
    PUT /lca-targets/{treetable_id}

    Last write wins per (treetable_id, year).
    """
    try:
        saved = upsert_targets(db, treetable_id, [t.model_dump() for t in request.targets])
    except Exception as e:
        db.rollback()
        logger.error(f"Error saving LCA targets for {treetable_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to save targets: {str(e)}")

    record_target_update(db, treetable_id, [r.year for r in saved])
    return [_out(r) for r in saved]
