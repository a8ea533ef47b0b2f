"""
workflow.py — Workflow Transition Endpoints (toolbar / stage buttons)

Endpoints:
- POST /api/v1/workflow/scenarios/{scenario}          → new scenario treetable
- POST /api/v1/workflow/{treetable_id}/cad/start      → CAD work started
- POST /api/v1/workflow/{treetable_id}/cad/finish     → CAD work finished (duration)
- POST /api/v1/workflow/{treetable_id}/review         → review started
- POST /api/v1/workflow/{treetable_id}/complete       → EBOM completion (409 when outside ±10%)
- POST /api/v1/workflow/{treetable_id}/end            → process ended
- GET  /api/v1/workflow/{treetable_id}/events         → recorded usage events

Every transition records a usage event after its own effect; a failed event
write never fails the request.
"""

import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from ebom.core.config import settings
from ebom.core.database import get_db
from ebom.core.logging import get_logger
from ebom.services.lca import UnknownScenarioError
from ebom.services.treetables import TreetableNotFoundError
from ebom.services.usage_events import list_usage_events
from ebom.services.workflow import (
    CompletionRefusedError,
    complete_ebom,
    end_process,
    finish_cad_work,
    start_cad_work,
    start_review,
    start_scenario,
)

logger = get_logger(__name__)

router = APIRouter(
    prefix="/workflow",
    tags=["workflow"]
)

# -----------------------------------------------------------------------------
# Schemas
# -----------------------------------------------------------------------------


class ScenarioStartResponse(BaseModel):
    treetable_id: str
    name: str
    scenario: str
    sample_file: str
    url: str


class CadStartRequest(BaseModel):
    scenario: Optional[str] = None


class CadFinishRequest(BaseModel):
    scenario: Optional[str] = None
    started_at: datetime.datetime


class CadWorkResponse(BaseModel):
    started_at: datetime.datetime
    done_at: Optional[datetime.datetime] = None
    duration_ms: Optional[int] = None


class CompleteRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    scenario: str
    total_kg_co2e: Optional[float] = None


class CompleteResponse(BaseModel):
    completed: bool
    total_kg_co2e: float
    threshold_kg_co2e: float
    message: str
    next_url: str = "/scenario"


class NavigationResponse(BaseModel):
    ok: bool = True
    next_url: Optional[str] = None


class UsageEventOut(BaseModel):
    id: int
    step: str
    action: str
    treetable_id: Optional[str] = None
    duration_ms: Optional[int] = None
    detail: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime.datetime] = None


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------


@router.post("/scenarios/{scenario}", response_model=ScenarioStartResponse)
def post_start_scenario(scenario: str, db: Session = Depends(get_db)):
    try:
        table, sample_file = start_scenario(db, scenario)
    except UnknownScenarioError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ScenarioStartResponse(
        treetable_id=table.id,
        name=table.name,
        scenario=scenario,
        sample_file=sample_file,
        url=f"/treetable/{table.id}",
    )


@router.post("/{treetable_id}/cad/start", response_model=CadWorkResponse)
def post_cad_start(treetable_id: str, request: CadStartRequest, db: Session = Depends(get_db)):
    span = start_cad_work(db, treetable_id, scenario=request.scenario)
    return CadWorkResponse(started_at=span.started_at)


@router.post("/{treetable_id}/cad/finish", response_model=CadWorkResponse)
def post_cad_finish(treetable_id: str, request: CadFinishRequest, db: Session = Depends(get_db)):
    span = finish_cad_work(db, treetable_id, request.started_at, scenario=request.scenario)
    return CadWorkResponse(started_at=span.started_at, done_at=span.done_at, duration_ms=span.duration_ms)


@router.post("/{treetable_id}/review", response_model=NavigationResponse)
def post_review(treetable_id: str, db: Session = Depends(get_db)):
    return NavigationResponse(next_url=start_review(db, treetable_id))


@router.post("/{treetable_id}/complete", response_model=CompleteResponse)
def post_complete(treetable_id: str, request: CompleteRequest, db: Session = Depends(get_db)):
    """
    POST /workflow/{treetable_id}/complete

    Refused with 409 when the total (given, or computed from the stored nodes)
    is outside the scenario ceiling ±10%.
    """
    try:
        check = complete_ebom(
            db,
            treetable_id,
            request.scenario,
            total_kg_co2e=request.total_kg_co2e,
            unassigned_labels=settings.LCA_UNASSIGNED_MATERIAL_LABELS,
        )
    except TreetableNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except UnknownScenarioError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CompletionRefusedError as e:
        raise HTTPException(status_code=409, detail=e.check.message)
    except Exception as e:
        logger.exception("Error completing EBOM %s: %s", treetable_id, e)
        raise HTTPException(status_code=500, detail=f"Completion check failed: {str(e)}")

    return CompleteResponse(
        completed=True,
        total_kg_co2e=check.total_kg_co2e,
        threshold_kg_co2e=check.threshold_kg_co2e,
        message=check.message,
    )


@router.post("/{treetable_id}/end", response_model=NavigationResponse)
def post_end(treetable_id: str, db: Session = Depends(get_db)):
    end_process(db, treetable_id)
    return NavigationResponse()


@router.get("/{treetable_id}/events", response_model=List[UsageEventOut])
def get_events(treetable_id: str, db: Session = Depends(get_db)):
    return [
        UsageEventOut(
            id=e.id,
            step=e.step,
            action=e.action,
            treetable_id=e.treetable_id,
            duration_ms=e.duration_ms,
            detail=e.detail,
            created_at=e.created_at,
        )
        for e in list_usage_events(db, treetable_id=treetable_id)
    ]
