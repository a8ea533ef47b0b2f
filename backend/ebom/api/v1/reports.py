"""
reports.py — Stored-Treetable LCA Report Endpoint

Endpoints:
- GET /api/v1/reports/{treetable_id}?scenario=<key>   → evaluate against the static ceiling
- GET /api/v1/reports/{treetable_id}?year=<yyyy>      → evaluate against the stored yearly target
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ebom.api.v1.lca import AggregateResponse, EvaluateResponse, aggregation_response, evaluation_response
from ebom.core.config import settings
from ebom.core.database import get_db
from ebom.core.logging import get_logger
from ebom.services.lca import UnknownScenarioError
from ebom.services.reports import (
    TargetNotFoundError,
    ThresholdSelectionError,
    build_treetable_report,
)
from ebom.services.treetables import TreetableNotFoundError

logger = get_logger(__name__)

router = APIRouter(
    prefix="/reports",
    tags=["reports"]
)


class ReportTotals(BaseModel):
    carbon_kgco2e: float
    mass_kg: float


class ReportResponse(BaseModel):
    treetable_id: str
    threshold_source: str
    totals: ReportTotals
    aggregation: AggregateResponse
    evaluation: EvaluateResponse


@router.get("/{treetable_id}", response_model=ReportResponse)
def get_report(
    treetable_id: str,
    scenario: Optional[str] = Query(None, description="Scenario key for the static ceiling"),
    year: Optional[int] = Query(None, description="Year of a stored LCA target"),
    db: Session = Depends(get_db),
):
    """
    GET /reports/{treetable_id}

    Aggregates the stored nodes of a treetable and evaluates the total against
    exactly one threshold source (scenario or year).
    """
    try:
        result = build_treetable_report(
            db,
            treetable_id,
            scenario=scenario,
            year=year,
            unassigned_labels=settings.LCA_UNASSIGNED_MATERIAL_LABELS,
        )
    except (ThresholdSelectionError, UnknownScenarioError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (TreetableNotFoundError, TargetNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.exception("Error building LCA report for %s: %s", treetable_id, e)
        raise HTTPException(status_code=500, detail=f"Failed to build report: {str(e)}")

    report = result.report
    return ReportResponse(
        treetable_id=result.treetable_id,
        threshold_source=result.threshold_source,
        totals=ReportTotals(
            carbon_kgco2e=report.aggregation.total_carbon_kg_co2e,
            mass_kg=report.aggregation.total_mass_kg,
        ),
        aggregation=aggregation_response(report.aggregation),
        evaluation=evaluation_response(report),
    )
