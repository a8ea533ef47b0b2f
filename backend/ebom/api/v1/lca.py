"""
lca.py — LCA Computation API Endpoints (no database)

Purpose:
- Expose the pure carbon aggregation and target evaluation to clients that
  hold the rows in editor state (the BOM grid recomputes on every edit).

Endpoints:
- GET  /api/v1/lca/thresholds        → static scenario ceilings
- POST /api/v1/lca/aggregate         → per-material summaries, totals, per-line carbon
- POST /api/v1/lca/evaluate          → percent of target + status
- POST /api/v1/lca/completion-check  → ±10% completion gate

Non-finite numbers are rejected by the request schemas (422).
"""

from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict

from ebom.core.config import settings
from ebom.core.logging import get_logger
from ebom.services.lca import (
    SCENARIO_THRESHOLDS,
    AggregationResult,
    BomRow,
    LcaReport,
    MaterialEntry,
    UnknownScenarioError,
    aggregate,
    carbon_shares,
    check_completion_gate,
    evaluate,
    get_static_threshold,
    line_carbon,
    mass_carbon_series,
    max_carbon_indexes,
)

logger = get_logger(__name__)

router = APIRouter(
    prefix="/lca",
    tags=["lca"]
)

# -----------------------------------------------------------------------------
# Schemas
# -----------------------------------------------------------------------------


class FiniteModel(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)


class BomRowIn(FiniteModel):
    material: Optional[str] = None
    total_mass_kg: Optional[float] = None
    line_no: Optional[str] = None

    def to_row(self) -> BomRow:
        return BomRow(material_name=self.material, total_mass_kg=self.total_mass_kg)


class MaterialIn(FiniteModel):
    label: str
    emission_factor: Optional[float] = None

    def to_entry(self) -> MaterialEntry:
        return MaterialEntry(label=self.label, emission_factor=self.emission_factor)


class AggregateRequest(FiniteModel):
    rows: List[BomRowIn] = []
    materials: List[MaterialIn] = []


class MaterialSummaryOut(BaseModel):
    key: str
    label: str
    mass_kg: float
    carbon_kg_co2e: float
    row_count: int
    matched: bool


class CarbonShareOut(BaseModel):
    label: str
    carbon_kg_co2e: float
    percent: float


class MassCarbonOut(BaseModel):
    label: str
    mass_kg: float
    carbon_kg_co2e: float


class AggregateResponse(BaseModel):
    summaries: List[MaterialSummaryOut]
    total_carbon_kg_co2e: float
    total_mass_kg: float
    excluded_row_count: int
    carbon_shares: List[CarbonShareOut]
    mass_carbon: List[MassCarbonOut]
    line_carbon_kg_co2e: List[float] = []
    max_carbon_indexes: List[int] = []


class EvaluateRequest(FiniteModel):
    total_kg_co2e: float
    threshold_kg_co2e: Optional[float] = None
    scenario: Optional[str] = None


class EvaluateResponse(BaseModel):
    total_kg_co2e: float
    threshold_kg_co2e: float
    percent: float
    status: str


class CompletionCheckResponse(BaseModel):
    allowed: bool
    total_kg_co2e: float
    threshold_kg_co2e: float
    lower_kg_co2e: float
    upper_kg_co2e: float
    message: str


# -----------------------------------------------------------------------------
# Converters (shared with reports.py)
# -----------------------------------------------------------------------------


def aggregation_response(result: AggregationResult) -> AggregateResponse:
    return AggregateResponse(
        summaries=[
            MaterialSummaryOut(
                key=s.key,
                label=s.label,
                mass_kg=s.mass_kg,
                carbon_kg_co2e=s.carbon_kg_co2e,
                row_count=s.row_count,
                matched=s.matched,
            )
            for s in result.summaries.values()
        ],
        total_carbon_kg_co2e=result.total_carbon_kg_co2e,
        total_mass_kg=result.total_mass_kg,
        excluded_row_count=result.excluded_row_count,
        carbon_shares=[CarbonShareOut(**vars(c)) for c in carbon_shares(result)],
        mass_carbon=[MassCarbonOut(**vars(p)) for p in mass_carbon_series(result)],
    )


def evaluation_response(report: LcaReport) -> EvaluateResponse:
    ev = report.evaluation
    return EvaluateResponse(
        total_kg_co2e=ev.total_kg_co2e,
        threshold_kg_co2e=ev.threshold_kg_co2e,
        percent=ev.percent,
        status=ev.status.value,
    )


def _threshold_from_request(request: EvaluateRequest) -> float:
    if request.threshold_kg_co2e is not None:
        return request.threshold_kg_co2e
    if request.scenario is None:
        raise HTTPException(status_code=400, detail="Either threshold_kg_co2e or scenario is required")
    try:
        return get_static_threshold(request.scenario)
    except UnknownScenarioError as e:
        raise HTTPException(status_code=400, detail=str(e))


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------


@router.get("/thresholds", response_model=Dict[str, float])
async def get_thresholds():
    """
    GET /lca/thresholds

    Static carbon ceilings (kgCO2e) per scenario.
    """
    return {key.value: value for key, value in SCENARIO_THRESHOLDS.items()}


@router.post("/aggregate", response_model=AggregateResponse)
async def aggregate_rows(request: AggregateRequest):
    """
    POST /lca/aggregate

    Aggregate mass and carbon by material for rows held by the client.
    Also returns per-line carbon in request order and the index(es) of the
    heaviest emitter for highlighting.
    """
    rows = [r.to_row() for r in request.rows]
    materials = [m.to_entry() for m in request.materials]
    unassigned = settings.LCA_UNASSIGNED_MATERIAL_LABELS

    result = aggregate(rows, materials, unassigned_labels=unassigned)
    per_line = line_carbon(rows, materials, unassigned_labels=unassigned)

    response = aggregation_response(result)
    response.line_carbon_kg_co2e = per_line
    response.max_carbon_indexes = max_carbon_indexes(per_line)
    return response


@router.post("/evaluate", response_model=EvaluateResponse)
async def evaluate_total(request: EvaluateRequest):
    """
    POST /lca/evaluate

    Percent of the ceiling consumed and the exceeded / achieved / under status.
    An explicit threshold_kg_co2e wins over scenario.
    """
    threshold = _threshold_from_request(request)
    ev = evaluate(request.total_kg_co2e, threshold)
    return EvaluateResponse(
        total_kg_co2e=ev.total_kg_co2e,
        threshold_kg_co2e=ev.threshold_kg_co2e,
        percent=ev.percent,
        status=ev.status.value,
    )


@router.post("/completion-check", response_model=CompletionCheckResponse)
async def completion_check(request: EvaluateRequest):
    """
    POST /lca/completion-check

    Whether the total sits within threshold ±10% (inclusive). Pure check; use
    the workflow endpoint to actually complete an EBOM.
    """
    threshold = _threshold_from_request(request)
    return CompletionCheckResponse(**vars(check_completion_gate(request.total_kg_co2e, threshold)))
