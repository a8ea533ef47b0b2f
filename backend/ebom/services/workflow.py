"""
workflow.py — EBOM Workflow Transitions

Purpose:
- Implement the toolbar / stage transitions of the product-development flow:
    * scenario started (fresh treetable + sample dataset name)
    * CAD work started / finished
    * EBOM data review started
    * EBOM completion (guarded by the ±10% carbon gate)
    * LCA target edited
    * Product development process ended
- Each transition performs its own effect first and then records a usage
  event. Event logging is best-effort (see services/usage_events.py).

The LCA computation never logs; this module is where results turn into events.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from sqlalchemy.orm import Session

from ebom.core.logging import get_logger
from ebom.models.treetable import Treetable
from ebom.services.lca import (
    UNASSIGNED_MATERIAL_LABELS,
    CompletionCheck,
    UnknownScenarioError,
    aggregate,
    check_completion_gate,
    get_static_threshold,
    parse_scenario,
)
from ebom.services.lca.thresholds import SCENARIO_SAMPLE_FILES
from ebom.services.material_catalog import list_materials
from ebom.services.treetables import (
    auto_name,
    create_treetable,
    get_treetable,
    list_nodes,
    nodes_to_bom_rows,
)
from ebom.services.usage_events import log_usage_event

logger = get_logger(__name__)

UNKNOWN_CATEGORY = "unknown"


class CompletionRefusedError(Exception):
    """Raised when the EBOM total falls outside the completion band."""

    def __init__(self, check: CompletionCheck):
        super().__init__(check.message)
        self.check = check


@dataclass(frozen=True)
class CadWorkSpan:
    started_at: datetime.datetime
    done_at: Optional[datetime.datetime] = None

    @property
    def duration_ms(self) -> Optional[int]:
        if self.done_at is None:
            return None
        return int((self.done_at - self.started_at).total_seconds() * 1000)


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _category(scenario: Optional[str]) -> str:
    return scenario or UNKNOWN_CATEGORY


def start_cad_work(
    db: Session,
    treetable_id: Optional[str],
    scenario: Optional[str] = None,
    started_at: Optional[datetime.datetime] = None,
) -> CadWorkSpan:
    span = CadWorkSpan(started_at=started_at or _now())
    log_usage_event(
        db,
        _category(scenario),
        "Starting CAD work",
        {"source": "CAD", "startAt": span.started_at.isoformat()},
        treetable_id=treetable_id,
    )
    return span


def finish_cad_work(
    db: Session,
    treetable_id: Optional[str],
    started_at: datetime.datetime,
    scenario: Optional[str] = None,
    done_at: Optional[datetime.datetime] = None,
) -> CadWorkSpan:
    span = CadWorkSpan(started_at=started_at, done_at=done_at or _now())
    log_usage_event(
        db,
        _category(scenario),
        "Completed CAD work",
        {
            "source": "CAD",
            "startAt": span.started_at.isoformat(),
            "doneAt": span.done_at.isoformat(),
            "durationMs": span.duration_ms,
        },
        treetable_id=treetable_id,
        duration_ms=span.duration_ms,
    )
    return span


def start_review(db: Session, treetable_id: str) -> str:
    """Returns the review page path the client should navigate to."""
    log_usage_event(
        db,
        "REVIEW",
        "Starting the EBOM data review.",
        {"note": "User moved to review page from BOM table"},
        treetable_id=treetable_id,
    )
    return f"/treetable/{treetable_id}/review"


def stored_total_carbon(
    db: Session,
    treetable_id: str,
    unassigned_labels: Iterable[str] = UNASSIGNED_MATERIAL_LABELS,
) -> float:
    rows = nodes_to_bom_rows(list_nodes(db, treetable_id))
    return aggregate(rows, list_materials(db), unassigned_labels=unassigned_labels).total_carbon_kg_co2e


def complete_ebom(
    db: Session,
    treetable_id: str,
    scenario: str,
    total_kg_co2e: Optional[float] = None,
    unassigned_labels: Iterable[str] = UNASSIGNED_MATERIAL_LABELS,
) -> CompletionCheck:
    """
    Mark an EBOM complete if its total carbon is within ±10% of the scenario ceiling.

    When total_kg_co2e is None it is computed from the stored nodes.

    Raises:
        TreetableNotFoundError: unknown treetable
        UnknownScenarioError: unknown scenario key
        CompletionRefusedError: total outside the completion band (nothing is logged)
    """
    get_treetable(db, treetable_id)
    threshold = get_static_threshold(scenario)
    key = parse_scenario(scenario)
    if total_kg_co2e is None:
        total_kg_co2e = stored_total_carbon(db, treetable_id, unassigned_labels=unassigned_labels)

    check = check_completion_gate(total_kg_co2e, threshold)
    if not check.allowed:
        logger.info("EBOM %s completion refused: %s", treetable_id, check.message)
        raise CompletionRefusedError(check)

    log_usage_event(
        db,
        key.value,
        "Complete EBOM test",
        {
            "tableId": treetable_id,
            "total_carbon_kgco2e": round(total_kg_co2e, 6),
            "threshold_kgco2e": threshold,
        },
        treetable_id=treetable_id,
    )
    return check


def record_target_update(db: Session, treetable_id: str, years: Iterable[int]) -> None:
    log_usage_event(
        db,
        "LCA TARGET",
        "Setting a LCA Target (Carbon Emission target)",
        {"note": "Setting the LCA target in the screen", "years": sorted(years)},
        treetable_id=treetable_id,
    )


def start_scenario(db: Session, scenario: str) -> Tuple[Treetable, str]:
    """
    Create a fresh treetable for a scenario.

    Returns:
        (treetable, sample dataset file name the client should import)

    Raises:
        UnknownScenarioError: unknown scenario key
    """
    key = parse_scenario(scenario)
    if key is None:
        raise UnknownScenarioError(f"Unknown scenario: {scenario!r}")

    table = create_treetable(db, auto_name(f"Scenario-{key.value}"))
    log_usage_event(
        db,
        key.value,
        "EBOM Table create (scenario)",
        {"note": f"Create from scenario: {key.value}", "scenario": key.value, "treetable_id": table.id},
        treetable_id=table.id,
    )
    return table, SCENARIO_SAMPLE_FILES[key]


def end_process(db: Session, treetable_id: Optional[str] = None) -> None:
    log_usage_event(
        db,
        "PROCESS END",
        "End of Product Development Process",
        {"note": "End of Process"},
        treetable_id=treetable_id,
    )
