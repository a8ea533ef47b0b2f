"""
reports.py — LCA Report for a Stored Treetable

Purpose:
- Pull rows (treetable nodes) and the material catalog from the database,
  resolve the threshold (static scenario table or stored yearly target) and
  hand everything to the pure LCA computation.

Key Interactions:
- services/treetables.py → row source
- services/material_catalog.py → material catalog
- services/targets.py → persisted yearly targets
- services/lca → aggregation + evaluation
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from sqlalchemy.orm import Session

from ebom.core.logging import get_logger
from ebom.services.lca import (
    UNASSIGNED_MATERIAL_LABELS,
    LcaReport,
    build_report,
    get_static_threshold,
)
from ebom.services.material_catalog import list_materials
from ebom.services.targets import get_target
from ebom.services.treetables import list_nodes, nodes_to_bom_rows

logger = get_logger(__name__)


class ThresholdSelectionError(ValueError):
    """Raised when neither or both of scenario / year are given."""


class TargetNotFoundError(LookupError):
    """Raised when no target is stored for (treetable_id, year)."""


@dataclass
class TreetableReport:
    treetable_id: str
    threshold_source: str  # "scenario:<key>" or "year:<yyyy>"
    report: LcaReport


def resolve_threshold(
    db: Session,
    treetable_id: str,
    scenario: Optional[str] = None,
    year: Optional[int] = None,
) -> Tuple[float, str]:
    """
    Returns (threshold_kg_co2e, source label).

    Raises:
        ThresholdSelectionError: neither or both selectors given
        UnknownScenarioError: scenario key not in the static table
        TargetNotFoundError: no stored target for that year
    """
    if (scenario is None) == (year is None):
        raise ThresholdSelectionError("Exactly one of 'scenario' or 'year' must be given")

    if scenario is not None:
        return get_static_threshold(scenario), f"scenario:{scenario}"

    target = get_target(db, treetable_id, year)
    if target is None:
        raise TargetNotFoundError(f"No LCA target stored for treetable {treetable_id}, year {year}")
    return target.target_kg_co2e, f"year:{year}"


def build_treetable_report(
    db: Session,
    treetable_id: str,
    scenario: Optional[str] = None,
    year: Optional[int] = None,
    unassigned_labels: Iterable[str] = UNASSIGNED_MATERIAL_LABELS,
) -> TreetableReport:
    threshold, source = resolve_threshold(db, treetable_id, scenario=scenario, year=year)
    rows = nodes_to_bom_rows(list_nodes(db, treetable_id))
    materials = list_materials(db)

    report = build_report(rows, materials, threshold, unassigned_labels=unassigned_labels)
    logger.info(
        "LCA report for %s: %.6f kgCO2e vs %s (%s) → %s",
        treetable_id,
        report.aggregation.total_carbon_kg_co2e,
        threshold,
        source,
        report.evaluation.status.value,
    )
    return TreetableReport(treetable_id=treetable_id, threshold_source=source, report=report)
