"""
report.py — Combine Aggregation, Evaluation and Chart Projections

Pure function used by the report endpoint; the caller resolves the rows,
the catalog and the threshold beforehand.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from ebom.services.lca.aggregator import aggregate, carbon_shares, mass_carbon_series
from ebom.services.lca.evaluator import evaluate
from ebom.services.lca.materials import UNASSIGNED_MATERIAL_LABELS
from ebom.services.lca.types import BomRow, LcaReport, MaterialEntry


def build_report(
    rows: Iterable[BomRow],
    materials: Sequence[MaterialEntry],
    threshold_kg_co2e: float,
    unassigned_labels: Iterable[str] = UNASSIGNED_MATERIAL_LABELS,
) -> LcaReport:
    result = aggregate(rows, materials, unassigned_labels=unassigned_labels)
    return LcaReport(
        aggregation=result,
        evaluation=evaluate(result.total_carbon_kg_co2e, threshold_kg_co2e),
        carbon_shares=carbon_shares(result),
        mass_carbon=mass_carbon_series(result),
    )
