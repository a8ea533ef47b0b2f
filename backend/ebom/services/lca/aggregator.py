"""
aggregator.py — Carbon Aggregation by Material

Purpose:
- Turn BOM rows + the material catalog into per-material mass/carbon buckets
  and a grand total (kgCO2e).
- Provide the per-line carbon values used by the editing grid and the
  chart-ready projections of a result.

Rules:
- Rows with no material (None, blank, "none", "no material") are dropped from
  both the buckets and the totals; they have no emission factor to apply.
- Factor lookup is exact after trim + lowercase; unknown materials get
  factor 0 and still contribute mass.
- Buckets are keyed by the normalized name, so "Steel" and " steel " share one.
- Carbon is accumulated row by row (mass_i * ef_i).

This module does NOT:
- Touch the database or read settings.
- Validate numbers; negative or non-finite values pass straight through.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence

from ebom.services.lca.materials import (
    UNASSIGNED_MATERIAL_LABELS,
    MaterialIndex,
    is_unassigned,
    normalize_material_name,
)
from ebom.services.lca.types import (
    AggregationResult,
    BomRow,
    CarbonShare,
    MassCarbonPoint,
    MaterialEntry,
    MaterialSummary,
)


def aggregate(
    rows: Iterable[BomRow],
    materials: Sequence[MaterialEntry],
    unassigned_labels: Iterable[str] = UNASSIGNED_MATERIAL_LABELS,
) -> AggregationResult:
    """
    Aggregate mass and carbon per material.

    Args:
        rows: BOM lines (any order)
        materials: material catalog; first entry wins on duplicate labels
        unassigned_labels: sentinel labels meaning "no material"

    Returns:
        AggregationResult with summaries in first-seen order and the totals.

    Example:
        >>> result = aggregate(
        ...     [BomRow("Steel", 10), BomRow("", 5), BomRow("Aluminum", 2)],
        ...     [MaterialEntry("Steel", 1.8), MaterialEntry("Aluminum", 9.1)],
        ... )
        >>> round(result.total_carbon_kg_co2e, 6)
        36.2
    """
    index = MaterialIndex(materials)
    sentinels = frozenset(normalize_material_name(s) for s in unassigned_labels)
    result = AggregationResult()

    for row in rows:
        if is_unassigned(row.material_name, sentinels):
            result.excluded_row_count += 1
            continue

        key = normalize_material_name(row.material_name)
        entry = index.lookup(key)
        mass = row.mass_kg
        carbon = mass * (entry.factor if entry is not None else 0.0)

        summary = result.summaries.get(key)
        if summary is None:
            summary = MaterialSummary(
                key=key,
                label=entry.label.strip() if entry is not None else str(row.material_name).strip(),
                matched=entry is not None,
            )
            result.summaries[key] = summary

        summary.mass_kg += mass
        summary.carbon_kg_co2e += carbon
        summary.row_count += 1

    result.total_carbon_kg_co2e = sum(s.carbon_kg_co2e for s in result.summaries.values())
    result.total_mass_kg = sum(s.mass_kg for s in result.summaries.values())
    return result


def line_carbon(
    rows: Sequence[BomRow],
    materials: Sequence[MaterialEntry],
    unassigned_labels: Iterable[str] = UNASSIGNED_MATERIAL_LABELS,
) -> List[float]:
    """
    Carbon (kgCO2e) of each row, in input order. Unassigned rows give 0.
    """
    index = MaterialIndex(materials)
    sentinels = frozenset(normalize_material_name(s) for s in unassigned_labels)
    values: List[float] = []
    for row in rows:
        if is_unassigned(row.material_name, sentinels):
            values.append(0.0)
        else:
            values.append(row.mass_kg * index.emission_factor(row.material_name))
    return values


def max_carbon_indexes(carbon_by_line: Sequence[float]) -> List[int]:
    """
    Indexes of the line(s) holding the highest carbon value.

    Empty when no line has a strictly positive value, so an all-zero table
    highlights nothing.
    """
    if not carbon_by_line:
        return []
    peak = max(carbon_by_line)
    if not peak > 0:
        return []
    return [i for i, value in enumerate(carbon_by_line) if value == peak]


def carbon_shares(result: AggregationResult) -> List[CarbonShare]:
    """Pie data: each bucket's carbon and its share of the total (0 when total <= 0)."""
    total = result.total_carbon_kg_co2e
    return [
        CarbonShare(
            label=s.label,
            carbon_kg_co2e=s.carbon_kg_co2e,
            percent=(s.carbon_kg_co2e / total) * 100 if total > 0 else 0.0,
        )
        for s in result.summaries.values()
    ]


def mass_carbon_series(result: AggregationResult) -> List[MassCarbonPoint]:
    """Bar data: mass and carbon per bucket."""
    return [
        MassCarbonPoint(label=s.label, mass_kg=s.mass_kg, carbon_kg_co2e=s.carbon_kg_co2e)
        for s in result.summaries.values()
    ]
