"""
types.py — Shared Data Layer for the LCA Computation

Purpose:
- Define the value types passed between the material lookup, the carbon
  aggregator and the target evaluator.
- All types are transient: they are rebuilt on every request from the row
  source and the material catalog.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


@dataclass(frozen=True)
class BomRow:
    """
    One BOM line as seen by the aggregator.

    Line number / hierarchy level are display-only and are not carried here.
    """
    material_name: Optional[str] = None
    total_mass_kg: Optional[float] = None

    @property
    def mass_kg(self) -> float:
        return self.total_mass_kg if self.total_mass_kg is not None else 0.0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "BomRow":
        """
        Build a row from a node-shaped dict ({"material": ..., "total_mass_kg": ...}).
        """
        mass = data.get("total_mass_kg")
        return cls(
            material_name=data.get("material"),
            total_mass_kg=float(mass) if mass is not None else None,
        )


@dataclass(frozen=True)
class MaterialEntry:
    """One material catalog row: display label + kgCO2e per kg."""
    label: str
    emission_factor: Optional[float] = None

    @property
    def factor(self) -> float:
        return self.emission_factor if self.emission_factor is not None else 0.0


@dataclass
class MaterialSummary:
    """
    Mass and carbon accumulated for one material bucket.

    carbon_kg_co2e is summed per row, so it is not guaranteed to equal
    mass_kg * factor for any single factor.
    """
    key: str
    label: str
    mass_kg: float = 0.0
    carbon_kg_co2e: float = 0.0
    row_count: int = 0
    matched: bool = False


@dataclass
class AggregationResult:
    """Output of aggregate(): buckets keyed by normalized material key + grand totals."""
    summaries: Dict[str, MaterialSummary] = field(default_factory=dict)
    total_carbon_kg_co2e: float = 0.0
    total_mass_kg: float = 0.0
    excluded_row_count: int = 0

    def by_label(self) -> Dict[str, MaterialSummary]:
        """Same buckets keyed by display label (catalog label when matched)."""
        return {s.label: s for s in self.summaries.values()}


class AchievementStatus(str, Enum):
    """Share of the carbon ceiling consumed, in three bands."""
    EXCEEDED = "exceeded"
    ACHIEVED = "achieved"
    UNDER = "under"


@dataclass(frozen=True)
class TargetEvaluation:
    total_kg_co2e: float
    threshold_kg_co2e: float
    percent: float
    status: AchievementStatus


@dataclass(frozen=True)
class CompletionCheck:
    """Result of the two-sided completion gate (±10% around the threshold)."""
    allowed: bool
    total_kg_co2e: float
    threshold_kg_co2e: float
    lower_kg_co2e: float
    upper_kg_co2e: float
    message: str


@dataclass(frozen=True)
class CarbonShare:
    """Pie-chart datum."""
    label: str
    carbon_kg_co2e: float
    percent: float


@dataclass(frozen=True)
class MassCarbonPoint:
    """Bar-chart datum."""
    label: str
    mass_kg: float
    carbon_kg_co2e: float


@dataclass
class LcaReport:
    aggregation: AggregationResult
    evaluation: TargetEvaluation
    carbon_shares: List[CarbonShare]
    mass_carbon: List[MassCarbonPoint]
