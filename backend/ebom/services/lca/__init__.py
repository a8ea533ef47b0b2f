"""
LCA computation: carbon aggregation by material and target evaluation.

Everything in this package is pure (no I/O, no settings, no global state).
"""

from ebom.services.lca.aggregator import (
    aggregate,
    carbon_shares,
    line_carbon,
    mass_carbon_series,
    max_carbon_indexes,
)
from ebom.services.lca.evaluator import check_completion_gate, evaluate
from ebom.services.lca.materials import (
    UNASSIGNED_MATERIAL_LABELS,
    MaterialIndex,
    find_materials_containing,
    is_unassigned,
    normalize_material_name,
    resolve_emission_factor,
)
from ebom.services.lca.report import build_report
from ebom.services.lca.thresholds import (
    SCENARIO_THRESHOLDS,
    ScenarioKey,
    UnknownScenarioError,
    get_static_threshold,
    parse_scenario,
)
from ebom.services.lca.types import (
    AchievementStatus,
    AggregationResult,
    BomRow,
    CompletionCheck,
    LcaReport,
    MaterialEntry,
    MaterialSummary,
    TargetEvaluation,
)

__all__ = [
    "AchievementStatus",
    "AggregationResult",
    "BomRow",
    "CompletionCheck",
    "LcaReport",
    "MaterialEntry",
    "MaterialIndex",
    "MaterialSummary",
    "SCENARIO_THRESHOLDS",
    "ScenarioKey",
    "TargetEvaluation",
    "UNASSIGNED_MATERIAL_LABELS",
    "UnknownScenarioError",
    "aggregate",
    "build_report",
    "carbon_shares",
    "check_completion_gate",
    "evaluate",
    "find_materials_containing",
    "get_static_threshold",
    "is_unassigned",
    "line_carbon",
    "mass_carbon_series",
    "max_carbon_indexes",
    "normalize_material_name",
    "parse_scenario",
    "resolve_emission_factor",
]
