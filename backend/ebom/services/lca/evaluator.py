"""
evaluator.py — Target Achievement Evaluation

Purpose:
- evaluate(): percent of the carbon ceiling consumed + three-way status
  (exceeded / achieved / under) for display.
- check_completion_gate(): the stricter two-sided band (threshold ±10%) that
  decides whether an EBOM may be marked complete. It is a separate policy and
  is not derived from the display status.

Neither function raises for any numeric input.
"""

from __future__ import annotations

import math

from ebom.services.lca.types import AchievementStatus, CompletionCheck, TargetEvaluation

EXCEEDED_PERCENT = 100.0
ACHIEVED_PERCENT = 90.0

COMPLETION_LOWER_RATIO = 0.9
COMPLETION_UPPER_RATIO = 1.1

# Relative distance at which a percent counts as on a band edge.
# 3.933 / 4.37 * 100 is 89.99999999999999 in floating point.
_BAND_REL_TOL = 1e-13
_GATE_REL_TOL = 1e-9


def percent_of_target(total_kg_co2e: float, threshold_kg_co2e: float) -> float:
    """total / threshold * 100; 0 for a non-positive or non-finite threshold."""
    if not math.isfinite(threshold_kg_co2e) or threshold_kg_co2e <= 0:
        return 0.0
    return (total_kg_co2e / threshold_kg_co2e) * 100


def _at_or_above(percent: float, edge: float) -> bool:
    return percent >= edge or math.isclose(percent, edge, rel_tol=_BAND_REL_TOL)


def classify_percent(percent: float) -> AchievementStatus:
    if _at_or_above(percent, EXCEEDED_PERCENT):
        return AchievementStatus.EXCEEDED
    if _at_or_above(percent, ACHIEVED_PERCENT):
        return AchievementStatus.ACHIEVED
    # NaN falls through to here
    return AchievementStatus.UNDER


def evaluate(total_kg_co2e: float, threshold_kg_co2e: float) -> TargetEvaluation:
    """
    Compare total carbon with a ceiling.

    Bands (percent of ceiling consumed):
        >= 100        exceeded
        90 .. < 100   achieved
        < 90          under
    """
    percent = percent_of_target(total_kg_co2e, threshold_kg_co2e)
    return TargetEvaluation(
        total_kg_co2e=total_kg_co2e,
        threshold_kg_co2e=threshold_kg_co2e,
        percent=percent,
        status=classify_percent(percent),
    )


def _at_or_between(value: float, lower: float, upper: float) -> bool:
    if lower <= value <= upper:
        return True
    return math.isclose(value, lower, rel_tol=_GATE_REL_TOL) or math.isclose(value, upper, rel_tol=_GATE_REL_TOL)


def check_completion_gate(total_kg_co2e: float, threshold_kg_co2e: float) -> CompletionCheck:
    """
    Completion is allowed only when threshold*0.9 <= total <= threshold*1.1
    (both ends inclusive). Anything else, NaN included, is refused.
    """
    lower = threshold_kg_co2e * COMPLETION_LOWER_RATIO
    upper = threshold_kg_co2e * COMPLETION_UPPER_RATIO
    allowed = _at_or_between(total_kg_co2e, lower, upper)

    if allowed:
        message = (
            f"Total carbon {total_kg_co2e:.6f} kgCO2e is within the completion band "
            f"of the {threshold_kg_co2e} kgCO2e target."
        )
    else:
        message = (
            f"Total carbon {total_kg_co2e:.6f} kgCO2e is outside 90-110% of the carbon target "
            f"({threshold_kg_co2e} kgCO2e). The EBOM cannot be completed."
        )

    return CompletionCheck(
        allowed=allowed,
        total_kg_co2e=total_kg_co2e,
        threshold_kg_co2e=threshold_kg_co2e,
        lower_kg_co2e=lower,
        upper_kg_co2e=upper,
        message=message,
    )
