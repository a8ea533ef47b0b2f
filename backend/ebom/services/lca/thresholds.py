"""
thresholds.py — Static Carbon Ceilings per Product-Change Scenario

Each scenario ships with a fixed To-Be carbon ceiling (kgCO2e). The table is
process-wide constant configuration; the selected scenario is always passed
in explicitly by the caller.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Union


class ScenarioKey(str, Enum):
    MATERIAL_CHANGE = "material-change"
    SIZE_CHANGE = "size-change"
    STRUCTURE_CHANGE = "structure-change"


SCENARIO_THRESHOLDS: Mapping[ScenarioKey, float] = MappingProxyType({
    ScenarioKey.MATERIAL_CHANGE: 4.37,
    ScenarioKey.SIZE_CHANGE: 19.78,
    ScenarioKey.STRUCTURE_CHANGE: 36.25,
})

# Sample dataset loaded when a scenario is started
SCENARIO_SAMPLE_FILES: Mapping[ScenarioKey, str] = MappingProxyType({
    ScenarioKey.MATERIAL_CHANGE: "material-change.xlsx",
    ScenarioKey.SIZE_CHANGE: "size-change.xlsx",
    ScenarioKey.STRUCTURE_CHANGE: "structure-change.xlsx",
})


class UnknownScenarioError(ValueError):
    """Raised when a scenario key is not one of the known scenarios."""


def parse_scenario(value: Union[str, ScenarioKey, None]) -> Optional[ScenarioKey]:
    """Return the ScenarioKey for `value`, or None if it is not a known key."""
    if isinstance(value, ScenarioKey):
        return value
    if value is None:
        return None
    try:
        return ScenarioKey(str(value).strip().lower())
    except ValueError:
        return None


def get_static_threshold(scenario: Union[str, ScenarioKey]) -> float:
    """
    Carbon ceiling (kgCO2e) for a scenario.

    Raises:
        UnknownScenarioError: if the key is not a known scenario
    """
    key = parse_scenario(scenario)
    if key is None:
        raise UnknownScenarioError(f"Unknown scenario: {scenario!r}")
    return SCENARIO_THRESHOLDS[key]
