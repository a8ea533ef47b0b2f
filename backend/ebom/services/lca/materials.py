"""
materials.py — Material Name Normalization & Emission-Factor Lookup

Factor resolution is always exact equality after trim + lowercase. Substring
search exists only as find_materials_containing(), which is never used to
resolve a factor: with substring matching "Steel" would also claim rows
labelled "Stainless Steel".
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence

from ebom.services.lca.types import MaterialEntry

# Labels that mean "no material assigned", compared after normalization
UNASSIGNED_MATERIAL_LABELS: FrozenSet[str] = frozenset({"none", "no material"})


def normalize_material_name(name: Optional[str]) -> str:
    """Trim + lowercase. None becomes ""."""
    if name is None:
        return ""
    return str(name).strip().lower()


def is_unassigned(
    name: Optional[str],
    unassigned_labels: Iterable[str] = UNASSIGNED_MATERIAL_LABELS,
) -> bool:
    key = normalize_material_name(name)
    if not key:
        return True
    return key in {normalize_material_name(label) for label in unassigned_labels}


class MaterialIndex:
    """
    Normalized label → catalog entry, built once per aggregation call.

    When two catalog labels normalize to the same key the first one in
    catalog order is kept.
    """

    def __init__(self, materials: Sequence[MaterialEntry]):
        self._by_key: Dict[str, MaterialEntry] = {}
        for entry in materials:
            key = normalize_material_name(entry.label)
            if key and key not in self._by_key:
                self._by_key[key] = entry

    def __len__(self) -> int:
        return len(self._by_key)

    def lookup(self, name: Optional[str]) -> Optional[MaterialEntry]:
        key = normalize_material_name(name)
        if not key:
            return None
        return self._by_key.get(key)

    def emission_factor(self, name: Optional[str]) -> float:
        entry = self.lookup(name)
        return entry.factor if entry is not None else 0.0


def resolve_emission_factor(name: Optional[str], materials: Sequence[MaterialEntry]) -> float:
    """
    Emission factor for a single material name; 0 when nothing matches.

    For repeated lookups build a MaterialIndex instead.
    """
    return MaterialIndex(materials).emission_factor(name)


def find_materials_containing(materials: Sequence[MaterialEntry], text: Optional[str]) -> List[MaterialEntry]:
    """
    Fuzzy search: catalog entries whose label contains `text` (case-insensitive).

    For pickers and search boxes only.
    """
    needle = normalize_material_name(text)
    if not needle:
        return []
    return [m for m in materials if needle in normalize_material_name(m.label)]
