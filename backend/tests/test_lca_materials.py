"""
Unit tests for services/lca/materials.py
"""

import pytest

from ebom.services.lca import (
    MaterialEntry,
    MaterialIndex,
    find_materials_containing,
    is_unassigned,
    normalize_material_name,
    resolve_emission_factor,
)


@pytest.fixture
def catalog():
    return [
        MaterialEntry("Steel", 1.8),
        MaterialEntry("Stainless Steel", 6.2),
        MaterialEntry("Aluminum", 9.1),
        MaterialEntry("PC/ABS", None),
    ]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Steel", "steel"),
        ("  Steel  ", "steel"),
        ("STAINLESS Steel", "stainless steel"),
        ("", ""),
        (None, ""),
    ],
)
def test_normalize_material_name(raw, expected):
    assert normalize_material_name(raw) == expected


@pytest.mark.parametrize("name", [None, "", "  ", "none", "NoNe", "no material", " NO MATERIAL "])
def test_is_unassigned_true(name):
    assert is_unassigned(name)


@pytest.mark.parametrize("name", ["Steel", "nonel", "material", "no"])
def test_is_unassigned_false(name):
    assert not is_unassigned(name)


def test_resolve_is_exact_and_case_insensitive(catalog):
    assert resolve_emission_factor("steel", catalog) == 1.8
    assert resolve_emission_factor(" STAINLESS STEEL ", catalog) == 6.2
    assert resolve_emission_factor("Stainless", catalog) == 0.0
    assert resolve_emission_factor("Copper", catalog) == 0.0
    assert resolve_emission_factor(None, catalog) == 0.0


def test_missing_factor_resolves_to_zero(catalog):
    assert resolve_emission_factor("pc/abs", catalog) == 0.0
    assert MaterialIndex(catalog).lookup("pc/abs").label == "PC/ABS"


def test_index_keeps_first_duplicate():
    index = MaterialIndex([MaterialEntry("Steel", 1.8), MaterialEntry("STEEL", 2.5)])
    assert len(index) == 1
    assert index.emission_factor("steel") == 1.8


def test_fuzzy_search_is_separate_from_resolution(catalog):
    found = find_materials_containing(catalog, "steel")
    assert [m.label for m in found] == ["Steel", "Stainless Steel"]
    assert find_materials_containing(catalog, "  ") == []
    assert find_materials_containing(catalog, None) == []
