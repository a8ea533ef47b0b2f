"""
Unit tests for services/lca/aggregator.py

Covers additivity / order independence, unassigned-row exclusion, unknown
materials, bucket canonicalization and the chart projections.
"""

import itertools
import math

import pytest

from ebom.services.lca import (
    BomRow,
    MaterialEntry,
    aggregate,
    carbon_shares,
    line_carbon,
    mass_carbon_series,
    max_carbon_indexes,
)


@pytest.fixture
def catalog():
    return [
        MaterialEntry(label="Steel", emission_factor=1.8),
        MaterialEntry(label="Aluminum", emission_factor=9.1),
        MaterialEntry(label="ABS", emission_factor=3.2),
    ]


@pytest.fixture
def mixed_rows():
    return [
        BomRow("Steel", 10),
        BomRow("Aluminum", 2),
        BomRow("ABS", 0.5),
        BomRow("steel ", 4),
        BomRow("Copper", 3),
        BomRow(None, 7),
    ]


def _direct_sum(rows, catalog):
    factors = {m.label.lower(): m.emission_factor for m in catalog}
    total = 0.0
    for r in rows:
        name = (r.material_name or "").strip().lower()
        if name in ("", "none", "no material"):
            continue
        total += (r.total_mass_kg or 0.0) * factors.get(name, 0.0)
    return total


# ============================================================================
# Structure-change scenario end to end
# ============================================================================

def test_structure_change_example():
    rows = [
        BomRow(material_name="Steel", total_mass_kg=10),
        BomRow(material_name="", total_mass_kg=5),
        BomRow(material_name="Aluminum", total_mass_kg=2),
    ]
    materials = [MaterialEntry("Steel", 1.8), MaterialEntry("Aluminum", 9.1)]

    result = aggregate(rows, materials)
    by_label = result.by_label()

    assert set(by_label) == {"Steel", "Aluminum"}
    assert by_label["Steel"].mass_kg == pytest.approx(10)
    assert by_label["Steel"].carbon_kg_co2e == pytest.approx(18.0)
    assert by_label["Aluminum"].mass_kg == pytest.approx(2)
    assert by_label["Aluminum"].carbon_kg_co2e == pytest.approx(18.2)
    assert result.total_carbon_kg_co2e == pytest.approx(36.2)
    assert result.excluded_row_count == 1


# ============================================================================
# Additivity / order independence
# ============================================================================

def test_total_equals_direct_row_sum(mixed_rows, catalog):
    result = aggregate(mixed_rows, catalog)
    assert result.total_carbon_kg_co2e == pytest.approx(_direct_sum(mixed_rows, catalog))


def test_total_is_order_independent(mixed_rows, catalog):
    expected = aggregate(mixed_rows, catalog).total_carbon_kg_co2e
    for perm in itertools.permutations(mixed_rows):
        assert aggregate(list(perm), catalog).total_carbon_kg_co2e == pytest.approx(expected)


def test_partitions_add_up(mixed_rows, catalog):
    whole = aggregate(mixed_rows, catalog).total_carbon_kg_co2e
    left = aggregate(mixed_rows[:3], catalog).total_carbon_kg_co2e
    right = aggregate(mixed_rows[3:], catalog).total_carbon_kg_co2e
    assert left + right == pytest.approx(whole)


def test_total_equals_sum_of_buckets(mixed_rows, catalog):
    result = aggregate(mixed_rows, catalog)
    assert result.total_carbon_kg_co2e == pytest.approx(
        sum(s.carbon_kg_co2e for s in result.summaries.values())
    )
    assert result.total_mass_kg == pytest.approx(sum(s.mass_kg for s in result.summaries.values()))


# ============================================================================
# Unassigned rows
# ============================================================================

@pytest.mark.parametrize("name", [None, "", "   ", "none", "None", "NONE", " none ", "no material", "No Material"])
def test_unassigned_rows_are_excluded(name, catalog):
    result = aggregate([BomRow(name, 100), BomRow("Steel", 1)], catalog)

    assert list(result.summaries) == ["steel"]
    assert result.total_carbon_kg_co2e == pytest.approx(1.8)
    assert result.total_mass_kg == pytest.approx(1)
    assert result.excluded_row_count == 1


def test_custom_unassigned_labels(catalog):
    rows = [BomRow("N/A", 5), BomRow("none", 5), BomRow("Steel", 1)]
    result = aggregate(rows, catalog, unassigned_labels=["n/a"])

    # "none" is an ordinary (unknown) material once the sentinel set is replaced
    assert set(result.summaries) == {"none", "steel"}
    assert result.summaries["none"].carbon_kg_co2e == 0.0


# ============================================================================
# Unknown materials / empty inputs
# ============================================================================

def test_unknown_material_contributes_mass_not_carbon(catalog):
    result = aggregate([BomRow("Unobtainium", 3.5)], catalog)
    summary = result.summaries["unobtainium"]

    assert summary.mass_kg == pytest.approx(3.5)
    assert summary.carbon_kg_co2e == 0.0
    assert summary.matched is False
    assert summary.label == "Unobtainium"
    assert result.total_carbon_kg_co2e == 0.0


def test_empty_rows():
    result = aggregate([], [MaterialEntry("Steel", 1.8)])
    assert result.summaries == {}
    assert result.total_carbon_kg_co2e == 0.0


def test_empty_catalog_still_buckets_mass():
    result = aggregate([BomRow("Steel", 2), BomRow("ABS", 1)], [])
    assert result.total_carbon_kg_co2e == 0.0
    assert result.summaries["steel"].mass_kg == pytest.approx(2)
    assert result.summaries["abs"].mass_kg == pytest.approx(1)


def test_missing_mass_counts_as_zero(catalog):
    result = aggregate([BomRow("Steel", None)], catalog)
    assert result.summaries["steel"].mass_kg == 0.0
    assert result.summaries["steel"].row_count == 1


def test_missing_emission_factor_counts_as_zero():
    result = aggregate([BomRow("Steel", 2)], [MaterialEntry("Steel", None)])
    assert result.summaries["steel"].carbon_kg_co2e == 0.0
    assert result.summaries["steel"].matched is True


def test_negative_values_pass_through(catalog):
    result = aggregate([BomRow("Steel", -2)], catalog)
    assert result.total_carbon_kg_co2e == pytest.approx(-3.6)


def test_nan_mass_is_not_rejected_by_the_core(catalog):
    result = aggregate([BomRow("Steel", float("nan"))], catalog)
    assert math.isnan(result.total_carbon_kg_co2e)


# ============================================================================
# Bucket keys
# ============================================================================

def test_spelling_variants_share_one_bucket(catalog):
    rows = [BomRow("Steel", 1), BomRow(" steel", 2), BomRow("STEEL ", 3)]
    result = aggregate(rows, catalog)

    assert list(result.summaries) == ["steel"]
    summary = result.summaries["steel"]
    assert summary.label == "Steel"
    assert summary.mass_kg == pytest.approx(6)
    assert summary.carbon_kg_co2e == pytest.approx(10.8)
    assert summary.row_count == 3


def test_unmatched_label_keeps_first_seen_spelling():
    result = aggregate([BomRow(" Copper ", 1), BomRow("COPPER", 1)], [])
    assert result.summaries["copper"].label == "Copper"


def test_substring_labels_do_not_absorb_each_other():
    catalog = [MaterialEntry("Steel", 1.8), MaterialEntry("Stainless Steel", 6.2)]
    result = aggregate([BomRow("Stainless Steel", 1), BomRow("Steel", 1)], catalog)

    assert result.summaries["stainless steel"].carbon_kg_co2e == pytest.approx(6.2)
    assert result.summaries["steel"].carbon_kg_co2e == pytest.approx(1.8)


def test_duplicate_catalog_labels_first_wins():
    catalog = [MaterialEntry("Steel", 1.8), MaterialEntry(" steel ", 99.0)]
    result = aggregate([BomRow("Steel", 1)], catalog)
    assert result.total_carbon_kg_co2e == pytest.approx(1.8)


def test_summaries_preserve_first_seen_order(catalog):
    rows = [BomRow("ABS", 1), BomRow("Steel", 1), BomRow("ABS", 1), BomRow("Aluminum", 1)]
    assert list(aggregate(rows, catalog).summaries) == ["abs", "steel", "aluminum"]


# ============================================================================
# Per-line carbon & charts
# ============================================================================

def test_line_carbon_in_row_order(catalog):
    rows = [BomRow("Steel", 10), BomRow("none", 5), BomRow("Aluminum", 2), BomRow("Copper", 1)]
    assert line_carbon(rows, catalog) == pytest.approx([18.0, 0.0, 18.2, 0.0])


def test_max_carbon_indexes():
    assert max_carbon_indexes([1.0, 5.0, 2.0, 5.0]) == [1, 3]
    assert max_carbon_indexes([0.0, 0.0]) == []
    assert max_carbon_indexes([]) == []


def test_carbon_shares(catalog):
    result = aggregate([BomRow("Steel", 10), BomRow("Aluminum", 2)], catalog)
    shares = carbon_shares(result)

    assert [s.label for s in shares] == ["Steel", "Aluminum"]
    assert sum(s.percent for s in shares) == pytest.approx(100.0)
    assert shares[0].percent == pytest.approx(18.0 / 36.2 * 100)


def test_carbon_shares_zero_total():
    result = aggregate([BomRow("Copper", 1)], [])
    assert [s.percent for s in carbon_shares(result)] == [0.0]


def test_mass_carbon_series(catalog):
    result = aggregate([BomRow("Steel", 10), BomRow("ABS", 1)], catalog)
    points = mass_carbon_series(result)

    assert [(p.label, p.mass_kg) for p in points] == [("Steel", 10), ("ABS", 1)]
    assert points[1].carbon_kg_co2e == pytest.approx(3.2)
