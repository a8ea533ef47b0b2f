"""
Tests for services/workflow.py and services/reports.py
"""

import datetime

import pytest

from ebom.models.usage_event import UsageEvent
from ebom.services.lca import AchievementStatus, UnknownScenarioError
from ebom.services.reports import (
    TargetNotFoundError,
    ThresholdSelectionError,
    build_treetable_report,
)
from ebom.services.targets import upsert_targets
from ebom.services.treetables import TreetableNotFoundError, create_treetable, save_nodes
from ebom.services.workflow import (
    CompletionRefusedError,
    complete_ebom,
    end_process,
    finish_cad_work,
    start_cad_work,
    start_review,
    start_scenario,
    stored_total_carbon,
)


@pytest.fixture
def structure_table(seeded_materials):
    """Steel 10 kg + unassigned 5 kg + Aluminum 2 kg → 36.2 kgCO2e."""
    db = seeded_materials
    table = create_treetable(db, "structure")
    save_nodes(db, table.id, [
        {"line_no": "1", "material": "Steel", "total_mass_kg": 10},
        {"line_no": "2", "material": "", "total_mass_kg": 5},
        {"line_no": "3", "material": "Aluminum", "total_mass_kg": 2},
    ])
    return table


# ============================================================================
# Reports
# ============================================================================

def test_report_against_scenario(db, structure_table):
    result = build_treetable_report(db, structure_table.id, scenario="structure-change")
    report = result.report

    assert result.threshold_source == "scenario:structure-change"
    assert report.aggregation.total_carbon_kg_co2e == pytest.approx(36.2)
    assert report.evaluation.percent == pytest.approx(99.86, abs=0.01)
    assert report.evaluation.status is AchievementStatus.ACHIEVED
    assert [s.label for s in report.carbon_shares] == ["Steel", "Aluminum"]


def test_report_against_stored_year(db, structure_table):
    upsert_targets(db, structure_table.id, [{"year": 2026, "target_kg_co2e": 30.0}])
    result = build_treetable_report(db, structure_table.id, year=2026)

    assert result.threshold_source == "year:2026"
    assert result.report.evaluation.status is AchievementStatus.EXCEEDED


def test_report_requires_exactly_one_threshold_source(db, structure_table):
    with pytest.raises(ThresholdSelectionError):
        build_treetable_report(db, structure_table.id)
    with pytest.raises(ThresholdSelectionError):
        build_treetable_report(db, structure_table.id, scenario="size-change", year=2026)


def test_report_errors(db, structure_table):
    with pytest.raises(TargetNotFoundError):
        build_treetable_report(db, structure_table.id, year=1999)
    with pytest.raises(UnknownScenarioError):
        build_treetable_report(db, structure_table.id, scenario="nope")
    with pytest.raises(TreetableNotFoundError):
        build_treetable_report(db, "missing", scenario="size-change")


# ============================================================================
# Completion
# ============================================================================

def test_complete_with_stored_total(db, structure_table):
    assert stored_total_carbon(db, structure_table.id) == pytest.approx(36.2)

    check = complete_ebom(db, structure_table.id, "structure-change")

    assert check.allowed
    event = db.query(UsageEvent).one()
    assert event.step == "structure-change"
    assert event.action == "Complete EBOM test"
    assert event.detail["threshold_kgco2e"] == 36.25
    assert event.detail["total_carbon_kgco2e"] == pytest.approx(36.2)


def test_complete_refused_logs_nothing(db, structure_table):
    with pytest.raises(CompletionRefusedError) as exc_info:
        complete_ebom(db, structure_table.id, "material-change")

    assert not exc_info.value.check.allowed
    assert "4.37" in str(exc_info.value)
    assert db.query(UsageEvent).count() == 0


def test_complete_with_explicit_total(db, structure_table):
    assert complete_ebom(db, structure_table.id, "size-change", total_kg_co2e=17.802).allowed
    with pytest.raises(CompletionRefusedError):
        complete_ebom(db, structure_table.id, "size-change", total_kg_co2e=17.801)


def test_complete_records_normalized_scenario(db, structure_table):
    complete_ebom(db, structure_table.id, " Structure-Change ")
    assert db.query(UsageEvent).one().step == "structure-change"


def test_complete_unknown_scenario(db, structure_table):
    with pytest.raises(UnknownScenarioError):
        complete_ebom(db, structure_table.id, "colour-change", total_kg_co2e=1.0)


# ============================================================================
# Other transitions
# ============================================================================

def test_cad_work_span(db):
    started = datetime.datetime(2026, 10, 19, 9, 0, tzinfo=datetime.timezone.utc)
    done = started + datetime.timedelta(minutes=2, seconds=3)

    start_cad_work(db, "tt-1", scenario="size-change", started_at=started)
    span = finish_cad_work(db, "tt-1", started, scenario="size-change", done_at=done)

    assert span.duration_ms == 123_000
    actions = [e.action for e in db.query(UsageEvent).order_by(UsageEvent.id)]
    assert actions == ["Starting CAD work", "Completed CAD work"]
    finished = db.query(UsageEvent).order_by(UsageEvent.id.desc()).first()
    assert finished.duration_ms == 123_000


def test_cad_work_without_scenario_logs_unknown(db):
    start_cad_work(db, "tt-1")
    assert db.query(UsageEvent).one().step == "unknown"


def test_start_review_returns_review_path(db):
    assert start_review(db, "tt-1") == "/treetable/tt-1/review"
    assert db.query(UsageEvent).one().step == "REVIEW"


def test_start_scenario(db):
    table, sample_file = start_scenario(db, "size-change")

    assert table.name.startswith("Scenario-size-change-")
    assert sample_file == "size-change.xlsx"
    assert db.query(UsageEvent).one().treetable_id == table.id


def test_start_unknown_scenario(db):
    with pytest.raises(UnknownScenarioError):
        start_scenario(db, "colour-change")


def test_end_process(db):
    end_process(db)
    assert db.query(UsageEvent).one().action == "End of Product Development Process"
