"""
targets.py — Persisted Yearly Carbon Targets

Purpose:
- Load the targets of a treetable for the target editor, pre-filling blank
  rows for the upcoming years that have no stored target yet.
- Save edited targets with upsert semantics on (treetable_id, year).
- Look up a single target when a report is evaluated against a year.

Concurrent saves are last-write-wins; there is no versioning.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence

from sqlalchemy.orm import Session

from ebom.core.logging import get_logger
from ebom.models.lca_target import LcaTarget

logger = get_logger(__name__)


@dataclass
class TargetRow:
    treetable_id: str
    year: int
    target_kg_co2e: float = 0.0
    notes: Optional[str] = ""
    id: Optional[str] = None  # None until saved


def _to_row(target: LcaTarget) -> TargetRow:
    return TargetRow(
        id=target.id,
        treetable_id=target.treetable_id,
        year=target.year,
        target_kg_co2e=target.target_kg_co2e,
        notes=target.notes,
    )


def list_targets(db: Session, treetable_id: str, current_year: int, default_years: int = 3) -> List[TargetRow]:
    """
    Stored targets plus unsaved blank rows for missing years in
    [current_year, current_year + default_years), sorted by year.
    """
    stored = (
        db.query(LcaTarget)
        .filter(LcaTarget.treetable_id == treetable_id)
        .order_by(LcaTarget.year)
        .all()
    )
    rows = [_to_row(t) for t in stored]
    existing_years = {t.year for t in stored}
    rows.extend(
        TargetRow(treetable_id=treetable_id, year=year)
        for year in range(current_year, current_year + max(default_years, 0))
        if year not in existing_years
    )
    return sorted(rows, key=lambda r: r.year)


def get_target(db: Session, treetable_id: str, year: int) -> Optional[LcaTarget]:
    return (
        db.query(LcaTarget)
        .filter(LcaTarget.treetable_id == treetable_id, LcaTarget.year == year)
        .one_or_none()
    )


def upsert_targets(db: Session, treetable_id: str, targets: Sequence[Mapping]) -> List[TargetRow]:
    """
    Insert or update targets keyed by (treetable_id, year).

    Args:
        targets: dicts with year, target_kg_co2e and optional notes. When the
                 same year appears twice the later entry wins.

    Returns:
        The saved rows, sorted by year.
    """
    by_year: Dict[int, LcaTarget] = {}

    for item in targets:
        year = int(item["year"])
        target = by_year.get(year) or get_target(db, treetable_id, year)
        if target is None:
            target = LcaTarget(treetable_id=treetable_id, year=year)
            db.add(target)
        target.target_kg_co2e = float(item.get("target_kg_co2e") or 0.0)
        target.notes = item.get("notes")
        by_year[year] = target

    db.commit()
    for target in by_year.values():
        db.refresh(target)

    logger.info("Upserted %d LCA targets for treetable %s", len(by_year), treetable_id)
    return sorted((_to_row(t) for t in by_year.values()), key=lambda r: r.year)
