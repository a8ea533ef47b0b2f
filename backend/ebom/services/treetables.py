"""
treetables.py — EBOM Table Row Source

Purpose:
- Create treetable headers (auto-named when no name is given).
- Save imported / edited BOM lines in replace or append mode, resolving the
  hierarchy from line_no / parent_line_no.
- Read lines back and hand them to the LCA computation as BomRow values.

This module does NOT:
- Parse spreadsheets. Callers send already-extracted rows.
- Compute carbon (see services/lca).
"""

from __future__ import annotations

import datetime
import re
import uuid
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence

from sqlalchemy.orm import Session

from ebom.core.logging import get_logger
from ebom.models.treetable import Treetable, TreetableNode
from ebom.services.lca.types import BomRow

logger = get_logger(__name__)

ImportMode = Literal["replace", "append"]

_DIGITS = re.compile(r"(\d+)")


class TreetableNotFoundError(LookupError):
    """Raised when a treetable id does not exist."""


class InvalidImportError(ValueError):
    """Raised when an import payload cannot be saved."""


def natural_line_key(line_no: Optional[str]) -> List[Any]:
    """
    Sort key comparing digit runs numerically: "1.2" < "1.10" < "2".
    """
    parts = _DIGITS.split(line_no or "")
    return [(0, int(p), "") if p.isdigit() else (1, 0, p) for p in parts if p != ""]


def auto_name(prefix: str = "EBOM", now: Optional[datetime.datetime] = None) -> str:
    now = now or datetime.datetime.now(datetime.timezone.utc)
    return f"{prefix}-{now.strftime('%Y%m%d%H%M%S')}"


def create_treetable(db: Session, name: Optional[str] = None) -> Treetable:
    table = Treetable(name=(name or "").strip() or auto_name())
    db.add(table)
    db.commit()
    db.refresh(table)
    logger.info("Created treetable %s (%s)", table.name, table.id)
    return table


def get_treetable(db: Session, treetable_id: str) -> Treetable:
    table = db.get(Treetable, treetable_id)
    if table is None:
        raise TreetableNotFoundError(f"Treetable {treetable_id} not found")
    return table


def _total_mass(row: Mapping[str, Any]) -> Optional[float]:
    if row.get("total_mass_kg") is not None:
        return float(row["total_mass_kg"])
    qty = row.get("qty")
    mass_per_ea = row.get("mass_per_ea_kg")
    if qty is None or mass_per_ea is None:
        return None
    return float(qty) * float(mass_per_ea)


def save_nodes(
    db: Session,
    treetable_id: str,
    rows: Sequence[Mapping[str, Any]],
    mode: ImportMode = "replace",
) -> List[TreetableNode]:
    """
    Persist BOM lines for a treetable.

    Args:
        rows: dicts with line_no, parent_line_no, part_no, revision, name,
              material, qty, qty_uom, mass_per_ea_kg and optionally total_mass_kg
        mode: "replace" deletes existing lines first, "append" keeps them

    Rows are inserted in natural line_no order. A parent_line_no resolves to a
    line inserted earlier in the same call or, in append mode, to a line already
    stored; an unresolved parent is logged and the row is saved as a root.

    Raises:
        TreetableNotFoundError: unknown treetable
        InvalidImportError: empty payload or unknown mode
    """
    if mode not in ("replace", "append"):
        raise InvalidImportError(f"Unknown import mode: {mode!r}")
    if not rows:
        raise InvalidImportError("rows is required")

    get_treetable(db, treetable_id)

    if mode == "replace":
        deleted = (
            db.query(TreetableNode)
            .filter(TreetableNode.treetable_id == treetable_id)
            .delete(synchronize_session=False)
        )
        logger.info("Replacing %d existing nodes of treetable %s", deleted, treetable_id)

    ordered = sorted(rows, key=lambda r: natural_line_key(r.get("line_no")))
    id_by_line: Dict[str, str] = {}
    if mode == "append":
        existing = (
            db.query(TreetableNode.line_no, TreetableNode.id)
            .filter(TreetableNode.treetable_id == treetable_id)
            .all()
        )
        id_by_line.update((line_no, node_id) for line_no, node_id in existing if line_no)
    nodes: List[TreetableNode] = []

    for row in ordered:
        parent_line = row.get("parent_line_no")
        parent_id = id_by_line.get(parent_line) if parent_line else None
        if parent_line and parent_id is None:
            logger.warning(
                "Treetable %s: parent line %s of line %s not found; saving as root",
                treetable_id,
                parent_line,
                row.get("line_no"),
            )
        node = TreetableNode(
            id=str(uuid.uuid4()),
            treetable_id=treetable_id,
            parent_id=parent_id,
            line_no=row.get("line_no"),
            part_no=row.get("part_no"),
            revision=row.get("revision"),
            name=row.get("name"),
            material=row.get("material"),
            qty=row.get("qty"),
            qty_uom=row.get("qty_uom"),
            mass_per_ea_kg=row.get("mass_per_ea_kg"),
            total_mass_kg=_total_mass(row),
        )
        db.add(node)
        nodes.append(node)
        if node.line_no:
            id_by_line[node.line_no] = node.id

    db.commit()
    logger.info("Saved %d nodes to treetable %s (mode=%s)", len(nodes), treetable_id, mode)
    return nodes


def list_nodes(db: Session, treetable_id: str) -> List[TreetableNode]:
    """Lines of a treetable in natural line_no order."""
    get_treetable(db, treetable_id)
    nodes = db.query(TreetableNode).filter(TreetableNode.treetable_id == treetable_id).all()
    return sorted(nodes, key=lambda n: natural_line_key(n.line_no))


def nodes_to_bom_rows(nodes: Sequence[TreetableNode]) -> List[BomRow]:
    return [BomRow(material_name=n.material, total_mass_kg=n.total_mass_kg) for n in nodes]
