"""
usage_events.py — Fire-and-Forget Audit / Usage Event Sink

Purpose:
- Append structured usage records (category, action, detail, timestamp).
- Never block or fail the caller's primary action: database errors are
  rolled back and logged as warnings, and the function returns None.

This module does NOT:
- Decide what to log. Callers (workflow service, API routers) decide that
  after their primary action has succeeded.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ebom.core.logging import get_logger
from ebom.models.usage_event import UsageEvent

logger = get_logger(__name__)


def log_usage_event(
    db: Session,
    category: str,
    action: str,
    detail: Optional[Dict[str, Any]] = None,
    treetable_id: Optional[str] = None,
    user_id: Optional[str] = None,
    user_email: Optional[str] = None,
    duration_ms: Optional[int] = None,
) -> Optional[UsageEvent]:
    """
    Persist one usage event.

    Returns:
        The stored UsageEvent, or None if the write failed.
    """
    event = UsageEvent(
        step=category or "unknown",
        action=action,
        detail=detail or {},
        treetable_id=treetable_id,
        user_id=user_id,
        user_email=user_email,
        duration_ms=duration_ms,
    )
    try:
        db.add(event)
        db.commit()
        db.refresh(event)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("Failed to record usage event %s / %s: %s", category, action, exc)
        return None

    logger.debug("Usage event recorded: %s / %s", category, action)
    return event


def list_usage_events(db: Session, treetable_id: Optional[str] = None, limit: int = 100) -> List[UsageEvent]:
    """Most recent events first, optionally for one treetable."""
    query = db.query(UsageEvent)
    if treetable_id is not None:
        query = query.filter(UsageEvent.treetable_id == treetable_id)
    return query.order_by(UsageEvent.id.desc()).limit(limit).all()
